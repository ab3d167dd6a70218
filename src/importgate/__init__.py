"""importgate — import group ordering checks and autofix for TypeScript / JavaScript.

Stable public API:
    scan_source: Check a source string against a project configuration.
    fix_source: Return the source with its import block rewritten.
    ScanResult: Dataclass returned by scan_source.
    Violation: Dataclass for individual violations.
    ConfigurationError: Raised for malformed conventions or config files.
    ImportgateParseError: Raised when a source file does not parse.
"""

__version__ = "0.1.0"

from importgate.engine import ScanResult, fix_source, scan_source
from importgate.exceptions import ConfigurationError, ImportgateParseError
from importgate.lib.models import Violation

__all__ = [
    "__version__",
    "scan_source",
    "fix_source",
    "ScanResult",
    "Violation",
    "ConfigurationError",
    "ImportgateParseError",
]
