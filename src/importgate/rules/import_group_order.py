"""import-group-order — imports grouped, ordered and sorted by convention.

Configured in ``.importgate.yaml``:

  rules:
    import-group-order:
      severity: block
      options:
        convention: [external, null, internal]
        recognizer:
          external: "^[^.]"
          internal: ["^\\./", {pattern: "^@app/", flags: "i"}]
        reference: "See CONTRIBUTING.md#imports"

Rule contract (shared by every importgate rule):
    RULE_ID: str
    def compile_options(options: dict) -> compiled options (immutable)
    def check(analyzer: SourceAnalyzer, compiled) -> list[Violation]
"""

from __future__ import annotations

from typing import Any

from importgate.lib.analyzer import SourceAnalyzer
from importgate.lib.models import Violation
from importgate.lib.recognizer import Convention, compile_convention
from importgate.lib.validator import validate

RULE_ID = "import-group-order"


def compile_options(options: Any) -> Convention:
    """Compile the rule options once, at configuration load.

    Raises:
        ConfigurationError: If the convention or recognizer is malformed.
    """
    return compile_convention(options)


def check(analyzer: SourceAnalyzer, convention: Convention) -> list[Violation]:
    """Validate the leading import block of one file.

    Args:
        analyzer: The parsed file.
        convention: Compiled options from ``compile_options``.

    Returns:
        Violations in source order; the last block violation is ``FATAL``
        and carries the autofix when anything in the block failed.
    """
    return validate(
        analyzer.statements,
        analyzer.source,
        convention,
        banner_end=analyzer.banner_end,
        locate=analyzer.line_col,
    )
