"""Custom exceptions for importgate.

Exceptions:
    ConfigurationError — Raised while loading a convention or a project
        config whose shape is malformed.  Always raised before any file is
        analyzed; never recovered per file.  Subclasses ValueError.
    ImportgateParseError — Raised when tree-sitter reports a syntax error
        in the file under check.  Wraps a description of the first error
        node.

Convention violations are not exceptions: they are collected as
``Violation`` records and reported together.
"""

from __future__ import annotations

from typing import Optional, Sequence

from importgate.lib import config


class ConfigurationError(ValueError):
    """Raised when a convention, recognizer or project config is malformed.

    Carries every problem found so ``importgate lint-config`` can show
    them all at once instead of one per run.
    """

    def __init__(self, message: str, errors: Optional[Sequence[str]] = None) -> None:
        """Initialize with a summary and the individual problems.

        Args:
            message: One-line summary of the failure.
            errors: Individual validation problems, if more than one.
        """
        self.errors = list(errors) if errors else [message]
        super().__init__(message)


class ImportgateParseError(Exception):
    """Raised when tree-sitter cannot parse a source file.

    A file that cannot be parsed is treated as an error rather than a pass,
    so a broken import block never slips through unchecked.
    """

    def __init__(self, filepath: str, original_error: object) -> None:
        """Initialize with parse error details.

        Args:
            filepath: Path to the file that failed parsing.
            original_error: Description of the syntax error.
        """
        self.filepath = filepath
        self.original_error = original_error
        super().__init__(
            config.message("messages.parse_error", filepath=filepath, error=original_error)
        )
