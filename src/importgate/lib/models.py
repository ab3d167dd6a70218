"""Data models for importgate: import entries, violations and project config.

Typed, frozen dataclasses shared by the analyzer, the rule and the engine.
Per-file records (``ImportEntry``, ``Violation``) are created once and never
mutated; project-level records are built from ``.importgate.yaml`` and
validated at construction time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from importgate.lib import config


# ---------------------------------------------------------------------------
# Text positions and edits
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TextRange:
    """Half-open ``[start, end)`` span of character offsets into the source."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid range [{self.start}, {self.end})")

    @property
    def width(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class Replacement:
    """A single text edit: replace ``source[start:end]`` with ``text``."""

    start: int
    end: int
    text: str

    def apply(self, source: str) -> str:
        return source[: self.start] + self.text + source[self.end :]


# ---------------------------------------------------------------------------
# Violations
# ---------------------------------------------------------------------------


class ViolationKind(Enum):
    """Every way an import block can break the convention.

    The value is the key of the message template under ``violations`` in
    ``defaults.yaml``; counted kinds format ``{count}`` into it.
    """

    LINE_ABOVE = "line_above"
    REMOVE_EXTRA_LINE_ABOVE = "remove_extra_line_above"
    UNEXPECTED_SEPARATOR = "unexpected_separator"
    ABSOLUTE_FIRST = "absolute_first"
    WRONG_ORDER = "wrong_order"
    ABZ = "abz"
    NAMED_IMPORTS = "named_imports"
    TOGETHER = "together"
    FATAL = "fatal"

    def describe(self, count: int = 0, reference: str = "") -> str:
        """Render the user-facing message, with the optional reference suffix."""
        text = config.message(f"violations.{self.value}", count=count)
        return f"{text} {reference}" if reference else text


@dataclass(frozen=True)
class Violation:
    """A single convention violation anchored at a source range.

    Attributes:
        kind: What went wrong.
        range: Offsets of the offending statement.
        message: Rendered message including any reference suffix.
        line: 1-based line of ``range.start``.
        column: 1-based column of ``range.start``.
        fix: Replacement that rewrites the whole import block.  Only the
            aggregate ``FATAL`` violation carries one.
        rule_id: Rule that produced the violation (set by the engine).
        severity: ``block`` or ``warn`` (set by the engine).
    """

    kind: ViolationKind
    range: TextRange
    message: str
    line: int = 0
    column: int = 0
    fix: Optional[Replacement] = None
    rule_id: str = ""
    severity: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "rule": self.rule_id,
            "severity": self.severity,
            "kind": self.kind.name,
            "line": self.line,
            "column": self.column,
            "start": self.range.start,
            "end": self.range.end,
            "message": self.message,
        }
        if self.fix is not None:
            data["fix"] = {
                "start": self.fix.start,
                "end": self.fix.end,
                "text": self.fix.text,
            }
        return data


# ---------------------------------------------------------------------------
# Import entries
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImportEntry:
    """One logical import of the leading import block.

    Attributes:
        range: ``[leading start, trailing end)``.  For the first import the
            range starts after the documentation banner.
        statement_range: The statement alone, without leading trivia or
            trailing comment.  Violations are anchored here.
        leading: Whitespace and comments between the previous statement
            and this one.  Blank lines in here are group separators.
        body: Statement text.  For a merged namespace form this spans both
            statements.
        trailing: Same-line comment after the statement, with the
            whitespace before it.
        module_path: The imported module string, without quotes.
        group: Group label assigned by the classifier.
        bindings: Brace-enclosed named bindings, or the destructured
            names of a merged namespace form, in source order.
        namespace: Namespace identifier of a merged namespace form.
    """

    range: TextRange
    statement_range: TextRange
    leading: str
    body: str
    trailing: str
    module_path: str
    group: str
    bindings: tuple[str, ...] = ()
    namespace: Optional[str] = None

    @property
    def raw_text(self) -> str:
        return self.leading + self.body + self.trailing

    @property
    def identifiers(self) -> tuple[str, ...]:
        if self.namespace is None:
            return self.bindings
        return (self.namespace,) + self.bindings


# ---------------------------------------------------------------------------
# Project configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RuleEntry:
    """A single configured rule, compiled once at load.

    Attributes:
        rule_id: Rule identifier (e.g. ``import-group-order``).
        severity: ``block``, ``warn`` or ``off``.
        enabled: Whether the rule runs.
        options: Raw options mapping from the project config.
        compiled: Immutable compiled options produced by the rule module;
            shared read-only by every file analysis.
    """

    rule_id: str
    severity: str
    enabled: bool
    options: dict[str, Any] = field(default_factory=dict, compare=False)
    compiled: Any = field(default=None, compare=False)

    @property
    def active(self) -> bool:
        return self.enabled and self.severity != config.get_str("severities.off")


@dataclass(frozen=True)
class ScopeConfig:
    """Which files a project checks.

    Attributes:
        extensions: File suffixes considered source files.
        gated_paths: Path prefixes that are checked (empty = all).
        exempt_paths: Path prefixes excluded from checking.
        exempt_files: Individual filenames excluded from checking.
    """

    extensions: tuple[str, ...] = ()
    gated_paths: tuple[str, ...] = ()
    exempt_paths: tuple[str, ...] = ()
    exempt_files: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScopeConfig:
        """Build from a raw ``scope`` mapping, filling in package defaults."""
        return cls(
            extensions=tuple(data.get("extensions", config.get_list("scope.extensions"))),
            gated_paths=tuple(data.get("gated_paths", [])),
            exempt_paths=tuple(data.get("exempt_paths", config.get_list("scope.exempt_paths"))),
            exempt_files=tuple(data.get("exempt_files", config.get_list("scope.exempt_files"))),
        )


@dataclass(frozen=True)
class LoggingConfig:
    """Optional JSONL scan telemetry."""

    enabled: bool = False
    directory: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LoggingConfig:
        return cls(
            enabled=bool(data.get("enabled", False)),
            directory=str(data.get("directory", "") or ""),
        )


@dataclass(frozen=True)
class ProjectConfig:
    """Top-level project configuration from ``.importgate.yaml``.

    Attributes:
        rules: Configured rules in declaration order.
        scope: File scope.
        logging: Telemetry settings.
        path: File the config was read from (empty when built in memory).
    """

    rules: tuple[RuleEntry, ...] = ()
    scope: ScopeConfig = field(default_factory=ScopeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    path: str = ""

    @property
    def active_rules(self) -> tuple[RuleEntry, ...]:
        return tuple(r for r in self.rules if r.active)


def validate_project_config(data: Any) -> list[str]:
    """Validate the structure of a ``.importgate.yaml`` mapping.

    Only the shape is checked here; rule options are validated by the
    rule's own compiler.

    Args:
        data: The parsed YAML content.

    Returns:
        List of validation error messages.  Empty if valid.
    """
    errors: list[str] = []

    if not isinstance(data, dict):
        errors.append(f"Project config must be a mapping, got {type(data).__name__}")
        return errors

    rules = data.get("rules")
    if rules is None:
        errors.append("Missing required key: 'rules'")
    elif not isinstance(rules, dict):
        errors.append(f"'rules' must be a mapping, got {type(rules).__name__}")
    else:
        valid_severities = config.get_list("severities.valid_choices")
        for rule_id, entry in rules.items():
            if entry is None:
                continue
            if not isinstance(entry, dict):
                errors.append(
                    f"rules.{rule_id} must be a mapping, got {type(entry).__name__}"
                )
                continue
            severity = entry.get("severity")
            if severity is not None and severity not in valid_severities:
                errors.append(
                    f"rules.{rule_id}.severity must be one of "
                    f"{', '.join(valid_severities)}, got {severity!r}"
                )
            enabled = entry.get("enabled")
            if enabled is not None and not isinstance(enabled, bool):
                errors.append(
                    f"rules.{rule_id}.enabled must be a boolean, "
                    f"got {type(enabled).__name__}"
                )
            options = entry.get("options")
            if options is not None and not isinstance(options, dict):
                errors.append(
                    f"rules.{rule_id}.options must be a mapping, "
                    f"got {type(options).__name__}"
                )

    scope = data.get("scope")
    if scope is not None:
        if not isinstance(scope, dict):
            errors.append(f"'scope' must be a mapping, got {type(scope).__name__}")
        else:
            for list_key in ("extensions", "gated_paths", "exempt_paths", "exempt_files"):
                val = scope.get(list_key)
                if val is not None and not isinstance(val, list):
                    errors.append(
                        f"scope.{list_key} must be a list, got {type(val).__name__}"
                    )

    logging_cfg = data.get("logging")
    if logging_cfg is not None and not isinstance(logging_cfg, dict):
        errors.append(
            f"'logging' must be a mapping, got {type(logging_cfg).__name__}"
        )

    return errors
