"""formatter — violation output for stderr, JSON and fix diffs.

The stderr formatter shows each violation compiler-style: the location, the
offending source line with a caret run under the statement, the message
and, for the block summary violation, a hint that an autofix exists.  The
JSON formatter produces one document per file for editor and CI
integrations.  ``format_diff`` renders what ``importgate fix --dry-run``
would change.
"""

from __future__ import annotations

import difflib
from typing import Any, Sequence

from importgate.lib import config
from importgate.lib.models import Violation
from importgate.lib.theme import code as _c
from importgate.lib.theme import severity_code as _sev


# ---------------------------------------------------------------------------
# Stderr formatting
# ---------------------------------------------------------------------------


def format_violation_stderr(violation: Violation, filepath: str, source_line: str = "") -> str:
    """Format a single violation for stderr output.

    Args:
        violation: The violation to render.
        filepath: Path shown in the location line.
        source_line: Text of the line the violation starts on.

    Returns:
        Formatted multi-line string.
    """
    location = config.get_str("formatting.location_template").format(
        filepath=filepath, line=violation.line, column=violation.column
    )
    caret = config.get_str("formatting.caret_char")
    parts: list[str] = [f"  {_c('location')}{location}{_c('reset')}"]
    if source_line:
        parts.append(f"    {source_line}")
        col = max(violation.column - 1, 0)
        width = max(min(violation.range.width, len(source_line) - col), 1)
        parts.append(f"    {_c('caret')}{' ' * col}{caret * width}{_c('reset')}")
    label = f"[{violation.rule_id}] " if violation.rule_id else ""
    parts.append(f"  {_sev(violation.severity)}{label}{violation.message}{_c('reset')}")
    if violation.fix is not None:
        fix_prefix = config.get_str("messages.fix_prefix")
        parts.append(f"  {_c('autofix')}{fix_prefix}{config.get_str('messages.fix_available')}{_c('reset')}")
    return "\n".join(parts)


def format_summary_stderr(
    file_count: int,
    blocking_count: int,
    warning_count: int,
) -> str:
    """Format the summary footer bar for stderr output."""
    bar_width = config.get_int("formatting.summary_bar_width")
    bar_char = config.get_str("formatting.summary_bar_char")
    lbl_files = config.get_str("labels.files")
    lbl_violations = config.get_str("labels.violations")
    lbl_blocking = config.get_str("labels.blocking")
    lbl_warnings = config.get_str("labels.warnings")
    sev_block = config.get_str("severities.block")
    sev_warn = config.get_str("severities.warn")

    bar = f"{_c('summary_bar')}{bar_char * bar_width}{_c('reset')}"
    parts: list[str] = [f"\n{bar}"]
    parts.append(f"  {_c('bold')}{lbl_files}{_c('reset')} {_c('count')}{file_count}{_c('reset')}")
    parts.append(
        f"  {_c('bold')}{lbl_violations}{_c('reset')} "
        f"{_sev(sev_block)}{blocking_count} {lbl_blocking}{_c('reset')}, "
        f"{_sev(sev_warn)}{warning_count} {lbl_warnings}{_c('reset')}"
    )
    if blocking_count > 0:
        parts.append(f"  {_c('status_rejected')}{_c('bold')}{config.get_str('labels.check_failed')}{_c('reset')}")
    else:
        parts.append(f"  {_c('status_passed')}{config.get_str('labels.check_passed')}{_c('reset')}")
    parts.append(bar)
    return "\n".join(parts)


# ---------------------------------------------------------------------------
# JSON formatting
# ---------------------------------------------------------------------------


def format_violations_json(
    violations: Sequence[Violation],
    filepath: str,
    total_rules: int,
) -> dict[str, Any]:
    """Format a file's violations as a JSON-compatible dict."""
    sev_block = config.get_str("severities.block")
    sev_warn = config.get_str("severities.warn")
    blocking = sum(1 for v in violations if v.severity == sev_block)
    warnings = sum(1 for v in violations if v.severity == sev_warn)

    return {
        "status": config.get_str("statuses.rejected" if blocking else "statuses.passed"),
        "file": filepath,
        "violations": [v.to_dict() for v in violations],
        "fixable": any(v.fix is not None for v in violations),
        "summary": {
            "blocking": blocking,
            "warnings": warnings,
            "total_rules": total_rules,
        },
    }


# ---------------------------------------------------------------------------
# Diff formatting
# ---------------------------------------------------------------------------


def format_diff(before: str, after: str, filepath: str, *, stream: Any = None) -> str:
    """Render a unified diff between the original and the fixed source.

    Colours are applied when ``stream`` (default stderr) is a TTY.

    Returns:
        The diff text, or '' when nothing changed.
    """
    if before == after:
        return ""
    diff = difflib.unified_diff(
        before.splitlines(),
        after.splitlines(),
        fromfile=config.get_str("formatting.diff_from_prefix") + filepath,
        tofile=config.get_str("formatting.diff_to_prefix") + filepath,
        lineterm="",
    )
    lines: list[str] = []
    for line in diff:
        if line.startswith(("---", "+++")):
            role = "diff_header"
        elif line.startswith("+"):
            role = "diff_add"
        elif line.startswith("-"):
            role = "diff_remove"
        else:
            lines.append(line)
            continue
        lines.append(f"{_c(role, stream=stream)}{line}{_c('reset', stream=stream)}")
    return "\n".join(lines)
