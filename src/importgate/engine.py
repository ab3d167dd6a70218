"""importgate engine — thin orchestrator for import convention checks.

Composes the library modules to check one TypeScript / JavaScript source
string against a compiled project configuration and return structured
results.  This is the main entry point for programmatic usage.

Design notes:
    The engine never parses source directly.  It delegates to
    SourceAnalyzer (lib/analyzer) for the tree-sitter parse and to
    lib/checks for rule evaluation, and stays a pure orchestration layer.
"""

from __future__ import annotations

import json
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from importgate import __version__ as VERSION
from importgate.exceptions import ConfigurationError, ImportgateParseError
from importgate.lib import config
from importgate.lib.analyzer import SourceAnalyzer
from importgate.lib.autofix import apply_fixes
from importgate.lib.checks import run_check
from importgate.lib.formatter import (
    format_summary_stderr,
    format_violation_stderr,
    format_violations_json,
)
from importgate.lib.logger import log_scan
from importgate.lib.models import ProjectConfig, Violation
from importgate.lib.rules import find_project_config, load_project_config
from importgate.lib.scope import is_file_in_scope


@dataclass
class ScanResult:
    """Result of checking one file."""

    status: str
    filepath: str = ""
    violations: list[Violation] = field(default_factory=list)
    blocking_count: int = 0
    warning_count: int = 0
    scan_ms: int = 0
    skipped: bool = False

    @property
    def fixable(self) -> bool:
        return any(v.fix is not None for v in self.violations)


def collect_violations(
    source: str,
    filepath: str,
    settings: ProjectConfig,
) -> tuple[SourceAnalyzer, list[Violation]]:
    """Parse ``source`` once and run every active rule on it.

    Raises:
        ImportgateParseError: If the source does not parse.
    """
    analyzer = SourceAnalyzer(source, filepath)
    violations: list[Violation] = []
    for rule in settings.active_rules:
        violations.extend(run_check(rule, analyzer))
    return analyzer, violations


def scan_source(
    source: str,
    filepath: str,
    settings: Optional[ProjectConfig],
    *,
    output_format: str = "",
    skip_scope: bool = False,
) -> ScanResult:
    """Check a source string against the project's rules.

    Args:
        source: TypeScript or JavaScript source code.
        filepath: Path of the file (grammar choice, scope and messages).
        settings: Compiled project configuration, or None for no config.
        output_format: 'stderr' for human output, 'json' for structured,
            'quiet' for none.  Defaults to the value from config.
        skip_scope: If True, check the file even when out of scope.

    Returns:
        ScanResult with status, violations and timing.

    Raises:
        ImportgateParseError: If the source does not parse.
    """
    if not output_format:
        output_format = config.get_str("formats.default")

    status_passed = config.get_str("statuses.passed")
    status_rejected = config.get_str("statuses.rejected")
    sev_block = config.get_str("severities.block")
    sev_warn = config.get_str("severities.warn")

    if settings is None:
        return ScanResult(status=status_passed, filepath=filepath, skipped=True)
    if not skip_scope and not is_file_in_scope(filepath, settings.scope):
        return ScanResult(status=status_passed, filepath=filepath, skipped=True)

    start = time.time()
    analyzer, violations = collect_violations(source, filepath, settings)
    scan_ms = int((time.time() - start) * 1000)

    blocking_count = sum(1 for v in violations if v.severity == sev_block)
    warning_count = sum(1 for v in violations if v.severity == sev_warn)
    status = status_rejected if blocking_count > 0 else status_passed

    if settings.logging.enabled and settings.logging.directory:
        log_scan(
            settings.logging.directory,
            filepath,
            status,
            [
                {"rule": v.rule_id, "severity": v.severity, "kind": v.kind.name, "line": v.line}
                for v in violations
            ],
            len(settings.active_rules),
            source,
            scan_ms,
        )

    result = ScanResult(
        status=status,
        filepath=filepath,
        violations=violations,
        blocking_count=blocking_count,
        warning_count=warning_count,
        scan_ms=scan_ms,
    )

    if output_format == config.get_str("formats.json"):
        json_data = format_violations_json(violations, filepath, len(settings.active_rules))
        sys.stderr.write(json.dumps(json_data, indent=config.get_int("defaults.json_indent")) + "\n")
    elif output_format == config.get_str("formats.stderr") and violations:
        parts = [
            format_violation_stderr(v, filepath, analyzer.source_line(v.line))
            for v in violations
        ]
        parts.append(format_summary_stderr(1, blocking_count, warning_count))
        sys.stderr.write(config.get_str("formatting.violation_separator").join(parts) + "\n")

    return result


def fix_source(
    source: str,
    filepath: str,
    settings: Optional[ProjectConfig],
    *,
    skip_scope: bool = False,
) -> str:
    """Return ``source`` with every available autofix applied.

    Out-of-scope files and sources without violations come back unchanged.
    The rewrite is canonical, so fixing the result again changes nothing.

    Raises:
        ImportgateParseError: If the source does not parse.
    """
    if settings is None:
        return source
    if not skip_scope and not is_file_in_scope(filepath, settings.scope):
        return source
    start = time.time()
    _, violations = collect_violations(source, filepath, settings)
    fixed = apply_fixes(source, violations)
    scan_ms = int((time.time() - start) * 1000)

    if fixed != source and settings.logging.enabled and settings.logging.directory:
        log_scan(
            settings.logging.directory,
            filepath,
            config.get_str("statuses.rejected"),
            [{"rule": v.rule_id, "kind": v.kind.name, "line": v.line} for v in violations],
            len(settings.active_rules),
            source,
            scan_ms,
            fixed=True,
        )
    return fixed


def _load_settings(config_path: Optional[str], filepath: str) -> Optional[ProjectConfig]:
    path = Path(config_path) if config_path else find_project_config(filepath)
    if path is None or not path.is_file():
        sys.stderr.write(
            config.message(
                "messages.config_not_found",
                filename=config.get_str("project.config_filename"),
                path=filepath,
            )
            + "\n"
        )
        return None
    return load_project_config(path)


def main() -> None:
    """CLI entry point for python -m importgate.engine."""
    import argparse

    fmt_stderr = config.get_str("formats.stderr")
    fmt_json = config.get_str("formats.json")
    stdin_filename = config.get_str("defaults.stdin_filename")
    exit_blocked = config.get_int("exit_codes.blocked")
    exit_ok = config.get_int("exit_codes.ok")
    exit_error = config.get_int("exit_codes.error")

    parser = argparse.ArgumentParser(
        description="importgate engine — import convention checks for one file",
    )
    parser.add_argument("--file", help="Path to the TypeScript / JavaScript file to check")
    parser.add_argument("--stdin", action="store_true", help="Read code from stdin")
    parser.add_argument("--filename", help="Filename to use when reading from stdin")
    parser.add_argument("--config", help="Path to .importgate.yaml (default: discovered)")
    parser.add_argument(
        "--format",
        choices=[fmt_stderr, fmt_json],
        default=fmt_stderr,
        help="Output format",
    )
    parser.add_argument(
        "--fix",
        action="store_true",
        help="Rewrite the import block (stdout for --stdin, in place for --file)",
    )
    parser.add_argument("--no-scope", action="store_true", help="Skip scope checking")
    parser.add_argument("--version", action="version", version=f"importgate {VERSION}")

    args = parser.parse_args()

    if args.stdin:
        source = sys.stdin.read()
        filepath = args.filename or stdin_filename
    elif args.file:
        filepath = args.file
        with open(filepath, "r", encoding="utf-8", newline="") as fh:
            source = fh.read()
    else:
        parser.error("Either --file or --stdin is required")
        return

    try:
        settings = _load_settings(args.config, filepath)
        if args.fix:
            fixed = fix_source(source, filepath, settings, skip_scope=args.no_scope)
            if args.stdin:
                sys.stdout.write(fixed)
            elif fixed != source:
                with open(filepath, "w", encoding="utf-8", newline="") as fh:
                    fh.write(fixed)
                sys.stderr.write(config.message("messages.file_fixed", filepath=filepath) + "\n")
            source = fixed
        result = scan_source(
            source,
            filepath,
            settings,
            output_format=args.format,
            skip_scope=args.no_scope,
        )
    except ConfigurationError as exc:
        for error in exc.errors:
            sys.stderr.write(f"  {error}\n")
        sys.exit(exit_error)
    except ImportgateParseError as exc:
        sys.stderr.write(f"  {exc}\n")
        sys.exit(exit_error)

    sys.exit(exit_blocked if result.blocking_count > 0 else exit_ok)


if __name__ == "__main__":
    main()
