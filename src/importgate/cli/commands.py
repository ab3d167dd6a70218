"""commands — handlers for the importgate subcommands.

Each handler takes the parsed ``argparse.Namespace`` and returns the process
exit code.  Reports meant for the user go to stdout; diagnostics about the
tool itself (missing or broken configuration, unparsable files) go to
stderr, as the engine does.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

from importgate.exceptions import ConfigurationError, ImportgateParseError
from importgate.engine import fix_source, scan_source
from importgate.lib import config
from importgate.lib.formatter import (
    format_diff,
    format_summary_stderr,
    format_violation_stderr,
    format_violations_json,
)
from importgate.lib.models import ProjectConfig
from importgate.lib.rules import find_project_config, load_project_config
from importgate.lib.scope import iter_source_files
from importgate.lib.theme import colorize, group_colors, paint_group


def _color(text: str, role: str) -> str:
    """Colorize text for stdout."""
    return colorize(text, role, stream=sys.stdout)


def _err(text: str) -> None:
    sys.stderr.write(text + "\n")


def _config_path(args: argparse.Namespace) -> Optional[Path]:
    if getattr(args, "config", None):
        return Path(args.config)
    paths = getattr(args, "paths", None) or ["."]
    return find_project_config(paths[0])


def _load(args: argparse.Namespace) -> Optional[ProjectConfig]:
    """Load the governing project config, reporting problems on stderr.

    Raises:
        ConfigurationError: If the config file is malformed.
    """
    path = _config_path(args)
    if path is None or not path.is_file():
        _err(
            config.message(
                "messages.config_not_found",
                filename=config.get_str("project.config_filename"),
                path=path or Path.cwd(),
            )
        )
        return None
    return load_project_config(path)


def _report_config_error(exc: ConfigurationError, path: Any) -> int:
    _err(config.message("messages.config_invalid", path=path))
    for error in exc.errors:
        _err(f"  {error}")
    return config.get_int("exit_codes.error")


def _read(path: Path) -> str:
    """Read a source file with its line endings untouched.

    Raises:
        ImportgateParseError: If the file is not valid UTF-8.
    """
    try:
        with open(path, "r", encoding="utf-8", newline="") as fh:
            return fh.read()
    except UnicodeDecodeError as exc:
        raise ImportgateParseError(path.as_posix(), exc) from exc


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


def cmd_check(args: argparse.Namespace) -> int:
    """Check files and report every convention violation."""
    exit_ok = config.get_int("exit_codes.ok")
    exit_blocked = config.get_int("exit_codes.blocked")
    exit_error = config.get_int("exit_codes.error")
    fmt_json = config.get_str("formats.json")
    quiet = config.get_str("formats.quiet")

    try:
        settings = _load(args)
    except ConfigurationError as exc:
        return _report_config_error(exc, _config_path(args))
    if settings is None:
        return exit_ok

    files = list(iter_source_files(args.paths, settings.scope))
    if not files:
        _err(config.get_str("messages.no_files"))
        return exit_ok

    documents: list[dict[str, Any]] = []
    parts: list[str] = []
    blocking = warnings = 0
    failed = False
    for path in files:
        filepath = path.as_posix()
        try:
            source = _read(path)
            result = scan_source(source, filepath, settings, output_format=quiet, skip_scope=True)
        except ImportgateParseError as exc:
            _err(f"  {exc}")
            failed = True
            continue
        blocking += result.blocking_count
        warnings += result.warning_count
        if args.format == fmt_json:
            documents.append(
                format_violations_json(result.violations, filepath, len(settings.active_rules))
            )
        elif result.violations:
            lines = source.split("\n")
            parts.extend(
                format_violation_stderr(v, filepath, lines[v.line - 1] if 0 < v.line <= len(lines) else "")
                for v in result.violations
            )

    if args.format == fmt_json:
        sys.stdout.write(json.dumps(documents, indent=config.get_int("defaults.json_indent")) + "\n")
    else:
        parts.append(format_summary_stderr(len(files), blocking, warnings))
        sys.stderr.write(config.get_str("formatting.violation_separator").join(parts) + "\n")

    if failed:
        return exit_error
    return exit_blocked if blocking else exit_ok


# ---------------------------------------------------------------------------
# fix
# ---------------------------------------------------------------------------


def cmd_fix(args: argparse.Namespace) -> int:
    """Rewrite import blocks in place, or print the diff with --dry-run."""
    exit_ok = config.get_int("exit_codes.ok")
    exit_blocked = config.get_int("exit_codes.blocked")
    exit_error = config.get_int("exit_codes.error")

    try:
        settings = _load(args)
    except ConfigurationError as exc:
        return _report_config_error(exc, _config_path(args))
    if settings is None:
        return exit_ok

    files = list(iter_source_files(args.paths, settings.scope))
    if not files:
        _err(config.get_str("messages.no_files"))
        return exit_ok

    changed = False
    failed = False
    for path in files:
        filepath = path.as_posix()
        try:
            source = _read(path)
            fixed = fix_source(source, filepath, settings, skip_scope=True)
        except ImportgateParseError as exc:
            _err(f"  {exc}")
            failed = True
            continue
        if fixed == source:
            continue
        changed = True
        if args.dry_run:
            sys.stdout.write(format_diff(source, fixed, filepath, stream=sys.stdout) + "\n")
        else:
            with open(path, "w", encoding="utf-8", newline="") as fh:
                fh.write(fixed)
            print(_color(config.message("messages.file_fixed", filepath=filepath), "autofix"))

    if failed:
        return exit_error
    if args.dry_run and changed:
        return exit_blocked
    return exit_ok


# ---------------------------------------------------------------------------
# lint-config / show-config / init
# ---------------------------------------------------------------------------


def cmd_lint_config(args: argparse.Namespace) -> int:
    """Validate the project configuration and compile every rule."""
    path = _config_path(args)
    try:
        settings = _load(args)
    except ConfigurationError as exc:
        return _report_config_error(exc, path)
    if settings is None:
        return config.get_int("exit_codes.error")
    print(
        _color(
            config.message("messages.config_ok", path=path, count=len(settings.active_rules)),
            "status_passed",
        )
    )
    return config.get_int("exit_codes.ok")


def _describe_slot(slot: Optional[str], colors: dict[str, str]) -> str:
    if slot is None:
        return _color(config.get_str("labels.separator_slot"), "separator_slot")
    return paint_group(slot, colors, stream=sys.stdout)


def cmd_show_config(args: argparse.Namespace) -> int:
    """Print the resolved configuration: rules, conventions and scope."""
    path = _config_path(args)
    try:
        settings = _load(args)
    except ConfigurationError as exc:
        return _report_config_error(exc, path)
    if settings is None:
        return config.get_int("exit_codes.error")

    bar = config.get_str("formatting.summary_bar_char") * config.get_int("formatting.summary_bar_width")
    print()
    print(f"  {_color(str(path), 'location')}")
    print(f"  {bar}")
    for rule in settings.rules:
        state = rule.severity if rule.active else config.get_str("severities.off")
        print(f"  {_color(rule.rule_id, 'rule_id')} ({state})")
        convention = rule.compiled
        if convention is None:
            continue
        colors = group_colors(convention.slots)
        print(f"    {config.get_str('labels.convention')}")
        for slot in convention.slots:
            print(f"      {_describe_slot(slot, colors)}")
        print(f"    {config.get_str('labels.recognizer')}")
        for label, matchers in convention.recognizer.items():
            patterns = ", ".join(m.pattern for m in matchers)
            print(f"      {paint_group(label, colors, stream=sys.stdout)}: {patterns}")
        if convention.reference:
            print(f"    {config.get_str('labels.reference')} {convention.reference}")
    scope = settings.scope
    print(f"  {bar}")
    print(f"  extensions:   {', '.join(scope.extensions)}")
    print(f"  gated_paths:  {', '.join(scope.gated_paths) or '-'}")
    print(f"  exempt_paths: {', '.join(scope.exempt_paths) or '-'}")
    print(f"  exempt_files: {', '.join(scope.exempt_files) or '-'}")
    print()
    return config.get_int("exit_codes.ok")


def cmd_init(args: argparse.Namespace) -> int:
    """Write a starter .importgate.yaml into the target directory."""
    target = Path(args.directory) / config.get_str("project.config_filename")
    if target.exists() and not args.force:
        _err(config.message("messages.config_exists", path=target))
        return config.get_int("exit_codes.error")
    target.write_text(config.get_str("templates.project_config"), encoding="utf-8")
    print(_color(config.message("messages.config_written", path=target), "autofix"))
    return config.get_int("exit_codes.ok")
