"""importgate CLI entry point — argument parsing and command dispatch.

Builds the argparse parser tree and dispatches each subcommand to its
handler in :mod:`importgate.cli.commands`.  Program name, description and
defaults come from the central config module.

Usage::

    importgate check [PATH ...] [--format stderr|json] [--config FILE]
    importgate fix [PATH ...] [--dry-run] [--config FILE]
    importgate lint-config [--config FILE]
    importgate show-config [--config FILE]
    importgate init [DIRECTORY] [--force]
"""

from __future__ import annotations

import argparse
import sys

from importgate import __version__
from importgate.cli.commands import (
    cmd_check,
    cmd_fix,
    cmd_init,
    cmd_lint_config,
    cmd_show_config,
)
from importgate.lib import config


def _add_config_arg(sub: argparse.ArgumentParser) -> None:
    sub.add_argument(
        "--config",
        help=f"Path to {config.get_str('project.config_filename')} (default: discovered)",
    )


def main() -> None:
    """Parse arguments and dispatch to the matching command handler.

    Prints help when no subcommand is given.
    """
    prog = config.get_str("cli.prog_name")
    desc = config.get_str("cli.description")
    fmt_stderr = config.get_str("formats.stderr")
    fmt_json = config.get_str("formats.json")

    parser = argparse.ArgumentParser(prog=prog, description=desc)
    parser.add_argument("--version", action="version", version=f"{prog} {__version__}")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    sub_check = subparsers.add_parser("check", help="Check import blocks")
    sub_check.add_argument("paths", nargs="*", default=["."], help="Files or directories")
    sub_check.add_argument(
        "--format",
        choices=[fmt_stderr, fmt_json],
        default=fmt_stderr,
        help="Output format",
    )
    _add_config_arg(sub_check)

    sub_fix = subparsers.add_parser("fix", help="Rewrite import blocks to follow the convention")
    sub_fix.add_argument("paths", nargs="*", default=["."], help="Files or directories")
    sub_fix.add_argument(
        "--dry-run",
        action="store_true",
        help="Print a unified diff instead of writing files",
    )
    _add_config_arg(sub_fix)

    sub_lint = subparsers.add_parser("lint-config", help="Validate the project configuration")
    _add_config_arg(sub_lint)

    sub_show = subparsers.add_parser("show-config", help="Show the resolved configuration")
    _add_config_arg(sub_show)

    sub_init = subparsers.add_parser("init", help="Write a starter configuration file")
    sub_init.add_argument("directory", nargs="?", default=".", help="Target directory")
    sub_init.add_argument("--force", action="store_true", help="Overwrite an existing file")

    args = parser.parse_args()

    dispatch = {
        "check": cmd_check,
        "fix": cmd_fix,
        "lint-config": cmd_lint_config,
        "show-config": cmd_show_config,
        "init": cmd_init,
    }

    handler = dispatch.get(args.command)
    if handler:
        sys.exit(handler(args))
    parser.print_help()


if __name__ == "__main__":
    main()
