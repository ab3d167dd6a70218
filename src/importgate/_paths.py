"""Centralized path resolution for the importgate package.

This is the only module that computes package-internal directory paths or
reads path-related environment variables; everything else imports from
here.

Environment variables:
    IMPORTGATE_CONFIG — Use this ``.importgate.yaml`` instead of the one
        discovered by walking up from the checked path.
"""

import os
from pathlib import Path
from typing import Optional

_PACKAGE_DIR = Path(__file__).resolve().parent


def _cfg(key: str) -> str:
    """Lazy config accessor to avoid circular imports at module level."""
    from importgate.lib.config import get_str

    return get_str(key)


def cli_dir() -> Path:
    """Return the cli/ directory path."""
    return _PACKAGE_DIR / _cfg("directories.cli")


def theme_path() -> Path:
    """Return the path to cli/theme.yaml."""
    return cli_dir() / _cfg("filenames.theme")


def config_override() -> Optional[Path]:
    """Return the project config named by ``$IMPORTGATE_CONFIG``, if set."""
    env = os.environ.get(_cfg("env_vars.config_path"))
    if env:
        return Path(env)
    return None


def find_upwards(start: Path, filename: str) -> Optional[Path]:
    """Search ``start`` and its parents for ``filename``.

    Args:
        start: A file or directory to start from.
        filename: Name of the file to look for.

    Returns:
        The first match, closest to ``start``, or None.
    """
    current = start.resolve()
    if current.is_file() or not current.exists():
        current = current.parent
    for directory in (current, *current.parents):
        candidate = directory / filename
        if candidate.is_file():
            return candidate
    return None
