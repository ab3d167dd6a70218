"""scope — which files a project checks.

A file is in scope when its suffix is one of the configured ``extensions``,
it is not named in ``exempt_files``, no ``exempt_paths`` prefix matches it
and, when ``gated_paths`` is non-empty, one of those prefixes does.
Prefixes match at the start of the path or after any ``/``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from importgate.lib.models import ScopeConfig


def _matches_prefix(filepath: str, prefixes: Sequence[str]) -> bool:
    return any(filepath.startswith(p) or f"/{p}" in filepath for p in prefixes)


def is_file_in_scope(filepath: str, scope: ScopeConfig) -> bool:
    """Check if a file is within the checked scope.

    Args:
        filepath: Path to the file being checked.
        scope: The project's scope settings.

    Returns:
        True if the file should be checked, False if exempt.
    """
    filepath = filepath.replace(os.sep, "/")
    filename = os.path.basename(filepath)

    if scope.extensions and os.path.splitext(filename)[1].lower() not in scope.extensions:
        return False

    if filename in scope.exempt_files:
        return False

    if _matches_prefix(filepath, scope.exempt_paths):
        return False

    if not scope.gated_paths:
        return True

    return _matches_prefix(filepath, scope.gated_paths)


def iter_source_files(paths: Iterable[str], scope: ScopeConfig) -> Iterator[Path]:
    """Expand files and directories into the in-scope source files.

    Files named explicitly are yielded when in scope; directories are
    walked recursively in sorted order.
    """
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            for candidate in sorted(path.rglob("*")):
                if candidate.is_file() and is_file_in_scope(candidate.as_posix(), scope):
                    yield candidate
        elif is_file_in_scope(path.as_posix(), scope):
            yield path
