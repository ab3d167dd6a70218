"""config — lazy-loaded, typed accessor for importgate package defaults.

Reads ``config/defaults.yaml`` on first access and caches the result for the
lifetime of the process.  The typed helpers (``get_str``, ``get_int``,
``get_list``, ``get_dict``) fail loudly at the call-site when a key is missing
or holds the wrong type, so a broken defaults file surfaces immediately
instead of leaking ``None`` into violation messages.

Design notes:
    The defaults are package data, never user configuration.  Project
    settings (conventions, recognizers, scope) come from ``.importgate.yaml``
    and are handled by :mod:`importgate.lib.rules`.  ``reset()`` exists only
    for test isolation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

_DEFAULTS: dict[str, Any] | None = None

_CONFIG_FILE = Path(__file__).resolve().parent.parent / "config" / "defaults.yaml"


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_defaults() -> dict[str, Any]:
    """Load and cache the defaults.yaml configuration file.

    Returns:
        The full configuration dictionary.

    Raises:
        FileNotFoundError: If defaults.yaml is missing.
        yaml.YAMLError: If defaults.yaml contains invalid YAML.
        TypeError: If the top-level YAML node is not a mapping.
    """
    global _DEFAULTS  # noqa: PLW0603
    if _DEFAULTS is None:
        with open(_CONFIG_FILE, encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        if not isinstance(data, dict):
            msg = f"defaults.yaml must be a YAML mapping, got {type(data).__name__}"
            raise TypeError(msg)
        _DEFAULTS = data
    return _DEFAULTS


# ---------------------------------------------------------------------------
# Accessors
# ---------------------------------------------------------------------------


def get(dotted_key: str) -> Any:
    """Access a nested defaults value using dot notation.

    Args:
        dotted_key: A dot-separated path like ``"violations.abz"``.

    Returns:
        The value at the specified path.

    Raises:
        KeyError: If any segment of the path is missing.
    """
    node: Any = load_defaults()
    for part in dotted_key.split("."):
        if not isinstance(node, dict) or part not in node:
            msg = f"Config key not found: {dotted_key!r} (missing segment: {part!r})"
            raise KeyError(msg)
        node = node[part]
    return node


def _typed(dotted_key: str, expected: type, label: str) -> Any:
    value = get(dotted_key)
    # bool is an int subclass; a flag must never satisfy an int lookup.
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        msg = f"Expected {label} for {dotted_key!r}, got {type(value).__name__}"
        raise TypeError(msg)
    return value


def get_str(dotted_key: str) -> str:
    """Return a defaults value as a string.

    Raises:
        KeyError: If the key is missing.
        TypeError: If the value is not a string.
    """
    return _typed(dotted_key, str, "str")


def get_int(dotted_key: str) -> int:
    """Return a defaults value as an integer.

    Raises:
        KeyError: If the key is missing.
        TypeError: If the value is not an integer.
    """
    return _typed(dotted_key, int, "int")


def get_list(dotted_key: str) -> list[Any]:
    """Return a defaults value as a list.

    Raises:
        KeyError: If the key is missing.
        TypeError: If the value is not a list.
    """
    return _typed(dotted_key, list, "list")


def get_dict(dotted_key: str) -> dict[str, Any]:
    """Return a defaults value as a mapping.

    Raises:
        KeyError: If the key is missing.
        TypeError: If the value is not a mapping.
    """
    return _typed(dotted_key, dict, "dict")


def message(dotted_key: str, **fields: Any) -> str:
    """Look up a message template and fill in its ``{placeholders}``."""
    return get_str(dotted_key).format(**fields)


# ---------------------------------------------------------------------------
# Test utilities
# ---------------------------------------------------------------------------


def reset() -> None:
    """Clear the cached defaults (used by tests)."""
    global _DEFAULTS  # noqa: PLW0603
    _DEFAULTS = None
