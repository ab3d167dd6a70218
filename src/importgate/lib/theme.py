"""theme — terminal colours for import-order reports.

``cli/theme.yaml`` names ANSI escapes and assigns them to three kinds of
output:

* fixed roles: the location line, the caret run under an import, the
  autofix hint, the summary bar and dry-run diff lines;
* one colour per rule severity, used for violation messages and counts;
* a rotation of colours handed out to the group labels of a convention in
  slot order, so ``show-config`` keeps each group recognisable.

The file is read once per process.  Nothing is coloured unless the target
stream is a TTY.
"""

from __future__ import annotations

import functools
import sys
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from importgate._paths import theme_path
from importgate.lib.yaml_loader import load_yaml

_PLAIN = ("bold", "dim", "reset")


@dataclass(frozen=True)
class Palette:
    """Escapes resolved from the theme file.

    Attributes:
        roles: Escape per fixed role, ``bold`` / ``dim`` / ``reset`` included.
        severities: Escape per rule severity.
        groups: Escapes given to convention groups in turn.
    """

    roles: dict[str, str] = field(default_factory=dict)
    severities: dict[str, str] = field(default_factory=dict)
    groups: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, raw: Any) -> Palette:
        if not isinstance(raw, dict):
            return cls()
        ansi: dict[str, str] = raw.get("ansi") or {}
        roles = {role: ansi.get(name, "") for role, name in (raw.get("roles") or {}).items()}
        roles.update({plain: ansi.get(plain, "") for plain in _PLAIN})
        severities = {sev: ansi.get(name, "") for sev, name in (raw.get("severities") or {}).items()}
        groups = tuple(ansi.get(name, "") for name in raw.get("groups") or ())
        return cls(roles=roles, severities=severities, groups=groups)

    def group(self, index: int) -> str:
        if not self.groups:
            return ""
        return self.groups[index % len(self.groups)]


@functools.lru_cache(maxsize=None)
def palette() -> Palette:
    """Load ``cli/theme.yaml``; without the file nothing is coloured."""
    path = theme_path()
    if not path.is_file():
        return Palette()
    return Palette.from_dict(load_yaml(str(path)))


def _on_tty(stream: Any) -> bool:
    target = stream or sys.stderr
    return hasattr(target, "isatty") and target.isatty()


def _wrap(text: str, escape: str, stream: Any) -> str:
    if not escape or not _on_tty(stream):
        return text
    return f"{escape}{text}{palette().roles.get('reset', '')}"


def code(role: str, *, stream: Any = None) -> str:
    """Raw escape of ``role``, or '' when ``stream`` (default stderr) is no TTY."""
    if not _on_tty(stream):
        return ""
    return palette().roles.get(role, "")


def severity_code(severity: str, *, stream: Any = None) -> str:
    """Raw escape for messages of a rule with ``severity``."""
    if not _on_tty(stream):
        return ""
    return palette().severities.get(severity, "")


def colorize(text: str, role: str, *, stream: Any = None) -> str:
    return _wrap(text, palette().roles.get(role, ""), stream)


def group_colors(slots: Sequence[Optional[str]]) -> dict[str, str]:
    """Assign a palette escape to every group label of a convention.

    ``None`` slots take no colour and do not advance the rotation.
    """
    labels = [slot for slot in slots if slot is not None]
    return {label: palette().group(i) for i, label in enumerate(labels)}


def paint_group(label: str, colors: dict[str, str], *, stream: Any = None) -> str:
    return _wrap(label, colors.get(label, ""), stream)
