"""autofix — canonical rewrite of the leading import block.

``build_fix`` turns the complete registry of a file into one ``Replacement``
spanning from the first import (after the banner) to the end of the last
import.  The rewritten block is ordered the way the validator expects, so
validating the fixed source again yields no violations:

* groups appear in convention order, runs of ``None`` slots become exactly
  one blank line, empty groups are skipped;
* inside a group, absolute-style paths come first, then lexical order;
* each import becomes one logical line with its brace list sorted; comments
  that preceded an import stay on their own lines above it.

Brace lists are sorted by ``specifier_key``, the same key the validator
checks.  Comments inside a list travel with the specifier they follow; a
list holding a line comment is laid out one specifier per line.

The block is written with the newline style of the file.
"""

from __future__ import annotations

import functools
import re
from collections import defaultdict
from typing import TYPE_CHECKING, Iterable, Optional

from importgate.lib.models import ImportEntry, Replacement, Violation
from importgate.lib.recognizer import Convention, is_relative_path, normalize_specifier, specifier_key

if TYPE_CHECKING:
    from importgate.lib.registry import ImportRegistry

_NEWLINE_RUN = re.compile(r"[ \t]*\r?\n\s*")
_BRACES = re.compile(r"\{([^{}]*)\}")
_BRACE_TOKEN = re.compile(r"/\*.*?\*/|//[^\n]*|,|[^,/]+|/", re.DOTALL)
_COMMENT_MARKERS = ("//", "/*")
_INDENT = "  "


def sort_key(entry: ImportEntry) -> tuple[bool, str]:
    """Absolute-style before relative-style, then by module path."""
    return is_relative_path(entry.module_path), entry.module_path


class _Specifier:
    """One binding of a brace list plus the comments around it."""

    def __init__(self, text: str, before: list[str], after: list[str]) -> None:
        self.text = text
        self.before = before
        self.after = after

    @property
    def key(self) -> tuple[str, str, str]:
        return specifier_key(self.text)


def _split_specifiers(inner: str) -> tuple[list[_Specifier], list[str]]:
    """Split the inside of a brace list into specifiers.

    A line comment on the line of the previous comma belongs to the
    specifier before it.  Any other comment belongs to the specifier it sits
    in, or else to the next one.

    Returns:
        The specifiers in source order, and the comments of a list that
        holds no specifier at all.
    """
    specifiers: list[_Specifier] = []
    pending: list[str] = []
    after: list[str] = []
    code = ""
    line_broken = False
    for token in _BRACE_TOKEN.findall(inner) + [","]:
        if token == ",":
            text = normalize_specifier(code)
            if text:
                specifiers.append(_Specifier(text, pending, after))
                pending = []
            after, code, line_broken = [], "", False
        elif token.startswith(_COMMENT_MARKERS):
            comment = token.strip()
            if code.strip():
                after.append(comment)
            elif comment.startswith("//") and specifiers and not line_broken:
                specifiers[-1].after.append(comment)
            else:
                pending.append(comment)
        else:
            code += token
            line_broken = line_broken or "\n" in token
    if pending and specifiers:
        specifiers[-1].after.extend(pending)
        pending = []
    return specifiers, pending


def _sort_brace_list(match: re.Match[str], newline: str = "\n") -> str:
    specifiers, orphans = _split_specifiers(match.group(1))
    unique: dict[tuple[str, str, str], _Specifier] = {}
    for spec in specifiers:
        kept = unique.setdefault(spec.key, spec)
        if kept is not spec:
            kept.after.extend(spec.before + spec.after)
    ordered = [unique[key] for key in sorted(unique)]

    comments = orphans + [c for spec in ordered for c in spec.before + spec.after]
    if not ordered and not comments:
        return "{}"
    if not any(c.startswith("//") for c in comments):
        parts = [" ".join(spec.before + [spec.text] + spec.after) for spec in ordered]
        return "{ " + ", ".join(orphans + parts) + " }"

    lines = ["{"]
    lines += [_INDENT + c for c in orphans]
    for spec in ordered:
        lines += [_INDENT + c for c in spec.before]
        inline = [c for c in spec.after if c.startswith("/*")]
        tail = [c for c in spec.after if not c.startswith("/*")]
        lines.append(" ".join([_INDENT + " ".join([spec.text] + inline) + ","] + tail))
    lines.append("}")
    return newline.join(lines)


def _has_source_clause(line: str, module_path: str) -> bool:
    return any(f"{q}{module_path}{q}" in line for q in ("'", '"', "`"))


def render_entry(entry: ImportEntry, newline: str = "\n") -> str:
    """Rewrite one import as a single logical line.

    Leading comments are kept verbatim on their own lines, internal line
    breaks of the statement are collapsed, the binding list is sorted and a
    missing source clause is rebuilt from the module path.
    """
    line = entry.body.strip()
    probe = line.replace(entry.module_path, "") if entry.module_path else line
    if not any(marker in probe for marker in _COMMENT_MARKERS):
        # Statements holding comments keep their line breaks.
        line = _NEWLINE_RUN.sub(" ", line)
    line = _BRACES.sub(functools.partial(_sort_brace_list, newline=newline), line)
    if entry.module_path and not _has_source_clause(line, entry.module_path):
        clause = f" from '{entry.module_path}'"
        if line.endswith(";"):
            line = line[:-1] + clause + ";"
        else:
            line += clause
    line += entry.trailing.rstrip()

    comments = entry.leading.strip()
    if comments:
        lines = [part.strip() for part in comments.splitlines() if part.strip()]
        return newline.join(lines + [line])
    return line


def build_block(entries: Iterable[ImportEntry], convention: Convention, newline: str = "\n") -> str:
    """Render the canonical text of an import block (without banner)."""
    groups: dict[str, list[ImportEntry]] = defaultdict(list)
    for entry in entries:
        groups[entry.group].append(entry)

    text = ""
    blank = False
    for slot in convention.slots:
        if slot is None:
            if not blank:
                text += newline
                blank = True
            continue
        members = groups.get(slot)
        if not members:
            continue
        rendered = (render_entry(e, newline) for e in sorted(members, key=sort_key))
        text += newline.join(rendered) + newline
        blank = False

    return text.strip()


def build_fix(registry: ImportRegistry, convention: Convention) -> Optional[Replacement]:
    """Build the single replacement that rewrites the whole import block.

    The banner before the first import is left untouched; the replacement
    starts right after it and opens with one blank line.  Line breaks follow
    the file's own newline style.

    Returns:
        The replacement, or None when the registry is empty.
    """
    entries = registry.entries
    if not entries:
        return None
    newline = registry.newline
    block = build_block(entries, convention, newline)
    prefix = newline * 2 if registry.banner_end else ""
    return Replacement(entries[0].range.start, entries[-1].range.end, prefix + block)


# ---------------------------------------------------------------------------
# Applying fixes
# ---------------------------------------------------------------------------


def apply_replacement(source: str, replacement: Replacement) -> str:
    return replacement.apply(source)


def apply_fixes(source: str, violations: Iterable[Violation]) -> str:
    """Apply every fix carried by ``violations`` to ``source``.

    Replacements are applied from the end of the file backwards so earlier
    offsets stay valid; a replacement overlapping one already applied is
    skipped.
    """
    fixes = sorted(
        {v.fix for v in violations if v.fix is not None},
        key=lambda r: (r.start, r.end),
        reverse=True,
    )
    result = source
    floor = len(source) + 1
    for fix in fixes:
        if fix.end > floor:
            continue
        result = apply_replacement(result, fix)
        floor = fix.start
    return result
