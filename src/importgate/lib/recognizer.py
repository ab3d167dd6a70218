"""recognizer — compile group conventions and classify module paths.

A convention is an ordered list of slots: group labels, the reserved
``unspecified`` label, and ``None`` markers that demand a blank line between
the neighbouring groups.  A recognizer maps each label to the regular
expressions that identify its module paths.

Patterns arrive in several shapes (a string, a ``{pattern, flags}`` mapping,
an already compiled ``re.Pattern`` or a list of those).  They are normalized
exactly once, in ``compile_convention``; every malformed shape is rejected
there with a ``ConfigurationError`` so that classification never has to
branch on shape.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence

from importgate.exceptions import ConfigurationError

UNSPECIFIED = "unspecified"

COMMENT = re.compile(r"/\*.*?\*/|//[^\n]*", re.DOTALL)
_SPECIFIER_PREFIX = re.compile(r"^(type|typeof)\s+")
_SPECIFIER_SPLIT = re.compile(r"\s+as\s+|\s*:\s*")

# JavaScript RegExp flags.  ``g`` and ``y`` only affect stateful matching,
# which classification never does.
_FLAG_MAP: dict[str, int] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "u": 0,
    "g": 0,
    "y": 0,
}

_RELATIVE_PREFIXES = ("./", "../")


Slot = Optional[str]


@dataclass(frozen=True)
class Convention:
    """Compiled, immutable import convention.

    Built once per configuration and shared read-only by every file
    analysis, including analyses running on other threads.

    Attributes:
        slots: Ordered group labels and ``None`` separator markers.
        recognizer: Label to compiled matchers, in declared order.
        reference: Suffix appended to every violation message.
    """

    slots: tuple[Slot, ...]
    recognizer: Mapping[str, tuple[re.Pattern[str], ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    reference: str = ""

    @property
    def groups(self) -> tuple[str, ...]:
        return tuple(s for s in self.slots if s is not None)

    def index_of(self, label: str) -> int:
        """Position of ``label`` among the slots, or -1 if absent."""
        try:
            return self.slots.index(label)
        except ValueError:
            return -1

    def classify(self, module_path: str) -> str:
        return classify(module_path, self.slots, self.recognizer)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def classify(
    module_path: str,
    slots: Sequence[Slot],
    recognizer: Mapping[str, Sequence[re.Pattern[str]]],
) -> str:
    """Return the group label of ``module_path``.

    Groups are tried in convention order and each group's matchers in
    declared order; the first match wins, so when two groups both match, the
    one listed earlier in the convention takes the import.

    Args:
        module_path: The imported module string, without quotes.
        slots: Convention slots.
        recognizer: Compiled matchers per label.

    Returns:
        The matching group label, or ``unspecified``.
    """
    for slot in slots:
        if slot is None or slot == UNSPECIFIED:
            continue
        for matcher in recognizer.get(slot, ()):
            if matcher.search(module_path):
                return slot
    return UNSPECIFIED


def is_relative_path(module_path: str) -> bool:
    """True for ``./x``, ``../x``, ``.`` and ``..``; everything else is absolute-style."""
    return module_path.startswith(_RELATIVE_PREFIXES) or module_path in (".", "..")


def normalize_specifier(text: str) -> str:
    """Drop comments and collapse whitespace in one binding specifier."""
    return " ".join(COMMENT.sub(" ", text).split())


def specifier_key(specifier: str) -> tuple[str, str, str]:
    """Sort key of a binding: imported name, then alias, then modifier.

    ``type A as B`` -> ``("A", "B", "type")``, ``a: b`` -> ``("a", "b", "")``.
    Both the binding-order check and the rewrite compare bindings by this
    key, so two specifiers are duplicates exactly when their keys are equal.
    """
    bare = normalize_specifier(specifier)
    modifier = ""
    prefix = _SPECIFIER_PREFIX.match(bare)
    if prefix:
        modifier = prefix.group(1)
        bare = bare[prefix.end():]
    parts = _SPECIFIER_SPLIT.split(bare, maxsplit=1)
    alias = parts[1].strip() if len(parts) > 1 else ""
    return parts[0].strip(), alias, modifier


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


def _compile_flags(flags: Any, label: str) -> int:
    if flags is None:
        return 0
    if not isinstance(flags, str):
        raise ConfigurationError(
            f"recognizer.{label}: flags must be a string, got {type(flags).__name__}"
        )
    value = 0
    for letter in flags:
        if letter not in _FLAG_MAP:
            raise ConfigurationError(f"recognizer.{label}: unsupported regex flag {letter!r}")
        value |= _FLAG_MAP[letter]
    return value


def _compile_regex(source: str, flags: int, label: str) -> re.Pattern[str]:
    try:
        return re.compile(source, flags)
    except (re.error, OverflowError) as exc:
        raise ConfigurationError(f"recognizer.{label}: invalid pattern {source!r}: {exc}") from exc


def compile_pattern(raw: Any, label: str) -> re.Pattern[str]:
    """Normalize one pattern entry into a compiled regular expression.

    Accepted shapes:
        * ``"^lib/"``: a regular expression source string;
        * ``{"pattern": "^lib/", "flags": "i"}``: with JavaScript flags
          (``regex`` is accepted as an alias of ``pattern``);
        * an already compiled ``re.Pattern``.

    Raises:
        ConfigurationError: On any other shape, an invalid expression or an
            unknown flag.
    """
    if isinstance(raw, re.Pattern):
        return raw
    if isinstance(raw, str):
        return _compile_regex(raw, 0, label)
    if isinstance(raw, Mapping):
        unknown = set(raw) - {"pattern", "regex", "flags"}
        source = raw.get("pattern", raw.get("regex"))
        if unknown or not isinstance(source, str):
            raise ConfigurationError(
                f"recognizer.{label}: pattern mappings need a string 'pattern' "
                f"and optional 'flags', got keys {sorted(map(str, raw))}"
            )
        return _compile_regex(source, _compile_flags(raw.get("flags"), label), label)
    raise ConfigurationError(
        f"recognizer.{label}: unrecognized pattern of type {type(raw).__name__}"
    )


def compile_recognizer(raw: Any) -> Mapping[str, tuple[re.Pattern[str], ...]]:
    """Compile a ``{label: pattern | [pattern, ...]}`` mapping.

    Raises:
        ConfigurationError: If ``raw`` is not a mapping, defines patterns for
            ``unspecified``, or contains a malformed pattern.
    """
    if raw is None:
        return MappingProxyType({})
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"'recognizer' has to be a mapping, got {type(raw).__name__}")

    table: dict[str, tuple[re.Pattern[str], ...]] = {}
    for label, patterns in raw.items():
        if label == UNSPECIFIED:
            raise ConfigurationError(f"'{UNSPECIFIED}' group can't have a recognizer")
        if not isinstance(label, str):
            raise ConfigurationError(f"recognizer labels must be strings, got {label!r}")
        strategy = patterns if isinstance(patterns, (list, tuple)) else [patterns]
        table[label] = tuple(compile_pattern(p, label) for p in strategy)
    return MappingProxyType(table)


def compile_convention(options: Any) -> Convention:
    """Compile raw rule options into an immutable ``Convention``.

    When ``unspecified`` is not declared it is appended as the last slot, so
    imports no recognizer claims still have a place in the canonical order.

    Args:
        options: ``{"convention": [...], "recognizer": {...}, "reference": str}``.

    Raises:
        ConfigurationError: If the options are malformed.
    """
    if not isinstance(options, Mapping):
        raise ConfigurationError(f"rule options must be a mapping, got {type(options).__name__}")

    raw_slots = options.get("convention")
    if not isinstance(raw_slots, (list, tuple)):
        raise ConfigurationError("'convention' has to be an array!")

    seen: set[str] = set()
    for slot in raw_slots:
        if slot is None:
            continue
        if not isinstance(slot, str) or not slot:
            raise ConfigurationError(
                f"'convention' entries must be group labels or null, got {slot!r}"
            )
        if slot in seen:
            raise ConfigurationError(f"group {slot!r} appears twice in 'convention'")
        seen.add(slot)

    slots = tuple(raw_slots)
    if UNSPECIFIED not in seen:
        slots += (UNSPECIFIED,)

    reference = options.get("reference") or ""
    if not isinstance(reference, str):
        raise ConfigurationError(f"'reference' must be a string, got {type(reference).__name__}")

    return Convention(
        slots=slots,
        recognizer=compile_recognizer(options.get("recognizer")),
        reference=reference,
    )
