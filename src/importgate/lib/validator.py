"""validator — sequential checking of the leading import block.

Imports are compared one by one with their predecessor in the registry:

* inside a group, the leading text may hold no blank line, absolute-style
  paths come before relative ones, and paths of the same style are in
  lexical order;
* across groups, the convention is scanned backwards from the current
  group.  Meeting the predecessor's group means the order is right; meeting
  a ``None`` slot first means exactly one blank line must separate the two
  imports; running off the start means the groups are out of order.

Independently, every brace-enclosed binding list must be strictly ascending.

The block closes at the first top-level statement that is not an import (or
at end of file).  If anything failed by then, one ``FATAL`` violation
carrying the autofix is added.  Imports after the close are reported as
``TOGETHER`` and take no further part in the comparison.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from importgate.lib.analyzer import Statement
from importgate.lib.autofix import build_fix
from importgate.lib.models import ImportEntry, Replacement, TextRange, Violation, ViolationKind
from importgate.lib.recognizer import Convention, is_relative_path, specifier_key
from importgate.lib.registry import ImportRegistry

# Leading text "\n\n" splits into three segments, two of them empty: that is
# one blank line between two statements.
_ONE_BLANK_LINE = 2

Finding = tuple[ViolationKind, int]


def count_separators(leading: str) -> int:
    """Count the empty line segments of the text before a statement.

    ``leading`` runs from the end of the previous statement to the start of
    this one; its last segment is the current line's indentation and is not
    counted.  One means the statement starts on the line after its
    predecessor; each additional empty segment is one blank line.
    """
    return sum(1 for part in leading.split("\n")[:-1] if not part.strip())


def bindings_sorted(bindings: Sequence[str]) -> bool:
    """True when the specifiers are strictly ascending by code point.

    Specifiers compare by imported name, then alias, so ``a as x, a as y``
    is in order while a repeated ``a`` is not.
    """
    keys = [specifier_key(b) for b in bindings]
    return all(a < b for a, b in zip(keys, keys[1:]))


def follows_convention(
    current: ImportEntry,
    previous: Optional[ImportEntry],
    convention: Convention,
) -> Optional[Finding]:
    """Compare an import with its predecessor.

    Args:
        current: The import being checked.
        previous: The import before it, or None for the first import.
        convention: Compiled convention.

    Returns:
        None when the pair is in order, else the violation kind and its
        count (the number of extra blank lines for the counted kinds).
    """
    if previous is None:
        return None

    separators = count_separators(current.leading)

    if current.group == previous.group:
        if separators > 1:
            return ViolationKind.UNEXPECTED_SEPARATOR, separators - 1

        current_relative = is_relative_path(current.module_path)
        previous_relative = is_relative_path(previous.module_path)
        if current_relative == previous_relative:
            if current.module_path < previous.module_path:
                return ViolationKind.ABZ, 0
            return None
        if current_relative:
            return None
        return ViolationKind.ABSOLUTE_FIRST, 0

    slots = convention.slots
    current_index = convention.index_of(current.group)
    for i in range(current_index, -1, -1):
        if slots[i] == previous.group:
            if current_index - i == 1 and separators > 1:
                return ViolationKind.UNEXPECTED_SEPARATOR, separators - 1
            return None
        if slots[i] is None and separators != _ONE_BLANK_LINE:
            if separators > _ONE_BLANK_LINE:
                return ViolationKind.REMOVE_EXTRA_LINE_ABOVE, separators - _ONE_BLANK_LINE
            return ViolationKind.LINE_ABOVE, 0

    return ViolationKind.WRONG_ORDER, 0


class ConventionValidator:
    """Per-file validation state.

    Feed every top-level statement to ``visit`` in source order, then call
    ``finish``.  The collected violations are in ``violations``.

    Args:
        source: Full source text (for the registry).
        convention: Compiled convention, shared read-only.
        banner_end: End of the file banner, if any.
        locate: Maps an offset to a 1-based (line, column).
    """

    def __init__(
        self,
        source: str,
        convention: Convention,
        banner_end: Optional[int] = None,
        locate: Optional[Callable[[int], tuple[int, int]]] = None,
    ) -> None:
        self.convention = convention
        self.registry = ImportRegistry(source, convention, banner_end)
        self.violations: list[Violation] = []
        self.block_closed = False
        self.has_critical_error = False
        self._locate = locate or (lambda offset: (0, 0))

    def visit(self, statement: Statement) -> None:
        if not statement.is_import:
            self.close_block()
            return
        if self.block_closed:
            self._report(ViolationKind.TOGETHER, TextRange(statement.start, statement.end))
            return
        self.check(statement)

    def check(self, statement: Statement) -> None:
        """Register an import of the open block and run every check on it."""
        handle = self.registry.add(statement)
        current = handle.entry
        if current is None:
            return
        previous = self.registry.previous(handle).entry

        if not bindings_sorted(current.bindings):
            self._fail(ViolationKind.NAMED_IMPORTS, current)

        finding = follows_convention(current, previous, self.convention)
        if finding is not None:
            kind, count = finding
            self._fail(kind, current, count)

    def close_block(self) -> None:
        """Close the import block; emit ``FATAL`` with the fix if needed."""
        if self.block_closed:
            return
        self.block_closed = True
        if not self.has_critical_error:
            return
        last = self.registry.get_last().entry
        if last is None:
            return
        self._report(
            ViolationKind.FATAL,
            last.statement_range,
            fix=build_fix(self.registry, self.convention),
        )

    def finish(self) -> list[Violation]:
        self.close_block()
        return self.violations

    def _fail(self, kind: ViolationKind, entry: ImportEntry, count: int = 0) -> None:
        self.has_critical_error = True
        self._report(kind, entry.statement_range, count)

    def _report(
        self,
        kind: ViolationKind,
        span: TextRange,
        count: int = 0,
        fix: Optional[Replacement] = None,
    ) -> None:
        line, column = self._locate(span.start)
        self.violations.append(
            Violation(
                kind=kind,
                range=span,
                message=kind.describe(count, self.convention.reference),
                line=line,
                column=column,
                fix=fix,
            )
        )


def validate(
    statements: Sequence[Statement],
    source: str,
    convention: Convention,
    banner_end: Optional[int] = None,
    locate: Optional[Callable[[int], tuple[int, int]]] = None,
) -> list[Violation]:
    """Run one validation pass over a file's top-level statements."""
    validator = ConventionValidator(source, convention, banner_end, locate)
    for statement in statements:
        validator.visit(statement)
    return validator.finish()
