"""registry — the per-file, append-only collection of import entries.

The registry turns analyzer statements into ``ImportEntry`` records,
classifying each module path against the compiled convention as it goes.
One registry exists per file pass and is discarded afterwards; the
convention it reads from is shared and never mutated.
"""

from __future__ import annotations

from typing import Iterator, NamedTuple, Optional

from importgate.lib.analyzer import Statement
from importgate.lib.models import ImportEntry, TextRange
from importgate.lib.recognizer import Convention


class Handle(NamedTuple):
    """Position of an entry in the registry.

    ``entry`` is None for the (virtual) predecessor of the first import.
    """

    entry: Optional[ImportEntry]
    index: int


class ImportRegistry:
    """Ordered import entries of one file, in source order."""

    def __init__(self, source: str, convention: Convention, banner_end: Optional[int] = None) -> None:
        self._source = source
        self._convention = convention
        self._entries: list[ImportEntry] = []
        self.banner_end = banner_end

    def add(self, statement: Statement) -> Handle:
        """Classify an import statement and append it.

        Args:
            statement: An IMPORT statement from the analyzer.

        Returns:
            Handle of the new entry.
        """
        src = self._source
        entry = ImportEntry(
            range=TextRange(statement.full_start, statement.trailing_end),
            statement_range=TextRange(statement.start, statement.end),
            leading=src[statement.full_start:statement.start],
            body=src[statement.start:statement.end],
            trailing=src[statement.end:statement.trailing_end],
            module_path=statement.module_path,
            group=self._convention.classify(statement.module_path),
            bindings=statement.bindings,
            namespace=statement.namespace if statement.bindings else None,
        )
        self._entries.append(entry)
        return Handle(entry, len(self._entries) - 1)

    def previous(self, handle: Handle) -> Handle:
        index = handle.index - 1
        return Handle(self._entries[index] if index >= 0 else None, index)

    def get_last(self) -> Handle:
        index = len(self._entries) - 1
        return Handle(self._entries[index] if index >= 0 else None, index)

    @property
    def newline(self) -> str:
        """Line break used by the file: ``\\r\\n`` if it has any, else ``\\n``."""
        return "\r\n" if "\r\n" in self._source else "\n"

    @property
    def entries(self) -> tuple[ImportEntry, ...]:
        return tuple(self._entries)

    def __iter__(self) -> Iterator[ImportEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
