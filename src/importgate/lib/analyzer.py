"""SourceAnalyzer — single-parse analysis of TypeScript / JavaScript source.

Every rule queries this object instead of touching tree-sitter directly.
Each file is parsed exactly once; the program's top-level children are then
walked by ``_StatementVisitor``, which dispatches explicitly on the node type
and produces flat ``Statement`` records carrying character offsets, the
module path and the named bindings of every import.

Design notes:
    tree-sitter reports byte offsets; all offsets leaving this module are
    ``str`` indices so replacements can be spliced into the decoded source.
    Comments are separate nodes in the tree.  A comment that starts on the
    line where a statement ends belongs to that statement (``trailing``);
    other comments become leading trivia of the next statement, and the
    comments before the very first statement form the file banner.

    ``import * as ns from 'm';`` directly followed by ``const { a } = ns;``
    is one logical import.  The pair is folded into a single IMPORT
    statement after the walk, so validation never sees the quirk.
"""

from __future__ import annotations

import bisect
import dataclasses
import functools
import os
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from tree_sitter import Language, Node, Parser

from importgate.exceptions import ImportgateParseError
from importgate.lib import config
from importgate.lib.recognizer import normalize_specifier


class StatementKind(Enum):
    IMPORT = "import"
    OTHER = "other"


class ImportKind(Enum):
    SIDE_EFFECT = "side_effect"  # import './polyfill';
    DEFAULT = "default"  # import React from 'react';
    NAMESPACE = "namespace"  # import * as path from 'path';
    NAMED = "named"  # import { a, b } from './m';
    REQUIRE = "require"  # import fs = require('fs');


@dataclass(frozen=True)
class Statement:
    """A top-level statement, as far as import ordering cares.

    Attributes:
        kind: IMPORT or OTHER.
        full_start: End of the previous statement (or of the banner).
        start: First character of the statement itself.
        end: End of the statement, semicolon included.
        trailing_end: End of any same-line comments after the statement.
        module_path: Imported module string without quotes (imports only).
        import_kind: Shape of the import clause (imports only).
        bindings: Binding specifiers of an import in source order (``a``,
            ``a as b``, comments dropped), or the properties of an
            object-destructuring declaration.
        namespace: Namespace identifier of an import, or the identifier a
            destructuring declaration reads from.
    """

    kind: StatementKind
    full_start: int
    start: int
    end: int
    trailing_end: int
    module_path: str = ""
    import_kind: Optional[ImportKind] = None
    bindings: tuple[str, ...] = ()
    namespace: Optional[str] = None

    @property
    def is_import(self) -> bool:
        return self.kind is StatementKind.IMPORT


# ---------------------------------------------------------------------------
# Grammar loading
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def _load_language(grammar: str) -> Language:
    import tree_sitter_typescript as tsts

    if grammar == "typescript":
        return Language(tsts.language_typescript())
    return Language(tsts.language_tsx())


def grammar_for(filepath: str) -> str:
    """Pick the tree-sitter grammar for a file name.

    TypeScript and TSX are two grammars in one package; plain JavaScript is
    parsed with TSX so JSX in ``.js`` files does not break the parse.
    """
    ext = os.path.splitext(filepath)[1].lower()
    if ext in config.get_list("grammars.typescript"):
        return "typescript"
    return "tsx"


# ---------------------------------------------------------------------------
# Node helpers
# ---------------------------------------------------------------------------


def _named_children(node: Node, node_type: str) -> list[Node]:
    return [c for c in node.named_children if c.type == node_type]


def _first_child(node: Node, node_type: str) -> Optional[Node]:
    for child in node.named_children:
        if child.type == node_type:
            return child
    return None


def _first_error(root: Node) -> Optional[Node]:
    """Depth-first search for the first ERROR or missing node."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


# ---------------------------------------------------------------------------
# Statement visitor
# ---------------------------------------------------------------------------


class _StatementVisitor:
    """Walk the program's children and collect ``Statement`` records."""

    def __init__(self, analyzer: SourceAnalyzer) -> None:
        self._analyzer = analyzer
        self._dispatch: dict[str, Callable[[Node], None]] = {
            "import_statement": self.visit_import,
            "comment": self.visit_comment,
            "hash_bang_line": self.visit_comment,
            "lexical_declaration": self.visit_declaration,
            "variable_declaration": self.visit_declaration,
        }
        self.statements: list[Statement] = []
        self.banner_end: Optional[int] = None

    def walk(self, root: Node) -> list[Statement]:
        for child in root.children:
            if not child.is_named:
                continue
            self._dispatch.get(child.type, self.visit_other)(child)
        return self.statements

    # -- positions ---------------------------------------------------------

    def _span(self, node: Node) -> tuple[int, int]:
        a = self._analyzer
        return a.char_offset(node.start_byte), a.char_offset(node.end_byte)

    def _full_start(self) -> int:
        if self.statements:
            return self.statements[-1].trailing_end
        return self.banner_end or 0

    def _text(self, node: Node) -> str:
        start, end = self._span(node)
        return self._analyzer.source[start:end]

    # -- visitors ----------------------------------------------------------

    def visit_comment(self, node: Node) -> None:
        start, end = self._span(node)
        if not self.statements:
            # Everything commented before the first statement is banner.
            self.banner_end = end
            return
        last = self.statements[-1]
        if "\n" not in self._analyzer.source[last.trailing_end:start]:
            self.statements[-1] = dataclasses.replace(last, trailing_end=end)
        # Otherwise the comment is leading trivia of the next statement.

    def visit_import(self, node: Node) -> None:
        start, end = self._span(node)
        source_node = node.child_by_field_name("source")
        clause = _first_child(node, "import_clause")
        require = _first_child(node, "import_require_clause")
        bindings: tuple[str, ...] = ()
        namespace: Optional[str] = None

        if require is not None:
            source_node = require.child_by_field_name("source") or _first_child(require, "string")
            kind = ImportKind.REQUIRE
        elif clause is None:
            kind = ImportKind.SIDE_EFFECT
        else:
            kind = ImportKind.DEFAULT
            named = _first_child(clause, "named_imports")
            ns_node = _first_child(clause, "namespace_import")
            if ns_node is not None:
                kind = ImportKind.NAMESPACE
                ident = _first_child(ns_node, "identifier")
                namespace = self._text(ident) if ident is not None else None
            if named is not None:
                kind = ImportKind.NAMED
                bindings = tuple(self._specifier(s) for s in _named_children(named, "import_specifier"))

        if source_node is None:
            source_node = _first_child(node, "string")
        module_path = _string_value(self._text(source_node)) if source_node is not None else ""

        self.statements.append(
            Statement(
                kind=StatementKind.IMPORT,
                full_start=self._full_start(),
                start=start,
                end=end,
                trailing_end=end,
                module_path=module_path,
                import_kind=kind,
                bindings=bindings,
                namespace=namespace,
            )
        )

    def visit_declaration(self, node: Node) -> None:
        """Record ``const { a, b } = ns;`` so it can be folded into an import."""
        declarators = _named_children(node, "variable_declarator")
        bindings: tuple[str, ...] = ()
        namespace: Optional[str] = None
        if len(declarators) == 1:
            target = declarators[0].child_by_field_name("name")
            value = declarators[0].child_by_field_name("value")
            if (
                target is not None
                and value is not None
                and target.type == "object_pattern"
                and value.type == "identifier"
            ):
                names = self._destructured_names(target)
                if names is not None:
                    bindings, namespace = names, self._text(value)
        self._append_other(node, bindings, namespace)

    def visit_other(self, node: Node) -> None:
        self._append_other(node, (), None)

    def _append_other(self, node: Node, bindings: tuple[str, ...], namespace: Optional[str]) -> None:
        start, end = self._span(node)
        self.statements.append(
            Statement(
                kind=StatementKind.OTHER,
                full_start=self._full_start(),
                start=start,
                end=end,
                trailing_end=end,
                bindings=bindings,
                namespace=namespace,
            )
        )

    # -- identifier extraction ---------------------------------------------

    def _specifier(self, spec: Node) -> str:
        return normalize_specifier(self._text(spec))

    def _destructured_names(self, pattern: Node) -> Optional[tuple[str, ...]]:
        names: list[str] = []
        for child in pattern.named_children:
            if child.type == "shorthand_property_identifier_pattern":
                names.append(self._text(child))
            elif child.type == "pair_pattern":
                value = child.child_by_field_name("value")
                if value is None or value.type != "identifier":
                    return None
                names.append(self._specifier(child))
            elif child.type == "comment":
                continue
            else:
                # Defaults and rest elements are not a plain namespace pick.
                return None
        return tuple(names)


def _string_value(literal: str) -> str:
    if len(literal) >= 2 and literal[0] in "'\"`" and literal[-1] == literal[0]:
        return literal[1:-1]
    return literal


# ---------------------------------------------------------------------------
# Analyzer
# ---------------------------------------------------------------------------


class SourceAnalyzer:
    """Parsed view of one source file.

    Attributes:
        source: Full source text.
        filepath: Path used for grammar selection and reporting.
        statements: Top-level statements in source order, with namespace
            pairs already merged.
        banner_end: End offset of the comment banner before the first
            statement, or None when the file has no banner.
    """

    def __init__(self, source: str, filepath: str) -> None:
        self.source = source
        self.filepath = filepath
        self._bytes = source.encode("utf-8")
        self._byte_index: Optional[list[int]] = None
        if len(self._bytes) != len(source):
            index = [0]
            for ch in source:
                index.append(index[-1] + len(ch.encode("utf-8")))
            self._byte_index = index
        self._line_starts = [0] + [i + 1 for i, ch in enumerate(source) if ch == "\n"]

        parser = Parser(_load_language(grammar_for(filepath)))
        tree = parser.parse(self._bytes)
        root = tree.root_node
        if root.has_error:
            bad = _first_error(root) or root
            row, col = bad.start_point
            raise ImportgateParseError(filepath, f"syntax error at line {row + 1}, column {col + 1}")

        visitor = _StatementVisitor(self)
        self.statements: list[Statement] = merge_namespace_pairs(source, visitor.walk(root))
        self.banner_end: Optional[int] = visitor.banner_end

    # -- offsets -----------------------------------------------------------

    def char_offset(self, byte_offset: int) -> int:
        """Convert a tree-sitter byte offset into a ``str`` index."""
        if self._byte_index is None:
            return byte_offset
        return bisect.bisect_left(self._byte_index, byte_offset)

    def line_col(self, offset: int) -> tuple[int, int]:
        """Return the 1-based (line, column) of a character offset."""
        line = bisect.bisect_right(self._line_starts, offset)
        return line, offset - self._line_starts[line - 1] + 1

    def source_line(self, line: int) -> str:
        """Return the text of a 1-based line without its newline."""
        if line < 1 or line > len(self._line_starts):
            return ""
        start = self._line_starts[line - 1]
        end = self.source.find("\n", start)
        return self.source[start:] if end < 0 else self.source[start:end]

    # -- queries -----------------------------------------------------------

    @property
    def imports(self) -> list[Statement]:
        return [s for s in self.statements if s.is_import]

    def banner(self) -> str:
        return self.source[: self.banner_end] if self.banner_end else ""


def merge_namespace_pairs(source: str, statements: list[Statement]) -> list[Statement]:
    """Fold ``import * as ns from 'm'; const { a } = ns;`` into one import.

    The destructuring must directly follow the namespace import (only
    whitespace between them, no trailing comment on the import) and read
    from the same identifier.  When it does not, the import is kept as is.
    """
    merged: list[Statement] = []
    i = 0
    while i < len(statements):
        current = statements[i]
        following = statements[i + 1] if i + 1 < len(statements) else None
        if (
            following is not None
            and current.import_kind is ImportKind.NAMESPACE
            and current.namespace
            and following.kind is StatementKind.OTHER
            and following.namespace == current.namespace
            and following.bindings
            and current.trailing_end == current.end
            and not source[current.end:following.start].strip()
        ):
            merged.append(
                dataclasses.replace(
                    current,
                    end=following.end,
                    trailing_end=following.trailing_end,
                    bindings=following.bindings,
                )
            )
            i += 2
            continue
        merged.append(current)
        i += 1
    return merged
