"""Unit tests for importgate.lib.recognizer compilation and classification."""

from __future__ import annotations

import dataclasses
import re

import pytest

from importgate.exceptions import ConfigurationError
from importgate.lib.recognizer import (
    UNSPECIFIED,
    classify,
    compile_convention,
    compile_pattern,
    compile_recognizer,
    is_relative_path,
    normalize_specifier,
    specifier_key,
)


class TestCompileConvention:
    """Tests for compile_convention."""

    def test_unspecified_appended(self) -> None:
        """An undeclared unspecified group is appended as the last slot."""
        convention = compile_convention({"convention": ["a", None, "b"]})
        assert convention.slots == ("a", None, "b", UNSPECIFIED)

    def test_declared_unspecified_keeps_position(self) -> None:
        """A declared unspecified group stays where it was put."""
        convention = compile_convention({"convention": [UNSPECIFIED, None, "a"]})
        assert convention.slots == (UNSPECIFIED, None, "a")

    def test_groups_skip_null_slots(self) -> None:
        """groups lists labels only."""
        convention = compile_convention({"convention": ["a", None, "b"]})
        assert convention.groups == ("a", "b", UNSPECIFIED)
        assert convention.index_of("b") == 2
        assert convention.index_of("missing") == -1

    def test_reference_kept(self) -> None:
        """reference is carried onto the convention."""
        convention = compile_convention({"convention": [], "reference": "See X"})
        assert convention.reference == "See X"

    @pytest.mark.parametrize(
        "options, fragment",
        [
            ("nope", "must be a mapping"),
            ({}, "has to be an array"),
            ({"convention": "a,b"}, "has to be an array"),
            ({"convention": ["a", 5]}, "group labels or null"),
            ({"convention": ["a", ""]}, "group labels or null"),
            ({"convention": ["a", "a"]}, "appears twice"),
            ({"convention": [], "reference": 3}, "'reference' must be a string"),
        ],
    )
    def test_rejects_malformed_options(self, options, fragment) -> None:
        """Every malformed shape is a ConfigurationError."""
        with pytest.raises(ConfigurationError, match=fragment):
            compile_convention(options)

    def test_convention_is_frozen(self) -> None:
        """Compiled conventions cannot be mutated."""
        convention = compile_convention({"convention": ["a"], "recognizer": {"a": "^a"}})
        with pytest.raises(dataclasses.FrozenInstanceError):
            convention.slots = ()  # type: ignore[misc]
        with pytest.raises(TypeError):
            convention.recognizer["b"] = ()  # type: ignore[index]


class TestCompileRecognizer:
    """Tests for compile_recognizer and compile_pattern."""

    def test_none_is_empty(self) -> None:
        """A missing recognizer compiles to an empty mapping."""
        assert dict(compile_recognizer(None)) == {}

    def test_single_pattern_and_list(self) -> None:
        """A single pattern and a list of patterns both become tuples."""
        table = compile_recognizer({"a": "^a", "b": ["^b", {"pattern": "^c"}]})
        assert [p.pattern for p in table["a"]] == ["^a"]
        assert [p.pattern for p in table["b"]] == ["^b", "^c"]

    def test_unspecified_rejected(self) -> None:
        """The unspecified group cannot have a recognizer."""
        with pytest.raises(ConfigurationError, match="can't have a recognizer"):
            compile_recognizer({UNSPECIFIED: "^x"})

    def test_not_a_mapping(self) -> None:
        """A list recognizer is rejected."""
        with pytest.raises(ConfigurationError, match="has to be a mapping"):
            compile_recognizer(["^a"])

    def test_string_pattern(self) -> None:
        """A string is a regular expression source."""
        assert compile_pattern("^lib/", "a").search("lib/x")

    def test_mapping_with_flags(self) -> None:
        """JavaScript flags map onto re flags."""
        pattern = compile_pattern({"pattern": "^lib/", "flags": "i"}, "a")
        assert pattern.search("LIB/x")
        assert pattern.flags & re.IGNORECASE

    def test_regex_alias(self) -> None:
        """regex is accepted in place of pattern."""
        assert compile_pattern({"regex": "^x"}, "a").search("xy")

    def test_stateful_flags_ignored(self) -> None:
        """g, u and y compile to nothing."""
        pattern = compile_pattern({"pattern": "^x", "flags": "guy"}, "a")
        assert not pattern.flags & (re.IGNORECASE | re.MULTILINE | re.DOTALL)

    def test_compiled_pattern_passthrough(self) -> None:
        """An already compiled pattern is used as is."""
        compiled = re.compile("^x")
        assert compile_pattern(compiled, "a") is compiled

    @pytest.mark.parametrize(
        "raw, fragment",
        [
            (42, "unrecognized pattern"),
            ({"flags": "i"}, "need a string 'pattern'"),
            ({"pattern": "^x", "extra": 1}, "need a string 'pattern'"),
            ({"pattern": "^x", "flags": 1}, "flags must be a string"),
            ({"pattern": "^x", "flags": "q"}, "unsupported regex flag"),
            ("(", "invalid pattern"),
        ],
    )
    def test_rejects_malformed_patterns(self, raw, fragment) -> None:
        """Unknown shapes, flags and broken expressions are rejected at load."""
        with pytest.raises(ConfigurationError, match=fragment):
            compile_pattern(raw, "a")


class TestClassify:
    """Tests for classify."""

    def test_first_match_wins(self) -> None:
        """When two groups match, the one listed first in the convention wins."""
        recognizer = compile_recognizer({"a": "^x", "b": "^x"})
        assert classify("xy", ("a", "b"), recognizer) == "a"
        assert classify("xy", ("b", "a"), recognizer) == "b"

    def test_no_match_is_unspecified(self) -> None:
        """Unclaimed paths are unspecified."""
        convention = compile_convention({"convention": ["a"], "recognizer": {"a": "^a"}})
        assert convention.classify("zod") == UNSPECIFIED

    def test_labels_outside_convention_ignored(self) -> None:
        """A recognizer label missing from the convention never classifies."""
        convention = compile_convention({"convention": ["a"], "recognizer": {"b": "^b"}})
        assert convention.classify("b/x") == UNSPECIFIED

    def test_search_not_match(self) -> None:
        """Patterns are searched anywhere in the path."""
        convention = compile_convention({"convention": ["ui"], "recognizer": {"ui": "components"}})
        assert convention.classify("@app/components/Button") == "ui"

    def test_pure(self) -> None:
        """Classifying twice gives the same answer."""
        convention = compile_convention({"convention": ["a"], "recognizer": {"a": "^a"}})
        assert convention.classify("ab") == convention.classify("ab") == "a"


class TestIsRelativePath:
    """Tests for is_relative_path."""

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("./a", True),
            ("../a", True),
            (".", True),
            ("..", True),
            ("react", False),
            ("@app/ui", False),
            (".hidden", False),
            ("/abs/path", False),
        ],
    )
    def test_relative_paths(self, path: str, expected: bool) -> None:
        """Only ./, ../, . and .. are relative."""
        assert is_relative_path(path) is expected


class TestSpecifierKey:
    """Tests for the binding sort key."""

    def test_normalize_drops_comments(self) -> None:
        assert normalize_specifier("  a /* x */  as\n b ") == "a as b"
        assert normalize_specifier("a // tail") == "a"

    @pytest.mark.parametrize(
        "specifier, key",
        [
            ("a", ("a", "", "")),
            ("  a as b ", ("a", "b", "")),
            ("type A as B", ("A", "B", "type")),
            ("typeof T", ("T", "", "typeof")),
            ("a: b", ("a", "b", "")),
            ("/* c */ a", ("a", "", "")),
        ],
    )
    def test_key(self, specifier: str, key: tuple[str, str, str]) -> None:
        """Name first, then alias, then the modifier."""
        assert specifier_key(specifier) == key

    def test_aliases_of_one_name_are_distinct(self) -> None:
        assert specifier_key("a as x") < specifier_key("a as y")
        assert specifier_key("a") < specifier_key("a as x")
