"""Fuzz tests for importgate robustness under random input."""

from __future__ import annotations

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from importgate.exceptions import ConfigurationError, ImportgateParseError
from importgate.lib import config
from importgate.lib.analyzer import SourceAnalyzer
from importgate.lib.models import validate_project_config
from importgate.lib.recognizer import compile_convention


class TestConfigGetFuzz:
    """Fuzz the config.get() accessor with arbitrary key paths."""

    @given(st.text(min_size=0, max_size=200))
    @settings(max_examples=100, suppress_health_check=[HealthCheck.too_slow])
    def test_get_never_crashes(self, key: str) -> None:
        """config.get() raises KeyError for invalid keys, never crashes."""
        try:
            config.get(key)
        except KeyError:
            pass

    @given(st.text(min_size=0, max_size=200))
    @settings(max_examples=100, suppress_health_check=[HealthCheck.too_slow])
    def test_get_str_never_crashes(self, key: str) -> None:
        """config.get_str() raises or returns str, never crashes."""
        try:
            result = config.get_str(key)
            assert isinstance(result, str)
        except (KeyError, TypeError):
            pass


_yaml_scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(),
    st.text(max_size=20),
)
_yaml_values = st.recursive(
    _yaml_scalars,
    lambda children: st.one_of(
        st.lists(children, max_size=5),
        st.dictionaries(st.text(max_size=10), children, max_size=5),
    ),
    max_leaves=20,
)


class TestValidateProjectConfigFuzz:
    """Fuzz the project config shape validator."""

    @given(_yaml_values)
    @settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])
    def test_returns_error_list(self, data) -> None:
        """Any YAML-shaped value yields a list of strings."""
        errors = validate_project_config(data)
        assert isinstance(errors, list)
        assert all(isinstance(e, str) for e in errors)


class TestCompileConventionFuzz:
    """Fuzz convention compilation with arbitrary options."""

    @given(
        st.fixed_dictionaries(
            {},
            optional={
                "convention": st.one_of(
                    _yaml_values,
                    st.lists(st.one_of(st.none(), st.text(max_size=8)), max_size=6),
                ),
                "recognizer": st.one_of(
                    _yaml_values,
                    st.dictionaries(
                        st.text(max_size=8),
                        st.one_of(st.text(max_size=12), st.lists(st.text(max_size=12), max_size=3)),
                        max_size=4,
                    ),
                ),
                "reference": _yaml_values,
            },
        )
    )
    @settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])
    def test_only_configuration_errors(self, options) -> None:
        """Malformed options only ever raise ConfigurationError."""
        try:
            convention = compile_convention(options)
        except ConfigurationError:
            return
        assert convention.slots[-1] is not None or "unspecified" in convention.slots


_TOKENS = [
    "import",
    "export",
    "from",
    "as",
    "type",
    "*",
    "{",
    "}",
    ",",
    ";",
    "=",
    "const",
    "a",
    "b",
    "'./x'",
    "'lib'",
    "\n",
    "\n\n",
    " ",
    "// c\n",
    "/* c */",
    "require",
    "(",
    ")",
]


class TestAnalyzerFuzz:
    """Fuzz the analyzer with random token soup."""

    @given(st.lists(st.sampled_from(_TOKENS), max_size=40))
    @settings(max_examples=150, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_parse_or_parse_error(self, tokens: list[str]) -> None:
        """The analyzer either parses or raises ImportgateParseError."""
        source = " ".join(tokens)
        try:
            analyzer = SourceAnalyzer(source, "fuzz.ts")
        except ImportgateParseError:
            return
        for statement in analyzer.statements:
            assert 0 <= statement.start <= statement.end <= len(source)
