"""Unit tests for importgate.lib.config defaults accessor."""

from __future__ import annotations

import pytest

from importgate.lib import config


class TestLoadDefaults:
    """Tests for config loading and caching."""

    def test_loads_successfully(self) -> None:
        """defaults.yaml loads without error."""
        assert isinstance(config.load_defaults(), dict)

    def test_cached_on_second_call(self) -> None:
        """Second call returns the same dict object (cached)."""
        assert config.load_defaults() is config.load_defaults()

    def test_reset_clears_cache(self) -> None:
        """reset() forces a fresh load on next call."""
        first = config.load_defaults()
        config.reset()
        second = config.load_defaults()
        assert first is not second
        assert first == second


class TestGet:
    """Tests for the dot-notation accessor."""

    def test_nested_key(self) -> None:
        """Access a nested value."""
        assert config.get("statuses.passed") == "passed"

    def test_missing_key_raises(self) -> None:
        """Missing key raises KeyError naming the key."""
        with pytest.raises(KeyError, match="nonexistent"):
            config.get("nonexistent.key")

    def test_path_through_scalar_raises(self) -> None:
        """Descending into a scalar raises KeyError."""
        with pytest.raises(KeyError):
            config.get("statuses.passed.deeper")


class TestTypedAccessors:
    """Tests for get_str, get_int, get_list, get_dict."""

    def test_get_str(self) -> None:
        """get_str returns a string."""
        assert config.get_str("project.config_filename") == ".importgate.yaml"

    def test_severity_keys_are_strings(self) -> None:
        """Every severity name is a string key, `off` included."""
        assert config.get_str("severities.off") == "off"
        assert all(isinstance(key, str) for key in config.get_dict("severities"))

    def test_get_str_wrong_type(self) -> None:
        """get_str raises TypeError when value is not a string."""
        with pytest.raises(TypeError, match="Expected str"):
            config.get_str("statuses")

    def test_get_int(self) -> None:
        """Exit codes are integers."""
        assert config.get_int("exit_codes.ok") == 0
        assert config.get_int("exit_codes.blocked") == 1
        assert config.get_int("exit_codes.error") == 2

    def test_get_int_rejects_bool(self) -> None:
        """A boolean never satisfies an int lookup."""
        with pytest.raises(TypeError, match="Expected int"):
            config.get_int("defaults.enabled")

    def test_get_list(self) -> None:
        """get_list returns a list."""
        assert ".ts" in config.get_list("scope.extensions")

    def test_get_dict(self) -> None:
        """get_dict returns a mapping."""
        assert "abz" in config.get_dict("violations")

    def test_get_list_wrong_type(self) -> None:
        """get_list raises TypeError on a scalar."""
        with pytest.raises(TypeError, match="Expected list"):
            config.get_list("statuses.passed")


class TestMessage:
    """Tests for message template formatting."""

    def test_fills_placeholders(self) -> None:
        """Placeholders are formatted from keyword arguments."""
        assert config.message("violations.remove_extra_line_above", count=3) == (
            "Remove 3 extra line above"
        )

    def test_unused_fields_ignored(self) -> None:
        """Templates without placeholders ignore extra fields."""
        assert config.message("violations.line_above", count=0) == "Insert line above"

    def test_every_violation_template_formats(self) -> None:
        """Every violation template accepts a count."""
        for key in config.get_dict("violations"):
            assert config.message(f"violations.{key}", count=1)
