"""Unit tests for importgate.lib.rules project configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from importgate.exceptions import ConfigurationError
from importgate.lib.recognizer import Convention
from importgate.lib.rules import (
    build_project_config,
    find_project_config,
    load_project_config,
    load_project_config_string,
    load_settings,
    resolve_rules,
)

from conftest import SIMPLE_OPTIONS


class TestFindProjectConfig:
    """Tests for config discovery."""

    def test_walks_up(self, tmp_project: Path) -> None:
        """A config in a parent directory is found from a nested file."""
        nested = tmp_project / "src" / "features" / "cart"
        nested.mkdir(parents=True)
        source = nested / "index.ts"
        source.write_text("export {};\n")
        assert find_project_config(source) == (tmp_project / ".importgate.yaml").resolve()
        assert find_project_config(nested) == (tmp_project / ".importgate.yaml").resolve()

    def test_env_override(self, tmp_path: Path, monkeypatch) -> None:
        """$IMPORTGATE_CONFIG wins over discovery."""
        explicit = tmp_path / "custom.yaml"
        monkeypatch.setenv("IMPORTGATE_CONFIG", str(explicit))
        assert find_project_config(tmp_path) == explicit

    def test_load_settings_none_without_file(self, tmp_path: Path, monkeypatch) -> None:
        """A missing override file means no settings."""
        monkeypatch.setenv("IMPORTGATE_CONFIG", str(tmp_path / "missing.yaml"))
        assert load_settings(tmp_path) is None


class TestLoadProjectConfig:
    """Tests for loading and compiling a project config."""

    def test_compiles_rules(self, tmp_project: Path) -> None:
        """Enabled rules carry a compiled convention."""
        settings = load_project_config(tmp_project / ".importgate.yaml")
        (rule,) = settings.active_rules
        assert rule.rule_id == "import-group-order"
        assert rule.severity == "block"
        assert isinstance(rule.compiled, Convention)
        assert rule.compiled.reference == "See docs/imports.md"
        assert settings.path.endswith(".importgate.yaml")

    def test_load_settings_discovers(self, tmp_project: Path) -> None:
        """load_settings finds and compiles the governing config."""
        settings = load_settings(tmp_project)
        assert settings is not None
        assert settings.scope.exempt_paths == ("node_modules/",)

    def test_defaults_applied(self) -> None:
        """A rule with no settings is a blocking rule."""
        settings = load_project_config_string(
            "rules:\n  import-group-order:\n    options:\n      convention: [a]\n"
        )
        (rule,) = settings.rules
        assert rule.severity == "block"
        assert rule.enabled is True

    def test_severity_off_is_kept_but_not_compiled(self, project_config_data) -> None:
        """`severity: "off"` resolves through the packaged defaults."""
        project_config_data["rules"]["import-group-order"]["severity"] = "off"
        settings = build_project_config(project_config_data)
        (rule,) = settings.rules
        assert rule.severity == "off"
        assert rule.compiled is None
        assert not rule.active

    def test_resolve_rules_with_packaged_defaults(self) -> None:
        """The shipped severities table is usable as loaded."""
        (rule,) = resolve_rules({"import-group-order": {"severity": "block", "options": SIMPLE_OPTIONS}})
        assert rule.active
        assert isinstance(rule.compiled, Convention)

    def test_disabled_rule_not_compiled(self, project_config_data) -> None:
        """Disabled rules are kept but never compiled."""
        project_config_data["rules"]["import-group-order"]["enabled"] = False
        project_config_data["rules"]["import-group-order"]["options"] = {"convention": "broken"}
        settings = build_project_config(project_config_data)
        (rule,) = settings.rules
        assert rule.compiled is None
        assert settings.active_rules == ()

    def test_unknown_rule_skipped(self, project_config_data, capsys) -> None:
        """Unknown rule ids are reported and ignored."""
        project_config_data["rules"]["no-such-rule"] = {"severity": "warn"}
        settings = build_project_config(project_config_data)
        assert [r.rule_id for r in settings.rules] == ["import-group-order"]
        assert "no-such-rule" in capsys.readouterr().err

    def test_malformed_options(self, project_config_data) -> None:
        """A bad convention aborts the load and names the rule."""
        project_config_data["rules"]["import-group-order"]["options"]["convention"] = "a,b"
        with pytest.raises(ConfigurationError) as exc_info:
            build_project_config(project_config_data)
        assert exc_info.value.errors == [
            "rules.import-group-order: 'convention' has to be an array!"
        ]

    def test_shape_errors(self) -> None:
        """Shape problems are all reported together."""
        with pytest.raises(ConfigurationError) as exc_info:
            build_project_config({"rules": [], "logging": 1})
        assert len(exc_info.value.errors) == 2

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Unparsable files are configuration errors."""
        path = tmp_path / ".importgate.yaml"
        path.write_text("rules: [\n")
        with pytest.raises(ConfigurationError):
            load_project_config(path)

    def test_round_trip_through_yaml(self, tmp_path: Path, project_config_data) -> None:
        """null slots survive YAML."""
        path = tmp_path / ".importgate.yaml"
        path.write_text(yaml.safe_dump(project_config_data))
        (rule,) = load_project_config(path).rules
        assert rule.compiled.slots == ("external", None, "internal", None, "relative", "unspecified")
