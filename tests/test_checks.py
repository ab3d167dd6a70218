"""Unit tests for importgate.lib.checks rule dispatch."""

from __future__ import annotations

import pytest

from importgate.lib.analyzer import SourceAnalyzer
from importgate.lib.checks import compile_rule, get_rule, known_rules, run_check
from importgate.lib.models import RuleEntry
from importgate.rules import import_group_order

from conftest import PROJECT_OPTIONS


class TestRuleTable:
    """Tests for the rule table."""

    def test_known_rules(self) -> None:
        """The import-group-order rule is registered."""
        assert known_rules() == ["import-group-order"]
        assert get_rule("import-group-order") is import_group_order

    def test_unknown_rule(self) -> None:
        """Unknown ids are not rules."""
        assert get_rule("no-such-rule") is None
        with pytest.raises(KeyError):
            compile_rule("no-such-rule", {})


class TestRunCheck:
    """Tests for run_check."""

    def test_tags_violations(self) -> None:
        """Violations carry the rule id and severity."""
        rule = RuleEntry(
            rule_id="import-group-order",
            severity="warn",
            enabled=True,
            compiled=compile_rule("import-group-order", PROJECT_OPTIONS),
        )
        analyzer = SourceAnalyzer("import b from './b';\nimport a from './a';\n", "a.ts")
        violations = run_check(rule, analyzer)
        assert [v.kind.name for v in violations] == ["ABZ", "FATAL"]
        assert {v.rule_id for v in violations} == {"import-group-order"}
        assert {v.severity for v in violations} == {"warn"}

    def test_unknown_rule_reported(self, capsys) -> None:
        """An unknown rule yields nothing and a note on stderr."""
        rule = RuleEntry(rule_id="no-such-rule", severity="block", enabled=True)
        analyzer = SourceAnalyzer("import a from 'a';\n", "a.ts")
        assert run_check(rule, analyzer) == []
        assert "no-such-rule" in capsys.readouterr().err
