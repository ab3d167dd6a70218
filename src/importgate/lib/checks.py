"""checks — rule dispatch and evaluation against a SourceAnalyzer.

Each rule is a module implementing the same small protocol::

    RULE_ID: str
    def compile_options(options: dict) -> compiled
    def check(analyzer: SourceAnalyzer, compiled) -> list[Violation]

``compile_rule()`` runs once per configuration load and ``run_check()`` once
per rule and file.  New rules only need a module and an entry in
``_RULES``.
"""

from __future__ import annotations

import dataclasses
import sys
from types import ModuleType
from typing import Any, Optional

from importgate.lib import config
from importgate.lib.analyzer import SourceAnalyzer
from importgate.lib.models import RuleEntry, Violation
from importgate.rules import import_group_order

_RULES: dict[str, ModuleType] = {
    import_group_order.RULE_ID: import_group_order,
}


def known_rules() -> list[str]:
    return sorted(_RULES)


def get_rule(rule_id: str) -> Optional[ModuleType]:
    return _RULES.get(rule_id)


def compile_rule(rule_id: str, options: Any) -> Any:
    """Compile a rule's options.

    Raises:
        KeyError: If the rule id is unknown.
        ConfigurationError: If the options are malformed.
    """
    return _RULES[rule_id].compile_options(options)


def run_check(rule: RuleEntry, analyzer: SourceAnalyzer) -> list[Violation]:
    """Run one compiled rule against a parsed file.

    Args:
        rule: Resolved rule with compiled options.
        analyzer: The SourceAnalyzer for the file being checked.

    Returns:
        Violations tagged with the rule id and severity.  An unknown rule
        id is reported on stderr and yields no violations.
    """
    module = _RULES.get(rule.rule_id)
    if module is None:
        sys.stderr.write(config.message("messages.unknown_rule", rule_id=rule.rule_id) + "\n")
        return []
    violations = module.check(analyzer, rule.compiled)
    return [
        dataclasses.replace(v, rule_id=rule.rule_id, severity=rule.severity)
        for v in violations
    ]
