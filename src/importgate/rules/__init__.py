"""Built-in importgate rules.

Each rule is a module exposing ``RULE_ID``, ``compile_options`` and
``check``; :mod:`importgate.lib.checks` dispatches on the rule id.
"""
