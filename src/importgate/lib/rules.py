"""rules — project configuration discovery, validation and rule compilation.

A project is configured by ``.importgate.yaml``, found by walking up from
the checked path (or named explicitly with ``$IMPORTGATE_CONFIG``).  The
file is shape-checked with ``validate_project_config`` and then every
configured rule is resolved into a ``RuleEntry`` whose options are compiled
by the rule module itself.

Design notes:
    Compilation happens once per load, before any file is analyzed.  Any
    malformed rule aborts the whole load with a ``ConfigurationError``
    carrying every problem found, so a bad convention is never applied to
    half of a repository.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Optional, Union

from importgate._paths import config_override, find_upwards
from importgate.exceptions import ConfigurationError
from importgate.lib import checks, config
from importgate.lib.models import (
    LoggingConfig,
    ProjectConfig,
    RuleEntry,
    ScopeConfig,
    validate_project_config,
)
from importgate.lib.yaml_loader import load_yaml, load_yaml_string


def find_project_config(start: Union[str, Path] = ".") -> Optional[Path]:
    """Locate the ``.importgate.yaml`` that governs ``start``.

    ``$IMPORTGATE_CONFIG`` wins when set; otherwise ``start`` and its
    parents are searched.

    Returns:
        The config path, or None if there is none.
    """
    override = config_override()
    if override is not None:
        return override
    return find_upwards(Path(start), config.get_str("project.config_filename"))


def resolve_rules(rules_data: dict[str, Any]) -> tuple[RuleEntry, ...]:
    """Resolve the ``rules`` section into compiled rule entries.

    Unknown rule ids are reported on stderr and skipped.  Disabled rules
    are kept (for ``show-config``) but never compiled.

    Raises:
        ConfigurationError: If any enabled rule has malformed options.
    """
    default_severity = config.get_str("defaults.severity")
    default_enabled = config.get("defaults.enabled")
    sev_off = config.get_str("severities.off")

    resolved: list[RuleEntry] = []
    errors: list[str] = []
    for rule_id, entry in rules_data.items():
        entry = entry or {}
        if checks.get_rule(rule_id) is None:
            sys.stderr.write(config.message("messages.unknown_rule", rule_id=rule_id) + "\n")
            continue

        severity = entry.get("severity", default_severity)
        enabled = entry.get("enabled", default_enabled)
        options = entry.get("options") or {}

        compiled = None
        if enabled and severity != sev_off:
            try:
                compiled = checks.compile_rule(rule_id, options)
            except ConfigurationError as exc:
                errors.extend(f"rules.{rule_id}: {e}" for e in exc.errors)
                continue

        resolved.append(
            RuleEntry(
                rule_id=rule_id,
                severity=severity,
                enabled=enabled,
                options=options,
                compiled=compiled,
            )
        )

    if errors:
        raise ConfigurationError(errors[0], errors)
    return tuple(resolved)


def build_project_config(data: Any, path: str = "") -> ProjectConfig:
    """Validate raw config data and compile it into a ``ProjectConfig``.

    Args:
        data: Parsed ``.importgate.yaml`` content.
        path: Where it was read from, for messages.

    Raises:
        ConfigurationError: If the shape is wrong or any rule fails to compile.
    """
    errors = validate_project_config(data)
    if errors:
        raise ConfigurationError(errors[0], errors)

    return ProjectConfig(
        rules=resolve_rules(data["rules"]),
        scope=ScopeConfig.from_dict(data.get("scope") or {}),
        logging=LoggingConfig.from_dict(data.get("logging") or {}),
        path=path,
    )


def load_project_config(path: Union[str, Path]) -> ProjectConfig:
    """Load and compile a ``.importgate.yaml`` file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If it is malformed.
    """
    return build_project_config(load_yaml(str(path)), str(path))


def load_project_config_string(text: str) -> ProjectConfig:
    """Load and compile project configuration from a YAML string."""
    return build_project_config(load_yaml_string(text))


def load_settings(start: Union[str, Path] = ".") -> Optional[ProjectConfig]:
    """Discover and load the configuration governing ``start``.

    Returns:
        The compiled configuration, or None when no config file exists.

    Raises:
        ConfigurationError: If the discovered file is malformed.
    """
    path = find_project_config(start)
    if path is None or not path.is_file():
        return None
    return load_project_config(path)
