"""yaml_loader — unified YAML loading for importgate configuration files.

Wraps PyYAML's ``safe_load`` behind a single entry point shared by the
engine, the CLI and the project-config resolver, so encoding and safe-parsing
choices live in one place.  PyYAML is a required dependency; no fallback
parser is provided.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

import yaml

from importgate.exceptions import ConfigurationError


def load_yaml(path: Union[str, Path]) -> Optional[dict[str, Any]]:
    """Load a YAML file and return its contents.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML contents, or None if the file is empty.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the file contains invalid YAML.
    """
    with open(path, "r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"{path}: {exc}") from exc


def load_yaml_string(text: str) -> Optional[dict[str, Any]]:
    """Parse a YAML string and return its contents.

    Raises:
        ConfigurationError: If the string contains invalid YAML.
    """
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(str(exc)) from exc
