"""Shared fixtures for the importgate test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import pytest
import yaml

from importgate.lib import config
from importgate.lib.analyzer import SourceAnalyzer
from importgate.lib.autofix import apply_fixes
from importgate.lib.models import Violation
from importgate.lib.recognizer import Convention, compile_convention
from importgate.lib.validator import validate


FIXTURES_DIR = Path(__file__).parent / "fixtures"
PASSING_DIR = FIXTURES_DIR / "passing"
FAILING_DIR = FIXTURES_DIR / "failing"
EDGE_CASES_DIR = FIXTURES_DIR / "edge_cases"

# external / internal / relative, with a blank line between each group.
PROJECT_OPTIONS: dict[str, Any] = {
    "convention": ["external", None, "internal", None, "relative"],
    "recognizer": {
        "external": "^[a-z]",
        "internal": "^@app/",
        "relative": "^\\.",
    },
}

# The two-group convention used throughout the documentation examples.
SIMPLE_OPTIONS: dict[str, Any] = {
    "convention": ["ext", None, "int"],
    "recognizer": {"ext": "^lib", "int": "^\\./"},
}


def run_rule(
    source: str,
    options: Optional[dict[str, Any]] = None,
    filepath: str = "src/module.ts",
) -> list[Violation]:
    """Parse ``source`` and validate it against a convention."""
    convention = compile_convention(options or SIMPLE_OPTIONS)
    analyzer = SourceAnalyzer(source, filepath)
    return validate(
        analyzer.statements,
        analyzer.source,
        convention,
        banner_end=analyzer.banner_end,
        locate=analyzer.line_col,
    )


def fix(source: str, options: Optional[dict[str, Any]] = None, filepath: str = "src/module.ts") -> str:
    """Apply the fixes ``run_rule`` produces."""
    return apply_fixes(source, run_rule(source, options, filepath))


def kinds(violations: list[Violation]) -> list[str]:
    return [v.kind.name for v in violations]


@pytest.fixture(autouse=True)
def _fresh_defaults():
    """Reload defaults.yaml for every test."""
    config.reset()
    yield
    config.reset()


@pytest.fixture()
def project_convention() -> Convention:
    return compile_convention(PROJECT_OPTIONS)


@pytest.fixture()
def project_config_data() -> dict[str, Any]:
    """Return a complete .importgate.yaml mapping."""
    return {
        "rules": {
            "import-group-order": {
                "severity": "block",
                "options": dict(PROJECT_OPTIONS, reference="See docs/imports.md"),
            }
        },
        "scope": {"exempt_paths": ["node_modules/"]},
        "logging": {"enabled": False},
    }


@pytest.fixture()
def tmp_project(tmp_path: Path, project_config_data: dict[str, Any], monkeypatch) -> Path:
    """Create a temporary project directory with a .importgate.yaml."""
    monkeypatch.delenv("IMPORTGATE_CONFIG", raising=False)
    with open(tmp_path / ".importgate.yaml", "w", encoding="utf-8") as fh:
        yaml.safe_dump(project_config_data, fh, default_flow_style=False)
    return tmp_path


@pytest.fixture()
def passing_source() -> str:
    """Return a file whose imports already follow the project convention."""
    return (PASSING_DIR / "canonical.ts").read_text(encoding="utf-8")


@pytest.fixture()
def unordered_source() -> str:
    """Return a file breaking every ordering rule at once."""
    return (FAILING_DIR / "unordered.ts").read_text(encoding="utf-8")


@pytest.fixture()
def unordered_fixed_source() -> str:
    """Return the expected autofix output for ``unordered_source``."""
    return (FAILING_DIR / "unordered.fixed.ts").read_text(encoding="utf-8")


@pytest.fixture()
def scattered_source() -> str:
    """Return a file with an import after a regular statement."""
    return (FAILING_DIR / "scattered.ts").read_text(encoding="utf-8")
