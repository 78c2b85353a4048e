"""Loading configuration from pyproject.toml."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from changelog_py.config.models import ChangelogPyConfig
from changelog_py.exceptions import ConfigNotFoundError, ConfigValidationError

CONFIG_SECTION = "changelog-py"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml in ``start`` or any of its parents.

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the filesystem root
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or its parents")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"File not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_changelog_py_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.changelog-py]`` table, or an empty dict."""
    return pyproject.get("tool", {}).get(CONFIG_SECTION, {})


def load_config(path: Path | None = None) -> ChangelogPyConfig:
    """Load and validate configuration for the project at ``path``.

    Missing configuration sections fall back to defaults.

    Raises:
        ConfigNotFoundError: If no pyproject.toml can be found
        ConfigValidationError: If the configuration is invalid
    """
    pyproject_path = find_pyproject_toml(path)
    raw = extract_changelog_py_config(load_pyproject_toml(pyproject_path))
    try:
        return ChangelogPyConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid [tool.{CONFIG_SECTION}] configuration:\n{e}") from e


def get_project_version(path: Path | None = None) -> str:
    """Read ``[project].version`` (or ``[tool.poetry].version``).

    Raises:
        ConfigValidationError: If no static version is declared
    """
    pyproject_path = find_pyproject_toml(path)
    data = load_pyproject_toml(pyproject_path)

    version = data.get("project", {}).get("version")
    if version is None:
        version = data.get("tool", {}).get("poetry", {}).get("version")
    if not version:
        raise ConfigValidationError(
            f"Could not find version in {pyproject_path}. "
            "Expected [project].version or [tool.poetry].version."
        )
    return str(version)
