"""Configuration management for changelog-py."""

from __future__ import annotations

from changelog_py.config.loader import get_project_version, load_config
from changelog_py.config.models import (
    ChangelogPyConfig,
    GitRawCommitsOptions,
    ParserOptions,
    WriterOptions,
)

__all__ = [
    "ChangelogPyConfig",
    "GitRawCommitsOptions",
    "ParserOptions",
    "WriterOptions",
    "get_project_version",
    "load_config",
]
