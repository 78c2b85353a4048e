"""Configuration models for changelog-py.

The configuration lives under ``[tool.changelog-py]`` in pyproject.toml::

    [tool.changelog-py]
    preset = "angular"
    infile = "CHANGELOG.md"
    header = "# Changelog"
    tag_prefix = "v"

    [tool.changelog-py.writer_opts]
    commits_sort = "subject"
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from changelog_py.core.tags import tag_template_from_config

DEFAULT_NOTE_KEYWORDS = ["BREAKING CHANGE", "BREAKING-CHANGE"]


class GitRawCommitsOptions(BaseModel):
    """Options narrowing the commit range read from git."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    from_ref: str | None = Field(default=None, alias="from")
    to_ref: str | None = Field(default=None, alias="to")
    path: str | list[str] | None = None

    @property
    def paths(self) -> list[str]:
        if self.path is None:
            return []
        if isinstance(self.path, str):
            return [self.path]
        return list(self.path)


class ParserOptions(BaseModel):
    """Options for the conventional commit parser."""

    model_config = ConfigDict(extra="forbid")

    note_keywords: list[str] = Field(default_factory=lambda: list(DEFAULT_NOTE_KEYWORDS))
    scope_regex: str | None = None
    """Only keep commits whose scope matches this regex."""


class WriterOptions(BaseModel):
    """Template overrides and ordering for the changelog renderer."""

    model_config = ConfigDict(extra="forbid")

    main_template: str | None = None
    header_partial: str | None = None
    commit_partial: str | None = None
    footer_partial: str | None = None
    commits_sort: Literal["scope", "subject"] | None = "scope"


class ChangelogPyConfig(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid")

    preset: Literal[False] | str | dict[str, Any] | None = "angular"
    infile: Path | None = Path("CHANGELOG.md")
    header: str | None = "# Changelog"
    tag_name: str | None = None
    tag_prefix: str | None = None
    ignore_recommended_bump: bool = False
    strict_semver: bool = False
    what_bump: Literal[False] | str | None = None
    context: dict[str, Any] = Field(default_factory=dict)
    git_raw_commits_opts: GitRawCommitsOptions = Field(default_factory=GitRawCommitsOptions)
    parser_opts: ParserOptions = Field(default_factory=ParserOptions)
    writer_opts: WriterOptions = Field(default_factory=WriterOptions)
    release_count: int = Field(default=1, ge=0)

    @field_validator("infile", mode="before")
    @classmethod
    def _disable_infile(cls, value: Any) -> Any:
        if value is False or value == "":
            return None
        return value

    @field_validator("tag_name")
    @classmethod
    def _check_placeholder(cls, value: str | None) -> str | None:
        if value is not None and "${version}" not in value:
            raise ValueError("tag_name must contain the ${version} placeholder")
        return value

    @property
    def tag_template(self) -> str | None:
        """Tag template from ``tag_name``/``tag_prefix``, None to infer it."""
        return tag_template_from_config(self.tag_name, self.tag_prefix)
