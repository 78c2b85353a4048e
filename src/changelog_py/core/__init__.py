"""Core business logic for changelog-py.

This module contains the fundamental building blocks:
- Semantic version incrementing, including pre-release sequences
- Conventional commit parsing and bump classification presets
- Tag templates and comparison tag resolution
- Changelog rendering and merging into the changelog file
- The release run tying the stages together
"""

from __future__ import annotations

from changelog_py.core.changelog import assemble_changelog, render_changelog
from changelog_py.core.classify import CommitClassifier
from changelog_py.core.commits import ParsedCommit, parse_commits
from changelog_py.core.context import ReleaseContext
from changelog_py.core.merge import merge_changelog, persist_changelog
from changelog_py.core.presets import (
    BumpRecommendation,
    Configured,
    Custom,
    Disabled,
    Named,
    Preset,
    load_ruleset,
)
from changelog_py.core.recommend import recommend_version
from changelog_py.core.release import ChangelogPlugin, ReleaseOptions
from changelog_py.core.tags import TagPair, render_tag_template, resolve_tags
from changelog_py.core.version import BumpType, increment

__all__ = [
    "BumpRecommendation",
    "BumpType",
    "ChangelogPlugin",
    "CommitClassifier",
    "Configured",
    "Custom",
    "Disabled",
    "Named",
    "ParsedCommit",
    "Preset",
    "ReleaseContext",
    "ReleaseOptions",
    "TagPair",
    "assemble_changelog",
    "increment",
    "load_ruleset",
    "merge_changelog",
    "parse_commits",
    "persist_changelog",
    "recommend_version",
    "render_changelog",
    "render_tag_template",
    "resolve_tags",
]
