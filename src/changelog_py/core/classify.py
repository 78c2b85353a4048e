"""Bump recommendation from the commits since the last release tag."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import TYPE_CHECKING

from changelog_py.core.commits import parse_commits
from changelog_py.core.presets import RELEASE_LEVELS, BumpRecommendation, load_ruleset
from changelog_py.core.tags import discover_tags
from changelog_py.exceptions import ChangelogPyError, ClassificationError
from changelog_py.logging import get_logger

if TYPE_CHECKING:
    from changelog_py.config.models import GitRawCommitsOptions, ParserOptions
    from changelog_py.core.commits import ParsedCommit
    from changelog_py.core.presets import Preset, Ruleset
    from changelog_py.vcs.git import GitRepository

logger = get_logger(__name__)


class CommitClassifier:
    """Classifies the commits of a repository with a preset's rules.

    The preset is resolved on construction, so an unknown preset name
    fails before any git command runs.

    Raises:
        UnknownPresetError: If the preset cannot be loaded
    """

    def __init__(
        self,
        preset: Preset,
        repo: GitRepository,
        *,
        tag_template: str | None = None,
        parser_options: ParserOptions | None = None,
        git_options: GitRawCommitsOptions | None = None,
    ) -> None:
        self.ruleset: Ruleset = load_ruleset(preset)
        self.repo = repo
        self.tag_template = tag_template
        self.parser_options = parser_options
        self.git_options = git_options

    async def latest_tag(self, *, skip_unstable: bool = False) -> str | None:
        """Most recent release tag, optionally ignoring pre-release tags."""
        tags = await discover_tags(self.repo, self.tag_template, skip_unstable=skip_unstable)
        return tags[0] if tags else None

    async def commits_since(self, tag: str | None) -> list[ParsedCommit]:
        paths = self.git_options.paths if self.git_options else []
        commits = await asyncio.to_thread(self.repo.get_commits, tag, None, paths)
        return parse_commits(commits, self.parser_options)

    async def recommend(self, *, skip_unstable: bool = False) -> BumpRecommendation:
        """Recommend a bump for the commits since the latest release tag.

        Args:
            skip_unstable: Measure from the latest stable tag instead,
                           ignoring pre-release tags

        Raises:
            ClassificationError: If the preset's rules fail
            GitError: If reading tags or commits fails
        """
        tag = await self.latest_tag(skip_unstable=skip_unstable)
        commits = await self.commits_since(tag)
        recommendation = self.apply(commits)
        logger.debug(
            "Classified commits",
            preset=self.ruleset.name,
            since=tag,
            skip_unstable=skip_unstable,
            commits=len(commits),
            release_type=recommendation.release_type,
            reason=recommendation.reason,
        )
        return recommendation

    def apply(self, commits: list[ParsedCommit]) -> BumpRecommendation:
        """Run the ruleset's ``what_bump`` and normalize its result."""
        try:
            result = self.ruleset.what_bump(commits)
            return _normalize(result)
        except ChangelogPyError:
            raise
        except Exception as e:
            raise ClassificationError(f"Commit analysis failed: {e}") from e


def _normalize(result: object) -> BumpRecommendation:
    """Accept a BumpRecommendation, a mapping, or None from ``what_bump``."""
    if result is None:
        return BumpRecommendation(release_type=None)
    if isinstance(result, BumpRecommendation):
        return result
    if isinstance(result, Mapping):
        reason = str(result.get("reason", ""))
        if "release_type" in result:
            release_type = result["release_type"]
            if release_type is not None and release_type not in RELEASE_LEVELS:
                raise ClassificationError(f"Invalid release type {release_type!r}")
            return BumpRecommendation(
                release_type=release_type,
                reason=reason,
                level=RELEASE_LEVELS.index(release_type) if release_type else None,
            )
        return BumpRecommendation.from_level(result.get("level"), reason)
    raise ClassificationError(
        f"what_bump returned {type(result).__name__}, expected a recommendation or None"
    )
