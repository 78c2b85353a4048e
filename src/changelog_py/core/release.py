"""The changelog step of a release run.

:class:`ChangelogPlugin` ties the stages together in the order a host
release tool calls them::

    plugin = ChangelogPlugin(config, repo)
    ctx = await plugin.init_context(ReleaseOptions(increment="minor"))
    ctx = await plugin.get_incremented_version(ctx)
    ctx = plugin.resolve(ctx)
    ctx = await plugin.before_release(ctx, dry_run=False)

or all at once with :meth:`ChangelogPlugin.run`. Each stage takes the
:class:`~changelog_py.core.context.ReleaseContext` returned by the
previous one.
"""

from __future__ import annotations

import asyncio
from dataclasses import asdict, dataclass, replace
from functools import cached_property
from typing import TYPE_CHECKING

from changelog_py.core.changelog import assemble_changelog
from changelog_py.core.classify import CommitClassifier
from changelog_py.core.context import Increment, ReleaseContext
from changelog_py.core.merge import persist_changelog
from changelog_py.core.presets import preset_from_config
from changelog_py.core.recommend import recommend_version
from changelog_py.core.tags import (
    default_tag_template,
    discover_tags,
    resolve_tags,
    version_from_tag,
)
from changelog_py.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from changelog_py.config.models import ChangelogPyConfig
    from changelog_py.vcs.git import GitRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReleaseOptions:
    """What the host release tool asks for.

    Attributes:
        latest_version: Version of the latest release; read from the latest
                        tag when None
        increment: None to follow the recommendation, False to keep the
                   latest version, a bump kind or a literal version
        is_pre_release: Whether to produce a pre-release
        pre_release_id: Pre-release identifier such as "alpha" or "rc"
        initial_version: Latest version assumed when no release tag exists
    """

    latest_version: str | None = None
    increment: Increment = None
    is_pre_release: bool = False
    pre_release_id: str | None = None
    initial_version: str = "0.0.0"


class ChangelogPlugin:
    """Version recommendation and changelog generation for one repository."""

    def __init__(self, config: ChangelogPyConfig, repo: GitRepository) -> None:
        self.config = config
        self.repo = repo

    @cached_property
    def classifier(self) -> CommitClassifier:
        """Classifier for the configured preset.

        Raises:
            UnknownPresetError: If the preset does not exist
            ConfigurationError: If ``what_bump`` cannot be imported
        """
        preset = preset_from_config(self.config.preset, self.config.what_bump)
        return CommitClassifier(
            preset,
            self.repo,
            tag_template=self.config.tag_template,
            parser_options=self.config.parser_opts,
            git_options=self.config.git_raw_commits_opts,
        )

    @property
    def infile(self) -> Path | None:
        infile = self.config.infile
        if not infile:
            return None
        return infile if infile.is_absolute() else self.repo.path / infile

    async def init_context(self, options: ReleaseOptions) -> ReleaseContext:
        """Start a run: discover tags and the latest released version."""
        tags = await discover_tags(self.repo, self.config.tag_template)
        latest_tag = tags[0] if tags else None
        second_latest_tag = tags[1] if len(tags) > 1 else None

        latest_version = options.latest_version
        if latest_version is None and latest_tag is not None:
            template = self.config.tag_template or default_tag_template(latest_tag)
            latest_version = version_from_tag(latest_tag, template)

        ctx = ReleaseContext(
            latest_version=latest_version or options.initial_version,
            latest_tag=latest_tag,
            second_latest_tag=second_latest_tag,
            increment=options.increment,
            is_pre_release=options.is_pre_release,
            pre_release_id=options.pre_release_id,
        )
        logger.debug("Release context", **asdict(ctx))
        return ctx

    async def get_incremented_version(self, ctx: ReleaseContext) -> ReleaseContext:
        """Resolve the release version into the context."""
        version = await recommend_version(
            ctx,
            self.classifier,
            strict_semver=self.config.strict_semver,
            ignore_recommended_bump=self.config.ignore_recommended_bump,
        )
        return replace(ctx, version=version)

    def resolve(self, ctx: ReleaseContext) -> ReleaseContext:
        """Resolve the previous/current comparison tags into the context."""
        pair = resolve_tags(
            is_incrementing=ctx.is_incrementing,
            version=ctx.version,
            latest_tag=ctx.latest_tag,
            second_latest_tag=ctx.second_latest_tag,
            tag_template=self.config.tag_template,
        )
        return replace(ctx, previous_tag=pair.previous_tag, current_tag=pair.current_tag)

    async def get_changelog(
        self,
        ctx: ReleaseContext,
        *,
        release_count: int | None = None,
    ) -> str:
        """Render the changelog text for the context's release range."""
        return await assemble_changelog(
            ctx,
            self.repo,
            self.classifier.ruleset,
            self.config,
            release_count=release_count,
        )

    async def write_changelog(self, ctx: ReleaseContext) -> bool:
        """Merge the context's changelog into the infile.

        A missing infile is created with the whole project history and
        staged in git.

        Returns:
            True if the infile was created
        """
        path = self.infile
        if path is None:
            return False

        is_new = await persist_changelog(
            path,
            ctx.changelog or "",
            self.config.header,
            full_history=lambda: self.get_changelog(ctx, release_count=0),
        )
        if is_new:
            await asyncio.to_thread(self.repo.add, path)
        return is_new

    async def before_release(
        self,
        ctx: ReleaseContext,
        *,
        dry_run: bool = False,
    ) -> ReleaseContext:
        """Render the changelog and, unless disabled or dry-running, write it."""
        changelog = await self.get_changelog(ctx)
        ctx = replace(ctx, changelog=changelog)
        logger.debug("Rendered changelog", changelog=changelog)

        path = self.infile
        if path is None:
            return ctx

        logger.info(f"Writing changelog to {self.config.infile}", dry_run=dry_run)
        if dry_run:
            return ctx
        is_new = await self.write_changelog(ctx)
        return replace(ctx, is_new_infile=is_new)

    async def run(self, options: ReleaseOptions, *, dry_run: bool = False) -> ReleaseContext:
        """Run the whole changelog step.

        Stops after the recommendation when no release is warranted:
        nothing is rendered or written then.
        """
        ctx = await self.init_context(options)
        ctx = await self.get_incremented_version(ctx)
        if ctx.version is None:
            logger.info("No release recommended", latest_version=ctx.latest_version)
            return ctx
        ctx = self.resolve(ctx)
        return await self.before_release(ctx, dry_run=dry_run)
