"""Changelog rendering.

Renders one markdown section per release range with jinja2 and streams
the sections as they are produced. :func:`assemble_changelog` drains the
stream into the final changelog text.

The range of the release being prepared runs from the previous tag to
HEAD (or to the current tag when the release already exists). Older
ranges are only rendered when ``release_count`` asks for them, with
``release_count = 0`` covering the whole history.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import jinja2

from changelog_py.core.commits import parse_commits
from changelog_py.core.tags import default_tag_template, discover_tags, version_from_tag
from changelog_py.core.templates import build_environment
from changelog_py.exceptions import GitError, RenderingError
from changelog_py.logging import get_logger

if TYPE_CHECKING:
    from changelog_py.config.models import ChangelogPyConfig
    from changelog_py.core.commits import ParsedCommit
    from changelog_py.core.context import ReleaseContext
    from changelog_py.core.presets import Ruleset
    from changelog_py.vcs.git import GitRepository

logger = get_logger(__name__)

_BLANK_LINES_RE = re.compile(r"\n{3,}")


@dataclass(frozen=True)
class ReleaseRange:
    """Commits belonging to one release section.

    Attributes:
        version: Version shown in the heading
        previous_tag: Tag the range starts after, None for the first release
        current_tag: Tag shown in the compare link
        from_ref: Exclusive git ref the commits are read from
        to_ref: Inclusive git ref the commits are read up to, None for HEAD
    """

    version: str
    previous_tag: str | None
    current_tag: str | None
    from_ref: str | None
    to_ref: str | None


async def release_ranges(
    ctx: ReleaseContext,
    repo: GitRepository,
    config: ChangelogPyConfig,
    release_count: int,
) -> list[ReleaseRange]:
    """Work out which release ranges to render, newest first."""
    git_options = config.git_raw_commits_opts
    to_ref = ctx.current_tag if not ctx.is_incrementing else None
    ranges = [
        ReleaseRange(
            version=ctx.version or ctx.latest_version,
            previous_tag=ctx.previous_tag,
            current_tag=ctx.current_tag,
            from_ref=git_options.from_ref or ctx.previous_tag,
            to_ref=git_options.to_ref or to_ref,
        )
    ]
    if release_count == 1 or ctx.previous_tag is None:
        return ranges

    tags = await discover_tags(repo, config.tag_template)
    if ctx.previous_tag not in tags:
        return ranges

    start = tags.index(ctx.previous_tag)
    for index in range(start, len(tags)):
        if release_count and len(ranges) >= release_count:
            break
        tag = tags[index]
        previous = tags[index + 1] if index + 1 < len(tags) else None
        template = config.tag_template or default_tag_template(tag)
        ranges.append(
            ReleaseRange(
                version=version_from_tag(tag, template) or tag,
                previous_tag=previous,
                current_tag=tag,
                from_ref=previous,
                to_ref=tag,
            )
        )
    return ranges


def build_template_context(
    release: ReleaseRange,
    commits: list[ParsedCommit],
    ruleset: Ruleset,
    config: ChangelogPyConfig,
    *,
    repo_url: str | None,
) -> dict[str, Any]:
    """Assemble the variables a release section template sees."""
    groups: dict[str, list[dict[str, Any]]] = {}
    notes: list[dict[str, Any]] = []
    for pc in commits:
        notes.extend({"text": note, "scope": pc.scope} for note in pc.notes)
        section = ruleset.section_for(pc.commit_type)
        if section is None:
            continue
        groups.setdefault(section, []).append(
            {
                "type": pc.commit_type,
                "scope": pc.scope,
                "subject": pc.description,
                "hash": pc.sha,
                "short_hash": pc.short_sha,
                "body": pc.body,
            }
        )

    sort_key = config.writer_opts.commits_sort
    if sort_key == "scope":
        for items in groups.values():
            items.sort(key=lambda item: (item["scope"] or "", item["subject"]))
    elif sort_key == "subject":
        for items in groups.values():
            items.sort(key=lambda item: item["subject"])

    order = ruleset.section_order
    commit_groups = [
        {"title": title, "commits": groups[title]}
        for title in sorted(groups, key=lambda title: order.index(title))
    ]

    if release.to_ref is None or not commits:
        date = datetime.now(UTC).strftime("%Y-%m-%d")
    else:
        date = commits[0].date.strftime("%Y-%m-%d") if commits[0].date else None

    return {
        "repo_url": repo_url,
        "link_compare": True,
        "date": date,
        "title": None,
        **config.context,
        "version": release.version,
        "previous_tag": release.previous_tag,
        "current_tag": release.current_tag,
        "commit_groups": commit_groups,
        "note_groups": [{"title": "BREAKING CHANGES", "notes": notes}] if notes else [],
    }


async def render_changelog(
    ctx: ReleaseContext,
    repo: GitRepository,
    ruleset: Ruleset,
    config: ChangelogPyConfig,
    *,
    release_count: int | None = None,
) -> AsyncIterator[str]:
    """Stream rendered release sections, newest first.

    Args:
        ctx: Context with the resolved version and tags
        repo: Repository to read commits from
        ruleset: Preset rules mapping commit types to sections
        config: Configuration (writer, parser and git options, extra context)
        release_count: Overrides ``config.release_count``; 0 renders the
                       whole history

    Raises:
        jinja2.TemplateError: If a template fails to compile or render
        GitError: If reading tags or commits fails
    """
    count = config.release_count if release_count is None else release_count
    environment = build_environment(config.writer_opts)
    template = environment.get_template("main")

    repo_url = config.context.get("repo_url")
    if repo_url is None:
        repo_url = await asyncio.to_thread(repo.get_remote_url)

    for index, release in enumerate(await release_ranges(ctx, repo, config, count)):
        raw = await asyncio.to_thread(
            repo.get_commits,
            release.from_ref,
            release.to_ref,
            config.git_raw_commits_opts.paths,
        )
        commits = parse_commits(raw, config.parser_opts)
        if index > 0 and not commits:
            continue
        variables = build_template_context(release, commits, ruleset, config, repo_url=repo_url)
        logger.debug(
            "Rendering release section",
            version=release.version,
            previous_tag=release.previous_tag,
            current_tag=release.current_tag,
            commits=len(commits),
        )
        yield _BLANK_LINES_RE.sub("\n\n", template.render(variables)).strip() + "\n\n"


async def collect(stream: AsyncIterator[str]) -> str:
    """Drain a changelog stream into one trimmed string.

    Raises:
        RenderingError: If the stream fails; partial output is discarded
    """
    chunks: list[str] = []
    try:
        async for chunk in stream:
            chunks.append(chunk)
    except jinja2.TemplateError as e:
        raise RenderingError(f"Changelog template error: {e}") from e
    except GitError as e:
        raise RenderingError(f"Reading commits for the changelog failed: {e}") from e
    return "".join(chunks).strip()


async def assemble_changelog(
    ctx: ReleaseContext,
    repo: GitRepository,
    ruleset: Ruleset,
    config: ChangelogPyConfig,
    *,
    release_count: int | None = None,
) -> str:
    """Render the changelog for the context's release range as one string.

    Raises:
        RenderingError: If rendering fails
    """
    stream = render_changelog(ctx, repo, ruleset, config, release_count=release_count)
    return await collect(stream)
