"""Tag templates, tag discovery and comparison-tag resolution.

A tag template is a string holding a ``${version}`` placeholder, such as
``v${version}`` or ``next-${version}``. Rendering a template gives the
tag for a version; matching a tag against the template recovers the
version.

Comparison tags drive both the commit range rendered into a changelog
section and the compare link in its heading.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

from changelog_py.core.version import is_prerelease, is_valid
from changelog_py.logging import get_logger

if TYPE_CHECKING:
    from changelog_py.vcs.git import GitRepository

logger = get_logger(__name__)

VERSION_PLACEHOLDER = "${version}"
DEFAULT_TAG_TEMPLATE = VERSION_PLACEHOLDER


@dataclass(frozen=True)
class TagPair:
    """Previous and current tag of a release range.

    Attributes:
        previous_tag: Start of the range (exclusive); None means the
                      range reaches back to the first commit
        current_tag: End of the range; None when no version is resolved
    """

    previous_tag: str | None
    current_tag: str | None


def tag_template_from_config(tag_name: str | None, tag_prefix: str | None) -> str | None:
    """Build a tag template from the ``tag_name``/``tag_prefix`` settings.

    ``tag_name`` wins when both are set. Returns None when neither is.
    """
    if tag_name:
        return tag_name
    if tag_prefix is not None:
        return f"{tag_prefix}{VERSION_PLACEHOLDER}"
    return None


def default_tag_template(latest_tag: str | None) -> str:
    """Infer a template from the latest tag: ``v${version}`` or bare."""
    if latest_tag and latest_tag.startswith("v"):
        return f"v{VERSION_PLACEHOLDER}"
    return DEFAULT_TAG_TEMPLATE


def render_tag_template(template: str, version: str) -> str:
    """Substitute the version into the template's placeholder."""
    return template.replace(VERSION_PLACEHOLDER, version, 1)


def version_from_tag(tag: str, template: str) -> str | None:
    """Recover the version a tag was rendered from.

    Returns:
        The version, or None if the tag does not fit the template or the
        extracted part is not valid semver
    """
    prefix, placeholder, suffix = template.partition(VERSION_PLACEHOLDER)
    if not placeholder:
        return None
    if not tag.startswith(prefix) or not tag.endswith(suffix):
        return None
    end = len(tag) - len(suffix) if suffix else len(tag)
    candidate = tag[len(prefix) : end]
    return candidate if is_valid(candidate) else None


def resolve_tags(
    *,
    is_incrementing: bool,
    version: str | None,
    latest_tag: str | None,
    second_latest_tag: str | None,
    tag_template: str | None,
) -> TagPair:
    """Derive the comparison tags for the changelog of this run.

    Args:
        is_incrementing: False when the bump was explicitly suppressed and
                         the changelog of the latest release is regenerated
        version: The resolved release version
        latest_tag: Most recent release tag, if any
        second_latest_tag: The release tag before it, if any
        tag_template: Configured template; inferred from ``latest_tag``
                      when None

    Returns:
        The previous/current tag pair
    """
    if not is_incrementing:
        return TagPair(previous_tag=second_latest_tag, current_tag=latest_tag)

    template = tag_template or default_tag_template(latest_tag)
    current_tag = render_tag_template(template, version) if version else None
    return TagPair(previous_tag=latest_tag, current_tag=current_tag)


def filter_release_tags(
    tags: list[str],
    tag_template: str,
    *,
    skip_unstable: bool = False,
) -> list[str]:
    """Keep tags that fit the template and carry a semver version.

    Order is preserved; ``skip_unstable`` drops pre-release tags.
    """
    release_tags = []
    for tag in tags:
        version = version_from_tag(tag, tag_template)
        if version is None:
            continue
        if skip_unstable and is_prerelease(version):
            continue
        release_tags.append(tag)
    return release_tags


async def discover_tags(
    repo: GitRepository,
    tag_template: str | None,
    *,
    skip_unstable: bool = False,
) -> list[str]:
    """List release tags reachable from HEAD, most recent first.

    When no template is configured, tags are accepted both bare and with a
    ``v`` prefix.
    """
    tags = await asyncio.to_thread(repo.list_tags)
    if tag_template:
        release_tags = filter_release_tags(tags, tag_template, skip_unstable=skip_unstable)
    else:
        release_tags = [
            tag
            for tag in tags
            if filter_release_tags([tag], default_tag_template(tag), skip_unstable=skip_unstable)
        ]
    logger.debug(
        "Discovered release tags",
        template=tag_template,
        skip_unstable=skip_unstable,
        tags=release_tags,
    )
    return release_tags
