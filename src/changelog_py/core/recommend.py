"""Release version recommendation.

Turns the commit classification into the version of the next release,
applying a manual override when one is given and keeping pre-release
sequences anchored to the most recent stable release.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from changelog_py.core.tags import default_tag_template, version_from_tag
from changelog_py.core.version import (
    BumpType,
    base_version,
    clean,
    coerce,
    compare,
    increment,
    is_prerelease,
)
from changelog_py.logging import get_logger

if TYPE_CHECKING:
    from changelog_py.core.context import ReleaseContext
    from changelog_py.core.presets import BumpRecommendation

logger = get_logger(__name__)


class Classifier(Protocol):
    """What the engine needs from a commit classifier."""

    tag_template: str | None

    async def recommend(self, *, skip_unstable: bool = False) -> BumpRecommendation: ...

    async def latest_tag(self, *, skip_unstable: bool = False) -> str | None: ...


async def recommend_version(
    ctx: ReleaseContext,
    classifier: Classifier,
    *,
    strict_semver: bool = False,
    ignore_recommended_bump: bool = False,
) -> str | None:
    """Resolve the version of the release being prepared.

    Args:
        ctx: Current release context
        classifier: Source of bump recommendations
        strict_semver: Always start a new pre-release sequence at the
                       recommended magnitude, even from a pre-release
        ignore_recommended_bump: Skip commit analysis; only ``ctx.increment``
                                 decides the bump

    Returns:
        The release version, or None when no release is warranted

    Raises:
        ClassificationError: If commit analysis fails
        GitError: If reading tags or commits fails
    """
    if ctx.version:
        return ctx.version
    if ctx.increment is False:
        return ctx.latest_version

    release_type: str | None = None
    if not ignore_recommended_bump:
        recommendation = await classifier.recommend()
        release_type = recommendation.release_type

    if ctx.increment:
        if not ignore_recommended_bump:
            logger.warning(
                f'Recommended bump is "{release_type}", but is overridden with "{ctx.increment}".',
                recommended=release_type,
                override=ctx.increment,
            )
        release_type = ctx.increment
        literal = clean(ctx.increment)
        if literal is not None:
            return literal

    logger.debug(
        "Resolving version",
        latest_version=ctx.latest_version,
        release_type=release_type,
        is_pre_release=ctx.is_pre_release,
        pre_release_id=ctx.pre_release_id,
    )

    if ctx.is_pre_release:
        return await _pre_release_version(ctx, release_type, classifier, strict_semver)
    if release_type:
        return increment(ctx.latest_version, release_type, ctx.pre_release_id)
    return None


async def _pre_release_version(
    ctx: ReleaseContext,
    release_type: str | None,
    classifier: Classifier,
    strict_semver: bool,
) -> str | None:
    latest = ctx.latest_version
    preid = ctx.pre_release_id

    if release_type in {kind.value for kind in BumpType if kind.is_pre}:
        return increment(latest, release_type, preid)

    latest_is_pre = is_prerelease(latest)
    if release_type and (strict_semver or not latest_is_pre):
        return increment(latest, f"pre{release_type}", preid)
    if not latest_is_pre:
        return None

    # Inside a pre-release line: measure against the last stable release to
    # tell a continuation from a jump to a larger magnitude
    stable_tag = await classifier.latest_tag(skip_unstable=True)
    stable_version = _tag_version(stable_tag, classifier.tag_template)
    if stable_version is None:
        return increment(latest, BumpType.PRERELEASE, preid)

    stable = await classifier.recommend(skip_unstable=True)
    if stable.release_type is None:
        return increment(latest, BumpType.PRERELEASE, preid) if release_type else None

    target = increment(stable_version, stable.release_type)
    logger.debug(
        "Pre-release look-back",
        stable_tag=stable_tag,
        stable_release_type=stable.release_type,
        target=target,
    )
    if target is not None and compare(base_version(latest), target) >= 0:
        return increment(latest, BumpType.PRERELEASE, preid)
    return increment(latest, f"pre{stable.release_type}", preid)


def _tag_version(tag: str | None, template: str | None) -> str | None:
    """Base version of a release tag, read through the tag template."""
    if not tag:
        return None
    version = version_from_tag(tag, template or default_tag_template(tag))
    if version is not None:
        return base_version(version)
    return coerce(tag)
