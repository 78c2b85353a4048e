"""Semantic version parsing and incrementing.

Parsing and precedence come from the ``semver`` package. Incrementing
follows the rules release tooling in the conventional-changelog
ecosystem expects, which differ from ``semver.Version.bump_*`` around
pre-releases:

- ``major``/``minor``/``patch`` graduate a pre-release of the same line
  instead of bumping again (``2.0.0-rc.1`` + major -> ``2.0.0``).
- ``premajor``/``preminor``/``prepatch`` open a pre-release sequence at
  iteration 0 (``1.0.0`` + preminor alpha -> ``1.1.0-alpha.0``).
- ``prerelease`` continues a sequence (``1.0.1-alpha.0`` -> ``1.0.1-alpha.1``)
  or, given a different identifier, restarts it on the same base
  (``1.0.1-alpha.1`` + beta -> ``1.0.1-beta.0``).
"""

from __future__ import annotations

import re
from enum import StrEnum

import semver

_COERCE_RE = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")


class BumpType(StrEnum):
    """Increment kinds understood by :func:`increment`."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    PREMAJOR = "premajor"
    PREMINOR = "preminor"
    PREPATCH = "prepatch"
    PRERELEASE = "prerelease"

    @property
    def is_pre(self) -> bool:
        return self.value.startswith("pre")


def is_valid(version: str | None) -> bool:
    """Return True if ``version`` is a complete semantic version."""
    if not isinstance(version, str):
        return False
    return semver.Version.is_valid(version)


def clean(version: str | None) -> str | None:
    """Return the version without a leading ``v`` or ``=``, if it is valid semver.

    ``"v2.0.0"`` -> ``"2.0.0"``; anything that is not a version gives None.
    """
    if not isinstance(version, str):
        return None
    candidate = version.strip().lstrip("=v").strip()
    return candidate if is_valid(candidate) else None


def parse_version(version: str) -> semver.Version:
    """Parse a strict semantic version string.

    Raises:
        ValueError: If the string is not valid semver
    """
    return semver.Version.parse(version)


def is_prerelease(version: str | None) -> bool:
    """Return True if ``version`` is valid semver with a pre-release part."""
    if not is_valid(version):
        return False
    return parse_version(version).prerelease is not None


def base_version(version: str) -> str:
    """Strip pre-release and build metadata: ``1.2.0-rc.1`` -> ``1.2.0``."""
    return str(parse_version(version).finalize_version())


def coerce(value: str | None) -> str | None:
    """Extract the first ``x[.y[.z]]`` out of an arbitrary string.

    Missing components are padded with zeros, pre-release data is dropped.
    ``"release-1.2"`` -> ``"1.2.0"``.
    """
    if not value:
        return None
    match = _COERCE_RE.search(value)
    if match is None:
        return None
    major, minor, patch = (int(part) if part else 0 for part in match.groups())
    return str(semver.Version(major, minor, patch))


def compare(left: str, right: str) -> int:
    """Compare two versions by semver precedence (-1, 0 or 1)."""
    return parse_version(left).compare(right)


def increment(
    current: str | None,
    kind: str | None,
    pre_release_id: str | None = None,
) -> str | None:
    """Compute the next version.

    Args:
        current: Version being incremented
        kind: A :class:`BumpType` value, or a full version literal which is
              returned without its leading ``v`` or ``=``
        pre_release_id: Identifier for ``pre*`` kinds (e.g. "alpha", "rc")

    Returns:
        The incremented version, or None when no increment applies
        (no kind, unknown kind, or an invalid current version)
    """
    if kind is None:
        return None
    literal = clean(kind)
    if literal is not None:
        return literal
    try:
        bump = BumpType(kind)
    except ValueError:
        return None
    if not is_valid(current):
        return None

    version = parse_version(current)
    major, minor, patch = version.major, version.minor, version.patch
    prerelease = _split_prerelease(version.prerelease)

    if bump is BumpType.PREMAJOR:
        major, minor, patch = major + 1, 0, 0
        prerelease = _next_prerelease([], pre_release_id)
    elif bump is BumpType.PREMINOR:
        minor, patch = minor + 1, 0
        prerelease = _next_prerelease([], pre_release_id)
    elif bump is BumpType.PREPATCH:
        patch += 1
        prerelease = _next_prerelease([], pre_release_id)
    elif bump is BumpType.PRERELEASE:
        if not prerelease:
            patch += 1
        prerelease = _next_prerelease(prerelease, pre_release_id)
    elif bump is BumpType.MAJOR:
        if minor != 0 or patch != 0 or not prerelease:
            major += 1
        minor, patch, prerelease = 0, 0, []
    elif bump is BumpType.MINOR:
        if patch != 0 or not prerelease:
            minor += 1
        patch, prerelease = 0, []
    elif bump is BumpType.PATCH:
        if not prerelease:
            patch += 1
        prerelease = []

    result = semver.Version(
        major,
        minor,
        patch,
        prerelease=".".join(str(part) for part in prerelease) or None,
    )
    return str(result)


def _split_prerelease(prerelease: str | None) -> list[str | int]:
    if not prerelease:
        return []
    return [int(part) if part.isdigit() else part for part in prerelease.split(".")]


def _next_prerelease(parts: list[str | int], identifier: str | None) -> list[str | int]:
    """Advance pre-release identifiers the way ``prerelease`` increments do."""
    if not parts:
        return [identifier, 0] if identifier else [0]

    bumped = list(parts)
    for index in range(len(bumped) - 1, -1, -1):
        if isinstance(bumped[index], int):
            bumped[index] += 1
            break
    else:
        bumped.append(0)

    if identifier:
        # A different identifier, or one without a numeric iteration, restarts at 0
        if bumped[0] != identifier or len(bumped) < 2 or not isinstance(bumped[1], int):
            bumped = [identifier, 0]
    return bumped
