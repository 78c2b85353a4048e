"""Commit classification presets.

A preset bundles the rules used to turn parsed commits into a bump
recommendation (``what_bump``) with the changelog sections each commit
type is rendered under. Presets are selected through a tagged variant:

- :class:`Named` - a built-in preset by name ("angular", "conventionalcommits")
- :class:`Configured` - a built-in preset plus options (e.g. custom ``types``)
- :class:`Custom` - a user supplied ``what_bump`` on top of another preset
- :class:`Disabled` - no recommendation at all
"""

from __future__ import annotations

import importlib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from changelog_py.exceptions import ConfigurationError, ConfigValidationError, UnknownPresetError

if TYPE_CHECKING:
    from changelog_py.core.commits import ParsedCommit

RELEASE_LEVELS = ("major", "minor", "patch")


@dataclass(frozen=True)
class BumpRecommendation:
    """Outcome of classifying a set of commits.

    Attributes:
        release_type: "major", "minor", "patch", or None for no release
        reason: Human readable explanation
        level: Index into ("major", "minor", "patch"), None with no release
    """

    release_type: str | None
    reason: str = ""
    level: int | None = None

    @classmethod
    def from_level(cls, level: int | None, reason: str = "") -> BumpRecommendation:
        if level is None:
            return cls(release_type=None, reason=reason)
        if level not in range(len(RELEASE_LEVELS)):
            raise ValueError(f"Invalid bump level {level}, expected 0, 1 or 2")
        return cls(release_type=RELEASE_LEVELS[level], reason=reason, level=level)


WhatBump = Callable[[list["ParsedCommit"]], Any]


@dataclass(frozen=True)
class CommitType:
    """Maps a commit type to a changelog section."""

    type: str
    section: str
    hidden: bool = False


@dataclass(frozen=True)
class Ruleset:
    """Loaded form of a preset."""

    name: str
    types: tuple[CommitType, ...]
    what_bump: WhatBump

    def section_for(self, commit_type: str | None) -> str | None:
        """Section title for a commit type, None if it is not rendered."""
        for entry in self.types:
            if entry.type == commit_type:
                return None if entry.hidden else entry.section
        return None

    @property
    def section_order(self) -> list[str]:
        order: list[str] = []
        for entry in self.types:
            if not entry.hidden and entry.section not in order:
                order.append(entry.section)
        return order


# =============================================================================
# Preset variants
# =============================================================================


@dataclass(frozen=True)
class Named:
    name: str


@dataclass(frozen=True)
class Configured:
    name: str
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Custom:
    what_bump: WhatBump
    base: Named | Configured | Disabled | None = None


@dataclass(frozen=True)
class Disabled:
    pass


Preset = Named | Configured | Custom | Disabled


# =============================================================================
# Built-in rulesets
# =============================================================================


ANGULAR_TYPES = (
    CommitType("feat", "Features"),
    CommitType("fix", "Bug Fixes"),
    CommitType("perf", "Performance Improvements"),
    CommitType("revert", "Reverts"),
    CommitType("docs", "Documentation", hidden=True),
    CommitType("style", "Styles", hidden=True),
    CommitType("refactor", "Code Refactoring", hidden=True),
    CommitType("test", "Tests", hidden=True),
    CommitType("build", "Build System", hidden=True),
    CommitType("ci", "Continuous Integration", hidden=True),
    CommitType("chore", "Chores", hidden=True),
)

CONVENTIONALCOMMITS_TYPES = (
    CommitType("feat", "Features"),
    CommitType("feature", "Features"),
    CommitType("fix", "Bug Fixes"),
    CommitType("perf", "Performance Improvements"),
    CommitType("revert", "Reverts"),
    CommitType("docs", "Documentation", hidden=True),
    CommitType("style", "Styles", hidden=True),
    CommitType("chore", "Miscellaneous Chores", hidden=True),
    CommitType("refactor", "Code Refactoring", hidden=True),
    CommitType("test", "Tests", hidden=True),
    CommitType("build", "Build System", hidden=True),
    CommitType("ci", "Continuous Integration", hidden=True),
)


def _count(commits: list[ParsedCommit]) -> tuple[int, int]:
    breakings = sum(len(pc.notes) or 1 for pc in commits if pc.is_breaking)
    features = sum(1 for pc in commits if pc.commit_type in ("feat", "feature"))
    return breakings, features


def angular_what_bump(commits: list[ParsedCommit]) -> BumpRecommendation:
    """Breaking -> major, feat -> minor, anything else -> patch.

    Any commit at all yields at least a patch, including commits whose
    type is unknown or that are not conventional.
    """
    if not commits:
        return BumpRecommendation.from_level(None, "There are no commits since the last release")
    breakings, features = _count(commits)
    level = 0 if breakings else 1 if features else 2
    noun = "BREAKING CHANGE" if breakings == 1 else "BREAKING CHANGES"
    return BumpRecommendation.from_level(
        level, f"There are {breakings} {noun} and {features} features"
    )


def conventionalcommits_what_bump(types: tuple[CommitType, ...]) -> WhatBump:
    """Build a ``what_bump`` that only releases for visible types."""
    visible = {entry.type for entry in types if not entry.hidden}

    def what_bump(commits: list[ParsedCommit]) -> BumpRecommendation:
        breakings, features = _count(commits)
        patches = sum(1 for pc in commits if pc.commit_type in visible)
        if breakings:
            level = 0
        elif features:
            level = 1
        elif patches:
            level = 2
        else:
            return BumpRecommendation.from_level(None, "No commits trigger a release")
        noun = "BREAKING CHANGE" if breakings == 1 else "BREAKING CHANGES"
        return BumpRecommendation.from_level(
            level, f"There are {breakings} {noun} and {features} features"
        )

    return what_bump


def _never(commits: list[ParsedCommit]) -> BumpRecommendation:
    return BumpRecommendation.from_level(None, "Bump recommendation is disabled")


def _load_angular(options: Mapping[str, Any]) -> Ruleset:
    return Ruleset(name="angular", types=ANGULAR_TYPES, what_bump=angular_what_bump)


def _load_conventionalcommits(options: Mapping[str, Any]) -> Ruleset:
    types = CONVENTIONALCOMMITS_TYPES
    if "types" in options:
        try:
            types = tuple(
                CommitType(
                    type=entry["type"],
                    section=entry.get("section", entry["type"]),
                    hidden=bool(entry.get("hidden", False)),
                )
                for entry in options["types"]
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ConfigValidationError(
                "conventionalcommits 'types' must be a list of tables with a 'type' key"
            ) from e
    return Ruleset(
        name="conventionalcommits",
        types=types,
        what_bump=conventionalcommits_what_bump(types),
    )


PRESET_LOADERS: dict[str, Callable[[Mapping[str, Any]], Ruleset]] = {
    "angular": _load_angular,
    "conventionalcommits": _load_conventionalcommits,
}


def load_ruleset(preset: Preset) -> Ruleset:
    """Resolve a preset into its ruleset.

    Raises:
        UnknownPresetError: If a named preset does not exist
    """
    match preset:
        case Named(name=name):
            return _load_builtin(name, {})
        case Configured(name=name, options=options):
            return _load_builtin(name, options)
        case Custom(what_bump=what_bump, base=base):
            return replace(load_ruleset(base or Named("angular")), what_bump=what_bump)
        case Disabled():
            return Ruleset(name="none", types=ANGULAR_TYPES, what_bump=_never)
    raise TypeError(f"Unsupported preset: {preset!r}")


def _load_builtin(name: str, options: Mapping[str, Any]) -> Ruleset:
    loader = PRESET_LOADERS.get(name.lower())
    if loader is None:
        raise UnknownPresetError(name, sorted(PRESET_LOADERS))
    return loader(options)


def preset_from_config(
    preset: str | Mapping[str, Any] | bool | None,
    what_bump: str | WhatBump | bool | None = None,
) -> Preset:
    """Build the preset variant from the ``preset`` and ``what_bump`` settings.

    Args:
        preset: Preset name, a table with a ``name`` key and options, or
                False/None for no preset
        what_bump: ``"module:function"`` reference or callable overriding
                   the preset's rules, or False to disable recommendations

    Raises:
        ConfigValidationError: If a preset table has no ``name``
        ConfigurationError: If a ``what_bump`` reference cannot be imported
    """
    base: Named | Configured | Disabled
    if preset is None or preset is False:
        base = Disabled()
    elif isinstance(preset, str):
        base = Named(preset)
    elif isinstance(preset, Mapping):
        options = dict(preset)
        name = options.pop("name", None)
        if not name:
            raise ConfigValidationError("A preset table needs a 'name' key")
        base = Configured(name=name, options=options)
    else:
        raise ConfigValidationError(f"Invalid preset: {preset!r}")

    if what_bump is False:
        return Custom(what_bump=_never, base=base)
    if isinstance(what_bump, str):
        return Custom(what_bump=import_what_bump(what_bump), base=base)
    if callable(what_bump):
        return Custom(what_bump=what_bump, base=base)
    return base


def import_what_bump(reference: str) -> WhatBump:
    """Import a ``"package.module:function"`` reference.

    Raises:
        ConfigurationError: If the reference is malformed or cannot be imported
    """
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise ConfigurationError(
            f"Invalid what_bump reference {reference!r}, expected 'module:function'"
        )
    try:
        module = importlib.import_module(module_name)
        target = getattr(module, attribute)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Cannot import what_bump {reference!r}: {e}") from e
    if not callable(target):
        raise ConfigurationError(f"what_bump {reference!r} is not callable")
    return target
