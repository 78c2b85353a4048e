"""Per-run release state passed between the changelog stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Increment = Literal[False] | str | None


@dataclass(frozen=True)
class ReleaseContext:
    """Everything known about the release being prepared.

    Each stage returns an updated copy (``dataclasses.replace``) rather
    than mutating shared state.

    Attributes:
        latest_version: Version of the latest release
        latest_tag: Most recent release tag, None before the first release
        second_latest_tag: The release tag before ``latest_tag``
        increment: None to follow the recommendation, False to keep the
                   latest version, a bump kind, or a literal version
        is_pre_release: Whether the release is a pre-release
        pre_release_id: Pre-release identifier such as "alpha" or "rc"
        version: Resolved release version, None when nothing is released
        previous_tag: Start of the changelog range
        current_tag: End of the changelog range
        changelog: Rendered changelog for the release
        is_new_infile: Whether the changelog file was created by this run
    """

    latest_version: str = "0.0.0"
    latest_tag: str | None = None
    second_latest_tag: str | None = None
    increment: Increment = None
    is_pre_release: bool = False
    pre_release_id: str | None = None
    version: str | None = None
    previous_tag: str | None = None
    current_tag: str | None = None
    changelog: str | None = None
    is_new_infile: bool = False

    @property
    def is_incrementing(self) -> bool:
        return self.increment is not False
