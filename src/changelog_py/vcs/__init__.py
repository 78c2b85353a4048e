"""Version control access for changelog-py."""

from __future__ import annotations

from changelog_py.vcs.git import Commit, GitRepository, normalize_remote_url

__all__ = [
    "Commit",
    "GitRepository",
    "normalize_remote_url",
]
