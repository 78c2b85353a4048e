"""Shared fixtures: an in-memory repository and a commit factory."""

from __future__ import annotations

import hashlib
import itertools
from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest
from structlog.testing import capture_logs

from changelog_py.vcs.git import Commit

if TYPE_CHECKING:
    from pathlib import Path


class FakeRepository:
    """Stands in for GitRepository without running git.

    ``commits`` maps a ``(from_ref, to_ref)`` range to the commits git
    would list for it, newest first.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.tags: list[str] = []
        self.commits: dict[tuple[str | None, str | None], list[Commit]] = {}
        self.remote_url: str | None = None
        self.added: list[Path] = []
        self.commit_calls: list[tuple[str | None, str | None, list[str] | None]] = []

    def list_tags(self) -> list[str]:
        return list(self.tags)

    def get_commits(
        self,
        from_ref: str | None = None,
        to_ref: str | None = None,
        paths: list[str] | None = None,
    ) -> list[Commit]:
        self.commit_calls.append((from_ref, to_ref, paths))
        return list(self.commits.get((from_ref, to_ref), []))

    def add(self, path: Path) -> None:
        self.added.append(path)

    def get_remote_url(self, remote: str = "origin") -> str | None:
        return self.remote_url


@pytest.fixture(autouse=True)
def captured_logs() -> Iterator[list[dict]]:
    """Capture structlog events instead of printing them."""
    with capture_logs() as logs:
        yield logs


@pytest.fixture
def fake_repo(tmp_path: Path) -> FakeRepository:
    """An empty repository rooted at tmp_path."""
    return FakeRepository(tmp_path)


@pytest.fixture
def make_commit() -> Callable[..., Commit]:
    """Factory for commits with unique shas and increasing dates."""
    counter = itertools.count()
    start = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def factory(message: str, sha: str | None = None) -> Commit:
        n = next(counter)
        return Commit(
            sha=sha or hashlib.sha1(f"{n}:{message}".encode()).hexdigest(),
            message=message,
            author_name="Test",
            author_email="test@test.com",
            date=start + timedelta(days=n),
        )

    return factory
