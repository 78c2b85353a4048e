"""Tests for merging rendered changelogs into the changelog file."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, patch

import pytest

from changelog_py.core.merge import (
    has_changelog,
    merge_changelog,
    normalize_newlines,
    persist_changelog,
)
from changelog_py.exceptions import ChangelogWriteError

if TYPE_CHECKING:
    from pathlib import Path


class TestMergeChangelog:
    """Tests for merge_changelog()."""

    def test_new_entry_goes_below_header(self):
        previous = "# Changelog\n\n## 1.0.0\n\n* old\n"

        merged = merge_changelog("## 1.1.0\n\n* new", previous, "# Changelog")

        assert merged == "# Changelog\n\n## 1.1.0\n\n* new\n\n## 1.0.0\n\n* old\n"

    def test_whitespace_does_not_accumulate(self):
        """Surrounding blank lines are normalized on every merge."""
        previous = "# Changelog\n\n\n\n## 1.0.0\n\n\n"

        once = merge_changelog("\n\n## 1.1.0\n\n\n", previous, "# Changelog")
        twice = merge_changelog("## 1.2.0", once, "# Changelog")

        assert once == "# Changelog\n\n## 1.1.0\n\n## 1.0.0\n"
        assert twice == "# Changelog\n\n## 1.2.0\n\n## 1.1.0\n\n## 1.0.0\n"

    def test_crlf_previous_content(self):
        merged = merge_changelog("## 1.1.0", "# Changelog\r\n\r\n## 1.0.0\r\n", "# Changelog")

        assert merged == "# Changelog\n\n## 1.1.0\n\n## 1.0.0\n"

    def test_no_header(self):
        assert merge_changelog("## 1.1.0", "## 1.0.0\n") == "## 1.1.0\n\n## 1.0.0\n"

    def test_previous_without_header_keeps_content(self):
        merged = merge_changelog("## 1.1.0", "Some intro\n", "# Changelog")

        assert merged == "# Changelog\n\n## 1.1.0\n\nSome intro\n"

    def test_longer_first_line_is_not_a_header(self):
        """Only a whole header line is replaced."""
        previous = "# Changelog of Foo\n\n## 1.0.0\n"

        merged = merge_changelog("## 2.0.0", previous, "# Changelog")

        assert merged == "# Changelog\n\n## 2.0.0\n\n# Changelog of Foo\n\n## 1.0.0\n"

    def test_previous_with_only_header(self):
        assert merge_changelog("## 1.1.0", "# Changelog\n", "# Changelog") == (
            "# Changelog\n\n## 1.1.0\n"
        )

    def test_empty_entry(self):
        assert merge_changelog("", "", "# Changelog") == "# Changelog\n"

    def test_normalize_newlines(self):
        assert normalize_newlines("a\r\nb\rc\n") == "a\nb\nc\n"


class TestPersistChangelog:
    """Tests for persist_changelog()."""

    async def test_creates_file_with_full_history(self, tmp_path: Path):
        path = tmp_path / "CHANGELOG.md"
        full_history = AsyncMock(return_value="## 1.1.0\n\n## 1.0.0")

        is_new = await persist_changelog(path, "## 1.1.0", "# Changelog", full_history=full_history)

        assert is_new
        full_history.assert_awaited_once()
        assert path.read_text() == "# Changelog\n\n## 1.1.0\n\n## 1.0.0\n"

    async def test_prepends_to_existing_file(self, tmp_path: Path):
        path = tmp_path / "CHANGELOG.md"
        path.write_text("# Changelog\n\n## 1.0.0\n")
        full_history = AsyncMock()

        is_new = await persist_changelog(path, "## 1.1.0", "# Changelog", full_history=full_history)

        assert not is_new
        full_history.assert_not_awaited()
        assert path.read_text() == "# Changelog\n\n## 1.1.0\n\n## 1.0.0\n"

    async def test_creates_parent_directories(self, tmp_path: Path):
        path = tmp_path / "docs" / "CHANGELOG.md"

        await persist_changelog(path, "", None, full_history=AsyncMock(return_value="## 0.1.0"))

        assert path.read_text() == "## 0.1.0\n"

    async def test_write_failure(self, tmp_path: Path):
        path = tmp_path / "CHANGELOG.md"
        path.write_text("## 1.0.0\n")

        with (
            patch("changelog_py.core.merge.os.replace", side_effect=PermissionError("denied")),
            pytest.raises(ChangelogWriteError, match="denied"),
        ):
            await persist_changelog(path, "## 1.1.0", full_history=AsyncMock())

        assert path.read_text() == "## 1.0.0\n"
        assert list(tmp_path.iterdir()) == [path]

    def test_has_changelog(self, tmp_path: Path):
        path = tmp_path / "CHANGELOG.md"
        assert not has_changelog(path)
        assert not has_changelog(tmp_path)

        path.write_text("x")
        assert has_changelog(path)
