"""Tests for conventional commit parsing."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from changelog_py.config.models import ParserOptions
from changelog_py.core.commits import ParsedCommit, parse_commits
from changelog_py.vcs.git import Commit

MakeCommit = Callable[..., Commit]


def _commit(message: str, sha: str = "abc1234def") -> Commit:
    return Commit(
        sha=sha,
        message=message,
        author_name="Test",
        author_email="test@test.com",
        date=datetime.now(),
    )


class TestParsedCommit:
    """Tests for ParsedCommit.from_commit()."""

    def test_parse_simple_feat(self):
        """Parse a simple feat commit."""
        pc = ParsedCommit.from_commit(_commit("feat: add new feature"))

        assert pc.is_conventional
        assert pc.commit_type == "feat"
        assert pc.scope is None
        assert pc.description == "add new feature"
        assert not pc.is_breaking

    def test_parse_with_scope(self):
        """Parse commit with scope."""
        pc = ParsedCommit.from_commit(_commit("fix(api): handle null response"))

        assert pc.commit_type == "fix"
        assert pc.scope == "api"
        assert pc.description == "handle null response"

    def test_parse_breaking_with_exclamation(self):
        """The ! marker makes the description the breaking note."""
        pc = ParsedCommit.from_commit(_commit("feat(core)!: change config format"))

        assert pc.is_breaking
        assert pc.scope == "core"
        assert pc.notes == ["change config format"]

    def test_parse_breaking_footer(self):
        """A BREAKING CHANGE footer is collected as a note."""
        message = "feat: new API\n\nBody text.\n\nBREAKING CHANGE: old endpoints removed"
        pc = ParsedCommit.from_commit(_commit(message))

        assert pc.is_breaking
        assert pc.notes == ["old endpoints removed"]
        assert pc.body.startswith("Body text.")

    def test_custom_note_keywords(self):
        """Only configured keywords introduce notes."""
        message = "fix: thing\n\nBREAKING CHANGE: not a note here\nINCOMPATIBLE: this is"
        pc = ParsedCommit.from_commit(_commit(message), ["INCOMPATIBLE"])

        assert pc.notes == ["this is"]

    def test_parse_non_conventional(self):
        """Non-conventional commits are kept without a type."""
        pc = ParsedCommit.from_commit(_commit("Update README"))

        assert not pc.is_conventional
        assert pc.commit_type is None
        assert pc.description == "Update README"

    def test_parse_revert(self):
        """Revert commits record the reverted sha."""
        message = 'Revert "feat: add thing"\n\nThis reverts commit deadbeef1234.'
        pc = ParsedCommit.from_commit(_commit(message))

        assert pc.commit_type == "revert"
        assert pc.description == "feat: add thing"
        assert pc.reverts == "deadbeef1234"

    def test_short_sha(self):
        pc = ParsedCommit.from_commit(_commit("fix: x", sha="0123456789abc"))

        assert pc.short_sha == "0123456"


class TestParseCommits:
    """Tests for parse_commits()."""

    def test_scope_regex_filters(self, make_commit: MakeCommit):
        """Only commits whose scope matches are kept."""
        commits = [
            make_commit("feat(api): one"),
            make_commit("fix(ui): two"),
            make_commit("fix: three"),
        ]

        parsed = parse_commits(commits, ParserOptions(scope_regex="^api$"))

        assert [pc.description for pc in parsed] == ["one"]

    def test_revert_cancels_reverted_commit(self, make_commit: MakeCommit):
        """A reverted commit and its revert both drop out."""
        target = make_commit("feat: risky", sha="deadbeef" * 5)
        revert = make_commit('Revert "feat: risky"\n\nThis reverts commit deadbeefdeadbeef.')
        kept = make_commit("fix: unrelated")

        parsed = parse_commits([revert, kept, target])

        assert [pc.description for pc in parsed] == ["unrelated"]

    def test_revert_of_older_commit_is_kept(self, make_commit: MakeCommit):
        """A revert whose target is outside the list stays."""
        revert = make_commit('Revert "feat: old"\n\nThis reverts commit 1234567.')

        parsed = parse_commits([revert])

        assert len(parsed) == 1
        assert parsed[0].commit_type == "revert"

