"""Conventional commit parsing.

Parses commit messages following the Conventional Commits format::

    <type>[(scope)][!]: <description>

    [body]

    [BREAKING CHANGE: <note>]

Non-conventional messages are kept, with ``commit_type`` set to None, so
classification rules can decide what they are worth.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from changelog_py.config.models import ParserOptions
    from changelog_py.vcs.git import Commit

DEFAULT_NOTE_KEYWORDS = ("BREAKING CHANGE", "BREAKING-CHANGE")

_HEADER_RE = re.compile(
    r"^(?P<type>\w+)(?:\((?P<scope>[^()\r\n]*)\))?(?P<breaking>!)?:\s+(?P<description>.+)$"
)
_REVERT_RE = re.compile(r'^Revert\s+"?(?P<header>.+?)"?\s*$')
_REVERT_HASH_RE = re.compile(r"This reverts commit (?P<sha>[0-9a-f]+)", re.IGNORECASE)


def note_pattern(keywords: tuple[str, ...] | list[str]) -> re.Pattern[str]:
    """Compile the footer pattern that introduces a breaking change note."""
    alternatives = "|".join(re.escape(keyword) for keyword in keywords)
    return re.compile(rf"^(?:{alternatives}):\s*(?P<text>[\s\S]*)", re.MULTILINE)


@dataclass(frozen=True)
class ParsedCommit:
    """A commit with its conventional commit fields extracted."""

    sha: str
    description: str
    commit_type: str | None = None
    scope: str | None = None
    body: str = ""
    notes: list[str] = field(default_factory=list)
    is_breaking: bool = False
    is_conventional: bool = False
    reverts: str | None = None
    date: datetime | None = None

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @classmethod
    def from_commit(
        cls,
        commit: Commit,
        note_keywords: tuple[str, ...] | list[str] = DEFAULT_NOTE_KEYWORDS,
    ) -> ParsedCommit:
        """Parse a raw commit.

        Args:
            commit: Commit to parse
            note_keywords: Footer keywords that introduce a breaking change note

        Returns:
            The parsed commit
        """
        header, _, body = commit.message.partition("\n")
        header = header.strip()
        body = body.strip()

        notes = [
            match.group("text").strip()
            for match in note_pattern(note_keywords).finditer(body)
            if match.group("text").strip()
        ]

        revert_match = _REVERT_RE.match(header)
        if revert_match:
            sha_match = _REVERT_HASH_RE.search(body)
            return cls(
                sha=commit.sha,
                description=revert_match.group("header"),
                commit_type="revert",
                body=body,
                notes=notes,
                is_breaking=bool(notes),
                is_conventional=True,
                reverts=sha_match.group("sha") if sha_match else None,
                date=commit.date,
            )

        match = _HEADER_RE.match(header)
        if match is None:
            return cls(
                sha=commit.sha,
                description=header,
                body=body,
                notes=notes,
                is_breaking=bool(notes),
                date=commit.date,
            )

        description = match.group("description").strip()
        is_breaking = bool(match.group("breaking")) or bool(notes)
        if match.group("breaking") and not notes:
            # "feat!: drop py2" carries its note in the header
            notes = [description]

        return cls(
            sha=commit.sha,
            description=description,
            commit_type=match.group("type").lower(),
            scope=match.group("scope") or None,
            body=body,
            notes=notes,
            is_breaking=is_breaking,
            is_conventional=True,
            date=commit.date,
        )


def parse_commits(
    commits: list[Commit],
    options: ParserOptions | None = None,
) -> list[ParsedCommit]:
    """Parse raw commits, applying the scope filter if one is configured.

    Commits undone by a revert in the same list are dropped along with the
    revert itself.
    """
    keywords = tuple(options.note_keywords) if options else DEFAULT_NOTE_KEYWORDS
    parsed = [ParsedCommit.from_commit(commit, keywords) for commit in commits]

    if options and options.scope_regex:
        scope_re = re.compile(options.scope_regex)
        parsed = [pc for pc in parsed if pc.scope and scope_re.search(pc.scope)]

    reverted = {pc.reverts for pc in parsed if pc.reverts}
    if reverted:
        cancelled = {
            pc.sha
            for pc in parsed
            if any(pc.sha.startswith(sha) for sha in reverted)
        }
        parsed = [
            pc
            for pc in parsed
            if pc.sha not in cancelled
            and not (pc.reverts and any(sha.startswith(pc.reverts) for sha in cancelled))
        ]
    return parsed

