"""Git operations via the ``git`` command line.

All commands run as subprocesses in the repository directory. Failures
are raised as :class:`~changelog_py.exceptions.GitError` with git's
stderr attached.
"""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from changelog_py.exceptions import GitError
from changelog_py.logging import get_logger

logger = get_logger(__name__)

# ASCII unit/record separators keep multi-line commit bodies intact
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = f"%H{_FIELD_SEP}%an{_FIELD_SEP}%ae{_FIELD_SEP}%aI{_FIELD_SEP}%B{_RECORD_SEP}"

_SSH_REMOTE_RE = re.compile(r"^(?:ssh://)?git@([^:/]+)[:/](.+?)(?:\.git)?/?$")


@dataclass(frozen=True)
class Commit:
    """A raw commit as read from ``git log``."""

    sha: str
    message: str
    author_name: str
    author_email: str
    date: datetime


class GitRepository:
    """Thin wrapper around a git working tree."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        if not self.path.is_dir():
            raise GitError(f"Not a directory: {self.path}")

    def _run(self, *args: str) -> str:
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                check=True,
                cwd=self.path,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {args[0]} failed with exit code {e.returncode}",
                stderr=e.stderr,
            ) from e
        return result.stdout

    def list_tags(self) -> list[str]:
        """Tags reachable from HEAD, most recently created first."""
        output = self._run("tag", "--merged", "HEAD", "--sort=-creatordate")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def get_commits(
        self,
        from_ref: str | None = None,
        to_ref: str | None = None,
        paths: list[str] | None = None,
    ) -> list[Commit]:
        """Commits in ``from_ref..to_ref``, newest first.

        Args:
            from_ref: Exclusive start of the range; None for the full history
            to_ref: Inclusive end of the range; defaults to HEAD
            paths: Restrict to commits touching these paths
        """
        end = to_ref or "HEAD"
        rev_range = f"{from_ref}..{end}" if from_ref else end
        args = ["log", f"--format={_LOG_FORMAT}", rev_range]
        if paths:
            args.extend(["--", *paths])

        output = self._run(*args)
        commits = []
        for record in output.split(_RECORD_SEP):
            record = record.strip("\n")
            if not record:
                continue
            sha, author_name, author_email, date, message = record.split(_FIELD_SEP, 4)
            commits.append(
                Commit(
                    sha=sha,
                    message=message.strip(),
                    author_name=author_name,
                    author_email=author_email,
                    date=datetime.fromisoformat(date),
                )
            )
        logger.debug("Read commits", range=rev_range, count=len(commits))
        return commits

    def add(self, path: Path | str) -> None:
        """Stage a file."""
        self._run("add", str(path))

    def get_remote_url(self, remote: str = "origin") -> str | None:
        """Browsable https URL of a remote, or None if it is not configured."""
        try:
            url = self._run("remote", "get-url", remote).strip()
        except GitError:
            return None
        return normalize_remote_url(url) if url else None


def normalize_remote_url(url: str) -> str:
    """Turn a clone URL into its https web form.

    ``git@github.com:owner/repo.git`` -> ``https://github.com/owner/repo``
    """
    ssh_match = _SSH_REMOTE_RE.match(url)
    if ssh_match:
        host, repo_path = ssh_match.groups()
        return f"https://{host}/{repo_path}"
    url = url.rstrip("/")
    if url.endswith(".git"):
        url = url[: -len(".git")]
    # Drop credentials embedded in https remotes
    return re.sub(r"^(https?://)[^@/]+@", r"\1", url)
