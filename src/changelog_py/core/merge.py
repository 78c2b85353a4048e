"""Writing rendered changelogs into the changelog file.

New entries are placed above the previous content, below the optional
header::

    # Changelog            <- header

    ## 1.1.0 (...)         <- new entry

    ## 1.0.0 (...)         <- previous content

Blocks are separated by exactly one blank line and the file ends with a
single newline, so repeated runs do not accumulate whitespace.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import tempfile
from collections.abc import Awaitable, Callable
from pathlib import Path

from changelog_py.exceptions import ChangelogWriteError
from changelog_py.logging import get_logger

logger = get_logger(__name__)


def normalize_newlines(text: str) -> str:
    """Convert ``\\r\\n`` and ``\\r`` line endings to ``\\n``."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def strip_header(content: str, header: str | None) -> str:
    """Remove a literal leading header from previous changelog content.

    The header must fill its lines completely; ``# Changelog of Foo`` is
    not stripped for the header ``# Changelog``.
    """
    if header and (content == header or content.startswith(f"{header}\n")):
        return content[len(header) :]
    return content


def merge_changelog(entry: str, previous: str = "", header: str | None = None) -> str:
    """Combine header, new entry and previous content into file content."""
    header = normalize_newlines(header).strip() if header else None
    previous = strip_header(normalize_newlines(previous).lstrip(), header)
    blocks = [header, normalize_newlines(entry).strip(), previous.strip()]
    return "\n\n".join(block for block in blocks if block) + "\n"


def has_changelog(path: Path) -> bool:
    """Probe whether the changelog file exists; failures count as absent."""
    try:
        return path.is_file() and os.access(path, os.R_OK)
    except OSError as e:
        logger.debug("Changelog probe failed", path=str(path), error=str(e))
        return False


def _read_previous(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        logger.debug("Could not read previous changelog", path=str(path), error=str(e))
        return ""


def _write_atomic(path: Path, content: str) -> None:
    """Write through a temporary sibling so a failure leaves the file untouched."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        # Text mode writes the platform line ending
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        if path.exists():
            shutil.copymode(path, tmp_name)
        else:
            os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except OSError:
        Path(tmp_name).unlink(missing_ok=True)
        raise


async def persist_changelog(
    path: Path,
    entry: str,
    header: str | None = None,
    *,
    full_history: Callable[[], Awaitable[str]],
) -> bool:
    """Write ``entry`` into the changelog file at ``path``.

    Args:
        path: Changelog file
        entry: Rendered changelog for the release
        header: Header kept at the top of the file
        full_history: Renders the complete history; used instead of
                      ``entry`` when the file does not exist yet

    Returns:
        True if the file was created by this call

    Raises:
        ChangelogWriteError: If the file cannot be written
        RenderingError: If rendering the full history fails
    """
    is_new = not has_changelog(path)
    if is_new:
        entry = await full_history()
        previous = ""
    else:
        previous = await asyncio.to_thread(_read_previous, path)

    content = merge_changelog(entry, previous, header)
    try:
        await asyncio.to_thread(_write_atomic, path, content)
    except OSError as e:
        raise ChangelogWriteError(f"Cannot write {path}: {e}") from e

    logger.info("Wrote changelog", path=str(path), created=is_new)
    return is_new
