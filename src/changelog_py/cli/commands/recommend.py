"""Implementation of the 'recommend' command."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

from changelog_py.cli.commands.update import build_options, build_plugin
from changelog_py.exceptions import ChangelogPyError

if TYPE_CHECKING:
    from rich.console import Console

    from changelog_py.core.context import ReleaseContext
    from changelog_py.core.release import ChangelogPlugin, ReleaseOptions


async def _recommend(plugin: ChangelogPlugin, options: ReleaseOptions) -> ReleaseContext:
    ctx = await plugin.init_context(options)
    return await plugin.get_incremented_version(ctx)


def run_recommend(
    path: str | None,
    increment: str | None,
    prerelease: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Print the recommended next version, or nothing when no release is due."""
    project_path = Path(path) if path else Path.cwd()
    plugin = build_plugin(project_path, err_console)

    try:
        ctx = asyncio.run(_recommend(plugin, build_options(project_path, increment, prerelease)))
    except ChangelogPyError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    if ctx.version is None:
        err_console.print("[yellow]No release recommended.[/]")
        raise SystemExit(2)
    console.print(ctx.version, highlight=False)
