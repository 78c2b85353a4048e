"""Implementation of the 'update' command.

The update command resolves the next version and renders its changelog,
writing the changelog file when run with ``--execute``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

from rich.markdown import Markdown
from rich.panel import Panel

from changelog_py.config import get_project_version, load_config
from changelog_py.core.release import ChangelogPlugin, ReleaseOptions
from changelog_py.exceptions import ChangelogPyError
from changelog_py.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

    from changelog_py.core.context import Increment, ReleaseContext


def build_plugin(project_path: Path, err_console: Console) -> ChangelogPlugin:
    """Load configuration and open the repository, exiting on failure."""
    try:
        config = load_config(project_path)
    except ChangelogPyError as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise SystemExit(1) from e

    try:
        repo = GitRepository(project_path)
    except ChangelogPyError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    return ChangelogPlugin(config, repo)


def build_options(
    project_path: Path,
    increment: Increment,
    prerelease: str | None,
) -> ReleaseOptions:
    """Release options for a CLI run.

    The pyproject.toml version stands in for the latest release until the
    first release tag exists.
    """
    try:
        initial_version = get_project_version(project_path)
    except ChangelogPyError:
        initial_version = "0.0.0"
    return ReleaseOptions(
        increment=increment,
        is_pre_release=prerelease is not None,
        pre_release_id=prerelease or None,
        initial_version=initial_version,
    )


def run_update(
    path: str | None,
    execute: bool,
    increment: str | None,
    no_increment: bool,
    prerelease: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the update command.

    Args:
        path: Optional path to project directory
        execute: Whether to actually write the changelog
        increment: Bump kind ("major", "minor", ...) or explicit version
        no_increment: Keep the latest version and regenerate its changelog
        prerelease: Pre-release identifier (e.g., "alpha", "beta", "rc")
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()
    plugin = build_plugin(project_path, err_console)
    options = build_options(project_path, False if no_increment else increment, prerelease)

    try:
        ctx = asyncio.run(plugin.run(options, dry_run=not execute))
    except ChangelogPyError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    if ctx.version is None:
        console.print(
            "[yellow]No releasable changes found since the last release.[/]\n"
            "[dim]Use [cyan]--increment[/] to force a bump or a specific version.[/]"
        )
        return

    _print_summary(ctx, plugin, execute, console)


def _print_summary(
    ctx: ReleaseContext,
    plugin: ChangelogPlugin,
    execute: bool,
    console: Console,
) -> None:
    mode_str = "[green]EXECUTING[/]" if execute else "[yellow]DRY-RUN[/]"
    if not ctx.is_incrementing:
        console.print(f"\n{mode_str} - Regenerating changelog for [cyan]{ctx.version}[/]\n")
    elif ctx.latest_tag is None:
        console.print(f"\n{mode_str} - First release! Version [green]{ctx.version}[/]\n")
    else:
        console.print(
            f"\n{mode_str} - Updating from [cyan]{ctx.latest_version}[/] "
            f"to [green]{ctx.version}[/]\n"
        )

    console.print(
        Panel(
            Markdown(ctx.changelog or "_Empty changelog_"),
            title=f"[bold]{ctx.previous_tag or 'start'} → {ctx.current_tag or 'HEAD'}[/]",
            border_style="cyan",
        )
    )

    infile = plugin.config.infile
    if not infile:
        console.print("[dim]Changelog file disabled; nothing written.[/]")
        return

    if not execute:
        console.print(f"\n[dim]Run with [cyan]--execute[/] to write [cyan]{infile}[/].[/]")
        return

    created = " (new file, staged)" if ctx.is_new_infile else ""
    console.print(
        Panel(
            f"[green]Changelog for {ctx.version} written to {infile}{created}[/]\n\n"
            "Next steps:\n"
            "  1. Review the changes\n"
            f"  2. Commit: [cyan]git commit -am 'chore(release): {ctx.version}'[/]\n"
            f"  3. Tag: [cyan]git tag {ctx.current_tag}[/]",
            title="[green]Update Complete[/]",
            border_style="green",
        )
    )
