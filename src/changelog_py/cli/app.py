"""Command line entry point for changelog-py."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from changelog_py.cli.commands.recommend import run_recommend
from changelog_py.cli.commands.update import run_update
from changelog_py.logging import configure_logging

app = typer.Typer(
    name="changelog-py",
    help="Recommend the next semantic version and keep a changelog from conventional commits.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

PathArg = Annotated[str | None, typer.Argument(help="Project directory (default: cwd)")]
IncrementOpt = Annotated[
    str | None,
    typer.Option("--increment", "-i", help="Bump kind (major, minor, patch) or explicit version"),
]
PrereleaseOpt = Annotated[
    str | None,
    typer.Option("--preid", "--prerelease", "-p", help="Pre-release identifier (alpha, rc)"),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug output")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only warnings and errors")] = False,
    json_log: Annotated[bool, typer.Option("--json-log", help="Log as JSON lines")] = False,
) -> None:
    configure_logging(verbose=verbose, quiet=quiet, json_log=json_log)


@app.command()
def update(
    path: PathArg = None,
    execute: Annotated[
        bool, typer.Option("--execute", help="Write the changelog instead of a dry run")
    ] = False,
    increment: IncrementOpt = None,
    no_increment: Annotated[
        bool, typer.Option("--no-increment", help="Regenerate the latest release's changelog")
    ] = False,
    prerelease: PrereleaseOpt = None,
) -> None:
    """Resolve the next version and update the changelog file."""
    run_update(path, execute, increment, no_increment, prerelease, console, err_console)


@app.command()
def recommend(
    path: PathArg = None,
    increment: IncrementOpt = None,
    prerelease: PrereleaseOpt = None,
) -> None:
    """Print the recommended next version."""
    run_recommend(path, increment, prerelease, console, err_console)
