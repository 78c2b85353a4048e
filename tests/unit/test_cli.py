"""Tests for the command line interface."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from changelog_py.cli.app import app
from changelog_py.vcs.git import Commit

if TYPE_CHECKING:
    from tests.conftest import FakeRepository

MakeCommit = Callable[..., Commit]

runner = CliRunner()


@pytest.fixture
def project(fake_repo: FakeRepository, make_commit: MakeCommit) -> Iterator[FakeRepository]:
    """A project directory whose git repository is faked."""
    (fake_repo.path / "pyproject.toml").write_text(
        '[project]\nname = "demo"\nversion = "1.0.0"\n\n[tool.changelog-py]\npreset = "angular"\n'
    )
    fake_repo.tags = ["v1.0.0"]
    fake_repo.commits[("v1.0.0", None)] = [make_commit("feat: shiny")]
    with (
        patch("changelog_py.cli.commands.update.GitRepository", return_value=fake_repo),
        patch("changelog_py.cli.app.configure_logging"),
    ):
        yield fake_repo


class TestRecommendCommand:
    """Tests for `changelog-py recommend`."""

    def test_prints_version(self, project: FakeRepository):
        result = runner.invoke(app, ["recommend", str(project.path)])

        assert result.exit_code == 0
        assert result.stdout.strip() == "1.1.0"

    def test_increment_option(self, project: FakeRepository):
        result = runner.invoke(app, ["recommend", str(project.path), "-i", "major"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "2.0.0"

    def test_prerelease_option(self, project: FakeRepository):
        result = runner.invoke(app, ["recommend", str(project.path), "--prerelease", "beta"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "1.1.0-beta.0"

    def test_nothing_to_release(self, project: FakeRepository):
        project.commits[("v1.0.0", None)] = []

        result = runner.invoke(app, ["recommend", str(project.path)])

        assert result.exit_code == 2

    def test_invalid_config(self, project: FakeRepository):
        (project.path / "pyproject.toml").write_text("[tool.changelog-py]\nbogus = 1\n")

        result = runner.invoke(app, ["recommend", str(project.path)])

        assert result.exit_code == 1

    def test_unknown_preset(self, project: FakeRepository):
        (project.path / "pyproject.toml").write_text('[tool.changelog-py]\npreset = "nope"\n')

        result = runner.invoke(app, ["recommend", str(project.path)])

        assert result.exit_code == 1


class TestUpdateCommand:
    """Tests for `changelog-py update`."""

    def test_dry_run(self, project: FakeRepository):
        result = runner.invoke(app, ["update", str(project.path)])

        assert result.exit_code == 0
        assert "DRY-RUN" in result.stdout
        assert not (project.path / "CHANGELOG.md").exists()

    def test_execute_writes_changelog(self, project: FakeRepository):
        result = runner.invoke(app, ["update", str(project.path), "--execute"])

        assert result.exit_code == 0
        content = (project.path / "CHANGELOG.md").read_text()
        assert content.startswith("# Changelog\n\n## 1.1.0 (")
        assert "shiny" in content
        assert project.added == [project.path / "CHANGELOG.md"]

    def test_no_increment(self, project: FakeRepository, make_commit: MakeCommit):
        project.commits[(None, "v1.0.0")] = [make_commit("feat: first")]

        result = runner.invoke(app, ["update", str(project.path), "--no-increment"])

        assert result.exit_code == 0
        assert "Regenerating changelog" in result.stdout

    def test_nothing_to_release(self, project: FakeRepository):
        project.commits[("v1.0.0", None)] = []

        result = runner.invoke(app, ["update", str(project.path), "--execute"])

        assert result.exit_code == 0
        assert "No releasable changes" in result.stdout
        assert not (project.path / "CHANGELOG.md").exists()


def test_help_lists_commands():
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "update" in result.output
    assert "recommend" in result.output
