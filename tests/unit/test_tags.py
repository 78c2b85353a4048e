"""Tests for tag templates and comparison tag resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING

from changelog_py.core.tags import (
    TagPair,
    default_tag_template,
    discover_tags,
    filter_release_tags,
    render_tag_template,
    resolve_tags,
    tag_template_from_config,
    version_from_tag,
)

if TYPE_CHECKING:
    from tests.conftest import FakeRepository


class TestTagTemplates:
    """Tests for building, rendering and matching templates."""

    def test_template_from_config(self):
        """tag_name wins over tag_prefix."""
        assert tag_template_from_config("next-${version}", "v") == "next-${version}"
        assert tag_template_from_config(None, "v") == "v${version}"
        assert tag_template_from_config(None, "") == "${version}"
        assert tag_template_from_config(None, None) is None

    def test_default_template(self):
        """The template is inferred from the latest tag's prefix."""
        assert default_tag_template("v1.0.0") == "v${version}"
        assert default_tag_template("1.0.0") == "${version}"
        assert default_tag_template(None) == "${version}"

    def test_render(self):
        assert render_tag_template("next-${version}", "1.1.0") == "next-1.1.0"

    def test_version_from_tag(self):
        assert version_from_tag("v1.2.3", "v${version}") == "1.2.3"
        assert version_from_tag("pkg-1.2.3-final", "pkg-${version}-final") == "1.2.3"
        assert version_from_tag("1.2.3", "v${version}") is None
        assert version_from_tag("vnext", "v${version}") is None
        assert version_from_tag("v1.2.3", "no placeholder") is None

    def test_filter_release_tags(self):
        """Only template matches survive; skip_unstable drops pre-releases."""
        tags = ["v1.1.0-rc.0", "v1.0.0", "docs-1", "0.9.0"]

        assert filter_release_tags(tags, "v${version}") == ["v1.1.0-rc.0", "v1.0.0"]
        assert filter_release_tags(tags, "v${version}", skip_unstable=True) == ["v1.0.0"]


class TestResolveTags:
    """Tests for resolve_tags()."""

    def test_incrementing(self):
        """The new tag is rendered from the template and compared to the latest."""
        pair = resolve_tags(
            is_incrementing=True,
            version="1.1.0",
            latest_tag="next-1.0.0",
            second_latest_tag=None,
            tag_template="next-${version}",
        )

        assert pair == TagPair(previous_tag="next-1.0.0", current_tag="next-1.1.0")

    def test_incrementing_infers_template(self):
        pair = resolve_tags(
            is_incrementing=True,
            version="1.1.0",
            latest_tag="v1.0.0",
            second_latest_tag=None,
            tag_template=None,
        )

        assert pair.current_tag == "v1.1.0"

    def test_first_release(self):
        """Without any tag the range starts at the first commit."""
        pair = resolve_tags(
            is_incrementing=True,
            version="0.1.0",
            latest_tag=None,
            second_latest_tag=None,
            tag_template=None,
        )

        assert pair == TagPair(previous_tag=None, current_tag="0.1.0")

    def test_not_incrementing(self):
        """Regenerating compares the latest tag to the one before it."""
        pair = resolve_tags(
            is_incrementing=False,
            version="1.0.0",
            latest_tag="v1.0.0",
            second_latest_tag="v0.9.0",
            tag_template="v${version}",
        )

        assert pair == TagPair(previous_tag="v0.9.0", current_tag="v1.0.0")


class TestDiscoverTags:
    """Tests for discover_tags()."""

    async def test_with_template(self, fake_repo: FakeRepository):
        fake_repo.tags = ["next-1.1.0", "v1.0.0", "next-1.0.0"]

        assert await discover_tags(fake_repo, "next-${version}") == ["next-1.1.0", "next-1.0.0"]

    async def test_without_template_accepts_bare_and_v_prefix(self, fake_repo: FakeRepository):
        fake_repo.tags = ["v1.1.0", "1.0.0", "latest", "release-0.1"]

        assert await discover_tags(fake_repo, None) == ["v1.1.0", "1.0.0"]

    async def test_skip_unstable(self, fake_repo: FakeRepository):
        fake_repo.tags = ["v1.1.0-beta.0", "v1.0.0"]

        assert await discover_tags(fake_repo, None, skip_unstable=True) == ["v1.0.0"]
