"""Shared fixtures for building throwaway sites in a temporary directory.

``site_root`` writes a minimal ``site.yaml`` (home page, a ``posts`` listing,
tag pages and a single catch-all layout) whose content and output folders live
under ``tmp_path``. Tests add content with :func:`write_content` and then
load the configuration with :func:`folio_pages.config.load_site_config`.
"""

from __future__ import annotations

import datetime as dt
import typing as typ
from textwrap import dedent

import pytest

from folio_pages.config import SiteMetadata
from folio_pages.context import BuildContext

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from folio_pages.content import ContentItem

FIXED_NOW = dt.datetime(2024, 6, 1, 12, 0, tzinfo=dt.UTC)

SITE_TEMPLATE = """\
site:
  name: Test Site
  url: https://example.test
  author: Test Author
  content_dir: {root}/content
  output_dir: {root}/build
home:
  title: Home
  heading: Welcome
  body: Hello from the test site.
pages:
  posts:
    kind: listing
    title: Posts
    tag: Post
tag_page: true
layouts:
  - name: article
{extra}"""


def write_content(
    root: Path,
    relative: str,
    *,
    title: str,
    date: str,
    tags: cabc.Sequence[str] = (),
    body: str = "Body text.",
    extra: str = "",
) -> Path:
    """Write a Markdown file with front matter below ``root / "content"``."""
    path = root / "content" / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    tag_line = f"tags: [{', '.join(tags)}]\n" if tags else ""
    path.write_text(
        f"---\ntitle: {title}\ndate: {date}\n{tag_line}{extra}---\n\n{body}\n",
        encoding="utf-8",
    )
    return path


def write_site_config(root: Path, extra: str = "") -> Path:
    """Write ``site.yaml`` under ``root`` and return its path."""
    config_path = root / "site.yaml"
    config_path.write_text(
        SITE_TEMPLATE.format(root=root.as_posix(), extra=dedent(extra)),
        encoding="utf-8",
    )
    return config_path


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """Return a temporary site directory with ``site.yaml`` and empty content."""
    (tmp_path / "content").mkdir()
    write_site_config(tmp_path)
    return tmp_path


@pytest.fixture
def site_metadata() -> SiteMetadata:
    """Return site metadata for renders that do not need a full config."""
    return SiteMetadata(
        name="Test Site",
        base_title="Test Site",
        url="https://example.test",
        author="Test Author",
    )


@pytest.fixture
def make_context(
    site_metadata: SiteMetadata,
) -> cabc.Callable[..., BuildContext]:
    """Return a factory building a :class:`BuildContext` for render tests."""

    def factory(
        items: cabc.Iterable[ContentItem] = (),
        page_routes: cabc.Mapping[str, str] | None = None,
    ) -> BuildContext:
        return BuildContext.create(
            site=site_metadata,
            items=items,
            page_routes=page_routes or {"home": "/", "about": "/about"},
            generated_at=FIXED_NOW,
        )

    return factory


@pytest.fixture
def fixed_now() -> dt.datetime:
    """Return the timestamp used for reproducible builds."""
    return FIXED_NOW


@pytest.fixture
def add_content(site_root: Path) -> cabc.Callable[..., Path]:
    """Return a helper writing content files into ``site_root``."""

    def add(relative: str, **kwargs: typ.Any) -> Path:
        return write_content(site_root, relative, **kwargs)

    return add


@pytest.fixture
def configure_site(site_root: Path) -> cabc.Callable[[str], Path]:
    """Return a helper rewriting ``site.yaml`` with extra top-level YAML."""

    def configure(extra: str) -> Path:
        return write_site_config(site_root, extra)

    return configure
