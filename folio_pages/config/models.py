"""Typed dataclasses describing folio site configuration structures."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from .._constants import DEFAULT_FEED_FILENAME, DEFAULT_TAG_ROUTE


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(frozen=True, slots=True)
class SiteMetadata:
    """Identity of the site used in titles, feeds and canonical URLs."""

    name: str
    base_title: str
    url: str
    author: str
    language: str = "en"
    description: str | None = None

    def format_title(self, page_title: str) -> str:
        """Compose the document title from a page title and the base title."""
        if not page_title or page_title == self.base_title:
            return self.base_title
        return f"{page_title} - {self.base_title}"


@dc.dataclass(slots=True)
class ThemeConfig:
    """Visual settings shared by every generated page."""

    accent: str = "cornflowerblue"
    nav_style: str = "dark"
    nav_position: str = "fixed-top"
    pygments_style: str = "monokai"
    builtin_icons: bool = True


@dc.dataclass(slots=True)
class NavLinkConfig:
    """Navigation or footer link; ``children`` turns it into a dropdown."""

    label: str
    href: str | None = None
    page: str | None = None
    children: list[NavLinkConfig] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class NavigationConfig:
    """Navigation bar shown at the top of every page."""

    logo: str
    links: list[NavLinkConfig]
    align: str = "trailing"


@dc.dataclass(slots=True)
class FooterConfig:
    """Footer link row and optional credit line."""

    links: list[NavLinkConfig]
    separator: str = "•"
    credit_text: str | None = None
    credit_label: str | None = None
    credit_href: str | None = None


@dc.dataclass(slots=True)
class ImageConfig:
    """Image reference with its accessibility description."""

    src: str
    description: str | None = None
    max_height: int | None = None


@dc.dataclass(slots=True)
class PageConfig:
    """A static page definition sourced from YAML config.

    ``kind`` selects the composition function: ``"text"`` pages show a
    heading, images, lead and Markdown body; ``"listing"`` pages show
    previews of the items carrying ``tag``.
    """

    key: str
    kind: str
    route: str
    title: str
    heading: str | None = None
    heading_font: str = "title1"
    lead: str | None = None
    body: str | None = None
    description: str | None = None
    images: list[ImageConfig] = dc.field(default_factory=list)
    links: list[NavLinkConfig] = dc.field(default_factory=list)
    tag: str | None = None
    sort: str = "load"
    card_width: int = 4
    columns: int | None = None


@dc.dataclass(slots=True)
class TagPageConfig:
    """Tag listing pages: one per tag plus an all-tags view."""

    route: str = DEFAULT_TAG_ROUTE
    title: str = "Tags"
    all_tags_heading: str = "All tags"
    heading_font: str = "title1"


@dc.dataclass(slots=True)
class LayoutConfig:
    """Content layout; an empty ``tags`` list accepts every item."""

    name: str
    kind: str = "article"
    tags: list[str] = dc.field(default_factory=list)
    tag_tint: str | None = None


@dc.dataclass(slots=True)
class CrawlerRuleConfig:
    """Paths a named crawler may not visit; no paths blocks the whole site."""

    agent: str
    paths: list[str] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class FeedConfig:
    """RSS feed settings."""

    enabled: bool = True
    filename: str = DEFAULT_FEED_FILENAME
    item_count: int = 20


@dc.dataclass(slots=True)
class SiteConfig:
    """Complete site definition consumed by the publisher."""

    site: SiteMetadata
    home: PageConfig
    content_dir: Path = Path("content")
    output_dir: Path = Path("build")
    assets_dir: Path | None = None
    syntax_highlighters: list[str] | None = None
    theme: ThemeConfig = dc.field(default_factory=ThemeConfig)
    navigation: NavigationConfig | None = None
    footer: FooterConfig | None = None
    pages: dict[str, PageConfig] = dc.field(default_factory=dict)
    tag_page: TagPageConfig | None = None
    layouts: list[LayoutConfig] = dc.field(default_factory=list)
    robots: list[CrawlerRuleConfig] = dc.field(default_factory=list)
    feed: FeedConfig = dc.field(default_factory=FeedConfig)

    def get_page(self, page_id: str) -> PageConfig:
        """Return the requested page, accepting ``"home"`` for the home page."""
        if page_id == self.home.key:
            return self.home
        try:
            return self.pages[page_id]
        except KeyError as exc:
            available = ", ".join(sorted(self.pages))
            msg = f"Unknown page '{page_id}'. Known pages: {available}"
            raise KeyError(msg) from exc


__all__ = [
    "CrawlerRuleConfig",
    "FeedConfig",
    "FooterConfig",
    "ImageConfig",
    "LayoutConfig",
    "NavLinkConfig",
    "NavigationConfig",
    "PageConfig",
    "SiteConfig",
    "SiteConfigError",
    "SiteMetadata",
    "TagPageConfig",
    "ThemeConfig",
]
