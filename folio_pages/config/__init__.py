"""Load and validate the site configuration YAML for folio builds.

This subpackage parses the project's ``site.yaml`` file, applies defaults,
normalises routes and link blocks, and produces typed dataclasses
(:class:`SiteConfig`, :class:`PageConfig`, etc.) that the registry and
publisher consume. The primary entry point is :func:`load_site_config`.

Examples
--------
>>> from pathlib import Path
>>> from folio_pages.config import load_site_config
>>> site = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
>>> site.get_page("about").route  # doctest: +SKIP
'/about'
"""

from .loader import load_site_config
from .models import (
    CrawlerRuleConfig,
    FeedConfig,
    FooterConfig,
    ImageConfig,
    LayoutConfig,
    NavigationConfig,
    NavLinkConfig,
    PageConfig,
    SiteConfig,
    SiteConfigError,
    SiteMetadata,
    TagPageConfig,
    ThemeConfig,
)

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
    "load_site_config",
]
