"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .._constants import DEFAULT_FEED_FILENAME
from .helpers import (
    _build_images,
    _build_nav_links,
    _normalize_list,
    _normalize_route,
    _optional_int,
    _optional_markdown,
    _optional_str,
)
from .models import (
    CrawlerRuleConfig,
    FeedConfig,
    FooterConfig,
    LayoutConfig,
    NavigationConfig,
    PageConfig,
    SiteConfig,
    SiteConfigError,
    SiteMetadata,
    TagPageConfig,
    ThemeConfig,
)

PAGE_KINDS = frozenset({"text", "listing"})
LAYOUT_KINDS = frozenset({"article"})
SORT_ORDERS = frozenset({"load", "date-desc", "date-asc"})


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing the site, pages and layouts.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``config/site.yaml``).

    Returns
    -------
    SiteConfig
        Parsed site configuration with defaults applied.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    SiteConfigError
        If required sections or fields are missing or invalid.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from folio_pages.config import load_site_config
    >>> config = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
    >>> config.site.name  # doctest: +SKIP
    'Example Dev'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise SiteConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    site_raw = _mapping(raw.get("site"), section="site")
    metadata = _build_site_metadata(site_raw)

    home_raw = raw.get("home")
    if not home_raw:
        msg = "Site configuration requires a 'home' page."
        raise SiteConfigError(msg)
    home = _build_page_config(
        key="home", payload=_mapping(home_raw, section="home"), default_route="/"
    )

    pages: dict[str, PageConfig] = {}
    for key, payload in (_mapping(raw.get("pages"), section="pages")).items():
        pages[str(key)] = _build_page_config(
            key=str(key),
            payload=_mapping(payload, section=f"pages.{key}"),
            default_route=f"/{key}",
        )

    assets_dir = _optional_str(site_raw.get("assets_dir"))
    return SiteConfig(
        site=metadata,
        home=home,
        content_dir=Path(site_raw.get("content_dir", "content")),
        output_dir=Path(site_raw.get("output_dir", "build")),
        assets_dir=Path(assets_dir) if assets_dir else None,
        syntax_highlighters=_build_highlighters(site_raw.get("syntax_highlighters")),
        theme=_build_theme_config(_mapping(raw.get("theme"), section="theme")),
        navigation=_build_navigation(raw.get("navigation"), metadata),
        footer=_build_footer(raw.get("footer")),
        pages=pages,
        tag_page=_build_tag_page(raw.get("tag_page")),
        layouts=_build_layouts(raw.get("layouts")),
        robots=_build_robots(raw.get("robots")),
        feed=_build_feed(_mapping(raw.get("feed"), section="feed")),
    )


def _mapping(value: object, *, section: str) -> dict[str, typ.Any]:
    """Return ``value`` as a dict, treating None as empty."""
    match value:
        case None:
            return {}
        case dict():
            return dict(value)
        case _:
            msg = f"'{section}' must be a mapping."
            raise SiteConfigError(msg)


def _build_site_metadata(payload: typ.Mapping[str, typ.Any]) -> SiteMetadata:
    name = _optional_str(payload.get("name"))
    url = _optional_str(payload.get("url"))
    if not (name and url):
        msg = "The 'site' block requires 'name' and 'url'."
        raise SiteConfigError(msg)
    return SiteMetadata(
        name=name,
        base_title=_optional_str(payload.get("base_title")) or name,
        url=url.rstrip("/"),
        author=_optional_str(payload.get("author")) or name,
        language=_optional_str(payload.get("language")) or "en",
        description=_optional_str(payload.get("description")),
    )


def _build_highlighters(value: object) -> list[str] | None:
    """Return enabled fence languages; None (key absent) enables every language."""
    if value is None:
        return None
    return [language.lower() for language in _normalize_list(value)]  # type: ignore[arg-type]


def _build_theme_config(payload: typ.Mapping[str, typ.Any]) -> ThemeConfig:
    """Build a ThemeConfig instance from the provided mapping payload."""
    base = ThemeConfig()
    return ThemeConfig(
        accent=payload.get("accent", base.accent),
        nav_style=payload.get("nav_style", base.nav_style),
        nav_position=payload.get("nav_position", base.nav_position),
        pygments_style=payload.get("pygments_style", base.pygments_style),
        builtin_icons=bool(payload.get("builtin_icons", base.builtin_icons)),
    )


def _build_page_config(
    *, key: str, payload: typ.Mapping[str, typ.Any], default_route: str
) -> PageConfig:
    """Build a PageConfig for a single page entry."""
    kind = payload.get("kind", "text")
    if kind not in PAGE_KINDS:
        msg = f"Page '{key}' has unknown kind '{kind}'."
        raise SiteConfigError(msg)
    title = _optional_str(payload.get("title")) or key.replace("-", " ").title()
    sort = payload.get("sort", "date-desc" if kind == "listing" else "load")
    if sort not in SORT_ORDERS:
        msg = f"Page '{key}' has unknown sort order '{sort}'."
        raise SiteConfigError(msg)
    tag = _optional_str(payload.get("tag"))
    if kind == "listing" and tag is None:
        msg = f"Listing page '{key}' requires a 'tag'."
        raise SiteConfigError(msg)

    return PageConfig(
        key=key,
        kind=kind,
        route=_normalize_route(
            payload.get("route", default_route), field=f"{key}.route"
        ),
        title=title,
        heading=_optional_str(payload.get("heading")),
        heading_font=payload.get("heading_font", "title1"),
        lead=_optional_str(payload.get("lead")),
        body=_optional_markdown(payload.get("body"), field=f"{key}.body"),
        description=_optional_str(payload.get("description")),
        images=_build_images(payload.get("images"), section=key),
        links=_build_nav_links(payload.get("links"), section=key),
        tag=tag,
        sort=sort,
        card_width=_optional_int(payload.get("card_width"), field=f"{key}.card_width")
        or 4,
        columns=_optional_int(payload.get("columns"), field=f"{key}.columns"),
    )


def _build_navigation(
    payload: object, metadata: SiteMetadata
) -> NavigationConfig | None:
    if payload is None:
        return None
    data = _mapping(payload, section="navigation")
    return NavigationConfig(
        logo=_optional_str(data.get("logo")) or metadata.name,
        links=_build_nav_links(data.get("links"), section="navigation"),
        align=data.get("align", "trailing"),
    )


def _build_footer(payload: object) -> FooterConfig | None:
    if payload is None:
        return None
    data = _mapping(payload, section="footer")
    credit = _mapping(data.get("credit"), section="footer.credit")
    return FooterConfig(
        links=_build_nav_links(data.get("links"), section="footer"),
        separator=str(data.get("separator", "•")),
        credit_text=_optional_str(credit.get("text")),
        credit_label=_optional_str(credit.get("label")),
        credit_href=_optional_str(credit.get("href")),
    )


def _build_tag_page(payload: object) -> TagPageConfig | None:
    if payload is None or payload is False:
        return None
    data = {} if payload is True else _mapping(payload, section="tag_page")
    base = TagPageConfig()
    return TagPageConfig(
        route=_normalize_route(data.get("route", base.route), field="tag_page.route"),
        title=_optional_str(data.get("title")) or base.title,
        all_tags_heading=_optional_str(data.get("all_tags_heading"))
        or base.all_tags_heading,
        heading_font=data.get("heading_font", base.heading_font),
    )


def _build_layouts(payload: object) -> list[LayoutConfig]:
    """Build layouts in declaration order; a missing block yields one article."""
    if payload is None:
        return [LayoutConfig(name="article")]
    if not isinstance(payload, list):
        msg = "'layouts' must be a list."
        raise SiteConfigError(msg)
    layouts: list[LayoutConfig] = []
    for entry in payload:
        data = _mapping(entry, section="layouts")
        name = _optional_str(data.get("name"))
        if not name:
            msg = "Each layout requires a 'name'."
            raise SiteConfigError(msg)
        kind = data.get("kind", "article")
        if kind not in LAYOUT_KINDS:
            msg = f"Layout '{name}' has unknown kind '{kind}'."
            raise SiteConfigError(msg)
        layouts.append(
            LayoutConfig(
                name=name,
                kind=kind,
                tags=_normalize_list(data.get("tags")),
                tag_tint=_optional_str(data.get("tag_tint")),
            )
        )
    return layouts


def _build_robots(payload: object) -> list[CrawlerRuleConfig]:
    """Accept either a list of ``{agent, paths}`` or an ``agent: paths`` map."""
    match payload:
        case None:
            return []
        case dict():
            entries = [
                {"agent": agent, "paths": paths} for agent, paths in payload.items()
            ]
        case list():
            entries = payload
        case _:
            msg = "'robots' must be a list or a mapping."
            raise SiteConfigError(msg)
    rules: list[CrawlerRuleConfig] = []
    for entry in entries:
        data = _mapping(entry, section="robots")
        agent = _optional_str(data.get("agent"))
        if not agent:
            msg = "Each robots rule requires an 'agent'."
            raise SiteConfigError(msg)
        rules.append(
            CrawlerRuleConfig(agent=agent, paths=_normalize_list(data.get("paths")))
        )
    return rules


def _build_feed(payload: typ.Mapping[str, typ.Any]) -> FeedConfig:
    return FeedConfig(
        enabled=bool(payload.get("enabled", True)),
        filename=_optional_str(payload.get("filename")) or DEFAULT_FEED_FILENAME,
        item_count=_optional_int(payload.get("item_count"), field="feed.item_count")
        or 20,
    )


__all__ = ["load_site_config"]
