"""Page composition functions for the portfolio site.

Every page of the site is a small function from the build context to an
element tree. The functions here read their copy from
:class:`~folio_pages.config.PageConfig` entries so the wording lives in
``site.yaml`` while the structure lives in code:

* ``text`` pages: heading, optional image row, lead paragraph, Markdown body
  and a list of links (home, about).
* ``listing`` pages: heading, lead and a row of previews for every item with
  a given tag (posts, projects).
* the tag page: a heading plus links to every item carrying the tag, or to
  every tagged item for the all-tags view.
* the ``article`` layout used for posts and projects.
"""

from __future__ import annotations

import posixpath
import typing as typ

from .elements import (
    ContentPreview,
    Dropdown,
    Image,
    ItemList,
    Link,
    Markdown,
    NavigationBar,
    Section,
    TagLinks,
    Text,
)
from .registry import Layout, PageRegistry, StaticPage, TagPage

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config import (
        FooterConfig,
        LayoutConfig,
        NavLinkConfig,
        PageConfig,
        SiteConfig,
        TagPageConfig,
        ThemeConfig,
    )
    from .config.models import NavigationConfig
    from .content import ContentItem
    from .context import BuildContext
    from .elements import Element
    from .registry import LayoutBody, PageBody, TagPageBody


def text_page(page: PageConfig) -> PageBody:
    """Compose a heading, images, lead, Markdown body and link list."""

    def body(context: BuildContext) -> list[Element]:
        elements: list[Element] = [
            Text(page.heading or page.title, font=page.heading_font)
        ]
        if page.images:
            elements.append(
                Section(
                    tuple(
                        Image(
                            src=image.src,
                            description=image.description,
                            max_height=image.max_height,
                            align="center",
                        )
                        for image in page.images
                    )
                )
            )
        if page.lead:
            elements.append(Text(page.lead, font="lead"))
        if page.body:
            elements.append(Markdown(page.body))
        if page.links:
            elements.append(ItemList(tuple(_link(link) for link in page.links)))
        return elements

    return body


def listing_page(page: PageConfig) -> PageBody:
    """Compose a heading, lead and previews of the items tagged ``page.tag``."""

    def body(context: BuildContext) -> list[Element]:
        elements: list[Element] = [
            Text(page.heading or page.title, font=page.heading_font)
        ]
        if page.lead:
            elements.append(Text(page.lead, font="lead"))
        if page.body:
            elements.append(Markdown(page.body))
        items = context.sorted_content(context.content_tagged(page.tag), page.sort)
        previews = tuple(ContentPreview(item, width=page.card_width) for item in items)
        elements.append(
            Section(previews, columns=page.columns, margin="extra-large")
        )
        return elements

    return body


def tag_page(config: TagPageConfig) -> TagPageBody:
    """List links to the items carrying a tag, or every tagged item."""

    def body(tag: str | None, context: BuildContext) -> list[Element]:
        heading = tag if tag is not None else config.all_tags_heading
        links = tuple(
            Link(item.title, item.route) for item in context.content_tagged(tag)
        )
        return [Text(heading, font=config.heading_font), ItemList(links)]

    return body


def article_layout(layout: LayoutConfig, theme: ThemeConfig) -> LayoutBody:
    """Compose the hero image, title, tag links and body of a content item."""
    tint = layout.tag_tint or theme.accent

    def body(item: ContentItem, context: BuildContext) -> list[Element]:
        elements: list[Element] = []
        if item.image:
            elements.append(Image(src=item.image, description=item.image_description))
        elements.append(Text(item.title, font="title1"))
        if item.subtitle:
            elements.append(Text(item.subtitle, font="lead"))
        if item.has_tags:
            elements.append(Text((TagLinks(item),), font="title3", tint=tint))
        elements.append(
            Markdown(item.body, base_dir=posixpath.dirname(item.identifier))
        )
        return elements

    return body


def navigation_bar(
    navigation: NavigationConfig, theme: ThemeConfig
) -> NavigationBar:
    """Build the navigation bar shown at the top of every page."""
    items: list[Link | Dropdown] = []
    for link in navigation.links:
        if link.children:
            items.append(
                Dropdown(link.label, tuple(_link(child) for child in link.children))
            )
        else:
            items.append(_link(link))
    return NavigationBar(
        logo=navigation.logo,
        items=tuple(items),
        style=theme.nav_style,
        position=theme.nav_position,
        background=theme.accent,
        align=navigation.align,
    )


def footer(config: FooterConfig) -> list[Element]:
    """Build the footer: a separated row of links and an optional credit."""
    elements: list[Element] = []
    if config.links:
        parts: list[str | Link] = []
        for index, link in enumerate(config.links):
            if index:
                parts.append(f" {config.separator} ")
            parts.append(_link(link))
        elements.append(Text(tuple(parts), align="center"))
    if config.credit_label and config.credit_href:
        prefix = f"{config.credit_text} " if config.credit_text else ""
        elements.append(
            Text(
                (prefix, Link(config.credit_label, config.credit_href)),
                font="small",
                align="center",
            )
        )
    return elements


def site_chrome(config: SiteConfig) -> tuple[list[Element], list[Element]]:
    """Return the header and footer trees wrapped around every page."""
    header: list[Element] = []
    if config.navigation is not None:
        header.append(navigation_bar(config.navigation, config.theme))
    footer_tree = footer(config.footer) if config.footer is not None else []
    return header, footer_tree


PAGE_BUILDERS: dict[str, cabc.Callable[[PageConfig], PageBody]] = {
    "text": text_page,
    "listing": listing_page,
}
LAYOUT_BUILDERS: dict[str, cabc.Callable[[LayoutConfig, ThemeConfig], LayoutBody]] = {
    "article": article_layout,
}


def build_registry(config: SiteConfig) -> PageRegistry:
    """Create the page registry described by ``config``.

    Raises
    ------
    BuildError
        If two pages share a route or two layouts share a name.
    """
    registry = PageRegistry()
    registry.set_home(_static_page(config.home))
    for page in config.pages.values():
        registry.add_page(_static_page(page))
    if config.tag_page is not None:
        registry.set_tag_page(
            TagPage(
                route=config.tag_page.route,
                title=config.tag_page.title,
                body=tag_page(config.tag_page),
            )
        )
    for layout in config.layouts:
        registry.add_layout(
            Layout(
                name=layout.name,
                body=LAYOUT_BUILDERS[layout.kind](layout, config.theme),
                tags=frozenset(layout.tags),
            )
        )
    return registry


def _static_page(page: PageConfig) -> StaticPage:
    return StaticPage(
        key=page.key,
        route=page.route,
        title=page.title,
        body=PAGE_BUILDERS[page.kind](page),
        description=page.description,
    )


def _link(link: NavLinkConfig) -> Link:
    return Link(link.label, link.href or "", page=link.page if not link.href else None)


__all__ = [
    "LAYOUT_BUILDERS",
    "PAGE_BUILDERS",
    "article_layout",
    "build_registry",
    "footer",
    "listing_page",
    "navigation_bar",
    "site_chrome",
    "tag_page",
    "text_page",
]
