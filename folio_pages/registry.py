"""Registry of the pages and layouts that make up the site.

The registry enforces two rules at configuration time rather than letting a
later registration silently shadow an earlier one:

* every route belongs to exactly one page, and
* every content item binds to exactly one layout. When several layouts could
  accept an item, the first one registered wins; an explicit ``layout`` name
  in the item's front matter takes precedence over tag matching.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

from .errors import BuildError

if typ.TYPE_CHECKING:
    from .content import ContentItem
    from .context import BuildContext
    from .elements import Element

PageBody = cabc.Callable[["BuildContext"], cabc.Sequence["Element"]]
LayoutBody = cabc.Callable[["ContentItem", "BuildContext"], cabc.Sequence["Element"]]
TagPageBody = cabc.Callable[
    [str | None, "BuildContext"], cabc.Sequence["Element"]
]


@dc.dataclass(frozen=True, slots=True)
class StaticPage:
    """A page at a fixed route whose body is built from the build context."""

    key: str
    route: str
    title: str
    body: PageBody
    description: str | None = None


@dc.dataclass(frozen=True, slots=True)
class Layout:
    """Template binding a content item to an element tree."""

    name: str
    body: LayoutBody
    tags: frozenset[str] = frozenset()

    def accepts(self, item: ContentItem) -> bool:
        """Return True when the layout takes any item or shares one of its tags."""
        return not self.tags or not self.tags.isdisjoint(item.tags)


@dc.dataclass(frozen=True, slots=True)
class TagPage:
    """Listing rendered once per tag and once for the all-tags view."""

    route: str
    title: str
    body: TagPageBody


class PageRegistry:
    """Ordered collection of static pages, home page, tag page and layouts."""

    def __init__(self) -> None:
        self._pages: dict[str, StaticPage] = {}
        self._routes: dict[str, str] = {}
        self._home: StaticPage | None = None
        self._layouts: list[Layout] = []
        self.tag_page: TagPage | None = None

    @property
    def home(self) -> StaticPage:
        if self._home is None:
            msg = "No home page registered."
            raise BuildError(msg)
        return self._home

    @property
    def pages(self) -> list[StaticPage]:
        """Return static pages in registration order, excluding the home page."""
        return list(self._pages.values())

    @property
    def layouts(self) -> list[Layout]:
        return list(self._layouts)

    def all_pages(self) -> list[StaticPage]:
        """Return the home page followed by every other static page."""
        return [self.home, *self._pages.values()]

    def page_routes(self) -> dict[str, str]:
        """Return the route of every registered page keyed by page key."""
        routes = {page.key: page.route for page in self._pages.values()}
        if self._home is not None:
            routes[self._home.key] = self._home.route
        return routes

    def set_home(self, page: StaticPage) -> StaticPage:
        """Register the home page; it must live at ``/``."""
        if self._home is not None:
            msg = f"Home page already registered as '{self._home.key}'."
            raise BuildError(msg)
        if page.route != "/":
            msg = f"Home page '{page.key}' must use route '/', not '{page.route}'."
            raise BuildError(msg)
        self._claim(page)
        self._home = page
        return page

    def add_page(self, page: StaticPage) -> StaticPage:
        """Register a static page, rejecting duplicate keys and routes."""
        self._claim(page)
        self._pages[page.key] = page
        return page

    def add_layout(self, layout: Layout) -> Layout:
        if any(existing.name == layout.name for existing in self._layouts):
            msg = f"Layout '{layout.name}' is registered twice."
            raise BuildError(msg)
        self._layouts.append(layout)
        return layout

    def set_tag_page(self, tag_page: TagPage) -> TagPage:
        if tag_page.route in self._routes:
            owner = self._routes[tag_page.route]
            msg = f"Tag page route '{tag_page.route}' is already used by '{owner}'."
            raise BuildError(msg)
        self.tag_page = tag_page
        return tag_page

    def layout_for(self, item: ContentItem) -> Layout:
        """Return the layout bound to ``item``.

        Raises
        ------
        BuildError
            If the item names an unknown layout or no layout accepts it.
        """
        if item.layout:
            for layout in self._layouts:
                if layout.name == item.layout:
                    return layout
            msg = f"Content '{item.identifier}' requests unknown layout '{item.layout}'."
            raise BuildError(msg)
        for layout in self._layouts:
            if layout.accepts(item):
                return layout
        msg = f"No layout accepts content '{item.identifier}' (tags: {list(item.tags)})."
        raise BuildError(msg)

    def _claim(self, page: StaticPage) -> None:
        known = self._home.key if self._home else None
        if page.key in self._pages or page.key == known:
            msg = f"Page key '{page.key}' is registered twice."
            raise BuildError(msg)
        if page.route in self._routes:
            owner = self._routes[page.route]
            msg = f"Route '{page.route}' of page '{page.key}' is already used by '{owner}'."
            raise BuildError(msg)
        if self.tag_page is not None and page.route == self.tag_page.route:
            msg = f"Route '{page.route}' of page '{page.key}' is used by the tag page."
            raise BuildError(msg)
        self._routes[page.route] = page.key


__all__ = [
    "Layout",
    "LayoutBody",
    "PageBody",
    "PageRegistry",
    "StaticPage",
    "TagPage",
    "TagPageBody",
]
