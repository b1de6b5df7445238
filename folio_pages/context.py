"""Read-only build context shared by every page and layout render."""

from __future__ import annotations

import dataclasses as dc
import types
import typing as typ

from ._constants import DEFAULT_TAG_ROUTE
from .content import sort_by_date
from .tags import TagIndex

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from .config import SiteMetadata
    from .content import ContentItem


@dc.dataclass(frozen=True, slots=True)
class BuildContext:
    """Snapshot of site metadata and content available while rendering.

    Attributes
    ----------
    site : SiteMetadata
        Site name, base title, author and canonical URL.
    items : tuple[ContentItem, ...]
        Every loaded content item in load order.
    tag_index : TagIndex
        Tag lookup derived from ``items``.
    page_routes : Mapping[str, str]
        Route of each registered static page keyed by page key.
    generated_at : datetime.datetime
        Timestamp of the build, fixed for the whole run.
    tag_route : str
        Route prefix of the tag pages.
    """

    site: SiteMetadata
    items: tuple[ContentItem, ...]
    tag_index: TagIndex
    page_routes: cabc.Mapping[str, str]
    generated_at: dt.datetime
    tag_route: str = DEFAULT_TAG_ROUTE

    @classmethod
    def create(
        cls,
        *,
        site: SiteMetadata,
        items: cabc.Iterable[ContentItem],
        page_routes: cabc.Mapping[str, str],
        generated_at: dt.datetime,
        tag_route: str = DEFAULT_TAG_ROUTE,
    ) -> BuildContext:
        """Freeze ``items`` and ``page_routes`` and derive the tag index."""
        frozen_items = tuple(items)
        return cls(
            site=site,
            items=frozen_items,
            tag_index=TagIndex(frozen_items),
            page_routes=types.MappingProxyType(dict(page_routes)),
            generated_at=generated_at,
            tag_route=tag_route,
        )

    @property
    def tags(self) -> list[str]:
        return self.tag_index.tags

    def content_tagged(self, tag: str | None) -> tuple[ContentItem, ...]:
        """Return items carrying ``tag``; ``None`` returns every tagged item."""
        return self.tag_index.items_tagged(tag)

    def sorted_content(
        self, items: cabc.Iterable[ContentItem], order: str = "date-desc"
    ) -> list[ContentItem]:
        """Order ``items`` by ``"date-desc"``, ``"date-asc"`` or ``"load"``."""
        match order:
            case "date-desc":
                return sort_by_date(items, descending=True)
            case "date-asc":
                return sort_by_date(items, descending=False)
            case "load":
                return list(items)
            case _:
                msg = f"Unknown sort order '{order}'."
                raise ValueError(msg)

    def route_for_page(self, key: str) -> str | None:
        return self.page_routes.get(key)

    def route_for_tag(self, tag: str | None) -> str:
        """Return the route of a tag listing, or the all-tags view for None."""
        base = self.tag_route.rstrip("/") or ""
        if tag is None:
            return base or "/"
        return f"{base}/{self.tag_index.slug_for(tag)}"

    def absolute_url(self, route: str) -> str:
        """Join ``route`` onto the canonical site URL."""
        return f"{self.site.url.rstrip('/')}/{route.lstrip('/')}"


__all__ = ["BuildContext"]
