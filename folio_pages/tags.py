"""Group content items by tag while preserving load order."""

from __future__ import annotations

import re
import types
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .content import ContentItem

TAG_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify_tag(tag: str) -> str:
    """Convert a tag label into a lowercase hyphen-separated URL segment."""
    slug = TAG_SLUG_PATTERN.sub("-", tag.lower()).strip("-")
    return slug or "tag"


def unique_slug(base: str, used: set[str]) -> str:
    """Return ``base`` or the first free ``base-N`` and mark it as used."""
    candidate = base
    suffix = 2
    while candidate in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


def index_by_tag(
    items: cabc.Iterable[ContentItem],
) -> dict[str, tuple[ContentItem, ...]]:
    """Map each tag to the items carrying it, in the order they were given."""
    grouped: dict[str, list[ContentItem]] = {}
    for item in items:
        for tag in item.tags:
            grouped.setdefault(tag, []).append(item)
    return {tag: tuple(members) for tag, members in grouped.items()}


class TagIndex:
    """Read-only lookup of content items by tag.

    ``items_tagged(None)`` is the "all tags" view: every item that carries at
    least one tag, listed once, in load order. Items without tags never
    appear in it.

    Each known tag also gets a URL slug that is unique within the index.
    Slugs are assigned in ``tags`` order, so when ``C``, ``C#`` and ``C++``
    all reduce to ``c`` they become ``c``, ``c-2`` and ``c-3``.
    """

    def __init__(self, items: cabc.Iterable[ContentItem]) -> None:
        self._items = tuple(items)
        self._by_tag = types.MappingProxyType(index_by_tag(self._items))
        self._tagged = tuple(item for item in self._items if item.tags)
        used: set[str] = set()
        self._slugs = types.MappingProxyType(
            {tag: unique_slug(slugify_tag(tag), used) for tag in self.tags}
        )

    @property
    def tags(self) -> list[str]:
        """Return every known tag sorted case-insensitively."""
        return sorted(self._by_tag, key=lambda tag: (tag.casefold(), tag))

    @property
    def mapping(self) -> cabc.Mapping[str, tuple[ContentItem, ...]]:
        return self._by_tag

    def items_tagged(self, tag: str | None) -> tuple[ContentItem, ...]:
        """Return items for ``tag``; ``None`` returns every tagged item."""
        if tag is None:
            return self._tagged
        return self._by_tag.get(tag, ())

    def slug_for(self, tag: str) -> str:
        """Return the URL slug of ``tag``; unknown tags use ``slugify_tag``."""
        return self._slugs.get(tag) or slugify_tag(tag)

    def count(self, tag: str) -> int:
        return len(self._by_tag.get(tag, ()))

    def __contains__(self, tag: object) -> bool:
        return tag in self._by_tag


__all__ = ["TagIndex", "index_by_tag", "slugify_tag", "unique_slug"]
