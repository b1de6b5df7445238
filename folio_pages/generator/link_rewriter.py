"""Helpers for rewriting relative Markdown links to site routes."""

from __future__ import annotations

import posixpath
import typing as typ
from urllib.parse import urlsplit

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from .._constants import CONTENT_SUFFIX

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any


class ContentLinkExtension(Extension):
    """Rewrite relative links between content files into site routes.

    A post at ``posts/hello.md`` linking to ``../projects/demo.md#setup`` is
    published with an ``href`` of ``/projects/demo#setup``, matching the route
    the publisher assigns to the target item. Absolute URLs, fragments and
    links to non-Markdown files are left untouched.

    With ``site_url`` set, every root-relative ``href`` and image ``src``
    (including rewritten routes) is joined onto it, which is what feed
    readers need outside the site.
    """

    def __init__(self, base_dir: str, *, site_url: str | None = None) -> None:
        super().__init__()
        self.base_dir = base_dir
        self.site_url = site_url

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the content-link treeprocessor on the Markdown instance."""
        processor = ContentLinkTreeprocessor(
            md, self.base_dir, site_url=self.site_url
        )
        md.treeprocessors.register(processor, "folio_content_links", 15)


class ContentLinkTreeprocessor(Treeprocessor):
    """Point relative ``.md`` anchors at the routes of their content items."""

    def __init__(
        self, md: Markdown, base_dir: str, *, site_url: str | None = None
    ) -> None:
        super().__init__(md)
        self.base_dir = base_dir
        self.site_url = site_url.rstrip("/") if site_url else None

    def run(self, root: Element) -> Element:
        """Rewrite anchors and image sources in the parsed markdown tree."""
        for element in root.iter():
            if element.tag == "a":
                href = element.get("href")
                rewritten = self._absolute(self._rewrite(href) or href)
                if rewritten and rewritten != href:
                    element.set("href", rewritten)
            elif element.tag == "img":
                src = element.get("src")
                absolute = self._absolute(src)
                if absolute and absolute != src:
                    element.set("src", absolute)
        return root

    def _absolute(self, target: str | None) -> str | None:
        """Join a root-relative ``target`` onto the site URL when one is set."""
        if not target or self.site_url is None:
            return target
        if target.startswith("/") and not target.startswith("//"):
            return f"{self.site_url}{target}"
        return target

    def _rewrite(self, target: str | None) -> str | None:
        """Rewrite a relative ``.md`` link target into a route, if applicable."""
        if not target or target.startswith(("#", "/")) or "://" in target:
            return None
        parsed = urlsplit(target)
        if parsed.scheme or parsed.netloc or not parsed.path.endswith(CONTENT_SUFFIX):
            return None

        joined = posixpath.normpath(posixpath.join(self.base_dir, parsed.path))
        while joined.startswith("../"):
            joined = joined[3:]
        if joined in (".", "", ".."):
            return None

        route = "/" + joined[: -len(CONTENT_SUFFIX)]
        if parsed.query:
            route = f"{route}?{parsed.query}"
        if parsed.fragment:
            route = f"{route}#{parsed.fragment}"
        return route


__all__ = ["ContentLinkExtension", "ContentLinkTreeprocessor"]
