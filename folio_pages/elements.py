"""Declarative element tree used to describe pages.

Pages and layouts return sequences of these frozen nodes; the
:class:`~folio_pages.generator.ElementTreeRenderer` turns them into HTML.
Nodes hold tuples rather than lists so a tree cannot be mutated (or made
cyclic) after it has been built.

Example
-------
>>> from folio_pages.elements import ItemList, Link, Text
>>> tree = [
...     Text("About me", font="title1"),
...     ItemList((Link("GitHub", "https://github.com/example"),)),
... ]
>>> tree[1].items[0].label
'GitHub'
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from .content import ContentItem

FONTS: dict[str, tuple[str, str | None]] = {
    "title1": ("h1", None),
    "title2": ("h2", None),
    "title3": ("h3", None),
    "title4": ("h4", None),
    "title5": ("h5", None),
    "title6": ("h6", None),
    "body": ("p", None),
    "lead": ("p", "lead"),
    "small": ("p", "small"),
}
ALIGNMENTS = frozenset({"leading", "center", "trailing"})


@dc.dataclass(frozen=True, slots=True)
class Link:
    """Hyperlink to an absolute URL, a site route, or a page key.

    ``page`` names a registered page by key and is resolved to its route at
    render time; otherwise ``target`` is used as-is.
    """

    label: str
    target: str = ""
    page: str | None = None


@dc.dataclass(frozen=True, slots=True)
class Image:
    """Image from a file reference or, with ``system_name``, a built-in icon."""

    src: str = ""
    description: str | None = None
    system_name: str | None = None
    max_height: int | None = None
    align: str | None = None


@dc.dataclass(frozen=True, slots=True)
class TagLinks:
    """Inline links to the tag pages of a content item."""

    item: ContentItem


Inline = str | Link | Image | TagLinks


@dc.dataclass(frozen=True, slots=True)
class Text:
    """Block of text, optionally mixing inline links and icons."""

    content: str | tuple[Inline, ...]
    font: str = "body"
    align: str | None = None
    tint: str | None = None


@dc.dataclass(frozen=True, slots=True)
class Markdown:
    """Markdown source rendered to HTML (content bodies, page copy).

    ``base_dir`` is the content directory of the source document so relative
    ``.md`` links can be rewritten to site routes.
    """

    source: str
    base_dir: str | None = None


@dc.dataclass(frozen=True, slots=True)
class ItemList:
    """Bulleted list of elements."""

    items: tuple[Element, ...]


@dc.dataclass(frozen=True, slots=True)
class ContentPreview:
    """Card summarising a content item and linking to it."""

    item: ContentItem
    width: int = 4


@dc.dataclass(frozen=True, slots=True)
class Section:
    """Group of child elements; with ``columns`` they are laid out in a row."""

    children: tuple[Element, ...]
    columns: int | None = None
    margin: str | None = None


@dc.dataclass(frozen=True, slots=True)
class Dropdown:
    """Navigation menu entry holding further links."""

    label: str
    items: tuple[Link, ...]


@dc.dataclass(frozen=True, slots=True)
class NavigationBar:
    """Top-of-page navigation; only valid at the root of a tree."""

    logo: str
    items: tuple[Link | Dropdown, ...]
    style: str = "dark"
    position: str = "fixed-top"
    background: str | None = None
    align: str = "trailing"


Element = (
    Text
    | Link
    | Image
    | Markdown
    | ItemList
    | ContentPreview
    | Section
    | NavigationBar
    | Dropdown
)


__all__ = [
    "ALIGNMENTS",
    "FONTS",
    "ContentPreview",
    "Dropdown",
    "Element",
    "Image",
    "Inline",
    "ItemList",
    "Link",
    "Markdown",
    "NavigationBar",
    "Section",
    "TagLinks",
    "Text",
]
