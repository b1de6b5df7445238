"""Render declarative element trees into HTML fragments.

:class:`ElementTreeRenderer` walks a page's element tree recursively and emits
HTML. Rendering is a pure function of the tree and the read-only
:class:`~folio_pages.context.BuildContext`: the same inputs always produce the
same string, so pages can be rendered in any order or in parallel.

Invalid node configurations raise :class:`~folio_pages.errors.RenderError`
with the path of the offending node (``"Section[1] > ItemList[0] > Link[2]"``).
Images without a description still render, but are reported as
:class:`~folio_pages.generator.models.AccessibilityWarning` entries.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from markupsafe import escape

from folio_pages.elements import (
    ALIGNMENTS,
    FONTS,
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
from folio_pages.errors import RenderError
from folio_pages.generator.link_rewriter import ContentLinkExtension
from folio_pages.generator.models import AccessibilityWarning, RenderedFragment

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from folio_pages.content import ContentItem
    from folio_pages.context import BuildContext
    from folio_pages.elements import Element, Inline
    from folio_pages.generator.renderer import HtmlContentRenderer

NAV_STYLES = frozenset({"dark", "light"})
NAV_POSITIONS = frozenset({"fixed-top", "fixed-bottom", "sticky-top", "static"})
MAX_COLUMNS = 12


@dc.dataclass(slots=True)
class _RenderState:
    """Per-call scratch space; never shared between renders."""

    source: str
    context: BuildContext
    warnings: list[AccessibilityWarning] = dc.field(default_factory=list)


class ElementTreeRenderer:
    """Turn element trees into HTML, collecting accessibility warnings."""

    def __init__(
        self, markdown_renderer: HtmlContentRenderer, *, builtin_icons: bool = True
    ) -> None:
        """Initialize the renderer.

        Parameters
        ----------
        markdown_renderer : HtmlContentRenderer
            Converts ``Markdown`` nodes and highlights fenced code.
        builtin_icons : bool, optional
            Whether ``Image(system_name=...)`` icons are available. When
            ``False`` an icon node is a render error.
        """
        self.markdown_renderer = markdown_renderer
        self.builtin_icons = builtin_icons

    def render(
        self,
        tree: cabc.Sequence[Element],
        context: BuildContext,
        *,
        source: str = "page",
    ) -> RenderedFragment:
        """Render ``tree`` and return its HTML plus any warnings.

        Parameters
        ----------
        tree : Sequence[Element]
            Top-level elements of the page, rendered in order.
        context : BuildContext
            Read-only site snapshot used to resolve routes and tags.
        source : str, optional
            Name of the page or item, recorded on warnings.

        Raises
        ------
        RenderError
            If any node is misconfigured or of an unsupported type.
        """
        state = _RenderState(source=source, context=context)
        parts = [
            self._render_block(node, (_segment(node, index),), state, top_level=True)
            for index, node in enumerate(tree)
        ]
        return RenderedFragment(html="\n".join(parts), warnings=tuple(state.warnings))

    def _render_block(
        self,
        node: object,
        path: tuple[str, ...],
        state: _RenderState,
        *,
        top_level: bool = False,
    ) -> str:
        match node:
            case Text():
                return self._render_text(node, path, state)
            case Markdown():
                return self._render_markdown(node)
            case Link():
                return f"<p>{self._render_link(node, path, state)}</p>"
            case Image():
                return self._render_image(node, path, state)
            case ItemList():
                return self._render_list(node, path, state)
            case Section():
                return self._render_section(node, path, state)
            case ContentPreview():
                return self._render_preview(node, path, state)
            case NavigationBar():
                if not top_level:
                    raise RenderError(
                        _format_path(path),
                        "navigation bars are only allowed at the top level",
                    )
                return self._render_navigation(node, path, state)
            case Dropdown():
                raise RenderError(
                    _format_path(path),
                    "dropdowns are only allowed inside a navigation bar",
                )
            case _:
                raise RenderError(
                    _format_path(path),
                    f"unsupported element type '{type(node).__name__}'",
                )

    def _render_inline(
        self, node: Inline, path: tuple[str, ...], state: _RenderState
    ) -> str:
        match node:
            case str():
                return str(escape(node))
            case Link():
                return self._render_link(node, path, state)
            case Image():
                return self._render_image(node, path, state)
            case TagLinks():
                return self._render_tag_links(node.item, state)
            case _:
                raise RenderError(
                    _format_path(path),
                    f"'{type(node).__name__}' cannot appear inside text",
                )

    def _render_text(self, node: Text, path: tuple[str, ...], state: _RenderState) -> str:
        font = FONTS.get(node.font)
        if font is None:
            raise RenderError(_format_path(path), f"unknown font '{node.font}'")
        tag, font_class = font
        classes = [font_class] if font_class else []
        if node.align is not None:
            classes.append(_align_class(node.align, path))
        style = f' style="color: {escape(node.tint)}"' if node.tint else ""

        if isinstance(node.content, str):
            inner = str(escape(node.content))
        else:
            inner = "".join(
                self._render_inline(part, (*path, _segment(part, index)), state)
                for index, part in enumerate(node.content)
            )
        return f"<{tag}{_class_attr(classes)}{style}>{inner}</{tag}>"

    def _render_markdown(self, node: Markdown) -> str:
        extension = (
            ContentLinkExtension(node.base_dir) if node.base_dir is not None else None
        )
        html = self.markdown_renderer.markdown(node.source, link_extension=extension)
        return f'<div class="markdown">{html}</div>'

    def _render_link(self, node: Link, path: tuple[str, ...], state: _RenderState) -> str:
        if node.page is not None:
            href = state.context.route_for_page(node.page)
            if href is None:
                raise RenderError(
                    _format_path(path), f"link to unknown page '{node.page}'"
                )
        else:
            href = node.target.strip()
            if not href:
                raise RenderError(
                    _format_path(path), f"link '{node.label}' has an empty target"
                )
        return f'<a href="{escape(href)}">{escape(node.label)}</a>'

    def _render_image(
        self,
        node: Image,
        path: tuple[str, ...],
        state: _RenderState,
        *,
        extra_classes: tuple[str, ...] = (),
    ) -> str:
        if node.system_name:
            if not self.builtin_icons:
                raise RenderError(
                    _format_path(path),
                    f"icon '{node.system_name}' requires built-in icons",
                )
            return f'<i class="bi bi-{escape(node.system_name)}" aria-hidden="true"></i>'
        src = node.src.strip()
        if not src:
            raise RenderError(_format_path(path), "image has no source or icon name")
        description = (node.description or "").strip()
        if not description:
            state.warnings.append(
                AccessibilityWarning(
                    source=state.source, node_path=_format_path(path), src=src
                )
            )
        classes = ["img-fluid", *extra_classes]
        if node.align is not None:
            classes.append(_align_class(node.align, path))
        style = f' style="max-height: {node.max_height}px"' if node.max_height else ""
        return (
            f'<img src="{escape(src)}" alt="{escape(description)}"'
            f"{_class_attr(classes)}{style}>"
        )

    def _render_list(
        self, node: ItemList, path: tuple[str, ...], state: _RenderState
    ) -> str:
        entries: list[str] = []
        for index, child in enumerate(node.items):
            child_path = (*path, _segment(child, index))
            if isinstance(child, Link | Image):
                inner = self._render_inline(child, child_path, state)
            else:
                inner = self._render_block(child, child_path, state)
            entries.append(f"<li>{inner}</li>")
        return "<ul>" + "".join(entries) + "</ul>"

    def _render_section(
        self, node: Section, path: tuple[str, ...], state: _RenderState
    ) -> str:
        classes = ["section"]
        if node.columns is not None:
            if not 1 <= node.columns <= MAX_COLUMNS:
                raise RenderError(
                    _format_path(path),
                    f"columns must be between 1 and {MAX_COLUMNS}, got {node.columns}",
                )
            classes.append(f"row row-cols-{node.columns}")
        elif any(isinstance(child, ContentPreview) for child in node.children):
            classes.append("row")
        if node.margin:
            classes.append(f"margin-{escape(node.margin)}")
        children = [
            self._render_block(child, (*path, _segment(child, index)), state)
            for index, child in enumerate(node.children)
        ]
        return f"<section{_class_attr(classes)}>" + "".join(children) + "</section>"

    def _render_preview(
        self, node: ContentPreview, path: tuple[str, ...], state: _RenderState
    ) -> str:
        if not 1 <= node.width <= MAX_COLUMNS:
            raise RenderError(
                _format_path(path),
                f"preview width must be between 1 and {MAX_COLUMNS}, got {node.width}",
            )
        item = node.item
        parts: list[str] = []
        if item.image:
            image = Image(src=item.image, description=item.image_description)
            parts.append(
                self._render_image(
                    image, (*path, "Image"), state, extra_classes=("card-img-top",)
                )
            )
        body = [
            f'<h5 class="card-title"><a href="{escape(item.route)}">'
            f"{escape(item.title)}</a></h5>"
        ]
        summary = item.description or item.subtitle
        if summary:
            body.append(f'<p class="card-text">{escape(summary)}</p>')
        body.append(f'<p class="card-meta">{_format_meta(item)}</p>')
        if item.tags:
            body.append(
                f'<p class="card-tags">{self._render_tag_links(item, state)}</p>'
            )
        parts.append('<div class="card-body">' + "".join(body) + "</div>")
        return (
            f'<div class="col-md-{node.width} mb-3"><article class="card">'
            + "".join(parts)
            + "</article></div>"
        )

    def _render_navigation(
        self, node: NavigationBar, path: tuple[str, ...], state: _RenderState
    ) -> str:
        if node.style not in NAV_STYLES:
            raise RenderError(
                _format_path(path), f"unknown navigation style '{node.style}'"
            )
        if node.position not in NAV_POSITIONS:
            raise RenderError(
                _format_path(path), f"unknown navigation position '{node.position}'"
            )
        align = _align_class(node.align, path)
        items: list[str] = []
        for index, entry in enumerate(node.items):
            entry_path = (*path, _segment(entry, index))
            match entry:
                case Link():
                    link = self._render_link(entry, entry_path, state)
                    items.append(f'<li class="nav-item">{link}</li>')
                case Dropdown():
                    items.append(self._render_dropdown(entry, entry_path, state))
                case _:
                    raise RenderError(
                        _format_path(entry_path),
                        "navigation items must be links or dropdowns",
                    )
        style = (
            f' style="background-color: {escape(node.background)}"'
            if node.background
            else ""
        )
        return (
            f'<nav class="navbar navbar-{node.style} {node.position}"{style}>'
            f'<a class="navbar-brand" href="/">{escape(node.logo)}</a>'
            f'<ul class="navbar-nav {align}">' + "".join(items) + "</ul></nav>"
        )

    def _render_dropdown(
        self, node: Dropdown, path: tuple[str, ...], state: _RenderState
    ) -> str:
        entries: list[str] = []
        for index, entry in enumerate(node.items):
            entry_path = (*path, _segment(entry, index))
            if not isinstance(entry, Link):
                raise RenderError(
                    _format_path(entry_path), "dropdown items must be links"
                )
            entries.append(f"<li>{self._render_link(entry, entry_path, state)}</li>")
        return (
            '<li class="nav-item dropdown"><details>'
            f"<summary>{escape(node.label)}</summary>"
            '<ul class="dropdown-menu">' + "".join(entries) + "</ul></details></li>"
        )

    @staticmethod
    def _render_tag_links(item: ContentItem, state: _RenderState) -> str:
        links = [
            f'<a class="tag" href="{escape(state.context.route_for_tag(tag))}">'
            f"{escape(tag)}</a>"
            for tag in item.tags
        ]
        return ", ".join(links)


def _segment(node: object, index: int) -> str:
    return f"{type(node).__name__}[{index}]"


def _format_path(path: tuple[str, ...]) -> str:
    return " > ".join(path)


def _class_attr(classes: list[str]) -> str:
    return f' class="{" ".join(classes)}"' if classes else ""


def _align_class(align: str, path: tuple[str, ...]) -> str:
    if align not in ALIGNMENTS:
        raise RenderError(_format_path(path), f"unknown alignment '{align}'")
    return f"align-{align}"


def _format_meta(item: ContentItem) -> str:
    date = item.date
    label = f"{date:%B} {date.day}, {date.year}"
    minutes = item.reading_minutes
    unit = "minute" if minutes == 1 else "minutes"
    return (
        f'<time datetime="{date.date().isoformat()}">{label}</time>'
        f" · {minutes} {unit} read"
    )


__all__ = ["ElementTreeRenderer"]
