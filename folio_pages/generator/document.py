"""Wrap rendered element trees in the site's HTML document shell.

:class:`DocumentBuilder` owns the Jinja environment. Each page or content item
is rendered as three fragments (navigation header, body and footer) which are
then placed into ``page.jinja`` together with the title, canonical URL and the
Pygments stylesheet. The same environment renders ``sitemap.xml.jinja`` and
``feed.rss.jinja`` for the auxiliary outputs.
"""

from __future__ import annotations

import email.utils
import posixpath
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateError
from markupsafe import Markup

from folio_pages.errors import RenderError
from folio_pages.generator.link_rewriter import ContentLinkExtension
from folio_pages.generator.models import RenderedDocument

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from folio_pages.config import SiteConfig
    from folio_pages.content import ContentItem
    from folio_pages.context import BuildContext
    from folio_pages.elements import Element
    from folio_pages.generator.tree import ElementTreeRenderer

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"


def create_environment(templates_dir: Path | None = None) -> Environment:
    """Return the Jinja environment used for every generated file."""
    env = Environment(
        loader=FileSystemLoader(str(templates_dir or DEFAULT_TEMPLATES_DIR)),
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["rfc822"] = lambda value: email.utils.format_datetime(value)
    return env


class DocumentBuilder:
    """Render complete HTML documents and the XML auxiliary files."""

    def __init__(
        self,
        config: SiteConfig,
        tree_renderer: ElementTreeRenderer,
        *,
        header: cabc.Sequence[Element] = (),
        footer: cabc.Sequence[Element] = (),
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the builder and Jinja environment.

        Parameters
        ----------
        config : SiteConfig
            Site configuration providing theme and feed settings.
        tree_renderer : ElementTreeRenderer
            Renderer used for the header, body and footer trees.
        header : Sequence[Element], optional
            Elements placed above every page body (the navigation bar).
        footer : Sequence[Element], optional
            Elements placed below every page body.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package
            templates.
        """
        self.config = config
        self.tree_renderer = tree_renderer
        self.header = tuple(header)
        self.footer = tuple(footer)
        self.env = create_environment(templates_dir)
        self.page_template = self.env.get_template("page.jinja")
        self.sitemap_template = self.env.get_template("sitemap.xml.jinja")
        self.feed_template = self.env.get_template("feed.rss.jinja")

    def render_document(
        self,
        *,
        name: str,
        route: str,
        title: str,
        tree: cabc.Sequence[Element],
        context: BuildContext,
        description: str | None = None,
    ) -> RenderedDocument:
        """Render ``tree`` as the body of a full HTML page for ``route``.

        Raises
        ------
        RenderError
            If any tree is invalid or the page template fails to render.
        """
        header = self.tree_renderer.render(self.header, context, source=name)
        body = self.tree_renderer.render(tree, context, source=name)
        footer = self.tree_renderer.render(self.footer, context, source=name)
        feed = self.config.feed
        page_context = {
            "site": context.site,
            "theme": self.config.theme,
            "html_title": context.site.format_title(title),
            "canonical_url": context.absolute_url(route),
            "description": description or context.site.description,
            "header_html": Markup(header.html),  # noqa: S704 - rendered by us
            "body_html": Markup(body.html),  # noqa: S704 - rendered by us
            "footer_html": Markup(footer.html),  # noqa: S704 - rendered by us
            "pygments_css": Markup(  # noqa: S704 - generated by Pygments
                self.tree_renderer.markdown_renderer.stylesheet
            ),
            "feed_url": f"/{feed.filename}" if feed.enabled else None,
            "generated_at": context.generated_at,
        }
        html = self._render_template(self.page_template, name, page_context)
        return RenderedDocument(
            name=name,
            route=route,
            html=html,
            warnings=header.warnings + body.warnings + footer.warnings,
        )

    def render_sitemap(
        self,
        *,
        routes: cabc.Sequence[str],
        items: cabc.Sequence[ContentItem],
        context: BuildContext,
    ) -> str:
        """Render ``sitemap.xml`` listing static routes and content items."""
        entries = [
            {"loc": context.absolute_url(route), "lastmod": None} for route in routes
        ]
        entries.extend(
            {
                "loc": context.absolute_url(item.route),
                "lastmod": (item.last_modified or item.date).date().isoformat(),
            }
            for item in items
        )
        return self._render_template(
            self.sitemap_template, "sitemap.xml", {"entries": entries}
        )

    def render_feed(
        self, *, items: cabc.Sequence[ContentItem], context: BuildContext
    ) -> str:
        """Render the RSS 2.0 feed for ``items`` (already ordered and trimmed)."""
        markdown = self.tree_renderer.markdown_renderer
        entries = [
            {
                "title": item.title,
                "link": context.absolute_url(item.route),
                "published": item.date,
                "tags": item.tags,
                "author": item.author or context.site.author,
                "description": markdown.markdown(
                    item.body,
                    link_extension=ContentLinkExtension(
                        posixpath.dirname(item.identifier), site_url=context.site.url
                    ),
                ),
            }
            for item in items
        ]
        feed_context = {
            "site": context.site,
            "feed_url": context.absolute_url(self.config.feed.filename),
            "entries": entries,
            "build_date": context.generated_at,
        }
        return self._render_template(
            self.feed_template, self.config.feed.filename, feed_context
        )

    @staticmethod
    def _render_template(
        template: typ.Any, name: str, context: dict[str, typ.Any]
    ) -> str:
        try:
            rendered = template.render(**context)
        except TemplateError as exc:
            raise RenderError(f"template {template.name}", f"{name}: {exc}") from exc
        if not rendered.endswith("\n"):
            rendered += "\n"
        return rendered


__all__ = ["DEFAULT_TEMPLATES_DIR", "DocumentBuilder", "create_environment"]
