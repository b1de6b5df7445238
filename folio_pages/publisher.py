"""High-level orchestration for publishing the whole site.

:class:`SitePublisher` runs the build in fixed phases:

1. load every content file (failures are collected per file),
2. build the tag index and the read-only :class:`BuildContext`,
3. render the home page and every static page,
4. render every content item through its layout,
5. render the tag page for each known tag plus the all-tags view,
6. render ``robots.txt``, ``sitemap.xml`` and the RSS feed.

Nothing touches the filesystem until every render has succeeded. The output
is written into a staging directory next to the target and swapped into
place in one rename, so a failed build never leaves a half-written site.

Example
-------
>>> from pathlib import Path
>>> from folio_pages.config import load_site_config
>>> from folio_pages.publisher import publish
>>> result = publish(load_site_config(Path("config/site.yaml")))  # doctest: +SKIP
>>> result.output_dir  # doctest: +SKIP
PosixPath('build')
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import datetime as dt
import logging
import shutil
import tempfile
import typing as typ
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from ._constants import (
    INDEX_FILENAME,
    PREVIOUS_TEMPLATE,
    ROBOTS_FILENAME,
    SITEMAP_FILENAME,
    STAGING_TEMPLATE,
)
from .content import iter_content_files, load_content_file, sort_by_date
from .context import BuildContext
from .errors import BuildError, BuildFailure, ContentLoadError, RenderError
from .generator import DocumentBuilder, ElementTreeRenderer, HtmlContentRenderer
from .robots import DisallowRule, render_robots
from .site import build_registry, site_chrome

if typ.TYPE_CHECKING:
    from .config import SiteConfig
    from .content import ContentItem
    from .generator import AccessibilityWarning, RenderedDocument
    from .registry import PageRegistry

logger = logging.getLogger(__name__)

RenderJob = tuple[str, cabc.Callable[[], "RenderedDocument"]]


@dc.dataclass(frozen=True, slots=True)
class BuildResult:
    """Outcome of a successful build.

    Attributes
    ----------
    output_dir : Path
        Directory now holding the published site.
    written : tuple[Path, ...]
        Every file written, relative to ``output_dir``, in render order.
    warnings : tuple[AccessibilityWarning, ...]
        Images rendered without a description.
    items : tuple[ContentItem, ...]
        Content items that were published.
    """

    output_dir: Path
    written: tuple[Path, ...]
    warnings: tuple[AccessibilityWarning, ...]
    items: tuple[ContentItem, ...]


def route_to_path(route: str) -> Path:
    """Map a site route to its output file (``/about`` → ``about/index.html``)."""
    stripped = route.strip("/")
    if not stripped:
        return Path(INDEX_FILENAME)
    return Path(stripped) / INDEX_FILENAME


class SitePublisher:
    """Render every page of the site and publish it atomically."""

    def __init__(
        self,
        config: SiteConfig,
        registry: PageRegistry | None = None,
        *,
        output_dir: Path | None = None,
        templates_dir: Path | None = None,
        workers: int = 1,
        now: dt.datetime | None = None,
    ) -> None:
        """Initialize the publisher.

        Parameters
        ----------
        config : SiteConfig
            Loaded site configuration.
        registry : PageRegistry, optional
            Pages and layouts to render; built from ``config`` when omitted.
        output_dir : Path, optional
            Override for ``config.output_dir``.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package
            templates.
        workers : int, optional
            Number of render threads. Output does not depend on this value.
        now : datetime, optional
            Build timestamp; defaults to the current UTC time.
        """
        if workers < 1:
            msg = f"workers must be at least 1, got {workers}"
            raise ValueError(msg)
        self.config = config
        self.registry = registry or build_registry(config)
        self.output_dir = output_dir or config.output_dir
        self.workers = workers
        self.now = now or dt.datetime.now(dt.UTC)
        markdown = HtmlContentRenderer(
            config.theme.pygments_style, languages=config.syntax_highlighters
        )
        self.tree_renderer = ElementTreeRenderer(
            markdown, builtin_icons=config.theme.builtin_icons
        )
        header, footer = site_chrome(config)
        self.documents = DocumentBuilder(
            config,
            self.tree_renderer,
            header=header,
            footer=footer,
            templates_dir=templates_dir,
        )

    def run(self) -> BuildResult:
        """Build the site and replace the output directory with the result.

        Raises
        ------
        BuildError
            If any content file fails to load, any page fails to render, two
            outputs claim the same route, or an asset would overwrite a
            generated file. The previous output directory is left untouched.
        """
        logger.info("loading content from %s", self.config.content_dir)
        items = self._load_items()
        context = BuildContext.create(
            site=self.config.site,
            items=items,
            page_routes=self.registry.page_routes(),
            generated_at=self.now,
            tag_route=self._tag_route(),
        )

        jobs = [
            *self._page_jobs(context),
            *self._content_jobs(items, context),
            *self._tag_jobs(context),
        ]
        self._check_routes(jobs, context)
        logger.info("rendering %d documents", len(jobs))
        documents = self._execute(jobs)

        files: dict[Path, str] = {
            route_to_path(document.route): document.html for document in documents
        }
        files.update(self._auxiliary_files(documents, items, context))

        warnings = tuple(
            warning for document in documents for warning in document.warnings
        )
        for warning in warnings:
            logger.warning("accessibility: %s", warning.describe())

        self._check_assets(files)
        self._commit(files)
        logger.info("published %d files to %s", len(files), self.output_dir)
        return BuildResult(
            output_dir=self.output_dir,
            written=tuple(files),
            warnings=warnings,
            items=tuple(items),
        )

    def _load_items(self) -> list[ContentItem]:
        root = self.config.content_dir
        try:
            paths = iter_content_files(root)
        except FileNotFoundError as exc:
            raise BuildError(str(exc)) from exc

        items: list[ContentItem] = []
        failures: list[BuildFailure] = []
        for path in paths:
            try:
                item = load_content_file(path, root)
            except ContentLoadError as exc:
                logger.error("failed to load %s: %s", path, exc.reason)
                failures.append(BuildFailure(f"content '{path}'", exc))
                continue
            if not item.published:
                logger.debug("skipping draft %s", path)
                continue
            items.append(item)
        if failures:
            msg = f"{len(failures)} content file(s) could not be loaded."
            raise BuildError(msg, failures)
        logger.info("loaded %d content items", len(items))
        return items

    def _tag_route(self) -> str:
        tag_page = self.registry.tag_page
        if tag_page is not None:
            return tag_page.route
        return self.config.tag_page.route if self.config.tag_page else "/tags"

    def _page_jobs(self, context: BuildContext) -> list[RenderJob]:
        jobs: list[RenderJob] = []
        for page in self.registry.all_pages():

            def render(page: typ.Any = page) -> RenderedDocument:
                return self.documents.render_document(
                    name=page.key,
                    route=page.route,
                    title=page.title,
                    tree=page.body(context),
                    context=context,
                    description=page.description,
                )

            jobs.append((f"page '{page.key}' ({page.route})", render))
        return jobs

    def _content_jobs(
        self, items: cabc.Sequence[ContentItem], context: BuildContext
    ) -> list[RenderJob]:
        failures: list[BuildFailure] = []
        jobs: list[RenderJob] = []
        for item in items:
            target = f"content '{item.identifier}'"
            try:
                layout = self.registry.layout_for(item)
            except BuildError as exc:
                failures.append(BuildFailure(target, exc))
                continue

            def render(
                item: ContentItem = item, layout: typ.Any = layout
            ) -> RenderedDocument:
                return self.documents.render_document(
                    name=item.identifier,
                    route=item.route,
                    title=item.title,
                    tree=layout.body(item, context),
                    context=context,
                    description=item.description,
                )

            jobs.append((target, render))
        if failures:
            msg = f"{len(failures)} content item(s) have no usable layout."
            raise BuildError(msg, failures)
        return jobs

    def _tag_jobs(self, context: BuildContext) -> list[RenderJob]:
        tag_page = self.registry.tag_page
        if tag_page is None:
            return []
        jobs: list[RenderJob] = []
        for tag in [None, *context.tags]:
            route = context.route_for_tag(tag)
            title = tag_page.title if tag is None else f"{tag} - {tag_page.title}"

            def render(
                tag: str | None = tag, route: str = route, title: str = title
            ) -> RenderedDocument:
                return self.documents.render_document(
                    name=f"tag:{tag}" if tag is not None else "tags",
                    route=route,
                    title=title,
                    tree=tag_page.body(tag, context),
                    context=context,
                )

            label = f"tag '{tag}'" if tag is not None else "all tags"
            jobs.append((f"{label} ({route})", render))
        return jobs

    def _check_routes(self, jobs: list[RenderJob], context: BuildContext) -> None:
        """Reject builds where two documents would be written to one file."""
        seen: dict[Path, str] = {}
        failures: list[BuildFailure] = []
        routes = self._job_routes(context)
        for (target, _render), route in zip(jobs, routes, strict=True):
            path = route_to_path(route)
            if path in seen:
                error = BuildError(f"route '{route}' is already used by {seen[path]}")
                failures.append(BuildFailure(target, error))
                continue
            seen[path] = target
        if failures:
            msg = "Multiple outputs claim the same route."
            raise BuildError(msg, failures)

    def _job_routes(self, context: BuildContext) -> list[str]:
        routes = [page.route for page in self.registry.all_pages()]
        routes.extend(item.route for item in context.items)
        if self.registry.tag_page is not None:
            routes.extend(context.route_for_tag(tag) for tag in [None, *context.tags])
        return routes

    def _execute(self, jobs: list[RenderJob]) -> list[RenderedDocument]:
        """Run every render job, collecting failures instead of stopping early."""

        def attempt(job: RenderJob) -> RenderedDocument | BuildFailure:
            target, render = job
            try:
                return render()
            except RenderError as exc:
                return BuildFailure(target, exc)
            except Exception as exc:  # noqa: BLE001
                logger.debug("unexpected error rendering %s", target, exc_info=True)
                return BuildFailure(target, exc)

        if self.workers == 1:
            outcomes = [attempt(job) for job in jobs]
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                outcomes = list(pool.map(attempt, jobs))

        failures = [outcome for outcome in outcomes if isinstance(outcome, BuildFailure)]
        if failures:
            for failure in failures:
                logger.error("render failed: %s", failure.describe())
            msg = f"{len(failures)} document(s) failed to render."
            raise BuildError(msg, failures)
        return typ.cast("list[RenderedDocument]", outcomes)

    def _auxiliary_files(
        self,
        documents: cabc.Sequence[RenderedDocument],
        items: cabc.Sequence[ContentItem],
        context: BuildContext,
    ) -> dict[Path, str]:
        item_routes = {item.route for item in items}
        static_routes = [
            document.route for document in documents if document.route not in item_routes
        ]
        rules = [DisallowRule.from_config(rule) for rule in self.config.robots]
        files = {
            Path(ROBOTS_FILENAME): render_robots(
                rules, sitemap_url=context.absolute_url(SITEMAP_FILENAME)
            ),
            Path(SITEMAP_FILENAME): self.documents.render_sitemap(
                routes=static_routes, items=items, context=context
            ),
        }
        feed = self.config.feed
        if feed.enabled:
            newest = sort_by_date(items)[: feed.item_count]
            files[Path(feed.filename)] = self.documents.render_feed(
                items=newest, context=context
            )
        return files

    def _check_assets(self, files: cabc.Mapping[Path, str]) -> None:
        """Reject asset files that would overwrite a generated file."""
        assets = self.config.assets_dir
        if assets is None or not assets.is_dir():
            return
        failures: list[BuildFailure] = []
        for path in sorted(assets.rglob("*")):
            relative = path.relative_to(assets)
            if path.is_file() and relative in files:
                error = BuildError(f"'{relative.as_posix()}' is also a generated file")
                failures.append(BuildFailure(f"asset '{path}'", error))
        if failures:
            msg = f"{len(failures)} asset(s) clash with generated files."
            raise BuildError(msg, failures)

    def _commit(self, files: dict[Path, str]) -> None:
        """Write ``files`` to a staging directory and swap it into place."""
        target = self.output_dir
        target.parent.mkdir(parents=True, exist_ok=True)
        staging = Path(
            tempfile.mkdtemp(
                prefix=STAGING_TEMPLATE.format(name=target.name), dir=target.parent
            )
        )
        try:
            for relative, text in files.items():
                path = staging / relative
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(text, encoding="utf-8")
            assets = self.config.assets_dir
            if assets is not None and assets.is_dir():
                shutil.copytree(assets, staging, dirs_exist_ok=True)
        except OSError:
            shutil.rmtree(staging, ignore_errors=True)
            raise

        previous = target.with_name(PREVIOUS_TEMPLATE.format(name=target.name))
        if previous.exists():
            shutil.rmtree(previous)
        if target.exists():
            target.rename(previous)
        try:
            staging.rename(target)
        except OSError:
            if previous.exists() and not target.exists():
                previous.rename(target)
            shutil.rmtree(staging, ignore_errors=True)
            raise
        if previous.exists():
            shutil.rmtree(previous)


def publish(
    config: SiteConfig,
    registry: PageRegistry | None = None,
    *,
    workers: int = 1,
    output_dir: Path | None = None,
) -> BuildResult:
    """Build and publish the site described by ``config``."""
    return SitePublisher(
        config, registry, workers=workers, output_dir=output_dir
    ).run()


__all__ = ["BuildResult", "SitePublisher", "publish", "route_to_path"]
