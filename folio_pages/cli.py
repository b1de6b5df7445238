"""Cyclopts CLI entrypoint for building the portfolio site.

The ``pages`` console script defined here publishes the whole site from
``config/site.yaml``, scaffolds new posts with valid front matter, and lists
the tags currently in use. Typical usage involves running ``pages generate``
locally or in CI and ``pages new-post --title "..."`` when starting a draft.

Examples
--------
Publish the site for the default configuration:

>>> from folio_pages.cli import main
>>> main([])  # doctest: +SKIP

Publish into a custom directory with four render threads:

>>> from folio_pages.cli import app
>>> app(["generate", "--output-dir", "dist", "--workers", "4"])  # doctest: +SKIP
"""

from __future__ import annotations

import datetime as dt
import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter
from ruamel.yaml.error import YAMLError

from .config import SiteConfigError, load_site_config
from .content import ContentItem, dump_content_item, load_content
from .errors import BuildError, ContentLoadError
from .publisher import publish
from .tags import TagIndex, slugify_tag

DEFAULT_CONFIG = Path("config/site.yaml")
DEFAULT_POSTS_DIR = "posts"
CONFIG_ERRORS = (SiteConfigError, YAMLError, FileNotFoundError)

app = App(name="pages", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail(exc: Exception) -> typ.NoReturn:
    print(f"error: {exc}", file=sys.stderr)
    raise SystemExit(1) from exc


def _parse_post_date(value: str | None) -> dt.datetime:
    """Return ``value`` as an aware UTC datetime, or the current time."""
    if not value:
        return dt.datetime.now(dt.UTC).replace(microsecond=0)
    try:
        parsed = dt.datetime.fromisoformat(value)
    except ValueError as exc:
        msg = f"invalid date '{value}'"
        raise ValueError(msg) from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


@app.command(help="Publish every page, content item and tag listing of the site.")
def generate(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="INPUT_OUTPUT_DIR"),
    ] = None,
    workers: typ.Annotated[
        int, Parameter(help="Number of render threads", env_var="INPUT_WORKERS")
    ] = 1,
    verbose: typ.Annotated[
        bool, Parameter(help="Enable debug logging", env_var="INPUT_VERBOSE")
    ] = False,
) -> None:
    """Publish the site described by ``config``.

    Parameters
    ----------
    config : Path, optional
        Path to the ``site.yaml`` configuration file (overridable via
        ``INPUT_CONFIG``).
    output_dir : Path or None, optional
        Replace the configured output directory.
    workers : int, optional
        Number of threads used to render documents; the output is identical
        for any value.
    verbose : bool, optional
        Log every loaded file and rendered document.

    Returns
    -------
    None
        Writes the site and prints one ``wrote`` line per generated file.

    Raises
    ------
    SystemExit
        With status 1 when the configuration is invalid or the build fails.
        Nothing is published in that case.
    """
    _configure_logging(verbose=verbose)
    try:
        site_config = load_site_config(config)
        result = publish(site_config, workers=workers, output_dir=output_dir)
    except (BuildError, *CONFIG_ERRORS) as exc:
        _fail(exc)

    for path in result.written:
        print(f"wrote {_format_path(result.output_dir / path)}")
    if result.warnings:
        print(
            f"{len(result.warnings)} image(s) have no description", file=sys.stderr
        )


@app.command(name="new-post", help="Create a Markdown post with front matter.")
def new_post(
    *,
    title: typ.Annotated[str, Parameter(help="Post title")],
    tags: typ.Annotated[
        list[str] | None, Parameter(help="Tags for the post (repeatable)")
    ] = None,
    date: typ.Annotated[
        str | None, Parameter(help="Publish date (ISO 8601); defaults to now")
    ] = None,
    slug: typ.Annotated[
        str | None, Parameter(help="File name without suffix; derived from title")
    ] = None,
    draft: typ.Annotated[bool, Parameter(help="Mark the post unpublished")] = False,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
) -> None:
    """Write a new post below ``<content_dir>/posts``.

    Raises
    ------
    SystemExit
        With status 1 when the date cannot be parsed, the configuration is
        invalid, or the target file already exists.
    """
    try:
        site_config = load_site_config(config)
        published = _parse_post_date(date)
    except (*CONFIG_ERRORS, ValueError) as exc:
        _fail(exc)

    name = slug or slugify_tag(title)
    identifier = f"{DEFAULT_POSTS_DIR}/{name}"
    target = site_config.content_dir / f"{identifier}.md"
    if target.exists():
        _fail(FileExistsError(f"'{_format_path(target)}' already exists"))

    item = ContentItem(
        identifier=identifier,
        title=title,
        date=published,
        body=f"# {title}",
        tags=tuple(dict.fromkeys(tag.strip() for tag in tags or () if tag.strip())),
        published=not draft,
    )
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(dump_content_item(item), encoding="utf-8")
    print(f"wrote {_format_path(target)}")


@app.command(name="tags", help="List tags and how many items carry each one.")
def list_tags(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
) -> None:
    """Print ``<tag>: <count>`` for every tag in the content directory."""
    try:
        site_config = load_site_config(config)
        items = load_content(site_config.content_dir)
    except (*CONFIG_ERRORS, ContentLoadError) as exc:
        _fail(exc)
    index = TagIndex(items)
    for tag in index.tags:
        print(f"{tag}: {index.count(tag)}")


def main(argv: list[str] | None = None) -> None:
    """Invoke the Cyclopts application that powers the `pages` console command.

    Parameters
    ----------
    argv : list[str] or None, optional
        Arguments to parse instead of ``sys.argv[1:]``.

    Returns
    -------
    None
        This function executes for its side effects of parsing CLI arguments
        and running the requested subcommand.

    Examples
    --------
    >>> main(["tags"])  # doctest: +SKIP
    """
    app(argv)


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
