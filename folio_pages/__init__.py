"""Build the folio portfolio site from Markdown content and YAML config.

This package exposes the CLI entry points used by ``uv run pages`` to publish
the static site (pages, posts, tag listings, robots, sitemap and feed).

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from folio_pages import main
>>> main(["generate"])  # doctest: +SKIP
>>> from folio_pages import app
>>> app.name  # doctest: +SKIP
('pages',)
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
