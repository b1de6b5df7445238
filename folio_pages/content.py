r"""Load Markdown content items with YAML front matter.

Each ``*.md`` file below the content directory becomes one
:class:`ContentItem`. The file's path relative to the content root becomes the
item's route (``posts/hello.md`` is published at ``/posts/hello``), and the
front matter supplies the title, publish date, tags and optional image.

Example
-------
>>> from folio_pages.content import parse_content_text
>>> item = parse_content_text(
...     "---\ntitle: Hello\ndate: 2024-04-08\ntags: [Post]\n---\nBody",
...     identifier="posts/hello",
... )
>>> item.route, item.tags
('/posts/hello', ('Post',))
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import io
import logging
import re
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ._constants import CONTENT_SUFFIX, WORDS_PER_MINUTE
from .errors import ContentLoadError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)

FRONT_MATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE
)
WORD_PATTERN = re.compile(r"\w+")

_KNOWN_KEYS = frozenset(
    {
        "title",
        "date",
        "tags",
        "image",
        "image_description",
        "subtitle",
        "description",
        "author",
        "layout",
        "published",
        "last_modified",
    }
)


@dc.dataclass(frozen=True, slots=True)
class ContentItem:
    """A single post or project loaded from the content directory.

    Attributes
    ----------
    identifier : str
        Route without the leading slash, e.g. ``"posts/hello"``.
    title : str
        Display title from the front matter.
    date : datetime.datetime
        Timezone-aware (UTC) publish date.
    body : str
        Markdown body with surrounding blank lines removed.
    tags : tuple[str, ...]
        Ordered, de-duplicated tag labels.
    image : str or None
        Optional hero image reference.
    image_description : str or None
        Alternative text for ``image``.
    """

    identifier: str
    title: str
    date: dt.datetime
    body: str
    tags: tuple[str, ...] = ()
    image: str | None = None
    image_description: str | None = None
    subtitle: str | None = None
    description: str | None = None
    author: str | None = None
    layout: str | None = None
    last_modified: dt.datetime | None = None
    published: bool = True
    source_path: Path | None = dc.field(default=None, compare=False)

    @property
    def route(self) -> str:
        """Return the site-relative URL path for this item."""
        return f"/{self.identifier}"

    @property
    def has_tags(self) -> bool:
        return bool(self.tags)

    @property
    def reading_minutes(self) -> int:
        """Estimate the reading time in whole minutes (never below one)."""
        words = len(WORD_PATTERN.findall(self.body))
        return max(1, round(words / WORDS_PER_MINUTE))


def iter_content_files(source_dir: Path) -> list[Path]:
    """Return every Markdown file under ``source_dir`` in sorted path order."""
    if not source_dir.is_dir():
        msg = f"Content directory '{source_dir}' not found."
        raise FileNotFoundError(msg)
    return sorted(
        path for path in source_dir.rglob(f"*{CONTENT_SUFFIX}") if path.is_file()
    )


def load_content(source_dir: Path) -> list[ContentItem]:
    """Load every published content item below ``source_dir``.

    Parameters
    ----------
    source_dir : Path
        Directory holding Markdown files, optionally nested in subfolders.

    Returns
    -------
    list[ContentItem]
        Items in sorted path order; drafts (``published: false``) are skipped.

    Raises
    ------
    FileNotFoundError
        If ``source_dir`` does not exist.
    ContentLoadError
        On the first file that cannot be read or has malformed front matter.
    """
    items: list[ContentItem] = []
    for path in iter_content_files(source_dir):
        item = load_content_file(path, source_dir)
        if not item.published:
            logger.debug("skipping draft %s", path)
            continue
        items.append(item)
    logger.info("loaded %d content items from %s", len(items), source_dir)
    return items


def load_content_file(path: Path, root: Path) -> ContentItem:
    """Load a single content file whose route is relative to ``root``."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ContentLoadError(path, f"unreadable file ({exc})") from exc
    identifier = path.relative_to(root).with_suffix("").as_posix()
    logger.debug("loading %s as %s", path, identifier)
    return parse_content_text(text, identifier=identifier, source_path=path)


def parse_content_text(
    text: str, *, identifier: str, source_path: Path | None = None
) -> ContentItem:
    """Parse front matter and body text into a :class:`ContentItem`."""
    origin = source_path or Path(identifier)
    match = FRONT_MATTER_PATTERN.match(text)
    if match is None:
        raise ContentLoadError(origin, "missing '---' front matter block")
    metadata = _load_front_matter(match.group(1), origin)
    body = text[match.end() :].strip("\r\n")

    title = metadata.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ContentLoadError(origin, "front matter requires a non-empty 'title'")
    date = _parse_date(metadata.get("date"))
    if date is None:
        raise ContentLoadError(origin, "front matter requires a valid 'date'")
    last_modified = None
    if metadata.get("last_modified") is not None:
        last_modified = _parse_date(metadata["last_modified"])
        if last_modified is None:
            raise ContentLoadError(origin, "'last_modified' is not a valid date")

    published = metadata.get("published", True)
    if not isinstance(published, bool):
        raise ContentLoadError(origin, "'published' must be true or false")

    unknown = sorted(set(metadata) - _KNOWN_KEYS)
    if unknown:
        logger.debug("%s: ignoring front matter keys %s", origin, ", ".join(unknown))

    return ContentItem(
        identifier=identifier,
        title=title.strip(),
        date=date,
        body=body,
        tags=_normalize_tags(metadata.get("tags"), origin),
        image=_optional_text(metadata.get("image")),
        image_description=_optional_text(metadata.get("image_description")),
        subtitle=_optional_text(metadata.get("subtitle")),
        description=_optional_text(metadata.get("description")),
        author=_optional_text(metadata.get("author")),
        layout=_optional_text(metadata.get("layout")),
        last_modified=last_modified,
        published=published,
        source_path=source_path,
    )


def dump_content_item(item: ContentItem) -> str:
    """Serialize ``item`` back into front matter plus Markdown body."""
    metadata: dict[str, typ.Any] = {
        "title": item.title,
        "date": item.date.isoformat(),
    }
    if item.tags:
        metadata["tags"] = list(item.tags)
    optional = {
        "subtitle": item.subtitle,
        "description": item.description,
        "author": item.author,
        "image": item.image,
        "image_description": item.image_description,
        "layout": item.layout,
        "last_modified": item.last_modified.isoformat()
        if item.last_modified
        else None,
    }
    metadata.update({key: value for key, value in optional.items() if value})
    if not item.published:
        metadata["published"] = False

    stream = io.StringIO()
    _build_front_matter_yaml().dump(metadata, stream)
    return f"---\n{stream.getvalue()}---\n\n{item.body}\n"


def sort_by_date(
    items: cabc.Iterable[ContentItem], *, descending: bool = True
) -> list[ContentItem]:
    """Return ``items`` ordered by date; equal dates keep their input order."""
    return sorted(items, key=lambda item: item.date, reverse=descending)


def _build_front_matter_yaml() -> YAML:
    yaml = YAML()
    yaml.width = 120
    yaml.indent(mapping=2, sequence=4, offset=2)
    return yaml


def _load_front_matter(raw: str, origin: Path) -> dict[str, typ.Any]:
    """Parse the YAML front matter block into a plain dictionary."""
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        loaded = loader.load(raw)
    except YAMLError as exc:
        raise ContentLoadError(origin, f"malformed front matter ({exc})") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ContentLoadError(origin, "front matter must be a mapping")
    return dict(loaded)


def _normalize_tags(value: object, origin: Path) -> tuple[str, ...]:
    """Return unique, stripped tag labels in first-seen order."""
    match value:
        case None:
            raw: list[object] = []
        case str() as text:
            raw = list(text.split(","))
        case list() as entries:
            raw = entries
        case _:
            raise ContentLoadError(origin, "'tags' must be a list or a string")
    tags: list[str] = []
    for entry in raw:
        if not isinstance(entry, str):
            raise ContentLoadError(origin, f"tag {entry!r} is not a string")
        label = entry.strip()
        if label and label not in tags:
            tags.append(label)
    return tuple(tags)


def _parse_date(value: object) -> dt.datetime | None:
    """Return a timezone-aware UTC datetime parsed from ``value``, or None."""
    match value:
        case dt.datetime():
            parsed = value
        case dt.date():
            parsed = dt.datetime(value.year, value.month, value.day)
        case str() as text:
            sanitized = text.strip()
            if not sanitized:
                return None
            if sanitized.endswith("Z"):
                sanitized = sanitized[:-1] + "+00:00"
            try:
                parsed = dt.datetime.fromisoformat(sanitized)
            except ValueError:
                return None
        case _:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


def _optional_text(value: object | None) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


__all__ = [
    "ContentItem",
    "dump_content_item",
    "iter_content_files",
    "load_content",
    "load_content_file",
    "parse_content_text",
    "sort_by_date",
]
