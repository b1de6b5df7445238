"""Tests for loading, parsing and serializing content items."""

from __future__ import annotations

import datetime as dt
import typing as typ

import pytest

from folio_pages.content import (
    ContentItem,
    dump_content_item,
    load_content,
    load_content_file,
    parse_content_text,
    sort_by_date,
)
from folio_pages.errors import ContentLoadError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path


def _item(identifier: str, date: dt.datetime, **kwargs: typ.Any) -> ContentItem:
    return ContentItem(
        identifier=identifier, title=identifier, date=date, body="", **kwargs
    )


def test_parse_content_text_reads_front_matter() -> None:
    """Front matter fields populate the item and the body is trimmed."""
    item = parse_content_text(
        "---\n"
        "title: Hello\n"
        "date: 2024-04-08\n"
        "tags: [Post, Python]\n"
        "image: /images/hello.png\n"
        "image_description: A wave\n"
        "---\n\n"
        "First paragraph.\n\n",
        identifier="posts/hello",
    )

    assert item.title == "Hello", "title should come from the front matter"
    assert item.route == "/posts/hello", "route should prefix the identifier"
    assert item.tags == ("Post", "Python"), "tags should keep their order"
    assert item.body == "First paragraph.", "surrounding newlines should go"
    assert item.image == "/images/hello.png"
    assert item.image_description == "A wave"
    assert item.date == dt.datetime(2024, 4, 8, tzinfo=dt.UTC), (
        "a bare date should become midnight UTC"
    )


def test_parse_content_text_normalizes_timezones() -> None:
    """Offsets are converted to UTC and a trailing Z is accepted."""
    offset = parse_content_text(
        "---\ntitle: A\ndate: '2024-04-08T10:00:00+02:00'\n---\nBody",
        identifier="a",
    )
    zulu = parse_content_text(
        "---\ntitle: B\ndate: '2024-04-08T08:00:00Z'\n---\nBody", identifier="b"
    )

    assert offset.date == zulu.date, "both dates describe the same instant"
    assert offset.date.tzinfo == dt.UTC, "dates should be stored in UTC"


def test_string_tags_are_split_and_deduplicated() -> None:
    """A comma-separated tag string keeps the first occurrence of each tag."""
    item = parse_content_text(
        "---\ntitle: A\ndate: 2024-01-01\ntags: Post, Python, Post\n---\nBody",
        identifier="a",
    )

    assert item.tags == ("Post", "Python")


@pytest.mark.parametrize(
    ("text", "reason"),
    [
        ("No front matter here.", "front matter"),
        ("---\ndate: 2024-01-01\n---\nBody", "title"),
        ("---\ntitle: A\n---\nBody", "date"),
        ("---\ntitle: A\ndate: not-a-date\n---\nBody", "date"),
        ("---\ntitle: A\ndate: 2024-01-01\ntags: [1, two]\n---\nBody", "tag 1"),
        ("---\ntitle: [unclosed\n---\nBody", "malformed"),
        ("---\n- just\n- a list\n---\nBody", "mapping"),
        ('---\ntitle: A\ndate: 2024-01-01\npublished: "false"\n---\nBody', "published"),
        ("---\ntitle: A\ndate: 2024-01-01\npublished: no\n---\nBody", "published"),
    ],
)
def test_parse_content_text_rejects_invalid_front_matter(
    text: str, reason: str
) -> None:
    """Malformed or incomplete front matter raises ContentLoadError."""
    with pytest.raises(ContentLoadError) as excinfo:
        parse_content_text(text, identifier="posts/broken")

    assert reason in excinfo.value.reason, (
        f"expected '{reason}' in reason, got '{excinfo.value.reason}'"
    )
    assert str(excinfo.value.path) == "posts/broken", "error should name the file"


def test_load_content_orders_by_path_and_skips_drafts(site_root: Path) -> None:
    """Files load in sorted path order; unpublished drafts are left out."""
    content = site_root / "content"
    (content / "posts").mkdir()
    (content / "posts" / "b.md").write_text(
        "---\ntitle: B\ndate: 2024-01-02\n---\nB", encoding="utf-8"
    )
    (content / "posts" / "a.md").write_text(
        "---\ntitle: A\ndate: 2024-01-03\n---\nA", encoding="utf-8"
    )
    (content / "posts" / "draft.md").write_text(
        "---\ntitle: Draft\ndate: 2024-01-04\npublished: false\n---\nD",
        encoding="utf-8",
    )
    (content / "notes.txt").write_text("ignored", encoding="utf-8")

    items = load_content(content)

    assert [item.identifier for item in items] == ["posts/a", "posts/b"], (
        "items should follow sorted path order without drafts"
    )
    assert items[0].source_path == content / "posts" / "a.md"


def test_load_content_names_the_failing_file(site_root: Path) -> None:
    """The first unreadable file is reported with its path."""
    content = site_root / "content"
    broken = content / "broken.md"
    broken.write_text("---\ntitle: Missing date\n---\nBody", encoding="utf-8")

    with pytest.raises(ContentLoadError) as excinfo:
        load_content(content)

    assert excinfo.value.path == broken
    assert str(broken) in str(excinfo.value)


def test_load_content_requires_directory(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_content(tmp_path / "missing")


def test_load_content_file_uses_relative_identifier(
    add_content: cabc.Callable[..., Path], site_root: Path
) -> None:
    path = add_content("projects/tools/cli.md", title="CLI", date="2024-01-01")

    item = load_content_file(path, site_root / "content")

    assert item.identifier == "projects/tools/cli"
    assert item.route == "/projects/tools/cli"


def test_dump_content_item_round_trips() -> None:
    """Dumped text parses back to an item with the same core fields."""
    original = ContentItem(
        identifier="posts/round-trip",
        title="Round: trip",
        date=dt.datetime(2024, 5, 1, 9, 30, tzinfo=dt.UTC),
        body="# Heading\n\nSome *text*.",
        tags=("Post", "YAML"),
        subtitle="Subtitle",
        published=False,
    )

    text = dump_content_item(original)
    loaded = parse_content_text(text, identifier=original.identifier)

    assert text.startswith("---\n"), "dumped text should open with front matter"
    assert loaded.title == original.title
    assert loaded.date == original.date
    assert loaded.tags == original.tags
    assert loaded.body == original.body
    assert loaded.subtitle == original.subtitle
    assert loaded.published is False, "the draft flag should survive a dump"


def test_sort_by_date_keeps_load_order_for_ties() -> None:
    """Equal dates keep their input order in both directions."""
    same = dt.datetime(2024, 1, 1, tzinfo=dt.UTC)
    first = _item("first", same)
    second = _item("second", same)
    newest = _item("newest", dt.datetime(2024, 2, 1, tzinfo=dt.UTC))

    descending = sort_by_date([first, second, newest])
    ascending = sort_by_date([first, second, newest], descending=False)

    assert [item.identifier for item in descending] == ["newest", "first", "second"]
    assert [item.identifier for item in ascending] == ["first", "second", "newest"]


@pytest.mark.parametrize(
    ("words", "minutes"),
    [(0, 1), (150, 1), (450, 2), (1000, 5)],
)
def test_reading_minutes(words: int, minutes: int) -> None:
    item = ContentItem(
        identifier="a",
        title="A",
        date=dt.datetime(2024, 1, 1, tzinfo=dt.UTC),
        body=" ".join(["word"] * words),
    )

    assert item.reading_minutes == minutes, f"{words} words should take {minutes}"
