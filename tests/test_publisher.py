"""End-to-end tests for publishing a site into its output directory.

Each test writes a throwaway ``site.yaml`` and content folder (see the
``site_root`` fixture in ``conftest.py``), runs the publisher and inspects the
written files with BeautifulSoup.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from folio_pages.config import NavLinkConfig, load_site_config
from folio_pages.errors import BuildError, ContentLoadError, RenderError
from folio_pages.publisher import SitePublisher, publish, route_to_path
from folio_pages.registry import StaticPage
from folio_pages.site import build_registry

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from pytest_mock import MockerFixture

    from folio_pages.context import BuildContext
    from folio_pages.elements import Element


def _soup(path: Path) -> BeautifulSoup:
    return BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")


def _tree(root: Path) -> dict[str, str]:
    return {
        path.relative_to(root).as_posix(): path.read_text(encoding="utf-8")
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.mark.parametrize(
    ("route", "expected"),
    [
        ("/", "index.html"),
        ("/about", "about/index.html"),
        ("/posts/hello", "posts/hello/index.html"),
        ("/tags/", "tags/index.html"),
    ],
)
def test_route_to_path(route: str, expected: str) -> None:
    assert route_to_path(route) == Path(expected)


def test_publish_writes_every_output(
    site_root: Path, add_content: cabc.Callable[..., Path]
) -> None:
    """Pages, items, tag pages and auxiliary files are all written."""
    add_content("posts/a.md", title="Post A", date="2024-01-01", tags=["Post"])
    add_content(
        "posts/b.md", title="Post B", date="2024-02-01", tags=["Post", "Python"]
    )
    add_content("notes/untagged.md", title="Untagged", date="2023-12-01")

    result = publish(load_site_config(site_root / "site.yaml"))

    build = site_root / "build"
    assert result.output_dir == build
    expected = {
        "index.html",
        "posts/index.html",
        "posts/a/index.html",
        "posts/b/index.html",
        "notes/untagged/index.html",
        "tags/index.html",
        "tags/post/index.html",
        "tags/python/index.html",
        "robots.txt",
        "sitemap.xml",
        "feed.rss",
    }
    assert set(_tree(build)) == expected
    assert {path.as_posix() for path in result.written} == expected
    assert [item.identifier for item in result.items] == [
        "notes/untagged",
        "posts/a",
        "posts/b",
    ], "items should be published in load order"


def test_listing_shows_newest_first(
    site_root: Path, add_content: cabc.Callable[..., Path]
) -> None:
    """Two posts dated A < B appear as B before A on the posts listing."""
    add_content("posts/a.md", title="Post A", date="2024-01-01", tags=["Post"])
    add_content("posts/b.md", title="Post B", date="2024-02-01", tags=["Post"])

    publish(load_site_config(site_root / "site.yaml"))

    soup = _soup(site_root / "build" / "posts" / "index.html")
    titles = [anchor.get_text() for anchor in soup.select("h5.card-title a")]
    assert titles == ["Post B", "Post A"], "newer posts should be listed first"
    assert soup.title is not None
    assert soup.title.get_text() == "Posts - Test Site"


def test_item_page_uses_layout_and_site_chrome(
    site_root: Path, add_content: cabc.Callable[..., Path]
) -> None:
    add_content(
        "posts/hello.md",
        title="Hello",
        date="2024-01-01",
        tags=["Post"],
        body="Read [the other post](other.md).",
    )
    add_content("posts/other.md", title="Other", date="2024-01-02", tags=["Post"])

    publish(load_site_config(site_root / "site.yaml"))

    soup = _soup(site_root / "build" / "posts" / "hello" / "index.html")
    assert soup.find("h1").get_text() == "Hello"
    assert soup.select_one("link[rel=canonical]")["href"] == (
        "https://example.test/posts/hello"
    )
    assert soup.select_one("div.markdown a")["href"] == "/posts/other", (
        "relative content links should point at the target route"
    )
    assert soup.select_one("a.tag")["href"] == "/tags/post"


def test_tag_pages_list_tagged_items(
    site_root: Path, add_content: cabc.Callable[..., Path]
) -> None:
    add_content("posts/a.md", title="Post A", date="2024-01-01", tags=["Post"])
    add_content("posts/b.md", title="Post B", date="2024-02-01", tags=["Python"])
    add_content("posts/c.md", title="Untagged", date="2024-03-01")

    publish(load_site_config(site_root / "site.yaml"))

    build = site_root / "build"
    all_tags = _soup(build / "tags" / "index.html")
    assert all_tags.find("h1").get_text() == "All tags"
    assert [a.get_text() for a in all_tags.select("main li a")] == [
        "Post A",
        "Post B",
    ], "the all-tags view lists every tagged item and skips untagged ones"
    python = _soup(build / "tags" / "python" / "index.html")
    assert [a["href"] for a in python.select("main li a")] == ["/posts/b"]


def test_colliding_tag_slugs_get_their_own_pages(
    site_root: Path, add_content: cabc.Callable[..., Path]
) -> None:
    """``C++`` and ``C#`` share a base slug but still get one page each."""
    add_content("posts/cpp.md", title="Templates", date="2024-01-01", tags=["C++"])
    add_content("posts/cs.md", title="Records", date="2024-01-02", tags=["C#"])

    publish(load_site_config(site_root / "site.yaml"))

    tags = site_root / "build" / "tags"
    assert [a["href"] for a in _soup(tags / "c" / "index.html").select("main li a")] == [
        "/posts/cs"
    ]
    assert [
        a["href"] for a in _soup(tags / "c-2" / "index.html").select("main li a")
    ] == ["/posts/cpp"]
    article = _soup(site_root / "build" / "posts" / "cpp" / "index.html")
    assert [a["href"] for a in article.select("a.tag")] == ["/tags/c-2"], (
        "tag links on articles should point at the deduplicated route"
    )


def test_auxiliary_files(
    configure_site: cabc.Callable[[str], Path],
    add_content: cabc.Callable[..., Path],
    site_root: Path,
) -> None:
    config_path = configure_site(
        """
        robots:
          google: [/drafts]
          chatGPT: []
        feed:
          item_count: 1
        """
    )
    add_content("posts/a.md", title="Post A", date="2024-01-01", tags=["Post"])
    add_content("posts/b.md", title="Post B", date="2024-02-01", tags=["Post"])

    publish(load_site_config(config_path))

    build = site_root / "build"
    assert (build / "robots.txt").read_text(encoding="utf-8") == (
        "User-agent: Googlebot\n"
        "Disallow: /drafts\n"
        "\n"
        "User-agent: GPTBot\n"
        "Disallow: /\n"
        "\n"
        "Sitemap: https://example.test/sitemap.xml\n"
    )

    sitemap = BeautifulSoup(
        (build / "sitemap.xml").read_text(encoding="utf-8"), "html.parser"
    )
    locations = [loc.get_text() for loc in sitemap.find_all("loc")]
    assert "https://example.test/" in locations
    assert "https://example.test/posts/a" in locations
    assert "https://example.test/tags/post" in locations
    assert [mod.get_text() for mod in sitemap.find_all("lastmod")] == [
        "2024-01-01",
        "2024-02-01",
    ], "only content entries carry a last-modified date"

    feed = BeautifulSoup((build / "feed.rss").read_text(encoding="utf-8"), "html.parser")
    assert [title.get_text() for title in feed.select("item title")] == ["Post B"], (
        "the feed holds the newest items up to item_count"
    )


def test_feed_descriptions_use_absolute_links(
    site_root: Path, add_content: cabc.Callable[..., Path]
) -> None:
    add_content(
        "posts/hello.md",
        title="Hello",
        date="2024-01-02",
        body="Read [the other post](other.md) and [about](/about).",
    )
    add_content("posts/other.md", title="Other", date="2024-01-01")

    publish(load_site_config(site_root / "site.yaml"))

    feed = BeautifulSoup(
        (site_root / "build" / "feed.rss").read_text(encoding="utf-8"), "html.parser"
    )
    description = feed.select("item description")[0].get_text()
    hrefs = [a["href"] for a in BeautifulSoup(description, "html.parser").find_all("a")]
    assert hrefs == [
        "https://example.test/posts/other",
        "https://example.test/about",
    ], "feed readers need absolute links"


def test_assets_are_copied(
    configure_site: cabc.Callable[[str], Path], site_root: Path
) -> None:
    assets = site_root / "assets" / "images"
    assets.mkdir(parents=True)
    (assets / "logo.svg").write_text("<svg/>", encoding="utf-8")
    config = load_site_config(configure_site(""))
    config.assets_dir = site_root / "assets"

    publish(config)

    assert (site_root / "build" / "images" / "logo.svg").read_text(
        encoding="utf-8"
    ) == "<svg/>"


def test_collects_every_failure(
    site_root: Path, add_content: cabc.Callable[..., Path]
) -> None:
    """All broken content files are reported together, not just the first."""
    add_content("posts/good.md", title="Good", date="2024-01-01")
    (site_root / "content" / "posts" / "no-title.md").write_text(
        "---\ndate: 2024-01-01\n---\nBody", encoding="utf-8"
    )
    (site_root / "content" / "posts" / "bad-date.md").write_text(
        "---\ntitle: Bad\ndate: someday\n---\nBody", encoding="utf-8"
    )

    with pytest.raises(BuildError) as excinfo:
        publish(load_site_config(site_root / "site.yaml"))

    failures = excinfo.value.failures
    assert len(failures) == 2, "both broken files should be reported"
    assert all(isinstance(failure.error, ContentLoadError) for failure in failures)
    assert "bad-date.md" in str(excinfo.value)
    assert "no-title.md" in str(excinfo.value)


def test_failed_build_keeps_previous_output(
    site_root: Path, add_content: cabc.Callable[..., Path]
) -> None:
    """A build that fails leaves the earlier site exactly as it was."""
    add_content("posts/a.md", title="Post A", date="2024-01-01", tags=["Post"])
    config_path = site_root / "site.yaml"
    publish(load_site_config(config_path))
    before = _tree(site_root / "build")

    add_content(
        "posts/broken.md",
        title="Broken",
        date="2024-01-02",
        extra="layout: missing\n",
    )
    with pytest.raises(BuildError, match="unknown layout 'missing'"):
        publish(load_site_config(config_path))

    assert _tree(site_root / "build") == before, "previous output must be intact"
    leftovers = [path.name for path in site_root.iterdir() if path.name.startswith(".")]
    assert leftovers == [], "no staging directories should be left behind"


def test_assets_cannot_replace_generated_files(
    configure_site: cabc.Callable[[str], Path], site_root: Path
) -> None:
    assets = site_root / "assets"
    assets.mkdir()
    (assets / "robots.txt").write_text("User-agent: *\n", encoding="utf-8")
    (assets / "logo.svg").write_text("<svg/>", encoding="utf-8")
    config = load_site_config(configure_site(""))
    config.assets_dir = assets

    with pytest.raises(BuildError, match="clash with generated files") as excinfo:
        publish(config)

    assert [failure.target for failure in excinfo.value.failures] == [
        f"asset '{assets / 'robots.txt'}'"
    ]
    assert not (site_root / "build").exists(), "nothing is written on failure"


def test_failed_swap_restores_previous_output(
    site_root: Path,
    add_content: cabc.Callable[..., Path],
    mocker: MockerFixture,
) -> None:
    """If the staged site cannot be moved into place the old site comes back."""
    add_content("posts/a.md", title="Post A", date="2024-01-01", tags=["Post"])
    config = load_site_config(site_root / "site.yaml")
    publish(config)
    before = _tree(site_root / "build")
    rename = Path.rename

    def fail_for_staging(self: Path, target: Path) -> Path:
        if self.name.startswith(".build-staging-"):
            msg = "device busy"
            raise OSError(msg)
        return rename(self, target)

    mocker.patch.object(Path, "rename", autospec=True, side_effect=fail_for_staging)
    with pytest.raises(OSError, match="device busy"):
        publish(config)

    assert _tree(site_root / "build") == before, "previous output must be restored"
    leftovers = [path.name for path in site_root.iterdir() if path.name.startswith(".")]
    assert leftovers == [], "staging and previous directories should be removed"


def test_render_errors_name_the_page(
    site_root: Path, configure_site: cabc.Callable[[str], Path]
) -> None:
    config = load_site_config(configure_site(""))
    config.home.links.append(NavLinkConfig(label="Nowhere", page="missing"))

    with pytest.raises(BuildError) as excinfo:
        publish(config)

    failure = excinfo.value.failures[0]
    assert failure.target == "page 'home' (/)"
    assert isinstance(failure.error, RenderError)
    assert "unknown page 'missing'" in str(failure.error)
    assert not (site_root / "build").exists(), "nothing is written on failure"


def test_unexpected_page_errors_name_the_page(
    site_root: Path, configure_site: cabc.Callable[[str], Path]
) -> None:
    """Any exception from a page body becomes a named build failure."""
    config = load_site_config(configure_site(""))
    registry = build_registry(config)

    def broken_body(_context: BuildContext) -> list[Element]:
        msg = "expected string or bytes-like object"
        raise TypeError(msg)

    registry.add_page(
        StaticPage(key="broken", route="/broken", title="Broken", body=broken_body)
    )

    with pytest.raises(BuildError, match="failed to render") as excinfo:
        publish(config, registry)

    failure = excinfo.value.failures[0]
    assert failure.target == "page 'broken' (/broken)"
    assert isinstance(failure.error, TypeError)
    assert not (site_root / "build").exists(), "nothing is written on failure"


def test_duplicate_routes_fail(
    site_root: Path, add_content: cabc.Callable[..., Path]
) -> None:
    """A content item cannot take the route of a static page."""
    add_content("posts.md", title="Clash", date="2024-01-01")

    with pytest.raises(BuildError, match="same route") as excinfo:
        publish(load_site_config(site_root / "site.yaml"))

    assert excinfo.value.failures[0].target == "content 'posts'"


def test_output_is_independent_of_worker_count(
    site_root: Path,
    add_content: cabc.Callable[..., Path],
    fixed_now: dt.datetime,
) -> None:
    for index in range(6):
        add_content(
            f"posts/post-{index}.md",
            title=f"Post {index}",
            date=f"2024-01-0{index + 1}",
            tags=["Post", f"Topic {index % 2}"],
        )
    config = load_site_config(site_root / "site.yaml")

    serial = SitePublisher(
        config, output_dir=site_root / "serial", now=fixed_now
    ).run()
    parallel = SitePublisher(
        config, output_dir=site_root / "parallel", workers=4, now=fixed_now
    ).run()

    assert serial.written == parallel.written, "files should be written in order"
    assert _tree(site_root / "serial") == _tree(site_root / "parallel")


def test_workers_must_be_positive(site_root: Path) -> None:
    with pytest.raises(ValueError, match="workers"):
        SitePublisher(load_site_config(site_root / "site.yaml"), workers=0)


def test_accessibility_warnings_are_returned(
    site_root: Path,
    add_content: cabc.Callable[..., Path],
    caplog: pytest.LogCaptureFixture,
) -> None:
    add_content(
        "posts/pic.md",
        title="Picture",
        date="2024-01-01",
        extra="image: /images/pic.png\n",
    )

    with caplog.at_level("WARNING", logger="folio_pages.publisher"):
        result = publish(load_site_config(site_root / "site.yaml"))

    assert [warning.src for warning in result.warnings] == ["/images/pic.png"]
    assert result.warnings[0].source == "posts/pic"
    assert "has no description" in caplog.text
