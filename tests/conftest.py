"""Shared pytest fixtures and fakes for the kasetophono test suite."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable
from uuid import UUID

import pytest

from kasetophono.interfaces.fetcher import IFetcher
from kasetophono.interfaces.player_provider import IPlayerHandle, IPlayerProvider
from kasetophono.models.blogger import FeedEntry
from kasetophono.models.catalog import Cassette
from kasetophono.services.cassette_extractor import cassette_uuid
from kasetophono.utils.errors import FetchError, PlaybackError

BASE_URL = "https://www.kasetophono.com"
FEED_URL = f"{BASE_URL}/feeds/posts/default"

PLAYLIST_SRC = "https://www.youtube.com/embed/videoseries?list=PLSRDGXudTSm8FuEJEeix05FqOVCMNvlJI"

# ---------------------------------------------------------------------------
# HTML fixtures
# ---------------------------------------------------------------------------

FRONT_PAGE_HTML = """
<html><body>
<div id="header"><a href="https://www.kasetophono.com/p/ignored.html">Not in nav</a></div>
<ul id='nav2'>
  <li><a href='https://www.kasetophono.com/p/blog-page_28.html'>_ξενα</a></li>
  <li><a href='http://www.kasetophono.com/search/label/Playlist'>_Νέες</a></li>
  <li><a href='https://www.kasetophono.com/p/blog-page_3.html'> ΜΕΡΕΣ </a></li>
  <li><a href='https://www.kasetophono.com/p/blog-page_28.html'>Ξένα (again)</a></li>
  <li><a href='https://www.kasetophono.com/p/4.html'>_4 εποχές</a></li>
  <li><a href='https://www.kasetophono.com/p/blog-page_5.html'><b>ΔΙΑΘΕΣΕΙΣ</b></a></li>
</ul>
</body></html>
"""

CATEGORY_PAGE_HTML = """
<html><body>
<div class='post-body'>
  <h1 class='favourite-posts-title'><a href='https://www.kasetophono.com/search/label/Balkan'> Βαλκάνια </a></h1>
  <h1 class='favourite-posts-title'><a href='https://www.kasetophono.com/2019/01/nero.html'>Ινδίες</a></h1>
  <h1 class='favourite-posts-title'><a href='https://www.kasetophono.com/search/label/%CE%9D%CE%B5%CF%81%CF%8C'>Νερό</a></h1>
  <h1 class='favourite-posts-title'><a href='https://www.kasetophono.com/search/label/Balkan'>Βαλκάνια</a></h1>
</div>
<h1 class='favourite-posts-title'><a href='https://www.kasetophono.com/search/label/Outside'>Outside post body</a></h1>
</body></html>
"""


# ---------------------------------------------------------------------------
# Feed builders
# ---------------------------------------------------------------------------


def make_entry_dict(
    slug: str = "nero",
    *,
    title: str = "Νερό / Water",
    year: str = "2019",
    month: str = "01",
    labels: list[str] | None = None,
    iframe_src: str | None = PLAYLIST_SRC,
    image_src: str | None = "https://blogger.googleusercontent.com/img/nero.jpg",
    link_count: int = 3,
    published: str | None = "2019-01-20T12:00:00.000+02:00",
) -> dict[str, Any]:
    """Build one raw Blogger feed entry."""
    post_url = f"{BASE_URL}/{year}/{month}/{slug}.html"
    content = "<div>"
    if iframe_src is not None:
        content += f'<iframe width="560" height="315" src="{iframe_src}" frameborder="0"></iframe>'
    if image_src is not None:
        content += f'<img src="{image_src}" />'
    content += "<p>Tracklist inside.</p></div>"

    links = [
        {"rel": "edit", "type": "application/atom+xml", "href": f"https://www.blogger.com/feeds/1/posts/default/{slug}"},
        {"rel": "self", "type": "application/atom+xml", "href": f"https://www.blogger.com/feeds/1/posts/default/{slug}"},
        {"rel": "alternate", "type": "text/html", "href": post_url, "title": title},
    ][:link_count]

    entry: dict[str, Any] = {
        "id": {"$t": f"tag:blogger.com,1999:blog-1.post-{slug}"},
        "updated": {"$t": "2019-01-21T12:00:00.000+02:00"},
        "category": [{"scheme": "http://www.blogger.com/atom/ns#", "term": t} for t in (labels or [])],
        "title": {"type": "text", "$t": f"  {title}  "},
        "content": {"type": "html", "$t": content},
        "link": links,
    }
    if published is not None:
        entry["published"] = {"$t": published}
    return entry


def make_entry(slug: str = "nero", **kwargs: Any) -> FeedEntry:
    return FeedEntry.model_validate(make_entry_dict(slug, **kwargs))


def make_feed_page(entries: list[dict[str, Any]], total_results: int | None = None) -> str:
    """Serialize a feed page the way Blogger does (``entry`` omitted when empty)."""
    feed: dict[str, Any] = {
        "xmlns": "http://www.w3.org/2005/Atom",
        "title": {"type": "text", "$t": "Kasetophono"},
        "openSearch$startIndex": {"$t": "1"},
        "openSearch$itemsPerPage": {"$t": "25"},
    }
    if total_results is not None:
        feed["openSearch$totalResults"] = {"$t": str(total_results)}
    if entries:
        feed["entry"] = entries
    return json.dumps({"version": "1.0", "encoding": "UTF-8", "feed": feed}, ensure_ascii=False)


def make_cassette(
    slug: str = "nero",
    *,
    name: str = "Νερό",
    labels: list[str] | None = None,
) -> Cassette:
    url = f"{BASE_URL}/2019/01/{slug}.html"
    return Cassette(
        uuid=cassette_uuid(url),
        name=name,
        safe_name=name.replace("/", "-"),
        path=f"cassettes/2019/01/{name.replace('/', '-')}",
        url=url,
        yt_url=f"https://www.youtube.com/embed/videoseries?list=PL{slug}",
        image_url=None,
        labels=labels or [],
        subcategories=[],
        created_at="2019-01-20T12:00:00.000+02:00",
    )


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeFetcher(IFetcher):
    """In-memory fetcher keyed by URL; records every request."""

    def __init__(self, pages: dict[str, str | Exception] | None = None) -> None:
        self.pages: dict[str, str | Exception] = dict(pages or {})
        self.requested: list[str] = []

    async def fetch_text(self, url: str) -> str:
        self.requested.append(url)
        await asyncio.sleep(0)
        page = self.pages.get(url)
        if page is None:
            raise FetchError(message=f"HTTP 404 for {url}", provider_name="fake")
        if isinstance(page, Exception):
            raise page
        return page

    def get_provider_name(self) -> str:
        return "fake"


class FakeHandle(IPlayerHandle):
    def __init__(self, pid: int, url: str, fail_terminate: bool = False) -> None:
        self._pid = pid
        self.url = url
        self.alive = True
        self.fail_terminate = fail_terminate

    @property
    def pid(self) -> int | None:
        return self._pid

    async def terminate(self) -> None:
        await asyncio.sleep(0)
        if self.fail_terminate:
            raise PlaybackError(message=f"pid {self._pid} would not stop", provider_name="fake")
        self.alive = False


class FakePlayer(IPlayerProvider):
    """Player that hands out FakeHandles and remembers all of them."""

    def __init__(self, fail_spawn: bool = False) -> None:
        self.handles: list[FakeHandle] = []
        self.fail_spawn = fail_spawn

    async def spawn(self, url: str) -> FakeHandle:
        await asyncio.sleep(0)
        if self.fail_spawn:
            raise PlaybackError(message="mpv not found", provider_name="fake")
        handle = FakeHandle(pid=1000 + len(self.handles), url=url)
        self.handles.append(handle)
        return handle

    def get_provider_name(self) -> str:
        return "fake"

    @property
    def alive(self) -> list[FakeHandle]:
        return [h for h in self.handles if h.alive]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def front_page_html() -> str:
    return FRONT_PAGE_HTML


@pytest.fixture
def category_page_html() -> str:
    return CATEGORY_PAGE_HTML


@pytest.fixture
def entry_factory() -> Callable[..., FeedEntry]:
    return make_entry


@pytest.fixture
def sample_catalog() -> dict[UUID, Cassette]:
    cassettes = [
        make_cassette("nero", name="Νερό", labels=["Balkan"]),
        make_cassette("fotia", name="Φωτιά", labels=["Rock"]),
    ]
    return {c.uuid: c for c in cassettes}
