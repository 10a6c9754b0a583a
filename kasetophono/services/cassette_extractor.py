"""Feed entry to :class:`Cassette` conversion.

An entry is a cassette when its HTML content embeds a YouTube playlist
iframe.  Everything else about the record is derived from the entry:

* ``url``: the third link of the entry, which on this blog is always the
  public post URL (``.../<year>/<month>/<slug>.html``)
* ``uuid``: ``uuid5(NAMESPACE_URL, url)``
* ``path``: ``cassettes/<year>/<month>/<safe_name>`` from the post URL
"""

from __future__ import annotations

import uuid
from urllib.parse import urlsplit

from bs4 import BeautifulSoup
from pydantic import ValidationError

from kasetophono.models.blogger import FeedEntry, RawEntry
from kasetophono.models.catalog import Cassette
from kasetophono.utils.errors import EntryExtractionError

_PLAYLIST_HOST_MARKER = "youtube.com"
_PLAYLIST_LIST_MARKER = "list"
_CANONICAL_LINK_INDEX = 2
_PATH_ROOT = "cassettes"


def cassette_uuid(url: str) -> uuid.UUID:
    """Stable identity of the post at *url*."""
    return uuid.uuid5(uuid.NAMESPACE_URL, url)


def make_safe_name(name: str) -> str:
    return name.replace("/", "-")


def cassette_path(url: str, safe_name: str) -> str:
    """Return ``cassettes/<year>/<month>/<safe_name>`` for a dated post URL.

    Raises:
        EntryExtractionError: the URL does not parse, or its path has no
            ``/<year>/<month>/<slug>`` tail.
    """
    try:
        url_path = urlsplit(url).path
    except ValueError as exc:
        raise EntryExtractionError(message=f"Unparseable post URL {url!r}: {exc}") from exc

    segments = [s for s in url_path.split("/") if s]
    if len(segments) < 3:
        raise EntryExtractionError(message=f"Post URL has no year/month segments: {url}")

    year, month = segments[-3], segments[-2]
    if not (year.isdigit() and month.isdigit()):
        raise EntryExtractionError(message=f"Post URL has no year/month segments: {url}")

    return "/".join((_PATH_ROOT, year, month, safe_name))


def parse_entry(raw: RawEntry) -> FeedEntry:
    """Validate one raw feed entry.

    Raises:
        EntryExtractionError: the entry does not match the feed entry shape
            (e.g. a link without ``href`` or a ``null`` title).
    """
    try:
        return FeedEntry.model_validate(raw)
    except ValidationError as exc:
        raise EntryExtractionError(message=f"Entry does not match the feed schema: {exc}") from exc


def _is_playlist(src: str) -> bool:
    return _PLAYLIST_HOST_MARKER in src and _PLAYLIST_LIST_MARKER in src


def extract_cassette(entry: FeedEntry) -> Cassette | None:
    """Build a cassette from a feed entry.

    Returns ``None`` when the entry embeds no playlist (not a cassette).

    Raises:
        EntryExtractionError: the entry is a cassette candidate but misses
            content, title, publish date or its canonical link.
    """
    if entry.content is None:
        raise EntryExtractionError(message="Entry has no content")

    fragment = BeautifulSoup(entry.content.t, "html.parser")

    # Only the first frame counts; a post leading with another embed is not a cassette.
    iframe = fragment.find("iframe")
    yt_url = iframe.get("src") if iframe is not None else None
    if not yt_url or not _is_playlist(yt_url):
        return None

    if entry.title is None:
        raise EntryExtractionError(message="Entry has no title")
    if entry.published is None:
        raise EntryExtractionError(message="Entry has no published timestamp")
    if len(entry.link) <= _CANONICAL_LINK_INDEX:
        raise EntryExtractionError(
            message=f"Entry has {len(entry.link)} links, canonical link missing"
        )

    name = entry.title.t.strip()
    safe_name = make_safe_name(name)
    url = entry.link[_CANONICAL_LINK_INDEX].href

    image = fragment.find("img", src=True)

    return Cassette(
        uuid=cassette_uuid(url),
        name=name,
        safe_name=safe_name,
        path=cassette_path(url, safe_name),
        url=url,
        yt_url=yt_url,
        image_url=image["src"] if image is not None else None,
        labels=[c.term for c in entry.category],
        subcategories=[],
        created_at=entry.published.t,
    )
