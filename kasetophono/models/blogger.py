"""Typed view of the Blogger JSON feed (``?alt=json``).

Only the fields the crawl reads are modelled; everything else in the
document is ignored.  Blogger wraps scalar values as ``{"$t": value}``.
A page past the last post has no ``entry`` key at all.

A page is validated only down to its envelope: entries stay raw dicts
until extraction validates each one as a :class:`FeedEntry`, so one
malformed post never costs the rest of its page.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

RawEntry = dict[str, Any]


class TextNode(BaseModel):
    """A ``{"$t": ...}`` wrapper."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    t: str = Field(alias="$t")


class FeedLink(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    rel: str = ""
    type: str | None = None
    href: str
    title: str | None = None


class FeedCategory(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    scheme: str | None = None
    term: str


class FeedEntry(BaseModel):
    """One post of the feed.

    Fields the extractor needs are optional here; the extractor reports
    which one is missing.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: TextNode | None = None
    published: TextNode | None = None
    title: TextNode | None = None
    content: TextNode | None = None
    link: list[FeedLink] = Field(default_factory=list)
    category: list[FeedCategory] = Field(default_factory=list)


class Feed(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    entry: list[RawEntry] = Field(default_factory=list)
    total_results: TextNode | None = Field(default=None, alias="openSearch$totalResults")
    start_index: TextNode | None = Field(default=None, alias="openSearch$startIndex")


class FeedDocument(BaseModel):
    """Top-level feed document."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    version: str | None = None
    encoding: str | None = None
    feed: Feed

    @property
    def entries(self) -> list[RawEntry]:
        return self.feed.entry

    @property
    def total_results(self) -> int | None:
        """Advertised number of posts, or ``None`` when absent or malformed."""
        if self.feed.total_results is None:
            return None
        try:
            return int(self.feed.total_results.t)
        except ValueError:
            return None
