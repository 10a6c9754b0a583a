"""Paged download of the Blogger posts feed.

Pages are addressed by a 1-based ``start-index`` advancing by the page
size.  The feed has no "next" link we can trust, so the end is detected
by content: the first page that comes back with no entries.

Scheduling
----------
Page 1 is fetched on its own.  Blogger advertises the total number of
posts in ``openSearch$totalResults``; when present, it caps speculative
scheduling at the page right after the advertised last one (the page that
should come back empty).  Up to ``concurrency`` pages are in flight, issued
in page order, and each fetch also holds a slot of the crawl-wide
semaphore.

Once any page is observed empty no further page is ever scheduled.  Pages
already in flight are awaited, but only pages *before* the lowest empty
page contribute entries, so completion order cannot change the result.
If the advertised horizon is exhausted without an empty page (posts were
published mid-crawl) scheduling simply carries on past it.
"""

from __future__ import annotations

import asyncio
import json
import math
import re

import structlog
from pydantic import ValidationError

from kasetophono.interfaces.fetcher import IFetcher
from kasetophono.models.blogger import FeedDocument, RawEntry
from kasetophono.utils.concurrency import bounded
from kasetophono.utils.errors import FeedSchemaError

logger = structlog.get_logger(logger_name=__name__)

# The upstream occasionally emits ",," between array items.  Only matched
# between a closing and an opening token, so ",," in post text is left alone.
_DOUBLED_DELIMITER = re.compile(r'(?<=[}\]"])\s*,\s*,(?=\s*[{\["])')


def decode_feed_page(text: str) -> FeedDocument:
    """Parse one feed page into a :class:`FeedDocument`.

    A page that is not valid JSON gets one repair attempt when it contains
    a doubled delimiter; anything else is a :class:`FeedSchemaError`.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        if not _DOUBLED_DELIMITER.search(text):
            raise FeedSchemaError(message=f"Feed page is not valid JSON: {exc}") from exc

        logger.warning("feed_page_repaired", error=str(exc))
        try:
            raw = json.loads(_DOUBLED_DELIMITER.sub(",", text))
        except json.JSONDecodeError as retry_exc:
            raise FeedSchemaError(
                message=f"Feed page is not valid JSON after repair: {retry_exc}"
            ) from retry_exc

    try:
        return FeedDocument.model_validate(raw)
    except ValidationError as exc:
        raise FeedSchemaError(message=f"Feed page does not match the feed schema: {exc}") from exc


class FeedPaginator:
    """Fetch every entry of the posts feed.

    Parameters
    ----------
    fetcher:
        Upstream fetcher.
    feed_url:
        Absolute URL of the feed, without query string.
    page_size:
        ``max-results`` per request.
    concurrency:
        Maximum number of pages in flight.
    semaphore:
        Crawl-wide limiter shared with the other fetches.  Defaults to a
        private one of width ``concurrency``.
    """

    def __init__(
        self,
        fetcher: IFetcher,
        feed_url: str,
        page_size: int = 25,
        concurrency: int = 5,
        semaphore: asyncio.Semaphore | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._feed_url = feed_url
        self._page_size = page_size
        self._concurrency = concurrency
        self._semaphore = semaphore or asyncio.Semaphore(concurrency)

    def page_url(self, index: int) -> str:
        """URL of the 0-based page *index*."""
        start = 1 + index * self._page_size
        return f"{self._feed_url}?alt=json&start-index={start}&max-results={self._page_size}"

    async def fetch_page(self, index: int) -> FeedDocument:
        text = await bounded(self._semaphore, self._fetcher.fetch_text(self.page_url(index)))
        return decode_feed_page(text)

    async def fetch_entries(self) -> list[RawEntry]:
        """Return all raw feed entries, ordered by page then position."""
        first = await self.fetch_page(0)
        if not first.entries:
            logger.info("feed_empty", url=self._feed_url)
            return []

        pages: dict[int, list[RawEntry]] = {0: first.entries}
        horizon: int | None = None
        if first.total_results is not None:
            horizon = math.ceil(first.total_results / self._page_size) + 1

        first_empty: int | None = None
        next_index = 1
        in_flight: dict[asyncio.Task[FeedDocument], int] = {}

        try:
            while True:
                while first_empty is None and len(in_flight) < self._concurrency:
                    if horizon is not None and next_index >= horizon:
                        if in_flight:
                            break
                        logger.info("feed_horizon_exceeded", horizon=horizon)
                        horizon = None
                    task = asyncio.create_task(self.fetch_page(next_index))
                    in_flight[task] = next_index
                    next_index += 1

                if not in_flight:
                    break

                done, _ = await asyncio.wait(in_flight, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    index = in_flight.pop(task)
                    document = task.result()
                    if document.entries:
                        pages[index] = document.entries
                    elif first_empty is None or index < first_empty:
                        first_empty = index
        except BaseException:
            for task in in_flight:
                task.cancel()
            await asyncio.gather(*in_flight, return_exceptions=True)
            raise

        last = first_empty if first_empty is not None else next_index
        entries = [entry for index in sorted(pages) if index < last for entry in pages[index]]
        logger.info(
            "feed_paginated",
            pages=len([i for i in pages if i < last]),
            requested=next_index,
            entries=len(entries),
        )
        return entries
