"""One full crawl of the site into a ``uuid -> Cassette`` map.

Two branches run concurrently and share one fetch semaphore:

    front page -> categories -> category pages (fan-out) -> subcategories
    feed pages (paginated) -> entries -> cassettes

Classification waits for both, since every cassette is matched against
the complete subcategory list.  Any fetch or page-structure error fails
the crawl; a broken feed entry only drops that entry.
"""

from __future__ import annotations

import asyncio
from uuid import UUID

import structlog

from kasetophono.interfaces.fetcher import IFetcher
from kasetophono.models.blogger import RawEntry
from kasetophono.models.catalog import Cassette, Category, Subcategory
from kasetophono.services.category_extractor import extract_categories
from kasetophono.services.cassette_extractor import extract_cassette, parse_entry
from kasetophono.services.classifier import apply_subcategories
from kasetophono.services.feed_paginator import FeedPaginator
from kasetophono.services.subcategory_extractor import extract_subcategories
from kasetophono.utils.concurrency import bounded, throttled_gather
from kasetophono.utils.errors import EntryExtractionError

logger = structlog.get_logger(logger_name=__name__)


def _raw_entry_id(raw: RawEntry) -> str | None:
    node = raw.get("id")
    if isinstance(node, dict) and isinstance(node.get("$t"), str):
        return node["$t"]
    return None


def extract_cassettes(entries: list[RawEntry]) -> list[Cassette]:
    """Convert raw feed entries to cassettes, skipping non-cassettes and broken entries."""
    cassettes: list[Cassette] = []
    for position, raw in enumerate(entries):
        try:
            cassette = extract_cassette(parse_entry(raw))
        except EntryExtractionError as exc:
            logger.warning(
                "feed_entry_skipped",
                position=position,
                entry_id=_raw_entry_id(raw),
                error=exc.message,
            )
            continue
        if cassette is not None:
            cassettes.append(cassette)
    return cassettes


class CrawlService:
    """Runs the crawl pipeline against the upstream site.

    Parameters
    ----------
    fetcher:
        Upstream fetcher.
    base_url:
        Site root, e.g. ``https://www.kasetophono.com``.
    feed_url:
        Posts feed URL.  Defaults to ``<base_url>/feeds/posts/default``.
    page_size:
        Feed entries per request.
    concurrency:
        Width of the crawl-wide fetch limiter.
    """

    def __init__(
        self,
        fetcher: IFetcher,
        base_url: str = "https://www.kasetophono.com",
        feed_url: str | None = None,
        page_size: int = 25,
        concurrency: int = 5,
    ) -> None:
        self._fetcher = fetcher
        self._base_url = base_url.rstrip("/")
        self._feed_url = feed_url or f"{self._base_url}/feeds/posts/default"
        self._page_size = page_size
        self._concurrency = concurrency

    async def crawl(self) -> dict[UUID, Cassette]:
        """Run one complete crawl and return the classified catalog."""
        semaphore = asyncio.Semaphore(self._concurrency)
        logger.info("crawl_started", base_url=self._base_url, concurrency=self._concurrency)

        branches = (
            asyncio.create_task(self.crawl_subcategories(semaphore)),
            asyncio.create_task(self._paginator(semaphore).fetch_entries()),
        )
        try:
            subcategories, entries = await asyncio.gather(*branches)
        except BaseException:
            # A failed branch fails the crawl; do not leave the other one fetching.
            for task in branches:
                task.cancel()
            await asyncio.gather(*branches, return_exceptions=True)
            raise

        cassettes = apply_subcategories(extract_cassettes(entries), subcategories)

        catalog: dict[UUID, Cassette] = {}
        for cassette in cassettes:
            catalog[cassette.uuid] = cassette

        logger.info(
            "crawl_complete",
            entries=len(entries),
            cassettes=len(catalog),
            subcategories=len(subcategories),
        )
        return catalog

    async def crawl_categories(self, semaphore: asyncio.Semaphore | None = None) -> list[Category]:
        semaphore = semaphore or asyncio.Semaphore(self._concurrency)
        html = await bounded(semaphore, self._fetcher.fetch_text(self._base_url + "/"))
        categories = extract_categories(html)
        logger.info("categories_extracted", count=len(categories))
        return categories

    async def crawl_subcategories(
        self, semaphore: asyncio.Semaphore | None = None
    ) -> list[Subcategory]:
        """Fetch every category page and return all subcategories, in category order."""
        grouped = await self.crawl_category_tree(semaphore)
        return [sc for subcategories in grouped.values() for sc in subcategories]

    async def crawl_category_tree(
        self, semaphore: asyncio.Semaphore | None = None
    ) -> dict[Category, list[Subcategory]]:
        semaphore = semaphore or asyncio.Semaphore(self._concurrency)
        categories = await self.crawl_categories(semaphore)

        pages = await throttled_gather(
            [self._fetcher.fetch_text(c.url) for c in categories],
            semaphore=semaphore,
            return_exceptions=False,
        )

        tree: dict[Category, list[Subcategory]] = {}
        for category, html in zip(categories, pages):
            tree[category] = extract_subcategories(html)
            logger.debug(
                "subcategories_extracted", category=category.name, count=len(tree[category])
            )
        return tree

    def _paginator(self, semaphore: asyncio.Semaphore) -> FeedPaginator:
        return FeedPaginator(
            fetcher=self._fetcher,
            feed_url=self._feed_url,
            page_size=self._page_size,
            concurrency=self._concurrency,
            semaphore=semaphore,
        )
