"""Authoritative owner of the published cassette catalog.

Lifecycle::

    EMPTY -> BUILDING -> PUBLISHED -> REFRESHING -> PUBLISHED -> ...

Readers (HTTP handlers) call :meth:`CatalogStore.snapshot` once per request
and work on that object.  Publishing replaces a single attribute with a new
read-only mapping, so a reader holds either the old or the new catalog,
never a mixture.  The event loop is single-threaded, which makes that
assignment atomic without a reader lock.

Snapshots on disk are a JSON object ``{uuid: Cassette}``.  They are written
to a temporary file next to the target, fsynced and renamed into place.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Mapping
from uuid import UUID

import structlog
from pydantic import ValidationError

from kasetophono.models.catalog import Cassette
from kasetophono.services.crawl_service import CrawlService
from kasetophono.utils.errors import CatalogUnavailableError, CassetteNotFoundError, KasetophonoError

logger = structlog.get_logger(logger_name=__name__)

Catalog = Mapping[UUID, Cassette]

_EMPTY: Catalog = MappingProxyType({})


class CatalogState(str, Enum):
    EMPTY = "empty"
    BUILDING = "building"
    PUBLISHED = "published"
    REFRESHING = "refreshing"


# ---------------------------------------------------------------------------
# Snapshot persistence
# ---------------------------------------------------------------------------


def save_snapshot(path: str | Path, catalog: Catalog) -> None:
    """Atomically write *catalog* to *path*."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    data = {str(uuid): cassette.model_dump(mode="json") for uuid, cassette in catalog.items()}

    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, ensure_ascii=False, indent=2)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, target)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def load_snapshot(path: str | Path) -> dict[UUID, Cassette] | None:
    """Read a snapshot, or return ``None`` if it is missing or unusable."""
    source = Path(path)
    if not source.exists():
        return None
    try:
        raw = json.loads(source.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("snapshot root is not an object")
        catalog: dict[UUID, Cassette] = {}
        for key, value in raw.items():
            cassette = Cassette.model_validate(value)
            catalog[UUID(key)] = cassette
        return catalog
    except (OSError, ValueError, ValidationError) as exc:
        # json.JSONDecodeError is a ValueError.
        logger.warning("catalog_snapshot_unreadable", path=str(source), error=str(exc))
        return None


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class CatalogStore:
    """Builds, loads, publishes and refreshes the catalog.

    Parameters
    ----------
    crawler:
        Service producing a fresh catalog.
    snapshot_path:
        Location of the persisted snapshot.
    startup_retry_seconds:
        Backoff between failed crawls while nothing is published.
    refresh_interval_seconds:
        Delay between background refreshes.
    refresh_retry_seconds:
        Backoff after a failed background refresh.
    """

    def __init__(
        self,
        crawler: CrawlService,
        snapshot_path: str | Path = "metadata.json",
        startup_retry_seconds: float = 5.0,
        refresh_interval_seconds: float = 24 * 60 * 60,
        refresh_retry_seconds: float = 30.0,
    ) -> None:
        self._crawler = crawler
        self._snapshot_path = Path(snapshot_path)
        self._startup_retry = startup_retry_seconds
        self._refresh_interval = refresh_interval_seconds
        self._refresh_retry = refresh_retry_seconds

        self._catalog: Catalog = _EMPTY
        self._state = CatalogState.EMPTY
        self._published_at: datetime | None = None
        self._refresh_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def state(self) -> CatalogState:
        return self._state

    @property
    def published_at(self) -> datetime | None:
        return self._published_at

    @property
    def is_ready(self) -> bool:
        return self._published_at is not None

    def snapshot(self) -> Catalog:
        """Return the current published catalog.

        Raises:
            CatalogUnavailableError: nothing has been published yet.
        """
        if not self.is_ready:
            raise CatalogUnavailableError()
        return self._catalog

    def get(self, uuid: UUID) -> Cassette:
        cassette = self.snapshot().get(uuid)
        if cassette is None:
            raise CassetteNotFoundError(message=f"No cassette with uuid {uuid}")
        return cassette

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def publish(self, catalog: Mapping[UUID, Cassette]) -> None:
        """Make *catalog* the visible catalog in one reference swap."""
        self._catalog = MappingProxyType(dict(catalog))
        self._published_at = datetime.now(timezone.utc)
        self._state = CatalogState.PUBLISHED
        logger.info("catalog_published", cassettes=len(self._catalog))

    async def start(self) -> None:
        """Load the snapshot if possible, otherwise crawl until one crawl succeeds."""
        cached = await asyncio.to_thread(load_snapshot, self._snapshot_path)
        if cached is not None:
            logger.info("catalog_loaded_from_snapshot", path=str(self._snapshot_path))
            self.publish(cached)
            return

        self._state = CatalogState.BUILDING
        attempt = 0
        while True:
            attempt += 1
            try:
                async with self._refresh_lock:
                    catalog = await self._crawler.crawl()
                    await self._persist(catalog)
                    self.publish(catalog)
                return
            except Exception as exc:
                # Unexpected errors get a traceback; the loop keeps retrying either way.
                logger.error(
                    "catalog_build_failed",
                    attempt=attempt,
                    error=str(exc),
                    retry_in=self._startup_retry,
                    exc_info=not isinstance(exc, KasetophonoError),
                )
            await asyncio.sleep(self._startup_retry)

    async def refresh_once(self) -> bool:
        """Re-crawl and republish.  On failure the published catalog stays."""
        async with self._refresh_lock:
            previous = self._state
            self._state = CatalogState.REFRESHING if self.is_ready else CatalogState.BUILDING
            try:
                catalog = await self._crawler.crawl()
                await self._persist(catalog)
            except Exception as exc:
                self._state = previous
                logger.error(
                    "catalog_refresh_failed",
                    error=str(exc),
                    exc_info=not isinstance(exc, KasetophonoError),
                )
                return False
            self.publish(catalog)
            return True

    async def run_refresh_loop(self) -> None:
        """Refresh forever: every interval, retrying failed refreshes after a short backoff."""
        delay = self._refresh_interval
        while True:
            await asyncio.sleep(delay)
            if await self.refresh_once():
                delay = self._refresh_interval
            else:
                delay = self._refresh_retry
                logger.info("catalog_refresh_retry_scheduled", retry_in=delay)

    async def _persist(self, catalog: Catalog) -> None:
        # The snapshot is only a startup cache; a failed write must not block publishing.
        try:
            await asyncio.to_thread(save_snapshot, self._snapshot_path, catalog)
        except OSError as exc:
            logger.error("catalog_snapshot_write_failed", path=str(self._snapshot_path), error=str(exc))
            return
        logger.info("catalog_snapshot_written", path=str(self._snapshot_path), cassettes=len(catalog))
