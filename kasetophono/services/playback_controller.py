"""Single-slot playback control.

At most one external player runs at a time.  ``play`` and ``stop`` take the
same lock for the whole "terminate old, spawn new, store handle" sequence,
so concurrent requests are applied one after the other and the survivor is
whichever call ran last under the lock.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from uuid import UUID

import structlog

from kasetophono.interfaces.player_provider import IPlayerHandle, IPlayerProvider
from kasetophono.models.catalog import Cassette
from kasetophono.services.catalog_store import CatalogStore
from kasetophono.utils.errors import PlaybackError

logger = structlog.get_logger(logger_name=__name__)


@dataclass(frozen=True)
class NowPlaying:
    cassette: Cassette
    handle: IPlayerHandle


class PlaybackController:
    """Owns the one live player handle.

    Parameters
    ----------
    catalog:
        Store used to resolve cassette uuids.
    player:
        Provider that starts the external player.
    """

    def __init__(self, catalog: CatalogStore, player: IPlayerProvider) -> None:
        self._catalog = catalog
        self._player = player
        self._current: NowPlaying | None = None
        self._lock = asyncio.Lock()

    @property
    def now_playing(self) -> Cassette | None:
        return self._current.cassette if self._current else None

    async def play(self, uuid: UUID) -> Cassette:
        """Replace whatever is playing with cassette *uuid*.

        Raises:
            CassetteNotFoundError: *uuid* is not in the published catalog.
            CatalogUnavailableError: nothing is published yet.
            PlaybackError: the old player would not stop (it stays current)
                or the new one would not start (nothing is playing).
        """
        cassette = self._catalog.get(uuid)

        async with self._lock:
            await self._terminate_current()
            handle = await self._player.spawn(cassette.yt_url)
            self._current = NowPlaying(cassette=cassette, handle=handle)

        logger.info("playback_started", uuid=str(uuid), name=cassette.name, pid=handle.pid)
        return cassette

    async def stop(self) -> Cassette | None:
        """Stop playback.  Returns the cassette that was playing, if any."""
        async with self._lock:
            stopped = self.now_playing
            await self._terminate_current()

        if stopped is not None:
            logger.info("playback_stopped", uuid=str(stopped.uuid))
        return stopped

    async def shutdown(self) -> None:
        """Stop the player on application shutdown, logging rather than raising."""
        try:
            await self.stop()
        except PlaybackError as exc:
            logger.error("playback_shutdown_failed", error=str(exc))

    async def _terminate_current(self) -> None:
        # Caller holds the lock.  On failure the handle stays current.
        if self._current is None:
            return
        await self._current.handle.terminate()
        self._current = None
