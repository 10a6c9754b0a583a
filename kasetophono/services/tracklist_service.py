"""Playlist track listing for a cassette, via yt-dlp flat extraction.

Listing a playlist takes a few seconds, so results are cached per cassette.
yt-dlp is synchronous and runs in a worker thread.
"""

from __future__ import annotations

import asyncio
from typing import Any
from urllib.parse import parse_qs, urlsplit

import structlog
import yt_dlp
from yt_dlp.utils import DownloadError

from kasetophono.interfaces.cache_provider import ICacheProvider
from kasetophono.models.catalog import Cassette, Song
from kasetophono.utils.errors import TracklistError

logger = structlog.get_logger(logger_name=__name__)

_YDL_OPTIONS = {
    "quiet": True,
    "noprogress": True,
    "skip_download": True,
    "extract_flat": True,
}


def playlist_url(yt_url: str) -> str:
    """Turn an embedded player URL into a canonical playlist URL.

    ``https://www.youtube.com/embed/videoseries?list=PLx`` becomes
    ``https://www.youtube.com/playlist?list=PLx``.  URLs without a ``list``
    parameter are returned unchanged.
    """
    query = parse_qs(urlsplit(yt_url).query)
    list_ids = query.get("list")
    if not list_ids:
        return yt_url
    return f"https://www.youtube.com/playlist?list={list_ids[0]}"


def _to_song(entry: dict[str, Any]) -> Song | None:
    video_id = entry.get("id") or entry.get("url")
    if not video_id:
        return None
    duration = entry.get("duration")
    return Song(
        id=video_id,
        title=entry.get("title"),
        duration=int(duration) if isinstance(duration, (int, float)) else None,
    )


class TracklistService:
    """Lists the songs of a cassette's playlist.

    Parameters
    ----------
    cache:
        Cache for song lists, keyed by cassette uuid.
    """

    def __init__(self, cache: ICacheProvider) -> None:
        self._cache = cache

    async def get_songs(self, cassette: Cassette) -> list[Song]:
        key = f"songs:{cassette.uuid}"
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        url = playlist_url(cassette.yt_url)
        songs = await asyncio.to_thread(self._extract_sync, url)
        await self._cache.set(key, songs)
        logger.info("tracklist_extracted", uuid=str(cassette.uuid), songs=len(songs))
        return songs

    def _extract_sync(self, url: str) -> list[Song]:
        """Run yt-dlp (called via to_thread)."""
        try:
            with yt_dlp.YoutubeDL(_YDL_OPTIONS) as ydl:
                info = ydl.extract_info(url, download=False)
        except DownloadError as exc:
            raise TracklistError(
                message=f"Could not list playlist {url}: {exc}",
                provider_name="yt-dlp",
            ) from exc

        if not info:
            raise TracklistError(message=f"No playlist info for {url}", provider_name="yt-dlp")

        songs: list[Song] = []
        for entry in info.get("entries") or []:
            if not entry:
                continue
            song = _to_song(entry)
            if song is not None:
                songs.append(song)
        return songs
