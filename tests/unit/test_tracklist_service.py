"""Unit tests for TracklistService (yt-dlp patched out)."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from yt_dlp.utils import DownloadError

from kasetophono.providers.cache.memory_cache import MemoryCacheProvider
from kasetophono.services.tracklist_service import TracklistService, playlist_url
from kasetophono.utils.errors import TracklistError
from tests.conftest import make_cassette

_INFO = {
    "_type": "playlist",
    "id": "PLnero",
    "entries": [
        {"id": "aaa", "title": "Song A", "duration": 201.0},
        None,
        {"id": "bbb", "title": "Song B"},
        {"url": "ccc", "title": None, "duration": 95},
        {"title": "no id"},
    ],
}


def _mock_ydl(info=None, error: Exception | None = None) -> MagicMock:
    ydl = MagicMock()
    ydl.__enter__.return_value = ydl
    ydl.__exit__.return_value = False
    if error is not None:
        ydl.extract_info.side_effect = error
    else:
        ydl.extract_info.return_value = info
    return ydl


class TestPlaylistUrl:
    def test_embed_url_becomes_playlist_url(self) -> None:
        url = "https://www.youtube.com/embed/videoseries?list=PLabc&hl=el"
        assert playlist_url(url) == "https://www.youtube.com/playlist?list=PLabc"

    def test_url_without_list_is_unchanged(self) -> None:
        url = "https://www.youtube.com/embed/abc"
        assert playlist_url(url) == url


class TestTracklistService:
    @pytest.mark.asyncio
    async def test_lists_songs_in_playlist_order(self) -> None:
        ydl = _mock_ydl(_INFO)
        service = TracklistService(cache=MemoryCacheProvider())

        with patch("yt_dlp.YoutubeDL", return_value=ydl) as mock_cls:
            songs = await service.get_songs(make_cassette("nero"))

        assert [s.id for s in songs] == ["aaa", "bbb", "ccc"]
        assert songs[0].duration == 201
        assert songs[1].duration is None
        assert songs[2].title is None
        ydl.extract_info.assert_called_once_with(
            "https://www.youtube.com/playlist?list=PLnero", download=False
        )
        assert mock_cls.call_args.args[0]["extract_flat"] is True

    @pytest.mark.asyncio
    async def test_second_call_is_served_from_cache(self) -> None:
        ydl = _mock_ydl(_INFO)
        service = TracklistService(cache=MemoryCacheProvider())
        cassette = make_cassette("nero")

        with patch("yt_dlp.YoutubeDL", return_value=ydl):
            first = await service.get_songs(cassette)
            second = await service.get_songs(cassette)

        assert first == second
        ydl.extract_info.assert_called_once()

    @pytest.mark.asyncio
    async def test_download_error_raises_tracklist_error(self) -> None:
        ydl = _mock_ydl(error=DownloadError("This playlist does not exist"))
        service = TracklistService(cache=MemoryCacheProvider())

        with patch("yt_dlp.YoutubeDL", return_value=ydl):
            with pytest.raises(TracklistError) as exc_info:
                await service.get_songs(make_cassette("nero"))

        assert exc_info.value.provider_name == "yt-dlp"

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self) -> None:
        cache = MemoryCacheProvider()
        service = TracklistService(cache=cache)
        cassette = make_cassette("nero")

        with patch("yt_dlp.YoutubeDL", return_value=_mock_ydl(info=None)):
            with pytest.raises(TracklistError):
                await service.get_songs(cassette)

        assert not await cache.exists(f"songs:{cassette.uuid}")

    @pytest.mark.asyncio
    async def test_empty_playlist_is_cached_as_empty(self) -> None:
        ydl = _mock_ydl({"_type": "playlist", "entries": []})
        service = TracklistService(cache=MemoryCacheProvider())

        with patch("yt_dlp.YoutubeDL", return_value=ydl):
            assert await service.get_songs(make_cassette("nero")) == []
            assert await service.get_songs(make_cassette("nero")) == []

        ydl.extract_info.assert_called_once()
