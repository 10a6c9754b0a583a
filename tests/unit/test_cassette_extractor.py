"""Unit tests for feed entry to Cassette extraction."""

from __future__ import annotations

import uuid

import pytest

from kasetophono.models.blogger import FeedEntry
from kasetophono.services.cassette_extractor import (
    cassette_path,
    cassette_uuid,
    extract_cassette,
    parse_entry,
)
from kasetophono.utils.errors import EntryExtractionError
from tests.conftest import PLAYLIST_SRC, make_entry, make_entry_dict

POST_URL = "https://www.kasetophono.com/2019/01/nero.html"


class TestExtractCassette:
    def test_builds_full_record(self) -> None:
        cassette = extract_cassette(make_entry(labels=["Balkan", "Ελληνικά"]))

        assert cassette is not None
        assert cassette.name == "Νερό / Water"
        assert cassette.safe_name == "Νερό - Water"
        assert cassette.url == POST_URL
        assert cassette.uuid == uuid.uuid5(uuid.NAMESPACE_URL, POST_URL)
        assert cassette.path == "cassettes/2019/01/Νερό - Water"
        assert cassette.yt_url == PLAYLIST_SRC
        assert cassette.image_url == "https://blogger.googleusercontent.com/img/nero.jpg"
        assert cassette.labels == ["Balkan", "Ελληνικά"]
        assert cassette.subcategories == []
        assert cassette.created_at == "2019-01-20T12:00:00.000+02:00"

    def test_extraction_is_deterministic(self) -> None:
        first = extract_cassette(make_entry())
        second = extract_cassette(make_entry())
        assert first is not None and second is not None
        assert (first.uuid, first.path, first.safe_name) == (
            second.uuid,
            second.path,
            second.safe_name,
        )

    def test_labels_keep_duplicates_and_order(self) -> None:
        cassette = extract_cassette(make_entry(labels=["b", "a", "b"]))
        assert cassette is not None
        assert cassette.labels == ["b", "a", "b"]

    def test_no_iframe_is_not_a_cassette(self) -> None:
        assert extract_cassette(make_entry(iframe_src=None)) is None

    def test_video_without_playlist_is_not_a_cassette(self) -> None:
        entry = make_entry(iframe_src="https://www.youtube.com/embed/abc123")
        assert extract_cassette(entry) is None

    def test_other_host_playlist_is_not_a_cassette(self) -> None:
        entry = make_entry(iframe_src="https://w.soundcloud.com/player/?url=playlists/1&list=1")
        assert extract_cassette(entry) is None

    def test_non_cassette_with_bad_links_is_still_just_skipped(self) -> None:
        # Entries that are not cassettes never reach link validation.
        assert extract_cassette(make_entry(iframe_src=None, link_count=1)) is None

    def test_only_the_first_iframe_is_considered(self) -> None:
        raw = make_entry_dict()
        raw["content"]["$t"] = (
            '<iframe src="https://w.soundcloud.com/player/?url=1"></iframe>'
            '<iframe src="https://www.youtube.com/embed/videoseries?list=PLsecond"></iframe>'
        )
        assert extract_cassette(FeedEntry.model_validate(raw)) is None

    def test_first_iframe_playlist_is_used(self) -> None:
        raw = make_entry_dict()
        raw["content"]["$t"] = (
            '<iframe src="https://www.youtube.com/embed/videoseries?list=PLfirst"></iframe>'
            '<iframe src="https://www.youtube.com/embed/videoseries?list=PLsecond"></iframe>'
        )
        cassette = extract_cassette(FeedEntry.model_validate(raw))
        assert cassette is not None
        assert cassette.yt_url.endswith("PLfirst")

    def test_missing_image_is_none(self) -> None:
        cassette = extract_cassette(make_entry(image_src=None))
        assert cassette is not None
        assert cassette.image_url is None

    def test_fewer_than_three_links_raises(self) -> None:
        with pytest.raises(EntryExtractionError):
            extract_cassette(make_entry(link_count=2))

    def test_missing_content_raises(self) -> None:
        raw = make_entry_dict()
        del raw["content"]
        with pytest.raises(EntryExtractionError):
            extract_cassette(FeedEntry.model_validate(raw))

    def test_missing_published_raises(self) -> None:
        with pytest.raises(EntryExtractionError):
            extract_cassette(make_entry(published=None))

    def test_undated_post_url_raises(self) -> None:
        raw = make_entry_dict()
        raw["link"][2]["href"] = "https://www.kasetophono.com/p/about.html"
        with pytest.raises(EntryExtractionError):
            extract_cassette(FeedEntry.model_validate(raw))


class TestDerivedFields:
    def test_uuid_depends_only_on_url(self) -> None:
        assert cassette_uuid(POST_URL) == cassette_uuid(POST_URL)
        assert cassette_uuid(POST_URL) != cassette_uuid(POST_URL + "?m=1")

    def test_path_from_year_and_month(self) -> None:
        assert cassette_path(POST_URL, "Νερό") == "cassettes/2019/01/Νερό"

    def test_path_ignores_query_string(self) -> None:
        assert cassette_path(POST_URL + "?m=1", "x") == "cassettes/2019/01/x"

    def test_short_path_raises(self) -> None:
        with pytest.raises(EntryExtractionError):
            cassette_path("https://www.kasetophono.com/nero.html", "x")

    def test_unparseable_url_raises(self) -> None:
        with pytest.raises(EntryExtractionError):
            cassette_path("http://[bad/2019/01/x.html", "x")


class TestParseEntry:
    def test_valid_entry(self) -> None:
        assert parse_entry(make_entry_dict("nero")) == make_entry("nero")

    def test_link_without_href_raises(self) -> None:
        raw = make_entry_dict()
        del raw["link"][0]["href"]
        with pytest.raises(EntryExtractionError):
            parse_entry(raw)

    def test_null_text_raises(self) -> None:
        raw = make_entry_dict()
        raw["title"] = {"$t": None}
        with pytest.raises(EntryExtractionError):
            parse_entry(raw)
