"""Custom exception hierarchy for Kasetophono.

All application exceptions inherit from :class:`KasetophonoError`, which
carries an optional ``provider_name`` so error handlers can identify which
collaborator (e.g. "httpx", "mpv", "yt-dlp") caused the failure.

    KasetophonoError  (base -- catch-all for any kasetophono error)
    +-- FetchError               (network / HTTP status failure, transient)
    +-- ScrapeError              (page-level structure unusable, fatal for a crawl)
    |   +-- FeedSchemaError      (feed page not decodable, even after repair)
    +-- EntryExtractionError     (one feed entry unusable, skipped)
    +-- CatalogUnavailableError  (nothing published yet)
    +-- CassetteNotFoundError    (unknown cassette uuid)
    +-- PlaybackError            (player spawn / termination failure)
    +-- TracklistError           (playlist extraction failure)

The crawl lifecycle retries whole crawls on FetchError and ScrapeError,
the crawl drops single entries on EntryExtractionError, and the HTTP layer
maps the rest to status codes.
"""


class KasetophonoError(Exception):
    """Base exception for all Kasetophono errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name``.  ``__str__`` prefixes the provider name in brackets,
    e.g. ``[httpx] HTTP 503 for https://...``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Crawl errors
# ---------------------------------------------------------------------------

class FetchError(KasetophonoError):
    """Raised when an upstream request fails at the network or HTTP status level."""

    def __init__(
        self,
        message: str = "Upstream fetch failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ScrapeError(KasetophonoError):
    """Raised when a whole page does not have the expected structure.

    Fatal for the current crawl attempt; the catalog lifecycle retries.
    """

    def __init__(
        self,
        message: str = "Page structure not recognised",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class FeedSchemaError(ScrapeError):
    """Raised when a feed page cannot be decoded into the feed schema."""

    def __init__(
        self,
        message: str = "Feed page could not be decoded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EntryExtractionError(KasetophonoError):
    """Raised when a single feed entry is missing required structure.

    Callers log and skip the entry; it never aborts the page.
    """

    def __init__(
        self,
        message: str = "Feed entry could not be extracted",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Catalog / playback errors
# ---------------------------------------------------------------------------

class CatalogUnavailableError(KasetophonoError):
    """Raised when the catalog is read before the first publish."""

    def __init__(
        self,
        message: str = "Catalog has not been published yet",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class CassetteNotFoundError(KasetophonoError):
    """Raised when a cassette uuid is not in the published catalog."""

    def __init__(
        self,
        message: str = "Cassette not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PlaybackError(KasetophonoError):
    """Raised when the external player cannot be started or stopped."""

    def __init__(
        self,
        message: str = "Playback control failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class TracklistError(KasetophonoError):
    """Raised when a cassette's playlist cannot be listed."""

    def __init__(
        self,
        message: str = "Tracklist extraction failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
