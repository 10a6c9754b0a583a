"""Upstream fetcher backed by a shared ``httpx.AsyncClient``."""

from __future__ import annotations

import httpx
import structlog

from kasetophono.interfaces.fetcher import IFetcher
from kasetophono.utils.errors import FetchError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TIMEOUT = 30.0
_DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; kasetophono-catalog/0.1)",
    "Accept": "text/html,application/json;q=0.9,*/*;q=0.8",
}


def build_http_client(timeout: float = _DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    """Create the client shared by every fetch of the application."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        headers=_DEFAULT_HEADERS,
        follow_redirects=True,
    )


class HttpxFetcher(IFetcher):
    """Plain GET over httpx; maps every httpx failure to :class:`FetchError`.

    Parameters
    ----------
    http_client:
        Shared client.  When omitted the fetcher creates and owns one, and
        :meth:`aclose` closes it.
    """

    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        self._owns_client = http_client is None
        self._client = http_client or build_http_client()

    async def fetch_text(self, url: str) -> str:
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise FetchError(
                message=f"Timeout fetching {url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                message=f"HTTP {exc.response.status_code} for {url}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(
                message=f"HTTP error fetching {url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.debug("upstream_fetched", url=url, bytes=len(response.content))
        return response.text

    def get_provider_name(self) -> str:
        return "httpx"

    async def aclose(self) -> None:
        """Close the underlying client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()
