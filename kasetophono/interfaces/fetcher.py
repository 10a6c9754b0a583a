"""Abstract base class for upstream page fetchers.

The crawl pipeline only ever needs "GET this URL, give me the body".
Concurrency limiting is the caller's concern (see
``kasetophono.utils.concurrency``), so implementations stay a plain GET.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IFetcher(ABC):
    """Contract for fetching upstream documents as text."""

    @abstractmethod
    async def fetch_text(self, url: str) -> str:
        """Fetch *url* and return the decoded response body.

        Parameters
        ----------
        url:
            Absolute URL of the page or feed document.

        Returns
        -------
        str
            Response body decoded to text.

        Raises
        ------
        kasetophono.utils.errors.FetchError
            On any transport failure or non-success HTTP status.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier used in logs and error prefixes."""
