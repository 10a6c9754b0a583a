"""HTTP fetch providers."""

from kasetophono.providers.http.httpx_fetcher import HttpxFetcher, build_http_client

__all__ = ["HttpxFetcher", "build_http_client"]
