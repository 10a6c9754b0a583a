"""Kasetophono FastAPI application entry point.

Wires providers, services and routes together.  Configuration comes from
:class:`~kasetophono.config.settings.Settings` (environment / ``.env``);
every component below this module receives plain constructor arguments.

Startup does not wait for the catalog: it is loaded or crawled in a
background task, and catalog endpoints answer 503 until it is published.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware

from kasetophono import __version__
from kasetophono.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from kasetophono.api.routes import router as api_router
from kasetophono.config.settings import Settings
from kasetophono.providers.cache.memory_cache import MemoryCacheProvider
from kasetophono.providers.http.httpx_fetcher import HttpxFetcher, build_http_client
from kasetophono.providers.player.mpv_provider import MpvPlayerProvider
from kasetophono.services.catalog_store import CatalogStore
from kasetophono.services.crawl_service import CrawlService
from kasetophono.services.playback_controller import PlaybackController
from kasetophono.services.tracklist_service import TracklistService
from kasetophono.utils.logging import configure_logging, get_logger

settings = Settings()
configure_logging(log_level=settings.log_level)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component wiring
# ---------------------------------------------------------------------------


def build_crawl_service(app_settings: Settings, http_client: httpx.AsyncClient) -> CrawlService:
    """Crawl service over a shared HTTP client (also used by the CLI)."""
    return CrawlService(
        fetcher=HttpxFetcher(http_client=http_client),
        base_url=app_settings.upstream_base_url,
        feed_url=app_settings.feed_url,
        page_size=app_settings.feed_page_size,
        concurrency=app_settings.fetch_concurrency,
    )


def _build_all(app_settings: Settings) -> dict[str, Any]:
    """Construct every component.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    http_client = build_http_client(timeout=app_settings.http_timeout)

    catalog_store = CatalogStore(
        crawler=build_crawl_service(app_settings, http_client),
        snapshot_path=app_settings.catalog_path,
        startup_retry_seconds=app_settings.startup_retry_seconds,
        refresh_interval_seconds=app_settings.refresh_interval_seconds,
        refresh_retry_seconds=app_settings.refresh_retry_seconds,
    )

    player = MpvPlayerProvider(
        binary=app_settings.player_binary,
        args=app_settings.player_args,
        stop_timeout=app_settings.player_stop_timeout,
    )
    playback_controller = PlaybackController(catalog=catalog_store, player=player)

    tracklist_service = TracklistService(
        cache=MemoryCacheProvider(
            max_size=app_settings.tracklist_cache_size,
            ttl=app_settings.tracklist_cache_ttl,
        )
    )

    return {
        "http_client": http_client,
        "catalog_store": catalog_store,
        "playback_controller": playback_controller,
        "tracklist_service": tracklist_service,
    }


async def _run_catalog(catalog_store: CatalogStore, refresh_enabled: bool) -> None:
    """Publish a catalog, then keep it fresh if refreshing is enabled."""
    await catalog_store.start()
    if refresh_enabled:
        await catalog_store.run_refresh_loop()


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all components on startup, clean up on shutdown."""
    components = _build_all(settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    catalog_task = asyncio.create_task(
        _run_catalog(components["catalog_store"], settings.refresh_enabled)
    )

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        catalog_path=settings.catalog_path,
        refresh_enabled=settings.refresh_enabled,
    )

    yield

    catalog_task.cancel()
    await asyncio.gather(catalog_task, return_exceptions=True)

    playback_controller: PlaybackController = components["playback_controller"]
    await playback_controller.shutdown()

    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="Player stopped, HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="Kasetophono API",
        version=__version__,
        description=(
            "Browse the kasetophono.com cassette catalog and play cassettes "
            "through a local mpv player."
        ),
        lifespan=_lifespan,
    )

    # Order matters: last added = first executed.
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    application.add_middleware(GZipMiddleware, minimum_size=500)
    configure_cors(application)

    application.include_router(api_router)

    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "kasetophono.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
