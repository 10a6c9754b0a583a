"""FastAPI routes for the Kasetophono service.

# ─── API ROUTE MAP ─────────────────────────────────────────────────────
#
# Endpoint                          Method  Description
# ──────────────────────────────────────────────────────────────────────
# /api/cassettes                    GET     Full catalog {uuid: Cassette}
# /api/cassettes/{uuid}             GET     One cassette
# /api/cassettes/{uuid}/songs       GET     Playlist tracks (yt-dlp)
# /api/play/{uuid}                  GET     Start playing a cassette
# /api/stop                         GET     Stop playback
# /api/health                       GET     Catalog state + now playing
#
# Components are resolved from ``app.state`` (populated by the lifespan in
# main.py) through Annotated ``Depends`` helpers.  Application errors are
# raised as KasetophonoError subclasses and turned into JSON by
# ErrorHandlingMiddleware.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Request

from kasetophono import __version__
from kasetophono.api.schemas import HealthResponse, PlaybackResponse, SongsResponse
from kasetophono.services.catalog_store import CatalogStore
from kasetophono.services.playback_controller import PlaybackController
from kasetophono.services.tracklist_service import TracklistService
from kasetophono.utils.errors import CassetteNotFoundError

router = APIRouter(prefix="/api")


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_catalog_store(request: Request) -> CatalogStore:
    """Return the catalog store from application state."""
    return request.app.state.catalog_store


def _get_playback_controller(request: Request) -> PlaybackController:
    """Return the playback controller from application state."""
    return request.app.state.playback_controller


def _get_tracklist_service(request: Request) -> TracklistService:
    """Return the tracklist service from application state."""
    return request.app.state.tracklist_service


CatalogDep = Annotated[CatalogStore, Depends(_get_catalog_store)]
PlaybackDep = Annotated[PlaybackController, Depends(_get_playback_controller)]
TracklistDep = Annotated[TracklistService, Depends(_get_tracklist_service)]


def _parse_uuid(raw: str) -> UUID:
    # A malformed id cannot name a cassette: same answer as an unknown one.
    try:
        return UUID(raw)
    except ValueError as exc:
        raise CassetteNotFoundError(message=f"No cassette with uuid {raw}") from exc


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@router.get("/cassettes", summary="Full cassette catalog")
async def list_cassettes(catalog: CatalogDep) -> dict[str, Any]:
    """Return the published catalog as ``{uuid: Cassette}``."""
    snapshot = catalog.snapshot()
    return {str(uuid): cassette.model_dump(mode="json") for uuid, cassette in snapshot.items()}


@router.get("/cassettes/{cassette_id}", summary="One cassette")
async def get_cassette(cassette_id: str, catalog: CatalogDep) -> dict[str, Any]:
    return catalog.get(_parse_uuid(cassette_id)).model_dump(mode="json")


@router.get(
    "/cassettes/{cassette_id}/songs",
    response_model=SongsResponse,
    summary="Playlist tracks of a cassette",
)
async def get_cassette_songs(
    cassette_id: str,
    catalog: CatalogDep,
    tracklist: TracklistDep,
) -> SongsResponse:
    cassette = catalog.get(_parse_uuid(cassette_id))
    songs = await tracklist.get_songs(cassette)
    return SongsResponse(uuid=str(cassette.uuid), songs=songs)


# ---------------------------------------------------------------------------
# Playback
# ---------------------------------------------------------------------------


@router.get("/play/{cassette_id}", response_model=PlaybackResponse, summary="Play a cassette")
async def play(cassette_id: str, playback: PlaybackDep) -> PlaybackResponse:
    """Stop whatever is playing and start *cassette_id*."""
    cassette = await playback.play(_parse_uuid(cassette_id))
    return PlaybackResponse(status="playing", uuid=str(cassette.uuid), name=cassette.name)


@router.get("/stop", response_model=PlaybackResponse, summary="Stop playback")
async def stop(playback: PlaybackDep) -> PlaybackResponse:
    """Stop playback.  Succeeds when nothing is playing."""
    stopped = await playback.stop()
    if stopped is None:
        return PlaybackResponse(status="stopped")
    return PlaybackResponse(status="stopped", uuid=str(stopped.uuid), name=stopped.name)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, summary="Application health check")
async def health_check(catalog: CatalogDep, playback: PlaybackDep) -> HealthResponse:
    """Report catalog state and the cassette currently playing."""
    cassettes = len(catalog.snapshot()) if catalog.is_ready else 0
    now_playing = playback.now_playing
    return HealthResponse(
        status="ok" if catalog.is_ready else "starting",
        version=__version__,
        catalog_state=catalog.state.value,
        cassettes=cassettes,
        published_at=catalog.published_at,
        now_playing=str(now_playing.uuid) if now_playing else None,
    )
