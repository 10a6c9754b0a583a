"""Pydantic response schemas for the Kasetophono API.

The catalog endpoint returns ``{uuid: Cassette}`` directly (the snapshot
file format), so only the control and health endpoints have their own
response models.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from kasetophono.models.catalog import Song


class PlaybackResponse(BaseModel):
    """Result of a play or stop request."""

    status: str
    uuid: str | None = None
    name: str | None = None


class SongsResponse(BaseModel):
    """Playlist tracks of one cassette."""

    uuid: str
    songs: list[Song]


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    catalog_state: str
    cassettes: int
    published_at: datetime | None = None
    now_playing: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
