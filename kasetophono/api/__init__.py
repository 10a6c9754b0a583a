"""Kasetophono API layer: routes, schemas, and middleware."""

from kasetophono.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from kasetophono.api.routes import router
from kasetophono.api.schemas import (
    ErrorResponse,
    HealthResponse,
    PlaybackResponse,
    SongsResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "ErrorResponse",
    "HealthResponse",
    "PlaybackResponse",
    "SongsResponse",
]
