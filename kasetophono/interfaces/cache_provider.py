"""Abstract base class for cache providers.

Used to keep expensive lookups (playlist track listings) around between
requests.  Implementations may use an in-memory TTL cache or an external
store; callers only see this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ICacheProvider(ABC):
    """Contract for key-value cache services.

    All operations are async so that a network-backed store can be
    swapped in without blocking the event loop.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value stored under *key*, or ``None`` if absent or expired."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store *value* under *key* using the provider's expiry policy."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove *key*.  No-op if the key does not exist."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present and not expired."""
