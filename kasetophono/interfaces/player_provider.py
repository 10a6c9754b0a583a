"""Abstract base classes for external audio players.

A player provider spawns one external process per playlist and hands back
a handle.  Ownership of the handle (at most one alive at a time) belongs to
:class:`kasetophono.services.playback_controller.PlaybackController`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IPlayerHandle(ABC):
    """A running external player process."""

    @property
    @abstractmethod
    def pid(self) -> int | None:
        """OS process id, if known."""

    @abstractmethod
    async def terminate(self) -> None:
        """Stop the process and wait for it to exit.

        Must be safe to call on a process that already exited on its own.

        Raises
        ------
        kasetophono.utils.errors.PlaybackError
            If the process could not be stopped.
        """


class IPlayerProvider(ABC):
    """Contract for launching an external player on a playlist URL."""

    @abstractmethod
    async def spawn(self, url: str) -> IPlayerHandle:
        """Start playing *url* and return the process handle.

        Raises
        ------
        kasetophono.utils.errors.PlaybackError
            If the player could not be started.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"mpv"``."""
