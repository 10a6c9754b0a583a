"""External player provider that runs ``mpv`` as an asyncio subprocess.

mpv resolves YouTube playlist URLs itself (through yt-dlp), so the
provider only has to start ``mpv --no-video --shuffle <url>`` and later
stop it.
"""

from __future__ import annotations

import asyncio
from typing import Sequence

import structlog

from kasetophono.interfaces.player_provider import IPlayerHandle, IPlayerProvider
from kasetophono.utils.errors import PlaybackError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_ARGS = ("--no-video", "--shuffle")
_DEFAULT_STOP_TIMEOUT = 5.0


class MpvHandle(IPlayerHandle):
    """Handle on one running mpv process."""

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        stop_timeout: float = _DEFAULT_STOP_TIMEOUT,
        provider_name: str = "mpv",
    ) -> None:
        self._process = process
        self._stop_timeout = stop_timeout
        self._provider_name = provider_name

    @property
    def pid(self) -> int | None:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    async def terminate(self) -> None:
        """SIGTERM, wait up to the stop timeout, then SIGKILL."""
        if self._process.returncode is not None:
            return

        try:
            self._process.terminate()
        except ProcessLookupError:
            # Exited between the returncode check and the signal.
            await self._process.wait()
            return
        except OSError as exc:
            raise PlaybackError(
                message=f"Could not signal player pid {self.pid}: {exc}",
                provider_name=self._provider_name,
            ) from exc

        try:
            await asyncio.wait_for(self._process.wait(), timeout=self._stop_timeout)
            return
        except asyncio.TimeoutError:
            logger.warning("player_terminate_timeout", pid=self.pid, timeout=self._stop_timeout)

        try:
            self._process.kill()
        except ProcessLookupError:
            pass
        except OSError as exc:
            raise PlaybackError(
                message=f"Could not kill player pid {self.pid}: {exc}",
                provider_name=self._provider_name,
            ) from exc

        try:
            await asyncio.wait_for(self._process.wait(), timeout=self._stop_timeout)
        except asyncio.TimeoutError as exc:
            raise PlaybackError(
                message=f"Player pid {self.pid} did not exit after SIGKILL",
                provider_name=self._provider_name,
            ) from exc


class MpvPlayerProvider(IPlayerProvider):
    """Spawn ``mpv`` on a playlist URL.

    Parameters
    ----------
    binary:
        Executable name or path.
    args:
        Arguments placed before the URL.
    stop_timeout:
        Seconds to wait for a graceful exit before SIGKILL.
    """

    def __init__(
        self,
        binary: str = "mpv",
        args: Sequence[str] = _DEFAULT_ARGS,
        stop_timeout: float = _DEFAULT_STOP_TIMEOUT,
    ) -> None:
        self._binary = binary
        self._args = list(args)
        self._stop_timeout = stop_timeout

    async def spawn(self, url: str) -> MpvHandle:
        try:
            process = await asyncio.create_subprocess_exec(
                self._binary,
                *self._args,
                url,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as exc:
            raise PlaybackError(
                message=f"Could not start {self._binary}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("player_spawned", binary=self._binary, pid=process.pid, url=url)
        return MpvHandle(
            process,
            stop_timeout=self._stop_timeout,
            provider_name=self.get_provider_name(),
        )

    def get_provider_name(self) -> str:
        return "mpv"
