"""External player providers."""

from kasetophono.providers.player.mpv_provider import MpvHandle, MpvPlayerProvider

__all__ = ["MpvHandle", "MpvPlayerProvider"]
