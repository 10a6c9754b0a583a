"""Abstract provider contracts (adapter pattern)."""

from kasetophono.interfaces.cache_provider import ICacheProvider
from kasetophono.interfaces.fetcher import IFetcher
from kasetophono.interfaces.player_provider import IPlayerHandle, IPlayerProvider

__all__ = ["ICacheProvider", "IFetcher", "IPlayerHandle", "IPlayerProvider"]
