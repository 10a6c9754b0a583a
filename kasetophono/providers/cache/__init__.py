"""Cache providers."""

from kasetophono.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
