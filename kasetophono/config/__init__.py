"""Application configuration."""

from kasetophono.config.settings import Settings

__all__ = ["Settings"]
