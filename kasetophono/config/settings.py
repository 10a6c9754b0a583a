"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Values are read from (highest priority first):
#
#   1. Environment variables, e.g. FETCH_CONCURRENCY=3
#   2. A ``.env`` file in the working directory
#   3. The defaults declared below
#
# Field ``catalog_path`` maps to env var ``CATALOG_PATH`` and so on.
#
# Only ``main.py`` and the CLI read Settings.  Everything below them
# (crawl service, catalog store, playback controller) receives plain
# constructor arguments, so tests never need an environment.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Kasetophono application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === Upstream site ===
    upstream_base_url: str = "https://www.kasetophono.com"
    feed_path: str = "/feeds/posts/default"
    feed_page_size: int = Field(default=25, ge=1)
    fetch_concurrency: int = Field(default=5, ge=1)
    http_timeout: float = 30.0

    # === Catalog lifecycle ===
    catalog_path: str = "metadata.json"
    refresh_enabled: bool = False
    refresh_interval_seconds: float = 24 * 60 * 60
    refresh_retry_seconds: float = 30.0
    startup_retry_seconds: float = 5.0

    # === Playback ===
    player_binary: str = "mpv"
    player_args: list[str] = ["--no-video", "--shuffle"]
    player_stop_timeout: float = 5.0

    # === Tracklists ===
    tracklist_cache_ttl: int = 3600
    tracklist_cache_size: int = 512

    # === App Config ===
    app_host: str = "127.0.0.1"
    app_port: int = 3030
    app_env: str = "development"
    log_level: str = "INFO"

    @property
    def feed_url(self) -> str:
        """Absolute URL of the JSON posts feed."""
        return self.upstream_base_url.rstrip("/") + self.feed_path
