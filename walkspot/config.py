from __future__ import annotations

from functools import lru_cache

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """App configuration (env-friendly).

    Every field can be overridden with a ``WALKSPOT_``-prefixed environment
    variable or in a local .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_prefix="WALKSPOT_")

    app_name: str = "Walk Spot Finder API"
    version: str = "0.1.0"

    overpass_base_url: AnyHttpUrl = "https://overpass-api.de/api/interpreter"
    overpass_fallback_url: AnyHttpUrl = "https://overpass.kumi.systems/api/interpreter"

    # Overpass asks clients to identify themselves.
    user_agent: str = "walk-spot-finder/0.1.0"

    http_timeout_s: float = 25.0

    # Selection tuning
    tolerance_ratio: float = 0.083
    min_search_radius_m: float = 300.0
    max_search_radius_m: float = 10_000.0
    max_spots: int = 30
    name_language: str = "ja"
    walk_speed_kmh: float = 4.0

    cache_ttl_s: float = 300.0
    cache_max_size: int = 256

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
