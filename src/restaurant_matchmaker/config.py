"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    environment: str = _ENVIRONMENT
    log_level: str = "INFO"
    store_backend: str = "memory"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    foursquare_api_key: str | None = None
    foursquare_base_url: str = "https://api.foursquare.com/v3"
    max_swipes: int = 10
    transaction_retry_attempts: int = 5
    transaction_retry_delay_seconds: float = 0.01
    candidate_cache_ttl_seconds: int = 600
    invite_base_url: str = "https://restaurantmatchmaker.vercel.app/invite"
    default_latitude: float = 40.7439
    default_longitude: float = -74.0323
    search_radius_meters: int = 1609

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_cuisines(raw: str | None) -> tuple[str, ...]:
    """Parse a comma-separated cuisine list from a query string."""
    if raw is None:
        return ()
    cuisines: list[str] = []
    for chunk in raw.split(","):
        value = chunk.strip().lower()
        if value and value not in cuisines:
            cuisines.append(value)
    return tuple(cuisines)
