"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from restaurant_matchmaker.adapters.foursquare_client import HttpxFoursquareClient
from restaurant_matchmaker.adapters.memory_session_store import InMemorySessionStore
from restaurant_matchmaker.adapters.supabase_session_store import (
    SupabaseSessionStore,
)
from restaurant_matchmaker.config import Settings
from restaurant_matchmaker.domain.restaurants import LocationData
from restaurant_matchmaker.services.cache import InMemoryCache
from restaurant_matchmaker.services.candidates import CandidateService
from restaurant_matchmaker.services.sessions import SessionCoordinator, SessionStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_coordinator: SessionCoordinator
    candidate_service: CandidateService
    close_resources: Callable[[], Awaitable[None]]


def build_store(settings: Settings) -> SessionStore:
    """Select the session store backend from settings."""
    if settings.store_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase backend requires supabase_url and key")
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseSessionStore(client)
    if settings.store_backend == "memory":
        return InMemorySessionStore()
    raise ValueError(f"Unknown store backend: {settings.store_backend}")


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    coordinator = SessionCoordinator(
        store=build_store(resolved_settings),
        max_swipes=resolved_settings.max_swipes,
        retry_attempts=resolved_settings.transaction_retry_attempts,
        retry_delay_seconds=resolved_settings.transaction_retry_delay_seconds,
    )
    places_client = (
        HttpxFoursquareClient.create(
            api_key=resolved_settings.foursquare_api_key,
            base_url=resolved_settings.foursquare_base_url,
        )
        if resolved_settings.foursquare_api_key
        else None
    )
    candidate_service = CandidateService(
        places_client=places_client,
        cache=InMemoryCache(ttl_seconds=resolved_settings.candidate_cache_ttl_seconds),
        default_location=LocationData(
            latitude=resolved_settings.default_latitude,
            longitude=resolved_settings.default_longitude,
            source="default",
        ),
        radius_meters=resolved_settings.search_radius_meters,
    )

    async def close_resources() -> None:
        if places_client is not None:
            await places_client.close()

    return AppContainer(
        settings=resolved_settings,
        session_coordinator=coordinator,
        candidate_service=candidate_service,
        close_resources=close_resources,
    )
