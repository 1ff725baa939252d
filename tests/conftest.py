"""Shared test fixtures."""

import random
from dataclasses import dataclass, field

import pytest

from restaurant_matchmaker.adapters.foursquare_client import PlacesClient
from restaurant_matchmaker.adapters.memory_session_store import InMemorySessionStore
from restaurant_matchmaker.config import Settings
from restaurant_matchmaker.containers import AppContainer
from restaurant_matchmaker.domain.restaurants import LocationData
from restaurant_matchmaker.services.cache import InMemoryCache
from restaurant_matchmaker.services.candidates import CandidateService
from restaurant_matchmaker.services.sessions import SessionCoordinator

HOBOKEN = LocationData(latitude=40.7439, longitude=-74.0323, source="default")


def place(fsq_id: str, name: str, **overrides: object) -> dict[str, object]:
    """Build a Foursquare place payload."""
    payload: dict[str, object] = {
        "fsq_id": fsq_id,
        "name": name,
        "categories": [
            {"id": 13236, "name": "Italian Restaurant", "short_name": "Italian"}
        ],
        "distance": 250,
        "location": {"formatted_address": "1 Main St, Hoboken, NJ 07030"},
        "rating": 8.6,
        "price": 2,
        "hours": {"open_now": True},
        "stats": {"total_ratings": 40},
    }
    payload.update(overrides)
    return payload


@dataclass
class FakePlacesClient(PlacesClient):
    """Fake place provider returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "results": [
                place("fsq-1", "Luigi's"),
                place("fsq-2", "Pasta Bar"),
                place("fsq-3", "Closed Trattoria", hours={"open_now": False}),
            ]
        }
    )
    calls: list[dict[str, object]] = field(default_factory=list)

    async def search_places(self, params: dict[str, object]) -> dict[str, object]:
        self.calls.append(params)
        return self.payload


@dataclass
class FailingPlacesClient(PlacesClient):
    """Place provider that always errors."""

    calls: int = 0

    async def search_places(self, params: dict[str, object]) -> dict[str, object]:
        self.calls += 1
        raise RuntimeError("provider unavailable")


def make_candidate_service(
    places_client: PlacesClient | None = None, seed: int = 7
) -> CandidateService:
    return CandidateService(
        places_client=places_client,
        cache=InMemoryCache(ttl_seconds=600),
        default_location=HOBOKEN,
        rng=random.Random(seed),
        retry_delay_seconds=0,
    )


def make_coordinator(
    store: InMemorySessionStore | None = None, max_swipes: int = 3
) -> SessionCoordinator:
    return SessionCoordinator(
        store=store or InMemorySessionStore(),
        max_swipes=max_swipes,
        retry_attempts=10,
        retry_delay_seconds=0,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        store_backend="memory",
        max_swipes=3,
        transaction_retry_delay_seconds=0,
    )


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def coordinator(store: InMemorySessionStore) -> SessionCoordinator:
    return make_coordinator(store)


@pytest.fixture
def container(settings: Settings, coordinator: SessionCoordinator) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        session_coordinator=coordinator,
        candidate_service=make_candidate_service(FakePlacesClient()),
        close_resources=close_resources,
    )
