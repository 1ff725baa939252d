"""Pydantic models for the session API payloads."""

from pydantic import BaseModel, Field

from restaurant_matchmaker.domain.restaurants import (
    LocationData,
    SessionFilters,
    TransactionType,
)
from restaurant_matchmaker.domain.sessions import SwipeDirection


class LocationPayload(BaseModel):
    """Search origin sent by a client."""

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    source: str = "gps"

    def to_domain(self) -> LocationData:
        return LocationData(
            latitude=self.latitude, longitude=self.longitude, source=self.source
        )


class FiltersPayload(BaseModel):
    """Session filters chosen by the creator."""

    cuisines: list[str] = Field(default_factory=list)
    price_range: list[str] = Field(default_factory=list)
    transaction_type: TransactionType = TransactionType.ANY

    def to_domain(self, location: LocationData | None = None) -> SessionFilters:
        return SessionFilters(
            cuisines=tuple(c.strip().lower() for c in self.cuisines if c.strip()),
            price_range=tuple(self.price_range),
            transaction_type=self.transaction_type,
            location=location,
        )


class CreateSessionRequest(BaseModel):
    """Request body for starting a session."""

    device_id: str = Field(min_length=1)
    filters: FiltersPayload = Field(default_factory=FiltersPayload)
    location: LocationPayload | None = None


class JoinSessionRequest(BaseModel):
    """Request body for joining a session."""

    device_id: str = Field(min_length=1)


class SwipeRequest(BaseModel):
    """Request body for a single vote."""

    device_id: str = Field(min_length=1)
    candidate_id: str = Field(min_length=1)
    direction: SwipeDirection
