"""Foursquare Places API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

SEARCH_FIELDS = (
    "fsq_id,name,categories,distance,geocodes,location,photos,"
    "rating,price,tel,website,hours,stats"
)


class PlacesClient(Protocol):
    """Interface for place-search provider interactions."""

    async def search_places(self, params: dict[str, object]) -> dict[str, object]:
        """Search places and return raw API data."""


@dataclass
class HttpxFoursquareClient(PlacesClient):
    """HTTPX-backed Foursquare client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "HttpxFoursquareClient":
        """Create a Foursquare client with a managed httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

    async def search_places(self, params: dict[str, object]) -> dict[str, object]:
        """Search places around a point."""
        url = f"{self.base_url}/places/search"
        response = await self.http_client.get(
            url,
            params={"fields": SEARCH_FIELDS, **params},
            headers={"Authorization": self.api_key, "Accept": "application/json"},
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
