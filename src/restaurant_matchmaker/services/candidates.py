"""Candidate set construction backed by a place provider."""

import asyncio
import logging
import random
import re
from dataclasses import dataclass, field

from restaurant_matchmaker.adapters.foursquare_client import PlacesClient
from restaurant_matchmaker.domain.restaurants import (
    PRICE_LABELS,
    Category,
    LocationData,
    Restaurant,
    SessionFilters,
    TransactionType,
)
from restaurant_matchmaker.fallback_restaurants import FALLBACK_RESTAURANTS
from restaurant_matchmaker.services.cache import Cache, cache_key

FOOD_CATEGORY = "13000"
MAX_RADIUS_METERS = 100_000

_CATEGORY_IDS = {
    "italian": "13236",
    "mexican": "13303",
    "chinese": "13099",
    "japanese": "13263",
    "indian": "13199",
    "thai": "13352",
    "american": "13068",
    "pizza": "13064",
    "burgers": "13031",
    "seafood": "13338",
    "sushi": "13350",
    "mediterranean": "13302",
    "korean": "13272",
    "vietnamese": "13367",
    "breakfast_brunch": "13028",
    "sandwiches": "13334",
    "salad": "13332",
    "vegetarian": "13377",
}
_TAKEOUT_HINTS = ("delivery", "takeout", "fast")

_logger = logging.getLogger(__name__)


@dataclass
class CandidateService:
    """Builds the ordered candidate list for a new session."""

    places_client: PlacesClient | None
    cache: Cache
    default_location: LocationData
    radius_meters: int = 1609
    fallback_pool: tuple[Restaurant, ...] = FALLBACK_RESTAURANTS
    rng: random.Random = field(default_factory=random.Random)
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def fetch_candidates(
        self, filters: SessionFilters, location: LocationData | None = None
    ) -> list[Restaurant]:
        """Return shuffled candidates, falling back to the static pool."""
        origin = location or filters.location or self.default_location
        key = cache_key("candidates", filters, origin)
        cached = self.cache.get(key)
        if isinstance(cached, list):
            return list(cached)

        if self.places_client is None:
            return self._fallback(filters)

        params = _search_params(filters, origin, self.radius_meters)
        try:
            payload = await self._search_with_retry(self.places_client, params)
        except Exception:
            _logger.exception("Place search failed, using fallback restaurants")
            return self._fallback(filters)

        restaurants = [
            restaurant
            for restaurant in (
                convert_place(place) for place in payload.get("results", [])
            )
            if not restaurant.is_closed
        ]
        if not restaurants:
            _logger.info("No place search results, using fallback restaurants")
            return self._fallback(filters)

        shuffled = self._shuffle(restaurants)
        self.cache.put(key, shuffled)
        return list(shuffled)

    def _fallback(self, filters: SessionFilters) -> list[Restaurant]:
        filtered = filter_restaurants(self.fallback_pool, filters)
        return self._shuffle(filtered or list(self.fallback_pool))

    def _shuffle(self, restaurants: list[Restaurant]) -> list[Restaurant]:
        shuffled = list(restaurants)
        self.rng.shuffle(shuffled)
        return shuffled

    async def _search_with_retry(
        self, client: PlacesClient, params: dict[str, object]
    ) -> dict[str, object]:
        """Call the place provider with a short retry."""
        attempt = 0
        while True:
            try:
                return await client.search_places(params)
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "Place search failed (attempt %s/%s): %s",
                    attempt,
                    self.retry_attempts + 1,
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def get_restaurant(
    restaurants: list[Restaurant], candidate_id: str
) -> Restaurant | None:
    """Find a candidate by id."""
    return next((r for r in restaurants if r.id == candidate_id), None)


def filter_restaurants(
    restaurants: tuple[Restaurant, ...] | list[Restaurant], filters: SessionFilters
) -> list[Restaurant]:
    """Apply cuisine, price and fulfillment filters."""
    filtered = list(restaurants)

    if filters.cuisines:
        cuisines = [cuisine.lower() for cuisine in filters.cuisines]
        filtered = [
            r
            for r in filtered
            if any(
                cuisine in category.alias or cuisine in category.title.lower()
                for category in r.categories
                for cuisine in cuisines
            )
        ]

    if filters.price_range:
        allowed = {PRICE_LABELS[p] for p in filters.price_range if p in PRICE_LABELS}
        filtered = [r for r in filtered if r.price and r.price in allowed]

    if filters.transaction_type is not TransactionType.ANY:
        wanted = filters.transaction_type.value
        filtered = [r for r in filtered if wanted in r.transactions]

    return filtered


def convert_place(place: dict) -> Restaurant:
    """Convert a Foursquare place payload into a restaurant."""
    photos = place.get("photos") or []
    image_url = ""
    if photos:
        photo = photos[0]
        image_url = f"{photo['prefix']}500x500{photo['suffix']}"

    raw_price = place.get("price")
    price = PRICE_LABELS.get(str(raw_price)) if raw_price else None

    raw_rating = place.get("rating")
    rating = round(float(raw_rating) / 2, 1) if raw_rating else 0.0

    raw_categories = place.get("categories") or []
    categories = tuple(
        Category(
            alias=re.sub(r"\s+", "_", str(cat.get("short_name", "")).lower()),
            title=str(cat.get("name", "")),
        )
        for cat in raw_categories
    )
    names = [str(cat.get("name", "")).lower() for cat in raw_categories]
    transactions: tuple[str, ...] = ()
    if any(hint in name for name in names for hint in _TAKEOUT_HINTS):
        transactions = ("delivery", "pickup")

    location = place.get("location") or {}
    hours = place.get("hours") or {}
    stats = place.get("stats") or {}
    fsq_id = str(place["fsq_id"])
    return Restaurant(
        id=fsq_id,
        name=str(place.get("name", "")),
        image_url=image_url,
        rating=rating,
        review_count=int(stats.get("total_ratings", 0) or 0),
        price=price,
        categories=categories,
        address=str(location.get("formatted_address", "")),
        display_phone=str(place.get("tel") or ""),
        distance=place.get("distance"),
        is_closed=hours.get("open_now") is False,
        url=str(place.get("website") or f"https://foursquare.com/v/{fsq_id}"),
        transactions=transactions,
    )


def _search_params(
    filters: SessionFilters, origin: LocationData, radius_meters: int
) -> dict[str, object]:
    category_ids = [
        _CATEGORY_IDS[cuisine]
        for cuisine in filters.cuisines
        if cuisine in _CATEGORY_IDS
    ]
    params: dict[str, object] = {
        "ll": f"{origin.latitude},{origin.longitude}",
        "radius": min(radius_meters, MAX_RADIUS_METERS),
        "categories": ",".join(category_ids) if category_ids else FOOD_CATEGORY,
        "limit": 50,
        "sort": "RATING",
    }
    prices = [int(p) for p in filters.price_range if p in PRICE_LABELS]
    if prices:
        params["min_price"] = min(prices)
        params["max_price"] = max(prices)
    return params
