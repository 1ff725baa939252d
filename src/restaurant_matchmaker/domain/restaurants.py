"""Domain models for restaurant candidates and search filters."""

from dataclasses import dataclass, field
from enum import Enum


class TransactionType(str, Enum):
    """Fulfillment filter for a session."""

    ANY = "any"
    DELIVERY = "delivery"
    PICKUP = "pickup"


@dataclass(frozen=True)
class Category:
    """A restaurant category tag."""

    alias: str
    title: str


@dataclass(frozen=True)
class LocationData:
    """Search origin for candidate lookups."""

    latitude: float
    longitude: float
    source: str = "gps"


@dataclass(frozen=True)
class SessionFilters:
    """Filters chosen by the creator when starting a session."""

    cuisines: tuple[str, ...] = ()
    price_range: tuple[str, ...] = ()
    transaction_type: TransactionType = TransactionType.ANY
    location: LocationData | None = None


@dataclass(frozen=True)
class Restaurant:
    """A swipeable restaurant candidate."""

    id: str
    name: str
    image_url: str
    rating: float
    review_count: int
    price: str | None
    categories: tuple[Category, ...]
    address: str
    display_phone: str
    distance: float | None
    is_closed: bool
    url: str
    transactions: tuple[str, ...] = field(default_factory=tuple)


PRICE_LABELS = {"1": "$", "2": "$$", "3": "$$$", "4": "$$$$"}

CUISINE_OPTIONS = (
    Category("italian", "Italian"),
    Category("mexican", "Mexican"),
    Category("chinese", "Chinese"),
    Category("japanese", "Japanese"),
    Category("indian", "Indian"),
    Category("thai", "Thai"),
    Category("american", "American"),
    Category("pizza", "Pizza"),
    Category("burgers", "Burgers"),
    Category("seafood", "Seafood"),
    Category("sushi", "Sushi"),
    Category("mediterranean", "Mediterranean"),
    Category("korean", "Korean"),
    Category("vietnamese", "Vietnamese"),
    Category("breakfast_brunch", "Breakfast & Brunch"),
    Category("sandwiches", "Sandwiches"),
    Category("salad", "Salad"),
    Category("vegetarian", "Vegetarian"),
)
