"""Static restaurant pool used when the place provider is unavailable."""

from restaurant_matchmaker.domain.restaurants import Category, Restaurant

_IMAGE_BASE = "https://images.unsplash.com"
_CITY = "Hoboken, NJ 07030"


def _restaurant(  # noqa: PLR0913
    index: int,
    name: str,
    photo: str,
    rating: float,
    review_count: int,
    price: str,
    categories: list[tuple[str, str]],
    street: str,
    phone: str,
    distance: float,
    url: str,
    transactions: tuple[str, ...],
) -> Restaurant:
    return Restaurant(
        id=f"hoboken-{index}",
        name=name,
        image_url=f"{_IMAGE_BASE}/{photo}?w=500",
        rating=rating,
        review_count=review_count,
        price=price,
        categories=tuple(Category(alias, title) for alias, title in categories),
        address=f"{street}, {_CITY}",
        display_phone=phone,
        distance=distance,
        is_closed=False,
        url=url,
        transactions=transactions,
    )


_BOTH = ("pickup", "delivery")
_PICKUP = ("pickup",)

FALLBACK_RESTAURANTS: tuple[Restaurant, ...] = (
    _restaurant(
        1, "Elysian Cafe", "photo-1517248135467-4c7edcad34c4", 4.5, 892, "$$",
        [("american", "American"), ("bar", "Bar")],
        "1001 Washington St", "(201) 798-2202", 200,
        "https://www.elysiancafe.com", _BOTH,
    ),
    _restaurant(
        2, "Benny Tudino's Pizzeria", "photo-1565299624946-b28f40a0ae38", 4.3, 1245,
        "$", [("pizza", "Pizza"), ("italian", "Italian")],
        "622 Washington St", "(201) 792-6111", 350,
        "https://www.bennytudinos.com", _BOTH,
    ),
    _restaurant(
        3, "Amanda's Restaurant", "photo-1414235077428-338989a2e8c0", 4.6, 567,
        "$$$", [("american", "New American"), ("brunch", "Brunch")],
        "908 Washington St", "(201) 798-0101", 150,
        "https://www.amandasrestaurant.com", _PICKUP,
    ),
    _restaurant(
        4, "La Isla Restaurant", "photo-1551504734-5ee1c4a1479b", 4.4, 723, "$$",
        [("cuban", "Cuban"), ("latin", "Latin American")],
        "104 Washington St", "(201) 659-6197", 500,
        "https://www.laislahoboken.com", _BOTH,
    ),
    _restaurant(
        5, "Fiore's House of Quality", "photo-1509722747041-616f39b57569", 4.7, 456,
        "$", [("deli", "Deli"), ("sandwiches", "Sandwiches")],
        "414 Adams St", "(201) 659-3636", 400,
        "https://www.fioresdeli.com", _PICKUP,
    ),
    _restaurant(
        6, "Satay Malaysian Cuisine", "photo-1569058242567-93de6f36f8eb", 4.5, 389,
        "$$", [("malaysian", "Malaysian"), ("asian", "Asian")],
        "95 Washington St", "(201) 386-5987", 520,
        "https://www.satayhoboken.com", _BOTH,
    ),
    _restaurant(
        7, "Grimaldi's Pizzeria", "photo-1574071318508-1cdbab80d002", 4.2, 612,
        "$$", [("pizza", "Pizza"), ("italian", "Italian")],
        "411 Washington St", "(201) 222-6992", 450,
        "https://www.grimaldispizzeria.com", _BOTH,
    ),
    _restaurant(
        8, "Augustino's", "photo-1595295333158-4742f28fbd85", 4.4, 534, "$$",
        [("italian", "Italian"), ("pasta", "Pasta")],
        "1104 Washington St", "(201) 420-0104", 180,
        "https://www.augustinoshoboken.com", _BOTH,
    ),
    _restaurant(
        9, "Taqueria Downtown", "photo-1565299585323-38d6b0865b47", 4.3, 478, "$",
        [("mexican", "Mexican"), ("tacos", "Tacos")],
        "236 Washington St", "(201) 798-5455", 480,
        "https://www.taqueriadowntown.com", _BOTH,
    ),
    _restaurant(
        10, "Bin 14", "photo-1559339352-11d035aa65de", 4.5, 345, "$$$",
        [("wine_bar", "Wine Bar"), ("mediterranean", "Mediterranean")],
        "1314 Washington St", "(201) 963-2233", 280,
        "https://www.bin14.com", _PICKUP,
    ),
    _restaurant(
        11, "East LA", "photo-1599974579688-8dbdd335c77f", 4.2, 567, "$$",
        [("mexican", "Mexican"), ("bar", "Bar")],
        "508 Washington St", "(201) 222-1777", 380,
        "https://www.eastlahoboken.com", _BOTH,
    ),
    _restaurant(
        12, "Sushi Lounge", "photo-1579871494447-9811cf80d66c", 4.4, 423, "$$$",
        [("sushi", "Sushi"), ("japanese", "Japanese")],
        "200 Hudson St", "(201) 386-2500", 350,
        "https://www.sushilounge.com", _BOTH,
    ),
    _restaurant(
        13, "Karma Kafe", "photo-1585937421612-70a008356fbe", 4.3, 312, "$$",
        [("indian", "Indian"), ("vegetarian", "Vegetarian")],
        "505 Washington St", "(201) 610-7900", 390,
        "https://www.karmakafe.com", _BOTH,
    ),
    _restaurant(
        14, "Anthony David's", "photo-1466978913421-dad2ebd01d17", 4.6, 478, "$$$",
        [("italian", "Italian"), ("seafood", "Seafood")],
        "953 Bloomfield St", "(201) 222-8399", 320,
        "https://www.anthonydavids.com", _PICKUP,
    ),
    _restaurant(
        15, "Ottimo Kitchen + Bar", "photo-1544025162-d76694265947", 4.4, 289, "$$",
        [("italian", "Italian"), ("bar", "Bar")],
        "310 Sinatra Dr", "(201) 798-3113", 450,
        "https://www.ottimohoboken.com", _BOTH,
    ),
)
