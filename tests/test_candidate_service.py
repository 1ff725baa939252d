"""Tests for candidate set construction."""

import asyncio

from restaurant_matchmaker.domain.restaurants import (
    LocationData,
    SessionFilters,
    TransactionType,
)
from restaurant_matchmaker.fallback_restaurants import FALLBACK_RESTAURANTS
from restaurant_matchmaker.services.candidates import (
    FOOD_CATEGORY,
    MAX_RADIUS_METERS,
    _search_params,
    convert_place,
    filter_restaurants,
    get_restaurant,
)
from tests.conftest import (
    HOBOKEN,
    FailingPlacesClient,
    FakePlacesClient,
    make_candidate_service,
    place,
)


def test_fallback_used_without_provider() -> None:
    service = make_candidate_service()

    candidates = asyncio.run(service.fetch_candidates(SessionFilters()))

    assert sorted(r.id for r in candidates) == sorted(
        r.id for r in FALLBACK_RESTAURANTS
    )


def test_fallback_applies_filters() -> None:
    service = make_candidate_service()
    filters = SessionFilters(
        cuisines=("italian",),
        price_range=("2",),
        transaction_type=TransactionType.DELIVERY,
    )

    candidates = asyncio.run(service.fetch_candidates(filters))

    assert {r.id for r in candidates} == {"hoboken-7", "hoboken-8", "hoboken-15"}


def test_fallback_never_empty_when_filters_match_nothing() -> None:
    service = make_candidate_service()
    filters = SessionFilters(cuisines=("ethiopian",), price_range=("4",))

    candidates = asyncio.run(service.fetch_candidates(filters))

    assert len(candidates) == len(FALLBACK_RESTAURANTS)


def test_provider_failure_falls_back_after_retry() -> None:
    client = FailingPlacesClient()
    service = make_candidate_service(client)

    candidates = asyncio.run(
        service.fetch_candidates(SessionFilters(cuisines=("mexican",)))
    )

    assert client.calls == 2
    assert {r.id for r in candidates} == {"hoboken-9", "hoboken-11"}


def test_provider_results_skip_closed_places_and_are_cached() -> None:
    client = FakePlacesClient()
    service = make_candidate_service(client)
    filters = SessionFilters(cuisines=("italian",))

    first = asyncio.run(service.fetch_candidates(filters))
    second = asyncio.run(service.fetch_candidates(filters))

    assert {r.id for r in first} == {"fsq-1", "fsq-2"}
    assert [r.id for r in second] == [r.id for r in first]
    assert len(client.calls) == 1
    assert client.calls[0]["categories"] == "13236"


def test_cache_is_keyed_by_location() -> None:
    client = FakePlacesClient()
    service = make_candidate_service(client)
    elsewhere = LocationData(latitude=40.7128, longitude=-74.006)

    asyncio.run(service.fetch_candidates(SessionFilters()))
    asyncio.run(service.fetch_candidates(SessionFilters(), elsewhere))

    assert len(client.calls) == 2
    assert client.calls[1]["ll"] == "40.7128,-74.006"


def test_empty_provider_results_fall_back() -> None:
    client = FakePlacesClient(payload={"results": []})
    service = make_candidate_service(client)

    candidates = asyncio.run(service.fetch_candidates(SessionFilters()))

    assert len(candidates) == len(FALLBACK_RESTAURANTS)


def test_shuffle_is_seeded() -> None:
    first_service = make_candidate_service(seed=1)
    second_service = make_candidate_service(seed=1)

    first = asyncio.run(first_service.fetch_candidates(SessionFilters()))
    again = asyncio.run(second_service.fetch_candidates(SessionFilters()))

    assert [r.id for r in first] == [r.id for r in again]


def test_convert_place_maps_provider_fields() -> None:
    restaurant = convert_place(
        place(
            "fsq-9",
            "Taco Stand",
            categories=[
                {"id": 13303, "name": "Mexican Restaurant", "short_name": "Mexican"},
                {"id": 13145, "name": "Fast Food", "short_name": "Fast Food"},
            ],
            photos=[{"prefix": "https://img.example/", "suffix": "/taco.jpg"}],
            rating=9.0,
            price=1,
            tel="(201) 555-0100",
        )
    )

    assert restaurant.id == "fsq-9"
    assert restaurant.image_url == "https://img.example/500x500/taco.jpg"
    assert restaurant.rating == 4.5
    assert restaurant.price == "$"
    assert restaurant.review_count == 40
    assert [c.alias for c in restaurant.categories] == ["mexican", "fast_food"]
    assert restaurant.transactions == ("delivery", "pickup")
    assert restaurant.display_phone == "(201) 555-0100"
    assert restaurant.url == "https://foursquare.com/v/fsq-9"
    assert restaurant.is_closed is False


def test_convert_place_handles_sparse_payload() -> None:
    restaurant = convert_place({"fsq_id": "fsq-0", "hours": {"open_now": False}})

    assert restaurant.name == ""
    assert restaurant.rating == 0.0
    assert restaurant.price is None
    assert restaurant.categories == ()
    assert restaurant.transactions == ()
    assert restaurant.is_closed is True


def test_search_params_cap_radius_and_map_filters() -> None:
    filters = SessionFilters(cuisines=("sushi", "unknown"), price_range=("3", "1"))

    params = _search_params(filters, HOBOKEN, radius_meters=500_000)

    assert params["radius"] == MAX_RADIUS_METERS
    assert params["categories"] == "13350"
    assert params["min_price"] == 1
    assert params["max_price"] == 3
    assert params["ll"] == "40.7439,-74.0323"


def test_search_params_default_to_food_category() -> None:
    params = _search_params(SessionFilters(), HOBOKEN, radius_meters=1609)

    assert params["categories"] == FOOD_CATEGORY
    assert "min_price" not in params


def test_filter_restaurants_matches_category_titles() -> None:
    filtered = filter_restaurants(
        FALLBACK_RESTAURANTS, SessionFilters(cuisines=("new american",))
    )

    assert [r.id for r in filtered] == ["hoboken-3"]


def test_filter_restaurants_by_pickup() -> None:
    filtered = filter_restaurants(
        FALLBACK_RESTAURANTS,
        SessionFilters(transaction_type=TransactionType.PICKUP),
    )

    assert len(filtered) == len(FALLBACK_RESTAURANTS)


def test_get_restaurant() -> None:
    restaurants = list(FALLBACK_RESTAURANTS)

    assert get_restaurant(restaurants, "hoboken-4").name == "La Isla Restaurant"
    assert get_restaurant(restaurants, "missing") is None
