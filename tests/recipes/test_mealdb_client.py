"""Tests for the TheMealDB client using httpx mock transports."""

from __future__ import annotations

import httpx
import pytest

from larder.errors import UpstreamError
from larder.recipes.directory import MealDbClient

BASE_URL = "https://mealdb.test/api/json/v1/1"

DETAIL_MEAL = {
    "idMeal": "52772",
    "strMeal": "Teriyaki Chicken Casserole",
    "strCategory": "Chicken",
    "strArea": "Japanese",
    "strInstructions": "Preheat oven to 350.",
    "strMealThumb": "https://mealdb.test/images/teriyaki.jpg",
    "strYoutube": "https://www.youtube.com/watch?v=4aZr5hZXP_s",
    "strIngredient1": "soy sauce",
    "strMeasure1": "3/4 cup",
    "strIngredient2": " chicken breasts ",
    "strMeasure2": None,
    "strIngredient3": "",
    "strMeasure3": "",
    "strIngredient4": None,
}


def _client(handler) -> MealDbClient:
    return MealDbClient(base_url=BASE_URL, timeout=5.0, transport=httpx.MockTransport(handler))


def test_search_normalizes_ingredient_and_maps_meals():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["ingredient"] = request.url.params["i"]
        return httpx.Response(
            200,
            json={
                "meals": [
                    {"idMeal": "1", "strMeal": "Chicken Pie", "strMealThumb": "https://x/1.jpg"},
                    {"idMeal": "2", "strMeal": "Chicken Soup", "strMealThumb": None},
                ]
            },
        )

    result = _client(handler).search_by_ingredient("  Chicken ")

    assert seen == {"path": "/api/json/v1/1/filter.php", "ingredient": "chicken"}
    assert result.ingredient == "chicken"
    assert result.count == 2
    assert [(meal.id, meal.name, meal.thumbnail) for meal in result.meals] == [
        ("1", "Chicken Pie", "https://x/1.jpg"),
        ("2", "Chicken Soup", None),
    ]


def test_search_with_no_results_is_empty():
    result = _client(lambda request: httpx.Response(200, json={"meals": None})).search_by_ingredient(
        "unobtainium"
    )

    assert result.count == 0
    assert result.meals == []


def test_get_details_collects_ingredient_slots():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/lookup.php")
        assert request.url.params["i"] == "52772"
        return httpx.Response(200, json={"meals": [DETAIL_MEAL]})

    details = _client(handler).get_details("52772")

    assert details is not None
    assert details.name == "Teriyaki Chicken Casserole"
    assert details.category == "Chicken"
    assert details.area == "Japanese"
    assert details.youtube.endswith("4aZr5hZXP_s")
    assert [(entry.ingredient, entry.measure) for entry in details.ingredients] == [
        ("soy sauce", "3/4 cup"),
        ("chicken breasts", ""),
    ]


def test_get_details_missing_recipe_returns_none():
    client = _client(lambda request: httpx.Response(200, json={"meals": None}))

    assert client.get_details("0") is None


@pytest.mark.parametrize(
    "handler",
    [
        lambda request: httpx.Response(503, text="maintenance"),
        lambda request: httpx.Response(200, text="<html>not json</html>"),
    ],
)
def test_upstream_failures_raise(handler):
    with pytest.raises(UpstreamError):
        _client(handler).search_by_ingredient("chicken")


def test_transport_errors_raise():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError):
        _client(handler).get_details("1")
