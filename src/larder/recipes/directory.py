"""Recipe lookups against TheMealDB."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from larder.config import Settings, get_settings
from larder.errors import UpstreamError
from larder.models.recipes import (
    RecipeDetails,
    RecipeIngredient,
    RecipeSearchResult,
    RecipeSummary,
)

logger = logging.getLogger(__name__)

MAX_INGREDIENT_SLOTS = 20


def _clean(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


class MealDbClient:
    """Search recipes by ingredient and fetch full recipe details."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _get(self, path: str, params: dict[str, str]) -> dict[str, Any]:
        url = f"{self._base_url}/{path}"
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.get(url, params=params)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning("Recipe directory returned %s for %s", exc.response.status_code, path)
            raise UpstreamError(f"MealDB API error: {exc.response.status_code}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Recipe directory request failed for %s: %s", path, exc)
            raise UpstreamError(f"MealDB request failed: {exc}") from exc
        return body if isinstance(body, dict) else {}

    def search_by_ingredient(self, ingredient: str) -> RecipeSearchResult:
        """Recipes using ``ingredient``; no match is an empty list, not an error."""

        cleaned = ingredient.strip().lower()
        body = self._get("filter.php", {"i": cleaned})
        meals = []
        for meal in body.get("meals") or []:
            meal_id = _clean(meal.get("idMeal"))
            name = _clean(meal.get("strMeal"))
            if not meal_id or not name:
                continue
            meals.append(
                RecipeSummary(id=meal_id, name=name, thumbnail=_clean(meal.get("strMealThumb")))
            )
        return RecipeSearchResult(ingredient=cleaned, count=len(meals), meals=meals)

    def get_details(self, recipe_id: str) -> Optional[RecipeDetails]:
        body = self._get("lookup.php", {"i": recipe_id.strip()})
        meals = body.get("meals") or []
        if not meals:
            return None
        meal = meals[0]

        ingredients = []
        for slot in range(1, MAX_INGREDIENT_SLOTS + 1):
            name = _clean(meal.get(f"strIngredient{slot}"))
            if name:
                measure = _clean(meal.get(f"strMeasure{slot}")) or ""
                ingredients.append(RecipeIngredient(ingredient=name, measure=measure))

        return RecipeDetails(
            id=str(meal.get("idMeal") or recipe_id),
            name=_clean(meal.get("strMeal")) or "",
            category=_clean(meal.get("strCategory")),
            area=_clean(meal.get("strArea")),
            instructions=meal.get("strInstructions") or "",
            thumbnail=_clean(meal.get("strMealThumb")),
            youtube=_clean(meal.get("strYoutube")),
            ingredients=ingredients,
        )


def build_recipe_directory(settings: Settings | None = None) -> MealDbClient:
    settings = settings or get_settings()
    return MealDbClient(
        base_url=settings.recipe_api_base_url,
        timeout=settings.recipe_api_timeout,
    )


__all__ = ["MealDbClient", "build_recipe_directory"]
