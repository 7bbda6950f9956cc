"""Pydantic models defining shared data contracts."""

from larder.models.pantry import (
    DEFAULT_STORAGE_AREAS,
    AreaColor,
    AreaIcon,
    ItemWriteResult,
    PantryItem,
    StorageArea,
)
from larder.models.recipes import (
    DislikedRecipe,
    RecipeDetails,
    RecipeIngredient,
    RecipeSearchResult,
    RecipeSuggestion,
    RecipeSummary,
)

__all__ = [
    "AreaColor",
    "AreaIcon",
    "DEFAULT_STORAGE_AREAS",
    "ItemWriteResult",
    "PantryItem",
    "StorageArea",
    "DislikedRecipe",
    "RecipeDetails",
    "RecipeIngredient",
    "RecipeSearchResult",
    "RecipeSuggestion",
    "RecipeSummary",
]
