"""Recipe suggestion, recipe directory and disliked-recipe models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RecipeSuggestion(BaseModel):
    """Recipe proposed by the text generation assistant."""

    id: str
    name: str
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    optional: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class RecipeSummary(BaseModel):
    """Search hit from the recipe directory."""

    id: str
    name: str
    thumbnail: Optional[str] = Field(default=None)

    model_config = ConfigDict(frozen=True)


class RecipeSearchResult(BaseModel):
    ingredient: str
    count: int
    meals: list[RecipeSummary] = Field(default_factory=list)


class RecipeIngredient(BaseModel):
    ingredient: str
    measure: str = ""

    model_config = ConfigDict(frozen=True)


class RecipeDetails(BaseModel):
    """Full recipe record from the recipe directory."""

    id: str
    name: str
    category: Optional[str] = Field(default=None)
    area: Optional[str] = Field(default=None)
    instructions: str = ""
    thumbnail: Optional[str] = Field(default=None)
    youtube: Optional[str] = Field(default=None)
    ingredients: list[RecipeIngredient] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class DislikedRecipe(BaseModel):
    """Recipe name excluded from AI recipe proposals."""

    id: str
    name: str
    created_at: datetime

    model_config = ConfigDict(frozen=True)


__all__ = [
    "DislikedRecipe",
    "RecipeDetails",
    "RecipeIngredient",
    "RecipeSearchResult",
    "RecipeSuggestion",
    "RecipeSummary",
]
