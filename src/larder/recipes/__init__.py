"""Third-party recipe directory integration."""

from __future__ import annotations

from .directory import MealDbClient, build_recipe_directory

__all__ = ["MealDbClient", "build_recipe_directory"]
