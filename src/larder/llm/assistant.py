"""Pantry-specific operations built on top of the text generator."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, List, Optional, Protocol, Sequence

from larder import metrics
from larder.errors import UpstreamError
from larder.llm import prompts
from larder.llm.parsing import extract_json_array, string_list
from larder.models.recipes import RecipeSuggestion

logger = logging.getLogger(__name__)


class TextGenerationBackend(Protocol):
    """Anything that turns a prompt into reply text."""

    @property
    def available(self) -> bool:
        """Whether generation can be attempted at all."""

    def generate(self, prompt: str) -> str:
        """Return generated text for the supplied prompt."""


def _coerce_suggestion(entry: Any, id_prefix: str, index: int, stamp: int) -> Optional[RecipeSuggestion]:
    if not isinstance(entry, dict):
        return None
    name = entry.get("name")
    if not isinstance(name, str) or not name.strip():
        return None
    return RecipeSuggestion(
        id=f"{id_prefix}-{stamp}-{index}",
        name=name.strip(),
        ingredients=string_list(entry.get("ingredients")),
        instructions=string_list(entry.get("instructions")),
        optional=string_list(entry.get("optional")),
    )


class PantryAssistant:
    """Recipe proposals, ingredient picking and receipt clean-up via an LLM."""

    def __init__(
        self,
        generator: TextGenerationBackend,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._generator = generator
        self._clock = clock

    @property
    def available(self) -> bool:
        return self._generator.available

    def _ask(self, operation: str, prompt: str) -> str:
        try:
            reply = self._generator.generate(prompt)
        except UpstreamError:
            metrics.LLM_REQUESTS.labels(operation=operation, status="failed").inc()
            raise
        metrics.LLM_REQUESTS.labels(operation=operation, status="succeeded").inc()
        logger.debug("LLM %s reply length=%s", operation, len(reply), extra={"operation": operation})
        return reply

    def _suggestions(self, reply: str, id_prefix: str) -> List[RecipeSuggestion]:
        stamp = int(self._clock() * 1000)
        suggestions = []
        for index, entry in enumerate(extract_json_array(reply)):
            suggestion = _coerce_suggestion(entry, id_prefix, index, stamp)
            if suggestion is not None:
                suggestions.append(suggestion)
        return suggestions

    def generate(self, prompt: str) -> str:
        return self._ask("generate", prompt)

    def suggest_recipes(self, items: Sequence[str]) -> List[RecipeSuggestion]:
        """Propose simple recipes using only the given pantry items."""

        if not items:
            return []
        reply = self._ask("suggest_recipes", prompts.suggest_recipes_prompt(items))
        return self._suggestions(reply, "ai")

    def main_ingredient(self, items: Sequence[str]) -> str:
        """Pick the single most substantial ingredient to search recipes for."""

        if not items:
            return ""
        reply = self._ask("main_ingredient", prompts.main_ingredient_prompt(items))
        return reply.strip()

    def suggest_from_recipes(
        self,
        recipes: Sequence[str],
        pantry_items: Sequence[str],
        disliked: Sequence[str] = (),
    ) -> List[RecipeSuggestion]:
        """Choose from directory recipe names, never returning a disliked one."""

        if not recipes:
            return []
        reply = self._ask(
            "suggest_from_recipes",
            prompts.suggest_from_recipes_prompt(recipes, pantry_items, disliked),
        )
        blocked = [name.lower() for name in disliked if name.strip()]
        suggestions = [
            suggestion
            for suggestion in self._suggestions(reply, "mealdb")
            if not any(name in suggestion.name.lower() for name in blocked)
        ]
        return suggestions

    def filter_scanned_items(self, lines: Sequence[str]) -> List[str]:
        """Reduce raw receipt lines to cleaned food item names."""

        if not lines:
            return []
        reply = self._ask("filter_scanned_items", prompts.filter_scanned_items_prompt(lines))
        return string_list(extract_json_array(reply))

    def storage_tips(self, item_name: str, storage_area: str) -> str:
        reply = self._ask("storage_tips", prompts.storage_tips_prompt(item_name, storage_area))
        return reply.strip()


__all__ = ["PantryAssistant", "TextGenerationBackend"]
