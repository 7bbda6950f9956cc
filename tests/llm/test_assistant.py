"""Tests for pantry assistant operations using a scripted text generator."""

from __future__ import annotations

import json

import pytest

from larder.errors import UpstreamError
from larder.llm.assistant import PantryAssistant


def _fixed_clock() -> float:
    return 1_700_000_000.0


RECIPES_REPLY = json.dumps(
    [
        {
            "name": "Egg Fried Rice",
            "ingredients": ["eggs", "rice"],
            "instructions": ["Cook rice", "Fry with eggs"],
            "optional": ["spring onion"],
        },
        {"name": "Plain Rice", "ingredients": ["rice"], "instructions": ["Boil"]},
        {"ingredients": ["no name"]},
        "not an object",
    ]
)


def test_suggest_recipes_builds_suggestions_with_ai_ids(fake_generator_factory):
    generator = fake_generator_factory([f"Here are some ideas:\n{RECIPES_REPLY}"])
    assistant = PantryAssistant(generator, clock=_fixed_clock)

    suggestions = assistant.suggest_recipes(["eggs", "rice"])

    assert [suggestion.name for suggestion in suggestions] == ["Egg Fried Rice", "Plain Rice"]
    assert [suggestion.id for suggestion in suggestions] == [
        "ai-1700000000000-0",
        "ai-1700000000000-1",
    ]
    assert suggestions[0].optional == ["spring onion"]
    assert suggestions[1].optional == []
    assert "eggs, rice" in generator.prompts[0]


def test_suggest_recipes_with_unparseable_reply_returns_empty(fake_generator_factory):
    assistant = PantryAssistant(fake_generator_factory(["I cannot help with that."]))

    assert assistant.suggest_recipes(["eggs"]) == []


def test_empty_inputs_skip_the_model(fake_generator_factory):
    generator = fake_generator_factory()
    assistant = PantryAssistant(generator)

    assert assistant.suggest_recipes([]) == []
    assert assistant.main_ingredient([]) == ""
    assert assistant.suggest_from_recipes([], ["eggs"]) == []
    assert assistant.filter_scanned_items([]) == []
    assert generator.prompts == []


def test_main_ingredient_is_trimmed(fake_generator_factory):
    assistant = PantryAssistant(fake_generator_factory(["  chicken \n"]))

    assert assistant.main_ingredient(["chicken", "ketchup"]) == "chicken"


def test_suggest_from_recipes_drops_disliked_names(fake_generator_factory):
    reply = json.dumps(
        [
            {"name": "Beef Wellington Deluxe", "ingredients": ["beef"], "instructions": []},
            {"name": "Chicken Curry", "ingredients": ["chicken"], "instructions": ["Simmer"]},
        ]
    )
    generator = fake_generator_factory([reply])
    assistant = PantryAssistant(generator, clock=_fixed_clock)

    suggestions = assistant.suggest_from_recipes(
        ["Beef Wellington", "Chicken Curry"],
        ["beef", "chicken"],
        ["beef wellington"],
    )

    assert [suggestion.name for suggestion in suggestions] == ["Chicken Curry"]
    assert suggestions[0].id == "mealdb-1700000000000-1"
    assert "DO NOT suggest any of these disliked recipes: beef wellington" in generator.prompts[0]


def test_filter_scanned_items_returns_clean_strings(fake_generator_factory):
    assistant = PantryAssistant(fake_generator_factory(['["Milk", " Bread ", 7, ""]']))

    assert assistant.filter_scanned_items(["MLK 2%GAL", "BRD WHT", "STORE 42"]) == [
        "Milk",
        "Bread",
    ]


def test_storage_tips_passes_item_and_area(fake_generator_factory):
    generator = fake_generator_factory(["Keep it sealed. "])
    assistant = PantryAssistant(generator)

    assert assistant.storage_tips("Parmesan", "Fridge") == "Keep it sealed."
    assert "Parmesan" in generator.prompts[0]
    assert "Fridge" in generator.prompts[0]


def test_upstream_errors_propagate(fake_generator_factory):
    assistant = PantryAssistant(fake_generator_factory(error=UpstreamError("boom")))

    with pytest.raises(UpstreamError):
        assistant.suggest_recipes(["eggs"])
