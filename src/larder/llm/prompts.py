"""Prompt templates for the pantry assistant."""

from __future__ import annotations

from typing import Sequence

RECIPE_JSON_SHAPE = (
    "Return ONLY a valid JSON array with this exact structure, no other text:\n"
    "[\n"
    "  {\n"
    '    "name": "Recipe Name",\n'
    '    "ingredients": ["ingredient 1", "ingredient 2"],\n'
    '    "instructions": ["Step 1", "Step 2", "Step 3"],\n'
    '    "optional": ["optional ingredient 1"]\n'
    "  }\n"
    "]"
)

SUGGEST_RECIPES_PROMPT = (
    "I have these ingredients in my pantry: {items}.\n\n"
    "Please suggest 3 simple recipes I can make with these ingredients. Do not suggest recipes "
    "that require ingredients that are not in my pantry.\n\n"
    "{shape}"
)

MAIN_INGREDIENT_PROMPT = (
    "You are given a list of pantry ingredients.\n"
    "Select the one ingredient that best serves as a main ingredient for a meal.\n"
    "Choose the most substantial item.\n"
    "Proteins have highest priority, then starchy bases, then vegetables.\n"
    "Ignore snacks and condiments.\n\n"
    "Pantry: {items}\n\n"
    "Return only one word that identifies the primary ingredient to use for a recipe search."
)

SUGGEST_FROM_RECIPES_PROMPT = (
    "Given the following recipes: {recipes}\n\n"
    "My pantry contains: {pantry}{disliked}\n\n"
    "Identify all proteins in my pantry. Proteins are items such as chicken, beef, pork, fish, "
    "eggs, turkey, lamb, tofu and similar.\n\n"
    "Identify all bases in my pantry. Bases are items such as rice, pasta, noodles, bread, "
    "tortillas, potatoes and similar.\n\n"
    "When generating recipes:\n"
    "1. Use as many different proteins as possible before repeating any protein.\n"
    "2. Use as many different bases as possible before repeating any base.\n"
    "3. You must generate the requested number of recipes.\n"
    "Choose 4-5 recipes that can be made with what is in my pantry.\n"
    "If spices, herbs or toppings aren't in my pantry, suggest the recipe anyways.\n"
    "If none can be made, return an empty array [].\n\n"
    "{shape}"
)

DISLIKED_SECTION = "\n\nDO NOT suggest any of these disliked recipes: {names}"

FILTER_SCANNED_ITEMS_PROMPT = (
    "You are analyzing text scanned from a receipt or grocery list.\n"
    "From the following list, identify ONLY the items that are food or pantry items "
    "(groceries, ingredients, beverages, snacks, etc.).\n\n"
    "Remove any items that are:\n"
    "- Store names, addresses, or phone numbers\n"
    "- Prices, totals, taxes, or payment info\n"
    "- Dates, times, or transaction IDs\n"
    "- Non-food products (cleaning supplies, toiletries, etc.)\n"
    "- Gibberish or OCR errors\n"
    "- Duplicate entries\n\n"
    "For food items, clean up the names:\n"
    '- Remove quantity prefixes (e.g., "2x" or "3 ")\n'
    "- Remove price suffixes\n"
    "- Capitalize properly\n"
    '- Use common names (e.g., "Milk" not "MLK 2%GAL")\n\n'
    "Scanned items:\n{numbered}\n\n"
    "Return ONLY a valid JSON array of cleaned food item names, no other text:\n"
    '["Item 1", "Item 2", "Item 3"]\n\n'
    "If no food items are found, return an empty array: []"
)

STORAGE_TIPS_PROMPT = (
    "I keep {item} in my {area}.\n"
    "Give me 2-3 short, practical tips for storing it there so it lasts as long as possible, "
    "and say how long it usually keeps once opened. Answer in plain sentences, no lists longer "
    "than three points."
)


def suggest_recipes_prompt(items: Sequence[str]) -> str:
    return SUGGEST_RECIPES_PROMPT.format(items=", ".join(items), shape=RECIPE_JSON_SHAPE)


def main_ingredient_prompt(items: Sequence[str]) -> str:
    return MAIN_INGREDIENT_PROMPT.format(items=", ".join(items))


def suggest_from_recipes_prompt(
    recipes: Sequence[str], pantry_items: Sequence[str], disliked: Sequence[str]
) -> str:
    disliked_section = DISLIKED_SECTION.format(names=", ".join(disliked)) if disliked else ""
    return SUGGEST_FROM_RECIPES_PROMPT.format(
        recipes=", ".join(recipes),
        pantry=", ".join(pantry_items),
        disliked=disliked_section,
        shape=RECIPE_JSON_SHAPE,
    )


def filter_scanned_items_prompt(lines: Sequence[str]) -> str:
    numbered = "\n".join(f"{index}. {line}" for index, line in enumerate(lines, start=1))
    return FILTER_SCANNED_ITEMS_PROMPT.format(numbered=numbered)


def storage_tips_prompt(item_name: str, storage_area: str) -> str:
    return STORAGE_TIPS_PROMPT.format(item=item_name, area=storage_area)
