"""Dependency definitions for the Larder API server."""

from __future__ import annotations

from datetime import date
from typing import Callable, List, Optional, Sequence, Tuple

from fastapi import Depends, HTTPException, Request, status

from larder.config import get_settings
from larder.db.disliked_recipes import (
    add_disliked_recipe,
    disliked_recipe_names,
    is_disliked,
    list_disliked_recipes,
    remove_disliked_recipe,
)
from larder.db.items import (
    adjust_quantity,
    create_or_merge_item,
    delete_item,
    get_item,
    list_item_names,
    list_items,
    list_items_by_area,
    open_item,
)
from larder.db.storage_areas import (
    create_storage_area,
    delete_storage_area,
    get_storage_area,
    list_storage_areas,
    reorder_storage_areas,
    update_storage_area,
)
from larder.llm import PantryAssistant, TextGenerator, build_text_generator
from larder.models.pantry import ItemWriteResult, PantryItem, StorageArea
from larder.models.recipes import DislikedRecipe
from larder.ocr import ReceiptScanner, SmartScanService, build_receipt_scanner
from larder.recipes import MealDbClient, build_recipe_directory

StorageAreaListProvider = Callable[[], List[StorageArea]]
StorageAreaFetcher = Callable[[str], Optional[StorageArea]]
StorageAreaCreator = Callable[[dict], StorageArea]
StorageAreaUpdater = Callable[[str, dict], StorageArea]
StorageAreaDeleter = Callable[[str], None]
StorageAreaReorderer = Callable[[Sequence[str]], List[StorageArea]]
ItemListProvider = Callable[[Optional[str]], List[PantryItem]]
ItemFetcher = Callable[[str], Optional[PantryItem]]
ItemNamesProvider = Callable[[], List[str]]
ItemCreator = Callable[[dict], ItemWriteResult]
ItemQuantityAdjuster = Callable[[str, int], Optional[PantryItem]]
ItemOpener = Callable[[str, int], List[PantryItem]]
ItemDeleter = Callable[[str], None]
DislikedListProvider = Callable[[], List[DislikedRecipe]]
DislikedNamesProvider = Callable[[], List[str]]
DislikedAdder = Callable[[str], Tuple[DislikedRecipe, bool]]
DislikedRemover = Callable[[str], None]
DislikedChecker = Callable[[str], bool]


def get_storage_area_list_provider() -> StorageAreaListProvider:
    return list_storage_areas


def get_storage_area_fetcher() -> StorageAreaFetcher:
    return get_storage_area


def get_storage_area_creator() -> StorageAreaCreator:
    return lambda payload: create_storage_area(**payload)


def get_storage_area_updater() -> StorageAreaUpdater:
    return lambda area_id, payload: update_storage_area(area_id, **payload)


def get_storage_area_deleter() -> StorageAreaDeleter:
    return delete_storage_area


def get_storage_area_reorderer() -> StorageAreaReorderer:
    return reorder_storage_areas


def get_item_list_provider() -> ItemListProvider:
    """Return a provider listing all items, or those of one storage area."""

    return lambda area_id=None: list_items_by_area(area_id) if area_id else list_items()


def get_item_fetcher() -> ItemFetcher:
    return get_item


def get_item_names_provider() -> ItemNamesProvider:
    return list_item_names


def get_item_creator() -> ItemCreator:
    return lambda payload: create_or_merge_item(**payload)


def get_item_quantity_adjuster() -> ItemQuantityAdjuster:
    return adjust_quantity


def get_item_opener() -> ItemOpener:
    return lambda item_id, quantity: open_item(item_id, quantity, today=date.today())


def get_item_deleter() -> ItemDeleter:
    return delete_item


def get_disliked_list_provider() -> DislikedListProvider:
    return list_disliked_recipes


def get_disliked_names_provider() -> DislikedNamesProvider:
    return disliked_recipe_names


def get_disliked_adder() -> DislikedAdder:
    return add_disliked_recipe


def get_disliked_remover() -> DislikedRemover:
    return remove_disliked_recipe


def get_disliked_checker() -> DislikedChecker:
    return is_disliked


def get_text_generator() -> TextGenerator:
    """Return a text generator configured from the current settings."""

    return build_text_generator(get_settings())


def get_pantry_assistant(
    generator: TextGenerator = Depends(get_text_generator),
) -> PantryAssistant:
    return PantryAssistant(generator)


def get_receipt_scanner() -> ReceiptScanner:
    return build_receipt_scanner(get_settings().ocr_default_lang)


def get_smart_scan_service(
    scanner: ReceiptScanner = Depends(get_receipt_scanner),
    assistant: PantryAssistant = Depends(get_pantry_assistant),
) -> SmartScanService:
    return SmartScanService(scanner=scanner, assistant=assistant)


def get_recipe_directory() -> MealDbClient:
    return build_recipe_directory(get_settings())


def require_api_token(
    request: Request,
    settings = Depends(get_settings),
) -> None:
    """Ensure requests carry the configured API token when required."""

    token = settings.api_token
    if not token:
        return

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.split("Bearer ")[-1].strip() == token:
        return

    if request.query_params.get("api_token") == token:
        return

    if request.headers.get("X-API-Key") == token:
        return

    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
