"""ASGI application for Larder."""
# mypy: ignore-errors

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from time import perf_counter
from typing import Any, Optional
from uuid import uuid4

from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field

from larder import __version__, metrics
from larder.config import Settings, get_settings
from larder.errors import (
    ConflictError,
    EmptyResponseError,
    InvalidInputError,
    LLMUnavailableError,
    NotFoundError,
    UnreadableImageError,
    UpstreamError,
)
from larder.llm import PantryAssistant, TextGenerator
from larder.logging_utils import configure_logging as configure_app_logging
from larder.models.pantry import AreaColor, AreaIcon, PantryItem, StorageArea
from larder.models.recipes import (
    DislikedRecipe,
    RecipeDetails,
    RecipeSearchResult,
    RecipeSuggestion,
)
from larder.ocr import ReceiptScanner, SmartScanService
from larder.recipes import MealDbClient
from larder.server import deps

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[Exception], int] = {
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    UpstreamError: status.HTTP_502_BAD_GATEWAY,
    LLMUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
    EmptyResponseError: status.HTTP_502_BAD_GATEWAY,
    UnreadableImageError: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def _json_safe(value: Any) -> Any:
    """Convert non-serializable values into JSON-safe representations."""

    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return value.hex()
    if isinstance(value, (list, tuple)):
        return [_json_safe(entry) for entry in value]
    if isinstance(value, dict):
        return {key: _json_safe(sub_value) for key, sub_value in value.items()}
    return repr(value)


def _configure_logging(settings: Settings) -> None:
    secrets = [settings.api_token or "", settings.llm_api_key or ""]
    configure_app_logging(settings.log_level, settings.log_format, secrets)


def _request_log_kwargs(request: Request) -> dict[str, Any]:
    request_id = getattr(request.state, "request_id", None)
    return {"extra": {"request_id": request_id}} if request_id else {}


def _require_text(value: str, message: str) -> str:
    trimmed = (value or "").strip()
    if not trimmed:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)
    return trimmed


def create_app() -> FastAPI:
    """Create and configure a FastAPI application instance."""

    settings = get_settings()
    _configure_logging(settings)

    application = FastAPI(title="Larder Pantry Tracker", version=__version__)
    logger.debug("Application created with log level %s", settings.log_level)

    if settings.log_requests:
        access_logger = logging.getLogger("larder.access")

        @application.middleware("http")
        async def log_request_response(request: Request, call_next):
            """Log request/response details without leaking sensitive data."""

            request_id = request.headers.get("X-Request-ID") or uuid4().hex
            request.state.request_id = request_id
            start = perf_counter()
            path = request.url.path
            method = request.method
            try:
                response: Response = await call_next(request)
            except Exception:
                duration_ms = (perf_counter() - start) * 1000
                access_logger.exception(
                    "HTTP %s %s status=500 duration_ms=%.2f",
                    method,
                    path,
                    duration_ms,
                    extra={"request_id": request_id},
                )
                metrics.REQUEST_COUNT.labels(method=method, path=path, status="500").inc()
                metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(
                    duration_ms / 1000.0
                )
                raise

            duration_ms = (perf_counter() - start) * 1000
            response.headers.setdefault("X-Request-ID", request_id)
            access_logger.info(
                "HTTP %s %s status=%s duration_ms=%.2f",
                method,
                path,
                response.status_code,
                duration_ms,
                extra={"request_id": request_id},
            )
            metrics.REQUEST_COUNT.labels(
                method=method,
                path=path,
                status=str(response.status_code),
            ).inc()
            metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000.0)
            return response

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        body_preview: str | None = None
        try:
            raw_body = await request.body()
        except RuntimeError:  # pragma: no cover - stream already consumed
            raw_body = b""
            body_preview = "<unable to read body>"
        if raw_body:
            decoded = raw_body.decode("utf-8", errors="replace")
            if len(decoded) > 2048:
                decoded = decoded[:2048] + "...(truncated)"
            body_preview = decoded

        logger.warning(
            "Validation error on %s %s: %s | body=%s",
            request.method,
            request.url.path,
            exc.errors(),
            body_preview,
            **_request_log_kwargs(request),
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": [_json_safe(dict(error)) for error in exc.errors()]},
        )

    async def domain_exception_handler(request: Request, exc: Exception):
        status_code = next(
            ERROR_STATUS_CODES[cls] for cls in type(exc).__mro__ if cls in ERROR_STATUS_CODES
        )
        log = logger.warning if status_code >= 500 else logger.info
        log(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc,
            **_request_log_kwargs(request),
        )
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    for error_cls in ERROR_STATUS_CODES:
        application.add_exception_handler(error_cls, domain_exception_handler)

    api = APIRouter(prefix="/api")

    @api.get("/health", summary="Liveness probe")
    def health() -> dict[str, str]:
        return {
            "status": "ok",
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    # Storage areas

    @api.get(
        "/storage-areas",
        response_model=list[StorageArea],
        summary="List storage areas in display order",
    )
    def storage_areas_list(
        provider: deps.StorageAreaListProvider = Depends(deps.get_storage_area_list_provider),
    ) -> list[StorageArea]:
        return provider()

    @api.put(
        "/storage-areas/reorder/batch",
        response_model=list[StorageArea],
        summary="Reorder storage areas",
    )
    def storage_areas_reorder(
        payload: StorageAreaReorderRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        reorderer: deps.StorageAreaReorderer = Depends(deps.get_storage_area_reorderer),
    ) -> list[StorageArea]:
        return reorderer(payload.ids)

    @api.get(
        "/storage-areas/{area_id}",
        response_model=StorageArea,
        summary="Fetch one storage area",
    )
    def storage_areas_get(
        area_id: str,
        fetcher: deps.StorageAreaFetcher = Depends(deps.get_storage_area_fetcher),
    ) -> StorageArea:
        area = fetcher(area_id)
        if area is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Storage area not found")
        return area

    @api.post(
        "/storage-areas",
        response_model=StorageArea,
        status_code=status.HTTP_201_CREATED,
        summary="Create storage area",
    )
    def storage_areas_create(
        payload: StorageAreaCreateRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        creator: deps.StorageAreaCreator = Depends(deps.get_storage_area_creator),
    ) -> StorageArea:
        return creator(payload.model_dump())

    @api.put(
        "/storage-areas/{area_id}",
        response_model=StorageArea,
        summary="Update storage area",
    )
    def storage_areas_update(
        area_id: str,
        payload: StorageAreaUpdateRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        updater: deps.StorageAreaUpdater = Depends(deps.get_storage_area_updater),
    ) -> StorageArea:
        update_payload = payload.model_dump(exclude_unset=True)
        logger.debug("Updating storage area %s with payload=%s", area_id, update_payload)
        return updater(area_id, update_payload)

    @api.delete(
        "/storage-areas/{area_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete storage area and its items",
    )
    def storage_areas_delete(
        area_id: str,
        auth: None = Depends(deps.require_api_token),
        deleter: deps.StorageAreaDeleter = Depends(deps.get_storage_area_deleter),
    ) -> Response:
        deleter(area_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # Items

    @api.get("/items", response_model=list[PantryItem], summary="List pantry items")
    def items_list(
        storage_area_id: Optional[str] = Query(default=None, min_length=1),
        provider: deps.ItemListProvider = Depends(deps.get_item_list_provider),
    ) -> list[PantryItem]:
        return provider(storage_area_id)

    @api.get(
        "/items/area/{area_id}",
        response_model=list[PantryItem],
        summary="List items of one storage area",
    )
    def items_by_area(
        area_id: str,
        provider: deps.ItemListProvider = Depends(deps.get_item_list_provider),
    ) -> list[PantryItem]:
        return provider(area_id)

    @api.get("/items/{item_id}", response_model=PantryItem, summary="Fetch one item")
    def items_get(
        item_id: str,
        fetcher: deps.ItemFetcher = Depends(deps.get_item_fetcher),
    ) -> PantryItem:
        item = fetcher(item_id)
        if item is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
        return item

    @api.post(
        "/items",
        response_model=PantryItem,
        status_code=status.HTTP_201_CREATED,
        summary="Add an item, merging into a matching unopened one",
    )
    def items_create(
        response: Response,
        payload: ItemCreateRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        creator: deps.ItemCreator = Depends(deps.get_item_creator),
    ) -> PantryItem:
        result = creator(payload.model_dump())
        if result.merged:
            response.status_code = status.HTTP_200_OK
        return result.item

    @api.put(
        "/items/{item_id}/quantity",
        response_model=PantryItem,
        summary="Set item quantity; below one deletes the item",
    )
    def items_set_quantity(
        item_id: str,
        payload: ItemQuantityRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        adjuster: deps.ItemQuantityAdjuster = Depends(deps.get_item_quantity_adjuster),
    ):
        item = adjuster(item_id, payload.quantity)
        if item is None:
            return Response(status_code=status.HTTP_204_NO_CONTENT)
        return item

    @api.put(
        "/items/{item_id}/open",
        response_model=ItemOpenResponse,
        summary="Open some or all of an item",
    )
    def items_open(
        item_id: str,
        payload: ItemOpenRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        opener: deps.ItemOpener = Depends(deps.get_item_opener),
    ) -> ItemOpenResponse:
        return ItemOpenResponse(items=opener(item_id, payload.quantity_to_open))

    @api.delete(
        "/items/{item_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete item",
    )
    def items_delete(
        item_id: str,
        auth: None = Depends(deps.require_api_token),
        deleter: deps.ItemDeleter = Depends(deps.get_item_deleter),
    ) -> Response:
        deleter(item_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # AI assistant

    @api.get("/ai/status", response_model=AIStatusResponse, summary="Text generation status")
    def ai_status(
        generator: TextGenerator = Depends(deps.get_text_generator),
    ) -> AIStatusResponse:
        return AIStatusResponse(
            available=generator.available,
            provider=generator.provider,
            message=generator.status_message,
        )

    @api.post("/ai/generate", response_model=TextResultResponse, summary="Free-form prompt")
    def ai_generate(
        payload: GenerateRequest = Body(...),
        assistant: PantryAssistant = Depends(deps.get_pantry_assistant),
    ) -> TextResultResponse:
        prompt = _require_text(payload.prompt, "Prompt is required")
        return TextResultResponse(result=assistant.generate(prompt))

    @api.post(
        "/ai/recipes",
        response_model=RecipeSuggestionsResponse,
        summary="Suggest recipes from a list of items",
    )
    def ai_recipes(
        payload: ItemNamesRequest = Body(...),
        assistant: PantryAssistant = Depends(deps.get_pantry_assistant),
    ) -> RecipeSuggestionsResponse:
        return RecipeSuggestionsResponse(recipes=assistant.suggest_recipes(payload.items))

    @api.post(
        "/ai/pantry-recipes",
        response_model=RecipeSuggestionsResponse,
        summary="Suggest recipes from current stock",
    )
    def ai_pantry_recipes(
        names_provider: deps.ItemNamesProvider = Depends(deps.get_item_names_provider),
        assistant: PantryAssistant = Depends(deps.get_pantry_assistant),
    ) -> RecipeSuggestionsResponse:
        return RecipeSuggestionsResponse(recipes=assistant.suggest_recipes(names_provider()))

    @api.post(
        "/ai/filter-ingredients",
        response_model=TextResultResponse,
        summary="Pick the main ingredient to search recipes for",
    )
    def ai_filter_ingredients(
        payload: ItemNamesRequest = Body(...),
        assistant: PantryAssistant = Depends(deps.get_pantry_assistant),
    ) -> TextResultResponse:
        if not payload.items:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Items array cannot be empty",
            )
        return TextResultResponse(result=assistant.main_ingredient(payload.items))

    @api.post(
        "/ai/suggest-from-recipes",
        response_model=RecipeSuggestionsResponse,
        summary="Let the assistant choose among directory recipes",
    )
    def ai_suggest_from_recipes(
        payload: SuggestFromRecipesRequest = Body(...),
        disliked_provider: deps.DislikedNamesProvider = Depends(deps.get_disliked_names_provider),
        assistant: PantryAssistant = Depends(deps.get_pantry_assistant),
    ) -> RecipeSuggestionsResponse:
        if not payload.recipes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Recipes array is required and cannot be empty",
            )
        disliked = disliked_provider()
        candidates = [name for name in payload.recipes if name.strip().lower() not in disliked]
        if not candidates:
            logger.info("All %s candidate recipe(s) are disliked", len(payload.recipes))
            return RecipeSuggestionsResponse(recipes=[])
        suggestions = assistant.suggest_from_recipes(candidates, payload.pantry_items, disliked)
        return RecipeSuggestionsResponse(recipes=suggestions)

    @api.post(
        "/ai/storage-tips",
        response_model=TextResultResponse,
        summary="Storage advice for one item",
    )
    def ai_storage_tips(
        payload: StorageTipsRequest = Body(...),
        assistant: PantryAssistant = Depends(deps.get_pantry_assistant),
    ) -> TextResultResponse:
        item_name = _require_text(payload.item_name, "Item name is required")
        storage_area = _require_text(payload.storage_area, "Storage area is required")
        return TextResultResponse(result=assistant.storage_tips(item_name, storage_area))

    # Receipt scanning

    @api.post("/scan", response_model=ScanTextResponse, summary="Extract text from an image")
    def scan_text(
        payload: ScanRequest = Body(...),
        scanner: ReceiptScanner = Depends(deps.get_receipt_scanner),
    ) -> ScanTextResponse:
        image = _require_text(payload.image, "Image data is required")
        return ScanTextResponse(text=scanner.scan_text(image))

    @api.post("/scan/lines", response_model=ScanLinesResponse, summary="Extract text lines")
    def scan_lines(
        payload: ScanRequest = Body(...),
        scanner: ReceiptScanner = Depends(deps.get_receipt_scanner),
    ) -> ScanLinesResponse:
        image = _require_text(payload.image, "Image data is required")
        return ScanLinesResponse(lines=scanner.scan_lines(image))

    @api.post(
        "/scan/receipt",
        response_model=ScanItemsResponse,
        summary="Extract probable item names from a receipt",
    )
    def scan_receipt(
        payload: ScanRequest = Body(...),
        scanner: ReceiptScanner = Depends(deps.get_receipt_scanner),
    ) -> ScanItemsResponse:
        image = _require_text(payload.image, "Image data is required")
        items = scanner.scan_receipt_items(image)
        return ScanItemsResponse(items=items, raw=items)

    @api.post(
        "/scan/receipt/smart",
        response_model=ScanItemsResponse,
        summary="Extract receipt items and clean them up with the assistant",
    )
    def scan_receipt_smart(
        payload: ScanRequest = Body(...),
        service: SmartScanService = Depends(deps.get_smart_scan_service),
    ) -> ScanItemsResponse:
        image = _require_text(payload.image, "Image data is required")
        result = service.scan(image)
        return ScanItemsResponse(items=result.items, raw=result.raw, filtered=result.filtered)

    # Recipe directory

    @api.get(
        "/recipes/search",
        response_model=RecipeSearchResult,
        summary="Search directory recipes by ingredient",
    )
    def recipes_search(
        ingredient: str = Query(default=""),
        directory: MealDbClient = Depends(deps.get_recipe_directory),
    ) -> RecipeSearchResult:
        cleaned = _require_text(ingredient, "Ingredient query parameter is required")
        return directory.search_by_ingredient(cleaned)

    @api.post(
        "/recipes/search",
        response_model=RecipeSearchResult,
        summary="Search directory recipes by ingredient",
    )
    def recipes_search_body(
        payload: RecipeSearchRequest = Body(...),
        directory: MealDbClient = Depends(deps.get_recipe_directory),
    ) -> RecipeSearchResult:
        cleaned = _require_text(payload.ingredient, "Ingredient is required")
        return directory.search_by_ingredient(cleaned)

    @api.get(
        "/recipes/{recipe_id}",
        response_model=RecipeDetails,
        summary="Fetch full recipe details",
    )
    def recipes_get(
        recipe_id: str,
        directory: MealDbClient = Depends(deps.get_recipe_directory),
    ) -> RecipeDetails:
        details = directory.get_details(recipe_id)
        if details is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipe not found")
        return details

    # Disliked recipes

    @api.get(
        "/disliked-recipes",
        response_model=list[DislikedRecipe],
        summary="List disliked recipes",
    )
    def disliked_list(
        provider: deps.DislikedListProvider = Depends(deps.get_disliked_list_provider),
    ) -> list[DislikedRecipe]:
        return provider()

    @api.get(
        "/disliked-recipes/names",
        response_model=DislikedNamesResponse,
        summary="Lower-cased disliked recipe names",
    )
    def disliked_names(
        provider: deps.DislikedNamesProvider = Depends(deps.get_disliked_names_provider),
    ) -> DislikedNamesResponse:
        return DislikedNamesResponse(names=provider())

    @api.post(
        "/disliked-recipes",
        response_model=DislikedRecipe,
        status_code=status.HTTP_201_CREATED,
        summary="Mark a recipe as disliked",
    )
    def disliked_add(
        response: Response,
        payload: DislikedRecipeRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        adder: deps.DislikedAdder = Depends(deps.get_disliked_adder),
    ) -> DislikedRecipe:
        entry, created = adder(payload.name)
        if not created:
            response.status_code = status.HTTP_200_OK
        return entry

    @api.post(
        "/disliked-recipes/check",
        response_model=DislikedCheckResponse,
        summary="Check whether a recipe is disliked",
    )
    def disliked_check(
        payload: DislikedRecipeRequest = Body(...),
        checker: deps.DislikedChecker = Depends(deps.get_disliked_checker),
    ) -> DislikedCheckResponse:
        name = _require_text(payload.name, "Recipe name is required")
        return DislikedCheckResponse(is_disliked=checker(name))

    @api.delete(
        "/disliked-recipes/{name}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Remove a disliked recipe",
    )
    def disliked_remove(
        name: str,
        auth: None = Depends(deps.require_api_token),
        remover: deps.DislikedRemover = Depends(deps.get_disliked_remover),
    ) -> Response:
        remover(name)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    application.include_router(api)

    @application.get("/metrics", include_in_schema=False)
    def metrics_endpoint() -> Response:
        data = generate_latest()
        return Response(content=data, media_type=CONTENT_TYPE_LATEST)

    return application


class StorageAreaCreateRequest(BaseModel):
    name: str = Field(max_length=100)
    icon: AreaIcon = "package"
    color: AreaColor = "slate"


class StorageAreaUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    icon: Optional[AreaIcon] = None
    color: Optional[AreaColor] = None
    order: Optional[int] = Field(default=None, ge=0)


class StorageAreaReorderRequest(BaseModel):
    ids: list[str]


class ItemCreateRequest(BaseModel):
    name: str = Field(max_length=255)
    quantity: int
    storage_area_id: str
    expiry_date: Optional[date] = None


class ItemQuantityRequest(BaseModel):
    quantity: int


class ItemOpenRequest(BaseModel):
    quantity_to_open: int = 1


class ItemOpenResponse(BaseModel):
    items: list[PantryItem]


class AIStatusResponse(BaseModel):
    available: bool
    provider: str
    message: str


class GenerateRequest(BaseModel):
    prompt: str = ""


class TextResultResponse(BaseModel):
    result: str


class ItemNamesRequest(BaseModel):
    items: list[str]


class SuggestFromRecipesRequest(BaseModel):
    recipes: list[str] = Field(default_factory=list)
    pantry_items: list[str] = Field(default_factory=list)


class RecipeSuggestionsResponse(BaseModel):
    recipes: list[RecipeSuggestion]


class StorageTipsRequest(BaseModel):
    item_name: str
    storage_area: str


class ScanRequest(BaseModel):
    image: str = Field(default="", description="Base64 image data or a data: URL")


class ScanTextResponse(BaseModel):
    text: str


class ScanLinesResponse(BaseModel):
    lines: list[str]


class ScanItemsResponse(BaseModel):
    items: list[str]
    raw: list[str]
    filtered: bool = False


class RecipeSearchRequest(BaseModel):
    ingredient: str = ""


class DislikedRecipeRequest(BaseModel):
    name: str = ""


class DislikedNamesResponse(BaseModel):
    names: list[str]


class DislikedCheckResponse(BaseModel):
    is_disliked: bool


app = create_app()

__all__ = ["app", "create_app"]
