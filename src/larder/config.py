"""Settings for the store, HTTP server and external collaborators."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Runtime settings; see ``ENV_FIELDS`` for the matching environment variables."""

    database_path: Path = Field(
        default=Path("./data/larder.db"),
        description="SQLite database location.",
    )
    seed_default_areas: bool = Field(
        default=True,
        description="Create the fridge/freezer/pantry areas when the store is empty.",
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token required for mutating endpoints.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    log_requests: bool = Field(
        default=True,
        description="Emit request access logs when true.",
    )
    ocr_default_lang: str = Field(
        default="eng",
        description="Tesseract language code used for receipt scans.",
    )
    llm_provider: str = Field(
        default="mistral",
        description="Text generation provider (mistral, openai or ollama).",
    )
    llm_base_url: Optional[str] = Field(
        default=None,
        description="Override for the provider base URL (required for openai/ollama).",
    )
    llm_api_key: Optional[str] = Field(
        default=None,
        description="API key sent as a bearer token to the provider.",
    )
    llm_model: str = Field(
        default="mistral-small-latest",
        description="Model identifier passed to the text generation endpoint.",
    )
    llm_temperature: float = Field(
        default=0.3,
        description="Sampling temperature for text generation.",
    )
    llm_max_tokens: int = Field(
        default=1024,
        description="Maximum tokens to request per completion.",
    )
    llm_timeout: float = Field(
        default=30.0,
        description="Seconds before a text generation request is abandoned.",
    )
    recipe_api_base_url: str = Field(
        default="https://www.themealdb.com/api/json/v1/1",
        description="TheMealDB-compatible recipe directory base URL.",
    )
    recipe_api_timeout: float = Field(
        default=10.0,
        description="Seconds before a recipe directory request is abandoned.",
    )

    model_config = ConfigDict(frozen=True)


def _coerce_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _strip_lower(value: str) -> str:
    return value.strip().lower()


# Environment variable -> (settings field, converter). Values the converter
# rejects with ValueError are ignored and the field keeps its default.
ENV_FIELDS: dict[str, tuple[str, Callable[[str], Any]]] = {
    "LARDER_DATABASE_PATH": ("database_path", Path),
    "LARDER_SEED_DEFAULT_AREAS": ("seed_default_areas", _coerce_bool),
    "LARDER_API_TOKEN": ("api_token", str),
    "LARDER_LOG_LEVEL": ("log_level", str),
    "LARDER_LOG_FORMAT": ("log_format", _strip_lower),
    "LARDER_LOG_REQUESTS": ("log_requests", _coerce_bool),
    "LARDER_OCR_LANG": ("ocr_default_lang", str),
    "LARDER_LLM_PROVIDER": ("llm_provider", _strip_lower),
    "LARDER_LLM_BASE_URL": ("llm_base_url", str),
    "LARDER_LLM_MODEL": ("llm_model", str),
    "LARDER_LLM_TEMPERATURE": ("llm_temperature", float),
    "LARDER_LLM_MAX_TOKENS": ("llm_max_tokens", int),
    "LARDER_LLM_TIMEOUT": ("llm_timeout", float),
    "LARDER_RECIPE_API_BASE_URL": ("recipe_api_base_url", str),
    "LARDER_RECIPE_API_TIMEOUT": ("recipe_api_timeout", float),
}
LLM_KEY_VARIABLES = ("LARDER_LLM_API_KEY", "MISTRAL_API_KEY")


def _read_dotenv(path: Path) -> dict[str, str]:
    if not path.is_file():
        return {}
    entries: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line.startswith("export "):
            line = line[len("export ") :]
        key, sep, value = line.partition("=")
        if not sep or key.startswith("#"):
            continue
        entries[key.strip()] = value.strip().strip("'\"")
    return entries


def _environment() -> dict[str, str]:
    """Process environment layered over ``.env`` then ``.env.local``."""

    merged: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        merged.update(_read_dotenv(candidate))
    merged.update({key: value for key, value in os.environ.items() if value})
    return merged


def _load_from_env() -> dict[str, Any]:
    environment = _environment()
    overrides: dict[str, Any] = {}
    for variable, (field, convert) in ENV_FIELDS.items():
        raw = environment.get(variable)
        if not raw:
            continue
        try:
            overrides[field] = convert(raw)
        except ValueError:
            logger.warning("Ignoring malformed %s=%r", variable, raw)

    api_key = next((environment[name] for name in LLM_KEY_VARIABLES if environment.get(name)), None)
    if api_key:
        overrides["llm_api_key"] = api_key
    return overrides


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
