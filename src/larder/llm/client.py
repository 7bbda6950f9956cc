"""Chat-completion client for Mistral, OpenAI-compatible and Ollama endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from larder.config import Settings, get_settings
from larder.errors import EmptyResponseError, LLMUnavailableError, UpstreamError

logger = logging.getLogger(__name__)

MISTRAL_BASE_URL = "https://api.mistral.ai/v1"
SUPPORTED_PROVIDERS = ("mistral", "openai", "ollama")


@dataclass(frozen=True)
class LLMConfig:
    """Resolved text generation settings; ``available`` is decided once here."""

    provider: str
    base_url: Optional[str]
    api_key: Optional[str]
    model: str
    temperature: float = 0.3
    max_tokens: int = 1024
    timeout: float = 30.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMConfig":
        provider = (settings.llm_provider or "mistral").strip().lower()
        base_url = settings.llm_base_url
        if provider == "mistral" and not base_url:
            base_url = MISTRAL_BASE_URL
        return cls(
            provider=provider,
            base_url=base_url.rstrip("/") if base_url else None,
            api_key=settings.llm_api_key,
            model=settings.llm_model,
            temperature=max(0.0, float(settings.llm_temperature)),
            max_tokens=max(1, int(settings.llm_max_tokens)),
            timeout=settings.llm_timeout,
        )

    @property
    def available(self) -> bool:
        if self.provider not in SUPPORTED_PROVIDERS or not self.base_url:
            return False
        if self.provider == "mistral":
            return bool(self.api_key)
        return True

    @property
    def unavailable_reason(self) -> str:
        if self.provider not in SUPPORTED_PROVIDERS:
            return f"Unsupported LLM provider '{self.provider}'."
        if self.provider == "mistral" and not self.api_key:
            return "Mistral API not configured. Set LARDER_LLM_API_KEY or MISTRAL_API_KEY."
        if not self.base_url:
            return f"No base URL configured for LLM provider '{self.provider}'."
        return ""


class TextGenerator:
    """Send one user prompt to the configured provider and return the reply text."""

    def __init__(
        self,
        config: LLMConfig,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        if not config.available:
            logger.warning("Text generation disabled: %s", config.unavailable_reason)

    @property
    def available(self) -> bool:
        return self._config.available

    @property
    def provider(self) -> str:
        return self._config.provider

    @property
    def status_message(self) -> str:
        if self.available:
            return f"{self._config.provider} ({self._config.model}) is configured and ready"
        return self._config.unavailable_reason

    def generate(self, prompt: str) -> str:
        if not self.available:
            raise LLMUnavailableError(self._config.unavailable_reason)

        messages = [{"role": "user", "content": prompt}]
        try:
            if self._config.provider == "ollama":
                content = self._ollama_chat(messages)
            else:
                content = self._completions_chat(messages)
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "LLM request failed status=%s provider=%s",
                exc.response.status_code,
                self._config.provider,
            )
            raise UpstreamError(
                f"{self._config.provider} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("LLM request error provider=%s: %s", self._config.provider, exc)
            raise UpstreamError(f"{self._config.provider} request failed: {exc}") from exc

        if not content.strip():
            raise EmptyResponseError(f"No response from {self._config.provider}")
        return content

    def _client(self) -> httpx.Client:
        headers = {}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        return httpx.Client(
            timeout=self._config.timeout,
            headers=headers,
            transport=self._transport,
        )

    def _completions_chat(self, messages: list[dict[str, str]]) -> str:
        endpoint = self._config.base_url or ""
        if not endpoint.endswith("/chat/completions"):
            endpoint = f"{endpoint}/chat/completions"
        payload = {
            "model": self._config.model,
            "temperature": self._config.temperature,
            "max_tokens": self._config.max_tokens,
            "messages": messages,
        }
        with self._client() as client:
            response = client.post(endpoint, json=payload)
        response.raise_for_status()
        body = response.json()
        choices = body.get("choices") or []
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        return _content_text(message.get("content"))

    def _ollama_chat(self, messages: list[dict[str, str]]) -> str:
        endpoint = self._config.base_url or ""
        if not endpoint.endswith("/api/chat"):
            endpoint = f"{endpoint}/api/chat"
        payload = {
            "model": self._config.model,
            "messages": messages,
            "stream": False,
            "options": {
                "temperature": self._config.temperature,
                "num_predict": self._config.max_tokens,
            },
        }
        with self._client() as client:
            response = client.post(endpoint, json=payload)
        response.raise_for_status()
        message = response.json().get("message") or {}
        return _content_text(message.get("content"))


def _content_text(content: Any) -> str:
    """Flatten string or chunked (list of ``{"text": ...}``) message content."""

    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for chunk in content:
            if isinstance(chunk, dict):
                parts.append(str(chunk.get("text") or ""))
            else:
                parts.append(str(chunk))
        return "".join(parts)
    return str(content)


def build_text_generator(settings: Settings | None = None) -> TextGenerator:
    """Create the text generator described by application settings."""

    return TextGenerator(LLMConfig.from_settings(settings or get_settings()))


__all__ = ["LLMConfig", "MISTRAL_BASE_URL", "TextGenerator", "build_text_generator"]
