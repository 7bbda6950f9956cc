"""Logging setup with JSON output and redaction of configured secrets."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Iterable, Sequence

REDACTED = "[redacted]"

# Header/query shapes that carry credentials regardless of configured secrets.
_CREDENTIAL_PATTERNS = (
    re.compile(r"(Bearer\s+)([A-Za-z0-9\-._~+/=]+)", re.IGNORECASE),
    re.compile(r"(api_token=)([^&\s]+)", re.IGNORECASE),
    re.compile(r"(X-API-Key[=:]\s*)([^&\s]+)", re.IGNORECASE),
)

# Attributes copied into JSON payloads when handlers attach them via `extra=`.
_STRUCTURED_FIELDS = ("request_id", "item_id", "storage_area_id", "operation")


def redact(message: str, secrets: Sequence[str] = ()) -> str:
    """Return ``message`` with credential patterns and known secrets masked."""

    for pattern in _CREDENTIAL_PATTERNS:
        message = pattern.sub(r"\1" + REDACTED, message)
    for secret in secrets:
        if secret:
            message = message.replace(secret, REDACTED)
    return message


class SensitiveDataFilter(logging.Filter):
    """Filter that rewrites log records so configured secrets never reach handlers."""

    def __init__(self, secrets: Iterable[str]):
        super().__init__()
        self._secrets = tuple(secret.strip() for secret in secrets if secret and secret.strip())

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401 - standard interface
        message = record.getMessage()
        cleaned = redact(message, self._secrets)
        if cleaned != message:
            record.msg = cleaned
            record.args = ()

        for key, value in list(vars(record).items()):
            if isinstance(value, str) and key not in {"msg", "message"}:
                setattr(record, key, redact(value, self._secrets))
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line, carrying request-scoped extras when present."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - override
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in _STRUCTURED_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info

        return json.dumps(payload, ensure_ascii=True, default=str)


def configure_logging(level_name: str, fmt: str, secrets: Iterable[str]) -> None:
    """Install a single redacting root handler and route uvicorn loggers through it."""

    level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)

    handler = logging.StreamHandler()
    if (fmt or "plain").lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S%z",
            )
        )

    redactor = SensitiveDataFilter(secrets)
    handler.addFilter(redactor)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    logging.captureWarnings(True)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        server_logger = logging.getLogger(name)
        server_logger.handlers = []
        server_logger.setLevel(level)
        server_logger.propagate = True
        server_logger.addFilter(redactor)

    # SQL echo is noisy at INFO; only surface it when explicitly debugging.
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if level <= logging.DEBUG else logging.WARNING
    )


__all__ = ["REDACTED", "JsonFormatter", "SensitiveDataFilter", "configure_logging", "redact"]
