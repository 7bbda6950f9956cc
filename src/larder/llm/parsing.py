"""Best-effort extraction of JSON arrays from free-form model replies."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List

logger = logging.getLogger(__name__)

_JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def extract_json_array(text: Any) -> List[Any]:
    """Return the first ``[...]`` span of ``text`` decoded as a list.

    The span runs from the first opening bracket to the last closing one.
    Missing brackets, malformed JSON or a non-list payload all yield ``[]``.
    """

    if not isinstance(text, str) or not text:
        return []
    match = _JSON_ARRAY_RE.search(text)
    if match is None:
        logger.debug("No JSON array found in model reply")
        return []
    try:
        parsed = json.loads(match.group(0))
    except (json.JSONDecodeError, RecursionError) as exc:
        logger.warning("Failed to parse JSON array from model reply: %s", exc)
        return []
    if not isinstance(parsed, list):
        return []
    return parsed


def string_list(value: Any) -> List[str]:
    """Keep the non-empty strings of ``value``, trimmed."""

    if not isinstance(value, list):
        return []
    return [entry.strip() for entry in value if isinstance(entry, str) and entry.strip()]


__all__ = ["extract_json_array", "string_list"]
