"""Lexical heuristics that turn OCR'd receipt lines into probable item names."""

from __future__ import annotations

import re
from typing import Iterable, List

_NON_ITEM_MARKERS = (
    "total",
    "subtotal",
    "tax",
    "change",
    "cash",
    "credit",
    "debit",
    "thank you",
    "receipt",
)

_PRICE_ONLY_RE = re.compile(r"^\d+[.,]\d{2}$")
_DATE_ONLY_RE = re.compile(r"^\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}$")
_TRAILING_PRICE_RE = re.compile(r"\$?\d+[.,]\d{2}\s*$")
_LEADING_QUANTITY_RE = re.compile(r"^\d+\s*[xX]\s*")
_CARD_NUMBER_RE = re.compile(r"(?<!\d)\d(?:[\s-]?\d){11,18}(?!\d)")


def mask_card_numbers(text: str) -> str:
    """Replace the middle digits of anything shaped like a payment card number."""

    def _mask(match: re.Match[str]) -> str:
        digits = re.sub(r"\D", "", match.group())
        if len(digits) < 12:
            return match.group()
        return digits[:4] + "*" * (len(digits) - 8) + digits[-4:]

    return _CARD_NUMBER_RE.sub(_mask, text)


def split_lines(text: str) -> List[str]:
    """Non-empty, trimmed lines of ``text``."""

    return [line.strip() for line in text.splitlines() if line.strip()]


def is_probable_item_line(line: str) -> bool:
    stripped = line.strip()
    lower = stripped.lower()
    if any(marker in lower for marker in _NON_ITEM_MARKERS):
        return False
    if _PRICE_ONLY_RE.match(stripped) or _DATE_ONLY_RE.match(stripped):
        return False
    return len(stripped) >= 2


def clean_item_line(line: str) -> str:
    """Strip a trailing price and a leading ``2x`` style quantity."""

    cleaned = _TRAILING_PRICE_RE.sub("", line).strip()
    return _LEADING_QUANTITY_RE.sub("", cleaned).strip()


def probable_item_names(lines: Iterable[str]) -> List[str]:
    names = []
    for line in lines:
        if not is_probable_item_line(line):
            continue
        cleaned = clean_item_line(line)
        if len(cleaned) > 1:
            names.append(cleaned)
    return names


__all__ = [
    "clean_item_line",
    "is_probable_item_line",
    "mask_card_numbers",
    "probable_item_names",
    "split_lines",
]
