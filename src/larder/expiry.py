"""Shelf-life arithmetic applied when an item is opened."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional


def days_until(expiry_date: date, today: date) -> int:
    """Whole days from ``today`` to ``expiry_date``; negative once expired."""

    return (expiry_date - today).days


def opened_expiry_date(expiry_date: Optional[date], today: Optional[date] = None) -> Optional[date]:
    """Return the expiry an item gets once opened.

    Opening halves the remaining shelf life, never going below one day. Items
    without an expiry, or with one day or less left, keep their date.
    """

    if expiry_date is None:
        return None
    today = today or date.today()
    remaining = days_until(expiry_date, today)
    if remaining <= 1:
        return expiry_date
    return today + timedelta(days=max(1, remaining // 2))


__all__ = ["days_until", "opened_expiry_date"]
