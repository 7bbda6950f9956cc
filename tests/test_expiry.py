"""Tests for opened-item shelf-life arithmetic."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from larder.expiry import days_until, opened_expiry_date

TODAY = date(2024, 3, 10)


def test_days_until_counts_calendar_days():
    assert days_until(TODAY + timedelta(days=4), TODAY) == 4
    assert days_until(TODAY - timedelta(days=2), TODAY) == -2


@pytest.mark.parametrize(
    "days_left, expected_days",
    [
        (10, 5),
        (11, 5),
        (3, 1),
        (2, 1),
    ],
)
def test_opening_halves_remaining_shelf_life(days_left, expected_days):
    expiry = TODAY + timedelta(days=days_left)

    assert opened_expiry_date(expiry, TODAY) == TODAY + timedelta(days=expected_days)


@pytest.mark.parametrize("days_left", [1, 0, -5])
def test_short_or_past_expiry_is_unchanged(days_left):
    expiry = TODAY + timedelta(days=days_left)

    assert opened_expiry_date(expiry, TODAY) == expiry


def test_missing_expiry_stays_missing():
    assert opened_expiry_date(None, TODAY) is None
