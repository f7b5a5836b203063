"""Tests for cell-level number and timestamp parsing."""

from __future__ import annotations

from datetime import datetime

import pytest

from radar_graphs.ingest.values import parse_number, parse_timestamp


# -----------------------------------------------------------------------
# parse_number
# -----------------------------------------------------------------------


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1.5", 1.5),
        ("  -3e2 ", -300.0),
        ("1,5", 1.5),
        ("0", 0.0),
        ("-0,25", -0.25),
    ],
)
def test_parse_number_accepts(text: str, expected: float) -> None:
    assert parse_number(text) == pytest.approx(expected)


@pytest.mark.parametrize("text", ["", "   ", "abc", "1_000", "1_5", "1.2.3", None])
def test_parse_number_rejects(text) -> None:
    assert parse_number(text) is None


# -----------------------------------------------------------------------
# parse_timestamp
# -----------------------------------------------------------------------


def test_parse_timestamp_iso() -> None:
    assert parse_timestamp("2024-01-02 03:04:05") == datetime(2024, 1, 2, 3, 4, 5)


def test_parse_timestamp_iso_t_with_fraction() -> None:
    assert parse_timestamp("2024-01-02T03:04:05.250") == datetime(2024, 1, 2, 3, 4, 5, 250000)


def test_parse_timestamp_dotted_is_day_first() -> None:
    assert parse_timestamp("02.01.2024 03:04:05") == datetime(2024, 1, 2, 3, 4, 5)


def test_parse_timestamp_slashed_is_month_first() -> None:
    assert parse_timestamp("01/02/2024 03:04:05") == datetime(2024, 1, 2, 3, 4, 5)


def test_parse_timestamp_flexible_fallback() -> None:
    assert parse_timestamp("Jan 2 2024 10:00") == datetime(2024, 1, 2, 10, 0)


@pytest.mark.parametrize("text", ["", "hello", "12.5", "42", "now", None])
def test_parse_timestamp_rejects(text) -> None:
    assert parse_timestamp(text) is None
