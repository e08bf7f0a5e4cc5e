"""Tests for the --until/--since date window."""

from datetime import date, timedelta

import pytest

from runalyze_dump.dates import (
    DateValidationError,
    next_monday,
    parse_duration,
    parse_until_date,
    validate_and_parse_dates,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-01-02", date(2024, 1, 8)),   # Tuesday
        ("2024-01-07", date(2024, 1, 8)),   # Sunday
        ("2024-01-01", date(2024, 1, 1)),   # already Monday
        ("2024-01", date(2024, 2, 5)),      # Jan 31 is a Wednesday
        ("2024", date(2025, 1, 6)),         # Dec 31 is a Tuesday
    ],
)
def test_parse_until_date_moves_to_monday(value, expected):
    assert parse_until_date(value) == expected


def test_next_monday_is_identity_on_mondays():
    monday = date(2024, 3, 4)
    assert next_monday(monday) == monday
    assert next_monday(monday + timedelta(days=1)) == date(2024, 3, 11)


@pytest.mark.parametrize(
    "value, days",
    [("30d", 30), ("2w", 14), ("6m", 180), ("1y", 365)],
)
def test_parse_duration(value, days):
    assert parse_duration(value) == timedelta(days=days)


@pytest.mark.parametrize("value", ["30x", "1y2w", "w", "", "-3d"])
def test_parse_duration_rejects_invalid(value):
    with pytest.raises(DateValidationError):
        parse_duration(value)


def test_specific_dates():
    since, until = validate_and_parse_dates("2024-01-15", "2024-01-01")
    assert since == date(2024, 1, 1)
    assert until == date(2024, 1, 15)


def test_since_date_is_also_moved_to_monday():
    since, until = validate_and_parse_dates("2024-01", "2023-12-01")
    assert since == date(2023, 12, 4)
    assert until == date(2024, 2, 5)


def test_duration_since_is_relative_to_until():
    since, until = validate_and_parse_dates("2024-01-29", "2w")
    assert until - since == timedelta(days=14)


def test_defaults_to_four_weeks_before_next_monday():
    since, until = validate_and_parse_dates("", "", today=date(2024, 1, 3))
    assert until == date(2024, 1, 8)
    assert since == date(2023, 12, 11)


@pytest.mark.parametrize(
    "until_str, since_str",
    [
        ("2024-13-45", "2024-01-01"),
        ("2024-01-15", "2024-25-99"),
        ("2024-01-15", "30x"),
        ("2024-01-01", "2024-01-15"),  # since after until
        ("2024-01-01", "2024-01-01"),  # since equals until
    ],
)
def test_validation_errors(until_str, since_str):
    with pytest.raises(DateValidationError):
        validate_and_parse_dates(until_str, since_str)


def test_validation_error_is_a_value_error():
    with pytest.raises(ValueError):
        validate_and_parse_dates("2024-01-01", "2024-02-01")
