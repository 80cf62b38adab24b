"""Tests for date parsing and week bounds."""
from datetime import date, datetime, timedelta

import pytest

from finance_behavior.errors import InvalidInputError
from finance_behavior.utils.dates import (
    format_datetime,
    parse_target_date,
    previous_month_bounds,
    previous_week_bounds,
    week_bounds,
)


def test_parse_plain_date_is_midnight():
    assert parse_target_date("2024-06-12") == datetime(2024, 6, 12, 0, 0)


def test_parse_missing_date_defaults_to_today():
    """No value means midnight of today."""
    assert parse_target_date(None, today=date(2024, 6, 12)) == datetime(2024, 6, 12)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-06-12T09:10:00", datetime(2024, 6, 12, 9, 10)),
        ("2024-06-12T09:10:00Z", datetime(2024, 6, 12, 9, 10)),
        ("2024-06-12T09:10:00+02:00", datetime(2024, 6, 12, 9, 10)),
        ("2024-06-12 09:10:00", datetime(2024, 6, 12, 9, 10)),
        ("  2024-06-12  ", datetime(2024, 6, 12)),
    ],
)
def test_parse_datetime_forms(value, expected):
    assert parse_target_date(value) == expected


@pytest.mark.parametrize("value", ["", "   ", "not-a-date", "2024-13-01", "12/06/2024"])
def test_parse_invalid_date_raises(value):
    """A supplied but unparseable date is an error, never today."""
    with pytest.raises(InvalidInputError):
        parse_target_date(value)


@pytest.mark.parametrize("value", ["0001-01-01", "0001-01-03", "0001-01-07T12:00:00", "9999-12-27", "9999-12-31"])
def test_parse_date_at_calendar_limits_raises(value):
    """The week and the week before it must both be representable."""
    with pytest.raises(InvalidInputError):
        parse_target_date(value)


@pytest.mark.parametrize("value, expected", [("0001-01-08", datetime(1, 1, 8)), ("9999-12-26", datetime(9999, 12, 26))])
def test_parse_date_just_inside_calendar_limits(value, expected):
    assert parse_target_date(value) == expected


def test_week_bounds_for_wednesday():
    assert week_bounds(date(2024, 6, 12)) == (date(2024, 6, 10), date(2024, 6, 16))


def test_week_bounds_on_monday_and_sunday():
    assert week_bounds(date(2024, 6, 10)) == (date(2024, 6, 10), date(2024, 6, 16))
    assert week_bounds(date(2024, 6, 16)) == (date(2024, 6, 10), date(2024, 6, 16))


def test_week_bounds_accepts_datetime():
    assert week_bounds(datetime(2024, 6, 16, 23, 59, 59)) == (date(2024, 6, 10), date(2024, 6, 16))


def test_week_bounds_across_year_end():
    assert week_bounds(date(2025, 1, 1)) == (date(2024, 12, 30), date(2025, 1, 5))


def test_week_bounds_hold_for_every_day():
    """Start is a Monday on or before the day, end is the Sunday six days later."""
    day = date(2023, 1, 1)
    for _ in range(3 * 366):
        start, end = week_bounds(day)
        assert start.weekday() == 0
        assert end.weekday() == 6
        assert start <= day <= end
        assert end - start == timedelta(days=6)
        day += timedelta(days=1)


def test_previous_week_bounds():
    assert previous_week_bounds(date(2024, 6, 12)) == (date(2024, 6, 3), date(2024, 6, 9))


def test_previous_month_bounds_handles_year_transition():
    start, end = previous_month_bounds(date(2025, 1, 5))
    assert start == date(2024, 12, 1)
    assert end == date(2024, 12, 31)


def test_format_datetime():
    assert format_datetime(datetime(2024, 6, 12)) == "2024-06-12 00:00:00"
