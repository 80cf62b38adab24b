"""Date parsing and calendar-week utilities."""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple

from finance_behavior.errors import InvalidInputError

DATETIME_STRING_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_target_date(s: Optional[str], today: Optional[date] = None) -> datetime:
    """
    Parse the ``date`` query value of an evaluation request.

    Supports:
    - plain dates: "2024-06-12"
    - ISO datetimes with or without offset: "2024-06-12T09:10:00", "2024-06-12T09:10:00Z"
    - space-separated datetimes: "2024-06-12 09:10:00"

    A missing value means midnight of ``today`` (local clock when not given).
    A value that was supplied but cannot be parsed is an error, never today.

    Returns:
        Naive datetime. An offset, if present, is dropped and the wall-clock
        value kept, so the calendar day is the one written in the string.

    Raises:
        InvalidInputError: If the string cannot be parsed, or the week or the
            week before it runs past the first or last representable date
    """
    if s is None:
        return datetime.combine(today or date.today(), time.min)

    value = s.strip()
    if not value:
        raise InvalidInputError("Empty date string")

    if value.endswith("Z"):
        value = value[:-1] + "+00:00"

    try:
        parsed = datetime.combine(date.fromisoformat(value), time.min)
    except ValueError:
        try:
            parsed = datetime.fromisoformat(value.replace(" ", "T", 1)).replace(tzinfo=None)
        except ValueError:
            raise InvalidInputError(
                f"Unable to parse date: {s!r}. Expected ISO format (e.g. '2024-06-12')"
            ) from None

    # Rules compare against the previous week, so both weeks must exist.
    try:
        previous_week_bounds(parsed)
    except OverflowError:
        raise InvalidInputError(
            f"Date {s!r} is outside the supported range: its week or the week before it "
            f"falls outside {date.min} to {date.max}"
        ) from None
    return parsed


def week_bounds(d: date) -> Tuple[date, date]:
    """Return the Monday on or before ``d`` and the Sunday on or after it."""
    if isinstance(d, datetime):
        d = d.date()
    start = d - timedelta(days=d.weekday())
    return start, start + timedelta(days=6)


def previous_week_bounds(d: date) -> Tuple[date, date]:
    start, _ = week_bounds(d)
    return week_bounds(start - timedelta(days=1))


def month_start(d: date) -> date:
    return d.replace(day=1)


def previous_month_bounds(d: date) -> Tuple[date, date]:
    """First and last day of the calendar month before ``d``."""
    last_day = month_start(d) - timedelta(days=1)
    return last_day.replace(day=1), last_day


def format_datetime(value: datetime) -> str:
    return value.strftime(DATETIME_STRING_FORMAT)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so stored timestamps compare safely."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
