"""
Trip date backfill.

Runs before any model call and never involves the model: missing dates are
derived from today, the requested duration, and whichever date was given.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from tobugo.core.config import DEFAULT_LEAD_DAYS, DEFAULT_TRIP_DURATION_DAYS
from tobugo.core.errors import ValidationError
from tobugo.models.preference import TravelPreferences


def parse_date(value: str | date | None, field: str = "date") -> date:
    """Parse YYYY-MM-DD (a full ISO timestamp is accepted and truncated)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        raise ValidationError(f"Missing {field}", user_message=f"Missing {field}")
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise ValidationError(
            f"Invalid {field} format: {text!r}",
            user_message=f"Invalid {field} format",
        ) from None


def offset(value: date, days: int, field: str = "date") -> date:
    """value + days, as a ValidationError when the result leaves the calendar."""
    try:
        return value + timedelta(days=days)
    except OverflowError:
        raise ValidationError(
            f"{field} {value.isoformat()} shifted by {days} days is out of range",
            user_message="Trip dates are out of range",
        ) from None


def shift(value: str | date, days: int, field: str = "date") -> str:
    return offset(parse_date(value, field), days, field).isoformat()


def backfill_dates(preferences: TravelPreferences, today: date | None = None) -> TravelPreferences:
    """
    Return a copy of ``preferences`` with both dates set.

    - neither date: start a week from today, run for ``duration`` days
    - only start: end = start + duration - 1
    - only end: start = end - duration + 1
    - both: kept verbatim (validated, never adjusted)
    """
    duration = preferences.duration or DEFAULT_TRIP_DURATION_DAYS
    start, end = preferences.start_date, preferences.end_date

    if not start and not end:
        base = today or date.today()
        start_d = offset(base, DEFAULT_LEAD_DAYS, "start date")
        start = start_d.isoformat()
        end = offset(start_d, duration - 1, "end date").isoformat()
    elif start and not end:
        end = shift(start, duration - 1, "start date")
    elif end and not start:
        start = shift(end, -(duration - 1), "end date")

    start_d = parse_date(start, "start date")
    end_d = parse_date(end, "end date")
    if end_d < start_d:
        raise ValidationError(
            f"End date {end} is before start date {start}",
            user_message="End date must not be before start date",
        )

    return preferences.model_copy(update={"start_date": start, "end_date": end})


def trip_length(preferences: TravelPreferences) -> int:
    """Inclusive day count of a backfilled preferences record."""
    start_d = parse_date(preferences.start_date, "start date")
    end_d = parse_date(preferences.end_date, "end date")
    return (end_d - start_d).days + 1


__all__ = ["parse_date", "offset", "shift", "backfill_dates", "trip_length"]
