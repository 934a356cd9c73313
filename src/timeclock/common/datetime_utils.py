from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Union

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)")


def parse_hhmm(value: str) -> time:
    """Parse HH:MM (or HH:MM:SS) string into time."""
    v = (value or "").strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"Invalid time {value!r} (expected HH:MM)")


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """Accept a datetime or an ISO-8601 string ('YYYY-MM-DDTHH:MM[:SS]')."""
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat((value or "").strip())
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid timestamp {value!r}")


def minutes_of_day(value: time) -> int:
    """Wall-clock minutes since midnight; seconds are truncated."""
    return value.hour * 60 + value.minute


def week_bounds(reference: date) -> tuple[date, date]:
    """Monday..Sunday of the ISO week containing ``reference``."""
    start = reference - timedelta(days=reference.weekday())
    return start, start + timedelta(days=6)


def month_bounds(reference: date) -> tuple[date, date]:
    last_day = calendar.monthrange(reference.year, reference.month)[1]
    return reference.replace(day=1), reference.replace(day=last_day)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
