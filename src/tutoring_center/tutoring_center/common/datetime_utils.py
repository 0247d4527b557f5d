from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Any, Optional

_START_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def iso_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def localized_date(value: date) -> str:
    """Human date stored on finance entries (not sortable)."""
    return value.strftime("%d.%m.%Y")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def coerce_datetime(value: Any) -> Optional[datetime]:
    """Best-effort conversion of a stored timestamp into a naive local datetime.

    Documents may carry datetime objects, ISO strings (with or without a
    trailing 'Z') or epoch milliseconds. Anything else yields None.
    """

    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return datetime.combine(value, time.min)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def coerce_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return coerce_datetime(value).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and len(value.strip()) == 10:
        try:
            return parse_iso_date(value.strip())
        except ValueError:
            return None
    dt = coerce_datetime(value)
    return dt.date() if dt else None


def parse_start_time(value: Any) -> Optional[time]:
    """Start of a lesson from "HH:MM" or "HH:MM - HH:MM" (whitespace ignored)."""

    if not isinstance(value, str):
        return None
    m = _START_TIME_RE.match(re.sub(r"\s", "", value))
    if not m:
        return None
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        return None
    return time(hour=hours, minute=minutes)


def fractional_hour(value: time | datetime) -> float:
    """14:30 -> 14.5"""
    return value.hour + value.minute / 60
