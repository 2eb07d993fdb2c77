from __future__ import annotations

import datetime as dt
from typing import Any

UTC = dt.timezone.utc


def utcnow() -> dt.datetime:
    return dt.datetime.now(UTC)


def parse_date(value: Any) -> dt.date | None:
    """
    Accept a date, a datetime, or an ISO string ("2024-01-01" or a full timestamp).

    Returns None for anything that cannot be read as a calendar date.
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            return dt.date.fromisoformat(s)
        except ValueError:
            pass
        try:
            return dt.datetime.fromisoformat(s.replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def format_date(value: Any, dash: str = "-") -> str:
    if value is None:
        return dash
    d = parse_date(value)
    if d is None:
        return str(value)
    return d.isoformat()
