from __future__ import annotations

import time
from datetime import date, datetime


def parse_iso_date(value: str) -> date:
    """Parse an ISO date or datetime string into a date."""
    value = value.strip()
    try:
        return date.fromisoformat(value)
    except ValueError:
        return datetime.fromisoformat(value).date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def epoch_seconds() -> float:
    return time.time()


def elapsed_minutes(start: float, end: float) -> float:
    return (end - start) / 60.0


def format_epoch(seconds: float) -> str:
    return datetime.fromtimestamp(seconds).isoformat(timespec="seconds")
