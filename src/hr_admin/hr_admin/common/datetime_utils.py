from __future__ import annotations

from datetime import date, datetime, timezone


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_utc() -> datetime:
    """Current UTC time as a naive datetime (the way DATETIME columns store it).

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def inclusive_days(start_date: date, end_date: date) -> int:
    """Number of calendar days in [start_date, end_date], both ends counted."""
    return (end_date - start_date).days + 1
