"""Core utility functions for the application"""

from datetime import date
from typing import Optional


def today_iso(today: Optional[date] = None) -> str:
    """Return the calendar date as an ISO-8601 string (YYYY-MM-DD)."""
    return (today or date.today()).isoformat()


def is_future_date(value: str, today: Optional[date] = None) -> bool:
    """
    Check whether an ISO date string lies after today.

    Args:
        value: Date in YYYY-MM-DD form
        today: Reference date, defaults to the local clock

    Raises:
        ValueError: If the value is not an ISO date
    """
    return date.fromisoformat(value) > (today or date.today())
