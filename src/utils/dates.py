from datetime import date, datetime
from typing import Optional, Union


def to_date_str(value: Union[str, date, datetime]) -> str:
    """Extract ``YYYY-MM-DD`` from a date, datetime or timestamp string.

    Only the calendar day is kept so comparisons never depend on the
    timezone the timestamp was rendered in.
    """
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    # "2026-02-27" or "2026-02-27T00:00:00+00:00"
    return str(value)[:10]


def today_str(today: Optional[date] = None) -> str:
    """Today's local calendar day as ``YYYY-MM-DD``."""
    return to_date_str(today or date.today())


def within_window(start, end, today: Optional[date] = None) -> bool:
    """True when today falls on or between the start and end days."""
    current = today_str(today)
    return to_date_str(start) <= current <= to_date_str(end)
