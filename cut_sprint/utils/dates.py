from datetime import date, timedelta
from typing import Tuple

SUNDAY, SATURDAY = 0, 6


def day_of_week(d: date) -> int:
    """0=Sunday .. 6=Saturday, the convention stored in weekend_start_day/weekend_end_day."""
    return (d.weekday() + 1) % 7


def week_bounds(d: date) -> Tuple[date, date]:
    """Monday..Sunday of the ISO week containing d."""
    start = d - timedelta(days=d.weekday())
    return start, start + timedelta(days=6)


def in_day_range(dow: int, start_day: int, end_day: int) -> bool:
    if start_day <= end_day:
        return start_day <= dow <= end_day
    # range wraps past Saturday, e.g. Friday(5) -> Sunday(0)
    return dow >= start_day or dow <= end_day


def is_calendar_weekend(d: date) -> bool:
    return day_of_week(d) in (SATURDAY, SUNDAY)
