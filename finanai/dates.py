"""Calendar helpers: month roll-forward with end-of-month clamping."""

from datetime import date

from dateutil.relativedelta import relativedelta


def add_months(year: int, month0: int, day: int, delta: int) -> str:
    """Add ``delta`` months to a calendar date and return it as ISO string.

    ``month0`` is zero-based (January is 0). When the target month is
    shorter than ``day`` the result is clamped to its last day, so
    ``add_months(2024, 0, 31, 1)`` is ``"2024-02-29"``.
    """
    return shift_months(date(year, month0 + 1, day), delta).isoformat()


def shift_months(d: date, delta: int) -> date:
    """Date ``delta`` months after ``d`` (negative moves backwards)."""
    return d + relativedelta(months=delta)


def month_bounds(d: date) -> tuple[date, date]:
    """First and last day of the month containing ``d``."""
    first = d.replace(day=1)
    last = first + relativedelta(months=1, days=-1)
    return first, last


def month_key(d: date) -> str:
    """``YYYY-MM`` key of the month containing ``d``."""
    return f"{d.year:04d}-{d.month:02d}"


def days_until(target: date, today: date) -> int:
    """Whole days from ``today`` to ``target`` (negative when past)."""
    return (target - today).days


def sync_window_start(today: date, months_back: int) -> date:
    """First day of the month ``months_back`` months before ``today``."""
    return shift_months(today.replace(day=1), -months_back)
