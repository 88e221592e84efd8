"""Calendar-date arithmetic.

All helpers take and return ``datetime.date`` values: no time of day, no
timezone. Day counts come from proleptic ordinals, so DST changes and
serialization offsets can never shift a result by a day.
"""
import calendar
from datetime import date, datetime, timedelta
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from config.settings import SALARY_DAY_MIN, SALARY_DAY_MAX
from core.exceptions import InputError

DateLike = Union[date, datetime, str]


def parse_date(value: Optional[DateLike]) -> Optional[date]:
    """Reduce a date, datetime or ISO string to its calendar date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        # "2025-12-15 15:00:00" / "2025-12-15T15:00:00.000Z" -> 2025-12-15
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise InputError(f"Invalid calendar date: {value!r}")
    raise InputError(f"Unsupported date value: {value!r}")


def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)


def add_months(d: date, months: int) -> date:
    """Add N months, clamping to the end of shorter months."""
    return d + relativedelta(months=months)


def days_between(start: date, end: date) -> int:
    """Signed calendar-day distance from ``start`` to ``end``.

    ``days_between(a, a) == 0`` and ``days_between(a, b) == -days_between(b, a)``.
    """
    return end.toordinal() - start.toordinal()


def inclusive_days(start: date, end: date) -> int:
    """Days from ``start`` to ``end`` counting both ends (same day = 1)."""
    return days_between(start, end) + 1


def validate_salary_day(salary_day: int) -> int:
    if isinstance(salary_day, bool) or not isinstance(salary_day, int):
        raise InputError(f"Salary day must be an integer, got {salary_day!r}")
    if not SALARY_DAY_MIN <= salary_day <= SALARY_DAY_MAX:
        raise InputError(
            f"Salary day must be between {SALARY_DAY_MIN} and {SALARY_DAY_MAX}",
            {"salary_day": salary_day},
        )
    return salary_day


def clamp_day(year: int, month: int, day: int) -> date:
    """Day ``day`` of the month, or the month's last day when it is shorter."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def salary_date_for_month_offset(base_date: date, salary_day: int, offset: int) -> date:
    """Salary date ``offset`` months after ``base_date``'s month (offset 0 = same month)."""
    validate_salary_day(salary_day)
    target = date(base_date.year, base_date.month, 1) + relativedelta(months=offset)
    return clamp_day(target.year, target.month, salary_day)


def next_salary_date(from_date: date, salary_day: int) -> date:
    """Next salary date strictly after ``from_date``.

    The candidate is this month's (clamped) salary date. When that is on or
    before ``from_date`` - including ``from_date`` itself being payday - the
    following month's occurrence is returned instead. Feeding a result back in
    therefore always moves forward.
    """
    candidate = salary_date_for_month_offset(from_date, salary_day, 0)
    if candidate <= from_date:
        candidate = salary_date_for_month_offset(from_date, salary_day, 1)
    return candidate
