from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Iterator, Union

DateLike = Union[date, datetime, str]

# date.fromisoformat (3.11+) also takes 20240101 / 2024-W01-1
_ISO_DAY = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


class InvalidDate(ValueError):
    """Raised for inputs that do not describe a valid civil date."""


def require_civil_date(value: DateLike, name: str = "date") -> date:
    """
    Coerce a date-like value into a civil (wall-clock) date.

    Parameters
    ----------
    value:
        `date`, `datetime` or ISO string "YYYY-MM-DD".
        A `datetime` keeps its own wall-clock date; it is never converted
        to UTC first, so 2024-01-01T00:30+09:00 stays 2024-01-01.
    name:
        Parameter name for error messages.

    Raises
    ------
    InvalidDate
        If the value is not a recognised type or not a valid calendar date.
    """
    # datetime is a subclass of date, check it first
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        s = value.strip()
        if not _ISO_DAY.fullmatch(s):
            raise InvalidDate(f"{name} must be YYYY-MM-DD (got {value!r})")
        try:
            return date.fromisoformat(s)
        except ValueError as e:
            raise InvalidDate(f"{name} is not a valid calendar date (got {value!r})") from e
    raise InvalidDate(f"{name} must be date, datetime or ISO string (got {type(value).__name__})")


def civil_date(year: int, month: int, day: int) -> date:
    """
    Build a civil date from components, failing fast on impossible dates
    (month 13, Feb 30, ...). Never clamps.
    """
    try:
        return date(int(year), int(month), int(day))
    except (TypeError, ValueError) as e:
        raise InvalidDate(f"invalid civil date: {year}-{month}-{day}") from e


def days_in_month(year: int, month: int) -> int:
    if not (1 <= int(month) <= 12):
        raise InvalidDate(f"month out of range: {month}")
    return calendar.monthrange(int(year), int(month))[1]


def iter_days(start: date, end: date) -> Iterator[date]:
    """
    Yield every civil date in [start, end], both ends included.
    Never computes a date past `end` (end may be date.max).
    """
    for i in range((end - start).days + 1):
        yield start + timedelta(days=i)
