"""
climate_pipeline/domain/points.py

Daily point model and calendar helpers shared by parsers and builders.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_YEAR_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})$")
_SLASH_DATE_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")

MIN_DECIMAL_YEAR = 1800
MAX_DECIMAL_YEAR = 2200


@dataclass(frozen=True)
class DailyPoint:
    """
    One observation: an ISO calendar date (UTC, day precision) and a finite value.
    """

    date: str
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "value": self.value}


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def to_finite_number(value: Any) -> float | None:
    """
    Coerce ints, floats and numeric strings to a finite float; anything else is None.
    """

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    elif not isinstance(value, (int, float)):
        return None
    try:
        numeric = float(value)
    except (ValueError, OverflowError):
        return None
    return numeric if math.isfinite(numeric) else None


def parse_iso_date(value: Any) -> date | None:
    """
    Parse a strict `YYYY-MM-DD` string into a calendar date.
    """

    if not isinstance(value, str) or not ISO_DATE_PATTERN.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def format_date_from_parts(year: Any, month: Any, day: Any) -> str | None:
    """
    Build an ISO date from numeric parts; rollover dates such as Feb 30 are rejected.
    """

    parts = [to_finite_number(part) for part in (year, month, day)]
    if any(part is None or not float(part).is_integer() for part in parts):
        return None
    year_int, month_int, day_int = (int(part) for part in parts)  # type: ignore[arg-type]
    if not 1 <= month_int <= 12 or not 1 <= day_int <= 31:
        return None
    try:
        return date(year_int, month_int, day_int).isoformat()
    except (ValueError, OverflowError):
        return None


def date_from_year_and_day(year: int, day_of_year: int) -> str | None:
    """
    Convert a (year, 1-based day-of-year) pair to an ISO date inside that year.
    """

    if day_of_year < 1 or day_of_year > 366:
        return None
    try:
        candidate = date(year, 1, 1) + timedelta(days=day_of_year - 1)
    except (ValueError, OverflowError):
        return None
    if candidate.year != year:
        return None
    return candidate.isoformat()


def date_from_decimal_year(decimal_year: float) -> str | None:
    """
    Map a decimal year to the first day of the month its fraction falls in.

    Only month precision is recoverable from the fraction, so 2024.04 and 2024.08
    both land on 2024-01-01.
    """

    if not math.isfinite(decimal_year):
        return None
    year = math.trunc(decimal_year)
    if year < MIN_DECIMAL_YEAR or year > MAX_DECIMAL_YEAR:
        return None
    fraction = max(0.0, min(0.999999, decimal_year - year))
    month = max(1, min(12, math.floor(fraction * 12) + 1))
    return format_date_from_parts(year, month, 1)


def parse_loose_date_token(token: Any) -> str | None:
    """
    Accept ISO dates, `YYYY-M`, `M/D/YYYY` and decimal years.
    """

    value = str(token if token is not None else "").strip()
    if not value:
        return None
    if ISO_DATE_PATTERN.match(value):
        return value if parse_iso_date(value) else None

    year_month = _YEAR_MONTH_PATTERN.match(value)
    if year_month:
        return format_date_from_parts(int(year_month.group(1)), int(year_month.group(2)), 1)

    slash_date = _SLASH_DATE_PATTERN.match(value)
    if slash_date:
        month, day, year = (int(group) for group in slash_date.groups())
        return format_date_from_parts(year, month, day)

    decimal_year = to_finite_number(value)
    if decimal_year is not None:
        return date_from_decimal_year(decimal_year)
    return None


def day_of_year(value: str) -> int | None:
    parsed = parse_iso_date(value)
    if parsed is None:
        return None
    return parsed.timetuple().tm_yday


def year_and_day(value: str) -> tuple[int, int] | None:
    parsed = parse_iso_date(value)
    if parsed is None:
        return None
    return parsed.year, parsed.timetuple().tm_yday


def add_days(value: str, delta_days: int) -> str | None:
    parsed = parse_iso_date(value)
    if parsed is None:
        return None
    return (parsed + timedelta(days=delta_days)).isoformat()
