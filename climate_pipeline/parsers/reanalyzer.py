"""
climate_pipeline/parsers/reanalyzer.py

Climate Reanalyzer daily JSON feeds (ERA5 2 m temperature, OISST v2.1 SST).

Each feed is a list of rows keyed by a 4-digit year, each carrying one value
per day-of-year starting Jan 1. Besides the year rows the feed carries
climatology rows labelled with their period, e.g. "1991-2020".
"""

from __future__ import annotations

import re
from typing import Any

from climate_pipeline.domain.points import (
    DailyPoint,
    date_from_year_and_day,
    to_finite_number,
    utc_today,
)
from climate_pipeline.processing.derived import ANOMALY_DECIMALS
from climate_pipeline.processing.normalizer import normalize_points
from climate_pipeline.schemas.providers import ReanalyzerYearRow, validate_reanalyzer_rows

_YEAR_LABEL = re.compile(r"^\d{4}$")
FIRST_YEAR = 1940
DEFAULT_CLIMATOLOGY_LABEL = "1991-2020"


def _row_year(row: ReanalyzerYearRow, current_year: int) -> int | None:
    label = row.label
    if not _YEAR_LABEL.match(label):
        return None
    year = int(label)
    if year < FIRST_YEAR or year > current_year + 1:
        return None
    return year


def _effective_length(values: list[Any]) -> int:
    # Incomplete years are padded with zeros (or blanks) at the tail.
    length = len(values)
    while length > 0:
        trailing = to_finite_number(values[length - 1])
        if trailing is None or trailing == 0:
            length -= 1
            continue
        break
    return length


def parse_reanalyzer_daily_json(payload: Any, *, current_year: int | None = None) -> list[DailyPoint]:
    """
    Convert year rows into dated points, dropping tail padding and bad cells.
    """

    year_limit = current_year if current_year is not None else utc_today().year
    points: list[DailyPoint] = []
    for row in validate_reanalyzer_rows(payload):
        year = _row_year(row, year_limit)
        if year is None:
            continue
        values = row.values()
        for index in range(_effective_length(values)):
            numeric = to_finite_number(values[index])
            if numeric is None:
                continue
            date_text = date_from_year_and_day(year, index + 1)
            if date_text is None:
                continue
            points.append(DailyPoint(date=date_text, value=numeric))
    return normalize_points(points)


def find_climatology_row(payload: Any, label: str = DEFAULT_CLIMATOLOGY_LABEL) -> ReanalyzerYearRow | None:
    for row in validate_reanalyzer_rows(payload):
        if row.label == label:
            return row
    return None


def parse_reanalyzer_daily_anomaly_json(
    payload: Any,
    climatology_label: str = DEFAULT_CLIMATOLOGY_LABEL,
    *,
    current_year: int | None = None,
) -> list[DailyPoint]:
    """
    Anomaly of every year row against the feed's own climatology row.

    Value = raw - climatology at the same day index, rounded to 3 decimals.
    Without a climatology row nothing can be resolved and the result is empty.
    """

    baseline_row = find_climatology_row(payload, climatology_label)
    if baseline_row is None:
        return []
    baseline = [to_finite_number(value) for value in baseline_row.values()]
    if not baseline:
        return []

    year_limit = current_year if current_year is not None else utc_today().year
    points: list[DailyPoint] = []
    for row in validate_reanalyzer_rows(payload):
        year = _row_year(row, year_limit)
        if year is None:
            continue
        values = row.values()
        for index in range(min(_effective_length(values), len(baseline))):
            numeric = to_finite_number(values[index])
            reference = baseline[index]
            if numeric is None or reference is None:
                continue
            date_text = date_from_year_and_day(year, index + 1)
            if date_text is None:
                continue
            points.append(
                DailyPoint(date=date_text, value=round(numeric - reference, ANOMALY_DECIMALS))
            )
    return normalize_points(points)
