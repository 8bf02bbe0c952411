"""
climate_pipeline/processing/normalizer.py

Collapse raw parsed points into a unique, ascending daily series.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from climate_pipeline.domain.points import DailyPoint, parse_iso_date, to_finite_number


def _point_fields(point: DailyPoint | Mapping[str, Any]) -> tuple[Any, Any]:
    if isinstance(point, DailyPoint):
        return point.date, point.value
    return point.get("date"), point.get("value")


def normalize_points(points: Iterable[DailyPoint | Mapping[str, Any]]) -> list[DailyPoint]:
    """
    Return points with unique valid dates sorted ascending.

    A later point for the same date replaces an earlier one, so input order
    decides which value survives a duplicate. Points whose date is not a real
    `YYYY-MM-DD` day or whose value is not finite are dropped.
    """

    by_date: dict[str, float] = {}
    for point in points:
        raw_date, raw_value = _point_fields(point)
        date_text = str(raw_date if raw_date is not None else "").strip()
        if parse_iso_date(date_text) is None:
            continue
        value = to_finite_number(raw_value)
        if value is None:
            continue
        by_date[date_text] = value

    return [DailyPoint(date=date_text, value=by_date[date_text]) for date_text in sorted(by_date)]
