"""
climate_pipeline/processing/sanitizer.py

Per-series range, future-date and staleness policy.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Sequence

from climate_pipeline.domain.points import DailyPoint, parse_iso_date, utc_today
from climate_pipeline.processing.normalizer import normalize_points

FUTURE_TOLERANCE_DAYS = 0


@dataclass(frozen=True)
class SanitizationPolicy:
    """
    Accepted value range and maximum age of the latest point, in days.
    """

    min_value: float
    max_value: float
    max_age_days: int


def sanitize_series(
    points: Sequence[DailyPoint],
    policy: SanitizationPolicy,
    *,
    today: date | None = None,
    future_tolerance_days: int = FUTURE_TOLERANCE_DAYS,
) -> list[DailyPoint]:
    """
    Filter a series and gate it on freshness.

    Out-of-range and future-dated points are dropped first. If the newest
    remaining point is older than `policy.max_age_days` the whole series is
    rejected and an empty list is returned.
    """

    reference_day = today or utc_today()
    future_limit = reference_day + timedelta(days=future_tolerance_days)

    kept: list[DailyPoint] = []
    for point in points:
        if not policy.min_value <= point.value <= policy.max_value:
            continue
        point_day = parse_iso_date(point.date)
        if point_day is None or point_day > future_limit:
            continue
        kept.append(point)

    normalized = normalize_points(kept)
    if not normalized:
        return []

    latest_day = parse_iso_date(normalized[-1].date)
    if latest_day is None:
        return []
    age_days = (reference_day - latest_day).days
    if age_days > policy.max_age_days:
        return []
    return normalized
