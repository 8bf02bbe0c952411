"""
climate_pipeline/processing/derived.py

Secondary series built from already parsed series: day-of-year climatology,
anomalies against that climatology, and date-aligned sums of two series.
"""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Sequence

from climate_pipeline.domain.points import DailyPoint, day_of_year, parse_iso_date
from climate_pipeline.processing.normalizer import normalize_points

BASELINE_START_YEAR = 1991
BASELINE_END_YEAR = 2020
ENVELOPE_MIN_SAMPLES = 5
ANOMALY_DECIMALS = 3


@dataclass(frozen=True)
class BaselineWindow:
    start_year: int = BASELINE_START_YEAR
    end_year: int = BASELINE_END_YEAR

    @property
    def label(self) -> str:
        return f"{self.start_year}-{self.end_year}"

    def contains(self, year: int) -> bool:
        return self.start_year <= year <= self.end_year


def build_climatology(
    points: Sequence[DailyPoint],
    window: BaselineWindow = BaselineWindow(),
    *,
    min_samples: int = 1,
) -> dict[int, float]:
    """
    Mean value per day-of-year over the years inside `window`.

    Buckets with fewer than `min_samples` observations are left out.
    """

    buckets: dict[int, list[float]] = defaultdict(list)
    for point in points:
        parsed = parse_iso_date(point.date)
        if parsed is None or not window.contains(parsed.year):
            continue
        doy = parsed.timetuple().tm_yday
        buckets[doy].append(point.value)

    return {
        doy: math.fsum(values) / len(values)
        for doy, values in sorted(buckets.items())
        if len(values) >= max(1, min_samples)
    }


def build_climatology_envelope(
    points: Sequence[DailyPoint],
    window: BaselineWindow = BaselineWindow(),
) -> dict[int, float]:
    """
    Climatology for chart overlays; sparse day-of-year buckets are dropped.
    """

    return build_climatology(points, window, min_samples=ENVELOPE_MIN_SAMPLES)


def derive_anomaly_series(
    points: Sequence[DailyPoint],
    climatology: dict[int, float],
) -> list[DailyPoint]:
    """
    Subtract the day-of-year baseline from every point.

    Points whose day-of-year has no baseline entry are dropped.
    """

    anomalies: list[DailyPoint] = []
    for point in points:
        doy = day_of_year(point.date)
        if doy is None:
            continue
        baseline = climatology.get(doy)
        if baseline is None:
            continue
        anomalies.append(
            DailyPoint(date=point.date, value=round(point.value - baseline, ANOMALY_DECIMALS))
        )
    return normalize_points(anomalies)


def merge_series_sum(left: Sequence[DailyPoint], right: Sequence[DailyPoint]) -> list[DailyPoint]:
    """
    Sum two series on the dates present in both; any other date is excluded.
    """

    right_by_date = {point.date: point.value for point in right}
    merged: list[DailyPoint] = []
    for point in left:
        other = right_by_date.get(point.date)
        if other is None:
            continue
        merged.append(DailyPoint(date=point.date, value=point.value + other))
    return normalize_points(merged)
