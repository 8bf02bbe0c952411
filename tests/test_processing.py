"""
tests/test_processing.py

Pytest unit tests for the normalizer, the sanitizer and the derived-series
builders.

Coverage
--------
- Normalizer idempotence, last-write-wins duplicates, invalid date/value drops
- Sanitizer range, future-date and staleness gates
- Climatology round-trip for a constant series
- Envelope minimum sample count
- Sea-ice overlap merge
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from climate_pipeline.domain.points import DailyPoint
from climate_pipeline.processing import (
    BaselineWindow,
    SanitizationPolicy,
    build_climatology,
    build_climatology_envelope,
    derive_anomaly_series,
    merge_series_sum,
    normalize_points,
    sanitize_series,
)


def _daily(start: date, values: list[float]) -> list[DailyPoint]:
    return [
        DailyPoint(date=(start + timedelta(days=offset)).isoformat(), value=value)
        for offset, value in enumerate(values)
    ]


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------


class TestNormalizer:
    def test_sorted_ascending(self) -> None:
        points = normalize_points(
            [
                DailyPoint("2024-01-03", 3.0),
                DailyPoint("2024-01-01", 1.0),
                DailyPoint("2024-01-02", 2.0),
            ]
        )
        assert [point.date for point in points] == ["2024-01-01", "2024-01-02", "2024-01-03"]

    def test_duplicate_date_keeps_last_value(self) -> None:
        points = normalize_points([DailyPoint("2024-05-01", 10.0), DailyPoint("2024-05-01", 12.0)])
        assert points == [DailyPoint("2024-05-01", 12.0)]

    def test_invalid_dates_and_values_are_dropped(self) -> None:
        points = normalize_points(
            [
                {"date": "2024-1-1", "value": 1.0},
                {"date": "2024-02-30", "value": 1.0},
                {"date": "2024-03-01", "value": float("nan")},
                {"date": "2024-03-02", "value": float("inf")},
                {"date": "2024-03-03", "value": "4.5"},
                {"date": None, "value": 1.0},
                {"value": 1.0},
            ]
        )
        assert points == [DailyPoint("2024-03-03", 4.5)]

    def test_idempotent(self) -> None:
        raw = [
            DailyPoint("2024-01-02", 2.0),
            DailyPoint("2024-01-01", 1.0),
            DailyPoint("2024-01-02", 5.0),
            DailyPoint("bad", 9.0),
        ]
        once = normalize_points(raw)
        assert normalize_points(once) == once

    def test_empty_input(self) -> None:
        assert normalize_points([]) == []


# ---------------------------------------------------------------------------
# Sanitizer
# ---------------------------------------------------------------------------


TODAY = date(2024, 6, 30)


@pytest.fixture()
def policy() -> SanitizationPolicy:
    return SanitizationPolicy(min_value=0.0, max_value=30.0, max_age_days=20)


class TestSanitizer:
    def test_out_of_range_points_are_dropped(self, policy: SanitizationPolicy) -> None:
        points = [
            DailyPoint("2024-06-27", -1.0),
            DailyPoint("2024-06-28", 10.0),
            DailyPoint("2024-06-29", 31.0),
        ]
        assert sanitize_series(points, policy, today=TODAY) == [DailyPoint("2024-06-28", 10.0)]

    def test_range_bounds_are_inclusive(self, policy: SanitizationPolicy) -> None:
        points = [DailyPoint("2024-06-28", 0.0), DailyPoint("2024-06-29", 30.0)]
        assert len(sanitize_series(points, policy, today=TODAY)) == 2

    def test_future_points_are_dropped(self, policy: SanitizationPolicy) -> None:
        points = [DailyPoint("2024-06-30", 10.0), DailyPoint("2024-07-01", 11.0)]
        assert sanitize_series(points, policy, today=TODAY) == [DailyPoint("2024-06-30", 10.0)]

    def test_stale_series_is_rejected_entirely(self, policy: SanitizationPolicy) -> None:
        points = _daily(date(2024, 5, 1), [10.0] * 10)
        assert sanitize_series(points, policy, today=TODAY) == []

    def test_series_exactly_at_max_age_is_kept(self, policy: SanitizationPolicy) -> None:
        latest = TODAY - timedelta(days=20)
        points = [DailyPoint(latest.isoformat(), 5.0)]
        assert sanitize_series(points, policy, today=TODAY) == points

    def test_staleness_uses_latest_point_after_filtering(self, policy: SanitizationPolicy) -> None:
        points = [DailyPoint("2024-05-01", 10.0), DailyPoint("2024-06-29", 99.0)]
        assert sanitize_series(points, policy, today=TODAY) == []

    def test_empty_input(self, policy: SanitizationPolicy) -> None:
        assert sanitize_series([], policy, today=TODAY) == []


# ---------------------------------------------------------------------------
# Derived series
# ---------------------------------------------------------------------------


class TestClimatology:
    def test_constant_series_round_trip(self) -> None:
        value = 14.375
        points = _daily(date(1991, 1, 1), [value] * (date(2021, 1, 1) - date(1991, 1, 1)).days)
        climatology = build_climatology(points)

        assert len(climatology) == 366
        assert all(baseline == value for baseline in climatology.values())

        anomalies = derive_anomaly_series([DailyPoint("2024-03-15", value)], climatology)
        assert anomalies == [DailyPoint("2024-03-15", 0.0)]

    def test_points_outside_window_are_ignored(self) -> None:
        points = [
            DailyPoint("1990-01-01", 100.0),
            DailyPoint("1991-01-01", 10.0),
            DailyPoint("1992-01-01", 12.0),
            DailyPoint("2021-01-01", 100.0),
        ]
        assert build_climatology(points) == {1: 11.0}

    def test_custom_window(self) -> None:
        window = BaselineWindow(2000, 2001)
        assert window.label == "2000-2001"
        points = [DailyPoint("2000-01-02", 4.0), DailyPoint("2002-01-02", 8.0)]
        assert build_climatology(points, window) == {2: 4.0}

    def test_envelope_requires_five_samples(self) -> None:
        points = [DailyPoint(f"{year}-01-01", 1.0) for year in range(1991, 1996)]
        points += [DailyPoint(f"{year}-01-02", 2.0) for year in range(1991, 1995)]
        envelope = build_climatology_envelope(points)
        assert envelope == {1: 1.0}

    def test_anomaly_drops_days_without_baseline(self) -> None:
        climatology = {1: 10.0}
        points = [DailyPoint("2024-01-01", 10.5), DailyPoint("2024-01-02", 11.0)]
        assert derive_anomaly_series(points, climatology) == [DailyPoint("2024-01-01", 0.5)]


class TestMergeSeriesSum:
    def test_only_overlapping_dates_are_kept(self) -> None:
        arctic = [DailyPoint("2020-01-01", 10.0)]
        antarctic = [DailyPoint("2020-01-01", 5.0), DailyPoint("2020-01-02", 4.0)]
        assert merge_series_sum(arctic, antarctic) == [DailyPoint("2020-01-01", 15.0)]

    def test_no_overlap_yields_empty(self) -> None:
        assert merge_series_sum([DailyPoint("2020-01-01", 1.0)], [DailyPoint("2020-01-02", 1.0)]) == []
