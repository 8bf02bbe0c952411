"""
climate_pipeline/services/verification_service.py

Independent checks over a persisted dataset file.

The verifier re-reads the artifact from disk and never trusts in-memory state
from the update run. Problems are collected rather than raised: `errors` fail
the verification, `warnings` are informational.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Mapping, Sequence

from pydantic import TypeAdapter, ValidationError

from climate_pipeline.catalog import (
    ANOMALY_PAIRS,
    SEA_ICE_IDENTITY,
    VERIFICATION_RULES,
    VerificationRule,
)
from climate_pipeline.domain.points import parse_iso_date, to_finite_number, utc_today
from climate_pipeline.errors import DatasetRootError

logger = logging.getLogger(__name__)

SUMMARY_VALUE_TOLERANCE = 1e-9
SEA_ICE_TOLERANCE = 0.02
MAX_LISTED_MISMATCHES = 5
RECENT_WINDOW_DAYS = 365

_TIMESTAMP_ADAPTER = TypeAdapter(datetime)


@dataclass
class VerificationReport:
    """
    Collected verification problems for one artifact.
    """

    checked_series: int = 0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class _LatestPoint:
    date: str
    day: date
    value: float


def _is_object(value: Any) -> bool:
    return isinstance(value, dict)


def _format_date(value: Any) -> str:
    return value if isinstance(value, str) else "(missing)"


def _is_valid_timestamp(value: Any) -> bool:
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        _TIMESTAMP_ADAPTER.validate_python(value)
    except ValidationError:
        return False
    return True


class DatasetVerifier:
    """
    Applies per-series rules and cross-series consistency checks.
    """

    def __init__(
        self,
        *,
        rules: Mapping[str, VerificationRule] = VERIFICATION_RULES,
        anomaly_pairs: Sequence[tuple[str, str]] = ANOMALY_PAIRS,
        sea_ice_identity: tuple[str, str, str] | None = SEA_ICE_IDENTITY,
    ) -> None:
        self._rules = dict(rules)
        self._anomaly_pairs = list(anomaly_pairs)
        self._sea_ice_identity = sea_ice_identity

    def verify_file(self, path: str | Path, *, today: date | None = None) -> VerificationReport:
        """
        Read and verify the dataset at `path`.

        Raises:
            OSError: the file cannot be read.
            ValueError: the file is not valid JSON.
            DatasetRootError: the root or `series` block is not an object.
        """

        raw = Path(path).read_text(encoding="utf-8")
        payload = json.loads(raw)
        report = self.verify_payload(payload, today=today)
        logger.info(
            "Dataset verified path=%s errors=%s warnings=%s",
            path,
            len(report.errors),
            len(report.warnings),
        )
        return report

    def verify_payload(self, payload: Any, *, today: date | None = None) -> VerificationReport:
        if not _is_object(payload):
            raise DatasetRootError("Dataset root is not an object.")

        reference_day = today or utc_today()
        report = VerificationReport(checked_series=len(self._rules))

        if not _is_valid_timestamp(payload.get("generatedAtIso")):
            report.errors.append("generatedAtIso is missing or invalid")

        series = payload.get("series")
        if not _is_object(series):
            raise DatasetRootError("series is missing or invalid.")

        for key, rule in self._rules.items():
            self._verify_series(key, series.get(key), rule, payload, reference_day, report)

        self._verify_anomaly_alignment(series, report)
        self._verify_sea_ice(series, report)
        return report

    def _verify_series(
        self,
        key: str,
        points: Any,
        rule: VerificationRule,
        payload: Mapping[str, Any],
        today: date,
        report: VerificationReport,
    ) -> None:
        errors = report.errors
        if not isinstance(points, list):
            errors.append(f"{key}: series is not an array")
            return

        if len(points) < rule.min_points:
            errors.append(f"{key}: too few points ({len(points)}); expected at least {rule.min_points}")

        recent_cutoff = today - timedelta(days=RECENT_WINDOW_DAYS)
        previous_day: date | None = None
        latest: _LatestPoint | None = None
        points_last_year = 0

        for index, point in enumerate(points):
            if not _is_object(point):
                errors.append(f"{key}: invalid point object at index {index}")
                continue

            raw_date = point.get("date")
            date_text = raw_date.strip() if isinstance(raw_date, str) else ""
            point_day = parse_iso_date(date_text)
            if point_day is None:
                errors.append(f"{key}: invalid date at index {index} ({json.dumps(raw_date, default=str)})")
                continue

            value = to_finite_number(point.get("value"))
            if value is None:
                errors.append(
                    f"{key}: non-numeric value at index {index} ({json.dumps(point.get('value'), default=str)})"
                )
                continue
            if not rule.min_value <= value <= rule.max_value:
                errors.append(
                    f"{key}: out-of-range value at {date_text} ({value}); "
                    f"expected {rule.min_value}..{rule.max_value}"
                )
                continue

            if previous_day is not None and point_day <= previous_day:
                errors.append(f"{key}: dates are not strictly increasing around {date_text}")
                continue
            previous_day = point_day

            if point_day > today:
                errors.append(f"{key}: future date detected ({date_text})")
                continue

            if point_day >= recent_cutoff:
                points_last_year += 1
            latest = _LatestPoint(date=date_text, day=point_day, value=value)

        if latest is None:
            errors.append(f"{key}: no valid points after verification")
            return

        age_days = (today - latest.day).days
        if age_days > rule.max_age_days:
            errors.append(
                f"{key}: stale latest point {latest.date} ({age_days} days old; max {rule.max_age_days})"
            )

        if points_last_year < rule.min_points_last_year:
            report.warnings.append(f"{key}: sparse recent data ({points_last_year} points in last 365 days)")

        self._verify_summary(key, points, latest, payload, report)

    @staticmethod
    def _verify_summary(
        key: str,
        points: list[Any],
        latest: _LatestPoint,
        payload: Mapping[str, Any],
        report: VerificationReport,
    ) -> None:
        summary = payload.get("summary")
        entry = summary.get(key) if _is_object(summary) else None
        if not _is_object(entry):
            report.warnings.append(f"{key}: missing summary entry")
            return

        summary_points = entry.get("points")
        if isinstance(summary_points, bool) or summary_points != len(points):
            report.errors.append(
                f"{key}: summary.points ({summary_points}) does not match series length ({len(points)})"
            )

        summary_date = entry.get("latestDate")
        if summary_date != latest.date:
            report.errors.append(
                f"{key}: summary.latestDate ({_format_date(summary_date)}) does not match {latest.date}"
            )

        summary_value = to_finite_number(entry.get("latestValue"))
        if summary_value is None or abs(summary_value - latest.value) > SUMMARY_VALUE_TOLERANCE:
            report.errors.append(
                f"{key}: summary.latestValue ({entry.get('latestValue')}) does not match {latest.value}"
            )

    def _verify_anomaly_alignment(self, series: Mapping[str, Any], report: VerificationReport) -> None:
        for absolute_key, anomaly_key in self._anomaly_pairs:
            absolute = _point_list(series.get(absolute_key))
            anomaly = _point_list(series.get(anomaly_key))
            if not absolute or not anomaly:
                continue

            absolute_dates = {point.get("date") for point in absolute}
            missing: list[str] = []
            seen: set[str] = set()
            for point in anomaly:
                point_date = point.get("date")
                if point_date in seen:
                    continue
                seen.add(point_date)
                if point_date in absolute_dates:
                    continue
                missing.append(point_date)
                if len(missing) >= MAX_LISTED_MISMATCHES:
                    break

            if missing:
                report.errors.append(
                    f"{anomaly_key}: found anomaly dates missing in {absolute_key}: {', '.join(missing)}"
                )

            latest_absolute = absolute[-1].get("date")
            latest_anomaly = anomaly[-1].get("date")
            if latest_absolute and latest_anomaly and latest_absolute != latest_anomaly:
                report.warnings.append(
                    f"{anomaly_key}: latest date ({latest_anomaly}) differs from {absolute_key} ({latest_absolute})"
                )

    def _verify_sea_ice(self, series: Mapping[str, Any], report: VerificationReport) -> None:
        if self._sea_ice_identity is None:
            return
        global_key, north_key, south_key = self._sea_ice_identity
        global_series = _point_list(series.get(global_key))
        north = _values_by_date(series.get(north_key))
        south = _values_by_date(series.get(south_key))
        if not global_series or not north or not south:
            return

        checked = 0
        mismatches = 0
        for point in global_series:
            global_value = to_finite_number(point.get("value"))
            if global_value is None:
                continue
            north_value = north.get(point.get("date"))
            south_value = south.get(point.get("date"))
            if north_value is None or south_value is None:
                continue

            checked += 1
            expected = north_value + south_value
            if abs(global_value - expected) <= SEA_ICE_TOLERANCE:
                continue
            mismatches += 1
            if mismatches <= MAX_LISTED_MISMATCHES:
                report.errors.append(
                    f"{global_key} mismatch at {point.get('date')}: global={global_value}, "
                    f"arctic+antarctic={expected:.3f}"
                )

        if not checked:
            report.warnings.append(
                "Sea-ice consistency check skipped: no overlapping dates across global/arctic/antarctic series."
            )
            return

        if mismatches > MAX_LISTED_MISMATCHES:
            report.errors.append(
                f"{global_key} mismatch on {mismatches} overlapping dates (showing first {MAX_LISTED_MISMATCHES})."
            )


def _point_list(value: Any) -> list[dict[str, Any]]:
    """
    Point objects with a string date; anything else was already reported per series.
    """

    if not isinstance(value, list):
        return []
    return [point for point in value if _is_object(point) and isinstance(point.get("date"), str)]


def _values_by_date(value: Any) -> dict[str, float]:
    by_date: dict[str, float] = {}
    for point in _point_list(value):
        numeric = to_finite_number(point.get("value"))
        if numeric is not None:
            by_date[point["date"]] = numeric
    return by_date
