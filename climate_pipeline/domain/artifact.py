"""
climate_pipeline/domain/artifact.py

Domain models for one assembled dataset and its map snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from climate_pipeline.domain.points import DailyPoint


@dataclass(frozen=True)
class SeriesSummary:
    """
    Point count and latest observation of one series.
    """

    points: int
    latest_date: str | None
    latest_value: float | None

    @classmethod
    def of(cls, series: list[DailyPoint]) -> "SeriesSummary":
        latest = series[-1] if series else None
        return cls(
            points=len(series),
            latest_date=latest.date if latest else None,
            latest_value=latest.value if latest else None,
        )


@dataclass(frozen=True)
class MapSource:
    """
    Where a map file lives on disk and which upstream day it shows.
    """

    path: str
    source_url: str | None
    source_page: str
    date: str | None


class MapOutcome(str, Enum):
    DOWNLOADED = "downloaded"
    KEPT_PREVIOUS = "kept_previous"
    MISSING = "missing"


@dataclass(frozen=True)
class MapSnapshotResult:
    """
    Terminal state of one map product refresh.

    `requested_date` is the day probing started from; `resolved_date` is the day
    whose image was actually downloaded and can be earlier.
    """

    key: str
    outcome: MapOutcome
    requested_date: str | None
    resolved_date: str | None = None
    source: MapSource | None = None
    warning: str | None = None


@dataclass(frozen=True)
class DatasetArtifact:
    """
    Consolidated output of one pipeline run.
    """

    generated_at_iso: str
    sources: dict[str, str]
    series: dict[str, list[DailyPoint]]
    summary: dict[str, SeriesSummary]
    maps: dict[str, MapSource] = field(default_factory=dict)
    map_warnings: list[str] = field(default_factory=list)
