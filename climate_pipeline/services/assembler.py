"""
climate_pipeline/services/assembler.py

Packages sanitized series, provenance and map results into one artifact.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from climate_pipeline.domain.artifact import DatasetArtifact, MapSnapshotResult, SeriesSummary
from climate_pipeline.domain.points import DailyPoint
from climate_pipeline.errors import IncompleteDatasetError
from climate_pipeline.logging_utils import log_event
from climate_pipeline.schemas.artifact import DatasetArtifactModel
from climate_pipeline.storage import write_atomic_text

logger = logging.getLogger(__name__)


def format_generated_at(moment: datetime) -> str:
    """
    ISO-8601 UTC timestamp with millisecond precision and a `Z` suffix.
    """

    utc_moment = moment.astimezone(timezone.utc) if moment.tzinfo else moment.replace(tzinfo=timezone.utc)
    return utc_moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc_moment.microsecond // 1000:03d}Z"


class DatasetAssembler:
    """
    Builds the `DatasetArtifact` for a fixed, ordered set of required metric keys.
    """

    def __init__(self, required_keys: Sequence[str]) -> None:
        self._required_keys = list(required_keys)

    @property
    def required_keys(self) -> list[str]:
        return list(self._required_keys)

    def assemble(
        self,
        *,
        series: Mapping[str, Sequence[DailyPoint]],
        sources: Mapping[str, str],
        map_results: Iterable[MapSnapshotResult] = (),
        generated_at: datetime | None = None,
    ) -> DatasetArtifact:
        """
        Check completeness and build the artifact.

        Raises:
            IncompleteDatasetError: when any required key maps to an empty series.
        """

        empty = [key for key in self._required_keys if not series.get(key)]
        if empty:
            log_event(logger, logging.ERROR, "dataset_incomplete", empty_series=empty)
            raise IncompleteDatasetError(empty)

        ordered_series = {key: list(series[key]) for key in self._required_keys}
        maps = {}
        map_warnings: list[str] = []
        for result in map_results:
            if result.source is not None:
                maps[result.key] = result.source
            if result.warning:
                map_warnings.append(result.warning)

        return DatasetArtifact(
            generated_at_iso=format_generated_at(generated_at or datetime.now(timezone.utc)),
            sources=dict(sources),
            series=ordered_series,
            summary={key: SeriesSummary.of(points) for key, points in ordered_series.items()},
            maps=maps,
            map_warnings=map_warnings,
        )

    @staticmethod
    def write(artifact: DatasetArtifact, path: str | Path) -> Path:
        """
        Serialize the artifact as compact JSON and replace `path` atomically.
        """

        payload = DatasetArtifactModel.from_domain(artifact).to_json()
        target = write_atomic_text(path, payload)
        log_event(
            logger,
            logging.INFO,
            "dataset_written",
            path=str(target),
            series=len(artifact.series),
            maps=len(artifact.maps),
        )
        return target
