"""
climate_pipeline/domain package marker.
"""

from climate_pipeline.domain.artifact import (
    DatasetArtifact,
    MapOutcome,
    MapSnapshotResult,
    MapSource,
    SeriesSummary,
)
from climate_pipeline.domain.points import DailyPoint

__all__ = [
    "DailyPoint",
    "DatasetArtifact",
    "MapOutcome",
    "MapSnapshotResult",
    "MapSource",
    "SeriesSummary",
]
