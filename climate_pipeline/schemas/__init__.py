"""
climate_pipeline/schemas package marker.
"""

from climate_pipeline.schemas.artifact import DatasetArtifactModel
from climate_pipeline.schemas.providers import ReanalyzerYearRow, validate_reanalyzer_rows

__all__ = [
    "DatasetArtifactModel",
    "ReanalyzerYearRow",
    "validate_reanalyzer_rows",
]
