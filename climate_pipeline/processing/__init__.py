"""
climate_pipeline/processing package marker.
"""

from climate_pipeline.processing.derived import (
    BaselineWindow,
    build_climatology,
    build_climatology_envelope,
    derive_anomaly_series,
    merge_series_sum,
)
from climate_pipeline.processing.normalizer import normalize_points
from climate_pipeline.processing.sanitizer import SanitizationPolicy, sanitize_series

__all__ = [
    "BaselineWindow",
    "SanitizationPolicy",
    "build_climatology",
    "build_climatology_envelope",
    "derive_anomaly_series",
    "merge_series_sum",
    "normalize_points",
    "sanitize_series",
]
