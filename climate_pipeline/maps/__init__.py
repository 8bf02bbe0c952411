"""
climate_pipeline/maps package marker.
"""

from climate_pipeline.maps.snapshot import (
    MapProduct,
    MapSnapshotFetcher,
    iter_candidate_dates,
    map_date_from_payload,
)

__all__ = [
    "MapProduct",
    "MapSnapshotFetcher",
    "iter_candidate_dates",
    "map_date_from_payload",
]
