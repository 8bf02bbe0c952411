"""
climate_pipeline/services package marker.
"""

from climate_pipeline.services.assembler import DatasetAssembler
from climate_pipeline.services.update_service import (
    ClimateUpdateService,
    UpdateRunResult,
    get_update_service,
)
from climate_pipeline.services.verification_service import DatasetVerifier, VerificationReport

__all__ = [
    "ClimateUpdateService",
    "DatasetAssembler",
    "DatasetVerifier",
    "UpdateRunResult",
    "VerificationReport",
    "get_update_service",
]
