"""
climate_pipeline/connectors package marker.
"""

from climate_pipeline.connectors.base import FetchClient, PayloadKind
from climate_pipeline.connectors.retry import RetryPolicy, linear_backoff

__all__ = [
    "FetchClient",
    "PayloadKind",
    "RetryPolicy",
    "linear_backoff",
]
