"""Retry policy for provider requests.

Retries cover transport failures and non-2xx statuses only. A body that
arrived but cannot be decoded is not retried.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from climate_pipeline.config import HTTPSettings

BackoffFunction = Callable[[float, int], float]


def linear_backoff(base_delay_seconds: float, attempt: int) -> float:
    """Wait `base × attempt` seconds after the given failed attempt."""
    return base_delay_seconds * attempt


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry schedule.

    Attributes:
        max_attempts: Total number of attempts, including the first one.
        base_delay_seconds: Base unit fed to ``backoff``.
        backoff: Maps ``(base_delay_seconds, failed_attempt_number)`` to seconds.
    """

    max_attempts: int = 3
    base_delay_seconds: float = 1.5
    backoff: BackoffFunction = linear_backoff

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        if self.base_delay_seconds < 0:
            raise ValueError("base_delay_seconds must not be negative.")

    @classmethod
    def from_settings(cls, settings: HTTPSettings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.max_attempts,
            base_delay_seconds=settings.backoff_base_seconds,
        )

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed ``attempt`` (1-based) before the next one."""
        return max(0.0, self.backoff(self.base_delay_seconds, attempt))

    def should_retry(self, attempt: int) -> bool:
        return attempt < self.max_attempts
