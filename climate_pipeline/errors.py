"""Shared exception types for the update and verification passes."""

from __future__ import annotations

from typing import Sequence


class FetchError(RuntimeError):
    """
    Raised when a provider request cannot be completed after retries.
    """

    def __init__(self, url: str, reason: str, *, attempts: int | None = None) -> None:
        self.url = url
        self.reason = reason
        self.attempts = attempts
        if attempts is None:
            message = f"Failed to fetch {url}: {reason}"
        else:
            message = f"Failed to fetch {url} after {attempts} attempt(s): {reason}"
        super().__init__(message)


class PayloadDecodeError(FetchError):
    """
    Raised when a response body arrived but could not be decoded; never retried.
    """


class IncompleteDatasetError(RuntimeError):
    """
    Raised when one or more required series are empty after sanitization.

    Attributes:
        empty_series: Metric keys whose series ended up empty, in table order.
    """

    def __init__(self, empty_series: Sequence[str]) -> None:
        self.empty_series = list(empty_series)
        super().__init__(
            "One or more series are empty after validation "
            f"({', '.join(self.empty_series)}); refusing to write incomplete dataset."
        )


class DatasetRootError(ValueError):
    """
    Raised by the verifier when the artifact cannot be inspected at all.
    """


class CliUsageError(ValueError):
    """
    Raised for unknown command-line flags or invalid option values.
    """
