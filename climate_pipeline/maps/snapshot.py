"""
climate_pipeline/maps/snapshot.py

Day-by-day fallback download of map images.

Each product is probed as a small state machine: candidate dates are generated
backwards from the requested day, each candidate is attempted once (with the
client's own retries), and the walk ends in one of three terminal states:
downloaded, kept the previous file, or missing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

from climate_pipeline.connectors.base import FetchClient
from climate_pipeline.domain.artifact import MapOutcome, MapSnapshotResult, MapSource
from climate_pipeline.domain.points import add_days, format_date_from_parts, year_and_day
from climate_pipeline.errors import FetchError
from climate_pipeline.logging_utils import log_event
from climate_pipeline.storage import ArtifactWriteError, write_atomic

logger = logging.getLogger(__name__)

DEFAULT_MAX_BACK_DAYS = 20


@dataclass(frozen=True)
class MapProduct:
    """
    One spatial map product; `url_template` takes `{year}` and a 3-digit `{doy}`.
    """

    key: str
    file_name: str
    url_template: str
    source_page: str

    def build_url(self, year: int, day_of_year: int) -> str:
        doy = str(max(1, min(366, day_of_year))).zfill(3)
        return self.url_template.format(year=year, doy=doy)


def map_date_from_payload(payload: Any) -> str | None:
    """
    Read the latest map day from a `[.., .., .., year, month, day, ..]` payload.
    """

    if not isinstance(payload, list) or len(payload) < 6:
        return None
    return format_date_from_parts(payload[3], payload[4], payload[5])


def iter_candidate_dates(requested_date: str, max_back_days: int) -> Iterator[str]:
    for back_days in range(max_back_days + 1):
        candidate = add_days(requested_date, -back_days)
        if candidate is not None:
            yield candidate


class MapSnapshotFetcher:
    """
    Downloads map products into `output_dir`, keeping the last good file on failure.
    """

    def __init__(
        self,
        *,
        client: FetchClient,
        output_dir: str | Path,
        public_prefix: str = "data/maps",
        max_back_days: int = DEFAULT_MAX_BACK_DAYS,
    ) -> None:
        self._client = client
        self._output_dir = Path(output_dir)
        self._public_prefix = public_prefix.rstrip("/")
        self._max_back_days = max(0, max_back_days)

    def output_path(self, product: MapProduct) -> Path:
        return self._output_dir / product.file_name

    def public_path(self, product: MapProduct) -> str:
        return f"{self._public_prefix}/{product.file_name}"

    def fetch(self, product: MapProduct, requested_date: str | None) -> MapSnapshotResult:
        """
        Probe `requested_date` and up to `max_back_days` earlier days.
        """

        if requested_date is None:
            return self._exhausted(product, requested_date, "Missing map date.")

        last_reason = "no candidate dates"
        for candidate in iter_candidate_dates(requested_date, self._max_back_days):
            parts = year_and_day(candidate)
            if parts is None:
                continue
            url = product.build_url(*parts)
            try:
                content = self._client.fetch_binary(url)
            except FetchError as exc:
                last_reason = exc.reason
                continue
            if not content:
                last_reason = f"empty response for {url}"
                continue

            try:
                write_atomic(self.output_path(product), content)
            except ArtifactWriteError as exc:
                return self._exhausted(product, requested_date, str(exc))
            if candidate != requested_date:
                log_event(
                    logger,
                    logging.INFO,
                    "map_fallback_date_used",
                    map_key=product.key,
                    requested_date=requested_date,
                    resolved_date=candidate,
                )
            return MapSnapshotResult(
                key=product.key,
                outcome=MapOutcome.DOWNLOADED,
                requested_date=requested_date,
                resolved_date=candidate,
                source=MapSource(
                    path=self.public_path(product),
                    source_url=url,
                    source_page=product.source_page,
                    date=candidate,
                ),
            )

        return self._exhausted(
            product,
            requested_date,
            f"Failed to download map after fallback attempts: {last_reason}",
        )

    def _exhausted(
        self,
        product: MapProduct,
        requested_date: str | None,
        reason: str,
    ) -> MapSnapshotResult:
        if self.output_path(product).exists():
            warning = f"{product.key}: refresh failed; keeping previous map file."
            log_event(logger, logging.WARNING, "map_kept_previous", map_key=product.key, reason=reason)
            return MapSnapshotResult(
                key=product.key,
                outcome=MapOutcome.KEPT_PREVIOUS,
                requested_date=requested_date,
                source=MapSource(
                    path=self.public_path(product),
                    source_url=None,
                    source_page=product.source_page,
                    date=None,
                ),
                warning=warning,
            )

        log_event(logger, logging.WARNING, "map_missing", map_key=product.key, reason=reason)
        return MapSnapshotResult(
            key=product.key,
            outcome=MapOutcome.MISSING,
            requested_date=requested_date,
            warning=f"{product.key}: {reason}",
        )
