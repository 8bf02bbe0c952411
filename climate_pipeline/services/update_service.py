"""
climate_pipeline/services/update_service.py

Orchestration of one dataset refresh.

Every distinct provider URL is fetched once on a worker pool. Each metric's
parse and sanitize chain is isolated: a fetch or parse failure empties that
metric only and the completeness check in the assembler decides whether the
run can be persisted. Map products run on their own pool alongside the series.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Sequence

from climate_pipeline.catalog import EXTRA_SOURCES, MAP_JOBS, METRICS, MapJob, MetricSpec
from climate_pipeline.config import get_http_settings, get_pipeline_settings
from climate_pipeline.connectors.base import FetchClient, PayloadKind
from climate_pipeline.domain.artifact import DatasetArtifact, MapSnapshotResult
from climate_pipeline.domain.points import DailyPoint, utc_today
from climate_pipeline.errors import FetchError
from climate_pipeline.logging_utils import log_event
from climate_pipeline.maps.snapshot import MapSnapshotFetcher, map_date_from_payload
from climate_pipeline.processing.derived import build_climatology, derive_anomaly_series, merge_series_sum
from climate_pipeline.processing.sanitizer import sanitize_series
from climate_pipeline.services.assembler import DatasetAssembler

logger = logging.getLogger(__name__)

_SourceKey = tuple[str, PayloadKind]


@dataclass
class UpdateRunResult:
    """
    Outcome of one successful refresh.
    """

    artifact: DatasetArtifact
    output_path: Path | None
    failed_sources: list[str] = field(default_factory=list)

    @property
    def map_warnings(self) -> list[str]:
        return list(self.artifact.map_warnings)


class ClimateUpdateService:
    """
    Fetches every configured metric and map, then assembles and writes the dataset.
    """

    def __init__(
        self,
        *,
        client: FetchClient,
        map_fetcher: MapSnapshotFetcher,
        output_path: str | Path,
        metrics: Sequence[MetricSpec] = METRICS,
        map_jobs: Sequence[MapJob] = MAP_JOBS,
        extra_sources: Mapping[str, str] = EXTRA_SOURCES,
        max_workers: int = 8,
    ) -> None:
        self._client = client
        self._map_fetcher = map_fetcher
        self._output_path = Path(output_path)
        self._metrics = list(metrics)
        self._metric_table = {spec.key: spec for spec in self._metrics}
        self._map_jobs = list(map_jobs)
        self._extra_sources = dict(extra_sources)
        self._max_workers = max(1, max_workers)
        self._assembler = DatasetAssembler([spec.key for spec in self._metrics])

    @property
    def output_path(self) -> Path:
        return self._output_path

    def run(self, *, today: date | None = None, write: bool = True) -> UpdateRunResult:
        """
        Run one refresh.

        Raises:
            IncompleteDatasetError: when any configured metric ended up empty;
                nothing is written in that case.
        """

        reference_day = today or utc_today()
        log_event(
            logger,
            logging.INFO,
            "update_started",
            metrics=len(self._metrics),
            maps=len(self._map_jobs),
            today=reference_day.isoformat(),
        )

        with ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="climate-fetch",
        ) as fetch_pool, ThreadPoolExecutor(
            max_workers=max(1, len(self._map_jobs)),
            thread_name_prefix="climate-maps",
        ) as map_pool:
            payloads = {
                source_key: fetch_pool.submit(self._client.fetch, *source_key)
                for source_key in self._source_keys()
            }
            # Submitted after every fetch so it never holds a worker a fetch still needs.
            series_future = fetch_pool.submit(self._build_series, payloads, reference_day)
            map_futures = [
                map_pool.submit(self._refresh_map, job, payloads, series_future)
                for job in self._map_jobs
            ]

            series = series_future.result()
            map_results = [future.result() for future in map_futures]

        failed_sources = sorted(
            {url for (url, _), future in payloads.items() if future.exception() is not None}
        )
        sources = {spec.key: spec.provenance for spec in self._metrics}
        sources.update(self._extra_sources)

        artifact = self._assembler.assemble(
            series=series,
            sources=sources,
            map_results=map_results,
            generated_at=datetime.now(timezone.utc),
        )
        written = DatasetAssembler.write(artifact, self._output_path) if write else None
        log_event(
            logger,
            logging.INFO,
            "update_completed",
            series=len(artifact.series),
            map_warnings=len(artifact.map_warnings),
            failed_sources=failed_sources,
        )
        return UpdateRunResult(artifact=artifact, output_path=written, failed_sources=failed_sources)

    def _source_keys(self) -> list[_SourceKey]:
        keys: dict[_SourceKey, None] = {}
        for spec in self._metrics:
            if spec.source_url is not None and spec.parser is not None:
                keys[(spec.source_url, spec.payload_kind)] = None
        for job in self._map_jobs:
            keys[(job.date_source_url, PayloadKind.JSON)] = None
        return list(keys)

    def _build_series(
        self,
        payloads: Mapping[_SourceKey, Future],
        today: date,
    ) -> dict[str, list[DailyPoint]]:
        series: dict[str, list[DailyPoint]] = {}
        for spec in self._metrics:
            if spec.is_merged:
                continue
            series[spec.key] = self._fetched_metric(spec, payloads, today)

        for spec in self._metrics:
            if not spec.is_merged:
                continue
            left_key, right_key = spec.merge_of
            merged = merge_series_sum(series.get(left_key, []), series.get(right_key, []))
            series[spec.key] = self._sanitize(spec, merged, today)

        return {spec.key: series.get(spec.key, []) for spec in self._metrics}

    def _fetched_metric(
        self,
        spec: MetricSpec,
        payloads: Mapping[_SourceKey, Future],
        today: date,
    ) -> list[DailyPoint]:
        try:
            payload = payloads[(spec.source_url, spec.payload_kind)].result()
        except FetchError as exc:
            log_event(
                logger,
                logging.WARNING,
                "metric_fetch_failed",
                metric=spec.key,
                url=exc.url,
                reason=exc.reason,
            )
            return []
        except Exception as exc:  # noqa: BLE001
            logger.exception("Metric fetch crashed metric=%s error=%s", spec.key, exc)
            return []

        try:
            parsed = spec.parser(payload)
            if not parsed and spec.anomaly_of is not None:
                parsed = self._anomaly_from_absolute(spec, payload)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Metric parse failed metric=%s error=%s", spec.key, exc)
            return []

        return self._sanitize(spec, parsed, today)

    def _anomaly_from_absolute(self, spec: MetricSpec, payload: Any) -> list[DailyPoint]:
        absolute_spec = self._metric_table.get(spec.anomaly_of)
        if absolute_spec is None or absolute_spec.parser is None:
            return []
        absolute = absolute_spec.parser(payload)
        derived = derive_anomaly_series(absolute, build_climatology(absolute))
        log_event(
            logger,
            logging.INFO,
            "anomaly_from_derived_climatology",
            metric=spec.key,
            absolute_metric=absolute_spec.key,
            points=len(derived),
        )
        return derived

    def _sanitize(self, spec: MetricSpec, points: list[DailyPoint], today: date) -> list[DailyPoint]:
        sanitized = sanitize_series(points, spec.policy, today=today)
        if points and not sanitized:
            log_event(
                logger,
                logging.WARNING,
                "metric_rejected",
                metric=spec.key,
                parsed_points=len(points),
                latest_date=points[-1].date,
            )
        return sanitized

    def _refresh_map(
        self,
        job: MapJob,
        payloads: Mapping[_SourceKey, Future],
        series_future: Future,
    ) -> MapSnapshotResult:
        requested_date: str | None = None
        try:
            requested_date = map_date_from_payload(payloads[(job.date_source_url, PayloadKind.JSON)].result())
        except FetchError as exc:
            log_event(
                logger,
                logging.WARNING,
                "map_date_unavailable",
                map_key=job.product.key,
                url=exc.url,
                reason=exc.reason,
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("Map date resolution crashed map_key=%s error=%s", job.product.key, exc)

        if requested_date is None:
            fallback_series = series_future.result().get(job.fallback_metric) or []
            requested_date = fallback_series[-1].date if fallback_series else None

        return self._map_fetcher.fetch(job.product, requested_date)


@lru_cache(maxsize=1)
def get_update_service() -> ClimateUpdateService:
    """
    Build the update service from environment settings.
    """

    http_settings = get_http_settings()
    settings = get_pipeline_settings()
    client = FetchClient(http_settings=http_settings)
    map_fetcher = MapSnapshotFetcher(
        client=client,
        output_dir=settings.map_output_dir,
        public_prefix=settings.map_public_prefix,
        max_back_days=settings.map_max_back_days,
    )
    return ClimateUpdateService(
        client=client,
        map_fetcher=map_fetcher,
        output_path=settings.output_path,
        max_workers=settings.max_workers,
    )
