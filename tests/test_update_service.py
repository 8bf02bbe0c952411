"""
tests/test_update_service.py

Pytest tests for ClimateUpdateService orchestration.

A fake client serves canned payloads per URL, so the fan-out, per-metric
isolation, merge, anomaly fallback and map date resolution run without any
network access.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any

import pytest

from climate_pipeline.catalog import METRICS, MapJob, MetricSpec, metric_table
from climate_pipeline.connectors.base import PayloadKind
from climate_pipeline.errors import FetchError, IncompleteDatasetError
from climate_pipeline.maps import MapProduct, MapSnapshotFetcher
from climate_pipeline.parsers import (
    parse_noaa_co2_daily_csv,
    parse_nsidc_daily_extent_csv,
    parse_reanalyzer_daily_anomaly_json,
    parse_reanalyzer_daily_json,
)
from climate_pipeline.processing import SanitizationPolicy
from climate_pipeline.services.update_service import ClimateUpdateService

TODAY = date(2024, 6, 30)
NORTH_URL = "https://feeds.example.test/north.csv"
SOUTH_URL = "https://feeds.example.test/south.csv"
CO2_URL = "https://feeds.example.test/co2.csv"
T2_URL = "https://feeds.example.test/t2.json"
T2_DATES_URL = "https://feeds.example.test/t2_dates.json"
SST_DATES_URL = "https://feeds.example.test/sst_dates.json"

T2_MAP = MapProduct(
    key="global_2m_temperature",
    file_name="t2.png",
    url_template="https://maps.example.test/t2/{year}/d{doy}.png",
    source_page="https://maps.example.test/t2/",
)
SST_MAP = MapProduct(
    key="global_sst",
    file_name="sst.png",
    url_template="https://maps.example.test/sst/{year}/d{doy}.png",
    source_page="https://maps.example.test/sst/",
)


class FakeClient:
    def __init__(self, payloads: dict[str, Any], binaries: dict[str, bytes] | None = None) -> None:
        self._payloads = payloads
        self._binaries = binaries or {}
        self.fetched: list[tuple[str, PayloadKind]] = []
        self.binary_requests: list[str] = []

    def fetch(self, url: str, kind: PayloadKind) -> Any:
        self.fetched.append((url, kind))
        payload = self._payloads.get(url)
        if isinstance(payload, Exception):
            raise payload
        if payload is None:
            raise FetchError(url, f"HTTP 404 for {url}", attempts=3)
        return payload

    def fetch_binary(self, url: str) -> bytes:
        self.binary_requests.append(url)
        if url not in self._binaries:
            raise FetchError(url, f"HTTP 404 for {url}", attempts=3)
        return self._binaries[url]


def _extent_csv(value: float, first_day: int) -> str:
    lines = ["Year, Month, Day, Extent, Missing, Source"]
    lines += [f"2024, 06, {day:02d}, {value}, 0.0, x" for day in range(first_day, 31)]
    return "\n".join(lines) + "\n"


def _co2_csv() -> str:
    return "\n".join(f"2024,6,{day},2024.45,42{day % 10}.5" for day in range(1, 31)) + "\n"


def _t2_payload() -> list[dict[str, Any]]:
    rows = [{"name": str(year), "data": [14.0] * 365} for year in range(1991, 2021)]
    rows.append({"name": "2024", "data": [14.5] * 182 + [0] * 184})
    return rows


def _metrics() -> list[MetricSpec]:
    extent = SanitizationPolicy(0, 60, 20)
    return [
        MetricSpec(
            key="global_surface_temperature",
            policy=SanitizationPolicy(5, 40, 20),
            provenance=T2_URL,
            source_url=T2_URL,
            payload_kind=PayloadKind.JSON,
            parser=parse_reanalyzer_daily_json,
        ),
        MetricSpec(
            key="global_surface_temperature_anomaly",
            policy=SanitizationPolicy(-10, 10, 20),
            provenance="derived",
            source_url=T2_URL,
            payload_kind=PayloadKind.JSON,
            parser=parse_reanalyzer_daily_anomaly_json,
            anomaly_of="global_surface_temperature",
        ),
        MetricSpec(
            key="global_sea_ice_extent",
            policy=extent,
            provenance="north + south",
            merge_of=("arctic_sea_ice_extent", "antarctic_sea_ice_extent"),
        ),
        MetricSpec(
            key="arctic_sea_ice_extent",
            policy=extent,
            provenance=NORTH_URL,
            source_url=NORTH_URL,
            parser=parse_nsidc_daily_extent_csv,
        ),
        MetricSpec(
            key="antarctic_sea_ice_extent",
            policy=extent,
            provenance=SOUTH_URL,
            source_url=SOUTH_URL,
            parser=parse_nsidc_daily_extent_csv,
        ),
        MetricSpec(
            key="atmospheric_co2",
            policy=SanitizationPolicy(200, 700, 120),
            provenance=CO2_URL,
            source_url=CO2_URL,
            parser=parse_noaa_co2_daily_csv,
        ),
    ]


def _payloads() -> dict[str, Any]:
    return {
        T2_URL: _t2_payload(),
        NORTH_URL: _extent_csv(10.0, 1),
        SOUTH_URL: _extent_csv(5.0, 10),
        CO2_URL: _co2_csv(),
        SST_DATES_URL: [0, 0, 0, 2024, 6, 28, 0],
    }


def _service(client: FakeClient, tmp_path: Path) -> ClimateUpdateService:
    map_fetcher = MapSnapshotFetcher(client=client, output_dir=tmp_path / "maps", max_back_days=1)  # type: ignore[arg-type]
    return ClimateUpdateService(
        client=client,  # type: ignore[arg-type]
        map_fetcher=map_fetcher,
        output_path=tmp_path / "climate-realtime.json",
        metrics=_metrics(),
        map_jobs=[
            MapJob(product=T2_MAP, date_source_url=T2_DATES_URL, fallback_metric="global_surface_temperature"),
            MapJob(product=SST_MAP, date_source_url=SST_DATES_URL, fallback_metric="atmospheric_co2"),
        ],
        extra_sources={"maps_sst_dates": SST_DATES_URL},
        max_workers=3,
    )


class TestClimateUpdateService:
    def test_full_run_writes_dataset(self, tmp_path: Path) -> None:
        binaries = {"https://maps.example.test/sst/2024/d180.png": b"sst-png"}
        client = FakeClient(_payloads(), binaries)

        result = _service(client, tmp_path).run(today=TODAY)

        artifact = result.artifact
        assert list(artifact.series) == [spec.key for spec in _metrics()]
        assert result.output_path == tmp_path / "climate-realtime.json"
        assert result.failed_sources == [T2_DATES_URL]

        global_ice = artifact.series["global_sea_ice_extent"]
        assert global_ice[0].date == "2024-06-10"
        assert {point.value for point in global_ice} == {15.0}
        assert len(global_ice) == 21

        anomaly = artifact.series["global_surface_temperature_anomaly"]
        assert anomaly[-1].date == "2024-06-30"
        assert {point.value for point in anomaly if point.date.startswith("2024")} == {0.5}

        assert artifact.sources["maps_sst_dates"] == SST_DATES_URL
        assert artifact.sources["global_sea_ice_extent"] == "north + south"

        assert artifact.maps["global_sst"].date == "2024-06-28"
        # The t2 map date feed failed, so the latest temperature date was probed instead.
        assert "https://maps.example.test/t2/2024/d182.png" in client.binary_requests
        assert artifact.map_warnings and artifact.map_warnings[0].startswith("global_2m_temperature:")

        written = json.loads((tmp_path / "climate-realtime.json").read_text(encoding="utf-8"))
        assert written["summary"]["atmospheric_co2"]["latestDate"] == "2024-06-30"
        assert (tmp_path / "maps" / "sst.png").read_bytes() == b"sst-png"

    def test_each_url_is_fetched_once(self, tmp_path: Path) -> None:
        client = FakeClient(_payloads())
        _service(client, tmp_path).run(today=TODAY)
        urls = [url for url, _ in client.fetched]
        assert urls.count(T2_URL) == 1
        assert len(urls) == len(set(urls))

    def test_failed_source_only_empties_its_metric(self, tmp_path: Path) -> None:
        payloads = _payloads()
        payloads[CO2_URL] = FetchError(CO2_URL, "HTTP 503 for co2", attempts=3)
        client = FakeClient(payloads)

        with pytest.raises(IncompleteDatasetError) as ctx:
            _service(client, tmp_path).run(today=TODAY)

        assert ctx.value.empty_series == ["atmospheric_co2"]
        assert not (tmp_path / "climate-realtime.json").exists()

    def test_unparseable_payload_is_isolated(self, tmp_path: Path) -> None:
        payloads = _payloads()
        payloads[NORTH_URL] = 12345
        client = FakeClient(payloads)

        with pytest.raises(IncompleteDatasetError) as ctx:
            _service(client, tmp_path).run(today=TODAY)

        assert ctx.value.empty_series == ["global_sea_ice_extent", "arctic_sea_ice_extent"]

    def test_stale_series_is_reported_empty(self, tmp_path: Path) -> None:
        client = FakeClient(_payloads())
        with pytest.raises(IncompleteDatasetError) as ctx:
            _service(client, tmp_path).run(today=date(2024, 9, 1))
        assert "atmospheric_co2" not in ctx.value.empty_series
        assert "arctic_sea_ice_extent" in ctx.value.empty_series


def test_catalog_covers_every_metric_once() -> None:
    keys = [spec.key for spec in METRICS]
    assert len(keys) == 18
    assert len(set(keys)) == 18
    table = metric_table()
    assert table["global_sea_ice_extent"].merge_of == ("arctic_sea_ice_extent", "antarctic_sea_ice_extent")
    for spec in METRICS:
        assert spec.is_merged or (spec.source_url and spec.parser is not None)
