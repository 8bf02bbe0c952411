"""
tests/test_assembler.py

Pytest unit tests for DatasetAssembler and the persisted JSON shape.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from climate_pipeline.domain.artifact import MapOutcome, MapSnapshotResult, MapSource
from climate_pipeline.domain.points import DailyPoint
from climate_pipeline.errors import IncompleteDatasetError
from climate_pipeline.services.assembler import DatasetAssembler, format_generated_at

GENERATED_AT = datetime(2024, 7, 1, 6, 30, 15, 123456, tzinfo=timezone.utc)


@pytest.fixture()
def assembler() -> DatasetAssembler:
    return DatasetAssembler(["atmospheric_co2", "global_sea_ice_extent"])


def _series() -> dict[str, list[DailyPoint]]:
    return {
        "global_sea_ice_extent": [DailyPoint("2024-06-29", 20.5), DailyPoint("2024-06-30", 20.25)],
        "atmospheric_co2": [DailyPoint("2024-06-30", 423.1)],
    }


class TestAssemble:
    def test_summary_and_ordering(self, assembler: DatasetAssembler) -> None:
        artifact = assembler.assemble(
            series=_series(),
            sources={"atmospheric_co2": "https://gml.example.test/co2.csv"},
            generated_at=GENERATED_AT,
        )

        assert list(artifact.series) == ["atmospheric_co2", "global_sea_ice_extent"]
        summary = artifact.summary["global_sea_ice_extent"]
        assert summary.points == 2
        assert summary.latest_date == "2024-06-30"
        assert summary.latest_value == 20.25
        assert artifact.generated_at_iso == "2024-07-01T06:30:15.123Z"

    def test_empty_required_series_fails(self, assembler: DatasetAssembler) -> None:
        series = _series()
        series["global_sea_ice_extent"] = []
        with pytest.raises(IncompleteDatasetError) as ctx:
            assembler.assemble(series=series, sources={})
        assert ctx.value.empty_series == ["global_sea_ice_extent"]

    def test_missing_required_series_fails(self, assembler: DatasetAssembler) -> None:
        with pytest.raises(IncompleteDatasetError) as ctx:
            assembler.assemble(series={}, sources={})
        assert ctx.value.empty_series == ["atmospheric_co2", "global_sea_ice_extent"]

    def test_map_results_split_into_maps_and_warnings(self, assembler: DatasetAssembler) -> None:
        kept = MapSnapshotResult(
            key="global_sst",
            outcome=MapOutcome.KEPT_PREVIOUS,
            requested_date="2024-06-30",
            source=MapSource(path="data/maps/global-sst.png", source_url=None, source_page="p", date=None),
            warning="global_sst: refresh failed; keeping previous map file.",
        )
        missing = MapSnapshotResult(
            key="global_2m_temperature",
            outcome=MapOutcome.MISSING,
            requested_date=None,
            warning="global_2m_temperature: Missing map date.",
        )
        artifact = assembler.assemble(series=_series(), sources={}, map_results=[kept, missing])

        assert list(artifact.maps) == ["global_sst"]
        assert artifact.map_warnings == [kept.warning, missing.warning]


class TestWrite:
    def test_written_json_shape(self, assembler: DatasetAssembler, tmp_path: Path) -> None:
        downloaded = MapSnapshotResult(
            key="global_sst",
            outcome=MapOutcome.DOWNLOADED,
            requested_date="2024-06-30",
            resolved_date="2024-06-29",
            source=MapSource(
                path="data/maps/global-sst.png",
                source_url="https://maps.example.test/sst.png",
                source_page="https://maps.example.test/",
                date="2024-06-29",
            ),
        )
        artifact = assembler.assemble(
            series=_series(),
            sources={"atmospheric_co2": "co2-url"},
            map_results=[downloaded],
            generated_at=GENERATED_AT,
        )
        target = tmp_path / "nested" / "climate-realtime.json"

        DatasetAssembler.write(artifact, target)

        raw = target.read_text(encoding="utf-8")
        assert raw.endswith("\n")
        assert "\n" not in raw[:-1]
        payload = json.loads(raw)
        assert set(payload) == {"generatedAtIso", "sources", "maps", "mapWarnings", "series", "summary"}
        assert payload["series"]["atmospheric_co2"] == [{"date": "2024-06-30", "value": 423.1}]
        assert payload["summary"]["atmospheric_co2"] == {
            "points": 1,
            "latestDate": "2024-06-30",
            "latestValue": 423.1,
        }
        assert payload["maps"]["global_sst"]["sourceUrl"] == "https://maps.example.test/sst.png"
        assert payload["maps"]["global_sst"]["date"] == "2024-06-29"
        assert not list(target.parent.glob(".*.tmp"))


def test_format_generated_at_naive_is_utc() -> None:
    assert format_generated_at(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05.000Z"
