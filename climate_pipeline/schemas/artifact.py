"""
climate_pipeline/schemas/artifact.py

Wire schema of the persisted dataset file.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from climate_pipeline.domain.artifact import DatasetArtifact


class DailyPointModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    value: float = Field(allow_inf_nan=False)


class SeriesSummaryModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    points: int = Field(ge=0)
    latest_date: str | None = Field(default=None, alias="latestDate")
    latest_value: float | None = Field(default=None, alias="latestValue")


class MapSourceModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    path: str
    source_url: str | None = Field(default=None, alias="sourceUrl")
    source_page: str = Field(alias="sourcePage")
    date: str | None = None


class DatasetArtifactModel(BaseModel):
    """
    JSON shape read by the dashboard and by the verifier.
    """

    model_config = ConfigDict(populate_by_name=True)

    generated_at_iso: str = Field(alias="generatedAtIso")
    sources: dict[str, str]
    maps: dict[str, MapSourceModel] = Field(default_factory=dict)
    map_warnings: list[str] = Field(default_factory=list, alias="mapWarnings")
    series: dict[str, list[DailyPointModel]]
    summary: dict[str, SeriesSummaryModel]

    @classmethod
    def from_domain(cls, artifact: DatasetArtifact) -> "DatasetArtifactModel":
        return cls(
            generated_at_iso=artifact.generated_at_iso,
            sources=dict(artifact.sources),
            maps={
                key: MapSourceModel(
                    path=source.path,
                    source_url=source.source_url,
                    source_page=source.source_page,
                    date=source.date,
                )
                for key, source in artifact.maps.items()
            },
            map_warnings=list(artifact.map_warnings),
            series={
                key: [DailyPointModel(date=point.date, value=point.value) for point in points]
                for key, points in artifact.series.items()
            },
            summary={
                key: SeriesSummaryModel(
                    points=entry.points,
                    latest_date=entry.latest_date,
                    latest_value=entry.latest_value,
                )
                for key, entry in artifact.summary.items()
            },
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True) + "\n"
