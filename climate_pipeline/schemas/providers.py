"""
climate_pipeline/schemas/providers.py

Boundary schemas for loosely typed provider JSON payloads.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError


class ReanalyzerYearRow(BaseModel):
    """
    One row of a Climate Reanalyzer daily feed.

    `name` is a 4-digit year or a climatology label such as "1991-2020"; `data`
    holds one value per day-of-year, either as a list or a comma-joined string. Cells are not
    validated here; parsers coerce each one on its own.
    """

    model_config = ConfigDict(extra="allow")

    name: str | int
    data: list[Any] | str | None = None

    @property
    def label(self) -> str:
        return str(self.name).strip()

    def values(self) -> list[Any]:
        if isinstance(self.data, list):
            return list(self.data)
        if isinstance(self.data, str):
            return self.data.split(",")
        return []


def validate_reanalyzer_rows(payload: Any) -> list[ReanalyzerYearRow]:
    """
    Validate each row independently; rows that do not match the schema are dropped.
    """

    if not isinstance(payload, list):
        return []
    rows: list[ReanalyzerYearRow] = []
    for raw_row in payload:
        if not isinstance(raw_row, dict):
            continue
        try:
            rows.append(ReanalyzerYearRow.model_validate(raw_row))
        except ValidationError:
            continue
    return rows
