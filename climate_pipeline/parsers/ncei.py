"""
climate_pipeline/parsers/ncei.py

NCEI ocean heat content (0-2000 m) CSV.
"""

from __future__ import annotations

from climate_pipeline.domain.points import DailyPoint, parse_loose_date_token, to_finite_number
from climate_pipeline.parsers.common import column_or_none, iter_data_lines, split_csv_line
from climate_pipeline.processing.normalizer import normalize_points


def _header_columns(columns: list[str]) -> tuple[int, int]:
    lowered = [column.lower() for column in columns]
    date_column = lowered.index("date") if "date" in lowered else -1
    value_column = next(
        (
            index
            for index, column in enumerate(lowered)
            if column == "value" or "heat" in column or "global" in column
        ),
        -1,
    )
    return date_column, value_column


def parse_ncei_ocean_heat_content_csv(raw_csv: str) -> list[DailyPoint]:
    """
    Parse `(date, value)` rows, with or without a header line.

    If the first line already reads as a date and a number it is data and the
    layout is fixed to columns 0 and 1. Otherwise it is treated as a header and
    the `date` and value columns are looked up by name; when the value column
    cannot be named, column 1 is used.
    """

    points: list[DailyPoint] = []
    date_column = value_column = -1
    has_header = False
    for line in iter_data_lines(raw_csv):
        columns = split_csv_line(line)
        if not has_header:
            has_header = True
            direct_date = parse_loose_date_token(column_or_none(columns, 0))
            direct_value = to_finite_number(column_or_none(columns, 1))
            if direct_date is not None and direct_value is not None:
                date_column, value_column = 0, 1
                points.append(DailyPoint(date=direct_date, value=direct_value))
            else:
                date_column, value_column = _header_columns(columns)
            continue

        row_value_column = value_column
        if date_column < 0 or row_value_column < 0:
            row_value_column = 1 if len(columns) > 1 else -1
        if date_column < 0 or row_value_column < 0:
            continue

        date_text = parse_loose_date_token(column_or_none(columns, date_column))
        value = to_finite_number(column_or_none(columns, row_value_column))
        if date_text is None or value is None:
            continue
        points.append(DailyPoint(date=date_text, value=value))
    return normalize_points(points)
