"""
climate_pipeline/parsers/noaa_gml.py

NOAA Global Monitoring Laboratory trace-gas files: Mauna Loa daily CO2,
global monthly CH4 and the annual Greenhouse Gas Index (AGGI) table.
"""

from __future__ import annotations

from typing import Sequence

from climate_pipeline.domain.points import DailyPoint, format_date_from_parts, to_finite_number
from climate_pipeline.parsers.common import column_or_none, iter_data_lines, split_csv_line
from climate_pipeline.processing.normalizer import normalize_points

CO2_CANDIDATE_COLUMNS = (3, 4, 5)
CO2_RANGE = (0.0, 1000.0)
CH4_AVERAGE_COLUMN = 3
CH4_TREND_COLUMN = 5
CH4_RANGE = (500.0, 5000.0)
AGGI_MIN_YEAR = 1970
AGGI_MAX_YEAR = 2200


def _first_in_range(columns: list[str], indexes: Sequence[int], bounds: tuple[float, float]) -> float | None:
    low, high = bounds
    for index in indexes:
        candidate = to_finite_number(column_or_none(columns, index))
        if candidate is not None and low < candidate < high:
            return candidate
    return None


def parse_noaa_co2_daily_csv(raw_csv: str) -> list[DailyPoint]:
    """
    Parse `year,month,day,...` rows; the first column in (0, 1000) ppm is the value.

    The decimal-date column that precedes the value falls outside that range,
    which is what lets the scan skip it.
    """

    points: list[DailyPoint] = []
    for line in iter_data_lines(raw_csv):
        columns = split_csv_line(line)
        if len(columns) < 5:
            continue
        date_text = format_date_from_parts(columns[0], columns[1], columns[2])
        if date_text is None:
            continue
        value = _first_in_range(columns, CO2_CANDIDATE_COLUMNS, CO2_RANGE)
        if value is None:
            continue
        points.append(DailyPoint(date=date_text, value=value))
    return normalize_points(points)


def parse_noaa_ch4_monthly_csv(raw_csv: str) -> list[DailyPoint]:
    """
    Parse monthly rows dated on the first of the month; average first, then trend.
    """

    points: list[DailyPoint] = []
    for line in iter_data_lines(raw_csv):
        columns = split_csv_line(line)
        if len(columns) < 6:
            continue
        date_text = format_date_from_parts(columns[0], columns[1], 1)
        if date_text is None:
            continue
        value = _first_in_range(columns, (CH4_AVERAGE_COLUMN, CH4_TREND_COLUMN), CH4_RANGE)
        if value is None:
            continue
        points.append(DailyPoint(date=date_text, value=value))
    return normalize_points(points)


def _aggi_columns(header: list[str]) -> tuple[int, int]:
    lowered = [column.lower() for column in header]
    year_column = lowered.index("year") if "year" in lowered else -1
    aggi_column = next(
        (index for index, column in enumerate(lowered) if column == "aggi" or "1990" in column),
        -1,
    )
    if aggi_column < 0:
        aggi_column = next(
            (index for index, column in enumerate(lowered) if "= 1" in column or "=1" in column),
            -1,
        )
    return year_column, aggi_column


def parse_noaa_aggi_csv(raw_csv: str) -> list[DailyPoint]:
    """
    Parse the AGGI table by header; each annual value is dated Jan 1.

    The first data line must be the header. Without a `year` column and an
    index column (`aggi`, or one normalised to 1990 / "= 1") nothing is parsed.
    """

    points: list[DailyPoint] = []
    year_column = aggi_column = -1
    has_header = False
    for line in iter_data_lines(raw_csv):
        columns = split_csv_line(line)
        if not has_header:
            year_column, aggi_column = _aggi_columns(columns)
            has_header = True
            continue

        if year_column < 0 or aggi_column < 0:
            break
        year = to_finite_number(column_or_none(columns, year_column))
        value = to_finite_number(column_or_none(columns, aggi_column))
        if year is None or value is None or not AGGI_MIN_YEAR <= year <= AGGI_MAX_YEAR:
            continue
        date_text = format_date_from_parts(year, 1, 1)
        if date_text is None:
            continue
        points.append(DailyPoint(date=date_text, value=value))
    return normalize_points(points)
