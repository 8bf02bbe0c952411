"""
climate_pipeline/parsers/sea_level.py

University of Colorado global mean sea level text file.
"""

from __future__ import annotations

from climate_pipeline.domain.points import DailyPoint, date_from_decimal_year, to_finite_number
from climate_pipeline.parsers.common import iter_data_lines, split_whitespace_line
from climate_pipeline.processing.normalizer import normalize_points


def parse_global_mean_sea_level_text(raw_text: str) -> list[DailyPoint]:
    """
    Parse whitespace-delimited `decimal_year value ...` rows.

    Dates resolve to the first day of the month the decimal year falls in;
    several observations within one month collapse to the last of them.
    """

    points: list[DailyPoint] = []
    for line in iter_data_lines(raw_text):
        columns = split_whitespace_line(line)
        if len(columns) < 2:
            continue
        decimal_year = to_finite_number(columns[0])
        value = to_finite_number(columns[1])
        if decimal_year is None or value is None:
            continue
        date_text = date_from_decimal_year(decimal_year)
        if date_text is None:
            continue
        points.append(DailyPoint(date=date_text, value=value))
    return normalize_points(points)
