"""
climate_pipeline/parsers/nsidc.py

NSIDC Sea Ice Index v4 daily extent CSV (north and south files).
"""

from __future__ import annotations

from climate_pipeline.domain.points import DailyPoint, format_date_from_parts, to_finite_number
from climate_pipeline.parsers.common import iter_data_lines, split_csv_line
from climate_pipeline.processing.normalizer import normalize_points

# The extent column has moved between file versions, so a few positions are scanned.
EXTENT_CANDIDATE_COLUMNS = (3, 4, 5)
EXTENT_MIN_EXCLUSIVE = 0.0
EXTENT_MAX_EXCLUSIVE = 100.0


def parse_nsidc_daily_extent_csv(raw_csv: str) -> list[DailyPoint]:
    """
    Parse `year,month,day,extent,...` rows; the first plausible extent wins.
    """

    points: list[DailyPoint] = []
    for line in iter_data_lines(raw_csv):
        columns = split_csv_line(line)
        if len(columns) < 4:
            continue

        date_text = format_date_from_parts(columns[0], columns[1], columns[2])
        if date_text is None:
            continue

        extent = None
        for index in EXTENT_CANDIDATE_COLUMNS:
            if index >= len(columns):
                break
            candidate = to_finite_number(columns[index])
            if candidate is not None and EXTENT_MIN_EXCLUSIVE < candidate < EXTENT_MAX_EXCLUSIVE:
                extent = candidate
                break
        if extent is None:
            continue

        points.append(DailyPoint(date=date_text, value=extent))
    return normalize_points(points)
