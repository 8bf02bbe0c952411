"""
climate_pipeline/parsers/ecmwf.py

ECMWF Climate Pulse daily global 2 m temperature series.
"""

from __future__ import annotations

from climate_pipeline.domain.points import DailyPoint, parse_iso_date, to_finite_number
from climate_pipeline.parsers.common import column_or_none, iter_data_lines, split_csv_line
from climate_pipeline.processing.normalizer import normalize_points

ANOMALY_COLUMN = "ano_91-20"
# Editorial shift from the 1991-2020 baseline towards 1850-1900, not a computed value.
PREINDUSTRIAL_OFFSET_C = 0.88


def parse_ecmwf_climate_pulse_csv(
    raw_csv: str,
    *,
    offset: float = PREINDUSTRIAL_OFFSET_C,
) -> list[DailyPoint]:
    """
    Read the `date` and `ano_91-20` columns and add `offset` to every anomaly.
    """

    points: list[DailyPoint] = []
    date_column = anomaly_column = -1
    has_header = False
    for line in iter_data_lines(raw_csv):
        columns = split_csv_line(line)
        if not has_header:
            lowered = [column.lower() for column in columns]
            date_column = lowered.index("date") if "date" in lowered else -1
            anomaly_column = lowered.index(ANOMALY_COLUMN) if ANOMALY_COLUMN in lowered else -1
            has_header = True
            continue

        if date_column < 0 or anomaly_column < 0:
            break
        date_text = column_or_none(columns, date_column)
        if date_text is None or parse_iso_date(date_text) is None:
            continue
        anomaly = to_finite_number(column_or_none(columns, anomaly_column))
        if anomaly is None:
            continue
        points.append(DailyPoint(date=date_text, value=anomaly + offset))
    return normalize_points(points)
