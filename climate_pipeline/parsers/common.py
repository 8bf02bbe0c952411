"""
climate_pipeline/parsers/common.py

Line splitting shared by the text and CSV feed parsers.
"""

from __future__ import annotations

import csv
import re
from typing import Iterator

_LINE_BREAK = re.compile(r"\r?\n")
_WHITESPACE = re.compile(r"\s+")


def iter_data_lines(raw_text: str) -> Iterator[str]:
    """
    Yield stripped lines, skipping blanks and `#` comments.
    """

    if not isinstance(raw_text, str):
        return
    for raw_line in _LINE_BREAK.split(raw_text):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        yield line


def split_csv_line(line: str) -> list[str]:
    """
    Split one CSV record; quoted fields may contain commas.
    """

    try:
        row = next(csv.reader([line], skipinitialspace=True), [])
    except csv.Error:
        return []
    return [column.strip() for column in row]


def split_whitespace_line(line: str) -> list[str]:
    return [column for column in _WHITESPACE.split(line.strip()) if column]


def column_or_none(columns: list[str], index: int) -> str | None:
    if index < 0 or index >= len(columns):
        return None
    return columns[index]
