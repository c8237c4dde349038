"""Read spreadsheet exports into rows of string cells for ``parse_table``."""

from __future__ import annotations

import csv
import io
from pathlib import Path

import pandas as pd


EXCEL_SUFFIXES = (".xlsx", ".xlsm")


def read_rows(source: str | Path | io.StringIO, sheet_name: str | int = 0) -> list[list[str]]:
    """Return every row of a CSV file / StringIO or an Excel sheet as strings.

    Parameters
    ----------
    source : str | Path | io.StringIO
        CSV text stream, or a path to a ``.csv`` / ``.xlsx`` / ``.xlsm`` file.
    sheet_name : str | int
        Worksheet to read for Excel files (first sheet by default).

    Empty spreadsheet cells become ``""``; trailing empty cells are kept so
    column positions stay aligned with the header row.
    """
    if isinstance(source, io.StringIO):
        source.seek(0)
        return [list(row) for row in csv.reader(source)]
    path = Path(source)
    if path.suffix.lower() in EXCEL_SUFFIXES:
        return _read_excel(path, sheet_name)
    with path.open(newline="", encoding="utf-8-sig") as f:
        return [list(row) for row in csv.reader(f)]


def _read_excel(path: Path, sheet_name: str | int) -> list[list[str]]:
    frame = pd.read_excel(path, sheet_name=sheet_name, header=None, dtype=str, keep_default_na=False)
    frame = frame.fillna("")
    return [[_cell_text(value) for value in row] for row in frame.itertuples(index=False, name=None)]


def _cell_text(value: object) -> str:
    text = str(value)
    # Whole numbers read from numeric cells arrive as "150.0".
    if text.endswith(".0") and text[:-2].isdigit():
        return text[:-2]
    return text
