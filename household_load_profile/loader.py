# household_load_profile/loader.py
"""
Read the wide day x hour consumption sheet into a polars DataFrame.

Supported inputs:
- Excel/ODS workbooks (.xlsx, .xlsm, .xls, .ods) via pl.read_excel (calamine engine)
- CSV exports of the same sheet
- Parquet snapshots of the same sheet

Workbook header cells may hold plain serial numbers (44197) or date-formatted cells;
both come out as serial labels in the requested date system.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

import polars as pl

from household_load_profile.serial_dates import EXCEL_1900_EPOCH, to_serial

__all__ = ["SUPPORTED_SUFFIXES", "load_wide_sheet"]

logger = logging.getLogger(__name__)

_EXCEL_SUFFIXES = frozenset({".xlsx", ".xlsm", ".xls", ".ods"})
SUPPORTED_SUFFIXES = _EXCEL_SUFFIXES | {".csv", ".parquet"}


def _header_label(value: Any, fallback: str, origin: date) -> str:
    """Text label for one header cell; date cells become serial numbers relative to origin."""
    if value is None:
        return fallback
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return str(to_serial(value, origin))
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _read_workbook(path: Path, *, sheet_name: str | None, origin: date) -> pl.DataFrame:
    # Empty rows/columns are kept so that row position still means hour and the
    # header row lines up with the data columns.
    sheet: dict[str, Any] = {"sheet_id": 1} if sheet_name is None else {"sheet_name": sheet_name}
    read = {"engine": "calamine", "drop_empty_rows": False, "drop_empty_cols": False}

    header = pl.read_excel(path, **sheet, **read, has_header=False, read_options={"n_rows": 1})
    data = pl.read_excel(path, **sheet, **read)

    if header.width != data.width:
        raise ValueError(
            f"Could not line up the header row of {path.name}: {header.width} header cells, {data.width} columns"
        )

    labels = [_header_label(v, c, origin) for v, c in zip(header.row(0), data.columns)]
    if len(set(labels)) != len(labels):
        dupes = sorted({lbl for lbl in labels if labels.count(lbl) > 1})
        raise ValueError(f"Several header cells of {path.name} name the same day: {dupes}")
    data.columns = labels
    return data


def load_wide_sheet(
    path: Path | str,
    *,
    sheet_name: str | None = None,
    origin: date = EXCEL_1900_EPOCH,
) -> pl.DataFrame:
    """
    Load the wide sheet: one column per day (header = serial date), one row per hour.

    Headers are returned as text; value dtypes are normalized later by the reshaper.
    origin is only used to turn date-formatted workbook headers back into serial numbers,
    and should match the origin the sheet is later decoded with.

    Raises:
        FileNotFoundError: If the path does not exist
        ValueError: If the file type is not supported
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input sheet not found: {path}")

    suffix = path.suffix.lower()
    if suffix in _EXCEL_SUFFIXES:
        df = _read_workbook(path, sheet_name=sheet_name, origin=origin)
    elif suffix == ".csv":
        df = pl.read_csv(path, infer_schema_length=None)
    elif suffix == ".parquet":
        df = pl.read_parquet(path)
    else:
        raise ValueError(f"Unsupported input type {suffix!r}; expected one of {sorted(SUPPORTED_SUFFIXES)}")

    logger.info("Loaded %s: %d rows x %d day columns", path.name, df.height, df.width)
    return df
