# household_load_profile/serial_dates.py
"""
Spreadsheet serial date numbers <-> calendar dates.

A serial date is a day count from an epoch: day N = epoch + N days. The epoch
depends on where the workbook was produced:

- Excel on Windows (and LibreOffice default): 1899-12-30
- Excel on classic Mac ("1904 date system"): 1904-01-01

The 1899-12-30 epoch absorbs Excel's fictitious 1900-02-29, so it is only
correct for dates after 1900-02-28. Load-profile sheets are far newer than that.
"""

from __future__ import annotations

from datetime import date, timedelta

import polars as pl

__all__ = [
    "EXCEL_1900_EPOCH",
    "EXCEL_1904_EPOCH",
    "from_serial",
    "parse_date_origin",
    "parse_serial_label",
    "serial_to_date_expr",
    "to_serial",
]

EXCEL_1900_EPOCH = date(1899, 12, 30)
EXCEL_1904_EPOCH = date(1904, 1, 1)

_NAMED_ORIGINS = {
    "1900": EXCEL_1900_EPOCH,
    "1904": EXCEL_1904_EPOCH,
}


def parse_date_origin(value: str | date) -> date:
    """Resolve "1900", "1904" or an ISO date string into an epoch date."""
    if isinstance(value, date):
        return value
    key = str(value).strip()
    if key in _NAMED_ORIGINS:
        return _NAMED_ORIGINS[key]
    try:
        return date.fromisoformat(key)
    except ValueError:
        raise ValueError(f"Unrecognized date origin {value!r}; expected '1900', '1904' or YYYY-MM-DD") from None


def parse_serial_label(label: str) -> int:
    """
    Parse a column header such as "44197" (or "44197.0") into an integral day count.

    Spreadsheet readers sometimes render numeric header cells with a trailing ".0";
    anything with a fractional part is a time-of-day serial, not a date, and is rejected.
    """
    text = str(label).strip()
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"Column header {label!r} is not a serial date number") from None
    if not value.is_integer():
        raise ValueError(f"Column header {label!r} is not an integral serial date number")
    return int(value)


def from_serial(serial: int, origin: date = EXCEL_1900_EPOCH) -> date:
    return origin + timedelta(days=int(serial))


def to_serial(day: date, origin: date = EXCEL_1900_EPOCH) -> int:
    return (day - origin).days


def serial_to_date_expr(col: str, origin: date = EXCEL_1900_EPOCH) -> pl.Expr:
    """Decode a text column of serial labels into pl.Date (lazy-safe). Unparseable labels become null."""
    days = pl.col(col).cast(pl.Float64, strict=False).cast(pl.Int64, strict=False)
    return (pl.lit(origin, dtype=pl.Date) + pl.duration(days=days)).cast(pl.Date)
