# household_load_profile/wide_to_long.py
"""
Reshape the wide day x hour consumption sheet into one row per (date, hour) reading.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

import polars as pl

from household_load_profile.dayparts import DAYPART_DTYPE, daypart_expr
from household_load_profile.serial_dates import EXCEL_1900_EPOCH, parse_serial_label, serial_to_date_expr

__all__ = [
    "HOURS_PER_DAY",
    "READING_COLUMNS",
    "readings_for_date",
    "transform_wide_to_long",
    "transform_wide_to_long_lf",
]

# -------------------------------------------------------------------------------------------------
# Day x hour wide sheet -> long hourly readings
#
# Context:
# - The source workbook holds one column per calendar day. Each header is a spreadsheet serial
#   date number (e.g. 44197 = 2021-01-01 in the 1900 date system) and each column holds 24
#   successive hourly kWh readings, first row = hour 1 (00:00-01:00).
# - Downstream aggregation and charts need one row per (date, hour).
#
# Design goals:
# 1) Fail-loud shape checks in strict mode. A sheet that is not exactly 24 rows, or whose
#    headers are not serial dates, would otherwise produce silently wrong hour labels.
# 2) Hours come from an explicit per-row offset captured before the unpivot, never from the
#    position of a row in the unpivoted output.
# 3) Stable output schema (order + dtypes), sorted by (date, hour).
# -------------------------------------------------------------------------------------------------

HOURS_PER_DAY = 24

# Final output schema (exact order).
READING_COLUMNS: list[str] = ["date", "hour", "datetime", "kwh", "month", "quarter", "daypart"]


def _format_list_preview(x: list, max_items: int = 10) -> str:
    """Bounded preview of a list for error messages."""
    if len(x) <= max_items:
        return str(x)
    return str(x[:max_items])[:-1] + f", ...] (n={len(x)})"


def _validate_date_headers(columns: Sequence[str]) -> None:
    """Every header must be an integral serial date, and no two may name the same day."""
    bad: list[str] = []
    seen: dict[int, str] = {}
    dupes: list[str] = []
    for c in columns:
        try:
            serial = parse_serial_label(c)
        except ValueError:
            bad.append(c)
            continue
        if serial in seen:
            dupes.append(f"{seen[serial]}={c}")
        seen[serial] = c

    if bad:
        raise ValueError(
            "Contract violation: column headers must be spreadsheet serial date numbers.\n"
            f"- bad_headers_sample={_format_list_preview(bad)}\n"
        )
    if dupes:
        raise ValueError(
            f"Contract violation: several columns decode to the same day.\n- duplicates={_format_list_preview(dupes)}\n"
        )


def _enforce_day_count(columns: Sequence[str], expected_days: int) -> None:
    if len(columns) != expected_days:
        raise ValueError(
            f"Contract violation: expected exactly {expected_days} day columns in the wide sheet.\n"
            f"- observed_n_columns={len(columns)}\n"
            f"- first_5_columns={list(columns)[:5]}\n"
        )


def _enforce_hours_per_day_lf(lf: pl.LazyFrame, *, exact: bool) -> None:
    """exact: require 24 rows; otherwise only reject rows that would map past hour 24."""
    n_rows = int(lf.select(pl.len()).collect().item())
    if exact and n_rows != HOURS_PER_DAY:
        raise ValueError(
            f"Contract violation: expected exactly {HOURS_PER_DAY} hourly rows per day column.\n"
            f"- observed_n_rows={n_rows}\n"
        )
    if n_rows > HOURS_PER_DAY:
        raise ValueError(
            f"Contract violation: at most {HOURS_PER_DAY} hourly rows per day column.\n"
            f"- observed_n_rows={n_rows}\n"
        )


def transform_wide_to_long_lf(
    lf: pl.LazyFrame,
    *,
    origin: date = EXCEL_1900_EPOCH,
    expected_days: int | None = None,
    strict: bool = True,
) -> pl.LazyFrame:
    """
    Wide day x hour sheet -> long hourly readings (transform only; no I/O).

    Args:
        lf: One column per day (header = serial date number), one row per hour.
        origin: Epoch of the serial date system (see serial_dates).
        expected_days: If set (strict mode only), the exact number of day columns required,
            e.g. 365 for a full non-leap year.
        strict: Validate headers and the 24-row shape before reshaping. Without it, sheets
            shorter than 24 rows are accepted (hours 1..n) but longer ones are still rejected.

    Output schema:
      1) date: Date
      2) hour: Int8, 1..24
      3) datetime: Datetime(us), interval START (date + hour - 1)
      4) kwh: Float64 (nulls preserved, NaN read as null)
      5) month: Int8
      6) quarter: Int8
      7) daypart: Enum(Day, Evening, Night)
    """
    date_cols = lf.collect_schema().names()
    if not date_cols:
        raise ValueError("Contract violation: the wide sheet has no day columns.\n")

    if strict:
        _validate_date_headers(date_cols)
        if expected_days is not None:
            _enforce_day_count(date_cols, expected_days)
    _enforce_hours_per_day_lf(lf, exact=strict)

    # The row index is taken before unpivot so that each value keeps the hour it was read at.
    long = (
        lf.select([pl.col(c).cast(pl.Float64, strict=False).fill_nan(None) for c in date_cols])
        .with_row_index("hour_offset")
        .unpivot(
            index="hour_offset",
            on=date_cols,
            variable_name="serial_label",
            value_name="kwh",
        )
        .with_columns([
            serial_to_date_expr("serial_label", origin).alias("date"),
            (pl.col("hour_offset").cast(pl.Int16) + 1).cast(pl.Int8).alias("hour"),
        ])
    )

    long = long.with_columns([
        (pl.col("date").cast(pl.Datetime("us")) + pl.duration(hours=pl.col("hour").cast(pl.Int64) - 1)).alias(
            "datetime"
        ),
        pl.col("date").dt.month().cast(pl.Int8).alias("month"),
        pl.col("date").dt.quarter().cast(pl.Int8).alias("quarter"),
        daypart_expr("hour").alias("daypart"),
    ])

    return long.sort(["date", "hour"]).select([
        pl.col("date").cast(pl.Date),
        pl.col("hour").cast(pl.Int8),
        pl.col("datetime").cast(pl.Datetime("us")),
        pl.col("kwh").cast(pl.Float64),
        pl.col("month").cast(pl.Int8),
        pl.col("quarter").cast(pl.Int8),
        pl.col("daypart").cast(DAYPART_DTYPE),
    ])


def transform_wide_to_long(
    df: pl.DataFrame,
    *,
    origin: date = EXCEL_1900_EPOCH,
    expected_days: int | None = None,
    strict: bool = True,
) -> pl.DataFrame:
    """Eager wrapper around transform_wide_to_long_lf."""
    return transform_wide_to_long_lf(df.lazy(), origin=origin, expected_days=expected_days, strict=strict).collect()


def readings_for_date(readings: pl.DataFrame, day: date | str) -> pl.DataFrame:
    """The readings of a single date, ordered by hour. Raises ValueError if the date is absent."""
    if isinstance(day, str):
        day = date.fromisoformat(day)
    out = readings.filter(pl.col("date") == day).sort("hour")
    if out.height == 0:
        first, last = readings["date"].min(), readings["date"].max()
        raise ValueError(f"No readings for {day.isoformat()} (data covers {first} to {last})")
    return out
