# household_load_profile/aggregation.py
"""
Grouped summaries of the long hourly readings table.

- monthly_totals:  (month, daypart) -> sum_kwh
- quarterly_stats: (quarter, daypart) -> mean_kwh, median_kwh, n_obs, has_data

Missing readings are excluded from every statistic. A monthly group with no
readings sums to 0. A quarterly group with no readings keeps its row with null
mean/median and has_data=False instead of a bare NaN.
"""

from __future__ import annotations

import logging

import polars as pl

__all__ = ["monthly_totals", "quarterly_stats"]

logger = logging.getLogger(__name__)


def _require_columns(df: pl.DataFrame, required: list[str], *, where: str) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns for {where}: {missing}")


def monthly_totals(readings: pl.DataFrame) -> pl.DataFrame:
    """Total kWh per (month, daypart)."""
    _require_columns(readings, ["month", "daypart", "kwh"], where="monthly_totals")
    return (
        readings.group_by(["month", "daypart"])
        .agg(pl.col("kwh").sum().alias("sum_kwh"))
        .with_columns(pl.col("sum_kwh").cast(pl.Float64))
        .sort(["month", "daypart"])
    )


def quarterly_stats(readings: pl.DataFrame) -> pl.DataFrame:
    """Mean and median hourly kWh per (quarter, daypart)."""
    _require_columns(readings, ["quarter", "daypart", "kwh"], where="quarterly_stats")
    stats = (
        readings.group_by(["quarter", "daypart"])
        .agg([
            pl.col("kwh").mean().alias("mean_kwh"),
            pl.col("kwh").median().alias("median_kwh"),
            pl.col("kwh").count().cast(pl.Int64).alias("n_obs"),
        ])
        .with_columns([
            pl.col("mean_kwh").cast(pl.Float64),
            pl.col("median_kwh").cast(pl.Float64),
            (pl.col("n_obs") > 0).alias("has_data"),
        ])
        .sort(["quarter", "daypart"])
    )

    empty = stats.filter(~pl.col("has_data"))
    for row in empty.iter_rows(named=True):
        logger.warning("No readings for quarter %s / %s; mean and median left empty", row["quarter"], row["daypart"])

    return stats
