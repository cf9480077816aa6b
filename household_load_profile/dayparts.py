# household_load_profile/dayparts.py
"""
Daypart classification of hour-of-day readings.

Hours are 1..24, where hour h covers the interval starting at (h - 1):00.
The partition is fixed:

    Night    hours 1-5 and 22-24
    Day      hours 6-17
    Evening  hours 18-21
"""

from __future__ import annotations

from enum import Enum

import polars as pl

__all__ = [
    "DAYPART_DTYPE",
    "HOURS",
    "Daypart",
    "daypart_expr",
    "daypart_for_hour",
]

HOURS: range = range(1, 25)


class Daypart(str, Enum):
    DAY = "Day"
    EVENING = "Evening"
    NIGHT = "Night"


# Categorical order used for every table and chart legend.
DAYPART_DTYPE = pl.Enum([d.value for d in Daypart])


def daypart_for_hour(hour: int) -> Daypart:
    """Classify one hour (1..24). Raises ValueError outside that domain."""
    if hour not in HOURS:
        raise ValueError(f"hour must be in 1..24, got {hour!r}")
    if 1 <= hour <= 5 or 22 <= hour <= 24:
        return Daypart.NIGHT
    if 18 <= hour <= 21:
        return Daypart.EVENING
    return Daypart.DAY


def daypart_expr(hour_col: str = "hour") -> pl.Expr:
    """Vectorized daypart_for_hour; hours outside 1..24 map to null."""
    h = pl.col(hour_col)
    return (
        pl.when(h.is_between(1, 5) | h.is_between(22, 24))
        .then(pl.lit(Daypart.NIGHT.value))
        .when(h.is_between(18, 21))
        .then(pl.lit(Daypart.EVENING.value))
        .when(h.is_between(6, 17))
        .then(pl.lit(Daypart.DAY.value))
        .otherwise(pl.lit(None, dtype=pl.Utf8))
        .cast(DAYPART_DTYPE)
    )
