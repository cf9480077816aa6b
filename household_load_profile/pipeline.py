# household_load_profile/pipeline.py
"""
Load -> reshape -> aggregate for one household-year, with stage checkpoints.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

import polars as pl

from household_load_profile.aggregation import monthly_totals, quarterly_stats
from household_load_profile.config import LoadProfileSettings
from household_load_profile.loader import load_wide_sheet
from household_load_profile.pipeline_validator import PipelineValidator
from household_load_profile.serial_dates import EXCEL_1900_EPOCH
from household_load_profile.wide_to_long import READING_COLUMNS, transform_wide_to_long

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadProfileTables:
    """The three in-memory tables every chart is drawn from."""

    readings: pl.DataFrame
    monthly: pl.DataFrame
    quarterly: pl.DataFrame


def build_tables(
    wide: pl.DataFrame,
    *,
    origin: date = EXCEL_1900_EPOCH,
    expected_days: int | None = None,
    strict: bool = True,
    validator: PipelineValidator | None = None,
) -> LoadProfileTables:
    """
    Reshape and aggregate an already-loaded wide sheet.

    Raises:
        ValueError: On a shape contract violation or a failed checkpoint
    """
    validator = validator or PipelineValidator()

    readings = transform_wide_to_long(wide, origin=origin, expected_days=expected_days, strict=strict)
    validator.checkpoint(
        "readings", readings, required_cols=READING_COLUMNS, key_cols=["date", "hour"], value_col="kwh"
    )

    monthly = monthly_totals(readings)
    validator.checkpoint("monthly_totals", monthly, required_cols=["month", "daypart", "sum_kwh"])

    quarterly = quarterly_stats(readings)
    validator.checkpoint(
        "quarterly_stats",
        quarterly,
        required_cols=["quarter", "daypart", "mean_kwh", "median_kwh"],
        value_col="mean_kwh",
    )

    failed = validator.failed()
    if failed:
        raise ValueError(f"Pipeline validation failed at: {failed}")

    return LoadProfileTables(readings=readings, monthly=monthly, quarterly=quarterly)


def run(settings: LoadProfileSettings) -> LoadProfileTables:
    """Load the configured sheet and build all tables."""
    logger.info("=" * 70)
    logger.info("STEP 1: LOADING WIDE SHEET")
    logger.info("=" * 70)
    wide = load_wide_sheet(settings.input_path, sheet_name=settings.sheet_name, origin=settings.date_origin)

    logger.info("=" * 70)
    logger.info("STEP 2: RESHAPING AND AGGREGATING")
    logger.info("=" * 70)
    validator = PipelineValidator()
    validator.checkpoint("wide_sheet", wide)
    tables = build_tables(
        wide,
        origin=settings.date_origin,
        expected_days=settings.expected_days,
        strict=settings.strict,
        validator=validator,
    )
    validator.summary()

    first, last = tables.readings["date"].min(), tables.readings["date"].max()
    logger.info("Readings: %s rows covering %s to %s", f"{tables.readings.height:,}", first, last)
    return tables
