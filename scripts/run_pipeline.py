#!/usr/bin/env python3
"""
Household load profile: load one year of hourly kWh, summarize, and chart it.

Usage:
    python scripts/run_pipeline.py --input data/kwh.xlsx
    python scripts/run_pipeline.py --input data/kwh.xlsx --focus-date 2021-12-12
    python scripts/run_pipeline.py --input data/kwh.xlsx --date-origin 1904 --output-dir charts --no-show
    python scripts/run_pipeline.py --config config/custom.yaml

The script:
1. Loads configuration from config/load_profile.yaml (or custom config)
2. Overrides input/reshape/chart settings provided via CLI
3. Builds the readings, monthly and quarterly tables
4. Renders the chart battery (interactive display and/or PNG files)
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from household_load_profile.config import default_config_path, get_settings, load_config
from household_load_profile.pipeline import run
from household_load_profile.plotting import render_all

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineArgs:
    """Parsed CLI arguments."""

    input: Path | None
    config: Path | None
    sheet: str | None
    date_origin: str | None
    focus_date: str | None
    expected_days: int | None
    output_dir: Path | None
    no_show: bool


def _parse_args(argv: list[str] | None = None) -> PipelineArgs:
    parser = argparse.ArgumentParser(
        description="Summarize and chart one year of hourly household electricity consumption",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help="Wide sheet with one column per day (.xlsx/.xls/.ods/.csv/.parquet) (default: from config)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: config/load_profile.yaml)",
    )
    parser.add_argument("--sheet", default=None, help="Workbook sheet name (default: first sheet)")
    parser.add_argument(
        "--date-origin",
        default=None,
        help="Serial date system: 1900 (Excel/Windows), 1904 (classic Mac Excel) or an explicit YYYY-MM-DD epoch",
    )
    parser.add_argument("--focus-date", default=None, help="Day for the single-day charts, YYYY-MM-DD")
    parser.add_argument(
        "--expected-days",
        type=int,
        default=None,
        help="Exact number of day columns required (default: from config, typically 365)",
    )
    parser.add_argument("--output-dir", type=Path, default=None, help="Also write each chart as PNG here")
    parser.add_argument("--no-show", action="store_true", help="Do not open the interactive chart windows")

    ns = parser.parse_args(argv)
    return PipelineArgs(
        input=ns.input,
        config=ns.config,
        sheet=ns.sheet,
        date_origin=ns.date_origin,
        focus_date=ns.focus_date,
        expected_days=ns.expected_days,
        output_dir=ns.output_dir,
        no_show=ns.no_show,
    )


def _load_and_override_config(args: PipelineArgs) -> dict[str, Any]:
    if args.config is None and not default_config_path().exists():
        config: dict[str, Any] = {}
    else:
        try:
            config = load_config(args.config)
        except FileNotFoundError as e:
            logger.error("Config file not found: %s", e)
            raise

    inp = dict(config.get("input") or {})
    reshape = dict(config.get("reshape") or {})
    charts = dict(config.get("charts") or {})

    # Override from CLI
    if args.input is not None:
        inp["path"] = str(args.input)
    if args.sheet is not None:
        inp["sheet"] = args.sheet
    if args.date_origin is not None:
        reshape["date_origin"] = args.date_origin
    if args.expected_days is not None:
        reshape["expected_days"] = args.expected_days
    if args.focus_date is not None:
        charts["focus_date"] = args.focus_date
    if args.output_dir is not None:
        charts["output_dir"] = str(args.output_dir)
    if args.no_show:
        charts["show"] = False

    return {**config, "input": inp, "reshape": reshape, "charts": charts}


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = _parse_args(argv)

    try:
        config = _load_and_override_config(args)
    except FileNotFoundError:
        return 1

    try:
        settings = get_settings(config)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    logger.info("=" * 70)
    logger.info("HOUSEHOLD LOAD PROFILE")
    logger.info("=" * 70)
    logger.info("Input: %s", settings.input_path)
    logger.info("Date origin: %s", settings.date_origin)

    if not settings.input_path.exists():
        logger.error("Input file not found: %s", settings.input_path)
        return 1

    if not settings.show and settings.output_dir is None:
        logger.warning("Charts are neither shown nor saved (--no-show without --output-dir)")

    try:
        tables = run(settings)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Failed to build load profile tables: %s", e)
        return 1

    try:
        render_all(
            tables.readings,
            tables.monthly,
            tables.quarterly,
            focus_date=settings.focus_date,
            output_dir=settings.output_dir,
            show=settings.show,
        )
    except ValueError as e:
        logger.error("Failed to render charts: %s", e)
        return 1

    logger.info("=" * 70)
    logger.info("PIPELINE COMPLETE")
    logger.info("=" * 70)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
