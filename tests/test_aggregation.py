"""Tests for monthly totals and quarterly statistics"""

import logging

import polars as pl
import pytest

from household_load_profile.aggregation import monthly_totals, quarterly_stats
from household_load_profile.dayparts import Daypart
from household_load_profile.loader import load_wide_sheet
from household_load_profile.wide_to_long import transform_wide_to_long
from tests.synthetic_sheets import FIRST_SERIAL_2021, make_year_sheet


def test_monthly_totals_shape(monthly_year):
    assert monthly_year.columns == ["month", "daypart", "sum_kwh"]
    assert monthly_year.height == 12 * 3
    assert monthly_year.select(["month", "daypart"]).unique().height == 36


@pytest.mark.parametrize("daypart", [d.value for d in Daypart])
def test_monthly_totals_add_up_to_yearly_total(readings_year, monthly_year, daypart):
    """Summing one daypart's monthly totals equals summing its hourly readings"""
    from_months = monthly_year.filter(pl.col("daypart") == daypart)["sum_kwh"].sum()
    from_hours = readings_year.filter(pl.col("daypart") == daypart)["kwh"].sum()
    assert from_months == pytest.approx(from_hours)


def test_monthly_totals_known_values(wide_two_days):
    monthly = monthly_totals(transform_wide_to_long(wide_two_days))
    by_daypart = dict(zip(monthly["daypart"].to_list(), monthly["sum_kwh"].to_list()))

    # Evening hours 18..21 on both days: (18+19+20+21) + (118+119+120+121)
    assert by_daypart["Evening"] == pytest.approx(78 + 478)
    assert sum(by_daypart.values()) == pytest.approx(sum(range(1, 25)) + sum(range(101, 125)))


def test_all_missing_month_sums_to_zero():
    """A month with no readings at all still gets rows, with a total of 0"""
    sheet = make_year_sheet()
    january = [str(FIRST_SERIAL_2021 + d) for d in range(31)]
    sheet = sheet.with_columns([pl.lit(None, dtype=pl.Float64).alias(c) for c in january])

    monthly = monthly_totals(transform_wide_to_long(sheet, expected_days=365))
    jan = monthly.filter(pl.col("month") == 1)

    assert jan.height == 3
    assert jan["sum_kwh"].to_list() == [0.0, 0.0, 0.0]
    assert monthly.filter(pl.col("month") == 2)["sum_kwh"].min() > 0


def test_quarterly_stats_shape(quarterly_year):
    assert quarterly_year.columns == ["quarter", "daypart", "mean_kwh", "median_kwh", "n_obs", "has_data"]
    assert quarterly_year.height == 4 * 3
    assert quarterly_year["has_data"].all()


def test_quarterly_mean_lies_within_group_range(readings_year, quarterly_year):
    bounds = readings_year.group_by(["quarter", "daypart"]).agg(
        pl.col("kwh").min().alias("lo"),
        pl.col("kwh").max().alias("hi"),
    )
    joined = quarterly_year.join(bounds, on=["quarter", "daypart"])

    assert joined.height == quarterly_year.height
    for row in joined.iter_rows(named=True):
        assert row["lo"] <= row["mean_kwh"] <= row["hi"]
        assert row["lo"] <= row["median_kwh"] <= row["hi"]


def test_quarterly_counts(quarterly_year):
    q1_night = quarterly_year.filter((pl.col("quarter") == 1) & (pl.col("daypart") == "Night"))
    # 90 days in Q1 2021, 8 night hours per day
    assert q1_night["n_obs"].item() == 90 * 8


def test_quarterly_stats_ignore_missing_values():
    sheet = pl.DataFrame({"44197": [None] * 5 + [2.0] * 19}, schema={"44197": pl.Float64})
    stats = quarterly_stats(transform_wide_to_long(sheet))
    night = stats.filter(pl.col("daypart") == "Night").row(0, named=True)

    # Night = hours 1-5 (missing) and 22-24 (2.0)
    assert night["mean_kwh"] == pytest.approx(2.0)
    assert night["median_kwh"] == pytest.approx(2.0)
    assert night["n_obs"] == 3


def test_quarter_without_readings_is_marked_no_data(caplog):
    sheet = pl.DataFrame({"44197": [None] * 24}, schema={"44197": pl.Float64})

    with caplog.at_level(logging.WARNING, logger="household_load_profile.aggregation"):
        stats = quarterly_stats(transform_wide_to_long(sheet))

    assert stats.height == 3
    assert stats["has_data"].to_list() == [False, False, False]
    assert stats["n_obs"].to_list() == [0, 0, 0]
    assert stats["mean_kwh"].null_count() == 3
    assert stats["median_kwh"].null_count() == 3
    assert "No readings for quarter 1" in caplog.text


def test_nan_cells_are_excluded_like_missing_ones(tmp_path, caplog):
    """NaN cells in a CSV export count as missing in every statistic"""
    path = tmp_path / "kwh.csv"
    path.write_text("44197\n" + "NaN\n" * 5 + "1.0\n" * 16 + "NaN\n" * 3)
    readings = transform_wide_to_long(load_wide_sheet(path))

    with caplog.at_level(logging.WARNING, logger="household_load_profile.aggregation"):
        stats = quarterly_stats(readings)
    monthly = monthly_totals(readings)

    by_daypart = {row["daypart"]: row for row in stats.iter_rows(named=True)}
    assert by_daypart["Night"]["has_data"] is False
    assert by_daypart["Night"]["mean_kwh"] is None
    assert by_daypart["Day"]["mean_kwh"] == pytest.approx(1.0)
    assert by_daypart["Evening"]["n_obs"] == 4
    assert "No readings for quarter 1" in caplog.text

    totals = dict(zip(monthly["daypart"].to_list(), monthly["sum_kwh"].to_list()))
    assert totals == {"Day": pytest.approx(12.0), "Evening": pytest.approx(4.0), "Night": 0.0}


def test_missing_columns_raise():
    with pytest.raises(ValueError, match="monthly_totals"):
        monthly_totals(pl.DataFrame({"month": [1], "kwh": [1.0]}))
    with pytest.raises(ValueError, match="quarterly_stats"):
        quarterly_stats(pl.DataFrame({"quarter": [1], "kwh": [1.0]}))
