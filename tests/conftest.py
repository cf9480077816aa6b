"""Shared fixtures: synthetic wide sheets and the tables built from them."""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import polars as pl  # noqa: E402
import pytest  # noqa: E402

from household_load_profile.aggregation import monthly_totals, quarterly_stats  # noqa: E402
from household_load_profile.wide_to_long import transform_wide_to_long  # noqa: E402
from tests.synthetic_sheets import FIRST_SERIAL_2021, make_year_sheet  # noqa: E402


@pytest.fixture
def wide_two_days() -> pl.DataFrame:
    """2021-01-01 holds 1..24 kWh, 2021-01-02 holds 101..124 kWh."""
    return pl.DataFrame({
        str(FIRST_SERIAL_2021): [float(h) for h in range(1, 25)],
        str(FIRST_SERIAL_2021 + 1): [float(100 + h) for h in range(1, 25)],
    })


@pytest.fixture(scope="session")
def wide_year() -> pl.DataFrame:
    return make_year_sheet()


@pytest.fixture(scope="session")
def readings_year(wide_year) -> pl.DataFrame:
    return transform_wide_to_long(wide_year, expected_days=365)


@pytest.fixture(scope="session")
def monthly_year(readings_year) -> pl.DataFrame:
    return monthly_totals(readings_year)


@pytest.fixture(scope="session")
def quarterly_year(readings_year) -> pl.DataFrame:
    return quarterly_stats(readings_year)


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")
