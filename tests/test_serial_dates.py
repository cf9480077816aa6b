"""Tests for spreadsheet serial date decoding"""

from datetime import date

import polars as pl
import pytest

from household_load_profile.serial_dates import (
    EXCEL_1900_EPOCH,
    EXCEL_1904_EPOCH,
    from_serial,
    parse_date_origin,
    parse_serial_label,
    serial_to_date_expr,
    to_serial,
)


def test_known_serials_1900_system():
    assert from_serial(44197) == date(2021, 1, 1)
    assert from_serial(44561) == date(2021, 12, 31)
    # Excel shows 61 for 1900-03-01
    assert to_serial(date(1900, 3, 1)) == 61


def test_known_serials_1904_system():
    assert from_serial(0, EXCEL_1904_EPOCH) == date(1904, 1, 1)
    # Same calendar day is 1462 days apart between the two systems
    assert to_serial(date(2021, 1, 1), EXCEL_1904_EPOCH) == 44197 - 1462


@pytest.mark.parametrize("origin", [EXCEL_1900_EPOCH, EXCEL_1904_EPOCH])
def test_round_trip_for_a_year_of_dates(origin):
    """Decoding then re-encoding every day of a year gives back the same serial"""
    start = to_serial(date(2021, 1, 1), origin)
    for serial in range(start, start + 365):
        day = from_serial(serial, origin)
        assert to_serial(day, origin) == serial
        assert from_serial(to_serial(day, origin), origin) == day


def test_parse_serial_label():
    assert parse_serial_label("44197") == 44197
    assert parse_serial_label(" 44197.0 ") == 44197

    with pytest.raises(ValueError, match="not an integral"):
        parse_serial_label("44197.5")
    with pytest.raises(ValueError, match="not a serial date"):
        parse_serial_label("2021-01-01")


def test_parse_date_origin():
    assert parse_date_origin("1900") == EXCEL_1900_EPOCH
    assert parse_date_origin("1904") == EXCEL_1904_EPOCH
    assert parse_date_origin("1970-01-01") == date(1970, 1, 1)
    assert parse_date_origin(date(2000, 1, 1)) == date(2000, 1, 1)

    with pytest.raises(ValueError, match="Unrecognized date origin"):
        parse_date_origin("windows")


def test_serial_to_date_expr():
    df = pl.DataFrame({"label": ["44197", "44198.0", "not-a-date"]})
    out = df.select(serial_to_date_expr("label").alias("date"))

    assert out["date"].dtype == pl.Date
    assert out["date"].to_list() == [date(2021, 1, 1), date(2021, 1, 2), None]


def test_serial_to_date_expr_1904():
    df = pl.DataFrame({"label": ["0", "366"]})
    out = df.select(serial_to_date_expr("label", EXCEL_1904_EPOCH).alias("date"))

    assert out["date"].to_list() == [date(1904, 1, 1), date(1905, 1, 1)]
