"""Synthetic wide sheets for tests."""

import math
from datetime import date

import numpy as np
import polars as pl
from openpyxl import Workbook

from household_load_profile.dayparts import Daypart, daypart_for_hour

# 2021-01-01 in the 1900 date system
FIRST_SERIAL_2021 = 44197

_DAYPART_BASE = {Daypart.NIGHT: 0.3, Daypart.DAY: 0.8, Daypart.EVENING: 1.6}


def make_year_sheet(first_serial: int = FIRST_SERIAL_2021, n_days: int = 365, seed: int = 42) -> pl.DataFrame:
    """Wide sheet with daypart-dependent levels, a seasonal swing and small noise."""
    rng = np.random.default_rng(seed)
    columns: dict[str, list[float]] = {}
    for d in range(n_days):
        seasonal = 0.2 * math.cos(2 * math.pi * d / 365)
        columns[str(first_serial + d)] = [
            round(_DAYPART_BASE[daypart_for_hour(h)] + seasonal + float(rng.normal(0, 0.05)), 4) for h in range(1, 25)
        ]
    return pl.DataFrame(columns)


def write_workbook(path, sheets: dict[str, tuple[list, list[list[float | None]]]]) -> None:
    """
    Write an .xlsx with openpyxl: sheet title -> (header cells, day columns).

    date/datetime header cells are stored as real date cells with a date number format.
    """
    wb = Workbook()
    wb.remove(wb.active)
    for title, (headers, columns) in sheets.items():
        ws = wb.create_sheet(title)
        for col_idx, (header, values) in enumerate(zip(headers, columns), start=1):
            cell = ws.cell(row=1, column=col_idx, value=header)
            if isinstance(header, date):
                cell.number_format = "yyyy-mm-dd"
            for row_idx, value in enumerate(values, start=2):
                ws.cell(row=row_idx, column=col_idx, value=value)
    wb.save(path)
