"""Between-daypart comparison of consumption (Welch one-way ANOVA + effect size)."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import polars as pl
from statsmodels.stats.oneway import anova_oneway

__all__ = ["DaypartComparison", "compare_dayparts"]


@dataclass(frozen=True)
class DaypartComparison:
    """Result of comparing one value column across dayparts."""

    value_col: str
    f_statistic: float
    p_value: float
    df_between: float
    df_within: float
    eta_squared: float
    n_obs: int
    group_sizes: dict[str, int]
    group_means: dict[str, float]

    def label(self) -> str:
        """Compact annotation text for charts."""
        return (
            f"Welch F({self.df_between:.0f}, {self.df_within:.1f}) = {self.f_statistic:.2f}, "
            f"p = {self.p_value:.3g}, eta² = {self.eta_squared:.2f}, n = {self.n_obs:,}"
        )


def _eta_squared(values: np.ndarray, groups: np.ndarray) -> float:
    grand_mean = values.mean()
    ss_total = float(((values - grand_mean) ** 2).sum())
    if ss_total == 0.0:
        return 0.0
    ss_between = 0.0
    for g in np.unique(groups):
        v = values[groups == g]
        ss_between += len(v) * float((v.mean() - grand_mean) ** 2)
    return ss_between / ss_total


def compare_dayparts(df: pl.DataFrame, value_col: str, *, group_col: str = "daypart") -> DaypartComparison:
    """
    Welch ANOVA of value_col across dayparts, ignoring missing values.

    Works at any granularity: hourly readings (value_col="kwh") or monthly
    totals (value_col="sum_kwh").
    """
    missing = [c for c in (value_col, group_col) if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns for compare_dayparts: {missing}")

    data = df.select([pl.col(group_col).cast(pl.Utf8), pl.col(value_col).cast(pl.Float64)]).drop_nulls()
    data = data.filter(pl.col(value_col).is_not_nan())

    sizes = data.group_by(group_col).agg(pl.len().alias("n"), pl.col(value_col).mean().alias("mean")).sort(group_col)
    if sizes.height < 2:
        raise ValueError(f"Need at least two dayparts with data to compare {value_col}; found {sizes.height}")

    values = data[value_col].to_numpy()
    groups = data[group_col].to_numpy()

    res = anova_oneway(values, groups=groups, use_var="unequal", welch_correction=True)

    return DaypartComparison(
        value_col=value_col,
        f_statistic=float(res.statistic),
        p_value=float(res.pvalue),
        df_between=float(res.df_num),
        df_within=float(res.df_denom),
        eta_squared=_eta_squared(values, groups),
        n_obs=int(data.height),
        group_sizes=dict(zip(sizes[group_col].to_list(), sizes["n"].to_list())),
        group_means=dict(zip(sizes[group_col].to_list(), sizes["mean"].to_list())),
    )
