"""
Exploratory charts for one household-year of hourly consumption.

Every function reads polars tables produced by wide_to_long / aggregation and
returns a matplotlib Figure; inputs are never modified.

- Hourly time series per daypart with a LOWESS trend
- Monthly totals per daypart (+ all-daypart total)
- Daypart comparison (Welch ANOVA annotation), hourly and monthly
- Quarterly box plots and quarterly means per daypart
- Single-day box, line, polar and bar charts
- Ridge-line densities of hourly consumption per month
"""

from __future__ import annotations

import calendar
import logging
from datetime import date
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import polars as pl
import seaborn as sns
from matplotlib.cm import ScalarMappable
from matplotlib.colors import Normalize
from matplotlib.figure import Figure
from matplotlib.patches import Patch
from statsmodels.nonparametric.kde import KDEUnivariate
from statsmodels.nonparametric.smoothers_lowess import lowess

from household_load_profile.dayparts import Daypart
from household_load_profile.group_comparison import compare_dayparts
from household_load_profile.wide_to_long import readings_for_date

logger = logging.getLogger(__name__)

# Style
sns.set_style("ticks")
plt.rcParams.update({
    "font.family": "sans-serif",
    "font.size": 11,
    "axes.labelsize": 13,
    "axes.titlesize": 15,
    "legend.fontsize": 11,
    "figure.titlesize": 17,
})

DAYPARTS: list[str] = [d.value for d in Daypart]
DAYPART_COLORS: dict[str, tuple[float, float, float]] = dict(
    zip(DAYPARTS, sns.color_palette("viridis", len(DAYPARTS)))
)
KWH_LABEL = "Energy Consumption (kWh)"


def _by_daypart(df: pl.DataFrame, daypart: str) -> pl.DataFrame:
    return df.filter(pl.col("daypart") == daypart)


def _legend_handles(dayparts: list[str], colors: dict[str, tuple[float, float, float]]) -> list[Patch]:
    return [Patch(facecolor=colors[d], edgecolor="white", label=d) for d in dayparts]


def _day_title(day_readings: pl.DataFrame, prefix: str = "Hourly Energy Consumption") -> str:
    return f"{prefix} {day_readings['date'][0].isoformat()}"


def _lowess_trend(sub: pl.DataFrame, frac: float) -> tuple[np.ndarray, np.ndarray] | None:
    """LOWESS of kwh against time; returns (datetime64 x, fitted y) or None if too few points."""
    sub = sub.filter(pl.col("kwh").is_not_null()).sort("datetime")
    if sub.height < 3:
        return None
    x_days = sub["datetime"].dt.epoch("s").to_numpy().astype(float) / 86400.0
    fitted = lowess(sub["kwh"].to_numpy(), x_days, frac=frac, delta=1.0, return_sorted=True)
    x = (fitted[:, 0] * 86400.0).astype("int64").astype("datetime64[s]")
    return x, fitted[:, 1]


def plot_hourly_timeseries(readings: pl.DataFrame, *, frac: float = 0.1) -> Figure:
    """Hourly kWh over the year, one panel per daypart, with a LOWESS trend."""
    fig, axes = plt.subplots(1, len(DAYPARTS), figsize=(18, 6), sharey=True)
    for ax, dp in zip(axes, DAYPARTS):
        sub = _by_daypart(readings, dp).sort("datetime")
        ax.plot(sub["datetime"].to_numpy(), sub["kwh"].to_numpy(), color=DAYPART_COLORS[dp], linewidth=0.6)
        trend = _lowess_trend(sub, frac)
        if trend is not None:
            ax.plot(trend[0], trend[1], color="#3366cc", linewidth=2.5, label="LOWESS trend")
            ax.legend(loc="upper right")
        ax.set_title(dp)
        ax.tick_params(axis="x", labelrotation=45)
        sns.despine(ax=ax)
    axes[0].set_ylabel(KWH_LABEL)
    fig.suptitle("Hourly Energy Consumption", fontweight="bold")
    fig.tight_layout()
    return fig


def plot_monthly_totals(monthly: pl.DataFrame) -> Figure:
    """Monthly kWh per daypart, plus the monthly total across dayparts."""
    fig, ax = plt.subplots(figsize=(14, 8))
    for dp in DAYPARTS:
        sub = _by_daypart(monthly, dp).sort("month")
        if sub.height == 0:
            continue
        months = sub["month"].to_list()
        totals = sub["sum_kwh"].to_list()
        ax.plot(months, totals, color=DAYPART_COLORS[dp], linewidth=2, label=dp)
        ax.scatter(months, totals, color=DAYPART_COLORS[dp], alpha=0.5, s=60)

    overall = monthly.group_by("month").agg(pl.col("sum_kwh").sum()).sort("month")
    ax.plot(overall["month"].to_list(), overall["sum_kwh"].to_list(), color="black", linewidth=2, label="Total")

    ax.set_xticks(range(1, 13))
    ax.set_xticklabels(calendar.month_abbr[1:13])
    ax.set_xlabel("Months")
    ax.set_ylabel(KWH_LABEL)
    ax.set_title("Household Electricity Load Profile", fontweight="bold")
    ax.legend(loc="upper center", bbox_to_anchor=(0.5, 1.0), ncol=len(DAYPARTS) + 1, frameon=False)
    sns.despine(ax=ax)
    fig.tight_layout()
    return fig


def plot_daypart_comparison(df: pl.DataFrame, value_col: str, *, title: str | None = None) -> Figure:
    """
    Distribution of value_col per daypart (violin + box + points) with group means,
    annotated with the Welch ANOVA result and eta squared.
    """
    comparison = compare_dayparts(df, value_col)

    data = df.select([pl.col("daypart").cast(pl.Utf8), pl.col(value_col).cast(pl.Float64)]).drop_nulls()
    groups = data["daypart"].to_list()
    values = data[value_col].to_list()
    order = [d for d in DAYPARTS if d in comparison.group_sizes]

    fig, ax = plt.subplots(figsize=(12, 8))
    sns.violinplot(
        x=groups,
        y=values,
        order=order,
        hue=groups,
        hue_order=order,
        palette=DAYPART_COLORS,
        legend=False,
        inner=None,
        cut=0,
        ax=ax,
    )
    sns.boxplot(x=groups, y=values, order=order, width=0.15, showfliers=False, color="white", ax=ax)
    sns.stripplot(
        x=groups,
        y=values,
        order=order,
        hue=groups,
        hue_order=order,
        palette=DAYPART_COLORS,
        legend=False,
        size=2.5,
        alpha=0.35,
        jitter=0.25,
        ax=ax,
    )

    for i, dp in enumerate(order):
        mean = comparison.group_means[dp]
        ax.scatter([i], [mean], color="darkred", s=90, zorder=5)
        ax.annotate(
            f"mean = {mean:.2f}",
            xy=(i, mean),
            xytext=(12, 0),
            textcoords="offset points",
            va="center",
            fontsize=10,
            bbox={"boxstyle": "round,pad=0.3", "facecolor": "white", "alpha": 0.85},
        )

    ax.set_xticks(range(len(order)))
    ax.set_xticklabels([f"{dp}\n(n = {comparison.group_sizes[dp]:,})" for dp in order])
    ax.set_xlabel("")
    ax.set_ylabel(KWH_LABEL)
    ax.set_title(f"{title or f'{value_col} by daypart'}\n{comparison.label()}", fontsize=13)
    sns.despine(ax=ax)
    fig.tight_layout()
    return fig


def plot_quarterly_boxplots(readings: pl.DataFrame) -> Figure:
    """Hourly kWh by quarter, one panel per daypart, with quarter means."""
    quarters = ["Q1", "Q2", "Q3", "Q4"]
    palette = dict(zip(quarters, sns.color_palette("viridis", len(quarters))))

    fig, axes = plt.subplots(1, len(DAYPARTS), figsize=(18, 7), sharey=True)
    for ax, dp in zip(axes, DAYPARTS):
        sub = _by_daypart(readings, dp).filter(pl.col("kwh").is_not_null())
        labels = [f"Q{q}" for q in sub["quarter"].to_list()]
        values = sub["kwh"].to_list()
        present = [q for q in quarters if q in set(labels)]
        if present:
            sns.boxplot(
                x=labels, y=values, order=present, hue=labels, hue_order=present, palette=palette, legend=False, ax=ax
            )
            means = sub.group_by("quarter").agg(pl.col("kwh").mean()).sort("quarter")
            positions = [present.index(f"Q{q}") for q in means["quarter"].to_list()]
            ax.scatter(positions, means["kwh"].to_list(), color="black", s=40, zorder=5, label="mean")
        ax.set_title(dp)
        ax.set_xlabel("")
        sns.despine(ax=ax)
    axes[0].set_ylabel(KWH_LABEL)
    fig.legend(handles=_legend_handles(quarters, palette), loc="lower center", ncol=len(quarters), frameon=False)
    fig.suptitle("Hourly Energy Consumption By Quarter Grouped By Daypart", fontweight="bold")
    fig.tight_layout(rect=(0, 0.06, 1, 1))
    return fig


def plot_quarterly_means(quarterly: pl.DataFrame) -> Figure:
    """Mean hourly kWh per quarter, one panel per daypart, labelled to 3 decimals."""
    fig, axes = plt.subplots(1, len(DAYPARTS), figsize=(18, 6), sharey=True)
    for ax, dp in zip(axes, DAYPARTS):
        sub = _by_daypart(quarterly, dp).filter(pl.col("has_data")).sort("quarter")
        quarters = sub["quarter"].to_list()
        means = sub["mean_kwh"].to_list()
        ax.scatter(quarters, means, color=DAYPART_COLORS[dp], s=120)
        for q, m in zip(quarters, means):
            ax.annotate(f"{m:.3f}", xy=(q, m), xytext=(-10, 0), textcoords="offset points", ha="right", va="center")
        ax.set_xticks([1, 2, 3, 4])
        ax.set_xticklabels(["Q1", "Q2", "Q3", "Q4"])
        ax.set_xlim(0.3, 4.5)
        ax.set_title(dp)
        sns.despine(ax=ax)
    axes[0].set_ylabel(KWH_LABEL)
    fig.suptitle("Mean Hourly Energy Consumption By Quarter Grouped By Daypart", fontweight="bold")
    fig.tight_layout()
    return fig


def plot_day_boxplot(day_readings: pl.DataFrame) -> Figure:
    """Hourly kWh of one day by daypart, with daypart means."""
    data = day_readings.filter(pl.col("kwh").is_not_null())
    groups = data["daypart"].cast(pl.Utf8).to_list()
    values = data["kwh"].to_list()
    order = [d for d in DAYPARTS if d in set(groups)]

    fig, ax = plt.subplots(figsize=(10, 7))
    sns.boxplot(
        x=groups, y=values, order=order, hue=groups, hue_order=order, palette=DAYPART_COLORS, legend=False, ax=ax
    )
    means = data.group_by("daypart").agg(pl.col("kwh").mean())
    for dp, mean in zip(means["daypart"].cast(pl.Utf8).to_list(), means["kwh"].to_list()):
        ax.scatter([order.index(dp)], [mean], color="black", s=40, zorder=5)
    ax.set_xlabel("")
    ax.set_ylabel(KWH_LABEL)
    ax.set_title(f"{_day_title(day_readings)} Grouped by Daypart", fontweight="bold")
    sns.despine(ax=ax)
    fig.tight_layout()
    return fig


def plot_day_profile(day_readings: pl.DataFrame) -> Figure:
    """kWh across the 24 hours of one day, each point labelled to 1 decimal."""
    hours = day_readings["hour"].to_list()
    kwh = day_readings["kwh"].to_numpy()

    fig, ax = plt.subplots(figsize=(14, 7))
    ax.plot(hours, kwh, color="black", linewidth=1.5, marker="o")
    for h, v in zip(hours, kwh):
        if not np.isnan(v):
            ax.annotate(f"{v:.1f}", xy=(h, v), xytext=(6, -10), textcoords="offset points", fontsize=9)
    ax.set_xticks(range(1, 25))
    ax.set_xlabel("24-hours")
    ax.set_ylabel(KWH_LABEL)
    ax.set_title(_day_title(day_readings), fontweight="bold")
    sns.despine(ax=ax)
    fig.tight_layout()
    return fig


def plot_day_polar(day_readings: pl.DataFrame) -> Figure:
    """Radial bars by hour for one day, coloured by daypart, labelled to 2 decimals."""
    data = day_readings.filter(pl.col("kwh").is_not_null())
    hours = np.array(data["hour"].to_list())
    kwh = data["kwh"].to_numpy()
    dayparts = data["daypart"].cast(pl.Utf8).to_list()
    width = 2 * np.pi / 24
    theta = (hours - 1) * width

    fig = plt.figure(figsize=(10, 10))
    ax = fig.add_subplot(projection="polar")
    ax.set_theta_zero_location("N")
    ax.set_theta_direction(-1)
    ax.bar(theta, kwh, width=width, align="edge", color=[DAYPART_COLORS[d] for d in dayparts], edgecolor="white")
    for t, v in zip(theta, kwh):
        ax.text(t + width / 2, v, f"{v:.2f}", ha="center", va="bottom", fontsize=8)
    ax.set_xticks(np.arange(24) * width + width / 2)
    ax.set_xticklabels([str(h) for h in range(1, 25)])
    ax.set_title(_day_title(day_readings), fontweight="bold", pad=20)
    present = [d for d in DAYPARTS if d in set(dayparts)]
    fig.legend(handles=_legend_handles(present, DAYPART_COLORS), loc="lower center", ncol=len(present), frameon=False)
    return fig


def plot_day_bars(day_readings: pl.DataFrame) -> Figure:
    """Bars by hour for one day, coloured by daypart, labelled to 2 decimals."""
    data = day_readings.filter(pl.col("kwh").is_not_null())
    hours = data["hour"].to_list()
    kwh = data["kwh"].to_list()
    dayparts = data["daypart"].cast(pl.Utf8).to_list()
    colors = dict(zip(DAYPARTS, sns.color_palette("mako", len(DAYPARTS))))

    fig, ax = plt.subplots(figsize=(15, 7))
    bars = ax.bar(hours, kwh, width=1, color=[colors[d] for d in dayparts], edgecolor="white")
    for bar, v in zip(bars, kwh):
        ax.text(bar.get_x() + bar.get_width() / 2.0, bar.get_height(), f"{v:.2f}", ha="center", va="bottom", fontsize=8)
    ax.set_xticks(range(1, 25))
    ax.set_xlabel("24-hours")
    ax.set_ylabel(KWH_LABEL)
    ax.set_title(_day_title(day_readings), fontweight="bold")
    present = [d for d in DAYPARTS if d in set(dayparts)]
    ax.legend(handles=_legend_handles(present, colors), loc="upper center", bbox_to_anchor=(0.5, -0.1), ncol=3)
    sns.despine(ax=ax)
    fig.tight_layout()
    return fig


def plot_monthly_ridges(readings: pl.DataFrame, *, scale: float = 3.0, rel_min_height: float = 0.01) -> Figure:
    """
    Ridge-line densities of hourly kWh per month, filled with a kWh colour gradient.

    scale: height of the tallest ridge in rows (values > 1 overlap).
    rel_min_height: density tails below this fraction of the tallest peak are trimmed.
    """
    densities: dict[int, tuple[np.ndarray, np.ndarray]] = {}
    for month in range(1, 13):
        values = readings.filter((pl.col("month") == month) & pl.col("kwh").is_not_null())["kwh"].to_numpy()
        if len(values) < 2 or float(np.std(values)) == 0.0:
            continue
        kde = KDEUnivariate(values.astype(float))
        kde.fit()
        densities[month] = (kde.support, kde.density)

    fig, ax = plt.subplots(figsize=(12, 10))
    if not densities:
        logger.warning("No month has enough readings for a density estimate")
        ax.set_title("Distribution Hourly Energy Consumption Per Month", fontweight="bold")
        return fig

    peak = max(float(d.max()) for _, d in densities.values())
    x_min = min(float(s.min()) for s, _ in densities.values())
    x_max = max(float(s.max()) for s, _ in densities.values())
    cmap = plt.get_cmap("turbo")
    norm = Normalize(vmin=x_min, vmax=x_max)
    gradient = np.linspace(x_min, x_max, 256).reshape(1, -1)
    height = scale / peak

    # Later (lower) months are drawn on top so each ridge overlaps the one above it.
    for month in sorted(densities, reverse=True):
        support, density = densities[month]
        keep = density >= rel_min_height * peak
        if not keep.any():
            continue
        xs, ys = support[keep], month - 1 + density[keep] * height
        base = month - 1
        zorder = 2 * (13 - month)
        poly = ax.fill_between(xs, base, ys, facecolor="none", edgecolor="none", zorder=zorder)
        im = ax.imshow(
            gradient,
            extent=(x_min, x_max, base, base + scale),
            aspect="auto",
            cmap=cmap,
            norm=norm,
            origin="lower",
            zorder=zorder,
        )
        im.set_clip_path(poly.get_paths()[0], transform=ax.transData)
        ax.plot(xs, ys, color="black", linewidth=0.8, zorder=zorder + 1)

    ax.set_xlim(x_min, x_max)
    ax.set_ylim(-0.2, 12 + scale)
    ax.set_yticks(np.arange(12))
    ax.set_yticklabels([str(m) for m in range(1, 13)])
    ax.set_xlabel("kWh")
    ax.set_ylabel("month")
    ax.set_title("Distribution Hourly Energy Consumption Per Month", fontweight="bold")
    fig.colorbar(ScalarMappable(norm=norm, cmap=cmap), ax=ax, orientation="horizontal", label="KWh", pad=0.08)
    sns.despine(ax=ax)
    return fig


def render_all(
    readings: pl.DataFrame,
    monthly: pl.DataFrame,
    quarterly: pl.DataFrame,
    *,
    focus_date: date | str | None = None,
    output_dir: Path | None = None,
    show: bool = True,
) -> dict[str, Figure]:
    """
    Build the full chart battery.

    focus_date selects the day for the single-day charts (default: last day in the data).
    With output_dir set, each figure is also written as <name>.png. With show=False the figures
    are closed before returning, so they stay usable but are no longer tracked by pyplot.
    """
    if focus_date is None:
        focus_date = readings["date"].max()
    day = readings_for_date(readings, focus_date)

    figures: dict[str, Figure] = {}
    figures["monthly_totals"] = plot_monthly_totals(monthly)
    figures["monthly_daypart_comparison"] = plot_daypart_comparison(
        monthly, "sum_kwh", title="Monthly Energy Consumption by Daypart"
    )
    figures["hourly_timeseries"] = plot_hourly_timeseries(readings)
    figures["hourly_daypart_comparison"] = plot_daypart_comparison(
        readings, "kwh", title="Hourly Energy Consumption by Daypart"
    )
    figures["quarterly_boxplots"] = plot_quarterly_boxplots(readings)
    figures["quarterly_means"] = plot_quarterly_means(quarterly)
    figures["day_boxplot"] = plot_day_boxplot(day)
    figures["day_profile"] = plot_day_profile(day)
    figures["day_polar"] = plot_day_polar(day)
    figures["day_bars"] = plot_day_bars(day)
    figures["monthly_ridges"] = plot_monthly_ridges(readings)
    logger.info("Rendered %d charts (focus date %s)", len(figures), day["date"][0])

    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
        for name, fig in figures.items():
            output_file = output_dir / f"{name}.png"
            fig.savefig(output_file, dpi=150, bbox_inches="tight", facecolor="white")
            logger.info(f"✅ Saved: {output_file}")

    if show:
        plt.show()
    else:
        for fig in figures.values():
            plt.close(fig)

    return figures
