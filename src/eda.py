"""
eda.py
Chart sequence for the Chicago index-crime data.

Each chart is one function: it takes a summary table (or the cleaned table,
for the maps), a theme and a color scale, draws a declarative seaborn plot,
saves a PNG and returns the Figure.

Sequence:
- daily trend (line, optional rolling-mean layer)
- monthly volume (dodged bars)
- monthly volume per district (faceted bars)
- day-of-week × hour (tiled heatmap, faceted by crime type)
- highest-density regions of incident locations (faceted)
- kernel density over a street basemap
"""

import argparse
import logging
from pathlib import Path

import contextily as ctx
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
import seaborn as sns
from matplotlib.colors import ListedColormap
from matplotlib.patches import Patch

from data_cleaning import DAY_ORDER, load_cleaned_data
from summaries import HOURS, MONTHS, daily_counts, district_counts, monthly_counts, time_counts
from themes import get_cmap, get_palette, theme_context

log = logging.getLogger(__name__)

FIG_DIR = Path("data/processed/eda/plots")
SOURCE_NOTE = "Source: City of Chicago Data Portal"
MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

HDR_PROBS = (0.5, 0.8, 0.95, 0.99)

# KDE cost grows with point count; a sample is visually indistinguishable
KDE_SAMPLE = 50_000


# ── Helpers ───────────────────────────────────────────────────────────────────

def _save(fig: plt.Figure, name: str, fig_dir=FIG_DIR) -> Path:
    fig_dir = Path(fig_dir)
    fig_dir.mkdir(parents=True, exist_ok=True)
    path = fig_dir / f"{name}.png"
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    log.info(f"  ✓ Saved → {path}")
    return path


def _source_note(ax, note=SOURCE_NOTE):
    ax.annotate(note, xy=(0, -0.12), xycoords="axes fraction",
                fontsize=7, color="gray")


def fmt_thousands(ax, axis="y"):
    fmt = mticker.FuncFormatter(lambda x, _: f"{x:,.0f}")
    if axis == "y":
        ax.yaxis.set_major_formatter(fmt)
    else:
        ax.xaxis.set_major_formatter(fmt)


def _type_palette(table, scale: str) -> dict:
    types = sorted(table["crime_type"].unique())
    return dict(zip(types, get_palette(scale, len(types))))


def _located(df, sample=None):
    """Rows with usable coordinates, sampled down to `sample` (KDE_SAMPLE by default)."""
    if "Valid.Coordinates" in df.columns:
        points = df[df["Valid.Coordinates"].astype(bool)]
    else:
        points = df.dropna(subset=["Latitude", "Longitude"])
    if points.empty:
        raise ValueError("No rows have valid coordinates; cannot draw a density map")

    sample = KDE_SAMPLE if sample is None else sample
    if sample and len(points) > sample:
        points = points.sample(n=sample, random_state=0)
    return points


# ── Chart 1: Daily Trend ──────────────────────────────────────────────────────

def plot_daily_trend(daily, theme="default", scale="set1", rolling=None, fig_dir=FIG_DIR):
    """
    Q: How does daily crime volume move over time, for each crime type?
    `rolling` (days) adds a smoothed layer over the raw daily line.
    """
    palette = _type_palette(daily, scale)

    with theme_context(theme):
        fig, ax = plt.subplots(figsize=(12, 5))
        sns.lineplot(data=daily, x="date", y="count", hue="crime_type",
                     palette=palette, errorbar=None, linewidth=0.8,
                     alpha=0.4 if rolling else 1.0, ax=ax)

        if rolling:
            for crime_type, grp in daily.groupby("crime_type"):
                # time-based window: days with no incidents have no row
                smooth = grp.set_index("date")["count"].rolling(f"{rolling}D", min_periods=1).mean()
                ax.plot(smooth.index, smooth.values, color=palette[crime_type], linewidth=2,
                        label=f"{crime_type} ({rolling}-day mean)")
            ax.legend(fontsize=8)
        else:
            ax.get_legend().set_title("")

        ax.set_title("Daily Index Crimes in Chicago")
        ax.set_xlabel("Date of Crime")
        ax.set_ylabel("Number of Crimes")
        fmt_thousands(ax)
        _source_note(ax)
        fig.tight_layout()
        _save(fig, "01_daily_trend", fig_dir)

    return fig


# ── Chart 2: Monthly Volume ───────────────────────────────────────────────────

def plot_monthly_bars(monthly, theme="default", scale="set1", fig_dir=FIG_DIR):
    palette = _type_palette(monthly, scale)

    with theme_context(theme):
        fig, ax = plt.subplots(figsize=(12, 5))
        sns.barplot(data=monthly, x="month", y="count", hue="crime_type", order=MONTHS,
                    palette=palette, errorbar=None, ax=ax)
        ax.set_xticks(range(12))
        ax.set_xticklabels(MONTH_LABELS)
        ax.set_title("Index Crimes by Month of Year")
        ax.set_xlabel("Month")
        ax.set_ylabel("Number of Crimes")
        ax.get_legend().set_title("")
        fmt_thousands(ax)
        _source_note(ax)
        fig.tight_layout()
        _save(fig, "02_monthly_bars", fig_dir)

    return fig


# ── Chart 3: Monthly Volume per District ──────────────────────────────────────

def plot_district_facets(district, theme="default", scale="set1", col_wrap=5, fig_dir=FIG_DIR):
    """
    Q: Do all districts share the same seasonal pattern?
    One small bar chart per district, shared y-axis so volumes are comparable.
    """
    palette = _type_palette(district, scale)

    with theme_context(theme):
        g = sns.catplot(
            data=district, kind="bar",
            x="month", y="count", hue="crime_type",
            col="District", col_order=sorted(district["District"].unique()), col_wrap=col_wrap,
            order=MONTHS, palette=palette, errorbar=None,
            height=2.2, aspect=1.4, sharey=True,
        )
        g.set_titles("District {col_name}")
        g.set_axis_labels("", "Crimes")
        for ax in g.axes.flat:
            ax.set_xticks(range(12))
            ax.set_xticklabels([m[0] for m in MONTH_LABELS], fontsize=7)
            fmt_thousands(ax)
        if g.legend is not None:
            g.legend.set_title("")
        g.figure.suptitle("Index Crimes by Month, per Police District", fontweight="bold")
        g.figure.subplots_adjust(top=0.92)
        _save(g.figure, "03_district_facets", fig_dir)

    return g.figure


# ── Chart 4: Day-of-Week × Hour Heatmap ───────────────────────────────────────

def _tile(data, value, color=None, **kws):
    grid = (
        data.assign(day_of_week=data["day_of_week"].astype(str))
        .pivot(index="day_of_week", columns="hour", values=value)
        .reindex(index=DAY_ORDER, columns=HOURS)
    )
    sns.heatmap(grid, linewidths=0.3, linecolor="white", **kws)


def plot_time_heatmap(time, value="count", theme="default", scale="viridis", fig_dir=FIG_DIR):
    """
    Q: When during the week does each crime type peak?
    value="norm" colors each tile by its share of that crime type's total,
    so violent and property crime are comparable despite different volumes.
    """
    label = "Share of Crimes" if value == "norm" else "Number of Crimes"

    with theme_context(theme):
        # heatmap inverts the y-axis; shared axes would undo it on every other facet
        g = sns.FacetGrid(time, col="crime_type", col_order=sorted(time["crime_type"].unique()),
                          height=3.5, aspect=2.0, sharex=False, sharey=False)
        g.map_dataframe(_tile, value=value, cmap=get_cmap(scale),
                        vmin=0, vmax=time[value].max(),
                        cbar_kws={"label": label})
        g.set_titles("{col_name}")
        g.set_axis_labels("Hour of Day", "")
        g.figure.suptitle("Crimes by Day of Week and Hour", fontweight="bold")
        g.figure.subplots_adjust(top=0.85)
        _save(g.figure, f"04_time_heatmap_{value}", fig_dir)

    return g.figure


# ── Chart 5: Highest-Density Regions ──────────────────────────────────────────

def plot_density_regions(df, probs=HDR_PROBS, theme="default", scale="viridis", fig_dir=FIG_DIR):
    """
    Q: Where are incidents concentrated?
    Each band is the smallest region holding the given share of incidents.
    seaborn levels are iso-proportions of mass *below* the contour, so a
    region holding p of the mass is bounded by level 1 - p.
    """
    points = _located(df)
    probs = sorted(probs, reverse=True)
    colors = get_palette(scale, len(probs))
    types = sorted(points["crime_type"].unique())

    with theme_context(theme):
        fig, axes = plt.subplots(1, len(types), figsize=(6 * len(types), 7),
                                 sharex=True, sharey=True, squeeze=False)
        for ax, crime_type in zip(axes.flat, types):
            grp = points[points["crime_type"] == crime_type]
            ax.scatter(grp["Longitude"], grp["Latitude"], s=1, color="black", alpha=0.1, linewidths=0)
            # widest band first so narrower, denser bands draw on top
            for p, c in zip(probs, colors):
                sns.kdeplot(data=grp, x="Longitude", y="Latitude", fill=True,
                            levels=[1 - p, 1], cmap=ListedColormap([c]), alpha=0.7, ax=ax)
            ax.set_title(crime_type)
            ax.set_xlabel("Longitude")
            ax.set_ylabel("Latitude")

        handles = [Patch(facecolor=c, alpha=0.7, label=f"{p:.0%}") for p, c in zip(probs, colors)]
        fig.legend(handles=handles, title="Probability", loc="center right")
        fig.suptitle("Highest-Density Regions of Index Crimes", fontweight="bold")
        _source_note(axes.flat[0])
        fig.tight_layout(rect=(0, 0, 0.92, 1))
        _save(fig, "05_density_regions", fig_dir)

    return fig


# ── Chart 6: Density over a Basemap ───────────────────────────────────────────

def plot_density_map(df, theme="default", scale="inferno", basemap=True, fig_dir=FIG_DIR):
    """
    Q: Which neighbourhoods are the hotspots?
    Points plus a filled 2D KDE, drawn over map tiles when `basemap` is set
    (needs network access to fetch tiles).
    """
    points = _located(df)

    with theme_context(theme):
        fig, ax = plt.subplots(figsize=(9, 11))
        ax.scatter(points["Longitude"], points["Latitude"], s=1, color="black", alpha=0.15, linewidths=0)
        sns.kdeplot(data=points, x="Longitude", y="Latitude", fill=True,
                    levels=10, thresh=0.05, cmap=get_cmap(scale), alpha=0.45, ax=ax)
        if basemap:
            ctx.add_basemap(ax, crs="EPSG:4326", source=ctx.providers.CartoDB.Positron)
        ax.set_title("Index Crime Density")
        ax.set_axis_off()
        _source_note(ax)
        fig.tight_layout()
        _save(fig, "06_density_map", fig_dir)

    return fig


# ── Pipeline Orchestrator ─────────────────────────────────────────────────────

def run_eda(
    cleaned_data_path: str,
    fig_dir=FIG_DIR,
    theme: str = "default",
    scale: str = "set1",
    heat_scale: str = "viridis",
    basemap: bool = True,
):
    """
    Render the full chart sequence in one call.
    `scale` colors crime types; `heat_scale` colors heatmaps and densities.
    """
    df = load_cleaned_data(cleaned_data_path)

    log.info("=" * 60)
    log.info(f"EDA | theme={theme} scale={scale} heat_scale={heat_scale}")
    log.info("=" * 60)

    plot_daily_trend(daily_counts(df), theme=theme, scale=scale, rolling=30, fig_dir=fig_dir)
    plot_monthly_bars(monthly_counts(df), theme=theme, scale=scale, fig_dir=fig_dir)
    plot_district_facets(district_counts(df), theme=theme, scale=scale, fig_dir=fig_dir)

    time = time_counts(df)
    plot_time_heatmap(time, value="count", theme=theme, scale=heat_scale, fig_dir=fig_dir)
    plot_time_heatmap(time, value="norm", theme=theme, scale=heat_scale, fig_dir=fig_dir)

    plot_density_regions(df, theme=theme, scale=heat_scale, fig_dir=fig_dir)
    plot_density_map(df, theme=theme, scale=heat_scale, basemap=basemap, fig_dir=fig_dir)

    log.info("=" * 60)
    log.info(f"✓ EDA COMPLETE — {len(list(Path(fig_dir).glob('*.png')))} figures saved to {fig_dir}/")
    log.info("=" * 60)


# ── Entry Point ───────────────────────────────────────────────────────────────

def main(argv=None):
    parser = argparse.ArgumentParser(description="Render the Chicago index-crime chart sequence.")
    parser.add_argument("--data", default="data/processed/crimes_cleaned.csv")
    parser.add_argument("--fig-dir", default=str(FIG_DIR))
    parser.add_argument("--theme", default="default")
    parser.add_argument("--scale", default="set1")
    parser.add_argument("--heat-scale", default="viridis")
    parser.add_argument("--no-basemap", action="store_true")
    args = parser.parse_args(argv)

    run_eda(
        args.data,
        fig_dir=args.fig_dir,
        theme=args.theme,
        scale=args.scale,
        heat_scale=args.heat_scale,
        basemap=not args.no_basemap,
    )


if __name__ == "__main__":
    main()
