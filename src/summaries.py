"""
summaries.py
Group-and-count reductions feeding each chart.

All tables are long-form: one row per group with a `count` column, which
is the shape seaborn's `hue=` / `col=` mappings expect.
"""

import logging

import pandas as pd

from data_cleaning import DAY_ORDER

log = logging.getLogger(__name__)

MONTHS = list(range(1, 13))
HOURS  = list(range(24))


def count_by(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """One row per observed group. Rows with a missing key are not counted."""
    counts = (
        df.groupby(columns, observed=True)
        .size()
        .reset_index(name="count")
    )
    return counts


def complete_grid(counts: pd.DataFrame, levels: dict) -> pd.DataFrame:
    """
    Reindex `counts` on the cartesian product of `levels` (column → values),
    so groups with no incidents appear with count 0 instead of a gap.
    """
    columns = list(levels)
    full = pd.MultiIndex.from_product([levels[c] for c in columns], names=columns).to_frame(index=False)

    counts = counts[columns + ["count"]].copy()
    for c in columns:
        # dt.hour gives int32 and day_of_week is categorical; align to the grid
        counts[c] = counts[c].astype(full[c].dtype)

    out = full.merge(counts, on=columns, how="left")
    out["count"] = out["count"].fillna(0).astype(int)
    return out


def add_share(counts: pd.DataFrame, by, name: str = "norm") -> pd.DataFrame:
    """Add `name` = count / total count within each `by` group."""
    counts = counts.copy()
    totals = counts.groupby(by, observed=True)["count"].transform("sum")
    counts[name] = counts["count"] / totals.where(totals > 0)
    counts[name] = counts[name].fillna(0.0)
    return counts


# ── Chart Tables ──────────────────────────────────────────────────────────────

def daily_counts(df: pd.DataFrame) -> pd.DataFrame:
    out = count_by(df, ["crime_type", "date"]).sort_values(["date", "crime_type"])
    log.info(f"Daily table: {len(out):,} rows")
    return out.reset_index(drop=True)


def monthly_counts(df: pd.DataFrame) -> pd.DataFrame:
    counts = count_by(df, ["crime_type", "month"])
    out = complete_grid(counts, {
        "crime_type": sorted(df["crime_type"].unique()),
        "month": MONTHS,
    })
    log.info(f"Monthly table: {len(out):,} rows")
    return out


def district_counts(df: pd.DataFrame) -> pd.DataFrame:
    out = count_by(df, ["crime_type", "month", "District"]).sort_values(["District", "month", "crime_type"])
    log.info(f"District table: {len(out):,} rows across {out['District'].nunique()} districts")
    return out.reset_index(drop=True)


def time_counts(df: pd.DataFrame) -> pd.DataFrame:
    """Full day-of-week × hour grid per crime type, with `norm` share per type."""
    counts = count_by(df, ["crime_type", "day_of_week", "hour"])
    out = complete_grid(counts, {
        "crime_type": sorted(df["crime_type"].unique()),
        "day_of_week": DAY_ORDER,
        "hour": HOURS,
    })
    out["day_of_week"] = pd.Categorical(out["day_of_week"], categories=DAY_ORDER, ordered=True)
    out = add_share(out, "crime_type")
    log.info(f"Time table: {len(out):,} rows")
    return out
