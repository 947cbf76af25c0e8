"""
data_cleaning.py
Filter-and-derive pipeline for the Chicago crime export.

Design principles:
- Every transformation is logged with before/after counts
- Row-level problems (bad timestamps) are coerced, counted and dropped;
  structural problems (missing file or columns) raise immediately
- Functions are pure (input → output), no global state
- A single `run_pipeline()` call reproduces results end-to-end
"""

import json
import logging
from pathlib import Path

import numpy as np
import pandas as pd

from data_collection import read_crime_csv

# ── Logging Setup ─────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger(__name__)


# ── Constants ─────────────────────────────────────────────────────────────────

# "Index crimes": the FBI Part I codes present in the Chicago export
INDEX_CODES   = {"01A", "02", "03", "04A", "04B", "05", "06", "07", "09"}
VIOLENT_CODES = {"01A", "02", "03", "04A", "04B"}

VIOLENT_LABEL  = "Violent Crime"
PROPERTY_LABEL = "Property Crime"

# e.g. "01/05/2024 01:30:00 PM"
DATE_FORMAT = "%m/%d/%Y %I:%M:%S %p"

# Sunday first, matching US calendar convention
DAY_ORDER = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
_WEEKDAY_ABBR = {0: "Mon", 1: "Tue", 2: "Wed", 3: "Thu", 4: "Fri", 5: "Sat", 6: "Sun"}

# Chicago city limits, with a little margin
CHICAGO_LAT = (41.6, 42.1)
CHICAGO_LON = (-87.95, -87.5)


# ── Audit Trail ───────────────────────────────────────────────────────────────

class AuditTrail:
    """Tracks every cleaning decision with before/after row counts and change stats."""

    def __init__(self, total_rows: int):
        self.total_rows = total_rows
        self.steps: list[dict] = []

    def record(self, step: str, description: str, changed: int, detail: str = ""):
        pct = changed / self.total_rows * 100 if self.total_rows else 0.0
        self.steps.append({
            "step": step,
            "description": description,
            "rows_affected": changed,
            "pct_affected": round(pct, 2),
            "detail": detail,
        })
        log.info(f"[{step}] {description} → {changed:,} rows affected ({pct:.1f}%) {detail}")

    def save(self, path: str):
        class _NumpyEncoder(json.JSONEncoder):
            """Convert numpy int/float types to native Python before serialising."""
            def default(self, obj):
                if isinstance(obj, np.integer):
                    return int(obj)
                if isinstance(obj, np.floating):
                    return float(obj)
                if isinstance(obj, np.ndarray):
                    return obj.tolist()
                return super().default(obj)

        with open(path, "w") as f:
            json.dump({"total_rows": self.total_rows, "steps": self.steps}, f,
                      indent=2, cls=_NumpyEncoder)
        log.info(f"Audit trail saved → {path}")

    def summary(self):
        print("\n" + "=" * 65)
        print("CLEANING AUDIT SUMMARY")
        print("=" * 65)
        print(f"{'Step':<22} {'Affected':>10} {'%':>7}  Description")
        print("-" * 65)
        for s in self.steps:
            print(f"{s['step']:<22} {s['rows_affected']:>10,} {s['pct_affected']:>6.1f}%  {s['description']}")
        print("=" * 65)


# ── Step 1: Index Crimes ──────────────────────────────────────────────────────

def filter_index_crimes(df: pd.DataFrame, audit: AuditTrail) -> pd.DataFrame:
    codes = df["FBI.Code"].astype(str).str.strip().str.upper()
    keep = codes.isin(INDEX_CODES)
    removed = int((~keep).sum())
    df = df[keep].copy()
    df["FBI.Code"] = codes[keep]
    audit.record("Index crimes", "Non-index FBI codes removed", removed)
    return df


# ── Step 2: Crime Type ────────────────────────────────────────────────────────

def classify_crime_type(df: pd.DataFrame, audit: AuditTrail) -> pd.DataFrame:
    df["crime_type"] = np.where(df["FBI.Code"].isin(VIOLENT_CODES), VIOLENT_LABEL, PROPERTY_LABEL)
    violent = int((df["crime_type"] == VIOLENT_LABEL).sum())
    audit.record("Crime type", "Rows labelled violent (rest are property)", violent)
    return df


# ── Step 3: Parse Timestamps & Extract Temporal Features ─────────────────────

def parse_timestamps(df: pd.DataFrame, audit: AuditTrail, date_format: str = DATE_FORMAT) -> pd.DataFrame:
    df["Date"] = pd.to_datetime(df["Date"], format=date_format, errors="coerce")
    bad = df["Date"].isna()
    audit.record("Timestamp parse", "Unparseable timestamps dropped", int(bad.sum()))
    df = df[~bad].copy()

    df["date"]  = df["Date"].dt.normalize()
    df["year"]  = df["Date"].dt.year
    df["month"] = df["Date"].dt.month
    df["hour"]  = df["Date"].dt.hour
    df["day_of_week"] = pd.Categorical(
        df["Date"].dt.dayofweek.map(_WEEKDAY_ABBR),
        categories=DAY_ORDER,
        ordered=True,
    )

    audit.record("Temporal features", "Extracted 5 time features from Date", len(df),
                 "(date, year, month, hour, day_of_week)")
    return df


# ── Step 4: Date Window ───────────────────────────────────────────────────────

def filter_date_range(df: pd.DataFrame, audit: AuditTrail, start=None, end=None) -> pd.DataFrame:
    """
    Keep rows whose `date` falls in [start, end]. Either bound may be None.
    Used to trim a partial trailing month, which otherwise shows as a dip.
    """
    if start is None and end is None:
        return df

    keep = pd.Series(True, index=df.index)
    if start is not None:
        keep &= df["date"] >= pd.Timestamp(start)
    if end is not None:
        keep &= df["date"] <= pd.Timestamp(end)

    audit.record("Date window", f"Rows outside [{start}, {end}] removed", int((~keep).sum()))
    return df[keep].copy()


# ── Step 5: District Labels ───────────────────────────────────────────────────

def pad_districts(df: pd.DataFrame, audit: AuditTrail) -> pd.DataFrame:
    # pandas reads a district column with gaps as float (7.0), so go via int
    district = pd.to_numeric(df["District"], errors="coerce")
    df["District"] = district.map(lambda d: f"{int(d):02d}", na_action="ignore")
    missing = int(district.isna().sum())
    audit.record("District labels", "Zero-padded to two digits; missing left empty", missing)
    return df


# ── Step 6: Geographic Validation ────────────────────────────────────────────

def validate_coordinates(df: pd.DataFrame, audit: AuditTrail) -> pd.DataFrame:
    df["Latitude"]  = pd.to_numeric(df["Latitude"], errors="coerce")
    df["Longitude"] = pd.to_numeric(df["Longitude"], errors="coerce")

    valid_mask = (
        df["Latitude"].between(*CHICAGO_LAT) & df["Longitude"].between(*CHICAGO_LON)
    )
    df["Valid.Coordinates"] = valid_mask
    invalid = int((~valid_mask).sum())
    audit.record("Coordinates flagged", f"Missing or outside {CHICAGO_LAT}, {CHICAGO_LON}", invalid)
    return df


# ── Transform ─────────────────────────────────────────────────────────────────

def clean_crimes(df: pd.DataFrame, audit: AuditTrail, start=None, end=None) -> pd.DataFrame:
    df = filter_index_crimes(df, audit)
    df = classify_crime_type(df, audit)
    df = parse_timestamps(df, audit)
    df = filter_date_range(df, audit, start=start, end=end)
    df = pad_districts(df, audit)
    df = validate_coordinates(df, audit)
    return df.sort_values("Date", kind="stable").reset_index(drop=True)


def load_cleaned_data(filepath: str) -> pd.DataFrame:
    """Re-read the cleaned CSV, restoring the dtypes CSV cannot carry."""
    log.info(f"Loading cleaned data from: {filepath}")
    df = pd.read_csv(
        filepath,
        parse_dates=["Date", "date"],
        dtype={"District": str, "FBI.Code": str},
        low_memory=False,
    )
    df["day_of_week"] = pd.Categorical(df["day_of_week"], categories=DAY_ORDER, ordered=True)
    log.info(f"Loaded {len(df):,} rows × {df.shape[1]} columns")
    return df


# ── Pipeline Orchestrator ─────────────────────────────────────────────────────

def run_pipeline(
    input_path: str,
    output_path: str,
    audit_path: str = "data/cleaning_audit.json",
    start=None,
    end=None,
) -> pd.DataFrame:
    """
    End-to-end cleaning pipeline. Call this to fully reproduce cleaned data.

    Parameters
    ----------
    input_path  : path to raw CSV from the Chicago data portal
    output_path : path for cleaned CSV output
    audit_path  : path for JSON audit log (records every decision)
    start, end  : optional inclusive date window

    Returns
    -------
    Cleaned DataFrame
    """
    log.info("=" * 60)
    log.info("CHICAGO CRIME DATA — CLEANING PIPELINE START")
    log.info("=" * 60)

    df = read_crime_csv(input_path)
    audit = AuditTrail(total_rows=len(df))

    df = clean_crimes(df, audit, start=start, end=end)

    # ── Save ──────────────────────────────────────────────────────────────────
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False)
    log.info(f"Cleaned data saved → {output_path}")
    log.info(f"Final shape: {df.shape[0]:,} rows × {df.shape[1]} columns")

    Path(audit_path).parent.mkdir(parents=True, exist_ok=True)
    audit.save(audit_path)
    audit.summary()

    return df


# ── Entry Point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    run_pipeline(
        input_path="data/raw/Crimes_-_2001_to_present.csv",
        output_path="data/processed/crimes_cleaned.csv",
        audit_path="data/cleaning_audit.json",
    )
