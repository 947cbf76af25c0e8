"""
data_collection.py
Raw CSV loading for the Chicago crime export.

Header names in the export contain spaces ("FBI Code", "Primary Type").
They are normalised to dotted names ("FBI.Code") on load so every later
step can reference columns the same way.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

import pandas as pd

log = logging.getLogger(__name__)

RAW_DATA_PATH = "data/raw/Crimes_-_2001_to_present.csv"

REQUIRED_COLUMNS = {"Date", "FBI.Code", "District", "Latitude", "Longitude"}


def normalize_headers(columns: Iterable[str]) -> list[str]:
    return [str(c).strip().replace(" ", ".") for c in columns]


def read_crime_csv(filepath: str, nrows: int | None = None) -> pd.DataFrame:
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {filepath}")

    log.info(f"Loading: {filepath}")
    # FBI codes look numeric ("02") but must keep their leading zero
    header = pd.read_csv(path, nrows=0).columns
    text_cols = {c: str for c in header if c.replace(" ", ".") == "FBI.Code"}
    df = pd.read_csv(path, nrows=nrows, low_memory=False, dtype=text_cols)
    df.columns = normalize_headers(df.columns)
    log.info(f"Loaded {len(df):,} rows × {len(df.columns)} columns")

    missing_cols = REQUIRED_COLUMNS - set(df.columns)
    if missing_cols:
        raise ValueError(f"Dataset is missing expected columns: {sorted(missing_cols)}")

    return df


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
    df = read_crime_csv(RAW_DATA_PATH)
    print(f"Columns: {list(df.columns)}")
    print(df.head())
