import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from data_cleaning import DATE_FORMAT, AuditTrail, clean_crimes

# index codes plus three non-index ones that the filter must drop
CODES = ["01A", "02", "03", "04A", "04B", "05", "06", "07", "09", "08B", "14", "26"]

N_ROWS = 480
BAD_DATE_ROWS = [0, 1]


@pytest.fixture
def raw_crimes():
    rng = np.random.default_rng(7)
    stamps = pd.Timestamp("2023-01-01") + pd.to_timedelta(rng.integers(0, 365 * 24 * 60, N_ROWS), unit="min")

    district = rng.integers(1, 26, N_ROWS).astype(float)
    district[2:5] = np.nan

    lat = rng.uniform(41.70, 42.00, N_ROWS)
    lon = rng.uniform(-87.85, -87.55, N_ROWS)
    lat[5:8] = np.nan
    lat[8], lon[8] = 0.0, 0.0

    df = pd.DataFrame({
        "ID": np.arange(N_ROWS),
        "Date": [s.strftime(DATE_FORMAT) for s in stamps],
        "Primary.Type": "THEFT",
        "FBI.Code": [CODES[i % len(CODES)] for i in range(N_ROWS)],
        "District": district,
        "Latitude": lat,
        "Longitude": lon,
    })
    df.loc[BAD_DATE_ROWS[0], "Date"] = "not a date"
    df.loc[BAD_DATE_ROWS[1], "Date"] = "13/45/2023 99:00:00 PM"
    return df


@pytest.fixture
def cleaned(raw_crimes):
    return clean_crimes(raw_crimes.copy(), AuditTrail(total_rows=len(raw_crimes)))


@pytest.fixture
def raw_csv(raw_crimes, tmp_path):
    """The raw frame written the way the portal exports it: spaces in headers."""
    path = tmp_path / "crimes.csv"
    raw_crimes.rename(columns=lambda c: c.replace(".", " ")).to_csv(path, index=False)
    return path
