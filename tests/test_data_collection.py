import pandas as pd
import pytest

from data_collection import normalize_headers, read_crime_csv


def test_normalize_headers_replaces_spaces_with_dots():
    assert normalize_headers(["FBI Code", "Primary Type", "Date", " X Coordinate "]) == [
        "FBI.Code", "Primary.Type", "Date", "X.Coordinate",
    ]


def test_read_crime_csv_normalizes_headers(raw_csv):
    df = read_crime_csv(raw_csv)

    assert "FBI.Code" in df.columns
    assert "Primary.Type" in df.columns
    assert "FBI Code" not in df.columns


def test_read_crime_csv_keeps_leading_zero_on_codes(raw_csv):
    df = read_crime_csv(raw_csv)

    assert {"01A", "02", "05", "09"} <= set(df["FBI.Code"])


def test_read_crime_csv_nrows(raw_csv):
    assert len(read_crime_csv(raw_csv, nrows=10)) == 10


def test_read_crime_csv_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_crime_csv(tmp_path / "nope.csv")


def test_read_crime_csv_missing_columns(tmp_path):
    path = tmp_path / "partial.csv"
    pd.DataFrame({"Date": ["01/01/2023 01:00:00 AM"], "FBI Code": ["02"]}).to_csv(path, index=False)

    with pytest.raises(ValueError, match="District"):
        read_crime_csv(path)


def test_normalize_headers_accepts_any_iterable():
    assert normalize_headers(c for c in ("Case Number", "ID")) == ["Case.Number", "ID"]
    assert normalize_headers(pd.Index(["Location Description"])) == ["Location.Description"]
