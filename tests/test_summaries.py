import pandas as pd
import pytest

from data_cleaning import DAY_ORDER, PROPERTY_LABEL, VIOLENT_LABEL
from summaries import (
    add_share,
    complete_grid,
    count_by,
    daily_counts,
    district_counts,
    monthly_counts,
    time_counts,
)


def test_daily_counts_sum_to_row_count(cleaned):
    daily = daily_counts(cleaned)

    assert daily["count"].sum() == len(cleaned)
    assert daily["date"].is_monotonic_increasing
    assert not daily.duplicated(["crime_type", "date"]).any()


def test_monthly_counts_complete_and_sum(cleaned):
    monthly = monthly_counts(cleaned)

    assert monthly["count"].sum() == len(cleaned)
    assert len(monthly) == 2 * 12
    assert set(monthly["crime_type"]) == {VIOLENT_LABEL, PROPERTY_LABEL}
    assert monthly.groupby("crime_type")["month"].apply(list).map(lambda m: m == list(range(1, 13))).all()


def test_district_counts_exclude_missing_district(cleaned):
    district = district_counts(cleaned)

    assert district["count"].sum() == cleaned["District"].notna().sum()
    assert district["District"].str.fullmatch(r"\d{2}").all()
    assert (district["count"] > 0).all()


def test_time_counts_full_grid(cleaned):
    time = time_counts(cleaned)

    assert len(time) == 2 * 7 * 24
    assert time["count"].sum() == len(cleaned)
    assert list(time["day_of_week"].cat.categories) == DAY_ORDER
    assert sorted(time["hour"].unique()) == list(range(24))


def test_time_counts_norm_is_share_per_type(cleaned):
    time = time_counts(cleaned)

    shares = time.groupby("crime_type")["norm"].sum()
    assert shares.tolist() == pytest.approx([1.0, 1.0])


def test_count_by_skips_missing_keys():
    df = pd.DataFrame({"a": ["x", "x", None, "y"]})

    out = count_by(df, ["a"])

    assert dict(zip(out["a"], out["count"])) == {"x": 2, "y": 1}


def test_complete_grid_fills_zeros():
    counts = pd.DataFrame({"kind": ["a", "b"], "hour": [1, 2], "count": [5, 3]})

    out = complete_grid(counts, {"kind": ["a", "b"], "hour": [0, 1, 2]})

    assert len(out) == 6
    assert out["count"].sum() == 8
    indexed = out.set_index(["kind", "hour"])["count"]
    assert indexed[("a", 1)] == 5
    assert indexed[("a", 0)] == 0
    assert indexed[("b", 2)] == 3


def test_complete_grid_accepts_categorical_and_int32_keys():
    counts = pd.DataFrame({
        "day": pd.Categorical(["Mon"], categories=DAY_ORDER),
        "hour": pd.Series([3], dtype="int32"),
        "count": [4],
    })

    out = complete_grid(counts, {"day": DAY_ORDER, "hour": list(range(24))})

    assert len(out) == 7 * 24
    assert out["count"].sum() == 4


def test_add_share_handles_empty_group():
    counts = pd.DataFrame({"g": ["a", "a", "b"], "count": [1, 3, 0]})

    out = add_share(counts, "g")

    assert out["norm"].tolist() == pytest.approx([0.25, 0.75, 0.0])
    assert "norm" not in counts.columns
