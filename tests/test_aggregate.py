"""
Tests for the windowed running total and the ratio helpers.
"""

import pytest

from covid_views.aggregate import running_total, safe_ratio, with_ratio
from covid_views.dataframe import DataFrame


def frame(rows):
    return DataFrame.from_rows(
        [{"location": l, "date": d, "new": v} for l, d, v in rows],
        ["location", "date", "new"],
    )


class TestRunningTotal:

    def test_simple_scenario(self):
        out = running_total(frame([("US", "2021-01-01", 10), ("US", "2021-01-02", 5)]), "new")
        assert out["cumulative_new"] == [10, 15]

    def test_first_row_equals_own_value(self):
        out = running_total(frame([("US", "2021-01-01", 7)]), "new", name="total")
        assert out["total"] == [7]

    def test_resets_per_location(self):
        out = running_total(frame([
            ("US", "2021-01-01", 10),
            ("CA", "2021-01-01", 1),
            ("US", "2021-01-02", 5),
            ("CA", "2021-01-02", 2),
        ]), "new")
        assert out["cumulative_new"] == [10, 1, 15, 3]

    def test_rows_keep_input_positions(self):
        df = frame([("US", "2021-01-03", 1), ("US", "2021-01-01", 10), ("US", "2021-01-02", 100)])
        out = running_total(df, "new")
        assert len(out) == len(df)
        assert out["date"] == df["date"]
        assert out["cumulative_new"] == [111, 10, 110]

    def test_same_date_ties_follow_input_order(self):
        out = running_total(frame([("US", "2021-01-01", 1), ("US", "2021-01-01", 2)]), "new")
        assert out["cumulative_new"] == [1, 3]

    def test_missing_and_non_numeric_count_as_zero(self, caplog):
        df = frame([("US", "2021-01-01", 4), ("US", "2021-01-02", None), ("US", "2021-01-03", "oops")])
        with caplog.at_level("WARNING"):
            out = running_total(df, "new")
        assert out["cumulative_new"] == [4, 4, 4]
        assert "non-numeric" in caplog.text

    def test_non_finite_values_count_as_zero(self):
        df = frame([("US", "d1", 5), ("US", "d2", float("inf")), ("US", "d3", float("nan"))])
        out = running_total(df, "new", integer=True)
        assert out["cumulative_new"] == [5, 5, 5]

    def test_integer_truncates_each_value(self):
        out = running_total(frame([("US", "d1", 1.9), ("US", "d2", 2.9)]), "new", integer=True)
        assert out["cumulative_new"] == [1, 3]

    def test_non_decreasing_for_non_negative_input(self):
        values = [3, 0, 7, 1, 0, 12, 5]
        df = frame([("US", f"2021-01-{i + 1:02d}", v) for i, v in enumerate(values)])
        totals = running_total(df, "new")["cumulative_new"]
        assert all(a <= b for a, b in zip(totals, totals[1:]))

    def test_empty_frame(self):
        out = running_total(DataFrame.empty(["location", "date", "new"]), "new")
        assert len(out) == 0
        assert "cumulative_new" in out.columns

    def test_unknown_column(self):
        with pytest.raises(KeyError):
            running_total(frame([("US", "d1", 1)]), "missing")


class TestRatios:

    @pytest.mark.parametrize("num, den, expected", [
        (1, 4, 25.0),
        (0, 5, 0.0),
        (3, 0, None),
        (3, None, None),
        (None, 5, None),
        ("x", 5, None),
    ])
    def test_safe_ratio(self, num, den, expected):
        assert safe_ratio(num, den) == expected

    def test_with_ratio_never_raises(self):
        df = DataFrame({"deaths": [1, 2, 3], "cases": [10, 0, None]})
        out = with_ratio(df, "deaths", "cases", "PercentDeaths")
        assert out["PercentDeaths"] == [10.0, None, None]
