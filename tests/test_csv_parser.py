"""
Tests for CSV reading and numeric conversion.
"""

import pytest

from covid_views.csv_parser import _split_csv_line, coerce_number, read_csv_header, read_csv_rows


class TestCoerceNumber:
    """Single conversion step used for every numeric cell."""

    def test_empty_is_missing_not_flagged(self):
        assert coerce_number("") == (None, False)
        assert coerce_number(None) == (None, False)
        assert coerce_number("   ") == (None, False)

    def test_integer_text(self):
        assert coerce_number("42") == (42, False)

    def test_float_text(self):
        assert coerce_number("12.5") == (12.5, False)

    def test_integer_mode_truncates(self):
        assert coerce_number("12.9", integer=True) == (12, False)
        assert coerce_number(7.6, integer=True) == (7, False)

    def test_non_numeric_defaults_to_zero_with_flag(self):
        assert coerce_number("n/a") == (0, True)
        assert coerce_number("nan") == (0, True)

    def test_numbers_pass_through(self):
        assert coerce_number(3) == (3, False)
        assert coerce_number(2.5) == (2.5, False)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    @pytest.mark.parametrize("integer", [False, True])
    def test_non_finite_floats_flagged(self, value, integer):
        assert coerce_number(value, integer=integer) == (0, True)

    def test_non_finite_text_flagged(self):
        assert coerce_number("inf") == (0, True)
        assert coerce_number("-Infinity", integer=True) == (0, True)


class TestSplitLine:

    def test_plain(self):
        assert _split_csv_line("a,b,c") == ["a", "b", "c"]

    def test_quoted_separator_and_escaped_quote(self):
        assert _split_csv_line('"Korea, South","say ""hi""",3') == ["Korea, South", 'say "hi"', "3"]

    def test_custom_separator(self):
        assert _split_csv_line("a;b", sep=";") == ["a", "b"]


class TestReadRows:

    def test_reads_rows_as_dicts(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text("location,date,new_cases\nUS,2021-01-01,10\n\nUS,2021-01-02\n")
        rows = list(read_csv_rows(path))
        assert rows == [
            {"location": "US", "date": "2021-01-01", "new_cases": "10"},
            {"location": "US", "date": "2021-01-02", "new_cases": ""},
        ]

    def test_header(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text("location, date\n")
        assert read_csv_header(path) == ["location", "date"]

    def test_empty_file_yields_nothing(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        assert list(read_csv_rows(path)) == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list(read_csv_rows(tmp_path / "missing.csv"))
