"""Tests for cell formatting and file naming."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from openexport.core.formatting import (
    build_filename,
    default_formatter,
    file_timestamp,
    format_cell,
    format_currency,
    format_date,
    format_datetime,
    format_status,
    format_upper,
    generated_label,
    get_formatter,
)
from openexport.core.models import ColumnSpec


class TestDefaultFormatter:
    @pytest.mark.parametrize(
        "value, expected",
        [(None, ""), ("", ""), (0, "0"), (False, "False"), (12.5, "12.5"), ("Ana", "Ana")],
    )
    def test_stringify(self, value, expected):
        assert default_formatter(value) == expected

    def test_missing_key_is_empty(self):
        assert format_cell(ColumnSpec(key="x", label="X"), {}) == ""

    def test_custom_formatter_wins(self):
        col = ColumnSpec(key="n", label="N", formatter=lambda v, row: f"#{v}")
        assert format_cell(col, {"n": 7}) == "#7"

    def test_formatter_returning_none(self):
        col = ColumnSpec(key="n", label="N", formatter=lambda v, row: None)
        assert format_cell(col, {"n": 7}) == ""


class TestBuiltinFormatters:
    def test_date(self):
        assert format_date("2024-03-05") == "3/5/2024"
        assert format_date(date(2024, 12, 25)) == "12/25/2024"
        assert format_date("not a date") == "not a date"
        assert format_date(None) == ""

    def test_datetime(self):
        assert format_datetime("2024-03-05T14:07:09") == "3/5/2024, 2:07:09 PM"
        assert format_datetime(datetime(2024, 3, 5, 0, 5, 0)) == "3/5/2024, 12:05:00 AM"

    def test_currency(self):
        assert format_currency(1234.5) == "PHP 1,234.50"
        assert format_currency("1000000") == "PHP 1,000,000.00"
        assert format_currency(-87.25) == "-PHP 87.25"
        assert format_currency(None) == ""
        assert format_currency("n/a") == "n/a"

    @pytest.mark.parametrize(
        "value, expected",
        [(1, "Active"), (0, "Inactive"), (-1, "Suspended"), ("1", "Active"), (7, "Unknown"), (None, "Unknown")],
    )
    def test_status(self, value, expected):
        assert format_status(value) == expected

    def test_upper(self):
        assert format_upper("rosario") == "ROSARIO"

    def test_lookup_by_name(self):
        assert get_formatter(" Currency ") is format_currency
        with pytest.raises(KeyError):
            get_formatter("roman")


class TestFilenames:
    def test_timestamp(self):
        assert file_timestamp(datetime(2024, 3, 5, 14, 7, 9)) == "20240305_140709"

    def test_with_timestamp(self):
        moment = datetime(2024, 3, 5, 14, 7, 9)
        assert build_filename("users", "pdf", moment=moment) == "users_20240305_140709.pdf"

    def test_without_timestamp(self):
        assert build_filename("users", "csv", include_timestamp=False) == "users.csv"

    def test_unsafe_characters_replaced(self):
        name = build_filename("Evacuees / Brgy. 5", "json", include_timestamp=False)
        assert name == "Evacuees___Brgy__5.json"

    def test_empty_base(self):
        assert build_filename("***", "csv", include_timestamp=False) == "___.csv"
        assert build_filename("   ", "csv", include_timestamp=False) == "export.csv"

    def test_generated_label(self):
        assert generated_label(datetime(2026, 1, 9, 9, 5, 3)) == "Generated: January 9, 2026 at 09:05:03 AM"
