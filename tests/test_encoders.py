"""Tests for the CSV, spreadsheet and JSON encoders."""

from __future__ import annotations

import csv
import io
import json
from datetime import date

import pytest

from openexport.core.formatting import format_rows
from openexport.core.models import ColumnSpec, ExportOptions
from openexport.generators.csv_generator import CsvGenerator
from openexport.generators.excel_generator import ExcelGenerator, encode_cell, is_numeric_cell
from openexport.generators.json_generator import JsonGenerator
from openexport.generators.pdf_generator import DocumentBuilder

BOM = "﻿"


class TestCsvGenerator:
    def test_every_field_quoted(self, columns, rows, options):
        text = CsvGenerator().encode(columns, rows, options).decode("utf-8")
        assert text == (
            '"ID","Full Name","Barangay","Balance"\n'
            '"1","Juan Dela Cruz","Poblacion","PHP 1,234.50"\n'
            '"2","Maria ""Mia"" Santos","San Roque","PHP 0.00"\n'
            '"3","Pedro Reyes","","-PHP 87.25"\n'
        )

    def test_header_only_for_empty_rows(self, columns, options):
        text = CsvGenerator().encode(columns, [], options).decode("utf-8")
        assert text == '"ID","Full Name","Barangay","Balance"\n'

    def test_generate_uses_csv_extension(self, tmp_path, columns, rows, options):
        result = CsvGenerator().generate(columns, rows, options, tmp_path)
        assert result.output_path.name == "residents_20240305_140709.csv"
        assert result.page_count is None


class TestExcelGenerator:
    def test_layout(self, columns, rows, options):
        text = ExcelGenerator().encode(columns, rows, options).decode("utf-8")
        assert text.startswith(BOM)
        lines = text[len(BOM):].split("\n")
        assert lines[:5] == [
            '"Residents"',
            '"Generated on: 3/5/2024, 2:07:09 PM"',
            '"Total Records: 3"',
            "",
            '"ID","Full Name","Barangay","Balance"',
        ]
        assert lines[5] == '1,"Juan Dela Cruz","Poblacion","PHP 1,234.50"'
        assert lines[6] == '2,"Maria ""Mia"" Santos","San Roque","PHP 0.00"'
        assert lines[-3:] == [
            "",
            '"Summary","Total Records: 3","Generated: 3/5/2024"',
            "",
        ]

    def test_no_leading_block_without_title(self, columns, rows, moment):
        options = ExportOptions(generated_at=moment)
        text = ExcelGenerator().encode(columns, rows, options).decode("utf-8-sig")
        assert text.split("\n")[0] == '"ID","Full Name","Barangay","Balance"'

    def test_bom_is_written_once(self, columns, rows, options):
        data = ExcelGenerator().encode(columns, rows, options)
        assert data.startswith(b"\xef\xbb\xbf")
        assert data.count(b"\xef\xbb\xbf") == 1

    @pytest.mark.parametrize(
        "text, numeric",
        [
            ("42", True),
            ("3.14", True),
            ("1e5", True),
            ("", False),
            ("-5", False),
            ("3/5/2024", False),
            ("2024-03-05", False),
            ("12345678901234567", False),
            ("09171234567", True),
            ("abc", False),
            ("1,234", False),
        ],
    )
    def test_numeric_detection(self, text, numeric):
        assert is_numeric_cell(text) is numeric

    def test_text_cells_escape_quotes(self):
        assert encode_cell('say "hi"') == '"say ""hi"""'
        assert encode_cell("7") == "7"


class TestJsonGenerator:
    def test_raw_rows_dumped(self, columns, rows, options):
        data = JsonGenerator().encode(columns, rows, options)
        assert json.loads(data) == rows
        assert data.decode("utf-8").startswith('[\n  {\n    "id": 1')

    def test_non_native_values_stringified(self, columns, options):
        rows = [{"id": 1, "born": date(1990, 1, 2)}]
        assert json.loads(JsonGenerator().encode(columns, rows, options)) == [
            {"id": 1, "born": "1990-01-02"}
        ]

    def test_unicode_kept(self, columns, options):
        data = JsonGenerator().encode(columns, [{"name": "Santo Niño"}], options)
        assert "Santo Niño" in data.decode("utf-8")


class TestCrossEncoderConsistency:
    def test_same_cell_text_everywhere(self, columns, rows, options):
        expected = format_rows(columns, rows)

        csv_rows = list(csv.reader(io.StringIO(CsvGenerator().encode(columns, rows, options).decode())))
        assert csv_rows[1:] == expected

        excel_text = ExcelGenerator().encode(columns, rows, options).decode("utf-8-sig")
        excel_rows = list(csv.reader(io.StringIO(excel_text)))
        start = excel_rows.index([c.label for c in columns]) + 1
        assert excel_rows[start:start + len(rows)] == expected

        plan = DocumentBuilder().plan(columns, rows, options)
        pdf_rows = [[" ".join(cell.lines) for cell in row.cells] for row in plan.rows]
        assert pdf_rows == expected

    def test_formatter_receives_whole_row(self, options):
        columns = [
            ColumnSpec(key="first", label="First"),
            ColumnSpec(key="last", label="Name", formatter=lambda v, row: f"{v}, {row['first']}"),
        ]
        rows = [{"first": "Ana", "last": "Cruz"}]
        text = CsvGenerator().encode(columns, rows, options).decode()
        assert '"Cruz, Ana"' in text
