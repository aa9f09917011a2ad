"""Spreadsheet-compatible delimited text.

Same rows as the CSV encoder, plus an optional leading block (title,
generation time, record count), a trailing summary line and a UTF-8
byte-order mark so spreadsheet applications detect the character set.
Numeric-looking cells are left unquoted so they import as numbers.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime

from ..core.errors import EncodingError
from ..core.formatting import format_date, format_datetime, format_rows
from ..core.models import ColumnSpec, ExportOptions, OutputFormat, Row
from .base import Artifact, BaseGenerator

log = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"^\s*\+?(\d+\.?\d*|\.\d+)([eE]\+?\d+)?\s*$")

# Cells this long are kept as text (IDs, phone numbers) to avoid precision loss.
_MAX_NUMERIC_LENGTH = 15


def quote(text: str) -> str:
    """Quote *text* and double any embedded quotes."""
    return '"' + text.replace('"', '""') + '"'


def is_numeric_cell(text: str) -> bool:
    """True for cells a spreadsheet should read as a plain number."""
    return (
        bool(text)
        and len(text) < _MAX_NUMERIC_LENGTH
        and "/" not in text
        and "-" not in text
        and _NUMBER_RE.match(text) is not None
    )


def encode_cell(text: str) -> str:
    return text if is_numeric_cell(text) else quote(text)


class ExcelGenerator(BaseGenerator):
    """Generates a spreadsheet-friendly ``.csv`` file."""

    format = OutputFormat.EXCEL
    extension = "csv"
    name_suffix = "_excel"

    def render(
        self, columns: list[ColumnSpec], rows: list[Row], options: ExportOptions
    ) -> Artifact:
        moment = options.generated_at or datetime.now()
        lines: list[str] = []

        if options.title:
            lines.append(quote(options.title))
            lines.append(quote(f"Generated on: {format_datetime(moment)}"))
            lines.append(quote(f"Total Records: {len(rows)}"))
            lines.append("")

        lines.append(",".join(quote(c.label) for c in columns))
        for cells in format_rows(columns, rows):
            lines.append(",".join(encode_cell(cell) for cell in cells))

        lines.append("")
        lines.append(
            ",".join(
                [
                    quote("Summary"),
                    quote(f"Total Records: {len(rows)}"),
                    quote(f"Generated: {format_date(moment)}"),
                ]
            )
        )
        try:
            data = ("\n".join(lines) + "\n").encode("utf-8-sig")
        except UnicodeEncodeError as exc:
            raise EncodingError(f"Spreadsheet encoding failed: {exc}") from exc
        log.debug("Spreadsheet: %d record(s), %d column(s)", len(rows), len(columns))
        return Artifact(data=data)
