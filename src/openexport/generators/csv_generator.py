"""Delimited-text encoder: one header row, one row per record, every field quoted."""

from __future__ import annotations

import csv
import io
import logging

from ..core.errors import EncodingError
from ..core.formatting import format_rows
from ..core.models import ColumnSpec, ExportOptions, OutputFormat, Row
from .base import Artifact, BaseGenerator

log = logging.getLogger(__name__)


class CsvGenerator(BaseGenerator):
    """Generates a ``.csv`` file.

    Cells go through the same formatter path as the PDF table, so a value
    reads identically in both artifacts.
    """

    format = OutputFormat.CSV
    extension = "csv"

    def render(
        self, columns: list[ColumnSpec], rows: list[Row], options: ExportOptions
    ) -> Artifact:
        buf = io.StringIO()
        writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow([c.label for c in columns])
        writer.writerows(format_rows(columns, rows))
        try:
            data = buf.getvalue().encode("utf-8")
        except UnicodeEncodeError as exc:
            raise EncodingError(f"CSV encoding failed: {exc}") from exc
        log.debug("CSV: %d record(s), %d column(s)", len(rows), len(columns))
        return Artifact(data=data)
