"""JSON encoder: the raw rows, pretty-printed."""

from __future__ import annotations

import json

from ..core.errors import EncodingError
from ..core.models import ColumnSpec, ExportOptions, OutputFormat, Row
from .base import Artifact, BaseGenerator


class JsonGenerator(BaseGenerator):
    """Generates a ``.json`` file holding the unformatted rows.

    Values that are not JSON-native (dates, decimals) are stringified.
    """

    format = OutputFormat.JSON
    extension = "json"

    def render(
        self, columns: list[ColumnSpec], rows: list[Row], options: ExportOptions
    ) -> Artifact:
        try:
            text = json.dumps(rows, indent=2, ensure_ascii=False, default=str)
        except (TypeError, ValueError) as exc:
            raise EncodingError(f"JSON encoding failed: {exc}") from exc
        return Artifact(data=text.encode("utf-8"))
