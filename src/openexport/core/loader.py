"""Load an export dataset from a JSON file.

Expected shape::

    {
      "columns": [{"key": "name", "label": "Name", "format": "upper"}],
      "rows": [{"name": "Rosario"}],
      "options": {"title": "Barangays", "orientation": "landscape"}
    }

``format`` names one of the built-in formatters; ``options`` is optional
and validated as :class:`~openexport.core.models.ExportOptions`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from .formatting import get_formatter
from .models import ColumnSpec, ExportOptions, Row, ensure_unique_keys


class _ColumnEntry(BaseModel):
    key: str
    label: str = ""
    format: str | None = None


class _Dataset(BaseModel):
    columns: list[_ColumnEntry] = Field(default_factory=list)
    rows: list[dict[str, Any]] = Field(default_factory=list)
    options: dict[str, Any] = Field(default_factory=dict)


def load_dataset(path: str | Path) -> tuple[list[ColumnSpec], list[Row], ExportOptions]:
    """Parse *path* into ``(columns, rows, options)``.

    When the file lists no columns they are inferred from the keys of the
    rows, in first-seen order. Raises ``ValueError`` for malformed files.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path}: invalid JSON ({exc})") from exc

    if isinstance(raw, list):
        raw = {"rows": raw}
    data = _Dataset.model_validate(raw)

    entries = data.columns or [
        _ColumnEntry(key=k) for k in _infer_keys(data.rows)
    ]
    columns = [
        ColumnSpec(
            key=e.key,
            label=e.label or e.key.replace("_", " ").title(),
            formatter=get_formatter(e.format) if e.format else None,
        )
        for e in entries
    ]
    ensure_unique_keys(columns)
    options = ExportOptions.model_validate(data.options)
    return columns, data.rows, options


def _infer_keys(rows: list[Row]) -> list[str]:
    keys: list[str] = []
    for row in rows:
        for k in row:
            if k not in keys:
                keys.append(k)
    return keys
