"""Cell formatting shared by every encoder.

The PDF, delimited-text and spreadsheet encoders all go through
:func:`format_cell`, so a ``(value, column)`` pair renders the same
string in every artifact.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from .models import CellFormatter, ColumnSpec, Row


def default_formatter(value: Any, row: Optional[Row] = None) -> str:
    """Stringify *value*; ``None`` and empty strings become ``""``."""
    if value is None:
        return ""
    return str(value)


def format_cell(column: ColumnSpec, row: Row) -> str:
    """Return the display string for *column* in *row*."""
    value = row.get(column.key)
    if column.formatter is not None:
        text = column.formatter(value, row)
        return "" if text is None else str(text)
    return default_formatter(value, row)


def format_rows(columns: list[ColumnSpec], rows: list[Row]) -> list[list[str]]:
    """Format every cell of *rows*, column order preserved."""
    return [[format_cell(col, row) for col in columns] for row in rows]


# ---------------------------------------------------------------------------
# Built-in formatters
# ---------------------------------------------------------------------------

def _parse_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def format_date(value: Any, row: Optional[Row] = None) -> str:
    """``2024-03-05`` -> ``3/5/2024``. Unparseable values pass through."""
    dt = _parse_datetime(value)
    if dt is None:
        return default_formatter(value)
    return f"{dt.month}/{dt.day}/{dt.year}"


def format_datetime(value: Any, row: Optional[Row] = None) -> str:
    """``2024-03-05T14:07:09`` -> ``3/5/2024, 2:07:09 PM``."""
    dt = _parse_datetime(value)
    if dt is None:
        return default_formatter(value)
    hour = dt.hour % 12 or 12
    ampm = "PM" if dt.hour >= 12 else "AM"
    return f"{dt.month}/{dt.day}/{dt.year}, {hour}:{dt.minute:02d}:{dt.second:02d} {ampm}"


def format_currency(value: Any, row: Optional[Row] = None) -> str:
    """Philippine peso with en-US grouping: ``1234.5`` -> ``PHP 1,234.50``.

    The ISO code is used instead of the peso sign, which the standard PDF
    fonts do not carry.
    """
    if value is None or value == "":
        return ""
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return default_formatter(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}PHP {abs(amount):,.2f}"


_STATUS_LABELS = {1: "Active", 0: "Inactive", -1: "Suspended"}


def format_status(value: Any, row: Optional[Row] = None) -> str:
    try:
        return _STATUS_LABELS.get(int(value), "Unknown")
    except (TypeError, ValueError):
        return "Unknown"


def format_upper(value: Any, row: Optional[Row] = None) -> str:
    return default_formatter(value).upper()


FORMATTERS: dict[str, CellFormatter] = {
    "date": format_date,
    "datetime": format_datetime,
    "currency": format_currency,
    "status": format_status,
    "upper": format_upper,
}


def get_formatter(name: str) -> CellFormatter:
    """Look up a built-in formatter. Raises ``KeyError`` if not found."""
    key = name.lower().strip()
    if key not in FORMATTERS:
        available = ", ".join(sorted(FORMATTERS))
        raise KeyError(f"Unknown formatter '{name}'. Available: {available}")
    return FORMATTERS[key]


# ---------------------------------------------------------------------------
# Timestamps & filenames
# ---------------------------------------------------------------------------

def file_timestamp(moment: datetime) -> str:
    """``YYYYMMDD_HHMMSS`` used in artifact names."""
    return moment.strftime("%Y%m%d_%H%M%S")


def build_filename(
    base: str,
    ext: str,
    *,
    moment: Optional[datetime] = None,
    include_timestamp: bool = True,
) -> str:
    """``{base}[_{timestamp}].{ext}`` with *base* made filesystem-safe."""
    safe = "".join(c if c.isalnum() or c in "-_ " else "_" for c in base)
    safe = safe.strip().replace(" ", "_")[:80] or "export"
    if include_timestamp:
        safe = f"{safe}_{file_timestamp(moment or datetime.now())}"
    return f"{safe}.{ext}"


def generated_label(moment: datetime) -> str:
    """``Generated: October 19, 2026 at 06:18:00 AM``."""
    hour = moment.hour % 12 or 12
    ampm = "PM" if moment.hour >= 12 else "AM"
    return (
        f"Generated: {moment.strftime('%B')} {moment.day}, {moment.year} "
        f"at {hour:02d}:{moment.minute:02d}:{moment.second:02d} {ampm}"
    )

