"""Pydantic models for the export input contract and encoder results.

These models are the boundary between the caller (who owns the data and
the column definitions) and the encoders. Every encoder consumes the same
``columns`` / ``rows`` / ``ExportOptions`` triple and produces a single
artifact described by a ``GenerationResult``.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class OutputFormat(str, Enum):
    """Supported output formats."""
    PDF = "pdf"
    CSV = "csv"
    EXCEL = "excel"
    JSON = "json"
    ALL = "all"


class Orientation(str, Enum):
    """Page orientation of the printable document."""
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


# A row is an opaque key -> value mapping; only formatters interpret values.
Row = dict[str, Any]

# ``formatter(value, row) -> str``
CellFormatter = Callable[[Any, Row], str]

# Path, URL, ``data:`` URI or raw encoded bytes.
ImageSource = Union[str, Path, bytes]


# ---------------------------------------------------------------------------
# Input contract
# ---------------------------------------------------------------------------

class ColumnSpec(BaseModel):
    """One output column.

    ``formatter`` receives ``(value, row)`` and returns the display string.
    When absent, the raw value is stringified (see
    :func:`openexport.core.formatting.format_cell`).
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: str
    label: str
    formatter: Optional[CellFormatter] = Field(default=None, exclude=True)


class LogoSet(BaseModel):
    """Logo sources for the header band (left/right) and the footer."""
    left: Optional[ImageSource] = None
    right: Optional[ImageSource] = None
    footer: Optional[ImageSource] = None


class ChartBlock(BaseModel):
    """A pre-rendered chart: title + raster image, laid out atomically."""
    title: str
    image: ImageSource
    natural_width: Optional[float] = Field(default=None, gt=0)
    natural_height: Optional[float] = Field(default=None, gt=0)


class ExportOptions(BaseModel):
    """Options shared by every encoder."""
    filename_base: str = "export"
    title: Optional[str] = None
    subtitle: Optional[str] = None
    header_lines: list[str] = Field(default_factory=list)
    orientation: Orientation = Orientation.PORTRAIT
    include_timestamp: bool = True
    logos: LogoSet = Field(default_factory=LogoSet)
    chart_images: list[ChartBlock] = Field(default_factory=list)
    hide_total_records: bool = False
    theme: str = "corporate"
    #: Fixed generation time; ``None`` means "now" at build time.
    generated_at: Optional[datetime] = None

    @field_validator("filename_base")
    @classmethod
    def _non_empty_filename(cls, v: str) -> str:
        v = v.strip()
        return v or "export"


def ensure_unique_keys(columns: list[ColumnSpec]) -> None:
    """Raise ``ValueError`` if two columns share a key."""
    seen: set[str] = set()
    for col in columns:
        if col.key in seen:
            raise ValueError(f"Duplicate column key: {col.key!r}")
        seen.add(col.key)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class GenerationResult(BaseModel):
    """Result of a single encoder run."""
    format: OutputFormat
    output_path: Path
    success: bool = True
    error: Optional[str] = None
    page_count: Optional[int] = None
    warnings: list[str] = Field(default_factory=list)


class ExportResult(BaseModel):
    """Aggregate result of an export pipeline run."""
    record_count: int = 0
    results: list[GenerationResult] = Field(default_factory=list)

    @property
    def pdf_path(self) -> Optional[Path]:
        return self._path_for(OutputFormat.PDF)

    @property
    def csv_path(self) -> Optional[Path]:
        return self._path_for(OutputFormat.CSV)

    @property
    def excel_path(self) -> Optional[Path]:
        return self._path_for(OutputFormat.EXCEL)

    @property
    def json_path(self) -> Optional[Path]:
        return self._path_for(OutputFormat.JSON)

    def _path_for(self, fmt: OutputFormat) -> Optional[Path]:
        for r in self.results:
            if r.format == fmt and r.success:
                return r.output_path
        return None
