"""openexport: paginated PDF, CSV, spreadsheet and JSON export of tabular data."""

from .core.models import (
    ChartBlock,
    ColumnSpec,
    ExportOptions,
    ExportResult,
    GenerationResult,
    LogoSet,
    Orientation,
    OutputFormat,
)
from .generators.pdf_generator import DocumentBuilder
from .pipeline import ExportPipeline

__version__ = "0.1.0"

__all__ = [
    "ChartBlock",
    "ColumnSpec",
    "DocumentBuilder",
    "ExportOptions",
    "ExportPipeline",
    "ExportResult",
    "GenerationResult",
    "LogoSet",
    "Orientation",
    "OutputFormat",
    "__version__",
]
