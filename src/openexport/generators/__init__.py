"""Artifact encoders: paginated PDF, delimited text, spreadsheet text, JSON."""

from .base import Artifact, BaseGenerator
from .csv_generator import CsvGenerator
from .excel_generator import ExcelGenerator
from .json_generator import JsonGenerator
from .page_renderer import PageRenderer
from .pdf_generator import DocumentBuilder, DocumentMode, DocumentPlan
from .themes import DEFAULT_THEME, Theme, get_theme, list_themes, register_theme

__all__ = [
    "Artifact",
    "BaseGenerator",
    "CsvGenerator",
    "DEFAULT_THEME",
    "DocumentBuilder",
    "DocumentMode",
    "DocumentPlan",
    "ExcelGenerator",
    "JsonGenerator",
    "PageRenderer",
    "Theme",
    "get_theme",
    "list_themes",
    "register_theme",
]
