"""Page geometry and pagination thresholds.

All values are PDF points. They are written in millimetres because the
layout was designed on an A4 sheet measured in mm.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm

from .models import Orientation


@dataclass(frozen=True)
class LayoutConfig:
    """Geometry of one printable page plus the pagination policy knobs."""

    page_width: float = A4[0]
    page_height: float = A4[1]
    margin: float = 20 * mm

    # Header band
    header_height: float = 45 * mm
    header_fill_overhang: float = 5 * mm
    header_text_top: float = 12 * mm
    header_line_step: float = 4.5 * mm
    header_wrap_step: float = 4 * mm
    logo_width: float = 25 * mm
    logo_height: float = 25 * mm
    logo_top: float = 10 * mm

    # Footer band
    footer_reserve: float = 15 * mm
    footer_logo_width: float = 25 * mm
    footer_logo_height: float = 18 * mm
    footer_logo_offset: float = 20 * mm
    footer_text_offset: float = 5 * mm

    # Document title under the header band (first page only)
    title_gap: float = 8 * mm
    title_after: float = 3 * mm
    table_gap: float = 15 * mm

    # Columns
    min_column_width: float = 20 * mm
    max_column_width: float = 50 * mm
    header_cell_padding: float = 8 * mm
    sample_cell_padding: float = 8 * mm
    sample_size: int = 30
    rescale_margin: float = 0.995

    # Rows
    cell_padding: float = 6 * mm
    header_label_padding: float = 4 * mm
    line_height: float = 4 * mm
    row_padding: float = 4 * mm
    min_row_height: float = 8 * mm
    table_header_min_height: float = 10 * mm

    # Pagination policy
    safety_margin: float = 0.5 * mm
    first_row_tolerance: float = 0.5
    summary_gap: float = 15 * mm
    summary_height: float = 15 * mm
    summary_break_threshold: float = 10 * mm

    # Single-record mode
    record_label_ratio: float = 0.35
    record_line_height: float = 5 * mm
    record_padding: float = 4 * mm

    # Chart blocks
    chart_title_height: float = 8 * mm
    chart_spacing: float = 8 * mm
    chart_max_height: float = 110 * mm

    # Images
    upscale_factor: int = 6
    image_timeout: float = 20.0

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def body_bottom(self) -> float:
        """Lowest y (measured from the top edge) that body content may reach."""
        return self.page_height - self.margin - self.footer_reserve

    @classmethod
    def for_orientation(cls, orientation: Orientation | str) -> LayoutConfig:
        """Return the preset for *orientation*."""
        orientation = Orientation(orientation)
        if orientation == Orientation.LANDSCAPE:
            return LANDSCAPE_LAYOUT
        return PORTRAIT_LAYOUT


PORTRAIT_LAYOUT = LayoutConfig()

LANDSCAPE_LAYOUT = replace(
    PORTRAIT_LAYOUT,
    page_width=landscape(A4)[0],
    page_height=landscape(A4)[1],
    max_column_width=70 * mm,
    chart_max_height=90 * mm,
)
