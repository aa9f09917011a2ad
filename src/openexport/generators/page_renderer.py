"""Draw planned pages onto a ReportLab canvas.

The renderer never makes layout decisions: it receives a
:class:`~openexport.layout.pagination.PagePlan` whose placements were
already positioned by the document builder and draws, in order, the
header band, every placement, and the footer band. Vertical positions in
plans are measured from the top edge; they are flipped here into
ReportLab's bottom-up coordinates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import Canvas

from ..core.config import LayoutConfig
from ..core.formatting import generated_label
from ..core.models import ExportOptions
from ..layout.images import NormalizedImage
from ..layout.measure import TextMeasurer
from ..layout.pagination import ItemKind, PagePlan, Placement
from .themes import RGB, Theme

if TYPE_CHECKING:
    from .pdf_generator import DocumentPlan, LoadedImages

NO_DATA_TEXT = "No records to display"


def _rgb(t: RGB) -> colors.Color:
    return colors.Color(t[0] / 255, t[1] / 255, t[2] / 255)


# ---------------------------------------------------------------------------
# Header band layout
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HeaderLine:
    text: str
    font: str
    size: float
    color: RGB
    y: float


@dataclass(frozen=True)
class HeaderLayout:
    """Positioned text of the repeating header band."""

    lines: tuple[HeaderLine, ...] = field(default_factory=tuple)
    height: float = 0.0


def layout_header(
    options: ExportOptions,
    config: LayoutConfig,
    theme: Theme,
    moment: datetime,
) -> HeaderLayout:
    """Position the header band text: official lines or title/subtitle, then timestamp.

    Official lines are styled by position (first, middle, last) and each
    wraps to the space left between the two logos.
    """
    f, c = theme.fonts, theme.colors
    max_text_width = config.page_width - 2 * config.margin - 2 * config.logo_width - 10
    lines: list[HeaderLine] = []
    y = config.header_text_top

    if options.header_lines:
        last = len(options.header_lines) - 1
        for i, text in enumerate(options.header_lines):
            if i == 0:
                font, size = f.bold, f.header_first_size_pt
            elif i == last:
                font, size = f.bold, f.header_last_size_pt
            else:
                font, size = f.regular, f.header_middle_size_pt
            wrapped = TextMeasurer(font, size).wrap(text, max_text_width).lines
            for j, part in enumerate(wrapped):
                lines.append(HeaderLine(part, font, size, c.header_text, y))
                if j < len(wrapped) - 1:
                    y += config.header_wrap_step
            y += config.header_line_step
    else:
        title = options.title or "Data Export"
        lines.append(HeaderLine(title, f.bold, f.header_title_size_pt, c.header_text, y))
        y += 5 * mm
        if options.subtitle:
            lines.append(HeaderLine(options.subtitle, f.regular, f.subtitle_size_pt, c.subtitle, y))
            y += 5 * mm

    if options.include_timestamp:
        y += config.header_wrap_step / 2
        lines.append(
            HeaderLine(generated_label(moment), f.regular, f.timestamp_size_pt, c.muted, y)
        )

    height = max(config.header_height, y + config.header_wrap_step)
    return HeaderLayout(lines=tuple(lines), height=height)


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------

class PageRenderer:
    """Draws header, body placements and footer of each planned page."""

    def __init__(self, canvas: Canvas, config: LayoutConfig, theme: Theme) -> None:
        self.canvas = canvas
        self.config = config
        self.theme = theme

    def _y(self, top: float) -> float:
        """Convert a distance from the top edge into canvas coordinates."""
        return self.config.page_height - top

    # ------------------------------------------------------------------
    # Page
    # ------------------------------------------------------------------

    def draw_page(self, page: PagePlan, plan: DocumentPlan, images: LoadedImages) -> None:
        """Draw one physical page and close it."""
        self.draw_header(plan.header, images.left, images.right)
        for placement in page.placements:
            self._draw_placement(placement, plan, images)
        self.draw_footer(page.number, plan.page_count, images.footer)
        self.canvas.showPage()

    def _draw_placement(self, p: Placement, plan: DocumentPlan, images: LoadedImages) -> None:
        if p.kind == ItemKind.TITLE:
            self.draw_title(p, plan.title_lines)
        elif p.kind == ItemKind.TABLE_HEADER:
            self.draw_table_header(p, plan)
        elif p.kind == ItemKind.ROW:
            self.draw_row(p, plan)
        elif p.kind == ItemKind.NO_DATA:
            self.draw_notice(p, NO_DATA_TEXT, muted=True)
        elif p.kind == ItemKind.SUMMARY:
            self.draw_notice(p, f"Total Records: {plan.record_count}")
        elif p.kind == ItemKind.FIELD:
            self.draw_field(p, plan)
        elif p.kind == ItemKind.CHART:
            self.draw_chart(p, plan)

    # ------------------------------------------------------------------
    # Header & footer
    # ------------------------------------------------------------------

    def draw_header(
        self,
        header: HeaderLayout,
        left_logo: Optional[NormalizedImage],
        right_logo: Optional[NormalizedImage],
    ) -> None:
        cfg, c = self.config, self.theme.colors
        cv = self.canvas
        cv.saveState()
        band = header.height + cfg.header_fill_overhang
        cv.setFillColor(_rgb(c.header_bg))
        cv.rect(0, self._y(band), cfg.page_width, band, fill=1, stroke=0)

        if left_logo is not None:
            self._draw_image(left_logo, cfg.margin, cfg.logo_top, cfg.logo_width, cfg.logo_height)
        if right_logo is not None:
            self._draw_image(
                right_logo,
                cfg.page_width - cfg.margin - cfg.logo_width,
                cfg.logo_top,
                cfg.logo_width,
                cfg.logo_height,
            )

        center = cfg.page_width / 2
        for line in header.lines:
            cv.setFont(line.font, line.size)
            cv.setFillColor(_rgb(line.color))
            cv.drawCentredString(center, self._y(line.y), line.text)

        cv.setStrokeColor(_rgb(c.rule))
        cv.setLineWidth(0.5)
        cv.line(cfg.margin, self._y(header.height), cfg.page_width - cfg.margin, self._y(header.height))
        cv.restoreState()

    def draw_footer(
        self, page_number: int, total_pages: int, footer_logo: Optional[NormalizedImage]
    ) -> None:
        cfg, f = self.config, self.theme.fonts
        cv = self.canvas
        if footer_logo is not None:
            self._draw_image(
                footer_logo,
                (cfg.page_width - cfg.footer_logo_width) / 2,
                cfg.page_height - cfg.footer_logo_offset,
                cfg.footer_logo_width,
                cfg.footer_logo_height,
            )
        cv.saveState()
        cv.setFont(f.regular, f.footer_size_pt)
        cv.setFillColor(_rgb(self.theme.colors.muted))
        cv.drawCentredString(
            cfg.page_width / 2,
            self._y(cfg.page_height - cfg.footer_text_offset),
            f"Page {page_number} of {total_pages}",
        )
        cv.restoreState()

    # ------------------------------------------------------------------
    # Body items
    # ------------------------------------------------------------------

    def draw_title(self, p: Placement, title_lines: tuple[str, ...]) -> None:
        cfg, f = self.config, self.theme.fonts
        cv = self.canvas
        cv.saveState()
        cv.setFont(f.bold, f.title_size_pt)
        cv.setFillColor(_rgb(self.theme.colors.header_text))
        y = p.y + cfg.title_gap
        for line in title_lines:
            cv.drawCentredString(cfg.page_width / 2, self._y(y), line)
            y += cfg.record_line_height
        cv.restoreState()

    def draw_table_header(self, p: Placement, plan: DocumentPlan) -> None:
        cfg, c, f = self.config, self.theme.colors, self.theme.fonts
        cv = self.canvas
        widths = plan.allocation.widths
        total = sum(widths)
        top, bottom = self._y(p.y), self._y(p.y + p.height)

        cv.saveState()
        cv.setFillColor(_rgb(c.table_header_bg))
        cv.setStrokeColor(_rgb(c.table_header_border))
        cv.setLineWidth(0.2)
        cv.rect(cfg.margin, bottom, total, p.height, fill=1, stroke=1)

        cv.setStrokeColor(_rgb(c.white))
        x = cfg.margin
        for i, w in enumerate(widths):
            if i > 0:
                cv.line(x, top, x, bottom)
            x += w

        cv.setFillColor(_rgb(c.table_header_text))
        cv.setFont(f.bold, f.table_header_size_pt)
        self._draw_cells(p, plan.table_header.cells, widths, inset=cfg.header_label_padding / 2)
        cv.restoreState()

    def draw_row(self, p: Placement, plan: DocumentPlan) -> None:
        cfg, c, f = self.config, self.theme.colors, self.theme.fonts
        cv = self.canvas
        row = plan.rows[p.index]
        widths = plan.allocation.widths
        total = sum(widths)
        top, bottom = self._y(p.y), self._y(p.y + p.height)

        cv.saveState()
        if p.index % 2 == 1:
            cv.setFillColor(_rgb(c.table_alt_row))
            cv.rect(cfg.margin, bottom, total, p.height, fill=1, stroke=0)

        cv.setLineWidth(0.1)
        cv.setStrokeColor(_rgb(c.table_border))
        cv.rect(cfg.margin, bottom, total, p.height, fill=0, stroke=1)
        x = cfg.margin
        for i, w in enumerate(widths):
            if i > 0:
                cv.line(x, top, x, bottom)
            x += w

        cv.setFillColor(_rgb(c.cell_text))
        cv.setFont(f.regular, f.cell_size_pt)
        self._draw_cells(p, row.cells, widths, inset=cfg.cell_padding / 2)
        cv.restoreState()

    def _draw_cells(self, p: Placement, cells, widths, *, inset: float) -> None:
        """Draw wrapped cell lines, vertically centred in the band."""
        lh = self.config.line_height
        x = self.config.margin
        for cell, w in zip(cells, widths):
            start = p.y + (p.height - len(cell.lines) * lh) / 2
            for k, line in enumerate(cell.lines):
                self.canvas.drawString(x + inset, self._y(start + k * lh + lh * 0.75), line)
            x += w

    def draw_notice(self, p: Placement, text: str, *, muted: bool = False) -> None:
        """Boxed single-line notice (record count summary or empty-table marker)."""
        cfg, c, f = self.config, self.theme.colors, self.theme.fonts
        cv = self.canvas
        cv.saveState()
        cv.setFillColor(_rgb(c.summary_bg))
        cv.setStrokeColor(_rgb(c.summary_border))
        cv.setLineWidth(0.3)
        cv.rect(cfg.margin, self._y(p.y + p.height), cfg.content_width, p.height, fill=1, stroke=1)
        cv.setFont(f.bold, f.summary_size_pt)
        cv.setFillColor(_rgb(c.muted if muted else c.summary_text))
        baseline = p.y + p.height / 2 + f.summary_size_pt * 0.35
        cv.drawCentredString(cfg.page_width / 2, self._y(baseline), text)
        cv.restoreState()

    def draw_field(self, p: Placement, plan: DocumentPlan) -> None:
        cfg, c, f = self.config, self.theme.colors, self.theme.fonts
        cv = self.canvas
        field_plan = plan.fields[p.index]
        lh = cfg.record_line_height
        pad = cfg.cell_padding / 2
        value_x = cfg.margin + cfg.content_width * cfg.record_label_ratio
        first_baseline = p.y + cfg.record_padding / 2 + lh * 0.75

        cv.saveState()
        cv.setFillColor(_rgb(c.header_text))
        cv.setFont(f.bold, f.record_size_pt)
        for k, line in enumerate(field_plan.label_lines):
            cv.drawString(cfg.margin + pad, self._y(first_baseline + k * lh), line)
        cv.setFillColor(_rgb(c.cell_text))
        cv.setFont(f.regular, f.record_size_pt)
        for k, line in enumerate(field_plan.value_lines):
            cv.drawString(value_x + pad, self._y(first_baseline + k * lh), line)

        cv.setStrokeColor(_rgb(c.table_border))
        cv.setLineWidth(0.3)
        bottom = self._y(p.y + p.height)
        cv.line(cfg.margin, bottom, cfg.margin + cfg.content_width, bottom)
        cv.restoreState()

    def draw_chart(self, p: Placement, plan: DocumentPlan) -> None:
        cfg, f = self.config, self.theme.fonts
        cv = self.canvas
        chart = plan.charts[p.index]
        y = p.y + cfg.chart_spacing

        cv.saveState()
        cv.setFont(f.bold, f.chart_title_size_pt)
        cv.setFillColor(_rgb(self.theme.colors.header_text))
        for line in chart.title_lines:
            cv.drawString(cfg.margin, self._y(y + cfg.line_height * 0.9), line)
            y += cfg.line_height
        cv.restoreState()

        if chart.image is not None:
            y = p.y + cfg.chart_spacing + chart.title_height
            x = cfg.margin + (cfg.content_width - chart.image.draw_width) / 2
            self._draw_image(
                chart.image, x, y, chart.image.draw_width, chart.image.draw_height
            )

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def _draw_image(
        self,
        image: NormalizedImage,
        slot_x: float,
        slot_top: float,
        slot_width: float,
        slot_height: float,
    ) -> None:
        """Draw *image* centred inside a slot given by its top-left corner."""
        x = slot_x + (slot_width - image.draw_width) / 2
        top = slot_top + (slot_height - image.draw_height) / 2
        self.canvas.drawImage(
            ImageReader(image.pixels),
            x,
            self._y(top + image.draw_height),
            width=image.draw_width,
            height=image.draw_height,
        )
