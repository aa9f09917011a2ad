"""Build the paginated PDF document.

:class:`DocumentBuilder` is the orchestrator of the layout engine. A build
runs in two phases:

1. **Plan** (pure, synchronous): choose single-record or tabular mode,
   allocate column widths once, wrap every row once, then walk the
   precomputed heights with :class:`PageSequence` to place the title,
   table header, rows (or fields), the record count summary and chart
   blocks onto pages.
2. **Draw**: hand every :class:`PagePlan` to :class:`PageRenderer` and
   serialise the canvas. Because pages are fully planned first, the
   footer's ``Page n of N`` is exact.

Images are loaded concurrently before planning; a missing image leaves
its slot blank and is reported in the plan warnings.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import Optional

from reportlab.pdfgen.canvas import Canvas

from ..core.config import LayoutConfig
from ..core.errors import EncodingError
from ..core.formatting import format_rows
from ..core.models import (
    ColumnSpec,
    ExportOptions,
    GenerationResult,
    OutputFormat,
    Row,
    ensure_unique_keys,
)
from ..layout.columns import ColumnAllocation, ColumnWidthAllocator
from ..layout.images import ImageAsset, ImageNormalizer, NormalizedImage, describe_source
from ..layout.measure import TextMeasurer
from ..layout.pagination import ItemKind, PagePlan, PageSequence, PaginationPlanner
from ..layout.rows import FieldPlan, RowHeightPlanner, RowPlan
from .base import Artifact, BaseGenerator
from .page_renderer import HeaderLayout, PageRenderer, layout_header
from .themes import Theme

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Plan types
# ---------------------------------------------------------------------------

class DocumentMode(str, Enum):
    TABLE = "table"
    RECORD = "record"


@dataclass(frozen=True)
class ChartLayout:
    """A chart block sized for the page: spacing, wrapped title, image."""

    title_lines: tuple[str, ...]
    title_height: float
    spacing: float
    image: Optional[NormalizedImage] = None

    @property
    def height(self) -> float:
        image_h = self.image.draw_height if self.image is not None else 0.0
        return self.spacing + self.title_height + image_h


@dataclass
class LoadedImages:
    """Every image of one document, loaded before the first page is drawn."""

    left: Optional[NormalizedImage] = None
    right: Optional[NormalizedImage] = None
    footer: Optional[NormalizedImage] = None
    charts: list[Optional[ImageAsset]] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


@dataclass
class DocumentPlan:
    """Everything the renderer needs; produced once per build."""

    mode: DocumentMode
    header: HeaderLayout
    pages: list[PagePlan]
    record_count: int
    title_lines: tuple[str, ...] = ()
    allocation: Optional[ColumnAllocation] = None
    table_header: Optional[RowPlan] = None
    rows: list[RowPlan] = field(default_factory=list)
    fields: list[FieldPlan] = field(default_factory=list)
    charts: list[ChartLayout] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def indices_per_page(self, kind: ItemKind) -> list[list[int]]:
        """Item indices of *kind* on each page, in page order."""
        return [page.indices(kind) for page in self.pages]


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

class DocumentBuilder(BaseGenerator):
    """Generates the paginated ``.pdf`` document.

    Usage::

        builder = DocumentBuilder(theme=get_theme("ocean"))
        artifact = builder.build(columns, rows, ExportOptions(title="Users"))
        print(artifact.page_count)
    """

    format = OutputFormat.PDF
    extension = "pdf"

    def __init__(
        self,
        theme: Theme | None = None,
        *,
        config: LayoutConfig | None = None,
        normalizer: ImageNormalizer | None = None,
    ) -> None:
        super().__init__(theme)
        self._config = config
        self._normalizer = normalizer
        f = self.theme.fonts
        self.header_measurer = TextMeasurer(f.bold, f.table_header_size_pt)
        self.cell_measurer = TextMeasurer(f.regular, f.cell_size_pt)
        self.label_measurer = TextMeasurer(f.bold, f.record_size_pt)
        self.value_measurer = TextMeasurer(f.regular, f.record_size_pt)
        self.title_measurer = TextMeasurer(f.bold, f.title_size_pt)
        self.chart_title_measurer = TextMeasurer(f.bold, f.chart_title_size_pt)

    def layout_config(self, options: ExportOptions) -> LayoutConfig:
        return self._config or LayoutConfig.for_orientation(options.orientation)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def build_async(
        self, columns: list[ColumnSpec], rows: list[Row], options: ExportOptions
    ) -> Artifact:
        """Load images, plan every page, draw and serialise the document."""
        ensure_unique_keys(columns)
        options = self._pin_time(options)
        config = self.layout_config(options)
        images = await self.load_images(options, config)
        plan = self.plan(columns, rows, options, images)
        data = self._draw(plan, images, options, config)
        log.info(
            "Built %s document: %d record(s) on %d page(s)",
            plan.mode.value, plan.record_count, plan.page_count,
        )
        return Artifact(data=data, page_count=plan.page_count, warnings=plan.warnings)

    async def plan_async(
        self, columns: list[ColumnSpec], rows: list[Row], options: ExportOptions
    ) -> DocumentPlan:
        """Load images and plan every page, without drawing."""
        config = self.layout_config(options)
        images = await self.load_images(options, config)
        return self.plan(columns, rows, options, images)

    def build(
        self, columns: list[ColumnSpec], rows: list[Row], options: ExportOptions
    ) -> Artifact:
        """Synchronous wrapper around :meth:`build_async`."""
        return asyncio.run(self.build_async(columns, rows, options))

    def render(
        self, columns: list[ColumnSpec], rows: list[Row], options: ExportOptions
    ) -> Artifact:
        return self.build(columns, rows, options)

    async def generate_async(
        self,
        columns: list[ColumnSpec],
        rows: list[Row],
        options: ExportOptions,
        output_dir: Path,
    ) -> GenerationResult:
        """Like :meth:`generate`, for callers already inside an event loop."""
        options = self._pin_time(options)
        artifact = await self.build_async(columns, rows, options)
        return self._store(artifact, options, Path(output_dir))

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    async def load_images(self, options: ExportOptions, config: LayoutConfig) -> LoadedImages:
        """Load logos and chart images concurrently ("load or skip")."""
        normalizer = self._normalizer or ImageNormalizer(
            upscale_factor=config.upscale_factor, timeout=config.image_timeout
        )
        logos = options.logos
        sources = [logos.left, logos.right, logos.footer] + [
            c.image for c in options.chart_images
        ]
        assets = await asyncio.gather(*(normalizer.load_or_skip(s) for s in sources))
        failed = [
            describe_source(src)
            for src, asset in zip(sources, assets)
            if src is not None and asset is None
        ]
        left, right, footer, *charts = assets

        def fit(asset: Optional[ImageAsset], w: float, h: float) -> Optional[NormalizedImage]:
            image = normalizer.normalize_or_skip(asset, w, h)
            if asset is not None and image is None:
                failed.append(asset.source_ref)
            return image

        return LoadedImages(
            left=fit(left, config.logo_width, config.logo_height),
            right=fit(right, config.logo_width, config.logo_height),
            footer=fit(footer, config.footer_logo_width, config.footer_logo_height),
            charts=list(charts),
            failed=failed,
        )

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def plan(
        self,
        columns: list[ColumnSpec],
        rows: list[Row],
        options: ExportOptions,
        images: LoadedImages | None = None,
    ) -> DocumentPlan:
        """Lay out every page without drawing anything.

        Single-record mode is selected exactly when there is one row.
        """
        ensure_unique_keys(columns)
        config = self.layout_config(options)
        images = images or LoadedImages()
        header = layout_header(
            options, config, self.theme, options.generated_at or datetime.now()
        )
        planner = PaginationPlanner(
            config.body_bottom,
            safety_margin=config.safety_margin,
            first_item_tolerance=config.first_row_tolerance,
            trailer_break_threshold=config.summary_break_threshold,
        )
        seq = PageSequence(planner, first_top=header.height)

        title_lines: tuple[str, ...] = ()
        if options.header_lines and options.title:
            title_lines = self.title_measurer.wrap(options.title, config.content_width).lines
            seq.reserve(
                ItemKind.TITLE,
                config.title_gap
                + (len(title_lines) - 1) * config.record_line_height
                + config.title_after,
            )

        mode = DocumentMode.RECORD if len(rows) == 1 else DocumentMode.TABLE
        plan = DocumentPlan(
            mode=mode,
            header=header,
            pages=seq.pages,
            record_count=len(rows),
            title_lines=title_lines,
            warnings=[f"Skipped image {ref}" for ref in images.failed],
        )
        cells = format_rows(columns, rows)
        row_planner = RowHeightPlanner(config, self.cell_measurer)

        if mode == DocumentMode.RECORD:
            self._plan_record(plan, seq, config, row_planner, columns, cells[0])
        else:
            self._plan_table(plan, seq, config, row_planner, columns, cells, options)

        self._plan_charts(plan, seq, config, header, options, images)
        plan.pages = seq.pages

        for page in plan.pages:
            for p in page.placements:
                if p.forced:
                    plan.warnings.append(
                        f"{p.kind.value} {p.index} overflows the body of page {page.number}"
                    )
        return plan

    def _plan_table(
        self,
        plan: DocumentPlan,
        seq: PageSequence,
        config: LayoutConfig,
        row_planner: RowHeightPlanner,
        columns: list[ColumnSpec],
        cells: list[list[str]],
        options: ExportOptions,
    ) -> None:
        labels = [c.label for c in columns]
        allocator = ColumnWidthAllocator(config, self.header_measurer, self.cell_measurer)
        allocation = allocator.allocate(labels, cells)
        table_header = row_planner.plan_header(labels, allocation, self.header_measurer)
        plan.allocation = allocation
        plan.table_header = table_header
        plan.rows = row_planner.plan(cells, allocation)
        if allocation.overflow:
            plan.warnings.append(
                f"Table is {allocation.total_width:.1f}pt wide but only "
                f"{allocation.available_width:.1f}pt are available"
            )

        continuation_top = plan.header.height + config.table_gap
        seq.skip(config.table_gap)

        if plan.rows:
            def repeat_header(s: PageSequence) -> None:
                s.reserve(ItemKind.TABLE_HEADER, table_header.height)

            repeat_header(seq)
            for i, row in enumerate(plan.rows):
                seq.place(
                    ItemKind.ROW, i, row.height, continuation_top, page_prefix=repeat_header
                )
        else:
            log.info("No rows to export; rendering the empty-table notice")
            seq.place(ItemKind.NO_DATA, 0, config.summary_height, continuation_top)

        if not options.hide_total_records:
            seq.place_trailer(
                ItemKind.SUMMARY,
                config.summary_height,
                config.summary_gap,
                plan.header.height + config.title_gap,
            )

    def _plan_record(
        self,
        plan: DocumentPlan,
        seq: PageSequence,
        config: LayoutConfig,
        row_planner: RowHeightPlanner,
        columns: list[ColumnSpec],
        values: list[str],
    ) -> None:
        plan.fields = row_planner.plan_fields(
            [c.label for c in columns],
            values,
            self.label_measurer,
            self.value_measurer,
        )
        continuation_top = plan.header.height + config.title_gap
        seq.skip(config.title_gap)
        for i, fp in enumerate(plan.fields):
            seq.place(ItemKind.FIELD, i, fp.height, continuation_top)

    def _plan_charts(
        self,
        plan: DocumentPlan,
        seq: PageSequence,
        config: LayoutConfig,
        header: HeaderLayout,
        options: ExportOptions,
        images: LoadedImages,
    ) -> None:
        """Size chart blocks and place each one atomically, without tolerance."""
        if not options.chart_images:
            return
        normalizer = self._normalizer or ImageNormalizer(upscale_factor=config.upscale_factor)
        chart_top = header.height + config.title_gap
        for i, block in enumerate(options.chart_images):
            title_lines = self.chart_title_measurer.wrap(block.title, config.content_width).lines
            title_height = max(config.chart_title_height, len(title_lines) * config.line_height)
            # A block must fit on an otherwise empty page.
            max_image_h = min(
                config.chart_max_height,
                config.body_bottom - chart_top - config.chart_spacing - title_height
                - config.safety_margin,
            )
            asset = images.charts[i] if i < len(images.charts) else None
            image = None
            if asset is not None and max_image_h > 0:
                natural = None
                if block.natural_width and block.natural_height:
                    natural = (block.natural_width, block.natural_height)
                image = normalizer.normalize_or_skip(
                    asset, config.content_width, max_image_h, natural_size=natural
                )
                if image is None:
                    plan.warnings.append(f"Skipped image {asset.source_ref}")
            chart = ChartLayout(
                title_lines=title_lines,
                title_height=title_height,
                spacing=config.chart_spacing,
                image=image,
            )
            plan.charts.append(chart)
            seq.place(ItemKind.CHART, i, chart.height, chart_top, tolerant=False)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _draw(
        self,
        plan: DocumentPlan,
        images: LoadedImages,
        options: ExportOptions,
        config: LayoutConfig,
    ) -> bytes:
        buf = BytesIO()
        try:
            canvas = Canvas(
                buf, pagesize=(config.page_width, config.page_height), invariant=1
            )
            canvas.setTitle(options.title or options.filename_base)
            canvas.setCreator("openexport")
            renderer = PageRenderer(canvas, config, self.theme)
            for page in plan.pages:
                renderer.draw_page(page, plan, images)
            canvas.save()
        except Exception as exc:
            raise EncodingError(f"PDF serialisation failed: {exc}") from exc
        return buf.getvalue()
