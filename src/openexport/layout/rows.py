"""Row height planning.

Every cell is wrapped against its final column width once, before any
page is drawn. Pagination and rendering both read the resulting plans,
so text is never re-measured mid-page.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..core.config import LayoutConfig
from .columns import ColumnAllocation
from .measure import TextMeasurer


@dataclass(frozen=True)
class WrappedCell:
    lines: tuple[str, ...]


@dataclass(frozen=True)
class RowPlan:
    """Wrapped cells of one row and the height of its band."""

    cells: tuple[WrappedCell, ...]
    height: float


@dataclass(frozen=True)
class FieldPlan:
    """One label/value pair in single-record mode."""

    label_lines: tuple[str, ...]
    value_lines: tuple[str, ...]
    height: float


class RowHeightPlanner:
    """Precomputes wrapped lines and band heights."""

    def __init__(self, config: LayoutConfig, measurer: TextMeasurer) -> None:
        self.config = config
        self.measurer = measurer

    def content_width(self, column_width: float) -> float:
        """Width available to text inside a column of *column_width*."""
        return max(column_width - self.config.cell_padding, 0.0)

    def plan_row(self, cells: list[str], widths: tuple[float, ...]) -> RowPlan:
        cfg = self.config
        wrapped = tuple(
            WrappedCell(lines=self.measurer.wrap(text, self.content_width(w)).lines)
            for text, w in zip(cells, widths)
        )
        tallest = max((len(c.lines) for c in wrapped), default=1)
        height = max(tallest * cfg.line_height + cfg.row_padding, cfg.min_row_height)
        return RowPlan(cells=wrapped, height=height)

    def plan(self, rows: list[list[str]], allocation: ColumnAllocation) -> list[RowPlan]:
        """Plan every row. O(rows x columns)."""
        return [self.plan_row(cells, allocation.widths) for cells in rows]

    def plan_header(
        self,
        labels: list[str],
        allocation: ColumnAllocation,
        header_measurer: TextMeasurer,
    ) -> RowPlan:
        """Plan the table header band; labels wrap inside their column."""
        cfg = self.config
        wrapped = tuple(
            WrappedCell(
                lines=header_measurer.wrap(
                    label, max(w - cfg.header_label_padding, 0.0)
                ).lines
            )
            for label, w in zip(labels, allocation.widths)
        )
        tallest = max((len(c.lines) for c in wrapped), default=1)
        height = max(tallest * cfg.line_height + cfg.row_padding, cfg.table_header_min_height)
        return RowPlan(cells=wrapped, height=height)

    def plan_fields(
        self,
        labels: list[str],
        values: list[str],
        label_measurer: TextMeasurer,
        value_measurer: TextMeasurer,
        content_width: float | None = None,
    ) -> list[FieldPlan]:
        """Plan a single record as a vertical label/value list.

        Labels take ``record_label_ratio`` of the content width; each
        value wraps independently in the remainder.
        """
        cfg = self.config
        total = cfg.content_width if content_width is None else content_width
        label_width, value_width = self.field_widths(total)
        plans: list[FieldPlan] = []
        for label, value in zip(labels, values):
            label_lines = label_measurer.wrap(label, label_width).lines
            value_lines = value_measurer.wrap(value, value_width).lines
            tallest = max(len(label_lines), len(value_lines))
            plans.append(
                FieldPlan(
                    label_lines=label_lines,
                    value_lines=value_lines,
                    height=tallest * cfg.record_line_height + cfg.record_padding,
                )
            )
        return plans

    def field_widths(self, content_width: float) -> tuple[float, float]:
        """Text widths of the label and value columns in single-record mode."""
        pad = self.config.cell_padding
        label_col = content_width * self.config.record_label_ratio
        return max(label_col - pad, 0.0), max(content_width - label_col - pad, 0.0)
