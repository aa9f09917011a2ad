"""Tests for row and field height planning."""

from __future__ import annotations

import pytest

from openexport.core.config import PORTRAIT_LAYOUT as CFG
from openexport.layout.columns import ColumnAllocation
from openexport.layout.measure import TextMeasurer
from openexport.layout.rows import RowHeightPlanner


@pytest.fixture
def planner() -> RowHeightPlanner:
    return RowHeightPlanner(CFG, TextMeasurer("Helvetica", 7))


def _alloc(*widths: float) -> ColumnAllocation:
    return ColumnAllocation(widths=tuple(widths), available_width=sum(widths))


class TestRowPlan:
    def test_single_line_row_uses_minimum_height(self, planner):
        plan = planner.plan_row(["a", "b"], (100.0, 100.0))
        assert plan.height == pytest.approx(CFG.min_row_height)
        assert [c.lines for c in plan.cells] == [("a",), ("b",)]

    def test_height_follows_tallest_cell(self, planner):
        plan = planner.plan_row(["one\ntwo\nthree", "x"], (100.0, 100.0))
        assert plan.height == pytest.approx(3 * CFG.line_height + CFG.row_padding)

    def test_wrapped_lines_fit_content_width(self, planner):
        text = "santo nino evacuation center near the municipal plaza and the chapel"
        widths = (70.0, 90.0)
        plan = planner.plan_row([text, text], widths)
        m = planner.measurer
        for cell, w in zip(plan.cells, widths):
            assert len(cell.lines) > 1
            for line in cell.lines:
                assert m.width(line) <= planner.content_width(w)

    def test_plan_covers_every_row(self, planner):
        rows = [["a"], ["b\nc"], [""]]
        plans = planner.plan(rows, _alloc(120.0))
        assert len(plans) == 3
        assert plans[1].height > plans[0].height
        assert plans[2].cells[0].lines == ("",)

    def test_header_has_its_own_minimum(self, planner):
        header = planner.plan_header(["ID"], _alloc(80.0), TextMeasurer("Helvetica-Bold", 8))
        assert header.height == pytest.approx(CFG.table_header_min_height)


class TestFieldPlan:
    def test_label_value_split(self, planner):
        label_w, value_w = planner.field_widths(CFG.content_width)
        assert label_w < value_w
        assert label_w == pytest.approx(CFG.content_width * CFG.record_label_ratio - CFG.cell_padding)

    def test_fields_wrap_independently(self, planner):
        long_value = " ".join(["kilometre"] * 80)
        fields = planner.plan_fields(
            ["Name", "Remarks"],
            ["Ana", long_value],
            TextMeasurer("Helvetica-Bold", 9),
            TextMeasurer("Helvetica", 9),
        )
        assert fields[0].value_lines == ("Ana",)
        assert len(fields[1].value_lines) > 3
        assert fields[1].height == pytest.approx(
            len(fields[1].value_lines) * CFG.record_line_height + CFG.record_padding
        )
        assert fields[0].height < fields[1].height
