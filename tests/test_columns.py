"""Tests for column width allocation."""

from __future__ import annotations

import warnings

import pytest

from openexport.core.config import LANDSCAPE_LAYOUT, PORTRAIT_LAYOUT
from openexport.core.errors import LayoutOverflowWarning
from openexport.layout.columns import ColumnWidthAllocator
from openexport.layout.measure import TextMeasurer


@pytest.fixture
def allocator() -> ColumnWidthAllocator:
    return ColumnWidthAllocator(
        PORTRAIT_LAYOUT,
        TextMeasurer("Helvetica-Bold", 8),
        TextMeasurer("Helvetica", 7),
    )


def _long(n: int) -> str:
    return " ".join(["descriptive"] * n)


class TestOptimalWidth:
    def test_short_content_gets_minimum(self, allocator):
        cfg = PORTRAIT_LAYOUT
        assert allocator.optimal_width("ID", ["1", "2"]) == cfg.min_column_width

    def test_long_content_capped_at_maximum(self, allocator):
        cfg = PORTRAIT_LAYOUT
        assert allocator.optimal_width("Remarks", ["W" * 60]) == cfg.max_column_width

    def test_header_label_drives_width(self, allocator):
        cfg = PORTRAIT_LAYOUT
        label = "Emergency Contact Person"
        expected = allocator.header_measurer.width(label) + cfg.header_cell_padding
        assert cfg.min_column_width < expected < cfg.max_column_width
        assert allocator.optimal_width(label, ["x"]) == pytest.approx(expected)


class TestAllocate:
    def test_fits_without_rescale(self, allocator):
        alloc = allocator.allocate(["A", "B", "C"], [["1", "2", "3"]])
        assert alloc.widths == (PORTRAIT_LAYOUT.min_column_width,) * 3
        assert not alloc.overflow

    @pytest.mark.parametrize("n_cols", [4, 6, 8])
    def test_sum_never_exceeds_available(self, allocator, n_cols):
        labels = [f"Column number {i}" for i in range(n_cols)]
        rows = [[_long(12)] * n_cols for _ in range(5)]
        alloc = allocator.allocate(labels, rows)
        assert alloc.total_width <= alloc.available_width
        assert all(w >= PORTRAIT_LAYOUT.min_column_width for w in alloc.widths)
        assert not alloc.overflow

    def test_mixed_widths_keep_minimum(self, allocator):
        labels = ["ID", "Name", "Address", "Notes", "Remarks", "Status", "Zone"]
        rows = [["1", "Ana", _long(8), _long(20), _long(20), "ok", "3"]]
        alloc = allocator.allocate(labels, rows)
        assert alloc.total_width <= alloc.available_width
        assert min(alloc.widths) >= PORTRAIT_LAYOUT.min_column_width
        # Wide content keeps more room than the short columns after rescale.
        assert alloc.widths[3] > alloc.widths[0]

    def test_explicit_available_width(self, allocator):
        alloc = allocator.allocate(["A", "B"], [[_long(10), _long(10)]], available_width=150.0)
        assert alloc.available_width == 150.0
        assert alloc.total_width <= 150.0

    def test_only_sample_rows_are_measured(self, allocator):
        cfg = PORTRAIT_LAYOUT
        rows = [["x"]] * cfg.sample_size + [[_long(40)]]
        alloc = allocator.allocate(["Col"], rows)
        assert alloc.widths == (cfg.min_column_width,)

    def test_degenerate_overflow_warns(self, allocator):
        n = 12  # 12 x min width is wider than an A4 portrait body
        with pytest.warns(LayoutOverflowWarning):
            alloc = allocator.allocate([f"C{i}" for i in range(n)], [["x"] * n])
        assert alloc.overflow
        assert alloc.widths == (PORTRAIT_LAYOUT.min_column_width,) * n

    def test_no_warning_when_fitting(self, allocator):
        with warnings.catch_warnings():
            warnings.simplefilter("error", LayoutOverflowWarning)
            allocator.allocate(["A", "B"], [["1", "2"]])

    def test_landscape_allows_wider_columns(self):
        landscape = ColumnWidthAllocator(
            LANDSCAPE_LAYOUT, TextMeasurer("Helvetica-Bold", 8), TextMeasurer("Helvetica", 7)
        )
        alloc = landscape.allocate(["Remarks"], [["W" * 80]])
        assert alloc.widths[0] == LANDSCAPE_LAYOUT.max_column_width
        assert alloc.widths[0] > PORTRAIT_LAYOUT.max_column_width

    def test_layouts_mirror_widths(self, allocator):
        alloc = allocator.allocate(["A", "B"], [["1", "2"]])
        assert [c.width for c in alloc.layouts] == list(alloc.widths)
