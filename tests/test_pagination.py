"""Tests for the page-break policy."""

from __future__ import annotations

import pytest

from openexport.core.errors import LayoutOverflowWarning
from openexport.layout.pagination import (
    Decision,
    ItemKind,
    PageSequence,
    PaginationPlanner,
    PaginationState,
)


@pytest.fixture
def planner() -> PaginationPlanner:
    return PaginationPlanner(
        100.0, safety_margin=0.0, first_item_tolerance=0.5, trailer_break_threshold=10.0
    )


def _state(y: float, items: int = 0, fresh: bool = False) -> PaginationState:
    return PaginationState(current_y=y, items_on_page=items, fresh=fresh)


class TestDecide:
    def test_accepts_when_it_fits(self, planner):
        assert planner.decide(_state(0, 3), 50) == Decision.ACCEPT

    def test_safety_margin_counts(self):
        p = PaginationPlanner(100.0, safety_margin=5.0)
        assert p.decide(_state(50, 1), 45) == Decision.ACCEPT
        assert p.decide(_state(50, 1), 46) == Decision.BREAK

    def test_first_item_tolerance(self, planner):
        # 40 remaining > 60 * 0.5
        assert planner.decide(_state(60, 0), 60) == Decision.TOLERATE

    def test_tolerance_only_for_first_item(self, planner):
        assert planner.decide(_state(60, 1), 60) == Decision.BREAK

    def test_tolerance_bound(self, planner):
        # 40 remaining is not more than 80 * 0.5
        assert planner.decide(_state(60, 0), 80) == Decision.BREAK

    def test_strict_mode_never_tolerates(self, planner):
        assert planner.decide(_state(60, 0), 60, tolerant=False) == Decision.BREAK

    def test_fresh_page_forces(self, planner):
        assert planner.decide(_state(0, 0, fresh=True), 300) == Decision.FORCE


class TestTrailer:
    def test_full_gap(self, planner):
        assert planner.decide_trailer(_state(50, 2), 15, 15) == (Decision.ACCEPT, 15)

    def test_shrunk_gap(self, planner):
        decision, gap = planner.decide_trailer(_state(80, 2), 15, 15)
        assert decision == Decision.ACCEPT
        assert gap == pytest.approx(5)

    def test_breaks_when_little_space_left(self, planner):
        assert planner.decide_trailer(_state(95, 2), 15, 15)[0] == Decision.BREAK

    def test_tolerated_above_threshold(self, planner):
        assert planner.decide_trailer(_state(88, 2), 15, 15) == (Decision.TOLERATE, 0.0)


class TestPaginate:
    def test_every_row_once_in_order(self, planner):
        pages = planner.paginate([30.0] * 10, 0.0, 0.0)
        assert pages == [[0, 1, 2], [3, 4, 5], [6, 7, 8], [9]]
        assert [i for page in pages for i in page] == list(range(10))

    def test_continuation_top_is_used(self, planner):
        pages = planner.paginate([30.0] * 6, 0.0, 40.0)
        assert pages == [[0, 1, 2], [3, 4], [5]]

    def test_tall_first_candidate_is_tolerated(self, planner):
        # The tall row is the first candidate of page 2 and is tolerated.
        pages = planner.paginate([30.0, 30.0, 30.0, 120.0, 10.0], 0.0, 0.0)
        assert pages == [[0, 1, 2], [3], [4]]

    def test_empty_input(self, planner):
        assert planner.paginate([], 0.0, 0.0) == [[]]


class TestPageSequence:
    def test_prefix_repeats_on_new_pages(self, planner):
        seq = PageSequence(planner, first_top=10.0)

        def prefix(s: PageSequence) -> None:
            s.reserve(ItemKind.TABLE_HEADER, 10.0)

        prefix(seq)
        for i in range(6):
            seq.place(ItemKind.ROW, i, 30.0, 5.0, page_prefix=prefix)

        assert len(seq.pages) == 3
        for page in seq.pages:
            assert page.placements[0].kind == ItemKind.TABLE_HEADER
        assert [page.indices(ItemKind.ROW) for page in seq.pages] == [[0, 1], [2, 3], [4, 5]]
        assert seq.pages[1].placements[1].y == pytest.approx(15.0)

    def test_forced_item_is_placed_alone_and_warns(self, planner):
        seq = PageSequence(planner, first_top=0.0)
        seq.place(ItemKind.ROW, 0, 50.0, 0.0)
        with pytest.warns(LayoutOverflowWarning):
            placement = seq.place(ItemKind.ROW, 1, 300.0, 0.0)
        assert placement.forced
        assert seq.current.number == 2
        seq.place(ItemKind.ROW, 2, 10.0, 0.0)
        assert [p.indices(ItemKind.ROW) for p in seq.pages] == [[0], [1], [2]]

    def test_trailer_moves_to_new_page(self, planner):
        seq = PageSequence(planner, first_top=0.0)
        seq.place(ItemKind.ROW, 0, 95.0, 0.0)
        placement = seq.place_trailer(ItemKind.SUMMARY, 15.0, 15.0, 20.0)
        assert seq.current.number == 2
        assert placement.y == pytest.approx(20.0)
