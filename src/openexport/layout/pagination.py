"""Page-break planning.

The planner walks precomputed heights and decides, item by item, whether
each one goes on the current page. The decision policy is:

* **accept** when ``height + safety_margin`` fits in the remaining space;
* **tolerate** when the item is the first one considered for the page and
  the remaining space exceeds ``first_item_tolerance`` of its height. This
  avoids a run of one-row pages behind a single tall row, at the cost of a
  bounded overflow into the bottom margin;
* **break** otherwise: the page is closed and the item is retried as the
  first candidate of a new page;
* **force** when a freshly opened page still cannot hold the item. It is
  placed alone and a :class:`LayoutOverflowWarning` is emitted, so every
  item always lands on exactly one page.

Trailing blocks (the record count summary) use a smaller tolerance: they
break early only when less than ``trailer_break_threshold`` remains.

Coordinates are distances from the top edge of the page, growing downward.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Optional

from ..core.errors import LayoutOverflowWarning

logger = logging.getLogger(__name__)


class Decision(str, Enum):
    ACCEPT = "accept"
    TOLERATE = "tolerate"
    BREAK = "break"
    FORCE = "force"


class ItemKind(str, Enum):
    """What a placement draws."""
    TITLE = "title"
    TABLE_HEADER = "table_header"
    ROW = "row"
    NO_DATA = "no_data"
    SUMMARY = "summary"
    FIELD = "field"
    CHART = "chart"


@dataclass(frozen=True)
class Page:
    """The vertical band of one page available to body content."""

    number: int
    body_top: float
    body_bottom: float


@dataclass(frozen=True)
class Placement:
    kind: ItemKind
    y: float
    height: float
    index: Optional[int] = None
    forced: bool = False


@dataclass
class PagePlan:
    page: Page
    placements: list[Placement] = field(default_factory=list)

    @property
    def number(self) -> int:
        return self.page.number

    def items(self, kind: ItemKind) -> list[Placement]:
        return [p for p in self.placements if p.kind == kind]

    def indices(self, kind: ItemKind) -> list[int]:
        return [p.index for p in self.items(kind) if p.index is not None]


@dataclass(frozen=True)
class PaginationState:
    """Cursor of the page currently being filled.

    ``fresh`` is set on a page opened to receive a deferred item and
    cleared once any item is accepted.
    """

    page_number: int = 1
    current_y: float = 0.0
    items_on_page: int = 0
    fresh: bool = False

    def advance(self, height: float) -> PaginationState:
        return replace(
            self,
            current_y=self.current_y + height,
            items_on_page=self.items_on_page + 1,
            fresh=False,
        )

    def skip(self, gap: float) -> PaginationState:
        return replace(self, current_y=self.current_y + gap)

    def next_page(self, body_top: float) -> PaginationState:
        return PaginationState(
            page_number=self.page_number + 1,
            current_y=body_top,
            items_on_page=0,
            fresh=True,
        )


class PaginationPlanner:
    """Stateless fit-or-new-page policy."""

    def __init__(
        self,
        body_bottom: float,
        *,
        safety_margin: float = 0.0,
        first_item_tolerance: Optional[float] = 0.5,
        trailer_break_threshold: float = 0.0,
    ) -> None:
        self.body_bottom = body_bottom
        self.safety_margin = safety_margin
        self.first_item_tolerance = first_item_tolerance
        self.trailer_break_threshold = trailer_break_threshold

    def remaining(self, state: PaginationState) -> float:
        return self.body_bottom - state.current_y

    def decide(self, state: PaginationState, height: float, *, tolerant: bool = True) -> Decision:
        remaining = self.remaining(state)
        if height + self.safety_margin <= remaining:
            return Decision.ACCEPT
        if state.items_on_page == 0:
            if (
                tolerant
                and self.first_item_tolerance is not None
                and remaining > height * self.first_item_tolerance
            ):
                return Decision.TOLERATE
            if state.fresh:
                return Decision.FORCE
        return Decision.BREAK

    def decide_trailer(
        self, state: PaginationState, height: float, gap: float
    ) -> tuple[Decision, float]:
        """Decide for a trailing block; returns the decision and the gap to use.

        The block fits after the full *gap*, or after a shrunk gap, or is
        tolerated in place when at least ``trailer_break_threshold`` remains.
        """
        remaining = self.remaining(state)
        if gap + height + self.safety_margin <= remaining:
            return Decision.ACCEPT, gap
        if height + self.safety_margin <= remaining:
            return Decision.ACCEPT, remaining - height - self.safety_margin
        if remaining < self.trailer_break_threshold:
            if state.fresh and state.items_on_page == 0:
                return Decision.FORCE, 0.0
            return Decision.BREAK, 0.0
        return Decision.TOLERATE, 0.0

    def paginate(
        self,
        heights: list[float],
        first_top: float,
        continuation_top: float,
        *,
        tolerant: bool = True,
    ) -> list[list[int]]:
        """Split item indices into pages. Pure planning, no layout objects."""
        pages: list[list[int]] = [[]]
        state = PaginationState(current_y=first_top)
        for i, h in enumerate(heights):
            decision = self.decide(state, h, tolerant=tolerant)
            if decision == Decision.BREAK:
                state = state.next_page(continuation_top)
                pages.append([])
            pages[-1].append(i)
            state = state.advance(h)
        return pages


class PageSequence:
    """Accumulates :class:`PagePlan` objects while items are placed.

    Owned by one document build; discarded once the document is drawn.
    """

    def __init__(self, planner: PaginationPlanner, first_top: float) -> None:
        self.planner = planner
        self.state = PaginationState(current_y=first_top)
        self.pages: list[PagePlan] = [
            PagePlan(page=Page(number=1, body_top=first_top, body_bottom=planner.body_bottom))
        ]

    @property
    def current(self) -> PagePlan:
        return self.pages[-1]

    def reserve(self, kind: ItemKind, height: float) -> Placement:
        """Place *kind* unconditionally; it does not count as a page item."""
        placement = Placement(kind=kind, y=self.state.current_y, height=height)
        self.current.placements.append(placement)
        self.state = self.state.skip(height)
        return placement

    def skip(self, gap: float) -> None:
        self.state = self.state.skip(gap)

    def break_page(
        self,
        continuation_top: float,
        page_prefix: Optional[Callable[[PageSequence], None]] = None,
    ) -> None:
        self.state = self.state.next_page(continuation_top)
        self.pages.append(
            PagePlan(
                page=Page(
                    number=self.state.page_number,
                    body_top=continuation_top,
                    body_bottom=self.planner.body_bottom,
                )
            )
        )
        if page_prefix is not None:
            page_prefix(self)

    def place(
        self,
        kind: ItemKind,
        index: int,
        height: float,
        continuation_top: float,
        *,
        tolerant: bool = True,
        page_prefix: Optional[Callable[[PageSequence], None]] = None,
    ) -> Placement:
        """Place one atomic item, opening a new page when the policy says so."""
        decision = self.planner.decide(self.state, height, tolerant=tolerant)
        if decision == Decision.BREAK:
            self.break_page(continuation_top, page_prefix)
            decision = self.planner.decide(self.state, height, tolerant=tolerant)
        forced = decision == Decision.FORCE
        if forced:
            self._warn_forced(kind, index, height)
        placement = Placement(
            kind=kind, y=self.state.current_y, height=height, index=index, forced=forced
        )
        self.current.placements.append(placement)
        self.state = self.state.advance(height)
        return placement

    def place_trailer(
        self,
        kind: ItemKind,
        height: float,
        gap: float,
        continuation_top: float,
    ) -> Placement:
        decision, used_gap = self.planner.decide_trailer(self.state, height, gap)
        if decision == Decision.BREAK:
            self.break_page(continuation_top)
            decision, used_gap = self.planner.decide_trailer(self.state, height, 0.0)
        self.state = self.state.skip(used_gap)
        placement = Placement(
            kind=kind,
            y=self.state.current_y,
            height=height,
            forced=decision == Decision.FORCE,
        )
        self.current.placements.append(placement)
        self.state = self.state.advance(height)
        return placement

    def _warn_forced(self, kind: ItemKind, index: int, height: float) -> None:
        page = self.current.page
        msg = (
            f"{kind.value} {index} ({height:.1f}pt) is taller than the page body "
            f"({page.body_bottom - page.body_top:.1f}pt); placed alone on page {page.number}"
        )
        logger.warning(msg)
        warnings.warn(msg, LayoutOverflowWarning, stacklevel=3)
