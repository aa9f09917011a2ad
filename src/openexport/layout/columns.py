"""Column width allocation.

Each column asks for the width of its header label or of its widest
sampled cell (wrapped at the maximum column width), clamped to the
orientation's min/max. When the request exceeds the page, columns are
rescaled proportionally, re-clamped, and rescaled again until they fit.

The fit is exact: the returned widths never sum past the available width
unless every column is already at the minimum, which is reported as a
:class:`~openexport.core.errors.LayoutOverflowWarning`.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass

from ..core.config import LayoutConfig
from ..core.errors import LayoutOverflowWarning
from .measure import TextMeasurer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnLayout:
    width: float


@dataclass(frozen=True)
class ColumnAllocation:
    """Final column widths for one document."""

    widths: tuple[float, ...]
    available_width: float
    overflow: bool = False

    @property
    def total_width(self) -> float:
        return sum(self.widths)

    @property
    def layouts(self) -> list[ColumnLayout]:
        return [ColumnLayout(width=w) for w in self.widths]


class ColumnWidthAllocator:
    """Computes per-column widths from labels and a bounded row sample."""

    def __init__(
        self,
        config: LayoutConfig,
        header_measurer: TextMeasurer,
        cell_measurer: TextMeasurer,
    ) -> None:
        self.config = config
        self.header_measurer = header_measurer
        self.cell_measurer = cell_measurer

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def allocate(
        self,
        labels: list[str],
        rows: list[list[str]],
        available_width: float | None = None,
    ) -> ColumnAllocation:
        """Allocate widths for *labels* given formatted *rows*.

        Only the first ``config.sample_size`` rows are measured.
        """
        available = self.config.content_width if available_width is None else available_width
        sample = rows[: self.config.sample_size]
        optimal = [
            self.optimal_width(label, [r[i] for r in sample if i < len(r)])
            for i, label in enumerate(labels)
        ]
        widths, overflow = self._fit(optimal, available)
        if overflow:
            msg = (
                f"{len(widths)} columns at the minimum width "
                f"({self.config.min_column_width:.1f}pt) need {sum(widths):.1f}pt "
                f"but only {available:.1f}pt are available"
            )
            logger.warning("Table overflows page width: %s", msg)
            warnings.warn(msg, LayoutOverflowWarning, stacklevel=2)
        return ColumnAllocation(widths=tuple(widths), available_width=available, overflow=overflow)

    def optimal_width(self, label: str, samples: list[str]) -> float:
        """Clamped width a column would like before any page-fit rescale."""
        cfg = self.config
        header_width = self.header_measurer.width(label) + cfg.header_cell_padding
        cap = cfg.max_column_width - cfg.sample_cell_padding
        sample_width = 0.0
        for text in samples:
            if not text:
                continue
            wrapped = self.cell_measurer.wrap(text, cap)
            sample_width = max(sample_width, wrapped.max_width + cfg.sample_cell_padding)
        wanted = max(header_width, sample_width, cfg.min_column_width)
        return min(wanted, cfg.max_column_width)

    # ------------------------------------------------------------------
    # Fitting
    # ------------------------------------------------------------------

    def _fit(self, widths: list[float], available: float) -> tuple[list[float], bool]:
        min_w = self.config.min_column_width
        if sum(widths) <= available:
            return widths, False

        # Proportional rescale, then re-clamp to the minimum.
        scale = available / sum(widths)
        widths = [max(w * scale, min_w) for w in widths]

        # Safety rescale: shrink only the columns still above the minimum.
        # Each pass either fits or pins at least one more column.
        for _ in range(len(widths)):
            if sum(widths) <= available:
                break
            flexible = sum(w for w in widths if w > min_w)
            fixed = sum(w for w in widths if w <= min_w)
            budget = (available - fixed) * self.config.rescale_margin
            if flexible <= 0 or budget <= 0:
                widths = [min_w] * len(widths)
                break
            s = budget / flexible
            widths = [max(w * s, min_w) if w > min_w else w for w in widths]

        total = sum(widths)
        if total <= available:
            return widths, False
        if all(w <= min_w for w in widths):
            return widths, True

        # Float residue: take it off the widest column.
        widest = max(range(len(widths)), key=widths.__getitem__)
        excess = total - available
        widths[widest] = max(widths[widest] - excess * (1 + 1e-9) - 1e-9, min_w)
        return widths, sum(widths) > available
