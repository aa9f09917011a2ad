"""Layout engine: measurement, column allocation, row planning, pagination, images."""

from .columns import ColumnAllocation, ColumnLayout, ColumnWidthAllocator
from .images import ImageAsset, ImageNormalizer, NormalizedImage
from .measure import TextMeasurer, WrappedText
from .pagination import (
    Decision,
    ItemKind,
    Page,
    PagePlan,
    PageSequence,
    PaginationPlanner,
    PaginationState,
    Placement,
)
from .rows import FieldPlan, RowHeightPlanner, RowPlan, WrappedCell

__all__ = [
    "ColumnAllocation",
    "ColumnLayout",
    "ColumnWidthAllocator",
    "Decision",
    "FieldPlan",
    "ImageAsset",
    "ImageNormalizer",
    "ItemKind",
    "NormalizedImage",
    "Page",
    "PagePlan",
    "PageSequence",
    "PaginationPlanner",
    "PaginationState",
    "Placement",
    "RowHeightPlanner",
    "RowPlan",
    "TextMeasurer",
    "WrappedCell",
    "WrappedText",
]
