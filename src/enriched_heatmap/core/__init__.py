"""
enriched_heatmap/core
~~~~~~~~~~~~~~~~~~~~~
"""

from .layout import RowGrouping, compute_row_grouping
from .matrix import NormalizedMatrix, as_normalized_matrix
from .scoring import enriched_score, order_by_score, score_rows
from .segments import SegmentLayout, axis_label_alignment, axis_strip_height, normalize_rotation

__all__ = [
    "NormalizedMatrix",
    "RowGrouping",
    "SegmentLayout",
    "as_normalized_matrix",
    "axis_label_alignment",
    "axis_strip_height",
    "compute_row_grouping",
    "enriched_score",
    "normalize_rotation",
    "order_by_score",
    "score_rows",
]
