"""
enriched_heatmap/plot
~~~~~~~~~~~~~~~~~~~~~
"""

from .annotation import EnrichedAnnotation, anno_enriched
from .enriched import EnrichedHeatmap
from .gpar import recycle_gp, subset_gp
from .heatmap import Heatmap
from .heatmap_list import HeatmapList, RenderedHeatmapList
from .style import StyleConfig

__all__ = [
    "EnrichedAnnotation",
    "EnrichedHeatmap",
    "Heatmap",
    "HeatmapList",
    "RenderedHeatmapList",
    "StyleConfig",
    "anno_enriched",
    "recycle_gp",
    "subset_gp",
]
