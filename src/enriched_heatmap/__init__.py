"""
enriched_heatmap
~~~~~~~~~~~~~~~~

Heatmaps of genomic signal aligned to target regions, ordered by enrichment.
"""

from .core.matrix import NormalizedMatrix
from .core.scoring import enriched_score
from .plot.annotation import anno_enriched
from .plot.enriched import EnrichedHeatmap
from .plot.heatmap import Heatmap
from .plot.heatmap_list import HeatmapList
from .util.errors import IncompleteStyleError, MissingMetadataError

__all__ = [
    "NormalizedMatrix",
    "enriched_score",
    "anno_enriched",
    "EnrichedHeatmap",
    "Heatmap",
    "HeatmapList",
    "IncompleteStyleError",
    "MissingMetadataError",
]

__version__ = "0.1.0"
