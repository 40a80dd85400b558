"""
enriched_heatmap/plot/renderers/dendrogram
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import Any, Dict, Optional, TYPE_CHECKING

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.collections import LineCollection
from scipy.cluster.hierarchy import dendrogram

if TYPE_CHECKING:
    from ..style import StyleConfig


def _resolve_dendrogram_config(
    renderer: DendrogramRenderer,
    style: StyleConfig,
) -> Dict[str, Any]:
    """
    Resolves dendrogram rendering configuration.

    Args:
        renderer (DendrogramRenderer): Renderer instance holding optional overrides.
        style (StyleConfig): Style configuration.

    Returns:
        Dict[str, Any]: Normalized configuration values.
    """
    return {
        "color": renderer.color if renderer.color is not None else style["dendro_color"],
        "linewidth": renderer.linewidth if renderer.linewidth is not None else style["dendro_lw"],
    }


def _finalize_dendrogram_axis(ax_dend: plt.Axes, *, n_rows: int, max_height: float) -> None:
    """
    Sets limits so leaves meet the body edge and rows line up with the slice.

    Args:
        ax_dend (plt.Axes): Dendrogram axis.

    Kwargs:
        n_rows (int): Number of rows in the slice.
        max_height (float): Height of the root merge.
    """
    ax_dend.set_ylim(n_rows, 0.0)
    ax_dend.set_xlim(max_height if max_height > 0 else 1.0, 0.0)
    ax_dend.set_xticks([])
    ax_dend.set_yticks([])
    for spine in ax_dend.spines.values():
        spine.set_visible(False)
    ax_dend.patch.set_alpha(0.0)


class DendrogramRenderer:
    """
    Class for rendering a row dendrogram to the left of one body slice.
    """

    def __init__(
        self,
        *,
        color: Optional[str] = None,
        linewidth: Optional[float] = None,
    ) -> None:
        """
        Initializes the DendrogramRenderer instance.

        Kwargs:
            color (Optional[str]): Dendrogram line color. Defaults to None.
            linewidth (Optional[float]): Dendrogram line width. Defaults to None.
        """
        self.color = color
        self.linewidth = linewidth

    def render(
        self,
        ax_dend: plt.Axes,
        linkage_matrix: Optional[np.ndarray],
        n_rows: int,
        style: StyleConfig,
    ) -> Optional[LineCollection]:
        """
        Renders a dendrogram whose leaves sit at row centres of the slice.

        Args:
            ax_dend (plt.Axes): Dendrogram axis.
            linkage_matrix (Optional[np.ndarray]): SciPy linkage matrix of the slice.
            n_rows (int): Number of rows in the slice.
            style (StyleConfig): Style configuration.

        Returns:
            Optional[LineCollection]: Drawn segments, or None for slices with one row.
        """
        cfg = _resolve_dendrogram_config(self, style)
        if linkage_matrix is None:
            _finalize_dendrogram_axis(ax_dend, n_rows=n_rows, max_height=0.0)
            return None
        dendro = dendrogram(
            linkage_matrix,
            orientation="left",
            no_labels=True,
            color_threshold=-1,
            no_plot=True,
        )
        # SciPy places leaf i at 10 * i + 5
        segments = [
            list(zip(dcoord, [y / 10.0 for y in icoord]))
            for icoord, dcoord in zip(dendro["icoord"], dendro["dcoord"])
        ]
        collection = LineCollection(
            segments,
            colors=cfg["color"],
            linewidths=cfg["linewidth"],
        )
        ax_dend.add_collection(collection)
        max_height = max((max(d) for d in dendro["dcoord"]), default=0.0)
        _finalize_dendrogram_axis(ax_dend, n_rows=n_rows, max_height=float(max_height))
        return collection
