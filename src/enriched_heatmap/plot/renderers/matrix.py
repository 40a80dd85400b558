"""
enriched_heatmap/plot/renderers/matrix
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple, TYPE_CHECKING, Union

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.colors import Colormap, LinearSegmentedColormap, Normalize, TwoSlopeNorm

from .base import PositionLineRegistry

if TYPE_CHECKING:
    from ..style import StyleConfig


def resolve_colormap(cmap: Union[str, Colormap, Sequence[str], None]) -> Union[str, Colormap]:
    """
    Resolves a colormap given as a name, a Colormap or a list of colors.

    Args:
        cmap (Union[str, Colormap, Sequence[str], None]): Colormap specification.

    Returns:
        Union[str, Colormap]: Value accepted by `imshow` and `ColorbarBase`.

    Raises:
        ValueError: If a color list has fewer than two entries.
    """
    if cmap is None:
        return "viridis"
    if isinstance(cmap, (str, Colormap)):
        return cmap
    colors = list(cmap)
    if len(colors) < 2:
        raise ValueError("`cmap` given as a color list needs at least two colors")
    return LinearSegmentedColormap.from_list("heatmap", colors)


def resolve_color_normalization(
    data: np.ndarray,
    *,
    center: Optional[float] = None,
    vmin: Optional[float] = None,
    vmax: Optional[float] = None,
) -> Normalize:
    """
    Resolves color normalization for a heatmap body.

    Args:
        data (np.ndarray): Matrix data.

    Kwargs:
        center (Optional[float]): Center value for diverging normalization. Defaults to None.
        vmin (Optional[float]): Minimum value override. Defaults to None.
        vmax (Optional[float]): Maximum value override. Defaults to None.

    Returns:
        Normalize: Normalization shared by all slices and the legend.
    """
    finite = data[np.isfinite(data)]
    lo = float(finite.min()) if vmin is None and finite.size else vmin
    hi = float(finite.max()) if vmax is None and finite.size else vmax
    lo = 0.0 if lo is None else float(lo)
    hi = 1.0 if hi is None else float(hi)
    if center is not None:
        center = float(center)
        # TwoSlopeNorm requires vmin < vcenter < vmax
        lo = min(lo, center - 1e-12)
        hi = max(hi, center + 1e-12)
        return TwoSlopeNorm(vmin=lo, vcenter=center, vmax=hi)
    if hi <= lo:
        hi = lo + 1.0
    return Normalize(vmin=lo, vmax=hi)


def _apply_border(ax: plt.Axes, *, border: bool, color: str, linewidth: float) -> None:
    """
    Shows or hides the body frame.

    Args:
        ax (plt.Axes): Body axes.

    Kwargs:
        border (bool): Whether to draw the frame.
        color (str): Frame color.
        linewidth (float): Frame line width.
    """
    for spine in ax.spines.values():
        spine.set_visible(bool(border) and linewidth > 0)
        spine.set_linewidth(linewidth)
        spine.set_color(color)


class MatrixRenderer:
    """
    Class for rendering one row slice of a heatmap body.
    """

    def __init__(
        self,
        *,
        cmap: Union[str, Colormap] = "viridis",
        norm: Optional[Normalize] = None,
        border: bool = False,
    ) -> None:
        """
        Initializes the MatrixRenderer instance.

        Kwargs:
            cmap (Union[str, Colormap]): Colormap. Defaults to "viridis".
            norm (Optional[Normalize]): Normalization shared across slices. Defaults to None.
            border (bool): Whether to frame each slice. Defaults to False.
        """
        self.cmap = cmap
        self.norm = norm
        self.border = border

    def render(
        self,
        ax: plt.Axes,
        data: np.ndarray,
        style: StyleConfig,
        *,
        position_lines: Optional[PositionLineRegistry] = None,
    ) -> Tuple[int, int]:
        """
        Renders a slice with x in width fractions and one y unit per row.

        Args:
            ax (plt.Axes): Target axes.
            data (np.ndarray): Slice values in drawing order.
            style (StyleConfig): Style configuration.

        Kwargs:
            position_lines (Optional[PositionLineRegistry]): Vertical marker lines. Defaults to None.

        Returns:
            Tuple[int, int]: (n_rows, n_cols) of the slice.
        """
        n_rows, n_cols = data.shape
        ax.set_facecolor(ax.figure.get_facecolor())
        ax.imshow(
            data,
            cmap=self.cmap,
            norm=self.norm,
            aspect="auto",
            interpolation="nearest",
            origin="upper",
            extent=(0.0, 1.0, n_rows, 0.0),
        )
        ax.set_xlim(0.0, 1.0)
        ax.set_ylim(n_rows, 0.0)
        ax.set_xticks([])
        ax.set_yticks([])
        _apply_border(
            ax,
            border=self.border,
            color=style["border_color"],
            linewidth=float(style["border_lw"]),
        )
        if position_lines is not None:
            position_lines.render(ax, 0.0, n_rows, zorder=3)
        return n_rows, n_cols
