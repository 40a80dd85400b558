"""
enriched_heatmap/plot/renderers/colorbar
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, TypedDict, TYPE_CHECKING, Union

import matplotlib.pyplot as plt
from matplotlib.colorbar import ColorbarBase
from matplotlib.colors import Colormap, Normalize
from matplotlib.ticker import FuncFormatter, MaxNLocator

if TYPE_CHECKING:
    from ..style import StyleConfig


class ColorbarSpec(TypedDict, total=False):
    """
    Typed dictionary for heatmap legend specifications.
    """

    name: str
    cmap: Union[str, Colormap]
    norm: Normalize
    label: Optional[str]


def _max_decimal_formatter(max_decimals: int) -> FuncFormatter:
    """
    Creates a formatter that caps decimal precision and trims trailing zeros.

    Args:
        max_decimals (int): Maximum number of decimal places.

    Returns:
        FuncFormatter: Matplotlib tick formatter.
    """

    def _format_value(value: float, _pos: int) -> str:
        text = f"{value:.{max_decimals}f}".rstrip("0").rstrip(".")
        return "0" if text == "-0" else text

    return FuncFormatter(_format_value)


def _render_colorbar_cell(
    fig: plt.Figure,
    cb: ColorbarSpec,
    rect: Sequence[float],
    style: StyleConfig,
) -> plt.Axes:
    """
    Renders a single vertical legend.

    Args:
        fig (plt.Figure): Matplotlib Figure.
        cb (ColorbarSpec): Colorbar parameters.
        rect (Sequence[float]): Colorbar rectangle in figure fractions.
        style (StyleConfig): Style configuration.

    Returns:
        plt.Axes: Colorbar axes.
    """
    ax_cb = fig.add_axes(list(rect), frameon=True)
    fontsize = style["legend_fontsize"]
    text_color = style["text_color"]
    cbar = ColorbarBase(
        ax_cb,
        cmap=cb["cmap"],
        norm=cb["norm"],
        orientation="vertical",
    )
    cbar.locator = MaxNLocator(nbins=4)
    cbar.formatter = _max_decimal_formatter(3)
    cbar.update_ticks()
    cbar.outline.set_edgecolor(text_color)
    cbar.outline.set_linewidth(0.6)
    ax_cb.tick_params(axis="y", labelsize=fontsize, colors=text_color, length=2)
    ax_cb.set_xticks([])
    label = cb.get("label")
    if label:
        ax_cb.set_title(label, fontsize=fontsize, color=text_color, pad=4, loc="left")
    return ax_cb


class ColorbarRenderer:
    """
    Class for rendering the column of heatmap legends to the right of the list.
    """

    def __init__(self, colorbars: Iterable[ColorbarSpec]) -> None:
        """
        Initializes the ColorbarRenderer instance.

        Args:
            colorbars (Iterable[ColorbarSpec]): Colorbar specifications.
        """
        self.colorbars = list(colorbars)

    def render(
        self,
        fig: plt.Figure,
        *,
        x0: float,
        top: float,
        style: StyleConfig,
    ) -> List[plt.Axes]:
        """
        Stacks legends downward from `top`.

        Args:
            fig (plt.Figure): Matplotlib Figure.

        Kwargs:
            x0 (float): Left edge in inches.
            top (float): Top edge of the first legend in inches.
            style (StyleConfig): Style configuration.

        Returns:
            List[plt.Axes]: One axes per legend.
        """
        fig_w, fig_h = fig.get_size_inches()
        width = float(style["legend_width"])
        height = float(style["legend_height"])
        gap = float(style["legend_gap"])
        axes = []
        y_top = top
        for cb in self.colorbars:
            y0 = y_top - height
            rect = [x0 / fig_w, y0 / fig_h, width / fig_w, height / fig_h]
            axes.append(_render_colorbar_cell(fig, cb, rect, style))
            y_top = y0 - gap
        return axes
