"""
enriched_heatmap/plot/renderers/axes
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.transforms import blended_transform_factory, offset_copy

from ...core.segments import MM, axis_label_alignment, font_properties


def _hide_frame(ax: plt.Axes) -> None:
    ax.set_xticks([])
    ax.set_yticks([])
    for spine in ax.spines.values():
        spine.set_visible(False)
    ax.patch.set_alpha(0.0)


def _axes_height_points(ax: plt.Axes) -> float:
    """
    Axes height in points, computed from the figure geometry (no renderer needed).

    Args:
        ax (plt.Axes): Axes to measure.

    Returns:
        float: Height in points.
    """
    return float(ax.get_position().height * ax.figure.get_figheight() * 72.0)


class AxesRenderer:
    """
    Class for rendering the axis strip, titles and name labels of a heatmap.
    """

    def __init__(self, kind: str, **kwargs: Any) -> None:
        """
        Initializes the AxesRenderer instance.

        Args:
            kind (str): One of "axis_strip", "column_title", "row_title", "row_names",
                "column_names".

        Kwargs:
            **kwargs: Layer-specific options.
        """
        self.kind = kind
        self.kwargs = dict(kwargs)

    def render(self, ax: plt.Axes, style: Any) -> None:
        if self.kind == "axis_strip":
            self._render_axis_strip(ax, style)
            return
        if self.kind == "column_title":
            self._render_column_title(ax, style)
            return
        if self.kind == "row_title":
            self._render_row_title(ax, style)
            return
        if self.kind == "row_names":
            self._render_row_names(ax, style)
            return
        if self.kind == "column_names":
            self._render_column_names(ax, style)
            return
        raise NotImplementedError(f"Unknown axes layer: {self.kind}")

    def _render_axis_strip(self, ax: plt.Axes, style: Any) -> None:
        """
        Draws the baseline, ticks and boundary labels below an enriched heatmap.

        The baseline sits at the top edge of the strip and spans the first to the last
        boundary. Ticks are 1 mm long and labels are anchored 2 mm below the baseline.
        """
        positions: Sequence[float] = self.kwargs["positions"]
        labels: Sequence[str] = self.kwargs["labels"]
        rotation: float = float(self.kwargs.get("rotation", 0.0))
        text_gp: Mapping[str, Any] = dict(self.kwargs.get("text_gp") or {})
        color = style["axis_color"]
        linewidth = float(style["axis_lw"])

        _hide_frame(ax)
        ax.set_xlim(0.0, 1.0)
        ax.set_ylim(0.0, 1.0)
        if not positions:
            return
        height_pt = _axes_height_points(ax)
        tick_len = MM / height_pt if height_pt > 0 else 0.0
        trans = blended_transform_factory(ax.transData, ax.transAxes)
        ax.plot(
            [positions[0], positions[-1]],
            [1.0, 1.0],
            color=color,
            linewidth=linewidth,
            transform=trans,
            clip_on=False,
            solid_capstyle="butt",
        )
        for x in positions:
            ax.plot(
                [x, x],
                [1.0, 1.0 - tick_len],
                color=color,
                linewidth=linewidth,
                transform=trans,
                clip_on=False,
            )

        ha_list, va = axis_label_alignment(rotation, len(labels))
        label_trans = offset_copy(trans, fig=ax.figure, x=0.0, y=-2.0 * MM, units="points")
        fontprops = font_properties({"fontsize": style["axis_fontsize"], **text_gp})
        text_color = text_gp.get("color", style["text_color"])
        for x, label, ha in zip(positions, labels, ha_list):
            ax.text(
                x,
                1.0,
                str(label),
                transform=label_trans,
                rotation=rotation,
                rotation_mode="anchor",
                ha=ha,
                va=va,
                fontproperties=fontprops,
                color=text_color,
                clip_on=False,
            )

    def _render_column_title(self, ax: plt.Axes, style: Any) -> None:
        side = self.kwargs.get("side", "top")
        _hide_frame(ax)
        ax.text(
            0.5,
            0.0 if side == "top" else 1.0,
            self.kwargs["title"],
            transform=ax.transAxes,
            ha="center",
            va="bottom" if side == "top" else "top",
            fontsize=self.kwargs.get("fontsize", style["title_fontsize"]),
            color=self.kwargs.get("color", style["text_color"]),
        )

    def _render_row_title(self, ax: plt.Axes, style: Any) -> None:
        _hide_frame(ax)
        ax.text(
            0.5,
            0.5,
            self.kwargs["title"],
            transform=ax.transAxes,
            rotation=90,
            ha="center",
            va="center",
            fontsize=self.kwargs.get("fontsize", style["row_title_fontsize"]),
            color=self.kwargs.get("color", style["text_color"]),
        )

    def _render_row_names(self, ax: plt.Axes, style: Any) -> None:
        # Body axes use one y unit per row, top row at 0
        labels = list(self.kwargs["labels"])
        ax.set_yticks(np.arange(len(labels)) + 0.5)
        ax.set_yticklabels(
            [str(lab) for lab in labels],
            fontsize=self.kwargs.get("fontsize", style["legend_fontsize"]),
            color=style["text_color"],
        )
        ax.tick_params(
            axis="y",
            which="both",
            left=False,
            right=False,
            labelleft=False,
            labelright=True,
        )

    def _render_column_names(self, ax: plt.Axes, style: Any) -> None:
        labels = list(self.kwargs["labels"])
        n = len(labels)
        ax.set_xticks((np.arange(n) + 0.5) / max(n, 1))
        ax.set_xticklabels(
            [str(lab) for lab in labels],
            fontsize=self.kwargs.get("fontsize", style["legend_fontsize"]),
            rotation=self.kwargs.get("rotation", 90),
            color=style["text_color"],
        )
        ax.tick_params(
            axis="x",
            which="both",
            top=False,
            bottom=False,
            labeltop=False,
            labelbottom=True,
        )


def render_title_axes(
    fig: plt.Figure,
    rect: Sequence[float],
    title: Optional[str],
    style: Any,
    *,
    kind: str = "column_title",
    side: str = "top",
) -> Optional[plt.Axes]:
    """
    Adds a frameless axes at `rect` and draws a title into it.

    Args:
        fig (plt.Figure): Target figure.
        rect (Sequence[float]): Axes rectangle in figure fractions.
        title (Optional[str]): Title text; nothing is drawn for None.
        style (Any): Style configuration.

    Kwargs:
        kind (str): "column_title" or "row_title". Defaults to "column_title".
        side (str): Column title side. Defaults to "top".

    Returns:
        Optional[plt.Axes]: The title axes, or None without a title.
    """
    if title is None:
        return None
    ax = fig.add_axes(list(rect), frameon=False)
    AxesRenderer(kind, title=str(title), side=side).render(ax, style)
    return ax
