"""
enriched_heatmap/plot/renderers/base
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Protocol, Sequence, TYPE_CHECKING, Union

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.collections import LineCollection
from matplotlib.colors import to_rgba

from ..gpar import recycle_gp, subset_gp, to_line_kwargs

if TYPE_CHECKING:
    from ...core.layout import RowGrouping
    from ...core.matrix import NormalizedMatrix
    from ..style import StyleConfig


class AnnotationFunction(Protocol):
    """
    Class for defining the top annotation contract.

    The draw orchestration calls an annotation once per heatmap after the row grouping
    is final. The axes is already sized to the annotation track; the matrix and the
    grouping are passed explicitly.
    Protocol only; implement in concrete annotations.
    """

    def render(
        self,
        ax: plt.Axes,
        matrix: NormalizedMatrix,
        grouping: RowGrouping,
        column_index: np.ndarray,
        style: StyleConfig,
    ) -> None:
        """
        Draws the annotation.

        Args:
            ax (plt.Axes): Annotation axes.
            matrix (NormalizedMatrix): Matrix of the annotated heatmap.
            grouping (RowGrouping): Final row grouping.
            column_index (np.ndarray): Drawn column indices.
            style (StyleConfig): Style configuration.
        """
        # Protocol stub; no runtime implementation
        ...


class PositionLineRegistry:
    """
    Class for collecting and rendering vertical position marker lines.
    """

    def __init__(self) -> None:
        """
        Initializes the PositionLineRegistry instance.
        """
        self._lines: Dict[float, Dict[str, Any]] = {}

    @classmethod
    def from_toggles(
        cls,
        positions: Sequence[float],
        enabled: Union[bool, Sequence[bool]],
        gp: Union[None, Mapping[str, Any], Sequence[Mapping[str, Any]]],
        defaults: Mapping[str, Any],
    ) -> PositionLineRegistry:
        """
        Builds a registry with per-line toggles and styles.

        Args:
            positions (Sequence[float]): Line positions as fractions of the width.
            enabled (Union[bool, Sequence[bool]]): One toggle for all lines or one per line
                (recycled).
            gp (Union[None, Mapping[str, Any], Sequence[Mapping[str, Any]]]): One style for all
                lines or one per line (recycled).
            defaults (Mapping[str, Any]): Line keywords used for missing style keys.

        Returns:
            PositionLineRegistry: Registry holding the enabled lines.
        """
        registry = cls()
        n = len(positions)
        if n == 0:
            return registry
        toggles = list(enabled) if isinstance(enabled, (list, tuple, np.ndarray)) else [enabled]
        if not toggles:
            raise ValueError("pos_line must not be an empty sequence")
        toggles = [bool(toggles[i % len(toggles)]) for i in range(n)]
        if gp is None or isinstance(gp, Mapping):
            recycled = recycle_gp(gp, n)
            styles = [subset_gp(recycled, i) for i in range(n)]
        else:
            gp_list = list(gp)
            if not gp_list:
                raise ValueError("pos_line_gp must not be an empty sequence")
            styles = [subset_gp(recycle_gp(gp_list[i % len(gp_list)], 1), 0) for i in range(n)]
        for x, on, line_gp in zip(positions, toggles, styles):
            if on:
                registry.register(x, **to_line_kwargs(line_gp, defaults))
        return registry

    def register(self, x: float, **line_kwargs: Any) -> None:
        """
        Registers a vertical line, keeping the thickest line per x coordinate.

        Args:
            x (float): Position as a fraction of the width.

        Kwargs:
            **line_kwargs: color, linewidth, linestyle and alpha.
        """
        x = float(x)
        cur = self._lines.get(x)
        if cur is None or float(line_kwargs.get("linewidth", 1.0)) > float(cur.get("linewidth", 1.0)):
            self._lines[x] = dict(line_kwargs)

    @property
    def positions(self) -> list[float]:
        return sorted(self._lines)

    def render(
        self,
        ax: plt.Axes,
        y0: float,
        y1: float,
        *,
        zorder: int = 3,
    ) -> Optional[LineCollection]:
        """
        Renders all registered lines on the given axes.

        Args:
            ax (plt.Axes): Axes to render on.
            y0 (float): Lower y coordinate in data units.
            y1 (float): Upper y coordinate in data units.

        Kwargs:
            zorder (int): Z-order for rendering. Defaults to 3.

        Returns:
            Optional[LineCollection]: The added collection, or None without lines.
        """
        if not self._lines:
            return None
        xs = self.positions
        segments = [((x, y0), (x, y1)) for x in xs]
        colors = []
        widths = []
        styles = []
        for x in xs:
            kw = self._lines[x]
            colors.append(to_rgba(kw.get("color", "black"), kw.get("alpha")))
            widths.append(float(kw.get("linewidth", 1.0)))
            styles.append(kw.get("linestyle", "solid"))
        collection = LineCollection(
            segments,
            colors=colors,
            linewidths=widths,
            linestyles=styles,
            zorder=zorder,
        )
        ax.add_collection(collection)
        return collection
