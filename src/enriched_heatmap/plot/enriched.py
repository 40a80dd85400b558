"""
enriched_heatmap/plot/enriched
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from os import PathLike
from typing import Any, Mapping, Optional, Sequence, TYPE_CHECKING, Union

import numpy as np

from ..core.matrix import as_normalized_matrix
from ..core.scoring import ScoreFunction, enriched_score, order_by_score, score_rows
from ..core.segments import SegmentLayout, axis_strip_height, normalize_rotation
from ..util.warnings import warn
from .heatmap import Heatmap
from .style import DEFAULT_STYLE

if TYPE_CHECKING:
    from .heatmap_list import HeatmapList, RenderedHeatmapList

# Host options reserved for the axis strip below the body
FORCED_HEATMAP_OPTIONS = {
    "cluster_columns": False,
    "show_row_names": False,
    "show_column_names": False,
    "bottom_annotation": None,
    "column_title_side": "top",
}


class EnrichedHeatmap:
    """
    Class for a heatmap of signal aligned to target regions.

    Rows are ordered by decreasing enrichment score unless an explicit `row_order` is
    given or rows are clustered. Below the body an axis strip labels the segment
    boundaries, and vertical lines mark the target inside the body. Drawing is
    forwarded to the wrapped `Heatmap` through a heatmap list.
    """

    def __init__(
        self,
        matrix: Any,
        *,
        score_fun: ScoreFunction = enriched_score,
        row_order: Optional[Sequence[int]] = None,
        pos_line: Union[bool, Sequence[bool]] = True,
        pos_line_gp: Any = None,
        axis_name: Optional[Sequence[str]] = None,
        axis_name_rot: Optional[float] = None,
        axis_name_gp: Optional[Mapping[str, Any]] = None,
        border: bool = True,
        cluster_rows: bool = False,
        show_row_dend: bool = False,
        **heatmap_kwargs: Any,
    ) -> None:
        """
        Initializes the EnrichedHeatmap instance.

        Args:
            matrix (Any): NormalizedMatrix, or a DataFrame carrying the window metadata
                in `attrs`.

        Kwargs:
            score_fun (ScoreFunction): Scores a row from its (upstream, target, downstream)
                values. Defaults to `enriched_score`.
            row_order (Optional[Sequence[int]]): Explicit row order; skips scoring. Rows are
                not scored at all when `cluster_rows` is True.
                Defaults to None.
            pos_line (Union[bool, Sequence[bool]]): Whether to draw lines at the target
                boundaries, one toggle or one per boundary. Defaults to True.
            pos_line_gp (Any): Style of the position lines, one mapping or one per
                boundary. Defaults to None.
            axis_name (Optional[Sequence[str]]): Labels at the segment boundaries.
                Defaults to distances and "start"/"end".
            axis_name_rot (Optional[float]): Label rotation in degrees. Defaults to 90
                when the matrix has target windows, else 0.
            axis_name_gp (Optional[Mapping[str, Any]]): Label style with keys fontsize,
                fontfamily, fontweight, fontstyle and color. Defaults to None.
            border (bool): Whether to frame the body. Defaults to True.
            cluster_rows (bool): Whether to cluster rows instead of ordering by score.
                Defaults to False.
            show_row_dend (bool): Whether to draw row dendrograms. Defaults to False.
            **heatmap_kwargs: Other `Heatmap` options (name, cmap, split, km, titles,
                top_annotation, ...).

        Raises:
            MissingMetadataError: If the matrix lacks window metadata.
            TypeError: If an option reserved for the axis strip is passed or `score_fun`
                is not callable.
            ValueError: If `axis_name` does not match the number of boundaries or
                `pos_line` is empty.
        """
        forced = sorted(set(heatmap_kwargs) & set(FORCED_HEATMAP_OPTIONS))
        if forced:
            raise TypeError(
                f"EnrichedHeatmap does not accept {forced}; use Heatmap on the raw matrix instead"
            )
        self.matrix = as_normalized_matrix(matrix)
        self.segments = SegmentLayout.from_matrix(self.matrix)

        self.scores: Optional[np.ndarray] = None
        self.row_order: Optional[np.ndarray] = None
        if cluster_rows:
            if row_order is not None or score_fun is not enriched_score:
                warn("`row_order` and `score_fun` are ignored because `cluster_rows=True`")
        elif row_order is None:
            self.scores = score_rows(self.matrix, score_fun)
            self.row_order = order_by_score(self.scores)
        else:
            self.row_order = np.asarray(row_order, dtype=int)

        if axis_name is None:
            self.axis_labels = self.segments.default_axis_labels(self.matrix.extend)
        else:
            self.axis_labels = [str(lab) for lab in axis_name]
            n_boundaries = len(self.segments.boundaries())
            if len(self.axis_labels) != n_boundaries:
                raise ValueError(
                    f"`axis_name` needs {n_boundaries} labels for this matrix, "
                    f"got {len(self.axis_labels)}"
                )
        if axis_name_rot is None:
            axis_name_rot = 90 if self.segments.n_target > 0 else 0
        self.axis_rotation = normalize_rotation(axis_name_rot)
        self.axis_name_gp = dict(axis_name_gp or {})
        self.axis_height = axis_strip_height(
            self.axis_labels,
            self.axis_rotation,
            {"fontsize": DEFAULT_STYLE["axis_fontsize"], **self.axis_name_gp},
        )

        if isinstance(pos_line, (list, tuple)) and not pos_line:
            raise ValueError("pos_line must not be an empty sequence")
        self.pos_line = pos_line
        self.pos_line_gp = pos_line_gp
        self.border = bool(border)

        self.heatmap = Heatmap(
            self.matrix,
            row_order=self.row_order,
            cluster_rows=cluster_rows,
            show_row_dend=show_row_dend,
            border=self.border,
            **FORCED_HEATMAP_OPTIONS,
            **heatmap_kwargs,
        )

    @property
    def name(self) -> Optional[str]:
        return self.heatmap.name

    @property
    def n_rows(self) -> int:
        return self.heatmap.n_rows

    def __add__(self, other: Any) -> HeatmapList:
        from .heatmap_list import HeatmapList

        return HeatmapList([self]) + other

    def draw(self, **kwargs: Any) -> RenderedHeatmapList:
        """
        Draws the heatmap as a list of one.

        Kwargs:
            **kwargs: Passed to `HeatmapList.draw`.

        Returns:
            RenderedHeatmapList: Handle to the rendered figure.
        """
        from .heatmap_list import HeatmapList

        return HeatmapList([self]).draw(**kwargs)

    def show(self, **kwargs: Any) -> RenderedHeatmapList:
        rendered = self.draw(**kwargs)
        rendered.show()
        return rendered

    def save(self, path: Union[str, PathLike[str]], **kwargs: Any) -> RenderedHeatmapList:
        rendered = self.draw(**kwargs)
        rendered.save(path)
        return rendered

    def __repr__(self) -> str:
        seg = self.segments
        return (
            f"EnrichedHeatmap(name={self.name!r}, rows={self.n_rows}, "
            f"windows=({seg.n_upstream}, {seg.n_target}, {seg.n_downstream}), "
            f"axis_labels={self.axis_labels})"
        )
