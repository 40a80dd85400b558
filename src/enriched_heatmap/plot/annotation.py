"""
enriched_heatmap/plot/annotation
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Summary line annotation for enriched heatmaps: one line per row slice showing the
column-wise aggregate of the signal.
"""

from __future__ import annotations

import warnings
from typing import Any, Dict, Mapping, NamedTuple, Optional, Sequence, Tuple, TYPE_CHECKING, Union

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.colors import to_rgba

from ..core.matrix import NormalizedMatrix
from ..core.segments import SegmentLayout
from ..util.errors import IncompleteStyleError, MissingMetadataError
from ..util.warnings import warn
from .gpar import normalize_gp, recycle_gp, subset_gp, to_line_kwargs
from .renderers.base import PositionLineRegistry

if TYPE_CHECKING:
    from ..core.layout import RowGrouping
    from .style import StyleConfig

SUMMARY_VALUES = ("mean", "sum", "abs_mean", "abs_sum")
_TOP_PAD = 0.05
_RIBBON_ALPHA = 0.25


class GroupSummary(NamedTuple):
    """
    Per-group column aggregates, each of shape (n_groups, n_columns) or None.
    """

    y: Optional[np.ndarray]
    y_pos: Optional[np.ndarray]
    y_neg: Optional[np.ndarray]
    se: Optional[np.ndarray]


def _aggregate(block: np.ndarray, how: str) -> np.ndarray:
    """
    Column-wise NaN-aware sum or mean of one group.

    Args:
        block (np.ndarray): Group rows.
        how (str): "sum" or "mean".

    Returns:
        np.ndarray: One value per column; NaN for an empty group.
    """
    if block.shape[0] == 0:
        return np.full(block.shape[1], np.nan)
    if how == "sum":
        return np.nansum(block, axis=0)
    with warnings.catch_warnings():
        # All-NaN columns stay NaN
        warnings.simplefilter("ignore", RuntimeWarning)
        return np.nanmean(block, axis=0)


def _standard_error(block: np.ndarray) -> np.ndarray:
    """
    Column-wise sample standard deviation divided by sqrt(group size).

    Args:
        block (np.ndarray): Group rows.

    Returns:
        np.ndarray: One value per column; NaN for groups with fewer than two rows.
    """
    if block.shape[0] < 2:
        return np.full(block.shape[1], np.nan)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        sd = np.nanstd(block, axis=0, ddof=1)
    return sd / np.sqrt(block.shape[0])


def summarize_groups(
    values: np.ndarray,
    groups: Sequence[np.ndarray],
    value: str = "mean",
    by_sign: bool = False,
    with_error: bool = False,
) -> GroupSummary:
    """
    Computes the per-group column aggregates drawn by the summary annotation.

    In sign mode, positive values and the absolute value of negative values are
    aggregated separately and no standard error is computed. Standard errors are only
    computed for "mean" and "abs_mean", on the values being averaged.

    Args:
        values (np.ndarray): Matrix values (rows x columns).
        groups (Sequence[np.ndarray]): Row indices per group.
        value (str): One of "mean", "sum", "abs_mean", "abs_sum". Defaults to "mean".
        by_sign (bool): Whether to split by sign. Defaults to False.
        with_error (bool): Whether to compute standard errors. Defaults to False.

    Returns:
        GroupSummary: Aggregates per group.

    Raises:
        ValueError: If `value` is unknown.
    """
    if value not in SUMMARY_VALUES:
        raise ValueError(f"`value` must be one of {list(SUMMARY_VALUES)}, got {value!r}")
    values = np.asarray(values, dtype=float)
    how = "sum" if value in ("sum", "abs_sum") else "mean"
    blocks = [values[np.asarray(g, dtype=int)] for g in groups]

    if by_sign:
        y_pos = np.array([_aggregate(np.clip(b, 0, None), how) for b in blocks])
        y_neg = np.array([_aggregate(np.abs(np.clip(b, None, 0)), how) for b in blocks])
        return GroupSummary(y=None, y_pos=y_pos, y_neg=y_neg, se=None)

    if value.startswith("abs_"):
        blocks = [np.abs(b) for b in blocks]
    y = np.array([_aggregate(b, how) for b in blocks])
    se = None
    if with_error and how == "mean":
        se = np.array([_standard_error(b) for b in blocks])
    return GroupSummary(y=y, y_pos=None, y_neg=None, se=se)


def resolve_ylim(
    summary: GroupSummary,
    ylim: Optional[Tuple[float, float]] = None,
) -> Tuple[float, float]:
    """
    Resolves the y-range of the annotation.

    An explicit range is returned unchanged. Otherwise the range covers every drawn
    value (including the error band) and the top is padded by 5% of the span.

    Args:
        summary (GroupSummary): Output of `summarize_groups`.
        ylim (Optional[Tuple[float, float]]): Explicit range. Defaults to None.

    Returns:
        Tuple[float, float]: (lower, upper).
    """
    if ylim is not None:
        return float(ylim[0]), float(ylim[1])
    if summary.y is None:
        parts = [summary.y_pos, summary.y_neg]
    elif summary.se is not None:
        parts = [summary.y + summary.se, summary.y - summary.se]
    else:
        parts = [summary.y]
    data = np.concatenate([np.ravel(p) for p in parts])
    data = data[np.isfinite(data)]
    if data.size == 0:
        return 0.0, 1.0
    lo, hi = float(data.min()), float(data.max())
    if hi == lo:
        warn(f"All summary values equal {lo:g}; using a y-range of one unit")
        hi = lo + 1.0
    return lo, hi + (hi - lo) * _TOP_PAD


def _validate_ylim(ylim: Any) -> Optional[Tuple[float, float]]:
    if ylim is None:
        return None
    lo, hi = (float(v) for v in ylim)
    if not (np.isfinite(lo) and np.isfinite(hi)) or lo >= hi:
        raise ValueError("`ylim` must be two finite numbers with ylim[0] < ylim[1]")
    return lo, hi


class EnrichedAnnotation:
    """
    Class for the summary line annotation placed above an enriched heatmap.

    Create instances with `anno_enriched`. The annotation is drawn once per heatmap
    after the row grouping is final; the matrix and grouping are passed in by the
    draw orchestration.
    """

    def __init__(
        self,
        *,
        gp: Mapping[str, Any],
        by_sign: bool,
        pos_line: Union[bool, Sequence[bool]],
        pos_line_gp: Any,
        yaxis: bool,
        ylim: Optional[Tuple[float, float]],
        value: str,
        yaxis_side: str,
        yaxis_gp: Mapping[str, Any],
        show_error: bool,
    ) -> None:
        self.gp = gp
        self.by_sign = by_sign
        self.pos_line = pos_line
        self.pos_line_gp = pos_line_gp
        self.yaxis = yaxis
        self.ylim = ylim
        self.value = value
        self.yaxis_side = yaxis_side
        self.yaxis_gp = dict(yaxis_gp)
        self.show_error = show_error

    def summarize(self, values: np.ndarray, grouping: RowGrouping) -> GroupSummary:
        return summarize_groups(
            values,
            grouping.groups,
            value=self.value,
            by_sign=self.by_sign,
            with_error=self.show_error,
        )

    def render(
        self,
        ax: plt.Axes,
        matrix: NormalizedMatrix,
        grouping: RowGrouping,
        column_index: np.ndarray,
        style: StyleConfig,
    ) -> GroupSummary:
        """
        Draws the summary lines into `ax`.

        Args:
            ax (plt.Axes): Annotation axes.
            matrix (NormalizedMatrix): Matrix of the annotated heatmap.
            grouping (RowGrouping): Final row grouping.
            column_index (np.ndarray): Drawn window columns. The summary always follows
                window order, so a column permutation does not reorder the profile.
            style (StyleConfig): Style configuration.

        Returns:
            GroupSummary: The plotted aggregates.

        Raises:
            MissingMetadataError: If `matrix` is not a NormalizedMatrix.
        """
        if not isinstance(matrix, NormalizedMatrix):
            raise MissingMetadataError("anno_enriched() can only annotate a NormalizedMatrix")
        values = matrix.window_values
        n = values.shape[1]
        summary = self.summarize(values, grouping)
        lo, hi = resolve_ylim(summary, self.ylim)
        x = (np.arange(n) + 0.5) / n
        gp = recycle_gp(self.gp, len(grouping))

        for i in range(len(grouping)):
            group_gp = subset_gp(gp, i)
            line_kw = to_line_kwargs(group_gp, {"color": "black"})
            if self.by_sign:
                ax.plot(x, summary.y_pos[i], **{**line_kw, "color": group_gp["pos_col"]})
                ax.plot(x, summary.y_neg[i], **{**line_kw, "color": group_gp["neg_col"]})
                continue
            if summary.se is not None:
                r, g, b, a = to_rgba(line_kw["color"], line_kw.get("alpha"))
                ax.fill_between(
                    x,
                    summary.y[i] - summary.se[i],
                    summary.y[i] + summary.se[i],
                    color=(r, g, b, a * _RIBBON_ALPHA),
                    linewidth=0,
                )
            ax.plot(x, summary.y[i], **line_kw)

        ax.set_xlim(0.0, 1.0)
        ax.set_ylim(lo, hi)
        PositionLineRegistry.from_toggles(
            SegmentLayout.from_matrix(matrix).internal_boundaries(),
            self.pos_line,
            self.pos_line_gp,
            {
                "color": style["pos_line_color"],
                "linewidth": style["pos_line_lw"],
                "linestyle": style["pos_line_ls"],
            },
        ).render(ax, lo, hi, zorder=1)
        self._style_frame(ax, style)
        return summary

    def _style_frame(self, ax: plt.Axes, style: StyleConfig) -> None:
        for spine in ax.spines.values():
            spine.set_visible(True)
            spine.set_color(style["border_color"])
            spine.set_linewidth(float(style["axis_lw"]))
        ax.set_xticks([])
        if not self.yaxis:
            ax.set_yticks([])
            return
        side = self.yaxis_side
        ax.yaxis.set_ticks_position(side)
        ax.tick_params(
            axis="y",
            labelsize=self.yaxis_gp.get("fontsize", style["yaxis_fontsize"]),
            colors=self.yaxis_gp.get("color", style["text_color"]),
            left=side == "left",
            right=side == "right",
            labelleft=side == "left",
            labelright=side == "right",
        )


def anno_enriched(
    gp: Optional[Mapping[str, Any]] = None,
    pos_line: Union[bool, Sequence[bool]] = True,
    pos_line_gp: Any = None,
    yaxis: bool = True,
    ylim: Optional[Tuple[float, float]] = None,
    value: str = "mean",
    yaxis_side: str = "right",
    yaxis_gp: Optional[Mapping[str, Any]] = None,
    show_error: bool = False,
) -> EnrichedAnnotation:
    """
    Creates the summary line annotation for the top of an enriched heatmap.

    Every `gp` value may be a single value for all row slices or a sequence with one
    value per slice (recycled). Giving both `pos_col` and `neg_col` plots positive and
    negative signal as separate lines.

    Args:
        gp (Optional[Mapping[str, Any]]): Line style with keys color, linewidth,
            linestyle, alpha, pos_col, neg_col. Defaults to {"color": "red"}.
        pos_line (Union[bool, Sequence[bool]]): Whether to draw lines at the target
            boundaries, one toggle or one per boundary. Defaults to True.
        pos_line_gp (Any): Style of the position lines. Defaults to None.
        yaxis (bool): Whether to draw the y-axis. Defaults to True.
        ylim (Optional[Tuple[float, float]]): Fixed y-range. Defaults to the data range.
        value (str): "mean", "sum", "abs_mean" or "abs_sum". Defaults to "mean".
        yaxis_side (str): "left" or "right". Defaults to "right".
        yaxis_gp (Optional[Mapping[str, Any]]): Tick label style with keys fontsize and
            color. Defaults to None.
        show_error (bool): Whether to draw +/- 1 standard error bands. Only used for
            "mean" and "abs_mean" without sign splitting. Defaults to False.

    Returns:
        EnrichedAnnotation: Annotation for `top_annotation`.

    Raises:
        IncompleteStyleError: If only one of `pos_col` and `neg_col` is given.
        ValueError: If `value`, `yaxis_side`, `ylim` or `pos_line` is invalid.
    """
    gp_map: Dict[str, Any] = dict(normalize_gp({"color": "red"} if gp is None else gp))
    has_pos = gp_map.get("pos_col") is not None
    has_neg = gp_map.get("neg_col") is not None
    if has_neg and not has_pos:
        raise IncompleteStyleError("Since you defined `neg_col` in `gp`, you should also define `pos_col`.")
    if has_pos and not has_neg:
        raise IncompleteStyleError("Since you defined `pos_col` in `gp`, you should also define `neg_col`.")
    by_sign = has_pos and has_neg
    if value not in SUMMARY_VALUES:
        raise ValueError(f"`value` must be one of {list(SUMMARY_VALUES)}, got {value!r}")
    if yaxis_side not in {"left", "right"}:
        raise ValueError("`yaxis_side` must be 'left' or 'right'")
    if isinstance(pos_line, (list, tuple)) and not pos_line:
        raise ValueError("pos_line must not be an empty sequence")
    # Rejects empty per-group sequences
    recycle_gp(gp_map, 1)

    return EnrichedAnnotation(
        gp=normalize_gp(gp_map),
        by_sign=by_sign,
        pos_line=pos_line,
        pos_line_gp=pos_line_gp,
        yaxis=bool(yaxis),
        ylim=_validate_ylim(ylim),
        value=value,
        yaxis_side=yaxis_side,
        yaxis_gp=dict(yaxis_gp or {}),
        show_error=bool(show_error) and not by_sign and value in ("mean", "abs_mean"),
    )
