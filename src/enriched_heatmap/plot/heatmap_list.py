"""
enriched_heatmap/plot/heatmap_list
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Composition and drawing of heatmaps placed side by side. All heatmaps share the row
grouping of the main heatmap; each heatmap column stacks its title and top annotation
above the body and its axis strip (or column names and bottom annotation) below it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from os import PathLike
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np

from ..core.layout import RowGrouping
from ..core.segments import SegmentLayout, axis_strip_height, font_properties, text_extent
from .enriched import EnrichedHeatmap
from .heatmap import Heatmap
from .renderers.axes import AxesRenderer, render_title_axes
from .renderers.base import PositionLineRegistry
from .renderers.colorbar import ColorbarRenderer, ColorbarSpec
from .renderers.dendrogram import DendrogramRenderer
from .renderers.matrix import MatrixRenderer
from .style import StyleConfig, StyleValue
from .track_layout import TrackLayoutManager

# Room for colorbar tick labels right of the legend bars
_LEGEND_LABEL_WIDTH = 0.55
_NAME_PAD = 0.05


@dataclass(frozen=True)
class PanelSpec:
    """
    Draw-time description of one heatmap column.

    `kind` is "enriched" for heatmaps with an axis strip and position lines, "plain"
    otherwise. Enriched-only fields are None for plain panels.
    """

    kind: Literal["plain", "enriched"]
    name: str
    heatmap: Heatmap
    segments: Optional[SegmentLayout] = None
    axis_labels: Optional[Tuple[str, ...]] = None
    axis_rotation: float = 0.0
    axis_name_gp: Mapping[str, Any] = field(default_factory=dict)
    pos_line: Union[bool, Sequence[bool]] = False
    pos_line_gp: Any = None


def panel_spec(entry: Union[Heatmap, EnrichedHeatmap], name: str) -> PanelSpec:
    """
    Converts a heatmap into the panel description used by the draw routine.

    Args:
        entry (Union[Heatmap, EnrichedHeatmap]): Heatmap to convert.
        name (str): Resolved heatmap name.

    Returns:
        PanelSpec: Panel description.
    """
    if isinstance(entry, EnrichedHeatmap):
        return PanelSpec(
            kind="enriched",
            name=name,
            heatmap=entry.heatmap,
            segments=entry.segments,
            axis_labels=tuple(entry.axis_labels),
            axis_rotation=entry.axis_rotation,
            axis_name_gp=dict(entry.axis_name_gp),
            pos_line=entry.pos_line,
            pos_line_gp=entry.pos_line_gp,
        )
    return PanelSpec(kind="plain", name=name, heatmap=entry)


@dataclass(frozen=True)
class HeatmapListSpec:
    """
    Immutable render specification for heatmap lists.
    """

    panels: Tuple[PanelSpec, ...]
    main_heatmap: int = 0
    figsize: Optional[Tuple[float, float]] = None
    gap: Optional[float] = None
    style: Optional[Mapping[str, StyleValue]] = None
    background: Optional[str] = None


class RenderedHeatmapList:
    """
    Class for a rendered heatmap list figure.
    """

    def __init__(
        self,
        *,
        fig: plt.Figure,
        axes: Dict[str, Dict[str, Any]],
        grouping: RowGrouping,
        spec: Optional[HeatmapListSpec] = None,
    ) -> None:
        """
        Initializes the RenderedHeatmapList handle.

        Kwargs:
            fig (plt.Figure): Rendered figure.
            axes (Dict[str, Dict[str, Any]]): Axes per heatmap name, keyed by part
                ("body", "dendrogram", "axis", "top_annotation", "bottom_annotation",
                "column_title", "legend").
            grouping (RowGrouping): Row grouping shared by all heatmaps.
            spec (Optional[HeatmapListSpec]): Render specification used to rebuild if the
                figure is later closed. Defaults to None.
        """
        self.fig = fig
        self.axes = axes
        self.grouping = grouping
        self._spec = spec

    def _ensure_open(self) -> None:
        """
        Ensures the backing figure is open, rebuilding it when possible.

        Raises:
            RuntimeError: If the figure is closed and no render spec is available.
        """
        if self._figure_is_open():
            return
        if self._spec is None:
            raise RuntimeError("Cannot reopen heatmap list: render spec is unavailable.")
        rebuilt = _render_heatmap_list(self._spec)
        self.fig = rebuilt.fig
        self.axes = rebuilt.axes
        self.grouping = rebuilt.grouping

    def _figure_is_open(self) -> bool:
        """
        Checks whether the figure handle is still open.

        Returns:
            bool: True if the figure exists and is open, False otherwise.
        """
        try:
            return self.fig.number in plt.get_fignums()
        except (AttributeError, RuntimeError, ValueError):
            return False

    def save(self, path: Union[str, PathLike[str]], **kwargs: Any) -> None:
        """
        Saves the rendered figure.

        Args:
            path (Union[str, PathLike[str]]): Output path for the figure.

        Kwargs:
            **kwargs: Additional matplotlib savefig options. Defaults to {}.

        Raises:
            RuntimeError: If the figure has been closed and cannot be rebuilt.
        """
        self._ensure_open()
        self.fig.savefig(
            path,
            facecolor=self.fig.get_facecolor(),
            **kwargs,
        )

    def show(self) -> None:
        """
        Shows the rendered figure.

        Raises:
            RuntimeError: If the figure has been closed and cannot be rebuilt.
        """
        self._ensure_open()
        plt.show()


class HeatmapList:
    """
    Class for an ordered collection of heatmaps drawn side by side.
    """

    def __init__(
        self,
        heatmaps: Sequence[Union[Heatmap, EnrichedHeatmap]] = (),
        *,
        main_heatmap: Union[int, str] = 0,
    ) -> None:
        """
        Initializes the HeatmapList instance.

        Args:
            heatmaps (Sequence[Union[Heatmap, EnrichedHeatmap]]): Heatmaps from left to right.

        Kwargs:
            main_heatmap (Union[int, str]): Position or name of the heatmap whose row
                grouping is used for all heatmaps. Defaults to 0.

        Raises:
            TypeError: If an entry is not a heatmap.
            ValueError: If row counts differ or names are duplicated.
        """
        self.heatmaps: List[Union[Heatmap, EnrichedHeatmap]] = []
        self.main_heatmap = main_heatmap
        for hm in heatmaps:
            self._append(hm)

    def _append(self, hm: Any) -> None:
        if not isinstance(hm, (Heatmap, EnrichedHeatmap)):
            raise TypeError(f"Only heatmaps can be added to a HeatmapList, got {type(hm).__name__}")
        if self.heatmaps and hm.n_rows != self.heatmaps[0].n_rows:
            raise ValueError(
                f"All heatmaps must have the same number of rows ({self.heatmaps[0].n_rows}), "
                f"got {hm.n_rows}"
            )
        self.heatmaps.append(hm)
        names = self.names
        if len(set(names)) != len(names):
            self.heatmaps.pop()
            raise ValueError(f"Heatmap names must be unique. Got: {names}")

    @property
    def names(self) -> List[str]:
        """Heatmap names; unnamed heatmaps are called matrix_1, matrix_2, ... by position."""
        return [hm.name or f"matrix_{i + 1}" for i, hm in enumerate(self.heatmaps)]

    def __add__(self, other: Any) -> HeatmapList:
        combined = HeatmapList(self.heatmaps, main_heatmap=self.main_heatmap)
        others = other.heatmaps if isinstance(other, HeatmapList) else [other]
        for hm in others:
            combined._append(hm)
        return combined

    def __len__(self) -> int:
        return len(self.heatmaps)

    def __iter__(self):
        return iter(self.heatmaps)

    def __getitem__(self, key: Union[int, str]) -> Union[Heatmap, EnrichedHeatmap]:
        if isinstance(key, str):
            return self.heatmaps[self._resolve_index(key)]
        return self.heatmaps[key]

    def _resolve_index(self, key: Union[int, str]) -> int:
        """
        Resolves a heatmap position or name to a position.

        Raises:
            KeyError: If the name is unknown.
            IndexError: If the position is out of range.
        """
        if isinstance(key, str):
            names = self.names
            if key not in names:
                raise KeyError(f"No heatmap named {key!r}. Available: {names}")
            return names.index(key)
        index = int(key)
        if not -len(self.heatmaps) <= index < len(self.heatmaps):
            raise IndexError(f"main_heatmap {key} is out of range for {len(self.heatmaps)} heatmaps")
        return index % len(self.heatmaps)

    def draw(
        self,
        *,
        figsize: Optional[Tuple[float, float]] = None,
        gap: Optional[float] = None,
        main_heatmap: Union[int, str, None] = None,
        style: Optional[Mapping[str, StyleValue]] = None,
        background: Optional[str] = None,
    ) -> RenderedHeatmapList:
        """
        Groups rows, lays out and draws all heatmaps.

        Kwargs:
            figsize (Optional[Tuple[float, float]]): Figure size in inches. Body height
                and heatmap widths are scaled to fit. Defaults to the natural size.
            gap (Optional[float]): Space between heatmaps in inches. Defaults to the style
                value.
            main_heatmap (Union[int, str, None]): Overrides the list's main heatmap.
                Defaults to None.
            style (Optional[Mapping[str, StyleValue]]): Style overrides. Defaults to None.
            background (Optional[str]): Figure background color. Defaults to None.

        Returns:
            RenderedHeatmapList: Handle to the rendered figure.

        Raises:
            ValueError: If the list is empty or `figsize` leaves no room for the bodies.
        """
        if not self.heatmaps:
            raise ValueError("Cannot draw an empty HeatmapList")
        main = self._resolve_index(self.main_heatmap if main_heatmap is None else main_heatmap)
        names = self.names
        spec = HeatmapListSpec(
            panels=tuple(panel_spec(hm, name) for hm, name in zip(self.heatmaps, names)),
            main_heatmap=main,
            figsize=None if figsize is None else (float(figsize[0]), float(figsize[1])),
            gap=gap,
            style=dict(style) if style is not None else None,
            background=background,
        )
        return _render_heatmap_list(spec)

    def show(self, **kwargs: Any) -> RenderedHeatmapList:
        rendered = self.draw(**kwargs)
        rendered.show()
        return rendered

    def __repr__(self) -> str:
        return f"HeatmapList({self.names})"


def _max_text_width(labels: Sequence[Any], fontsize: float) -> float:
    """
    Widest label in inches.
    """
    fontprops = font_properties({"fontsize": fontsize})
    width_pt = max((text_extent(str(lab), fontprops)[0] for lab in labels), default=0.0)
    return width_pt / 72.0


def _build_tracks(panel: PanelSpec, style: StyleConfig) -> TrackLayoutManager:
    """
    Registers the tracks above and below one heatmap body.

    Args:
        panel (PanelSpec): Panel description.
        style (StyleConfig): Style configuration.

    Returns:
        TrackLayoutManager: Tracks in body-outward order.
    """
    hm = panel.heatmap
    tracks = TrackLayoutManager()
    title_height = float(style["title_fontsize"]) * 1.4 / 72.0
    tracks.register_track(
        "top_annotation",
        hm.top_annotation_height or float(style["annotation_height"]),
        pad=float(style["annotation_gap"]),
        enabled=hm.top_annotation is not None,
    )
    if panel.kind == "enriched":
        height_pt = axis_strip_height(
            panel.axis_labels,
            panel.axis_rotation,
            {"fontsize": style["axis_fontsize"], **panel.axis_name_gp},
        )
        tracks.register_track("axis", height_pt / 72.0, side="bottom")
    tracks.register_track(
        "column_names",
        _max_text_width(hm.column_labels, float(style["legend_fontsize"])) + _NAME_PAD,
        enabled=hm.show_column_names,
        side="bottom",
    )
    tracks.register_track(
        "bottom_annotation",
        float(style["annotation_height"]),
        pad=float(style["annotation_gap"]),
        enabled=hm.bottom_annotation is not None,
        side="bottom",
    )
    tracks.register_track(
        "column_title",
        title_height,
        pad=float(style["title_gap"]),
        enabled=hm.column_title is not None,
        side=hm.column_title_side,
    )
    return tracks


def _horizontal_layout(
    panels: Sequence[PanelSpec],
    grouping: RowGrouping,
    main: int,
    style: StyleConfig,
    gap: float,
    body_scale: float = 1.0,
) -> Tuple[Dict[str, float], List[Dict[str, float]], float]:
    """
    Computes x positions in inches.

    Returns:
        Tuple[Dict[str, float], List[Dict[str, float]], float]:
            (shared columns, per-panel columns, figure width).
    """
    margin = float(style["figure_margin"])
    x = margin
    shared: Dict[str, float] = {}
    if any(t is not None for t in grouping.titles):
        shared["row_title_x0"] = x
        x += float(style["row_title_width"])
    has_linkage = any(z is not None for z in grouping.linkages)
    columns = []
    for i, panel in enumerate(panels):
        hm = panel.heatmap
        col: Dict[str, float] = {}
        if i == main and hm.show_row_dend and has_linkage:
            col["dendro_x0"] = x
            x += float(style["dendro_width"])
        col["body_x0"] = x
        col["body_w"] = float(hm.width or style["heatmap_width"]) * body_scale
        x += col["body_w"]
        if hm.show_row_names:
            x += _max_text_width(hm.row_labels, float(style["legend_fontsize"])) + _NAME_PAD
        columns.append(col)
        x += gap
    x -= gap
    if any(p.heatmap.show_heatmap_legend for p in panels):
        shared["legend_x0"] = x + float(style["legend_gap"])
        x = shared["legend_x0"] + float(style["legend_width"]) + _LEGEND_LABEL_WIDTH
    return shared, columns, x + margin


def _slice_extents(
    sizes: Sequence[int],
    body_bottom: float,
    body_top: float,
    slice_gap: float,
) -> List[Tuple[float, float]]:
    """
    Splits the body height into slices proportional to their row counts.

    Returns:
        List[Tuple[float, float]]: (y0, y1) per slice in inches, top slice first.
    """
    total = float(sum(sizes))
    k = len(sizes)
    available = (body_top - body_bottom) - slice_gap * (k - 1)
    if available <= 0:
        raise ValueError("Body height is too small for the gaps between row slices")
    extents = []
    y1 = body_top
    for size in sizes:
        h = available * size / total
        extents.append((y1 - h, y1))
        y1 = y1 - h - slice_gap
    return extents


def _render_heatmap_list(spec: HeatmapListSpec) -> RenderedHeatmapList:
    """
    Renders a heatmap list from its specification.

    Drawing order: body slices (with position lines), row titles and names,
    dendrograms, axis strips, annotations, column titles, legends.

    Args:
        spec (HeatmapListSpec): Render specification.

    Returns:
        RenderedHeatmapList: Handle to the rendered figure.
    """
    style = StyleConfig().update(spec.style)
    if spec.background is not None:
        style.set("background", spec.background)
    panels = spec.panels
    main = spec.main_heatmap
    gap = float(style["heatmap_gap"] if spec.gap is None else spec.gap)
    grouping = panels[main].heatmap.compute_grouping()

    # Vertical geometry
    tracks = [_build_tracks(panel, style) for panel in panels]
    top_ext = max(t.extent("top") for t in tracks)
    bottom_ext = max(t.extent("bottom") for t in tracks)
    margin = float(style["figure_margin"])
    body_h = float(style["body_height"])
    shared, columns, fig_w = _horizontal_layout(panels, grouping, main, style, gap)
    fig_h = 2 * margin + top_ext + body_h + bottom_ext
    if spec.figsize is not None:
        body_h = spec.figsize[1] - (fig_h - body_h)
        body_total = sum(c["body_w"] for c in columns)
        scale = (spec.figsize[0] - (fig_w - body_total)) / body_total
        if body_h <= 0 or scale <= 0:
            raise ValueError(f"figsize={spec.figsize} leaves no room for the heatmap bodies")
        shared, columns, fig_w = _horizontal_layout(panels, grouping, main, style, gap, scale)
        fig_w, fig_h = spec.figsize
    body_bottom = margin + bottom_ext
    body_top = body_bottom + body_h
    slices = _slice_extents(grouping.sizes, body_bottom, body_top, float(style["slice_gap"]))

    fig = plt.figure(figsize=(fig_w, fig_h), dpi=float(style["dpi"]))
    if style["background"] is not None:
        fig.patch.set_facecolor(style["background"])

    def _rect(x0: float, y0: float, w: float, h: float) -> List[float]:
        return [x0 / fig_w, y0 / fig_h, w / fig_w, h / fig_h]

    axes: Dict[str, Dict[str, Any]] = {p.name: {} for p in panels}
    norms = [p.heatmap.color_norm() for p in panels]
    line_defaults = {
        "color": style["pos_line_color"],
        "linewidth": style["pos_line_lw"],
        "linestyle": style["pos_line_ls"],
    }
    column_orders = [p.heatmap.column_order() for p in panels]

    # Bodies
    for panel, col, norm, col_order in zip(panels, columns, norms, column_orders):
        hm = panel.heatmap
        registry = None
        if panel.kind == "enriched":
            registry = PositionLineRegistry.from_toggles(
                panel.segments.internal_boundaries(),
                panel.pos_line,
                panel.pos_line_gp,
                line_defaults,
            )
        renderer = MatrixRenderer(cmap=hm.cmap, norm=norm, border=hm.border)
        body_axes = []
        for group, (y0, y1) in zip(grouping.groups, slices):
            ax = fig.add_axes(_rect(col["body_x0"], y0, col["body_w"], y1 - y0))
            renderer.render(ax, hm.values[np.ix_(group, col_order)], style, position_lines=registry)
            if hm.show_row_names:
                AxesRenderer("row_names", labels=hm.row_labels[group]).render(ax, style)
            body_axes.append(ax)
        if hm.show_column_names:
            AxesRenderer("column_names", labels=hm.column_labels[col_order]).render(body_axes[-1], style)
        axes[panel.name]["body"] = body_axes

    # Row titles
    if "row_title_x0" in shared:
        for title, (y0, y1) in zip(grouping.titles, slices):
            render_title_axes(
                fig,
                _rect(shared["row_title_x0"], y0, float(style["row_title_width"]), y1 - y0),
                title,
                style,
                kind="row_title",
            )

    # Dendrograms
    for panel, col in zip(panels, columns):
        if "dendro_x0" not in col:
            continue
        dendro_axes = []
        for z, size, (y0, y1) in zip(grouping.linkages, grouping.sizes, slices):
            ax_dend = fig.add_axes(
                _rect(col["dendro_x0"], y0, float(style["dendro_width"]), y1 - y0),
                frameon=False,
            )
            DendrogramRenderer().render(ax_dend, z, size, style)
            dendro_axes.append(ax_dend)
        axes[panel.name]["dendrogram"] = dendro_axes

    layouts = [t.compute_layout(body_bottom, body_top) for t in tracks]

    # Axis strips
    for panel, col, layout in zip(panels, columns, layouts):
        if panel.kind != "enriched":
            continue
        y0, y1 = layout["axis"]
        ax_axis = fig.add_axes(_rect(col["body_x0"], y0, col["body_w"], y1 - y0), frameon=False)
        AxesRenderer(
            "axis_strip",
            positions=panel.segments.boundaries(),
            labels=panel.axis_labels,
            rotation=panel.axis_rotation,
            text_gp=panel.axis_name_gp,
        ).render(ax_axis, style)
        axes[panel.name]["axis"] = ax_axis

    # Annotations receive the matrix and the final grouping explicitly
    for panel, col, layout, col_order in zip(panels, columns, layouts, column_orders):
        hm = panel.heatmap
        matrix = hm.matrix if hm.matrix is not None else hm.values
        for slot in ("top_annotation", "bottom_annotation"):
            annotation = getattr(hm, slot)
            if annotation is None:
                continue
            y0, y1 = layout[slot]
            ax_anno = fig.add_axes(_rect(col["body_x0"], y0, col["body_w"], y1 - y0))
            annotation.render(ax_anno, matrix, grouping, col_order, style)
            axes[panel.name][slot] = ax_anno

    # Column titles
    for panel, col, layout in zip(panels, columns, layouts):
        if "column_title" not in layout:
            continue
        y0, y1 = layout["column_title"]
        axes[panel.name]["column_title"] = render_title_axes(
            fig,
            _rect(col["body_x0"], y0, col["body_w"], y1 - y0),
            panel.heatmap.column_title,
            style,
            side=panel.heatmap.column_title_side,
        )

    # Legends
    legend_panels = [(p, n) for p, n in zip(panels, norms) if p.heatmap.show_heatmap_legend]
    if legend_panels:
        colorbars: List[ColorbarSpec] = [
            {"name": p.name, "cmap": p.heatmap.cmap, "norm": norm, "label": p.name}
            for p, norm in legend_panels
        ]
        legend_axes = ColorbarRenderer(colorbars).render(
            fig,
            x0=shared["legend_x0"],
            top=body_top - float(style["legend_fontsize"]) * 2.0 / 72.0,
            style=style,
        )
        for (panel, _norm), ax_cb in zip(legend_panels, legend_axes):
            axes[panel.name]["legend"] = ax_cb

    return RenderedHeatmapList(fig=fig, axes=axes, grouping=grouping, spec=spec)
