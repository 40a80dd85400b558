"""
enriched_heatmap/plot/heatmap
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from os import PathLike
from typing import Any, Callable, Optional, Sequence, TYPE_CHECKING, Union

import numpy as np
import pandas as pd
from matplotlib.colors import Colormap, Normalize

from ..core.clustering import compute_linkage, leaf_order
from ..core.layout import RowGrouping, compute_row_grouping
from ..core.matrix import NormalizedMatrix
from ..util.errors import MissingMetadataError
from .annotation import EnrichedAnnotation
from .renderers.matrix import resolve_color_normalization, resolve_colormap

if TYPE_CHECKING:
    from .heatmap_list import HeatmapList, RenderedHeatmapList


class _CallbackAnnotation:
    """
    Adapter turning a plain function into an annotation object.
    """

    def __init__(self, fn: Callable[..., Any]) -> None:
        self.fn = fn

    def render(self, ax, matrix, grouping, column_index, style) -> None:
        self.fn(ax, matrix, grouping, column_index, style)


def _as_annotation(annotation: Any, name: str) -> Any:
    """
    Validates an annotation slot value.

    Args:
        annotation (Any): None, an object with `render`, or a callable.
        name (str): Argument name used in error messages.

    Returns:
        Any: Object with a `render(ax, matrix, grouping, column_index, style)` method.

    Raises:
        TypeError: If the value is neither an annotation nor a callable.
    """
    if annotation is None:
        return None
    if callable(getattr(annotation, "render", None)):
        return annotation
    if callable(annotation):
        return _CallbackAnnotation(annotation)
    raise TypeError(f"`{name}` must be an annotation object or a callable")


def _resolve_values(matrix: Any) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Extracts drawable values and labels from the supported matrix inputs.

    Args:
        matrix (Any): NormalizedMatrix, DataFrame or 2-D array.

    Returns:
        tuple[np.ndarray, np.ndarray, np.ndarray]: (values, row labels, column labels).

    Raises:
        ValueError: If the values are not a non-empty numeric 2-D array.
    """
    if isinstance(matrix, NormalizedMatrix):
        values = matrix.window_values
        return values, matrix.row_labels, np.arange(values.shape[1]).astype(object)
    if isinstance(matrix, pd.DataFrame):
        row_labels = matrix.index.to_numpy(dtype=object)
        col_labels = matrix.columns.to_numpy(dtype=object)
        values = matrix.to_numpy()
    else:
        values = np.asarray(matrix)
        row_labels = col_labels = None
    if values.ndim != 2 or values.size == 0:
        raise ValueError("Heatmap matrix must be a non-empty 2-D array")
    if not (np.issubdtype(values.dtype, np.number) or values.dtype == bool):
        raise ValueError("Heatmap matrix must be numeric")
    values = values.astype(float)
    if row_labels is None:
        row_labels = np.arange(values.shape[0]).astype(object)
        col_labels = np.arange(values.shape[1]).astype(object)
    return values, row_labels, col_labels


def _check_labels(labels: Sequence[Any], expected: int, name: str) -> np.ndarray:
    arr = np.asarray(list(labels), dtype=object)
    if arr.shape != (expected,):
        raise ValueError(f"`{name}` has {arr.size} entries but {expected} are needed")
    return arr


class Heatmap:
    """
    Class for a single heatmap: a matrix plus its clustering, slicing and annotation slots.

    Construction only validates and stores configuration; rows are grouped and drawn
    when the heatmap (or a list containing it) is drawn.
    """

    def __init__(
        self,
        matrix: Union[NormalizedMatrix, pd.DataFrame, np.ndarray],
        *,
        name: Optional[str] = None,
        cmap: Union[str, Colormap, Sequence[str], None] = "viridis",
        vmin: Optional[float] = None,
        vmax: Optional[float] = None,
        center: Optional[float] = None,
        row_order: Optional[Sequence[int]] = None,
        cluster_rows: bool = True,
        cluster_columns: bool = False,
        show_row_names: bool = False,
        show_column_names: bool = True,
        row_labels: Optional[Sequence[Any]] = None,
        column_labels: Optional[Sequence[Any]] = None,
        top_annotation: Any = None,
        top_annotation_height: Optional[float] = None,
        bottom_annotation: Any = None,
        column_title: Optional[str] = None,
        column_title_side: str = "top",
        row_title: Optional[Sequence[str]] = None,
        split: Any = None,
        km: Optional[int] = None,
        show_row_dend: bool = True,
        border: bool = False,
        width: Optional[float] = None,
        show_heatmap_legend: bool = True,
        linkage_method: str = "ward",
        linkage_metric: str = "euclidean",
    ) -> None:
        """
        Initializes the Heatmap instance.

        Args:
            matrix (Union[NormalizedMatrix, pd.DataFrame, np.ndarray]): Values to draw. For
                a NormalizedMatrix only the window columns are drawn.

        Kwargs:
            name (Optional[str]): Heatmap name, used as legend title and axes key.
                Defaults to None (named by position when drawn).
            cmap (Union[str, Colormap, Sequence[str], None]): Colormap name, Colormap or a
                list of colors for a linear ramp. Defaults to "viridis".
            vmin (Optional[float]): Lower color limit. Defaults to the data minimum.
            vmax (Optional[float]): Upper color limit. Defaults to the data maximum.
            center (Optional[float]): Center of a diverging normalization. Defaults to None.
            row_order (Optional[Sequence[int]]): Row order. Defaults to natural order.
            cluster_rows (bool): Whether to cluster rows within each slice. Defaults to True.
            cluster_columns (bool): Whether to reorder columns by clustering. Defaults to False.
            show_row_names (bool): Whether to draw row names. Defaults to False.
            show_column_names (bool): Whether to draw column names. Defaults to True.
            row_labels (Optional[Sequence[Any]]): Row names. Defaults to the matrix index.
            column_labels (Optional[Sequence[Any]]): Column names. Defaults to the matrix columns.
            top_annotation (Any): Annotation drawn above the body. Defaults to None.
            top_annotation_height (Optional[float]): Height in inches. Defaults to the style value.
            bottom_annotation (Any): Annotation drawn below the body. Defaults to None.
            column_title (Optional[str]): Title above or below the heatmap. Defaults to None.
            column_title_side (str): "top" or "bottom". Defaults to "top".
            row_title (Optional[Sequence[str]]): One title per row slice. Defaults to None.
            split (Any): One label per row; rows are sliced by label. Defaults to None.
            km (Optional[int]): Number of k-means row slices. Defaults to None.
            show_row_dend (bool): Whether to draw row dendrograms. Defaults to True.
            border (bool): Whether to frame each slice. Defaults to False.
            width (Optional[float]): Body width in inches. Defaults to the style value.
            show_heatmap_legend (bool): Whether to draw a color legend. Defaults to True.
            linkage_method (str): Linkage method. Defaults to "ward".
            linkage_metric (str): Linkage metric. Defaults to "euclidean".

        Raises:
            MissingMetadataError: If an enriched summary annotation is attached to a
                matrix without window metadata.
            ValueError: If an argument is out of range or has the wrong length.
            TypeError: If an annotation slot holds an unsupported value.
        """
        self.values, self.row_labels, self.column_labels = _resolve_values(matrix)
        self.matrix = matrix if isinstance(matrix, NormalizedMatrix) else None
        n_rows, n_cols = self.values.shape

        if row_labels is not None:
            self.row_labels = _check_labels(row_labels, n_rows, "row_labels")
        if column_labels is not None:
            self.column_labels = _check_labels(column_labels, n_cols, "column_labels")
        if name is not None and (not isinstance(name, str) or not name):
            raise ValueError("`name` must be a non-empty string")
        if column_title_side not in {"top", "bottom"}:
            raise ValueError("`column_title_side` must be 'top' or 'bottom'")
        if km is not None and not 1 <= int(km) <= n_rows:
            raise ValueError(f"`km` must be between 1 and the number of rows ({n_rows})")
        if width is not None and width <= 0:
            raise ValueError("`width` must be positive")
        if top_annotation_height is not None and top_annotation_height <= 0:
            raise ValueError("`top_annotation_height` must be positive")

        self.top_annotation = _as_annotation(top_annotation, "top_annotation")
        self.bottom_annotation = _as_annotation(bottom_annotation, "bottom_annotation")
        for annotation in (self.top_annotation, self.bottom_annotation):
            if isinstance(annotation, EnrichedAnnotation) and self.matrix is None:
                raise MissingMetadataError(
                    "anno_enriched() needs a NormalizedMatrix with upstream/target/downstream metadata"
                )

        self.name = name
        self.cmap = resolve_colormap(cmap)
        self.vmin = vmin
        self.vmax = vmax
        self.center = center
        self.row_order = None if row_order is None else np.asarray(row_order, dtype=int)
        self.cluster_rows = bool(cluster_rows)
        self.cluster_columns = bool(cluster_columns)
        self.show_row_names = bool(show_row_names)
        self.show_column_names = bool(show_column_names)
        self.top_annotation_height = top_annotation_height
        self.column_title = column_title
        self.column_title_side = column_title_side
        self.row_title = row_title
        self.split = split
        self.km = None if km is None else int(km)
        self.show_row_dend = bool(show_row_dend)
        self.border = bool(border)
        self.width = width
        self.show_heatmap_legend = bool(show_heatmap_legend)
        self.linkage_method = linkage_method
        self.linkage_metric = linkage_metric

        # Fail at construction rather than at draw time
        if self.row_order is not None:
            order = self.row_order
            if order.shape != (n_rows,) or not np.array_equal(np.sort(order), np.arange(n_rows)):
                raise ValueError("`row_order` must be a permutation of all row indices")
        if split is not None:
            compute_row_grouping(self.values, split=split, row_title=row_title)
        elif row_title is not None:
            titles = [row_title] if isinstance(row_title, str) else list(row_title)
            expected = self.km if self.km is not None and self.km > 1 else 1
            if len(titles) != expected:
                raise ValueError(
                    f"`row_title` has {len(titles)} entries but there are {expected} row groups"
                )

    @property
    def n_rows(self) -> int:
        return int(self.values.shape[0])

    @property
    def n_columns(self) -> int:
        return int(self.values.shape[1])

    def compute_grouping(self) -> RowGrouping:
        """
        Partitions and orders the rows as configured.

        Returns:
            RowGrouping: Row slices in drawing order.
        """
        return compute_row_grouping(
            self.values,
            row_order=self.row_order,
            cluster_rows=self.cluster_rows,
            split=self.split,
            km=self.km,
            row_title=self.row_title,
            linkage_method=self.linkage_method,
            linkage_metric=self.linkage_metric,
        )

    def column_order(self) -> np.ndarray:
        """
        Column drawing order (leaf order when columns are clustered).

        Returns:
            np.ndarray: Column indices.
        """
        if not self.cluster_columns:
            return np.arange(self.n_columns)
        z = compute_linkage(
            self.values.T,
            linkage_method=self.linkage_method,
            linkage_metric=self.linkage_metric,
        )
        return leaf_order(z, self.n_columns)

    def color_norm(self) -> Normalize:
        return resolve_color_normalization(
            self.values,
            center=self.center,
            vmin=self.vmin,
            vmax=self.vmax,
        )

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
        """
        Draws the heatmap and writes it to `path`.

        Args:
            path (Union[str, PathLike[str]]): Output path.

        Kwargs:
            **kwargs: Passed to `HeatmapList.draw`.

        Returns:
            RenderedHeatmapList: Handle to the rendered figure.
        """
        rendered = self.draw(**kwargs)
        rendered.save(path)
        return rendered

    def __repr__(self) -> str:
        return (
            f"Heatmap(name={self.name!r}, shape={self.values.shape}, "
            f"cluster_rows={self.cluster_rows})"
        )
