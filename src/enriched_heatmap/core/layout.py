"""
enriched_heatmap/core/layout
~~~~~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .clustering import compute_linkage, kmeans_split, leaf_order


@dataclass(frozen=True)
class RowGrouping:
    """
    Data class for the final partition of rows into ordered slices.

    Each group holds matrix row indices in drawing order. Annotation callbacks read
    this object at draw time and never modify it.
    """

    groups: Tuple[np.ndarray, ...]
    titles: Tuple[Optional[str], ...]
    linkages: Tuple[Optional[np.ndarray], ...]

    def __post_init__(self) -> None:
        if not (len(self.groups) == len(self.titles) == len(self.linkages)):
            raise ValueError("groups, titles and linkages must have the same length")

    def __len__(self) -> int:
        return len(self.groups)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self.groups)

    @property
    def n_rows(self) -> int:
        return int(sum(g.size for g in self.groups))

    @property
    def sizes(self) -> List[int]:
        return [int(g.size) for g in self.groups]

    @property
    def row_order(self) -> np.ndarray:
        """All row indices, concatenated in drawing order."""
        if not self.groups:
            return np.empty(0, dtype=int)
        return np.concatenate(self.groups)


def _resolve_split_labels(split: Any, n_rows: int) -> Tuple[np.ndarray, List[Any]]:
    """
    Resolves per-row split labels and the order of their levels.

    Args:
        split (Any): Sequence, Series or Categorical with one label per row.
        n_rows (int): Number of matrix rows.

    Returns:
        Tuple[np.ndarray, List[Any]]: (labels per row, ordered levels).

    Raises:
        ValueError: If the number of labels does not match the number of rows.
    """
    if isinstance(split, pd.DataFrame):
        if split.shape[1] != 1:
            raise ValueError("`split` DataFrame must have exactly one column")
        split = split.iloc[:, 0]
    if isinstance(split, pd.Series):
        split = split.array if isinstance(split.dtype, pd.CategoricalDtype) else split.to_numpy(dtype=object)
    cat = split if isinstance(split, pd.Categorical) else pd.Categorical(np.asarray(split, dtype=object))
    if len(cat) != n_rows:
        raise ValueError(f"`split` has {len(cat)} labels but the matrix has {n_rows} rows")
    if cat.isna().any():
        raise ValueError("`split` labels must not be missing")
    levels = [lev for lev in cat.categories if (cat == lev).any()]
    return np.asarray(cat, dtype=object), levels


def compute_row_grouping(
    values: np.ndarray,
    *,
    row_order: Optional[Sequence[int]] = None,
    cluster_rows: bool = False,
    split: Any = None,
    km: Optional[int] = None,
    row_title: Optional[Sequence[str]] = None,
    linkage_method: str = "ward",
    linkage_metric: str = "euclidean",
    km_seed: int = 123,
) -> RowGrouping:
    """
    Partitions and orders matrix rows into slices.

    Rows are first split into groups by `split` labels (in categorical level order) or
    by k-means (groups ordered by their first row in `row_order`). Inside each group,
    rows follow `row_order` unless `cluster_rows` is set, in which case the group's
    dendrogram leaf order is used.

    Args:
        values (np.ndarray): Matrix values used for clustering and k-means.

    Kwargs:
        row_order (Optional[Sequence[int]]): Global row order. Defaults to natural order.
        cluster_rows (bool): Whether to cluster rows within each group. Defaults to False.
        split (Any): One label per row. Defaults to None.
        km (Optional[int]): Number of k-means groups. Ignored when `split` is given.
            Defaults to None.
        row_title (Optional[Sequence[str]]): Titles per group. Defaults to the split levels.
        linkage_method (str): Linkage method. Defaults to "ward".
        linkage_metric (str): Linkage metric. Defaults to "euclidean".
        km_seed (int): Seed for k-means initialization. Defaults to 123.

    Returns:
        RowGrouping: Ordered row groups with optional per-group linkages.

    Raises:
        ValueError: If `row_order` is not a permutation of the rows or titles mismatch.
    """
    n_rows = int(values.shape[0])
    if row_order is None:
        order = np.arange(n_rows)
    else:
        order = np.asarray(row_order, dtype=int)
        if order.shape != (n_rows,) or not np.array_equal(np.sort(order), np.arange(n_rows)):
            raise ValueError("`row_order` must be a permutation of all row indices")

    # Group membership, with level order
    if split is not None:
        labels, levels = _resolve_split_labels(split, n_rows)
        titles: List[Optional[str]] = [str(lev) for lev in levels]
    elif km is not None and int(km) > 1:
        labels = kmeans_split(values, int(km), seed=km_seed)
        first_pos = {}
        for pos, row in enumerate(order.tolist()):
            first_pos.setdefault(int(labels[row]), pos)
        levels = sorted(first_pos, key=first_pos.get)
        titles = [f"cluster{i + 1}" for i in range(len(levels))]
    else:
        labels = np.zeros(n_rows, dtype=int)
        levels = [0]
        titles = [None]

    if row_title is not None:
        row_title = [row_title] if isinstance(row_title, str) else list(row_title)
        if len(row_title) != len(levels):
            raise ValueError(
                f"`row_title` has {len(row_title)} entries but there are {len(levels)} row groups"
            )
        titles = [str(t) for t in row_title]

    groups: List[np.ndarray] = []
    linkages: List[Optional[np.ndarray]] = []
    ordered_labels = labels[order]
    for level in levels:
        members = order[ordered_labels == level]
        z = None
        if cluster_rows:
            z = compute_linkage(
                values[members],
                linkage_method=linkage_method,
                linkage_metric=linkage_metric,
            )
            members = members[leaf_order(z, members.size)]
        groups.append(members.astype(int))
        linkages.append(z)

    return RowGrouping(groups=tuple(groups), titles=tuple(titles), linkages=tuple(linkages))
