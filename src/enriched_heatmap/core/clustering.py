"""
enriched_heatmap/core/clustering
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

import warnings
from typing import Optional

import numpy as np
from scipy.cluster.hierarchy import leaves_list, linkage
from scipy.cluster.vq import kmeans2


def _fill_missing(values: np.ndarray) -> np.ndarray:
    """
    Replaces NaN with column means (zero for all-NaN columns) so distances are defined.

    Args:
        values (np.ndarray): Matrix values.

    Returns:
        np.ndarray: Copy without NaN.
    """
    values = np.array(values, dtype=float)
    mask = np.isnan(values)
    if not mask.any():
        return values
    with warnings.catch_warnings():
        # All-NaN columns fall back to zero below
        warnings.simplefilter("ignore", RuntimeWarning)
        col_means = np.nanmean(values, axis=0)
    col_means = np.where(np.isnan(col_means), 0.0, col_means)
    values[mask] = np.take(col_means, np.nonzero(mask)[1])
    return values


def compute_linkage(
    values: np.ndarray,
    *,
    linkage_method: str = "ward",
    linkage_metric: str = "euclidean",
    optimal_ordering: bool = True,
) -> Optional[np.ndarray]:
    """
    Computes a hierarchical clustering of matrix rows.

    Args:
        values (np.ndarray): Row observations.

    Kwargs:
        linkage_method (str): Linkage method for hierarchical clustering. Defaults to "ward".
        linkage_metric (str): Distance metric for hierarchical clustering. Defaults to "euclidean".
        optimal_ordering (bool): Whether to optimize leaf ordering. Defaults to True.

    Returns:
        Optional[np.ndarray]: SciPy linkage matrix, or None for fewer than two rows.
    """
    if values.shape[0] < 2:
        return None
    return linkage(
        _fill_missing(values),
        method=linkage_method,
        metric=linkage_metric,
        optimal_ordering=optimal_ordering,
    )


def leaf_order(linkage_matrix: Optional[np.ndarray], n_rows: int) -> np.ndarray:
    """
    Leaf order implied by a linkage matrix (identity when there is nothing to cluster).

    Args:
        linkage_matrix (Optional[np.ndarray]): SciPy linkage matrix or None.
        n_rows (int): Number of clustered rows.

    Returns:
        np.ndarray: Local row positions in dendrogram order.
    """
    if linkage_matrix is None:
        return np.arange(n_rows)
    return leaves_list(linkage_matrix)


def kmeans_split(values: np.ndarray, k: int, *, seed: int = 123) -> np.ndarray:
    """
    Assigns rows to k groups by k-means.

    Args:
        values (np.ndarray): Row observations.
        k (int): Number of groups.

    Kwargs:
        seed (int): Random seed for centroid initialization. Defaults to 123.

    Returns:
        np.ndarray: Integer group label per row.

    Raises:
        ValueError: If k is not between 1 and the number of rows.
    """
    n_rows = values.shape[0]
    if k < 1 or k > n_rows:
        raise ValueError(f"km={k} must be between 1 and the number of rows ({n_rows})")
    if k == 1:
        return np.zeros(n_rows, dtype=int)
    _centroids, labels = kmeans2(
        _fill_missing(values),
        k,
        minit="++",
        seed=seed,
    )
    return labels.astype(int)
