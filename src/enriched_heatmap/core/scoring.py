"""
enriched_heatmap/core/scoring
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import Callable, Sequence, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .matrix import NormalizedMatrix

ScoreFunction = Callable[[np.ndarray, np.ndarray, np.ndarray], float]


def enriched_score(
    x1: Sequence[float],
    x2: Sequence[float],
    x3: Sequence[float],
) -> float:
    """
    Scores how strongly a row's signal is enriched around its target.

    Values are summed with weights that grow toward the target: the upstream weight
    rises linearly to 1 at the last upstream window, the downstream weight falls
    linearly from 1 at the first downstream window, and target windows use a
    triangular weight around the middle of the target body. Empty segments contribute
    nothing. Any function with this signature can replace it as a ranking strategy.

    Args:
        x1 (Sequence[float]): Values in upstream windows.
        x2 (Sequence[float]): Values in target windows.
        x3 (Sequence[float]): Values in downstream windows.

    Returns:
        float: Enrichment score. NaN values propagate.

    Examples:
        >>> round(enriched_score([1, 2, 3], [1, 2, 1], [3, 2, 1]), 4)
        12.3333
        >>> round(enriched_score([3, 2, 1], [2, 1, 2], [1, 2, 3]), 4)
        9.6667
    """
    x1 = np.asarray(x1, dtype=float)
    x2 = np.asarray(x2, dtype=float)
    x3 = np.asarray(x3, dtype=float)
    n1, n2, n3 = x1.size, x2.size, x3.size

    score = 0.0
    if n1:
        score += float(np.sum(x1 * np.arange(1, n1 + 1) / n1))
    if n2:
        i = np.arange(1, n2 + 1)
        score += float(np.sum(x2 * np.abs(n2 / 2 - np.abs(i - n2 / 2))))
    if n3:
        score += float(np.sum(x3 * np.arange(n3, 0, -1) / n3))
    return score


def score_rows(
    matrix: NormalizedMatrix,
    score_fun: ScoreFunction = enriched_score,
) -> np.ndarray:
    """
    Applies a score function to every row of a matrix.

    Args:
        matrix (NormalizedMatrix): Matrix with window metadata.
        score_fun (ScoreFunction): Function of (upstream, target, downstream) values.
            Defaults to `enriched_score`.

    Returns:
        np.ndarray: One score per row.

    Raises:
        TypeError: If `score_fun` is not callable.
    """
    if not callable(score_fun):
        raise TypeError("`score_fun` must be a callable taking (x1, x2, x3)")
    scores = np.empty(matrix.shape[0], dtype=float)
    for row in range(matrix.shape[0]):
        x1, x2, x3 = matrix.segments(row)
        scores[row] = float(score_fun(x1, x2, x3))
    return scores


def order_by_score(scores: Sequence[float]) -> np.ndarray:
    """
    Returns row indices sorted by decreasing score.

    Ties keep their original row order and NaN scores are placed last.

    Args:
        scores (Sequence[float]): Per-row scores.

    Returns:
        np.ndarray: Row order.
    """
    scores = np.asarray(scores, dtype=float)
    # Negating keeps NaN as NaN, which a stable argsort places at the end
    return np.argsort(-scores, kind="stable")
