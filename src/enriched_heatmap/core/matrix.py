"""
enriched_heatmap/core/matrix
~~~~~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..util.errors import MissingMetadataError


def _as_index_array(index: Optional[Sequence[int]], name: str) -> np.ndarray:
    """
    Converts a window index collection to a 1-D integer array.

    Args:
        index (Optional[Sequence[int]]): Column indices, or None for an empty segment.
        name (str): Metadata field name used in error messages.

    Returns:
        np.ndarray: Integer index array.

    Raises:
        ValueError: If the indices are not one-dimensional integers.
    """
    if index is None:
        return np.empty(0, dtype=int)
    arr = np.asarray(index)
    if arr.size == 0:
        return np.empty(0, dtype=int)
    if arr.ndim != 1:
        raise ValueError(f"`{name}` must be one-dimensional")
    if not np.issubdtype(arr.dtype, np.integer):
        raise ValueError(f"`{name}` must contain integer column indices")
    return arr.astype(int)


class NormalizedMatrix:
    """
    Immutable signal matrix aligned to target regions.

    Rows are regions and columns are windows ordered by genomic distance. The first
    columns hold the upstream flank, followed by the target body and the downstream
    flank. Window metadata is fixed at construction and never renumbered.
    """

    def __init__(
        self,
        data: Union[pd.DataFrame, np.ndarray, Sequence[Sequence[float]]],
        *,
        upstream_index: Optional[Sequence[int]],
        target_index: Optional[Sequence[int]] = None,
        downstream_index: Optional[Sequence[int]],
        extend: Tuple[float, float],
        signal_name: Optional[str] = None,
        target_name: Optional[str] = None,
    ) -> None:
        """
        Initializes NormalizedMatrix.

        Args:
            data (Union[pd.DataFrame, np.ndarray, Sequence[Sequence[float]]]): Matrix values.
                Row labels are taken from a DataFrame index when given.

        Kwargs:
            upstream_index (Optional[Sequence[int]]): Columns of the upstream flank.
            target_index (Optional[Sequence[int]]): Columns of the target body. Defaults to None.
            downstream_index (Optional[Sequence[int]]): Columns of the downstream flank.
            extend (Tuple[float, float]): Upstream and downstream extension in base pairs.
            signal_name (Optional[str]): Name of the signal. Defaults to None.
            target_name (Optional[str]): Name of the targets. Defaults to None.
        """
        if isinstance(data, pd.DataFrame):
            self.row_labels = data.index.to_numpy(dtype=object)
            values = data.to_numpy()
        else:
            values = np.asarray(data)
            self.row_labels = None

        if values.ndim != 2:
            raise ValueError("Matrix data must be two-dimensional")
        if values.size == 0:
            raise ValueError("Matrix data must not be empty")
        if not np.issubdtype(values.dtype, np.number) or np.issubdtype(values.dtype, np.complexfloating):
            raise ValueError("Matrix values must be real numbers")

        # Frozen copy
        self.values = np.array(values, dtype=float)
        self.values.setflags(write=False)
        if self.row_labels is None:
            self.row_labels = np.arange(self.values.shape[0]).astype(object)

        self.upstream_index = _as_index_array(upstream_index, "upstream_index")
        self.target_index = _as_index_array(target_index, "target_index")
        self.downstream_index = _as_index_array(downstream_index, "downstream_index")
        for arr in (self.upstream_index, self.target_index, self.downstream_index):
            arr.setflags(write=False)
        self.extend = self._validate_extend(extend)
        self.signal_name = signal_name
        self.target_name = target_name

        self._validate_windows()

    @classmethod
    def from_segments(
        cls,
        data: Union[pd.DataFrame, np.ndarray, Sequence[Sequence[float]]],
        n_upstream: int,
        n_target: int,
        n_downstream: int,
        extend: Tuple[float, float],
        **kwargs: Any,
    ) -> NormalizedMatrix:
        """
        Builds a NormalizedMatrix from segment lengths.

        Args:
            data (Union[pd.DataFrame, np.ndarray, Sequence[Sequence[float]]]): Matrix values.
            n_upstream (int): Number of upstream windows.
            n_target (int): Number of target windows.
            n_downstream (int): Number of downstream windows.
            extend (Tuple[float, float]): Upstream and downstream extension in base pairs.

        Kwargs:
            **kwargs: Passed to the constructor (signal_name, target_name).

        Returns:
            NormalizedMatrix: Matrix with contiguous window metadata.
        """
        if min(n_upstream, n_target, n_downstream) < 0:
            raise ValueError("Segment lengths must be non-negative")
        n1, n2, n3 = int(n_upstream), int(n_target), int(n_downstream)
        return cls(
            data,
            upstream_index=np.arange(0, n1),
            target_index=np.arange(n1, n1 + n2),
            downstream_index=np.arange(n1 + n2, n1 + n2 + n3),
            extend=extend,
            **kwargs,
        )

    @staticmethod
    def _validate_extend(extend: Any) -> Tuple[float, float]:
        """
        Validates the extension pair.

        Args:
            extend (Any): A scalar (applied to both sides) or a pair of distances.

        Returns:
            Tuple[float, float]: Upstream and downstream extension.

        Raises:
            ValueError: If the extension is malformed or negative.
        """
        arr = np.atleast_1d(np.asarray(extend, dtype=float))
        if arr.size == 1:
            arr = np.repeat(arr, 2)
        if arr.size != 2:
            raise ValueError("`extend` must be a scalar or a pair of distances")
        if np.any(arr < 0) or not np.all(np.isfinite(arr)):
            raise ValueError("`extend` distances must be finite and non-negative")
        return float(arr[0]), float(arr[1])

    def _validate_windows(self) -> None:
        """
        Validates that window metadata partitions a column prefix in segment order.

        Raises:
            ValueError: If segments are not contiguous, out of order, or exceed the matrix.
        """
        n1, n2, n3 = self.n_upstream, self.n_target, self.n_downstream
        n = n1 + n2 + n3
        if n == 0:
            raise ValueError("At least one of upstream, target or downstream windows must be present")
        if n > self.values.shape[1]:
            raise ValueError(
                f"Window metadata covers {n} columns but the matrix has {self.values.shape[1]}"
            )
        observed = np.concatenate([self.upstream_index, self.target_index, self.downstream_index])
        if not np.array_equal(observed, np.arange(n)):
            raise ValueError(
                "Window indices must be contiguous and ordered upstream, target, downstream "
                "starting at column 0"
            )

    @property
    def n_upstream(self) -> int:
        """Number of upstream windows."""
        return int(self.upstream_index.size)

    @property
    def n_target(self) -> int:
        """Number of target windows."""
        return int(self.target_index.size)

    @property
    def n_downstream(self) -> int:
        """Number of downstream windows."""
        return int(self.downstream_index.size)

    @property
    def n_windows(self) -> int:
        return self.n_upstream + self.n_target + self.n_downstream

    @property
    def window_values(self) -> np.ndarray:
        """Values restricted to the window columns (trailing columns are not drawn)."""
        return self.values[:, : self.n_windows]

    @property
    def target_is_single_point(self) -> bool:
        """True when targets are points, i.e. no target windows exist."""
        return self.n_target == 0

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape

    def segments(self, row: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Returns one row split into its upstream, target and downstream values.

        Args:
            row (int): Row position.

        Returns:
            Tuple[np.ndarray, np.ndarray, np.ndarray]: (upstream, target, downstream) values.
        """
        x = self.values[row]
        return x[self.upstream_index], x[self.target_index], x[self.downstream_index]

    def to_frame(self) -> pd.DataFrame:
        """
        Returns the values as a DataFrame with window metadata stored in `attrs`.

        Returns:
            pd.DataFrame: Copy of the matrix values.
        """
        df = pd.DataFrame(np.array(self.values), index=self.row_labels)
        df.attrs.update(
            {
                "upstream_index": self.upstream_index.tolist(),
                "target_index": self.target_index.tolist(),
                "downstream_index": self.downstream_index.tolist(),
                "extend": self.extend,
                "signal_name": self.signal_name,
                "target_name": self.target_name,
            }
        )
        return df

    def __repr__(self) -> str:
        n_rows, n_cols = self.shape
        return (
            f"NormalizedMatrix({n_rows} x {n_cols}, upstream={self.n_upstream}, "
            f"target={self.n_target}, downstream={self.n_downstream}, extend={self.extend})"
        )


def as_normalized_matrix(obj: Any) -> NormalizedMatrix:
    """
    Coerces an input to a NormalizedMatrix.

    DataFrames are accepted when their `attrs` carry `upstream_index`,
    `downstream_index` and `extend` (and optionally `target_index`), which is the
    layout written by `NormalizedMatrix.to_frame()`.

    Args:
        obj (Any): NormalizedMatrix or annotated DataFrame.

    Returns:
        NormalizedMatrix: The matrix with window metadata.

    Raises:
        MissingMetadataError: If the input carries no window metadata.
    """
    if isinstance(obj, NormalizedMatrix):
        return obj
    attrs = getattr(obj, "attrs", None) if isinstance(obj, pd.DataFrame) else None
    if not attrs:
        raise MissingMetadataError(
            "Matrix has no window metadata; build it with NormalizedMatrix or a DataFrame "
            "whose attrs define upstream_index, downstream_index and extend"
        )
    missing = [k for k in ("upstream_index", "downstream_index", "extend") if attrs.get(k) is None]
    if missing:
        raise MissingMetadataError(f"Matrix metadata is missing: {', '.join(missing)}")
    return NormalizedMatrix(
        obj,
        upstream_index=attrs["upstream_index"],
        target_index=attrs.get("target_index"),
        downstream_index=attrs["downstream_index"],
        extend=attrs["extend"],
        signal_name=attrs.get("signal_name"),
        target_name=attrs.get("target_name"),
    )
