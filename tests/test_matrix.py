"""
tests/test_matrix
~~~~~~~~~~~~~~~~~
"""

import numpy as np
import pandas as pd
import pytest

from enriched_heatmap import MissingMetadataError, NormalizedMatrix
from enriched_heatmap.core.matrix import as_normalized_matrix


@pytest.mark.api
def test_matrix_segment_lengths(toy_matrix):
    """
    Ensures segment lengths and row labels are taken from the inputs.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
    """
    assert (toy_matrix.n_upstream, toy_matrix.n_target, toy_matrix.n_downstream) == (2, 3, 2)
    assert toy_matrix.n_windows == 7
    assert toy_matrix.row_labels[0] == "region0"
    assert toy_matrix.extend == (5000.0, 5000.0)
    assert not toy_matrix.target_is_single_point


@pytest.mark.api
def test_matrix_segments_split_a_row(toy_matrix):
    """
    Ensures a row is split into its upstream, target and downstream values.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
    """
    x1, x2, x3 = toy_matrix.segments(0)
    assert x1.tolist() == [0.0, 1.0]
    assert x2.tolist() == [4.0, 6.0, 4.0]
    assert x3.tolist() == [1.0, 0.0]


@pytest.mark.unit
def test_matrix_values_are_read_only(toy_matrix):
    """
    Ensures stored values and window metadata cannot be modified in place.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
    """
    with pytest.raises(ValueError):
        toy_matrix.values[0, 0] = 10.0
    with pytest.raises(ValueError):
        toy_matrix.upstream_index[0] = 3


@pytest.mark.unit
def test_matrix_trailing_columns_are_not_windows():
    """
    Ensures columns after the last window are excluded from window values.
    """
    values = np.arange(12, dtype=float).reshape(2, 6)
    matrix = NormalizedMatrix.from_segments(values, 2, 0, 2, extend=(100, 100))
    assert matrix.shape == (2, 6)
    assert matrix.window_values.shape == (2, 4)
    assert matrix.target_is_single_point


@pytest.mark.unit
@pytest.mark.parametrize(
    "kwargs",
    [
        {"upstream_index": [0, 1], "target_index": [3], "downstream_index": [4]},
        {"upstream_index": [1, 0], "target_index": [], "downstream_index": [2]},
        {"upstream_index": [], "target_index": [], "downstream_index": []},
        {"upstream_index": [0, 1, 2], "target_index": [3, 4], "downstream_index": [5, 6, 7]},
    ],
)
def test_matrix_rejects_invalid_windows(kwargs):
    """
    Ensures gaps, wrong order, empty or oversized window sets raise ValueError.

    Args:
        kwargs (dict): Window index arguments.
    """
    with pytest.raises(ValueError):
        NormalizedMatrix(np.zeros((2, 7)), extend=(10, 10), **kwargs)


@pytest.mark.unit
@pytest.mark.parametrize("extend", [(-1, 5), (1, 2, 3), (np.inf, 1)])
def test_matrix_rejects_invalid_extend(extend):
    """
    Ensures malformed or negative extensions raise ValueError.

    Args:
        extend (tuple): Extension value.
    """
    with pytest.raises(ValueError):
        NormalizedMatrix.from_segments(np.zeros((2, 3)), 1, 1, 1, extend=extend)


@pytest.mark.unit
def test_matrix_rejects_non_numeric_values():
    """
    Ensures non-numeric data raises ValueError.
    """
    with pytest.raises(ValueError):
        NormalizedMatrix.from_segments(np.array([["a", "b"]]), 1, 0, 1, extend=1)


@pytest.mark.api
def test_frame_round_trip_keeps_metadata(toy_matrix):
    """
    Ensures a DataFrame written by to_frame() converts back with its metadata.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
    """
    df = toy_matrix.to_frame()
    restored = as_normalized_matrix(df)
    assert (restored.n_upstream, restored.n_target, restored.n_downstream) == (2, 3, 2)
    assert restored.signal_name == "H3K4me3"
    assert restored.row_labels.tolist() == toy_matrix.row_labels.tolist()
    np.testing.assert_array_equal(restored.values, toy_matrix.values)


@pytest.mark.api
def test_plain_frame_lacks_metadata(toy_df):
    """
    Ensures a DataFrame without window metadata raises MissingMetadataError.

    Args:
        toy_df (pd.DataFrame): Toy DataFrame without attrs.
    """
    with pytest.raises(MissingMetadataError):
        as_normalized_matrix(toy_df)
    with pytest.raises(MissingMetadataError):
        as_normalized_matrix(np.zeros((2, 2)))


@pytest.mark.unit
def test_partial_metadata_is_reported():
    """
    Ensures incomplete attrs name the missing fields.
    """
    df = pd.DataFrame(np.zeros((2, 2)))
    df.attrs["upstream_index"] = [0]
    with pytest.raises(MissingMetadataError, match="downstream_index"):
        as_normalized_matrix(df)
