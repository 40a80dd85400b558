"""
tests/conftest
~~~~~~~~~~~~~~
"""

import numpy as np
import pandas as pd
import pytest

from enriched_heatmap import NormalizedMatrix


@pytest.fixture(scope="session")
def toy_values():
    """
    Returns toy signal values with 2 upstream, 3 target and 2 downstream windows.

    Returns:
        np.ndarray: 6 x 7 signal matrix; rows 0-2 are enriched at the target.
    """
    return np.array(
        [
            [0.0, 1.0, 4.0, 6.0, 4.0, 1.0, 0.0],
            [0.0, 0.5, 3.0, 5.0, 3.0, 0.5, 0.0],
            [0.5, 1.0, 2.0, 2.5, 2.0, 1.0, 0.5],
            [1.0, 1.0, 1.0, 1.0, 1.0, 1.0, 1.0],
            [2.0, 1.0, 0.0, 0.0, 0.0, 1.0, 2.0],
            [0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
        ]
    )


@pytest.fixture(scope="session")
def toy_df(toy_values):
    """
    Returns the toy values as a DataFrame with region labels.

    Args:
        toy_values (np.ndarray): Toy signal values.

    Returns:
        pd.DataFrame: Toy matrix DataFrame.
    """
    return pd.DataFrame(toy_values, index=[f"region{i}" for i in range(toy_values.shape[0])])


@pytest.fixture(scope="session")
def toy_matrix(toy_df):
    """
    Returns a NormalizedMatrix built from the toy DataFrame.

    Args:
        toy_df (pd.DataFrame): Toy input DataFrame.

    Returns:
        NormalizedMatrix: Matrix with upstream/target/downstream windows of 2/3/2.
    """
    return NormalizedMatrix.from_segments(toy_df, 2, 3, 2, extend=(5000, 5000), signal_name="H3K4me3")


@pytest.fixture(scope="session")
def toy_point_matrix():
    """
    Returns a matrix aligned to single-point targets (no target windows).

    Returns:
        NormalizedMatrix: Matrix with upstream/downstream windows of 3/3.
    """
    values = np.array(
        [
            [0.0, 1.0, 3.0, 3.0, 1.0, 0.0],
            [1.0, 1.0, 1.0, 1.0, 1.0, 1.0],
            [3.0, 1.0, 0.0, 0.0, 1.0, 3.0],
            [-1.0, -2.0, -3.0, 2.0, 1.0, 0.0],
        ]
    )
    return NormalizedMatrix.from_segments(values, 3, 0, 3, extend=(2000, 3000))
