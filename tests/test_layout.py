"""
tests/test_layout
~~~~~~~~~~~~~~~~~
"""

import numpy as np
import pandas as pd
import pytest

from enriched_heatmap.core.clustering import compute_linkage, kmeans_split, leaf_order
from enriched_heatmap.core.layout import RowGrouping, compute_row_grouping
from enriched_heatmap.plot.track_layout import TrackLayoutManager


@pytest.mark.api
def test_single_group_follows_row_order(toy_values):
    """
    Ensures an explicit row order is used verbatim without clustering or splitting.

    Args:
        toy_values (np.ndarray): Toy signal values.
    """
    grouping = compute_row_grouping(toy_values, row_order=[5, 3, 1, 0, 2, 4])
    assert len(grouping) == 1
    assert grouping.row_order.tolist() == [5, 3, 1, 0, 2, 4]
    assert grouping.titles == (None,)
    assert grouping.linkages == (None,)


@pytest.mark.api
def test_split_keeps_row_order_within_levels(toy_values):
    """
    Ensures split slices follow level order and keep the row order inside each slice.

    Args:
        toy_values (np.ndarray): Toy signal values.
    """
    split = ["b", "a", "b", "a", "b", "a"]
    grouping = compute_row_grouping(toy_values, row_order=[5, 4, 3, 2, 1, 0], split=split)
    assert grouping.titles == ("a", "b")
    assert [g.tolist() for g in grouping.groups] == [[5, 3, 1], [4, 2, 0]]
    assert grouping.sizes == [3, 3]
    assert grouping.n_rows == 6


@pytest.mark.api
def test_split_uses_categorical_level_order(toy_values):
    """
    Ensures categorical levels define the slice order and unused levels are dropped.

    Args:
        toy_values (np.ndarray): Toy signal values.
    """
    split = pd.Categorical(
        ["low", "high", "low", "high", "low", "high"],
        categories=["high", "mid", "low"],
    )
    grouping = compute_row_grouping(toy_values, split=pd.Series(split))
    assert grouping.titles == ("high", "low")
    assert grouping.groups[0].tolist() == [1, 3, 5]


@pytest.mark.unit
def test_split_validation(toy_values):
    """
    Ensures wrong-length or missing split labels raise ValueError.

    Args:
        toy_values (np.ndarray): Toy signal values.
    """
    with pytest.raises(ValueError):
        compute_row_grouping(toy_values, split=["a", "b"])
    with pytest.raises(ValueError):
        compute_row_grouping(toy_values, split=["a", None, "a", "b", "b", "b"])


@pytest.mark.unit
def test_row_title_overrides_and_checks_count(toy_values):
    """
    Ensures row titles replace level names and must match the number of slices.

    Args:
        toy_values (np.ndarray): Toy signal values.
    """
    split = ["x", "x", "x", "y", "y", "y"]
    grouping = compute_row_grouping(toy_values, split=split, row_title=["top", "bottom"])
    assert grouping.titles == ("top", "bottom")
    with pytest.raises(ValueError):
        compute_row_grouping(toy_values, split=split, row_title=["only"])


@pytest.mark.unit
def test_row_order_must_be_permutation(toy_values):
    """
    Ensures incomplete or repeated row orders raise ValueError.

    Args:
        toy_values (np.ndarray): Toy signal values.
    """
    with pytest.raises(ValueError):
        compute_row_grouping(toy_values, row_order=[0, 1, 2])
    with pytest.raises(ValueError):
        compute_row_grouping(toy_values, row_order=[0, 0, 1, 2, 3, 4])


@pytest.mark.api
def test_cluster_rows_stores_linkage_per_slice(toy_values):
    """
    Ensures clustering reorders rows within slices and keeps each slice's linkage.

    Args:
        toy_values (np.ndarray): Toy signal values.
    """
    split = ["a", "a", "a", "b", "b", "b"]
    grouping = compute_row_grouping(toy_values, cluster_rows=True, split=split)
    assert all(z is not None for z in grouping.linkages)
    assert sorted(grouping.groups[0].tolist()) == [0, 1, 2]
    assert sorted(grouping.groups[1].tolist()) == [3, 4, 5]


@pytest.mark.api
def test_km_groups_are_titled_in_drawing_order():
    """
    Ensures k-means slices are named cluster1..k in the order they are drawn.
    """
    values = np.vstack([np.zeros((4, 3)), np.full((4, 3), 10.0)])
    values = values + np.linspace(0, 0.1, 8)[:, None]
    grouping = compute_row_grouping(values, row_order=[7, 6, 5, 4, 3, 2, 1, 0], km=2)
    assert grouping.titles == ("cluster1", "cluster2")
    assert grouping.groups[0].tolist() == [7, 6, 5, 4]
    assert grouping.groups[1].tolist() == [3, 2, 1, 0]


@pytest.mark.unit
def test_kmeans_split_bounds():
    """
    Ensures k must lie between 1 and the number of rows.
    """
    values = np.arange(6, dtype=float).reshape(3, 2)
    assert kmeans_split(values, 1).tolist() == [0, 0, 0]
    with pytest.raises(ValueError):
        kmeans_split(values, 4)
    with pytest.raises(ValueError):
        kmeans_split(values, 0)


@pytest.mark.unit
def test_linkage_handles_missing_values_and_single_rows():
    """
    Ensures NaN values are filled before clustering and one row needs no linkage.
    """
    values = np.array([[0.0, np.nan], [0.1, 1.0], [5.0, 5.0]])
    z = compute_linkage(values)
    assert z.shape == (2, 4)
    assert sorted(leaf_order(z, 3).tolist()) == [0, 1, 2]
    assert compute_linkage(values[:1]) is None
    assert leaf_order(None, 1).tolist() == [0]


@pytest.mark.unit
def test_row_grouping_rejects_mismatched_fields():
    """
    Ensures groups, titles and linkages must align.
    """
    with pytest.raises(ValueError):
        RowGrouping(groups=(np.arange(2),), titles=(None, None), linkages=(None,))


@pytest.mark.api
def test_track_layout_stacks_outward_from_body():
    """
    Ensures top tracks stack upward and bottom tracks downward in registration order.
    """
    tracks = TrackLayoutManager()
    tracks.register_track("annotation", 0.8, pad=0.1)
    tracks.register_track("axis", 0.3, side="bottom")
    tracks.register_track("title", 0.2, pad=0.05)
    tracks.register_track("hidden", 1.0, enabled=False)
    layout = tracks.compute_layout(1.0, 5.0)
    assert layout["annotation"] == pytest.approx((5.1, 5.9))
    assert layout["title"] == pytest.approx((5.95, 6.15))
    assert layout["axis"] == pytest.approx((0.7, 1.0))
    assert "hidden" not in layout
    assert tracks.extent("top") == pytest.approx(1.15)
    assert set(tracks.tracks[0]) == {"name", "side", "height", "pad", "enabled"}
    assert tracks.extent("bottom") == pytest.approx(0.3)


@pytest.mark.unit
def test_track_layout_validation():
    """
    Ensures invalid track registrations raise ValueError.
    """
    tracks = TrackLayoutManager()
    tracks.register_track("a", 1.0)
    with pytest.raises(ValueError):
        tracks.register_track("a", 1.0)
    with pytest.raises(ValueError):
        tracks.register_track("b", 1.0, side="left")
    with pytest.raises(ValueError):
        tracks.register_track("c", -1.0)
