"""
tests/test_heatmap
~~~~~~~~~~~~~~~~~~
"""

import numpy as np
import pytest

from enriched_heatmap import (
    EnrichedHeatmap,
    Heatmap,
    HeatmapList,
    MissingMetadataError,
    NormalizedMatrix,
    anno_enriched,
)
from enriched_heatmap.util.warnings import EnrichedHeatmapWarning


@pytest.mark.api
def test_default_order_follows_enrichment_score(toy_matrix):
    """
    Ensures rows are ordered by decreasing enrichment score by default.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
    """
    ehm = EnrichedHeatmap(toy_matrix)
    assert ehm.row_order.tolist() == [0, 1, 2, 3, 4, 5]
    np.testing.assert_allclose(ehm.scores, [12.0, 9.0, 7.0, 5.0, 4.0, 0.0])
    assert ehm.heatmap.compute_grouping().row_order.tolist() == [0, 1, 2, 3, 4, 5]


@pytest.mark.api
def test_default_order_tracks_data_not_input_order(toy_values):
    """
    Ensures reversing the input rows reverses the score order.

    Args:
        toy_values (np.ndarray): Toy signal values.
    """
    matrix = NormalizedMatrix.from_segments(toy_values[::-1], 2, 3, 2, extend=5000)
    ehm = EnrichedHeatmap(matrix)
    assert ehm.row_order.tolist() == [5, 4, 3, 2, 1, 0]


@pytest.mark.api
def test_explicit_row_order_is_used_verbatim(toy_matrix):
    """
    Ensures a given row order skips scoring.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
    """
    ehm = EnrichedHeatmap(toy_matrix, row_order=[3, 0, 5, 1, 4, 2])
    assert ehm.scores is None
    assert ehm.heatmap.compute_grouping().row_order.tolist() == [3, 0, 5, 1, 4, 2]


@pytest.mark.api
def test_custom_score_function_changes_order(toy_matrix):
    """
    Ensures a user scorer drives the default order.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
    """
    ehm = EnrichedHeatmap(toy_matrix, score_fun=lambda x1, x2, x3: float(np.sum(x1) + np.sum(x3)))
    assert ehm.row_order[0] == 4
    assert ehm.row_order[-1] == 5


@pytest.mark.api
def test_axis_defaults_for_region_targets(toy_matrix):
    """
    Ensures target windows give four labels rotated to 90 degrees.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
    """
    ehm = EnrichedHeatmap(toy_matrix)
    assert ehm.axis_labels == ["-5000", "start", "end", "5000"]
    assert ehm.axis_rotation == 90
    assert ehm.axis_height > 0


@pytest.mark.api
def test_axis_defaults_for_point_targets(toy_point_matrix):
    """
    Ensures single-point targets give three horizontal labels.

    Args:
        toy_point_matrix (NormalizedMatrix): Matrix with 3/0/3 windows.
    """
    ehm = EnrichedHeatmap(toy_point_matrix)
    assert ehm.axis_labels == ["-2000", "start", "3000"]
    assert ehm.axis_rotation == 0


@pytest.mark.unit
def test_axis_rotation_is_normalized(toy_matrix):
    """
    Ensures rotations are folded before layout.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
    """
    assert EnrichedHeatmap(toy_matrix, axis_name_rot=270).axis_rotation == 90
    assert EnrichedHeatmap(toy_matrix, axis_name_rot=135).axis_rotation == -45


@pytest.mark.unit
def test_axis_name_count_must_match_boundaries(toy_matrix):
    """
    Ensures custom axis labels must match the number of boundaries.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
    """
    ehm = EnrichedHeatmap(toy_matrix, axis_name=["-5kb", "TSS", "TES", "5kb"])
    assert ehm.axis_labels == ["-5kb", "TSS", "TES", "5kb"]
    with pytest.raises(ValueError):
        EnrichedHeatmap(toy_matrix, axis_name=["-5kb", "TSS", "5kb"])


@pytest.mark.unit
@pytest.mark.parametrize(
    "option",
    ["cluster_columns", "show_row_names", "show_column_names", "bottom_annotation", "column_title_side"],
)
def test_reserved_options_raise(toy_matrix, option):
    """
    Ensures options reserved for the axis strip raise TypeError.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
        option (str): Reserved option name.
    """
    with pytest.raises(TypeError):
        EnrichedHeatmap(toy_matrix, **{option: None})


@pytest.mark.unit
def test_plain_array_lacks_metadata(toy_values):
    """
    Ensures EnrichedHeatmap rejects a matrix without window metadata.

    Args:
        toy_values (np.ndarray): Toy signal values.
    """
    with pytest.raises(MissingMetadataError):
        EnrichedHeatmap(toy_values)


@pytest.mark.unit
def test_cluster_rows_warns_about_ignored_order(toy_matrix):
    """
    Ensures an explicit order combined with clustering warns and clusters.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
    """
    with pytest.warns(EnrichedHeatmapWarning):
        ehm = EnrichedHeatmap(toy_matrix, row_order=[5, 4, 3, 2, 1, 0], cluster_rows=True)
    assert ehm.heatmap.row_order is None
    assert ehm.heatmap.cluster_rows
    grouping = ehm.heatmap.compute_grouping()
    assert grouping.linkages[0] is not None


@pytest.mark.api
def test_enriched_heatmap_forwards_host_options(toy_matrix):
    """
    Ensures other options reach the wrapped heatmap.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
    """
    ehm = EnrichedHeatmap(
        toy_matrix,
        name="H3K4me3",
        split=["a", "a", "b", "b", "a", "b"],
        column_title="signal",
        top_annotation=anno_enriched(),
    )
    assert ehm.name == "H3K4me3"
    assert ehm.heatmap.border
    assert not ehm.heatmap.show_column_names
    grouping = ehm.heatmap.compute_grouping()
    assert [g.tolist() for g in grouping.groups] == [[0, 1, 4], [2, 3, 5]]


@pytest.mark.api
def test_heatmap_defaults(toy_df):
    """
    Ensures plain heatmaps cluster rows and label columns by default.

    Args:
        toy_df (pd.DataFrame): Toy DataFrame without attrs.
    """
    hm = Heatmap(toy_df)
    assert hm.cluster_rows
    assert hm.show_column_names
    assert hm.row_labels[0] == "region0"
    assert hm.matrix is None
    assert sorted(hm.compute_grouping().row_order.tolist()) == list(range(6))


@pytest.mark.unit
def test_heatmap_column_clustering_reorders_columns(toy_values):
    """
    Ensures column clustering returns a permutation of the columns.

    Args:
        toy_values (np.ndarray): Toy signal values.
    """
    hm = Heatmap(toy_values, cluster_columns=True)
    assert sorted(hm.column_order().tolist()) == list(range(7))
    assert Heatmap(toy_values).column_order().tolist() == list(range(7))


@pytest.mark.unit
@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": ""},
        {"column_title_side": "left"},
        {"km": 10},
        {"width": 0},
        {"top_annotation_height": -1},
        {"row_order": [0, 1]},
        {"split": ["a", "b"]},
        {"row_labels": ["a"]},
    ],
)
def test_heatmap_rejects_invalid_options(toy_values, kwargs):
    """
    Ensures invalid options raise ValueError at construction.

    Args:
        toy_values (np.ndarray): Toy signal values.
        kwargs (dict): Invalid keyword arguments.
    """
    with pytest.raises(ValueError):
        Heatmap(toy_values, **kwargs)


@pytest.mark.unit
def test_heatmap_rejects_summary_annotation_without_metadata(toy_values):
    """
    Ensures the summary annotation needs a NormalizedMatrix.

    Args:
        toy_values (np.ndarray): Toy signal values.
    """
    with pytest.raises(MissingMetadataError):
        Heatmap(toy_values, top_annotation=anno_enriched())
    with pytest.raises(TypeError):
        Heatmap(toy_values, top_annotation="summary")


@pytest.mark.unit
def test_heatmap_color_norm_centers():
    """
    Ensures a center gives a diverging normalization around it.
    """
    values = np.array([[-1.0, 0.0], [2.0, 4.0]])
    norm = Heatmap(values, center=0.0).color_norm()
    assert norm(0.0) == pytest.approx(0.5)
    plain = Heatmap(values).color_norm()
    assert (plain.vmin, plain.vmax) == (-1.0, 4.0)


@pytest.mark.api
def test_heatmap_list_concatenation(toy_matrix, toy_df):
    """
    Ensures heatmaps combine with `+` and unnamed ones are named by position.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
        toy_df (pd.DataFrame): Toy DataFrame without attrs.
    """
    ht_list = EnrichedHeatmap(toy_matrix, name="signal") + Heatmap(toy_df)
    assert isinstance(ht_list, HeatmapList)
    assert ht_list.names == ["signal", "matrix_2"]
    ht_list = ht_list + Heatmap(toy_df, name="expr")
    assert len(ht_list) == 3
    assert ht_list["expr"].name == "expr"
    assert isinstance(ht_list[0], EnrichedHeatmap)


@pytest.mark.unit
def test_heatmap_list_validation(toy_matrix, toy_df):
    """
    Ensures mismatched rows, duplicate names and non-heatmaps are rejected.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
        toy_df (pd.DataFrame): Toy DataFrame without attrs.
    """
    ehm = EnrichedHeatmap(toy_matrix, name="signal")
    with pytest.raises(ValueError):
        ehm + Heatmap(toy_df.iloc[:3])
    with pytest.raises(ValueError):
        ehm + Heatmap(toy_df, name="signal")
    with pytest.raises(TypeError):
        ehm + toy_df
    with pytest.raises(KeyError):
        (ehm + Heatmap(toy_df)).draw(main_heatmap="missing")
    with pytest.raises(ValueError):
        HeatmapList().draw()


@pytest.mark.unit
def test_cluster_rows_skips_scoring(toy_matrix):
    """
    Ensures rows are not scored when they are clustered instead.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
    """

    def failing_score(x1, x2, x3):
        raise RuntimeError("rows should not be scored")

    with pytest.warns(EnrichedHeatmapWarning):
        ehm = EnrichedHeatmap(toy_matrix, score_fun=failing_score, cluster_rows=True)
    assert ehm.scores is None
    assert ehm.row_order is None
    assert ehm.heatmap.cluster_rows


@pytest.mark.unit
@pytest.mark.parametrize(
    "kwargs",
    [
        {"km": 2, "row_title": ["a", "b", "c"]},
        {"row_title": ["a", "b"]},
        {"km": 1, "row_title": ["a", "b"]},
    ],
)
def test_row_title_count_is_checked_without_split(toy_values, kwargs):
    """
    Ensures a row title count that does not match the slices raises at construction.

    Args:
        toy_values (np.ndarray): Toy signal values.
        kwargs (dict): Slicing options with mismatched titles.
    """
    with pytest.raises(ValueError, match="row_title"):
        Heatmap(toy_values, **kwargs)


@pytest.mark.unit
def test_row_title_matches_km_slices(toy_values):
    """
    Ensures one title per k-means slice is accepted and used.

    Args:
        toy_values (np.ndarray): Toy signal values.
    """
    hm = Heatmap(toy_values, km=2, row_title=["low", "high"])
    assert hm.compute_grouping().titles == ("low", "high")
    assert Heatmap(toy_values, row_title="all").compute_grouping().titles == ("all",)
