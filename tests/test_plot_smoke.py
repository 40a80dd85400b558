"""
tests/test_plot_smoke
~~~~~~~~~~~~~~~~~~~~~
"""

import matplotlib.pyplot as plt
import numpy as np
import pytest

from enriched_heatmap import EnrichedHeatmap, Heatmap, anno_enriched


def _use_agg_backend():
    """
    Configures Matplotlib to use the Agg backend for tests.

    Returns:
        Any: Matplotlib pyplot module with Agg backend active.
    """
    matplotlib = pytest.importorskip("matplotlib")
    matplotlib.use("Agg", force=True)
    return plt


@pytest.mark.api
def test_enriched_heatmap_smoke(toy_matrix, tmp_path):
    """
    Ensures an enriched heatmap with a summary annotation renders and saves.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
        tmp_path (Path): Temporary directory.
    """
    plt = _use_agg_backend()
    ehm = EnrichedHeatmap(
        toy_matrix,
        name="H3K4me3",
        top_annotation=anno_enriched(),
        column_title="H3K4me3",
    )
    out = tmp_path / "enriched.png"
    rendered = ehm.save(out)
    try:
        assert out.exists()
        assert out.stat().st_size > 0
        assert rendered.grouping.row_order.tolist() == ehm.row_order.tolist()
    finally:
        plt.close("all")


@pytest.mark.api
def test_split_and_error_bands_smoke(toy_matrix):
    """
    Ensures split slices with per-slice colors and error bands render.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
    """
    plt = _use_agg_backend()
    ehm = EnrichedHeatmap(
        toy_matrix,
        split=["high", "high", "high", "low", "low", "low"],
        top_annotation=anno_enriched(gp={"color": ["red", "blue"]}, show_error=True),
        cmap=["white", "red"],
    )
    rendered = ehm.draw()
    try:
        assert len(rendered.axes["matrix_1"]["body"]) == 2
        anno_ax = rendered.axes["matrix_1"]["top_annotation"]
        assert len(anno_ax.lines) == 2
        assert len(anno_ax.collections) >= 2
    finally:
        plt.close("all")


@pytest.mark.api
def test_kmeans_and_sign_split_smoke(toy_point_matrix):
    """
    Ensures k-means slicing with a sign-split summary renders.

    Args:
        toy_point_matrix (NormalizedMatrix): Matrix with 3/0/3 windows.
    """
    plt = _use_agg_backend()
    ehm = EnrichedHeatmap(
        toy_point_matrix,
        km=2,
        top_annotation=anno_enriched(gp={"pos_col": "red", "neg_col": "darkgreen"}, yaxis_side="left"),
        center=0.0,
        cmap=["blue", "white", "red"],
    )
    rendered = ehm.draw()
    try:
        assert rendered.grouping.titles == ("cluster1", "cluster2")
        assert len(rendered.axes["matrix_1"]["top_annotation"].lines) == 4
    finally:
        plt.close("all")


@pytest.mark.api
def test_heatmap_list_smoke(toy_matrix, toy_df):
    """
    Ensures an enriched heatmap next to a clustered plain heatmap renders.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
        toy_df (pd.DataFrame): Toy DataFrame without attrs.
    """
    plt = _use_agg_backend()
    expr = Heatmap(
        toy_df.iloc[:, :3],
        name="expr",
        show_row_names=True,
        cluster_columns=True,
        width=0.8,
    )
    ht_list = EnrichedHeatmap(toy_matrix, name="signal", axis_name_rot=45) + expr
    rendered = ht_list.draw(main_heatmap="expr")
    try:
        assert set(rendered.axes) == {"signal", "expr"}
        assert "dendrogram" in rendered.axes["expr"]
        assert "dendrogram" not in rendered.axes["signal"]
        assert "axis" in rendered.axes["signal"]
        assert "axis" not in rendered.axes["expr"]
    finally:
        plt.close("all")


@pytest.mark.unit
def test_callable_annotation_receives_grouping(toy_matrix):
    """
    Ensures a plain function annotation is called with the final grouping.

    Args:
        toy_matrix (NormalizedMatrix): Toy matrix with 2/3/2 windows.
    """
    plt = _use_agg_backend()
    seen = {}

    def record(ax, matrix, grouping, column_index, style):
        seen["rows"] = grouping.row_order.tolist()
        seen["columns"] = np.asarray(column_index).tolist()
        ax.bar(np.arange(len(column_index)), np.ones(len(column_index)))

    ehm = EnrichedHeatmap(toy_matrix, row_order=[5, 4, 3, 2, 1, 0], top_annotation=record)
    ehm.draw()
    try:
        assert seen["rows"] == [5, 4, 3, 2, 1, 0]
        assert seen["columns"] == list(range(7))
    finally:
        plt.close("all")
