"""
tests/test_gpar
~~~~~~~~~~~~~~~
"""

import numpy as np
import pytest

from enriched_heatmap.plot.gpar import normalize_gp, recycle_gp, subset_gp, to_line_kwargs


@pytest.mark.api
def test_scalar_broadcasts_to_all_groups():
    """
    Ensures a single value is applied identically to every group.
    """
    gp = recycle_gp({"color": "red", "linewidth": 2.0}, 3)
    groups = [subset_gp(gp, i) for i in range(3)]
    assert [g["color"] for g in groups] == ["red"] * 3
    assert [g["linewidth"] for g in groups] == [2.0] * 3


@pytest.mark.api
def test_sequence_maps_one_to_one():
    """
    Ensures one value per group is used in group order.
    """
    gp = recycle_gp({"color": ["red", "green", "blue"]}, 3)
    assert [subset_gp(gp, i)["color"] for i in range(3)] == ["red", "green", "blue"]


@pytest.mark.api
def test_fields_recycle_independently():
    """
    Ensures scalar and per-group fields can be mixed.
    """
    gp = recycle_gp({"color": ["red", "blue"], "linestyle": "--", "alpha": [0.2, 0.4, 0.6]}, 3)
    assert gp["color"] == ("red", "blue", "red")
    assert gp["linestyle"] == ("--", "--", "--")
    assert gp["alpha"] == (0.2, 0.4, 0.6)


@pytest.mark.unit
def test_rgb_tuple_is_one_color():
    """
    Ensures an RGB(A) tuple is treated as a single color, not three groups.
    """
    gp = recycle_gp({"color": (1.0, 0.0, 0.0)}, 2)
    assert gp["color"] == ((1.0, 0.0, 0.0), (1.0, 0.0, 0.0))
    gp = recycle_gp({"pos_col": np.array([0.0, 0.0, 1.0, 0.5])}, 2)
    assert np.allclose(gp["pos_col"][1], [0.0, 0.0, 1.0, 0.5])


@pytest.mark.unit
def test_dash_tuple_is_one_linestyle():
    """
    Ensures an (offset, dashes) tuple is a single line style, while a list of styles
    is recycled per group.
    """
    gp = recycle_gp({"linestyle": (0, (5, 5))}, 2)
    assert gp["linestyle"] == ((0, (5, 5)), (0, (5, 5)))
    assert to_line_kwargs(subset_gp(gp, 1))["linestyle"] == (0, (5, 5))
    gp = recycle_gp({"ls": [(0, (5, 5)), "-"]}, 3)
    assert gp["linestyle"] == ((0, (5, 5)), "-", (0, (5, 5)))


@pytest.mark.unit
def test_aliases_resolve_to_canonical_keys():
    """
    Ensures short aliases map to matplotlib names.
    """
    gp = normalize_gp({"col": "red", "lwd": 2, "lty": ":"})
    assert dict(gp) == {"color": "red", "linewidth": 2, "linestyle": ":"}


@pytest.mark.unit
def test_unknown_or_duplicate_keys_raise():
    """
    Ensures unknown keys and keys given twice through aliases raise ValueError.
    """
    with pytest.raises(ValueError):
        normalize_gp({"fill": "red"})
    with pytest.raises(ValueError):
        normalize_gp({"col": "red", "color": "blue"})
    with pytest.raises(TypeError):
        normalize_gp(["red"])


@pytest.mark.unit
def test_empty_sequence_raises():
    """
    Ensures an empty per-group sequence raises ValueError.
    """
    with pytest.raises(ValueError):
        recycle_gp({"color": []}, 2)


@pytest.mark.unit
def test_recycled_mapping_is_read_only():
    """
    Ensures recycled styles cannot be mutated.
    """
    gp = recycle_gp({"color": "red"}, 2)
    with pytest.raises(TypeError):
        gp["color"] = ("blue", "blue")


@pytest.mark.api
def test_to_line_kwargs_fills_defaults_and_drops_colors():
    """
    Ensures defaults fill missing keys and sign colors are not passed to lines.
    """
    kwargs = to_line_kwargs(
        {"linewidth": 3.0, "pos_col": "red", "neg_col": "blue"},
        {"color": "black", "linewidth": 1.0},
    )
    assert kwargs == {"color": "black", "linewidth": 3.0}
