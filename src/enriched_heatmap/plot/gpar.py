"""
enriched_heatmap/plot/gpar
~~~~~~~~~~~~~~~~~~~~~~~~~~

Graphic parameter mappings shared by lines in the heatmap body and the summary
annotation. A mapping value is either a single value applied to every group or a
sequence with one value per group.
"""

from __future__ import annotations

import numbers
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import numpy as np
from matplotlib.colors import is_color_like

COLOR_KEYS = frozenset({"color", "pos_col", "neg_col"})
LINE_KEYS = frozenset({"color", "linewidth", "linestyle", "alpha"})
GP_KEYS = LINE_KEYS | COLOR_KEYS

_ALIASES = {
    "col": "color",
    "c": "color",
    "lwd": "linewidth",
    "lw": "linewidth",
    "lty": "linestyle",
    "ls": "linestyle",
}


def normalize_gp(gp: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    """
    Resolves key aliases and validates a graphic parameter mapping.

    Args:
        gp (Optional[Mapping[str, Any]]): Style mapping, e.g. {"color": ["red", "blue"]}.

    Returns:
        Mapping[str, Any]: Read-only mapping with canonical keys.

    Raises:
        TypeError: If `gp` is not a mapping.
        ValueError: If a key is unknown or given twice through aliases.
    """
    if gp is None:
        return MappingProxyType({})
    if not isinstance(gp, Mapping):
        raise TypeError("graphic parameters must be a mapping such as {'color': 'red'}")
    out: Dict[str, Any] = {}
    for key, value in gp.items():
        canonical = _ALIASES.get(key, key)
        if canonical not in GP_KEYS:
            raise ValueError(f"Unknown graphic parameter {key!r}; allowed: {sorted(GP_KEYS)}")
        if canonical in out:
            raise ValueError(f"Graphic parameter {canonical!r} is given more than once")
        out[canonical] = value
    return MappingProxyType(out)


def _is_dash_pattern(value: Any) -> bool:
    return (
        isinstance(value, tuple)
        and len(value) == 2
        and isinstance(value[0], numbers.Real)
        and isinstance(value[1], (tuple, list))
    )


def _is_vector(key: str, value: Any) -> bool:
    """
    Decides whether a parameter value holds one entry per group.

    Args:
        key (str): Canonical parameter name.
        value (Any): Parameter value.

    Returns:
        bool: True for per-group sequences.
    """
    if isinstance(value, (str, bytes)) or value is None:
        return False
    # An RGB(A) tuple is one color, not three groups
    if key in COLOR_KEYS and is_color_like(value):
        return False
    # An (offset, dashes) tuple is one line style
    if key == "linestyle" and _is_dash_pattern(value):
        return False
    return isinstance(value, (list, tuple, np.ndarray))


def recycle_gp(gp: Optional[Mapping[str, Any]], n: int = 1) -> Mapping[str, Any]:
    """
    Expands every parameter to exactly `n` per-group values.

    Single values are repeated; shorter sequences are recycled cyclically.

    Args:
        gp (Optional[Mapping[str, Any]]): Style mapping.
        n (int): Number of groups. Defaults to 1.

    Returns:
        Mapping[str, Any]: Read-only mapping of tuples of length `n`.

    Raises:
        ValueError: If a per-group sequence is empty.
    """
    out: Dict[str, Any] = {}
    for key, value in normalize_gp(gp).items():
        if _is_vector(key, value):
            values = list(value)
            if not values:
                raise ValueError(f"Graphic parameter {key!r} must not be empty")
            out[key] = tuple(values[i % len(values)] for i in range(n))
        else:
            out[key] = (value,) * n
    return MappingProxyType(out)


def subset_gp(gp: Mapping[str, Any], i: int = 0) -> Mapping[str, Any]:
    """
    Picks the values of group `i` from a recycled mapping.

    Args:
        gp (Mapping[str, Any]): Output of `recycle_gp`.
        i (int): Group position. Defaults to 0.

    Returns:
        Mapping[str, Any]: Read-only mapping of single values.
    """
    return MappingProxyType({key: values[i] for key, values in gp.items()})


def to_line_kwargs(
    gp: Mapping[str, Any],
    defaults: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Converts a single-group mapping to matplotlib line keyword arguments.

    Args:
        gp (Mapping[str, Any]): Single-group style mapping.
        defaults (Optional[Mapping[str, Any]]): Values used for missing keys. Defaults to None.

    Returns:
        Dict[str, Any]: Keyword arguments for `Axes.plot`/`Axes.axvline`.
    """
    kwargs = {k: v for k, v in (defaults or {}).items() if v is not None}
    kwargs.update({k: v for k, v in gp.items() if k in LINE_KEYS and v is not None})
    return kwargs
