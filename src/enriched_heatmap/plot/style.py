"""
enriched_heatmap/plot/style
~~~~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Sequence, TypeAlias, TypedDict, Union

from matplotlib.colors import Colormap

# Type alias for style values
StyleValue: TypeAlias = Union[
    str,
    float,
    int,
    bool,
    None,
    Sequence[float],
    Sequence[str],
    Mapping[str, float],
    Colormap,
]


class StyleDefaults(TypedDict):
    """
    Type class for figure style defaults. Lengths are in inches unless noted.
    """

    figure_margin: float
    heatmap_width: float
    heatmap_gap: float
    body_height: float
    slice_gap: float
    border_color: str
    border_lw: float
    pos_line_color: str
    pos_line_lw: float
    pos_line_ls: str
    axis_color: str
    axis_lw: float
    axis_fontsize: float
    annotation_height: float
    annotation_gap: float
    title_fontsize: float
    title_gap: float
    row_title_fontsize: float
    row_title_width: float
    dendro_width: float
    dendro_color: str
    dendro_lw: float
    legend_width: float
    legend_height: float
    legend_gap: float
    legend_fontsize: float
    yaxis_fontsize: float
    text_color: str
    background: Optional[str]
    dpi: float


DEFAULT_STYLE: StyleDefaults = {
    # Outer whitespace around the whole heatmap list
    "figure_margin": 0.3,
    # Heatmap columns
    "heatmap_width": 2.0,
    "heatmap_gap": 0.3,
    # Body: total height shared by all row slices
    "body_height": 4.5,
    "slice_gap": 0.06,
    "border_color": "black",
    "border_lw": 1.0,
    # Position marker lines at segment boundaries
    "pos_line_color": "black",
    "pos_line_lw": 0.8,
    "pos_line_ls": "--",
    # Axis strip below enriched heatmaps
    "axis_color": "black",
    "axis_lw": 0.8,
    "axis_fontsize": 10,
    # Top annotation track
    "annotation_height": 0.8,
    "annotation_gap": 0.08,
    # Titles
    "title_fontsize": 11,
    "title_gap": 0.08,
    "row_title_fontsize": 10,
    "row_title_width": 0.3,
    # Row dendrograms
    "dendro_width": 0.4,
    "dendro_color": "#555555",
    "dendro_lw": 0.8,
    # Legends (vertical colorbars to the right of the list)
    "legend_width": 0.15,
    "legend_height": 1.3,
    "legend_gap": 0.35,
    "legend_fontsize": 8,
    # Summary annotation y-axis
    "yaxis_fontsize": 8,
    "text_color": "black",
    "background": None,
    "dpi": 100,
}


class StyleConfig:
    """
    Class for storing figure style defaults and overrides.
    """

    def __init__(self, defaults: Optional[Mapping[str, StyleValue]] = None) -> None:
        """
        Initializes the StyleConfig instance.

        Args:
            defaults (Optional[Mapping[str, StyleValue]]): Base style defaults. Defaults to None.
        """
        if defaults is None:
            defaults = DEFAULT_STYLE
        self._defaults: Dict[str, StyleValue] = dict(defaults)
        self._overrides: Dict[str, StyleValue] = {}

    def get(self, key: str, default: Optional[StyleValue] = None) -> StyleValue:
        """
        Gets a style value with override priority.

        Args:
            key (str): Style key.
            default (Optional[StyleValue]): Default value if key not found. Defaults to None.

        Returns:
            StyleValue: Resolved style value.
        """
        if key in self._overrides:
            return self._overrides[key]
        return self._defaults.get(key, default)

    def set(self, key: str, value: StyleValue) -> None:
        """
        Overrides a style value.

        Args:
            key (str): Style key.
            value (StyleValue): Style value to set.

        Raises:
            KeyError: If the key is not a known style key.
        """
        if key not in self._defaults:
            raise KeyError(f"Unknown style key: {key!r}")
        self._overrides[key] = value

    def update(self, overrides: Optional[Mapping[str, StyleValue]]) -> StyleConfig:
        """
        Applies multiple overrides at once.

        Args:
            overrides (Optional[Mapping[str, StyleValue]]): Mapping of style keys to values.

        Returns:
            StyleConfig: This instance (for chaining).
        """
        for key, value in (overrides or {}).items():
            self.set(key, value)
        return self

    def as_dict(self) -> Dict[str, StyleValue]:
        """
        Returns a merged view of defaults and overrides.

        Returns:
            Dict[str, StyleValue]: Merged style dictionary.
        """
        merged = dict(self._defaults)
        merged.update(self._overrides)
        return merged

    def __getitem__(self, key: str) -> StyleValue:
        return self.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._overrides or key in self._defaults
