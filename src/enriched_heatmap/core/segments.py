"""
enriched_heatmap/core/segments
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple, TYPE_CHECKING

from matplotlib.font_manager import FontProperties
from matplotlib.textpath import TextPath

if TYPE_CHECKING:
    from .matrix import NormalizedMatrix

# Points per millimetre
MM = 72.0 / 25.4
AXIS_MARGIN_MM = 4.0


def _format_distance(value: float) -> str:
    """
    Formats an extension distance for axis labels (integral values lose the decimals).

    Args:
        value (float): Distance in base pairs.

    Returns:
        str: Label text.
    """
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return f"{value:g}"


@dataclass(frozen=True)
class SegmentLayout:
    """
    Data class for the upstream/target/downstream window counts of a matrix.

    Positions returned by this class are fractions of the heatmap width, with window
    centres at (i - 0.5) / n.
    """

    n_upstream: int
    n_target: int
    n_downstream: int

    def __post_init__(self) -> None:
        if min(self.n_upstream, self.n_target, self.n_downstream) < 0:
            raise ValueError("Segment lengths must be non-negative")
        if self.n == 0:
            raise ValueError("At least one segment must be non-empty")

    @classmethod
    def from_matrix(cls, matrix: NormalizedMatrix) -> SegmentLayout:
        return cls(matrix.n_upstream, matrix.n_target, matrix.n_downstream)

    @property
    def n(self) -> int:
        return self.n_upstream + self.n_target + self.n_downstream

    @property
    def present(self) -> Tuple[bool, bool, bool]:
        """Which of (upstream, target, downstream) hold at least one window."""
        return self.n_upstream > 0, self.n_target > 0, self.n_downstream > 0

    def boundaries(self) -> List[float]:
        """
        Returns boundary positions of the non-empty segments.

        Returns:
            List[float]: Positions in [0, 1], one more than the number of non-empty segments.
        """
        n1, n2, n = self.n_upstream, self.n_target, self.n
        up, target, down = self.present
        first, last = 0.5 / n, (n - 0.5) / n
        up_end = (n1 - 0.5) / n
        target_end = (n1 + n2 - 0.5) / n
        if up and target and down:
            return [first, up_end, target_end, last]
        if up and down:
            return [first, up_end, last]
        if target and down:
            return [first, target_end, last]
        if up and target:
            return [first, up_end, target_end]
        return [first, last]

    def internal_boundaries(self) -> List[float]:
        """
        Returns the positions separating two non-empty segments.

        Returns:
            List[float]: At most two positions, used for position marker lines.
        """
        n1, n2, n = self.n_upstream, self.n_target, self.n
        up, target, down = self.present
        up_end = (n1 - 0.5) / n
        target_end = (n1 + n2 - 0.5) / n
        if up and target and down:
            return [up_end, target_end]
        if up and (target or down):
            return [up_end]
        if target and down:
            return [target_end]
        return []

    def default_axis_labels(self, extend: Sequence[float]) -> List[str]:
        """
        Returns default axis labels for the boundaries.

        Args:
            extend (Sequence[float]): Upstream and downstream extension in base pairs.

        Returns:
            List[str]: Labels aligned with `boundaries()`.
        """
        upstream = f"-{_format_distance(extend[0])}"
        downstream = _format_distance(extend[1])
        up, target, down = self.present
        if up and target and down:
            return [upstream, "start", "end", downstream]
        if up and down:
            return [upstream, "start", downstream]
        if target and down:
            return ["start", "end", downstream]
        if up and target:
            return [upstream, "start", "end"]
        if target:
            return ["start", "end"]
        if up:
            return [upstream, "start"]
        return ["end", downstream]


def normalize_rotation(rotation: float) -> float:
    """
    Folds a text rotation into (-90, 90] so that labels are never upside down.

    Angles in (90, 270] turn by 180 degrees (270 becomes 90), and angles in
    (270, 360) become their negative equivalent.

    Args:
        rotation (float): Rotation in degrees.

    Returns:
        float: Rotation in (-90, 90].
    """
    rot = float(rotation) % 360.0
    if 90.0 < rot <= 270.0:
        rot = (rot + 180.0) % 360.0
    if rot > 270.0:
        rot -= 360.0
    return rot


def axis_label_alignment(rotation: float, n_labels: int) -> Tuple[List[str], str]:
    """
    Resolves label justification for a normalized rotation.

    Unrotated labels hug the heatmap edges (first left, last right, middle centred)
    and hang below the ticks. Rotated labels end at the tick for positive angles and
    start at it for negative angles.

    Args:
        rotation (float): Normalized rotation in (-90, 90].
        n_labels (int): Number of labels.

    Returns:
        Tuple[List[str], str]: (horizontal alignments, vertical alignment).
    """
    if rotation == 0:
        if n_labels == 1:
            return ["center"], "top"
        ha = ["left"] + ["center"] * (n_labels - 2) + ["right"]
        return ha, "top"
    if rotation > 0:
        return ["right"] * n_labels, "center"
    return ["left"] * n_labels, "center"


def text_extent(text: str, fontprops: FontProperties) -> Tuple[float, float]:
    """
    Measures rendered text width and height in points.

    Args:
        text (str): Text to measure.
        fontprops (FontProperties): Font used for drawing.

    Returns:
        Tuple[float, float]: (width, height) in points.
    """
    if not text:
        return 0.0, 0.0
    extents = TextPath((0, 0), text, prop=fontprops).get_extents()
    return float(extents.width), float(extents.height)


def font_properties(text_gp: Optional[Mapping[str, object]] = None) -> FontProperties:
    """
    Builds FontProperties from a text style mapping.

    Args:
        text_gp (Optional[Mapping[str, object]]): Keys fontsize, fontfamily, fontweight,
            fontstyle. Defaults to None.

    Returns:
        FontProperties: Matplotlib font description.
    """
    text_gp = dict(text_gp or {})
    return FontProperties(
        family=text_gp.get("fontfamily"),
        weight=text_gp.get("fontweight", "normal"),
        style=text_gp.get("fontstyle", "normal"),
        size=text_gp.get("fontsize", 10),
    )


def axis_strip_height(
    labels: Sequence[str],
    rotation: float,
    text_gp: Optional[Mapping[str, object]] = None,
) -> float:
    """
    Computes the height of the axis strip below an enriched heatmap.

    Args:
        labels (Sequence[str]): Axis labels.
        rotation (float): Normalized rotation in degrees.
        text_gp (Optional[Mapping[str, object]]): Text style. Defaults to None.

    Returns:
        float: Height in points, including a 4 mm margin for ticks and padding.
    """
    fontprops = font_properties(text_gp)
    margin = AXIS_MARGIN_MM * MM
    if rotation == 0:
        _w, h = text_extent("a", fontprops)
        return h + margin
    widest = max((text_extent(str(lab), fontprops)[0] for lab in labels), default=0.0)
    return widest * abs(math.sin(math.radians(rotation))) + margin
