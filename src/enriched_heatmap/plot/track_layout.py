"""
enriched_heatmap/plot/track_layout
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple


class TrackLayoutManager:
    """
    Class for stacking the tracks of one heatmap column above and below its body.

    Heights are in inches. Tracks on each side are stacked outward from the body in
    registration order.
    """

    def __init__(self) -> None:
        """
        Initializes the TrackLayoutManager instance.
        """
        self.tracks: List[Dict[str, Any]] = []

    def register_track(
        self,
        name: str,
        height: float,
        pad: float = 0.0,
        enabled: bool = True,
        side: str = "top",
    ) -> None:
        """
        Registers a track.

        Args:
            name (str): Track name.
            height (float): Track height in inches.
            pad (float): Space between this track and the previous one (or the body).
            enabled (bool): Whether the track is enabled.
            side (str): Track side, either 'top' or 'bottom'.

        Raises:
            ValueError: If the name is empty or duplicated, the side is unknown, or the
                height is negative.
        """
        # Validation
        if not isinstance(name, str) or not name:
            raise ValueError("track `name` must be a non-empty string")
        if side not in {"top", "bottom"}:
            raise ValueError("track `side` must be 'top' or 'bottom'")
        if any(t["name"] == name for t in self.tracks):
            raise ValueError(f"Track {name!r} is already registered")
        if height < 0 or pad < 0:
            raise ValueError("track `height` and `pad` must be non-negative")

        self.tracks.append(
            {
                "name": name,
                "side": side,
                "height": float(height),
                "pad": float(pad),
                "enabled": bool(enabled),
            }
        )

    def extent(self, side: str) -> float:
        """
        Total height of the enabled tracks on one side, pads included.

        Args:
            side (str): 'top' or 'bottom'.

        Returns:
            float: Height in inches.
        """
        return sum(
            t["pad"] + t["height"] for t in self.tracks if t["enabled"] and t["side"] == side
        )

    def compute_layout(
        self,
        body_bottom: float,
        body_top: float,
    ) -> Dict[str, Tuple[float, float]]:
        """
        Computes the y0/y1 geometry of all enabled tracks.

        Args:
            body_bottom (float): Lower body edge in inches from the figure bottom.
            body_top (float): Upper body edge in inches from the figure bottom.

        Returns:
            Dict[str, Tuple[float, float]]: Mapping track name -> (y0, y1).
        """
        tracks = [dict(t) for t in self.tracks if t["enabled"]]
        up = float(body_top)
        down = float(body_bottom)
        for track in tracks:
            if track["side"] == "top":
                track["y0"] = up + track["pad"]
                track["y1"] = track["y0"] + track["height"]
                up = track["y1"]
            else:
                track["y1"] = down - track["pad"]
                track["y0"] = track["y1"] - track["height"]
                down = track["y0"]
        return {t["name"]: (t["y0"], t["y1"]) for t in tracks}
