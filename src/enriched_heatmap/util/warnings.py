"""
enriched_heatmap/util/warnings
"""

from __future__ import annotations

import warnings
from typing import Type


class EnrichedHeatmapWarning(UserWarning):
    """
    Warning category for options that are accepted but have no effect.
    """


def warn(
    message: str,
    category: Type[Warning] = EnrichedHeatmapWarning,
    stacklevel: int = 3,
) -> None:
    """
    Emits a warning attributed to the caller of the public API.

    Args:
        message (str): Warning message text.
        category (Type[Warning]): Warning category class. Defaults to EnrichedHeatmapWarning.
        stacklevel (int): Stacklevel to report. Defaults to 3, which points past the
            helper and the library function that called it.
    """
    warnings.warn(message, category=category, stacklevel=stacklevel)
