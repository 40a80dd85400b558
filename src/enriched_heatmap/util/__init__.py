"""Shared error and warning helpers."""

from .errors import IncompleteStyleError, MissingMetadataError
from .warnings import EnrichedHeatmapWarning, warn

__all__ = [
    "EnrichedHeatmapWarning",
    "IncompleteStyleError",
    "MissingMetadataError",
    "warn",
]
