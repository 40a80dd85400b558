"""
enriched_heatmap/util/errors
~~~~~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations


class MissingMetadataError(ValueError):
    """
    Raised when a matrix carries no upstream/target/downstream window metadata.
    """


class IncompleteStyleError(ValueError):
    """
    Raised when the positive/negative color pair of a split summary is half-specified.
    """
