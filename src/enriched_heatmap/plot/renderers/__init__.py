"""Plot layer renderers."""

from .axes import AxesRenderer
from .base import AnnotationFunction, PositionLineRegistry
from .colorbar import ColorbarRenderer
from .dendrogram import DendrogramRenderer
from .matrix import MatrixRenderer

__all__ = [
    "AnnotationFunction",
    "AxesRenderer",
    "ColorbarRenderer",
    "DendrogramRenderer",
    "MatrixRenderer",
    "PositionLineRegistry",
]
