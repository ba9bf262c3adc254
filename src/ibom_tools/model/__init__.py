"""
Board data model.

Two-phase construction: a mutable :class:`BoardBuilder` collects layers,
footprints, pads, tracks, vias, zones, drawings and edge cuts, and ``finalize()``
returns an immutable :class:`Board`.
"""

from .board import (
    Board,
    Drawing,
    DrawingKind,
    Edge,
    Footprint,
    FootprintAttribute,
    Metadata,
    Pad,
    Track,
    Via,
    Zone,
)
from .builder import DEFAULT_OUTLINE_WIDTH, BoardBuilder
from .layers import Layer, LayerKind, Side
from .shapes import (
    SHAPE_TYPES,
    Arc,
    Circle,
    Oval,
    Point,
    Polygon,
    Rect,
    RoundRect,
    Shape,
    shape_size,
    validate_shape,
)

__all__ = [
    # Builder
    "BoardBuilder",
    "DEFAULT_OUTLINE_WIDTH",
    # Records
    "Board",
    "Metadata",
    "Footprint",
    "FootprintAttribute",
    "Pad",
    "Track",
    "Via",
    "Zone",
    "Drawing",
    "DrawingKind",
    "Edge",
    # Layers
    "Layer",
    "LayerKind",
    "Side",
    # Shapes
    "Point",
    "Rect",
    "RoundRect",
    "Circle",
    "Oval",
    "Polygon",
    "Arc",
    "Shape",
    "SHAPE_TYPES",
    "validate_shape",
    "shape_size",
]
