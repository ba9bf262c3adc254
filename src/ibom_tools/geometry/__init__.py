"""
Geometry helpers.

- polygon: orientation, simplicity and rotation of vertex lists
- bezier: cubic Bezier approximation of circular arcs
- encoder: flattening of shape descriptors into polygon paths
  (import from ``ibom_tools.geometry.encoder``)
"""

from .bezier import arc_to_cubics, segments_for_arc, unit_arc_error
from .polygon import (
    bounding_box,
    dedupe_vertices,
    ensure_ccw,
    is_ccw,
    is_simple,
    rotate_point,
    segments_intersect,
    signed_area,
)

__all__ = [
    "arc_to_cubics",
    "segments_for_arc",
    "unit_arc_error",
    "bounding_box",
    "dedupe_vertices",
    "ensure_ccw",
    "is_ccw",
    "is_simple",
    "rotate_point",
    "segments_intersect",
    "signed_area",
]
