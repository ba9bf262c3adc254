"""
Shape flattening.

The viewer draws every pad, zone and drawing from a single primitive: a
polygon given as an SVG-style path. :class:`GeometryEncoder` turns each shape
variant into that form:

- Rect: four line segments
- RoundRect: straight edges with cubic Bezier quarter-circle corners
- Circle: at least ``min_circle_segments`` Bezier pieces, more until the
  deviation from the true circle is within tolerance
- Oval: straight sides joined by Bezier semicircles
- Polygon: vertices passed through, winding normalized
- Arc: open path of Bezier pieces

Closed outlines always run counter-clockwise (positive shoelace area) and
arcs always advance counter-clockwise. Coordinates stay in nanometres;
unit conversion is the serializer's job.

Example::

    from ibom_tools.geometry.encoder import GeometryEncoder
    from ibom_tools.model import Circle, Point

    geom = GeometryEncoder().encode(Circle(Point(0, 0), 500_000))
    len(geom.segments)  # MoveTo, 4 x CubicTo, ClosePath
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from ..config import EncoderConfig
from ..exceptions import GeometryError
from ..model.shapes import Arc, Circle, Oval, Polygon, Rect, RoundRect, Shape, validate_shape
from .bezier import arc_to_cubics, segments_for_arc
from .polygon import Vertex, dedupe_vertices, ensure_ccw, rotate_point

logger = logging.getLogger(__name__)

__all__ = [
    "MoveTo",
    "LineTo",
    "CubicTo",
    "ClosePath",
    "PathSegment",
    "EncodedGeometry",
    "GeometryEncoder",
]


@dataclass(frozen=True)
class MoveTo:
    point: Vertex


@dataclass(frozen=True)
class LineTo:
    point: Vertex


@dataclass(frozen=True)
class CubicTo:
    c1: Vertex
    c2: Vertex
    point: Vertex


@dataclass(frozen=True)
class ClosePath:
    pass


PathSegment = Union[MoveTo, LineTo, CubicTo, ClosePath]


@dataclass(frozen=True)
class EncodedGeometry:
    """
    A shape in the viewer's polygon-with-path form.

    Attributes:
        segments: Path commands in nanometres
        outline: On-curve vertices in path order (no repeated closing vertex)
        closed: Whether the path ends with ClosePath
        kind: Always "polygon"
    """

    segments: Tuple[PathSegment, ...]
    outline: Tuple[Vertex, ...]
    closed: bool
    kind: str = "polygon"

    def points(self) -> List[Vertex]:
        """Every point of the path, control points included."""
        pts: List[Vertex] = []
        for seg in self.segments:
            if isinstance(seg, CubicTo):
                pts.extend((seg.c1, seg.c2, seg.point))
            elif isinstance(seg, (MoveTo, LineTo)):
                pts.append(seg.point)
        return pts

    def bbox(self) -> Tuple[float, float, float, float]:
        """
        Bounding box (min_x, min_y, max_x, max_y).

        Uses control points as well, so it always contains the curve.
        """
        pts = self.points()
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        return (min(xs), min(ys), max(xs), max(ys))


class _PathWriter:
    """Collects path segments in shape-local coordinates."""

    def __init__(self, encoder: GeometryEncoder):
        self._encoder = encoder
        self.segments: List[PathSegment] = []
        self.outline: List[Vertex] = []
        self._current: Optional[Vertex] = None

    def move(self, p: Vertex) -> None:
        self.segments.append(MoveTo(p))
        self.outline.append(p)
        self._current = p

    def line(self, p: Vertex) -> None:
        if p == self._current:
            return
        self.segments.append(LineTo(p))
        self.outline.append(p)
        self._current = p

    def arc(self, center: Vertex, radius: float, start_deg: float, sweep_deg: float,
            min_segments: int = 1) -> None:
        cfg = self._encoder.config
        sweep = math.radians(sweep_deg)
        n = segments_for_arc(
            radius,
            sweep,
            cfg.tolerance(radius),
            min_segments=min_segments,
            max_segments=cfg.max_segments,
            samples=cfg.samples_per_segment,
        )
        pieces = arc_to_cubics(center[0], center[1], radius, math.radians(start_deg), sweep, n)
        if self._current is None:
            self.move(pieces[0][0])
        for _, c1, c2, end in pieces:
            self.segments.append(CubicTo(c1, c2, end))
            self.outline.append(end)
            self._current = end

    def close(self) -> None:
        self.segments.append(ClosePath())
        if len(self.outline) > 1 and _same(self.outline[0], self.outline[-1]):
            self.outline.pop()

    def build(self, closed: bool, center: Vertex = (0.0, 0.0), rotation: float = 0.0) -> EncodedGeometry:
        """Rotate about the local origin, then move to ``center``."""

        def place(p: Vertex) -> Vertex:
            x, y = rotate_point(p[0], p[1], rotation)
            return (x + center[0], y + center[1])

        segments: List[PathSegment] = []
        for seg in self.segments:
            if isinstance(seg, MoveTo):
                segments.append(MoveTo(place(seg.point)))
            elif isinstance(seg, LineTo):
                segments.append(LineTo(place(seg.point)))
            elif isinstance(seg, CubicTo):
                segments.append(CubicTo(place(seg.c1), place(seg.c2), place(seg.point)))
            else:
                segments.append(seg)
        return EncodedGeometry(
            segments=tuple(segments),
            outline=tuple(place(p) for p in self.outline),
            closed=closed,
        )


def _same(a: Vertex, b: Vertex) -> bool:
    return math.isclose(a[0], b[0], abs_tol=1e-6) and math.isclose(a[1], b[1], abs_tol=1e-6)


class GeometryEncoder:
    """
    Converts shape descriptors into :class:`EncodedGeometry`.

    Stateless apart from its configuration; one encoder can be shared.
    """

    def __init__(self, config: Optional[EncoderConfig] = None):
        self.config = config or EncoderConfig()

    def encode(self, shape: Shape) -> EncodedGeometry:
        """
        Flatten a shape.

        Raises:
            GeometryError: If the shape is degenerate or of an unknown type
        """
        validate_shape(shape)

        if isinstance(shape, Rect):
            geom = self._encode_rect(shape)
        elif isinstance(shape, RoundRect):
            geom = self._encode_roundrect(shape)
        elif isinstance(shape, Circle):
            geom = self._encode_circle(shape)
        elif isinstance(shape, Oval):
            geom = self._encode_oval(shape)
        elif isinstance(shape, Polygon):
            geom = self._encode_polygon(shape)
        elif isinstance(shape, Arc):
            geom = self._encode_arc(shape)
        else:
            raise GeometryError(f"Unsupported shape type: {type(shape).__name__}")

        logger.debug("Encoded %s into %d path segments", type(shape).__name__, len(geom.segments))
        return geom

    def _encode_rect(self, shape: Rect) -> EncodedGeometry:
        hw, hh = shape.width / 2, shape.height / 2
        path = _PathWriter(self)
        path.move((-hw, -hh))
        path.line((hw, -hh))
        path.line((hw, hh))
        path.line((-hw, hh))
        path.close()
        return path.build(True, shape.center.tuple(), shape.rotation)

    def _encode_roundrect(self, shape: RoundRect) -> EncodedGeometry:
        if shape.radius == 0:
            return self._encode_rect(Rect(shape.center, shape.width, shape.height, shape.rotation))
        hw, hh, r = shape.width / 2, shape.height / 2, float(shape.radius)
        path = _PathWriter(self)
        path.move((-hw + r, -hh))
        path.line((hw - r, -hh))
        path.arc((hw - r, -hh + r), r, -90, 90)
        path.line((hw, hh - r))
        path.arc((hw - r, hh - r), r, 0, 90)
        path.line((-hw + r, hh))
        path.arc((-hw + r, hh - r), r, 90, 90)
        path.line((-hw, -hh + r))
        path.arc((-hw + r, -hh + r), r, 180, 90)
        path.close()
        return path.build(True, shape.center.tuple(), shape.rotation)

    def _encode_circle(self, shape: Circle) -> EncodedGeometry:
        path = _PathWriter(self)
        path.arc((0.0, 0.0), float(shape.radius), 0, 360, self.config.min_circle_segments)
        path.close()
        return path.build(True, shape.center.tuple())

    def _encode_oval(self, shape: Oval) -> EncodedGeometry:
        if shape.width == shape.height:
            return self._encode_circle(Circle(shape.center, shape.width // 2))
        path = _PathWriter(self)
        if shape.width > shape.height:
            r = shape.height / 2
            a = shape.width / 2 - r
            path.move((-a, -r))
            path.line((a, -r))
            path.arc((a, 0.0), r, -90, 180)
            path.line((-a, r))
            path.arc((-a, 0.0), r, 90, 180)
        else:
            r = shape.width / 2
            a = shape.height / 2 - r
            path.move((r, -a))
            path.line((r, a))
            path.arc((0.0, a), r, 0, 180)
            path.line((-r, -a))
            path.arc((0.0, -a), r, 180, 180)
        path.close()
        return path.build(True, shape.center.tuple(), shape.rotation)

    def _encode_polygon(self, shape: Polygon) -> EncodedGeometry:
        vertices = ensure_ccw(dedupe_vertices([p.tuple() for p in shape.points]))
        path = _PathWriter(self)
        path.move(vertices[0])
        for v in vertices[1:]:
            path.line(v)
        path.close()
        return path.build(True)

    def _encode_arc(self, shape: Arc) -> EncodedGeometry:
        start, sweep = shape.start_angle, shape.sweep_angle
        if sweep < 0:
            start, sweep = start + sweep, -sweep
        path = _PathWriter(self)
        path.arc((0.0, 0.0), float(shape.radius), start, sweep)
        return path.build(False, shape.center.tuple())
