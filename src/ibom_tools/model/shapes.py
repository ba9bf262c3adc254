"""
Shape descriptors.

A closed set of shape variants shared by pads, zones, drawings and the board
outline. All lengths are integer nanometres (see :mod:`ibom_tools.units`).
Angles are in degrees; ``rotation`` follows the renderer convention (positive
turns counter-clockwise on screen), arc angles are measured in the board's
mathematical frame, where positive sweeps run counter-clockwise.

Example::

    from ibom_tools.model.shapes import Circle, Point, Rect
    from ibom_tools.units import mm

    pad = Rect(Point(0, 0), mm(1.0), mm(0.6))
    hole = Circle(Point.from_mm(2.54, 0), mm(0.4))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..exceptions import GeometryError
from ..geometry.polygon import dedupe_vertices, is_simple, signed_area
from ..units import mm

__all__ = [
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


@dataclass(frozen=True)
class Point:
    """2D point in nanometres."""

    x: int
    y: int

    @classmethod
    def from_mm(cls, x: float, y: float) -> Point:
        return cls(mm(x), mm(y))

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def tuple(self) -> tuple[int, int]:
        return (self.x, self.y)


ORIGIN = Point(0, 0)


@dataclass(frozen=True)
class Rect:
    """Rectangle centred on ``center``."""

    center: Point
    width: int
    height: int
    rotation: float = 0.0


@dataclass(frozen=True)
class RoundRect:
    """Rectangle with circular corners of ``radius``."""

    center: Point
    width: int
    height: int
    radius: int
    rotation: float = 0.0


@dataclass(frozen=True)
class Circle:
    center: Point
    radius: int


@dataclass(frozen=True)
class Oval:
    """Stadium (obround): a rectangle whose short sides are semicircles."""

    center: Point
    width: int
    height: int
    rotation: float = 0.0


@dataclass(frozen=True)
class Polygon:
    """Arbitrary simple polygon; the closing edge is implicit."""

    points: tuple[Point, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))

    @classmethod
    def from_mm(cls, points: list[tuple[float, float]]) -> Polygon:
        return cls(tuple(Point.from_mm(x, y) for x, y in points))


@dataclass(frozen=True)
class Arc:
    """Open circular arc starting at ``start_angle`` and turning ``sweep_angle``."""

    center: Point
    radius: int
    start_angle: float
    sweep_angle: float


Shape = Union[Rect, RoundRect, Circle, Oval, Polygon, Arc]
SHAPE_TYPES = (Rect, RoundRect, Circle, Oval, Polygon, Arc)


def validate_shape(shape: Shape) -> None:
    """
    Reject degenerate geometry.

    Raises:
        GeometryError: On zero/negative sizes, oversized corner radii,
            polygons with fewer than 3 distinct vertices, zero area or
            self-intersections, and zero-sweep arcs
    """
    kind = type(shape).__name__

    if isinstance(shape, (Rect, RoundRect, Oval)):
        if shape.width <= 0 or shape.height <= 0:
            raise GeometryError(
                f"{kind} has zero size",
                context={"shape": kind, "width_nm": shape.width, "height_nm": shape.height},
            )
        if isinstance(shape, RoundRect):
            if shape.radius < 0 or 2 * shape.radius > min(shape.width, shape.height):
                raise GeometryError(
                    "RoundRect corner radius out of range",
                    context={"radius_nm": shape.radius, "width_nm": shape.width,
                             "height_nm": shape.height},
                    suggestions=["Corner radius must be at most half the shorter side"],
                )
    elif isinstance(shape, (Circle, Arc)):
        if shape.radius <= 0:
            raise GeometryError(
                f"{kind} has zero radius", context={"shape": kind, "radius_nm": shape.radius}
            )
        if isinstance(shape, Arc) and (shape.sweep_angle == 0 or abs(shape.sweep_angle) > 360):
            raise GeometryError(
                "Arc sweep must be non-zero and at most 360 degrees",
                context={"sweep_angle": shape.sweep_angle},
            )
    elif isinstance(shape, Polygon):
        vertices = dedupe_vertices([p.tuple() for p in shape.points])
        if len(vertices) < 3:
            raise GeometryError(
                "Polygon needs at least 3 distinct vertices",
                context={"vertices": len(vertices)},
            )
        if signed_area(vertices) == 0:
            raise GeometryError("Polygon has zero area", context={"vertices": len(vertices)})
        if not is_simple(vertices):
            raise GeometryError(
                "Polygon is self-intersecting",
                context={"vertices": len(vertices)},
                suggestions=["Split the outline into simple polygons"],
            )
    else:
        raise GeometryError(f"Unsupported shape type: {kind}")


def shape_size(shape: Shape) -> tuple[int, int]:
    """Width and height of the shape's extent before rotation."""
    if isinstance(shape, (Rect, RoundRect, Oval)):
        return (shape.width, shape.height)
    if isinstance(shape, (Circle, Arc)):
        return (2 * shape.radius, 2 * shape.radius)
    if isinstance(shape, Polygon):
        xs = [p.x for p in shape.points]
        ys = [p.y for p in shape.points]
        return (max(xs) - min(xs), max(ys) - min(ys))
    raise GeometryError(f"Unsupported shape type: {type(shape).__name__}")
