"""
Planar polygon helpers.

Operates on sequences of ``(x, y)`` pairs in board coordinates. Orientation
is measured with the shoelace formula: a positive signed area means the
vertices run counter-clockwise in the board's mathematical frame.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np

Vertex = Tuple[float, float]

__all__ = [
    "Vertex",
    "signed_area",
    "is_ccw",
    "ensure_ccw",
    "dedupe_vertices",
    "segments_intersect",
    "is_simple",
    "rotate_point",
    "bounding_box",
]


def signed_area(points: Sequence[Vertex]) -> float:
    """Signed area of a closed polygon (positive when counter-clockwise)."""
    if len(points) < 3:
        return 0.0
    arr = np.asarray(points, dtype=np.float64)
    x, y = arr[:, 0], arr[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def is_ccw(points: Sequence[Vertex]) -> bool:
    return signed_area(points) > 0


def ensure_ccw(points: Sequence[Vertex]) -> list[Vertex]:
    """Return the vertices in counter-clockwise order, keeping the first vertex."""
    pts = list(points)
    if signed_area(pts) < 0:
        pts = [pts[0]] + pts[:0:-1]
    return pts


def dedupe_vertices(points: Sequence[Vertex]) -> list[Vertex]:
    """Drop consecutive repeated vertices and an explicit closing vertex."""
    result: list[Vertex] = []
    for p in points:
        p = (p[0], p[1])
        if not result or result[-1] != p:
            result.append(p)
    while len(result) > 1 and result[0] == result[-1]:
        result.pop()
    return result


def _orientation(a: Vertex, b: Vertex, c: Vertex) -> int:
    cross = (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])
    if cross > 0:
        return 1
    if cross < 0:
        return -1
    return 0


def _on_segment(a: Vertex, b: Vertex, p: Vertex) -> bool:
    """p is collinear with a-b; check it lies within the segment's extent."""
    return min(a[0], b[0]) <= p[0] <= max(a[0], b[0]) and min(a[1], b[1]) <= p[1] <= max(
        a[1], b[1]
    )


def segments_intersect(p1: Vertex, p2: Vertex, q1: Vertex, q2: Vertex) -> bool:
    """Whether closed segments p1-p2 and q1-q2 share at least one point."""
    o1 = _orientation(p1, p2, q1)
    o2 = _orientation(p1, p2, q2)
    o3 = _orientation(q1, q2, p1)
    o4 = _orientation(q1, q2, p2)

    if o1 != o2 and o3 != o4:
        return True

    # Collinear touching cases
    if o1 == 0 and _on_segment(p1, p2, q1):
        return True
    if o2 == 0 and _on_segment(p1, p2, q2):
        return True
    if o3 == 0 and _on_segment(q1, q2, p1):
        return True
    if o4 == 0 and _on_segment(q1, q2, p2):
        return True
    return False


def is_simple(points: Sequence[Vertex]) -> bool:
    """
    Check that a closed polygon does not intersect itself.

    Adjacent edges may only share their common vertex; any other contact
    between two edges makes the polygon non-simple.
    """
    n = len(points)
    if n < 3:
        return False
    edges = [(points[i], points[(i + 1) % n]) for i in range(n)]
    for i in range(n):
        a1, a2 = edges[i]
        for j in range(i + 1, n):
            b1, b2 = edges[j]
            adjacent = j == i + 1 or (i == 0 and j == n - 1)
            if adjacent:
                # Shared vertex is fine; folding back onto the edge is not
                shared = a2 if j == i + 1 else a1
                other_a = a1 if j == i + 1 else a2
                other_b = b2 if j == i + 1 else b1
                if _orientation(other_a, shared, other_b) == 0 and (
                    _on_segment(shared, other_b, other_a) or _on_segment(shared, other_a, other_b)
                ):
                    return False
                continue
            if segments_intersect(a1, a2, b1, b2):
                return False
    return True


def rotate_point(
    x: float, y: float, angle_deg: float, cx: float = 0.0, cy: float = 0.0
) -> Vertex:
    """
    Rotate a point about (cx, cy).

    Uses the renderer convention: the y axis points down and positive angles
    turn counter-clockwise on screen.
    """
    if angle_deg == 0:
        return (x, y)
    rad = math.radians(angle_deg)
    cos_a, sin_a = math.cos(rad), math.sin(rad)
    dx = x - cx
    dy = y - cy
    return (cx + dx * cos_a + dy * sin_a, cy - dx * sin_a + dy * cos_a)


def bounding_box(points: Sequence[Vertex]) -> tuple[float, float, float, float]:
    """Return (min_x, min_y, max_x, max_y)."""
    if not points:
        raise ValueError("bounding_box of an empty point set")
    arr = np.asarray(points, dtype=np.float64)
    min_x, min_y = arr.min(axis=0)
    max_x, max_y = arr.max(axis=0)
    return (float(min_x), float(min_y), float(max_x), float(max_y))
