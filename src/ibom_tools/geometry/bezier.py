"""
Cubic Bezier approximation of circular arcs.

Each arc is split into ``n`` equal pieces; a piece of sweep ``phi`` uses the
standard control distance ``4/3 * tan(phi / 4) * r``, which puts the curve's
midpoint exactly on the circle. The deviation from the true circle is
measured by sampling, and ``n`` grows until it fits the tolerance.
"""

from __future__ import annotations

import math
from typing import List, Tuple

import numpy as np

from ..exceptions import GeometryError
from .polygon import Vertex

CubicSegment = Tuple[Vertex, Vertex, Vertex, Vertex]

__all__ = [
    "CubicSegment",
    "evaluate_cubic",
    "unit_arc_error",
    "segments_for_arc",
    "arc_to_cubics",
]


def evaluate_cubic(segment: CubicSegment, t: np.ndarray) -> np.ndarray:
    """Evaluate a cubic Bezier at parameters ``t``; returns an (N, 2) array."""
    p0, c1, c2, p3 = (np.asarray(p, dtype=np.float64) for p in segment)
    t = np.asarray(t, dtype=np.float64)[:, None]
    mt = 1.0 - t
    return mt**3 * p0 + 3 * mt**2 * t * c1 + 3 * mt * t**2 * c2 + t**3 * p3


def _unit_arc_cubic(phi: float) -> CubicSegment:
    k = 4.0 / 3.0 * math.tan(phi / 4.0)
    cos_p, sin_p = math.cos(phi), math.sin(phi)
    return (
        (1.0, 0.0),
        (1.0, k),
        (cos_p + k * sin_p, sin_p - k * cos_p),
        (cos_p, sin_p),
    )


def unit_arc_error(phi: float, samples: int = 32) -> float:
    """
    Maximum radial deviation of one Bezier piece approximating a unit arc.

    Args:
        phi: Sweep of the piece in radians
        samples: Number of interior sample points

    Returns:
        Deviation as a fraction of the radius
    """
    segment = _unit_arc_cubic(abs(phi))
    t = np.linspace(0.0, 1.0, samples + 2)
    err = np.abs(np.hypot(*evaluate_cubic(segment, t).T) - 1.0)

    # Refine around the coarse maximum
    i = int(np.argmax(err))
    fine = np.linspace(t[max(i - 1, 0)], t[min(i + 1, len(t) - 1)], samples + 2)
    fine_err = np.abs(np.hypot(*evaluate_cubic(segment, fine).T) - 1.0)
    return float(max(err[i], fine_err.max()))


def segments_for_arc(
    radius: float,
    sweep: float,
    tolerance: float,
    min_segments: int = 1,
    max_segments: int = 256,
    samples: int = 32,
) -> int:
    """
    Smallest number of equal Bezier pieces that keeps an arc within tolerance.

    Starts from one piece per quarter turn (and at least ``min_segments``),
    then adds pieces until the sampled deviation is within ``tolerance``.

    Raises:
        GeometryError: If ``max_segments`` pieces still exceed ``tolerance``
    """
    n = max(min_segments, math.ceil(abs(sweep) / (math.pi / 2) - 1e-9), 1)
    error = unit_arc_error(abs(sweep) / n, samples) * radius
    while error > tolerance:
        if n >= max_segments:
            raise GeometryError(
                "Arc cannot meet the curve tolerance within max_segments",
                context={"radius_nm": radius, "tolerance_nm": tolerance,
                         "max_segments": max_segments, "deviation_nm": error},
                suggestions=["Raise encoder.max_segments or relax epsilon_ratio / max_error_nm"],
            )
        n += 1
        error = unit_arc_error(abs(sweep) / n, samples) * radius
    return n


def arc_to_cubics(
    cx: float, cy: float, radius: float, start: float, sweep: float, n: int
) -> List[CubicSegment]:
    """
    Split an arc into ``n`` cubic Bezier pieces.

    Args:
        cx, cy: Arc centre
        radius: Arc radius
        start: Start angle in radians
        sweep: Signed sweep in radians (positive is counter-clockwise)
        n: Number of pieces

    Returns:
        List of (start, control1, control2, end) tuples
    """
    phi = sweep / n
    k = 4.0 / 3.0 * math.tan(phi / 4.0) * radius
    pieces: List[CubicSegment] = []
    for i in range(n):
        a0 = start + i * phi
        a1 = a0 + phi
        cos0, sin0 = math.cos(a0), math.sin(a0)
        cos1, sin1 = math.cos(a1), math.sin(a1)
        p0 = (cx + radius * cos0, cy + radius * sin0)
        p3 = (cx + radius * cos1, cy + radius * sin1)
        c1 = (p0[0] - k * sin0, p0[1] + k * cos0)
        c2 = (p3[0] + k * sin1, p3[1] - k * cos1)
        pieces.append((p0, c1, c2, p3))
    return pieces
