"""
Fixed-precision length units for ibom-tools.

All board geometry is stored as integer nanometres so that building a board
never accumulates floating-point drift. Conversion to the viewer's unit
(millimetres, float) happens once, at serialization time, rounded to
``MM_DECIMALS`` places.

Examples:
    >>> mm(1.27)
    1270000
    >>> to_mm(1270000)
    1.27
    >>> format_mm(1270000.4)
    '1.27'
"""

from __future__ import annotations

import math

__all__ = [
    "NM_PER_MM",
    "MM_PER_MIL",
    "MM_DECIMALS",
    "ROUNDING_TOLERANCE_MM",
    "mm",
    "mils",
    "to_mm",
    "format_mm",
]

# Conversion constants
NM_PER_MM = 1_000_000
MM_PER_MIL = 0.0254

# Serialized values are rounded to whole nanometres
MM_DECIMALS = 6

# Maximum difference between a serialized value and its internal value
ROUNDING_TOLERANCE_MM = 0.5 * 10 ** (-MM_DECIMALS)


def mm(value: float) -> int:
    """Convert millimetres to internal nanometres.

    Args:
        value: Length in millimetres

    Returns:
        Length in nanometres, rounded to the nearest integer
    """
    return int(round(value * NM_PER_MM))


def mils(value: float) -> int:
    """Convert mils (thousandths of an inch) to internal nanometres."""
    return mm(value * MM_PER_MIL)


def to_mm(value_nm: float) -> float:
    """Convert an internal length to serialized millimetres.

    Bezier control points are not integral, so floats are accepted too.

    Args:
        value_nm: Length in nanometres

    Returns:
        Length in millimetres rounded to ``MM_DECIMALS`` places

    Raises:
        ValueError: If the value is NaN or infinite
    """
    if not math.isfinite(value_nm):
        raise ValueError(f"Non-finite length: {value_nm!r}")
    result = round(value_nm / NM_PER_MM, MM_DECIMALS)
    # Avoid emitting "-0.0"
    return result + 0.0 if result != 0 else 0.0


def format_mm(value_nm: float) -> str:
    """Format an internal length as a compact millimetre string for SVG paths.

    Args:
        value_nm: Length in nanometres

    Returns:
        Shortest decimal representation, e.g. "1.27", "-0.5", "3"
    """
    text = f"{to_mm(value_nm):.{MM_DECIMALS}f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text
