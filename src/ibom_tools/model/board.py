"""
Board data model.

Immutable records describing a finalized board. Instances are produced by
:class:`ibom_tools.model.builder.BoardBuilder`; the records themselves carry
no behaviour beyond derived properties.

All lengths are integer nanometres, angles are degrees.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from .layers import Layer, Side
from .shapes import Point, Polygon, Shape, shape_size

__all__ = [
    "FootprintAttribute",
    "DrawingKind",
    "Metadata",
    "Pad",
    "Footprint",
    "Track",
    "Via",
    "Zone",
    "Drawing",
    "Edge",
    "Board",
]


class FootprintAttribute(Enum):
    """Mounting attributes of a footprint."""

    THROUGH_HOLE = "through_hole"
    SMD = "smd"
    VIRTUAL = "virtual"  # Not a physical part; never appears in the BOM


class DrawingKind(Enum):
    POLYGON = "polygon"
    REFERENCE_TEXT = "ref"  # Outline of a reference designator text
    VALUE_TEXT = "val"  # Outline of a value text


@dataclass(frozen=True)
class Metadata:
    """Title block shown in the page header."""

    title: str = ""
    company: str = ""
    revision: str = ""
    date: str = ""


@dataclass(frozen=True)
class Pad:
    """A pad; ``shape`` is pad-local and centred at the pad origin."""

    shape: Shape
    position: Point  # Relative to the footprint origin
    layers: tuple[Layer, ...]
    rotation: float = 0.0
    drill: int = 0  # Round drill diameter, 0 for SMD
    drill_size: Optional[tuple[int, int]] = None  # Oblong drill (w, h)
    net: Optional[str] = None
    pin1: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "layers", tuple(self.layers))

    @property
    def size(self) -> tuple[int, int]:
        return shape_size(self.shape)

    @property
    def is_through_hole(self) -> bool:
        return self.drill > 0 or self.drill_size is not None

    @property
    def drill_extent(self) -> Optional[tuple[int, int]]:
        """Drill (w, h), or None for SMD pads."""
        if self.drill_size is not None:
            return self.drill_size
        if self.drill > 0:
            return (self.drill, self.drill)
        return None


@dataclass(frozen=True)
class Footprint:
    """A placed component."""

    reference: str
    value: str
    position: Point
    layer: Layer
    rotation: float = 0.0
    package: str = ""  # Footprint name shown in the BOM, e.g. "R_0603"
    pads: tuple[Pad, ...] = ()
    attributes: frozenset[FootprintAttribute] = frozenset()
    fields: Mapping[str, str] = field(default_factory=dict)
    dnp: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "pads", tuple(self.pads))
        object.__setattr__(self, "attributes", frozenset(self.attributes))
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def __hash__(self) -> int:
        return hash((self.reference, self.value, self.position, self.layer, self.pads))

    @property
    def side(self) -> Side:
        return self.layer.side

    @property
    def is_virtual(self) -> bool:
        return FootprintAttribute.VIRTUAL in self.attributes

    @property
    def in_bom(self) -> bool:
        """Whether the footprint is populated and counted in BOM rows."""
        return not self.is_virtual and not self.dnp


@dataclass(frozen=True)
class Track:
    start: Point
    end: Point
    width: int
    layer: Layer
    net: Optional[str] = None


@dataclass(frozen=True)
class Via:
    position: Point
    diameter: int
    drill: int
    layers: tuple[Layer, ...] = (Layer.F_CU, Layer.B_CU)
    net: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "layers", tuple(self.layers))


@dataclass(frozen=True)
class Zone:
    """A filled copper region."""

    outline: Polygon
    layer: Layer
    net: Optional[str] = None


@dataclass(frozen=True)
class Drawing:
    """Silkscreen or fabrication artwork."""

    shape: Shape
    layer: Layer
    width: int = 0
    filled: bool = False
    kind: DrawingKind = DrawingKind.POLYGON


@dataclass(frozen=True)
class Edge:
    """A board edge cut besides the outline: a cutout, slot or edge segment."""

    shape: Shape
    width: int


@dataclass(frozen=True)
class Board:
    """
    A finalized, immutable board.

    Safe to share between threads and to serialize any number of times.
    """

    metadata: Metadata
    layers: tuple[Layer, ...]
    outline: Shape
    outline_width: int
    footprints: tuple[Footprint, ...] = ()
    tracks: tuple[Track, ...] = ()
    vias: tuple[Via, ...] = ()
    zones: tuple[Zone, ...] = ()
    drawings: tuple[Drawing, ...] = ()
    edges: tuple[Edge, ...] = ()

    @property
    def sides(self) -> tuple[Side, ...]:
        """Sides that have at least one registered layer, top first."""
        return tuple(side for side in Side if any(layer.side is side for layer in self.layers))

    def footprint(self, reference: str) -> Footprint:
        """Look up a footprint by reference designator."""
        for fp in self.footprints:
            if fp.reference == reference:
                return fp
        raise KeyError(reference)
