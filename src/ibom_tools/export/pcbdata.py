"""pcbdata document schema.

Pydantic models for the subset of the InteractiveHtmlBom ``pcbdata`` object
that ibom-tools produces. Models are strict and forbid unknown keys, so
parsing a document back through :func:`parse_pcbdata` catches renamed
fields and numbers that turned into strings.
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, model_validator

__all__ = [
    "DrawingEntry",
    "TrackEntry",
    "ZoneEntry",
    "PadEntry",
    "FootprintEntry",
    "BomData",
    "PcbData",
    "parse_pcbdata",
]

Coord = Tuple[float, float]
SideKey = Literal["F", "B"]


class _Model(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)


class Metadata(_Model):
    title: str
    company: str
    revision: str
    date: str


class EdgesBBox(_Model):
    minx: float
    maxx: float
    miny: float
    maxy: float


class DrawingEntry(_Model):
    """A polygon drawing, or the outline of a reference/value text."""

    svgpath: str
    filled: bool
    type: Optional[Literal["polygon"]] = None
    width: Optional[float] = None
    thickness: Optional[float] = None
    ref: Optional[Literal[1]] = None
    val: Optional[Literal[1]] = None

    @model_validator(mode="after")
    def _check_variant(self) -> DrawingEntry:
        if self.type == "polygon":
            if self.width is None or self.thickness is not None or self.ref or self.val:
                raise ValueError("polygon drawings carry width only")
        else:
            if self.thickness is None or (self.ref is None) == (self.val is None):
                raise ValueError("text drawings carry thickness and exactly one of ref/val")
        return self


class SideDrawings(_Model):
    F: List[DrawingEntry]
    B: List[DrawingEntry]


class Drawings(_Model):
    silkscreen: SideDrawings
    fabrication: SideDrawings


class TrackEntry(_Model):
    """A track segment; vias are tracks of zero length with a drill."""

    start: Coord
    end: Coord
    width: float
    drillsize: Optional[float] = None
    net: Optional[str] = None


class SideTracks(_Model):
    F: List[TrackEntry]
    B: List[TrackEntry]


class ZoneEntry(_Model):
    svgpath: str
    net: Optional[str] = None


class SideZones(_Model):
    F: List[ZoneEntry]
    B: List[ZoneEntry]


class PadEntry(_Model):
    layers: List[SideKey]
    pos: Coord
    angle: float
    shape: Literal["custom"]
    svgpath: str
    type: Literal["smd", "th"]
    drillsize: Optional[Coord] = None
    drillshape: Optional[Literal["circle", "oblong"]] = None
    net: Optional[str] = None
    pin1: Optional[Literal[1]] = None

    @model_validator(mode="after")
    def _check_drill(self) -> PadEntry:
        if (self.type == "th") != (self.drillsize is not None and self.drillshape is not None):
            raise ValueError("through-hole pads need drillsize and drillshape, SMD pads neither")
        return self


class FootprintBBox(_Model):
    pos: Coord
    angle: float
    relpos: Coord
    size: Coord


class FootprintDrawing(_Model):
    layer: SideKey
    drawing: DrawingEntry


class FootprintEntry(_Model):
    ref: str
    center: Coord
    bbox: FootprintBBox
    drawings: List[FootprintDrawing]
    layer: SideKey
    pads: List[PadEntry]


BomRowEntry = List[Tuple[str, int]]


class BomData(_Model):
    both: List[BomRowEntry]
    F: List[BomRowEntry]
    B: List[BomRowEntry]
    skipped: List[int]
    fields: Dict[str, List[str]]


class PcbData(_Model):
    ibom_version: str
    metadata: Metadata
    edges_bbox: EdgesBBox
    edges: List[DrawingEntry]
    drawings: Drawings
    tracks: SideTracks
    zones: SideZones
    nets: List[str]
    footprints: List[FootprintEntry]
    bom: BomData

    @model_validator(mode="after")
    def _check_references(self) -> PcbData:
        count = len(self.footprints)
        for rows in (self.bom.both, self.bom.F, self.bom.B):
            for row in rows:
                if not row:
                    raise ValueError("empty BOM row")
                for _, index in row:
                    if not 0 <= index < count:
                        raise ValueError(f"BOM row references unknown footprint {index}")
        for index in self.bom.skipped:
            if not 0 <= index < count:
                raise ValueError(f"skipped list references unknown footprint {index}")
        if set(self.bom.fields) != {str(i) for i in range(count)}:
            raise ValueError("bom.fields must have one entry per footprint")
        return self


def parse_pcbdata(text: Union[str, bytes]) -> PcbData:
    """
    Parse and validate a serialized pcbdata document.

    Raises:
        pydantic.ValidationError: If the document does not match the schema
    """
    return PcbData.model_validate_json(text)
