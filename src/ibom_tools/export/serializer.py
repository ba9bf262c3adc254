"""
pcbdata serialization.

Maps a finalized :class:`~ibom_tools.model.board.Board` onto the viewer's
``pcbdata`` JSON object. Field names, nesting and array order follow the
viewer's expectations exactly; lengths are converted from nanometres to
millimetres here and nowhere else.

Example::

    from ibom_tools.export import dumps, serialize

    document = serialize(board)
    text = dumps(document)  # Same bytes every time for the same board
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as SchemaError

from ..bom import BomRow, aggregate_bom
from ..config import IbomConfig
from ..exceptions import GeometryError, SerializationError
from ..geometry.encoder import ClosePath, CubicTo, EncodedGeometry, GeometryEncoder, LineTo, MoveTo
from ..geometry.polygon import rotate_point
from ..model.board import Board, Drawing, DrawingKind, Footprint, Pad
from ..model.layers import LayerKind, Side
from ..units import format_mm, to_mm
from .pcbdata import parse_pcbdata

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_SCHEMA_VERSION",
    "JsonDocument",
    "serialize",
    "dumps",
    "svg_path",
]

# Version of the viewer bundle shipped in ibom_tools/web
DEFAULT_SCHEMA_VERSION = "v2.9.0"

JsonDocument = Dict[str, Any]


def svg_path(geometry: EncodedGeometry) -> str:
    """Render encoded geometry as an SVG path string in millimetres."""
    parts: List[str] = []
    for seg in geometry.segments:
        if isinstance(seg, MoveTo):
            parts.append(f"M {_xy(seg.point)}")
        elif isinstance(seg, LineTo):
            parts.append(f"L {_xy(seg.point)}")
        elif isinstance(seg, CubicTo):
            parts.append(f"C {_xy(seg.c1)} {_xy(seg.c2)} {_xy(seg.point)}")
        elif isinstance(seg, ClosePath):
            parts.append("Z")
        else:
            raise SerializationError(f"Unknown path segment: {type(seg).__name__}")
    return " ".join(parts)


def _xy(p: Tuple[float, float]) -> str:
    return f"{format_mm(p[0])} {format_mm(p[1])}"


def _coord(x: float, y: float) -> List[float]:
    return [to_mm(x), to_mm(y)]


class _Serializer:
    """One serialization pass over a board."""

    def __init__(self, board: Board, config: IbomConfig, schema_version: str):
        self.board = board
        self.config = config
        self.schema_version = schema_version
        self.encoder = GeometryEncoder(config.encoder)

    def run(self) -> JsonDocument:
        board = self.board
        edges = [(self.encoder.encode(board.outline), board.outline_width)]
        edges.extend((self.encoder.encode(edge.shape), edge.width) for edge in board.edges)
        boxes = [geometry.bbox() for geometry, _ in edges]
        min_x = min(box[0] for box in boxes)
        min_y = min(box[1] for box in boxes)
        max_x = max(box[2] for box in boxes)
        max_y = max(box[3] for box in boxes)

        rows = {
            "both": aggregate_bom(board),
            "F": aggregate_bom(board, Side.TOP),
            "B": aggregate_bom(board, Side.BOTTOM),
        }

        return {
            "ibom_version": self.schema_version,
            "metadata": {
                "title": board.metadata.title,
                "company": board.metadata.company,
                "revision": board.metadata.revision,
                "date": board.metadata.date,
            },
            "edges_bbox": {
                "minx": to_mm(min_x),
                "maxx": to_mm(max_x),
                "miny": to_mm(min_y),
                "maxy": to_mm(max_y),
            },
            "edges": [self._polygon_entry(geometry, width, False) for geometry, width in edges],
            "drawings": {
                "silkscreen": self._drawings(LayerKind.SILKSCREEN),
                "fabrication": self._drawings(LayerKind.FABRICATION),
            },
            "tracks": {side.value: self._tracks(side) for side in Side},
            "zones": {side.value: self._zones(side) for side in Side},
            "nets": self._nets(),
            "footprints": [self._footprint(fp) for fp in board.footprints],
            "bom": {
                "both": self._bom_rows(rows["both"]),
                "F": self._bom_rows(rows["F"]),
                "B": self._bom_rows(rows["B"]),
                "skipped": [i for i, fp in enumerate(board.footprints) if not fp.in_bom],
                "fields": {
                    str(i): self._bom_fields(fp) for i, fp in enumerate(board.footprints)
                },
            },
        }

    # Drawings -----------------------------------------------------------

    def _polygon_entry(self, geometry: EncodedGeometry, width: int, filled: bool) -> JsonDocument:
        return {
            "svgpath": svg_path(geometry),
            "filled": filled,
            "type": "polygon",
            "width": to_mm(width),
        }

    def _drawing_entry(self, drawing: Drawing) -> JsonDocument:
        geometry = self.encoder.encode(drawing.shape)
        if drawing.kind is DrawingKind.POLYGON:
            return self._polygon_entry(geometry, drawing.width, drawing.filled)
        entry: JsonDocument = {
            "svgpath": svg_path(geometry),
            "filled": drawing.filled,
            "thickness": to_mm(drawing.width),
        }
        entry[drawing.kind.value] = 1
        return entry

    def _drawings(self, kind: LayerKind) -> JsonDocument:
        result: JsonDocument = {side.value: [] for side in Side}
        for drawing in self.board.drawings:
            if drawing.layer.kind is kind:
                result[drawing.layer.side.value].append(self._drawing_entry(drawing))
        return result

    # Copper -------------------------------------------------------------

    def _tracks(self, side: Side) -> List[JsonDocument]:
        entries: List[JsonDocument] = []
        for track in self.board.tracks:
            if track.layer.side is not side:
                continue
            entry: JsonDocument = {
                "start": _coord(track.start.x, track.start.y),
                "end": _coord(track.end.x, track.end.y),
                "width": to_mm(track.width),
            }
            if track.net is not None:
                entry["net"] = track.net
            entries.append(entry)
        for via in self.board.vias:
            if not any(layer.side is side for layer in via.layers):
                continue
            pos = _coord(via.position.x, via.position.y)
            entry = {
                "start": pos,
                "end": list(pos),
                "width": to_mm(via.diameter),
                "drillsize": to_mm(via.drill),
            }
            if via.net is not None:
                entry["net"] = via.net
            entries.append(entry)
        return entries

    def _zones(self, side: Side) -> List[JsonDocument]:
        entries: List[JsonDocument] = []
        for zone in self.board.zones:
            if zone.layer.side is not side:
                continue
            entry: JsonDocument = {"svgpath": svg_path(self.encoder.encode(zone.outline))}
            if zone.net is not None:
                entry["net"] = zone.net
            entries.append(entry)
        return entries

    def _nets(self) -> List[str]:
        nets: Dict[str, None] = {}
        for fp in self.board.footprints:
            for pad in fp.pads:
                if pad.net is not None:
                    nets.setdefault(pad.net)
        for item in (*self.board.tracks, *self.board.vias, *self.board.zones):
            if item.net is not None:
                nets.setdefault(item.net)
        return list(nets)

    # Footprints ---------------------------------------------------------

    def _pad(self, fp: Footprint, pad: Pad) -> JsonDocument:
        x, y = rotate_point(pad.position.x, pad.position.y, fp.rotation)
        entry: JsonDocument = {
            "layers": [s.value for s in Side if any(layer.side is s for layer in pad.layers)],
            "pos": _coord(fp.position.x + x, fp.position.y + y),
            "angle": float(fp.rotation + pad.rotation),
            "shape": "custom",
            "svgpath": svg_path(self.encoder.encode(pad.shape)),
        }
        drill = pad.drill_extent
        if drill is not None:
            entry["type"] = "th"
            entry["drillsize"] = _coord(*drill)
            entry["drillshape"] = "oblong" if drill[0] != drill[1] else "circle"
        else:
            entry["type"] = "smd"
        if pad.net is not None:
            entry["net"] = pad.net
        if pad.pin1:
            entry["pin1"] = 1
        return entry

    def _footprint_extent(self, fp: Footprint) -> Tuple[float, float, float, float]:
        """Pad extent in the footprint's unrotated frame."""
        corners: List[Tuple[float, float]] = []
        for pad in fp.pads:
            min_x, min_y, max_x, max_y = self.encoder.encode(pad.shape).bbox()
            for cx, cy in ((min_x, min_y), (max_x, min_y), (max_x, max_y), (min_x, max_y)):
                rx, ry = rotate_point(cx, cy, pad.rotation)
                corners.append((rx + pad.position.x, ry + pad.position.y))
        if not corners:
            return (0.0, 0.0, 0.0, 0.0)
        xs = [c[0] for c in corners]
        ys = [c[1] for c in corners]
        return (min(xs), min(ys), max(xs), max(ys))

    def _footprint(self, fp: Footprint) -> JsonDocument:
        min_x, min_y, max_x, max_y = self._footprint_extent(fp)
        cx, cy = rotate_point((min_x + max_x) / 2, (min_y + max_y) / 2, fp.rotation)
        return {
            "ref": fp.reference,
            "center": _coord(fp.position.x + cx, fp.position.y + cy),
            "bbox": {
                "pos": _coord(fp.position.x, fp.position.y),
                "angle": float(fp.rotation),
                "relpos": _coord(min_x, min_y),
                "size": _coord(max_x - min_x, max_y - min_y),
            },
            "drawings": [],
            "layer": fp.side.value,
            "pads": [self._pad(fp, pad) for pad in fp.pads],
        }

    # BOM ----------------------------------------------------------------

    def _bom_rows(self, rows: List[BomRow]) -> List[List[List[Any]]]:
        count = len(self.board.footprints)
        result = []
        for row in rows:
            for index in row.footprint_ids:
                if not 0 <= index < count:
                    raise SerializationError(
                        "BOM row references unknown footprint",
                        context={"footprint_index": index, "footprints": count},
                    )
            result.append([[ref, idx] for ref, idx in zip(row.references, row.footprint_ids)])
        return result

    def _bom_fields(self, fp: Footprint) -> List[str]:
        values = []
        for name in self.config.viewer.fields:
            if name == "Value":
                values.append(fp.value)
            elif name == "Footprint":
                values.append(fp.package)
            else:
                values.append(fp.fields.get(name, ""))
        return values


def serialize(
    board: Board,
    config: Optional[IbomConfig] = None,
    *,
    schema_version: str = DEFAULT_SCHEMA_VERSION,
    validate: bool = True,
) -> JsonDocument:
    """
    Build the pcbdata document for a board.

    Pure function of its inputs; BOM rows are recomputed on every call.

    Args:
        board: Finalized board
        config: Encoder tolerances and BOM columns (defaults when None)
        schema_version: Emitted as ``ibom_version``; must match the asset
            bundle the document will be embedded into
        validate: Re-parse the output through the pcbdata schema

    Returns:
        JSON-compatible dict

    Raises:
        SerializationError: If the output violates an internal invariant
    """
    config = config or IbomConfig()
    if not schema_version:
        raise SerializationError("schema_version must not be empty")

    try:
        document = _Serializer(board, config, schema_version).run()
    except (ValueError, GeometryError) as e:
        raise SerializationError(f"Cannot serialize board: {e}") from e

    if validate:
        try:
            parse_pcbdata(dumps(document))
        except SchemaError as e:
            raise SerializationError(
                "Serialized document does not match the pcbdata schema",
                context={"errors": e.error_count()},
            ) from e

    logger.debug(
        "Serialized %d footprints, %d BOM rows",
        len(document["footprints"]),
        len(document["bom"]["both"]),
    )
    return document


def dumps(document: JsonDocument) -> str:
    """
    Encode a document as compact JSON.

    Key order is insertion order, so equal documents give identical text.

    Raises:
        SerializationError: If the document contains NaN or infinity
    """
    try:
        return json.dumps(document, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except ValueError as e:
        raise SerializationError(f"Document is not valid JSON: {e}") from e
