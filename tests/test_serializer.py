"""Tests for pcbdata serialization."""

import json

import pytest
from pydantic import ValidationError as SchemaError

from ibom_tools.config import IbomConfig, ViewerConfig
from ibom_tools.exceptions import SerializationError
from ibom_tools.export import DEFAULT_SCHEMA_VERSION, dumps, parse_pcbdata, serialize, svg_path
from ibom_tools.geometry.encoder import GeometryEncoder
from ibom_tools.model import (
    Arc,
    Circle,
    Drawing,
    DrawingKind,
    Layer,
    Oval,
    Pad,
    Point,
    Polygon,
    Rect,
    Track,
    Via,
    Zone,
)
from ibom_tools.units import ROUNDING_TOLERANCE_MM, mm

from conftest import back_pads, chip_pads, th_pad

TOP_LEVEL_KEYS = [
    "ibom_version",
    "metadata",
    "edges_bbox",
    "edges",
    "drawings",
    "tracks",
    "zones",
    "nets",
    "footprints",
    "bom",
]


class TestSvgPath:
    def test_rect(self):
        geom = GeometryEncoder().encode(Rect(Point(0, 0), mm(1), mm(0.5)))
        assert svg_path(geom) == "M -0.5 -0.25 L 0.5 -0.25 L 0.5 0.25 L -0.5 0.25 Z"

    def test_circle_uses_cubics(self):
        path = svg_path(GeometryEncoder().encode(Circle(Point(0, 0), mm(1))))
        assert path.startswith("M 1 0 C ")
        assert path.count("C ") == 4
        assert path.endswith(" Z")


class TestDocumentShape:
    """Top-level layout of the document."""

    def test_top_level_keys(self, simple_board):
        document = serialize(simple_board)
        assert list(document) == TOP_LEVEL_KEYS
        assert document["ibom_version"] == DEFAULT_SCHEMA_VERSION

    def test_parses_against_schema(self, simple_board):
        parsed = parse_pcbdata(dumps(serialize(simple_board)))
        assert len(parsed.footprints) == 3

    def test_metadata(self, simple_board):
        assert serialize(simple_board)["metadata"] == {
            "title": "Test Board",
            "company": "ACME",
            "revision": "A",
            "date": "2024-01-01",
        }

    def test_edges(self, simple_board):
        document = serialize(simple_board)
        assert document["edges_bbox"] == {"minx": 0.0, "maxx": 50.0, "miny": 0.0, "maxy": 30.0}
        (edge,) = document["edges"]
        assert edge["type"] == "polygon"
        assert edge["width"] == 0.1
        assert edge["filled"] is False

    def test_cutouts_and_slots(self, builder):
        builder.add_edge(Circle(Point.from_mm(10, 10), mm(1.5)))
        builder.add_edge(Arc(Point.from_mm(25, 30), mm(5), 0, 180), width=mm(0.05))
        document = serialize(builder.finalize())
        edges = document["edges"]
        assert len(edges) == 3
        assert edges[1]["svgpath"].endswith("Z")
        assert not edges[2]["svgpath"].endswith("Z")
        assert edges[2]["width"] == 0.05
        # The slot arc pokes out below the outline
        assert document["edges_bbox"]["maxy"] == pytest.approx(35.0)
        assert document["edges_bbox"]["minx"] == 0.0

    def test_deterministic(self, simple_board):
        """Same board, same bytes."""
        assert dumps(serialize(simple_board)) == dumps(serialize(simple_board))

    def test_compact_json(self, single_resistor_board):
        text = dumps(serialize(single_resistor_board))
        assert ": " not in text
        assert json.loads(text)["footprints"][0]["ref"] == "R1"

    def test_custom_schema_version(self, single_resistor_board):
        document = serialize(single_resistor_board, schema_version="v2.8.1")
        assert document["ibom_version"] == "v2.8.1"

    def test_empty_schema_version(self, single_resistor_board):
        with pytest.raises(SerializationError):
            serialize(single_resistor_board, schema_version="")

    def test_schema_rejects_unknown_keys(self, single_resistor_board):
        document = serialize(single_resistor_board)
        document["footprints"][0]["colour"] = "red"
        with pytest.raises(SchemaError):
            parse_pcbdata(dumps(document))

    def test_dumps_rejects_nan(self):
        with pytest.raises(SerializationError):
            dumps({"x": float("nan")})


class TestFootprints:
    def test_single_footprint(self, single_resistor_board):
        document = serialize(single_resistor_board)
        (fp,) = document["footprints"]
        assert fp["ref"] == "R1"
        assert fp["layer"] == "F"
        assert fp["bbox"]["pos"] == [10.0, 10.0]
        assert fp["bbox"]["relpos"] == [-1.25, -0.45]
        assert fp["bbox"]["size"] == [2.5, 0.9]
        assert fp["center"] == [10.0, 10.0]
        assert len(fp["pads"]) == 2

    def test_smd_pad(self, single_resistor_board):
        pad = serialize(single_resistor_board)["footprints"][0]["pads"][0]
        assert pad["layers"] == ["F"]
        assert pad["pos"] == [9.2, 10.0]
        assert pad["shape"] == "custom"
        assert pad["type"] == "smd"
        assert pad["svgpath"].startswith("M ")
        assert pad["net"] == "VCC"
        assert pad["pin1"] == 1
        assert "drillsize" not in pad

    def test_through_hole_pad(self, builder):
        builder.add_footprint("J1", "CONN", Point.from_mm(5, 5), Layer.F_CU, pads=[th_pad()])
        pad = serialize(builder.finalize())["footprints"][0]["pads"][0]
        assert pad["type"] == "th"
        assert pad["layers"] == ["F", "B"]
        assert pad["drillsize"] == [1.0, 1.0]
        assert pad["drillshape"] == "circle"

    def test_oblong_drill(self, builder):
        pad = Pad(Oval(Point(0, 0), mm(2), mm(1)), Point(0, 0), (Layer.F_CU, Layer.B_CU),
                  drill_size=(mm(1.2), mm(0.6)))
        builder.add_footprint("J1", "CONN", Point(0, 0), Layer.F_CU, pads=[pad])
        entry = serialize(builder.finalize())["footprints"][0]["pads"][0]
        assert entry["drillshape"] == "oblong"
        assert entry["drillsize"] == [1.2, 0.6]

    def test_rotated_footprint(self, builder):
        pad = Pad(Rect(Point(0, 0), mm(0.5), mm(0.5)), Point.from_mm(1, 0), (Layer.F_CU,),
                  rotation=10)
        builder.add_footprint("U1", "IC", Point.from_mm(10, 0), Layer.F_CU, rotation=90,
                              pads=[pad])
        entry = serialize(builder.finalize())["footprints"][0]
        assert entry["pads"][0]["pos"] == pytest.approx([10.0, -1.0])
        assert entry["pads"][0]["angle"] == 100.0
        assert entry["bbox"]["angle"] == 90.0

    def test_back_side(self, builder):
        builder.add_footprint("R1", "10k", Point(0, 0), Layer.B_CU, pads=back_pads())
        fp = serialize(builder.finalize())["footprints"][0]
        assert fp["layer"] == "B"
        assert fp["pads"][0]["layers"] == ["B"]

    def test_rounding_tolerance(self, builder):
        builder.add_footprint("R1", "10k", Point(1_234_567, 7_654_321), Layer.F_CU,
                              pads=chip_pads())
        fp = serialize(builder.finalize())["footprints"][0]
        x, y = fp["bbox"]["pos"]
        assert abs(x - 1.234567) <= ROUNDING_TOLERANCE_MM
        assert abs(y - 7.654321) <= ROUNDING_TOLERANCE_MM


class TestCopper:
    def test_tracks_and_vias(self, builder):
        builder.add_track(Track(Point(0, 0), Point(mm(5), 0), mm(0.25), Layer.F_CU, net="VCC"))
        builder.add_track(Track(Point(0, 0), Point(0, mm(5)), mm(0.5), Layer.B_CU))
        builder.add_via(Via(Point.from_mm(5, 0), mm(0.6), mm(0.3), net="VCC"))
        tracks = serialize(builder.finalize())["tracks"]
        assert tracks["F"][0] == {"start": [0.0, 0.0], "end": [5.0, 0.0], "width": 0.25,
                                  "net": "VCC"}
        assert "net" not in tracks["B"][0]
        for side in ("F", "B"):
            via = tracks[side][-1]
            assert via["start"] == via["end"] == [5.0, 0.0]
            assert via["drillsize"] == 0.3
            assert via["width"] == 0.6

    def test_zones(self, builder):
        outline = Polygon.from_mm([(0, 0), (0, 10), (10, 10), (10, 0)])
        builder.add_zone(Zone(outline, Layer.B_CU, net="GND"))
        zones = serialize(builder.finalize())["zones"]
        assert zones["F"] == []
        assert zones["B"][0]["net"] == "GND"
        assert zones["B"][0]["svgpath"].endswith("Z")

    def test_nets_unique_in_order(self, builder):
        builder.add_footprint("R1", "10k", Point(0, 0), Layer.F_CU, pads=chip_pads())
        builder.add_track(Track(Point(0, 0), Point(mm(5), 0), mm(0.25), Layer.F_CU, net="SDA"))
        builder.add_via(Via(Point(0, 0), mm(0.6), mm(0.3), net="VCC"))
        assert serialize(builder.finalize())["nets"] == ["VCC", "GND", "SDA"]


class TestDrawings:
    def test_silkscreen_and_fabrication(self, builder):
        builder.add_drawing(Drawing(Rect(Point(0, 0), mm(2), mm(1)), Layer.F_SILKS, width=mm(0.15)))
        builder.add_drawing(Drawing(Circle(Point(0, 0), mm(1)), Layer.B_FAB, filled=True))
        builder.add_drawing(
            Drawing(Rect(Point(0, 0), mm(1), mm(0.5)), Layer.F_SILKS, width=mm(0.1),
                    kind=DrawingKind.REFERENCE_TEXT)
        )
        builder.add_drawing(Drawing(Rect(Point(0, 0), mm(3), mm(3)), Layer.F_CRTYD))
        drawings = serialize(builder.finalize())["drawings"]

        silk_front = drawings["silkscreen"]["F"]
        assert len(silk_front) == 2
        assert silk_front[0]["type"] == "polygon"
        assert silk_front[0]["width"] == 0.15
        assert silk_front[1] == {
            "svgpath": silk_front[1]["svgpath"],
            "filled": False,
            "thickness": 0.1,
            "ref": 1,
        }
        assert drawings["silkscreen"]["B"] == []
        assert drawings["fabrication"]["B"][0]["filled"] is True
        assert drawings["fabrication"]["F"] == []


class TestBomSection:
    def test_rows(self, simple_board):
        bom = serialize(simple_board)["bom"]
        assert bom["both"] == [[["C1", 2]], [["R1", 0], ["R2", 1]]]
        assert bom["F"] == bom["both"]
        assert bom["B"] == []
        assert bom["skipped"] == []

    def test_single_footprint_row(self, single_resistor_board):
        bom = serialize(single_resistor_board)["bom"]
        assert len(bom["both"]) == 1
        assert len(bom["both"][0]) == 1

    def test_fields(self, simple_board):
        fields = serialize(simple_board)["bom"]["fields"]
        assert fields == {
            "0": ["10k", "R_0603"],
            "1": ["10k", "R_0603"],
            "2": ["100n", "C_0603"],
        }

    def test_custom_fields(self, builder):
        builder.add_footprint("U1", "MCU", Point(0, 0), Layer.F_CU, package="QFN-32",
                              pads=chip_pads(), fields={"MPN": "STM32G0"})
        config = IbomConfig(viewer=ViewerConfig(fields=["Value", "MPN", "Supplier"]))
        fields = serialize(builder.finalize(), config)["bom"]["fields"]
        assert fields["0"] == ["MCU", "STM32G0", ""]

    def test_skipped(self, builder):
        builder.add_footprint("R1", "10k", Point(0, 0), Layer.F_CU, pads=chip_pads())
        builder.add_footprint("R2", "10k", Point(0, 0), Layer.F_CU, pads=chip_pads(), dnp=True)
        bom = serialize(builder.finalize())["bom"]
        assert bom["skipped"] == [1]
        assert bom["both"] == [[["R1", 0]]]
        assert set(bom["fields"]) == {"0", "1"}
