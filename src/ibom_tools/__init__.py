"""
ibom-tools: Interactive HTML BOM generation for PCB designs.

Builds a board description in memory, groups its parts into a bill of
materials and renders a single self-contained HTML page in which parts can
be searched, highlighted on the board and ticked off during assembly.

Modules:
    model: Board builder and immutable board records
    geometry: Shape flattening and Bezier arc approximation
    bom: BOM row aggregation
    export: pcbdata serialization and HTML assembly
    config: Encoder and viewer settings (TOML)

Quick Start::

    from ibom_tools import AssetBundle, BoardBuilder, Layer, Pad, Point, Rect, render_html
    from ibom_tools.units import mm

    builder = BoardBuilder(title="Blinky", revision="A")
    builder.add_standard_layers()
    builder.set_board_outline(Rect(Point(0, 0), mm(50), mm(30)))
    builder.add_footprint("R1", "10k", Point(mm(10), mm(5)), Layer.F_CU, package="R_0603")
    builder.add_pad("R1", Pad(Rect(Point(0, 0), mm(0.9), mm(0.95)), Point(mm(-0.8), 0), (Layer.F_CU,)))
    board = builder.finalize()

    html = render_html(board, AssetBundle.default())
"""

__version__ = "0.1.0"

from ibom_tools.bom import BomRow, aggregate_bom, footprint_identity, natural_key
from ibom_tools.config import EncoderConfig, IbomConfig, ViewerConfig, load_config
from ibom_tools.exceptions import (
    AssetError,
    ConfigurationError,
    GeometryError,
    IbomError,
    SerializationError,
    ValidationError,
)
from ibom_tools.export import (
    AssetBundle,
    assemble_html,
    dumps,
    parse_pcbdata,
    render_html,
    serialize,
)
from ibom_tools.geometry.encoder import EncodedGeometry, GeometryEncoder
from ibom_tools.model import (
    Arc,
    Board,
    BoardBuilder,
    Circle,
    Drawing,
    DrawingKind,
    Edge,
    Footprint,
    FootprintAttribute,
    Layer,
    Metadata,
    Oval,
    Pad,
    Point,
    Polygon,
    Rect,
    RoundRect,
    Side,
    Track,
    Via,
    Zone,
)

__all__ = [
    "__version__",
    # Model
    "BoardBuilder",
    "Board",
    "Metadata",
    "Footprint",
    "FootprintAttribute",
    "Pad",
    "Track",
    "Via",
    "Zone",
    "Drawing",
    "DrawingKind",
    "Edge",
    "Layer",
    "Side",
    "Point",
    "Rect",
    "RoundRect",
    "Circle",
    "Oval",
    "Polygon",
    "Arc",
    # Geometry
    "GeometryEncoder",
    "EncodedGeometry",
    # BOM
    "BomRow",
    "aggregate_bom",
    "footprint_identity",
    "natural_key",
    # Export
    "serialize",
    "dumps",
    "parse_pcbdata",
    "AssetBundle",
    "assemble_html",
    "render_html",
    # Config
    "IbomConfig",
    "EncoderConfig",
    "ViewerConfig",
    "load_config",
    # Errors
    "IbomError",
    "ValidationError",
    "GeometryError",
    "SerializationError",
    "AssetError",
    "ConfigurationError",
]
