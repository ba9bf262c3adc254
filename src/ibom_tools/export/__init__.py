"""
pcbdata and HTML export.

- serializer: board -> pcbdata JSON document
- pcbdata: schema of that document, for round-trip validation
- assets: versioned viewer bundle (template, CSS, JS)
- html: bundle + document -> self-contained HTML page

Example::

    from ibom_tools.export import AssetBundle, render_html, serialize

    document = serialize(board)
    html = render_html(board, AssetBundle.default())
"""

from .assets import ASSET_FILES, PCBDATA_MARKER, WEB_DIR, AssetBundle
from .html import assemble_html, escape_script_json, pcbdata_script, render_html, viewer_config
from .pcbdata import PcbData, parse_pcbdata
from .serializer import DEFAULT_SCHEMA_VERSION, JsonDocument, dumps, serialize, svg_path

__all__ = [
    # Serialization
    "serialize",
    "dumps",
    "svg_path",
    "JsonDocument",
    "DEFAULT_SCHEMA_VERSION",
    # Schema
    "PcbData",
    "parse_pcbdata",
    # Assets
    "AssetBundle",
    "ASSET_FILES",
    "PCBDATA_MARKER",
    "WEB_DIR",
    # HTML
    "assemble_html",
    "render_html",
    "escape_script_json",
    "pcbdata_script",
    "viewer_config",
]
