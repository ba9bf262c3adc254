"""
HTML page assembly.

Combines an :class:`~ibom_tools.export.assets.AssetBundle`, a serialized
pcbdata document and the viewer settings into one self-contained HTML page.

The pcbdata is embedded in a ``<script>`` element, either as a JSON literal
with ``<``, ``>`` and ``&`` escaped (so no ``</script>`` can appear inside
it), or LZ-string compressed and base64 encoded.

Example::

    from ibom_tools.export import AssetBundle, render_html

    html = render_html(board, AssetBundle.default())
    Path("ibom.html").write_text(html, encoding="utf-8")
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

from lzstring import LZString

from ..config import IbomConfig, ViewerConfig
from ..exceptions import AssetError
from ..model.board import Board
from .assets import ASSET_FILES, AssetBundle
from .serializer import DEFAULT_SCHEMA_VERSION, JsonDocument, dumps, serialize

logger = logging.getLogger(__name__)

__all__ = [
    "escape_script_json",
    "viewer_config",
    "pcbdata_script",
    "assemble_html",
    "render_html",
]

_SCRIPT_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}
_SCRIPT_UNSAFE = re.compile("[<>&\u2028\u2029]")

_DYNAMIC = ("///CONFIG///", "///PCBDATA///", "///USERJS///", "///USERHEADER///", "///USERFOOTER///")
_KNOWN = re.compile("|".join(re.escape(p) for p in (*ASSET_FILES, *_DYNAMIC)))


def escape_script_json(text: str) -> str:
    """
    Make JSON text safe inside an HTML ``<script>`` element.

    These characters only occur inside JSON strings, where a ``\\uXXXX``
    escape decodes to the same value.
    """
    return _SCRIPT_UNSAFE.sub(lambda m: _SCRIPT_ESCAPES[m.group(0)], text)


def _layer_view(document: JsonDocument) -> str:
    """F, B or FB depending on which sides have BOM rows."""
    front = bool(document["bom"]["F"])
    back = bool(document["bom"]["B"])
    if front and not back:
        return "F"
    if back and not front:
        return "B"
    return "FB"


def viewer_config(document: JsonDocument, viewer: ViewerConfig) -> Dict[str, Any]:
    """Build the viewer's ``config`` object."""
    return {
        "board_rotation": float(viewer.board_rotation),
        "bom_view": viewer.bom_view,
        "checkboxes": ",".join(viewer.checkboxes),
        "dark_mode": viewer.dark_mode,
        "fields": list(viewer.fields),
        "highlight_pin1": viewer.highlight_pin1,
        "kicad_text_formatting": viewer.kicad_text_formatting,
        "layer_view": viewer.layer_view or _layer_view(document),
        "offset_back_rotation": viewer.offset_back_rotation,
        "redraw_on_drag": viewer.redraw_on_drag,
        "show_fabrication": viewer.show_fabrication,
        "show_pads": viewer.show_pads,
        "show_silkscreen": viewer.show_silkscreen,
    }


def pcbdata_script(document: JsonDocument, compress: bool = False) -> str:
    """JavaScript statement defining ``pcbdata``."""
    text = dumps(document)
    if compress:
        encoded = LZString().compressToBase64(text)
        return f'var pcbdata = JSON.parse(LZString.decompressFromBase64("{encoded}"))'
    return f"var pcbdata = {escape_script_json(text)}"


def assemble_html(
    document: JsonDocument,
    bundle: Optional[AssetBundle],
    config: Optional[IbomConfig] = None,
) -> str:
    """
    Embed a pcbdata document into the bundle's HTML template.

    Args:
        document: Output of :func:`~ibom_tools.export.serializer.serialize`
        bundle: Viewer assets
        config: Viewer settings (defaults when None)

    Returns:
        Complete HTML document

    Raises:
        AssetError: If the bundle is missing, lacks a resource the template
            uses, or its version differs from ``document["ibom_version"]``
    """
    if bundle is None:
        raise AssetError(
            "Asset bundle is missing",
            suggestions=["Pass AssetBundle.default() or AssetBundle.from_directory(path)"],
        )
    viewer = (config or IbomConfig()).viewer

    doc_version = document.get("ibom_version")
    if doc_version != bundle.version:
        raise AssetError(
            "Asset bundle version does not match the document schema version",
            context={"bundle": bundle.version, "document": doc_version, "source": bundle.source},
            suggestions=[f"Use an asset bundle built for schema {doc_version}"],
        )

    used = bundle.placeholders()
    if viewer.compress and "///LZ-STRING///" not in used:
        raise AssetError(
            "Compressed pcbdata needs a template that includes lz-string.js",
            context={"source": bundle.source},
            suggestions=["Set viewer.compress = false or use a full viewer bundle"],
        )

    replacements = {
        "///CONFIG///": "var config = " + escape_script_json(
            json.dumps(viewer_config(document, viewer), separators=(",", ":"))
        ),
        "///PCBDATA///": pcbdata_script(document, viewer.compress),
        "///USERJS///": viewer.user_js,
        "///USERHEADER///": viewer.user_header,
        "///USERFOOTER///": viewer.user_footer,
    }
    for placeholder in used:
        if placeholder in ASSET_FILES:
            replacements[placeholder] = bundle.resource(placeholder)

    # Single pass, so inserted text is never scanned for placeholders again
    html = _KNOWN.sub(lambda m: replacements.get(m.group(0), m.group(0)), bundle.template)

    logger.info("Assembled HTML BOM (%s): %d bytes", bundle.version, len(html.encode("utf-8")))
    return html


def render_html(
    board: Board,
    bundle: Optional[AssetBundle],
    config: Optional[IbomConfig] = None,
    *,
    schema_version: str = DEFAULT_SCHEMA_VERSION,
) -> str:
    """
    Serialize a board and embed it into the bundle's page.

    The bundle must be built for ``schema_version``; a stale or newer
    bundle is rejected rather than fed a document it cannot read.

    Raises:
        AssetError: If the bundle is missing, incomplete or built for
            another schema version
        SerializationError: On internal serialization failures
    """
    if bundle is None:
        raise AssetError("Asset bundle is missing")
    document = serialize(board, config, schema_version=schema_version)
    return assemble_html(document, bundle, config)
