"""Tests for the asset bundle and HTML assembly."""

import json
import re

import pytest
from lzstring import LZString

from ibom_tools.config import IbomConfig, ViewerConfig
from ibom_tools.exceptions import AssetError
from ibom_tools.export import (
    DEFAULT_SCHEMA_VERSION,
    AssetBundle,
    assemble_html,
    dumps,
    escape_script_json,
    render_html,
    serialize,
    viewer_config,
)
from ibom_tools.model import Layer, Point

from conftest import back_pads, chip_pads

PLACEHOLDER = re.compile(r"///[A-Z_-]+///")

MINIMAL_TEMPLATE = """<html><head>
<script>///LZ-STRING///</script>
<script>///CONFIG///</script>
<script>///PCBDATA///</script>
</head><body></body></html>
"""


def embedded_pcbdata(html: str) -> dict:
    """Extract and decode the plain-JSON pcbdata from a page."""
    line = html.split("var pcbdata = ", 1)[1].split("\n", 1)[0]
    return json.loads(line)


def embedded_config(html: str) -> dict:
    line = html.split("var config = ", 1)[1].split("\n", 1)[0]
    return json.loads(line)


def write_bundle(path, template=MINIMAL_TEMPLATE, version="v2.9.0", files=None):
    path.mkdir(parents=True, exist_ok=True)
    (path / "ibom.html").write_text(template)
    if version is not None:
        (path / "version.txt").write_text(version + "\n")
    for name, text in (files or {}).items():
        (path / name).write_text(text)
    return path


class TestAssetBundle:
    def test_default_bundle(self):
        bundle = AssetBundle.default()
        assert bundle.version == "v2.9.0"
        assert "///PCBDATA///" in bundle.placeholders()
        assert "///CSS///" in bundle.resources

    def test_from_directory(self, tmp_path):
        bundle = AssetBundle.from_directory(
            write_bundle(tmp_path / "web", files={"lz-string.js": "var LZString = {};"})
        )
        assert bundle.version == "v2.9.0"
        assert bundle.resource("///LZ-STRING///") == "var LZString = {};"
        assert bundle.placeholders() == ["///LZ-STRING///", "///CONFIG///", "///PCBDATA///"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(AssetError, match="not found"):
            AssetBundle.from_directory(tmp_path / "nowhere")

    def test_missing_version(self, tmp_path):
        with pytest.raises(AssetError, match="version.txt"):
            AssetBundle.from_directory(write_bundle(tmp_path / "web", version=None))

    def test_empty_version(self, tmp_path):
        with pytest.raises(AssetError, match="no version"):
            AssetBundle.from_directory(write_bundle(tmp_path / "web", version="  "))

    def test_template_without_marker(self, tmp_path):
        with pytest.raises(AssetError, match="injection point"):
            AssetBundle.from_directory(write_bundle(tmp_path / "web", template="<html></html>"))

    def test_resources_read_only(self):
        bundle = AssetBundle.default()
        with pytest.raises(TypeError):
            bundle.resources["///CSS///"] = ""

    def test_missing_resource(self):
        bundle = AssetBundle(version="v1", template="///PCBDATA///")
        with pytest.raises(AssetError, match="render.js"):
            bundle.resource("///RENDERJS///")


class TestEscaping:
    def test_script_close_escaped(self):
        assert escape_script_json('"</script>"') == '"\\u003c/script\\u003e"'

    def test_ampersand_and_separators(self):
        assert escape_script_json('"a&b\u2028\u2029"') == '"a\\u0026b\\u2028\\u2029"'

    def test_decodes_to_same_value(self):
        text = json.dumps({"v": "<b>&</b>\u2028"}, ensure_ascii=False)
        assert json.loads(escape_script_json(text)) == {"v": "<b>&</b>\u2028"}


class TestViewerConfig:
    def test_keys(self, simple_board):
        config = viewer_config(serialize(simple_board), ViewerConfig())
        assert config == {
            "board_rotation": 0.0,
            "bom_view": "left-right",
            "checkboxes": "Sourced,Placed",
            "dark_mode": False,
            "fields": ["Value", "Footprint"],
            "highlight_pin1": "none",
            "kicad_text_formatting": False,
            "layer_view": "F",
            "offset_back_rotation": False,
            "redraw_on_drag": True,
            "show_fabrication": True,
            "show_pads": True,
            "show_silkscreen": True,
        }

    def test_layer_view_detection(self, builder):
        builder.add_footprint("R1", "10k", Point(0, 0), Layer.B_CU, pads=back_pads())
        back_only = serialize(builder.finalize())
        assert viewer_config(back_only, ViewerConfig())["layer_view"] == "B"

    def test_layer_view_both(self, builder):
        builder.add_footprint("R1", "10k", Point(0, 0), Layer.F_CU, pads=chip_pads())
        builder.add_footprint("R2", "10k", Point(0, 0), Layer.B_CU, pads=back_pads())
        document = serialize(builder.finalize())
        assert viewer_config(document, ViewerConfig())["layer_view"] == "FB"

    def test_layer_view_empty_board(self, builder):
        document = serialize(builder.finalize())
        assert viewer_config(document, ViewerConfig())["layer_view"] == "FB"

    def test_explicit_layer_view(self, simple_board):
        config = viewer_config(serialize(simple_board), ViewerConfig(layer_view="B"))
        assert config["layer_view"] == "B"


class TestRenderHtml:
    """End-to-end page generation with the shipped bundle."""

    def test_single_resistor(self, single_resistor_board):
        html = render_html(single_resistor_board, AssetBundle.default())
        assert html.startswith("<!DOCTYPE html>")
        pcbdata = embedded_pcbdata(html)
        assert [fp["ref"] for fp in pcbdata["footprints"]] == ["R1"]
        assert pcbdata["bom"]["both"] == [[["R1", 0]]]
        assert len(pcbdata["bom"]["both"][0]) == 1

    def test_no_placeholders_left(self, simple_board):
        html = render_html(simple_board, AssetBundle.default())
        assert PLACEHOLDER.search(html) is None

    def test_embedded_document_matches_serializer(self, simple_board):
        bundle = AssetBundle.default()
        html = render_html(simple_board, bundle)
        document = serialize(simple_board, schema_version=bundle.version)
        assert embedded_pcbdata(html) == json.loads(dumps(document))

    def test_config_embedded(self, simple_board):
        config = IbomConfig(viewer=ViewerConfig(dark_mode=True, bom_view="top-bottom"))
        html = render_html(simple_board, AssetBundle.default(), config)
        embedded = embedded_config(html)
        assert embedded["dark_mode"] is True
        assert embedded["bom_view"] == "top-bottom"

    def test_script_breakout_escaped(self, builder):
        builder.add_footprint("R1", "</script><script>alert(1)</script>", Point(0, 0),
                              Layer.F_CU, pads=chip_pads())
        bundle = AssetBundle.default()
        html = render_html(builder.finalize(), bundle)
        assert html.count("</script>") == bundle.template.count("</script>")
        assert embedded_pcbdata(html)["footprints"][0]["ref"] == "R1"

    def test_line_separators_escaped(self, builder):
        builder.add_footprint("R1", "a\u2028b", Point(0, 0), Layer.F_CU, pads=chip_pads())
        html = render_html(builder.finalize(), AssetBundle.default())
        assert "\u2028" not in html

    def test_user_content(self, simple_board):
        config = IbomConfig(
            viewer=ViewerConfig(user_js="console.log('hi');", user_header="<h1>Rev A</h1>",
                                user_footer="<p>footer</p>")
        )
        html = render_html(simple_board, AssetBundle.default(), config)
        assert "console.log('hi');" in html
        assert "<h1>Rev A</h1>" in html
        assert "<p>footer</p>" in html

    def test_single_pass_substitution(self, simple_board):
        """Inserted text is never scanned for placeholders."""
        config = IbomConfig(viewer=ViewerConfig(user_js="// ///PCBDATA///"))
        html = render_html(simple_board, AssetBundle.default(), config)
        assert html.count("///PCBDATA///") == 1
        assert html.count("var pcbdata = ") == 1


class TestAssembleHtmlErrors:
    def test_version_mismatch(self, simple_board):
        document = serialize(simple_board, schema_version="v2.8.0")
        with pytest.raises(AssetError, match="version"):
            assemble_html(document, AssetBundle.default())

    def test_render_with_stale_bundle(self, single_resistor_board):
        default = AssetBundle.default()
        stale = AssetBundle(version="v0.0.1-stale", template=default.template,
                            resources=default.resources)
        with pytest.raises(AssetError, match="version") as exc_info:
            render_html(single_resistor_board, stale)
        assert exc_info.value.context["bundle"] == "v0.0.1-stale"
        assert exc_info.value.context["document"] == DEFAULT_SCHEMA_VERSION

    def test_render_with_explicit_schema_version(self, single_resistor_board):
        default = AssetBundle.default()
        older = AssetBundle(version="v2.8.0", template=default.template,
                            resources=default.resources)
        html = render_html(single_resistor_board, older, schema_version="v2.8.0")
        assert embedded_pcbdata(html)["ibom_version"] == "v2.8.0"
        with pytest.raises(AssetError, match="version"):
            render_html(single_resistor_board, default, schema_version="v2.8.0")

    def test_missing_bundle(self, simple_board):
        with pytest.raises(AssetError, match="missing"):
            render_html(simple_board, None)
        with pytest.raises(AssetError, match="missing"):
            assemble_html(serialize(simple_board), None)

    def test_template_needs_absent_resource(self, tmp_path, simple_board):
        bundle = AssetBundle.from_directory(write_bundle(tmp_path / "web"))
        with pytest.raises(AssetError, match="lz-string.js"):
            render_html(simple_board, bundle)

    def test_compression_needs_lz_string(self, simple_board):
        config = IbomConfig(viewer=ViewerConfig(compress=True))
        with pytest.raises(AssetError, match="lz-string"):
            render_html(simple_board, AssetBundle.default(), config)


class TestCompression:
    def test_compressed_pcbdata(self, tmp_path, simple_board):
        bundle = AssetBundle.from_directory(
            write_bundle(tmp_path / "web", files={"lz-string.js": "var LZString = {};"})
        )
        config = IbomConfig(viewer=ViewerConfig(compress=True))
        html = render_html(simple_board, bundle, config)

        match = re.search(r'LZString\.decompressFromBase64\("([A-Za-z0-9+/=]+)"\)', html)
        assert match is not None
        text = LZString().decompressFromBase64(match.group(1))
        document = serialize(simple_board, config, schema_version=bundle.version)
        assert text == dumps(document)
        assert "var LZString = {};" in html
