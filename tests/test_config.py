"""Tests for configuration file support."""

import sys
import warnings

import pytest

from ibom_tools.config import (
    EncoderConfig,
    IbomConfig,
    ViewerConfig,
    generate_template,
    load_config,
)
from ibom_tools.exceptions import ConfigurationError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


class TestConfigDataclasses:
    """Test configuration dataclass defaults."""

    def test_encoder_defaults(self):
        """EncoderConfig has correct defaults."""
        config = EncoderConfig()
        assert config.epsilon_ratio == 0.01
        assert config.max_error_nm is None
        assert config.min_circle_segments == 4
        assert config.max_segments == 256

    def test_viewer_defaults(self):
        """ViewerConfig has correct defaults."""
        config = ViewerConfig()
        assert config.dark_mode is False
        assert config.checkboxes == ["Sourced", "Placed"]
        assert config.fields == ["Value", "Footprint"]
        assert config.bom_view == "left-right"
        assert config.layer_view is None
        assert config.compress is False

    def test_defaults_not_shared(self):
        """List defaults are independent between instances."""
        a = ViewerConfig()
        a.fields.append("MPN")
        assert ViewerConfig().fields == ["Value", "Footprint"]


class TestEncoderTolerance:
    def test_relative(self):
        assert EncoderConfig(epsilon_ratio=0.01).tolerance(1_000_000) == pytest.approx(10_000)

    def test_absolute_cap(self):
        config = EncoderConfig(epsilon_ratio=0.01, max_error_nm=500)
        assert config.tolerance(1_000_000) == 500
        assert config.tolerance(10_000) == pytest.approx(100)


class TestConfigValidation:
    """Out-of-range values are rejected on construction."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"epsilon_ratio": 0},
            {"epsilon_ratio": -0.1},
            {"max_error_nm": 0},
            {"min_circle_segments": 3},
            {"min_circle_segments": 8, "max_segments": 6},
            {"samples_per_segment": 1},
        ],
    )
    def test_bad_encoder_values(self, kwargs):
        with pytest.raises(ConfigurationError):
            EncoderConfig(**kwargs)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"bom_view": "sideways"},
            {"layer_view": "X"},
            {"highlight_pin1": "some"},
            {"fields": ["Value", 3]},
        ],
    )
    def test_bad_viewer_values(self, kwargs):
        with pytest.raises(ConfigurationError):
            ViewerConfig(**kwargs)


class TestFromDict:
    """Test IbomConfig.from_dict."""

    def test_empty(self):
        config = IbomConfig.from_dict({})
        assert config.encoder == EncoderConfig()
        assert config.viewer == ViewerConfig()

    def test_sections(self):
        config = IbomConfig.from_dict(
            {
                "encoder": {"epsilon_ratio": 0.005, "max_error_nm": 1000},
                "viewer": {"dark_mode": True, "fields": ["Value", "MPN"], "board_rotation": 90},
            }
        )
        assert config.encoder.epsilon_ratio == 0.005
        assert config.encoder.max_error_nm == 1000
        assert config.viewer.dark_mode is True
        assert config.viewer.fields == ["Value", "MPN"]
        assert config.viewer.board_rotation == 90.0
        assert isinstance(config.viewer.board_rotation, float)

    def test_unknown_key_warns(self):
        with pytest.warns(UserWarning, match="viewer.theme"):
            config = IbomConfig.from_dict({"viewer": {"theme": "solarized"}})
        assert config.viewer == ViewerConfig()

    def test_unknown_section_warns(self):
        with pytest.warns(UserWarning, match="'router'"):
            IbomConfig.from_dict({"router": {}})

    def test_wrong_type(self):
        with pytest.raises(ConfigurationError, match="viewer.dark_mode"):
            IbomConfig.from_dict({"viewer": {"dark_mode": "yes"}})

    def test_bool_not_numeric(self):
        with pytest.raises(ConfigurationError):
            IbomConfig.from_dict({"encoder": {"max_segments": True}})

    def test_section_must_be_table(self):
        with pytest.raises(ConfigurationError, match="must be a table"):
            IbomConfig.from_dict({"encoder": 3})


class TestLoadConfig:
    """Test reading TOML files."""

    def test_load(self, tmp_path):
        path = tmp_path / "ibom.toml"
        path.write_text('[viewer]\ndark_mode = true\nbom_view = "top-bottom"\n')
        config = load_config(path)
        assert config.viewer.dark_mode is True
        assert config.viewer.bom_view == "top-bottom"

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "ibom.toml"
        path.write_text("[viewer\n")
        with pytest.raises(ConfigurationError, match="Invalid TOML"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_config(tmp_path / "missing.toml")

    def test_template_parses_to_defaults(self):
        data = tomllib.loads(generate_template())
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            config = IbomConfig.from_dict(data)
        assert config == IbomConfig()
