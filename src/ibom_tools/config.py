"""
Configuration support for ibom-tools.

Configuration is always an explicit value passed to the encoder, serializer
and assembler; nothing is read from process-wide state. A TOML file can be
loaded with :func:`load_config`::

    [encoder]
    epsilon_ratio = 0.005

    [viewer]
    dark_mode = true
    fields = ["Value", "Footprint", "MPN"]

Unknown keys are reported with ``warnings.warn`` and otherwise ignored.
"""

from __future__ import annotations

import sys
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .exceptions import ConfigurationError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

__all__ = [
    "EncoderConfig",
    "ViewerConfig",
    "IbomConfig",
    "load_config",
    "generate_template",
]

# Known keys per section and the value types they accept
KNOWN_KEYS: dict[str, dict[str, tuple[type, ...]]] = {
    "encoder": {
        "epsilon_ratio": (float, int),
        "max_error_nm": (int,),
        "min_circle_segments": (int,),
        "max_segments": (int,),
        "samples_per_segment": (int,),
    },
    "viewer": {
        "dark_mode": (bool,),
        "show_silkscreen": (bool,),
        "show_fabrication": (bool,),
        "show_pads": (bool,),
        "checkboxes": (list,),
        "fields": (list,),
        "highlight_pin1": (str,),
        "board_rotation": (float, int),
        "bom_view": (str,),
        "layer_view": (str,),
        "offset_back_rotation": (bool,),
        "redraw_on_drag": (bool,),
        "kicad_text_formatting": (bool,),
        "compress": (bool,),
        "user_js": (str,),
        "user_header": (str,),
        "user_footer": (str,),
    },
}

BOM_VIEWS = {"bom-only", "left-right", "top-bottom"}
LAYER_VIEWS = {"F", "FB", "B"}
HIGHLIGHT_PIN1 = {"none", "all", "selected"}


@dataclass
class EncoderConfig:
    """Tolerances for flattening curves into Bezier paths."""

    # Allowed deviation as a fraction of the curve radius
    epsilon_ratio: float = 0.01
    # Optional absolute cap on the deviation, in nanometres
    max_error_nm: int | None = None
    min_circle_segments: int = 4
    max_segments: int = 256
    # Samples per Bezier segment when measuring deviation
    samples_per_segment: int = 32

    def __post_init__(self) -> None:
        if not self.epsilon_ratio > 0:
            raise ConfigurationError(
                "encoder.epsilon_ratio must be positive",
                context={"value": self.epsilon_ratio},
            )
        if self.max_error_nm is not None and self.max_error_nm <= 0:
            raise ConfigurationError(
                "encoder.max_error_nm must be positive",
                context={"value": self.max_error_nm},
            )
        if self.min_circle_segments < 4:
            raise ConfigurationError(
                "encoder.min_circle_segments must be at least 4",
                context={"value": self.min_circle_segments},
            )
        if self.max_segments < self.min_circle_segments:
            raise ConfigurationError(
                "encoder.max_segments must not be below min_circle_segments",
                context={"max_segments": self.max_segments},
            )
        if self.samples_per_segment < 2:
            raise ConfigurationError(
                "encoder.samples_per_segment must be at least 2",
                context={"value": self.samples_per_segment},
            )

    def tolerance(self, radius_nm: float) -> float:
        """Allowed deviation in nanometres for a curve of the given radius."""
        eps = self.epsilon_ratio * radius_nm
        if self.max_error_nm is not None:
            eps = min(eps, float(self.max_error_nm))
        return eps


@dataclass
class ViewerConfig:
    """Settings embedded in the page as the viewer's ``config`` object."""

    dark_mode: bool = False
    show_silkscreen: bool = True
    show_fabrication: bool = True
    show_pads: bool = True
    checkboxes: list[str] = field(default_factory=lambda: ["Sourced", "Placed"])
    # BOM columns; "Value" and "Footprint" map to the footprint attributes
    fields: list[str] = field(default_factory=lambda: ["Value", "Footprint"])
    highlight_pin1: str = "none"
    board_rotation: float = 0.0
    bom_view: str = "left-right"
    # None picks F, B or FB from which sides have BOM rows
    layer_view: str | None = None
    offset_back_rotation: bool = False
    redraw_on_drag: bool = True
    kicad_text_formatting: bool = False
    # Embed pcbdata LZ-string compressed instead of as plain JSON
    compress: bool = False

    # Raw HTML/JS inserted verbatim into the page
    user_js: str = ""
    user_header: str = ""
    user_footer: str = ""

    def __post_init__(self) -> None:
        if self.bom_view not in BOM_VIEWS:
            raise ConfigurationError(
                f"Invalid viewer.bom_view: {self.bom_view!r}",
                suggestions=[f"Use one of: {', '.join(sorted(BOM_VIEWS))}"],
            )
        if self.layer_view is not None and self.layer_view not in LAYER_VIEWS:
            raise ConfigurationError(
                f"Invalid viewer.layer_view: {self.layer_view!r}",
                suggestions=[f"Use one of: {', '.join(sorted(LAYER_VIEWS))}"],
            )
        if self.highlight_pin1 not in HIGHLIGHT_PIN1:
            raise ConfigurationError(
                f"Invalid viewer.highlight_pin1: {self.highlight_pin1!r}",
                suggestions=[f"Use one of: {', '.join(sorted(HIGHLIGHT_PIN1))}"],
            )
        for name in ("checkboxes", "fields"):
            values = getattr(self, name)
            if not all(isinstance(v, str) for v in values):
                raise ConfigurationError(
                    f"viewer.{name} must be a list of strings",
                    context={"value": values},
                )


@dataclass
class IbomConfig:
    """Complete configuration for one HTML generation run."""

    encoder: EncoderConfig = field(default_factory=EncoderConfig)
    viewer: ViewerConfig = field(default_factory=ViewerConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: str = "<dict>") -> IbomConfig:
        """
        Build a configuration from parsed TOML data.

        Args:
            data: Mapping with optional ``encoder`` and ``viewer`` tables
            source: Name used in warnings and errors

        Returns:
            Configuration object

        Raises:
            ConfigurationError: If a value has the wrong type or is out of range
        """
        for key in data:
            if key not in KNOWN_KEYS:
                warnings.warn(f"Unknown config key '{key}' in {source}", stacklevel=2)

        sections: dict[str, dict[str, Any]] = {}
        for section, known in KNOWN_KEYS.items():
            raw = data.get(section, {})
            if not isinstance(raw, dict):
                raise ConfigurationError(
                    f"Config section '{section}' must be a table",
                    context={"source": source},
                )
            sections[section] = _check_section(raw, known, section, source)

        return cls(
            encoder=EncoderConfig(**sections["encoder"]),
            viewer=ViewerConfig(**sections["viewer"]),
        )


def _check_section(
    data: dict[str, Any], known: dict[str, tuple[type, ...]], section: str, source: str
) -> dict[str, Any]:
    """Return the known keys of a section after checking their types."""
    checked: dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            warnings.warn(f"Unknown config key '{section}.{key}' in {source}", stacklevel=3)
            continue
        expected = known[key]
        # bool is an int subclass; do not accept it for numeric keys
        if not isinstance(value, expected) or (isinstance(value, bool) and bool not in expected):
            raise ConfigurationError(
                f"Invalid type for config key '{section}.{key}'",
                context={
                    "source": source,
                    "value": repr(value),
                    "expected": " or ".join(t.__name__ for t in expected),
                },
            )
        checked[key] = float(value) if float in expected and not isinstance(value, bool) else value
    return checked


def load_config(path: str | Path) -> IbomConfig:
    """
    Load configuration from a TOML file.

    Args:
        path: Path to the TOML file

    Returns:
        Configuration object

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
    return IbomConfig.from_dict(data, source=str(path))


def generate_template() -> str:
    """
    Generate a template config file with all options documented.

    Returns:
        Template TOML string
    """
    return """# ibom-tools configuration file

[encoder]
# Allowed curve deviation as a fraction of the radius
# epsilon_ratio = 0.01

# Absolute cap on curve deviation in nanometres
# max_error_nm = 1000

# Minimum number of Bezier segments for a full circle
# min_circle_segments = 4

# Upper bound on Bezier segments per curve
# max_segments = 256

[viewer]
# dark_mode = false
# show_silkscreen = true
# show_fabrication = true
# show_pads = true

# Checkbox columns in the BOM table
# checkboxes = ["Sourced", "Placed"]

# BOM columns; "Value" and "Footprint" are built in, others come from footprint fields
# fields = ["Value", "Footprint"]

# Pin 1 highlighting: none, all, selected
# highlight_pin1 = "none"

# board_rotation = 0.0

# Layout: bom-only, left-right, top-bottom
# bom_view = "left-right"

# Sides shown initially: F, FB, B (auto-detected when unset)
# layer_view = "FB"

# offset_back_rotation = false
# redraw_on_drag = true
# kicad_text_formatting = false

# Embed pcbdata LZ-string compressed (bundle must ship lz-string.js)
# compress = false
"""
