"""
Versioned web asset bundle.

The viewer page is built from an HTML template with ``///NAME///``
placeholders plus the CSS/JS files they stand for, and a version string
identifying which pcbdata schema the scripts understand.

A bundle directory contains::

    ibom.html      template (must contain ///PCBDATA///)
    version.txt    schema version, e.g. "v2.9.0"
    ibom.css, ibom.js, render.js, ...   resources, see ASSET_FILES

``AssetBundle.default()`` loads the bundle shipped in ``ibom_tools/web``.
Several bundles can be loaded side by side; nothing is cached globally.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from ..exceptions import AssetError

logger = logging.getLogger(__name__)

__all__ = [
    "ASSET_FILES",
    "PCBDATA_MARKER",
    "WEB_DIR",
    "AssetBundle",
]

# Placeholder -> file providing its text
ASSET_FILES = {
    "///CSS///": "ibom.css",
    "///SPLITJS///": "split.js",
    "///LZ-STRING///": "lz-string.js",
    "///POINTER_EVENTS_POLYFILL///": "pep.js",
    "///UTILJS///": "util.js",
    "///RENDERJS///": "render.js",
    "///TABLEUTILJS///": "table-util.js",
    "///IBOMJS///": "ibom.js",
}

TEMPLATE_FILE = "ibom.html"
VERSION_FILE = "version.txt"
PCBDATA_MARKER = "///PCBDATA///"

# Bundle shipped with the package
WEB_DIR = Path(__file__).resolve().parent.parent / "web"

_PLACEHOLDER = re.compile(r"///[A-Z_-]+///")


@dataclass(frozen=True)
class AssetBundle:
    """
    An immutable, preloaded set of viewer assets.

    Attributes:
        version: Schema version the bundled scripts understand
        template: HTML template text
        resources: Placeholder -> resource text
        source: Where the bundle was loaded from
    """

    version: str
    template: str
    resources: Mapping[str, str] = field(default_factory=dict)
    source: str = "<memory>"

    def __post_init__(self) -> None:
        if not self.version or not self.version.strip():
            raise AssetError("Asset bundle has no version", context={"source": self.source})
        if PCBDATA_MARKER not in self.template:
            raise AssetError(
                "Asset template has no pcbdata injection point",
                context={"source": self.source, "marker": PCBDATA_MARKER},
            )
        object.__setattr__(self, "version", self.version.strip())
        object.__setattr__(self, "resources", MappingProxyType(dict(self.resources)))

    @classmethod
    def from_directory(cls, path: str | Path) -> AssetBundle:
        """
        Load a bundle from a directory.

        Resource files that are absent are simply not part of the bundle;
        the assembler complains only if the template needs them.

        Raises:
            AssetError: If the directory, template or version file is missing
        """
        path = Path(path)
        if not path.is_dir():
            raise AssetError(
                "Asset bundle directory not found",
                context={"path": str(path)},
                suggestions=["Vendor the viewer web files into this directory"],
            )

        def read(name: str) -> str:
            try:
                return (path / name).read_text(encoding="utf-8")
            except OSError as e:
                raise AssetError(
                    f"Cannot read asset file {name}", context={"path": str(path), "error": str(e)}
                ) from e

        template = read(TEMPLATE_FILE)
        version = read(VERSION_FILE)
        resources = {
            placeholder: read(filename)
            for placeholder, filename in ASSET_FILES.items()
            if (path / filename).is_file()
        }
        logger.debug("Loaded asset bundle %s from %s (%d resources)", version.strip(), path, len(resources))
        return cls(version=version, template=template, resources=resources, source=str(path))

    @classmethod
    def default(cls) -> AssetBundle:
        """Load the bundle shipped with ibom-tools."""
        return cls.from_directory(WEB_DIR)

    def placeholders(self) -> list[str]:
        """Placeholders used by the template, in order of first appearance."""
        return list(dict.fromkeys(_PLACEHOLDER.findall(self.template)))

    def resource(self, placeholder: str) -> str:
        """
        Text for a static placeholder.

        Raises:
            AssetError: If the bundle does not provide it
        """
        try:
            return self.resources[placeholder]
        except KeyError:
            filename = ASSET_FILES.get(placeholder, "?")
            raise AssetError(
                f"Asset bundle is missing {filename}",
                context={"source": self.source, "placeholder": placeholder},
            ) from None
