"""
Board layers.

Layer names are a fixed enumeration matching the viewer's two-sided model:
every layer is one physical side combined with one functional kind.
"""

from __future__ import annotations

from enum import Enum

from ..exceptions import ValidationError

__all__ = ["Side", "LayerKind", "Layer"]


class Side(Enum):
    """Physical board side, valued with the viewer's side key."""

    TOP = "F"
    BOTTOM = "B"

    @property
    def opposite(self) -> Side:
        return Side.BOTTOM if self is Side.TOP else Side.TOP


class LayerKind(Enum):
    """Functional layer kind."""

    COPPER = "copper"
    SILKSCREEN = "silkscreen"
    FABRICATION = "fabrication"
    COURTYARD = "courtyard"


class Layer(Enum):
    """Board layers, one per side and kind."""

    F_CU = "F.Cu"  # Front copper
    B_CU = "B.Cu"  # Back copper
    F_SILKS = "F.SilkS"  # Front silkscreen
    B_SILKS = "B.SilkS"  # Back silkscreen
    F_FAB = "F.Fab"  # Front fabrication
    B_FAB = "B.Fab"  # Back fabrication
    F_CRTYD = "F.CrtYd"  # Front courtyard
    B_CRTYD = "B.CrtYd"  # Back courtyard

    @property
    def side(self) -> Side:
        return Side.TOP if self.value.startswith("F.") else Side.BOTTOM

    @property
    def kind(self) -> LayerKind:
        return _KINDS[self.value.split(".", 1)[1]]

    @property
    def is_copper(self) -> bool:
        return self.kind is LayerKind.COPPER

    @classmethod
    def of(cls, side: Side, kind: LayerKind) -> Layer:
        """Look up the layer for a side/kind combination."""
        for layer in cls:
            if layer.side is side and layer.kind is kind:
                return layer
        raise ValidationError([f"No layer for {side.name} {kind.value}"])

    @classmethod
    def from_name(cls, name: str) -> Layer:
        """
        Parse a layer name such as "F.Cu".

        Raises:
            ValidationError: If the name is not part of the enumeration
        """
        try:
            return cls(name)
        except ValueError:
            raise ValidationError(
                [f"Unknown layer name: {name!r}"],
                suggestions=[f"Use one of: {', '.join(layer.value for layer in cls)}"],
            ) from None


_KINDS = {
    "Cu": LayerKind.COPPER,
    "SilkS": LayerKind.SILKSCREEN,
    "Fab": LayerKind.FABRICATION,
    "CrtYd": LayerKind.COURTYARD,
}
