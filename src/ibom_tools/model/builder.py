"""
Incremental board construction.

:class:`BoardBuilder` is the mutable half of a two-phase model: items are
added one at a time, each add checks its own layers and geometry, and
:meth:`BoardBuilder.finalize` runs the board-wide checks and returns an
immutable :class:`~ibom_tools.model.board.Board`.

Example::

    from ibom_tools.model import BoardBuilder, Layer, Pad, Point, Rect
    from ibom_tools.units import mm

    builder = BoardBuilder(title="Blinky", revision="A")
    for layer in (Layer.F_CU, Layer.B_CU, Layer.F_SILKS):
        builder.add_layer(layer)
    builder.set_board_outline(Rect(Point.from_mm(25, 15), mm(50), mm(30)))

    builder.add_footprint("R1", "10k", Point.from_mm(10, 10), Layer.F_CU, package="R_0603")
    builder.add_pad("R1", Pad(Rect(Point(0, 0), mm(0.8), mm(0.9)), Point.from_mm(-0.8, 0),
                              layers=(Layer.F_CU,)))
    board = builder.finalize()

The builder is meant for a single owner; it is not thread-safe.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from ..exceptions import GeometryError, ValidationError
from .board import (
    Board,
    Drawing,
    DrawingKind,
    Edge,
    Footprint,
    FootprintAttribute,
    Metadata,
    Pad,
    Track,
    Via,
    Zone,
)
from .layers import Layer, LayerKind
from .shapes import Arc, Point, Polygon, Shape, validate_shape

logger = logging.getLogger(__name__)

__all__ = ["BoardBuilder", "DEFAULT_OUTLINE_WIDTH"]

# Stroke width used for the board edge, 0.1 mm
DEFAULT_OUTLINE_WIDTH = 100_000


@dataclass
class _FootprintDraft:
    """Footprint under construction; pads can still be appended."""

    reference: str
    value: str
    position: Point
    layer: Layer
    rotation: float
    package: str
    attributes: frozenset[FootprintAttribute]
    fields: dict[str, str]
    dnp: bool
    pads: list[Pad] = field(default_factory=list)

    def freeze(self) -> Footprint:
        return Footprint(
            reference=self.reference,
            value=self.value,
            position=self.position,
            layer=self.layer,
            rotation=self.rotation,
            package=self.package,
            pads=tuple(self.pads),
            attributes=self.attributes,
            fields=self.fields,
            dnp=self.dnp,
        )


class BoardBuilder:
    """
    Mutable board under construction.

    Every ``add_*`` call either records the item or raises without changing
    the builder, so a caller can fix the input and try again.
    """

    def __init__(
        self,
        title: str = "",
        company: str = "",
        revision: str = "",
        date: str = "",
    ):
        self.metadata = Metadata(title=title, company=company, revision=revision, date=date)
        self._layers: list[Layer] = []
        self._footprints: list[_FootprintDraft] = []
        self._tracks: list[Track] = []
        self._vias: list[Via] = []
        self._zones: list[Zone] = []
        self._drawings: list[Drawing] = []
        self._outline: Optional[Shape] = None
        self._outline_width = DEFAULT_OUTLINE_WIDTH
        self._edges: list[Edge] = []
        self._finalized = False

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    @property
    def layers(self) -> tuple[Layer, ...]:
        return tuple(self._layers)

    def add_layer(self, layer: Layer | str) -> Layer:
        """
        Register a layer so items can be placed on it.

        Args:
            layer: Layer member or name such as "F.Cu"

        Returns:
            The registered layer

        Raises:
            ValidationError: For names outside the layer enumeration
        """
        self._check_open()
        if isinstance(layer, str):
            layer = Layer.from_name(layer)
        elif not isinstance(layer, Layer):
            raise ValidationError([f"Not a layer: {layer!r}"])
        if layer not in self._layers:
            self._layers.append(layer)
            logger.debug("Registered layer %s", layer.value)
        return layer

    def add_standard_layers(self) -> None:
        """Register every layer of the enumeration."""
        for layer in Layer:
            self.add_layer(layer)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def add_footprint(
        self,
        reference: str,
        value: str,
        position: Point,
        layer: Layer,
        rotation: float = 0.0,
        package: str = "",
        pads: Iterable[Pad] = (),
        attributes: Iterable[FootprintAttribute] = (),
        fields: Optional[Mapping[str, str]] = None,
        dnp: bool = False,
    ) -> int:
        """
        Add a footprint.

        Duplicate reference designators are reported by :meth:`finalize`
        together with every other board-wide problem.

        Args:
            reference: Reference designator, e.g. "R1"
            value: Component value, e.g. "10k"
            position: Footprint origin on the board
            layer: Copper layer of the side the part is placed on
            rotation: Rotation in degrees
            package: Footprint name shown in the BOM
            pads: Initial pads; more can be added with :meth:`add_pad`
            attributes: Mounting attributes
            fields: Extra BOM columns
            dnp: Do-not-populate flag

        Returns:
            Index of the footprint in the board's footprint list

        Raises:
            ValidationError: Empty reference, unknown or non-copper layer
            GeometryError: Degenerate pad geometry
        """
        self._check_open()
        if not reference:
            raise ValidationError(["Footprint reference designator is empty"])
        self._check_layer(layer, f"footprint {reference}", copper=True)
        pads = list(pads)
        for pad in pads:
            self._check_pad(pad, reference)

        self._footprints.append(
            _FootprintDraft(
                reference=reference,
                value=value,
                position=position,
                layer=layer,
                rotation=rotation,
                package=package,
                attributes=frozenset(attributes),
                fields=dict(fields or {}),
                dnp=dnp,
                pads=pads,
            )
        )
        logger.debug("Added footprint %s (%s) on %s", reference, value, layer.value)
        return len(self._footprints) - 1

    def add_pad(self, reference: str, pad: Pad) -> None:
        """
        Append a pad to the most recently added footprint with ``reference``.

        Raises:
            ValidationError: Unknown reference or layer
            GeometryError: Degenerate pad geometry
        """
        self._check_open()
        for draft in reversed(self._footprints):
            if draft.reference == reference:
                break
        else:
            raise ValidationError([f"No footprint with reference {reference!r}"])
        self._check_pad(pad, reference)
        draft.pads.append(pad)

    def add_track(self, track: Track) -> None:
        self._check_open()
        self._check_layer(track.layer, "track", copper=True)
        if track.width <= 0:
            raise ValidationError(["Track width must be positive"], context={"width_nm": track.width})
        self._tracks.append(track)

    def add_via(self, via: Via) -> None:
        self._check_open()
        if not via.layers:
            raise ValidationError(["Via has no layers"])
        for layer in via.layers:
            self._check_layer(layer, "via", copper=True)
        if via.diameter <= 0 or via.drill <= 0 or via.drill >= via.diameter:
            raise ValidationError(
                ["Via needs 0 < drill < diameter"],
                context={"diameter_nm": via.diameter, "drill_nm": via.drill},
            )
        self._vias.append(via)

    def add_zone(self, zone: Zone) -> None:
        """
        Add a copper zone.

        Raises:
            ValidationError: Unknown or non-copper layer
            GeometryError: Outline with fewer than 3 vertices, zero area or self-intersections
        """
        self._check_open()
        self._check_layer(zone.layer, "zone", copper=True)
        if not isinstance(zone.outline, Polygon):
            raise ValidationError(["Zone outline must be a Polygon"])
        validate_shape(zone.outline)
        self._zones.append(zone)

    def add_drawing(self, drawing: Drawing) -> None:
        """
        Add silkscreen or fabrication artwork.

        Raises:
            ValidationError: Unknown layer, or a layer that is not silkscreen/fabrication
            GeometryError: Degenerate shape, or a filled arc
        """
        self._check_open()
        self._check_layer(drawing.layer, "drawing")
        if drawing.layer.kind not in (LayerKind.SILKSCREEN, LayerKind.FABRICATION, LayerKind.COURTYARD):
            raise ValidationError(
                [f"Drawings cannot be placed on copper layer {drawing.layer.value}"]
            )
        if drawing.width < 0:
            raise ValidationError(["Drawing width must not be negative"])
        if drawing.kind is not DrawingKind.POLYGON and drawing.filled:
            raise ValidationError(["Text drawings cannot be filled"])
        if drawing.filled and isinstance(drawing.shape, Arc):
            raise GeometryError(
                "An open arc cannot be filled", context={"layer": drawing.layer.value}
            )
        validate_shape(drawing.shape)
        self._drawings.append(drawing)

    def set_board_outline(self, outline: Shape, width: int = DEFAULT_OUTLINE_WIDTH) -> None:
        """
        Set the board edge.

        Raises:
            GeometryError: If the outline is degenerate
            ValidationError: If the outline is an open arc
        """
        self._check_open()
        validate_shape(outline)
        if isinstance(outline, Arc):
            raise ValidationError(["Board outline must be a closed shape"])
        if width <= 0:
            raise ValidationError(["Board outline width must be positive"])
        self._outline = outline
        self._outline_width = width

    def add_edge(self, shape: Shape, width: int = DEFAULT_OUTLINE_WIDTH) -> None:
        """
        Add an edge cut besides the outline, such as a cutout or a slot.

        Open arcs are allowed; several of them can trace one contour.

        Raises:
            GeometryError: Degenerate shape
            ValidationError: Non-positive width
        """
        self._check_open()
        validate_shape(shape)
        if width <= 0:
            raise ValidationError(["Edge width must be positive"], context={"width_nm": width})
        self._edges.append(Edge(shape, width))

    # ------------------------------------------------------------------
    # Finalize
    # ------------------------------------------------------------------

    def finalize(self) -> Board:
        """
        Run board-wide validation and return the immutable board.

        Raises:
            ValidationError: Listing every violation found (duplicate
                reference designators, missing outline, no copper layer)
        """
        self._check_open()
        errors: list[str] = []

        counts = Counter(draft.reference for draft in self._footprints)
        for reference, count in counts.items():
            if count > 1:
                errors.append(f"Duplicate reference designator: {reference} ({count} footprints)")

        if self._outline is None:
            errors.append("Board outline is not set")

        if not any(layer.is_copper for layer in self._layers):
            errors.append("No copper layer registered")

        if errors:
            raise ValidationError(
                errors,
                context={"footprints": len(self._footprints)},
                suggestions=["Fix all listed problems, then call finalize() again"],
            )

        board = Board(
            metadata=self.metadata,
            layers=tuple(self._layers),
            outline=self._outline,
            outline_width=self._outline_width,
            footprints=tuple(draft.freeze() for draft in self._footprints),
            tracks=tuple(self._tracks),
            vias=tuple(self._vias),
            zones=tuple(self._zones),
            drawings=tuple(self._drawings),
            edges=tuple(self._edges),
        )
        self._finalized = True
        logger.info(
            "Finalized board %r: %d footprints, %d tracks, %d vias, %d zones, %d drawings",
            self.metadata.title,
            len(board.footprints),
            len(board.tracks),
            len(board.vias),
            len(board.zones),
            len(board.drawings),
        )
        return board

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def _check_open(self) -> None:
        if self._finalized:
            raise ValidationError(["Board is already finalized"])

    def _check_layer(self, layer: Layer, what: str, copper: bool = False) -> None:
        if not isinstance(layer, Layer):
            raise ValidationError([f"Unknown layer for {what}: {layer!r}"])
        if layer not in self._layers:
            raise ValidationError(
                [f"Layer {layer.value} of {what} is not registered"],
                suggestions=[f"Call add_layer({layer.name}) first"],
            )
        if copper and not layer.is_copper:
            raise ValidationError([f"{what} must be on a copper layer, not {layer.value}"])

    def _check_pad(self, pad: Pad, reference: str) -> None:
        if not pad.layers:
            raise ValidationError([f"Pad of {reference} has no layers"])
        for layer in pad.layers:
            self._check_layer(layer, f"pad of {reference}", copper=True)
        validate_shape(pad.shape)
        if isinstance(pad.shape, Arc):
            raise GeometryError(
                f"Pad of {reference} must be a closed shape, not an arc",
                context={"reference": reference},
            )
        if pad.drill < 0:
            raise ValidationError([f"Pad of {reference} has a negative drill"])
        if pad.drill_size is not None and min(pad.drill_size) <= 0:
            raise ValidationError([f"Pad of {reference} has an empty drill size"])
