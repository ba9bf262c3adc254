"""
Bill of Materials (BOM) aggregation.

Groups the footprints of a finalized board into BOM rows. Two footprints
share a row when their value, footprint identity (package name plus pad
layout) and extra fields are all equal.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .model.board import Board, Footprint
from .model.layers import Side

__all__ = [
    "BomRow",
    "FootprintIdentity",
    "natural_key",
    "footprint_identity",
    "aggregate_bom",
]

FootprintIdentity = Tuple[str, str]

_DIGITS = re.compile(r"(\d+)")


def natural_key(reference: str) -> tuple:
    """
    Sort key that orders embedded numbers numerically ("R2" before "R10").

    Text and number parts alternate, so keys always compare element-wise
    against the same types.
    """
    parts = _DIGITS.split(reference)
    return tuple(int(part) if i % 2 else part for i, part in enumerate(parts))


def footprint_identity(footprint: Footprint) -> FootprintIdentity:
    """
    Identity of a footprint's physical shape: (package name, pad layout digest).

    The digest covers every pad's shape, position, rotation and drill, so two
    footprints with the same package name but different pads never group.
    """
    layout = sorted(
        repr((pad.shape, pad.position, pad.rotation, pad.drill_extent)) for pad in footprint.pads
    )
    digest = hashlib.sha1("\n".join(layout).encode("utf-8")).hexdigest()[:12]
    return (footprint.package, digest)


@dataclass(frozen=True)
class BomRow:
    """A group of identical components."""

    value: str
    identity: FootprintIdentity
    fields: Tuple[Tuple[str, str], ...]
    references: Tuple[str, ...]
    footprint_ids: Tuple[int, ...]  # Indices into Board.footprints, same order as references

    @property
    def count(self) -> int:
        return len(self.references)

    @property
    def package(self) -> str:
        return self.identity[0]


def aggregate_bom(board: Board, side: Optional[Side] = None) -> List[BomRow]:
    """
    Group footprints into BOM rows.

    Virtual and do-not-populate footprints are left out.

    Args:
        board: Finalized board
        side: Only footprints placed on this side; None for both

    Returns:
        Rows ordered by value, then footprint identity, then first reference
        in natural order. References within a row are naturally sorted.
    """
    groups: Dict[tuple, List[Tuple[str, int]]] = {}

    for index, fp in enumerate(board.footprints):
        if not fp.in_bom:
            continue
        if side is not None and fp.side is not side:
            continue

        key = (fp.value, footprint_identity(fp), tuple(sorted(fp.fields.items())))
        groups.setdefault(key, []).append((fp.reference, index))

    rows = []
    for (value, identity, fields), members in groups.items():
        members.sort(key=lambda m: natural_key(m[0]))
        rows.append(
            BomRow(
                value=value,
                identity=identity,
                fields=fields,
                references=tuple(ref for ref, _ in members),
                footprint_ids=tuple(idx for _, idx in members),
            )
        )

    return sorted(rows, key=lambda r: (r.value, r.identity, natural_key(r.references[0])))
