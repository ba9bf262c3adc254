"""Pytest fixtures for ibom-tools tests."""

import pytest

from ibom_tools.model import (
    BoardBuilder,
    Circle,
    Layer,
    Pad,
    Point,
    Rect,
)
from ibom_tools.units import mm


def chip_pads(pitch_mm: float = 1.6, size_mm: float = 0.9) -> list:
    """Two-terminal SMD pads centred on the footprint origin."""
    half = pitch_mm / 2
    return [
        Pad(Rect(Point(0, 0), mm(size_mm), mm(size_mm)), Point.from_mm(-half, 0), (Layer.F_CU,),
            net="VCC", pin1=True),
        Pad(Rect(Point(0, 0), mm(size_mm), mm(size_mm)), Point.from_mm(half, 0), (Layer.F_CU,),
            net="GND"),
    ]


def back_pads() -> list:
    return [
        Pad(Rect(Point(0, 0), mm(0.9), mm(0.9)), Point.from_mm(-0.8, 0), (Layer.B_CU,)),
        Pad(Rect(Point(0, 0), mm(0.9), mm(0.9)), Point.from_mm(0.8, 0), (Layer.B_CU,)),
    ]


def th_pad(x_mm: float = 0.0) -> Pad:
    return Pad(
        Circle(Point(0, 0), mm(0.8)),
        Point.from_mm(x_mm, 0),
        (Layer.F_CU, Layer.B_CU),
        drill=mm(1.0),
    )


@pytest.fixture
def builder():
    """Builder with every layer registered and a 50 x 30 mm outline."""
    b = BoardBuilder(title="Test Board", company="ACME", revision="A", date="2024-01-01")
    b.add_standard_layers()
    b.set_board_outline(Rect(Point.from_mm(25, 15), mm(50), mm(30)))
    return b


@pytest.fixture
def single_resistor_board(builder):
    """A board holding only R1."""
    builder.add_footprint(
        "R1", "10k", Point.from_mm(10, 10), Layer.F_CU, package="R_0603", pads=chip_pads()
    )
    return builder.finalize()


@pytest.fixture
def simple_board(builder):
    """R1, R2 (10k, same footprint) and C1 on the top side."""
    builder.add_footprint(
        "R1", "10k", Point.from_mm(10, 10), Layer.F_CU, package="R_0603", pads=chip_pads()
    )
    builder.add_footprint(
        "R2", "10k", Point.from_mm(15, 10), Layer.F_CU, package="R_0603", pads=chip_pads()
    )
    builder.add_footprint(
        "C1", "100n", Point.from_mm(20, 10), Layer.F_CU, package="C_0603", pads=chip_pads()
    )
    return builder.finalize()
