"""Shared parent shapes for the structural part tests."""

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

import pytest

from feacore.body import BodyGeom
from feacore.parts import UpdateContext
from feacore.shapes import ShapeRegistry, SymmetryPlane
from feacore.wing import WingGeom, WingSection


def make_rect_wing(**kwargs) -> WingGeom:
    """Chord 2, span 10, untwisted, mirrored about XZ."""
    return WingGeom(
        "rect_wing",
        [WingSection(chord=2.0), WingSection(chord=2.0, span=10.0)],
        shape_id=kwargs.pop("shape_id", "RECTWING"),
        **kwargs,
    )


def make_body(**kwargs) -> BodyGeom:
    """Ellipsoidal body, length 10 along x, no planar symmetry."""
    kwargs.setdefault("symmetry", SymmetryPlane.NONE)
    return BodyGeom.ellipsoidal(
        "body", length=10.0, width=2.0, height=2.0,
        shape_id=kwargs.pop("shape_id", "BODY"), **kwargs,
    )


@pytest.fixture()
def rect_wing():
    return make_rect_wing()


@pytest.fixture()
def body():
    return make_body()


@pytest.fixture()
def wing_ctx(rect_wing):
    return UpdateContext(ShapeRegistry([rect_wing]))


@pytest.fixture()
def body_ctx(body):
    return UpdateContext(ShapeRegistry([body]))
