"""
Structure Persistence
=====================

Structures are saved as parameter documents and regenerate the same
surfaces after loading.
"""

import json

import numpy as np
import pytest

from feacore.array_expander import ArraySpec
from feacore.parts import ElementMode, PartType, RibArrayPart, SlicePart
from feacore.persistence import FORMAT_VERSION, load_structure, save_structure
from feacore.planar import OrientationPlane, OrientationSpec
from feacore.properties import FeaMaterial
from feacore.shapes import ShapeRegistry
from feacore.structure import Structure
from feacore.subsurfaces import SubSurfaceType


def _populated(rect_wing) -> Structure:
    structure = Structure(rect_wing.id, name="wing")
    structure.init_skin()
    rib = structure.add_part(PartType.RIB)
    rib.placement.set_absolute(3.0)
    rib.theta = 12.5
    rib.element_mode = ElementMode.SHELL_AND_BEAM
    spar = structure.add_part(PartType.SPAR)
    spar.placement.set_relative(0.3)
    ribs = structure.add_part(PartType.RIB_ARRAY)
    ribs.spec = ArraySpec(start_rel=0.2, spacing_rel=0.3, positive_direction=False)
    ribs.perpendicular_edge = spar.id
    fix = structure.add_part(PartType.FIX_POINT)
    fix.pos_u, fix.pos_w = 0.25, 0.75
    ellipse = structure.add_subsurface(SubSurfaceType.ELLIPSE)
    ellipse.u_length = 0.4
    structure.properties.materials.append(FeaMaterial("Steel", 7850.0, 200e9, 0.29, 1.2e-5))
    structure.half_mesh = True
    return structure


class TestRoundTrip:

    def test_dict_round_trip(self, rect_wing):
        structure = _populated(rect_wing)
        assert Structure.from_dict(structure.to_dict()).to_dict() == structure.to_dict()

    def test_file_round_trip(self, rect_wing, tmp_path):
        structure = _populated(rect_wing)
        path = save_structure(structure, tmp_path / "nested" / "wing.json")
        assert path.exists()

        loaded = load_structure(path)
        assert loaded.to_dict() == structure.to_dict()
        assert isinstance(loaded.parts[3], RibArrayPart)
        assert loaded.parts[3].perpendicular_edge == loaded.parts[2].id

    def test_loaded_structure_regenerates_surfaces(self, rect_wing, tmp_path):
        structure = _populated(rect_wing)
        structure.update(ShapeRegistry([rect_wing]))
        loaded = load_structure(save_structure(structure, tmp_path / "wing.json"))
        loaded.update(ShapeRegistry([rect_wing]))

        for before, after in zip(structure.parts, loaded.parts):
            assert len(before.surfaces) == len(after.surfaces), before.name
            for a, b in zip(before.surfaces, after.surfaces):
                assert np.allclose(a.evaluate(0.3, 0.7), b.evaluate(0.3, 0.7))

    def test_part_counter_survives(self, rect_wing, tmp_path):
        structure = _populated(rect_wing)
        loaded = load_structure(save_structure(structure, tmp_path / "wing.json"))
        assert loaded.add_part(PartType.SLICE).name == "Slice_4"

    def test_slice_orientation_survives(self, body, tmp_path):
        structure = Structure(body.id)
        cut = structure.append_part(SlicePart(body.id, name="cut"))
        cut.orientation = OrientationSpec(OrientationPlane.ABS_XY, x_rot=10.0, z_rot=-20.0)
        loaded = load_structure(save_structure(structure, tmp_path / "body.json"))
        assert loaded.parts[0].orientation == cut.orientation


class TestDocument:

    def test_document_header(self, rect_wing, tmp_path):
        path = save_structure(_populated(rect_wing), tmp_path / "wing.json")
        data = json.loads(path.read_text())
        assert data["format_version"] == FORMAT_VERSION
        assert data["structure"]["name"] == "wing"

    def test_newer_format_is_rejected(self, tmp_path):
        path = tmp_path / "future.json"
        path.write_text(json.dumps({"format_version": FORMAT_VERSION + 1, "structure": {}}))
        with pytest.raises(ValueError, match="Unsupported"):
            load_structure(path)
