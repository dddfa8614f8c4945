"""
Planar Members on a Wing
========================

Ribs and spars on an untwisted rectangular wing (chord 2, span 10,
mirrored about XZ): placement, in-plane rotation, symmetry copies,
normal-flip state and the surface role handed to the mesher.
"""

import math

import numpy as np
import pytest

from feacore import vecmath
from feacore.parts import ElementMode, RibPart, SparPart, PERP_LEADING_EDGE
from feacore.planar import edge_midpoints
from feacore.surfaces import PlanarSurface, SurfaceRole


def _rib(ctx, relative=0.5, theta=0.0) -> RibPart:
    rib = RibPart("RECTWING", name="rib")
    rib.placement.set_relative(relative)
    rib.theta = theta
    rib.update(ctx)
    return rib


def _spar(ctx, relative=0.25, theta=0.0) -> SparPart:
    spar = SparPart("RECTWING", name="spar")
    spar.placement.set_relative(relative)
    spar.theta = theta
    spar.update(ctx)
    return spar


class TestRib:

    def test_rib_plane_sits_at_span_fraction(self, wing_ctx):
        rib = _rib(wing_ctx, relative=0.5)
        corners = rib.surfaces[0].corners()
        assert np.allclose(corners[:, 1], 5.0, atol=1e-9), \
            f"Mid-span rib corners should all lie at y=5, got {corners[:, 1]}"

    def test_rib_ends_on_trailing_and_leading_edges(self, wing_ctx):
        rib = _rib(wing_ctx, relative=0.3)
        end_te, end_le = edge_midpoints(rib.surfaces[0])
        assert end_te[0] == pytest.approx(2.0, abs=1e-9)
        assert end_le[0] == pytest.approx(0.0, abs=1e-9)

    def test_rotated_rib_stays_within_chord(self, wing_ctx):
        rib = _rib(wing_ctx, relative=0.5, theta=30.0)
        end_te, end_le = edge_midpoints(rib.surfaces[0])
        assert end_te[0] == pytest.approx(2.0, abs=1e-6)
        assert end_le[0] == pytest.approx(0.0, abs=1e-6)
        direction = vecmath.normalize(end_le - end_te)
        angle = math.degrees(math.atan2(abs(direction[1]), abs(direction[0])))
        assert angle == pytest.approx(30.0, abs=0.05)

    def test_rib_penetrates_skin_thickness(self, rect_wing, wing_ctx):
        rib = _rib(wing_ctx)
        corners = rib.surfaces[0].corners()
        thickness = rect_wing.main_surface().bounding_box().extents[2]
        assert corners[:, 2].max() - corners[:, 2].min() > thickness, \
            "Member height must exceed the skin's thinnest extent"

    def test_leading_edge_perpendicular_on_swept_wing(self):
        from feacore.parts import UpdateContext
        from feacore.shapes import ShapeRegistry
        from feacore.wing import WingGeom, WingSection

        wing = WingGeom(
            "swept",
            [WingSection(chord=2.0), WingSection(chord=2.0, span=10.0, sweep=20.0)],
            shape_id="SWEPT",
        )
        ctx = UpdateContext(ShapeRegistry([wing]))
        rib = RibPart("SWEPT", name="rib")
        rib.perpendicular_edge = PERP_LEADING_EDGE
        rib.update(ctx)

        end_te, end_le = edge_midpoints(rib.surfaces[0])
        rib_dir = vecmath.normalize(end_le - end_te)
        le_dir = vecmath.normalize(np.array([10.0 * math.tan(math.radians(20.0)), 10.0, 0.0]))
        assert abs(np.dot(rib_dir, le_dir)) < 1e-3, "Rib should be normal to the swept LE"

    def test_positive_theta_swings_trailing_edge_rootward(self, wing_ctx):
        rib = _rib(wing_ctx, relative=0.5, theta=20.0)
        end_te, end_le = edge_midpoints(rib.surfaces[0])
        offset = math.tan(math.radians(20.0))
        assert end_te[1] == pytest.approx(5.0 - offset, abs=1e-6), \
            "Positive theta is clockwise seen from above: TE end moves toward the root"
        assert end_le[1] == pytest.approx(5.0 + offset, abs=1e-6)

    def test_leading_edge_perpendicular_uses_local_edge_on_cranked_wing(self):
        from feacore.parts import UpdateContext
        from feacore.shapes import ShapeRegistry
        from feacore.wing import WingGeom, WingSection

        wing = WingGeom(
            "cranked",
            [WingSection(chord=2.0),
             WingSection(chord=2.0, span=5.0, sweep=0.0),
             WingSection(chord=2.0, span=5.0, sweep=45.0)],
            shape_id="CRANKED",
        )
        ctx = UpdateContext(ShapeRegistry([wing]))
        rib = RibPart("CRANKED", name="rib")
        rib.placement.set_relative(0.75)
        rib.perpendicular_edge = PERP_LEADING_EDGE
        rib.update(ctx)

        end_te, end_le = edge_midpoints(rib.surfaces[0])
        rib_dir = vecmath.normalize(end_le - end_te)
        outer_panel_le = vecmath.normalize(np.array([1.0, 1.0, 0.0]))
        assert abs(np.dot(rib_dir, outer_panel_le)) < 1e-3, \
            "Rib in the swept panel should be normal to that panel's leading edge"

    def test_unresolved_perpendicular_part_uses_zero_rotation(self, wing_ctx, caplog):
        plain = _rib(wing_ctx)
        with caplog.at_level("WARNING"):
            orphan = RibPart("RECTWING", name="orphan")
            orphan.perpendicular_edge = "MISSING"
            orphan.update(wing_ctx)
        assert np.allclose(orphan.surfaces[0].corners(), plain.surfaces[0].corners())
        assert "not found" in caplog.text


class TestSpar:

    def test_spar_at_chord_fraction(self, wing_ctx):
        spar = _spar(wing_ctx, relative=0.25)
        end_in, end_out = edge_midpoints(spar.surfaces[0])
        assert end_in[0] == pytest.approx(0.5, abs=1e-6)
        assert end_out[0] == pytest.approx(0.5, abs=1e-6)
        assert end_in[1] == pytest.approx(0.0, abs=1e-9)
        assert end_out[1] == pytest.approx(10.0, abs=1e-9)

    def test_section_limit(self):
        from feacore.parts import UpdateContext
        from feacore.shapes import ShapeRegistry
        from feacore.wing import WingGeom

        wing = WingGeom.tapered("w", semi_span=10.0, root_chord=2.0, tip_chord=2.0,
                                n_sections=3, shape_id="W3")
        spar = SparPart("W3", name="spar")
        spar.limit_to_section = True
        spar.section = 2
        spar.update(UpdateContext(ShapeRegistry([wing])))
        ys = sorted(p[1] for p in edge_midpoints(spar.surfaces[0]))
        assert ys == pytest.approx([5.0, 10.0], abs=1e-9), "Spar limited to the outboard interval"

    def test_spar_is_not_placed_on_a_body(self, body_ctx, caplog):
        spar = SparPart("BODY", name="spar")
        with caplog.at_level("WARNING"):
            spar.update(body_ctx)
        assert spar.surfaces == []
        assert "not a wing" in caplog.text


class TestSymmetryAndRoles:

    def test_mirrored_copy(self, wing_ctx):
        rib = _rib(wing_ctx, relative=0.4)
        assert len(rib.surfaces) == 2
        c0 = rib.surfaces[0].corners()
        c1 = rib.surfaces[1].corners()
        assert np.allclose(c1, c0 * np.array([1.0, -1.0, 1.0]))

    def test_flip_flags_follow_parent(self, rect_wing, wing_ctx):
        rib = _rib(wing_ctx)
        parent_flags = [s.flip_normal for s in rect_wing.surfaces()]
        assert [s.flip_normal for s in rib.surfaces] == parent_flags == [False, True]

    def test_update_is_idempotent(self, wing_ctx):
        rib = _rib(wing_ctx, relative=0.7, theta=15.0)
        before = [s.corners() for s in rib.surfaces]
        rib.update(wing_ctx)
        after = [s.corners() for s in rib.surfaces]
        assert all(np.array_equal(a, b) for a, b in zip(before, after))
        assert len(rib.surfaces) == 2

    def test_missing_shape_keeps_surfaces(self, wing_ctx):
        from feacore.parts import UpdateContext
        from feacore.shapes import ShapeRegistry

        rib = _rib(wing_ctx)
        kept = list(rib.surfaces)
        rib.update(UpdateContext(ShapeRegistry()))
        assert rib.surfaces == kept

    @pytest.mark.parametrize("mode,role", [
        (ElementMode.SHELL, SurfaceRole.STRUCTURE),
        (ElementMode.SHELL_AND_BEAM, SurfaceRole.STRUCTURE),
        (ElementMode.BEAM, SurfaceRole.STIFFENER),
    ])
    def test_role_from_element_mode(self, wing_ctx, mode, role):
        rib = RibPart("RECTWING", name="rib")
        rib.element_mode = mode
        rib.update(wing_ctx)
        assert all(s.role is role for s in rib.surfaces)

    def test_mesh_records_carry_cap_property_only_with_caps(self, wing_ctx):
        rib = _rib(wing_ctx)
        assert all(r.cap_property_index is None for r in rib.mesh_records(3))
        rib.element_mode = ElementMode.SHELL_AND_BEAM
        records = rib.mesh_records(3)
        assert [r.copy_index for r in records] == [0, 1]
        assert all(r.part_index == 3 and r.cap_property_index == 1 for r in records)

    def test_surfaces_are_planar(self, wing_ctx):
        rib = _rib(wing_ctx)
        assert all(isinstance(s, PlanarSurface) for s in rib.surfaces)
