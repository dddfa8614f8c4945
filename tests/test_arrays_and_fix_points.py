"""
Arrays and Fix Points
=====================

Array member counts and the 100-member cap, rib/slice array layout and
individualization, subsurface line arrays, and fix-point split-surface
location including the half-mesh exclusion.
"""

import numpy as np
import pytest

from config import config
from feacore.array_expander import ArraySpec, array_count, member_locations, spacing_limits
from feacore.fix_point_locator import BorderType, locate_split_surfaces
from feacore.parts import FixPointPart, RibArrayPart, SkinPart, SliceArrayPart, UpdateContext
from feacore.placement import PlacementMode
from feacore.planar import OrientationPlane, OrientationSpec
from feacore.subsurfaces import ConstantLine, SubSurfaceLineArray


class TestArraySpec:

    def test_relative_count_and_locations(self):
        spec = ArraySpec(start_rel=0.1, spacing_rel=0.2)
        spec.derive(10.0)
        assert spec.count == 5
        assert member_locations(spec) == pytest.approx([0.1, 0.3, 0.5, 0.7, 0.9])

    def test_negative_direction(self):
        spec = ArraySpec(start_rel=0.8, spacing_rel=0.25, positive_direction=False)
        spec.derive(10.0)
        assert spec.count == 4
        assert member_locations(spec) == pytest.approx([0.8, 0.55, 0.3, 0.05])

    def test_absolute_mode_syncs_relative(self):
        spec = ArraySpec(start_abs=1.0, spacing_abs=2.0, mode=PlacementMode.ABS)
        spec.derive(10.0)
        assert spec.count == 5
        assert spec.start_rel == pytest.approx(0.1)
        assert spec.spacing_rel == pytest.approx(0.2)

    def test_negative_direction_absolute_uses_start(self):
        spec = ArraySpec(start_abs=3.0, spacing_abs=1.0, mode=PlacementMode.ABS,
                         positive_direction=False)
        spec.derive(10.0)
        assert spec.count == 4, "Members at 3, 2, 1 and 0"

    def test_count_is_capped(self):
        spec = ArraySpec(start_rel=0.0, spacing_rel=1e-9)
        spec.derive(10.0)
        lo, _ = spacing_limits(spec, 10.0)
        assert spec.spacing_rel == pytest.approx(lo)
        assert 99 <= spec.count <= config.arrays.max_members

    def test_start_at_end_gives_single_member(self):
        spec = ArraySpec(start_rel=1.0)
        spec.derive(10.0)
        assert array_count(spec, 10.0) == 1


class TestRibArray:

    def _array(self, wing_ctx) -> RibArrayPart:
        ribs = RibArrayPart("RECTWING", name="RibArray_0")
        ribs.spec = ArraySpec(start_rel=0.1, spacing_rel=0.2)
        ribs.theta = 10.0
        ribs.update(wing_ctx)
        return ribs

    def test_member_major_layout(self, wing_ctx):
        ribs = self._array(wing_ctx)
        assert len(ribs.surfaces) == 5 * 2
        for member, location in enumerate([0.1, 0.3, 0.5, 0.7, 0.9]):
            primary = ribs.surfaces[2 * member]
            mirrored = ribs.surfaces[2 * member + 1]
            center = primary.corners().mean(axis=0)
            assert center[1] == pytest.approx(10.0 * location, abs=1e-6)
            assert np.allclose(mirrored.corners()[:, 1], -primary.corners()[:, 1])
            assert mirrored.flip_normal and not primary.flip_normal

    def test_individualize_reproduces_members(self, wing_ctx):
        ribs = self._array(wing_ctx)
        singles = ribs.individualize()
        assert [r.name for r in singles] == [f"RibArray_0_Rib_{i}" for i in range(5)]
        for i, rib in enumerate(singles):
            assert rib.theta == 10.0
            rib.update(wing_ctx)
            assert np.allclose(rib.surfaces[0].corners(), ribs.surfaces[2 * i].corners())


class TestSliceArray:

    def test_slice_array_on_body(self, body_ctx):
        frames = SliceArrayPart("BODY", name="Frames")
        frames.spec = ArraySpec(start_rel=0.2, spacing_rel=0.3)
        frames.update(body_ctx)
        assert frames.count == 3
        xs = [s.corners()[:, 0].mean() for s in frames.surfaces]
        assert xs == pytest.approx([2.0, 5.0, 8.0], abs=1e-9)

    def test_individualize_copies_orientation(self, body_ctx):
        frames = SliceArrayPart("BODY", name="Frames")
        frames.orientation = OrientationSpec(OrientationPlane.BODY_XY, x_rot=5.0)
        frames.spec = ArraySpec(start_rel=0.25, spacing_rel=0.5)
        frames.update(body_ctx)
        singles = frames.individualize()
        assert [s.name for s in singles] == ["Frames_Slice_0", "Frames_Slice_1"]
        assert all(s.orientation == frames.orientation for s in singles)
        assert singles[0].orientation is not frames.orientation
        assert [s.placement.relative for s in singles] == pytest.approx([0.25, 0.75])


class TestLineArray:

    def test_lines_and_individualize(self):
        lines = SubSurfaceLineArray(name="Stringers")
        lines.constant = ConstantLine.W
        lines.spec = ArraySpec(start_rel=0.0, spacing_rel=0.25)
        assert len(lines.boundaries()) == 5
        singles = lines.individualize()
        assert [s.value for s in singles] == pytest.approx([0.0, 0.25, 0.5, 0.75, 1.0])
        assert all(s.constant is ConstantLine.W for s in singles)
        assert singles[2].name == "Stringers_SSLine_2"


class TestFixPointLocator:

    def _skin(self, wing_ctx) -> SkinPart:
        skin = SkinPart("RECTWING")
        skin.update(wing_ctx)
        return skin

    def test_interior_point(self, wing_ctx):
        skin = self._skin(wing_ctx)
        loc = locate_split_surfaces(skin.surfaces, 0.5, 0.3)
        # wing skin: one u interval, four w intervals per copy
        assert loc.indices == [[1], [5]]
        assert all(h.border is BorderType.INTERIOR for h in loc.hits)
        assert loc.border_flag is False

    def test_point_on_leading_edge_border(self, wing_ctx):
        skin = self._skin(wing_ctx)
        loc = locate_split_surfaces(skin.surfaces, 0.5, 0.5)
        assert loc.indices == [[1, 2], [5, 6]]
        assert loc.border_flag is True
        assert all(h.border is BorderType.W_BORDER for h in loc.hits)

    def test_closed_w_seam(self, wing_ctx):
        skin = self._skin(wing_ctx)
        loc = locate_split_surfaces(skin.surfaces[:1], 0.5, 0.0)
        borders = {h.patch: h.border for h in loc.hits}
        assert borders == {0: BorderType.W_BORDER, 3: BorderType.CLOSED_W_BORDER}

    def test_half_mesh_drops_mirrored_copy(self, wing_ctx):
        skin = self._skin(wing_ctx)
        loc = locate_split_surfaces(skin.surfaces, 0.5, 0.3, half_mesh=True)
        assert loc.indices == [[1], []], "Patches on y <= 0 are excluded"

    def test_missing_copy_keeps_later_indices(self, wing_ctx):
        skin = self._skin(wing_ctx)
        loc = locate_split_surfaces([None, skin.surfaces[1]], 0.5, 0.3)
        assert loc.indices == [[], [5]], "Copy 1 keeps its global patch numbers"
        assert [h.copy for h in loc.hits] == [1]


class TestFixPointPart:

    def test_points_per_copy(self, wing_ctx):
        skin = SkinPart("RECTWING")
        skin.update(wing_ctx)
        ctx = UpdateContext(wing_ctx.shapes, lambda pid: skin if pid == skin.id else None)

        fix = FixPointPart("RECTWING", name="fix", parent_part_id=skin.id)
        fix.pos_u, fix.pos_w = 0.5, 0.3
        fix.update(ctx)

        points = fix.points()
        assert len(points) == 2
        assert points[0][1] == pytest.approx(5.0)
        assert points[1][1] == pytest.approx(-5.0)
        assert fix.surfaces == [] and fix.mesh_records(0) == []
        assert fix.split_indices == [[1], [5]]

    def test_parent_with_missing_copy(self, wing_ctx):
        skin = SkinPart("RECTWING")
        skin.update(wing_ctx)
        skin.surfaces[0] = None
        ctx = UpdateContext(wing_ctx.shapes, lambda pid: skin if pid == skin.id else None)

        fix = FixPointPart("RECTWING", name="fix", parent_part_id=skin.id)
        fix.pos_u, fix.pos_w = 0.5, 0.3
        fix.update(ctx)

        assert fix.split_indices == [[], [5]]
        points = fix.points()
        assert len(points) == 1
        assert points[0][1] == pytest.approx(-5.0)

    def test_missing_parent_part_warns(self, wing_ctx, caplog):
        fix = FixPointPart("RECTWING", name="fix", parent_part_id="NOPE")
        with caplog.at_level("WARNING"):
            fix.update(wing_ctx)
        assert fix.points() == []
        assert "not found" in caplog.text


class TestArrayScenarios:

    def test_quarter_spacing_gives_five_ribs(self, wing_ctx):
        ribs = RibArrayPart("RECTWING", name="ribs")
        ribs.spec = ArraySpec(start_rel=0.0, spacing_rel=0.25)
        ribs.update(wing_ctx)
        assert ribs.member_locations() == pytest.approx([0.0, 0.25, 0.5, 0.75, 1.0])
        assert len(ribs.surfaces) == 5 * 2

    @pytest.mark.parametrize("spacing", [0.4, 0.2, 0.1, 0.05, 0.01, 1e-4])
    def test_halving_spacing_never_drops_count(self, spacing):
        coarse = ArraySpec(start_rel=0.15, spacing_rel=spacing)
        fine = ArraySpec(start_rel=0.15, spacing_rel=spacing / 2.0)
        coarse.derive(10.0)
        fine.derive(10.0)
        assert 1 <= coarse.count <= fine.count <= config.arrays.max_members


class TestCornerClassification:

    def test_patch_corner_is_not_interior(self, wing_ctx):
        skin = SkinPart("RECTWING")
        skin.update(wing_ctx)
        # u=0, w=1 is the shared corner of patches 0 and 1
        loc = locate_split_surfaces(skin.surfaces[:1], 0.0, 0.25)
        assert loc.indices == [[0, 1]]
        assert all(h.border is BorderType.CORNER for h in loc.hits)
        assert loc.border_flag is True
