"""
Edge Intersection Solver
========================

A rotated member must end exactly on the boundary of its parent region:
on the end edge while the rotation stays inside the corner angles, on the
side edge once it sweeps past a corner, and on a nominal-plus-expansion
fallback for degenerate edges.
"""

import math

import numpy as np
import pytest

from feacore import vecmath
from feacore.edge_solver import RegionCorners, rib_ends, solve_member, spar_ends

EXPANSION = 1e-3


def _square_region() -> RegionCorners:
    """Chord 2 along +x, span 10 along +y; normal is +z."""
    return RegionCorners(
        inner_le=np.array([0.0, 0.0, 0.0]),
        inner_te=np.array([2.0, 0.0, 0.0]),
        outer_le=np.array([0.0, 10.0, 0.0]),
        outer_te=np.array([2.0, 10.0, 0.0]),
    )


def _boundary_distance(point, corners: RegionCorners) -> float:
    edges = [corners.inner_edge, corners.outer_edge,
             corners.leading_edge, corners.trailing_edge]
    best = math.inf
    for a, b in edges:
        t = np.clip(np.dot(point - a, b - a) / np.dot(b - a, b - a), 0.0, 1.0)
        best = min(best, vecmath.length(point - (a + t * (b - a))))
    return best


def _solve_rib(y: float, degrees: float):
    corners = _square_region()
    center = np.array([1.0, y, 0.0])
    ends = rib_ends(center, np.array([2.0, y, 0.0]), np.array([0.0, y, 0.0]), corners)
    return corners, solve_member(center, ends, math.radians(degrees), corners.normal(), EXPANSION)


class TestRegionNormal:

    def test_normal_is_chord_cross_span(self):
        assert np.allclose(_square_region().normal(), [0.0, 0.0, 1.0])

    def test_collapsed_inner_chord_uses_outer_chord(self):
        corners = _square_region()
        corners.inner_te = corners.inner_le.copy()
        assert np.allclose(corners.normal(), [0.0, 0.0, 1.0]), \
            "Degenerate root chord should fall back to the tip chord"


class TestRibEnds:

    def test_zero_rotation_ends_at_nominal_points(self):
        _, solved = _solve_rib(5.0, 0.0)
        end_te, end_le = solved.end_points
        assert np.allclose(end_te, [2.0, 5.0, 0.0])
        assert np.allclose(end_le, [0.0, 5.0, 0.0])

    def test_rotation_stays_on_end_edges(self):
        corners, solved = _solve_rib(5.0, 30.0)
        expected = 1.0 / math.cos(math.radians(30.0))
        assert solved.lengths[0] == pytest.approx(expected, rel=1e-12)
        assert solved.lengths[1] == pytest.approx(expected, rel=1e-12)

        end_te, end_le = solved.end_points
        assert end_te[0] == pytest.approx(2.0, abs=1e-12), "TE end must sit on the trailing edge"
        assert end_le[0] == pytest.approx(0.0, abs=1e-12), "LE end must sit on the leading edge"
        assert end_te[1] < 5.0, "Positive rotation is clockwise about +z: the TE end swings rootward"

    def test_rotation_past_corner_switches_to_side_edge(self):
        corners, solved = _solve_rib(0.5, 80.0)
        end_te, end_le = solved.end_points

        assert end_te[1] == pytest.approx(0.0, abs=1e-9), \
            f"TE end should be clipped by the root edge, got y={end_te[1]:.6f}"
        assert end_le[0] == pytest.approx(0.0, abs=1e-9), \
            "LE end should remain on the leading edge"

    @pytest.mark.parametrize("y,degrees", [
        (5.0, 10.0), (5.0, -45.0), (0.5, 80.0), (9.5, -80.0), (2.0, 89.0), (8.0, -60.0),
    ])
    def test_both_ends_on_region_boundary(self, y, degrees):
        corners, solved = _solve_rib(y, degrees)
        for end in solved.end_points:
            assert _boundary_distance(end, corners) < 1e-9, \
                f"End {end} is off the region boundary for y={y}, rotation={degrees}"

    def test_negative_rotation_mirrors_positive(self):
        _, pos = _solve_rib(5.0, 40.0)
        _, neg = _solve_rib(5.0, -40.0)
        assert pos.lengths == pytest.approx(neg.lengths)
        assert pos.end_points[0][1] - 5.0 == pytest.approx(5.0 - neg.end_points[0][1])


class TestSparEnds:

    def test_zero_rotation_spans_root_to_tip(self):
        corners = _square_region()
        center = np.array([0.5, 5.0, 0.0])
        ends = spar_ends(center, np.array([0.5, 0.0, 0.0]), np.array([0.5, 10.0, 0.0]), corners)
        solved = solve_member(center, ends, 0.0, corners.normal(), EXPANSION)
        end_in, end_out = solved.end_points
        assert np.allclose(end_in, [0.5, 0.0, 0.0])
        assert np.allclose(end_out, [0.5, 10.0, 0.0])

    def test_large_rotation_hits_leading_and_trailing_edges(self):
        corners = _square_region()
        center = np.array([1.0, 5.0, 0.0])
        ends = spar_ends(center, np.array([1.0, 0.0, 0.0]), np.array([1.0, 10.0, 0.0]), corners)
        solved = solve_member(center, ends, math.radians(45.0), corners.normal(), EXPANSION)
        xs = sorted(p[0] for p in solved.end_points)
        assert xs == pytest.approx([0.0, 2.0], abs=1e-9), \
            "A 45 deg spar in a 2-wide region must be clipped by LE and TE"


class TestFallbacks:

    def test_degenerate_end_edge_uses_expanded_nominal(self):
        corners = _square_region()
        corners.inner_te = corners.inner_le.copy()
        center = np.array([0.0, 5.0, 0.0])
        inner_point = corners.inner_le
        ends = spar_ends(center, inner_point, np.array([0.0, 10.0, 0.0]), corners)
        solved = solve_member(center, ends, 0.0, corners.normal(), EXPANSION)
        assert solved.lengths[0] == pytest.approx(5.0 + EXPANSION), \
            "A zero-length end edge falls back to nominal length plus expansion"


def _swept_tapered_region() -> RegionCorners:
    """Root chord 3, tip chord 1, semi-span 8, 30 deg leading-edge sweep."""
    tip_le = 8.0 * math.tan(math.radians(30.0))
    return RegionCorners(
        inner_le=np.array([0.0, 0.0, 0.0]),
        inner_te=np.array([3.0, 0.0, 0.0]),
        outer_le=np.array([tip_le, 8.0, 0.0]),
        outer_te=np.array([tip_le + 1.0, 8.0, 0.0]),
    )


class TestSweptAndTaperedRegions:

    @pytest.mark.parametrize("rel", [0.05, 0.5, 0.95])
    @pytest.mark.parametrize("degrees", [-85.0, -60.0, 30.0, 85.0])
    def test_rib_ends_on_region_boundary(self, rel, degrees):
        corners = _swept_tapered_region()
        le = corners.inner_le + rel * (corners.outer_le - corners.inner_le)
        te = corners.inner_te + rel * (corners.outer_te - corners.inner_te)
        center = 0.5 * (le + te)
        solved = solve_member(center, rib_ends(center, te, le, corners),
                              math.radians(degrees), corners.normal(), EXPANSION)
        for end in solved.end_points:
            assert _boundary_distance(end, corners) < 1e-9, \
                f"Rib end {end} is off the region boundary for rel={rel}, rotation={degrees}"

    @pytest.mark.parametrize("rel", [0.05, 0.5, 0.95])
    @pytest.mark.parametrize("degrees", [-85.0, -30.0, 45.0, 85.0])
    def test_spar_ends_on_region_boundary(self, rel, degrees):
        corners = _swept_tapered_region()
        inner = corners.inner_le + rel * (corners.inner_te - corners.inner_le)
        outer = corners.outer_le + rel * (corners.outer_te - corners.outer_le)
        center = 0.5 * (inner + outer)
        solved = solve_member(center, spar_ends(center, inner, outer, corners),
                              math.radians(degrees), corners.normal(), EXPANSION)
        for end in solved.end_points:
            assert _boundary_distance(end, corners) < 1e-9, \
                f"Spar end {end} is off the region boundary for rel={rel}, rotation={degrees}"

    def test_steep_rib_near_root_exits_through_leading_edge(self):
        corners = _swept_tapered_region()
        le = 0.05 * corners.outer_le
        te = corners.inner_te + 0.05 * (corners.outer_te - corners.inner_te)
        center = 0.5 * (le + te)
        solved = solve_member(center, rib_ends(center, te, le, corners),
                              math.radians(-85.0), corners.normal(), EXPANSION)
        end_te = solved.end_points[0]
        # The tip edge line is reached beyond the tip chord; the swept LE comes first
        assert end_te[1] < 8.0, f"TE end must not reach the tip edge line, got y={end_te[1]:.4f}"
        assert end_te[0] == pytest.approx(end_te[1] * math.tan(math.radians(30.0)), abs=1e-9), \
            "TE end should land on the swept leading edge"
