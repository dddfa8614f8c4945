"""
Open-FEA Parts: Edge Intersection Solver
========================================

Sizes a planar member so that both ends sit exactly on the nearest edge of
the parent region after an in-plane rotation.

The region is a quadrilateral described by its four corners. Each member
end nominally meets an "end edge"; once the rotation sweeps the end ray
past a corner of that edge, the end meets the "side edge" leaving that
corner instead:

    rib   ends: trailing / leading edge,   sides: inner / outer edge
    spar  ends: inner / outer edge,        sides: leading / trailing edge

When a swept or tapered region sends the rotated end out through some
other edge, the nearest forward hit that lies on any of the four region
edges is used.

Rotation is clockwise about the region normal
(chord edge x span edge).
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from config import config
from . import vecmath

logger = logging.getLogger(__name__)

Edge = Tuple[np.ndarray, np.ndarray]


@dataclass
class RegionCorners:
    """Corners of the parent region (inner = root side, outer = tip side)."""

    inner_le: np.ndarray
    inner_te: np.ndarray
    outer_le: np.ndarray
    outer_te: np.ndarray

    @property
    def inner_edge(self) -> Edge:
        return self.inner_le, self.inner_te

    @property
    def outer_edge(self) -> Edge:
        return self.outer_le, self.outer_te

    @property
    def leading_edge(self) -> Edge:
        return self.inner_le, self.outer_le

    @property
    def trailing_edge(self) -> Edge:
        return self.inner_te, self.outer_te

    def normal(self) -> np.ndarray:
        """Region normal from the first non-degenerate chord and span edges."""
        tol = config.tolerances.edge_length_tolerance
        chord = self.inner_te - self.inner_le
        if vecmath.length(chord) <= tol:
            chord = self.outer_te - self.outer_le
        span = self.outer_le - self.inner_le
        if vecmath.length(span) <= tol:
            span = self.outer_te - self.inner_te
        return vecmath.normalize(np.cross(chord, span))


@dataclass
class MemberEnd:
    """One end of a member before rotation."""

    direction: np.ndarray       # Unit vector from the center toward the end edge
    nominal_length: float       # Exact distance to the end edge along direction
    end_edge: Edge
    side_at_first: Edge         # Side edge leaving end_edge[0]
    side_at_second: Edge        # Side edge leaving end_edge[1]


@dataclass
class SolvedMember:
    """Final member line: center, rotated directions and half-lengths."""

    center: np.ndarray
    directions: Tuple[np.ndarray, np.ndarray]
    lengths: Tuple[float, float]

    @property
    def end_points(self) -> Tuple[np.ndarray, np.ndarray]:
        return (self.center + self.lengths[0] * self.directions[0],
                self.center + self.lengths[1] * self.directions[1])


def rib_ends(center: np.ndarray, trailing_point: np.ndarray,
             leading_point: np.ndarray, corners: RegionCorners) -> Tuple[MemberEnd, MemberEnd]:
    """Rib roles: ends on the trailing and leading edges."""
    to_te = trailing_point - center
    to_le = leading_point - center
    return (
        MemberEnd(vecmath.normalize(to_te), vecmath.length(to_te),
                  corners.trailing_edge, corners.inner_edge[::-1], corners.outer_edge[::-1]),
        MemberEnd(vecmath.normalize(to_le), vecmath.length(to_le),
                  corners.leading_edge, corners.inner_edge, corners.outer_edge),
    )


def spar_ends(center: np.ndarray, inner_point: np.ndarray,
              outer_point: np.ndarray, corners: RegionCorners) -> Tuple[MemberEnd, MemberEnd]:
    """Spar roles: ends on the inner and outer edges."""
    to_inner = inner_point - center
    to_outer = outer_point - center
    return (
        MemberEnd(vecmath.normalize(to_inner), vecmath.length(to_inner),
                  corners.inner_edge, corners.leading_edge, corners.trailing_edge),
        MemberEnd(vecmath.normalize(to_outer), vecmath.length(to_outer),
                  corners.outer_edge, corners.leading_edge[::-1], corners.trailing_edge[::-1]),
    )


def _select_edge(center: np.ndarray, end: MemberEnd, sweep: float,
                 normal: np.ndarray) -> Tuple[Edge, bool]:
    """Edge the end meets after a counter-clockwise sweep, and whether it is the end edge."""
    if sweep == 0.0:
        return end.end_edge, True

    first, second = end.end_edge
    thresholds = (
        (vecmath.signed_angle(end.direction, first - center, normal), end.side_at_first),
        (vecmath.signed_angle(end.direction, second - center, normal), end.side_at_second),
    )
    if sweep > 0.0:
        ahead = [(t, side) for t, side in thresholds if t > 0.0]
        if ahead:
            max_angle, side = min(ahead, key=lambda item: item[0])
            if sweep > max_angle:
                return side, False
    else:
        ahead = [(t, side) for t, side in thresholds if t < 0.0]
        if ahead:
            max_angle, side = max(ahead, key=lambda item: item[0])
            if sweep < max_angle:
                return side, False
    return end.end_edge, True


def _ray_hit(center: np.ndarray, ray: np.ndarray, edge: Edge,
             normal: np.ndarray) -> Optional[Tuple[float, float]]:
    """
    In-plane intersection of the ray with the line through edge.

    Returns (distance along ray, parameter along edge) or None when the ray
    runs parallel to the edge or the edge is degenerate.
    """
    p, q = edge
    edge_vec = q - p
    if vecmath.length(edge_vec) <= config.tolerances.edge_length_tolerance:
        return None
    denom = float(np.dot(np.cross(ray, edge_vec), normal))
    if abs(denom) <= config.tolerances.effective_trig_tolerance * vecmath.length(edge_vec):
        return None
    offset = p - center
    s = float(np.dot(np.cross(offset, edge_vec), normal)) / denom
    t = float(np.dot(np.cross(offset, ray), normal)) / denom
    return s, t


def _on_segment(center: np.ndarray, ray: np.ndarray, distance: float, edge: Edge,
                normal: np.ndarray) -> bool:
    """Whether the point at distance along the ray lies on the edge segment (in plane)."""
    len_tol = config.tolerances.edge_length_tolerance
    p, q = edge
    edge_vec = q - p
    edge_len = vecmath.length(edge_vec)
    point = center + distance * ray
    off_line = abs(np.dot(np.cross(edge_vec, point - p), normal)) / edge_len
    if off_line > len_tol * max(1.0, distance):
        return False
    slack = len_tol / edge_len
    t = np.dot(point - p, edge_vec) / edge_len ** 2
    return -slack <= t <= 1.0 + slack


def _nearest_boundary_hit(center: np.ndarray, ray: np.ndarray, edges: Sequence[Edge],
                          normal: np.ndarray) -> Optional[float]:
    """Closest forward hit of the ray that lies on one of the region edges."""
    len_tol = config.tolerances.edge_length_tolerance
    best = None
    for edge in edges:
        hit = _ray_hit(center, ray, edge, normal)
        if hit is None:
            continue
        s, t = hit
        slack = len_tol / vecmath.length(edge[1] - edge[0])
        if s > len_tol and -slack <= t <= 1.0 + slack and (best is None or s < best):
            best = s
    return best


def _solve_end(center: np.ndarray, end: MemberEnd, sweep: float, normal: np.ndarray,
               expansion: float, edges: Sequence[Edge]) -> Tuple[float, np.ndarray]:
    trig_tol = config.tolerances.effective_trig_tolerance
    len_tol = config.tolerances.edge_length_tolerance
    fallback = end.nominal_length + expansion

    ray = vecmath.rodrigues(end.direction, normal, sweep)
    edge, on_end_edge = _select_edge(center, end, sweep, normal)
    p, q = edge
    edge_vec = q - p
    edge_len = vecmath.length(edge_vec)
    if edge_len <= len_tol:
        return fallback, ray

    if on_end_edge:
        # Law of sines against the nominal hit point
        angle = vecmath.signed_angle(end.direction, edge_vec, normal)
        denom = np.sin(angle - sweep)
        if abs(denom) <= trig_tol:
            return fallback, ray
        distance = end.nominal_length * abs(np.sin(angle)) / abs(denom)
    else:
        sin_angle = vecmath.length(np.cross(ray, edge_vec / edge_len))
        if sin_angle <= trig_tol:
            return fallback, ray
        distance = vecmath.point_line_distance(center, p, q) / sin_angle

    if _on_segment(center, ray, distance, edge, normal):
        return distance, ray

    # Swept or tapered regions: the ray can leave through a different edge
    nearest = _nearest_boundary_hit(center, ray, edges, normal)
    if nearest is None:
        logger.debug("No boundary hit for rotated member end; using expanded nominal length")
        return fallback, ray
    return nearest, ray


def solve_member(center: np.ndarray, ends: Tuple[MemberEnd, MemberEnd],
                 rotation: float, normal: np.ndarray, expansion: float) -> SolvedMember:
    """
    Rotate a member about its center and size both halves to the region.

    Args:
        center: Member center on the parent surface
        ends: The two member ends (see rib_ends / spar_ends)
        rotation: In-plane rotation (radians, clockwise about normal)
        normal: Unit region normal
        expansion: Oversize added to a nominal length for degenerate fallbacks

    Returns:
        SolvedMember with both half-lengths and rotated directions
    """
    sweep = -rotation
    edges = [ends[0].end_edge, ends[1].end_edge, ends[0].side_at_first, ends[0].side_at_second]
    len_a, dir_a = _solve_end(center, ends[0], sweep, normal, expansion, edges)
    len_b, dir_b = _solve_end(center, ends[1], sweep, normal, expansion, edges)
    return SolvedMember(center, (dir_a, dir_b), (len_a, len_b))
