"""
Open-FEA Parts: Planar Members
==============================

RibPart, SparPart and SlicePart.

Ribs and spars share one planar-member routine; they differ only in which
region edges play the end and side roles (see edge_solver).
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from config import config
from .. import vecmath
from ..edge_solver import RegionCorners, rib_ends, solve_member, spar_ends
from ..placement import RelativePlacement, resolve_wing_u, wing_u_range
from ..planar import (
    OrientationPlane,
    OrientationSpec,
    build_member_surface,
    build_slice_surface,
    edge_midpoints,
    expansion_for,
    member_height,
    slice_reference_length,
    sync_flip,
)
from ..shapes import ParentShape
from ..spine import Spine
from ..surfaces import BoundingBox, ParametricSurface, PlanarSurface
from ..wing import W_LEADING_EDGE, WingGeom
from .base import PartType, StructuralPart, UpdateContext

logger = logging.getLogger(__name__)

PERP_NONE = "None"
PERP_LEADING_EDGE = "Leading Edge"
PERP_TRAILING_EDGE = "Trailing Edge"


@dataclass
class WingRegion:
    """Parent region a member is clipped to, computed once per update."""
    surface: ParametricSurface
    corners: RegionCorners
    normal: np.ndarray
    bbox: BoundingBox
    expansion: float
    height: float


def wing_region(surface: ParametricSurface, u0: float, u1: float,
                bbox: Optional[BoundingBox] = None) -> WingRegion:
    bbox = bbox or surface.bounding_box()
    corners = RegionCorners(
        inner_le=surface.evaluate(u0, W_LEADING_EDGE),
        inner_te=surface.evaluate(u0, 0.0),
        outer_le=surface.evaluate(u1, W_LEADING_EDGE),
        outer_te=surface.evaluate(u1, 0.0),
    )
    return WingRegion(surface, corners, corners.normal(), bbox,
                      expansion_for(bbox), member_height(bbox))


def thickness_axis(surface: ParametricSurface, u: float) -> np.ndarray:
    """Upper minus lower trailing edge point: the local 'up' of a section."""
    offset = 2.0 * config.tolerances.te_magic
    return vecmath.normalize(
        surface.evaluate(u, offset) - surface.evaluate(u, surface.w_max - offset)
    )


def edge_tangent(surface: ParametricSurface, u: float, w: float) -> np.ndarray:
    """Local spanwise direction of the constant-w line through u."""
    step = config.tolerances.tangent_step * surface.u_max
    u0 = max(u - step, 0.0)
    u1 = min(u + step, surface.u_max)
    return surface.evaluate(u1, w) - surface.evaluate(u0, w)


def perpendicular_alignment(edge: str, region: WingRegion, u: float,
                            ctx: UpdateContext) -> float:
    """
    Rotation (radians, clockwise) that puts a rib perpendicular to the chosen edge.

    Leading and trailing edges use the local edge direction at the rib
    station. Unresolved part references fall back to zero with a warning.
    """
    if not edge or edge == PERP_NONE:
        return 0.0

    surf = region.surface
    if edge == PERP_LEADING_EDGE:
        edge_dir = edge_tangent(surf, u, W_LEADING_EDGE)
    elif edge == PERP_TRAILING_EDGE:
        edge_dir = edge_tangent(surf, u, 0.0)
    else:
        part = ctx.find_part(edge)
        if part is None or not part.surfaces or part.surfaces[0] is None:
            logger.warning("Perpendicular edge part %s not found; using zero rotation", edge)
            return 0.0
        start, end = edge_midpoints(part.surfaces[0])
        edge_dir = end - start

    chord_dir = surf.evaluate(u, 0.0) - surf.evaluate(u, W_LEADING_EDGE)
    return 0.5 * np.pi - vecmath.signed_angle(chord_dir, edge_dir, region.normal)


def rib_surface(region: WingRegion, per_u: float, rotation: float) -> PlanarSurface:
    """Rib plane at normalized span position per_u, rotated in-plane."""
    surf = region.surface
    u = per_u * surf.u_max
    te = surf.evaluate(u, 0.0)
    le = surf.evaluate(u, W_LEADING_EDGE)
    center = 0.5 * (te + le)

    solved = solve_member(center, rib_ends(center, te, le, region.corners),
                          rotation, region.normal, region.expansion)
    end_te, end_le = solved.end_points
    plane = build_member_surface(end_te, end_le, thickness_axis(surf, u), region.height)
    sync_flip(plane, surf)
    return plane


def spar_surface(region: WingRegion, u_mid: float, relative: float,
                 rotation: float) -> PlanarSurface:
    """Spar plane at a chord fraction of the region, rotated in-plane."""
    corners = region.corners
    inner = corners.inner_le + relative * (corners.inner_te - corners.inner_le)
    outer = corners.outer_le + relative * (corners.outer_te - corners.outer_le)
    center = 0.5 * (inner + outer)

    solved = solve_member(center, spar_ends(center, inner, outer, corners),
                          rotation, region.normal, region.expansion)
    end_in, end_out = solved.end_points
    plane = build_member_surface(end_in, end_out,
                                 thickness_axis(region.surface, u_mid), region.height)
    sync_flip(plane, region.surface)
    return plane


def wing_or_warn(shape: ParentShape, name: str) -> Optional[WingGeom]:
    if isinstance(shape, WingGeom):
        return shape
    logger.warning("%s: parent %s is not a wing; skipping", name, shape.name)
    return None


class RibPart(StructuralPart):
    """Chordwise member at a spanwise location."""

    part_type = PartType.RIB

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.placement = RelativePlacement(relative=0.5)
        self.theta = 0.0                      # In-plane rotation (degrees)
        self.perpendicular_edge = PERP_NONE   # "None", edge name or part id

    @property
    def referenced_part_ids(self) -> List[str]:
        if self.perpendicular_edge in (PERP_NONE, PERP_LEADING_EDGE, PERP_TRAILING_EDGE):
            return []
        return [self.perpendicular_edge]

    def _compute_primary(self, shape: ParentShape, ctx: UpdateContext) -> Optional[ParametricSurface]:
        wing = wing_or_warn(shape, self.name)
        surf = self.parent_surface(shape) if wing else None
        if surf is None:
            return None
        self.placement.derive(wing.total_span)
        per_u = resolve_wing_u(self.placement.relative, wing.section_spans(),
                               surf.u_max, wing.cap_u_min)
        region = wing_region(surf, 0.0, surf.u_max)
        alpha = perpendicular_alignment(self.perpendicular_edge, region,
                                        per_u * surf.u_max, ctx)
        return rib_surface(region, per_u, alpha + np.radians(self.theta))

    def _params_to_dict(self) -> Dict[str, Any]:
        return {
            "placement": self.placement.to_dict(),
            "theta": self.theta,
            "perpendicular_edge": self.perpendicular_edge,
        }

    def _params_from_dict(self, params: Dict[str, Any]) -> None:
        self.placement = RelativePlacement.from_dict(params.get("placement", {}))
        self.theta = float(params.get("theta", 0.0))
        self.perpendicular_edge = str(params.get("perpendicular_edge", PERP_NONE))


class SparPart(StructuralPart):
    """Spanwise member at a chord fraction."""

    part_type = PartType.SPAR

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.placement = RelativePlacement(relative=0.5)
        self.theta = 0.0                 # In-plane rotation (degrees)
        self.limit_to_section = False
        self.section = 1                 # 1-based interval when limited

    def _compute_primary(self, shape: ParentShape, ctx: UpdateContext) -> Optional[ParametricSurface]:
        wing = wing_or_warn(shape, self.name)
        surf = self.parent_surface(shape) if wing else None
        if surf is None:
            return None
        u0, u1 = wing_u_range(wing.num_sections, wing.cap_u_min, wing.cap_u_max,
                              self.section if self.limit_to_section else 0)
        u_mid = 0.5 * (u0 + u1)
        chord = vecmath.length(surf.evaluate(u_mid, W_LEADING_EDGE) - surf.evaluate(u_mid, 0.0))
        self.placement.derive(chord)
        region = wing_region(surf, u0, u1)
        return spar_surface(region, u_mid, self.placement.relative, np.radians(self.theta))

    def _params_to_dict(self) -> Dict[str, Any]:
        return {
            "placement": self.placement.to_dict(),
            "theta": self.theta,
            "limit_to_section": self.limit_to_section,
            "section": self.section,
        }

    def _params_from_dict(self, params: Dict[str, Any]) -> None:
        self.placement = RelativePlacement.from_dict(params.get("placement", {}))
        self.theta = float(params.get("theta", 0.0))
        self.limit_to_section = bool(params.get("limit_to_section", False))
        self.section = int(params.get("section", 1))


class SlicePart(StructuralPart):
    """Planar cut through any parent shape."""

    part_type = PartType.SLICE

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.placement = RelativePlacement(relative=0.5)
        self.orientation = OrientationSpec()

    def _compute_primary(self, shape: ParentShape, ctx: UpdateContext) -> Optional[ParametricSurface]:
        surf = self.parent_surface(shape)
        if surf is None:
            return None
        spine = Spine(surf) if self.orientation.plane is OrientationPlane.CONST_U else None
        self.placement.derive(slice_reference_length(shape, surf, self.orientation.plane, spine))
        cut = build_slice_surface(shape, surf, self.placement.relative, self.orientation, spine)
        sync_flip(cut, surf)
        return cut

    def _params_to_dict(self) -> Dict[str, Any]:
        return {
            "placement": self.placement.to_dict(),
            "orientation": self.orientation.to_dict(),
        }

    def _params_from_dict(self, params: Dict[str, Any]) -> None:
        self.placement = RelativePlacement.from_dict(params.get("placement", {}))
        self.orientation = OrientationSpec.from_dict(params.get("orientation", {}))
