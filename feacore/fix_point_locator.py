"""
Open-FEA Parts: Fix-Point Locator
=================================

Finds the split patches of a parent member that carry a fix point.

Points strictly inside a patch need an explicit mesh node; points on a
patch border or corner get one automatically. Patch bounds come from the
same split operation the fix point is compared against, so exact float
comparison is intended here.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from config import config
from .surfaces import ParametricSurface, SplitPatch

logger = logging.getLogger(__name__)


class BorderType(Enum):
    """Where a fix point sits on a split patch."""
    INTERIOR = "interior"
    W_BORDER = "w_border"                 # On a constant-w edge
    U_BORDER = "u_border"                 # On a constant-u edge
    CORNER = "corner"
    CLOSED_U_BORDER = "closed_u_border"   # On the u seam of a closed surface
    CLOSED_W_BORDER = "closed_w_border"   # On the w seam of a closed surface


@dataclass
class SplitSurfaceHit:
    index: int           # patch + copy * num_patches
    copy: int
    patch: int
    border: BorderType


@dataclass
class FixPointLocation:
    """Split-surface indices per symmetry copy plus each hit's classification."""

    indices: List[List[int]] = field(default_factory=list)
    hits: List[SplitSurfaceHit] = field(default_factory=list)

    @property
    def border_flag(self) -> bool:
        """True when the last hit lies on a border (mesher places the node)."""
        return bool(self.hits) and self.hits[-1].border is not BorderType.INTERIOR


def classify(u: float, w: float, patch: SplitPatch, surface: ParametricSurface) -> Optional[BorderType]:
    """Classify (u, w) against one patch; None when the point is off the patch."""
    inside_u = patch.u_min < u < patch.u_max
    inside_w = patch.w_min < w < patch.w_max
    on_u = u == patch.u_min or u == patch.u_max
    on_w = w == patch.w_min or w == patch.w_max

    if inside_u and inside_w:
        return BorderType.INTERIOR
    if inside_u and on_w:
        return BorderType.W_BORDER
    if on_u and inside_w:
        return BorderType.U_BORDER
    if on_u and on_w:
        return BorderType.CORNER

    if surface.closed_u and inside_w:
        if patch.u_max == surface.u_max and u == 0.0:
            return BorderType.CLOSED_U_BORDER
        if patch.u_min == 0.0 and u == surface.u_max:
            return BorderType.CLOSED_U_BORDER
    if surface.closed_w and inside_u:
        if patch.w_max == surface.w_max and w == 0.0:
            return BorderType.CLOSED_W_BORDER
        if patch.w_min == 0.0 and w == surface.w_max:
            return BorderType.CLOSED_W_BORDER
    return None


def excluded_by_half_mesh(patch: SplitPatch) -> bool:
    """Patch lies on the discarded half (y <= 0) or on the y=0 plane."""
    tol = config.tolerances.half_mesh_tolerance
    return patch.all_y_below(tol) or patch.on_y_zero(tol)


def locate_split_surfaces(parent_surfaces: Sequence[Optional[ParametricSurface]],
                          pos_u: float, pos_w: float,
                          half_mesh: bool = False) -> FixPointLocation:
    """
    Locate a fix point on every symmetry copy of its parent member.

    Args:
        parent_surfaces: The parent part's surfaces, one per symmetry copy;
            a None copy gets an empty index list
        pos_u, pos_w: Normalized [0, 1] coordinates on the first present copy
        half_mesh: Drop patches on the excluded half before classifying

    Returns:
        FixPointLocation
    """
    location = FixPointLocation()
    reference = next((s for s in parent_surfaces if s is not None), None)
    if reference is None:
        return location

    u = pos_u * reference.u_max
    w = pos_w * reference.w_max

    for copy_index, surface in enumerate(parent_surfaces):
        if surface is None:
            location.indices.append([])
            continue
        patches = surface.split()
        found: List[int] = []
        for patch_index, patch in enumerate(patches):
            if half_mesh and excluded_by_half_mesh(patch):
                continue
            border = classify(u, w, patch, surface)
            if border is None:
                continue
            index = patch_index + copy_index * len(patches)
            found.append(index)
            location.hits.append(SplitSurfaceHit(index, copy_index, patch_index, border))
        location.indices.append(found)

    return location
