"""
Open-FEA Parts: Fix Point
=========================

A point feature (mass, attachment) pinned to another part's surface at
normalized (u, w). It owns no surfaces; after update it carries the split
patches it lies on and its 3D location on every symmetry copy.
"""

import logging
from typing import Any, Dict, List, Optional

import numpy as np

from ..fix_point_locator import FixPointLocation, locate_split_surfaces
from ..shapes import ParentShape
from ..surfaces import ParametricSurface
from .base import MeshSurfaceRecord, PartType, StructuralPart, UpdateContext

logger = logging.getLogger(__name__)


class FixPointPart(StructuralPart):
    """Point on a parent part (normally the skin)."""

    part_type = PartType.FIX_POINT

    def __init__(self, *args, parent_part_id: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.parent_part_id = parent_part_id
        self.pos_u = 0.5
        self.pos_w = 0.5
        self.mass_flag = False
        self.mass = 0.0
        self.half_mesh = False
        self.location = FixPointLocation()
        self._points: List[np.ndarray] = []
        self.property_index = -1
        self.cap_property_index = -1

    @property
    def references_parts(self) -> bool:
        return True

    @property
    def referenced_part_ids(self) -> List[str]:
        return [self.parent_part_id] if self.parent_part_id else []

    @property
    def border_flag(self) -> bool:
        return self.location.border_flag

    @property
    def split_indices(self) -> List[List[int]]:
        return self.location.indices

    @property
    def is_generated(self) -> bool:
        return bool(self._points)

    def points(self) -> List[np.ndarray]:
        """3D location on each present symmetry copy of the parent part."""
        return [p.copy() for p in self._points]

    def _compute_primary(self, shape: ParentShape, ctx: UpdateContext) -> Optional[ParametricSurface]:
        return None

    def update(self, ctx: UpdateContext) -> None:
        parent = ctx.find_part(self.parent_part_id)
        if parent is None:
            logger.warning("%s: parent part %s not found; keeping previous location",
                           self.name, self.parent_part_id)
            return
        parent_surfaces = list(parent.surfaces)
        if all(s is None for s in parent_surfaces):
            logger.debug("%s: parent %s has no surfaces yet", self.name, parent.name)
            return
        self.shape_id = parent.shape_id
        self.location = locate_split_surfaces(
            parent_surfaces, self.pos_u, self.pos_w, half_mesh=self.half_mesh or ctx.half_mesh
        )
        self._points = [s.evaluate01(self.pos_u, self.pos_w) for s in parent_surfaces
                        if s is not None]

    def mesh_records(self, part_index: int) -> List[MeshSurfaceRecord]:
        return []

    def _params_to_dict(self) -> Dict[str, Any]:
        return {
            "parent_part_id": self.parent_part_id,
            "pos_u": self.pos_u,
            "pos_w": self.pos_w,
            "mass_flag": self.mass_flag,
            "mass": self.mass,
            "half_mesh": self.half_mesh,
        }

    def _params_from_dict(self, params: Dict[str, Any]) -> None:
        self.parent_part_id = params.get("parent_part_id")
        self.pos_u = min(max(float(params.get("pos_u", 0.5)), 0.0), 1.0)
        self.pos_w = min(max(float(params.get("pos_w", 0.5)), 0.0), 1.0)
        self.mass_flag = bool(params.get("mass_flag", False))
        self.mass = float(params.get("mass", 0.0))
        self.half_mesh = bool(params.get("half_mesh", False))
