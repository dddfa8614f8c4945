"""
Open-FEA Parts: Skin and Dome
=============================

Curved parts that follow or close the parent surface rather than cut it.
"""

import logging
from typing import Any, Dict, Optional

from .. import vecmath
from ..planar import sync_flip
from ..shapes import ParentShape
from ..surfaces import EllipsoidSurface, ParametricSurface, SurfaceRole
from .base import PartType, StructuralPart, UpdateContext

logger = logging.getLogger(__name__)


class SkinPart(StructuralPart):
    """The parent's own outer surface, meshed as the aerodynamic skin."""

    part_type = PartType.SKIN

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.remove_skin_tris = False
        self.draw = False

    @property
    def role(self) -> SurfaceRole:
        return SurfaceRole.NORMAL

    def _compute_primary(self, shape: ParentShape, ctx: UpdateContext) -> Optional[ParametricSurface]:
        surf = self.parent_surface(shape)
        return surf.copy() if surf is not None else None

    def _params_to_dict(self) -> Dict[str, Any]:
        return {"remove_skin_tris": self.remove_skin_tris}

    def _params_from_dict(self, params: Dict[str, Any]) -> None:
        self.remove_skin_tris = bool(params.get("remove_skin_tris", False))


class DomePart(StructuralPart):
    """
    Half-ellipsoid bulkhead (pressure dome, tank end).

    Placed in the parent's body frame: rotated X, Y, Z about its own
    origin, moved to (x, y, z), then carried to world by the model matrix.
    """

    part_type = PartType.DOME

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.a_radius = 1.0
        self.b_radius = 1.0
        self.c_radius = 1.0
        self.x_location = 0.0
        self.y_location = 0.0
        self.z_location = 0.0
        self.x_rot = 0.0        # Degrees, [-180, 180]
        self.y_rot = 0.0
        self.z_rot = 0.0
        self.flip_dir = False

    def _compute_primary(self, shape: ParentShape, ctx: UpdateContext) -> Optional[ParametricSurface]:
        surf = self.parent_surface(shape)
        if surf is None:
            return None
        dome = EllipsoidSurface(self.a_radius, self.b_radius, self.c_radius, self.flip_dir)
        dome.transform(vecmath.rotation_x(self._clamped(self.x_rot)))
        dome.transform(vecmath.rotation_y(self._clamped(self.y_rot)))
        dome.transform(vecmath.rotation_z(self._clamped(self.z_rot)))
        dome.transform(vecmath.translation((self.x_location, self.y_location, self.z_location)))
        dome.transform(shape.model_matrix)
        sync_flip(dome, surf)
        return dome

    @staticmethod
    def _clamped(angle: float) -> float:
        return min(max(angle, -180.0), 180.0)

    def _params_to_dict(self) -> Dict[str, Any]:
        return {
            "radii": [self.a_radius, self.b_radius, self.c_radius],
            "location": [self.x_location, self.y_location, self.z_location],
            "rotation": [self.x_rot, self.y_rot, self.z_rot],
            "flip_dir": self.flip_dir,
        }

    def _params_from_dict(self, params: Dict[str, Any]) -> None:
        self.a_radius, self.b_radius, self.c_radius = (
            float(v) for v in params.get("radii", [1.0, 1.0, 1.0]))
        self.x_location, self.y_location, self.z_location = (
            float(v) for v in params.get("location", [0.0, 0.0, 0.0]))
        self.x_rot, self.y_rot, self.z_rot = (
            float(v) for v in params.get("rotation", [0.0, 0.0, 0.0]))
        self.flip_dir = bool(params.get("flip_dir", False))
