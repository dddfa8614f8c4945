"""
Open-FEA Parts: Structural Part Base Class
==========================================

All structural parts inherit from StructuralPart.
This enforces a consistent interface for update, mesh hand-off and
persistence across ribs, spars, slices, skins, domes, fix points and arrays.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from config import config
from ..shapes import ParentShape, ShapeRegistry, new_id
from ..surfaces import ParametricSurface, PlanarSurface, SurfaceRole
from ..symmetry import propagate_in_place

logger = logging.getLogger(__name__)


class PartType(Enum):
    """Closed set of structural part variants."""
    SLICE = "Slice"
    RIB = "Rib"
    SPAR = "Spar"
    SKIN = "Skin"
    DOME = "Dome"
    FIX_POINT = "FixPoint"
    RIB_ARRAY = "RibArray"
    SLICE_ARRAY = "SliceArray"


class ElementMode(Enum):
    """Which finite elements a part contributes."""
    SHELL = "shell"
    BEAM = "beam"
    SHELL_AND_BEAM = "shell_and_beam"


@dataclass
class UpdateContext:
    """
    Collaborators handed to every part update.

    shapes resolves parent shape ids; part_lookup resolves other parts of
    the same structure by id.
    """

    shapes: ShapeRegistry
    part_lookup: Callable[[str], Optional["StructuralPart"]] = field(default=lambda _id: None)
    half_mesh: bool = False

    def find_shape(self, shape_id: Optional[str]) -> Optional[ParentShape]:
        return self.shapes.find(shape_id)

    def find_part(self, part_id: Optional[str]) -> Optional["StructuralPart"]:
        if not part_id:
            return None
        return self.part_lookup(part_id)


@dataclass
class MeshSurfaceRecord:
    """One surface handed to the downstream mesher."""
    part_name: str
    part_index: int
    copy_index: int
    surface: ParametricSurface
    role: SurfaceRole
    property_index: int
    cap_property_index: Optional[int]


class StructuralPart(ABC):
    """
    Abstract base class for all structural parts.

    Every part must implement:
    - _compute_primary(): the copy-0 surface for the current parameters
    - _params_to_dict() / _params_from_dict(): its own parameter set

    update() wraps these with parent resolution, symmetry sizing and
    propagation, so a missing parent leaves the last valid surfaces intact.
    """

    part_type: PartType = None

    def __init__(
        self,
        shape_id: Optional[str] = None,
        main_surf_index: int = 0,
        name: str = "",
        part_id: Optional[str] = None,
    ):
        self.id = part_id or new_id()
        self.name = name or self.part_type.value
        self.shape_id = shape_id
        self.main_surf_index = main_surf_index
        self.element_mode = ElementMode.SHELL
        self.property_index = 0
        self.cap_property_index = 1
        self.draw = True
        self.surfaces: List[Optional[ParametricSurface]] = []

    # --- classification ----------------------------------------------------

    @property
    def role(self) -> SurfaceRole:
        if self.element_mode is ElementMode.BEAM:
            return SurfaceRole.STIFFENER
        return SurfaceRole.STRUCTURE

    @property
    def is_generated(self) -> bool:
        return bool(self.surfaces) and all(s is not None for s in self.surfaces)

    # --- update ------------------------------------------------------------

    def parent_surface(self, shape: ParentShape) -> Optional[ParametricSurface]:
        surf = shape.main_surface(self.main_surf_index)
        if surf is None:
            logger.warning("%s: main surface %d not on %s",
                           self.name, self.main_surf_index, shape.name)
        return surf

    def update_symmetry_index(self, shape: ParentShape) -> None:
        """Size the surface list to the parent's symmetry copy count."""
        n = shape.num_symmetry_copies
        self.surfaces = (self.surfaces + [None] * n)[:n]

    @abstractmethod
    def _compute_primary(self, shape: ParentShape, ctx: UpdateContext) -> Optional[ParametricSurface]:
        """Copy-0 surface, or None to leave the part untouched."""
        pass

    def update(self, ctx: UpdateContext) -> None:
        """Recompute all surfaces. Idempotent for unchanged inputs."""
        shape = ctx.find_shape(self.shape_id)
        if shape is None:
            logger.debug("%s: parent shape missing; keeping previous surfaces", self.name)
            return
        primary = self._compute_primary(shape, ctx)
        if primary is None:
            return
        primary.role = self.role
        self.update_symmetry_index(shape)
        self.surfaces[0] = primary
        propagate_in_place(self.surfaces, shape, self.main_surf_index)

    @property
    def referenced_part_ids(self) -> List[str]:
        """Ids of the parts whose surfaces update() reads."""
        return []

    @property
    def references_parts(self) -> bool:
        """True when update() reads another part's surfaces."""
        return bool(self.referenced_part_ids)

    # --- queries -----------------------------------------------------------

    def mesh_records(self, part_index: int) -> List[MeshSurfaceRecord]:
        cap = self.cap_property_index if self.element_mode is ElementMode.SHELL_AND_BEAM else None
        return [
            MeshSurfaceRecord(self.name, part_index, i, surf, surf.role,
                              self.property_index, cap)
            for i, surf in enumerate(self.surfaces) if surf is not None
        ]

    def points_on_planar_part(self, points: List[np.ndarray]) -> bool:
        """True when every point lies on one of this part's planes."""
        if not points:
            return False
        tol = config.tolerances.planar_point_tolerance
        planes = [s for s in self.surfaces if isinstance(s, PlanarSurface)]
        for plane in planes:
            if all(plane.distance_to_plane(p) <= tol for p in points):
                return True
        return False

    # --- persistence -------------------------------------------------------

    @abstractmethod
    def _params_to_dict(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    def _params_from_dict(self, params: Dict[str, Any]) -> None:
        pass

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.part_type.value,
            "id": self.id,
            "name": self.name,
            "shape_id": self.shape_id,
            "main_surf_index": self.main_surf_index,
            "element_mode": self.element_mode.value,
            "property_index": self.property_index,
            "cap_property_index": self.cap_property_index,
            "draw": self.draw,
            "params": self._params_to_dict(),
        }

    def load_common(self, data: Dict[str, Any]) -> None:
        self.element_mode = ElementMode(data.get("element_mode", ElementMode.SHELL.value))
        self.property_index = int(data.get("property_index", 0))
        self.cap_property_index = int(data.get("cap_property_index", 1))
        self.draw = bool(data.get("draw", True))
        self._params_from_dict(data.get("params", {}))

    def __repr__(self) -> str:
        status = "generated" if self.is_generated else "pending"
        return f"<{self.__class__.__name__}('{self.name}') [{status}]>"
