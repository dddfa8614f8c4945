"""
Open-FEA Parts: Parent Shapes
=============================

A parent shape owns the aerodynamic surface that structural parts attach
to, its model (body -> world) matrix and its symmetry copies.

The ShapeRegistry is the parent-shape provider handed to every part update;
parts hold shape ids and resolve them through the registry each pass.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from . import vecmath
from .surfaces import BoundingBox, ParametricSurface, SurfaceRole

logger = logging.getLogger(__name__)


class SymmetryPlane(Enum):
    """Planar symmetry of a parent shape (world planes)."""
    NONE = "none"
    XY = "xy"
    XZ = "xz"
    YZ = "yz"


def new_id() -> str:
    return uuid.uuid4().hex[:10].upper()


class ParentShape(ABC):
    """
    Abstract parent geometry.

    Copy 0 is the main surface placed by the model matrix. Further copies
    come from axial (about world x) and planar symmetry.
    """

    def __init__(
        self,
        name: str,
        position: Tuple[float, float, float] = (0.0, 0.0, 0.0),
        rotation: Tuple[float, float, float] = (0.0, 0.0, 0.0),
        symmetry: SymmetryPlane = SymmetryPlane.NONE,
        axial_copies: int = 1,
        shape_id: Optional[str] = None,
    ):
        self.id = shape_id or new_id()
        self.name = name
        self.position = tuple(position)
        self.rotation = tuple(rotation)
        self.symmetry = symmetry
        self.axial_copies = max(int(axial_copies), 1)
        self._surfaces: Optional[List[ParametricSurface]] = None

    @abstractmethod
    def _build_main_surface(self) -> ParametricSurface:
        """Main surface in the body frame."""
        pass

    @property
    def num_main_surfaces(self) -> int:
        return 1

    @property
    def model_matrix(self) -> np.ndarray:
        """Body -> world: rotate X, then Y, then Z, then translate."""
        rx, ry, rz = self.rotation
        return (vecmath.translation(self.position)
                @ vecmath.rotation_z(rz)
                @ vecmath.rotation_y(ry)
                @ vecmath.rotation_x(rx))

    def _copy_placements(self) -> List[np.ndarray]:
        """Absolute transform of each copy relative to copy 0."""
        axial = [vecmath.rotation_x(360.0 * k / self.axial_copies)
                 for k in range(self.axial_copies)]
        if self.symmetry is SymmetryPlane.NONE:
            return axial
        reflect = vecmath.mirror(self.symmetry.value)
        return axial + [reflect @ mat for mat in axial]

    @property
    def num_symmetry_copies(self) -> int:
        return len(self._copy_placements())

    def symmetry_transforms(self) -> List[np.ndarray]:
        """
        Per-copy step transforms.

        Entry 0 is the identity; entry i maps copy i-1 onto copy i.
        """
        placements = self._copy_placements()
        steps = [np.eye(4)]
        for prev, cur in zip(placements[:-1], placements[1:]):
            steps.append(cur @ vecmath.affine_inverse(prev))
        return steps

    def surfaces(self) -> List[ParametricSurface]:
        """World-frame surfaces, ordered [copy * num_main + main]."""
        if self._surfaces is None:
            main = self._build_main_surface()
            main.role = SurfaceRole.NORMAL
            main.transform(self.model_matrix)
            built = []
            for placement in self._copy_placements():
                surf = main.copy()
                surf.transform(placement)
                surf.flip_normal = vecmath.is_reflection(placement)
                built.append(surf)
            self._surfaces = built
        return self._surfaces

    def main_surface(self, index: int = 0) -> Optional[ParametricSurface]:
        if not 0 <= index < self.num_main_surfaces:
            return None
        return self.surfaces()[index]

    def symmetry_indices(self, main_index: int = 0) -> List[int]:
        return [main_index + k * self.num_main_surfaces
                for k in range(self.num_symmetry_copies)]

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(
            np.vstack([s.sample_grid() for s in self.surfaces()])
        )

    def invalidate(self) -> None:
        """Drop cached surfaces after a parameter change."""
        self._surfaces = None

    def __repr__(self) -> str:
        return (f"<{self.__class__.__name__}('{self.name}') id={self.id} "
                f"copies={self.num_symmetry_copies}>")


class ShapeRegistry:
    """Parent-shape provider: shape id -> ParentShape."""

    def __init__(self, shapes: Optional[List[ParentShape]] = None):
        self._shapes: Dict[str, ParentShape] = {}
        for shape in shapes or []:
            self.add(shape)

    def add(self, shape: ParentShape) -> ParentShape:
        self._shapes[shape.id] = shape
        return shape

    def remove(self, shape_id: str) -> None:
        self._shapes.pop(shape_id, None)

    def find(self, shape_id: Optional[str]) -> Optional[ParentShape]:
        shape = self._shapes.get(shape_id) if shape_id else None
        if shape is None:
            logger.debug("Parent shape %s not found", shape_id)
        return shape

    def __contains__(self, shape_id: str) -> bool:
        return shape_id in self._shapes

    def __iter__(self) -> Iterator[ParentShape]:
        return iter(self._shapes.values())

    def __len__(self) -> int:
        return len(self._shapes)
