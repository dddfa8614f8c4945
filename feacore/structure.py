"""
Open-FEA Parts: Structure
=========================

An ordered collection of structural parts and skin subsurfaces attached
to one main surface of a parent shape.

Update order matters: parts that read other parts' surfaces (ribs
perpendicular to a spar, fix points on the skin) run after the parts
they read.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from config import config
from .parts import (
    FixPointPart,
    MeshSurfaceRecord,
    PartType,
    RibArrayPart,
    SkinPart,
    SliceArrayPart,
    StructuralPart,
    UpdateContext,
    create_part,
    part_from_dict,
)
from .properties import PropertyLibrary
from .shapes import ShapeRegistry, new_id
from .subsurfaces import (
    SubSurface,
    SubSurfaceLineArray,
    SubSurfaceType,
    create_subsurface,
    subsurface_from_dict,
)

logger = logging.getLogger(__name__)

ARRAY_TYPES = (PartType.RIB_ARRAY, PartType.SLICE_ARRAY)


class ReorderAction(Enum):
    TOP = "top"
    UP = "up"
    DOWN = "down"
    BOTTOM = "bottom"


def _reordered(items: List[Any], index: int, action: ReorderAction) -> List[Any]:
    item = items[index]
    if action is ReorderAction.TOP:
        return [item] + [x for x in items if x is not item]
    if action is ReorderAction.BOTTOM:
        return [x for x in items if x is not item] + [item]

    result = list(items)
    other = index - 1 if action is ReorderAction.UP else index + 1
    if 0 <= other < len(result):
        result[index], result[other] = result[other], result[index]
    return result


class Structure:
    """
    FEA structure definition for one parent shape.

    Parts are named "<Type>_<n>" from a counter that never rewinds, so
    names stay unique after deletions.
    """

    def __init__(self, shape_id: Optional[str] = None, main_surf_index: int = 0,
                 name: str = "Structure", structure_id: Optional[str] = None):
        self.id = structure_id or new_id()
        self.name = name
        self.shape_id = shape_id
        self.main_surf_index = main_surf_index
        self.half_mesh = False
        self.parts: List[StructuralPart] = []
        self.subsurfaces: List[SubSurface] = []
        self.properties = PropertyLibrary.default()
        self._part_count = 0

    # --- parts -------------------------------------------------------------

    def valid_part_index(self, index: int) -> bool:
        return 0 <= index < len(self.parts)

    def get_part(self, index: int) -> Optional[StructuralPart]:
        return self.parts[index] if self.valid_part_index(index) else None

    def get_part_index(self, part: StructuralPart) -> int:
        for i, candidate in enumerate(self.parts):
            if candidate is part:
                return i
        return -1

    def find_part(self, part_id: Optional[str]) -> Optional[StructuralPart]:
        for part in self.parts:
            if part.id == part_id:
                return part
        return None

    def add_part(self, part_type: PartType) -> Optional[StructuralPart]:
        """Create, name and append a part. Fix points need a skin to sit on."""
        name = f"{part_type.value}_{self._part_count}"
        self._part_count += 1

        if part_type is PartType.SKIN:
            logger.warning("Use init_skin() to create the skin")
            return None
        if part_type is PartType.FIX_POINT:
            skin = self.get_skin()
            if skin is None:
                logger.warning("Cannot add %s: structure %s has no skin", name, self.name)
                return None
            part = FixPointPart(self.shape_id, self.main_surf_index, name=name,
                                parent_part_id=skin.id)
        else:
            part = create_part(part_type, self.shape_id, self.main_surf_index, name=name)

        self.parts.append(part)
        logger.debug("Added %r to %s", part, self.name)
        return part

    def append_part(self, part: StructuralPart) -> StructuralPart:
        self.parts.append(part)
        return part

    def delete_part(self, index: int) -> None:
        if self.valid_part_index(index):
            del self.parts[index]

    def reorder_part(self, index: int, action: ReorderAction) -> None:
        if self.valid_part_index(index):
            self.parts = _reordered(self.parts, index, action)

    def init_skin(self, shapes: Optional[ShapeRegistry] = None) -> SkinPart:
        """Replace all parts with a single skin on the parent surface."""
        skin = SkinPart(self.shape_id, self.main_surf_index, name="Skin")
        self.parts = [skin]
        if shapes is not None:
            skin.update(UpdateContext(shapes, self.find_part, self.half_mesh))
        return skin

    def get_skin(self) -> Optional[SkinPart]:
        for part in self.parts:
            if part.part_type is PartType.SKIN:
                return part
        return None

    def get_property_index(self, index: int) -> int:
        part = self.get_part(index)
        return part.property_index if part is not None else -1

    def get_cap_property_index(self, index: int) -> int:
        part = self.get_part(index)
        return part.cap_property_index if part is not None else -1

    def is_fix_point(self, index: int) -> bool:
        part = self.get_part(index)
        return part is not None and part.part_type is PartType.FIX_POINT

    def is_array(self, index: int) -> bool:
        part = self.get_part(index)
        return part is not None and part.part_type in ARRAY_TYPES

    @property
    def num_fix_points(self) -> int:
        return sum(1 for i in range(len(self.parts)) if self.is_fix_point(i))

    def set_draw_flag(self, flag: bool) -> None:
        for part in self.parts:
            part.draw = flag

    # --- arrays ------------------------------------------------------------

    def individualize_rib_array(self, index: int) -> List[StructuralPart]:
        """Replace a rib array with independent ribs appended at the end."""
        part = self.get_part(index)
        if not isinstance(part, RibArrayPart):
            return []
        ribs = part.individualize()
        self.parts.extend(ribs)
        self.delete_part(index)
        return ribs

    def individualize_slice_array(self, index: int) -> List[StructuralPart]:
        """Replace a slice array with independent slices appended at the end."""
        part = self.get_part(index)
        if not isinstance(part, SliceArrayPart):
            return []
        slices = part.individualize()
        self.parts.extend(slices)
        self.delete_part(index)
        return slices

    # --- subsurfaces -------------------------------------------------------

    def valid_subsurface_index(self, index: int) -> bool:
        return 0 <= index < len(self.subsurfaces)

    def add_subsurface(self, ss_type: SubSurfaceType) -> SubSurface:
        ss = create_subsurface(ss_type, name=f"{ss_type.value}_{len(self.subsurfaces)}")
        self.subsurfaces.append(ss)
        return ss

    def get_subsurface(self, index: int) -> Optional[SubSurface]:
        return self.subsurfaces[index] if self.valid_subsurface_index(index) else None

    def delete_subsurface(self, index: int) -> None:
        if self.valid_subsurface_index(index):
            del self.subsurfaces[index]

    def reorder_subsurface(self, index: int, action: ReorderAction) -> None:
        if self.valid_subsurface_index(index):
            self.subsurfaces = _reordered(self.subsurfaces, index, action)

    def individualize_line_array(self, index: int) -> List[SubSurface]:
        ss = self.get_subsurface(index)
        if not isinstance(ss, SubSurfaceLineArray):
            return []
        lines = ss.individualize()
        self.subsurfaces.extend(lines)
        self.delete_subsurface(index)
        return lines

    # --- update ------------------------------------------------------------

    @staticmethod
    def _reference_order(parts: List[StructuralPart]) -> List[StructuralPart]:
        """Order parts so each one follows the parts it references."""
        by_id = {p.id: p for p in parts}
        state: Dict[str, str] = {}
        ordered: List[StructuralPart] = []

        def visit(part: StructuralPart) -> None:
            mark = state.get(part.id)
            if mark == "done":
                return
            if mark == "active":
                logger.warning("Reference cycle through %s; keeping list order", part.name)
                return
            state[part.id] = "active"
            for ref in part.referenced_part_ids:
                if ref in by_id:
                    visit(by_id[ref])
            state[part.id] = "done"
            ordered.append(part)

        for part in parts:
            visit(part)
        return ordered

    def update(self, shapes: ShapeRegistry, half_mesh: Optional[bool] = None) -> None:
        """
        Recompute every part in three passes:

        1. parts that only read the parent shape,
        2. parts that read other parts (perpendicular-to-part ribs), each
           after the parts it references,
        3. fix points, which read their parent part's final surfaces.
        """
        if half_mesh is not None:
            self.half_mesh = half_mesh
        ctx = UpdateContext(shapes, self.find_part, self.half_mesh)
        shape = shapes.find(self.shape_id)

        fix_points = [p for p in self.parts if p.part_type is PartType.FIX_POINT]
        others = [p for p in self.parts if p.part_type is not PartType.FIX_POINT]
        plain = [p for p in others if not p.references_parts]
        dependent = [p for p in others if p.references_parts]

        for part in plain + self._reference_order(dependent):
            if shape is not None:
                part.update_symmetry_index(shape)
            part.update(ctx)
        for part in fix_points:
            part.half_mesh = self.half_mesh
            part.update(ctx)

        logger.debug("Updated %s: %d parts, %d fix points",
                     self.name, len(others), len(fix_points))

    # --- mesher hand-off ---------------------------------------------------

    def mesh_surfaces(self) -> List[MeshSurfaceRecord]:
        records = []
        for index, part in enumerate(self.parts):
            records.extend(part.mesh_records(index))
        return records

    def points_on_any_planar_part(self, points: List[np.ndarray]) -> bool:
        return any(part.points_on_planar_part(points) for part in self.parts)

    def build_suppress_list(self) -> Tuple[List[float], List[float]]:
        """Skin feature lines (u, w) already covered by a planar part."""
        skin = self.get_skin()
        if skin is None or not skin.surfaces or skin.surfaces[0] is None:
            return [], []
        surf = skin.surfaces[0]
        n = config.sampling.patch_samples

        u_suppress = []
        for u in surf.u_breaks():
            pts = [surf.evaluate(u, w) for w in np.linspace(0.0, surf.w_max, n)]
            if self.points_on_any_planar_part(pts):
                u_suppress.append(u)

        w_suppress = []
        for w in surf.w_breaks():
            pts = [surf.evaluate(u, w) for u in np.linspace(0.0, surf.u_max, n)]
            if self.points_on_any_planar_part(pts):
                w_suppress.append(w)
        return u_suppress, w_suppress

    # --- persistence -------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "shape_id": self.shape_id,
            "main_surf_index": self.main_surf_index,
            "half_mesh": self.half_mesh,
            "part_count": self._part_count,
            "parts": [p.to_dict() for p in self.parts],
            "subsurfaces": [s.to_dict() for s in self.subsurfaces],
            "properties": self.properties.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Structure":
        structure = cls(
            shape_id=data.get("shape_id"),
            main_surf_index=int(data.get("main_surf_index", 0)),
            name=data.get("name", "Structure"),
            structure_id=data.get("id"),
        )
        structure.half_mesh = bool(data.get("half_mesh", False))
        structure.parts = [part_from_dict(p) for p in data.get("parts", [])]
        structure.subsurfaces = [subsurface_from_dict(s) for s in data.get("subsurfaces", [])]
        if "properties" in data:
            structure.properties = PropertyLibrary.from_dict(data["properties"])
        structure._part_count = int(data.get("part_count", len(structure.parts)))
        return structure

    def summary(self) -> str:
        lines = [f"Structure '{self.name}' on shape {self.shape_id} "
                 f"(surface {self.main_surf_index})"]
        for i, part in enumerate(self.parts):
            lines.append(f"  [{i}] {part!r} surfaces={len(part.surfaces)}")
        for ss in self.subsurfaces:
            lines.append(f"  {ss!r}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"<Structure('{self.name}') parts={len(self.parts)}>"
