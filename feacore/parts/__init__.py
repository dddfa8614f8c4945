"""
Open-FEA Parts: Structural Part Variants
========================================

One class per PartType; create_part() and part_from_dict() map the type
tag to its class.
"""

from typing import Any, Dict, Type

from .arrays import RibArrayPart, SliceArrayPart
from .base import (
    ElementMode,
    MeshSurfaceRecord,
    PartType,
    StructuralPart,
    UpdateContext,
)
from .fix_point import FixPointPart
from .members import (
    PERP_LEADING_EDGE,
    PERP_NONE,
    PERP_TRAILING_EDGE,
    RibPart,
    SlicePart,
    SparPart,
)
from .shell import DomePart, SkinPart

PART_CLASSES: Dict[PartType, Type[StructuralPart]] = {
    PartType.SLICE: SlicePart,
    PartType.RIB: RibPart,
    PartType.SPAR: SparPart,
    PartType.SKIN: SkinPart,
    PartType.DOME: DomePart,
    PartType.FIX_POINT: FixPointPart,
    PartType.RIB_ARRAY: RibArrayPart,
    PartType.SLICE_ARRAY: SliceArrayPart,
}


def create_part(part_type: PartType, *args, **kwargs) -> StructuralPart:
    """Construct an empty part of the given type."""
    return PART_CLASSES[part_type](*args, **kwargs)


def part_from_dict(data: Dict[str, Any]) -> StructuralPart:
    """Rebuild a part from StructuralPart.to_dict() output."""
    part_type = PartType(data["type"])
    part = create_part(
        part_type,
        data.get("shape_id"),
        int(data.get("main_surf_index", 0)),
        name=data.get("name", ""),
        part_id=data.get("id"),
    )
    part.load_common(data)
    return part


__all__ = [
    "PartType", "ElementMode", "StructuralPart", "UpdateContext", "MeshSurfaceRecord",
    "SlicePart", "RibPart", "SparPart", "SkinPart", "DomePart", "FixPointPart",
    "RibArrayPart", "SliceArrayPart", "PART_CLASSES", "create_part", "part_from_dict",
    "PERP_NONE", "PERP_LEADING_EDGE", "PERP_TRAILING_EDGE",
]
