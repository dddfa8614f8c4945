"""
Open-FEA Parts: Rib and Slice Arrays
====================================

Evenly spaced families of ribs or slices driven by one ArraySpec.

Surfaces are stored member-major: index = member * copies + copy.
individualize() turns the array into independent named parts; the owning
Structure then deletes the array.
"""

import logging
from abc import abstractmethod
from typing import Any, Dict, List, Optional

import numpy as np

from ..array_expander import ArraySpec, member_locations
from ..placement import RelativePlacement, resolve_wing_u
from ..planar import (
    OrientationPlane,
    OrientationSpec,
    build_slice_surface,
    slice_reference_length,
    sync_flip,
)
from ..shapes import ParentShape
from ..spine import Spine
from ..surfaces import ParametricSurface
from ..symmetry import parent_flip_flags, propagate
from .base import PartType, StructuralPart, UpdateContext
from .members import (
    PERP_LEADING_EDGE,
    PERP_NONE,
    PERP_TRAILING_EDGE,
    RibPart,
    SlicePart,
    wing_or_warn,
    perpendicular_alignment,
    rib_surface,
    wing_region,
)

logger = logging.getLogger(__name__)


class _ArrayPart(StructuralPart):
    """Shared bookkeeping for array parts."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.spec = ArraySpec()
        self.reference_length = 0.0

    @property
    def count(self) -> int:
        return self.spec.count

    def member_locations(self) -> List[float]:
        return member_locations(self.spec)

    def update_symmetry_index(self, shape: ParentShape) -> None:
        n = shape.num_symmetry_copies * self.spec.count
        self.surfaces = (self.surfaces + [None] * n)[:n]

    @abstractmethod
    def _member_primary(self, shape: ParentShape, surf: ParametricSurface,
                        location: float, ctx: UpdateContext, context: Any) -> ParametricSurface:
        pass

    @abstractmethod
    def _prepare(self, shape: ParentShape, surf: ParametricSurface, ctx: UpdateContext):
        """Derive spacing and count; return per-update context or None to skip."""
        pass

    def _compute_primary(self, shape: ParentShape, ctx: UpdateContext) -> Optional[ParametricSurface]:
        return None

    def update(self, ctx: UpdateContext) -> None:
        shape = ctx.find_shape(self.shape_id)
        if shape is None:
            logger.debug("%s: parent shape missing; keeping previous surfaces", self.name)
            return
        surf = self.parent_surface(shape)
        if surf is None:
            return
        context = self._prepare(shape, surf, ctx)
        if context is None:
            return

        transforms = shape.symmetry_transforms()
        flags = parent_flip_flags(shape, self.main_surf_index)
        surfaces: List[Optional[ParametricSurface]] = []
        for location in self.member_locations():
            primary = self._member_primary(shape, surf, location, ctx, context)
            primary.role = self.role
            surfaces.extend(propagate(primary, transforms, flags))
        self.surfaces = surfaces

    def _individual_placement(self, location: float) -> RelativePlacement:
        return RelativePlacement(
            relative=location,
            absolute=location * self.reference_length,
            mode=self.spec.mode,
            upper_limit=self.reference_length,
        )

    def _copy_common(self, member: StructuralPart) -> None:
        member.element_mode = self.element_mode
        member.property_index = self.property_index
        member.cap_property_index = self.cap_property_index
        member.draw = self.draw

    def _params_to_dict(self) -> Dict[str, Any]:
        return {"spec": self.spec.to_dict()}

    def _params_from_dict(self, params: Dict[str, Any]) -> None:
        self.spec = ArraySpec.from_dict(params.get("spec", {}))


class RibArrayPart(_ArrayPart):
    """Ribs at evenly spaced spanwise locations."""

    part_type = PartType.RIB_ARRAY

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.theta = 0.0
        self.perpendicular_edge = PERP_NONE

    @property
    def referenced_part_ids(self) -> List[str]:
        if self.perpendicular_edge in (PERP_NONE, PERP_LEADING_EDGE, PERP_TRAILING_EDGE):
            return []
        return [self.perpendicular_edge]

    def _prepare(self, shape, surf, ctx):
        wing = wing_or_warn(shape, self.name)
        if wing is None:
            return None
        self.reference_length = wing.total_span
        self.spec.derive(self.reference_length)
        return wing, wing_region(surf, 0.0, surf.u_max)

    def _member_primary(self, shape, surf, location, ctx, context):
        wing, region = context
        per_u = resolve_wing_u(location, wing.section_spans(), surf.u_max, wing.cap_u_min)
        alpha = perpendicular_alignment(self.perpendicular_edge, region,
                                        per_u * surf.u_max, ctx)
        return rib_surface(region, per_u, alpha + np.radians(self.theta))

    def individualize(self) -> List[RibPart]:
        """Independent ribs at each member location."""
        ribs = []
        for i, location in enumerate(self.member_locations()):
            rib = RibPart(self.shape_id, self.main_surf_index, name=f"{self.name}_Rib_{i}")
            self._copy_common(rib)
            rib.placement = self._individual_placement(location)
            rib.theta = self.theta
            rib.perpendicular_edge = self.perpendicular_edge
            ribs.append(rib)
        return ribs

    def _params_to_dict(self) -> Dict[str, Any]:
        params = super()._params_to_dict()
        params.update({"theta": self.theta, "perpendicular_edge": self.perpendicular_edge})
        return params

    def _params_from_dict(self, params: Dict[str, Any]) -> None:
        super()._params_from_dict(params)
        self.theta = float(params.get("theta", 0.0))
        self.perpendicular_edge = str(params.get("perpendicular_edge", PERP_NONE))


class SliceArrayPart(_ArrayPart):
    """Slices at evenly spaced locations along the orientation normal or spine."""

    part_type = PartType.SLICE_ARRAY

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.orientation = OrientationSpec()

    def _prepare(self, shape, surf, ctx):
        spine = Spine(surf) if self.orientation.plane is OrientationPlane.CONST_U else None
        self.reference_length = slice_reference_length(shape, surf, self.orientation.plane, spine)
        self.spec.derive(self.reference_length)
        return (spine,)

    def _member_primary(self, shape, surf, location, ctx, context):
        spine = context[0]
        cut = build_slice_surface(shape, surf, location, self.orientation, spine)
        sync_flip(cut, surf)
        return cut

    def individualize(self) -> List[SlicePart]:
        """Independent slices at each member location."""
        slices = []
        for i, location in enumerate(self.member_locations()):
            cut = SlicePart(self.shape_id, self.main_surf_index, name=f"{self.name}_Slice_{i}")
            self._copy_common(cut)
            cut.placement = self._individual_placement(location)
            cut.orientation = OrientationSpec.from_dict(self.orientation.to_dict())
            slices.append(cut)
        return slices

    def _params_to_dict(self) -> Dict[str, Any]:
        params = super()._params_to_dict()
        params["orientation"] = self.orientation.to_dict()
        return params

    def _params_from_dict(self, params: Dict[str, Any]) -> None:
        super()._params_from_dict(params)
        self.orientation = OrientationSpec.from_dict(params.get("orientation", {}))
