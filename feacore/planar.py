"""
Open-FEA Parts: Planar Surface Builder
======================================

Turns solved member lines and slice placements into bounded planar
patches, sized to penetrate the parent skin and oriented like it.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import numpy as np

from config import config
from . import vecmath
from .placement import resolve_spine_u
from .shapes import ParentShape
from .spine import Spine
from .surfaces import BoundingBox, ParametricSurface, PlanarSurface, make_plane_surface

logger = logging.getLogger(__name__)


class OrientationPlane(Enum):
    """Reference plane of a slice cut."""
    BODY_XY = "xy_body"
    BODY_YZ = "yz_body"
    BODY_XZ = "xz_body"
    ABS_XY = "xy_abs"
    ABS_YZ = "yz_abs"
    ABS_XZ = "xz_abs"
    CONST_U = "const_u"

    @property
    def is_body_frame(self) -> bool:
        return self in (OrientationPlane.BODY_XY, OrientationPlane.BODY_YZ,
                        OrientationPlane.BODY_XZ)

    @property
    def normal_axis(self) -> Optional[int]:
        """Index of the plane normal (0=x, 1=y, 2=z); None for CONST_U."""
        if self is OrientationPlane.CONST_U:
            return None
        return {"yz": 0, "xz": 1, "xy": 2}[self.value[:2]]


@dataclass
class OrientationSpec:
    """Slice reference plane plus rotations about its axes (degrees)."""

    plane: OrientationPlane = OrientationPlane.BODY_YZ
    x_rot: float = 0.0
    y_rot: float = 0.0
    z_rot: float = 0.0

    def __post_init__(self):
        self.x_rot = float(np.clip(self.x_rot, -90.0, 90.0))
        self.y_rot = float(np.clip(self.y_rot, -90.0, 90.0))
        self.z_rot = float(np.clip(self.z_rot, -90.0, 90.0))

    def to_dict(self) -> Dict[str, Any]:
        return {"plane": self.plane.value, "x_rot": self.x_rot,
                "y_rot": self.y_rot, "z_rot": self.z_rot}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrientationSpec":
        return cls(
            plane=OrientationPlane(data.get("plane", OrientationPlane.BODY_YZ.value)),
            x_rot=float(data.get("x_rot", 0.0)),
            y_rot=float(data.get("y_rot", 0.0)),
            z_rot=float(data.get("z_rot", 0.0)),
        )


# --- member planes (ribs, spars) --------------------------------------------

def expansion_for(bbox: BoundingBox) -> float:
    return config.expansion.expansion(bbox.largest_dimension)


def member_height(bbox: BoundingBox) -> float:
    """Half-height a member extends out of its plane."""
    return 0.5 * bbox.smallest_dimension + expansion_for(bbox)


def build_member_surface(end_a: np.ndarray, end_b: np.ndarray,
                         up_axis: np.ndarray, height: float) -> PlanarSurface:
    """Plane through the member line, extended +/- height along up_axis."""
    offset = height * vecmath.normalize(up_axis)
    return make_plane_surface(end_a + offset, end_a - offset,
                              end_b + offset, end_b - offset)


def sync_flip(surface: ParametricSurface, parent: ParametricSurface) -> None:
    """Match the parent's normal-flip state."""
    if surface.flip_normal != parent.flip_normal:
        surface.flip()


# --- slices -------------------------------------------------------------------

def _tilted_extent(offset_span: float, extent: float, angle_deg: float) -> float:
    """Extent needed once the cut is tilted by angle_deg."""
    angle = np.radians(angle_deg)
    if extent > 0.0 and abs(angle) > np.arctan(offset_span / extent):
        return abs(offset_span / np.sin(angle))
    return abs(extent / np.cos(angle))


def _slice_frame_bbox(shape: ParentShape, surface: ParametricSurface,
                      plane: OrientationPlane) -> BoundingBox:
    if plane.is_body_frame:
        body_surf = surface.copy()
        body_surf.transform(vecmath.affine_inverse(shape.model_matrix))
        return body_surf.bounding_box()
    return surface.bounding_box()


def slice_reference_length(shape: ParentShape, surface: ParametricSurface,
                           plane: OrientationPlane, spine: Optional[Spine] = None) -> float:
    """Length a slice's relative location is measured against."""
    if plane is OrientationPlane.CONST_U:
        return (spine or Spine(surface)).length
    bbox = _slice_frame_bbox(shape, surface, plane)
    return float(bbox.extents[plane.normal_axis])


def _axis_aligned_corners(bbox: BoundingBox, plane: OrientationPlane,
                          relative: float, spec: OrientationSpec):
    """Center and corner offsets of an XY/YZ/XZ cut before rotation."""
    k = plane.normal_axis
    center = bbox.center.copy()
    center[k] = bbox.min_pt[k] + bbox.extents[k] * relative
    off = center[k] - bbox.center[k]

    padded = bbox.expanded(config.expansion.slice_bbox_pad)
    dx, dy, dz = padded.extents
    expan = expansion_for(padded)

    if k == 0:
        z_plus = expan + _tilted_extent(dx + 2 * off, dz, spec.y_rot)
        z_minus = expan + _tilted_extent(dx - 2 * off, dz, spec.y_rot)
        y_minus = expan + _tilted_extent(dx + 2 * off, dy, spec.z_rot)
        y_plus = expan + _tilted_extent(dx - 2 * off, dy, spec.z_rot)
        if spec.y_rot < 0.0:
            z_plus, z_minus = z_minus, z_plus
        if spec.z_rot < 0.0:
            y_plus, y_minus = y_minus, y_plus
        offsets = [(0, -y_minus, -z_minus), (0, y_plus, -z_minus),
                   (0, -y_minus, z_plus), (0, y_plus, z_plus)]
    elif k == 2:
        x_minus = expan + _tilted_extent(dz + 2 * off, dx, spec.y_rot)
        x_plus = expan + _tilted_extent(dz - 2 * off, dx, spec.y_rot)
        y_plus = expan + _tilted_extent(dz + 2 * off, dy, spec.x_rot)
        y_minus = expan + _tilted_extent(dz - 2 * off, dy, spec.x_rot)
        if spec.y_rot < 0.0:
            x_plus, x_minus = x_minus, x_plus
        if spec.x_rot < 0.0:
            y_plus, y_minus = y_minus, y_plus
        offsets = [(-x_minus, -y_minus, 0), (-x_minus, y_plus, 0),
                   (x_plus, -y_minus, 0), (x_plus, y_plus, 0)]
    else:
        x_plus = expan + _tilted_extent(dy + 2 * off, dx, spec.z_rot)
        x_minus = expan + _tilted_extent(dy - 2 * off, dx, spec.z_rot)
        z_minus = expan + _tilted_extent(dy + 2 * off, dz, spec.x_rot)
        z_plus = expan + _tilted_extent(dy - 2 * off, dz, spec.x_rot)
        if spec.z_rot < 0.0:
            x_plus, x_minus = x_minus, x_plus
        if spec.x_rot < 0.0:
            z_plus, z_minus = z_minus, z_plus
        offsets = [(-x_minus, 0, -z_minus), (x_plus, 0, -z_minus),
                   (-x_minus, 0, z_plus), (x_plus, 0, z_plus)]

    corners = [center + 0.5 * np.array(o, dtype=float) for o in offsets]
    return center, corners


def _const_u_corners(surface: ParametricSurface, spine: Spine, relative: float):
    """Center, corners and local axes of a cut normal to the spine."""
    per_u = resolve_spine_u(relative, spine)
    u = per_u * surface.u_max
    center = spine.center(u)

    x_axis = spine.tangent(u)
    z_axis = vecmath.normalize(surface.evaluate01(per_u, 0.0) - surface.evaluate01(per_u, 0.5))
    y_axis = vecmath.normalize(np.cross(x_axis, z_axis))

    size = surface.u_curve_bounding_box(u).largest_dimension + 2 * np.finfo(np.float32).eps
    c45 = np.cos(np.pi / 4)
    y_prime = size * (y_axis * c45 + z_axis * c45)
    z_prime = size * (-y_axis * c45 + z_axis * c45)
    corners = [center + y_prime, center - z_prime, center + z_prime, center - y_prime]
    return center, corners, (x_axis, y_axis, z_axis)


def build_slice_surface(shape: ParentShape, surface: ParametricSurface, relative: float,
                        spec: OrientationSpec, spine: Optional[Spine] = None) -> PlanarSurface:
    """
    Build a slice cut through the parent surface.

    The cut is built axis-aligned in the plane's frame, translated to the
    origin, rotated X then Y then Z about the frame axes, moved back to its
    center and, for body-frame planes, carried to world by the model matrix.
    """
    plane = spec.plane
    if plane is OrientationPlane.CONST_U:
        spine = spine or Spine(surface)
        center, corners, axes = _const_u_corners(surface, spine, relative)
        frame = np.eye(4)
    else:
        bbox = _slice_frame_bbox(shape, surface, plane)
        center, corners = _axis_aligned_corners(bbox, plane, relative, spec)
        axes = (np.array([1.0, 0.0, 0.0]), np.array([0.0, 1.0, 0.0]), np.array([0.0, 0.0, 1.0]))
        frame = shape.model_matrix if plane.is_body_frame else np.eye(4)

    cut = make_plane_surface(*corners)
    cut.transform(vecmath.translation(-center))
    cut.transform(vecmath.rotation_about(axes[0], spec.x_rot))
    cut.transform(vecmath.rotation_about(axes[1], spec.y_rot))
    cut.transform(vecmath.rotation_about(axes[2], spec.z_rot))
    cut.transform(vecmath.translation(center))
    cut.transform(frame)
    return cut


def plane_center(surface: PlanarSurface) -> np.ndarray:
    return surface.corners().mean(axis=0)


def plane_normal(surface: PlanarSurface) -> np.ndarray:
    return surface.plane()[1]


def edge_midpoints(surface: PlanarSurface) -> Tuple[np.ndarray, np.ndarray]:
    """Mid-height end points of a member plane."""
    return surface.evaluate01(0.5, 0.0), surface.evaluate01(0.5, 1.0)
