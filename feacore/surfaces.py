"""
Open-FEA Parts: Surface Query Facade
====================================

Parametric surfaces consumed by the structural part engine.

Every surface is evaluable at (u, w) in [0, u_max] x [0, w_max], carries a
4x4 placement matrix and a normal-flip flag, and can be split into patches
at its feature lines. The parent geometries in wing.py and body.py and the
member planes built by planar.py all share this interface.
"""

import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

import numpy as np

from config import config
from . import vecmath

logger = logging.getLogger(__name__)


class SurfaceRole(Enum):
    """Surface classification handed to the mesher."""
    NORMAL = "normal"          # Aerodynamic skin
    STRUCTURE = "structure"    # Shell member (rib, spar, slice, dome)
    STIFFENER = "stiffener"    # Beam-only member


@dataclass
class BoundingBox:
    """Axis-aligned box in model units."""

    min_pt: np.ndarray
    max_pt: np.ndarray

    @classmethod
    def from_points(cls, points: np.ndarray) -> "BoundingBox":
        pts = np.asarray(points, dtype=float).reshape(-1, 3)
        return cls(pts.min(axis=0), pts.max(axis=0))

    @property
    def extents(self) -> np.ndarray:
        return self.max_pt - self.min_pt

    @property
    def largest_dimension(self) -> float:
        return float(self.extents.max())

    @property
    def smallest_dimension(self) -> float:
        return float(self.extents.min())

    @property
    def center(self) -> np.ndarray:
        return 0.5 * (self.min_pt + self.max_pt)

    def expanded(self, pad: float) -> "BoundingBox":
        return BoundingBox(self.min_pt - pad, self.max_pt + pad)


@dataclass
class SplitPatch:
    """One sub-patch of a surface, bounded by feature lines."""

    u_min: float
    u_max: float
    w_min: float
    w_max: float
    points: np.ndarray          # (N, 3) sample grid, stands in for control points

    def all_y_below(self, value: float) -> bool:
        return bool(np.all(self.points[:, 1] <= value))

    def on_y_zero(self, tol: float) -> bool:
        return bool(np.all(np.abs(self.points[:, 1]) <= tol))


class ParametricSurface(ABC):
    """
    Abstract parametric surface.

    Subclasses implement _local_point(); placement is carried by a 4x4
    matrix so that symmetry copies and body/world frame changes are plain
    matrix products.
    """

    def __init__(self, u_max: float, w_max: float,
                 closed_u: bool = False, closed_w: bool = False):
        self.u_max = float(u_max)
        self.w_max = float(w_max)
        self.closed_u = closed_u
        self.closed_w = closed_w
        self.flip_normal = False
        self.role = SurfaceRole.STRUCTURE
        self._matrix = np.eye(4)

    @abstractmethod
    def _local_point(self, u: float, w: float) -> np.ndarray:
        """Point before the placement matrix is applied."""
        pass

    # --- evaluation ----------------------------------------------------------

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix.copy()

    def evaluate(self, u: float, w: float) -> np.ndarray:
        u = min(max(u, 0.0), self.u_max)
        w = min(max(w, 0.0), self.w_max)
        return vecmath.apply(self._matrix, self._local_point(u, w))

    def evaluate01(self, u: float, w: float) -> np.ndarray:
        """Evaluate with both parameters normalized to [0, 1]."""
        return self.evaluate(u * self.u_max, w * self.w_max)

    def derivatives(self, u: float, w: float):
        """Central-difference partials (dS/du, dS/dw) in the placed frame."""
        h = 1e-6 * max(self.u_max, self.w_max, 1.0)
        u0, u1 = max(u - h, 0.0), min(u + h, self.u_max)
        w0, w1 = max(w - h, 0.0), min(w + h, self.w_max)
        du = (self.evaluate(u1, w) - self.evaluate(u0, w)) / (u1 - u0)
        dw = (self.evaluate(u, w1) - self.evaluate(u, w0)) / (w1 - w0)
        return du, dw

    def normal(self, u: float, w: float) -> np.ndarray:
        du, dw = self.derivatives(u, w)
        n = vecmath.normalize(np.cross(du, dw))
        return -n if self.flip_normal else n

    # --- feature lines -------------------------------------------------------

    def u_breaks(self) -> List[float]:
        return [float(v) for v in range(int(np.floor(self.u_max)) + 1)]

    def w_breaks(self) -> List[float]:
        return [float(v) for v in range(int(np.floor(self.w_max)) + 1)]

    def _sample_params(self, breaks: Sequence[float], per_unit: int) -> np.ndarray:
        values = set(breaks)
        for lo, hi in zip(breaks[:-1], breaks[1:]):
            values.update(np.linspace(lo, hi, per_unit + 1).tolist())
        return np.array(sorted(values))

    def sample_grid(self, per_u: int = None, per_w: int = None) -> np.ndarray:
        """(N, 3) sample points covering the full domain."""
        per_u = per_u or config.sampling.bbox_samples_per_u
        if per_w is None:
            spans = max(len(self.w_breaks()) - 1, 1)
            per_w = max(config.sampling.bbox_samples_w // spans, 2)
        us = self._sample_params(self.u_breaks(), per_u)
        ws = self._sample_params(self.w_breaks(), per_w)
        return np.array([self.evaluate(u, w) for u in us for w in ws])

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(self.sample_grid())

    def u_curve_bounding_box(self, u: float) -> BoundingBox:
        """Bounding box of the constant-u curve (u in surface units)."""
        ws = self._sample_params(self.w_breaks(), config.sampling.bbox_samples_w)
        return BoundingBox.from_points(np.array([self.evaluate(u, w) for w in ws]))

    def split(self) -> List[SplitPatch]:
        """Split into patches at every u and w feature line."""
        n = config.sampling.patch_samples
        u_breaks, w_breaks = self.u_breaks(), self.w_breaks()
        patches = []
        for u0, u1 in zip(u_breaks[:-1], u_breaks[1:]):
            for w0, w1 in zip(w_breaks[:-1], w_breaks[1:]):
                pts = np.array([
                    self.evaluate(u, w)
                    for u in np.linspace(u0, u1, n)
                    for w in np.linspace(w0, w1, n)
                ])
                patches.append(SplitPatch(u0, u1, w0, w1, pts))
        return patches

    # --- placement -----------------------------------------------------------

    def transform(self, mat: np.ndarray) -> None:
        """Left-multiply the placement by mat. The flip flag is not touched."""
        self._matrix = np.asarray(mat, dtype=float) @ self._matrix

    def flip(self) -> None:
        self.flip_normal = not self.flip_normal

    def copy(self) -> "ParametricSurface":
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        return (f"<{self.__class__.__name__} u_max={self.u_max:g} "
                f"w_max={self.w_max:g} flip={self.flip_normal}>")


class PlanarSurface(ParametricSurface):
    """
    Bilinear quadrilateral patch.

    Corner layout: u runs A->B (height), w runs from the A/B end to the
    C/D end, so evaluate01(0.5, 0) and evaluate01(0.5, 1) are the two
    mid-height member end points.
    """

    def __init__(self, a: np.ndarray, b: np.ndarray, c: np.ndarray, d: np.ndarray):
        super().__init__(1.0, 1.0)
        self._corners = np.array([a, b, c, d], dtype=float)

    def _local_point(self, u: float, w: float) -> np.ndarray:
        a, b, c, d = self._corners
        return ((1 - u) * (1 - w) * a + u * (1 - w) * b
                + (1 - u) * w * c + u * w * d)

    def corners(self) -> np.ndarray:
        """Placed A, B, C, D."""
        return vecmath.apply(self._matrix, self._corners)

    def derivatives(self, u: float, w: float):
        a, b, c, d = self.corners()
        du = (1 - w) * (b - a) + w * (d - c)
        dw = (1 - u) * (c - a) + u * (d - b)
        return du, dw

    def sample_grid(self, per_u: int = None, per_w: int = None) -> np.ndarray:
        return self.corners()

    def split(self) -> List[SplitPatch]:
        return [SplitPatch(0.0, 1.0, 0.0, 1.0, self.corners())]

    def plane(self):
        """(point, unit normal) of the plane through the patch."""
        a, b, c, _ = self.corners()
        return a, vecmath.normalize(np.cross(b - a, c - a))

    def distance_to_plane(self, point: np.ndarray) -> float:
        origin, n = self.plane()
        return abs(float(np.dot(np.asarray(point) - origin, n)))


def make_plane_surface(a, b, c, d) -> PlanarSurface:
    """Build a bounded planar quadrilateral from its four corners."""
    return PlanarSurface(np.asarray(a, float), np.asarray(b, float),
                         np.asarray(c, float), np.asarray(d, float))


class EllipsoidSurface(ParametricSurface):
    """
    Half ellipsoid about the local x axis.

    u runs from the pole (u=0) to the equator (u=1); w wraps once around
    x (closed). The dome bulges toward +x unless flip_dir is set.
    """

    def __init__(self, a: float, b: float, c: float, flip_dir: bool = False):
        super().__init__(1.0, 4.0, closed_w=True)
        self.radii = np.array([a, b, c], dtype=float)
        self.flip_dir = flip_dir

    def _local_point(self, u: float, w: float) -> np.ndarray:
        phi = 0.5 * np.pi * u
        theta = 0.5 * np.pi * w
        x = np.cos(phi)
        r = np.sin(phi)
        if self.flip_dir:
            x = -x
        return self.radii * np.array([x, r * np.cos(theta), r * np.sin(theta)])
