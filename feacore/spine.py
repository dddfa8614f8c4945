"""
Open-FEA Parts: Surface Spine
=============================

Arc-length parameterization of a body-of-revolution surface. The spine
runs through the centroid of every constant-u ring and is inverted so a
fraction of the physical length can be mapped back to surface u.
"""

import logging
from typing import Optional

import numpy as np
from scipy.integrate import cumulative_trapezoid
from scipy.interpolate import CubicSpline

from config import config
from .surfaces import ParametricSurface

logger = logging.getLogger(__name__)


class Spine:
    """
    Centroid spine of a parametric surface.

    Built once per surface; queries are spline evaluations.
    """

    def __init__(self, surface: ParametricSurface,
                 samples_per_u: Optional[int] = None,
                 ring_samples: Optional[int] = None):
        per_u = samples_per_u or config.sampling.spine_samples_per_u
        ring = ring_samples or config.sampling.spine_ring_samples

        self.u_max = surface.u_max
        n = max(int(np.ceil(surface.u_max * per_u)) + 1, 4)
        us = np.linspace(0.0, surface.u_max, n)
        ws = np.linspace(0.0, surface.w_max, ring, endpoint=False)
        centers = np.array([
            np.mean([surface.evaluate(u, w) for w in ws], axis=0) for u in us
        ])

        self._center = CubicSpline(us, centers, axis=0)
        speed = np.linalg.norm(self._center(us, 1), axis=1)
        lengths = cumulative_trapezoid(speed, us, initial=0.0)
        self.length = float(lengths[-1])

        # Inversion needs strictly increasing lengths
        keep = np.concatenate([[True], np.diff(lengths) > 1e-12])
        if keep.sum() < 2:
            logger.warning("Degenerate spine (length %.3g); u follows length linearly",
                           self.length)
            self._u_of_length = None
        else:
            self._u_of_length = CubicSpline(lengths[keep], us[keep])

    def center(self, u: float) -> np.ndarray:
        return np.asarray(self._center(np.clip(u, 0.0, self.u_max)), dtype=float)

    def tangent(self, u: float) -> np.ndarray:
        d = np.asarray(self._center(np.clip(u, 0.0, self.u_max), 1), dtype=float)
        mag = np.linalg.norm(d)
        return d / mag if mag > 0.0 else d

    def u_at_length(self, distance: float) -> float:
        """Surface u at the given distance along the spine."""
        distance = float(np.clip(distance, 0.0, self.length))
        if self._u_of_length is None or self.length == 0.0:
            return 0.0 if self.length == 0.0 else self.u_max * distance / self.length
        return float(np.clip(self._u_of_length(distance), 0.0, self.u_max))
