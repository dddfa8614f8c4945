"""
Open-FEA Parts: Body Parent Geometry
====================================

BodyGeom: a body of revolution lofted through elliptical stations.

Parametric layout of the body surface:
    u: one unit per station interval, nose at u=0
    w: 0 = top, 1 = +y side, 2 = bottom, 3 = -y side, 4 = top (closed)
"""

import logging
from dataclasses import dataclass
from typing import List

import numpy as np

from .shapes import ParentShape
from .surfaces import ParametricSurface

logger = logging.getLogger(__name__)


@dataclass
class BodyStation:
    """Body cross-section at a station."""
    station: float       # x location
    width: float         # Maximum width at this station
    height: float        # Maximum height at this station
    floor_height: float  # Lowest point relative to datum


class BodySurface(ParametricSurface):
    """Ruled loft through elliptical station curves."""

    def __init__(self, stations: List[BodyStation]):
        if len(stations) < 2:
            raise ValueError("A body needs at least two stations")
        self.stations = stations
        super().__init__(len(stations) - 1, 4.0, closed_w=True)

    def _station_point(self, index: int, w: float) -> np.ndarray:
        st = self.stations[index]
        theta = 0.5 * np.pi * w
        half_h = 0.5 * st.height
        return np.array([
            st.station,
            0.5 * st.width * np.sin(theta),
            st.floor_height + half_h + half_h * np.cos(theta),
        ])

    def _local_point(self, u: float, w: float) -> np.ndarray:
        seg = min(int(np.floor(u)), len(self.stations) - 2)
        t = u - seg
        return ((1.0 - t) * self._station_point(seg, w)
                + t * self._station_point(seg + 1, w))


class BodyGeom(ParentShape):
    """
    Body-of-revolution parent shape (fuselage, pod, tank).

    Slices placed with constant-u orientation follow its spine.
    """

    def __init__(self, name: str, stations: List[BodyStation], **kwargs):
        super().__init__(name, **kwargs)
        if len(stations) < 2:
            raise ValueError(f"{name}: a body needs at least two stations")
        self.stations = sorted(stations, key=lambda s: s.station)

    @classmethod
    def ellipsoidal(cls, name: str, length: float, width: float, height: float,
                    n_stations: int = 9, **kwargs) -> "BodyGeom":
        """Closed pod with an elliptic length-wise profile."""
        stations = []
        for i in range(n_stations):
            x = length * i / (n_stations - 1)
            scale = np.sqrt(max(1.0 - (2.0 * x / length - 1.0) ** 2, 0.0))
            stations.append(BodyStation(
                station=x,
                width=width * scale,
                height=height * scale,
                floor_height=-0.5 * height * scale,
            ))
        return cls(name, stations, **kwargs)

    @property
    def length(self) -> float:
        return self.stations[-1].station - self.stations[0].station

    def _build_main_surface(self) -> ParametricSurface:
        return BodySurface(self.stations)
