"""
Open-FEA Parts: Subsurfaces
===========================

2D trimming regions on the skin, defined in normalized (u, w) space.
The mesher splits skin elements along their boundaries and may assign
them their own property.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, Type

import numpy as np

from .array_expander import ArraySpec, member_locations
from .shapes import new_id

logger = logging.getLogger(__name__)


class SubSurfaceType(Enum):
    LINE = "SSLine"
    RECTANGLE = "SSRectangle"
    ELLIPSE = "SSEllipse"
    LINE_ARRAY = "SSLineArray"


class ConstantLine(Enum):
    """Parametric direction held constant by a line."""
    U = "u"
    W = "w"


class SubSurface(ABC):
    """Abstract trimming region on the skin."""

    ss_type: SubSurfaceType = None

    def __init__(self, name: str = "", ss_id: Optional[str] = None):
        self.id = ss_id or new_id()
        self.name = name or self.ss_type.value
        self.property_index = 0
        self.cap_property_index = 1

    @abstractmethod
    def boundaries(self) -> List[np.ndarray]:
        """(N, 2) uw polylines in [0, 1]^2."""
        pass

    @abstractmethod
    def _params_to_dict(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    def _params_from_dict(self, params: Dict[str, Any]) -> None:
        pass

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.ss_type.value,
            "id": self.id,
            "name": self.name,
            "property_index": self.property_index,
            "cap_property_index": self.cap_property_index,
            "params": self._params_to_dict(),
        }

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}('{self.name}')>"


def _constant_line(const: ConstantLine, value: float) -> np.ndarray:
    value = min(max(value, 0.0), 1.0)
    if const is ConstantLine.U:
        return np.array([[value, 0.0], [value, 1.0]])
    return np.array([[0.0, value], [1.0, value]])


class SubSurfaceLine(SubSurface):
    """Line of constant u or w."""

    ss_type = SubSurfaceType.LINE

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.constant = ConstantLine.U
        self.value = 0.5

    def boundaries(self) -> List[np.ndarray]:
        return [_constant_line(self.constant, self.value)]

    def _params_to_dict(self) -> Dict[str, Any]:
        return {"constant": self.constant.value, "value": self.value}

    def _params_from_dict(self, params: Dict[str, Any]) -> None:
        self.constant = ConstantLine(params.get("constant", "u"))
        self.value = float(params.get("value", 0.5))


def _rotated_loop(center: np.ndarray, local: np.ndarray, theta_deg: float) -> np.ndarray:
    theta = np.radians(theta_deg)
    rot = np.array([[np.cos(theta), -np.sin(theta)], [np.sin(theta), np.cos(theta)]])
    loop = center + local @ rot.T
    return np.clip(np.vstack([loop, loop[:1]]), 0.0, 1.0)


class SubSurfaceRectangle(SubSurface):
    """Rotated rectangle centered at (center_u, center_w)."""

    ss_type = SubSurfaceType.RECTANGLE

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.center_u = 0.5
        self.center_w = 0.5
        self.u_length = 0.2
        self.w_length = 0.2
        self.theta = 0.0

    def boundaries(self) -> List[np.ndarray]:
        hu, hw = 0.5 * self.u_length, 0.5 * self.w_length
        local = np.array([[-hu, -hw], [hu, -hw], [hu, hw], [-hu, hw]])
        return [_rotated_loop(np.array([self.center_u, self.center_w]), local, self.theta)]

    def _params_to_dict(self) -> Dict[str, Any]:
        return {"center": [self.center_u, self.center_w],
                "lengths": [self.u_length, self.w_length], "theta": self.theta}

    def _params_from_dict(self, params: Dict[str, Any]) -> None:
        self.center_u, self.center_w = (float(v) for v in params.get("center", [0.5, 0.5]))
        self.u_length, self.w_length = (float(v) for v in params.get("lengths", [0.2, 0.2]))
        self.theta = float(params.get("theta", 0.0))


class SubSurfaceEllipse(SubSurface):
    """Rotated ellipse centered at (center_u, center_w)."""

    ss_type = SubSurfaceType.ELLIPSE

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.center_u = 0.5
        self.center_w = 0.5
        self.u_length = 0.2
        self.w_length = 0.2
        self.theta = 0.0
        self.num_points = 16

    def boundaries(self) -> List[np.ndarray]:
        t = np.linspace(0.0, 2.0 * np.pi, self.num_points, endpoint=False)
        local = np.column_stack([0.5 * self.u_length * np.cos(t),
                                 0.5 * self.w_length * np.sin(t)])
        return [_rotated_loop(np.array([self.center_u, self.center_w]), local, self.theta)]

    def _params_to_dict(self) -> Dict[str, Any]:
        return {"center": [self.center_u, self.center_w],
                "lengths": [self.u_length, self.w_length],
                "theta": self.theta, "num_points": self.num_points}

    def _params_from_dict(self, params: Dict[str, Any]) -> None:
        self.center_u, self.center_w = (float(v) for v in params.get("center", [0.5, 0.5]))
        self.u_length, self.w_length = (float(v) for v in params.get("lengths", [0.2, 0.2]))
        self.theta = float(params.get("theta", 0.0))
        self.num_points = int(params.get("num_points", 16))


class SubSurfaceLineArray(SubSurface):
    """Evenly spaced constant-u or constant-w lines."""

    ss_type = SubSurfaceType.LINE_ARRAY

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.constant = ConstantLine.U
        self.spec = ArraySpec()

    def locations(self) -> List[float]:
        self.spec.derive(1.0)
        return member_locations(self.spec)

    def boundaries(self) -> List[np.ndarray]:
        return [_constant_line(self.constant, v) for v in self.locations()]

    def individualize(self) -> List[SubSurfaceLine]:
        lines = []
        for i, value in enumerate(self.locations()):
            line = SubSurfaceLine(name=f"{self.name}_SSLine_{i}")
            line.constant = self.constant
            line.value = value
            line.property_index = self.property_index
            line.cap_property_index = self.cap_property_index
            lines.append(line)
        return lines

    def _params_to_dict(self) -> Dict[str, Any]:
        return {"constant": self.constant.value, "spec": self.spec.to_dict()}

    def _params_from_dict(self, params: Dict[str, Any]) -> None:
        self.constant = ConstantLine(params.get("constant", "u"))
        self.spec = ArraySpec.from_dict(params.get("spec", {}))


SUBSURFACE_CLASSES: Dict[SubSurfaceType, Type[SubSurface]] = {
    SubSurfaceType.LINE: SubSurfaceLine,
    SubSurfaceType.RECTANGLE: SubSurfaceRectangle,
    SubSurfaceType.ELLIPSE: SubSurfaceEllipse,
    SubSurfaceType.LINE_ARRAY: SubSurfaceLineArray,
}


def create_subsurface(ss_type: SubSurfaceType, name: str = "") -> SubSurface:
    return SUBSURFACE_CLASSES[ss_type](name=name)


def subsurface_from_dict(data: Dict[str, Any]) -> SubSurface:
    ss = SUBSURFACE_CLASSES[SubSurfaceType(data["type"])](
        name=data.get("name", ""), ss_id=data.get("id"))
    ss.property_index = int(data.get("property_index", 0))
    ss.cap_property_index = int(data.get("cap_property_index", 1))
    ss._params_from_dict(data.get("params", {}))
    return ss
