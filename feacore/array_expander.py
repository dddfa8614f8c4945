"""
Open-FEA Parts: Array Expander
==============================

Member counts and placements for rib, slice and subsurface-line arrays.

The count cap is enforced through the allowed spacing range: the smallest
spacing a user may set yields exactly max_members members.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from config import config
from .placement import PlacementMode

logger = logging.getLogger(__name__)


@dataclass
class ArraySpec:
    """Start location, spacing and direction of an array."""

    start_rel: float = 0.0
    start_abs: float = 0.0
    spacing_rel: float = 0.2
    spacing_abs: float = 0.2
    mode: PlacementMode = PlacementMode.REL
    positive_direction: bool = True
    count: int = 1                      # Derived

    @property
    def direction(self) -> int:
        return 1 if self.positive_direction else -1

    def remaining(self, reference_length: float) -> float:
        """Distance available from the start in the array direction."""
        if self.mode is PlacementMode.REL:
            return 1.0 - self.start_rel if self.positive_direction else self.start_rel
        return (reference_length - self.start_abs
                if self.positive_direction else self.start_abs)

    def derive(self, reference_length: float) -> None:
        """Clamp the spacing, sync the rel/abs pairs and recount."""
        reference_length = max(float(reference_length), 0.0)
        if self.mode is PlacementMode.REL:
            self.start_rel = min(max(self.start_rel, 0.0), 1.0)
            self.start_abs = self.start_rel * reference_length
        else:
            self.start_abs = min(max(self.start_abs, 0.0), reference_length)
            if reference_length > 0.0:
                self.start_rel = self.start_abs / reference_length

        lo, hi = spacing_limits(self, reference_length)
        if self.mode is PlacementMode.REL:
            self.spacing_rel = min(max(self.spacing_rel, lo), hi)
            self.spacing_abs = self.spacing_rel * reference_length
        else:
            self.spacing_abs = min(max(self.spacing_abs, lo), hi)
            if reference_length > 0.0:
                self.spacing_rel = self.spacing_abs / reference_length
        self.count = array_count(self, reference_length)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_rel": self.start_rel,
            "start_abs": self.start_abs,
            "spacing_rel": self.spacing_rel,
            "spacing_abs": self.spacing_abs,
            "mode": self.mode.value,
            "positive_direction": self.positive_direction,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArraySpec":
        return cls(
            start_rel=float(data.get("start_rel", 0.0)),
            start_abs=float(data.get("start_abs", 0.0)),
            spacing_rel=float(data.get("spacing_rel", config.arrays.default_rel_spacing)),
            spacing_abs=float(data.get("spacing_abs", config.arrays.default_abs_spacing)),
            mode=PlacementMode(data.get("mode", PlacementMode.REL.value)),
            positive_direction=bool(data.get("positive_direction", True)),
        )


def spacing_limits(spec: ArraySpec, reference_length: float) -> Tuple[float, float]:
    """Allowed spacing range for the current start and direction."""
    upper = 1.0 if spec.mode is PlacementMode.REL else max(reference_length, 0.0)
    remaining = max(spec.remaining(reference_length), 0.0)
    lower = remaining / (config.arrays.max_members - 1)
    return min(lower, upper), upper


def array_count(spec: ArraySpec, reference_length: float) -> int:
    """count = 1 + floor(remaining / spacing); at least 1."""
    spacing = spec.spacing_rel if spec.mode is PlacementMode.REL else spec.spacing_abs
    remaining = max(spec.remaining(reference_length), 0.0)
    if remaining <= 0.0 or spacing <= 0.0:
        return 1
    return 1 + int(math.floor(remaining / spacing))


def member_locations(spec: ArraySpec) -> List[float]:
    """Relative location of every member: start + dir * i * spacing."""
    return [
        min(max(spec.start_rel + spec.direction * i * spec.spacing_rel, 0.0), 1.0)
        for i in range(spec.count)
    ]
