"""
Open-FEA Parts: Placement Resolver
==================================

Converts a part's relative/absolute location into a normalized parametric
coordinate on the parent surface.

Wing-attached parts are placed spanwise by walking the section intervals;
body-attached constant-u cuts are placed along the surface spine.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Sequence, Tuple

from .spine import Spine

logger = logging.getLogger(__name__)


class PlacementMode(Enum):
    """Which half of a relative/absolute pair the user drives."""
    REL = "rel"
    ABS = "abs"


@dataclass
class RelativePlacement:
    """
    A location as a fraction of a reference length, or as the length itself.

    derive() is the single place where the pair is brought back into
    agreement; call it once per update with the current reference length.
    """

    relative: float = 0.5
    absolute: float = 0.0
    mode: PlacementMode = PlacementMode.REL
    upper_limit: float = 1.0      # Upper bound of the absolute form

    def derive(self, reference_length: float) -> None:
        reference_length = max(float(reference_length), 0.0)
        self.upper_limit = reference_length
        if self.mode is PlacementMode.REL:
            self.relative = min(max(self.relative, 0.0), 1.0)
            self.absolute = self.relative * reference_length
        else:
            self.absolute = min(max(self.absolute, 0.0), reference_length)
            if reference_length > 0.0:
                self.relative = self.absolute / reference_length

    def set_relative(self, value: float) -> None:
        self.mode = PlacementMode.REL
        self.relative = value

    def set_absolute(self, value: float) -> None:
        self.mode = PlacementMode.ABS
        self.absolute = value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "relative": self.relative,
            "absolute": self.absolute,
            "mode": self.mode.value,
            "upper_limit": self.upper_limit,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RelativePlacement":
        return cls(
            relative=float(data.get("relative", 0.5)),
            absolute=float(data.get("absolute", 0.0)),
            mode=PlacementMode(data.get("mode", PlacementMode.REL.value)),
            upper_limit=float(data.get("upper_limit", 1.0)),
        )


def resolve_wing_u(relative: float, spans: Sequence[float],
                   u_max: float, cap_u_min: bool) -> float:
    """
    Normalized surface u of a spanwise location on a wing.

    Interval boundaries match both neighbours; the outboard interval wins,
    so a location exactly on a section lands at the start of the next
    interval (same u either way).
    """
    total = float(sum(spans))
    if total <= 0.0 or u_max <= 0.0:
        logger.warning("Wing has no span; placing at u=0")
        return 0.0

    target = relative * total
    index = None
    interval_start = 0.0
    start = 0.0
    for i, span in enumerate(spans, start=1):
        end = start + span
        if start <= target <= end:
            index = i
            interval_start = start
        start = end

    if index is None:
        # Outside [0, total] by round-off
        if target > total:
            index, interval_start = len(spans), total - spans[-1]
        else:
            index, interval_start = 1, 0.0

    base = index if cap_u_min else index - 1
    span = spans[index - 1]
    frac = (target - interval_start) / span if span > 0.0 else 0.0
    return (base + frac) / u_max


def wing_u_range(num_sections: int, cap_u_min: bool, cap_u_max: bool,
                 section: int = 0) -> Tuple[float, float]:
    """
    Surface u limits of the wing region a spar is clipped to.

    section > 0 limits the region to that one interval (1-based);
    otherwise the whole wing between the caps is used.
    """
    u_max = num_sections - 1 + int(cap_u_min) + int(cap_u_max)
    if section > 0:
        section = min(section, num_sections - 1)
        u0 = float(section if cap_u_min else section - 1)
        return u0, u0 + 1.0
    u0 = 1.0 if cap_u_min else 0.0
    u1 = float(u_max - 1 if cap_u_max else u_max)
    return u0, u1


def resolve_spine_u(relative: float, spine: Spine) -> float:
    """Normalized surface u at a fraction of the spine length."""
    if spine.u_max <= 0.0:
        return 0.0
    return spine.u_at_length(relative * spine.length) / spine.u_max
