"""
Open-FEA Parts: Wing Parent Geometry
====================================

WingGeom: a lofted wing built from spanwise cross-sections with sweep,
dihedral and twist propagated section by section.

Parametric layout of the wing surface:
    u: one unit per section interval, plus one unit for each end cap
    w: 0 = trailing edge (upper), 2 = leading edge, 4 = trailing edge (lower)
"""

import logging
from dataclasses import dataclass
from typing import List

import numpy as np

from .shapes import ParentShape, SymmetryPlane
from .surfaces import ParametricSurface

logger = logging.getLogger(__name__)

W_LEADING_EDGE = 2.0
W_MAX = 4.0


@dataclass
class WingSection:
    """One spanwise cross-section and the interval inboard of it."""
    chord: float                 # Local chord length
    span: float = 0.0            # Interval span inboard of this section (ignored at root)
    sweep: float = 0.0           # Leading edge sweep of the interval (degrees)
    dihedral: float = 0.0        # Dihedral of the interval (degrees)
    twist: float = 0.0           # Local twist about quarter chord (degrees, + = nose up)
    thickness: float = 0.12      # Thickness/chord of the symmetric section
    spin: float = 0.0            # Section spin (not implemented; must stay 0)


@dataclass
class SectionPlacement:
    """Leading edge location of a section after propagation."""
    x_le: float
    y: float
    z: float
    section: WingSection


def _thickness_distribution(x: float, thickness: float) -> float:
    """NACA 4-digit half thickness (open trailing edge)."""
    return 5.0 * thickness * (
        0.2969 * np.sqrt(x) - 0.1260 * x - 0.3516 * x ** 2
        + 0.2843 * x ** 3 - 0.1015 * x ** 4
    )


class WingSurface(ParametricSurface):
    """Ruled loft through section curves with optional flat end caps."""

    def __init__(self, placements: List[SectionPlacement],
                 cap_root: bool = False, cap_tip: bool = False):
        if len(placements) < 2:
            raise ValueError("A wing needs at least two sections")
        self.placements = placements
        self.cap_root = cap_root
        self.cap_tip = cap_tip
        u_max = len(placements) - 1 + int(cap_root) + int(cap_tip)
        super().__init__(u_max, W_MAX, closed_w=True)

    def _section_point(self, index: int, w: float, flat: bool = False) -> np.ndarray:
        place = self.placements[index]
        sec = place.section
        if w <= W_LEADING_EDGE:
            t = w / W_LEADING_EDGE
            x = 0.5 * (1.0 + np.cos(np.pi * t))
            z_local = _thickness_distribution(x, sec.thickness)
        else:
            t = (w - W_LEADING_EDGE) / W_LEADING_EDGE
            x = 0.5 * (1.0 - np.cos(np.pi * t))
            z_local = -_thickness_distribution(x, sec.thickness)
        if flat:
            z_local = 0.0

        # Twist about the quarter chord
        twist = np.radians(sec.twist)
        dx = (x - 0.25) * sec.chord
        dz = z_local * sec.chord
        x_rot = 0.25 * sec.chord + dx * np.cos(twist) + dz * np.sin(twist)
        z_rot = -dx * np.sin(twist) + dz * np.cos(twist)
        return np.array([place.x_le + x_rot, place.y, place.z + z_rot])

    def _local_point(self, u: float, w: float) -> np.ndarray:
        n = len(self.placements)
        if self.cap_root:
            if u <= 1.0:
                return ((1.0 - u) * self._section_point(0, w, flat=True)
                        + u * self._section_point(0, w))
            u -= 1.0
        if self.cap_tip and u >= n - 1:
            t = u - (n - 1)
            return ((1.0 - t) * self._section_point(n - 1, w)
                    + t * self._section_point(n - 1, w, flat=True))
        seg = min(int(np.floor(u)), n - 2)
        t = u - seg
        return ((1.0 - t) * self._section_point(seg, w)
                + t * self._section_point(seg + 1, w))


class WingGeom(ParentShape):
    """
    Wing parent shape.

    Features:
    - Arbitrary number of cross-sections
    - Sweep via leading edge x propagation
    - Dihedral via z propagation
    - Per-section twist
    - Optional flat root/tip caps
    """

    def __init__(
        self,
        name: str,
        sections: List[WingSection],
        cap_root: bool = False,
        cap_tip: bool = False,
        symmetry: SymmetryPlane = SymmetryPlane.XZ,
        **kwargs,
    ):
        super().__init__(name, symmetry=symmetry, **kwargs)
        if len(sections) < 2:
            raise ValueError(f"{name}: a wing needs at least two sections")
        self.sections = list(sections)
        self.cap_root = cap_root
        self.cap_tip = cap_tip

    @classmethod
    def tapered(
        cls,
        name: str,
        semi_span: float,
        root_chord: float,
        tip_chord: float,
        sweep_angle: float = 0.0,
        dihedral_angle: float = 0.0,
        washout: float = 0.0,
        n_sections: int = 2,
        **kwargs,
    ) -> "WingGeom":
        """Straight-tapered wing split into equal-span intervals."""
        sections = []
        for i in range(n_sections):
            eta = i / (n_sections - 1)
            sections.append(WingSection(
                chord=root_chord + eta * (tip_chord - root_chord),
                span=0.0 if i == 0 else semi_span / (n_sections - 1),
                sweep=sweep_angle,
                dihedral=dihedral_angle,
                twist=-eta * washout,
            ))
        return cls(name, sections, **kwargs)

    # --- section layout --------------------------------------------------

    def section_placements(self) -> List[SectionPlacement]:
        """Propagate sweep and dihedral outboard from the root."""
        x_le = y = z = 0.0
        placements = [SectionPlacement(x_le, y, z, self.sections[0])]
        for sec in self.sections[1:]:
            y += sec.span
            x_le += sec.span * np.tan(np.radians(sec.sweep))
            z += sec.span * np.tan(np.radians(sec.dihedral))
            placements.append(SectionPlacement(x_le, y, z, sec))
        return placements

    @property
    def num_sections(self) -> int:
        return len(self.sections)

    def section_spans(self) -> List[float]:
        """Span of every interval, root outboard."""
        return [sec.span for sec in self.sections[1:]]

    @property
    def total_span(self) -> float:
        return float(sum(self.section_spans()))

    @property
    def cap_u_min(self) -> bool:
        return self.cap_root

    @property
    def cap_u_max(self) -> bool:
        return self.cap_tip

    def _build_main_surface(self) -> ParametricSurface:
        for i, sec in enumerate(self.sections):
            if sec.spin != 0.0:
                logger.warning(
                    "%s: XSec spin not implemented; ignoring spin=%.3f on section %d",
                    self.name, sec.spin, i,
                )
        return WingSurface(self.section_placements(), self.cap_root, self.cap_tip)

