"""
Open-FEA Parts: Single Source of Truth (SSOT)
=============================================

This configuration file defines ALL numeric constants used by the structural
part engine. NEVER hard-code tolerances elsewhere. Geometry, arrays, meshing
hand-off and exports derive from these variables.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List
import sys


class SolverDialect(Enum):
    """Supported FEA solver card formats."""
    NASTRAN = "nastran"
    CALCULIX = "calculix"


@dataclass
class ToleranceParams:
    """Numerical guards for the edge intersection solver and locator."""

    trig_tolerance: float = 1e-6          # |sin|/|cos| below this -> fallback
    edge_length_tolerance: float = 1e-6   # Edges shorter than this are degenerate
    planar_point_tolerance: float = 1e-6  # Point-on-plane test (suppress lists)
    half_mesh_tolerance: float = 1e-6     # Patch lies on y<=0 or on y=0
    te_magic: float = 1e-3                # Parametric offset off a sharp TE
    tangent_step: float = 1e-6            # Central-difference step (fraction of u range)

    @property
    def effective_trig_tolerance(self) -> float:
        """Never guard below machine epsilon."""
        return max(self.trig_tolerance, sys.float_info.epsilon)


@dataclass
class ExpansionParams:
    """Oversize applied so members always penetrate the parent skin."""

    relative: float = 1e-5                # x bounding-box largest dimension
    floor: float = 1e-6                   # Absolute minimum expansion
    slice_bbox_pad: float = 0.5           # Slice extents padding (model units)

    def expansion(self, largest_dimension: float) -> float:
        return max(largest_dimension * self.relative, self.floor)


@dataclass
class ArrayParams:
    """Safety cap for generated rib/slice/line arrays."""

    max_members: int = 100
    default_rel_spacing: float = 0.2
    default_abs_spacing: float = 0.2


@dataclass
class SamplingParams:
    """Sampling densities used by the reference parent geometries."""

    bbox_samples_per_u: int = 8           # Per unit of parametric u
    bbox_samples_w: int = 33              # Around the closed w direction
    spine_samples_per_u: int = 24
    spine_ring_samples: int = 16
    patch_samples: int = 5                # Grid per split patch (half-mesh test)
    outline_samples: int = 2              # Points per plane edge in DXF output


@dataclass
class ExportParams:
    """Defaults for structure exports."""

    default_dialect: SolverDialect = SolverDialect.NASTRAN
    dxf_layer_prefix: str = "FEA"
    json_indent: int = 2


@dataclass
class StructureConfig:
    """
    Master configuration container.

    Usage:
        from config import config
        tol = config.tolerances.effective_trig_tolerance
    """

    tolerances: ToleranceParams = field(default_factory=ToleranceParams)
    expansion: ExpansionParams = field(default_factory=ExpansionParams)
    arrays: ArrayParams = field(default_factory=ArrayParams)
    sampling: SamplingParams = field(default_factory=SamplingParams)
    export: ExportParams = field(default_factory=ExportParams)

    # Project metadata
    project_name: str = "Open-FEA Parts"
    version: str = "0.1.0"

    def validate(self) -> List[str]:
        """Validate configuration for numerical sanity."""
        errors = []

        if self.arrays.max_members < 2:
            errors.append(
                f"ARRAY CAP: max_members ({self.arrays.max_members}) must be at least 2."
            )

        if self.tolerances.trig_tolerance <= 0.0:
            errors.append("TOLERANCE: trig_tolerance must be positive.")

        if self.expansion.floor <= 0.0 or self.expansion.relative <= 0.0:
            errors.append(
                "EXPANSION: relative and floor expansion must be positive, "
                "otherwise members can end tangent to the skin."
            )

        if not 0.0 < self.tolerances.te_magic < 0.5:
            errors.append(
                f"TE MAGIC: te_magic ({self.tolerances.te_magic}) must lie in (0, 0.5)."
            )

        if not 0.0 < self.tolerances.tangent_step < 0.01:
            errors.append(
                f"TANGENT STEP: tangent_step ({self.tolerances.tangent_step}) must lie in (0, 0.01)."
            )

        if self.sampling.patch_samples < 2 or self.sampling.bbox_samples_w < 3:
            errors.append("SAMPLING: sample counts too small to bound surfaces.")

        return errors

    def summary(self) -> str:
        """Generate human-readable configuration summary."""
        return f"""
Open-FEA Parts Configuration Summary
====================================
Version: {self.version}

TOLERANCES
----------
Trig Guard: {self.tolerances.effective_trig_tolerance:.1e}
Edge Length Guard: {self.tolerances.edge_length_tolerance:.1e}
Planar Point Tolerance: {self.tolerances.planar_point_tolerance:.1e}

EXPANSION
---------
Relative: {self.expansion.relative:.1e}
Floor: {self.expansion.floor:.1e}
Slice Padding: {self.expansion.slice_bbox_pad}

ARRAYS
------
Max Members: {self.arrays.max_members}

EXPORT
------
Default Dialect: {self.export.default_dialect.value}
"""


# Singleton instance - import this throughout the project
config = StructureConfig()

# Validate on import
_errors = config.validate()
if _errors:
    import warnings
    for err in _errors:
        warnings.warn(err, UserWarning)
