# Open-FEA Parts Configuration Module
from .structure_config import (
    StructureConfig, config, SolverDialect,
    ToleranceParams, ExpansionParams, ArrayParams
)

__all__ = [
    "StructureConfig", "config", "SolverDialect",
    "ToleranceParams", "ExpansionParams", "ArrayParams"
]
