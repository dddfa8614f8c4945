# Open-FEA Parts Core Module
from .shapes import ParentShape, ShapeRegistry, SymmetryPlane
from .wing import WingGeom, WingSection
from .body import BodyGeom, BodyStation
from .parts import PartType, ElementMode, StructuralPart, create_part
from .structure import ReorderAction, Structure
from .subsurfaces import SubSurfaceType
from .properties import FeaMaterial, FeaProperty, PropertyLibrary

__all__ = [
    "ParentShape",
    "ShapeRegistry",
    "SymmetryPlane",
    "WingGeom",
    "WingSection",
    "BodyGeom",
    "BodyStation",
    "PartType",
    "ElementMode",
    "StructuralPart",
    "create_part",
    "ReorderAction",
    "Structure",
    "SubSurfaceType",
    "FeaMaterial",
    "FeaProperty",
    "PropertyLibrary",
]
