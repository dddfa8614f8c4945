"""Element properties and isotropic materials with NASTRAN / Calculix card output."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class PropertyType(Enum):
    SHELL = "Shell"
    BEAM = "Beam"


@dataclass
class FeaMaterial:
    """Isotropic material (consistent units chosen by the user)."""

    name: str
    density: float = 1.0
    elastic_modulus: float = 0.0
    poisson_ratio: float = 0.0
    thermal_expansion: float = 0.0

    @property
    def shear_modulus(self) -> float:
        """G = E / (2 (1 + nu))."""
        return self.elastic_modulus / (2 * (self.poisson_ratio + 1))

    def nastran_card(self, mat_id: int) -> str:
        return "MAT1,%d,%g,%g,%g,%g,%g" % (
            mat_id, self.elastic_modulus, self.shear_modulus,
            self.poisson_ratio, self.density, self.thermal_expansion,
        )

    def calculix_block(self) -> str:
        return "\n".join([
            f"*MATERIAL, NAME={self.name}",
            "*DENSITY",
            "%g" % self.density,
            "*ELASTIC, TYPE=ISO",
            "%g,%g" % (self.elastic_modulus, self.poisson_ratio),
            "*EXPANSION, TYPE=ISO",
            "%g" % self.thermal_expansion,
        ])


@dataclass
class FeaProperty:
    """Shell thickness or beam section constants plus a material index."""

    name: str
    property_type: PropertyType = PropertyType.SHELL
    thickness: float = 0.1
    area: float = 0.1
    izz: float = 0.1       # Bending in the element XY plane (I1)
    iyy: float = 0.1       # Bending in the element XZ plane (I2)
    izy: float = 0.0       # Product of inertia (I12)
    ixx: float = 0.0       # Torsional constant (J)
    material_index: int = 0

    def nastran_card(self, prop_id: int) -> str:
        if self.property_type is PropertyType.SHELL:
            return "PSHELL,%d,%d,%f" % (prop_id, self.material_index + 1, self.thickness)
        return "PBEAM,%d,%d,%f,%f,%f,%f,%f" % (
            prop_id, self.material_index + 1, self.area,
            self.izz, self.iyy, self.izy, self.ixx,
        )

    def calculix_block(self, elset: str, material: FeaMaterial) -> str:
        if self.property_type is PropertyType.SHELL:
            return "\n".join([
                f"*SHELL SECTION, ELSET={elset}, MATERIAL={material.name}",
                "%g" % self.thickness,
            ])
        # Calculix reads the general section as written for Abaqus.
        return "\n".join([
            f"*BEAM GENERAL SECTION, SECTION=GENERAL, ELSET={elset}, MATERIAL={material.name}",
            "%g,%g,%g,%g,%g" % (self.area, self.izz, self.izy, self.iyy, self.ixx),
        ])


def _aluminum_7075_t6() -> FeaMaterial:
    # SI: kg/m^3, Pa, 1/K
    return FeaMaterial(
        name="Aluminum_7075_T6",
        density=2810.0,
        elastic_modulus=71.7e9,
        poisson_ratio=0.33,
        thermal_expansion=2.36e-5,
    )


@dataclass
class PropertyLibrary:
    """Ordered properties and materials referenced by index from parts."""

    properties: List[FeaProperty] = field(default_factory=list)
    materials: List[FeaMaterial] = field(default_factory=list)

    @classmethod
    def default(cls) -> "PropertyLibrary":
        """One shell property, one beam property and aluminum 7075-T6."""
        return cls(
            properties=[
                FeaProperty(name="Default_Shell", property_type=PropertyType.SHELL),
                FeaProperty(name="Default_Beam", property_type=PropertyType.BEAM),
            ],
            materials=[_aluminum_7075_t6()],
        )

    def get_property(self, index: int) -> Optional[FeaProperty]:
        if 0 <= index < len(self.properties):
            return self.properties[index]
        return None

    def get_material(self, index: int) -> Optional[FeaMaterial]:
        if 0 <= index < len(self.materials):
            return self.materials[index]
        return None

    def is_valid_property(self, index: int) -> bool:
        return self.get_property(index) is not None

    def to_dict(self) -> Dict[str, Any]:
        props = []
        for prop in self.properties:
            data = asdict(prop)
            data["property_type"] = prop.property_type.value
            props.append(data)
        return {"properties": props, "materials": [asdict(m) for m in self.materials]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PropertyLibrary":
        props = []
        for item in data.get("properties", []):
            item = dict(item)
            item["property_type"] = PropertyType(item.get("property_type", "Shell"))
            props.append(FeaProperty(**item))
        mats = [FeaMaterial(**item) for item in data.get("materials", [])]
        return cls(properties=props, materials=mats)
