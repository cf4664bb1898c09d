"""
materials.py - Catalog of the substances used by containers and samples

Provides:
- Immutable thermal properties of each material
- Categorised lookup (metals, polymers, liquids, ...)
- Custom materials added at runtime
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class MaterialCategory(Enum):
    """Material families"""
    METAL = "metal"
    POLYMER = "polymer"
    LIQUID = "liquid"
    GAS = "gas"
    INSULATION = "insulation"
    CERAMIC = "ceramic"


@dataclass(frozen=True)
class Material:
    """
    Thermal properties of a material.

    Shared by reference between cells and samples; never mutated in place.
    Use with_changes() to derive an edited copy.
    """
    name: str
    thermal_conductivity: float     # k [W/(m·K)]
    specific_heat: float            # cp [J/(kg·K)]
    density: float                  # rho [kg/m³]
    emissivity: float = 0.9         # Surface emissivity (display only)
    thickness: float = 0.002        # Nominal wall thickness [m] (display only)

    @property
    def diffusivity(self) -> float:
        """Thermal diffusivity alpha = k / (rho·cp) [m²/s]"""
        return self.thermal_conductivity / (self.density * self.specific_heat)

    @property
    def volumetric_heat_capacity(self) -> float:
        """rho·cp [J/(m³·K)]"""
        return self.density * self.specific_heat

    def with_changes(self, **changes) -> "Material":
        """Returns a new Material with the given fields replaced"""
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'thermal_conductivity': self.thermal_conductivity,
            'specific_heat': self.specific_heat,
            'density': self.density,
            'emissivity': self.emissivity,
            'thickness': self.thickness,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Material":
        return cls(
            name=data['name'],
            thermal_conductivity=float(data['thermal_conductivity']),
            specific_heat=float(data['specific_heat']),
            density=float(data['density']),
            emissivity=float(data.get('emissivity', 0.9)),
            thickness=float(data.get('thickness', 0.002)),
        )


# =============================================================================
# MATERIAL DATABASE
# =============================================================================

METAL_MATERIALS: Dict[str, Material] = {
    "Aluminum": Material(
        name="Aluminum",
        thermal_conductivity=205.0,
        specific_heat=900.0,
        density=2700.0,
        emissivity=0.9,
        thickness=0.002
    ),
    "Steel": Material(
        name="Steel",
        thermal_conductivity=50.0,
        specific_heat=500.0,
        density=7850.0,
        emissivity=0.8,
        thickness=0.002
    ),
    "Copper": Material(
        name="Copper",
        thermal_conductivity=385.0,
        specific_heat=385.0,
        density=8960.0,
        emissivity=0.85,
        thickness=0.002
    ),
}

POLYMER_MATERIALS: Dict[str, Material] = {
    "Plastic (PVC)": Material(
        name="Plastic (PVC)",
        thermal_conductivity=0.2,
        specific_heat=1250.0,
        density=950.0,
        emissivity=0.95,
        thickness=0.001
    ),
}

LIQUID_MATERIALS: Dict[str, Material] = {
    "Water": Material(
        name="Water",
        thermal_conductivity=0.6,
        specific_heat=4186.0,
        density=1000.0,
        emissivity=0.96,
        thickness=0.01
    ),
}

GAS_MATERIALS: Dict[str, Material] = {
    "Air": Material(
        name="Air",
        thermal_conductivity=0.026,
        specific_heat=1005.0,
        density=1.2,
        emissivity=1.0,
        thickness=0.01
    ),
}

INSULATION_MATERIALS: Dict[str, Material] = {
    "Phenolic Foam": Material(
        name="Phenolic Foam",
        thermal_conductivity=0.03,
        specific_heat=1400.0,
        density=40.0,
        emissivity=0.9,
        thickness=0.025
    ),
}

CERAMIC_MATERIALS: Dict[str, Material] = {
    "Glass": Material(
        name="Glass",
        thermal_conductivity=1.0,
        specific_heat=840.0,
        density=2500.0,
        emissivity=0.92,
        thickness=0.003
    ),
}

_CATEGORIES: Dict[MaterialCategory, Dict[str, Material]] = {
    MaterialCategory.METAL: METAL_MATERIALS,
    MaterialCategory.POLYMER: POLYMER_MATERIALS,
    MaterialCategory.LIQUID: LIQUID_MATERIALS,
    MaterialCategory.GAS: GAS_MATERIALS,
    MaterialCategory.INSULATION: INSULATION_MATERIALS,
    MaterialCategory.CERAMIC: CERAMIC_MATERIALS,
}

DEFAULT_MATERIAL = "Aluminum"
AMBIENT_AIR = "Air"


# =============================================================================
# MATERIAL LIBRARY
# =============================================================================

class MaterialLibrary:
    """
    Central registry of the materials available to a simulation.

    Lookup is by display name ("Aluminum", "Plastic (PVC)", ...).
    """

    def __init__(self):
        self.materials: Dict[str, Material] = {}
        for table in _CATEGORIES.values():
            self.materials.update(table)

    def get(self, name: str) -> Material:
        """Returns the material registered under name"""
        if name not in self.materials:
            raise KeyError(f"Unknown material: {name}")
        return self.materials[name]

    def list_materials(self, category: Optional[MaterialCategory] = None) -> list:
        """Lists the material names, optionally for a single category"""
        if category is not None:
            return list(_CATEGORIES[category].keys())
        return list(self.materials.keys())

    def add_custom_material(self, material: Material, key: Optional[str] = None):
        """Registers a custom material (overrides an existing key)"""
        key = key or material.name
        if key in self.materials:
            logger.info("Overriding material '%s'", key)
        self.materials[key] = material

    def default(self) -> Material:
        return self.get(DEFAULT_MATERIAL)

    def ambient_air(self) -> Material:
        return self.get(AMBIENT_AIR)


def get_material(name: str) -> Material:
    """Built-in catalog lookup without a library instance"""
    for table in _CATEGORIES.values():
        if name in table:
            return table[name]
    raise KeyError(f"Unknown material: {name}")
