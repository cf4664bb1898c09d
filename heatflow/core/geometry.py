"""
geometry.py - Container and layered cylindrical samples

Handles:
- Radial layer structure of each sample (core / middle / outer)
- Effective core density from the water mass of a nominal cylinder size
- Container shape and fill conditions
- Ring auto-layout of samples inside a container

Radially (from the sample centre outwards):
    1. CORE    (r <= r_core)
    2. MIDDLE  (r_core < r <= r_middle)
    3. OUTER   (r_middle < r <= r_outer)
"""

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

import numpy as np

from .materials import Material, get_material
from .units import (
    PIXELS_PER_INCH, KG_PER_LB, cylinder_volume_m3, units_to_inches
)


class ContainerShape(str, Enum):
    CIRCLE = "circle"
    RECTANGLE = "rectangle"


class SampleSize(str, Enum):
    """Nominal cylinder sizes (diameter x height, inches)"""
    SMALL = "2x4"
    LARGE = "4x8"

    @property
    def height_in(self) -> float:
        return 4.0 if self is SampleSize.SMALL else 8.0


class LayerRadii(NamedTuple):
    core: float
    middle: float
    outer: float


def _new_sample_id() -> str:
    return uuid.uuid4().hex[:9]


@dataclass
class Sample:
    """
    Layered cylindrical sample seen from above.

    Layer radii come either from radius fractions or, when both
    thicknesses are given, from explicit per-layer thickness in inches.
    Temperatures are in Fahrenheit.
    """
    x: float
    y: float
    radius: float = 30.0                  # Outer radius [render units]
    name: str = "Sample"
    id: str = field(default_factory=_new_sample_id)

    core_material: Material = field(default_factory=lambda: get_material("Water"))
    middle_material: Material = field(default_factory=lambda: get_material("Plastic (PVC)"))
    outer_material: Material = field(default_factory=lambda: get_material("Aluminum"))

    # Fraction mode
    core_radius_fraction: float = 0.6
    middle_radius_fraction: float = 0.8
    outer_radius_fraction: float = 1.0

    # Thickness mode (overrides the fractions when both are set)
    outer_thickness_in: Optional[float] = None
    middle_thickness_in: Optional[float] = None
    size: Optional[SampleSize] = None
    water_mass_lbs: Optional[float] = None

    initial_temperature: float = 110.0    # [°F]
    temperature: Optional[float] = None   # [°F] aggregated; starts at initial_temperature

    # Thermostatic (Peltier) clamp
    peltier_active: bool = False
    target_temperature: Optional[float] = None   # [°F]

    def __post_init__(self):
        if self.size is not None and not isinstance(self.size, SampleSize):
            self.size = SampleSize(self.size)
        if self.temperature is None:
            self.temperature = self.initial_temperature
        if self.water_mass_lbs is not None and self.water_mass_lbs <= 0:
            raise ValueError(
                f"Water mass of '{self.name}' must be positive: {self.water_mass_lbs}"
            )
        core, middle, outer = self.layer_radii()
        if not (0.0 < core < middle < outer <= self.radius + 1e-9):
            raise ValueError(
                f"Invalid layer radii for '{self.name}': "
                f"core={core:.3f}, middle={middle:.3f}, outer={outer:.3f}, "
                f"radius={self.radius:.3f}"
            )

    @property
    def uses_thickness(self) -> bool:
        return self.outer_thickness_in is not None and self.middle_thickness_in is not None

    def layer_radii(self) -> LayerRadii:
        """Radii of the three layers [render units]"""
        if self.uses_thickness:
            outer = self.radius
            middle = outer - self.outer_thickness_in * PIXELS_PER_INCH
            core = middle - self.middle_thickness_in * PIXELS_PER_INCH
            return LayerRadii(core, middle, outer)
        return LayerRadii(
            self.core_radius_fraction * self.radius,
            self.middle_radius_fraction * self.radius,
            self.outer_radius_fraction * self.radius,
        )

    def effective_core_material(self) -> Material:
        """
        Core material with density derived from the water mass.

        Applies only when both size and water_mass_lbs are set:
            rho = m / (pi·r_core²·h)
        """
        if self.size is None or self.water_mass_lbs is None:
            return self.core_material

        core_radius_in = units_to_inches(self.layer_radii().core)
        volume_m3 = cylinder_volume_m3(core_radius_in, self.size.height_in)
        mass_kg = self.water_mass_lbs * KG_PER_LB
        return self.core_material.with_changes(density=mass_kg / volume_m3)

    def material_at(self, r: float) -> Optional[Material]:
        """Material at radial distance r from the centre (None if outside)"""
        core, middle, outer = self.layer_radii()
        if r <= core:
            return self.effective_core_material()
        elif r <= middle:
            return self.middle_material
        elif r <= outer:
            return self.outer_material
        return None

    @property
    def clamp_temperature(self) -> float:
        """Peltier target [°F]; falls back to the initial temperature"""
        if self.target_temperature is None:
            return self.initial_temperature
        return self.target_temperature

    def distance_to(self, other: "Sample") -> float:
        return float(np.hypot(other.x - self.x, other.y - self.y))


@dataclass
class Container:
    """
    Container holding the samples.

    width is the diameter for circular containers; height is then ignored.
    A liquid fill is a fixed-temperature boundary, not a diffusing medium.
    Temperatures are in Fahrenheit.
    """
    shape: ContainerShape = ContainerShape.CIRCLE
    width: float = 600.0
    height: float = 400.0
    fill_material: Material = field(default_factory=lambda: get_material("Phenolic Foam"))
    ambient_temperature: float = 70.0
    fill_is_liquid: bool = False
    liquid_temperature: Optional[float] = None
    wall_material: Optional[Material] = None

    # Centre [render units]; None = centre of the render surface
    x: Optional[float] = None
    y: Optional[float] = None

    def __post_init__(self):
        if not isinstance(self.shape, ContainerShape):
            self.shape = ContainerShape(self.shape)
        if self.width <= 0 or (self.shape is ContainerShape.RECTANGLE and self.height <= 0):
            raise ValueError(f"Container dimensions must be positive: {self.width} x {self.height}")

    @property
    def fill_temperature(self) -> float:
        """Fill temperature [°F]"""
        if self.fill_is_liquid and self.liquid_temperature is not None:
            return self.liquid_temperature
        return self.ambient_temperature

    def center(self, render_width: float, render_height: float) -> Tuple[float, float]:
        cx = render_width / 2 if self.x is None else self.x
        cy = render_height / 2 if self.y is None else self.y
        return cx, cy

    def contains(self, px, py, cx: float, cy: float):
        """Inside test for points or coordinate arrays (boundary included)"""
        if self.shape is ContainerShape.CIRCLE:
            r = self.width / 2
            return np.hypot(px - cx, py - cy) <= r

        half_w = self.width / 2
        half_h = self.height / 2
        return (
            (px >= cx - half_w) & (px <= cx + half_w) &
            (py >= cy - half_h) & (py <= cy + half_h)
        )

    @property
    def layout_span(self) -> float:
        """Smallest extent of the container"""
        if self.shape is ContainerShape.CIRCLE:
            return self.width
        return min(self.width, self.height)


# =============================================================================
# AUTO-LAYOUT
# =============================================================================

def ring_layout(container: Container,
                count: int,
                render_width: float,
                render_height: float,
                template: Optional[Sample] = None) -> List[Sample]:
    """
    Places count samples evenly on a ring around the container centre.

    Ring radius = container span / 3. Every sample gets a fresh id and
    the name "Sample i"; the other fields come from template.
    """
    if count <= 0:
        return []

    cx, cy = container.center(render_width, render_height)
    ring_r = container.layout_span / 3

    samples = []
    for i in range(count):
        angle = (i / count) * 2 * np.pi
        x = cx + np.cos(angle) * ring_r
        y = cy + np.sin(angle) * ring_r
        if template is None:
            sample = Sample(x=float(x), y=float(y), name=f"Sample {i + 1}")
        else:
            sample = replace(template, x=float(x), y=float(y),
                             name=f"Sample {i + 1}", id=_new_sample_id())
        samples.append(sample)
    return samples
