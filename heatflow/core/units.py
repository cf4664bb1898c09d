"""
units.py - Unit conversions and reference constants

World coordinates are render-surface units: 1 unit = 1 mm, so
PIXELS_PER_INCH = 25.4. The grid is a DOWNSAMPLE x DOWNSAMPLE downsampling
of the render surface (4 units -> one 4 mm cell).

Temperatures: Fahrenheit at every public boundary, Celsius inside the grid.
"""

import numpy as np

# =============================================================================
# REFERENCE CONSTANTS
# =============================================================================

PIXELS_PER_INCH = 25.4   # Render units per inch (1 unit = 1 mm)
MM_PER_UNIT = 1.0        # Millimetres per render unit
DOWNSAMPLE = 4           # Render units per grid cell (per axis)
TIME_STEP = 0.05         # Simulated seconds per tick [s]

IN3_PER_FT3 = 1728.0
M3_PER_FT3 = 0.0283168
KG_PER_LB = 0.453592


def f2c(f):
    """Fahrenheit -> Celsius (scalars or arrays)"""
    return (f - 32.0) * 5.0 / 9.0


def c2f(c):
    """Celsius -> Fahrenheit (scalars or arrays)"""
    return c * 9.0 / 5.0 + 32.0


def inches_to_units(inches: float) -> float:
    return inches * PIXELS_PER_INCH


def units_to_inches(units: float) -> float:
    return units / PIXELS_PER_INCH


def cylinder_volume_m3(radius_in: float, height_in: float) -> float:
    """Volume of a cylinder given in inches, returned in m³"""
    volume_in3 = np.pi * radius_in ** 2 * height_in
    return volume_in3 / IN3_PER_FT3 * M3_PER_FT3
