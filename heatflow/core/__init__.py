"""
Package core - Materials, geometry and the grid model
"""

from .materials import Material, MaterialLibrary, MaterialCategory, get_material
from .geometry import (
    Sample, Container, ContainerShape, SampleSize, LayerRadii, ring_layout
)
from .grid import HeatGrid, NO_OWNER
from .classifier import classify_domain
from .units import f2c, c2f, PIXELS_PER_INCH, DOWNSAMPLE, TIME_STEP

__all__ = [
    'Material',
    'MaterialLibrary',
    'MaterialCategory',
    'get_material',
    'Sample',
    'Container',
    'ContainerShape',
    'SampleSize',
    'LayerRadii',
    'ring_layout',
    'HeatGrid',
    'NO_OWNER',
    'classify_domain',
    'f2c',
    'c2f',
    'PIXELS_PER_INCH',
    'DOWNSAMPLE',
    'TIME_STEP',
]
