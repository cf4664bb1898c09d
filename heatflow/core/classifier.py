"""
classifier.py - Assigns a medium to every grid cell

For each cell the world point (col·downsample, row·downsample) is classified:

    1. Outside the container      -> ambient air, fixed (boundary)
    2. Inside, outside any sample -> fill material at fill temperature,
                                     fixed only for a liquid fill
    3. Inside a sample            -> layer material by radial distance,
                                     sample initial temperature, diffusing;
                                     recorded in the ownership cache

Samples are tested in list order and the first match wins. Overlapping
samples are not supported: the later sample simply loses the shared cells.

Vectorised with NumPy masks; runs once per initialisation.
"""

import logging
from typing import List, Optional

import numpy as np

from .geometry import Container, Sample
from .grid import HeatGrid
from .materials import MaterialLibrary
from .units import DOWNSAMPLE, f2c

logger = logging.getLogger(__name__)


def classify_domain(container: Container,
                    samples: List[Sample],
                    render_width: float,
                    render_height: float,
                    downsample: int = DOWNSAMPLE,
                    library: Optional[MaterialLibrary] = None) -> HeatGrid:
    """
    Builds a fully initialised HeatGrid for the given configuration.

    Args:
        container: Container (shape, fill, ambient)
        samples: Samples in priority order
        render_width, render_height: Render surface size [units]
        downsample: Render units per cell
        library: Material library providing the ambient air

    Returns:
        HeatGrid with temperatures, materials, boundary flags, ownership
        cache and Peltier clamps set
    """
    library = library or MaterialLibrary()
    grid = HeatGrid.for_render(render_width, render_height, downsample)

    # World coordinates of every cell
    wx = np.arange(grid.cols, dtype=np.float64) * downsample
    wy = np.arange(grid.rows, dtype=np.float64) * downsample
    WX, WY = np.meshgrid(wx, wy)

    cx, cy = container.center(render_width, render_height)
    inside = container.contains(WX, WY, cx, cy)

    ambient_c = f2c(container.ambient_temperature)
    fill_c = f2c(container.fill_temperature)

    # =====================================================================
    # 1. Everything starts as ambient air (fixed)
    # =====================================================================
    air_idx = grid.register_material(library.ambient_air())
    grid.material_index[:] = air_idx
    grid.T[:] = ambient_c
    grid.boundary[:] = True

    # =====================================================================
    # 2. Container fill
    # =====================================================================
    fill_idx = grid.register_material(container.fill_material)
    grid.material_index[inside] = fill_idx
    grid.T[inside] = fill_c
    grid.boundary[inside] = container.fill_is_liquid

    # =====================================================================
    # 3. Samples (first match wins)
    # =====================================================================
    taken = np.zeros(grid.shape, dtype=bool)

    for n, sample in enumerate(samples):
        core_r, middle_r, outer_r = sample.layer_radii()
        R = np.hypot(WX - sample.x, WY - sample.y)

        in_sample = inside & ~taken & (R <= outer_r)
        in_core = in_sample & (R <= core_r)
        in_middle = in_sample & (R > core_r) & (R <= middle_r)
        in_outer = in_sample & (R > middle_r)

        grid.material_index[in_core] = grid.register_material(sample.effective_core_material())
        grid.material_index[in_middle] = grid.register_material(sample.middle_material)
        grid.material_index[in_outer] = grid.register_material(sample.outer_material)

        grid.T[in_sample] = f2c(sample.initial_temperature)
        grid.boundary[in_sample] = False
        grid.owner[in_sample] = n
        taken |= in_sample

        if sample.id in grid.sample_cells:
            logger.warning("Duplicate sample id '%s': ownership cache overwritten", sample.id)
        grid.sample_ids.append(sample.id)
        rows, cols = np.nonzero(in_sample)
        grid.sample_cells[sample.id] = (rows, cols)

        if rows.size == 0:
            logger.warning("Sample '%s' owns no grid cells", sample.name)

        if sample.peltier_active:
            grid.set_clamp(sample.id, f2c(sample.clamp_temperature))

    grid.refresh_alpha()
    grid.T_next[:] = grid.T

    logger.debug(
        "Grid classified: %dx%d cells, %d boundary, %d samples",
        grid.cols, grid.rows, int(np.count_nonzero(grid.boundary)), len(samples)
    )
    return grid
