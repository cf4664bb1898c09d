"""
grid.py - HeatGrid, the 2D cell model of the container

Implements a structured 2D grid with:
- Structure-of-arrays cell fields (temperature, write buffer, material,
  boundary flag, owning sample, thermostat clamp)
- Sample -> owned cells cache for O(1) aggregation
- Index <-> world coordinate mapping

Arrays are row-major with shape (rows, cols); cell (row, col) sits at
world point (col·downsample, row·downsample). Temperatures are Celsius.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Any

import numpy as np

from .materials import Material
from .units import DOWNSAMPLE, c2f

logger = logging.getLogger(__name__)

NO_OWNER = -1


@dataclass
class HeatGrid:
    """
    2D grid of cells covering the render surface.

    Attributes:
        cols, rows: Number of cells per axis
        downsample: Render units per cell
        T: Current temperature [°C]
        T_next: Write buffer for the next tick [°C]
        material_index: Index into materials for each cell
        alpha: Thermal diffusivity per cell [m²/s]
        boundary: True where the temperature is externally fixed
        owner: Index into sample_ids, NO_OWNER for fill/air
        clamped: True where a Peltier clamp forces the temperature
        clamp_T: Clamp target per cell [°C]
    """

    cols: int
    rows: int
    downsample: int = DOWNSAMPLE

    materials: List[Material] = field(default_factory=list)
    sample_ids: List[str] = field(default_factory=list)
    sample_cells: Dict[str, Tuple[np.ndarray, np.ndarray]] = field(default_factory=dict)

    T: np.ndarray = field(init=False, repr=False)
    T_next: np.ndarray = field(init=False, repr=False)
    material_index: np.ndarray = field(init=False, repr=False)
    alpha: np.ndarray = field(init=False, repr=False)
    boundary: np.ndarray = field(init=False, repr=False)
    owner: np.ndarray = field(init=False, repr=False)
    clamped: np.ndarray = field(init=False, repr=False)
    clamp_T: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        if self.cols < 1 or self.rows < 1:
            raise ValueError(f"Grid must have at least one cell: {self.cols} x {self.rows}")

        shape = self.shape
        self.T = np.zeros(shape, dtype=np.float64)
        self.T_next = np.zeros(shape, dtype=np.float64)
        self.material_index = np.zeros(shape, dtype=np.int16)
        self.alpha = np.zeros(shape, dtype=np.float64)
        self.boundary = np.zeros(shape, dtype=bool)
        self.owner = np.full(shape, NO_OWNER, dtype=np.int32)
        self.clamped = np.zeros(shape, dtype=bool)
        self.clamp_T = np.zeros(shape, dtype=np.float64)

    @classmethod
    def for_render(cls, render_width: float, render_height: float,
                   downsample: int = DOWNSAMPLE) -> "HeatGrid":
        """Grid sized by downsampling the render surface"""
        if render_width <= 0 or render_height <= 0:
            raise ValueError(f"Render surface must be positive: {render_width} x {render_height}")
        cols = int(np.ceil(render_width / downsample))
        rows = int(np.ceil(render_height / downsample))
        return cls(cols=cols, rows=rows, downsample=downsample)

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    @property
    def dims(self) -> Tuple[int, int]:
        """(cols, rows)"""
        return (self.cols, self.rows)

    @property
    def n_cells(self) -> int:
        return self.rows * self.cols

    # =========================================================================
    # MATERIALS
    # =========================================================================

    def register_material(self, material: Material) -> int:
        """Index of material in the table, adding it if needed"""
        for idx, existing in enumerate(self.materials):
            if existing is material or existing == material:
                return idx
        self.materials.append(material)
        return len(self.materials) - 1

    def refresh_alpha(self):
        """Recomputes the per-cell diffusivity from the material table"""
        table = np.array([m.diffusivity for m in self.materials], dtype=np.float64)
        if table.size == 0:
            self.alpha[:] = 0.0
            return
        self.alpha = table[self.material_index]

    def material_at(self, row: int, col: int) -> Material:
        return self.materials[int(self.material_index[row, col])]

    # =========================================================================
    # OWNERSHIP
    # =========================================================================

    def owner_of(self, row: int, col: int) -> Optional[str]:
        """Id of the sample owning the cell, None for fill/air"""
        idx = int(self.owner[row, col])
        if idx == NO_OWNER:
            return None
        return self.sample_ids[idx]

    def cells_of(self, sample_id: str) -> Tuple[np.ndarray, np.ndarray]:
        """(rows, cols) owned by the sample; empty arrays if none"""
        empty = np.array([], dtype=np.intp)
        return self.sample_cells.get(sample_id, (empty, empty))

    def cell_count(self, sample_id: str) -> int:
        return int(self.cells_of(sample_id)[0].size)

    # =========================================================================
    # THERMOSTAT CLAMP
    # =========================================================================

    def set_clamp(self, sample_id: str, target_c: float):
        """Forces every cell of the sample to target_c on each tick"""
        rows, cols = self.cells_of(sample_id)
        self.clamped[rows, cols] = True
        self.clamp_T[rows, cols] = target_c

    def release_clamp(self, sample_id: str):
        rows, cols = self.cells_of(sample_id)
        self.clamped[rows, cols] = False

    # =========================================================================
    # INDEXING
    # =========================================================================

    def cell_to_world(self, row: int, col: int) -> Tuple[float, float]:
        """World point (x, y) of a cell"""
        return col * self.downsample, row * self.downsample

    def world_to_cell(self, x: float, y: float) -> Tuple[int, int]:
        """Nearest cell (row, col) to a world point; may be out of bounds"""
        col = int(np.round(x / self.downsample))
        row = int(np.round(y / self.downsample))
        return row, col

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    # =========================================================================
    # STEPPING SUPPORT
    # =========================================================================

    def swap_buffers(self):
        """Publishes T_next as the current temperature"""
        self.T, self.T_next = self.T_next, self.T

    def to_fahrenheit(self) -> np.ndarray:
        """Snapshot of the current temperatures in °F"""
        return c2f(self.T)

    def get_info(self) -> Dict[str, Any]:
        """Summary of the grid"""
        return {
            'cells': (self.cols, self.rows),
            'downsample': self.downsample,
            'total_cells': self.n_cells,
            'boundary_cells': int(np.count_nonzero(self.boundary)),
            'samples': {sid: self.cell_count(sid) for sid in self.sample_ids},
            'materials': [m.name for m in self.materials],
            'memory_MB': self._estimate_memory() / 1e6,
        }

    def _estimate_memory(self) -> float:
        """Memory used by the cell arrays [bytes]"""
        arrays = (self.T, self.T_next, self.material_index, self.alpha,
                  self.boundary, self.owner, self.clamped, self.clamp_T)
        return float(sum(a.nbytes for a in arrays))
