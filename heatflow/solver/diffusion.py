"""
diffusion.py - Explicit finite-difference stepper

=============================================================================
2D TRANSIENT HEAT EQUATION (EXPLICIT)
=============================================================================

Solves, cell by cell on a uniform grid:

    ∂T/∂t = α·∇²T,      α = k / (ρ·cp)

NUMERICAL SCHEME:
    Forward Euler in time, 5-point Laplacian in space:

    T^{n+1} = T^n + α·Δt·(T_top + T_bottom + T_left + T_right - 4·T^n)/Δx²

    Jacobi double buffering: every cell reads the prior-tick buffer T and
    writes T_next; the buffers swap once the whole grid is computed, so the
    result does not depend on update order.

CELLS THAT ARE NOT UPDATED:
    - perimeter cells of the array (keep their initial value)
    - boundary cells (fixed temperature)
    - clamped cells (forced to the Peltier target instead)

STABILITY:
    Conditionally stable. The caller must pick Δt and Δx such that

        α_max·Δt/Δx² <= 0.25

    for the stiffest material present. Not checked at runtime;
    stability_number() is available as a diagnostic.
=============================================================================
"""

from dataclasses import dataclass

import numpy as np

from ..core.grid import HeatGrid
from ..core.units import DOWNSAMPLE, MM_PER_UNIT, TIME_STEP

STABILITY_LIMIT = 0.25


@dataclass
class SolverConfig:
    """
    Stepper configuration.

    Attributes:
        dt: Simulated time per tick [s]
        downsample: Render units per grid cell
        mm_per_unit: Physical size of one render unit [mm]
    """
    dt: float = TIME_STEP
    downsample: int = DOWNSAMPLE
    mm_per_unit: float = MM_PER_UNIT

    def __post_init__(self):
        if self.dt <= 0:
            raise ValueError(f"dt must be positive: {self.dt}")
        if self.downsample < 1:
            raise ValueError(f"downsample must be >= 1: {self.downsample}")

    @property
    def cell_size(self) -> float:
        """Δx [m]"""
        return self.downsample * self.mm_per_unit / 1000.0


def step_diffusion(grid: HeatGrid, dt: float, dx: float):
    """
    Advances the grid by one explicit time step, in place.

    Args:
        grid: HeatGrid (T is read, T_next written, then swapped)
        dt: Time step [s]
        dx: Cell size [m]
    """
    T = grid.T
    T_next = grid.T_next

    # Everything keeps its value unless updated below
    T_next[:] = T

    if grid.rows >= 3 and grid.cols >= 3:
        center = T[1:-1, 1:-1]
        laplacian = (
            T[:-2, 1:-1] + T[2:, 1:-1] +
            T[1:-1, :-2] + T[1:-1, 2:] -
            4.0 * center
        ) / (dx * dx)

        updatable = ~(grid.boundary[1:-1, 1:-1] | grid.clamped[1:-1, 1:-1])
        interior_next = T_next[1:-1, 1:-1]
        interior_next[updatable] = (
            center[updatable] +
            grid.alpha[1:-1, 1:-1][updatable] * laplacian[updatable] * dt
        )

    # Thermostat override on every owned cell of a clamped sample
    T_next[grid.clamped] = grid.clamp_T[grid.clamped]

    grid.swap_buffers()


def stability_number(grid: HeatGrid, dt: float, dx: float) -> float:
    """
    Largest α·Δt/Δx² over the diffusing cells.

    Values above 0.25 produce diverging or oscillating temperatures.
    """
    diffusing = ~grid.boundary
    if not np.any(diffusing):
        return 0.0
    alpha_max = float(np.max(grid.alpha[diffusing]))
    return alpha_max * dt / (dx * dx)


def stable_time_step(grid: HeatGrid, dx: float, limit: float = STABILITY_LIMIT) -> float:
    """Largest Δt satisfying α_max·Δt/Δx² <= limit (inf if nothing diffuses)"""
    diffusing = ~grid.boundary
    if not np.any(diffusing):
        return float('inf')
    alpha_max = float(np.max(grid.alpha[diffusing]))
    if alpha_max <= 0:
        return float('inf')
    return limit * dx * dx / alpha_max
