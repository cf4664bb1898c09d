"""
engine.py - Simulation facade consumed by the editing/rendering layer

USAGE:
    engine = HeatFlowEngine()
    engine.initialize(container, samples, 800, 600)
    grid_f = engine.step()                  # °F snapshot
    t_sample = engine.get_sample_temp(sid)  # °F
    lines = engine.interference_report()

Rebuild with initialize() after any structural change (container shape or
size, sample count or position). Peltier edits can be applied in place with
set_peltier() since they do not change cell ownership.
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from ..core.classifier import classify_domain
from ..core.geometry import Container, Sample
from ..core.grid import HeatGrid
from ..core.materials import MaterialLibrary
from ..core.units import f2c
from ..analysis.aggregator import sample_temperature
from ..analysis.interference import InterferenceConfig, interference_report
from .diffusion import SolverConfig, step_diffusion

logger = logging.getLogger(__name__)


class SimulationNotInitializedError(RuntimeError):
    """step() called before initialize()"""


class EngineState(Enum):
    IDLE = "idle"
    STEPPING = "stepping"


class HeatFlowEngine:
    """
    Owns the HeatGrid and drives the diffusion stepper.

    Single writer: step() mutates the grid; readers (aggregation, scoring,
    rendering) run strictly between ticks. step() is not re-entrant.
    """

    def __init__(self, config: Optional[SolverConfig] = None,
                 library: Optional[MaterialLibrary] = None):
        """
        Args:
            config: Stepper configuration (dt, downsample)
            library: Material library used for the ambient air
        """
        self.config = config or SolverConfig()
        self.library = library or MaterialLibrary()

        self._grid: Optional[HeatGrid] = None
        self._container: Optional[Container] = None
        self._samples: List[Sample] = []
        self._render_dims: Tuple[float, float] = (0.0, 0.0)
        self._time = 0.0
        self._steps = 0
        self._state = EngineState.IDLE

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def initialize(self, container: Container, samples: List[Sample],
                   render_width: float, render_height: float):
        """
        Rebuilds the grid and the ownership cache from scratch.

        Resets the simulated time to zero.
        """
        if self._state is EngineState.STEPPING:
            raise RuntimeError("initialize() called while a step is in progress")

        self._grid = classify_domain(
            container, samples, render_width, render_height,
            downsample=self.config.downsample, library=self.library
        )
        self._container = container
        self._samples = list(samples)
        self._render_dims = (render_width, render_height)
        self._time = 0.0
        self._steps = 0

        logger.info(
            "Engine initialised: %dx%d cells, %d samples",
            self._grid.cols, self._grid.rows, len(self._samples)
        )

    @property
    def is_initialized(self) -> bool:
        return self._grid is not None

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def grid(self) -> Optional[HeatGrid]:
        return self._grid

    @property
    def container(self) -> Optional[Container]:
        return self._container

    @property
    def samples(self) -> List[Sample]:
        return list(self._samples)

    @property
    def elapsed_time(self) -> float:
        """Simulated time since initialize() [s]"""
        return self._time

    @property
    def step_count(self) -> int:
        return self._steps

    @property
    def grid_dims(self) -> Tuple[int, int]:
        """(cols, rows), (0, 0) before initialize()"""
        if self._grid is None:
            return (0, 0)
        return self._grid.dims

    @property
    def render_dims(self) -> Tuple[float, float]:
        return self._render_dims

    # =========================================================================
    # STEPPING
    # =========================================================================

    def step(self, dt: Optional[float] = None) -> np.ndarray:
        """
        Advances the simulation by one tick.

        Args:
            dt: Time step override [s] (default: config.dt). Widening it
                must respect α·Δt/Δx² <= 0.25.

        Returns:
            Grid snapshot in °F
        """
        if self._grid is None:
            raise SimulationNotInitializedError("initialize() must be called before step()")
        if self._state is EngineState.STEPPING:
            raise RuntimeError("step() is not re-entrant")

        dt = self.config.dt if dt is None else dt

        self._state = EngineState.STEPPING
        try:
            step_diffusion(self._grid, dt, self.config.cell_size)
            self._time += dt
            self._steps += 1
        finally:
            self._state = EngineState.IDLE

        return self._grid.to_fahrenheit()

    def advance(self, n_steps: int, dt: Optional[float] = None) -> np.ndarray:
        """Runs n_steps ticks and returns the final °F snapshot"""
        if self._grid is None:
            raise SimulationNotInitializedError("initialize() must be called before advance()")
        if self._state is EngineState.STEPPING:
            raise RuntimeError("advance() is not re-entrant")
        if n_steps <= 0:
            return self._grid.to_fahrenheit()

        dt = self.config.dt if dt is None else dt
        self._state = EngineState.STEPPING
        try:
            for _ in range(n_steps):
                step_diffusion(self._grid, dt, self.config.cell_size)
                self._time += dt
                self._steps += 1
        finally:
            self._state = EngineState.IDLE

        return self._grid.to_fahrenheit()

    # =========================================================================
    # READERS
    # =========================================================================

    def get_sample_temp(self, sample_id: str) -> float:
        """Mean temperature of the sample [°F]; 0 if unknown or cell-less"""
        if self._grid is None:
            return 0.0
        return sample_temperature(self._grid, sample_id)

    def get_grid(self) -> Optional[np.ndarray]:
        """Snapshot of the grid in °F, None before initialize()"""
        if self._grid is None:
            return None
        return self._grid.to_fahrenheit()

    def interference_report(self, config: Optional[InterferenceConfig] = None) -> List[str]:
        """Interference report for the current samples and grid"""
        if self._container is None:
            return interference_report([], Container(), 0.0, None, (0, 0), (0, 0), config)
        return interference_report(
            self._samples, self._container, self._time,
            self.get_grid(), self.grid_dims, self._render_dims, config,
            downsample=self._grid.downsample
        )

    # =========================================================================
    # IN-PLACE EDITS
    # =========================================================================

    def set_peltier(self, sample_id: str, active: bool,
                    target_temperature: Optional[float] = None):
        """
        Enables or disables the thermostat clamp of a sample.

        Args:
            sample_id: Sample to edit
            active: Clamp on/off
            target_temperature: Target [°F]; keeps the sample's target
                (or initial temperature) when None
        """
        if self._grid is None:
            raise SimulationNotInitializedError("initialize() must be called before set_peltier()")

        sample = self._find_sample(sample_id)
        if sample is None:
            raise KeyError(f"Unknown sample: {sample_id}")

        sample.peltier_active = active
        if target_temperature is not None:
            sample.target_temperature = target_temperature

        if active:
            self._grid.set_clamp(sample_id, f2c(sample.clamp_temperature))
        else:
            self._grid.release_clamp(sample_id)

        logger.info(
            "Peltier %s for '%s' (target %.1f °F)",
            "on" if active else "off", sample.name, sample.clamp_temperature
        )

    def _find_sample(self, sample_id: str) -> Optional[Sample]:
        for sample in self._samples:
            if sample.id == sample_id:
                return sample
        return None
