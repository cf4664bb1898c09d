"""
playback.py - High-speed playback on top of the engine

Each animation frame covers frame_time·speed simulated seconds:

    n = ceil(frame_time·speed / dt)

    n <= max_substeps  -> n ticks of the base dt
    n >  max_substeps  -> max_substeps ticks of a widened dt, capped at the
                          stable step 0.25·Δx²/α_max (never below the base dt)

When the cap applies the frame simulates less time than requested.
"""

import logging
import math
from dataclasses import dataclass
from typing import Tuple

from .diffusion import STABILITY_LIMIT, stable_time_step
from .engine import HeatFlowEngine, SimulationNotInitializedError

logger = logging.getLogger(__name__)


@dataclass
class PlaybackConfig:
    """
    Attributes:
        frame_time: Real time per animation frame [s]
        max_substeps: Maximum ticks per frame
        stability_limit: Upper bound for α·Δt/Δx² when widening dt
    """
    frame_time: float = 1.0 / 60.0
    max_substeps: int = 20
    stability_limit: float = STABILITY_LIMIT


class PlaybackController:
    """Runs the engine at a speed multiplier of real time"""

    def __init__(self, engine: HeatFlowEngine, config: PlaybackConfig = None):
        self.engine = engine
        self.config = config or PlaybackConfig()

    def plan_frame(self, speed: float) -> Tuple[int, float]:
        """
        Number of ticks and time step for one frame at the given speed.

        Returns:
            (n_steps, dt)
        """
        if self.engine.grid is None:
            raise SimulationNotInitializedError("initialize() must be called before playback")

        base_dt = self.engine.config.dt
        sim_time = self.config.frame_time * speed
        if sim_time <= 0:
            return 0, base_dt

        n_steps = max(1, math.ceil(sim_time / base_dt - 1e-9))
        if n_steps <= self.config.max_substeps:
            return n_steps, base_dt

        n_steps = self.config.max_substeps
        dt = sim_time / n_steps
        dt_stable = stable_time_step(
            self.engine.grid, self.engine.config.cell_size, self.config.stability_limit
        )
        dt_cap = max(base_dt, dt_stable)
        if dt > dt_cap:
            logger.warning(
                "Speed x%.0f needs dt=%.4f s, capped at %.4f s by the stability limit",
                speed, dt, dt_cap
            )
            dt = dt_cap
        return n_steps, dt

    def run_frame(self, speed: float = 1.0) -> int:
        """Advances one animation frame; returns the number of ticks"""
        n_steps, dt = self.plan_frame(speed)
        if n_steps > 0:
            self.engine.advance(n_steps, dt=dt)
        return n_steps
