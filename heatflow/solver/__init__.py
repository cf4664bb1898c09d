"""
Package solver - Explicit diffusion stepping and the simulation engine
"""

from .diffusion import SolverConfig, step_diffusion, stability_number, stable_time_step
from .engine import HeatFlowEngine, EngineState, SimulationNotInitializedError
from .playback import PlaybackController, PlaybackConfig

__all__ = [
    'SolverConfig',
    'step_diffusion',
    'stability_number',
    'stable_time_step',
    'HeatFlowEngine',
    'EngineState',
    'SimulationNotInitializedError',
    'PlaybackController',
    'PlaybackConfig',
]
