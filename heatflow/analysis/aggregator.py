"""
aggregator.py - Per-sample temperatures and grid statistics

Sample temperature = arithmetic mean of T over the cells the sample owns
(cached at initialisation), reported in °F. A sample owning no cells
reports 0 instead of failing.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from ..core.geometry import Sample
from ..core.grid import HeatGrid
from ..core.units import c2f

EMPTY_SAMPLE_TEMPERATURE = 0.0


@dataclass
class SimulationStats:
    """Summary of the current grid [°F]"""
    min_temp: float = 0.0
    max_temp: float = 0.0
    avg_temp: float = 0.0
    time_elapsed: float = 0.0
    is_running: bool = False


def sample_temperature(grid: HeatGrid, sample_id: str) -> float:
    """Mean temperature of a sample [°F]"""
    rows, cols = grid.cells_of(sample_id)
    if rows.size == 0:
        return EMPTY_SAMPLE_TEMPERATURE
    return float(c2f(np.mean(grid.T[rows, cols])))


def sample_temperature_range(grid: HeatGrid, sample_id: str) -> Optional[tuple]:
    """(min, max) over the sample's cells [°F], None if it owns no cells"""
    rows, cols = grid.cells_of(sample_id)
    if rows.size == 0:
        return None
    values = grid.T[rows, cols]
    return float(c2f(values.min())), float(c2f(values.max()))


def all_sample_temperatures(grid: HeatGrid) -> Dict[str, float]:
    """Mean temperature of every sample in the ownership cache [°F]"""
    return {sid: sample_temperature(grid, sid) for sid in grid.sample_cells}


def refresh_sample_temperatures(engine, samples: List[Sample]) -> List[Sample]:
    """
    Writes the aggregated temperature into each Sample.temperature.

    Args:
        engine: Anything exposing get_sample_temp(id)
        samples: Samples to update in place

    Returns:
        The same list, for chaining
    """
    for sample in samples:
        sample.temperature = engine.get_sample_temp(sample.id)
    return samples


def grid_statistics(grid_f: Optional[np.ndarray],
                    time_elapsed: float = 0.0,
                    is_running: bool = False) -> SimulationStats:
    """Min / max / mean of a °F snapshot"""
    if grid_f is None or np.size(grid_f) == 0:
        return SimulationStats(time_elapsed=time_elapsed, is_running=is_running)

    return SimulationStats(
        min_temp=float(np.min(grid_f)),
        max_temp=float(np.max(grid_f)),
        avg_temp=float(np.mean(grid_f)),
        time_elapsed=time_elapsed,
        is_running=is_running,
    )
