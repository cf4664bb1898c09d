"""
heatflow/io/__init__.py - Setup persistence and temperature history
"""

from .state_manager import (
    SimulationSetup,
    SetupManager,
    TemperatureHistory
)

__all__ = [
    'SimulationSetup',
    'SetupManager',
    'TemperatureHistory'
]
