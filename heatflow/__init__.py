"""
Package heatflow - Heat diffusion between layered samples in a container
"""

from .core import (
    Material, MaterialLibrary, MaterialCategory,
    Sample, Container, ContainerShape, SampleSize,
    HeatGrid, classify_domain, ring_layout
)

from .solver import (
    HeatFlowEngine, SolverConfig, SimulationNotInitializedError,
    PlaybackController, PlaybackConfig
)

from .analysis import (
    InterferenceConfig, PairPolicy, score, interference_report,
    SimulationStats, grid_statistics
)

from .io import SetupManager, SimulationSetup, TemperatureHistory

__version__ = "0.1.0"
