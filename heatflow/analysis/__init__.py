"""
Package analysis - Sample aggregation and interference scoring
"""

from .aggregator import (
    SimulationStats,
    sample_temperature,
    sample_temperature_range,
    all_sample_temperatures,
    refresh_sample_temperatures,
    grid_statistics,
)
from .interference import (
    InterferenceConfig,
    InterferenceResult,
    PairPolicy,
    analyze_pair,
    score,
    interference_report,
    adjacent_pairs,
    rim_radius,
    edge_distance,
)

__all__ = [
    'SimulationStats',
    'sample_temperature',
    'sample_temperature_range',
    'all_sample_temperatures',
    'refresh_sample_temperatures',
    'grid_statistics',
    'InterferenceConfig',
    'InterferenceResult',
    'PairPolicy',
    'analyze_pair',
    'score',
    'interference_report',
    'adjacent_pairs',
    'rim_radius',
    'edge_distance',
]
