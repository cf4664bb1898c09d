"""
interference.py - Thermal interference between neighbouring samples

=============================================================================
INTERFERENCE SCORE (0-100)
=============================================================================

Geometry:
    rim radius  = sample radius + 1 in
    edge_dist   = |c_a - c_b| - rim_a - rim_b

    edge_dist <= 0  ->  100 (rims touching or overlapping)

Line sampling across the gap:
    N points evenly spaced from the rim edge of A to the rim edge of B,
    nearest-cell lookup in the °F grid, col = round(x / downsample)
    (out of bounds -> ambient).

    elevation_i = T_i - T_ambient
    hot points  = elevation_i > halo threshold (1.5 °F)

    coverage  = 100 · n_hot / N
    intensity = min(100, 100 · mean(elevation_hot) / significant rise (10 °F))
    score     = clamp(0.6·coverage + 0.4·intensity, 0, 100)

    No hot point -> 0.

Early interference shows as a few warm points (coverage dominates); mature
interference shows a uniformly warm gap (intensity dominates). The weights
are a tunable heuristic.
=============================================================================
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial import Delaunay, QhullError

from ..core.geometry import Container, Sample
from ..core.units import DOWNSAMPLE, PIXELS_PER_INCH

logger = logging.getLogger(__name__)

MAX_SCORE = 100.0
NOT_STARTED_MESSAGE = "Simulation not started: no temperature data yet."
NO_INTERFERENCE_MESSAGE = "No significant thermal interference detected after {elapsed:.1f} s."


class PairPolicy(Enum):
    """Which sample pairs the report considers"""
    ALL = "all"              # Every pair of distinct samples
    ADJACENT = "adjacent"    # Pairs joined by a Delaunay edge of the centres


@dataclass
class InterferenceConfig:
    """
    Scoring constants.

    Attributes:
        rim_buffer_in: Rim buffer added to the sample radius [in]
        n_points: Points sampled across the gap
        halo_threshold_f: Minimum elevation of a hot point [°F]
        significant_rise_f: Elevation giving 100% intensity [°F]
        coverage_weight, intensity_weight: Weights of the two sub-metrics
        report_threshold: Minimum score reported
        pair_policy: Pairs considered by the report
    """
    rim_buffer_in: float = 1.0
    n_points: int = 20
    halo_threshold_f: float = 1.5
    significant_rise_f: float = 10.0
    coverage_weight: float = 0.6
    intensity_weight: float = 0.4
    report_threshold: float = 1.0
    pair_policy: PairPolicy = PairPolicy.ALL


@dataclass
class InterferenceResult:
    """Details of one pair score"""
    edge_distance: float = 0.0
    coverage: float = 0.0
    intensity: float = 0.0
    score: float = 0.0
    touching: bool = False


def rim_radius(sample: Sample, config: Optional[InterferenceConfig] = None) -> float:
    """Sample radius plus the rim buffer [render units]"""
    config = config or InterferenceConfig()
    return sample.radius + config.rim_buffer_in * PIXELS_PER_INCH


def edge_distance(sample_a: Sample, sample_b: Sample,
                  config: Optional[InterferenceConfig] = None) -> float:
    """Gap between the two rim circles (negative when overlapping)"""
    return sample_a.distance_to(sample_b) - rim_radius(sample_a, config) - rim_radius(sample_b, config)


def _lookup(grid: np.ndarray, x: float, y: float,
            grid_dims: Tuple[int, int], downsample: float,
            ambient: float) -> float:
    """Nearest-cell temperature at a world point; ambient out of bounds"""
    # Cell (row, col) sits at world (col·downsample, row·downsample)
    cols, rows = grid_dims
    col = int(np.round(x / downsample))
    row = int(np.round(y / downsample))
    if 0 <= row < min(rows, grid.shape[0]) and 0 <= col < min(cols, grid.shape[1]):
        return float(grid[row, col])
    return ambient


def analyze_pair(sample_a: Sample,
                 sample_b: Sample,
                 container: Container,
                 grid: Optional[np.ndarray],
                 grid_dims: Tuple[int, int],
                 render_dims: Tuple[float, float],
                 config: Optional[InterferenceConfig] = None,
                 downsample: float = DOWNSAMPLE) -> InterferenceResult:
    """
    Scores the interference between two samples.

    Args:
        sample_a, sample_b: The two samples
        container: Provides the ambient temperature
        grid: Temperature snapshot [°F] (rows, cols), or None
        grid_dims: (cols, rows) of the grid
        render_dims: (width, height) of the render surface
        downsample: Render units per grid cell

    Returns:
        InterferenceResult with the score in [0, 100]
    """
    config = config or InterferenceConfig()
    rim_a = rim_radius(sample_a, config)
    rim_b = rim_radius(sample_b, config)
    distance = sample_a.distance_to(sample_b)
    gap = distance - rim_a - rim_b

    if gap <= 0:
        return InterferenceResult(edge_distance=gap, score=MAX_SCORE, touching=True)

    if grid is None or render_dims[0] <= 0 or render_dims[1] <= 0:
        return InterferenceResult(edge_distance=gap)

    grid = np.asarray(grid)
    ambient = container.ambient_temperature

    # Unit vector from A to B; distance > 0 since gap > 0
    ux = (sample_b.x - sample_a.x) / distance
    uy = (sample_b.y - sample_a.y) / distance
    start_x, start_y = sample_a.x + ux * rim_a, sample_a.y + uy * rim_a

    n = max(1, config.n_points)
    fractions = np.linspace(0.0, 1.0, n) if n > 1 else np.array([0.5])

    elevations = np.array([
        _lookup(grid, start_x + ux * gap * f, start_y + uy * gap * f,
                grid_dims, downsample, ambient) - ambient
        for f in fractions
    ])

    hot = elevations > config.halo_threshold_f
    n_hot = int(np.count_nonzero(hot))
    if n_hot == 0:
        return InterferenceResult(edge_distance=gap)

    coverage = MAX_SCORE * n_hot / n
    intensity = min(MAX_SCORE, MAX_SCORE * float(np.mean(elevations[hot])) / config.significant_rise_f)
    weighted = config.coverage_weight * coverage + config.intensity_weight * intensity

    return InterferenceResult(
        edge_distance=gap,
        coverage=coverage,
        intensity=intensity,
        score=float(np.clip(weighted, 0.0, MAX_SCORE)),
    )


def score(sample_a: Sample,
          sample_b: Sample,
          container: Container,
          grid: Optional[np.ndarray],
          grid_dims: Tuple[int, int],
          render_dims: Tuple[float, float],
          config: Optional[InterferenceConfig] = None,
          downsample: float = DOWNSAMPLE) -> float:
    """Interference score in [0, 100]"""
    return analyze_pair(sample_a, sample_b, container, grid, grid_dims, render_dims,
                        config, downsample).score


# =============================================================================
# PAIR SELECTION
# =============================================================================

def _all_pairs(n: int) -> List[Tuple[int, int]]:
    return [(i, j) for i in range(n) for j in range(i + 1, n)]


def _collinear_pairs(points: np.ndarray) -> List[Tuple[int, int]]:
    """Consecutive samples along the main axis of (nearly) collinear centres"""
    centered = points - points.mean(axis=0)
    _, _, vt = np.linalg.svd(centered, full_matrices=False)
    order = np.argsort(centered @ vt[0], kind='stable')
    return sorted(
        (min(int(a), int(b)), max(int(a), int(b)))
        for a, b in zip(order[:-1], order[1:])
    )


def adjacent_pairs(samples: Sequence[Sample]) -> List[Tuple[int, int]]:
    """
    Index pairs of geometrically adjacent samples.

    Adjacency = shared edge in the Delaunay triangulation of the centres.
    """
    n = len(samples)
    if n < 2:
        return []
    if n == 2:
        return [(0, 1)]

    points = np.array([[s.x, s.y] for s in samples], dtype=np.float64)
    try:
        tri = Delaunay(points)
    except QhullError:
        return _collinear_pairs(points)

    edges = set()
    for simplex in tri.simplices:
        for a in range(3):
            for b in range(a + 1, 3):
                i, j = int(simplex[a]), int(simplex[b])
                edges.add((min(i, j), max(i, j)))
    return sorted(edges)


def select_pairs(samples: Sequence[Sample], policy: PairPolicy) -> List[Tuple[int, int]]:
    if policy is PairPolicy.ADJACENT:
        return adjacent_pairs(samples)
    return _all_pairs(len(samples))


# =============================================================================
# REPORT
# =============================================================================

def interference_report(samples: Sequence[Sample],
                        container: Container,
                        elapsed_time: float,
                        grid: Optional[np.ndarray],
                        grid_dims: Tuple[int, int],
                        render_dims: Tuple[float, float],
                        config: Optional[InterferenceConfig] = None,
                        downsample: float = DOWNSAMPLE) -> List[str]:
    """
    Human-readable interference report.

    One line per pair scoring above the report threshold; otherwise a
    single line telling "not started" apart from "nothing detected".
    """
    config = config or InterferenceConfig()
    lines = []

    for i, j in select_pairs(samples, config.pair_policy):
        a, b = samples[i], samples[j]
        value = score(a, b, container, grid, grid_dims, render_dims, config, downsample)
        if value > config.report_threshold:
            lines.append(f"{a.name} ↔ {b.name}: {value:.1f}% Interference")

    if lines:
        logger.debug("Interference report: %d pairs above threshold", len(lines))
        return lines

    if grid is None or elapsed_time <= 0:
        return [NOT_STARTED_MESSAGE]
    return [NO_INTERFERENCE_MESSAGE.format(elapsed=elapsed_time)]
