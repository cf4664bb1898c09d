"""
state_manager.py - Saving and loading simulation setups, temperature history

=============================================================================
SETUP FILES
=============================================================================

FILE FORMAT: JSON, mirroring the Container / Sample / Material dataclasses
    {
        "version": "1.0",
        "timestamp": "...",
        "name": "...",
        "container": {...},
        "samples": [{...}, ...]
    }
Materials are inlined so a file is self-contained.

TEMPERATURE HISTORY: per-sample temperature series exported as CSV
    Time (s), Sample 1, Sample 2, ...
=============================================================================
"""

import csv
import json
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..core.geometry import Container, ContainerShape, Sample, SampleSize
from ..core.materials import Material

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_POINTS = 50


# =============================================================================
# SERIALISATION
# =============================================================================

def container_to_dict(container: Container) -> Dict[str, Any]:
    return {
        'shape': container.shape.value,
        'width': container.width,
        'height': container.height,
        'fill_material': container.fill_material.to_dict(),
        'ambient_temperature': container.ambient_temperature,
        'fill_is_liquid': container.fill_is_liquid,
        'liquid_temperature': container.liquid_temperature,
        'wall_material': container.wall_material.to_dict() if container.wall_material else None,
        'x': container.x,
        'y': container.y,
    }


def container_from_dict(data: Dict[str, Any]) -> Container:
    wall = data.get('wall_material')
    return Container(
        shape=ContainerShape(data.get('shape', 'circle')),
        width=float(data['width']),
        height=float(data.get('height', data['width'])),
        fill_material=Material.from_dict(data['fill_material']),
        ambient_temperature=float(data.get('ambient_temperature', 70.0)),
        fill_is_liquid=bool(data.get('fill_is_liquid', False)),
        liquid_temperature=data.get('liquid_temperature'),
        wall_material=Material.from_dict(wall) if wall else None,
        x=data.get('x'),
        y=data.get('y'),
    )


def sample_to_dict(sample: Sample) -> Dict[str, Any]:
    return {
        'id': sample.id,
        'name': sample.name,
        'x': sample.x,
        'y': sample.y,
        'radius': sample.radius,
        'core_material': sample.core_material.to_dict(),
        'middle_material': sample.middle_material.to_dict(),
        'outer_material': sample.outer_material.to_dict(),
        'core_radius_fraction': sample.core_radius_fraction,
        'middle_radius_fraction': sample.middle_radius_fraction,
        'outer_radius_fraction': sample.outer_radius_fraction,
        'outer_thickness_in': sample.outer_thickness_in,
        'middle_thickness_in': sample.middle_thickness_in,
        'size': sample.size.value if sample.size else None,
        'water_mass_lbs': sample.water_mass_lbs,
        'initial_temperature': sample.initial_temperature,
        'temperature': sample.temperature,
        'peltier_active': sample.peltier_active,
        'target_temperature': sample.target_temperature,
    }


def sample_from_dict(data: Dict[str, Any]) -> Sample:
    size = data.get('size')
    initial = float(data.get('initial_temperature', 110.0))
    return Sample(
        id=str(data['id']),
        name=data.get('name', 'Sample'),
        x=float(data['x']),
        y=float(data['y']),
        radius=float(data['radius']),
        core_material=Material.from_dict(data['core_material']),
        middle_material=Material.from_dict(data['middle_material']),
        outer_material=Material.from_dict(data['outer_material']),
        core_radius_fraction=float(data.get('core_radius_fraction', 0.6)),
        middle_radius_fraction=float(data.get('middle_radius_fraction', 0.8)),
        outer_radius_fraction=float(data.get('outer_radius_fraction', 1.0)),
        outer_thickness_in=data.get('outer_thickness_in'),
        middle_thickness_in=data.get('middle_thickness_in'),
        size=SampleSize(size) if size else None,
        water_mass_lbs=data.get('water_mass_lbs'),
        initial_temperature=initial,
        temperature=float(data.get('temperature', initial)),
        peltier_active=bool(data.get('peltier_active', False)),
        target_temperature=data.get('target_temperature'),
    )


@dataclass
class SimulationSetup:
    """A container and its samples, as stored on disk"""
    container: Container
    samples: List[Sample] = field(default_factory=list)
    version: str = "1.0"
    timestamp: str = ""
    name: str = "Untitled"

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'timestamp': self.timestamp,
            'name': self.name,
            'container': container_to_dict(self.container),
            'samples': [sample_to_dict(s) for s in self.samples],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulationSetup":
        try:
            container = container_from_dict(data['container'])
            samples = [sample_from_dict(s) for s in data.get('samples', [])]
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed setup document: {e}") from e
        return cls(
            container=container,
            samples=samples,
            version=str(data.get('version', '1.0')),
            timestamp=data.get('timestamp', ''),
            name=data.get('name', 'Untitled'),
        )


class SetupManager:
    """Saves and loads setups as JSON files"""

    FILE_EXTENSION = ".json"
    CURRENT_VERSION = "1.0"

    @staticmethod
    def save(filepath: str, container: Container, samples: List[Sample],
             name: str = "Untitled") -> Path:
        """
        Writes the setup to disk.

        Args:
            filepath: Destination (.json appended if missing)
            container: Container to store
            samples: Samples to store

        Returns:
            Path actually written
        """
        filepath = Path(filepath)
        if filepath.suffix != SetupManager.FILE_EXTENSION:
            filepath = filepath.with_suffix(SetupManager.FILE_EXTENSION)

        setup = SimulationSetup(container=container, samples=list(samples),
                                version=SetupManager.CURRENT_VERSION, name=name)
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(setup.to_dict(), f, indent=2, ensure_ascii=False)

        logger.info("Setup saved: %s", filepath)
        return filepath

    @staticmethod
    def load(filepath: str) -> SimulationSetup:
        """
        Reads a setup from disk.

        Raises:
            OSError: file cannot be read
            ValueError: invalid JSON or missing fields
        """
        filepath = Path(filepath)
        with open(filepath, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON file {filepath}: {e}") from e

        setup = SimulationSetup.from_dict(data)
        logger.info("Setup loaded: %s (%d samples)", filepath, len(setup.samples))
        return setup


# =============================================================================
# TEMPERATURE HISTORY
# =============================================================================

class TemperatureHistory:
    """
    Time series of the sample temperatures.

    Keeps only the latest max_points records (default 50, the window
    shown by the temperature graph); None keeps everything.
    """

    def __init__(self, max_points: Optional[int] = DEFAULT_HISTORY_POINTS):
        self.max_points = max_points
        self._records: deque = deque(maxlen=max_points)
        self._names: List[str] = []

    def __len__(self) -> int:
        return len(self._records)

    def record(self, t: float, temperatures: Dict[str, float]):
        """Adds one record {sample name: temperature [°F]} at time t [s]"""
        for name in temperatures:
            if name not in self._names:
                self._names.append(name)
        self._records.append((float(t), dict(temperatures)))

    def record_engine(self, engine, samples: List[Sample]):
        """Records the aggregated temperature of each sample from the engine"""
        self.record(
            engine.elapsed_time,
            {s.name: engine.get_sample_temp(s.id) for s in samples}
        )

    @property
    def names(self) -> List[str]:
        return list(self._names)

    @property
    def times(self) -> List[float]:
        return [t for t, _ in self._records]

    def series(self, name: str) -> List[Optional[float]]:
        """Values for one sample (None where it was not recorded)"""
        return [values.get(name) for _, values in self._records]

    def rows(self) -> List[Tuple[float, Dict[str, float]]]:
        return list(self._records)

    def clear(self):
        self._records.clear()
        self._names.clear()

    def export_csv(self, filepath: str) -> Path:
        """Exports the history as CSV (Time (s), one column per sample)"""
        filepath = Path(filepath)

        with open(filepath, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(['Time (s)'] + self._names)
            for t, values in self._records:
                row = [t] + [values.get(name, '') for name in self._names]
                writer.writerow(row)

        logger.info("CSV exported: %s (%d rows)", filepath, len(self._records))
        return filepath
