"""
main.py - Example run of the heatflow engine

Workflow:
1. Build the container and a ring of samples
2. Initialise the grid
3. Run the diffusion at a speed multiplier
4. Report sample temperatures and interference
5. Save the setup and export the temperature history
"""

import argparse
import logging
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from heatflow.core.geometry import Container, ContainerShape, ring_layout
from heatflow.core.materials import MaterialLibrary
from heatflow.solver.engine import HeatFlowEngine
from heatflow.solver.playback import PlaybackController
from heatflow.solver.diffusion import stability_number
from heatflow.analysis.aggregator import grid_statistics, refresh_sample_temperatures
from heatflow.analysis.interference import InterferenceConfig, PairPolicy
from heatflow.io.state_manager import SetupManager, TemperatureHistory
from heatflow.logging_config import setup_logging

logger = logging.getLogger("heatflow.main")

RENDER_WIDTH = 800
RENDER_HEIGHT = 800


def run_simulation(n_samples: int, seconds: float, speed: float, adjacent: bool,
                   output_dir: Path):
    """Runs a complete simulation"""

    library = MaterialLibrary()

    # =========================================================================
    # 1. CONFIGURATION
    # =========================================================================
    container = Container(
        shape=ContainerShape.CIRCLE,
        width=600,
        fill_material=library.get("Phenolic Foam"),
        wall_material=library.get("Plastic (PVC)"),
        ambient_temperature=70.0,
    )
    samples = ring_layout(container, n_samples, RENDER_WIDTH, RENDER_HEIGHT)

    # =========================================================================
    # 2. GRID
    # =========================================================================
    engine = HeatFlowEngine(library=library)
    engine.initialize(container, samples, RENDER_WIDTH, RENDER_HEIGHT)

    r = stability_number(engine.grid, engine.config.dt, engine.config.cell_size)
    logger.info("Grid %dx%d, stability number %.3f", *engine.grid_dims, r)
    if r > 0.25:
        logger.warning("α·Δt/Δx² = %.3f exceeds 0.25: expect oscillations", r)

    # =========================================================================
    # 3. DIFFUSION
    # =========================================================================
    playback = PlaybackController(engine)
    history = TemperatureHistory()
    history.record_engine(engine, samples)

    t_start = time.time()
    frames = 0
    while engine.elapsed_time < seconds:
        playback.run_frame(speed)
        frames += 1
        if frames % 30 == 0:
            history.record_engine(engine, samples)
    history.record_engine(engine, samples)

    logger.info("Simulated %.1f s in %.2f s (%d frames, %d steps)",
                engine.elapsed_time, time.time() - t_start, frames, engine.step_count)

    # =========================================================================
    # 4. RESULTS
    # =========================================================================
    refresh_sample_temperatures(engine, samples)
    for s in samples:
        logger.info("  %s: %.2f °F", s.name, s.temperature)

    stats = grid_statistics(engine.get_grid(), engine.elapsed_time)
    logger.info("Grid: min %.1f °F, max %.1f °F, mean %.1f °F",
                stats.min_temp, stats.max_temp, stats.avg_temp)

    policy = PairPolicy.ADJACENT if adjacent else PairPolicy.ALL
    for line in engine.interference_report(InterferenceConfig(pair_policy=policy)):
        logger.info("  %s", line)

    # =========================================================================
    # 5. OUTPUT
    # =========================================================================
    output_dir.mkdir(parents=True, exist_ok=True)
    SetupManager.save(output_dir / "heat-flow-setup.json", container, samples)
    history.export_csv(output_dir / "heat_flow_data.csv")


def main():
    parser = argparse.ArgumentParser(description="Heat flow between layered samples")
    parser.add_argument("--samples", type=int, default=4, help="number of samples on the ring")
    parser.add_argument("--seconds", type=float, default=60.0, help="simulated time [s]")
    parser.add_argument("--speed", type=float, default=60.0, help="playback speed multiplier")
    parser.add_argument("--adjacent", action="store_true", help="report adjacent pairs only")
    parser.add_argument("--output", type=Path, default=Path("output"), help="output directory")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    run_simulation(args.samples, args.seconds, args.speed, args.adjacent, args.output)


if __name__ == "__main__":
    main()
