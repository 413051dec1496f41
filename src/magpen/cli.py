# MIT License (see LICENSE)
"""
Command line entry point.

    magpen basins --width 400 --height 400 --settle 30 --workers 8 -o basins.png
    magpen trace --x 0.05 --y 0.02 --duration 10 --every 1000

Both commands start from the reference setup; --setup loads a JSON setup file
instead (see magpen.io), and the physics flags override single fields.
"""
from __future__ import annotations
import argparse
import logging
import sys

import numpy as np

from . import constants as C
from .batch import classify
from .config import SimulationConfig
from .core.integrators import advance_recording
from .core.invariants import nearest_magnet
from .errors import MagpenError
from .io.json_io import load_setup
from .logging_config import setup_logging
from .renderer.adapter import Viewport
from .renderer.image import DEFAULT_PALETTE, save_basin_image
from .types import Magnet, ParticleState, ring_magnets

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="magpen", description="Magnetic pendulum simulator and basin classifier")
    p.add_argument("-v", "--verbose", action="store_true", help="Log per-row progress (DEBUG level).")
    p.add_argument("--log-file", type=str, default=None, help="Also write the log to this file.")
    sub = p.add_subparsers(dest="command", required=True)

    # Options shared by both commands
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--setup", type=str, default=None,
                        help="JSON setup file (config + magnets). Default: reference bench setup.")
    common.add_argument("--micro-step", type=float, default=None,
                        help="Override the integration step [s].")
    common.add_argument("--drag", type=float, default=None,
                        help="Override the quadratic air drag coefficient.")
    common.add_argument("--magnet-coeff", type=float, default=None,
                        help="Override the magnet strength (negative repels).")

    b = sub.add_parser("basins", parents=[common], help="Classify a grid of start positions and save an image.")
    b.add_argument("--width", type=int, default=400, help="Grid columns (image width in pixels).")
    b.add_argument("--height", type=int, default=400, help="Grid rows (image height in pixels).")
    b.add_argument("--spacing", type=float, default=None,
                   help="Cell spacing [m]. Default: 1 / length_scale (one screen pixel).")
    b.add_argument("--settle", type=float, default=30.0, help="Settle duration per cell [s].")
    b.add_argument("--workers", type=int, default=1, help="Worker threads.")
    b.add_argument("--palette", type=str, nargs="+", default=list(DEFAULT_PALETTE),
                   help="One matplotlib color per magnet.")
    b.add_argument("-o", "--output", type=str, default="basins.png", help="Output image path.")

    t = sub.add_parser("trace", parents=[common], help="Follow one ball and print its trail.")
    t.add_argument("--x", type=float, default=0.0, help="Start x [m].")
    t.add_argument("--y", type=float, default=0.0, help="Start y [m].")
    t.add_argument("--duration", type=float, default=10.0, help="Real seconds to simulate (scaled by time_scale).")
    t.add_argument("--every", type=int, default=1000, help="Print every N-th micro-step.")
    return p


def _load(a: argparse.Namespace) -> tuple[SimulationConfig, tuple[Magnet, ...]]:
    if a.setup:
        config, magnets = load_setup(a.setup)
    else:
        config = SimulationConfig()
        magnets = ring_magnets(C.MAGNET_ANGLES_DEG, C.MAGNET_RADIUS, C.MAGNET_HEIGHT)

    overrides = {}
    if a.micro_step is not None:
        overrides["micro_step"] = a.micro_step
    if a.drag is not None:
        overrides["air_drag_coeff"] = a.drag
    if a.magnet_coeff is not None:
        overrides["magnet_coeff"] = a.magnet_coeff
    if overrides:
        config = config.replace(**overrides)
    return config, magnets


def run_basins(a: argparse.Namespace) -> int:
    config, magnets = _load(a)
    if len(a.palette) < len(magnets):
        raise ValueError(f"--palette needs {len(magnets)} colors, got {len(a.palette)}")

    if a.spacing is None:
        viewport = Viewport(a.width, a.height, config.length_scale)
        origin, spacing = viewport.grid_origin(), viewport.grid_spacing
    else:
        spacing = a.spacing
        origin = -np.array([a.width / 2.0, a.height / 2.0]) * spacing

    indices = classify(config, magnets, origin, spacing, a.width, a.height, a.settle, workers=a.workers)
    save_basin_image(a.output, indices, a.palette)

    counts = np.bincount(indices.ravel(), minlength=len(magnets))
    for i, n in enumerate(counts):
        logger.info("Magnet %d: %d cells (%.1f%%)", i, n, 100.0 * n / indices.size)
    logger.info("Wrote %s", a.output)
    return 0


def run_trace(a: argparse.Namespace) -> int:
    config, magnets = _load(a)
    state = ParticleState.at_rest((a.x, a.y), config)
    final, trail = advance_recording(state, config, magnets, a.duration)

    every = max(1, a.every)
    for i in range(every - 1, len(trail), every):
        t = (i + 1) * config.micro_step
        print(f"{t:10.4f}  {trail[i][0]: .6f}  {trail[i][1]: .6f}")

    idx, d2 = nearest_magnet(final.horizontal_position, magnets)
    x, y = final.horizontal_position
    print(f"final ({x:.6f}, {y:.6f}) nearest magnet {idx} at {np.sqrt(d2):.6f} m")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    a = parser.parse_args(argv)
    setup_logging(logging.DEBUG if a.verbose else logging.INFO, a.log_file)

    try:
        if a.command == "basins":
            return run_basins(a)
        return run_trace(a)
    except (MagpenError, ValueError) as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
