# MIT License (see LICENSE)
"""
Basin-of-attraction classification over grids of starting positions.

Every grid cell holds an independent pendulum: same configuration, same
magnets, no interaction between cells. A cell starts at rest at its world
position, is advanced for the settle duration, and is labelled with the index
of the magnet horizontally closest to where it ended up.

Because cells share nothing mutable, each grid row is handed to a Numba
prange kernel (core.kernels) that spreads its cells over `workers` threads.
Each cell runs the same compiled micro-step as advance(), so the labels do
not depend on the thread count and match a per-cell advance() loop.

Typical usage:
    from magpen.batch import classify

    idx = classify(config, magnets, grid_origin=(-0.1, -0.1),
                   grid_spacing=0.001, width=200, height=200,
                   settle_duration=30.0, workers=8)
"""
from __future__ import annotations
import logging
import time
from contextlib import contextmanager
from typing import Callable, Sequence

import numba
import numpy as np

from .config import SimulationConfig
from .core.integrators import step_count
from .core.invariants import nearest_magnet
from .core.kernels import advance_many, settle_many
from .types import Magnet, ParticleState, tether_height
from .util import f64

logger = logging.getLogger(__name__)

UNCLASSIFIED = -1


def _check_magnets(magnets: Sequence[Magnet]) -> tuple[Magnet, ...]:
    magnets = tuple(magnets)
    if not magnets:
        raise ValueError("At least one magnet is required for classification")
    return magnets


def _check_grid(origin, spacing: float, width: int, height: int) -> np.ndarray:
    origin = f64(origin)
    if origin.shape != (2,):
        raise ValueError(f"grid origin must have shape (2,), got {origin.shape}")
    if not spacing > 0:
        raise ValueError(f"grid spacing must be positive, got {spacing!r}")
    if width <= 0 or height <= 0:
        raise ValueError(f"grid dimensions must be positive, got {width}x{height}")
    return origin


@contextmanager
def _threads(workers: int):
    """Limit Numba's parallel kernels to `workers` threads for the block."""
    previous = numba.get_num_threads()
    numba.set_num_threads(max(1, min(int(workers), numba.config.NUMBA_NUM_THREADS)))
    try:
        yield
    finally:
        numba.set_num_threads(previous)


def _row_starts(origin: np.ndarray, spacing: float, width: int, row: int) -> np.ndarray:
    """World start positions [width, 2] of one grid row."""
    starts = np.empty((width, 2), dtype=np.float64)
    starts[:, 0] = origin[0] + np.arange(width, dtype=np.float64) * spacing
    starts[:, 1] = origin[1] + row * spacing
    return starts


def classify(
    config: SimulationConfig,
    magnets: Sequence[Magnet],
    grid_origin,
    grid_spacing: float,
    width: int,
    height: int,
    settle_duration: float,
    workers: int = 1,
    should_continue: Callable[[], bool] | None = None,
) -> np.ndarray:
    """
    Classify a W×H grid of starting positions by final nearest magnet.

    Cell (row j, column i) starts at grid_origin + (i, j)·grid_spacing.

    Args:
        config: Shared physical configuration (immutable for the run).
        magnets: Shared magnets; indices refer to this order.
        grid_origin: World position [x, y] of cell (0, 0) in meters.
        grid_spacing: Distance between neighbouring cells in meters.
        width: Number of columns.
        height: Number of rows.
        settle_duration: Time each pendulum is advanced before labelling.
        workers: Number of threads the cells of a row are spread over.
        should_continue: Optional callable polled between rows. When it
            returns False, the remaining rows are left at -1.

    Returns:
        Integer array [height, width] of magnet indices (-1 if cancelled).

    Raises:
        DomainViolation: If any cell lies outside the tether radius. Checked
            before anything is simulated.
    """
    magnets = _check_magnets(magnets)
    origin = _check_grid(grid_origin, grid_spacing, width, height)
    n = step_count(settle_duration, config)

    # Horizontal distance to the pivot is convex, so the corners bound the grid.
    far = origin + np.array([width - 1, height - 1], dtype=np.float64) * grid_spacing
    for cx in (origin[0], far[0]):
        for cy in (origin[1], far[1]):
            tether_height((cx, cy), config)

    result = np.full((height, width), UNCLASSIFIED, dtype=np.int64)
    t0 = time.perf_counter()
    logger.info("Classifying %dx%d grid, settle %.3g s (%d steps), %d worker(s)",
                width, height, settle_duration, n, workers)

    with _threads(workers):
        for row in range(height):
            if should_continue is not None and not should_continue():
                logger.info("Classification cancelled after %d of %d rows", row, height)
                break
            result[row] = settle_many(_row_starts(origin, float(grid_spacing), width, row), config, magnets, n)
            logger.debug("Row %d/%d done", row + 1, height)

    logger.info("Classification finished in %.2f s", time.perf_counter() - t0)
    return result


def classify_points(
    config: SimulationConfig,
    magnets: Sequence[Magnet],
    points,
    settle_duration: float,
    workers: int = 1,
) -> np.ndarray:
    """
    Classify arbitrary starting positions by final nearest magnet.

    Args:
        points: Array-like [N, 2] of horizontal start positions.
        workers: Number of threads the points are spread over.

    Returns:
        Integer array [N] of magnet indices.

    Raises:
        DomainViolation: If any start lies outside the tether radius.
    """
    magnets = _check_magnets(magnets)
    pts = f64(points).reshape(-1, 2)
    for p in pts:
        tether_height(p, config)

    n = step_count(settle_duration, config)
    with _threads(workers):
        return settle_many(pts, config, magnets, n)


class BatchField:
    """
    A grid of independent pendulums advanced together.

    Holds one ParticleState per cell plus two parallel grids: the smallest
    squared horizontal distance to the nearest magnet seen at any refresh so
    far, and the index of the magnet nearest right now. Both are refreshed
    after every step().

    Attributes:
        config: Shared configuration.
        magnets: Shared magnets (tuple).
        origin: World position [x, y] of cell (0, 0).
        spacing: Cell spacing in meters.
        width, height: Grid dimensions.
        states: Row-major list of rows of ParticleState.
        time: Simulated seconds advanced so far.

    Raises:
        DomainViolation: On construction, if any cell lies outside the
            tether radius.
    """

    classify = staticmethod(classify)
    classify_points = staticmethod(classify_points)

    def __init__(
        self,
        config: SimulationConfig,
        magnets: Sequence[Magnet],
        origin,
        spacing: float,
        width: int,
        height: int,
    ) -> None:
        self.config = config
        self.magnets = _check_magnets(magnets)
        self.origin = _check_grid(origin, spacing, width, height)
        self.spacing = float(spacing)
        self.width = int(width)
        self.height = int(height)
        self.time = 0.0

        self.states: list[list[ParticleState]] = [
            [ParticleState.at_rest(self.cell_position(row, col), config) for col in range(self.width)]
            for row in range(self.height)
        ]
        self._distance2 = np.full((self.height, self.width), np.inf, dtype=np.float64)
        self._index = np.full((self.height, self.width), UNCLASSIFIED, dtype=np.int64)
        self._refresh()

    def cell_position(self, row: int, col: int) -> np.ndarray:
        """World start position [x, y] of a cell."""
        return self.origin + np.array([col, row], dtype=np.float64) * self.spacing

    def step(self, duration: float) -> None:
        """Advance every cell by `duration` and update the classification."""
        cells = [state for row in self.states for state in row]
        positions = np.array([s.horizontal_position for s in cells], dtype=np.float64)
        velocities = np.array([s.velocity for s in cells], dtype=np.float64)
        advance_many(positions, velocities, self.config, self.magnets, step_count(duration, self.config))

        for state, pos, vel in zip(cells, positions, velocities):
            state.horizontal_position[:] = pos
            state.velocity[:] = vel
        self.time += duration
        self._refresh()

    def indices(self) -> np.ndarray:
        """Current nearest-magnet index per cell, shape [height, width]."""
        return self._index.copy()

    def distances(self) -> np.ndarray:
        """Best-known (smallest so far) squared distance to the nearest magnet per cell."""
        return self._distance2.copy()

    def positions(self) -> np.ndarray:
        """Current horizontal positions, shape [height, width, 2]."""
        return np.array([[s.horizontal_position for s in row] for row in self.states], dtype=np.float64)

    def _refresh(self) -> None:
        for r, row in enumerate(self.states):
            for c, state in enumerate(row):
                index, d2 = nearest_magnet(state.horizontal_position, self.magnets)
                self._index[r, c] = index
                self._distance2[r, c] = min(self._distance2[r, c], d2)
