# MIT License (see LICENSE)
"""
Interactive simulation context.

The Simulation class owns everything a viewer needs for one swinging ball:
the configuration, the magnets and the current ParticleState. It holds no
process-wide state; the caller creates one, calls tick() once per frame with
the real time elapsed, and reads back the trail to draw.

A reset (e.g. a mouse click already converted to world coordinates by a
Viewport) replaces the particle with a fresh one at rest.

Example:
    sim = Simulation(SimulationConfig(time_scale=0.7), ring_magnets(...))
    trail = sim.tick(1 / 60)   # positions to draw this frame
    sim.reset((0.05, -0.02))
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from .config import SimulationConfig
from .core.integrators import advance_recording, step_count
from .types import Magnet, ParticleState

logger = logging.getLogger(__name__)


@dataclass
class Simulation:
    """
    One ball, advanced frame by frame.

    Attributes:
        config: Physical configuration; time_scale sets playback speed.
        magnets: Magnets of the run.
        start: Initial horizontal position of the ball.
        state: Current particle (created from `start` on init).
        time: Simulated seconds elapsed since the last reset.
    """
    config: SimulationConfig = field(default_factory=SimulationConfig)
    magnets: Sequence[Magnet] = ()
    start: tuple[float, float] = (0.0, 0.0)

    # Internal state
    state: ParticleState = field(init=False)
    time: float = field(init=False, default=0.0)

    def __post_init__(self) -> None:
        """Freeze the magnet set and place the ball at rest."""
        self.magnets = tuple(self.magnets)
        self.state = ParticleState.at_rest(self.start, self.config)

    def reset(self, position) -> None:
        """
        Restart from a new horizontal position with zero velocity.

        Raises:
            DomainViolation: If the position is outside the tether radius.
                The current state is kept in that case.
        """
        self.state = ParticleState.at_rest(position, self.config)
        self.time = 0.0
        logger.debug("Reset to (%.4f, %.4f)", self.state.horizontal_position[0], self.state.horizontal_position[1])

    def tick(self, real_seconds: float) -> np.ndarray:
        """
        Advance by `real_seconds` of wall-clock time.

        The simulated time covered is real_seconds · time_scale, rounded
        down to whole micro-steps.

        Returns:
            Array [n, 2] of horizontal positions visited during the tick.
        """
        n = step_count(real_seconds, self.config)
        self.state, trail = advance_recording(self.state, self.config, self.magnets, real_seconds)
        self.time += n * self.config.micro_step
        return trail

    @property
    def position(self) -> np.ndarray:
        """Current horizontal position [x, y]."""
        return self.state.horizontal_position.copy()

    @property
    def ball_position(self) -> np.ndarray:
        """Current 3D ball position [x, y, z]."""
        return self.state.ball_position(self.config)
