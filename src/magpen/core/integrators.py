# MIT License (see LICENSE)
"""
Fixed-step integration of the tethered ball.

One micro-step advances a ParticleState by config.micro_step seconds:

    p     = (x, y, z(x, y))                  ball position from the tether
    F     = F_gravity + F_drag + F_magnets   raw force
    F    += tether_reaction(F, p)            remove outward radial part
    v    += F/m · dt                         velocity first ...
    xy   += v_xy · dt                        ... then position (semi-implicit)

Only the horizontal position is integrated; the height is recomputed from the
tether at the start of the next step. The number of micro-steps for a
duration is floor(duration · time_scale / micro_step), so results are
reproducible bit for bit for identical inputs.

The steps run in the compiled kernel of core.kernels; core.forces spells
out the same force law with numpy.

Explicit Euler is only stable while micro_step is small compared to the
stiffness of the drag and magnet terms; callers choosing large coefficients
must shrink the step.

Reference:
    Semi-implicit Euler: https://en.wikipedia.org/wiki/Semi-implicit_Euler_method
"""
from __future__ import annotations
import math
from typing import Sequence

import numpy as np

from ..config import SimulationConfig
from ..types import Magnet, ParticleState
from .kernels import run_recording, run_steps


def step_count(duration: float, config: SimulationConfig) -> int:
    """
    Number of micro-steps needed to cover `duration` seconds of real time.

    Raises:
        ValueError: If duration is negative or not finite.
    """
    duration = float(duration)
    if not (math.isfinite(duration) and duration >= 0.0):
        raise ValueError(f"duration must be a non-negative finite number, got {duration!r}")
    return int(math.floor(duration * config.time_scale / config.micro_step))


def micro_step(state: ParticleState, config: SimulationConfig, magnets: Sequence[Magnet]) -> None:
    """
    Advance `state` in-place by one micro-step.

    Raises:
        DomainViolation: If the state is outside the tether radius.
    """
    run_steps(state.horizontal_position, state.velocity, config, magnets, 1)


def advance(
    state: ParticleState,
    config: SimulationConfig,
    magnets: Sequence[Magnet],
    duration: float,
) -> ParticleState:
    """
    Advance a copy of `state` by `duration` and return it.

    Intermediate positions are discarded. The input state is not modified;
    advance(state, ..., 0) returns an equal copy.
    """
    out = state.copy()
    run_steps(out.horizontal_position, out.velocity, config, magnets, step_count(duration, config))
    return out


def advance_recording(
    state: ParticleState,
    config: SimulationConfig,
    magnets: Sequence[Magnet],
    duration: float,
) -> tuple[ParticleState, np.ndarray]:
    """
    Advance like advance() and record the trail.

    Returns:
        Tuple (final_state, positions):
        - final_state: New state after all micro-steps.
        - positions: Array [n, 2] of horizontal positions after each
          micro-step, n = step_count(duration, config). The last row equals
          final_state.horizontal_position.

    Each call computes a fresh trail from the given state.
    """
    out = state.copy()
    positions = run_recording(out.horizontal_position, out.velocity, config, magnets, step_count(duration, config))
    return out, positions
