# MIT License (see LICENSE)
"""
Utilities for calculating physical invariants and diagnostics.

Used for verifying simulation correctness and debugging stability issues.
Without drag and magnets the ball is a spherical pendulum, so its mechanical
energy should remain constant (within integration error).
"""
from __future__ import annotations
from typing import Sequence

import numpy as np

from ..config import SimulationConfig
from ..types import Magnet, ParticleState
from ..util import length


def kinetic_energy(state: ParticleState, config: SimulationConfig) -> float:
    """
    T = 0.5 · m · |v|², using the full 3D velocity.
    """
    v = state.velocity
    return 0.5 * config.mass * float(np.dot(v, v))


def potential_energy(state: ParticleState, config: SimulationConfig) -> float:
    """
    Gravitational potential V = m · g · z, z from the tether equation.
    """
    return config.mass * config.gravity * state.height(config)


def mechanical_energy(state: ParticleState, config: SimulationConfig) -> float:
    """Kinetic plus gravitational potential energy in Joules."""
    return kinetic_energy(state, config) + potential_energy(state, config)


def tether_slack(state: ParticleState, config: SimulationConfig) -> float:
    """
    Remaining horizontal room before the tether invariant breaks.

    Returns rope_length - |xy - pivot_xy|; negative means violated.
    """
    return config.rope_length - length(state.horizontal_position - config.pivot[:2])


def nearest_magnet(position: np.ndarray, magnets: Sequence[Magnet]) -> tuple[int, float]:
    """
    Index of the magnet horizontally closest to `position`.

    A single linear scan keeping the current minimum; the first strictly
    smaller squared distance wins, so ties go to the lowest index.

    Returns:
        Tuple (index, squared_distance). (-1, inf) for an empty magnet set.
    """
    best, best_d2 = -1, float("inf")
    x, y = float(position[0]), float(position[1])
    for i, magnet in enumerate(magnets):
        dx = x - float(magnet.position[0])
        dy = y - float(magnet.position[1])
        d2 = dx * dx + dy * dy
        if d2 < best_d2:
            best, best_d2 = i, d2
    return best, best_d2
