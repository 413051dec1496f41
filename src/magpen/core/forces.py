# MIT License (see LICENSE)
"""
Force generators for the tethered ball.

Each function returns a 3D force vector [Fx, Fy, Fz] in newtons acting on the
ball at `ball_position`. The integrator sums gravity, drag and magnetic
forces into a raw force and then removes the part the tether absorbs with
tether_reaction().

Key concepts:
- Drag is quadratic: |F| = c·|v|², opposing the velocity.
- Magnets are inverse-square central forces summed by superposition. The
  distance is floored at config.min_magnet_distance, so a ball grazing a
  magnet sees at most k / d_min² instead of an unbounded force.
- The tether can only pull. Its reaction is approximated by projecting the
  raw force onto the rope direction, not by solving for a Lagrange
  multiplier.
"""
from __future__ import annotations
import math
from typing import Sequence

import numpy as np

from ..config import SimulationConfig
from ..types import Magnet
from ..util import angle_between, length_squared, normalize_or_zero, project_onto


def gravity_force(config: SimulationConfig) -> np.ndarray:
    """
    Weight of the ball, F = (0, 0, -m·g).
    """
    return np.array([0.0, 0.0, -config.mass * config.gravity], dtype=np.float64)


def drag_force(velocity: np.ndarray, config: SimulationConfig) -> np.ndarray:
    """
    Quadratic air drag, F = -c·|v|²·v̂.

    Zero when the velocity is zero (normalize_or_zero) or c == 0.
    """
    if config.air_drag_coeff == 0.0:
        return np.zeros(3, dtype=np.float64)
    return -config.air_drag_coeff * length_squared(velocity) * normalize_or_zero(velocity)


def magnetic_force(
    ball_position: np.ndarray,
    magnets: Sequence[Magnet],
    config: SimulationConfig,
) -> np.ndarray:
    """
    Sum of inverse-square pulls from all magnets.

    Implements F = Σ k·(mᵢ - p)̂ / max(|mᵢ - p|², d_min²).

    Args:
        ball_position: Ball position [x, y, z].
        magnets: Magnets of the run (read-only).
        config: Supplies k (magnet_coeff) and d_min (min_magnet_distance).
    """
    total = np.zeros(3, dtype=np.float64)
    if config.magnet_coeff == 0.0:
        return total
    floor2 = config.min_magnet_distance * config.min_magnet_distance
    for magnet in magnets:
        d = magnet.position - ball_position
        r2 = max(length_squared(d), floor2)
        total += normalize_or_zero(d) * (config.magnet_coeff / r2)
    return total


def tether_reaction(
    raw_force: np.ndarray,
    ball_position: np.ndarray,
    config: SimulationConfig,
) -> np.ndarray:
    """
    Force the tether adds to the raw force.

    The raw force is projected onto the rope vector (pivot - ball). When that
    radial component points the same way as the raw force (angle below 90°),
    it is the part pulling the ball along the rope and the reaction is its
    negation, leaving only the tangential component. Otherwise the projection
    is returned unchanged.

    This is a projection heuristic rather than constrained Lagrangian
    mechanics; the velocity is not re-projected onto the sphere.
    """
    rope = config.pivot - ball_position
    radial = project_onto(raw_force, rope)
    if angle_between(radial, raw_force) < 0.5 * math.pi:
        return -radial
    return radial


def total_force(
    ball_position: np.ndarray,
    velocity: np.ndarray,
    magnets: Sequence[Magnet],
    config: SimulationConfig,
) -> np.ndarray:
    """
    Constrained force on the ball: raw force plus tether reaction.
    """
    raw = gravity_force(config) + drag_force(velocity, config) + magnetic_force(ball_position, magnets, config)
    return raw + tether_reaction(raw, ball_position, config)
