# MIT License (see LICENSE)
"""
Core type definitions for the magnetic pendulum.

Defines the fundamental data structures:
- Magnet: a fixed point attractor with an opaque classification tag.
- ParticleState: the mutable kinematic state of one ball.

The ball has a single independent degree of freedom, its horizontal position.
Its height is always recomputed from the tether-sphere equation

    z = pivot_z - sqrt(L² - |xy - pivot_xy|²)

taking the lower intersection, so the ball always hangs below the pivot.
"""
from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

import numpy as np

from .config import SimulationConfig
from .errors import DomainViolation
from .util import f64, frozen_f64


# =============================================================================
# Magnets
# =============================================================================

@dataclass(frozen=True, eq=False)
class Magnet:
    """
    Static point attractor.

    Attributes:
        position: Magnet location [x, y, z] in meters (read-only array).
        tag: Opaque label carried through classification (e.g. a color).
    """
    position: np.ndarray | tuple[float, float, float]
    tag: Any = None

    def __post_init__(self) -> None:
        """Store the position as a read-only float64 array."""
        object.__setattr__(self, "position", frozen_f64(self.position, size=3))

    @property
    def xy(self) -> np.ndarray:
        """Horizontal projection of the magnet position."""
        return self.position[:2]


def ring_magnets(
    angles_deg: Iterable[float],
    radius: float,
    height: float,
    tags: Sequence[Any] | None = None,
) -> tuple[Magnet, ...]:
    """
    Build magnets evenly or unevenly placed on a horizontal circle.

    Magnet i sits at (radius·cos aᵢ, radius·sin aᵢ, height), angles measured
    counterclockwise from +x around the vertical axis through the origin.

    Args:
        angles_deg: Angle of each magnet in degrees.
        radius: Circle radius in meters.
        height: z coordinate of every magnet in meters.
        tags: Optional tag per magnet; defaults to the magnet index.
    """
    angles = list(angles_deg)
    if tags is None:
        tags = list(range(len(angles)))
    elif len(tags) != len(angles):
        raise ValueError(f"Got {len(tags)} tags for {len(angles)} magnets")

    magnets = []
    for a, tag in zip(angles, tags):
        rad = math.radians(a)
        magnets.append(Magnet((radius * math.cos(rad), radius * math.sin(rad), height), tag))
    return tuple(magnets)


# =============================================================================
# Particle state
# =============================================================================

def tether_height(horizontal_position: np.ndarray, config: SimulationConfig) -> float:
    """
    Height of the ball for a given horizontal position.

    Evaluates the radicand as (L - a)(L + a) with a the horizontal distance
    to the pivot, which loses less precision than L² - a² near a = L.

    Raises:
        DomainViolation: If the position lies outside the tether radius.
    """
    pivot = config.pivot
    dx = float(horizontal_position[0]) - float(pivot[0])
    dy = float(horizontal_position[1]) - float(pivot[1])
    a = math.sqrt(dx * dx + dy * dy)
    c = config.rope_length
    radicand = (c - a) * (c + a)
    if not radicand >= 0.0:
        raise DomainViolation(a, c)
    return float(pivot[2]) - math.sqrt(radicand)


@dataclass
class ParticleState:
    """
    Kinematic state of one tethered ball.

    Attributes:
        horizontal_position: [x, y] in meters. The only independent coordinate.
        velocity: [vx, vy, vz] in m/s. Updated every micro-step.

    Note:
        Both are converted to float64 arrays on init. The height is derived,
        see height() and ball_position().
    """
    horizontal_position: np.ndarray | tuple[float, float] = (0.0, 0.0)
    velocity: np.ndarray | tuple[float, float, float] = field(
        default_factory=lambda: np.zeros(3, dtype=np.float64)
    )

    def __post_init__(self) -> None:
        """Convert position/velocity to float64 arrays for consistent numerics."""
        self.horizontal_position = f64(self.horizontal_position)
        self.velocity = f64(self.velocity)
        if self.horizontal_position.shape != (2,):
            raise ValueError(f"horizontal_position must have shape (2,), got {self.horizontal_position.shape}")
        if self.velocity.shape != (3,):
            raise ValueError(f"velocity must have shape (3,), got {self.velocity.shape}")

    @classmethod
    def at_rest(cls, position: np.ndarray | tuple[float, float], config: SimulationConfig) -> "ParticleState":
        """
        Create a particle with zero velocity at a horizontal position.

        Raises:
            DomainViolation: If the position is farther from the pivot than
                the tether length.
        """
        state = cls(horizontal_position=position)
        state.validate(config)
        return state

    def validate(self, config: SimulationConfig) -> None:
        """Raise DomainViolation if the tether invariant does not hold."""
        tether_height(self.horizontal_position, config)

    def height(self, config: SimulationConfig) -> float:
        """z coordinate of the ball, from the tether-sphere equation."""
        return tether_height(self.horizontal_position, config)

    def ball_position(self, config: SimulationConfig) -> np.ndarray:
        """Full 3D ball position [x, y, z]."""
        x, y = self.horizontal_position
        return np.array([x, y, self.height(config)], dtype=np.float64)

    def copy(self) -> "ParticleState":
        """Independent copy (arrays are not shared)."""
        return ParticleState(self.horizontal_position.copy(), self.velocity.copy())
