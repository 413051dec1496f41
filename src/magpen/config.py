# MIT License (see LICENSE)
"""
Physical configuration of one simulation run.

A SimulationConfig is immutable and validated on construction, so a run can
never start with a non-positive mass, tether length or time step. Variants of
the pendulum (different drag, magnet strength, playback speed) are expressed
as different configs rather than code changes:

    cfg = SimulationConfig()                     # reference bench setup
    fast = cfg.replace(micro_step=1e-3)          # coarser, validated copy
"""
from __future__ import annotations
import dataclasses
import math
from dataclasses import dataclass

import numpy as np

from . import constants as C
from .errors import ConfigurationError
from .util import frozen_f64


@dataclass(frozen=True, eq=False)
class SimulationConfig:
    """
    Physical constants shared by every particle of a run.

    Attributes:
        gravity: Gravitational acceleration in m/s² (> 0), acting along -z.
        mass: Ball mass in kg (> 0).
        rope_length: Tether length in meters (> 0).
        pivot: Tether anchor [x, y, z] in meters.
        air_drag_coeff: Quadratic drag coefficient (>= 0).
        magnet_coeff: Inverse-square magnet strength. Positive attracts,
                      negative repels.
        micro_step: Integration time step in seconds (> 0).
        time_scale: Simulated seconds per real second (> 0).
        length_scale: Pixels per meter for display (> 0). Unused by physics.
        min_magnet_distance: Distance floor in meters for the k/r² term (> 0).

    Note:
        The pivot is stored as a read-only float64 array.
    """
    gravity: float = C.GRAVITY
    mass: float = C.MASS
    rope_length: float = C.ROPE_LENGTH
    pivot: np.ndarray | tuple[float, float, float] = C.PIVOT
    air_drag_coeff: float = C.AIR_DRAG_COEFF
    magnet_coeff: float = C.MAGNET_COEFF
    micro_step: float = C.MICRO_STEP
    time_scale: float = C.TIME_SCALE
    length_scale: float = C.LENGTH_SCALE
    min_magnet_distance: float = C.MIN_MAGNET_DISTANCE

    def __post_init__(self) -> None:
        """Validate constants and freeze the pivot vector."""
        try:
            pivot = frozen_f64(self.pivot, size=3)
        except ValueError as exc:
            raise ConfigurationError(f"pivot must be a 3D vector: {exc}") from exc
        object.__setattr__(self, "pivot", pivot)

        for name in ("gravity", "mass", "rope_length", "micro_step",
                     "time_scale", "length_scale", "min_magnet_distance"):
            value = float(getattr(self, name))
            if not (math.isfinite(value) and value > 0.0):
                raise ConfigurationError(f"{name} must be a positive finite number, got {value!r}")
            object.__setattr__(self, name, value)

        drag = float(self.air_drag_coeff)
        if not (math.isfinite(drag) and drag >= 0.0):
            raise ConfigurationError(f"air_drag_coeff must be >= 0, got {drag!r}")
        object.__setattr__(self, "air_drag_coeff", drag)

        k = float(self.magnet_coeff)
        if not math.isfinite(k):
            raise ConfigurationError(f"magnet_coeff must be finite, got {k!r}")
        object.__setattr__(self, "magnet_coeff", k)

        if not np.all(np.isfinite(pivot)):
            raise ConfigurationError(f"pivot must be finite, got {pivot.tolist()}")

    def replace(self, **changes) -> "SimulationConfig":
        """Return a validated copy with the given fields changed."""
        return dataclasses.replace(self, **changes)

    @property
    def weight(self) -> float:
        """Magnitude of the gravity force m·g in newtons."""
        return self.mass * self.gravity

    @property
    def rest_height(self) -> float:
        """Height of the ball hanging straight down (z of the lowest point)."""
        return float(self.pivot[2]) - self.rope_length
