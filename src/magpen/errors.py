# MIT License (see LICENSE)
"""
Exceptions raised by the pendulum simulation.

Every failure is local and deterministic (a pure function of the inputs), so
none of these are meant to be retried:

- ConfigurationError: physical constants out of range; raised when the
  SimulationConfig is built, before anything is simulated.
- DomainViolation: a horizontal position farther from the pivot than the
  tether length; the ball height would be imaginary.

Both derive from ValueError so callers that only care about "bad input" can
catch that.
"""
from __future__ import annotations


class MagpenError(Exception):
    """Base class for all simulation errors."""


class ConfigurationError(MagpenError, ValueError):
    """Invalid physical constant in a SimulationConfig."""


class DomainViolation(MagpenError, ValueError):
    """
    The tether-length invariant is broken.

    Attributes:
        distance: Horizontal distance between the position and the pivot.
        rope_length: Tether length of the configuration in use.
    """

    def __init__(self, distance: float, rope_length: float) -> None:
        self.distance = distance
        self.rope_length = rope_length
        super().__init__(
            f"Horizontal distance {distance:.6g} m from the pivot exceeds "
            f"the tether length {rope_length:.6g} m"
        )
