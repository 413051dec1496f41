# MIT License (see LICENSE)
"""
Core physics of the tethered ball.

This subpackage provides:
    - Force generators: gravity, quadratic drag, magnets, tether reaction.
    - Integrators: micro_step, advance, advance_recording.
    - Kernels: the compiled micro-step and parallel batch loops.
    - Invariants: energy and tether diagnostics, nearest-magnet lookup.

Typical usage:
    from magpen.core import advance

    final = advance(state, config, magnets, duration=30.0)
"""
from .forces import (
    gravity_force,
    drag_force,
    magnetic_force,
    tether_reaction,
    total_force,
)
from .integrators import step_count, micro_step, advance, advance_recording
from .kernels import advance_many, settle_many
from .invariants import (
    kinetic_energy,
    potential_energy,
    mechanical_energy,
    tether_slack,
    nearest_magnet,
)

__all__ = [
    # Forces
    "gravity_force",
    "drag_force",
    "magnetic_force",
    "tether_reaction",
    "total_force",
    # Integrators
    "step_count",
    "micro_step",
    "advance",
    "advance_recording",
    # Kernels
    "advance_many",
    "settle_many",
    # Invariants
    "kinetic_energy",
    "potential_energy",
    "mechanical_energy",
    "tether_slack",
    "nearest_magnet",
]
