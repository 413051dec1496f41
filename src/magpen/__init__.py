# MIT License (see LICENSE)
"""
magpen - magnetic pendulum simulation and basin classification.

A steel ball hangs from a pivot on an inextensible tether and swings above a
few fixed magnets under gravity and quadratic air drag. Which magnet it comes
to rest over depends chaotically on where it was released; classifying a
grid of release points draws the magnetic-pendulum fractal.

Main entry points:
    - SimulationConfig: Physical constants of a run.
    - Magnet, ring_magnets: Fixed attractors.
    - ParticleState: Kinematic state of one ball.
    - advance, advance_recording: Integrate one ball.
    - BatchField, classify: Grids of independent balls.
    - Simulation: Interactive per-frame context.

Submodules:
    - core: Force generators, integrators and invariants.
    - io: JSON setup files.
    - renderer: Screen transform, trail renderers and basin images.

Example:
    from magpen import SimulationConfig, ParticleState, advance, ring_magnets

    config = SimulationConfig()
    magnets = ring_magnets((30, 150, 270), radius=0.04, height=0.04)
    ball = ParticleState.at_rest((0.05, 0.02), config)
    final = advance(ball, config, magnets, duration=30.0)
"""
from .config import SimulationConfig
from .errors import MagpenError, ConfigurationError, DomainViolation
from .types import Magnet, ParticleState, ring_magnets, tether_height
from .core.integrators import advance, advance_recording, micro_step, step_count
from .batch import BatchField, classify, classify_points
from .session import Simulation

__all__ = [
    # Configuration
    "SimulationConfig",
    # Errors
    "MagpenError",
    "ConfigurationError",
    "DomainViolation",
    # State
    "Magnet",
    "ParticleState",
    "ring_magnets",
    "tether_height",
    # Integration
    "advance",
    "advance_recording",
    "micro_step",
    "step_count",
    # Batch
    "BatchField",
    "classify",
    "classify_points",
    # Interactive
    "Simulation",
]
