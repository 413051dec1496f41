# MIT License (see LICENSE)
"""
Reference constants of the magnetic pendulum.

These describe the tabletop setup the defaults are tuned for: a 0.264 kg
steel ball (r ≈ 2 cm) on a 30 cm string, hung 33 cm above the table, with
three magnets on a 4 cm circle. All values use SI units.
"""
from __future__ import annotations

# Gravitational acceleration [m/s²]. Rounded, as in the bench setup.
GRAVITY: float = 10.0

# Ball mass [kg].
MASS: float = 0.264

# Tether length [m] and pivot position [m].
ROPE_LENGTH: float = 0.3
PIVOT: tuple[float, float, float] = (0.0, 0.0, 0.33)

# Quadratic air drag coefficient [kg/m]: |F| = c·|v|².
AIR_DRAG_COEFF: float = 0.037

# Magnet strength [N·m²]: |F| = k / r². Negative values repel.
MAGNET_COEFF: float = 0.0002

# Integration time step [s]. Explicit Euler is stable for the reference
# constants at this step; stiffer magnets or drag need a smaller one.
MICRO_STEP: float = 1e-4

# Simulated seconds per real second (interactive playback only).
TIME_SCALE: float = 1.0

# Display scale [pixels per metre]; not used by the physics.
LENGTH_SCALE: float = 3000.0

# Minimum ball-to-magnet distance [m] used in the inverse-square term.
# Prevents the magnitude k / r² from diverging when r → 0.
MIN_MAGNET_DISTANCE: float = 1e-6

# Magnet ring of the reference setup.
MAGNET_ANGLES_DEG: tuple[float, ...] = (30.0, 150.0, 270.0)
MAGNET_RADIUS: float = 0.04
MAGNET_HEIGHT: float = 0.04
