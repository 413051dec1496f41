# MIT License (see LICENSE)
"""
Utility functions for vector math and numeric operations.

Provides the small set of vector operations the pendulum integrator needs.
All functions accept 2D or 3D vectors represented as float64 numpy arrays
(tuples and lists are accepted wherever an array is).

Zero-length policy:
    normalize_or_zero() returns the zero vector for a zero-length input
    instead of dividing by zero. A ball exactly on top of a magnet therefore
    feels no pull from it, and drag vanishes at zero velocity, which keeps
    downstream arithmetic finite.
"""
from __future__ import annotations
import math

import numpy as np


def f64(x) -> np.ndarray:
    """
    Convert any array-like to a float64 numpy array.

    Used throughout the codebase to ensure consistent numeric precision
    and allow tuple/list inputs for positions and velocities.
    """
    return np.array(x, dtype=np.float64)


def frozen_f64(x, size: int | None = None) -> np.ndarray:
    """
    Convert to a read-only float64 vector, optionally checking its length.

    Used for values that must not change during a run (pivot, magnet
    positions). Raises ValueError on a shape mismatch.
    """
    arr = f64(x)
    if arr.ndim != 1 or (size is not None and arr.shape[0] != size):
        raise ValueError(f"Expected a vector of length {size}, got shape {arr.shape}")
    arr.setflags(write=False)
    return arr


def dot(a: np.ndarray, b: np.ndarray) -> float:
    """Scalar product of two vectors of equal dimension."""
    return float(np.dot(a, b))


def length_squared(v: np.ndarray) -> float:
    """Squared magnitude of a vector. Avoids sqrt for performance."""
    return float(np.dot(v, v))


def length(v: np.ndarray) -> float:
    """Magnitude (length) of a vector."""
    return math.sqrt(length_squared(v))


def normalize_or_zero(v: np.ndarray) -> np.ndarray:
    """
    Return a unit vector in the same direction as v.

    Returns the zero vector (same dimension as v) if |v| is zero or not
    finite, so callers never see NaN directions.
    """
    v = f64(v)
    n = length(v)
    if n == 0.0 or not math.isfinite(n):
        return np.zeros_like(v)
    return v / n


def project_onto(force: np.ndarray, axis: np.ndarray) -> np.ndarray:
    """
    Component of `force` along `axis`, as a vector.

    Implements (force·axis / |axis|²) · axis. A zero axis has no direction,
    so the projection is the zero vector.
    """
    axis = f64(axis)
    a2 = length_squared(axis)
    if a2 == 0.0:
        return np.zeros_like(axis)
    return (dot(force, axis) / a2) * axis


def angle_between(a: np.ndarray, b: np.ndarray) -> float:
    """
    Unsigned angle between two vectors in radians, in [0, π].

    The cosine is clamped to [-1, 1] before acos, since rounding can push
    it slightly past ±1. If either vector has zero length the angle is
    undefined; π/2 is returned, i.e. the vectors are treated as orthogonal.
    """
    denom = length(a) * length(b)
    if denom == 0.0:
        return 0.5 * math.pi
    c = dot(a, b) / denom
    return math.acos(min(1.0, max(-1.0, c)))
