# MIT License (see LICENSE)
"""
Compiled integration kernels.

The micro-step of core.integrators written as a Numba kernel on flat float64
arrays. Every path that moves a ball goes through _step(): single-ball
advance() and advance_recording(), the interactive Simulation, and the
parallel batch kernels. Serial, batch and interactive runs therefore agree
bit for bit.

The kernels are compiled without fastmath so the IEEE operation order of each
cell does not depend on how the cells are scheduled across threads.

core.forces holds the same force law as numpy functions; it is the readable
reference the kernels are tested against. Setting NUMBA_DISABLE_JIT=1 runs the
kernels as plain Python for debugging.
"""
from __future__ import annotations
import math
from typing import Sequence

import numpy as np
from numba import njit, prange

from ..config import SimulationConfig
from ..errors import DomainViolation
from ..types import Magnet

# ==============================================================================
# PARAMETER PACKING
# ==============================================================================

# Slots of the flat parameter vector
GRAVITY = 0
MASS = 1
ROPE_LENGTH = 2
PIVOT_X = 3
PIVOT_Y = 4
PIVOT_Z = 5
AIR_DRAG = 6
MAGNET_COEFF = 7
MICRO_STEP = 8
MIN_MAGNET_DISTANCE = 9


def pack_config(config: SimulationConfig) -> np.ndarray:
    """Flatten a SimulationConfig into the kernels' parameter vector."""
    px, py, pz = (float(v) for v in config.pivot)
    return np.array([
        config.gravity, config.mass, config.rope_length,
        px, py, pz,
        config.air_drag_coeff, config.magnet_coeff,
        config.micro_step, config.min_magnet_distance,
    ], dtype=np.float64)


def pack_magnets(magnets: Sequence[Magnet]) -> np.ndarray:
    """Magnet positions as a C-contiguous [K, 3] array (K may be 0)."""
    out = np.zeros((len(magnets), 3), dtype=np.float64)
    for i, magnet in enumerate(magnets):
        out[i] = magnet.position
    return out


# ==============================================================================
# SINGLE STEP
# ==============================================================================

@njit(inline="always", cache=True)
def _step(pos, vel, params, magnets):
    """
    Advance one ball by one micro-step, in place.

    Returns False, leaving pos and vel untouched, if the ball lies outside
    the tether radius.
    """
    px = params[PIVOT_X]
    py = params[PIVOT_Y]
    pz = params[PIVOT_Z]
    mass = params[MASS]

    # Height from the lower tether-sphere intersection
    dx = pos[0] - px
    dy = pos[1] - py
    a = math.sqrt(dx * dx + dy * dy)
    c = params[ROPE_LENGTH]
    radicand = (c - a) * (c + a)
    if not radicand >= 0.0:
        return False
    bx = pos[0]
    by = pos[1]
    bz = pz - math.sqrt(radicand)

    # Quadratic drag
    ax = 0.0
    ay = 0.0
    az = 0.0
    drag = params[AIR_DRAG]
    if drag != 0.0:
        s2 = vel[0] * vel[0] + vel[1] * vel[1] + vel[2] * vel[2]
        n = math.sqrt(s2)
        if n != 0.0 and math.isfinite(n):
            scale = -drag * s2
            ax = scale * (vel[0] / n)
            ay = scale * (vel[1] / n)
            az = scale * (vel[2] / n)

    # Inverse-square magnets, distance floored at min_magnet_distance
    mx = 0.0
    my = 0.0
    mz = 0.0
    k = params[MAGNET_COEFF]
    if k != 0.0:
        floor2 = params[MIN_MAGNET_DISTANCE] * params[MIN_MAGNET_DISTANCE]
        for j in range(magnets.shape[0]):
            ex = magnets[j, 0] - bx
            ey = magnets[j, 1] - by
            ez = magnets[j, 2] - bz
            d2 = ex * ex + ey * ey + ez * ez
            n = math.sqrt(d2)
            if n != 0.0 and math.isfinite(n):
                scale = k / max(d2, floor2)
                mx += (ex / n) * scale
                my += (ey / n) * scale
                mz += (ez / n) * scale

    fx = (0.0 + ax) + mx
    fy = (0.0 + ay) + my
    fz = (-mass * params[GRAVITY] + az) + mz

    # Tether reaction: radial projection, negated when acute to the raw force
    rx = px - bx
    ry = py - by
    rz = pz - bz
    r2 = rx * rx + ry * ry + rz * rz
    if r2 != 0.0:
        s = (fx * rx + fy * ry + fz * rz) / r2
        qx = s * rx
        qy = s * ry
        qz = s * rz
        denom = math.sqrt(qx * qx + qy * qy + qz * qz) * math.sqrt(fx * fx + fy * fy + fz * fz)
        if denom != 0.0:
            cos_angle = (qx * fx + qy * fy + qz * fz) / denom
            cos_angle = min(1.0, max(-1.0, cos_angle))
            if math.acos(cos_angle) < 0.5 * math.pi:
                qx = -qx
                qy = -qy
                qz = -qz
        fx += qx
        fy += qy
        fz += qz

    # Semi-implicit Euler
    dt = params[MICRO_STEP]
    vel[0] += (fx / mass) * dt
    vel[1] += (fy / mass) * dt
    vel[2] += (fz / mass) * dt
    pos[0] += vel[0] * dt
    pos[1] += vel[1] * dt
    return True


@njit(inline="always", cache=True)
def _nearest(x, y, magnets):
    """Index and squared horizontal distance of the closest magnet; ties go to the lowest index."""
    best = -1
    best_d2 = np.inf
    for j in range(magnets.shape[0]):
        dx = x - magnets[j, 0]
        dy = y - magnets[j, 1]
        d2 = dx * dx + dy * dy
        if d2 < best_d2:
            best = j
            best_d2 = d2
    return best, best_d2


# ==============================================================================
# LOOPS
# ==============================================================================

@njit(cache=True)
def _run(pos, vel, params, magnets, n):
    """Run n micro-steps in place. Returns the number completed."""
    for i in range(n):
        if not _step(pos, vel, params, magnets):
            return i
    return n


@njit(cache=True)
def _run_recording(pos, vel, params, magnets, out):
    """Like _run, writing the position after each step into out[i]."""
    for i in range(out.shape[0]):
        if not _step(pos, vel, params, magnets):
            return i
        out[i, 0] = pos[0]
        out[i, 1] = pos[1]
    return out.shape[0]


@njit(parallel=True, cache=True)
def _advance_batch(positions, velocities, params, magnets, n, failed):
    """Advance N independent balls by n micro-steps, in place, one cell per prange iteration."""
    for i in prange(positions.shape[0]):
        pos = positions[i].copy()
        vel = velocities[i].copy()
        done = _run(pos, vel, params, magnets, n)
        failed[i] = done < n
        positions[i, 0] = pos[0]
        positions[i, 1] = pos[1]
        velocities[i, 0] = vel[0]
        velocities[i, 1] = vel[1]
        velocities[i, 2] = vel[2]


@njit(parallel=True, cache=True)
def _settle_batch(starts, params, magnets, n, labels, failed, ends):
    """Release each start at rest, run n micro-steps and label it by nearest magnet."""
    for i in prange(starts.shape[0]):
        pos = np.empty(2, dtype=np.float64)
        pos[0] = starts[i, 0]
        pos[1] = starts[i, 1]
        vel = np.zeros(3, dtype=np.float64)
        done = _run(pos, vel, params, magnets, n)
        ends[i, 0] = pos[0]
        ends[i, 1] = pos[1]
        if done < n:
            failed[i] = True
            labels[i] = -1
        else:
            failed[i] = False
            labels[i] = _nearest(pos[0], pos[1], magnets)[0]


# ==============================================================================
# PUBLIC API
# ==============================================================================

def _violation(position: np.ndarray, config: SimulationConfig) -> DomainViolation:
    d = float(np.hypot(position[0] - config.pivot[0], position[1] - config.pivot[1]))
    return DomainViolation(d, config.rope_length)


def run_steps(position: np.ndarray, velocity: np.ndarray, config: SimulationConfig,
              magnets: Sequence[Magnet], n: int) -> None:
    """
    Advance one ball by n micro-steps, mutating `position` [2] and `velocity` [3].

    Raises:
        DomainViolation: If a step starts outside the tether radius. The
            arrays hold the last valid state.
    """
    done = _run(position, velocity, pack_config(config), pack_magnets(magnets), n)
    if done < n:
        raise _violation(position, config)


def run_recording(position: np.ndarray, velocity: np.ndarray, config: SimulationConfig,
                  magnets: Sequence[Magnet], n: int) -> np.ndarray:
    """
    Like run_steps(), returning the [n, 2] positions after each micro-step.
    """
    out = np.empty((n, 2), dtype=np.float64)
    done = _run_recording(position, velocity, pack_config(config), pack_magnets(magnets), out)
    if done < n:
        raise _violation(position, config)
    return out


def advance_many(positions: np.ndarray, velocities: np.ndarray, config: SimulationConfig,
                 magnets: Sequence[Magnet], n: int) -> None:
    """
    Advance N balls in parallel, mutating `positions` [N, 2] and `velocities` [N, 3].

    Raises:
        DomainViolation: If any ball leaves the tether sphere.
    """
    failed = np.zeros(positions.shape[0], dtype=np.bool_)
    _advance_batch(positions, velocities, pack_config(config), pack_magnets(magnets), n, failed)
    if failed.any():
        raise _violation(positions[int(np.argmax(failed))], config)


def settle_many(starts: np.ndarray, config: SimulationConfig, magnets: Sequence[Magnet], n: int) -> np.ndarray:
    """
    Classify N start positions [N, 2] after n micro-steps from rest.

    Returns:
        Integer array [N] of nearest-magnet indices.

    Raises:
        DomainViolation: If any ball leaves the tether sphere.
    """
    starts = np.ascontiguousarray(starts, dtype=np.float64)
    labels = np.empty(starts.shape[0], dtype=np.int64)
    failed = np.zeros(starts.shape[0], dtype=np.bool_)
    ends = np.empty_like(starts)
    _settle_batch(starts, pack_config(config), pack_magnets(magnets), n, labels, failed, ends)
    if failed.any():
        raise _violation(ends[int(np.argmax(failed))], config)
    return labels
