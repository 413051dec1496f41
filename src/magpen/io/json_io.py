# MIT License (see LICENSE)
"""
JSON serialization and deserialization for pendulum setups.

A setup file holds one configuration and its magnet set, so a basin image or
an interactive run can be reproduced exactly.

JSON Schema Overview:
---------------------
{
  "config": {                      # Optional; every field optional
    "gravity": float,              # m/s², default: 10.0
    "mass": float,                 # kg, default: 0.264
    "rope_length": float,          # m, default: 0.3
    "pivot": [x, y, z],            # m, default: [0, 0, 0.33]
    "air_drag_coeff": float,       # default: 0.037
    "magnet_coeff": float,         # default: 0.0002
    "micro_step": float,           # s, default: 1e-4
    "time_scale": float,           # default: 1.0
    "length_scale": float,         # px/m, default: 3000
    "min_magnet_distance": float   # m, default: 1e-6
  },
  "magnets": [                     # Optional; default: reference ring
    {
      "position": [x, y, z],       # Required
      "tag": any JSON value        # Optional, default: null
    }
  ]
}
"""
from __future__ import annotations
import dataclasses
import json
from typing import Any, Sequence

import numpy as np

from .. import constants as C
from ..config import SimulationConfig
from ..types import Magnet, ring_magnets


_CONFIG_FIELDS = tuple(f.name for f in dataclasses.fields(SimulationConfig))


def load_setup_raw(path: str) -> dict[str, Any]:
    """
    Load raw JSON data from a setup file without object construction.

    Args:
        path: Absolute or relative path to the JSON file.

    Returns:
        Dictionary containing the raw JSON data.
    """
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_setup(path: str) -> tuple[SimulationConfig, tuple[Magnet, ...]]:
    """
    Load a configuration and magnet set from a JSON file.

    Missing sections fall back to the reference setup.

    Raises:
        FileNotFoundError: If the file cannot be found.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If a field is malformed (ConfigurationError included).
    """
    data = load_setup_raw(path)
    if not isinstance(data, dict):
        raise ValueError("Setup file must contain a JSON object")

    config = config_from_json(data.get("config", {}))
    if "magnets" in data:
        magnets = magnets_from_json(data["magnets"])
    else:
        magnets = ring_magnets(C.MAGNET_ANGLES_DEG, C.MAGNET_RADIUS, C.MAGNET_HEIGHT)
    return config, magnets


def config_from_json(d: dict[str, Any]) -> SimulationConfig:
    """
    Build a SimulationConfig from a dictionary; absent keys keep defaults.

    Raises:
        ValueError: On unknown keys or invalid values.
    """
    unknown = set(d) - set(_CONFIG_FIELDS)
    if unknown:
        raise ValueError(f"Unknown config field(s): {', '.join(sorted(unknown))}")

    kwargs: dict[str, Any] = {}
    for name, value in d.items():
        kwargs[name] = tuple(float(v) for v in value) if name == "pivot" else float(value)
    return SimulationConfig(**kwargs)


def config_to_json(config: SimulationConfig) -> dict[str, Any]:
    """Serialize every field of a config (round-trip compatible)."""
    result = {}
    for name in _CONFIG_FIELDS:
        value = getattr(config, name)
        result[name] = _to_list(value) if name == "pivot" else value
    return result


def magnets_from_json(items: list[dict[str, Any]]) -> tuple[Magnet, ...]:
    """
    Parse a list of magnet definitions.

    Raises:
        ValueError: If an entry has no 'position' or it is not 3D.
    """
    magnets = []
    for i, m in enumerate(items):
        if "position" not in m:
            raise ValueError(f"Magnet {i} is missing required 'position' field.")
        magnets.append(Magnet(position=tuple(float(v) for v in m["position"]), tag=m.get("tag")))
    return tuple(magnets)


def magnets_to_json(magnets: Sequence[Magnet]) -> list[dict[str, Any]]:
    """Serialize magnets; the tag is omitted when None."""
    out = []
    for m in magnets:
        item: dict[str, Any] = {"position": _to_list(m.position)}
        if m.tag is not None:
            item["tag"] = m.tag
        out.append(item)
    return out


def setup_to_json(config: SimulationConfig, magnets: Sequence[Magnet]) -> dict[str, Any]:
    """Serialize a complete setup to a dictionary."""
    return {
        "config": config_to_json(config),
        "magnets": magnets_to_json(magnets),
    }


def save_setup(path: str, config: SimulationConfig, magnets: Sequence[Magnet], indent: int = 2) -> None:
    """Save a configuration and magnet set to a JSON file on disk."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(setup_to_json(config, magnets), f, indent=indent)


def _to_list(arr: Any) -> list[float]:
    """Helper: Convert numpy array or tuple to a clean list of floats."""
    if isinstance(arr, np.ndarray):
        return arr.tolist()
    return list(arr)
