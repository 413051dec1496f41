# MIT License (see LICENSE)
"""
Input/Output utilities for pendulum setups.

This subpackage provides:
    - JSON serialization: Save and load a configuration plus magnet set.
    - Round-trip support: Serialized setups load back identically.

Typical usage:
    from magpen.io import load_setup, save_setup

    config, magnets = load_setup("setup.json")
    save_setup("copy.json", config, magnets)
"""
from .json_io import (
    load_setup,
    load_setup_raw,
    save_setup,
    setup_to_json,
    config_to_json,
    config_from_json,
    magnets_to_json,
    magnets_from_json,
)

__all__ = [
    # Loading
    "load_setup",
    "load_setup_raw",
    # Saving
    "save_setup",
    # Serialization
    "setup_to_json",
    "config_to_json",
    "config_from_json",
    "magnets_to_json",
    "magnets_from_json",
]
