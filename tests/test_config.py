# MIT License (see LICENSE)
import math

import numpy as np
import pytest
from magpen.config import SimulationConfig
from magpen.errors import ConfigurationError, MagpenError


def test_reference_defaults():
    cfg = SimulationConfig()
    assert cfg.gravity == 10.0
    assert cfg.mass == 0.264
    assert cfg.rope_length == 0.3
    assert np.array_equal(cfg.pivot, [0.0, 0.0, 0.33])
    assert cfg.air_drag_coeff == 0.037
    assert cfg.magnet_coeff == 0.0002
    assert cfg.micro_step == 1e-4
    assert math.isclose(cfg.rest_height, 0.03)
    assert math.isclose(cfg.weight, 2.64)


@pytest.mark.parametrize("field", ["mass", "rope_length", "micro_step", "gravity", "time_scale", "length_scale"])
@pytest.mark.parametrize("value", [0.0, -1.0, float("nan"), float("inf")])
def test_rejects_non_positive(field, value):
    with pytest.raises(ConfigurationError):
        SimulationConfig(**{field: value})


def test_rejects_negative_drag_and_bad_pivot():
    with pytest.raises(ConfigurationError):
        SimulationConfig(air_drag_coeff=-0.1)
    with pytest.raises(ConfigurationError):
        SimulationConfig(pivot=(0.0, 0.33))
    with pytest.raises(ConfigurationError):
        SimulationConfig(pivot=(0.0, float("nan"), 0.33))


def test_errors_are_value_errors():
    """Callers can catch plain ValueError."""
    with pytest.raises(ValueError):
        SimulationConfig(mass=-1.0)
    assert issubclass(ConfigurationError, MagpenError)


def test_magnet_coeff_may_be_negative():
    cfg = SimulationConfig(magnet_coeff=-0.0002, air_drag_coeff=0.0)
    assert cfg.magnet_coeff == -0.0002
    assert cfg.air_drag_coeff == 0.0


def test_config_is_immutable():
    cfg = SimulationConfig()
    with pytest.raises(AttributeError):
        cfg.mass = 1.0
    with pytest.raises(ValueError):
        cfg.pivot[2] = 1.0


def test_replace_validates():
    cfg = SimulationConfig()
    fast = cfg.replace(micro_step=1e-3, pivot=(0.0, 0.0, 0.5))
    assert fast.micro_step == 1e-3
    assert np.array_equal(fast.pivot, [0.0, 0.0, 0.5])
    assert cfg.micro_step == 1e-4
    with pytest.raises(ConfigurationError):
        cfg.replace(micro_step=0.0)
