"""Test the configuration module functionality."""

import pytest

from ngflow.config import DINIC_CONFIG, DinicConfig
from ngflow.lib.numeric import DEFAULT_EPSILON


def test_dinic_config_defaults():
    config = DinicConfig()

    assert config.epsilon == DEFAULT_EPSILON
    assert config.capacity_attr == "capacity"
    assert config.workers == 1
    config.validate()


def test_global_config_instance():
    assert isinstance(DINIC_CONFIG, DinicConfig)
    assert DINIC_CONFIG == DinicConfig()


def test_dinic_config_custom_values():
    config = DinicConfig(epsilon=0.0, capacity_attr="bw", workers=8)
    config.validate()
    assert config.capacity_attr == "bw"


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"epsilon": -1e-9}, "epsilon must be non-negative"),
        ({"workers": 0}, "workers must be at least 1"),
    ],
)
def test_dinic_config_validate_rejects(kwargs, message):
    with pytest.raises(ValueError, match=message):
        DinicConfig(**kwargs).validate()
