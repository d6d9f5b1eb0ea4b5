import pytest

import config
from config import validate_config, validate_weights
from models import ConfigError


def test_shipped_configuration_is_valid():
    validate_config()


@pytest.mark.parametrize("weights", [{}, {"a": 0}, {"a": 1, "b": -1}])
def test_validate_weights_rejects_bad_tables(weights):
    with pytest.raises(ConfigError):
        validate_weights("TABLE", weights)


def test_validate_config_requires_block_entries(monkeypatch):
    monkeypatch.setattr(config, "BLOCKS_CONFIG", {})
    with pytest.raises(ConfigError):
        validate_config()


def test_validate_config_rejects_out_of_range_multipliers(monkeypatch):
    monkeypatch.setattr(config, "MULTIPLIER_WEIGHTS", {0: 1, 11: 1})
    with pytest.raises(ConfigError):
        validate_config()


def test_validate_config_requires_a_colour_per_block(monkeypatch):
    monkeypatch.setattr(config, "COLOR_MAP", {"dirt": "#8b5a2b"})
    with pytest.raises(ConfigError):
        validate_config()
