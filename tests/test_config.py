"""
Configuration loader tests: TOML parsing, environment overrides, validation.
"""

import os
import sys

import pytest

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from tipstake.config import EngineConfig, StakingParams, StoreConfig, load_config
from tipstake.constants import COOLDOWN_TICKS, MIN_STAKE, NATIVE_ASSET_ID, parse_bool
from tipstake.exceptions import ConfigurationError

ENV_VARS = (
    "TIPSTAKE_MIN_STAKE",
    "TIPSTAKE_COOLDOWN_TICKS",
    "TIPSTAKE_STORE_BACKEND",
    "TIPSTAKE_STORE_PATH",
    "TIPSTAKE_CUSTODY_ADDRESS",
    "TIPSTAKE_ASSET_ID",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:

    def test_no_path_gives_defaults(self):
        config = load_config()
        assert config.custody_address == "tipstake-custody"
        assert config.asset_id == NATIVE_ASSET_ID
        assert config.staking.min_stake == MIN_STAKE
        assert config.staking.cooldown_ticks == COOLDOWN_TICKS
        assert config.store.backend == "memory"

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.toml")
        assert config.staking == StakingParams()


class TestTomlLoading:

    def test_sections(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text(
            '[engine]\n'
            'custody_address = "vault"\n'
            'asset_id = "TIP"\n'
            '[staking]\n'
            'min_stake = 5\n'
            'reward_rate_bps = 250\n'
            '[store]\n'
            'backend = "sqlite"\n'
            'path = "/tmp/tipstake.db"\n'
        )
        config = load_config(path)
        assert config.custody_address == "vault"
        assert config.asset_id == "TIP"
        assert config.staking.min_stake == 5
        assert config.staking.reward_rate_bps == 250
        assert config.staking.cooldown_ticks == COOLDOWN_TICKS
        assert config.store == StoreConfig(backend="sqlite", path="/tmp/tipstake.db")

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[staking\nmin_stake = ")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_non_integer_value(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[staking]\nmin_stake = "lots"\n')
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_example_config_loads(self):
        config = load_config(os.path.join(ROOT, "config.example.toml"))
        assert config.store.backend == "sqlite"
        assert config.staking == StakingParams()


class TestEnvOverrides:

    def test_env_beats_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.toml"
        path.write_text('[staking]\nmin_stake = 5\n')
        monkeypatch.setenv("TIPSTAKE_MIN_STAKE", "7")
        monkeypatch.setenv("TIPSTAKE_CUSTODY_ADDRESS", "env-vault")
        monkeypatch.setenv("TIPSTAKE_STORE_BACKEND", "sqlite")

        config = load_config(path)
        assert config.staking.min_stake == 7
        assert config.custody_address == "env-vault"
        assert config.store.backend == "sqlite"

    def test_bad_env_integer(self, monkeypatch):
        monkeypatch.setenv("TIPSTAKE_COOLDOWN_TICKS", "soon")
        with pytest.raises(ConfigurationError):
            load_config()


class TestValidation:

    def test_staking_params(self):
        assert StakingParams().validate()
        for bad in (
            StakingParams(min_stake=0),
            StakingParams(cooldown_ticks=-1),
            StakingParams(reward_rate_bps=10_001),
            StakingParams(ticks_per_year=0),
            StakingParams(slash_rate_bps=-1),
            StakingParams(max_boost=-1),
        ):
            with pytest.raises(ConfigurationError):
                bad.validate()

    def test_store_backend(self):
        with pytest.raises(ConfigurationError):
            StoreConfig(backend="redis").validate()
        with pytest.raises(ConfigurationError):
            StoreConfig(backend="sqlite", path="").validate()

    def test_engine_config(self):
        with pytest.raises(ConfigurationError):
            EngineConfig(custody_address="").validate()
        with pytest.raises(ConfigurationError):
            EngineConfig(asset_id="").validate()

    def test_round_trip_dict(self):
        params = StakingParams(min_stake=99)
        assert StakingParams.from_dict(params.to_dict()) == params


class TestParseBool:

    def test_values(self):
        assert parse_bool("true") is True
        assert parse_bool("  FALSE ") is False
        # Anything else passes through unchanged
        assert parse_bool("1") == "1"
        assert parse_bool("") == ""
        assert parse_bool(3) == 3
