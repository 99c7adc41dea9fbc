"""
TipStake Unified TOML Configuration Loader

Loads all sections of config.toml with environment variable overrides.
Every section is a dataclass with ``from_dict`` / ``apply_env`` / ``validate``.

Environment variable mapping:
    [staking] min_stake      → TIPSTAKE_MIN_STAKE
    [staking] cooldown_ticks → TIPSTAKE_COOLDOWN_TICKS
    [store] backend          → TIPSTAKE_STORE_BACKEND
    ...
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from ..constants import (
    BOOST_STEP,
    BPS_DENOMINATOR,
    COOLDOWN_TICKS,
    MAX_BOOST,
    MIN_STAKE,
    NATIVE_ASSET_ID,
    REWARD_RATE_BPS,
    SLASH_RATE_BPS,
    TICKS_PER_YEAR,
)
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("memory", "sqlite")


def _env_int(name: str) -> Optional[int]:
    v = os.environ.get(name)
    if v is None or not v.strip():
        return None
    try:
        return int(v)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {v!r}")


# ---------------------------------------------------------------------------
# [staking]
# ---------------------------------------------------------------------------

@dataclass
class StakingParams:
    """[staking] section. Defaults reproduce the deployed engine exactly."""
    min_stake: int = MIN_STAKE
    cooldown_ticks: int = COOLDOWN_TICKS
    reward_rate_bps: int = REWARD_RATE_BPS
    ticks_per_year: int = TICKS_PER_YEAR
    max_boost: int = MAX_BOOST
    boost_step: int = BOOST_STEP
    slash_rate_bps: int = SLASH_RATE_BPS

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StakingParams":
        return cls(
            min_stake=int(data.get("min_stake", MIN_STAKE)),
            cooldown_ticks=int(data.get("cooldown_ticks", COOLDOWN_TICKS)),
            reward_rate_bps=int(data.get("reward_rate_bps", REWARD_RATE_BPS)),
            ticks_per_year=int(data.get("ticks_per_year", TICKS_PER_YEAR)),
            max_boost=int(data.get("max_boost", MAX_BOOST)),
            boost_step=int(data.get("boost_step", BOOST_STEP)),
            slash_rate_bps=int(data.get("slash_rate_bps", SLASH_RATE_BPS)),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        for attr in (
            "min_stake",
            "cooldown_ticks",
            "reward_rate_bps",
            "ticks_per_year",
            "max_boost",
            "boost_step",
            "slash_rate_bps",
        ):
            v = _env_int(f"TIPSTAKE_{attr.upper()}")
            if v is not None:
                setattr(self, attr, v)

    def validate(self) -> bool:
        """
        Validate staking parameters.

        Raises:
            ConfigurationError: If a parameter is out of range
        """
        if self.min_stake <= 0:
            raise ConfigurationError("min_stake must be positive")
        if self.cooldown_ticks < 0:
            raise ConfigurationError("cooldown_ticks cannot be negative")
        if not 0 <= self.reward_rate_bps <= BPS_DENOMINATOR:
            raise ConfigurationError(
                f"reward_rate_bps must be between 0 and {BPS_DENOMINATOR}"
            )
        if self.ticks_per_year <= 0:
            raise ConfigurationError("ticks_per_year must be positive")
        if self.max_boost < 0 or self.boost_step < 0:
            raise ConfigurationError("max_boost and boost_step cannot be negative")
        if not 0 <= self.slash_rate_bps <= BPS_DENOMINATOR:
            raise ConfigurationError(
                f"slash_rate_bps must be between 0 and {BPS_DENOMINATOR}"
            )
        return True

    def to_dict(self) -> Dict[str, int]:
        return {
            "min_stake": self.min_stake,
            "cooldown_ticks": self.cooldown_ticks,
            "reward_rate_bps": self.reward_rate_bps,
            "ticks_per_year": self.ticks_per_year,
            "max_boost": self.max_boost,
            "boost_step": self.boost_step,
            "slash_rate_bps": self.slash_rate_bps,
        }


# ---------------------------------------------------------------------------
# [store]
# ---------------------------------------------------------------------------

@dataclass
class StoreConfig:
    """[store] section."""
    backend: str = "memory"
    path: str = "./data/tipstake.db"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoreConfig":
        return cls(
            backend=data.get("backend", "memory"),
            path=data.get("path", "./data/tipstake.db"),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("TIPSTAKE_STORE_BACKEND"):
            self.backend = v
        if v := os.environ.get("TIPSTAKE_STORE_PATH"):
            self.path = v

    def validate(self) -> bool:
        if self.backend not in STORE_BACKENDS:
            raise ConfigurationError(
                f"Unknown store backend {self.backend!r} (expected one of {STORE_BACKENDS})"
            )
        if self.backend == "sqlite" and not self.path:
            raise ConfigurationError("store.path is required for the sqlite backend")
        return True


# ---------------------------------------------------------------------------
# Top-level
# ---------------------------------------------------------------------------

@dataclass
class EngineConfig:
    """Top-level engine configuration, one attribute per TOML section."""
    custody_address: str = "tipstake-custody"
    asset_id: str = NATIVE_ASSET_ID
    staking: StakingParams = field(default_factory=StakingParams)
    store: StoreConfig = field(default_factory=StoreConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        engine = data.get("engine", {})
        return cls(
            custody_address=engine.get("custody_address", "tipstake-custody"),
            asset_id=engine.get("asset_id", NATIVE_ASSET_ID),
            staking=StakingParams.from_dict(data.get("staking", {})),
            store=StoreConfig.from_dict(data.get("store", {})),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("TIPSTAKE_CUSTODY_ADDRESS"):
            self.custody_address = v
        if v := os.environ.get("TIPSTAKE_ASSET_ID"):
            self.asset_id = v
        self.staking.apply_env()
        self.store.apply_env()

    def validate(self) -> bool:
        if not self.custody_address:
            raise ConfigurationError("engine.custody_address cannot be empty")
        if not self.asset_id:
            raise ConfigurationError("engine.asset_id cannot be empty")
        self.staking.validate()
        self.store.validate()
        return True


def load_config(config_path: Optional[Union[str, Path]] = None) -> EngineConfig:
    """
    Load configuration from TOML file with environment overrides.

    Args:
        config_path: Path to config.toml. A missing file yields the defaults.

    Returns:
        Validated EngineConfig instance

    Raises:
        ConfigurationError: If the file cannot be parsed or a value is invalid
    """
    data: Dict[str, Any] = {}
    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            try:
                with open(path, "rb") as f:
                    data = tomli.load(f)
            except tomli.TOMLDecodeError as e:
                raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e
            logger.info(f"Loaded configuration from {path}")
        else:
            logger.warning(f"Config file {path} not found, using defaults")

    try:
        config = EngineConfig.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration value: {e}") from e
    config.apply_env()
    config.validate()
    return config
