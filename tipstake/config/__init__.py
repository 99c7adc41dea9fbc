"""
TipStake Unified Configuration

Loads all sections of config.toml at startup.
Environment variables override TOML values.
"""

from .loader import (
    StakingParams,
    StoreConfig,
    EngineConfig,
    load_config,
)

__all__ = [
    "StakingParams",
    "StoreConfig",
    "EngineConfig",
    "load_config",
]
