"""
TipStake Package

Staking, reward accrual and slashing engine for fungible assets.

Core imports are lazily loaded so that importing a submodule does not pull in
the whole engine. For direct module access, import from submodules:

    from tipstake.staking import StakingEngine
    from tipstake.state import MemoryStateStore
    from tipstake.config import load_config
"""

__version__ = "0.1.0"


# Lazy imports to avoid loading everything at package import
def __getattr__(name):
    """Lazy module loading."""
    if name == 'StakingEngine':
        from .staking import StakingEngine
        return StakingEngine
    elif name == 'load_config':
        from .config import load_config
        return load_config
    elif name == 'TipStakeException':
        from .exceptions import TipStakeException
        return TipStakeException
    raise AttributeError(f"module 'tipstake' has no attribute {name!r}")

__all__ = ['StakingEngine', 'load_config', 'TipStakeException']
