"""
TipStake Staking Module

Implements time-proportional staking rewards with cooldown withdrawals and
admin-driven slashing.

Components:
- StakingEngine: Atomic public operations over the state store
- RewardsCalculator: Reward accrual on principal since the last change
- CooldownQueue: Merged unstake requests gated on an unlock tick
- BoostCalculator: Square-root participation boost, capped
- SlashingController: Principal cut, reward forfeiture and sticky flag
- AssetTransfer: Native and token transfer backends
- Clock: Host-supplied monotonic tick source

Usage:
    from tipstake.staking import StakingEngine, AssetRegistry, NativeAsset, LedgerClock
    from tipstake.state import MemoryStateStore

    assets = AssetRegistry()
    assets.register(NativeAsset())
    engine = StakingEngine(MemoryStateStore(), assets, LedgerClock())
    await engine.initialize(admin="GADMIN...", asset_id="native")
    await engine.stake("GALICE...", 100_0000000)
"""

from .types import (
    StakeAccount,
    UnstakeRequest,
    StakingErrorCode,
    StakingError,
    NotInitializedError,
    AlreadyInitializedError,
    UnauthorizedError,
    BelowMinimumError,
    NoStakeError,
    InsufficientStakeError,
    CooldownNotMetError,
    NoUnstakeRequestError,
    AccountSlashedError,
    StakingOverflowError,
    TransferFailedError,
    InvalidAmountError,
    AssetNotFoundError,
)
from .arithmetic import checked_add, checked_sub, checked_mul, saturating_sub
from .rewards import RewardsCalculator
from .boost import BoostCalculator, isqrt
from .cooldown import CooldownQueue
from .slashing import SlashingController, SlashOutcome
from .clock import Clock, LedgerClock, HostClock
from .assets import AssetTransfer, NativeAsset, TokenAsset, AssetRegistry
from .events import StakingEvent, StakingEventType, EventLog
from .engine import StakingEngine

__all__ = [
    # Types
    "StakeAccount",
    "UnstakeRequest",
    # Errors
    "StakingErrorCode",
    "StakingError",
    "NotInitializedError",
    "AlreadyInitializedError",
    "UnauthorizedError",
    "BelowMinimumError",
    "NoStakeError",
    "InsufficientStakeError",
    "CooldownNotMetError",
    "NoUnstakeRequestError",
    "AccountSlashedError",
    "StakingOverflowError",
    "TransferFailedError",
    "InvalidAmountError",
    "AssetNotFoundError",
    # Arithmetic
    "checked_add",
    "checked_sub",
    "checked_mul",
    "saturating_sub",
    # Components
    "RewardsCalculator",
    "BoostCalculator",
    "isqrt",
    "CooldownQueue",
    "SlashingController",
    "SlashOutcome",
    "Clock",
    "LedgerClock",
    "HostClock",
    "AssetTransfer",
    "NativeAsset",
    "TokenAsset",
    "AssetRegistry",
    "StakingEvent",
    "StakingEventType",
    "EventLog",
    "StakingEngine",
]
