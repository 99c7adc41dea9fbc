"""
TipStake Staking Types and Exceptions

Core records and the error hierarchy of the staking engine.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional

from ..exceptions import TipStakeException


class StakingErrorCode(IntEnum):
    """Stable numeric codes hosts can map staking failures to."""
    UNAUTHORIZED = 1
    BELOW_MINIMUM = 2
    NO_STAKE = 3
    INSUFFICIENT_STAKE = 4
    COOLDOWN_NOT_MET = 5
    NO_UNSTAKE_REQUEST = 6
    ACCOUNT_SLASHED = 7
    TRANSFER_FAILED = 8
    NOT_INITIALIZED = 9
    ALREADY_INITIALIZED = 10
    OVERFLOW = 11
    INVALID_AMOUNT = 12
    ASSET_NOT_FOUND = 13


class StakingError(TipStakeException):
    """Base exception for staking operations."""
    code: Optional[StakingErrorCode] = None


class NotInitializedError(StakingError):
    """Raised when the engine has no admin yet."""
    code = StakingErrorCode.NOT_INITIALIZED

    def __init__(self, message: str = None):
        super().__init__(message or "Staking engine is not initialized")


class AlreadyInitializedError(StakingError):
    """Raised when initialize is called twice."""
    code = StakingErrorCode.ALREADY_INITIALIZED

    def __init__(self, message: str = None):
        super().__init__(message or "Staking engine is already initialized")


class UnauthorizedError(StakingError):
    """Raised when a privileged operation is called by a non-admin."""
    code = StakingErrorCode.UNAUTHORIZED

    def __init__(self, caller: str):
        self.caller = caller
        super().__init__(f"{caller} is not the staking admin")


class BelowMinimumError(StakingError):
    """Raised when a stake is smaller than the minimum stake."""
    code = StakingErrorCode.BELOW_MINIMUM

    def __init__(self, amount: int, minimum: int):
        self.amount = amount
        self.minimum = minimum
        super().__init__(f"Stake of {amount} is below the minimum of {minimum}")


class NoStakeError(StakingError):
    """Raised when an account has no stake record."""
    code = StakingErrorCode.NO_STAKE

    def __init__(self, account: str):
        self.account = account
        super().__init__(f"No stake found for {account}")


class InsufficientStakeError(StakingError):
    """Raised when unstaking more than the current principal."""
    code = StakingErrorCode.INSUFFICIENT_STAKE

    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stake: requested {requested}, staked {available}"
        )


class CooldownNotMetError(StakingError):
    """Raised when withdrawing before the unlock tick."""
    code = StakingErrorCode.COOLDOWN_NOT_MET

    def __init__(self, unlock_at: int, now: int, remaining: int = 0):
        self.unlock_at = unlock_at
        self.now = now
        self.remaining = remaining
        super().__init__(
            f"Cooldown not met: unlocks at tick {unlock_at}, now {now} "
            f"({remaining} ticks remaining)"
        )


class NoUnstakeRequestError(StakingError):
    """Raised when withdrawing with nothing queued."""
    code = StakingErrorCode.NO_UNSTAKE_REQUEST

    def __init__(self, account: str):
        self.account = account
        super().__init__(f"No unstake request for {account}")


class AccountSlashedError(StakingError):
    """Raised when a slashed account tries to stake or claim."""
    code = StakingErrorCode.ACCOUNT_SLASHED

    def __init__(self, account: str):
        self.account = account
        super().__init__(f"Account {account} is slashed")


class StakingOverflowError(StakingError):
    """Raised when checked arithmetic leaves the signed 128-bit range."""
    code = StakingErrorCode.OVERFLOW


class TransferFailedError(StakingError):
    """Raised when the asset layer refuses a transfer."""
    code = StakingErrorCode.TRANSFER_FAILED


class InvalidAmountError(StakingError):
    """Raised on a non-positive unstake amount."""
    code = StakingErrorCode.INVALID_AMOUNT


class AssetNotFoundError(StakingError):
    """Raised when an asset identifier has no registered transfer backend."""
    code = StakingErrorCode.ASSET_NOT_FOUND

    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        super().__init__(f"No asset registered under {asset_id!r}")


@dataclass
class StakeAccount:
    """
    Staking position of one participant.

    Attributes:
        principal: Currently staked value
        since: Tick at which principal (or pending rewards) last changed
        pending_rewards: Rewards accrued but not yet claimed
    """
    principal: int = 0
    since: int = 0
    pending_rewards: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'principal': self.principal,
            'since': self.since,
            'pending_rewards': self.pending_rewards,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StakeAccount':
        return cls(
            principal=int(data['principal']),
            since=int(data['since']),
            pending_rewards=int(data.get('pending_rewards', 0)),
        )


@dataclass
class UnstakeRequest:
    """
    Value waiting out the cooldown.

    Attributes:
        amount: Accumulated unstaked value
        unlock_at: Tick from which withdrawal is permitted
    """
    amount: int
    unlock_at: int

    def is_unlocked(self, now: int) -> bool:
        return now >= self.unlock_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            'amount': self.amount,
            'unlock_at': self.unlock_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UnstakeRequest':
        return cls(amount=int(data['amount']), unlock_at=int(data['unlock_at']))
