"""
TipStake Slashing Controller

Punitive cut of principal. A slash:
- removes ``principal * slash_rate_bps // BPS_DENOMINATOR`` from the stake
- forfeits all pending rewards
- sets a sticky flag that blocks staking and claiming until restored
"""

from dataclasses import dataclass
from typing import Optional

from ..config import StakingParams
from ..constants import BPS_DENOMINATOR
from .arithmetic import checked_mul
from .types import StakeAccount


@dataclass(frozen=True)
class SlashOutcome:
    """
    Result of applying a slash to a stake record.

    Attributes:
        account: Updated stake record
        cut: Principal removed
        forfeited_rewards: Pending rewards discarded
    """
    account: StakeAccount
    cut: int
    forfeited_rewards: int


class SlashingController:
    """Computes and applies slashing penalties."""

    def __init__(self, params: Optional[StakingParams] = None):
        self.params = params or StakingParams()

    def compute_cut(self, principal: int) -> int:
        if principal <= 0:
            return 0
        return checked_mul(principal, self.params.slash_rate_bps) // BPS_DENOMINATOR

    def apply(self, account: StakeAccount, now: int) -> SlashOutcome:
        cut = self.compute_cut(account.principal)
        slashed = StakeAccount(
            principal=account.principal - cut,
            since=max(account.since, now),
            pending_rewards=0,
        )
        return SlashOutcome(
            account=slashed,
            cut=cut,
            forfeited_rewards=account.pending_rewards,
        )
