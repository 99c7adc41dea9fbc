"""
TipStake Reward Accrual

Time-proportional rewards on staked principal:

    accrued = principal * rate_bps * (now - since) // (BPS_DENOMINATOR * ticks_per_year)

Division truncates. Sub-unit remainders are dropped on every roll-forward and
are not carried into the next one.
"""

from dataclasses import replace
from typing import Optional

from ..config import StakingParams
from ..constants import BPS_DENOMINATOR
from .arithmetic import checked_add, checked_mul
from .types import StakeAccount


class RewardsCalculator:
    """
    Pure reward arithmetic for one parameter set.

    Rolling forward must happen before every principal change so that rewards
    earned on the old principal are locked in at the old rate.
    """

    def __init__(self, params: Optional[StakingParams] = None):
        self.params = params or StakingParams()

    @property
    def denominator(self) -> int:
        return BPS_DENOMINATOR * self.params.ticks_per_year

    def accrued(self, account: StakeAccount, now: int) -> int:
        """
        Rewards earned since ``account.since``.

        Args:
            account: Stake record
            now: Current tick

        Returns:
            Reward delta, 0 for an empty principal or a non-advancing clock

        Raises:
            StakingOverflowError: If the numerator leaves the 128-bit range
        """
        if account.principal <= 0 or now <= account.since:
            return 0
        elapsed = now - account.since
        numerator = checked_mul(
            checked_mul(account.principal, self.params.reward_rate_bps),
            elapsed,
        )
        return numerator // self.denominator

    def projected(self, account: StakeAccount, now: int) -> int:
        """Pending rewards including accrual up to ``now``."""
        return checked_add(account.pending_rewards, self.accrued(account, now))

    def roll_forward(
        self,
        account: StakeAccount,
        now: int,
        accrue: bool = True,
    ) -> StakeAccount:
        """
        Fold accrual into pending rewards and move ``since`` to ``now``.

        With ``accrue=False`` the elapsed ticks earn nothing (slashed accounts).
        """
        pending = self.projected(account, now) if accrue else account.pending_rewards
        return replace(
            account,
            pending_rewards=pending,
            since=max(account.since, now),
        )
