"""
TipStake Cooldown Queue

One pending withdrawal per account. Repeated unstakes merge into it and
restart the timer for the whole accumulated amount.
"""

from typing import Optional

from ..config import StakingParams
from ..constants import MAX_TICK
from .arithmetic import checked_add
from .types import CooldownNotMetError, StakingOverflowError, UnstakeRequest


class CooldownQueue:
    """Merges unstake requests and gates withdrawal on the unlock tick."""

    def __init__(self, params: Optional[StakingParams] = None):
        self.params = params or StakingParams()

    def unlock_tick(self, now: int) -> int:
        unlock_at = now + self.params.cooldown_ticks
        if unlock_at > MAX_TICK:
            raise StakingOverflowError("Unlock tick exceeds the tick range")
        return unlock_at

    def merge(
        self,
        existing: Optional[UnstakeRequest],
        amount: int,
        now: int,
    ) -> UnstakeRequest:
        """
        Add ``amount`` to the pending request.

        The unlock tick is reset to ``now + cooldown`` for the merged total,
        including amounts queued by earlier unstakes.
        """
        queued = existing.amount if existing else 0
        return UnstakeRequest(
            amount=checked_add(queued, amount),
            unlock_at=self.unlock_tick(now),
        )

    def require_unlocked(self, request: UnstakeRequest, now: int) -> None:
        if not request.is_unlocked(now):
            raise CooldownNotMetError(
                request.unlock_at, now, self.remaining(request, now)
            )

    @staticmethod
    def remaining(request: UnstakeRequest, now: int) -> int:
        """Ticks left before withdrawal is permitted."""
        return max(0, request.unlock_at - now)
