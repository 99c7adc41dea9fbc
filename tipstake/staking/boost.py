"""
Participation boost derived from staked principal.

    boost = min(isqrt(principal // min_stake) * boost_step, max_boost)

The boost grows with the square root of the stake so that large holders gain
influence sub-linearly.
"""

import math
from typing import Optional

from ..config import StakingParams


def isqrt(n: int) -> int:
    """Largest integer whose square is <= n. Exact, no floating point."""
    if n < 0:
        raise ValueError("isqrt of a negative number")
    return math.isqrt(n)


class BoostCalculator:
    """Maps principal to capped percentage points."""

    def __init__(self, params: Optional[StakingParams] = None):
        self.params = params or StakingParams()

    def boost(self, principal: int, slashed: bool = False) -> int:
        if slashed or principal <= 0:
            return 0
        ratio = principal // self.params.min_stake
        return min(isqrt(ratio) * self.params.boost_step, self.params.max_boost)
