"""
Checked integer arithmetic bounded to the signed 128-bit range.

Python integers never wrap, so the engine enforces the storage width
explicitly: any result outside [MIN_AMOUNT, MAX_AMOUNT] raises
StakingOverflowError instead of being persisted.
"""

from ..constants import MAX_AMOUNT, MIN_AMOUNT
from .types import StakingOverflowError


def _checked(value: int, op: str) -> int:
    if value > MAX_AMOUNT or value < MIN_AMOUNT:
        raise StakingOverflowError(f"Arithmetic overflow in {op}")
    return value


def checked_add(a: int, b: int) -> int:
    return _checked(a + b, "add")


def checked_sub(a: int, b: int) -> int:
    return _checked(a - b, "sub")


def checked_mul(a: int, b: int) -> int:
    return _checked(a * b, "mul")


def saturating_sub(a: int, b: int) -> int:
    """Subtract, clamping at zero."""
    return max(0, a - b)
