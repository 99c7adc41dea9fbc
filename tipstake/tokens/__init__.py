"""
TipStake Fungible Token Ledger

Provides:
  - FungibleToken      : Integer-denominated token with ERC-20 style transfer
  - TokenTransferEvent : Emitted on every successful transfer
"""

from .fungible import (
    FungibleToken,
    TokenTransferEvent,
    TokenMintEvent,
    TokenError,
    InsufficientBalanceError,
    TokenFrozenError,
)

__all__ = [
    "FungibleToken",
    "TokenTransferEvent",
    "TokenMintEvent",
    "TokenError",
    "InsufficientBalanceError",
    "TokenFrozenError",
]
