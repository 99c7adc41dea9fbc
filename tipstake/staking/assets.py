"""
TipStake Asset Transfer

The engine moves value through one abstraction with a single capability,
``transfer(sender, recipient, amount)``. Each supported asset class is a
distinct implementation:

- NativeAsset: balances kept by the host ledger itself
- TokenAsset: balances kept by a FungibleToken
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterator

from ..constants import NATIVE_ASSET_ID
from ..logger import get_logger
from ..tokens import FungibleToken, TokenError
from .types import AssetNotFoundError, TransferFailedError

logger = get_logger(__name__)


class AssetTransfer(ABC):
    """
    Moves fungible value between accounts.

    Transfers are synchronous from the engine's point of view and
    all-or-nothing: either the full amount moves or TransferFailedError is
    raised and no balance changes.
    """

    asset_id: str

    @abstractmethod
    async def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """
        Move ``amount`` from ``sender`` to ``recipient``.

        Raises:
            TransferFailedError: If the move cannot be completed
        """

    @abstractmethod
    async def balance_of(self, address: str) -> int:
        """Current balance of ``address``."""


class NativeAsset(AssetTransfer):
    """Native value held in a balance map owned by the host."""

    def __init__(self, asset_id: str = NATIVE_ASSET_ID):
        self.asset_id = asset_id
        self._balances: Dict[str, int] = {}

    def credit(self, address: str, amount: int) -> None:
        """Fund ``address`` from outside the engine (genesis, faucets, tests)."""
        if amount <= 0:
            raise ValueError("Credit amount must be positive")
        self._balances[address] = self._balances.get(address, 0) + amount

    async def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    async def transfer(self, sender: str, recipient: str, amount: int) -> None:
        if amount <= 0:
            raise TransferFailedError(f"Transfer amount must be positive, got {amount}")
        balance = self._balances.get(sender, 0)
        if balance < amount:
            raise TransferFailedError(
                f"{sender} holds {balance} {self.asset_id}, cannot send {amount}"
            )
        self._balances[sender] = balance - amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount
        logger.debug(f"Native transfer: {sender} → {recipient} {amount} units")


class TokenAsset(AssetTransfer):
    """Adapter over a FungibleToken ledger."""

    def __init__(self, token: FungibleToken, asset_id: str = None):
        self.token = token
        self.asset_id = asset_id or token.symbol

    async def balance_of(self, address: str) -> int:
        return self.token.balance_of(address)

    async def transfer(self, sender: str, recipient: str, amount: int) -> None:
        try:
            self.token.transfer(sender, recipient, amount)
        except TokenError as e:
            raise TransferFailedError(f"{self.asset_id} transfer failed: {e}") from e


class AssetRegistry:
    """Resolves stored asset identifiers to transfer backends."""

    def __init__(self):
        self._assets: Dict[str, AssetTransfer] = {}

    def register(self, asset: AssetTransfer) -> AssetTransfer:
        if asset.asset_id in self._assets:
            raise ValueError(f"Asset already registered: {asset.asset_id}")
        self._assets[asset.asset_id] = asset
        logger.info(f"Asset registered: {asset.asset_id} ({type(asset).__name__})")
        return asset

    def resolve(self, asset_id: str) -> AssetTransfer:
        try:
            return self._assets[asset_id]
        except KeyError:
            raise AssetNotFoundError(asset_id) from None

    def __contains__(self, asset_id: str) -> bool:
        return asset_id in self._assets

    def __iter__(self) -> Iterator[str]:
        return iter(self._assets)

    def __len__(self) -> int:
        return len(self._assets)
