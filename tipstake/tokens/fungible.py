"""
Fungible Token Ledger

Integer-denominated fungible token backing the token asset variant of the
staking engine:
  - ERC-20 style balance_of / transfer
  - Issuer-only mint
  - Freeze switch that halts all movements
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from ..constants import DEFAULT_TOKEN_DECIMALS, TOKEN_MAX_SUPPLY
from ..exceptions import TipStakeException
from ..logger import get_logger

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class TokenError(TipStakeException):
    """Base exception for token operations."""


class InsufficientBalanceError(TokenError):
    """Raised when sender balance is too low."""


class TokenFrozenError(TokenError):
    """Raised when the token is frozen."""


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TokenTransferEvent:
    """Emitted on every successful transfer."""
    token_symbol: str
    sender: str
    recipient: str
    amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Transfer",
            "token": self.token_symbol,
            "from": self.sender,
            "to": self.recipient,
            "amount": self.amount,
        }


@dataclass(frozen=True)
class TokenMintEvent:
    """Emitted when the issuer mints new supply."""
    token_symbol: str
    recipient: str
    amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Mint",
            "token": self.token_symbol,
            "to": self.recipient,
            "amount": self.amount,
        }


# ══════════════════════════════════════════════════════════════════════
#  TOKEN
# ══════════════════════════════════════════════════════════════════════

class FungibleToken:
    """
    Fungible token ledger.

    Mirrors ERC-20 semantics:
        - balance_of(address) → int
        - transfer(sender, recipient, amount)
        - total_supply → int

    Amounts are integers in the token's smallest unit. Authorization of the
    sender is the host's responsibility.
    """

    def __init__(
        self,
        name: str,
        symbol: str,
        decimals: int = DEFAULT_TOKEN_DECIMALS,
        issuer: str = "",
    ):
        if not name:
            raise TokenError("Token name cannot be empty")
        if not symbol:
            raise TokenError("Token symbol cannot be empty")
        if decimals < 0 or decimals > 18:
            raise TokenError(f"Decimals must be 0-18, got {decimals}")

        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.issuer = issuer
        self._total_supply = 0
        self._frozen = False
        self._balances: Dict[str, int] = {}
        self._events: List[Any] = []

        logger.info(f"Token created: {symbol} ({name}), decimals={decimals}")

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    # ── State guards ──────────────────────────────────────────────────

    def _require_not_frozen(self):
        if self._frozen:
            raise TokenFrozenError(f"Token {self.symbol} is frozen")

    def _require_issuer(self, caller: str):
        if not self.issuer or caller != self.issuer:
            raise TokenError(f"{caller} is not the issuer of {self.symbol}")

    # ── Core operations ───────────────────────────────────────────────

    def transfer(self, sender: str, recipient: str, amount: int) -> TokenTransferEvent:
        """
        Move ``amount`` from ``sender`` to ``recipient``.

        Raises:
            TokenFrozenError: If the token is frozen
            InsufficientBalanceError: If the sender cannot cover the amount
            TokenError: On a non-positive amount or a self-transfer
        """
        self._require_not_frozen()

        if amount <= 0:
            raise TokenError("Transfer amount must be positive")
        if sender == recipient:
            raise TokenError("Cannot transfer to self")

        bal = self.balance_of(sender)
        if bal < amount:
            raise InsufficientBalanceError(
                f"{sender} balance {bal} < transfer amount {amount}"
            )

        self._balances[sender] = bal - amount
        self._balances[recipient] = self.balance_of(recipient) + amount

        event = TokenTransferEvent(
            token_symbol=self.symbol,
            sender=sender,
            recipient=recipient,
            amount=amount,
        )
        self._events.append(event)
        logger.debug(f"Transfer: {sender} → {recipient} {amount} {self.symbol}")
        return event

    def mint(self, caller: str, recipient: str, amount: int) -> TokenMintEvent:
        """Mint new supply to ``recipient`` (issuer only)."""
        self._require_not_frozen()
        self._require_issuer(caller)

        if amount <= 0:
            raise TokenError("Mint amount must be positive")
        if self._total_supply + amount > TOKEN_MAX_SUPPLY:
            raise TokenError(f"Minting {amount} would exceed max supply")

        self._total_supply += amount
        self._balances[recipient] = self.balance_of(recipient) + amount

        event = TokenMintEvent(token_symbol=self.symbol, recipient=recipient, amount=amount)
        self._events.append(event)
        logger.debug(f"Mint: {recipient} +{amount} {self.symbol}")
        return event

    # ── Admin ─────────────────────────────────────────────────────────

    def freeze(self, caller: str) -> None:
        self._require_issuer(caller)
        self._frozen = True
        logger.warning(f"Token {self.symbol} frozen by {caller}")

    def unfreeze(self, caller: str) -> None:
        self._require_issuer(caller)
        self._frozen = False
        logger.info(f"Token {self.symbol} unfrozen by {caller}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "totalSupply": self._total_supply,
            "issuer": self.issuer,
            "frozen": self._frozen,
            "holders": sum(1 for b in self._balances.values() if b > 0),
        }

    def __repr__(self) -> str:
        return f"FungibleToken({self.symbol}, supply={self._total_supply})"
