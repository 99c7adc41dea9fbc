"""
Staking lifecycle events.

Every successful mutating operation appends one event to the engine's log.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional


class StakingEventType(Enum):
    """Kinds of lifecycle event."""
    INITIALIZED = "initialized"
    STAKED = "staked"
    UNSTAKED = "unstaked"
    WITHDREW = "withdrew"
    CLAIMED = "claimed"
    SLASHED = "slashed"
    RESTORED = "restored"
    ADMIN_TRANSFERRED = "admin_transferred"


@dataclass(frozen=True)
class StakingEvent:
    """
    One committed state change.

    Attributes:
        kind: Event type
        account: Account the event concerns
        amount: Value moved or affected (0 when not applicable)
        tick: Tick at which the call committed
        data: Event-specific details
    """
    kind: StakingEventType
    account: str
    amount: int
    tick: int
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'event': self.kind.value,
            'account': self.account,
            'amount': self.amount,
            'tick': self.tick,
            'data': dict(self.data),
        }


class EventLog:
    """Append-only in-memory event log."""

    def __init__(self):
        self._events: List[StakingEvent] = []

    def append(self, event: StakingEvent) -> None:
        self._events.append(event)

    def filter(
        self,
        kind: Optional[StakingEventType] = None,
        account: Optional[str] = None,
    ) -> List[StakingEvent]:
        return [
            e for e in self._events
            if (kind is None or e.kind == kind)
            and (account is None or e.account == account)
        ]

    @property
    def last(self) -> Optional[StakingEvent]:
        return self._events[-1] if self._events else None

    def __iter__(self) -> Iterator[StakingEvent]:
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)
