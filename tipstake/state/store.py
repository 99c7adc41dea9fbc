"""
TipStake State Store

Async key-value interface used by the staking engine, plus the in-memory
backend and the transaction overlay that gives each engine call
all-or-nothing semantics.
"""

import copy
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional, Tuple

from ..logger import get_logger

logger = get_logger(__name__)


class DataKey:
    """Key layout of every persisted record."""

    ADMIN = "admin"
    ASSET = "asset"
    TOTAL_STAKED = "total_staked"

    @staticmethod
    def stake(account: str) -> str:
        return f"stake:{account}"

    @staticmethod
    def unstake(account: str) -> str:
        return f"unstake:{account}"

    @staticmethod
    def slashed(account: str) -> str:
        return f"slashed:{account}"


# Marks a key deleted inside a transaction overlay
_DELETED = object()


class StateStore(ABC):
    """
    Keyed persistent map.

    Values are JSON-compatible (dicts, lists, str, int, bool). Backends must
    make a batch passed to ``apply`` visible all at once.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the value stored under ``key`` or None."""

    @abstractmethod
    async def apply(self, writes: Iterable[Tuple[str, Any]]) -> None:
        """
        Apply a batch of writes atomically.

        Args:
            writes: (key, value) pairs; a value of None deletes the key
        """

    async def has(self, key: str) -> bool:
        return await self.get(key) is not None

    async def set(self, key: str, value: Any) -> None:
        if value is None:
            raise ValueError("Use delete() to remove a key")
        await self.apply([(key, value)])

    async def delete(self, key: str) -> None:
        await self.apply([(key, None)])

    def transaction(self) -> "StoreTransaction":
        """Open a write overlay over this store."""
        return StoreTransaction(self)

    async def close(self) -> None:
        """Release backend resources."""


class MemoryStateStore(StateStore):
    """Dict-backed store. State survives for the lifetime of the object."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    async def get(self, key: str) -> Optional[Any]:
        # Callers get copies so staged mutations never leak into the store
        return copy.deepcopy(self._data.get(key))

    async def apply(self, writes: Iterable[Tuple[str, Any]]) -> None:
        for key, value in writes:
            if value is None:
                self._data.pop(key, None)
            else:
                self._data[key] = copy.deepcopy(value)

    def keys(self):
        return list(self._data.keys())

    def __len__(self) -> int:
        return len(self._data)


class StoreTransaction:
    """
    Write overlay over a StateStore.

    Reads see staged writes first. Nothing reaches the underlying store until
    ``commit``; leaving an ``async with`` block by exception discards the
    overlay.

    Usage:
        async with store.transaction() as txn:
            info = await txn.get(DataKey.stake(account))
            txn.set(DataKey.stake(account), info)
    """

    def __init__(self, store: StateStore):
        self._store = store
        self._writes: Dict[str, Any] = {}
        self._closed = False

    async def get(self, key: str) -> Optional[Any]:
        if key in self._writes:
            value = self._writes[key]
            return None if value is _DELETED else copy.deepcopy(value)
        return await self._store.get(key)

    async def has(self, key: str) -> bool:
        return await self.get(key) is not None

    def set(self, key: str, value: Any) -> None:
        if value is None:
            raise ValueError("Use delete() to remove a key")
        self._require_open()
        self._writes[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._require_open()
        self._writes[key] = _DELETED

    @property
    def pending_writes(self) -> int:
        return len(self._writes)

    async def commit(self) -> None:
        self._require_open()
        self._closed = True
        if not self._writes:
            return
        batch = [
            (key, None if value is _DELETED else value)
            for key, value in self._writes.items()
        ]
        await self._store.apply(batch)
        logger.debug(f"Committed {len(batch)} state writes")

    def rollback(self) -> None:
        if self._writes:
            logger.debug(f"Discarded {len(self._writes)} staged state writes")
        self._writes.clear()
        self._closed = True

    def _require_open(self) -> None:
        if self._closed:
            raise RuntimeError("Transaction already committed or rolled back")

    async def __aenter__(self) -> "StoreTransaction":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self.rollback()
        elif not self._closed:
            await self.commit()
        return False
