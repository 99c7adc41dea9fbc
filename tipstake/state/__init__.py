"""
TipStake State Storage

Keyed persistent storage for engine state. Any backend providing
get / set / delete by key that survives across calls satisfies the engine.

Components:
- StateStore: Abstract async key-value interface
- MemoryStateStore: Dict-backed store for tests and embedded hosts
- SQLiteStateStore: Durable single-table store backed by aiosqlite
- StoreTransaction: Write overlay committed atomically at the end of a call
- DataKey: Key layout of every persisted record
"""

from .store import (
    DataKey,
    StateStore,
    MemoryStateStore,
    StoreTransaction,
)
from .sqlite import SQLiteStateStore

__all__ = [
    "DataKey",
    "StateStore",
    "MemoryStateStore",
    "StoreTransaction",
    "SQLiteStateStore",
]
