"""
TipStake Prometheus Metrics Collector

Pure-Python Prometheus exposition format implementation (text format 0.0.4).

Metric types:
    - Counter: monotonically increasing, optionally labelled
    - Gauge: can go up and down (e.g. total staked)
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


# ---------------------------------------------------------------------------
# Metric primitives
# ---------------------------------------------------------------------------

def _format_labels(labels: Tuple[Tuple[str, str], ...]) -> str:
    if not labels:
        return ""
    inner = ",".join(f'{k}="{v}"' for k, v in labels)
    return "{" + inner + "}"


@dataclass
class Counter:
    """Monotonically increasing counter with optional labels."""
    name: str
    help: str = ""
    _values: Dict[Tuple[Tuple[str, str], ...], float] = field(default_factory=dict, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        if amount < 0:
            raise ValueError("Counter can only be incremented")
        key = tuple(sorted(labels.items()))
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + amount

    def value(self, **labels: str) -> float:
        return self._values.get(tuple(sorted(labels.items())), 0.0)

    @property
    def total(self) -> float:
        return sum(self._values.values())

    def expose(self) -> str:
        lines = []
        if self.help:
            lines.append(f"# HELP {self.name} {self.help}")
        lines.append(f"# TYPE {self.name} counter")
        if not self._values:
            lines.append(f"{self.name} 0.0")
        for key, value in sorted(self._values.items()):
            lines.append(f"{self.name}{_format_labels(key)} {value}")
        return "\n".join(lines)


@dataclass
class Gauge:
    """Gauge that can go up and down."""
    name: str
    help: str = ""
    _value: float = 0.0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def set(self, value: float) -> None:
        with self._lock:
            self._value = value

    def inc(self, amount: float = 1.0) -> None:
        with self._lock:
            self._value += amount

    def dec(self, amount: float = 1.0) -> None:
        with self._lock:
            self._value -= amount

    @property
    def value(self) -> float:
        return self._value

    def expose(self) -> str:
        lines = []
        if self.help:
            lines.append(f"# HELP {self.name} {self.help}")
        lines.append(f"# TYPE {self.name} gauge")
        lines.append(f"{self.name} {self._value}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class MetricsRegistry:
    """
    Central registry holding all metrics.

    Provides ``expose()`` to render all metrics in Prometheus text format.
    """

    def __init__(self):
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def register(self, metric: Any) -> None:
        """Register a metric (Counter or Gauge)."""
        with self._lock:
            if metric.name in self._metrics:
                raise ValueError(f"Metric already registered: {metric.name}")
            self._metrics[metric.name] = metric

    def get(self, name: str) -> Optional[Any]:
        return self._metrics.get(name)

    @property
    def metric_count(self) -> int:
        return len(self._metrics)

    def expose(self) -> str:
        parts: List[str] = []
        with self._lock:
            for metric in self._metrics.values():
                parts.append(metric.expose())
        return "\n\n".join(parts) + "\n"


# ---------------------------------------------------------------------------
# Engine-level collector
# ---------------------------------------------------------------------------

class StakingMetrics:
    """
    Pre-configured metrics for a staking engine.

    Pass one instance to the engine; it records every operation outcome.
    Call ``expose()`` to get the Prometheus endpoint body.
    """

    def __init__(self):
        self.registry = MetricsRegistry()

        self.operations_total = Counter(
            "tipstake_operations_total",
            "Committed staking operations by operation name",
        )
        self.operation_failures_total = Counter(
            "tipstake_operation_failures_total",
            "Rejected staking operations by operation name and error code",
        )
        self.total_staked = Gauge(
            "tipstake_total_staked",
            "Aggregate principal currently staked",
        )
        self.slashed_total = Counter(
            "tipstake_slashed_amount_total",
            "Principal removed by slashing",
        )
        self.rewards_claimed_total = Counter(
            "tipstake_rewards_claimed_total",
            "Rewards paid out by claims",
        )

        for metric in (
            self.operations_total,
            self.operation_failures_total,
            self.total_staked,
            self.slashed_total,
            self.rewards_claimed_total,
        ):
            self.registry.register(metric)

    def record_success(self, operation: str) -> None:
        self.operations_total.inc(operation=operation)

    def record_failure(self, operation: str, error: Exception) -> None:
        code = getattr(error, "code", None)
        reason = code.name.lower() if code is not None else type(error).__name__
        self.operation_failures_total.inc(operation=operation, reason=reason)

    def expose(self) -> str:
        return self.registry.expose()
