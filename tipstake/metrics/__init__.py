"""
TipStake Metrics Module

Prometheus-compatible metrics for monitoring the staking engine.
"""

from .collector import (
    StakingMetrics,
    Counter,
    Gauge,
    MetricsRegistry,
)

__all__ = [
    "StakingMetrics",
    "Counter",
    "Gauge",
    "MetricsRegistry",
]
