"""
Metrics collector tests.
"""

import os
import sys

import pytest

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from tipstake.metrics import Counter, Gauge, MetricsRegistry, StakingMetrics
from tipstake.staking import BelowMinimumError, StakingOverflowError


class TestCounter:

    def test_labelled_increments(self):
        c = Counter("ops_total", "ops")
        c.inc(operation="stake")
        c.inc(2, operation="stake")
        c.inc(operation="withdraw")
        assert c.value(operation="stake") == 3
        assert c.value(operation="claim_rewards") == 0
        assert c.total == 4

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            Counter("x").inc(-1)

    def test_expose(self):
        c = Counter("ops_total", "ops")
        assert "ops_total 0.0" in c.expose()
        c.inc(operation="stake")
        text = c.expose()
        assert "# TYPE ops_total counter" in text
        assert 'ops_total{operation="stake"} 1.0' in text


class TestGauge:

    def test_set_inc_dec(self):
        g = Gauge("staked")
        g.set(10)
        g.inc(5)
        g.dec(3)
        assert g.value == 12
        assert "staked 12" in g.expose()


class TestRegistry:

    def test_duplicate_rejected(self):
        registry = MetricsRegistry()
        registry.register(Counter("a"))
        with pytest.raises(ValueError):
            registry.register(Counter("a"))
        assert registry.metric_count == 1
        assert registry.get("a") is not None


class TestStakingMetrics:

    def test_failure_reason_from_code(self):
        m = StakingMetrics()
        m.record_failure("stake", BelowMinimumError(1, 10))
        m.record_failure("unstake", StakingOverflowError("boom"))
        m.record_failure("stake", RuntimeError("unexpected"))
        assert m.operation_failures_total.value(operation="stake", reason="below_minimum") == 1
        assert m.operation_failures_total.value(operation="unstake", reason="overflow") == 1
        assert m.operation_failures_total.value(operation="stake", reason="RuntimeError") == 1

    def test_expose_lists_all_metrics(self):
        m = StakingMetrics()
        m.record_success("stake")
        text = m.expose()
        for name in (
            "tipstake_operations_total",
            "tipstake_operation_failures_total",
            "tipstake_total_staked",
            "tipstake_slashed_amount_total",
            "tipstake_rewards_claimed_total",
        ):
            assert f"# TYPE {name}" in text
        assert text.endswith("\n")
