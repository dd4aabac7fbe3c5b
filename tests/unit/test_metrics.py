"""
tests/unit/test_metrics.py - Metric families and labels.
"""

from prometheus_client import generate_latest

from core.constants import AttemptOutcomeKind
from monitoring.metrics import ArbMetrics


class TestArbMetrics:
    def test_attempt_counter(self):
        metrics = ArbMetrics()
        metrics.record_attempt(AttemptOutcomeKind.SUCCESS, symbol="SOL", trade_size="1", threshold="100")
        metrics.record_attempt(AttemptOutcomeKind.SUCCESS, symbol="SOL", trade_size="1", threshold="100")

        labels = {"outcome": "success", "symbol": "SOL", "trade_size": "1", "threshold": "100"}
        assert metrics.registry.get_sample_value("attempts_total", labels) == 2

    def test_gauges_overwrite(self):
        metrics = ArbMetrics()
        metrics.set_spread("SOL", 10)
        metrics.set_spread("SOL", -3)
        metrics.set_balance("nativeSol", 5)
        assert metrics.registry.get_sample_value("spread", {"symbol": "SOL"}) == -3
        assert metrics.registry.get_sample_value("balance", {"token": "nativeSol"}) == 5

    def test_private_registries(self):
        first, second = ArbMetrics(), ArbMetrics()
        first.set_spread("SOL", 1)
        assert second.registry.get_sample_value("spread", {"symbol": "SOL"}) is None

    def test_exposition_names(self):
        metrics = ArbMetrics()
        metrics.record_attempt(AttemptOutcomeKind.SLIPPAGE, symbol="A", trade_size="1", threshold="0")
        text = generate_latest(metrics.registry).decode()
        assert "attempts_total{" in text
        assert 'outcome="slippage"' in text
        assert "# TYPE spread gauge" in text
        assert "# TYPE balance gauge" in text
