"""
monitoring/metrics.py - Prometheus metrics for LOOPARB.

Three families on a private registry:
- attempts_total{outcome, symbol, trade_size, threshold}  (counter)
- balance{token}                                         (gauge, "nativeSol" for SOL)
- spread{symbol}                                         (gauge)

Gauge values are exported as floats; decisions never read them back.
"""

from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

from core.constants import AttemptOutcomeKind
from core.logging import get_logger

logger = get_logger("looparb.monitoring.metrics")


class ArbMetrics:
    """Counters and gauges owned by one process (or one test)."""

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or CollectorRegistry()

        self.attempts = Counter(
            "attempts",
            "Total number of swap attempts",
            labelnames=["outcome", "symbol", "trade_size", "threshold"],
            registry=self.registry,
        )
        self.balance = Gauge(
            "balance",
            "Operator balance in smallest units",
            labelnames=["token"],
            registry=self.registry,
        )
        self.spread = Gauge(
            "spread",
            "Round-trip minimum output minus input, in smallest units",
            labelnames=["symbol"],
            registry=self.registry,
        )

    def record_attempt(
        self,
        outcome: AttemptOutcomeKind,
        symbol: str,
        trade_size: str,
        threshold: str,
    ) -> None:
        self.attempts.labels(
            outcome=outcome.value,
            symbol=symbol,
            trade_size=trade_size,
            threshold=threshold,
        ).inc()

    def set_balance(self, token: str, amount: int) -> None:
        self.balance.labels(token=token).set(amount)

    def set_spread(self, symbol: str, spread: int) -> None:
        self.spread.labels(symbol=symbol).set(spread)

    def serve(self, port: int) -> None:
        """Expose the registry on http://0.0.0.0:<port>/metrics."""
        start_http_server(port, registry=self.registry)
        logger.info(f"Metrics server is running on port {port}")
