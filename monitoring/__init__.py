"""
Monitoring package for LOOPARB.

- metrics: Prometheus counters and gauges
- balance_tracker: periodic operator balance gauges
"""

from monitoring.metrics import ArbMetrics
from monitoring.balance_tracker import BalanceSource, BalanceTracker

__all__ = [
    "ArbMetrics",
    "BalanceSource",
    "BalanceTracker",
]
