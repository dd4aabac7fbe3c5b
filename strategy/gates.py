"""
strategy/gates.py - Execution gate.

spread = quote.min_out_amount - quote.in_amount, in smallest units (int).
A swap triggers only when threshold < spread (strict).
"""

from typing import NamedTuple

from core.logging import get_logger
from core.models import Quote, StrategySettings, WhitelistEntry
from monitoring.metrics import ArbMetrics

logger = get_logger("looparb.strategy.gates")


# =============================================================================
# GATE RESULT
# =============================================================================

class GateResult(NamedTuple):
    """Result of the spread gate."""
    passed: bool
    spread: int
    threshold: int


# =============================================================================
# GATE FUNCTIONS
# =============================================================================

def calculate_spread(quote: Quote) -> int:
    """Round-trip spread: post-slippage minimum output minus input."""
    return quote.min_out_amount - quote.in_amount


def should_execute(quote: Quote, settings: StrategySettings) -> bool:
    return settings.threshold < calculate_spread(quote)


def gate_spread_threshold(quote: Quote, settings: StrategySettings) -> GateResult:
    spread = calculate_spread(quote)
    return GateResult(
        passed=should_execute(quote, settings),
        spread=spread,
        threshold=settings.threshold,
    )


# =============================================================================
# GATE COMPONENT
# =============================================================================

class ExecutionGate:
    """
    Applies the spread gate and publishes the spread gauge.

    The gauge is set on every check, whatever the decision.
    """

    def __init__(self, metrics: ArbMetrics):
        self.metrics = metrics

    def check(
        self,
        quote: Quote,
        entry: WhitelistEntry,
        settings: StrategySettings,
    ) -> GateResult:
        result = gate_spread_threshold(quote, settings)
        self.metrics.set_spread(entry.symbol, result.spread)
        logger.info(
            f"{entry.symbol} Spread {result.spread}",
            extra={"context": {
                "symbol": entry.symbol,
                "spread": result.spread,
                "threshold": result.threshold,
                "passed": result.passed,
            }},
        )
        return result
