# PATH: execution/swap_executor.py
"""
LOOPARB Swap Executor.

SWAP OUTCOME CONTRACT:
======================

execute(quote, entry, settings) -> AttemptOutcome
  - Router.build_and_submit(route, priority_fee, wrap_native=False)
  - waits for the terminal result

Classification (classify_result):
  error is None                 -> Success{input_amount, output_amount, txid}
  error.code == 6001 (slippage) -> SlippageFailure{txid}
  any other error               -> OtherFailure{txid, code}

Every outcome increments attempts_total{outcome, symbol, trade_size,
threshold}. Label values are captured from the entry/settings the scan loop
passed in, before the first await, so a settings refresh during
confirmation cannot relabel the attempt.

Exceptions raised before a terminal result propagate to the dispatcher,
which logs them.
======================
"""

from dataclasses import dataclass
from typing import Any, Dict

from core.constants import EXPLORER_TX_URL, SLIPPAGE_TOLERANCE_EXCEEDED_CODE
from core.logging import get_logger
from core.models import (
    AttemptOutcome,
    OtherFailure,
    Quote,
    SlippageFailure,
    StrategySettings,
    Success,
    TerminalResult,
    WhitelistEntry,
)
from dex.router import Router
from monitoring.metrics import ArbMetrics

logger = get_logger("looparb.execution.swap")


def explorer_link(txid: str | None) -> str:
    return EXPLORER_TX_URL.format(txid=txid or "unknown")


def classify_result(result: TerminalResult) -> AttemptOutcome:
    """Map a Router terminal result onto an attempt outcome."""
    error = result.error
    if error is None:
        return Success(
            input_amount=result.input_amount,
            output_amount=result.output_amount,
            txid=result.txid,
        )

    txid = error.txid or result.txid
    if error.code == SLIPPAGE_TOLERANCE_EXCEEDED_CODE:
        return SlippageFailure(txid=txid)
    return OtherFailure(txid=txid, code=error.code, message=error.message)


@dataclass(frozen=True)
class AttemptLabels:
    """Metric label values frozen at dispatch time."""
    symbol: str
    trade_size: str
    threshold: str

    @classmethod
    def capture(cls, entry: WhitelistEntry, settings: StrategySettings) -> "AttemptLabels":
        return cls(
            symbol=entry.symbol,
            trade_size=entry.trade_size_label,
            threshold=settings.threshold_label,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "trade_size": self.trade_size,
            "threshold": self.threshold,
        }


class SwapExecutor:
    """
    Executes a gated quote and records its outcome.

    Usage:
        executor = SwapExecutor(router, metrics)
        outcome = await executor.execute(quote, entry, snapshot.settings)
    """

    def __init__(self, router: Router, metrics: ArbMetrics):
        self.router = router
        self.metrics = metrics

    async def execute(
        self,
        quote: Quote,
        entry: WhitelistEntry,
        settings: StrategySettings,
    ) -> AttemptOutcome:
        labels = AttemptLabels.capture(entry, settings)
        priority_fee = settings.priority_fee

        logger.info(
            f"{entry.symbol} submitting swap",
            extra={"context": {
                **labels.to_dict(),
                "in_amount": quote.in_amount,
                "min_out_amount": quote.min_out_amount,
                "priority_fee": priority_fee,
            }},
        )

        result = await self.router.build_and_submit(
            quote.route,
            priority_fee,
            wrap_native=False,
        )
        outcome = classify_result(result)

        self.metrics.record_attempt(
            outcome.kind,
            symbol=labels.symbol,
            trade_size=labels.trade_size,
            threshold=labels.threshold,
        )
        self._log_outcome(outcome, labels)
        return outcome

    def _log_outcome(self, outcome: AttemptOutcome, labels: AttemptLabels) -> None:
        context = {**labels.to_dict(), "outcome": outcome.kind.value, "txid": outcome.txid}

        if isinstance(outcome, Success):
            logger.info(
                f"{labels.symbol} Success {explorer_link(outcome.txid)}",
                extra={"context": {
                    **context,
                    "input_amount": outcome.input_amount,
                    "output_amount": outcome.output_amount,
                }},
            )
        elif isinstance(outcome, SlippageFailure):
            logger.info(
                f"{labels.symbol} Slippage {explorer_link(outcome.txid)}",
                extra={"context": context},
            )
        else:
            logger.warning(
                f"{labels.symbol} Other {explorer_link(outcome.txid)}",
                extra={"context": {**context, "code": outcome.code, "error": outcome.message}},
            )
