"""
strategy/scan_loop.py - Round-robin scan over the whitelist.

SCAN CONTRACT:
==============
Per iteration:
  1. take the current snapshot once
  2. entry = whitelist[index % len(whitelist)]
  3. quote -> gate -> (if triggered) dispatch the swap without awaiting it
  4. finally: index = (position + 1) % len(current whitelist)

The whitelist may change between steps 1 and 4 (a refresh landed while the
quote was in flight); re-reading it in step 4 keeps the index valid.

Unexpected errors end the iteration, are logged and followed by a back-off.
An empty whitelist is treated the same way, with the index reset to 0.
==============
"""

import asyncio
from typing import Awaitable, Callable, Optional

from core.constants import DEFAULT_ERROR_BACKOFF_SECONDS
from core.logging import get_logger
from core.models import Quote, StrategySettings, WhitelistEntry
from execution.dispatcher import SwapDispatcher
from execution.swap_executor import SwapExecutor
from strategy.gates import ExecutionGate, GateResult
from strategy.quote_evaluator import QuoteEvaluator
from strategy.settings_cache import SettingsCache

logger = get_logger("looparb.strategy.scan")


class ScanLoop:
    """
    Single-task scan loop.

    Usage:
        loop = ScanLoop(cache, evaluator, gate, executor, dispatcher)
        await loop.run(stop_event=stop)
    """

    def __init__(
        self,
        settings_cache: SettingsCache,
        evaluator: QuoteEvaluator,
        gate: ExecutionGate,
        executor: SwapExecutor,
        dispatcher: SwapDispatcher,
        error_backoff_seconds: float = DEFAULT_ERROR_BACKOFF_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        dry_run: bool = False,
    ):
        self.settings_cache = settings_cache
        self.evaluator = evaluator
        self.gate = gate
        self.executor = executor
        self.dispatcher = dispatcher
        self.error_backoff_seconds = error_backoff_seconds
        self._sleep = sleep
        self.dry_run = dry_run

        self.index = 0
        self.iterations = 0
        self.triggered = 0
        self.errors = 0

    async def run_iteration(self) -> Optional[GateResult]:
        """
        Scan one whitelist entry.

        Returns:
            The gate result, or None when no quote was gated
        """
        self.iterations += 1
        snapshot = self.settings_cache.snapshot
        whitelist = snapshot.whitelist

        if not whitelist:
            self.errors += 1
            self.index = 0
            logger.error(
                "Whitelist is empty, nothing to scan",
                extra={"context": {"snapshot_version": snapshot.version}},
            )
            await self._sleep(self.error_backoff_seconds)
            return None

        position = self.index % len(whitelist)
        entry = whitelist[position]
        try:
            quote = await self.evaluator.evaluate(entry, snapshot.settings)
            if quote is None:
                logger.debug(
                    f"{entry.symbol} no route",
                    extra={"context": {"symbol": entry.symbol}},
                )
                return None

            result = self.gate.check(quote, entry, snapshot.settings)
            if result.passed:
                self._trigger(quote, entry, snapshot.settings)
            return result
        except Exception as e:
            self.errors += 1
            logger.error(
                f"Scan iteration failed: {e}",
                exc_info=True,
                extra={"context": {"symbol": entry.symbol, "index": position}},
            )
            await self._sleep(self.error_backoff_seconds)
            return None
        finally:
            current = self.settings_cache.whitelist
            self.index = (position + 1) % len(current) if current else 0

    def _trigger(self, quote: Quote, entry: WhitelistEntry, settings: StrategySettings) -> None:
        self.triggered += 1
        if self.dry_run:
            logger.info(
                f"{entry.symbol} dry run, swap not dispatched",
                extra={"context": {"symbol": entry.symbol, "in_amount": quote.in_amount}},
            )
            return

        self.dispatcher.dispatch(
            self.executor.execute(quote, entry, settings),
            name=f"swap-{entry.symbol}",
        )

    async def run(
        self,
        max_iterations: Optional[int] = None,
        stop_event: Optional[asyncio.Event] = None,
    ) -> None:
        """Iterate until `stop_event` is set or `max_iterations` is reached."""
        done = 0
        while max_iterations is None or done < max_iterations:
            if stop_event is not None and stop_event.is_set():
                break
            await self.run_iteration()
            done += 1
            # give timers and swap tasks a turn between iterations
            await asyncio.sleep(0)

        logger.info(
            "Scan loop stopped",
            extra={"context": {
                "iterations": self.iterations,
                "triggered": self.triggered,
                "errors": self.errors,
            }},
        )
