# PATH: execution/dispatcher.py
"""
Detached swap pool.

DISPATCH CONTRACT:
==================
- dispatch() never awaits the swap; the scan loop moves on immediately
- at most `max_concurrent` swaps run at once, the rest wait their turn
- at most `max_pending` swaps are held; beyond that the attempt is dropped
  and logged
- every task ends by recording a metric (inside the executor) or by
  logging its failure here
- running swaps are never cancelled; drain() waits for them
==================
"""

import asyncio
from typing import Any, Coroutine, Optional

from core.constants import DEFAULT_MAX_CONCURRENT_SWAPS, DEFAULT_MAX_PENDING_SWAPS
from core.logging import get_logger

logger = get_logger("looparb.execution.dispatcher")


class SwapDispatcher:
    """Bounded fire-and-forget task pool for swap executions."""

    def __init__(
        self,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT_SWAPS,
        max_pending: int = DEFAULT_MAX_PENDING_SWAPS,
    ):
        if max_concurrent < 1 or max_pending < 1:
            raise ValueError("max_concurrent and max_pending must be >= 1")
        self.max_concurrent = max_concurrent
        self.max_pending = max_pending
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._tasks: set[asyncio.Task] = set()

        self.dispatched = 0
        self.completed = 0
        self.failed = 0
        self.dropped = 0

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(
        self,
        coro: Coroutine[Any, Any, Any],
        name: str = "swap",
    ) -> Optional[asyncio.Task]:
        """
        Schedule `coro` on the pool without waiting for it.

        Returns:
            The task, or None if the pool was full and the attempt dropped
        """
        if len(self._tasks) >= self.max_pending:
            coro.close()
            self.dropped += 1
            logger.warning(
                "Swap pool full, attempt dropped",
                extra={"context": {"name": name, "pending": len(self._tasks)}},
            )
            return None

        task = asyncio.create_task(self._run(coro, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self.dispatched += 1
        return task

    async def _run(self, coro: Coroutine[Any, Any, Any], name: str) -> Any:
        async with self._semaphore:
            try:
                result = await coro
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.failed += 1
                logger.error(
                    f"Swap execution failed: {e}",
                    exc_info=True,
                    extra={"context": {"name": name, "error_type": type(e).__name__}},
                )
                return None
            self.completed += 1
            return result

    async def drain(self) -> None:
        """Wait until every dispatched swap reached its outcome."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def get_stats(self) -> dict:
        return {
            "dispatched": self.dispatched,
            "completed": self.completed,
            "failed": self.failed,
            "dropped": self.dropped,
            "pending": self.pending,
        }
