"""
strategy/scheduler.py - Periodic background tasks.

Each periodic task isolates its own failures: a failed run is logged and the
next run happens on schedule.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from core.exceptions import LooparbError
from core.logging import get_logger

logger = get_logger("looparb.strategy.scheduler")


async def _wait_or_stop(stop_event: Optional[asyncio.Event], interval_seconds: float) -> bool:
    """Sleep for one interval. True if a stop was requested meanwhile."""
    if stop_event is None:
        await asyncio.sleep(interval_seconds)
        return False
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
    except asyncio.TimeoutError:
        return False
    return True


async def run_periodic(
    name: str,
    interval_seconds: float,
    fn: Callable[[], Awaitable[object]],
    stop_event: Optional[asyncio.Event] = None,
    max_runs: Optional[int] = None,
) -> int:
    """
    Call `fn` every `interval_seconds` until stopped.

    The first run happens one interval after start; startup code performs
    the initial refresh itself.

    Returns:
        Number of runs performed
    """
    runs = 0
    while max_runs is None or runs < max_runs:
        if await _wait_or_stop(stop_event, interval_seconds):
            break

        runs += 1
        try:
            await fn()
        except LooparbError as e:
            logger.warning(
                f"{name} failed: {e}",
                extra={"context": {"task": name, "code": e.code.value, "details": e.details}},
            )
        except Exception as e:
            logger.error(
                f"{name} crashed: {e}",
                exc_info=True,
                extra={"context": {"task": name, "error_type": type(e).__name__}},
            )

    logger.debug(f"{name} stopped", extra={"context": {"task": name, "runs": runs}})
    return runs
