"""
tests/unit/test_scheduler.py - Periodic task isolation.
"""

import asyncio
import logging

from core.exceptions import RefreshError
from strategy.scheduler import run_periodic


class TestRunPeriodic:
    def test_runs_requested_times(self):
        calls = []

        async def job():
            calls.append(1)

        runs = asyncio.run(run_periodic("job", 0, job, max_runs=3))
        assert runs == 3
        assert len(calls) == 3

    def test_failures_do_not_stop_schedule(self, caplog):
        caplog.set_level(logging.WARNING, logger="looparb")
        outcomes = [RefreshError("store down"), RuntimeError("bug"), None]

        async def job():
            outcome = outcomes.pop(0)
            if outcome is not None:
                raise outcome

        runs = asyncio.run(run_periodic("Settings refresh", 0, job, max_runs=3))
        assert runs == 3
        assert "Settings refresh failed: [REFRESH_FAILED] store down" in caplog.text
        assert "Settings refresh crashed: bug" in caplog.text

    def test_stop_event_ends_wait(self):
        async def scenario():
            stop = asyncio.Event()
            calls = []

            async def job():
                calls.append(1)

            task = asyncio.create_task(run_periodic("job", 60, job, stop_event=stop))
            await asyncio.sleep(0)
            stop.set()
            runs = await asyncio.wait_for(task, timeout=1)
            return runs, calls

        runs, calls = asyncio.run(scenario())
        assert runs == 0
        assert calls == []
