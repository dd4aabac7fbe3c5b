"""
tests/unit/test_balance_tracker.py - Isolated balance queries.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.exceptions import BalanceError, RPCError
from monitoring.balance_tracker import BalanceTracker
from strategy.settings_cache import SettingsCache

OWNER = "Owner11111111111111111111111111111111111111"
BONK_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"


@pytest.fixture
def cache(memory_store, catalog):
    cache = SettingsCache(memory_store, catalog)
    asyncio.run(cache.refresh())
    return cache


@pytest.fixture
def ledger():
    ledger = MagicMock()
    ledger.get_native_balance = AsyncMock(return_value=2_000_000_000)
    ledger.get_token_balance = AsyncMock(side_effect=lambda owner, mint: 500 if mint == BONK_MINT else 7)
    return ledger


class TestBalanceTracker:
    def test_all_gauges_set(self, ledger, cache, metrics):
        tracker = BalanceTracker(ledger, OWNER, cache, metrics)
        balances = asyncio.run(tracker.update_balances())

        assert balances == {"nativeSol": 2_000_000_000, "SOL": 7, "Bonk": 500}
        assert metrics.registry.get_sample_value("balance", {"token": "nativeSol"}) == 2_000_000_000
        assert metrics.registry.get_sample_value("balance", {"token": "Bonk"}) == 500
        ledger.get_token_balance.assert_any_await(OWNER, BONK_MINT)

    def test_one_failure_does_not_block_others(self, ledger, cache, metrics):
        def token_balance(owner, mint):
            if mint == BONK_MINT:
                raise RPCError("All RPC endpoints failed")
            return 7

        ledger.get_token_balance.side_effect = token_balance
        tracker = BalanceTracker(ledger, OWNER, cache, metrics)

        with pytest.raises(BalanceError) as exc:
            asyncio.run(tracker.update_balances())

        assert list(exc.value.details["failed"]) == ["Bonk"]
        assert metrics.registry.get_sample_value("balance", {"token": "SOL"}) == 7
        assert metrics.registry.get_sample_value("balance", {"token": "nativeSol"}) == 2_000_000_000
        assert tracker.last_balances["SOL"] == 7

    def test_native_failure_isolated(self, ledger, cache, metrics):
        ledger.get_native_balance.side_effect = RPCError("timeout")
        tracker = BalanceTracker(ledger, OWNER, cache, metrics)

        with pytest.raises(BalanceError):
            asyncio.run(tracker.update_balances())
        assert metrics.registry.get_sample_value("balance", {"token": "Bonk"}) == 500
        assert metrics.registry.get_sample_value("balance", {"token": "nativeSol"}) is None

    def test_follows_current_whitelist(self, ledger, cache, memory_store, metrics):
        memory_store.whitelist[1]["enabled"] = False
        asyncio.run(cache.refresh())

        balances = asyncio.run(BalanceTracker(ledger, OWNER, cache, metrics).update_balances())
        assert "Bonk" not in balances
