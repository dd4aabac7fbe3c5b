"""
tests/unit/test_settings_cache.py - Snapshot publication and refresh failures.
"""

import asyncio
import logging
from decimal import Decimal

import pytest

from core.exceptions import ErrorCode, RefreshError
from core.models import SettingsSnapshot, StrategySettings
from strategy.settings_cache import SettingsCache

SOL_MINT = "So11111111111111111111111111111111111111112"
BONK_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
JUP_MINT = "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN"


@pytest.fixture
def cache(memory_store, catalog):
    return SettingsCache(memory_store, catalog)


class TestRefresh:
    def test_initial_snapshot_is_empty(self, cache):
        assert cache.whitelist == ()
        assert cache.snapshot.version == 0

    def test_refresh_publishes_enabled_resolved_entries(self, cache, sol):
        snapshot = asyncio.run(cache.refresh())

        assert cache.snapshot is snapshot
        assert snapshot.version == 1
        assert snapshot.symbols == ["SOL", "Bonk"]
        assert snapshot.whitelist[0].token is sol
        assert snapshot.whitelist[0].amount == Decimal("1.0")
        assert snapshot.settings.threshold == 100
        assert snapshot.refreshed_at

    def test_each_refresh_builds_a_new_snapshot(self, cache):
        first = asyncio.run(cache.refresh())
        second = asyncio.run(cache.refresh())
        assert second is not first
        assert second.version == first.version + 1

    def test_disabling_removes_entry(self, cache, memory_store):
        asyncio.run(cache.refresh())
        memory_store.whitelist[1]["enabled"] = False

        asyncio.run(cache.refresh())
        assert cache.snapshot.symbols == ["SOL"]

    def test_unresolved_token_dropped(self, cache, memory_store):
        memory_store.whitelist.append(
            {"key": "Unknown1111111111111111111111111111111111111", "ccy": "UNK", "amount": 1, "enabled": True}
        )
        asyncio.run(cache.refresh())
        assert "UNK" not in cache.snapshot.symbols

    def test_duplicate_key_dropped(self, cache, memory_store):
        memory_store.whitelist.append({"key": SOL_MINT, "ccy": "SOL2", "amount": 2, "enabled": True})
        asyncio.run(cache.refresh())
        assert cache.snapshot.symbols == ["SOL", "Bonk"]


class TestRefreshFailure:
    def test_unreachable_store_keeps_snapshot(self, cache, memory_store):
        before = asyncio.run(cache.refresh())
        memory_store.fail_with_unreachable()

        with pytest.raises(RefreshError) as exc:
            asyncio.run(cache.refresh())

        assert cache.snapshot is before
        assert exc.value.details["cause"] == ErrorCode.CONFIG_STORE_UNREACHABLE.value

    def test_malformed_settings_keeps_snapshot(self, cache, memory_store):
        before = asyncio.run(cache.refresh())
        memory_store.settings = {"threshold": "lots"}

        with pytest.raises(RefreshError):
            asyncio.run(cache.refresh())
        assert cache.snapshot is before

    def test_malformed_whitelist_row_keeps_snapshot(self, cache, memory_store):
        before = asyncio.run(cache.refresh())
        memory_store.whitelist.append({"ccy": "NOKEY", "amount": 1, "enabled": True})

        with pytest.raises(RefreshError):
            asyncio.run(cache.refresh())
        assert cache.snapshot is before

    def test_initial_snapshot_survives_failure(self, memory_store, catalog):
        initial = SettingsSnapshot()
        cache = SettingsCache(memory_store, catalog, initial=initial)
        memory_store.fail_with_unreachable()

        with pytest.raises(RefreshError):
            asyncio.run(cache.refresh())
        assert cache.snapshot is initial

    def test_empty_initial_snapshot_kept(self, memory_store, catalog):
        initial = SettingsSnapshot(settings=StrategySettings(threshold=7), version=3)
        cache = SettingsCache(memory_store, catalog, initial=initial)
        assert cache.snapshot is initial
        assert cache.settings.threshold == 7


class TestChangeLogging:
    def test_new_and_removed_tokens_logged(self, cache, memory_store, caplog):
        caplog.set_level(logging.INFO, logger="looparb")
        asyncio.run(cache.refresh())
        assert "New token found SOL: 1" in caplog.text
        assert "New token found Bonk: 1000000" in caplog.text

        caplog.clear()
        memory_store.whitelist[1]["enabled"] = False
        memory_store.whitelist[2]["enabled"] = True
        asyncio.run(cache.refresh())
        assert "Token removed from rotation Bonk" in caplog.text
        assert "New token found JUP: 25" in caplog.text

    def test_settings_change_logged(self, cache, memory_store, caplog):
        asyncio.run(cache.refresh())
        caplog.set_level(logging.INFO, logger="looparb")
        memory_store.settings = {**memory_store.settings, "threshold": 250}

        asyncio.run(cache.refresh())
        assert "Settings threshold changed from 100 to 250" in caplog.text

    def test_trade_size_change_logged(self, cache, memory_store, caplog):
        asyncio.run(cache.refresh())
        caplog.set_level(logging.INFO, logger="looparb")
        memory_store.whitelist[0]["amount"] = 2.5

        asyncio.run(cache.refresh())
        assert "Trade size SOL changed from 1 to 2.5" in caplog.text
