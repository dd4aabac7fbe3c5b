"""
strategy/settings_cache.py - In-memory strategy settings and whitelist.

The cache owns a single SettingsSnapshot reference. refresh() builds a
complete new snapshot and publishes it with one assignment; a failed refresh
leaves the previous snapshot in place and raises RefreshError.

Change logging (new tokens, removed tokens, changed settings fields) is for
operators only. Nothing depends on the diff.
"""

import asyncio
from datetime import datetime, timezone
from typing import Iterable, Mapping

from config.store import ConfigStore
from core.exceptions import LooparbError, RefreshError
from core.logging import get_logger
from core.models import SettingsSnapshot, StrategySettings, Token, WhitelistEntry

logger = get_logger("looparb.strategy.settings")


class SettingsCache:
    """
    Holder of the current SettingsSnapshot.

    Usage:
        cache = SettingsCache(store, catalog)
        await cache.refresh()
        snapshot = cache.snapshot  # take once, use for the whole operation
    """

    def __init__(
        self,
        store: ConfigStore,
        catalog: Mapping[str, Token],
        initial: SettingsSnapshot | None = None,
    ):
        self.store = store
        self.catalog = catalog
        self._snapshot = initial if initial is not None else SettingsSnapshot()

    @property
    def snapshot(self) -> SettingsSnapshot:
        return self._snapshot

    @property
    def settings(self) -> StrategySettings:
        return self._snapshot.settings

    @property
    def whitelist(self) -> tuple[WhitelistEntry, ...]:
        return self._snapshot.whitelist

    async def refresh(self) -> SettingsSnapshot:
        """
        Reload both documents and publish a new snapshot.

        Raises:
            RefreshError: store unreachable or a document is missing/malformed
        """
        try:
            whitelist_doc, settings_doc = await asyncio.gather(
                self.store.fetch_whitelist(),
                self.store.fetch_settings(),
            )
            settings = StrategySettings.from_document(settings_doc)
            entries = [WhitelistEntry.from_document(row) for row in whitelist_doc]
        except LooparbError as e:
            raise RefreshError(
                f"Settings refresh failed: {e}",
                details={"cause": e.code.value, **e.details},
            ) from e

        previous = self._snapshot
        whitelist = tuple(self._resolve(entries))
        self._log_changes(previous, settings, whitelist)

        snapshot = SettingsSnapshot(
            settings=settings,
            whitelist=whitelist,
            version=previous.version + 1,
            refreshed_at=datetime.now(timezone.utc).isoformat(),
        )
        self._snapshot = snapshot
        return snapshot

    def _resolve(self, entries: Iterable[WhitelistEntry]) -> list[WhitelistEntry]:
        """Enabled, de-duplicated entries joined to the token catalog."""
        resolved: list[WhitelistEntry] = []
        seen: set[str] = set()

        for entry in entries:
            if not entry.enabled:
                continue
            if entry.key in seen:
                logger.warning(
                    "Duplicate whitelist key ignored",
                    extra={"context": {"key": entry.key, "symbol": entry.symbol}},
                )
                continue
            seen.add(entry.key)

            token = self.catalog.get(entry.key)
            if token is None:
                logger.warning(
                    "Whitelisted token not in catalog, skipped",
                    extra={"context": {"key": entry.key, "symbol": entry.symbol}},
                )
                continue
            resolved.append(entry.with_token(token))

        return resolved

    def _log_changes(
        self,
        previous: SettingsSnapshot,
        settings: StrategySettings,
        whitelist: tuple[WhitelistEntry, ...],
    ) -> None:
        old_entries = {entry.key: entry for entry in previous.whitelist}
        new_keys = {entry.key for entry in whitelist}

        for entry in whitelist:
            old = old_entries.get(entry.key)
            if old is None:
                logger.info(f"New token found {entry.symbol}: {entry.trade_size_label}")
            elif old.amount != entry.amount:
                logger.info(
                    f"Trade size {entry.symbol} changed from {old.trade_size_label} "
                    f"to {entry.trade_size_label}"
                )

        for key, old in old_entries.items():
            if key not in new_keys:
                logger.info(f"Token removed from rotation {old.symbol}")

        for field_name, (old_value, new_value) in settings.diff(previous.settings).items():
            logger.info(f"Settings {field_name} changed from {old_value} to {new_value}")
