"""
monitoring/balance_tracker.py - Operator balance gauges.

Each balance query is isolated: one failing token never stops the others
from being published in the same cycle.
"""

from typing import Protocol, TYPE_CHECKING

from core.constants import NATIVE_BALANCE_LABEL
from core.exceptions import BalanceError, InfraError
from core.logging import get_logger
from monitoring.metrics import ArbMetrics

if TYPE_CHECKING:
    from strategy.settings_cache import SettingsCache

logger = get_logger("looparb.monitoring.balances")


class BalanceSource(Protocol):
    async def get_native_balance(self, address: str) -> int:
        ...

    async def get_token_balance(self, owner: str, mint: str) -> int:
        ...


class BalanceTracker:
    """Publishes native and whitelisted-token balances as gauges."""

    def __init__(
        self,
        ledger: BalanceSource,
        owner: str,
        settings_cache: "SettingsCache",
        metrics: ArbMetrics,
    ):
        self.ledger = ledger
        self.owner = owner
        self.settings_cache = settings_cache
        self.metrics = metrics
        self.last_balances: dict[str, int] = {}

    async def update_balances(self) -> dict[str, int]:
        """
        Query and publish every balance.

        Returns:
            label -> balance for the queries that succeeded

        Raises:
            BalanceError: at least one query failed (raised after all the
                successful gauges were set)
        """
        snapshot = self.settings_cache.snapshot
        balances: dict[str, int] = {}
        failed: dict[str, str] = {}

        try:
            balances[NATIVE_BALANCE_LABEL] = await self.ledger.get_native_balance(self.owner)
            self.metrics.set_balance(NATIVE_BALANCE_LABEL, balances[NATIVE_BALANCE_LABEL])
        except InfraError as e:
            failed[NATIVE_BALANCE_LABEL] = str(e)
            logger.warning(
                f"Native balance query failed: {e}",
                extra={"context": {"token": NATIVE_BALANCE_LABEL}},
            )

        for entry in snapshot.whitelist:
            try:
                amount = await self.ledger.get_token_balance(self.owner, entry.key)
            except InfraError as e:
                failed[entry.symbol] = str(e)
                logger.warning(
                    f"Token balance query failed: {e}",
                    extra={"context": {"token": entry.symbol, "mint": entry.key}},
                )
                continue
            balances[entry.symbol] = amount
            self.metrics.set_balance(entry.symbol, amount)

        self.last_balances.update(balances)
        logger.debug("Balances updated", extra={"context": balances})

        if failed:
            raise BalanceError(
                f"{len(failed)} balance queries failed",
                details={"failed": failed},
            )
        return balances
