"""
strategy/quote_evaluator.py - Round-trip quote acquisition.

For a whitelist entry, asks the Router for the best token -> same token
route at the entry's trade size. "No route" is a normal outcome (None), not
an error.
"""

from typing import Optional

from core.logging import get_logger
from core.math import from_smallest_units, to_smallest_units
from core.models import Quote, StrategySettings, WhitelistEntry
from dex.router import Router

logger = get_logger("looparb.strategy.quotes")


class QuoteEvaluator:
    """Turns a whitelist entry into the best round-trip Quote."""

    def __init__(self, router: Router):
        self.router = router

    async def evaluate(
        self,
        entry: WhitelistEntry,
        settings: StrategySettings,
    ) -> Optional[Quote]:
        """
        Best round-trip quote for `entry`, or None.

        Raises:
            RouterError: Router unreachable (the scan loop isolates it)
        """
        input_token = entry.token
        output_token = entry.token
        if input_token is None or output_token is None:
            return None

        amount = to_smallest_units(entry.amount, input_token.decimals)
        routes = await self.router.compute_routes(
            input_token.address,
            output_token.address,
            amount,
            settings.slippage_bps,
        )
        if not routes:
            return None

        best = routes[0]
        logger.info(
            f"Best quote: {from_smallest_units(best.out_amount, output_token.decimals)} "
            f"({output_token.symbol}) {len(routes)}",
            extra={"context": {"symbol": entry.symbol, "in_amount": amount}},
        )
        return Quote.from_route(best)
