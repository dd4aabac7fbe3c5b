"""
dex/router.py - Router interface.

The scan loop only depends on this protocol; JupiterRouter implements it
and tests substitute fakes.
"""

from typing import Protocol

from core.models import Route, TerminalResult


class Router(Protocol):
    """Routing engine: candidate routes and swap execution."""

    async def compute_routes(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int,
    ) -> list[Route]:
        """Best-first routes; empty list when no viable route exists."""
        ...

    async def build_and_submit(
        self,
        route: Route,
        priority_fee: int,
        wrap_native: bool = False,
    ) -> TerminalResult:
        """Build, submit and wait for the terminal result of a swap."""
        ...
