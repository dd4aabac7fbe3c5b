"""
dex/adapters/jupiter.py - Jupiter v6 Router adapter.

Quotes come from GET /quote; swaps are built by POST /swap, signed locally
with the operator keypair and submitted/confirmed through the LedgerClient.

Key behaviors:
- A "no route" answer is an empty route list, never an exception
- build_and_submit() blocks until a terminal result (confirmed, on-chain
  error, or expiry)
- Native SOL wrap/unwrap is off unless explicitly requested
"""

import base64
import time
from typing import Any, Optional

import httpx
from solders.keypair import Keypair
from solders.transaction import VersionedTransaction

from core.constants import DEFAULT_HTTP_TIMEOUT_SECONDS, DEFAULT_ROUTER_URL
from core.exceptions import ErrorCode, RouterError, RPCError, ValidationError
from core.logging import get_logger
from core.models import Route, SwapError, TerminalResult
from chains.ledger import LedgerClient

logger = get_logger("looparb.dex.jupiter")


# Jupiter errorCode values meaning "nothing to trade", not a failure
NO_ROUTE_ERROR_CODES = frozenset({
    "COULD_NOT_FIND_ANY_ROUTE",
    "NO_ROUTES_FOUND",
    "TOKEN_NOT_TRADABLE",
    "CIRCULAR_ARBITRAGE_IS_DISABLED",
})


def extract_program_error_code(err: Any) -> Optional[int]:
    """
    Pull the custom program error code out of a transaction error.

    {"InstructionError": [2, {"Custom": 6001}]} -> 6001
    """
    if not isinstance(err, dict):
        return None
    instruction_error = err.get("InstructionError")
    if not isinstance(instruction_error, (list, tuple)) or len(instruction_error) != 2:
        return None
    detail = instruction_error[1]
    if isinstance(detail, dict) and isinstance(detail.get("Custom"), int):
        return detail["Custom"]
    return None


class JupiterRouter:
    """
    Router backed by the Jupiter swap API.

    Usage:
        router = JupiterRouter(ledger, keypair)
        routes = await router.compute_routes(mint, mint, 10**9, 50)
        result = await router.build_and_submit(routes[0], priority_fee=10_000)
    """

    def __init__(
        self,
        ledger: LedgerClient,
        keypair: Keypair,
        base_url: str = DEFAULT_ROUTER_URL,
        timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ):
        self.ledger = ledger
        self.keypair = keypair
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._client = client

    @property
    def owner(self) -> str:
        return str(self.keypair.pubkey())

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds))
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def compute_routes(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int,
    ) -> list[Route]:
        """
        Best-first candidate routes for swapping `amount` smallest units.

        Returns:
            Routes (empty when no viable route exists)

        Raises:
            RouterError: Router unreachable or answered with an unexpected error
        """
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount),
            "slippageBps": slippage_bps,
            "restrictIntermediateTokens": "true",
        }

        start_ms = int(time.time() * 1000)
        try:
            resp = await self._get_client().get(f"{self.base_url}/quote", params=params)
        except httpx.HTTPError as e:
            raise RouterError(
                f"Quote request failed: {e}",
                details={"input_mint": input_mint, "output_mint": output_mint},
            ) from e
        latency_ms = int(time.time() * 1000) - start_ms

        try:
            data = resp.json()
        except ValueError:
            data = {}

        if resp.status_code != 200:
            error_code = data.get("errorCode") if isinstance(data, dict) else None
            if error_code in NO_ROUTE_ERROR_CODES:
                logger.debug(
                    "No route",
                    extra={"context": {"error_code": error_code, "input_mint": input_mint}},
                )
                return []
            raise RouterError(
                f"Quote request returned HTTP {resp.status_code}",
                details={"status": resp.status_code, "error_code": error_code},
            )

        if not isinstance(data, dict) or not data.get("routePlan"):
            return []

        route = Route.from_jupiter(data)
        logger.debug(
            f"Route {route.in_amount} -> {route.out_amount}",
            extra={"context": {"hops": route.labels, "latency_ms": latency_ms}},
        )
        return [route]

    async def _build_swap_transaction(
        self,
        route: Route,
        priority_fee: int,
        wrap_native: bool,
    ) -> tuple[bytes, Optional[int]]:
        body = {
            "quoteResponse": route.raw,
            "userPublicKey": self.owner,
            "wrapAndUnwrapSol": wrap_native,
            "computeUnitPriceMicroLamports": priority_fee,
            "dynamicComputeUnitLimit": True,
        }
        try:
            resp = await self._get_client().post(f"{self.base_url}/swap", json=body)
            resp.raise_for_status()
            data = resp.json()
            raw_tx = base64.b64decode(data["swapTransaction"])
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            raise RouterError(
                f"Swap build failed: {e}",
                code=ErrorCode.SWAP_BUILD_FAILED,
                details={"input_mint": route.input_mint},
            ) from e

        last_valid = data.get("lastValidBlockHeight")
        return raw_tx, int(last_valid) if last_valid is not None else None

    def _sign(self, raw_tx: bytes) -> bytes:
        unsigned = VersionedTransaction.from_bytes(raw_tx)
        signed = VersionedTransaction(unsigned.message, [self.keypair])
        return bytes(signed)

    async def _realized_output(self, route: Route, txid: str) -> int:
        """
        Realized output of a confirmed round trip: input plus the owner's net
        balance change. Falls back to the quoted output when the transaction
        cannot be read back yet.
        """
        if route.input_mint != route.output_mint:
            return route.out_amount
        try:
            delta = await self.ledger.get_token_balance_delta(txid, self.owner, route.output_mint)
        except RPCError as e:
            logger.debug(f"Balance delta unavailable: {e}", extra={"context": {"txid": txid}})
            delta = None
        if delta is None:
            return route.out_amount
        return route.in_amount + delta

    async def build_and_submit(
        self,
        route: Route,
        priority_fee: int,
        wrap_native: bool = False,
    ) -> TerminalResult:
        """
        Build, sign, submit and confirm the swap for `route`.

        Returns:
            TerminalResult: realized amounts on success, SwapError otherwise

        Raises:
            RouterError: swap transaction could not be built
            RPCError: submission failed on every endpoint
        """
        raw_tx, last_valid_block_height = await self._build_swap_transaction(
            route, priority_fee, wrap_native
        )
        try:
            signed = self._sign(raw_tx)
        except ValueError as e:
            raise ValidationError(
                f"Router returned an undecodable transaction: {e}",
                code=ErrorCode.SWAP_BUILD_FAILED,
            ) from e

        txid = await self.ledger.send_transaction(signed)
        logger.debug("Transaction submitted", extra={"context": {"txid": txid}})

        status = await self.ledger.confirm_transaction(txid, last_valid_block_height)
        if status is None:
            return TerminalResult(
                txid=txid,
                error=SwapError(code=None, txid=txid, message="not confirmed"),
            )

        err = status.get("err")
        if err is not None:
            return TerminalResult(
                txid=txid,
                error=SwapError(code=extract_program_error_code(err), txid=txid, message=str(err)),
            )

        return TerminalResult(
            txid=txid,
            input_amount=route.in_amount,
            output_amount=await self._realized_output(route, txid),
        )
