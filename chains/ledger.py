"""
chains/ledger.py - Solana ledger client.

Balance queries, raw transaction submission and confirmation polling over
JSON-RPC. All amounts are ints in smallest units (lamports / token base
units).
"""

import asyncio
import base64
import time
from typing import Any, Optional

from core.constants import (
    DEFAULT_CONFIRM_POLL_SECONDS,
    DEFAULT_CONFIRM_TIMEOUT_SECONDS,
    Commitment,
)
from core.exceptions import RPCError
from core.logging import get_logger
from chains.providers import RPCProvider

logger = get_logger("looparb.chains.ledger")

_COMMITMENT_RANK = {
    Commitment.PROCESSED.value: 0,
    Commitment.CONFIRMED.value: 1,
    Commitment.FINALIZED.value: 2,
}


def _parsed_token_amount(account: dict[str, Any]) -> int:
    """Raw amount of a jsonParsed token account entry."""
    return int(account["account"]["data"]["parsed"]["info"]["tokenAmount"]["amount"])


def _owner_mint_total(balances: list[dict[str, Any]] | None, owner: str, mint: str) -> int:
    total = 0
    for entry in balances or []:
        if entry.get("owner") == owner and entry.get("mint") == mint:
            total += int(entry["uiTokenAmount"]["amount"])
    return total


class LedgerClient:
    """
    Ledger Client over an RPCProvider.

    Usage:
        ledger = LedgerClient(RPCProvider(["https://api.mainnet-beta.solana.com"]))
        lamports = await ledger.get_native_balance(owner)
    """

    def __init__(
        self,
        provider: RPCProvider,
        commitment: Commitment = Commitment.PROCESSED,
        confirm_timeout_seconds: float = DEFAULT_CONFIRM_TIMEOUT_SECONDS,
        confirm_poll_seconds: float = DEFAULT_CONFIRM_POLL_SECONDS,
    ):
        self.provider = provider
        self.commitment = commitment
        self.confirm_timeout_seconds = confirm_timeout_seconds
        self.confirm_poll_seconds = confirm_poll_seconds

    async def close(self) -> None:
        await self.provider.close()

    async def get_native_balance(self, address: str) -> int:
        """Lamports held by `address`."""
        response = await self.provider.call(
            "getBalance",
            [address, {"commitment": self.commitment.value}],
        )
        try:
            return int(response.result["value"])
        except (KeyError, TypeError, ValueError) as e:
            raise RPCError(f"Malformed getBalance result: {e}", details={"address": address})

    async def get_token_balance(self, owner: str, mint: str) -> int:
        """Sum of `mint` balances across every token account owned by `owner`."""
        response = await self.provider.call(
            "getTokenAccountsByOwner",
            [
                owner,
                {"mint": mint},
                {"encoding": "jsonParsed", "commitment": self.commitment.value},
            ],
        )
        try:
            return sum(_parsed_token_amount(account) for account in response.result["value"])
        except (KeyError, TypeError, ValueError) as e:
            raise RPCError(
                f"Malformed getTokenAccountsByOwner result: {e}",
                details={"owner": owner, "mint": mint},
            )

    async def get_block_height(self) -> int:
        response = await self.provider.call(
            "getBlockHeight",
            [{"commitment": self.commitment.value}],
        )
        return int(response.result)

    async def send_transaction(self, raw_transaction: bytes) -> str:
        """
        Submit a signed transaction.

        Preflight is skipped: program errors surface on-chain and are read
        back by confirm_transaction().

        Returns:
            Transaction signature
        """
        response = await self.provider.call(
            "sendTransaction",
            [
                base64.b64encode(raw_transaction).decode("ascii"),
                {"encoding": "base64", "skipPreflight": True, "maxRetries": 2},
            ],
        )
        if not isinstance(response.result, str):
            raise RPCError("sendTransaction returned no signature")
        return response.result

    async def get_signature_status(self, signature: str) -> Optional[dict[str, Any]]:
        response = await self.provider.call(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": False}],
        )
        try:
            return response.result["value"][0]
        except (KeyError, IndexError, TypeError):
            return None

    async def confirm_transaction(
        self,
        signature: str,
        last_valid_block_height: Optional[int] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Poll until the signature reaches the configured commitment or fails.

        Returns:
            The signature status (its "err" field is set for an on-chain
            failure), or None if the transaction expired or the confirmation
            timeout elapsed.
        """
        target_rank = _COMMITMENT_RANK[self.commitment.value]
        deadline = time.monotonic() + self.confirm_timeout_seconds

        while time.monotonic() < deadline:
            status = await self.get_signature_status(signature)

            if status is not None:
                if status.get("err") is not None:
                    return status
                rank = _COMMITMENT_RANK.get(status.get("confirmationStatus") or "", -1)
                if rank >= target_rank:
                    return status
            elif last_valid_block_height is not None:
                if await self.get_block_height() > last_valid_block_height:
                    logger.info(
                        "Transaction expired before landing",
                        extra={"context": {"txid": signature}},
                    )
                    return None

            await asyncio.sleep(self.confirm_poll_seconds)

        logger.info(
            "Confirmation timed out",
            extra={"context": {"txid": signature, "timeout_s": self.confirm_timeout_seconds}},
        )
        return None

    async def get_token_balance_delta(
        self,
        signature: str,
        owner: str,
        mint: str,
    ) -> Optional[int]:
        """
        Net change of `owner`'s `mint` balance in a confirmed transaction.

        Returns None when the transaction is not (yet) retrievable.
        """
        response = await self.provider.call(
            "getTransaction",
            [
                signature,
                {
                    "encoding": "jsonParsed",
                    "maxSupportedTransactionVersion": 0,
                    "commitment": Commitment.CONFIRMED.value,
                },
            ],
        )
        tx = response.result
        if not tx:
            return None

        try:
            meta = tx.get("meta")
            if not meta:
                return None
            post = _owner_mint_total(meta.get("postTokenBalances"), owner, mint)
            pre = _owner_mint_total(meta.get("preTokenBalances"), owner, mint)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise RPCError(
                f"Malformed getTransaction result: {e}",
                details={"signature": signature},
            )
        return post - pre
