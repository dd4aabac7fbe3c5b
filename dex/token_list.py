"""
dex/token_list.py - Token catalog feed.

Fetched once at startup; whitelist entries are resolved against it after
every settings refresh.
"""

from typing import Any

import httpx

from core.constants import DEFAULT_HTTP_TIMEOUT_SECONDS
from core.exceptions import ErrorCode, RouterError, ValidationError
from core.logging import get_logger
from core.models import Token

logger = get_logger("looparb.dex.token_list")


def parse_token_catalog(entries: Any) -> dict[str, Token]:
    """
    Build the address -> Token catalog.

    Malformed entries are skipped; the first occurrence of an address wins.
    """
    if not isinstance(entries, list):
        raise ValidationError(
            f"Token list must be a JSON array, got {type(entries).__name__}",
            code=ErrorCode.CATALOG_MALFORMED,
        )

    catalog: dict[str, Token] = {}
    skipped = 0
    for entry in entries:
        if not isinstance(entry, dict):
            skipped += 1
            continue
        try:
            token = Token.from_catalog(entry)
        except ValidationError:
            skipped += 1
            continue
        catalog.setdefault(token.address, token)

    if skipped:
        logger.debug(f"Skipped {skipped} malformed token list entries")
    return catalog


async def fetch_token_catalog(
    url: str,
    timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
    client: httpx.AsyncClient | None = None,
) -> dict[str, Token]:
    """
    Download and parse the token list.

    Raises:
        RouterError: feed unreachable
        ValidationError: feed payload is not a token list
    """
    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds))
    try:
        resp = await http.get(url)
        resp.raise_for_status()
        payload = resp.json()
    except httpx.HTTPError as e:
        raise RouterError(f"Token list unreachable: {e}", details={"url": url}) from e
    except ValueError as e:
        raise ValidationError(
            f"Token list is not JSON: {e}",
            code=ErrorCode.CATALOG_MALFORMED,
            details={"url": url},
        ) from e
    finally:
        if owns_client:
            await http.aclose()

    catalog = parse_token_catalog(payload)
    logger.info(
        f"Token catalog loaded: {len(catalog)} tokens",
        extra={"context": {"url": url}},
    )
    return catalog
