# PATH: tests/conftest.py
"""
Pytest configuration and fixtures for LOOPARB tests.
"""

import sys
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.exceptions import ConfigStoreError  # noqa: E402
from core.models import Quote, Route, StrategySettings, Token, WhitelistEntry  # noqa: E402
from monitoring.metrics import ArbMetrics  # noqa: E402

SOL_MINT = "So11111111111111111111111111111111111111112"
BONK_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
JUP_MINT = "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN"


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


class MemoryConfigStore:
    """In-memory Config Store; set `error` to make the next fetches fail."""

    def __init__(self, whitelist: list[dict[str, Any]], settings: dict[str, Any]):
        self.whitelist = whitelist
        self.settings = settings
        self.error: Exception | None = None
        self.closed = False

    async def fetch_whitelist(self) -> list[dict[str, Any]]:
        if self.error is not None:
            raise self.error
        return self.whitelist

    async def fetch_settings(self) -> dict[str, Any]:
        if self.error is not None:
            raise self.error
        return self.settings

    async def close(self) -> None:
        self.closed = True

    def fail_with_unreachable(self) -> None:
        self.error = ConfigStoreError("connection refused")


# =============================================================================
# TOKENS
# =============================================================================

@pytest.fixture
def sol():
    return Token(
        chain_id=101,
        address=SOL_MINT,
        symbol="SOL",
        name="Wrapped SOL",
        decimals=9,
    )


@pytest.fixture
def bonk():
    return Token(
        chain_id=101,
        address=BONK_MINT,
        symbol="Bonk",
        name="Bonk",
        decimals=5,
    )


@pytest.fixture
def jup():
    return Token(
        chain_id=101,
        address=JUP_MINT,
        symbol="JUP",
        name="Jupiter",
        decimals=6,
    )


@pytest.fixture
def catalog(sol, bonk, jup):
    return {t.address: t for t in (sol, bonk, jup)}


# =============================================================================
# SETTINGS
# =============================================================================

@pytest.fixture
def settings():
    return StrategySettings(
        threshold=100,
        priority_fee=5000,
        slippage_pct=Decimal("0.5"),
    )


@pytest.fixture
def sol_entry(sol):
    return WhitelistEntry(key=SOL_MINT, symbol="SOL", amount=Decimal("1.0"), token=sol)


@pytest.fixture
def whitelist_doc():
    return [
        {"key": SOL_MINT, "ccy": "SOL", "amount": 1.0, "enabled": True},
        {"key": BONK_MINT, "ccy": "Bonk", "amount": 1000000, "enabled": True},
        {"key": JUP_MINT, "ccy": "JUP", "amount": 25, "enabled": False},
    ]


@pytest.fixture
def settings_doc():
    return {
        "threshold": 100,
        "priorityFee": 5000,
        "slippagePct": 0.5,
        "token": SOL_MINT,
        "amount": 0.1,
    }


@pytest.fixture
def memory_store(whitelist_doc, settings_doc):
    return MemoryConfigStore(whitelist_doc, settings_doc)


# =============================================================================
# QUOTES / METRICS
# =============================================================================

@pytest.fixture
def make_quote():
    def _make(in_amount: int, min_out_amount: int, mint: str = SOL_MINT, out_amount: int | None = None) -> Quote:
        route = Route(
            input_mint=mint,
            output_mint=mint,
            in_amount=in_amount,
            out_amount=out_amount if out_amount is not None else min_out_amount,
            other_amount_threshold=min_out_amount,
            slippage_bps=50,
            labels=("Orca", "Raydium"),
        )
        return Quote.from_route(route)
    return _make


@pytest.fixture
def metrics():
    """Fresh metrics on a private registry."""
    return ArbMetrics()
