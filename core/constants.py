# PATH: core/constants.py
"""
Constants for LOOPARB.

Contains enums, defaults, and protocol constants shared across packages.
"""

from decimal import Decimal
from enum import Enum
from typing import Final

# =============================================================================
# NETWORK
# =============================================================================

SOLANA_MAINNET_CHAIN_ID: Final[int] = 101
CLUSTER: Final[str] = "mainnet-beta"

# Wrapped SOL mint (also the default base trade token)
WRAPPED_SOL_MINT: Final[str] = "So11111111111111111111111111111111111111112"


EXPLORER_TX_URL: Final[str] = "https://solscan.io/tx/{txid}"

# =============================================================================
# ROUTER
# =============================================================================

DEFAULT_ROUTER_URL: Final[str] = "https://quote-api.jup.ag/v6"
DEFAULT_TOKEN_LIST_URL: Final[str] = "https://token.jup.ag/strict"

# Jupiter program error: "Slippage tolerance exceeded"
SLIPPAGE_TOLERANCE_EXCEEDED_CODE: Final[int] = 6001

# =============================================================================
# CONFIG STORE
# =============================================================================

CONFIG_DATABASE: Final[str] = "arb"
CONFIG_COLLECTION: Final[str] = "settings"
WHITELIST_DOCUMENT_ID: Final[str] = "arb-v4-token-whitelist"
SETTINGS_DOCUMENT_ID: Final[str] = "arb-v4-settings"

# =============================================================================
# SCHEDULING DEFAULTS
# =============================================================================

DEFAULT_SETTINGS_REFRESH_SECONDS: Final[float] = 30.0
DEFAULT_BALANCE_REFRESH_SECONDS: Final[float] = 60.0
DEFAULT_ERROR_BACKOFF_SECONDS: Final[float] = 10.0
DEFAULT_HTTP_TIMEOUT_SECONDS: Final[float] = 10.0
DEFAULT_CONFIRM_TIMEOUT_SECONDS: Final[float] = 20.0
DEFAULT_CONFIRM_POLL_SECONDS: Final[float] = 0.5
DEFAULT_MAX_CONCURRENT_SWAPS: Final[int] = 4
DEFAULT_MAX_PENDING_SWAPS: Final[int] = 32

# =============================================================================
# STRATEGY DEFAULTS (used before the first refresh)
# =============================================================================

DEFAULT_THRESHOLD: Final[int] = 0
DEFAULT_PRIORITY_FEE: Final[int] = 0
DEFAULT_SLIPPAGE_PCT: Final[Decimal] = Decimal("0")
DEFAULT_TRADE_SIZE: Final[Decimal] = Decimal("0.1")

# =============================================================================
# METRICS
# =============================================================================

NATIVE_BALANCE_LABEL: Final[str] = "nativeSol"


class AttemptOutcomeKind(str, Enum):
    """Swap attempt outcome (metric label value)."""
    SUCCESS = "success"
    SLIPPAGE = "slippage"
    OTHER = "other"


class Commitment(str, Enum):
    """Solana commitment levels."""
    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"
