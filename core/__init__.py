"""
core - Core utilities and models for LOOPARB.

This package contains:
- models.py: Data models (Token, WhitelistEntry, StrategySettings, Quote, outcomes)
- constants.py: Enums and constants
- exceptions.py: Typed exceptions with error codes
- math.py: Smallest-unit / display-unit conversions (no float)
- logging.py: Structured JSON logging
"""

from core.constants import (
    AttemptOutcomeKind,
    Commitment,
    NATIVE_BALANCE_LABEL,
    SLIPPAGE_TOLERANCE_EXCEEDED_CODE,
    WRAPPED_SOL_MINT,
)
from core.exceptions import (
    BalanceError,
    ConfigStoreError,
    ErrorCode,
    InfraError,
    LooparbError,
    RefreshError,
    RouterError,
    RPCError,
    StartupError,
    ValidationError,
)
from core.logging import get_logger, set_global_context, setup_logging
from core.models import (
    AttemptOutcome,
    OtherFailure,
    Quote,
    Route,
    SettingsSnapshot,
    SlippageFailure,
    StrategySettings,
    Success,
    SwapError,
    TerminalResult,
    Token,
    WhitelistEntry,
)

__all__ = [
    # Constants
    "AttemptOutcomeKind",
    "Commitment",
    "NATIVE_BALANCE_LABEL",
    "SLIPPAGE_TOLERANCE_EXCEEDED_CODE",
    "WRAPPED_SOL_MINT",
    # Exceptions
    "BalanceError",
    "ConfigStoreError",
    "ErrorCode",
    "InfraError",
    "LooparbError",
    "RefreshError",
    "RouterError",
    "RPCError",
    "StartupError",
    "ValidationError",
    # Models
    "AttemptOutcome",
    "OtherFailure",
    "Quote",
    "Route",
    "SettingsSnapshot",
    "SlippageFailure",
    "StrategySettings",
    "Success",
    "SwapError",
    "TerminalResult",
    "Token",
    "WhitelistEntry",
    # Logging
    "get_logger",
    "set_global_context",
    "setup_logging",
]
