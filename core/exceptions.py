# PATH: core/exceptions.py
"""
Typed exceptions for LOOPARB.

Infra errors (RPC, Router, Config Store) are transient: callers log them,
keep their previous state and retry on the next schedule.
"""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Error codes carried by every LooparbError."""
    # Infrastructure
    INFRA_RPC_ERROR = "INFRA_RPC_ERROR"
    ROUTER_ERROR = "ROUTER_ERROR"
    CONFIG_STORE_UNREACHABLE = "CONFIG_STORE_UNREACHABLE"

    # Data
    CONFIG_MALFORMED = "CONFIG_MALFORMED"
    CONFIG_MISSING = "CONFIG_MISSING"
    CATALOG_MALFORMED = "CATALOG_MALFORMED"

    # Periodic jobs
    REFRESH_FAILED = "REFRESH_FAILED"
    BALANCE_QUERY_FAILED = "BALANCE_QUERY_FAILED"

    # Execution
    SWAP_BUILD_FAILED = "SWAP_BUILD_FAILED"

    # Startup
    STARTUP_EMPTY_WHITELIST = "STARTUP_EMPTY_WHITELIST"
    STARTUP_INVALID_CREDENTIALS = "STARTUP_INVALID_CREDENTIALS"
    STARTUP_FAILED = "STARTUP_FAILED"

    UNKNOWN = "UNKNOWN"


class LooparbError(Exception):
    """Base exception for LOOPARB."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self):
        return f"[{self.code.value}] {self.message}"


class InfraError(LooparbError):
    """Infrastructure-related errors (RPC, Router, Config Store)."""
    pass


class RPCError(InfraError):
    """Ledger RPC call failed."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.INFRA_RPC_ERROR, details)


class RouterError(InfraError):
    """Router HTTP call failed (not a "no route" answer)."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.ROUTER_ERROR,
        details: Optional[dict] = None,
    ):
        super().__init__(message, code, details)


class ConfigStoreError(InfraError):
    """Config Store unreachable."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.CONFIG_STORE_UNREACHABLE, details)


class ValidationError(LooparbError):
    """Malformed document or catalog entry."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_MALFORMED,
        details: Optional[dict] = None,
    ):
        super().__init__(message, code, details)


class RefreshError(LooparbError):
    """Settings refresh failed; previous snapshot retained."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.REFRESH_FAILED, details)


class BalanceError(LooparbError):
    """One or more balance queries failed in a refresh cycle."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.BALANCE_QUERY_FAILED, details)


class StartupError(LooparbError):
    """Unrecoverable startup condition; the scan loop must not start."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.STARTUP_FAILED,
        details: Optional[dict] = None,
    ):
        super().__init__(message, code, details)
