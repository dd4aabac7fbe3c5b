# PATH: config/__init__.py
"""
Configuration loading utilities for LOOPARB.

Two sources:
- Process configuration (secrets, endpoints, port) from the environment / .env
- Runtime tunables (intervals, timeouts, Router URLs) from config/runtime.yaml
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from core.constants import (
    CONFIG_COLLECTION,
    CONFIG_DATABASE,
    DEFAULT_BALANCE_REFRESH_SECONDS,
    DEFAULT_CONFIRM_POLL_SECONDS,
    DEFAULT_CONFIRM_TIMEOUT_SECONDS,
    DEFAULT_ERROR_BACKOFF_SECONDS,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_MAX_CONCURRENT_SWAPS,
    DEFAULT_MAX_PENDING_SWAPS,
    DEFAULT_ROUTER_URL,
    DEFAULT_SETTINGS_REFRESH_SECONDS,
    DEFAULT_TOKEN_LIST_URL,
    SETTINGS_DOCUMENT_ID,
    WHITELIST_DOCUMENT_ID,
    Commitment,
)
from core.exceptions import ErrorCode, StartupError


CONFIG_DIR = Path(__file__).parent

DEFAULT_METRICS_PORT = 9100


@dataclass
class RuntimeConfig:
    """Tunables for schedules, Router, Ledger and the swap pool."""

    # Schedules
    settings_refresh_seconds: float = DEFAULT_SETTINGS_REFRESH_SECONDS
    balance_refresh_seconds: float = DEFAULT_BALANCE_REFRESH_SECONDS
    error_backoff_seconds: float = DEFAULT_ERROR_BACKOFF_SECONDS

    # Router
    router_url: str = DEFAULT_ROUTER_URL
    token_list_url: str = DEFAULT_TOKEN_LIST_URL
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS

    # Ledger
    commitment: Commitment = Commitment.PROCESSED
    confirm_timeout_seconds: float = DEFAULT_CONFIRM_TIMEOUT_SECONDS
    confirm_poll_seconds: float = DEFAULT_CONFIRM_POLL_SECONDS

    # Swap pool
    max_concurrent_swaps: int = DEFAULT_MAX_CONCURRENT_SWAPS
    max_pending_swaps: int = DEFAULT_MAX_PENDING_SWAPS

    # Config Store
    config_database: str = CONFIG_DATABASE
    config_collection: str = CONFIG_COLLECTION
    whitelist_document: str = WHITELIST_DOCUMENT_ID
    settings_document: str = SETTINGS_DOCUMENT_ID


def load_runtime_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load runtime configuration from YAML file.

    Args:
        config_path: Path to runtime.yaml (default: config/runtime.yaml)

    Returns:
        RuntimeConfig with defaults for absent keys
    """
    if config_path is None:
        config_path = CONFIG_DIR / "runtime.yaml"

    if not config_path.exists():
        return RuntimeConfig()

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    schedules = data.get("schedules", {})
    router = data.get("router", {})
    ledger = data.get("ledger", {})
    executor = data.get("executor", {})
    store = data.get("config_store", {})

    return RuntimeConfig(
        settings_refresh_seconds=float(schedules.get("settings_refresh_seconds", DEFAULT_SETTINGS_REFRESH_SECONDS)),
        balance_refresh_seconds=float(schedules.get("balance_refresh_seconds", DEFAULT_BALANCE_REFRESH_SECONDS)),
        error_backoff_seconds=float(schedules.get("error_backoff_seconds", DEFAULT_ERROR_BACKOFF_SECONDS)),
        router_url=router.get("url", DEFAULT_ROUTER_URL),
        token_list_url=router.get("token_list_url", DEFAULT_TOKEN_LIST_URL),
        http_timeout_seconds=float(router.get("http_timeout_seconds", DEFAULT_HTTP_TIMEOUT_SECONDS)),
        commitment=Commitment(ledger.get("commitment", Commitment.PROCESSED.value)),
        confirm_timeout_seconds=float(ledger.get("confirm_timeout_seconds", DEFAULT_CONFIRM_TIMEOUT_SECONDS)),
        confirm_poll_seconds=float(ledger.get("confirm_poll_seconds", DEFAULT_CONFIRM_POLL_SECONDS)),
        max_concurrent_swaps=int(executor.get("max_concurrent_swaps", DEFAULT_MAX_CONCURRENT_SWAPS)),
        max_pending_swaps=int(executor.get("max_pending_swaps", DEFAULT_MAX_PENDING_SWAPS)),
        config_database=store.get("database", CONFIG_DATABASE),
        config_collection=store.get("collection", CONFIG_COLLECTION),
        whitelist_document=store.get("whitelist_document", WHITELIST_DOCUMENT_ID),
        settings_document=store.get("settings_document", SETTINGS_DOCUMENT_ID),
    )


@dataclass
class AppConfig:
    """Process configuration, loaded once at startup."""
    wallet_private_key: str = field(repr=False)
    rpc_urls: list[str]
    mongodb_url: Optional[str] = field(default=None, repr=False)
    config_store_path: Optional[Path] = None
    port: int = DEFAULT_METRICS_PORT

    @classmethod
    def from_env(
        cls,
        env_file: Optional[str] = None,
        config_store_path: Optional[str] = None,
    ) -> "AppConfig":
        """
        Read WALLET_PRIVATE_KEY, SOLANA_RPC_ENDPOINT (comma-separated for
        failover), MONGODB_URL or CONFIG_STORE_PATH, and PORT.
        An explicit `config_store_path` takes precedence over CONFIG_STORE_PATH.

        Raises:
            StartupError: required variable missing or invalid
        """
        load_dotenv(env_file)

        wallet_private_key = os.getenv("WALLET_PRIVATE_KEY", "").strip()
        if not wallet_private_key:
            raise StartupError(
                "WALLET_PRIVATE_KEY is not set",
                code=ErrorCode.STARTUP_INVALID_CREDENTIALS,
            )

        rpc_urls = [
            url.strip()
            for url in os.getenv("SOLANA_RPC_ENDPOINT", "").split(",")
            if url.strip()
        ]
        if not rpc_urls:
            raise StartupError("SOLANA_RPC_ENDPOINT is not set")

        mongodb_url = os.getenv("MONGODB_URL") or None
        store_path = config_store_path or os.getenv("CONFIG_STORE_PATH") or None
        if mongodb_url is None and store_path is None:
            raise StartupError("Neither MONGODB_URL nor CONFIG_STORE_PATH is set")

        port_raw = os.getenv("PORT", str(DEFAULT_METRICS_PORT))
        try:
            port = int(port_raw)
        except ValueError:
            raise StartupError(f"PORT is not an integer: {port_raw!r}")

        return cls(
            wallet_private_key=wallet_private_key,
            rpc_urls=rpc_urls,
            mongodb_url=mongodb_url,
            config_store_path=Path(store_path) if store_path else None,
            port=port,
        )
