#!/usr/bin/env python3
"""
strategy/jobs/run_scan.py - CLI entrypoint for the arbitrage scanner.

Startup sequence:
1. logging + global log context
2. process config (env / .env) and runtime tunables (config/runtime.yaml)
3. operator keypair, token catalog, Config Store
4. initial settings refresh (failure or empty whitelist aborts startup)
5. initial balances, metrics endpoint
6. settings/balance timers + scan loop until SIGINT/SIGTERM
7. drain in-flight swaps, close clients

Usage:
    python -m strategy.jobs.run_scan
    python -m strategy.jobs.run_scan --config-file config/settings.example.yaml --dry-run
    python -m strategy.jobs.run_scan --max-iterations 20 --no-json-logs
"""

import asyncio
import signal
import sys
from pathlib import Path
from typing import Any, Optional

import click

from chains.ledger import LedgerClient
from chains.providers import RPCProvider
from chains.wallet import load_keypair
from config import AppConfig, RuntimeConfig, load_runtime_config
from config.store import ConfigStore, MongoConfigStore, YamlConfigStore
from core.constants import CLUSTER
from core.exceptions import (
    BalanceError,
    ErrorCode,
    LooparbError,
    RefreshError,
    StartupError,
)
from core.logging import get_logger, set_global_context, setup_logging
from dex.adapters.jupiter import JupiterRouter
from dex.token_list import fetch_token_catalog
from execution.dispatcher import SwapDispatcher
from execution.swap_executor import SwapExecutor
from monitoring.balance_tracker import BalanceTracker
from monitoring.metrics import ArbMetrics
from strategy.gates import ExecutionGate
from strategy.quote_evaluator import QuoteEvaluator
from strategy.scan_loop import ScanLoop
from strategy.scheduler import run_periodic
from strategy.settings_cache import SettingsCache

logger = get_logger("looparb.scan")

SERVICE_VERSION = "0.1.0"


def handle_shutdown(stop_event: asyncio.Event, signum: int) -> None:
    """Handle shutdown signals."""
    if not stop_event.is_set():
        logger.info("Shutdown requested", extra={"context": {"signal": signum}})
    stop_event.set()


def install_signal_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, handle_shutdown, stop_event, signum)
        except NotImplementedError:
            # no loop signal support (Windows); Ctrl+C still raises KeyboardInterrupt
            logger.debug(f"Signal handler not installed for {signum}")


def create_config_store(app_config: AppConfig, runtime: RuntimeConfig) -> ConfigStore:
    """YAML file when a path is configured, MongoDB otherwise."""
    if app_config.config_store_path is not None:
        logger.info(
            "Using YAML config store",
            extra={"context": {"path": str(app_config.config_store_path)}},
        )
        return YamlConfigStore(
            app_config.config_store_path,
            whitelist_document=runtime.whitelist_document,
            settings_document=runtime.settings_document,
        )

    logger.info(
        "Using MongoDB config store",
        extra={"context": {
            "database": runtime.config_database,
            "collection": runtime.config_collection,
        }},
    )
    return MongoConfigStore(
        app_config.mongodb_url,
        database=runtime.config_database,
        collection=runtime.config_collection,
        whitelist_document=runtime.whitelist_document,
        settings_document=runtime.settings_document,
        timeout_ms=int(runtime.http_timeout_seconds * 1000),
    )


async def initial_refresh(settings_cache: SettingsCache) -> None:
    """
    First settings load. The scan loop never starts on stale or empty data.

    Raises:
        StartupError: refresh failed or the whitelist is empty
    """
    try:
        snapshot = await settings_cache.refresh()
    except RefreshError as e:
        raise StartupError(
            f"Initial settings refresh failed: {e}",
            details=e.details,
        ) from e

    if not snapshot.whitelist:
        raise StartupError(
            "Whitelist is empty, nothing to scan",
            code=ErrorCode.STARTUP_EMPTY_WHITELIST,
        )

    logger.info(
        f"Settings loaded: {len(snapshot)} tokens",
        extra={"context": {
            "symbols": list(snapshot.symbols),
            **snapshot.settings.to_dict(),
        }},
    )


async def run_scanner(
    app_config: AppConfig,
    runtime: RuntimeConfig,
    max_iterations: Optional[int] = None,
    dry_run: bool = False,
    stop_event: Optional[asyncio.Event] = None,
    metrics: Optional[ArbMetrics] = None,
    serve_metrics: bool = True,
) -> dict[str, Any]:
    """
    Run the scanner until stopped.

    Returns:
        Session summary

    Raises:
        StartupError: the scanner could not start
    """
    stop_event = stop_event or asyncio.Event()
    metrics = metrics or ArbMetrics()

    keypair = load_keypair(app_config.wallet_private_key)
    owner = str(keypair.pubkey())
    set_global_context(owner=owner)

    try:
        catalog = await fetch_token_catalog(
            runtime.token_list_url,
            timeout_seconds=runtime.http_timeout_seconds,
        )
    except LooparbError as e:
        raise StartupError(
            f"Token catalog unavailable: {e}",
            details={"url": runtime.token_list_url},
        ) from e

    provider = RPCProvider(app_config.rpc_urls, timeout_seconds=runtime.http_timeout_seconds)
    ledger = LedgerClient(
        provider,
        commitment=runtime.commitment,
        confirm_timeout_seconds=runtime.confirm_timeout_seconds,
        confirm_poll_seconds=runtime.confirm_poll_seconds,
    )
    router = JupiterRouter(
        ledger,
        keypair,
        base_url=runtime.router_url,
        timeout_seconds=runtime.http_timeout_seconds,
    )
    store = create_config_store(app_config, runtime)
    dispatcher = SwapDispatcher(runtime.max_concurrent_swaps, runtime.max_pending_swaps)

    try:
        settings_cache = SettingsCache(store, catalog)
        await initial_refresh(settings_cache)

        balances = BalanceTracker(ledger, owner, settings_cache, metrics)
        try:
            await balances.update_balances()
        except BalanceError as e:
            logger.warning(f"Initial balance update incomplete: {e}", extra={"context": e.details})

        if serve_metrics:
            metrics.serve(app_config.port)

        scan_loop = ScanLoop(
            settings_cache,
            QuoteEvaluator(router),
            ExecutionGate(metrics),
            SwapExecutor(router, metrics),
            dispatcher,
            error_backoff_seconds=runtime.error_backoff_seconds,
            dry_run=dry_run,
        )

        install_signal_handlers(stop_event)
        timers = [
            asyncio.create_task(
                run_periodic(
                    "Settings refresh",
                    runtime.settings_refresh_seconds,
                    settings_cache.refresh,
                    stop_event=stop_event,
                ),
                name="settings-refresh",
            ),
            asyncio.create_task(
                run_periodic(
                    "Balance update",
                    runtime.balance_refresh_seconds,
                    balances.update_balances,
                    stop_event=stop_event,
                ),
                name="balance-update",
            ),
        ]

        logger.info(
            "Scan loop started",
            extra={"context": {"dry_run": dry_run, "max_iterations": max_iterations}},
        )
        try:
            await scan_loop.run(max_iterations=max_iterations, stop_event=stop_event)
        finally:
            stop_event.set()
            await asyncio.gather(*timers, return_exceptions=True)
            if dispatcher.pending:
                logger.info(f"Waiting for {dispatcher.pending} in-flight swaps")
            await dispatcher.drain()

        return {
            "iterations": scan_loop.iterations,
            "triggered": scan_loop.triggered,
            "errors": scan_loop.errors,
            "swaps": dispatcher.get_stats(),
            "rpc": provider.get_stats_summary(),
        }
    finally:
        await router.close()
        await ledger.close()
        await store.close()


@click.command()
@click.option("--log-level", "-l", default="INFO", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]))
@click.option("--json-logs/--no-json-logs", default=True)
@click.option(
    "--config-file", "-f",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML file with whitelist and settings documents (instead of MongoDB)",
)
@click.option(
    "--runtime-config",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Runtime tunables (default: config/runtime.yaml)",
)
@click.option("--port", "-p", type=int, default=None, help="Metrics port (overrides PORT)")
@click.option("--max-iterations", "-n", type=int, default=None, help="Stop after N scan iterations")
@click.option("--dry-run", is_flag=True, help="Log gate decisions without dispatching swaps")
def main(
    log_level: str,
    json_logs: bool,
    config_file: Optional[str],
    runtime_config: Optional[str],
    port: Optional[int],
    max_iterations: Optional[int],
    dry_run: bool,
) -> None:
    """LOOPARB Scanner - round-trip arbitrage over whitelisted tokens."""
    setup_logging(level=log_level, json_output=json_logs)
    set_global_context(service="looparb-scan", version=SERVICE_VERSION, cluster=CLUSTER)

    try:
        app_config = AppConfig.from_env(config_store_path=config_file)
        runtime = load_runtime_config(Path(runtime_config) if runtime_config else None)
    except StartupError as e:
        logger.error(f"Startup failed: {e}", extra={"context": {"code": e.code.value}})
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Invalid runtime config: {e}")
        sys.exit(1)

    if port is not None:
        app_config.port = port

    logger.info(
        "Starting LOOPARB Scanner",
        extra={"context": {
            "rpc_endpoints": len(app_config.rpc_urls),
            "port": app_config.port,
            "dry_run": dry_run,
            "max_iterations": max_iterations,
        }},
    )

    try:
        summary = asyncio.run(run_scanner(
            app_config,
            runtime,
            max_iterations=max_iterations,
            dry_run=dry_run,
        ))
    except StartupError as e:
        logger.error(
            f"Startup failed: {e}",
            extra={"context": {"code": e.code.value, **e.details}},
        )
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Scanner interrupted")
    except Exception as e:
        logger.error(f"Scanner error: {e}", exc_info=True)
        sys.exit(1)
    else:
        logger.info("Final session summary", extra={"context": summary})

    logger.info("Scanner stopped")


if __name__ == "__main__":
    main()
