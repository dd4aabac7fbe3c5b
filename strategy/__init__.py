"""Strategy package for LOOPARB."""

from strategy.settings_cache import SettingsCache
from strategy.quote_evaluator import QuoteEvaluator
from strategy.gates import (
    ExecutionGate,
    GateResult,
    calculate_spread,
    gate_spread_threshold,
    should_execute,
)
from strategy.scan_loop import ScanLoop
from strategy.scheduler import run_periodic

__all__ = [
    "SettingsCache",
    "QuoteEvaluator",
    "ExecutionGate",
    "GateResult",
    "calculate_spread",
    "gate_spread_threshold",
    "should_execute",
    "ScanLoop",
    "run_periodic",
]
