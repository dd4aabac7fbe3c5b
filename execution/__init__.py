"""
LOOPARB Execution Layer.

This package contains the execution layer components:
- swap_executor: Router swap submission and outcome classification
- dispatcher: Bounded detached pool the scan loop hands swaps to
"""

from execution.swap_executor import (
    AttemptLabels,
    SwapExecutor,
    classify_result,
    explorer_link,
)
from execution.dispatcher import SwapDispatcher

__all__ = [
    # Executor
    "AttemptLabels",
    "SwapExecutor",
    "classify_result",
    "explorer_link",
    # Dispatcher
    "SwapDispatcher",
]
