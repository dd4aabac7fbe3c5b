"""
dex/adapters/ - Routing engine adapters.

Adapters:
- jupiter: Jupiter v6 quote/swap API
"""

from dex.adapters.jupiter import (
    JupiterRouter,
    NO_ROUTE_ERROR_CODES,
    extract_program_error_code,
)

__all__ = [
    "JupiterRouter",
    "NO_ROUTE_ERROR_CODES",
    "extract_program_error_code",
]
