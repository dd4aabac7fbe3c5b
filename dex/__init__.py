"""
dex/ - Routing engine layer.

Modules:
- router: Router protocol used by the scan loop
- adapters.jupiter: Jupiter v6 implementation
- token_list: Token catalog feed
"""

from dex.router import Router
from dex.adapters.jupiter import JupiterRouter
from dex.token_list import fetch_token_catalog, parse_token_catalog

__all__ = [
    "Router",
    "JupiterRouter",
    "fetch_token_catalog",
    "parse_token_catalog",
]
