"""
chains/ - Ledger interaction layer.

Modules:
- providers: JSON-RPC provider with endpoint failover
- ledger: Solana balances, transaction submission and confirmation
- wallet: Operator keypair loading
"""

from chains.providers import (
    RPCProvider,
    RPCResponse,
    RPCStats,
)
from chains.ledger import LedgerClient
from chains.wallet import load_keypair

__all__ = [
    # Providers
    "RPCProvider",
    "RPCResponse",
    "RPCStats",
    # Ledger
    "LedgerClient",
    # Wallet
    "load_keypair",
]
