"""
chains/wallet.py - Operator keypair loading.
"""

import json
import re

from solders.keypair import Keypair

from core.exceptions import ErrorCode, StartupError

# 64 secret-key bytes encode to 86-88 base58 characters
_BASE58_KEYPAIR = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{86,88}$")


def load_keypair(secret: str) -> Keypair:
    """
    Load the operator keypair.

    Accepts a base58 secret key (wallet export format) or a JSON byte array
    (solana-keygen file contents).

    Raises:
        StartupError: secret cannot be decoded into a keypair
    """
    secret = secret.strip()
    try:
        if secret.startswith("["):
            return Keypair.from_bytes(bytes(json.loads(secret)))
        if not _BASE58_KEYPAIR.match(secret):
            raise ValueError("not a base58 keypair")
        return Keypair.from_base58_string(secret)
    except Exception as e:
        raise StartupError(
            f"Invalid operator keypair: {type(e).__name__}",
            code=ErrorCode.STARTUP_INVALID_CREDENTIALS,
        ) from e
