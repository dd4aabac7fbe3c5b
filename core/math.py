# PATH: core/math.py
"""
Math utilities for LOOPARB.

On-chain amounts are Python ints (arbitrary precision); display amounts are
Decimal. Floats are never used for money.
"""

from decimal import Decimal, InvalidOperation, ROUND_FLOOR, ROUND_HALF_UP
from typing import Union, Optional

Number = Union[str, int, float, Decimal]


def safe_decimal(value: Union[Number, None], default: Optional[Decimal] = Decimal("0")) -> Optional[Decimal]:
    """
    Safely convert value to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not its binary
    expansion.

    Args:
        value: Value to convert
        default: Default if conversion fails

    Returns:
        Decimal value
    """
    if value is None or isinstance(value, bool):
        return default

    try:
        if isinstance(value, Decimal):
            result = value
        else:
            result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return default

    if not result.is_finite():
        return default
    return result


def to_smallest_units(amount: Number, decimals: int) -> int:
    """
    Convert a display amount to the token's smallest unit.

    amount * 10**decimals, rounded half-up to the nearest integer.

    Args:
        amount: Amount in display units (e.g. 1.5 SOL)
        decimals: Token decimals

    Returns:
        Amount in smallest units (int)
    """
    amt = safe_decimal(amount, default=None)
    if amt is None:
        raise ValueError(f"Invalid amount: {amount!r}")
    scaled = amt.scaleb(decimals)
    return int(scaled.to_integral_value(rounding=ROUND_HALF_UP))


def from_smallest_units(amount: Union[str, int], decimals: int) -> Decimal:
    """
    Convert smallest units back to display units.

    Args:
        amount: Amount in smallest units
        decimals: Token decimals

    Returns:
        Display amount
    """
    return Decimal(int(amount)).scaleb(-decimals)


def slippage_pct_to_bps(slippage_pct: Number) -> int:
    """
    Convert a slippage percentage to integer basis points (1% -> 100 bps).
    """
    pct = safe_decimal(slippage_pct)
    return int((pct * 100).to_integral_value(rounding=ROUND_HALF_UP))


def floor_to_int(value: Number) -> int:
    """
    Floor a numeric value to int.

    For an integer spread s and any threshold t: t < s iff floor(t) < s,
    so flooring a fractional threshold keeps the comparison exact.
    """
    dec = safe_decimal(value, default=None)
    if dec is None:
        raise ValueError(f"Invalid number: {value!r}")
    return int(dec.to_integral_value(rounding=ROUND_FLOOR))


def format_amount(value: Decimal) -> str:
    """
    Render a display amount without trailing zeros (1.0 -> "1", 0.50 -> "0.5").
    """
    if value == value.to_integral_value():
        return str(value.quantize(Decimal(1)))
    return format(value.normalize(), "f")
