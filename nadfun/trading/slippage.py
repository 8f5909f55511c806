"""
Slippage bounds and unit conversion for router trades.

Percentages are converted to integer basis points before touching token
amounts, so bounds are exact integer arithmetic on wei values.
"""

import math
from decimal import ROUND_FLOOR, Decimal, localcontext
from typing import Union

from ..exceptions import InvalidArgumentError

BASIS_POINTS = 10000
# Enough precision for any uint256 amount
UINT256_DIGITS = 80


def _to_basis_points(slippage_percent: float) -> int:
    if not 0 <= slippage_percent < 100:
        raise InvalidArgumentError(
            "Slippage percent must be between 0 and 100 (exclusive)",
            {"slippage_percent": slippage_percent},
        )
    return math.floor(slippage_percent * 100)


def min_amount_out(amount: int, slippage_percent: float) -> int:
    """
    Minimum acceptable output for an expected ``amount``.

    Args:
        amount: Expected output amount (raw units)
        slippage_percent: Tolerance, e.g. 5.0 for 5% or 0.5 for 0.5%

    Returns:
        ``amount * (10000 - bp) // 10000``

    Example:
        >>> min_amount_out(100, 5.0)
        95
    """
    bp = _to_basis_points(slippage_percent)
    return amount * (BASIS_POINTS - bp) // BASIS_POINTS


def max_amount_in(amount: int, slippage_percent: float) -> int:
    """
    Maximum acceptable input for an expected ``amount``.

    Example:
        >>> max_amount_in(100, 5.0)
        105
    """
    bp = _to_basis_points(slippage_percent)
    return amount * (BASIS_POINTS + bp) // BASIS_POINTS


def calculate_slippage(amount: int, slippage_percent: float) -> int:
    """Deprecated alias of :func:`min_amount_out`."""
    return min_amount_out(amount, slippage_percent)


def actual_slippage(expected: int, actual: int) -> float:
    """
    Realized slippage in percent, rounded to 2 decimals with halves rounded
    toward positive infinity.

    Negative values mean the trade executed better than expected.
    """
    if expected == 0:
        raise InvalidArgumentError("Expected amount cannot be zero")

    percent = Decimal(expected - actual) * 100 / Decimal(expected)
    hundredths = (percent * 100 + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR)
    return float(hundredths / 100)


def within_tolerance(expected: int, actual: int, max_slippage_percent: float) -> bool:
    return abs(actual_slippage(expected, actual)) <= max_slippage_percent


# Unit conversion
def parse_units(value: Union[str, int, float, Decimal], decimals: int) -> int:
    """Human amount to raw integer units, truncating extra precision."""
    with localcontext() as ctx:
        ctx.prec = UINT256_DIGITS
        raw = Decimal(str(value)) * (Decimal(10) ** decimals)
        return int(raw)


def format_units(value: int, decimals: int) -> str:
    """Raw integer units to a plain decimal string."""
    with localcontext() as ctx:
        ctx.prec = UINT256_DIGITS
        amount = Decimal(value) / (Decimal(10) ** decimals)
        return format(amount.normalize(), "f")


def parse_ether(value: Union[str, int, float, Decimal]) -> int:
    return parse_units(value, 18)


def format_ether(value: int) -> str:
    return format_units(value, 18)
