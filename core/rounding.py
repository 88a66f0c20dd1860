"""
Rounding shared by every reported number.

Dashboard values are rounded half away from zero at a fixed number of
decimals, using the exact binary value of the float; whole-number displays
round halves up towards +inf.
"""
import math
from decimal import ROUND_HALF_UP, Decimal, localcontext


def round_half_up(value: float, decimals: int = 0) -> float:
    """Round to `decimals` places with ties away from zero; non-finite values pass through."""
    value = float(value)
    if not math.isfinite(value):
        return value

    with localcontext() as ctx:
        # wide enough for any float quantized to a few decimals
        ctx.prec = 400
        quantum = Decimal(1).scaleb(-decimals)
        return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def round_to_int(value: float) -> int:
    """Nearest integer, halves rounded up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))
