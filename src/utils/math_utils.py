from decimal import Decimal, InvalidOperation, ROUND_FLOOR, localcontext
from typing import Union

DEFAULT_DECIMALS = 6

UINT256_MAX = 2 ** 256 - 1

# Limit prices that accept any fill
MARKET_BUY_PRICE = UINT256_MAX
MARKET_SELL_PRICE = 0


def to_fixed_point(value: Union[int, float, str, Decimal], decimals: int = DEFAULT_DECIMALS) -> int:
    """
    Scale a decimal quantity to an integer: floor(value * 10**decimals).

    Goes through Decimal(str(value)) so 0.1 scales to 100000, not 99999.

    Raises:
        ValueError: If value is negative or not finite, or decimals is negative
    """
    if decimals < 0:
        raise ValueError(f"decimals cannot be negative: {decimals}")

    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a number: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Value must be finite: {value}")
    if amount < 0:
        raise ValueError(f"Value cannot be negative: {value}")

    with localcontext() as ctx:
        # Wide enough for any uint256
        ctx.prec = 100
        return int(amount.scaleb(decimals).to_integral_value(rounding=ROUND_FLOOR))


def market_price(is_buy: bool) -> int:
    """Sentinel limit price for a market order."""
    return MARKET_BUY_PRICE if is_buy else MARKET_SELL_PRICE
