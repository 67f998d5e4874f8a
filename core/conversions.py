"""Unit conversion helpers shared across the exchange.


- round2 / round8 quantize USD and crypto amounts (ROUND_HALF_UP).
- estimate converts coins to USD at a coins-per-USD rate.
- usd_to_crypto converts a USD amount to crypto units at a USD price.

All arithmetic is Decimal; floats are converted through str() first.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from .errors import InvalidInput

CENT = Decimal("0.01")
SATOSHI = Decimal("0.00000001")


def to_decimal(value, field: str = "value") -> Decimal:
    """
    Coerce a request value to a finite Decimal, or raise InvalidInput
    """
    if value is None or isinstance(value, bool):
        raise InvalidInput(f"{field} required")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidInput(f"{field} must be a number")
    if not amount.is_finite():
        raise InvalidInput(f"{field} must be a finite number")
    return amount


def round2(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def round8(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(SATOSHI, rounding=ROUND_HALF_UP)


def estimate(coins, rate) -> Decimal:
    """
    USD preview for a coin amount: round2(coins / rate). Pure, no balance check.
    """
    coins = to_decimal(coins, "coins")
    if coins < 0:
        raise InvalidInput("coins must be non-negative")
    rate = to_decimal(rate, "rate")
    if rate <= 0:
        raise InvalidInput("rate must be positive")
    return round2(coins / rate)


def usd_to_crypto(amount_usd, price_usd) -> Decimal:
    """
    Crypto units bought by amount_usd at price_usd per unit, to 8 decimals
    """
    price = to_decimal(price_usd, "price")
    if price <= 0:
        raise InvalidInput("price must be positive")
    return round8(to_decimal(amount_usd, "amount_usd") / price)
