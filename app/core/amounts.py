"""
USDT amount handling.

Amounts travel through the API as decimals and are stored as integer base
units of 10^-8 USDT, so that every balance update is exact and can be done
as a single SQL increment.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from app.core.exceptions import InvalidInput

AMOUNT_DECIMALS = 8
UNITS_PER_USDT = 10 ** AMOUNT_DECIMALS
_QUANTUM = Decimal(1).scaleb(-AMOUNT_DECIMALS)

# Keeps base units well inside a signed 64-bit SQLite INTEGER
MAX_AMOUNT = Decimal("1000000000")

# Largest value a SQLite INTEGER column holds before arithmetic turns it REAL
MAX_BALANCE_UNITS = 2 ** 63 - 1


def parse_amount(value: Any) -> Decimal:
    """
    Parse a positive USDT amount.

    Accepts Decimal, int, float or numeric strings. Raises InvalidInput for
    non-numeric, non-finite or non-positive values and for values with more
    than 8 fractional digits.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidInput("Amount must be a number")

    try:
        # str() keeps floats like 0.1 at their shortest repr
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidInput(f"Amount must be a number, got {value!r}")

    if not amount.is_finite():
        raise InvalidInput("Amount must be a finite number")
    if amount <= 0:
        raise InvalidInput("Amount must be greater than 0")
    if amount > MAX_AMOUNT:
        raise InvalidInput(f"Amount must not exceed {MAX_AMOUNT}")
    if amount.normalize().as_tuple().exponent < -AMOUNT_DECIMALS:
        raise InvalidInput(f"Amount supports at most {AMOUNT_DECIMALS} decimal places")

    return amount


def to_units(amount: Decimal) -> int:
    return int(amount.scaleb(AMOUNT_DECIMALS).to_integral_value())


def from_units(units: Any) -> Decimal:
    if units is None:
        return Decimal(0).quantize(_QUANTUM)
    return (Decimal(int(units)) / UNITS_PER_USDT).quantize(_QUANTUM)
