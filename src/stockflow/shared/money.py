"""Exact decimal amounts.

Prices travel as strings ("5000.00") through fields, events and the API so
they never pass through binary floating point.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from protean.exceptions import ValidationError

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def parse_amount(value, field: str = "price") -> Decimal:
    """Parse a non-negative amount with at most two fractional digits."""
    if isinstance(value, float):
        raise ValidationError({field: ["Amounts must be given as exact decimals, not floats"]})

    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError({field: [f"{value!r} is not a valid amount"]}) from None

    if not amount.is_finite():
        raise ValidationError({field: [f"{value!r} is not a valid amount"]})
    if amount < 0:
        raise ValidationError({field: ["Amount must not be negative"]})
    if amount.as_tuple().exponent < -2:
        raise ValidationError({field: ["Amount must have at most two decimal places"]})

    return amount.quantize(CENTS)


def format_amount(amount: Decimal) -> str:
    return str(Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP))


def line_subtotal(quantity: int, unit_price: Decimal) -> Decimal:
    return (Decimal(quantity) * unit_price).quantize(CENTS, rounding=ROUND_HALF_UP)
