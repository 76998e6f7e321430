from decimal import ROUND_HALF_UP, Decimal

from documents.choices import AccessorialType

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    if value in (None, ""):
        return ZERO
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def line_haul(rate_amount, quantity) -> Decimal:
    """Base revenue: rate per unit x units."""
    return to_money(Decimal(str(rate_amount or 0)) * Decimal(str(quantity or 0)))


def total_amount(rate_amount, quantity, charges) -> Decimal:
    """
    Recompute the total from its inputs.

    ``charges`` maps AccessorialType (or its value) to an amount. Unknown
    charge names are rejected so the fee set stays fixed.
    """
    fees = ZERO
    for name, amount in (charges or {}).items():
        AccessorialType(name)
        fees += to_money(amount)
    return to_money(line_haul(rate_amount, quantity) + fees)
