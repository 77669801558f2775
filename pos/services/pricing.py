"""
Pricing and totals for a sale.

Everything here is pure and works on ``Decimal``. Amounts are rounded half-up
to cents at two points only: each line total and the discount amount. Tax is
always zero; the tax columns exist on the transaction but no tax engine feeds
them.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Tuple

from pos.utils.money import ZERO, round2, to_decimal


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal
    tax_percentage: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    payment_amount: Decimal
    change_amount: Decimal


def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    return round2(to_decimal(unit_price) * quantity)


def calculate_totals(
    lines: Iterable[Tuple[Decimal, int]],
    discount_percentage: Decimal,
    payment_amount: Decimal,
) -> Totals:
    """
    Compute the monetary fields of a transaction.

    Args:
        lines: (unit_price, quantity) pairs in cart order
        discount_percentage: Transaction-level discount, 0-100
        payment_amount: Amount tendered by the customer

    Returns:
        Totals with subtotal, discount, tax (zero), total and change
    """
    discount_percentage = to_decimal(discount_percentage)
    if discount_percentage < 0 or discount_percentage > 100:
        raise ValueError("discount_percentage must be between 0 and 100")

    subtotal = sum((line_total(price, qty) for price, qty in lines), ZERO)
    discount_amount = round2(subtotal * discount_percentage / 100)
    tax_percentage = ZERO
    tax_amount = ZERO
    total_amount = subtotal - discount_amount + tax_amount
    payment_amount = round2(payment_amount)
    change_amount = max(ZERO, payment_amount - total_amount)

    return Totals(
        subtotal=subtotal,
        discount_percentage=round2(discount_percentage),
        discount_amount=discount_amount,
        tax_percentage=tax_percentage,
        tax_amount=tax_amount,
        total_amount=total_amount,
        payment_amount=payment_amount,
        change_amount=change_amount,
    )
