"""Domain service: Order Pricing.

Pure computation with no repository or transaction access. This is the only
place order totals are computed; callers cannot supply their own totals.

Amounts are computed with Decimal and left unrounded. Rounding to cents
happens only when an amount is displayed (see ``Money.rounded``).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from bookstore.domain.model.value_objects import Discount, Money, Quantity

SHIPPING_FLAT_RATE = Money(Decimal("5.00"))
TAX_RATE = Decimal("0.08")


@dataclass(frozen=True)
class PriceLine:
    """One line to be priced: a book, how many, and its price snapshot."""

    book_id: str
    quantity: Quantity
    unit_price: Money
    discount: Discount

    @property
    def line_total(self) -> Money:
        return (self.unit_price * self.quantity.value).apply_discount(self.discount)


@dataclass(frozen=True)
class OrderPricing:
    subtotal: Money
    shipping_price: Money
    tax_price: Money
    total_price: Money


def price_order(lines: Sequence[PriceLine]) -> OrderPricing:
    """Compute subtotal, flat shipping, tax and grand total for *lines*."""
    subtotal = Money.zero()
    for line in lines:
        subtotal = subtotal + line.line_total

    shipping_price = SHIPPING_FLAT_RATE if lines else Money.zero()
    tax_price = subtotal * TAX_RATE

    return OrderPricing(
        subtotal=subtotal,
        shipping_price=shipping_price,
        tax_price=tax_price,
        total_price=subtotal + shipping_price + tax_price,
    )
