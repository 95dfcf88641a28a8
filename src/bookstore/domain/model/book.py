"""Book aggregate — a catalog entry and its stock level.

The ``quantity`` field is the only value shared between concurrent
checkouts. It is never assigned directly by order workflows; stock moves
only through the repository's conditional decrement and increment
operations.
"""

from __future__ import annotations

from dataclasses import dataclass

from bookstore.domain.exceptions import ValidationError
from bookstore.domain.model.value_objects import Discount, Money


@dataclass
class Book:
    """A book in the catalog.

    Invariant: ``quantity`` is never negative.
    """

    id: str
    title: str
    author: str
    price: Money
    quantity: int = 0
    discount: Discount = Discount.none()
    isbn: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValidationError("Book quantity must be an integer")
        if self.quantity < 0:
            raise ValidationError("Quantity cannot be negative")

    @property
    def discounted_price(self) -> Money:
        return self.price.apply_discount(self.discount)

    def update_pricing(self, price: Money, discount: Discount) -> None:
        """Change catalog price and discount.

        Existing orders are unaffected: line items keep the snapshot taken
        when the order was placed.
        """
        self.price = price
        self.discount = discount
