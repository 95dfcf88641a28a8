"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI/HTTP and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the customer asked for (book ID + quantity)."""

    book_id: str
    quantity: int


@dataclass(frozen=True)
class Requester:
    """Input: who is asking, as established by the authentication layer."""

    user_id: str
    is_admin: bool = False


@dataclass(frozen=True)
class PlacedOrderDTO:
    order_id: str
    total_price: str  # rounded to cents, e.g. "26.60"
    status: str


@dataclass(frozen=True)
class OrderStatusDTO:
    order_id: str
    status: str


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    book_id: str
    title: str
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    discount: str
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: str
    user_id: str
    status: str
    items: list[OrderLineItemDTO]
    subtotal: str
    shipping_price: str
    tax_price: str
    total_price: str
    payment_method: str
    items_count: int
    ship_to: str
    tracking_number: str | None
    created_at: str


@dataclass(frozen=True)
class BookDTO:
    id: str
    title: str
    author: str
    price: str
    discount: str
    net_price: str
    quantity: int
    isbn: str | None
