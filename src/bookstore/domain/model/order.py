"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its line items. Totals are always
computed by the pricing service from the line items; status changes follow
a fixed state machine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from bookstore.domain.exceptions import InvalidStateTransitionError, ValidationError
from bookstore.domain.model.value_objects import Discount, Money, Quantity
from bookstore.domain.service.pricing import PriceLine, price_order


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PROCESSING})


class PaymentMethod(Enum):
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    PAYPAL = "PayPal"
    CASH_ON_DELIVERY = "Cash on Delivery"

    @staticmethod
    def parse(raw: str) -> PaymentMethod:
        for method in PaymentMethod:
            if method.value.lower() == str(raw).strip().lower():
                return method
        accepted = ", ".join(m.value for m in PaymentMethod)
        raise ValidationError(f"Invalid payment method '{raw}'. Expected one of: {accepted}")


@dataclass(frozen=True)
class ShippingAddress:
    name: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str = "USA"
    phone: str | None = None

    def __post_init__(self) -> None:
        for label in ("name", "street", "city", "state", "zip_code"):
            value = getattr(self, label)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"Shipping address {label} is required")


@dataclass(frozen=True)
class OrderLineItem:
    """A book, the quantity ordered, and the price/discount at order time.

    Immutable: later catalog changes never reach an existing order.
    """

    book_id: str
    title: str
    quantity: Quantity
    unit_price: Money
    discount: Discount

    def to_price_line(self) -> PriceLine:
        return PriceLine(
            book_id=self.book_id,
            quantity=self.quantity,
            unit_price=self.unit_price,
            discount=self.discount,
        )

    @property
    def line_total(self) -> Money:
        return self.to_price_line().line_total


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.place()`` factory for new orders; it prices the line
    items.  The ``__init__`` is intentionally simple so repositories can
    reconstitute persisted orders without re-pricing them.
    """

    id: str
    user_id: str
    items: list[OrderLineItem]
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    shipping_price: Money
    tax_price: Money
    total_price: Money
    status: OrderStatus = OrderStatus.PENDING
    is_paid: bool = False
    paid_at: datetime | None = None
    is_delivered: bool = False
    delivered_at: datetime | None = None
    tracking_number: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def place(
        order_id: str,
        user_id: str,
        items: list[OrderLineItem],
        shipping_address: ShippingAddress,
        payment_method: PaymentMethod,
    ) -> Order:
        """Create a Pending order whose totals come from the pricing service."""
        if not items:
            raise ValidationError("Order must contain at least one item")

        pricing = price_order([item.to_price_line() for item in items])
        now = _utcnow()
        return Order(
            id=order_id,
            user_id=user_id,
            items=list(items),
            shipping_address=shipping_address,
            payment_method=payment_method,
            shipping_price=pricing.shipping_price,
            tax_price=pricing.tax_price,
            total_price=pricing.total_price,
            created_at=now,
            updated_at=now,
        )

    # --- State transitions ----------------------------------------------------

    def cancel(self) -> None:
        """Transition Pending|Processing -> Cancelled.

        Inventory restoration is coordinated by the cancellation handler in
        the same transaction.
        """
        if self.status not in CANCELLABLE_STATUSES:
            raise InvalidStateTransitionError(
                self.status.value,
                f"Cannot cancel order with status: {self.status.value}. "
                f"Only Pending or Processing orders can be cancelled.",
            )
        self._move_to(OrderStatus.CANCELLED)

    def advance_to(self, new_status: OrderStatus, tracking_number: str | None = None) -> None:
        """Move along the fulfillment path Pending -> Processing -> Shipped -> Delivered."""
        if new_status == OrderStatus.CANCELLED:
            raise InvalidStateTransitionError(
                self.status.value,
                "Orders are cancelled through the cancellation workflow, "
                "which also restores inventory",
            )
        if new_status not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidStateTransitionError(
                self.status.value,
                f"Cannot change order status from {self.status.value} to {new_status.value}",
            )

        if new_status == OrderStatus.SHIPPED and tracking_number:
            self.tracking_number = tracking_number
        if new_status == OrderStatus.DELIVERED:
            self.is_delivered = True
            self.delivered_at = _utcnow()
        self._move_to(new_status)

    # --- Computed properties --------------------------------------------------

    @property
    def subtotal(self) -> Money:
        return price_order([item.to_price_line() for item in self.items]).subtotal

    @property
    def items_count(self) -> int:
        return sum(item.quantity.value for item in self.items)

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id

    # --- Internal helpers -----------------------------------------------------

    def _move_to(self, status: OrderStatus) -> None:
        self.status = status
        self.updated_at = _utcnow()
