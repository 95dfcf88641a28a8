"""Unit tests for the Order aggregate and its business rules."""

import pytest

from bookstore.domain.exceptions import InvalidStateTransitionError, ValidationError
from bookstore.domain.model.order import (
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentMethod,
    ShippingAddress,
)
from bookstore.domain.model.value_objects import Discount, Money, Quantity


def _make_item(title: str = "Dune", qty: int = 1, price: str = "10.00", discount: str = "0") -> OrderLineItem:
    """Helper to build a valid line item."""
    return OrderLineItem(
        book_id="b1",
        title=title,
        quantity=Quantity(qty),
        unit_price=Money.of(price),
        discount=Discount.of(discount),
    )


def _address() -> ShippingAddress:
    return ShippingAddress(name="Ada", street="1 Main St", city="Springfield", state="IL", zip_code="62701")


def _place(*items: OrderLineItem) -> Order:
    return Order.place(
        order_id="o1",
        user_id="u1",
        items=list(items) or [_make_item()],
        shipping_address=_address(),
        payment_method=PaymentMethod.CREDIT_CARD,
    )


# ── Placement ────────────────────────────────────────────────────────────────


class TestOrderPlacement:

    def test_happy_path(self):
        order = _place(_make_item(qty=2, price="10.00"))
        assert order.status == OrderStatus.PENDING
        assert order.user_id == "u1"
        assert order.shipping_price == Money.of("5.00")
        assert order.tax_price == Money.of("1.60")
        assert order.total_price == Money.of("26.60")
        assert not order.is_paid
        assert not order.is_delivered

    def test_subtotal_and_item_count(self):
        order = _place(_make_item(qty=3, price="12.00", discount="10"), _make_item(title="Emma", qty=2))
        assert order.subtotal == Money.of("42.40")
        assert order.items_count == 5

    def test_empty_order_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.place(
                order_id="o1",
                user_id="u1",
                items=[],
                shipping_address=_address(),
                payment_method=PaymentMethod.PAYPAL,
            )

    def test_ownership(self):
        order = _place()
        assert order.is_owned_by("u1")
        assert not order.is_owned_by("u2")


# ── Cancellation ─────────────────────────────────────────────────────────────


class TestOrderCancellation:

    @pytest.mark.parametrize("status", [OrderStatus.PENDING, OrderStatus.PROCESSING])
    def test_cancellable_statuses(self, status):
        order = _place()
        order.status = status
        order.cancel()
        assert order.status == OrderStatus.CANCELLED

    @pytest.mark.parametrize(
        "status", [OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED]
    )
    def test_other_statuses_rejected(self, status):
        order = _place()
        order.status = status
        with pytest.raises(InvalidStateTransitionError, match=f"Cannot cancel order with status: {status.value}"):
            order.cancel()
        assert order.status == status

    def test_cancel_touches_updated_at(self):
        order = _place()
        before = order.updated_at
        order.cancel()
        assert order.updated_at >= before


# ── Fulfilment ───────────────────────────────────────────────────────────────


class TestOrderFulfilment:

    def test_full_fulfilment_path(self):
        order = _place()
        order.advance_to(OrderStatus.PROCESSING)
        order.advance_to(OrderStatus.SHIPPED, tracking_number="1Z999")
        order.advance_to(OrderStatus.DELIVERED)
        assert order.status == OrderStatus.DELIVERED
        assert order.tracking_number == "1Z999"
        assert order.is_delivered
        assert order.delivered_at is not None

    def test_skipping_a_step_rejected(self):
        order = _place()
        with pytest.raises(InvalidStateTransitionError, match="from Pending to Shipped"):
            order.advance_to(OrderStatus.SHIPPED)

    def test_cancel_through_advance_rejected(self):
        order = _place()
        with pytest.raises(InvalidStateTransitionError, match="cancellation workflow"):
            order.advance_to(OrderStatus.CANCELLED)
        assert order.status == OrderStatus.PENDING

    def test_delivered_is_terminal(self):
        order = _place()
        order.status = OrderStatus.DELIVERED
        with pytest.raises(InvalidStateTransitionError):
            order.advance_to(OrderStatus.PROCESSING)


# ── Supporting value types ───────────────────────────────────────────────────


class TestShippingAddressAndPayment:

    def test_missing_field_rejected(self):
        with pytest.raises(ValidationError, match="city is required"):
            ShippingAddress(name="Ada", street="1 Main St", city=" ", state="IL", zip_code="62701")

    def test_default_country(self):
        assert _address().country == "USA"

    def test_payment_method_parse_is_case_insensitive(self):
        assert PaymentMethod.parse("paypal") == PaymentMethod.PAYPAL
        assert PaymentMethod.parse(" Cash on delivery ") == PaymentMethod.CASH_ON_DELIVERY

    def test_unknown_payment_method_rejected(self):
        with pytest.raises(ValidationError, match="Invalid payment method 'Bitcoin'"):
            PaymentMethod.parse("Bitcoin")
