"""Integration tests for the PlaceOrder use case.

Uses the in-memory transactional store, no file I/O.
"""

import pytest

from bookstore.application.dto import OrderItemSpec
from bookstore.application.place_order import PlaceOrderHandler
from bookstore.application.transaction import RetryPolicy, TransactionCoordinator
from bookstore.application.update_book_pricing import UpdateBookPricingHandler
from bookstore.domain.exceptions import (
    BookNotFoundError,
    InsufficientInventoryError,
    UserNotFoundError,
    ValidationError,
)
from bookstore.domain.model.book import Book
from bookstore.domain.model.order import PaymentMethod, ShippingAddress
from bookstore.domain.model.user import User
from bookstore.domain.model.value_objects import Discount, Money
from tests.fakes import InMemoryStore

ADDRESS = ShippingAddress(name="Ada", street="1 Main St", city="Springfield", state="IL", zip_code="62701")


def _setup(books: list[Book] | None = None) -> tuple[PlaceOrderHandler, InMemoryStore]:
    """Build handler over an in-memory store, optionally pre-loaded with books."""
    if books is None:
        books = [
            Book(id="b1", title="Dune", author="Frank Herbert", price=Money.of("10.00"), quantity=5),
            Book(id="b2", title="Emma", author="Jane Austen", price=Money.of("12.00"), quantity=1,
                 discount=Discount.of(10)),
        ]
    store = InMemoryStore(books=books, users=[User(id="u1", name="Ada", email="ada@example.com")])
    coordinator = TransactionCoordinator(store, sleep=lambda seconds: None)
    return PlaceOrderHandler(store, coordinator, RetryPolicy(max_retries=3, retry_delay=0)), store


def _place(handler: PlaceOrderHandler, *specs: OrderItemSpec, user_id: str = "u1"):
    return handler.handle(
        user_id=user_id,
        item_specs=list(specs),
        shipping_address=ADDRESS,
        payment_method=PaymentMethod.CREDIT_CARD,
    )


class TestPlaceOrderHappyPath:

    def test_single_item_checkout(self):
        handler, store = _setup()
        dto = _place(handler, OrderItemSpec("b1", 2))

        assert dto.total_price == "26.60"
        assert dto.status == "Pending"
        assert store.book("b1").quantity == 3

    def test_persists_priced_order(self):
        handler, store = _setup()
        dto = _place(handler, OrderItemSpec("b1", 1), OrderItemSpec("b2", 1))

        order = store.order(dto.order_id)
        assert order.user_id == "u1"
        assert [item.book_id for item in order.items] == ["b1", "b2"]
        assert order.items[1].title == "Emma"
        assert order.items[1].discount == Discount.of(10)
        # 10.00 + 10.80 = 20.80; tax 1.664; shipping 5.00
        assert order.total_price == Money.of("27.464")
        assert dto.total_price == "27.46"

    def test_decrements_every_line(self):
        handler, store = _setup()
        _place(handler, OrderItemSpec("b1", 5), OrderItemSpec("b2", 1))
        assert store.book("b1").quantity == 0
        assert store.book("b2").quantity == 0

    def test_price_snapshot_survives_later_price_change(self):
        handler, store = _setup()
        dto = _place(handler, OrderItemSpec("b1", 2))

        coordinator = TransactionCoordinator(store)
        UpdateBookPricingHandler(coordinator).handle("b1", "99.00", "50")

        order = store.order(dto.order_id)
        assert order.items[0].unit_price == Money.of("10.00")
        assert order.items[0].discount == Discount.none()
        assert order.total_price == Money.of("26.60")

    def test_retries_after_transient_conflict(self):
        handler, store = _setup()
        store.injected_conflicts = 1

        dto = _place(handler, OrderItemSpec("b1", 2))

        assert store.begun == 2
        assert store.order_count() == 1
        assert store.order(dto.order_id).total_price == Money.of("26.60")
        assert store.book("b1").quantity == 3


class TestPlaceOrderAtomicity:

    def test_insufficient_stock_on_later_item_rolls_back_earlier_ones(self):
        handler, store = _setup()
        with pytest.raises(InsufficientInventoryError):
            _place(handler, OrderItemSpec("b1", 2), OrderItemSpec("b2", 3))

        assert store.book("b1").quantity == 5
        assert store.book("b2").quantity == 1
        assert store.order_count() == 0
        assert store.aborts == 1

    def test_insufficient_stock_message(self):
        handler, _ = _setup()
        with pytest.raises(InsufficientInventoryError) as exc_info:
            _place(handler, OrderItemSpec("b2", 3))

        err = exc_info.value
        assert str(err) == 'Insufficient inventory for "Emma". Requested: 3, available: 1'
        assert err.book_id == "b2"
        assert err.requested == 3
        assert err.available == 1

    def test_unknown_book(self):
        handler, store = _setup()
        with pytest.raises(BookNotFoundError, match="Book not found with ID: nope"):
            _place(handler, OrderItemSpec("b1", 1), OrderItemSpec("nope", 1))
        assert store.book("b1").quantity == 5

    def test_unknown_user(self):
        handler, store = _setup()
        with pytest.raises(UserNotFoundError, match="User not found: ghost"):
            _place(handler, OrderItemSpec("b1", 1), user_id="ghost")
        assert store.book("b1").quantity == 5
        assert store.order_count() == 0


class TestPlaceOrderValidation:

    @pytest.mark.parametrize(
        "specs, message",
        [
            ([], "at least one item"),
            ([OrderItemSpec("", 1)], "Book ID is required"),
            ([OrderItemSpec("not a valid id!", 1)], "Invalid book ID format"),
            ([OrderItemSpec("b1", 0)], "greater than 0"),
            ([OrderItemSpec("b1", -2)], "greater than 0"),
        ],
    )
    def test_bad_items_rejected_before_any_transaction(self, specs, message):
        handler, store = _setup()
        with pytest.raises(ValidationError, match=message):
            _place(handler, *specs)
        assert store.begun == 0

    def test_missing_shipping_address(self):
        handler, store = _setup()
        with pytest.raises(ValidationError, match="Shipping address is required"):
            handler.handle("u1", [OrderItemSpec("b1", 1)], None, PaymentMethod.PAYPAL)
        assert store.begun == 0

    def test_missing_payment_method(self):
        handler, store = _setup()
        with pytest.raises(ValidationError, match="Payment method is required"):
            handler.handle("u1", [OrderItemSpec("b1", 1)], ADDRESS, None)
        assert store.begun == 0
