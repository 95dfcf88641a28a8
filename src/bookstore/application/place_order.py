"""Application service: Place Order use case.

Validates the request up front, then inside one transaction: confirms the
user, reserves stock for each item in input order with a conditional
decrement, snapshots prices, and saves a priced Pending order. Any failure
aborts the transaction, so no partial stock decrement survives.
"""

from __future__ import annotations

import logging

from bookstore.application.dto import OrderItemSpec, PlacedOrderDTO
from bookstore.application.transaction import RetryPolicy, TransactionCoordinator
from bookstore.domain.exceptions import (
    BookNotFoundError,
    InsufficientInventoryError,
    UserNotFoundError,
    ValidationError,
)
from bookstore.domain.model.order import Order, OrderLineItem, PaymentMethod, ShippingAddress
from bookstore.domain.model.value_objects import Quantity
from bookstore.domain.repository.store import Transaction, TransactionalStore

logger = logging.getLogger(__name__)


class PlaceOrderHandler:

    def __init__(
        self,
        store: TransactionalStore,
        coordinator: TransactionCoordinator,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._store = store
        self._coordinator = coordinator
        self._retry_policy = retry_policy or RetryPolicy()

    def handle(
        self,
        user_id: str,
        item_specs: list[OrderItemSpec],
        shipping_address: ShippingAddress | None,
        payment_method: PaymentMethod | None,
    ) -> PlacedOrderDTO:
        self._validate(item_specs, shipping_address, payment_method)

        def work(tx: Transaction) -> Order:
            return self._place(tx, user_id, item_specs, shipping_address, payment_method)

        order = self._coordinator.run_in_transaction_with_retry(work, self._retry_policy)
        logger.info(
            "Order %s placed by user %s: %d item(s), total %s",
            order.id,
            user_id,
            len(order.items),
            order.total_price,
        )
        return PlacedOrderDTO(
            order_id=order.id,
            total_price=str(order.total_price.rounded()),
            status=order.status.value,
        )

    # --- Validation (before any transaction) ----------------------------------

    def _validate(
        self,
        item_specs: list[OrderItemSpec],
        shipping_address: ShippingAddress | None,
        payment_method: PaymentMethod | None,
    ) -> None:
        if not item_specs:
            raise ValidationError("Order must contain at least one item")

        for spec in item_specs:
            if not spec.book_id:
                raise ValidationError("Book ID is required for all items")
            if not self._store.is_valid_id(spec.book_id):
                raise ValidationError(f"Invalid book ID format: {spec.book_id}")
            Quantity(spec.quantity)

        if shipping_address is None:
            raise ValidationError("Shipping address is required")
        if payment_method is None:
            raise ValidationError("Payment method is required")

    # --- Transaction body -----------------------------------------------------

    @staticmethod
    def _place(
        tx: Transaction,
        user_id: str,
        item_specs: list[OrderItemSpec],
        shipping_address: ShippingAddress,
        payment_method: PaymentMethod,
    ) -> Order:
        if tx.users.get_by_id(user_id) is None:
            raise UserNotFoundError(user_id)

        line_items: list[OrderLineItem] = []

        # One item at a time, in input order.
        for spec in item_specs:
            book = tx.books.reserve_stock(spec.book_id, spec.quantity)
            if book is None:
                current = tx.books.get_by_id(spec.book_id)
                if current is None:
                    raise BookNotFoundError(spec.book_id)
                raise InsufficientInventoryError(
                    book_id=spec.book_id,
                    title=current.title,
                    requested=spec.quantity,
                    available=current.quantity,
                )

            line_items.append(
                OrderLineItem(
                    book_id=book.id,
                    title=book.title,
                    quantity=Quantity(spec.quantity),
                    unit_price=book.price,  # <-- price snapshot
                    discount=book.discount,
                )
            )

        order = Order.place(
            order_id=tx.orders.next_id(),
            user_id=user_id,
            items=line_items,
            shipping_address=shipping_address,
            payment_method=payment_method,
        )
        tx.orders.save(order)
        return order
