"""Application service: Update Order Status use case (admin).

Moves an order along Pending -> Processing -> Shipped -> Delivered.
Cancellation is not available here; it goes through CancelOrderHandler so
that stock is restored in the same transaction.
"""

from __future__ import annotations

import logging

from bookstore.application.dto import OrderStatusDTO
from bookstore.application.transaction import TransactionCoordinator
from bookstore.domain.exceptions import OrderNotFoundError, ValidationError
from bookstore.domain.model.order import Order, OrderStatus
from bookstore.domain.repository.store import Transaction

logger = logging.getLogger(__name__)


def parse_status(raw: str) -> OrderStatus:
    for status in OrderStatus:
        if status.value.lower() == raw.strip().lower():
            return status
    raise ValidationError(f"Unknown order status '{raw}'")


class UpdateOrderStatusHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(
        self,
        order_id: str,
        new_status: OrderStatus,
        tracking_number: str | None = None,
    ) -> OrderStatusDTO:
        def work(tx: Transaction) -> tuple[Order, OrderStatus]:
            order = tx.orders.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            previous = order.status
            order.advance_to(new_status, tracking_number=tracking_number)
            tx.orders.save(order)
            return order, previous

        order, previous = self._coordinator.run_in_transaction(work)
        logger.info(
            "Order %s status changed %s -> %s",
            order.id,
            previous.value,
            order.status.value,
        )
        return OrderStatusDTO(order_id=order.id, status=order.status.value)
