"""Application service: Cancel Order use case.

Pending and Processing orders can be cancelled by their owner or an admin.
Every line item's quantity goes back into stock in the same transaction
that marks the order Cancelled, so a second cancellation fails on the
status guard and never restocks twice.
"""

from __future__ import annotations

import logging

from bookstore.application.dto import OrderStatusDTO, Requester
from bookstore.application.transaction import RetryPolicy, TransactionCoordinator
from bookstore.domain.exceptions import NotAuthorizedError, OrderNotFoundError
from bookstore.domain.model.order import Order
from bookstore.domain.repository.store import Transaction

logger = logging.getLogger(__name__)


class CancelOrderHandler:

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._retry_policy = retry_policy or RetryPolicy()

    def handle(self, order_id: str, requester: Requester) -> OrderStatusDTO:
        def work(tx: Transaction) -> Order:
            return self._cancel(tx, order_id, requester)

        order = self._coordinator.run_in_transaction_with_retry(work, self._retry_policy)
        logger.info("Order %s cancelled by user %s", order.id, requester.user_id)
        return OrderStatusDTO(order_id=order.id, status=order.status.value)

    @staticmethod
    def _cancel(tx: Transaction, order_id: str, requester: Requester) -> Order:
        order = tx.orders.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)

        if not requester.is_admin and not order.is_owned_by(requester.user_id):
            raise NotAuthorizedError("Not authorized to cancel this order")

        # Raises InvalidStateTransitionError unless Pending or Processing.
        order.cancel()

        for item in order.items:
            if not tx.books.restock(item.book_id, item.quantity.value):
                logger.warning(
                    "Book %s from order %s no longer exists; %d unit(s) not restocked",
                    item.book_id,
                    order.id,
                    item.quantity.value,
                )

        tx.orders.save(order)
        return order
