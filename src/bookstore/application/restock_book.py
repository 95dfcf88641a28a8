"""Application service: Restock Book use case.

Adds units with the same atomic increment cancellations use. Stock is never
overwritten with an absolute value.
"""

from __future__ import annotations

import logging

from bookstore.application.transaction import RetryPolicy, TransactionCoordinator
from bookstore.domain.exceptions import BookNotFoundError
from bookstore.domain.model.book import Book
from bookstore.domain.model.value_objects import Quantity
from bookstore.domain.repository.store import Transaction

logger = logging.getLogger(__name__)


class RestockBookHandler:

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._retry_policy = retry_policy or RetryPolicy()

    def handle(self, book_id: str, quantity: int) -> Book:
        amount = Quantity(quantity)

        def work(tx: Transaction) -> Book:
            if not tx.books.restock(book_id, amount.value):
                raise BookNotFoundError(book_id)
            return tx.books.get_by_id(book_id)  # type: ignore[return-value]

        book = self._coordinator.run_in_transaction_with_retry(work, self._retry_policy)
        logger.info("Book %s restocked by %d, now %d", book_id, amount.value, book.quantity)
        return book
