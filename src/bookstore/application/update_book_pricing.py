"""Application service: Update Book Pricing use case."""

from __future__ import annotations

from bookstore.application.transaction import TransactionCoordinator
from bookstore.domain.exceptions import BookNotFoundError
from bookstore.domain.model.value_objects import Discount, Money
from bookstore.domain.repository.store import Transaction


class UpdateBookPricingHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(self, book_id: str, new_price: str, new_discount: str | None = None) -> None:
        """Update a book's price and, optionally, its discount.

        This does NOT affect any existing orders; they captured a
        price snapshot at placement time.
        """
        price = Money.of(new_price)

        def work(tx: Transaction) -> None:
            book = tx.books.get_by_id(book_id)
            if book is None:
                raise BookNotFoundError(book_id)
            discount = Discount.of(new_discount) if new_discount is not None else book.discount
            book.update_pricing(price, discount)
            tx.books.update_pricing(book)

        self._coordinator.run_in_transaction(work)
