"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from bookstore.application.dto import BookDTO
from bookstore.application.transaction import TransactionCoordinator


class ShowInventoryHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(self) -> list[BookDTO]:
        books = self._coordinator.run_in_transaction(lambda tx: tx.books.list_all())
        return [
            BookDTO(
                id=book.id,
                title=book.title,
                author=book.author,
                price=str(book.price),
                discount=str(book.discount),
                net_price=str(book.discounted_price),
                quantity=book.quantity,
                isbn=book.isbn,
            )
            for book in books
        ]
