"""Application service: Add Book use case."""

from __future__ import annotations

from bookstore.application.transaction import TransactionCoordinator
from bookstore.domain.exceptions import ValidationError
from bookstore.domain.model.book import Book
from bookstore.domain.model.value_objects import Discount, Money
from bookstore.domain.repository.store import Transaction


class AddBookHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(
        self,
        title: str,
        author: str,
        price: str,
        quantity: int,
        discount: str = "0",
        isbn: str | None = None,
    ) -> Book:
        """Add a new book to the catalog with an initial stock level."""
        if not title or not title.strip():
            raise ValidationError("Title is required")
        if not author or not author.strip():
            raise ValidationError("Author is required")

        money = Money.of(price)
        pct = Discount.of(discount)

        def work(tx: Transaction) -> Book:
            book = Book(
                id=tx.books.next_id(),
                title=title.strip(),
                author=author.strip(),
                price=money,
                quantity=quantity,
                discount=pct,
                isbn=isbn.strip() if isbn else None,
            )
            tx.books.add(book)
            return book

        return self._coordinator.run_in_transaction(work)
