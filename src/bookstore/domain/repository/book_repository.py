"""Abstract repository for the Book aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (MongoDB, JSON, in-memory)
live in the infrastructure layer and are always bound to one
transaction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from bookstore.domain.model.book import Book


class BookRepository(ABC):

    @abstractmethod
    def next_id(self) -> str:
        """Generate a new unique book ID."""

    @abstractmethod
    def get_by_id(self, book_id: str) -> Book | None:
        """Return a book by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Book]:
        """Return every book in the catalog."""

    @abstractmethod
    def add(self, book: Book) -> None:
        """Insert a new book."""

    @abstractmethod
    def update_pricing(self, book: Book) -> None:
        """Persist a book's price and discount. Never touches ``quantity``."""

    @abstractmethod
    def reserve_stock(self, book_id: str, quantity: int) -> Book | None:
        """Decrement stock by *quantity* only if at least that much is available.

        A single conditional compare-and-decrement. Returns the updated book,
        or None when the book is missing or its stock is too low.
        """

    @abstractmethod
    def restock(self, book_id: str, quantity: int) -> bool:
        """Unconditionally increment stock by *quantity*.

        Returns False if no book matched *book_id*.
        """
