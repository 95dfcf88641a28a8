"""Transactional store port.

A store hands out transactions. Every read and write a unit of work makes
goes through the repositories exposed on one ``Transaction`` so that they
commit or abort together.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from bookstore.domain.repository.book_repository import BookRepository
from bookstore.domain.repository.order_repository import OrderRepository
from bookstore.domain.repository.user_repository import UserRepository


class Transaction(ABC):
    """An open multi-document transaction and the repositories bound to it."""

    books: BookRepository
    orders: OrderRepository
    users: UserRepository

    @abstractmethod
    def commit(self) -> None:
        """Make every write in this transaction durable."""

    @abstractmethod
    def abort(self) -> None:
        """Discard every write. Safe to call after a failed commit."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying session. Called exactly once, on every path."""


class TransactionalStore(ABC):

    @abstractmethod
    def begin(self) -> Transaction:
        """Open a new transaction."""

    @abstractmethod
    def is_transient(self, exc: BaseException) -> bool:
        """True if *exc* is a failure that may succeed when the whole
        transaction is retried (write conflicts and the like)."""

    @abstractmethod
    def is_valid_id(self, raw_id: object) -> bool:
        """True if *raw_id* is syntactically a valid document ID for this store."""
