"""JSON-file-backed implementation of the transactional store.

Meant for local use and demos. The whole store is one JSON document under
the data directory. A transaction loads it, works on the in-memory copy, and
on commit replaces the file in a single ``os.replace``; abort simply drops
the copy. Transactions against the same directory are serialized by an
exclusive ``flock`` on a lock file, held from ``begin`` to ``close``, so they
never conflict, across threads or processes.
"""

from __future__ import annotations

import fcntl
import json
import os
import re
import tempfile
import uuid
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import IO

from bookstore.domain.model.book import Book
from bookstore.domain.model.order import Order
from bookstore.domain.model.user import User
from bookstore.domain.repository.book_repository import BookRepository
from bookstore.domain.repository.order_repository import OrderRepository
from bookstore.domain.repository.store import Transaction, TransactionalStore
from bookstore.domain.repository.user_repository import UserRepository
from bookstore.infrastructure.persistence.documents import (
    book_from_document,
    book_to_document,
    order_from_document,
    order_to_document,
    user_from_document,
    user_to_document,
)

COLLECTIONS = ("books", "orders", "users")
STORE_FILE = "bookstore.json"
LOCK_FILE = ".bookstore.lock"

_ID_PATTERN = re.compile(r"[0-9a-f]{32}")


def _new_id() -> str:
    return uuid.uuid4().hex


def _encode(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class _Collection:
    """In-memory copy of one collection, keyed by ``_id``."""

    def __init__(self, records: list[dict]) -> None:
        self.docs: dict[str, dict] = {str(r["_id"]): r for r in records}
        self.dirty = False

    def put(self, doc: dict) -> None:
        self.docs[str(doc["_id"])] = doc
        self.dirty = True


# --- Repositories -------------------------------------------------------------


class JsonBookRepository(BookRepository):

    def __init__(self, books: _Collection) -> None:
        self._books = books

    def next_id(self) -> str:
        return _new_id()

    def get_by_id(self, book_id: str) -> Book | None:
        raw = self._books.docs.get(book_id)
        return book_from_document(raw) if raw else None

    def list_all(self) -> list[Book]:
        return [book_from_document(raw) for raw in self._books.docs.values()]

    def add(self, book: Book) -> None:
        self._books.put(book_to_document(book))

    def update_pricing(self, book: Book) -> None:
        raw = self._books.docs.get(book.id)
        if raw is None:
            return
        raw["price"] = book.price.amount
        raw["discount"] = book.discount.percent
        self._books.dirty = True

    def reserve_stock(self, book_id: str, quantity: int) -> Book | None:
        raw = self._books.docs.get(book_id)
        if raw is None or int(raw["quantity"]) < quantity:
            return None
        raw["quantity"] = int(raw["quantity"]) - quantity
        self._books.dirty = True
        return book_from_document(raw)

    def restock(self, book_id: str, quantity: int) -> bool:
        raw = self._books.docs.get(book_id)
        if raw is None:
            return False
        raw["quantity"] = int(raw["quantity"]) + quantity
        self._books.dirty = True
        return True


class JsonOrderRepository(OrderRepository):

    def __init__(self, orders: _Collection) -> None:
        self._orders = orders

    def next_id(self) -> str:
        return _new_id()

    def get_by_id(self, order_id: str) -> Order | None:
        raw = self._orders.docs.get(order_id)
        return order_from_document(raw) if raw else None

    def list_for_user(self, user_id: str) -> list[Order]:
        orders = [
            order_from_document(raw)
            for raw in self._orders.docs.values()
            if str(raw["user"]) == user_id
        ]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def save(self, order: Order) -> None:
        self._orders.put(order_to_document(order))


class JsonUserRepository(UserRepository):

    def __init__(self, users: _Collection) -> None:
        self._users = users

    def next_id(self) -> str:
        return _new_id()

    def get_by_id(self, user_id: str) -> User | None:
        raw = self._users.docs.get(user_id)
        return user_from_document(raw) if raw else None

    def save(self, user: User) -> None:
        self._users.put(user_to_document(user))


# --- Transaction & store ------------------------------------------------------


class JsonTransaction(Transaction):

    def __init__(self, store: JsonFileStore, lock_file: IO[str]) -> None:
        self._store = store
        self._lock_file = lock_file
        raw = store._load_raw()
        self._collections = {name: _Collection(raw.get(name, [])) for name in COLLECTIONS}
        self.books = JsonBookRepository(self._collections["books"])
        self.orders = JsonOrderRepository(self._collections["orders"])
        self.users = JsonUserRepository(self._collections["users"])

    def commit(self) -> None:
        if not any(c.dirty for c in self._collections.values()):
            return
        self._store._persist_raw(
            {name: list(c.docs.values()) for name, c in self._collections.items()}
        )
        for collection in self._collections.values():
            collection.dirty = False

    def abort(self) -> None:
        for collection in self._collections.values():
            collection.dirty = False

    def close(self) -> None:
        try:
            fcntl.flock(self._lock_file.fileno(), fcntl.LOCK_UN)
        finally:
            self._lock_file.close()


class JsonFileStore(TransactionalStore):

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir.resolve()
        self._ensure_file()

    def begin(self) -> Transaction:
        lock_file = open(self._data_dir / LOCK_FILE, "w")
        try:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            return JsonTransaction(self, lock_file)
        except BaseException:
            lock_file.close()
            raise

    def is_transient(self, exc: BaseException) -> bool:
        # Transactions are serialized, so there is nothing to retry.
        return False

    def is_valid_id(self, raw_id: object) -> bool:
        return isinstance(raw_id, str) and _ID_PATTERN.fullmatch(raw_id) is not None

    # --- File helpers ---------------------------------------------------------

    @property
    def path(self) -> Path:
        return self._data_dir / STORE_FILE

    def _load_raw(self) -> dict[str, list[dict]]:
        return json.loads(self.path.read_text(encoding="utf-8"))

    def _persist_raw(self, data: dict[str, list[dict]]) -> None:
        fd, temp_path = tempfile.mkstemp(dir=self._data_dir, prefix=".bookstore_", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, default=_encode)
                f.write("\n")
            os.replace(temp_path, self.path)
        except BaseException:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def _ensure_file(self) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)
        with open(self._data_dir / LOCK_FILE, "w") as lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            if not self.path.exists():
                self._persist_raw({name: [] for name in COLLECTIONS})
