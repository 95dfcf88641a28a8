"""Book ID resolver: maps client-side book references to store IDs.

Clients may refer to a book by its 1-based catalog position, by ISBN, or by
its real store ID. The mapping is cached for a bounded time and refreshed
lazily. Creating a book for an unknown reference is a separate, explicitly
logged operation and never happens inside ``resolve``.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from bookstore.domain.model.book import Book

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60


class BookIdResolver:

    def __init__(
        self,
        load_catalog: Callable[[], list[Book]],
        is_store_id: Callable[[object], bool],
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._load_catalog = load_catalog
        self._is_store_id = is_store_id
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._mapping: dict[str, str] = {}
        self._loaded_at: float | None = None

    def resolve(self, client_id: str) -> str | None:
        """Return the store ID for *client_id*, or None if it is unknown."""
        client_id = str(client_id).strip()
        if self._is_store_id(client_id):
            return client_id
        if self._is_stale():
            self.refresh()
        return self._mapping.get(client_id)

    def resolve_or_create(self, client_id: str, create: Callable[[str], str]) -> str:
        """Resolve *client_id*, creating a book through *create* on a miss."""
        book_id = self.resolve(client_id)
        if book_id is not None:
            return book_id

        logger.info("No book mapped to client ID %r; creating one", client_id)
        book_id = create(client_id)
        self._mapping[str(client_id).strip()] = book_id
        logger.info("Created book %s for client ID %r", book_id, client_id)
        return book_id

    def refresh(self) -> None:
        books = self._load_catalog()
        mapping: dict[str, str] = {}
        for position, book in enumerate(books, start=1):
            mapping[str(position)] = book.id
            if book.isbn:
                mapping[book.isbn] = book.id
        self._mapping = mapping
        self._loaded_at = self._clock()
        logger.debug("Book ID mapping refreshed with %d book(s)", len(books))

    def _is_stale(self) -> bool:
        if self._loaded_at is None or not self._mapping:
            return True
        return self._clock() - self._loaded_at >= self._ttl_seconds
