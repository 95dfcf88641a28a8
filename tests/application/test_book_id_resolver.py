"""Tests for the client book reference resolver and its cache."""

import logging
import re

from bookstore.application.book_id_resolver import BookIdResolver
from bookstore.domain.model.book import Book
from bookstore.domain.model.value_objects import Money

STORE_ID = re.compile(r"[0-9a-f]{32}")


class FakeClock:

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _book(book_id: str, isbn: str | None = None) -> Book:
    return Book(id=book_id, title="t", author="a", price=Money.of("1"), quantity=1, isbn=isbn)


def _setup(catalog: list[Book], ttl: float = 60) -> tuple[BookIdResolver, FakeClock, list[int]]:
    clock = FakeClock()
    loads: list[int] = []

    def load() -> list[Book]:
        loads.append(1)
        return list(catalog)

    resolver = BookIdResolver(
        load_catalog=load,
        is_store_id=lambda raw: isinstance(raw, str) and STORE_ID.fullmatch(raw) is not None,
        ttl_seconds=ttl,
        clock=clock,
    )
    return resolver, clock, loads


A = "a" * 32
B = "b" * 32


class TestResolve:

    def test_store_id_passes_through_without_loading(self):
        resolver, _, loads = _setup([_book(A)])
        assert resolver.resolve(B) == B
        assert loads == []

    def test_position_and_isbn(self):
        resolver, _, _ = _setup([_book(A), _book(B, isbn="9780441013593")])
        assert resolver.resolve("1") == A
        assert resolver.resolve(" 2 ") == B
        assert resolver.resolve("9780441013593") == B

    def test_unknown_reference(self):
        resolver, _, _ = _setup([_book(A)])
        assert resolver.resolve("7") is None


class TestCaching:

    def test_mapping_cached_until_ttl(self):
        resolver, clock, loads = _setup([_book(A)], ttl=60)
        resolver.resolve("1")
        clock.now = 59
        resolver.resolve("1")
        assert len(loads) == 1

        clock.now = 60
        resolver.resolve("1")
        assert len(loads) == 2

    def test_empty_catalog_reloads_every_time(self):
        resolver, _, loads = _setup([])
        resolver.resolve("1")
        resolver.resolve("1")
        assert len(loads) == 2

    def test_refresh_picks_up_new_books(self):
        catalog = [_book(A)]
        resolver, _, _ = _setup(catalog)
        assert resolver.resolve("2") is None

        catalog.append(_book(B))
        resolver.refresh()
        assert resolver.resolve("2") == B


class TestResolveOrCreate:

    def test_existing_reference_does_not_create(self):
        resolver, _, _ = _setup([_book(A)])
        created: list[str] = []
        assert resolver.resolve_or_create("1", lambda ref: created.append(ref) or B) == A
        assert created == []

    def test_missing_reference_creates_and_caches(self, caplog):
        resolver, _, loads = _setup([_book(A)])
        created: list[str] = []

        def create(ref: str) -> str:
            created.append(ref)
            return B

        with caplog.at_level(logging.INFO, logger="bookstore.application.book_id_resolver"):
            assert resolver.resolve_or_create("42", create) == B

        assert created == ["42"]
        assert resolver.resolve("42") == B
        assert len(loads) == 1
        assert any("Created book" in r.getMessage() for r in caplog.records)
