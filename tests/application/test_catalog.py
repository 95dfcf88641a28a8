"""Tests for the catalog and user seeding use cases."""

import pytest

from bookstore.application.add_book import AddBookHandler
from bookstore.application.add_user import AddUserHandler
from bookstore.application.restock_book import RestockBookHandler
from bookstore.application.show_inventory import ShowInventoryHandler
from bookstore.application.transaction import RetryPolicy, TransactionCoordinator
from bookstore.application.update_book_pricing import UpdateBookPricingHandler
from bookstore.domain.exceptions import BookNotFoundError, ValidationError
from bookstore.domain.model.book import Book
from bookstore.domain.model.user import Role
from bookstore.domain.model.value_objects import Discount, Money
from tests.fakes import InMemoryStore


def _setup() -> tuple[TransactionCoordinator, InMemoryStore]:
    store = InMemoryStore(
        books=[Book(id="b1", title="Dune", author="Frank Herbert", price=Money.of("10.00"), quantity=2, isbn="9780441013593")]
    )
    return TransactionCoordinator(store, sleep=lambda seconds: None), store


# ── Add book ─────────────────────────────────────────────────────────────────


class TestAddBook:

    def test_adds_book(self):
        coordinator, store = _setup()
        book = AddBookHandler(coordinator).handle(
            title="  Emma ", author="Jane Austen", price="8.50", quantity=4, discount="5", isbn="9780141439587"
        )
        stored = store.book(book.id)
        assert stored.title == "Emma"
        assert stored.price == Money.of("8.50")
        assert stored.discount == Discount.of(5)
        assert stored.quantity == 4
        assert stored.isbn == "9780141439587"

    def test_title_required(self):
        coordinator, _ = _setup()
        with pytest.raises(ValidationError, match="Title is required"):
            AddBookHandler(coordinator).handle(title=" ", author="x", price="1", quantity=1)

    def test_author_required(self):
        coordinator, _ = _setup()
        with pytest.raises(ValidationError, match="Author is required"):
            AddBookHandler(coordinator).handle(title="x", author="", price="1", quantity=1)

    def test_negative_stock_rejected(self):
        coordinator, store = _setup()
        with pytest.raises(ValidationError, match="cannot be negative"):
            AddBookHandler(coordinator).handle(title="x", author="y", price="1", quantity=-1)
        assert store.commits == 0


# ── Restock and pricing ──────────────────────────────────────────────────────


class TestRestockBook:

    def test_increments_stock(self):
        coordinator, store = _setup()
        book = RestockBookHandler(coordinator, RetryPolicy(retry_delay=0)).handle("b1", 3)
        assert book.quantity == 5
        assert store.book("b1").quantity == 5

    def test_unknown_book(self):
        coordinator, _ = _setup()
        with pytest.raises(BookNotFoundError):
            RestockBookHandler(coordinator).handle("nope", 3)

    def test_zero_rejected(self):
        coordinator, store = _setup()
        with pytest.raises(ValidationError):
            RestockBookHandler(coordinator).handle("b1", 0)
        assert store.begun == 0


class TestUpdateBookPricing:

    def test_updates_price_and_discount_but_not_stock(self):
        coordinator, store = _setup()
        UpdateBookPricingHandler(coordinator).handle("b1", "12.00", "20")
        book = store.book("b1")
        assert book.price == Money.of("12.00")
        assert book.discount == Discount.of(20)
        assert book.quantity == 2

    def test_keeps_discount_when_omitted(self):
        coordinator, store = _setup()
        UpdateBookPricingHandler(coordinator).handle("b1", "20", "10")
        UpdateBookPricingHandler(coordinator).handle("b1", "15")
        assert store.book("b1").discount == Discount.of(10)

    def test_unknown_book(self):
        coordinator, _ = _setup()
        with pytest.raises(BookNotFoundError):
            UpdateBookPricingHandler(coordinator).handle("nope", "1")


# ── Inventory and users ──────────────────────────────────────────────────────


class TestShowInventory:

    def test_lists_books(self):
        coordinator, _ = _setup()
        books = ShowInventoryHandler(coordinator).handle()
        assert len(books) == 1
        assert books[0].title == "Dune"
        assert books[0].price == "$10.00"
        assert books[0].discount == "0%"
        assert books[0].net_price == "$10.00"
        assert books[0].quantity == 2

    def test_net_price_reflects_discount(self):
        coordinator, _ = _setup()
        UpdateBookPricingHandler(coordinator).handle("b1", "10.00", "20")
        books = ShowInventoryHandler(coordinator).handle()
        assert books[0].discount == "20%"
        assert books[0].net_price == "$8.00"


class TestAddUser:

    def test_adds_user_with_lowercased_email(self):
        coordinator, _ = _setup()
        user = AddUserHandler(coordinator).handle("Ada", "Ada@Example.COM", role=Role.ADMIN)
        assert user.email == "ada@example.com"
        assert user.is_admin

    def test_invalid_email(self):
        coordinator, _ = _setup()
        with pytest.raises(ValidationError, match="valid email"):
            AddUserHandler(coordinator).handle("Ada", "not-an-email")
