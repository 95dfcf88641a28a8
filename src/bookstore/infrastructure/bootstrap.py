"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers and
the only one that reads settings. Every other module depends only on
abstractions.
"""

from __future__ import annotations

from functools import lru_cache

from bookstore.application.add_book import AddBookHandler
from bookstore.application.add_user import AddUserHandler
from bookstore.application.book_id_resolver import BookIdResolver
from bookstore.application.cancel_order import CancelOrderHandler
from bookstore.application.place_order import PlaceOrderHandler
from bookstore.application.restock_book import RestockBookHandler
from bookstore.application.show_inventory import ShowInventoryHandler
from bookstore.application.show_order import ListOrdersHandler, ShowOrderHandler
from bookstore.application.transaction import RetryPolicy, TransactionCoordinator
from bookstore.application.update_book_pricing import UpdateBookPricingHandler
from bookstore.application.update_order_status import UpdateOrderStatusHandler
from bookstore.domain.repository.store import TransactionalStore
from bookstore.infrastructure.api.orders_api import OrdersApi
from bookstore.infrastructure.config import Settings
from bookstore.infrastructure.persistence.json_store import JsonFileStore
from bookstore.infrastructure.persistence.mongo_store import MongoStore


@lru_cache(maxsize=None)
def settings() -> Settings:
    return Settings.from_env()


@lru_cache(maxsize=None)
def store() -> TransactionalStore:
    cfg = settings()
    if cfg.backend == "mongo":
        mongo = MongoStore.connect(cfg.mongo_url, cfg.mongo_db, cfg.tx_timeout_ms)
        mongo.ensure_indexes()
        return mongo
    return JsonFileStore(cfg.data_dir)


def coordinator() -> TransactionCoordinator:
    return TransactionCoordinator(store())


def retry_policy() -> RetryPolicy:
    cfg = settings()
    return RetryPolicy(max_retries=cfg.tx_max_retries, retry_delay=cfg.tx_retry_delay)


# --- Order handlers -----------------------------------------------------------


def place_order_handler() -> PlaceOrderHandler:
    return PlaceOrderHandler(store(), coordinator(), retry_policy())


def cancel_order_handler() -> CancelOrderHandler:
    return CancelOrderHandler(coordinator(), retry_policy())


def show_order_handler() -> ShowOrderHandler:
    return ShowOrderHandler(coordinator())


def list_orders_handler() -> ListOrdersHandler:
    return ListOrdersHandler(coordinator())


def update_order_status_handler() -> UpdateOrderStatusHandler:
    return UpdateOrderStatusHandler(coordinator())


def orders_api() -> OrdersApi:
    return OrdersApi(
        place_order=place_order_handler(),
        cancel_order=cancel_order_handler(),
        include_error_detail=not settings().is_production,
    )


# --- Catalog & users ----------------------------------------------------------


def add_book_handler() -> AddBookHandler:
    return AddBookHandler(coordinator())


def restock_book_handler() -> RestockBookHandler:
    return RestockBookHandler(coordinator(), retry_policy())


def update_book_pricing_handler() -> UpdateBookPricingHandler:
    return UpdateBookPricingHandler(coordinator())


def show_inventory_handler() -> ShowInventoryHandler:
    return ShowInventoryHandler(coordinator())


def add_user_handler() -> AddUserHandler:
    return AddUserHandler(coordinator())


def book_id_resolver() -> BookIdResolver:
    coord = coordinator()
    return BookIdResolver(
        load_catalog=lambda: coord.run_in_transaction(lambda tx: tx.books.list_all()),
        is_store_id=store().is_valid_id,
    )
