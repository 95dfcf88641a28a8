"""MongoDB implementation of the transactional store.

Every repository call passes the transaction's ``ClientSession`` so reads and
writes belong to one multi-document transaction. Requires a replica set or
sharded cluster (MongoDB transactions are unavailable on standalone servers).
"""

from __future__ import annotations

import logging
from decimal import Decimal

from bson import ObjectId
from bson.codec_options import CodecOptions, TypeCodec, TypeRegistry
from bson.decimal128 import Decimal128
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.client_session import ClientSession
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import OperationFailure, PyMongoError
from pymongo.read_concern import ReadConcern
from pymongo.write_concern import WriteConcern

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

logger = logging.getLogger(__name__)

WRITE_CONFLICT = 112
# NoSuchTransaction: the server reaped the transaction, typically because it
# outlived transactionLifetimeLimitSeconds.
NO_SUCH_TRANSACTION = 251
TRANSIENT_ERROR_CODES = frozenset({WRITE_CONFLICT, NO_SUCH_TRANSACTION})
TRANSIENT_TRANSACTION_LABEL = "TransientTransactionError"


class DecimalCodec(TypeCodec):
    """Store Python Decimals as BSON Decimal128 and read them back."""

    python_type = Decimal
    bson_type = Decimal128

    def transform_python(self, value: Decimal) -> Decimal128:
        return Decimal128(value)

    def transform_bson(self, value: Decimal128) -> Decimal:
        return value.to_decimal()


CODEC_OPTIONS = CodecOptions(type_registry=TypeRegistry([DecimalCodec()]), tz_aware=True)


def _oid(value: str) -> ObjectId | str:
    return ObjectId(value) if ObjectId.is_valid(value) else value


# --- Repositories -------------------------------------------------------------


class MongoBookRepository(BookRepository):

    def __init__(self, collection: Collection, session: ClientSession) -> None:
        self._books = collection
        self._session = session

    def next_id(self) -> str:
        return str(ObjectId())

    def get_by_id(self, book_id: str) -> Book | None:
        doc = self._books.find_one({"_id": _oid(book_id)}, session=self._session)
        return book_from_document(doc) if doc else None

    def list_all(self) -> list[Book]:
        cursor = self._books.find({}, session=self._session).sort("_id", ASCENDING)
        return [book_from_document(doc) for doc in cursor]

    def add(self, book: Book) -> None:
        doc = book_to_document(book)
        doc["_id"] = _oid(book.id)
        self._books.insert_one(doc, session=self._session)

    def update_pricing(self, book: Book) -> None:
        self._books.update_one(
            {"_id": _oid(book.id)},
            {"$set": {"price": book.price.amount, "discount": book.discount.percent}},
            session=self._session,
        )

    def reserve_stock(self, book_id: str, quantity: int) -> Book | None:
        doc = self._books.find_one_and_update(
            {"_id": _oid(book_id), "quantity": {"$gte": quantity}},
            {"$inc": {"quantity": -quantity}},
            return_document=ReturnDocument.AFTER,
            session=self._session,
        )
        return book_from_document(doc) if doc else None

    def restock(self, book_id: str, quantity: int) -> bool:
        result = self._books.update_one(
            {"_id": _oid(book_id)},
            {"$inc": {"quantity": quantity}},
            session=self._session,
        )
        return result.matched_count == 1


class MongoOrderRepository(OrderRepository):

    def __init__(self, collection: Collection, session: ClientSession) -> None:
        self._orders = collection
        self._session = session

    def next_id(self) -> str:
        return str(ObjectId())

    def get_by_id(self, order_id: str) -> Order | None:
        doc = self._orders.find_one({"_id": _oid(order_id)}, session=self._session)
        return order_from_document(doc) if doc else None

    def list_for_user(self, user_id: str) -> list[Order]:
        cursor = self._orders.find({"user": _oid(user_id)}, session=self._session).sort(
            "createdAt", DESCENDING
        )
        return [order_from_document(doc) for doc in cursor]

    def save(self, order: Order) -> None:
        doc = order_to_document(order)
        doc["_id"] = _oid(order.id)
        doc["user"] = _oid(order.user_id)
        for item in doc["items"]:
            item["book"] = _oid(item["book"])
        self._orders.replace_one({"_id": doc["_id"]}, doc, upsert=True, session=self._session)


class MongoUserRepository(UserRepository):

    def __init__(self, collection: Collection, session: ClientSession) -> None:
        self._users = collection
        self._session = session

    def next_id(self) -> str:
        return str(ObjectId())

    def get_by_id(self, user_id: str) -> User | None:
        doc = self._users.find_one({"_id": _oid(user_id)}, session=self._session)
        return user_from_document(doc) if doc else None

    def save(self, user: User) -> None:
        doc = user_to_document(user)
        doc["_id"] = _oid(user.id)
        self._users.replace_one({"_id": doc["_id"]}, doc, upsert=True, session=self._session)


# --- Transaction & store ------------------------------------------------------


class MongoTransaction(Transaction):

    def __init__(self, db: Database, session: ClientSession) -> None:
        self._session = session
        self.books = MongoBookRepository(db["books"], session)
        self.orders = MongoOrderRepository(db["orders"], session)
        self.users = MongoUserRepository(db["users"], session)

    def commit(self) -> None:
        self._session.commit_transaction()

    def abort(self) -> None:
        # After a failed commit the session is no longer in a transaction.
        if self._session.in_transaction:
            self._session.abort_transaction()

    def close(self) -> None:
        self._session.end_session()


class MongoStore(TransactionalStore):

    def __init__(
        self,
        client: MongoClient,
        database: str,
        max_commit_time_ms: int | None = None,
    ) -> None:
        self._client = client
        self._db = client.get_database(database, codec_options=CODEC_OPTIONS)
        self._max_commit_time_ms = max_commit_time_ms

    @classmethod
    def connect(cls, url: str, database: str, timeout_ms: int) -> MongoStore:
        """Connect with a client-side operation timeout bounding every transaction."""
        client = MongoClient(url, timeoutMS=timeout_ms, tz_aware=True)
        logger.debug("Connected MongoClient to %s/%s (timeoutMS=%d)", url, database, timeout_ms)
        return cls(client, database, max_commit_time_ms=timeout_ms)

    def begin(self) -> Transaction:
        session = self._client.start_session()
        try:
            session.start_transaction(
                read_concern=ReadConcern("snapshot"),
                write_concern=WriteConcern("majority"),
                max_commit_time_ms=self._max_commit_time_ms,
            )
        except PyMongoError:
            session.end_session()
            raise
        return MongoTransaction(self._db, session)

    def is_transient(self, exc: BaseException) -> bool:
        if not isinstance(exc, PyMongoError):
            return False
        if exc.has_error_label(TRANSIENT_TRANSACTION_LABEL):
            return True
        return isinstance(exc, OperationFailure) and exc.code in TRANSIENT_ERROR_CODES

    def is_valid_id(self, raw_id: object) -> bool:
        return isinstance(raw_id, str) and ObjectId.is_valid(raw_id)

    def ensure_indexes(self) -> None:
        self._db["orders"].create_index([("user", ASCENDING), ("createdAt", DESCENDING)])
        self._db["orders"].create_index("status")
        self._db["books"].create_index("isbn", unique=True, sparse=True)
