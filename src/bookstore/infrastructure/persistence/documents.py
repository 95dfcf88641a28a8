"""Document mapping shared by the MongoDB and JSON stores.

Field names follow the bookstore's document schema (camelCase, ``_id``).
Money is emitted as Decimal; each store decides how to encode it.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from bookstore.domain.model.book import Book
from bookstore.domain.model.order import (
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentMethod,
    ShippingAddress,
)
from bookstore.domain.model.user import Role, User
from bookstore.domain.model.value_objects import Discount, Money, Quantity


def _decimal(value) -> Decimal:
    return Decimal(str(value))


def _datetime(value) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


# --- Book ---------------------------------------------------------------------


def book_to_document(book: Book) -> dict:
    doc = {
        "_id": book.id,
        "title": book.title,
        "author": book.author,
        "price": book.price.amount,
        "discount": book.discount.percent,
        "quantity": book.quantity,
    }
    # Omitted rather than null so the sparse unique ISBN index ignores it.
    if book.isbn:
        doc["isbn"] = book.isbn
    return doc


def book_from_document(doc: dict) -> Book:
    return Book(
        id=str(doc["_id"]),
        title=doc["title"],
        author=doc.get("author", ""),
        isbn=doc.get("isbn"),
        price=Money(_decimal(doc["price"])),
        discount=Discount(_decimal(doc.get("discount", 0))),
        quantity=int(doc.get("quantity", 0)),
    )


# --- User ---------------------------------------------------------------------


def user_to_document(user: User) -> dict:
    return {
        "_id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
    }


def user_from_document(doc: dict) -> User:
    return User(
        id=str(doc["_id"]),
        name=doc.get("name", ""),
        email=doc.get("email", ""),
        role=Role(doc.get("role", Role.USER.value)),
    )


# --- Order --------------------------------------------------------------------


def order_to_document(order: Order) -> dict:
    address = order.shipping_address
    return {
        "_id": order.id,
        "user": order.user_id,
        "items": [
            {
                "book": item.book_id,
                "title": item.title,
                "quantity": item.quantity.value,
                "price": item.unit_price.amount,
                "discount": item.discount.percent,
            }
            for item in order.items
        ],
        "shippingAddress": {
            "name": address.name,
            "street": address.street,
            "city": address.city,
            "state": address.state,
            "zipCode": address.zip_code,
            "country": address.country,
            "phone": address.phone,
        },
        "paymentMethod": order.payment_method.value,
        "status": order.status.value,
        "shippingPrice": order.shipping_price.amount,
        "taxPrice": order.tax_price.amount,
        "totalPrice": order.total_price.amount,
        "isPaid": order.is_paid,
        "paidAt": order.paid_at,
        "isDelivered": order.is_delivered,
        "deliveredAt": order.delivered_at,
        "trackingNumber": order.tracking_number,
        "createdAt": order.created_at,
        "updatedAt": order.updated_at,
    }


def order_from_document(doc: dict) -> Order:
    address = doc["shippingAddress"]
    return Order(
        id=str(doc["_id"]),
        user_id=str(doc["user"]),
        items=[
            OrderLineItem(
                book_id=str(i["book"]),
                title=i.get("title", ""),
                quantity=Quantity(int(i["quantity"])),
                unit_price=Money(_decimal(i["price"])),
                discount=Discount(_decimal(i.get("discount", 0))),
            )
            for i in doc["items"]
        ],
        shipping_address=ShippingAddress(
            name=address["name"],
            street=address["street"],
            city=address["city"],
            state=address["state"],
            zip_code=address["zipCode"],
            country=address.get("country") or "USA",
            phone=address.get("phone"),
        ),
        payment_method=PaymentMethod(doc["paymentMethod"]),
        status=OrderStatus(doc["status"]),
        shipping_price=Money(_decimal(doc["shippingPrice"])),
        tax_price=Money(_decimal(doc["taxPrice"])),
        total_price=Money(_decimal(doc["totalPrice"])),
        is_paid=bool(doc.get("isPaid", False)),
        paid_at=_datetime(doc.get("paidAt")),
        is_delivered=bool(doc.get("isDelivered", False)),
        delivered_at=_datetime(doc.get("deliveredAt")),
        tracking_number=doc.get("trackingNumber"),
        created_at=_datetime(doc["createdAt"]),
        updated_at=_datetime(doc["updatedAt"]),
    )
