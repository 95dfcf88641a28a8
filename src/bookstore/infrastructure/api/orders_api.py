"""HTTP boundary for the order endpoints.

Framework-agnostic: each endpoint takes the authenticated requester and the
decoded JSON body and returns ``(status_code, payload)``. Route wiring,
authentication and JSON encoding belong to whatever web framework hosts
these functions. This is the only place error kinds become status codes.
"""

from __future__ import annotations

import logging
import traceback

from bookstore.application.cancel_order import CancelOrderHandler
from bookstore.application.dto import OrderItemSpec, Requester
from bookstore.application.place_order import PlaceOrderHandler
from bookstore.domain.exceptions import (
    DomainException,
    EntityNotFoundError,
    InsufficientInventoryError,
    InvalidStateTransitionError,
    NotAuthorizedError,
    ValidationError,
)
from bookstore.domain.model.order import PaymentMethod, ShippingAddress

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_BAD_REQUEST = 400
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_INTERNAL_ERROR = 500


def status_code_for(exc: BaseException) -> int:
    if isinstance(exc, EntityNotFoundError):
        return HTTP_NOT_FOUND
    if isinstance(exc, NotAuthorizedError):
        return HTTP_FORBIDDEN
    if isinstance(exc, (ValidationError, InsufficientInventoryError, InvalidStateTransitionError)):
        return HTTP_BAD_REQUEST
    return HTTP_INTERNAL_ERROR


def error_body(exc: BaseException, include_detail: bool) -> dict:
    if isinstance(exc, DomainException):
        message = str(exc)
    else:
        message = "Internal server error"
    body: dict = {"success": False, "message": message}
    if include_detail:
        body["error"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


# --- Request parsing ----------------------------------------------------------


def parse_items(raw) -> list[OrderItemSpec]:
    if not isinstance(raw, list):
        raise ValidationError("Order must contain at least one item")
    specs: list[OrderItemSpec] = []
    for entry in raw:
        if not isinstance(entry, dict):
            raise ValidationError(f"Invalid order item: {entry!r}")
        quantity = entry.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError("Quantity must be greater than 0")
        specs.append(OrderItemSpec(book_id=str(entry.get("bookId") or ""), quantity=quantity))
    return specs


def parse_shipping_address(raw) -> ShippingAddress | None:
    if not raw:
        return None
    if not isinstance(raw, dict):
        raise ValidationError("Shipping address must be an object")
    return ShippingAddress(
        name=raw.get("name", ""),
        street=raw.get("street", ""),
        city=raw.get("city", ""),
        state=raw.get("state", ""),
        zip_code=raw.get("zipCode", ""),
        country=raw.get("country") or "USA",
        phone=raw.get("phone"),
    )


def parse_payment_method(raw) -> PaymentMethod | None:
    if not raw:
        return None
    return PaymentMethod.parse(raw)


# --- Endpoints ----------------------------------------------------------------


class OrdersApi:

    def __init__(
        self,
        place_order: PlaceOrderHandler,
        cancel_order: CancelOrderHandler,
        include_error_detail: bool = False,
    ) -> None:
        self._place_order = place_order
        self._cancel_order = cancel_order
        self._include_error_detail = include_error_detail

    def create_order(self, requester: Requester, body: dict) -> tuple[int, dict]:
        """POST /orders"""
        try:
            dto = self._place_order.handle(
                user_id=requester.user_id,
                item_specs=parse_items(body.get("items")),
                shipping_address=parse_shipping_address(body.get("shippingAddress")),
                payment_method=parse_payment_method(body.get("paymentMethod")),
            )
        except Exception as exc:
            return self._error("creating order", exc)

        return HTTP_CREATED, {
            "success": True,
            "message": "Order placed successfully",
            "order": {
                "orderId": dto.order_id,
                "totalPrice": float(dto.total_price),
                "status": dto.status,
            },
        }

    def cancel_order(self, requester: Requester, order_id: str) -> tuple[int, dict]:
        """PUT /orders/:id/cancel"""
        try:
            dto = self._cancel_order.handle(order_id, requester)
        except Exception as exc:
            return self._error("cancelling order", exc)

        return HTTP_OK, {
            "success": True,
            "message": "Order cancelled successfully",
            "order": {"orderId": dto.order_id, "status": dto.status},
        }

    def _error(self, action: str, exc: Exception) -> tuple[int, dict]:
        status = status_code_for(exc)
        if status == HTTP_INTERNAL_ERROR:
            logger.exception("Error %s", action)
        else:
            logger.info("Rejected %s: %s", action, exc)
        return status, error_body(exc, self._include_error_detail)
