"""Application service: Show Order and List Orders use cases (queries)."""

from __future__ import annotations

from bookstore.application.dto import OrderDTO, OrderLineItemDTO, Requester
from bookstore.application.transaction import TransactionCoordinator
from bookstore.domain.exceptions import NotAuthorizedError, OrderNotFoundError
from bookstore.domain.model.order import Order
from bookstore.domain.repository.store import Transaction


class ShowOrderHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(self, order_id: str, requester: Requester) -> OrderDTO:
        def work(tx: Transaction) -> Order | None:
            return tx.orders.get_by_id(order_id)

        order = self._coordinator.run_in_transaction(work)
        if order is None:
            raise OrderNotFoundError(order_id)
        if not requester.is_admin and not order.is_owned_by(requester.user_id):
            raise NotAuthorizedError("Not authorized to view this order")
        return order_to_dto(order)


class ListOrdersHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(self, user_id: str) -> list[OrderDTO]:
        orders = self._coordinator.run_in_transaction(
            lambda tx: tx.orders.list_for_user(user_id)
        )
        return [order_to_dto(order) for order in orders]


# --- Mapping ------------------------------------------------------------------


def order_to_dto(order: Order) -> OrderDTO:
    address = order.shipping_address
    return OrderDTO(
        id=order.id,
        user_id=order.user_id,
        status=order.status.value,
        items=[
            OrderLineItemDTO(
                book_id=item.book_id,
                title=item.title,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                discount=str(item.discount),
                line_total=str(item.line_total),
            )
            for item in order.items
        ],
        subtotal=str(order.subtotal),
        shipping_price=str(order.shipping_price),
        tax_price=str(order.tax_price),
        total_price=str(order.total_price),
        payment_method=order.payment_method.value,
        items_count=order.items_count,
        ship_to=f"{address.name}, {address.street}, {address.city}, "
        f"{address.state} {address.zip_code}, {address.country}",
        tracking_number=order.tracking_number,
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
    )
