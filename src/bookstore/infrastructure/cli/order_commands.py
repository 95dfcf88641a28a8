"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from bookstore.application.book_id_resolver import BookIdResolver
from bookstore.application.dto import OrderDTO, OrderItemSpec, Requester
from bookstore.application.update_order_status import parse_status
from bookstore.domain.exceptions import DomainException
from bookstore.domain.model.order import PaymentMethod, ShippingAddress
from bookstore.infrastructure.bootstrap import (
    book_id_resolver,
    cancel_order_handler,
    list_orders_handler,
    place_order_handler,
    show_order_handler,
    update_order_status_handler,
)


def _parse_items(raw: str, resolver: BookIdResolver) -> list[OrderItemSpec]:
    """Parse '1:2,<book-id>:1' into OrderItemSpec list.

    A book may be given by its position in ``book list``, its ISBN, or its ID.
    """
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'Book:Quantity'."
            )
        ref, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for book '{ref}'."
            )
        book_id = resolver.resolve(ref.strip())
        if book_id is None:
            raise click.BadParameter(f"Unknown book '{ref.strip()}'.")
        specs.append(OrderItemSpec(book_id=book_id, quantity=qty))
    return specs


@click.command("place")
@click.option("--user", "user_id", required=True, help="Ordering user ID.")
@click.option("--items", required=True, help="Items as 'Book:Qty,Book:Qty'.")
@click.option("--name", required=True, help="Recipient name.")
@click.option("--street", required=True)
@click.option("--city", required=True)
@click.option("--state", required=True)
@click.option("--zip", "zip_code", required=True)
@click.option("--country", default="USA", show_default=True)
@click.option("--phone", default=None)
@click.option(
    "--payment",
    required=True,
    type=click.Choice([m.value for m in PaymentMethod], case_sensitive=False),
    help="Payment method.",
)
def order_place(
    user_id: str,
    items: str,
    name: str,
    street: str,
    city: str,
    state: str,
    zip_code: str,
    country: str,
    phone: str | None,
    payment: str,
) -> None:
    """Place a new order (reserves stock immediately)."""
    handler = place_order_handler()

    try:
        specs = _parse_items(items, book_id_resolver())
        address = ShippingAddress(
            name=name,
            street=street,
            city=city,
            state=state,
            zip_code=zip_code,
            country=country,
            phone=phone,
        )
        dto = handler.handle(
            user_id=user_id,
            item_specs=specs,
            shipping_address=address,
            payment_method=PaymentMethod.parse(payment),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_id} placed  (status={dto.status})")
    click.echo(f"Total: ${dto.total_price}")


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.id}  (status={dto.status})")
    click.echo(f"User:     {dto.user_id}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo(f"Ship to:  {dto.ship_to}")
    click.echo(f"Payment:  {dto.payment_method}")
    if dto.tracking_number:
        click.echo(f"Tracking: {dto.tracking_number}")
    click.echo()

    click.echo(f"  {'Title':<28} {'Qty':>5} {'Price':>10} {'Disc':>6} {'Total':>10}")
    click.echo(f"  {'-'*62}")
    for item in dto.items:
        click.echo(
            f"  {item.title[:28]:<28} {item.quantity:>5} {item.unit_price:>10} "
            f"{item.discount:>6} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*62}")
    click.echo(f"  {'Subtotal':<40} {dto.subtotal:>22}")
    click.echo(f"  {'Shipping':<40} {dto.shipping_price:>22}")
    click.echo(f"  {'Tax':<40} {dto.tax_price:>22}")
    click.echo(f"  {'Order Total':<40} {dto.total_price:>22}")


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
@click.option("--user", "user_id", required=True, help="Requesting user ID.")
@click.option("--admin", is_flag=True, default=False, help="Request as an administrator.")
def order_show(order_id: str, user_id: str, admin: bool) -> None:
    """Show details of an existing order."""
    handler = show_order_handler()

    try:
        dto = handler.handle(order_id, Requester(user_id=user_id, is_admin=admin))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--user", "user_id", required=True, help="User whose orders to list.")
def order_list(user_id: str) -> None:
    """List a user's orders, newest first."""
    orders = list_orders_handler().handle(user_id)

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<34} {'Created':<22} {'Status':<12} {'Items':>6} {'Total':>10}")
    click.echo("-" * 88)
    for o in orders:
        click.echo(
            f"{o.id:<34} {o.created_at:<22} {o.status:<12} {o.items_count:>6} {o.total_price:>10}"
        )


@click.command("cancel")
@click.option("--id", "order_id", required=True, help="Order ID to cancel.")
@click.option("--user", "user_id", required=True, help="Requesting user ID.")
@click.option("--admin", is_flag=True, default=False, help="Request as an administrator.")
def order_cancel(order_id: str, user_id: str, admin: bool) -> None:
    """Cancel a Pending or Processing order (restores stock)."""
    handler = cancel_order_handler()

    try:
        dto = handler.handle(order_id, Requester(user_id=user_id, is_admin=admin))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_id} cancelled, stock restored.")


@click.command("status")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--status", "new_status", required=True, help="Processing, Shipped or Delivered.")
@click.option("--tracking", default=None, help="Tracking number when shipping.")
def order_status(order_id: str, new_status: str, tracking: str | None) -> None:
    """Advance an order's status (admin)."""
    handler = update_order_status_handler()

    try:
        dto = handler.handle(order_id, parse_status(new_status), tracking_number=tracking)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_id} is now {dto.status}")
