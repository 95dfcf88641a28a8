import click

from bookstore.infrastructure.cli.book_commands import (
    book_add,
    book_ensure,
    book_list,
    book_restock,
    book_update,
)
from bookstore.infrastructure.cli.order_commands import (
    order_cancel,
    order_list,
    order_place,
    order_show,
    order_status,
)
from bookstore.infrastructure.cli.user_commands import user_add
from bookstore.infrastructure.config import configure_logging


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Bookstore — orders and inventory"""
    configure_logging(verbose)


@cli.group()
def order() -> None:
    """Place and manage orders."""


@cli.group()
def book() -> None:
    """Manage the book catalog and stock."""


@cli.group()
def user() -> None:
    """Manage users."""


# Register subcommands
order.add_command(order_cancel)
order.add_command(order_list)
order.add_command(order_place)
order.add_command(order_show)
order.add_command(order_status)
book.add_command(book_add)
book.add_command(book_ensure)
book.add_command(book_list)
book.add_command(book_restock)
book.add_command(book_update)
user.add_command(user_add)
