"""CLI commands for the Book aggregate."""

from __future__ import annotations

import click

from bookstore.domain.exceptions import DomainException
from bookstore.infrastructure.bootstrap import (
    add_book_handler,
    book_id_resolver,
    restock_book_handler,
    show_inventory_handler,
    update_book_pricing_handler,
)


@click.command("add")
@click.option("--title", required=True, help="Book title.")
@click.option("--author", required=True, help="Author name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--quantity", required=True, type=int, help="Initial stock.")
@click.option("--discount", default="0", show_default=True, help="Discount percent (0-100).")
@click.option("--isbn", default=None, help="ISBN.")
def book_add(
    title: str, author: str, price: str, quantity: int, discount: str, isbn: str | None
) -> None:
    """Add a new book to the catalog."""
    handler = add_book_handler()

    try:
        book = handler.handle(
            title=title,
            author=author,
            price=price,
            quantity=quantity,
            discount=discount,
            isbn=isbn,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Book {book.id} '{book.title}' added at {book.price} ({book.quantity} in stock)")


@click.command("ensure")
@click.option("--isbn", required=True, help="ISBN identifying the book.")
@click.option("--title", required=True, help="Title, if the book has to be added.")
@click.option("--author", required=True, help="Author, if the book has to be added.")
@click.option("--price", required=True, help="Price, if the book has to be added.")
@click.option("--quantity", required=True, type=int, help="Initial stock, if the book has to be added.")
@click.option("--discount", default="0", show_default=True, help="Discount percent (0-100).")
def book_ensure(
    isbn: str, title: str, author: str, price: str, quantity: int, discount: str
) -> None:
    """Add a book unless one with this ISBN is already in the catalog."""
    resolver = book_id_resolver()
    handler = add_book_handler()

    def create(ref: str) -> str:
        book = handler.handle(
            title=title,
            author=author,
            price=price,
            quantity=quantity,
            discount=discount,
            isbn=ref,
        )
        return book.id

    try:
        book_id = resolver.resolve_or_create(isbn, create)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Book {book_id} available for ISBN {isbn.strip()}")


@click.command("list")
def book_list() -> None:
    """List all books with stock levels."""
    books = show_inventory_handler().handle()

    if not books:
        click.echo("No books found.")
        return

    click.echo(
        f"{'#':<4} {'ID':<34} {'Title':<28} {'Price':>10} {'Disc':>6} {'Net':>10} {'Stock':>6}"
    )
    click.echo("-" * 104)
    for position, b in enumerate(books, start=1):
        click.echo(
            f"{position:<4} {b.id:<34} {b.title[:28]:<28} {b.price:>10} {b.discount:>6} "
            f"{b.net_price:>10} {b.quantity:>6}"
        )


@click.command("restock")
@click.option("--id", "book_id", required=True, help="Book ID.")
@click.option("--quantity", required=True, type=int, help="Units to add.")
def book_restock(book_id: str, quantity: int) -> None:
    """Add units to a book's stock."""
    handler = restock_book_handler()

    try:
        book = handler.handle(book_id=book_id, quantity=quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Book {book.id} '{book.title}' now has {book.quantity} in stock")


@click.command("update")
@click.option("--id", "book_id", required=True, help="Book ID.")
@click.option("--price", required=True, help="New price (e.g. 29.99).")
@click.option("--discount", default=None, help="New discount percent.")
def book_update(book_id: str, price: str, discount: str | None) -> None:
    """Update a book's price and discount."""
    handler = update_book_pricing_handler()

    try:
        handler.handle(book_id=book_id, new_price=price, new_discount=discount)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Book {book_id} price updated to ${price}")
