"""CLI commands for users."""

from __future__ import annotations

import click

from bookstore.domain.exceptions import DomainException
from bookstore.domain.model.user import Role
from bookstore.infrastructure.bootstrap import add_user_handler


@click.command("add")
@click.option("--name", required=True, help="Display name.")
@click.option("--email", required=True, help="Email address.")
@click.option("--admin", is_flag=True, default=False, help="Grant the admin role.")
def user_add(name: str, email: str, admin: bool) -> None:
    """Add a user."""
    handler = add_user_handler()

    try:
        user = handler.handle(name=name, email=email, role=Role.ADMIN if admin else Role.USER)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"User {user.id} '{user.name}' added (role={user.role.value})")
