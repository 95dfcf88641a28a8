"""Application service: Add User use case.

Accounts normally come from the authentication service; this seeds users
for the local JSON backend.
"""

from __future__ import annotations

from bookstore.application.transaction import TransactionCoordinator
from bookstore.domain.exceptions import ValidationError
from bookstore.domain.model.user import Role, User
from bookstore.domain.repository.store import Transaction


class AddUserHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(self, name: str, email: str, role: Role = Role.USER) -> User:
        if not name or not name.strip():
            raise ValidationError("Name is required")
        if not email or "@" not in email:
            raise ValidationError("Please enter a valid email address")

        def work(tx: Transaction) -> User:
            user = User(
                id=tx.users.next_id(),
                name=name.strip(),
                email=email.strip().lower(),
                role=role,
            )
            tx.users.save(user)
            return user

        return self._coordinator.run_in_transaction(work)
