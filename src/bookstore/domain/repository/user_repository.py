"""Abstract repository for users (read-mostly; accounts are managed elsewhere)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from bookstore.domain.model.user import User


class UserRepository(ABC):

    @abstractmethod
    def next_id(self) -> str:
        """Generate a new unique user ID."""

    @abstractmethod
    def get_by_id(self, user_id: str) -> User | None:
        """Return a user by ID, or None if not found."""

    @abstractmethod
    def save(self, user: User) -> None:
        """Persist a new or updated user."""
