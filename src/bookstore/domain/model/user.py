"""User: only identity and role matter to the order core."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass
class User:
    id: str
    name: str
    email: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
