from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar, Optional, Union

from ..core.enums import Role


@dataclass(frozen=True)
class _Account:
    """Domain entity: an account row.

    Note: plain data object, no database access. The role is fixed per
    variant because it is determined by the table the row lives in.
    """

    role: ClassVar[Role]

    id: int
    given_name: str
    family_name: str
    email: str
    password_hash: str
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.given_name} {self.family_name}".strip()

    def public_dict(self) -> dict:
        return {
            "id": self.id,
            "given_name": self.given_name,
            "family_name": self.family_name,
            "email": self.email,
            "role": self.role.value,
        }


@dataclass(frozen=True)
class Admin(_Account):
    role: ClassVar[Role] = Role.ADMIN


@dataclass(frozen=True)
class Teacher(_Account):
    role: ClassVar[Role] = Role.TEACHER


@dataclass(frozen=True)
class Parent(_Account):
    role: ClassVar[Role] = Role.PARENT


Identity = Union[Admin, Teacher, Parent]

IDENTITY_TYPES: dict[Role, type] = {
    Role.ADMIN: Admin,
    Role.TEACHER: Teacher,
    Role.PARENT: Parent,
}


@dataclass(frozen=True)
class SessionIdentity:
    """What we store into the Flask session after login."""

    identity_id: int
    role: Role
    full_name: str
    email: str


@dataclass(frozen=True)
class CreatedAccount:
    """Result of an admin account creation; generated_password is shown once."""

    id: int
    role: Role
    generated_password: Optional[str] = None
