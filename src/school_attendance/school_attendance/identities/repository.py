from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Identity


class IdentityRepository(Protocol):
    """Repository interface for the three account tables.

    Note (DIP): services depend on this interface, not on a concrete database.
    A single lookup keyed by (email, role) replaces a UNION across tables.
    """

    def get_by_email(self, email: str, role: Role) -> Optional[Identity]:
        raise NotImplementedError

    def get_by_id(self, identity_id: int, role: Role) -> Optional[Identity]:
        raise NotImplementedError

    def list_by_role(self, role: Role) -> Sequence[Identity]:
        """Accounts of one role ordered by family name, given name."""

        raise NotImplementedError

    def create(
        self,
        *,
        role: Role,
        given_name: str,
        family_name: str,
        email: str,
        password_hash: str,
    ) -> int:
        raise NotImplementedError

    def delete(self, identity_id: int, role: Role) -> bool:
        raise NotImplementedError

    def count_by_role(self, role: Role) -> int:
        raise NotImplementedError
