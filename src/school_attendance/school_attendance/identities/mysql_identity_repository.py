from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import IDENTITY_TYPES, Identity
from .repository import IdentityRepository

# Table names come from this mapping only, never from user input.
_TABLES = {
    Role.ADMIN: "admins",
    Role.TEACHER: "teachers",
    Role.PARENT: "parents",
}

_COLUMNS = "id, given_name, family_name, email, password_hash, created_at"


def _row_to_identity(role: Role, r: dict) -> Identity:
    return IDENTITY_TYPES[role](
        id=int(r["id"]),
        given_name=r["given_name"],
        family_name=r["family_name"],
        email=r["email"],
        password_hash=r["password_hash"],
        created_at=r.get("created_at"),
    )


class MySQLIdentityRepository(IdentityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_email(self, email: str, role: Role) -> Optional[Identity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM {_TABLES[role]} WHERE email=%s", (email,))
            r = fetchone(cur)
            return _row_to_identity(role, r) if r else None

    def get_by_id(self, identity_id: int, role: Role) -> Optional[Identity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM {_TABLES[role]} WHERE id=%s", (int(identity_id),))
            r = fetchone(cur)
            return _row_to_identity(role, r) if r else None

    def list_by_role(self, role: Role) -> Sequence[Identity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM {_TABLES[role]} ORDER BY family_name, given_name")
            return [_row_to_identity(role, r) for r in fetchall(cur)]

    def create(
        self,
        *,
        role: Role,
        given_name: str,
        family_name: str,
        email: str,
        password_hash: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO {_TABLES[role]}(given_name, family_name, email, password_hash)
                VALUES(%s,%s,%s,%s)
                """,
                (given_name, family_name, email, password_hash),
            )
            return int(cur.lastrowid)

    def delete(self, identity_id: int, role: Role) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM {_TABLES[role]} WHERE id=%s", (int(identity_id),))
            return cur.rowcount > 0

    def count_by_role(self, role: Role) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM {_TABLES[role]}")
            r = fetchone(cur)
            return int(r["n"]) if r else 0
