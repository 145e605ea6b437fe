from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository


def _row_to_user(row: dict) -> User:
    return User(
        user_id=str(row["user_id"]),
        full_name=row["full_name"],
        email=row["email"],
        role=Role.parse(row["role"]) or Role.EMPLOYEE,
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, email, role, is_active
                FROM users
                WHERE user_id=%s
                """,
                (str(user_id),),
            )
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def list_active_by_roles(self, roles: Iterable[Role]) -> Sequence[User]:
        values = [Role(r).value for r in roles]
        if not values:
            return []
        placeholders = ",".join(["%s"] * len(values))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT user_id, full_name, email, role, is_active
                FROM users
                WHERE is_active=1 AND LOWER(role) IN ({placeholders})
                ORDER BY full_name
                """,
                tuple(values),
            )
            return [_row_to_user(r) for r in fetchall(cur)]
