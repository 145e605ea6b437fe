from __future__ import annotations

from typing import Optional

from ..common.datetime_utils import now_utc
from ..core.enums import NotificationKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, new_id
from .repository import NotificationSink


class MySQLNotificationRepository(NotificationSink):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def notify(
        self,
        user_id: str,
        title: str,
        message: str,
        kind: NotificationKind = NotificationKind.INFO,
        link: Optional[str] = None,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(notification_id, user_id, title, message, kind, link, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (new_id(), str(user_id), title, message, NotificationKind(kind).value, link, now_utc()),
            )
