from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import inclusive_days, now_utc
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import InvalidStateError, NotFoundError, StoreError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_id
from .model import Leave
from .overlap import has_overlap
from .repository import LeaveRepository

_COLUMNS = """
    leave_id, employee_id, leave_type, start_date, end_date, days_count,
    reason, status, approved_by, approved_at, rejection_reason,
    created_at, updated_at
"""


def _row_to_leave(r: dict) -> Leave:
    leave_type = LeaveType.parse(r["leave_type"])
    status = LeaveStatus.parse(r["status"])
    if leave_type is None or status is None:
        raise StoreError(
            f"Leave {r['leave_id']} has unrecognised type/status {r['leave_type']!r}/{r['status']!r}"
        )
    return Leave(
        leave_id=str(r["leave_id"]),
        employee_id=str(r["employee_id"]),
        leave_type=leave_type,
        start_date=r["start_date"],
        end_date=r["end_date"],
        days_count=int(r["days_count"]),
        reason=r["reason"],
        status=status,
        approved_by=r.get("approved_by"),
        approved_at=r.get("approved_at"),
        rejection_reason=r.get("rejection_reason"),
        created_at=r["created_at"],
        updated_at=r["updated_at"],
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select(self, where: str, params: tuple, order: str = "created_at DESC") -> list[Leave]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leaves WHERE {where} ORDER BY {order}",
                params,
            )
            return [_row_to_leave(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        employee_id: str,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> Leave:
        now = now_utc()
        leave = Leave(
            leave_id=new_id(),
            employee_id=str(employee_id),
            leave_type=LeaveType(leave_type),
            start_date=start_date,
            end_date=end_date,
            days_count=inclusive_days(start_date, end_date),
            reason=reason,
            status=LeaveStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leaves(
                    leave_id, employee_id, leave_type, start_date, end_date,
                    days_count, reason, status, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    leave.leave_id,
                    leave.employee_id,
                    leave.leave_type.value,
                    leave.start_date,
                    leave.end_date,
                    leave.days_count,
                    leave.reason,
                    leave.status.value,
                    leave.created_at,
                    leave.updated_at,
                ),
            )
        return leave

    def get_by_id(self, leave_id: str) -> Optional[Leave]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leaves WHERE leave_id=%s", (str(leave_id),))
            r = fetchone(cur)
            return _row_to_leave(r) if r else None

    def get_by_employee(self, employee_id: str) -> Sequence[Leave]:
        return self._select("employee_id=%s", (str(employee_id),))

    def get_by_status(self, status: LeaveStatus) -> Sequence[Leave]:
        return self._select("status=%s", (LeaveStatus(status).value,))

    def get_all(self) -> Sequence[Leave]:
        return self._select("1=1", ())

    def get_pending_for_manager(self, manager_id: str) -> Sequence[Leave]:
        # TODO: scope to the manager's department once employees carry a manager link.
        return self._select("status=%s", (LeaveStatus.PENDING.value,), order="created_at ASC")

    def update(self, leave: Leave) -> Leave:
        updated = replace(
            leave,
            days_count=inclusive_days(leave.start_date, leave.end_date),
            updated_at=now_utc(),
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leaves
                SET employee_id=%s, leave_type=%s, start_date=%s, end_date=%s, days_count=%s,
                    reason=%s, status=%s, approved_by=%s, approved_at=%s, rejection_reason=%s,
                    updated_at=%s
                WHERE leave_id=%s
                """,
                (
                    updated.employee_id,
                    updated.leave_type.value,
                    updated.start_date,
                    updated.end_date,
                    updated.days_count,
                    updated.reason,
                    updated.status.value,
                    updated.approved_by,
                    updated.approved_at,
                    updated.rejection_reason,
                    updated.updated_at,
                    updated.leave_id,
                ),
            )
            if cur.rowcount == 0:
                raise NotFoundError("Leave not found")
        return updated

    def delete(self, leave_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM leaves WHERE leave_id=%s", (str(leave_id),))
            return cur.rowcount > 0

    def _decide(
        self,
        leave_id: str,
        *,
        status: LeaveStatus,
        decided_by: str,
        rejection_reason: Optional[str] = None,
    ) -> Leave:
        now = now_utc()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leaves
                SET status=%s, approved_by=%s, approved_at=%s, rejection_reason=%s, updated_at=%s
                WHERE leave_id=%s AND status=%s
                """,
                (
                    status.value,
                    str(decided_by),
                    now,
                    rejection_reason,
                    now,
                    str(leave_id),
                    LeaveStatus.PENDING.value,
                ),
            )
            changed = cur.rowcount > 0

        leave = self.get_by_id(leave_id)
        if leave is None:
            raise NotFoundError("Leave not found")
        if not changed:
            # Someone else decided the leave between our read and this write.
            raise InvalidStateError(f"Leave is already {leave.status.value}")
        return leave

    def approve(self, leave_id: str, approver_id: str) -> Leave:
        return self._decide(leave_id, status=LeaveStatus.APPROVED, decided_by=approver_id)

    def reject(self, leave_id: str, approver_id: str, reason: str) -> Leave:
        return self._decide(
            leave_id,
            status=LeaveStatus.REJECTED,
            decided_by=approver_id,
            rejection_reason=reason,
        )

    def has_overlapping_leave(
        self,
        employee_id: str,
        start_date: date,
        end_date: date,
        exclude_leave_id: Optional[str] = None,
    ) -> bool:
        return has_overlap(
            self.get_by_employee(employee_id),
            start_date,
            end_date,
            exclude_leave_id=exclude_leave_id,
        )
