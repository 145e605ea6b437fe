from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from ..common.datetime_utils import now_utc
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, new_id
from .ledger import apply_deduction, apply_restoration, is_sufficient
from .model import LeaveAllowance, LeaveBalance
from .repository import LeaveBalanceRepository

logger = logging.getLogger(__name__)

_COLUMNS = """
    balance_id, employee_id, year,
    sick_leave_total, sick_leave_used,
    vacation_leave_total, vacation_leave_used,
    personal_leave_total, personal_leave_used,
    unpaid_leave_used, created_at, updated_at
"""


def _row_to_balance(r: dict) -> LeaveBalance:
    return LeaveBalance(
        balance_id=str(r["balance_id"]),
        employee_id=str(r["employee_id"]),
        year=int(r["year"]),
        sick_total=int(r["sick_leave_total"]),
        sick_used=int(r["sick_leave_used"]),
        vacation_total=int(r["vacation_leave_total"]),
        vacation_used=int(r["vacation_leave_used"]),
        personal_total=int(r["personal_leave_total"]),
        personal_used=int(r["personal_leave_used"]),
        unpaid_used=int(r["unpaid_leave_used"]),
        created_at=r["created_at"],
        updated_at=r["updated_at"],
    )


class MySQLLeaveBalanceRepository(LeaveBalanceRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, allowance: Optional[LeaveAllowance] = None):
        self._conn_factory = conn_factory
        self._allowance = allowance or LeaveAllowance()

    def get_by_employee_and_year(self, employee_id: str, year: int) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_balances WHERE employee_id=%s AND year=%s",
                (str(employee_id), int(year)),
            )
            r = fetchone(cur)
            return _row_to_balance(r) if r else None

    def create(
        self,
        *,
        employee_id: str,
        year: int,
        sick_total: Optional[int] = None,
        vacation_total: Optional[int] = None,
        personal_total: Optional[int] = None,
    ) -> LeaveBalance:
        now = now_utc()
        balance = LeaveBalance(
            balance_id=new_id(),
            employee_id=str(employee_id),
            year=int(year),
            sick_total=self._allowance.sick if sick_total is None else int(sick_total),
            sick_used=0,
            vacation_total=self._allowance.vacation if vacation_total is None else int(vacation_total),
            vacation_used=0,
            personal_total=self._allowance.personal if personal_total is None else int(personal_total),
            personal_used=0,
            unpaid_used=0,
            created_at=now,
            updated_at=now,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_balances(
                    balance_id, employee_id, year,
                    sick_leave_total, sick_leave_used, sick_leave_remaining,
                    vacation_leave_total, vacation_leave_used, vacation_leave_remaining,
                    personal_leave_total, personal_leave_used, personal_leave_remaining,
                    unpaid_leave_used, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    balance.balance_id,
                    balance.employee_id,
                    balance.year,
                    balance.sick_total,
                    balance.sick_used,
                    balance.sick_remaining,
                    balance.vacation_total,
                    balance.vacation_used,
                    balance.vacation_remaining,
                    balance.personal_total,
                    balance.personal_used,
                    balance.personal_remaining,
                    balance.unpaid_used,
                    balance.created_at,
                    balance.updated_at,
                ),
            )
        return balance

    def update(self, balance: LeaveBalance) -> LeaveBalance:
        updated_at = now_utc()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_balances
                SET sick_leave_total=%s, sick_leave_used=%s, sick_leave_remaining=%s,
                    vacation_leave_total=%s, vacation_leave_used=%s, vacation_leave_remaining=%s,
                    personal_leave_total=%s, personal_leave_used=%s, personal_leave_remaining=%s,
                    unpaid_leave_used=%s, updated_at=%s
                WHERE balance_id=%s
                """,
                (
                    balance.sick_total,
                    balance.sick_used,
                    balance.sick_remaining,
                    balance.vacation_total,
                    balance.vacation_used,
                    balance.vacation_remaining,
                    balance.personal_total,
                    balance.personal_used,
                    balance.personal_remaining,
                    balance.unpaid_used,
                    updated_at,
                    balance.balance_id,
                ),
            )
        return replace(balance, updated_at=updated_at)

    def deduct(self, employee_id: str, year: int, leave_type: object, days: int) -> bool:
        balance = self.get_by_employee_and_year(employee_id, year)
        if balance is None:
            return False
        changed = apply_deduction(balance, leave_type, days)
        if changed is None:
            logger.warning("Unrecognised leave type %r in deduct for employee %s", leave_type, employee_id)
            return False
        self.update(changed)
        return True

    def restore(self, employee_id: str, year: int, leave_type: object, days: int) -> bool:
        balance = self.get_by_employee_and_year(employee_id, year)
        if balance is None:
            return False
        changed = apply_restoration(balance, leave_type, days)
        if changed is None:
            logger.warning("Unrecognised leave type %r in restore for employee %s", leave_type, employee_id)
            return False
        self.update(changed)
        return True

    def has_sufficient_balance(self, employee_id: str, year: int, leave_type: object, days: int) -> bool:
        balance = self.get_by_employee_and_year(employee_id, year)
        return is_sufficient(balance, leave_type, days)
