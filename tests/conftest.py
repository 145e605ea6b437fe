from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

import pytest

from hr_admin.balances.ledger import apply_deduction, apply_restoration, is_sufficient
from hr_admin.balances.model import LeaveAllowance, LeaveBalance
from hr_admin.common.datetime_utils import inclusive_days
from hr_admin.core.enums import LeaveStatus, LeaveType, Role
from hr_admin.core.exceptions import InvalidStateError, NotFoundError, StoreError
from hr_admin.employees.model import Employee
from hr_admin.leaves.model import Leave
from hr_admin.leaves.overlap import has_overlap
from hr_admin.leaves.service import LeaveService
from hr_admin.users.model import User

NOW = datetime(2025, 3, 1, 9, 0, 0)


class InMemoryLeaves:
    def __init__(self):
        self._rows: dict[str, Leave] = {}
        self._seq = 0
        self.approve_calls = 0

    def _tick(self) -> datetime:
        self._seq += 1
        return NOW + timedelta(seconds=self._seq)

    def create(self, *, employee_id, leave_type, start_date, end_date, reason):
        created_at = self._tick()
        leave = Leave(
            leave_id=f"leave-{self._seq}",
            employee_id=str(employee_id),
            leave_type=LeaveType(leave_type),
            start_date=start_date,
            end_date=end_date,
            days_count=inclusive_days(start_date, end_date),
            reason=reason,
            status=LeaveStatus.PENDING,
            created_at=created_at,
            updated_at=created_at,
        )
        self._rows[leave.leave_id] = leave
        return leave

    def add(self, **fields) -> Leave:
        """Seed a leave in any status, bypassing create()."""
        leave = self.create(
            employee_id=fields.pop("employee_id", "e1"),
            leave_type=fields.pop("leave_type", LeaveType.VACATION),
            start_date=fields.pop("start_date"),
            end_date=fields.pop("end_date"),
            reason=fields.pop("reason", "Seeded leave request"),
        )
        if fields:
            leave = replace(leave, **fields)
            self._rows[leave.leave_id] = leave
        return leave

    def _newest_first(self, leaves):
        return sorted(leaves, key=lambda lv: lv.created_at, reverse=True)

    def get_by_id(self, leave_id):
        return self._rows.get(str(leave_id))

    def get_by_employee(self, employee_id):
        return self._newest_first(lv for lv in self._rows.values() if lv.employee_id == str(employee_id))

    def get_by_status(self, status):
        return self._newest_first(lv for lv in self._rows.values() if lv.status is status)

    def get_all(self):
        return self._newest_first(self._rows.values())

    def get_pending_for_manager(self, manager_id):
        return sorted(
            (lv for lv in self._rows.values() if lv.status is LeaveStatus.PENDING),
            key=lambda lv: lv.created_at,
        )

    def update(self, leave):
        if leave.leave_id not in self._rows:
            raise NotFoundError("Leave not found")
        updated = replace(
            leave,
            days_count=inclusive_days(leave.start_date, leave.end_date),
            updated_at=self._tick(),
        )
        self._rows[leave.leave_id] = updated
        return updated

    def delete(self, leave_id):
        return self._rows.pop(str(leave_id), None) is not None

    def _decide(self, leave_id, status, approver_id, rejection_reason=None):
        leave = self._rows.get(str(leave_id))
        if leave is None:
            raise NotFoundError("Leave not found")
        if leave.status is not LeaveStatus.PENDING:
            raise InvalidStateError(f"Leave is already {leave.status.value}")
        now = self._tick()
        decided = replace(
            leave,
            status=status,
            approved_by=str(approver_id),
            approved_at=now,
            rejection_reason=rejection_reason,
            updated_at=now,
        )
        self._rows[leave.leave_id] = decided
        return decided

    def approve(self, leave_id, approver_id):
        self.approve_calls += 1
        return self._decide(leave_id, LeaveStatus.APPROVED, approver_id)

    def reject(self, leave_id, approver_id, reason):
        return self._decide(leave_id, LeaveStatus.REJECTED, approver_id, reason)

    def has_overlapping_leave(self, employee_id, start_date, end_date, exclude_leave_id=None):
        return has_overlap(self.get_by_employee(employee_id), start_date, end_date, exclude_leave_id=exclude_leave_id)


class InMemoryBalances:
    def __init__(self, allowance: Optional[LeaveAllowance] = None):
        self._allowance = allowance or LeaveAllowance()
        self._rows: dict[tuple[str, int], LeaveBalance] = {}
        self.fail_deduct = False
        self.fail_restore = False
        self.fail_create = False

    def get_by_employee_and_year(self, employee_id, year):
        return self._rows.get((str(employee_id), int(year)))

    def create(self, *, employee_id, year, sick_total=None, vacation_total=None, personal_total=None):
        if self.fail_create:
            raise StoreError("duplicate key")
        balance = LeaveBalance(
            balance_id=f"bal-{employee_id}-{year}",
            employee_id=str(employee_id),
            year=int(year),
            sick_total=self._allowance.sick if sick_total is None else sick_total,
            sick_used=0,
            vacation_total=self._allowance.vacation if vacation_total is None else vacation_total,
            vacation_used=0,
            personal_total=self._allowance.personal if personal_total is None else personal_total,
            personal_used=0,
            unpaid_used=0,
            created_at=NOW,
            updated_at=NOW,
        )
        self._rows[(balance.employee_id, balance.year)] = balance
        return balance

    def update(self, balance):
        updated = replace(balance, updated_at=NOW + timedelta(minutes=1))
        self._rows[(balance.employee_id, balance.year)] = updated
        return updated

    def deduct(self, employee_id, year, leave_type, days):
        if self.fail_deduct:
            raise StoreError("connection lost")
        balance = self.get_by_employee_and_year(employee_id, year)
        if balance is None:
            return False
        changed = apply_deduction(balance, leave_type, days)
        if changed is None:
            return False
        self.update(changed)
        return True

    def restore(self, employee_id, year, leave_type, days):
        if self.fail_restore:
            raise StoreError("connection lost")
        balance = self.get_by_employee_and_year(employee_id, year)
        if balance is None:
            return False
        changed = apply_restoration(balance, leave_type, days)
        if changed is None:
            return False
        self.update(changed)
        return True

    def has_sufficient_balance(self, employee_id, year, leave_type, days):
        return is_sufficient(self.get_by_employee_and_year(employee_id, year), leave_type, days)


class InMemoryEmployees:
    def __init__(self, employees):
        self._by_id = {e.employee_id: e for e in employees}

    def get_by_id(self, employee_id):
        return self._by_id.get(str(employee_id))

    def get_by_user_id(self, user_id):
        for employee in self._by_id.values():
            if employee.user_id == str(user_id):
                return employee
        return None


class InMemoryUsers:
    def __init__(self, users):
        self._users = list(users)

    def get_by_id(self, user_id):
        return next((u for u in self._users if u.user_id == str(user_id)), None)

    def list_active_by_roles(self, roles):
        wanted = set(roles)
        return [u for u in self._users if u.is_active and u.role in wanted]


class RecordingNotifications:
    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False

    def notify(self, user_id, title, message, kind=None, link=None):
        if self.fail:
            raise StoreError("notifications table unavailable")
        self.sent.append({"user_id": user_id, "title": title, "message": message, "kind": kind, "link": link})


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def leave_repo() -> InMemoryLeaves:
    return InMemoryLeaves()


@pytest.fixture
def balance_repo() -> InMemoryBalances:
    return InMemoryBalances()


@pytest.fixture
def employees() -> InMemoryEmployees:
    return InMemoryEmployees(
        [
            Employee(employee_id="e1", user_id="u1", employee_code="EMP001", department_id="d1", department_name="Engineering"),
            Employee(employee_id="e2", user_id="u2", employee_code="EMP002"),
        ]
    )


@pytest.fixture
def users() -> InMemoryUsers:
    return InMemoryUsers(
        [
            User(user_id="u1", full_name="Alice Tran", email="alice@example.com", role=Role.EMPLOYEE),
            User(user_id="u2", full_name="Bao Nguyen", email="bao@example.com", role=Role.EMPLOYEE),
            User(user_id="m1", full_name="Mai Le", email="mai@example.com", role=Role.MANAGER),
            User(user_id="a1", full_name="Admin", email="admin@example.com", role=Role.ADMIN),
            User(user_id="a2", full_name="Former Admin", email="old@example.com", role=Role.ADMIN, is_active=False),
        ]
    )


@pytest.fixture
def notifications() -> RecordingNotifications:
    return RecordingNotifications()


@pytest.fixture
def service(leave_repo, balance_repo, employees, users, notifications) -> LeaveService:
    return LeaveService(leave_repo, balance_repo, employees, users, notifications)



class FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self.rowcount = 0

    def execute(self, sql, params=()):
        if self._conn.fail_with is not None:
            raise self._conn.fail_with
        self._conn.executed.append((" ".join(sql.split()), params))
        self.rowcount = self._conn.rowcounts.pop(0) if self._conn.rowcounts else 1

    def fetchone(self):
        return self._conn.rows.pop(0) if self._conn.rows else None

    def fetchall(self):
        rows, self._conn.rows = self._conn.rows, []
        return rows

    def close(self):
        pass


class FakeConnection:
    """Scripted mysql.connector connection; also acts as its own connection factory.

    ``rows`` feed fetchone/fetchall in order, ``rowcounts`` feed successive executes.
    """

    def __init__(self):
        self.rows: list[dict] = []
        self.rowcounts: list[int] = []
        self.executed: list[tuple] = []
        self.fail_with = None
        self.rollback_error = None
        self.close_error = None
        self.commits = 0
        self.rollbacks = 0
        self.closed = 0

    def connect(self):
        return self

    def cursor(self, dictionary=False):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1
        if self.rollback_error is not None:
            raise self.rollback_error

    def close(self):
        self.closed += 1
        if self.close_error is not None:
            raise self.close_error


@pytest.fixture
def fake_conn() -> FakeConnection:
    return FakeConnection()
