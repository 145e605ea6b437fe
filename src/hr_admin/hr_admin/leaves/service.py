from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..balances.model import LeaveBalance
from ..balances.repository import LeaveBalanceRepository
from ..common.datetime_utils import inclusive_days, now_utc
from ..common.validators import require_int_range, require_non_empty
from ..core.constants import MAX_BALANCE_YEAR, MAX_LEAVE_TOTAL_DAYS, MIN_BALANCE_YEAR
from ..core.enums import LeaveStatus, LeaveType, NotificationKind, Role
from ..core.exceptions import (
    ConflictError,
    ForbiddenError,
    InsufficientBalanceError,
    InvalidStateError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..notifications.repository import NotificationSink
from ..users.repository import UserRepository
from .model import Leave, LeaveParties
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveService:
    """Leave request lifecycle and the balance accounting tied to it.

    State machine: Pending -> Approved | Rejected | Cancelled, Approved -> Cancelled.
    Approving deducts the balance after the status change; cancelling an
    approved leave restores the balance before the row is deleted. Neither
    pair is atomic: a failed deduction is logged for reconciliation and does
    not undo the approval.

    This is the only component that writes to leave balances.
    """

    def __init__(
        self,
        leaves: LeaveRepository,
        balances: LeaveBalanceRepository,
        employees: EmployeeRepository,
        users: UserRepository,
        notifications: NotificationSink,
    ):
        self._leaves = leaves
        self._balances = balances
        self._employees = employees
        self._users = users
        self._notifications = notifications

    @staticmethod
    def _parse_leave_type(value: object) -> LeaveType:
        leave_type = LeaveType.parse(value)
        if leave_type is None:
            raise ValidationError("Invalid leave type. Must be: Sick, Vacation, Personal, or Unpaid")
        return leave_type

    @staticmethod
    def _parse_role(value: object) -> Optional[Role]:
        if isinstance(value, Role):
            return value
        return Role.parse(str(value or ""))

    def _require_leave(self, leave_id: str) -> Leave:
        leave = self._leaves.get_by_id(str(leave_id))
        if leave is None:
            raise NotFoundError("Leave not found")
        return leave

    @staticmethod
    def _require_pending(leave: Leave, action: str) -> None:
        if leave.status is not LeaveStatus.PENDING:
            raise InvalidStateError(f"Only pending leaves can be {action}")

    # -------- Notifications (best effort) --------
    def _notify(self, user_id: str, title: str, message: str, kind: NotificationKind, link: str) -> None:
        try:
            self._notifications.notify(user_id, title, message, kind, link)
        except Exception:
            logger.exception("Notification %r to user %s failed", title, user_id)

    def _notify_approvers(self, leave: Leave) -> None:
        try:
            approvers = self._users.list_active_by_roles([Role.ADMIN, Role.MANAGER])
        except Exception:
            logger.exception("Could not load approvers for leave %s", leave.leave_id)
            return
        for approver in approvers:
            self._notify(
                approver.user_id,
                "New Leave Request",
                f"A new {leave.leave_type.value} leave request has been submitted",
                NotificationKind.INFO,
                f"/leaves/{leave.leave_id}",
            )

    def _notify_owner(self, leave: Leave, title: str, message: str, kind: NotificationKind) -> None:
        try:
            employee = self._employees.get_by_id(leave.employee_id)
        except Exception:
            logger.exception("Could not load employee %s for leave %s", leave.employee_id, leave.leave_id)
            return
        if employee is None:
            return
        self._notify(employee.user_id, title, message, kind, f"/leaves/{leave.leave_id}")

    # -------- Lifecycle --------
    def submit(
        self,
        *,
        employee_id: str,
        leave_type: object,
        start_date: date,
        end_date: date,
        reason: str,
        now: Optional[datetime] = None,
    ) -> Leave:
        lt = self._parse_leave_type(leave_type)
        reason = require_non_empty(reason, "Reason")
        today = (now or now_utc()).date()

        if end_date < start_date:
            raise ValidationError("End date must be on or after start date")
        if start_date < today:
            raise ValidationError("Cannot request leave for past dates")

        if self._leaves.has_overlapping_leave(str(employee_id), start_date, end_date):
            raise ConflictError("You already have a leave request for these dates")

        days_count = inclusive_days(start_date, end_date)
        if lt is not LeaveType.UNPAID:
            if not self._balances.has_sufficient_balance(str(employee_id), start_date.year, lt, days_count):
                raise InsufficientBalanceError(f"Insufficient {lt.value} leave balance")

        leave = self._leaves.create(
            employee_id=str(employee_id),
            leave_type=lt,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
        )
        logger.info(
            "Leave %s submitted by employee %s: %s %s..%s (%d days)",
            leave.leave_id,
            leave.employee_id,
            lt.value,
            start_date,
            end_date,
            leave.days_count,
        )

        self._notify_approvers(leave)
        return leave

    def approve(self, *, leave_id: str, approver_id: str) -> Leave:
        leave = self._require_leave(leave_id)
        self._require_pending(leave, "approved")

        approved = self._leaves.approve(leave.leave_id, str(approver_id))
        logger.info("Leave %s approved by %s", approved.leave_id, approver_id)

        if approved.is_capped:
            self._deduct_after_approval(approved)

        self._notify_owner(
            approved,
            "Leave Request Approved",
            f"Your {approved.leave_type.value} leave request from {approved.start_date:%b %d} "
            f"to {approved.end_date:%b %d} has been approved",
            NotificationKind.SUCCESS,
        )
        return approved

    def _deduct_after_approval(self, leave: Leave) -> None:
        try:
            deducted = self._balances.deduct(leave.employee_id, leave.year, leave.leave_type, leave.days_count)
        except StoreError:
            logger.exception(
                "Balance deduction failed for approved leave %s (employee=%s year=%s type=%s days=%d); "
                "approval kept, balance needs reconciliation",
                leave.leave_id,
                leave.employee_id,
                leave.year,
                leave.leave_type.value,
                leave.days_count,
            )
            return
        if not deducted:
            logger.warning(
                "No leave balance to deduct for approved leave %s (employee=%s year=%s type=%s days=%d)",
                leave.leave_id,
                leave.employee_id,
                leave.year,
                leave.leave_type.value,
                leave.days_count,
            )

    def reject(self, *, leave_id: str, approver_id: str, reason: str) -> Leave:
        leave = self._require_leave(leave_id)
        self._require_pending(leave, "rejected")
        reason = require_non_empty(reason, "Rejection reason")

        rejected = self._leaves.reject(leave.leave_id, str(approver_id), reason)
        logger.info("Leave %s rejected by %s", rejected.leave_id, approver_id)

        self._notify_owner(
            rejected,
            "Leave Request Rejected",
            f"Your {rejected.leave_type.value} leave request from {rejected.start_date:%b %d} "
            f"to {rejected.end_date:%b %d} has been rejected. Reason: {reason}",
            NotificationKind.ERROR,
        )
        return rejected

    def cancel(self, *, leave_id: str, requesting_user_id: str, requesting_user_role: object) -> bool:
        leave = self._require_leave(leave_id)

        role = self._parse_role(requesting_user_role)
        if role is None or not role.is_privileged:
            owner = self._employees.get_by_id(leave.employee_id)
            if owner is None or owner.user_id != str(requesting_user_id):
                raise ForbiddenError("You can only cancel your own leave requests")

        # Restore first: the days come back even if the delete below fails.
        if leave.status is LeaveStatus.APPROVED and leave.is_capped:
            restored = self._balances.restore(leave.employee_id, leave.year, leave.leave_type, leave.days_count)
            if not restored:
                logger.warning(
                    "No leave balance to restore for cancelled leave %s (employee=%s year=%s type=%s days=%d)",
                    leave.leave_id,
                    leave.employee_id,
                    leave.year,
                    leave.leave_type.value,
                    leave.days_count,
                )

        deleted = self._leaves.delete(leave.leave_id)
        logger.info("Leave %s cancelled by %s (deleted=%s)", leave.leave_id, requesting_user_id, deleted)
        return deleted

    # -------- Queries --------
    def employee_for_user(self, user_id: str) -> Employee:
        employee = self._employees.get_by_user_id(str(user_id))
        if employee is None:
            raise NotFoundError("Employee record not found")
        return employee

    def get_leave(self, leave_id: str) -> Leave:
        return self._require_leave(leave_id)

    def list_leaves(self, *, user_id: str, role: object, status: Optional[str] = None) -> Sequence[Leave]:
        """Admins and managers see every leave; everyone else sees their own."""

        status_filter: Optional[LeaveStatus] = None
        if status:
            status_filter = LeaveStatus.parse(status)
            if status_filter is None:
                raise ValidationError("Invalid leave status")

        parsed_role = self._parse_role(role)
        if parsed_role is not None and parsed_role.is_privileged:
            if status_filter is None:
                return list(self._leaves.get_all())
            return list(self._leaves.get_by_status(status_filter))

        employee = self.employee_for_user(user_id)
        leaves = self._leaves.get_by_employee(employee.employee_id)
        if status_filter is None:
            return list(leaves)
        return [lv for lv in leaves if lv.status is status_filter]

    def list_pending(self, *, manager_id: str) -> Sequence[Leave]:
        return list(self._leaves.get_pending_for_manager(str(manager_id)))

    def describe(self, leaves: Sequence[Leave]) -> list[LeaveParties]:
        """Resolve owner and approver names for each leave, one lookup per person."""

        employees: dict[str, Optional[Employee]] = {}
        names: dict[str, Optional[str]] = {}

        def employee(employee_id: str) -> Optional[Employee]:
            if employee_id not in employees:
                employees[employee_id] = self._employees.get_by_id(employee_id)
            return employees[employee_id]

        def name(user_id: Optional[str]) -> Optional[str]:
            if not user_id:
                return None
            if user_id not in names:
                user = self._users.get_by_id(user_id)
                names[user_id] = user.full_name if user else None
            return names[user_id]

        parties = []
        for leave in leaves:
            owner = employee(leave.employee_id)
            parties.append(
                LeaveParties(
                    employee_name=name(owner.user_id) if owner else None,
                    employee_code=owner.employee_code if owner else None,
                    department=owner.department_name if owner else None,
                    approved_by_name=name(leave.approved_by),
                )
            )
        return parties

    def employee_name(self, employee_id: str) -> Optional[str]:
        owner = self._employees.get_by_id(str(employee_id))
        if owner is None:
            return None
        user = self._users.get_by_id(owner.user_id)
        return user.full_name if user else None

    # -------- Balances --------
    def get_balance(self, *, employee_id: str, year: Optional[object] = None, now: Optional[datetime] = None) -> LeaveBalance:
        """Balance for (employee, year), created with default totals on first access."""

        if year is None:
            year = (now or now_utc()).year
        else:
            year = require_int_range(year, "Year", MIN_BALANCE_YEAR, MAX_BALANCE_YEAR)
        balance = self._balances.get_by_employee_and_year(str(employee_id), year)
        if balance is not None:
            return balance

        try:
            balance = self._balances.create(employee_id=str(employee_id), year=year)
        except StoreError:
            # A concurrent request may have created it first (unique employee/year).
            existing = self._balances.get_by_employee_and_year(str(employee_id), year)
            if existing is None:
                raise
            return existing
        logger.info("Created default leave balance for employee %s, year %s", employee_id, year)
        return balance

    def update_balance_totals(
        self,
        *,
        employee_id: str,
        year: object,
        sick_total: Optional[object] = None,
        vacation_total: Optional[object] = None,
        personal_total: Optional[object] = None,
    ) -> LeaveBalance:
        year = require_int_range(year, "Year", MIN_BALANCE_YEAR, MAX_BALANCE_YEAR)
        changes = {}
        if sick_total is not None:
            changes["sick_total"] = require_int_range(sick_total, "Sick leave total", 0, MAX_LEAVE_TOTAL_DAYS)
        if vacation_total is not None:
            changes["vacation_total"] = require_int_range(
                vacation_total, "Vacation leave total", 0, MAX_LEAVE_TOTAL_DAYS
            )
        if personal_total is not None:
            changes["personal_total"] = require_int_range(
                personal_total, "Personal leave total", 0, MAX_LEAVE_TOTAL_DAYS
            )

        balance = self.get_balance(employee_id=employee_id, year=year)
        if not changes:
            return balance

        updated = self._balances.update(replace(balance, **changes))
        logger.info("Leave balance totals for employee %s, year %s set to %s", employee_id, year, changes)
        return updated
