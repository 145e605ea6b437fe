from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import Leave


class LeaveRepository(Protocol):
    """Persistence of leave requests.

    List methods return newest-created first unless stated otherwise. Every
    method may raise StoreError when the backing store fails.
    """

    def create(
        self,
        *,
        employee_id: str,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> Leave:
        """Insert a leave; status is always Pending and days_count is derived."""

        raise NotImplementedError

    def get_by_id(self, leave_id: str) -> Optional[Leave]:
        raise NotImplementedError

    def get_by_employee(self, employee_id: str) -> Sequence[Leave]:
        raise NotImplementedError

    def get_by_status(self, status: LeaveStatus) -> Sequence[Leave]:
        raise NotImplementedError

    def get_all(self) -> Sequence[Leave]:
        raise NotImplementedError

    def get_pending_for_manager(self, manager_id: str) -> Sequence[Leave]:
        """All pending leaves, oldest first. Not scoped to the manager's department."""

        raise NotImplementedError

    def update(self, leave: Leave) -> Leave:
        raise NotImplementedError

    def delete(self, leave_id: str) -> bool:
        raise NotImplementedError

    def approve(self, leave_id: str, approver_id: str) -> Leave:
        """Raises NotFoundError if absent, InvalidStateError if no longer pending."""

        raise NotImplementedError

    def reject(self, leave_id: str, approver_id: str, reason: str) -> Leave:
        raise NotImplementedError

    def has_overlapping_leave(
        self,
        employee_id: str,
        start_date: date,
        end_date: date,
        exclude_leave_id: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError
