from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ACTIVE_LEAVE_STATUSES, LeaveStatus, LeaveType


@dataclass(frozen=True)
class Leave:
    """A single time-off request over an inclusive date range.

    ``days_count`` is always ``(end_date - start_date).days + 1``; the store
    computes it, callers never set it directly.
    """

    leave_id: str
    employee_id: str
    leave_type: LeaveType
    start_date: date
    end_date: date
    days_count: int
    reason: str
    status: LeaveStatus
    created_at: datetime
    updated_at: datetime
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    @property
    def year(self) -> int:
        """Balance year the leave is charged against."""
        return self.start_date.year

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_LEAVE_STATUSES

    @property
    def is_capped(self) -> bool:
        return self.leave_type is not LeaveType.UNPAID


@dataclass(frozen=True)
class LeaveParties:
    """Display names of the people around a leave, resolved from employee/user records."""

    employee_name: Optional[str] = None
    employee_code: Optional[str] = None
    department: Optional[str] = None
    approved_by_name: Optional[str] = None
