from __future__ import annotations

from enum import Enum
from typing import Optional


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Role"]:
        v = (value or "").strip().lower()
        for role in cls:
            if role.value == v:
                return role
        return None

    @property
    def is_privileged(self) -> bool:
        return self in {Role.ADMIN, Role.MANAGER}


class LeaveType(str, Enum):
    """Closed set of leave types; values are the canonical stored form."""

    SICK = "Sick"
    VACATION = "Vacation"
    PERSONAL = "Personal"
    UNPAID = "Unpaid"

    @classmethod
    def parse(cls, value: object) -> Optional["LeaveType"]:
        """Case-insensitive lookup. Returns None for anything unrecognised."""

        if isinstance(value, LeaveType):
            return value
        v = str(value or "").strip().lower()
        for leave_type in cls:
            if leave_type.value.lower() == v:
                return leave_type
        return None


class LeaveStatus(str, Enum):
    """Leave request workflow states."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, value: object) -> Optional["LeaveStatus"]:
        v = str(value or "").strip().lower()
        for status in cls:
            if status.value.lower() == v:
                return status
        return None


ACTIVE_LEAVE_STATUSES = frozenset({LeaveStatus.PENDING, LeaveStatus.APPROVED})


class NotificationKind(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
