from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from ..core.constants import (
    DEFAULT_PERSONAL_LEAVE_DAYS,
    DEFAULT_SICK_LEAVE_DAYS,
    DEFAULT_VACATION_LEAVE_DAYS,
)


@dataclass(frozen=True)
class LeaveAllowance:
    """Yearly totals handed to a freshly created balance."""

    sick: int = DEFAULT_SICK_LEAVE_DAYS
    vacation: int = DEFAULT_VACATION_LEAVE_DAYS
    personal: int = DEFAULT_PERSONAL_LEAVE_DAYS

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, object]]) -> "LeaveAllowance":
        values = values or {}
        return cls(
            sick=int(values.get("sick", DEFAULT_SICK_LEAVE_DAYS)),
            vacation=int(values.get("vacation", DEFAULT_VACATION_LEAVE_DAYS)),
            personal=int(values.get("personal", DEFAULT_PERSONAL_LEAVE_DAYS)),
        )


@dataclass(frozen=True)
class LeaveBalance:
    """Per-employee, per-year ledger of allotted and used leave days.

    Remaining days are always derived from total - used; the stored
    ``*_remaining`` columns are written for reporting only.
    """

    balance_id: str
    employee_id: str
    year: int
    sick_total: int
    sick_used: int
    vacation_total: int
    vacation_used: int
    personal_total: int
    personal_used: int
    unpaid_used: int
    created_at: datetime
    updated_at: datetime

    @property
    def sick_remaining(self) -> int:
        return self.sick_total - self.sick_used

    @property
    def vacation_remaining(self) -> int:
        return self.vacation_total - self.vacation_used

    @property
    def personal_remaining(self) -> int:
        return self.personal_total - self.personal_used
