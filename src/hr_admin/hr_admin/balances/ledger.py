"""Leave-day arithmetic over the closed LeaveType enumeration.

Every function parses the leave type case-insensitively. An unrecognised
type gives ``None``/``False`` so callers must check the result.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..core.enums import LeaveType
from .model import LeaveBalance

# (total field, used field) for each capped type. Unpaid has no cap.
_CAPPED_FIELDS = {
    LeaveType.SICK: ("sick_total", "sick_used"),
    LeaveType.VACATION: ("vacation_total", "vacation_used"),
    LeaveType.PERSONAL: ("personal_total", "personal_used"),
}


def remaining_for(balance: LeaveBalance, leave_type: object) -> Optional[int]:
    """Remaining days for a capped type; None for unpaid or unknown types."""

    lt = LeaveType.parse(leave_type)
    if lt is None or lt is LeaveType.UNPAID:
        return None
    total_field, used_field = _CAPPED_FIELDS[lt]
    return getattr(balance, total_field) - getattr(balance, used_field)


def apply_deduction(balance: LeaveBalance, leave_type: object, days: int) -> Optional[LeaveBalance]:
    lt = LeaveType.parse(leave_type)
    if lt is None:
        return None
    if lt is LeaveType.UNPAID:
        return replace(balance, unpaid_used=balance.unpaid_used + int(days))

    _, used_field = _CAPPED_FIELDS[lt]
    return replace(balance, **{used_field: getattr(balance, used_field) + int(days)})


def apply_restoration(balance: LeaveBalance, leave_type: object, days: int) -> Optional[LeaveBalance]:
    lt = LeaveType.parse(leave_type)
    if lt is None:
        return None
    if lt is LeaveType.UNPAID:
        return replace(balance, unpaid_used=max(0, balance.unpaid_used - int(days)))

    _, used_field = _CAPPED_FIELDS[lt]
    return replace(balance, **{used_field: max(0, getattr(balance, used_field) - int(days))})


def is_sufficient(balance: Optional[LeaveBalance], leave_type: object, days: int) -> bool:
    lt = LeaveType.parse(leave_type)
    if lt is None:
        return False
    if lt is LeaveType.UNPAID:
        return True
    if balance is None:
        return False
    remaining = remaining_for(balance, lt)
    return remaining is not None and remaining >= int(days)
