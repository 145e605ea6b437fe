"""Date-range clash detection for leave requests. Pure functions, no I/O."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from ..core.enums import ACTIVE_LEAVE_STATUSES
from .model import Leave


def ranges_overlap(start: date, end: date, other_start: date, other_end: date) -> bool:
    """Inclusive overlap: a range ending on day X clashes with one starting on X."""

    return (
        (other_start <= start <= other_end)
        or (other_start <= end <= other_end)
        or (start <= other_start and end >= other_end)
    )


def has_overlap(
    leaves: Iterable[Leave],
    start: date,
    end: date,
    *,
    exclude_leave_id: Optional[str] = None,
) -> bool:
    """True if any pending/approved leave clashes with [start, end].

    Rejected and cancelled leaves never block a request. ``exclude_leave_id``
    skips the leave being edited.
    """

    for leave in leaves:
        if leave.status not in ACTIVE_LEAVE_STATUSES:
            continue
        if exclude_leave_id and leave.leave_id == exclude_leave_id:
            continue
        if ranges_overlap(start, end, leave.start_date, leave.end_date):
            return True
    return False
