from __future__ import annotations

from datetime import date, datetime

import pytest

from hr_admin.core.enums import LeaveStatus, LeaveType
from hr_admin.leaves.model import Leave
from hr_admin.leaves.overlap import has_overlap, ranges_overlap


def _leave(leave_id, start, end, status=LeaveStatus.PENDING):
    return Leave(
        leave_id=leave_id,
        employee_id="e1",
        leave_type=LeaveType.VACATION,
        start_date=start,
        end_date=end,
        days_count=(end - start).days + 1,
        reason="Seeded leave request",
        status=status,
        created_at=datetime(2025, 3, 1),
        updated_at=datetime(2025, 3, 1),
    )


@pytest.mark.parametrize(
    "start, end, expected",
    [
        (date(2025, 3, 1), date(2025, 3, 9), False),
        (date(2025, 3, 1), date(2025, 3, 10), True),  # touches first day
        (date(2025, 3, 12), date(2025, 3, 20), True),  # touches last day
        (date(2025, 3, 13), date(2025, 3, 20), False),
        (date(2025, 3, 11), date(2025, 3, 11), True),  # inside
        (date(2025, 3, 1), date(2025, 3, 31), True),  # contains
    ],
)
def test_ranges_overlap_is_inclusive(start, end, expected):
    assert ranges_overlap(start, end, date(2025, 3, 10), date(2025, 3, 12)) is expected


def test_only_pending_and_approved_leaves_block():
    span = (date(2025, 3, 10), date(2025, 3, 12))
    inactive = [
        _leave("l1", *span, status=LeaveStatus.REJECTED),
        _leave("l2", *span, status=LeaveStatus.CANCELLED),
    ]
    assert has_overlap(inactive, *span) is False
    assert has_overlap(inactive + [_leave("l3", *span, status=LeaveStatus.APPROVED)], *span) is True


def test_exclude_leave_id_skips_the_leave_being_edited():
    leaves = [_leave("l1", date(2025, 3, 10), date(2025, 3, 12))]
    assert has_overlap(leaves, date(2025, 3, 11), date(2025, 3, 14), exclude_leave_id="l1") is False
    assert has_overlap(leaves, date(2025, 3, 11), date(2025, 3, 14), exclude_leave_id="other") is True


def test_no_leaves_no_overlap():
    assert has_overlap([], date(2025, 3, 10), date(2025, 3, 12)) is False
