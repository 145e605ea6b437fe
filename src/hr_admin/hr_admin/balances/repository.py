from __future__ import annotations

from typing import Optional, Protocol

from .model import LeaveBalance


class LeaveBalanceRepository(Protocol):
    """Persistence of one LeaveBalance per (employee, year).

    Every method may raise StoreError when the backing store fails.
    """

    def get_by_employee_and_year(self, employee_id: str, year: int) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: str,
        year: int,
        sick_total: Optional[int] = None,
        vacation_total: Optional[int] = None,
        personal_total: Optional[int] = None,
    ) -> LeaveBalance:
        """Insert a balance; omitted totals fall back to the configured allowance."""

        raise NotImplementedError

    def update(self, balance: LeaveBalance) -> LeaveBalance:
        raise NotImplementedError

    def deduct(self, employee_id: str, year: int, leave_type: object, days: int) -> bool:
        """False when no balance exists or the leave type is unrecognised."""

        raise NotImplementedError

    def restore(self, employee_id: str, year: int, leave_type: object, days: int) -> bool:
        """Inverse of deduct; used counters never drop below zero."""

        raise NotImplementedError

    def has_sufficient_balance(self, employee_id: str, year: int, leave_type: object, days: int) -> bool:
        raise NotImplementedError
