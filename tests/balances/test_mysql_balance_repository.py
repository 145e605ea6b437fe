from __future__ import annotations

from datetime import datetime

import mysql.connector
import pytest

from hr_admin.balances.model import LeaveAllowance
from hr_admin.balances.mysql_balance_repository import MySQLLeaveBalanceRepository
from hr_admin.core.exceptions import StoreError


def _row(**overrides):
    row = {
        "balance_id": "b1",
        "employee_id": "e1",
        "year": 2025,
        "sick_leave_total": 10,
        "sick_leave_used": 1,
        "vacation_leave_total": 15,
        "vacation_leave_used": 4,
        "personal_leave_total": 5,
        "personal_leave_used": 0,
        "unpaid_leave_used": 2,
        "created_at": datetime(2025, 1, 1),
        "updated_at": datetime(2025, 1, 1),
    }
    row.update(overrides)
    return row


def test_get_maps_row_to_balance(fake_conn):
    fake_conn.rows = [_row()]
    repo = MySQLLeaveBalanceRepository(fake_conn)

    balance = repo.get_by_employee_and_year("e1", 2025)

    assert balance.vacation_remaining == 11
    assert balance.unpaid_used == 2
    assert fake_conn.executed[0][1] == ("e1", 2025)
    assert fake_conn.commits == 1 and fake_conn.closed == 1


def test_get_missing_returns_none(fake_conn):
    assert MySQLLeaveBalanceRepository(fake_conn).get_by_employee_and_year("e1", 2025) is None


def test_create_uses_configured_allowance_and_stores_remaining(fake_conn):
    repo = MySQLLeaveBalanceRepository(fake_conn, allowance=LeaveAllowance(sick=12, vacation=18, personal=3))

    balance = repo.create(employee_id="e1", year=2025, personal_total=7)

    assert (balance.sick_total, balance.vacation_total, balance.personal_total) == (12, 18, 7)
    sql, params = fake_conn.executed[0]
    assert sql.startswith("INSERT INTO leave_balances")
    # sick total/used/remaining follow the three key columns
    assert params[3:6] == (12, 0, 12)
    assert params[12] == 0


def test_deduct_writes_used_and_remaining(fake_conn):
    fake_conn.rows = [_row()]
    repo = MySQLLeaveBalanceRepository(fake_conn)

    assert repo.deduct("e1", 2025, "vacation", 3) is True

    sql, params = fake_conn.executed[-1]
    assert sql.startswith("UPDATE leave_balances")
    assert params[3:6] == (15, 7, 8)
    assert params[-1] == "b1"


def test_deduct_without_record_returns_false(fake_conn):
    repo = MySQLLeaveBalanceRepository(fake_conn)
    assert repo.deduct("e1", 2025, "Sick", 1) is False
    assert len(fake_conn.executed) == 1


def test_deduct_unknown_type_returns_false_without_writing(fake_conn):
    fake_conn.rows = [_row()]
    repo = MySQLLeaveBalanceRepository(fake_conn)
    assert repo.deduct("e1", 2025, "Holiday", 1) is False
    assert len(fake_conn.executed) == 1


def test_restore_floors_used_at_zero(fake_conn):
    fake_conn.rows = [_row()]
    repo = MySQLLeaveBalanceRepository(fake_conn)

    assert repo.restore("e1", 2025, "Sick", 5) is True

    _, params = fake_conn.executed[-1]
    assert params[0:3] == (10, 0, 10)


@pytest.mark.parametrize("days, expected", [(11, True), (12, False)])
def test_has_sufficient_balance(fake_conn, days, expected):
    fake_conn.rows = [_row()]
    repo = MySQLLeaveBalanceRepository(fake_conn)
    assert repo.has_sufficient_balance("e1", 2025, "Vacation", days) is expected


def test_driver_errors_become_store_errors_and_roll_back(fake_conn):
    fake_conn.fail_with = mysql.connector.Error("lost connection")

    with pytest.raises(StoreError):
        MySQLLeaveBalanceRepository(fake_conn).get_by_employee_and_year("e1", 2025)

    assert fake_conn.rollbacks == 1
    assert fake_conn.commits == 0
    assert fake_conn.closed == 1


def test_dead_connection_still_surfaces_store_error(fake_conn):
    gone = mysql.connector.errors.OperationalError("MySQL server has gone away")
    fake_conn.fail_with = gone
    fake_conn.rollback_error = gone
    fake_conn.close_error = gone

    with pytest.raises(StoreError, match="gone away"):
        MySQLLeaveBalanceRepository(fake_conn).get_by_employee_and_year("e1", 2025)

    assert fake_conn.rollbacks == 1
    assert fake_conn.closed == 1
