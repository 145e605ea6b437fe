from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .balances.model import LeaveAllowance
from .balances.mysql_balance_repository import MySQLLeaveBalanceRepository
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .users.mysql_user_repository import MySQLUserRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    leaves_repo: MySQLLeaveRepository
    balances_repo: MySQLLeaveBalanceRepository
    employees_repo: MySQLEmployeeRepository
    users_repo: MySQLUserRepository
    notifications_repo: MySQLNotificationRepository

    leave_service: LeaveService


def build_container(*, db_config: dict, leave_defaults: Optional[Mapping[str, object]] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    leaves_repo = MySQLLeaveRepository(conn)
    balances_repo = MySQLLeaveBalanceRepository(conn, allowance=LeaveAllowance.from_mapping(leave_defaults))
    employees_repo = MySQLEmployeeRepository(conn)
    users_repo = MySQLUserRepository(conn)
    notifications_repo = MySQLNotificationRepository(conn)

    leave_service = LeaveService(
        leaves_repo,
        balances_repo,
        employees_repo,
        users_repo,
        notifications_repo,
    )

    return Container(
        conn=conn,
        leaves_repo=leaves_repo,
        balances_repo=balances_repo,
        employees_repo=employees_repo,
        users_repo=users_repo,
        notifications_repo=notifications_repo,
        leave_service=leave_service,
    )
