from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Employee
from .repository import EmployeeRepository


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, column: str, value: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT e.employee_id, e.user_id, e.employee_code, e.department_id,
                       d.name AS department_name
                FROM employees e
                LEFT JOIN departments d ON d.department_id = e.department_id
                WHERE e.{column}=%s
                """,
                (str(value),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Employee(
                employee_id=str(row["employee_id"]),
                user_id=str(row["user_id"]),
                employee_code=row["employee_code"],
                department_id=row.get("department_id"),
                department_name=row.get("department_name"),
            )

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        return self._get_one("employee_id", employee_id)

    def get_by_user_id(self, user_id: str) -> Optional[Employee]:
        return self._get_one("user_id", user_id)
