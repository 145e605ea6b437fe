from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Employee record as seen by leave processing: who owns it and how to reach them."""

    employee_id: str
    user_id: str
    employee_code: str
    department_id: Optional[str] = None
    department_name: Optional[str] = None
