from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Account as seen by leave processing: role decides approval rights."""

    user_id: str
    full_name: str
    email: str
    role: Role
    is_active: bool = True
