from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session

from ..balances.model import LeaveBalance
from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_length
from ..core.constants import REASON_MAX_LENGTH, REASON_MIN_LENGTH
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    ConflictError,
    DomainError,
    ForbiddenError,
    InsufficientBalanceError,
    InvalidStateError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from .model import Leave, LeaveParties

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (AuthenticationError, 401),
    (ForbiddenError, 403),
    (NotFoundError, 404),
    (ValidationError, 400),
    (ConflictError, 400),
    (InsufficientBalanceError, 400),
    (InvalidStateError, 400),
)


def _envelope(data: Any = None, message: str = "", *, success: bool = True):
    return jsonify({"success": success, "message": message, "data": data})


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def serialize_leave(leave: Leave, parties: Optional[LeaveParties] = None) -> dict:
    parties = parties or LeaveParties()
    return {
        "id": leave.leave_id,
        "employeeId": leave.employee_id,
        "employeeName": parties.employee_name or "Unknown",
        "employeeCode": parties.employee_code,
        "department": parties.department or "N/A",
        "leaveType": leave.leave_type.value,
        "startDate": _iso(leave.start_date),
        "endDate": _iso(leave.end_date),
        "daysCount": leave.days_count,
        "reason": leave.reason,
        "status": leave.status.value,
        "approvedBy": leave.approved_by,
        "approvedByName": parties.approved_by_name,
        "approvedAt": _iso(leave.approved_at),
        "rejectionReason": leave.rejection_reason,
        "createdAt": _iso(leave.created_at),
        "updatedAt": _iso(leave.updated_at),
    }


def serialize_balance(balance: LeaveBalance, employee_name: Optional[str] = None) -> dict:
    return {
        "id": balance.balance_id,
        "employeeId": balance.employee_id,
        "employeeName": employee_name or "Unknown",
        "year": balance.year,
        "sickLeaveTotal": balance.sick_total,
        "sickLeaveUsed": balance.sick_used,
        "sickLeaveRemaining": balance.sick_remaining,
        "vacationLeaveTotal": balance.vacation_total,
        "vacationLeaveUsed": balance.vacation_used,
        "vacationLeaveRemaining": balance.vacation_remaining,
        "personalLeaveTotal": balance.personal_total,
        "personalLeaveUsed": balance.personal_used,
        "personalLeaveRemaining": balance.personal_remaining,
        "unpaidLeaveUsed": balance.unpaid_used,
        "createdAt": _iso(balance.created_at),
        "updatedAt": _iso(balance.updated_at),
    }


def register(app: Flask, container) -> None:
    """Mount the leave API. ``container`` only needs a ``leave_service``.

    The signed-in user is read from ``session["user_id"]`` / ``session["role"]``,
    which the authentication layer sets.
    """

    service = container.leave_service

    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        for error_type, status in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                return _envelope(message=str(exc), success=False), status
        return _envelope(message=str(exc), success=False), 400

    @app.errorhandler(StoreError)
    def handle_store_error(exc: StoreError):
        logger.error("Store failure on %s %s: %s", request.method, request.path, exc)
        return _envelope(message="Internal error while accessing data", success=False), 500

    def _current_user() -> tuple[str, Optional[Role]]:
        if "user_id" not in session:
            raise AuthenticationError("Please sign in to continue")
        return str(session["user_id"]), Role.parse(session.get("role"))

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            _current_user()
            return view(*args, **kwargs)

        return wrapper

    def roles_required(*roles: Role):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                _, role = _current_user()
                if role not in roles:
                    raise ForbiddenError("You do not have permission for this action")
                return view(*args, **kwargs)

            return wrapper

        return decorator

    def _leave_json(leave: Leave) -> dict:
        return serialize_leave(leave, service.describe([leave])[0])

    def _leaves_json(leaves) -> list:
        return [serialize_leave(lv, p) for lv, p in zip(leaves, service.describe(leaves))]

    def _json_body() -> dict:
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        return body

    def _parse_date(body: dict, key: str):
        try:
            return parse_iso_date(str(body.get(key) or ""))
        except ValueError:
            raise ValidationError(f"{key} must be a date in YYYY-MM-DD format")

    @app.route("/api/leaves", methods=["GET"], endpoint="list_leaves")
    @login_required
    def list_leaves():
        user_id, role = _current_user()
        leaves = service.list_leaves(user_id=user_id, role=role, status=request.args.get("status"))
        return _envelope(_leaves_json(leaves), "Leaves retrieved successfully")

    @app.route("/api/leaves/pending", methods=["GET"], endpoint="list_pending_leaves")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def list_pending_leaves():
        user_id, _ = _current_user()
        leaves = service.list_pending(manager_id=user_id)
        return _envelope(_leaves_json(leaves), "Pending leaves retrieved successfully")

    @app.route("/api/leaves/<leave_id>", methods=["GET"], endpoint="get_leave")
    @login_required
    def get_leave(leave_id: str):
        return _envelope(_leave_json(service.get_leave(leave_id)), "Leave retrieved successfully")

    @app.route("/api/leaves", methods=["POST"], endpoint="submit_leave")
    @login_required
    def submit_leave():
        user_id, role = _current_user()
        body = _json_body()

        reason = require_length(body.get("reason"), "Reason", REASON_MIN_LENGTH, REASON_MAX_LENGTH)
        start_date = _parse_date(body, "startDate")
        end_date = _parse_date(body, "endDate")

        employee_id = body.get("employeeId")
        if not employee_id:
            employee_id = service.employee_for_user(user_id).employee_id
        elif role is None or not role.is_privileged:
            if service.employee_for_user(user_id).employee_id != str(employee_id):
                raise ForbiddenError("You can only request leave for yourself")

        leave = service.submit(
            employee_id=str(employee_id),
            leave_type=body.get("leaveType"),
            start_date=start_date,
            end_date=end_date,
            reason=reason,
        )
        return _envelope(_leave_json(leave), "Leave request submitted successfully"), 201

    @app.route("/api/leaves/<leave_id>/approve", methods=["POST"], endpoint="approve_leave")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def approve_leave(leave_id: str):
        user_id, _ = _current_user()
        leave = service.approve(leave_id=leave_id, approver_id=user_id)
        return _envelope(_leave_json(leave), "Leave approved successfully")

    @app.route("/api/leaves/<leave_id>/reject", methods=["POST"], endpoint="reject_leave")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def reject_leave(leave_id: str):
        user_id, _ = _current_user()
        body = _json_body()
        reason = require_length(
            body.get("rejectionReason"), "Rejection reason", REASON_MIN_LENGTH, REASON_MAX_LENGTH
        )
        leave = service.reject(leave_id=leave_id, approver_id=user_id, reason=reason)
        return _envelope(_leave_json(leave), "Leave rejected successfully")

    @app.route("/api/leaves/<leave_id>", methods=["DELETE"], endpoint="cancel_leave")
    @login_required
    def cancel_leave(leave_id: str):
        user_id, role = _current_user()
        result = service.cancel(leave_id=leave_id, requesting_user_id=user_id, requesting_user_role=role)
        return _envelope(result, "Leave cancelled successfully")

    @app.route("/api/leaves/balance/<employee_id>", methods=["GET"], endpoint="get_leave_balance")
    @login_required
    def get_leave_balance(employee_id: str):
        balance = service.get_balance(employee_id=employee_id, year=request.args.get("year") or None)
        employee_name = service.employee_name(balance.employee_id)
        return _envelope(serialize_balance(balance, employee_name), "Leave balance retrieved successfully")

    @app.route("/api/leaves/balance/<employee_id>", methods=["PUT"], endpoint="update_leave_balance")
    @roles_required(Role.ADMIN)
    def update_leave_balance(employee_id: str):
        body = _json_body()
        balance = service.update_balance_totals(
            employee_id=employee_id,
            year=body.get("year"),
            sick_total=body.get("sickLeaveTotal"),
            vacation_total=body.get("vacationLeaveTotal"),
            personal_total=body.get("personalLeaveTotal"),
        )
        employee_name = service.employee_name(balance.employee_id)
        return _envelope(serialize_balance(balance, employee_name), "Leave balance updated successfully")
