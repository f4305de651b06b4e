from __future__ import annotations

from typing import Any

from rijig_web.application.dto.approval import (
    ApprovalActionResult,
    ApprovalSummary,
    Pagination,
    PendingUsersPage,
)
from rijig_web.application.dto.auth import ApprovalCheckResult, AuthTokenData, OtpResponse
from rijig_web.domain.entities.approval import PendingUser, StepInfo
from rijig_web.domain.entities.trash import TrashCategory
from rijig_web.domain.exceptions import ApiError

from .rijig_api_client import ApiResponse


def ensure_ok(response: ApiResponse) -> ApiResponse:
    if response.status >= 400:
        raise ApiError(response.message or "Request failed.", status_code=response.status)
    return response


def require_data(response: ApiResponse) -> dict:
    ensure_ok(response)
    if not isinstance(response.data, dict):
        raise ApiError(response.message or "Response has no data.", status_code=response.status)
    return response.data


def _opt_int(value: Any) -> int | None:
    if value is None:
        return None
    return int(value)


def to_auth_token_data(data: dict) -> AuthTokenData:
    return AuthTokenData(
        message=str(data.get("message", "")),
        access_token=str(data.get("access_token", "")),
        refresh_token=str(data.get("refresh_token", "")),
        session_id=str(data.get("session_id", "")),
        token_type=data.get("token_type"),
        expires_in=_opt_int(data.get("expires_in")),
        registration_status=data.get("registration_status"),
        next_step=data.get("next_step"),
    )


def to_otp_response(data: dict) -> OtpResponse:
    return OtpResponse(
        message=str(data.get("message", "")),
        expires_in_seconds=int(data.get("expires_in_seconds", 0)),
        remaining_time=str(data.get("remaining_time", "")),
        email=data.get("email"),
        can_resend=data.get("can_resend"),
        max_attempts=_opt_int(data.get("max_attempts")),
    )


def to_approval_check_result(data: dict) -> ApprovalCheckResult:
    return ApprovalCheckResult(
        message=str(data.get("message", "")),
        registration_status=data.get("registration_status"),
        next_step=str(data.get("next_step", "")),
        access_token=data.get("access_token"),
        refresh_token=data.get("refresh_token"),
        token_type=data.get("token_type"),
        expires_in=_opt_int(data.get("expires_in")),
        session_id=data.get("session_id"),
    )


def to_step_info(data: dict) -> StepInfo:
    return StepInfo(
        step=int(data.get("step", 0)),
        status=str(data.get("status", "")),
        description=str(data.get("description", "")),
        requires_admin_approval=bool(data.get("requires_admin_approval", False)),
        is_accessible=bool(data.get("is_accessible", False)),
        is_completed=bool(data.get("is_completed", False)),
    )


def to_pending_user(data: dict) -> PendingUser:
    role = data.get("role") or {}
    role_name = role.get("role_name") if isinstance(role, dict) else role
    return PendingUser(
        id=str(data["id"]),
        phone=str(data.get("phone", "")),
        role=role_name,
        registration_status=str(data.get("registration_status", "")),
        registration_progress=int(data.get("registration_progress", 0)),
        submitted_at=str(data.get("submitted_at", "")),
        step_info=to_step_info(data.get("step_info") or {}),
        company_profile=data.get("company_profile"),
        identity_card=data.get("identity_card"),
    )


def to_pending_users_page(data: dict) -> PendingUsersPage:
    pagination = data.get("pagination") or {}
    summary = data.get("summary") or {}
    return PendingUsersPage(
        users=tuple(to_pending_user(row) for row in data.get("users") or []),
        pagination=Pagination(
            page=int(pagination.get("page", 1)),
            limit=int(pagination.get("limit", 0)),
            total_pages=int(pagination.get("total_pages", 0)),
            total_records=int(pagination.get("total_records", 0)),
            has_next=bool(pagination.get("has_next", False)),
            has_prev=bool(pagination.get("has_prev", False)),
        ),
        summary=ApprovalSummary(
            total_pending=int(summary.get("total_pending", 0)),
            pengelola_pending=int(summary.get("pengelola_pending", 0)),
            pengepul_pending=int(summary.get("pengepul_pending", 0)),
        ),
    )


def to_approval_action_result(data: dict) -> ApprovalActionResult:
    return ApprovalActionResult(
        user_id=str(data.get("user_id", "")),
        action=data.get("action"),
        previous_status=str(data.get("previous_status", "")),
        new_status=str(data.get("new_status", "")),
        processed_at=str(data.get("processed_at", "")),
        processed_by=str(data.get("processed_by", "")),
    )


def to_trash_category(data: dict) -> TrashCategory:
    return TrashCategory(
        id=str(data["id"]),
        trash_name=str(data.get("trash_name", "")),
        trash_icon=str(data.get("trash_icon", "")),
        estimated_price=float(data.get("estimated_price", 0)),
        variety=str(data.get("variety", "")),
        created_at=str(data.get("created_at", "")),
        updated_at=str(data.get("updated_at", "")),
    )
