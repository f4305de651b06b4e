from __future__ import annotations

from pydantic import BaseModel

from rijig_web.domain.entities.approval import ApprovalBoard, PendingUser


class StepInfoResponse(BaseModel):
    step: int
    status: str
    description: str
    requires_admin_approval: bool
    is_accessible: bool
    is_completed: bool


class PendingUserResponse(BaseModel):
    id: str
    phone: str
    role: str
    registration_status: str
    registration_progress: int
    submitted_at: str
    step_info: StepInfoResponse
    company_profile: dict | None = None
    identity_card: dict | None = None


class PendingTotalsResponse(BaseModel):
    pengelola: int
    pengepul: int
    total: int


class ApprovalBoardResponse(BaseModel):
    pengelola_users: list[PendingUserResponse]
    pengepul_users: list[PendingUserResponse]
    totals: PendingTotalsResponse


class ApprovalActionResponse(BaseModel):
    success: bool
    board: ApprovalBoardResponse
    new_status: str | None = None
    error: str | None = None


def to_pending_user_response(user: PendingUser) -> PendingUserResponse:
    step = user.step_info
    return PendingUserResponse(
        id=user.id,
        phone=user.phone,
        role=user.role,
        registration_status=user.registration_status,
        registration_progress=user.registration_progress,
        submitted_at=user.submitted_at,
        step_info=StepInfoResponse(
            step=step.step,
            status=step.status,
            description=step.description,
            requires_admin_approval=step.requires_admin_approval,
            is_accessible=step.is_accessible,
            is_completed=step.is_completed,
        ),
        company_profile=user.company_profile,
        identity_card=user.identity_card,
    )


def to_approval_board_response(board: ApprovalBoard) -> ApprovalBoardResponse:
    return ApprovalBoardResponse(
        pengelola_users=[to_pending_user_response(user) for user in board.pengelola_users],
        pengepul_users=[to_pending_user_response(user) for user in board.pengepul_users],
        totals=PendingTotalsResponse(
            pengelola=board.totals.pengelola,
            pengepul=board.totals.pengepul,
            total=board.totals.total,
        ),
    )
