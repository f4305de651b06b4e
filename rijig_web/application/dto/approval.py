from __future__ import annotations

from dataclasses import dataclass

from rijig_web.domain.entities.approval import ApprovalAction, ApprovalBoard, PendingUser


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total_pages: int
    total_records: int
    has_next: bool
    has_prev: bool


@dataclass(frozen=True)
class ApprovalSummary:
    total_pending: int
    pengelola_pending: int
    pengepul_pending: int


@dataclass(frozen=True)
class PendingUsersPage:
    users: tuple[PendingUser, ...]
    pagination: Pagination
    summary: ApprovalSummary


@dataclass(frozen=True)
class ApprovalActionInput:
    user_id: str
    action: ApprovalAction


@dataclass(frozen=True)
class ApprovalActionResult:
    user_id: str
    action: ApprovalAction
    previous_status: str
    new_status: str
    processed_at: str
    processed_by: str


@dataclass(frozen=True)
class ApprovalActionOutput:
    success: bool
    board: ApprovalBoard
    result: ApprovalActionResult | None = None
    error: str | None = None
