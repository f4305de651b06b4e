from __future__ import annotations

from typing import Protocol

from rijig_web.application.dto.approval import (
    ApprovalActionInput,
    ApprovalActionResult,
    PendingUsersPage,
)
from rijig_web.domain.entities.approval import ApprovalRole, PendingUser


class ApprovalPort(Protocol):
    def get_pending_users(self, *, role: ApprovalRole, page: int, limit: int) -> PendingUsersPage:
        ...

    def get_approval_details(self, *, user_id: str) -> PendingUser | None:
        ...

    def perform_approval_action(self, command: ApprovalActionInput) -> ApprovalActionResult:
        ...
