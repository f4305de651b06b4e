from __future__ import annotations

import logging

from rijig_web.application.dto.approval import ApprovalActionInput, ApprovalActionOutput
from rijig_web.application.ports.approval_port import ApprovalPort
from rijig_web.domain.entities.approval import (
    APPROVAL_ACTIONS,
    ApprovalBoard,
    PendingTotals,
    PendingUser,
)
from rijig_web.domain.exceptions import ApiError, ApiUnavailableError, FormValidationError


logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


class LoadApprovalBoardUseCase:
    def __init__(self, *, approval_port: ApprovalPort):
        self._approval_port = approval_port

    def execute(self, *, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> ApprovalBoard:
        pengelola = self._approval_port.get_pending_users(role="pengelola", page=page, limit=limit)
        pengepul = self._approval_port.get_pending_users(role="pengepul", page=page, limit=limit)
        return ApprovalBoard(
            pengelola_users=pengelola.users,
            pengepul_users=pengepul.users,
            totals=PendingTotals(
                pengelola=pengelola.summary.pengelola_pending,
                pengepul=pengepul.summary.pengepul_pending,
                total=pengelola.summary.total_pending,
            ),
        )


class PerformApprovalActionUseCase:
    """Remove the user from the board first, confirm remotely, restore on failure."""

    def __init__(self, *, approval_port: ApprovalPort):
        self._approval_port = approval_port

    def execute(self, board: ApprovalBoard, command: ApprovalActionInput) -> ApprovalActionOutput:
        if command.action not in APPROVAL_ACTIONS:
            raise FormValidationError({"action": "Aksi tidak valid"})
        if not command.user_id:
            raise FormValidationError({"user_id": "Pengguna wajib dipilih"})

        optimistic = board.without(command.user_id)
        try:
            result = self._approval_port.perform_approval_action(command)
        except (ApiError, ApiUnavailableError) as exc:
            logger.warning(
                "approval_board: action_rolled_back user_id=%s action=%s error=%s",
                command.user_id,
                command.action,
                exc,
            )
            verb = "menyetujui" if command.action == "approved" else "menolak"
            return ApprovalActionOutput(success=False, board=board, error=f"Gagal {verb} pengguna")

        logger.info(
            "approval_board: action_confirmed user_id=%s action=%s new_status=%s",
            command.user_id,
            command.action,
            result.new_status,
        )
        return ApprovalActionOutput(success=True, board=optimistic, result=result)


class GetApprovalDetailsUseCase:
    def __init__(self, *, approval_port: ApprovalPort):
        self._approval_port = approval_port

    def execute(self, *, user_id: str) -> PendingUser | None:
        return self._approval_port.get_approval_details(user_id=user_id)
