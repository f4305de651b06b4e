from __future__ import annotations

from rijig_web.application.dto.approval import (
    ApprovalActionInput,
    ApprovalActionResult,
    PendingUsersPage,
)
from rijig_web.application.ports.approval_port import ApprovalPort
from rijig_web.domain.entities.approval import ApprovalRole, PendingUser

from .rijig_api_client import RijigApiClient
from .rijig_mappers import (
    ensure_ok,
    require_data,
    to_approval_action_result,
    to_pending_user,
    to_pending_users_page,
)


class ApprovalGateway(ApprovalPort):
    def __init__(self, client: RijigApiClient):
        self._client = client

    def get_pending_users(self, *, role: ApprovalRole, page: int, limit: int) -> PendingUsersPage:
        response = self._client.get(
            "/needapprove/pending",
            params={"role": role, "page": page, "limit": limit},
        )
        return to_pending_users_page(require_data(response))

    def get_approval_details(self, *, user_id: str) -> PendingUser | None:
        response = ensure_ok(self._client.get(f"/needapprove/{user_id}/approval-details"))
        if not isinstance(response.data, dict):
            return None
        return to_pending_user(response.data)

    def perform_approval_action(self, command: ApprovalActionInput) -> ApprovalActionResult:
        response = self._client.post(
            "/needapprove/approval-action",
            json={"user_id": command.user_id, "action": command.action},
        )
        return to_approval_action_result(require_data(response))
