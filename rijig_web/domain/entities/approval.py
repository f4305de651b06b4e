from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal


ApprovalRole = Literal["pengelola", "pengepul"]
ApprovalAction = Literal["approved", "rejected"]

APPROVAL_ROLES: tuple[ApprovalRole, ...] = ("pengelola", "pengepul")
APPROVAL_ACTIONS: tuple[ApprovalAction, ...] = ("approved", "rejected")


@dataclass(frozen=True)
class StepInfo:
    step: int
    status: str
    description: str
    requires_admin_approval: bool
    is_accessible: bool
    is_completed: bool


@dataclass(frozen=True)
class PendingUser:
    id: str
    phone: str
    role: ApprovalRole
    registration_status: str
    registration_progress: int
    submitted_at: str
    step_info: StepInfo
    company_profile: dict | None = None
    identity_card: dict | None = None


@dataclass(frozen=True)
class PendingTotals:
    pengelola: int = 0
    pengepul: int = 0
    total: int = 0


@dataclass(frozen=True)
class ApprovalBoard:
    pengelola_users: tuple[PendingUser, ...] = ()
    pengepul_users: tuple[PendingUser, ...] = ()
    totals: PendingTotals = field(default_factory=PendingTotals)

    def users_for(self, role: ApprovalRole) -> tuple[PendingUser, ...]:
        return self.pengelola_users if role == "pengelola" else self.pengepul_users

    def find(self, user_id: str) -> PendingUser | None:
        for user in (*self.pengelola_users, *self.pengepul_users):
            if user.id == user_id:
                return user
        return None

    def without(self, user_id: str) -> ApprovalBoard:
        in_pengelola = any(user.id == user_id for user in self.pengelola_users)
        in_pengepul = any(user.id == user_id for user in self.pengepul_users)
        if not in_pengelola and not in_pengepul:
            return self

        totals = self.totals
        return replace(
            self,
            pengelola_users=tuple(user for user in self.pengelola_users if user.id != user_id),
            pengepul_users=tuple(user for user in self.pengepul_users if user.id != user_id),
            totals=PendingTotals(
                pengelola=max(0, totals.pengelola - (1 if in_pengelola else 0)),
                pengepul=max(0, totals.pengepul - (1 if in_pengepul else 0)),
                total=max(0, totals.total - 1),
            ),
        )
