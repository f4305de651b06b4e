from __future__ import annotations

from pydantic import BaseModel

from rijig_web.domain.entities.session import SessionData


class SessionSummaryResponse(BaseModel):
    role: str
    registration_status: str | None = None
    token_type: str | None = None
    next_step: str | None = None
    email: str | None = None
    phone: str | None = None


class LandingResponse(BaseModel):
    authenticated: bool
    session: SessionSummaryResponse | None = None
    next_path: str | None = None


def to_session_summary(session: SessionData) -> SessionSummaryResponse:
    return SessionSummaryResponse(
        role=session.role,
        registration_status=session.registration_status,
        token_type=session.token_type,
        next_step=session.next_step,
        email=session.email,
        phone=session.phone,
    )
