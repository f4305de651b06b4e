from __future__ import annotations

from rijig_web.application.dto.auth import ApprovalCheckResult, AuthTokenData
from rijig_web.domain.entities.session import SessionData, UserRole
from rijig_web.domain.exceptions import FormValidationError


def merge_token_data(
    session: SessionData | None,
    token_data: AuthTokenData | ApprovalCheckResult,
    *,
    role: UserRole,
    **extra: str | None,
) -> SessionData:
    """Fold the tokens and onboarding state returned by the API into a session.

    Empty values in `token_data` keep what the session already holds.
    """
    changes = {
        "access_token": token_data.access_token or None,
        "refresh_token": token_data.refresh_token or None,
        "session_id": token_data.session_id or None,
        "token_type": token_data.token_type,
        "registration_status": token_data.registration_status,
        "next_step": token_data.next_step or None,
        **extra,
    }
    if session is None:
        if not token_data.access_token:
            raise FormValidationError({"general": "Respons server tidak berisi token akses"})
        return SessionData(access_token=token_data.access_token, role=role).updated(**changes)
    return session.updated(role=role, **changes)


def raise_if_errors(errors: dict[str, str]) -> None:
    if errors:
        raise FormValidationError(errors)
