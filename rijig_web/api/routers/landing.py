from __future__ import annotations

from fastapi import APIRouter, Depends

from rijig_web.api.deps import get_optional_session
from rijig_web.api.schemas.session import LandingResponse, to_session_summary
from rijig_web.domain.entities.session import SessionData
from rijig_web.domain.services.onboarding import ROOT_PATH, landing_path_for


router = APIRouter()


@router.get(ROOT_PATH, response_model=LandingResponse)
def landing(session: SessionData | None = Depends(get_optional_session)):
    if session is None:
        return LandingResponse(authenticated=False)
    return LandingResponse(
        authenticated=True,
        session=to_session_summary(session),
        next_path=landing_path_for(session.role, session.registration_status),
    )
