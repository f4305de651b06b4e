from __future__ import annotations

from fastapi import APIRouter, Depends

from rijig_web.api.deps import require_full_pengelola
from rijig_web.api.schemas.session import SessionSummaryResponse, to_session_summary
from rijig_web.domain.entities.session import SessionData
from rijig_web.domain.services.onboarding import PENGELOLA_DASHBOARD_PATH


router = APIRouter()


@router.get(PENGELOLA_DASHBOARD_PATH, response_model=SessionSummaryResponse)
def pengelola_dashboard(session: SessionData = Depends(require_full_pengelola)):
    return to_session_summary(session)
