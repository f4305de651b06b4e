from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from rijig_web.api.deps import get_api_client, get_common_auth_gateway
from rijig_web.api.session_gate import destroy_session
from rijig_web.application.ports.auth_port import CommonAuthPort
from rijig_web.infrastructure.clients.rijig_api_client import RijigApiClient


router = APIRouter()


@router.post("/action/logout")
def logout(
    request: Request,
    client: RijigApiClient = Depends(get_api_client),
    common_auth_port: CommonAuthPort = Depends(get_common_auth_gateway),
):
    return destroy_session(request, client, common_auth_port)


@router.get("/action/logout")
def logout_page():
    raise HTTPException(status_code=404, detail="Not Found")
