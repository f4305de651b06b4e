from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import RedirectResponse

from rijig_web.application.ports.auth_port import CommonAuthPort
from rijig_web.domain.entities.session import COOKIE_KEYS, RegistrationStatus, SessionData, UserRole
from rijig_web.domain.exceptions import AccessRedirect, ApiError, ApiUnavailableError, TokenRefreshError
from rijig_web.domain.services.onboarding import ROOT_PATH, resolve_access_redirect
from rijig_web.infrastructure.clients.rijig_api_client import RijigApiClient


logger = logging.getLogger(__name__)


def redirect(location: str) -> RedirectResponse:
    return RedirectResponse(url=location, status_code=302)


def _keep_refreshed_tokens(request: Request, data: SessionData) -> SessionData:
    """Prefer tokens a refresh wrote to the cookie over the ones the request started with.

    `data` is usually derived from the session read before the API call, so a
    refresh in between leaves it holding the superseded tokens.
    """
    started_with = getattr(request.state, "session_tokens", None)
    if started_with is None:
        return data

    changes: dict[str, str] = {}
    for name, original in zip(("access_token", "refresh_token"), started_with):
        stored = request.session.get(COOKIE_KEYS[name])
        if stored and stored != original and getattr(data, name) == original:
            changes[name] = stored
    if not changes:
        return data

    logger.info("session_gate: refreshed_tokens_kept fields=%s", ",".join(sorted(changes)))
    return data.updated(**changes)


def create_session(
    request: Request,
    data: SessionData,
    redirect_to: str,
    client: RijigApiClient,
) -> RedirectResponse:
    data = _keep_refreshed_tokens(request, data)
    request.session.update(data.to_cookie())
    client.set_auth_token(data.access_token)
    logger.info(
        "session_gate: session_written role=%s status=%s token_type=%s redirect=%s",
        data.role,
        data.registration_status,
        data.token_type,
        redirect_to,
    )
    return redirect(redirect_to)


def read_session(request: Request, client: RijigApiClient | None = None) -> SessionData | None:
    session = SessionData.from_cookie(request.session)
    if session is None:
        return None
    if getattr(request.state, "session_tokens", None) is None:
        request.state.session_tokens = (session.access_token, session.refresh_token)
    if client is not None:
        client.set_auth_token(session.access_token)
    return session


def require_session(
    request: Request,
    client: RijigApiClient,
    *,
    role: UserRole | None = None,
    status: RegistrationStatus | None = None,
) -> SessionData:
    session = read_session(request, client)
    target = resolve_access_redirect(session, role=role, status=status)
    if session is None or target is not None:
        target = target or ROOT_PATH
        logger.info(
            "session_gate: access_redirect path=%s required_role=%s required_status=%s target=%s",
            request.url.path,
            role,
            status,
            target,
        )
        raise AccessRedirect(target)
    return session


def destroy_session(
    request: Request,
    client: RijigApiClient,
    common_auth_port: CommonAuthPort,
) -> RedirectResponse:
    # Without a local session there is no token to revoke remotely.
    if read_session(request, client) is not None:
        try:
            common_auth_port.logout()
        except (ApiError, ApiUnavailableError, TokenRefreshError) as exc:
            logger.warning("session_gate: remote_logout_failed error=%s", exc)

    client.remove_auth_token()
    request.session.clear()
    logger.info("session_gate: session_destroyed")
    return redirect(ROOT_PATH)
