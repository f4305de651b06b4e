from __future__ import annotations

import logging

from rijig_web.domain.entities.session import COOKIE_KEYS
from rijig_web.infrastructure.clients.rijig_api_client import RijigApiClient

from .request_context import current_session_store


logger = logging.getLogger(__name__)


def setup_token_refresh(client: RijigApiClient) -> None:
    """Let `client` refresh tokens using, and writing back to, the current cookie session."""
    client.set_token_refresh_handlers(
        get_refresh_token=_get_refresh_token,
        on_success=_on_refresh_success,
        on_error=_on_refresh_error,
    )


def _get_refresh_token() -> str | None:
    store = current_session_store()
    if store is None:
        return None
    return store.get(COOKIE_KEYS["refresh_token"]) or None


def _on_refresh_success(payload: dict) -> None:
    store = current_session_store()
    if store is None:
        return
    if payload.get("access_token"):
        store[COOKIE_KEYS["access_token"]] = payload["access_token"]
    if payload.get("refresh_token"):
        store[COOKIE_KEYS["refresh_token"]] = payload["refresh_token"]
    logger.info("token_refresh: session_tokens_updated rotated_refresh=%s", bool(payload.get("refresh_token")))


def _on_refresh_error() -> None:
    store = current_session_store()
    if store is None:
        return
    store.clear()
    logger.info("token_refresh: session_cleared")
