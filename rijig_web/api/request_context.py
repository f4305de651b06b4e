from __future__ import annotations

from contextvars import ContextVar
from typing import Any, MutableMapping

from starlette.types import ASGIApp, Receive, Scope, Send


_current_session: ContextVar[MutableMapping[str, Any] | None] = ContextVar(
    "rijig_current_session",
    default=None,
)


def current_session_store() -> MutableMapping[str, Any] | None:
    """Cookie session of the request being handled, if any."""
    return _current_session.get()


class SessionContextMiddleware:
    """Exposes `scope["session"]` to code that has no access to the request.

    Must sit inside `SessionMiddleware` so the session is already loaded.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        token = _current_session.set(scope.get("session"))
        try:
            await self.app(scope, receive, send)
        finally:
            _current_session.reset(token)
