from __future__ import annotations

import logging
from threading import Event, Lock
from typing import Any

from rijig_web.domain.exceptions import TokenRefreshError


logger = logging.getLogger(__name__)


class RefreshTicket:
    """Outcome of one refresh call, shared by the refresher and every waiter."""

    def __init__(self, key: str):
        self.key = key
        self._done = Event()
        self._payload: dict[str, Any] = {}
        self._error: BaseException | None = None

    def wait(self, timeout: float | None = None) -> dict[str, Any]:
        if not self._done.wait(timeout):
            raise TokenRefreshError("Timed out waiting for token refresh.")
        if self._error is not None:
            raise TokenRefreshError("Token refresh failed.") from self._error
        return self._payload

    def _resolve(self, payload: dict[str, Any]) -> None:
        self._payload = payload
        self._done.set()

    def _fail(self, error: BaseException) -> None:
        self._error = error
        self._done.set()


class RefreshCoordinator:
    """Keeps at most one refresh call in flight per credential set.

    The first caller for a key becomes the refresher; callers arriving while
    that refresh is in flight get the same ticket and block on it.
    """

    def __init__(self):
        self._lock = Lock()
        self._in_flight: dict[str, RefreshTicket] = {}
        self._waiting: dict[str, int] = {}

    def is_refreshing(self, key: str | None = None) -> bool:
        with self._lock:
            if key is None:
                return bool(self._in_flight)
            return key in self._in_flight

    def waiting(self, key: str) -> int:
        with self._lock:
            return self._waiting.get(key, 0)

    def acquire_or_wait(self, key: str) -> tuple[bool, RefreshTicket]:
        with self._lock:
            ticket = self._in_flight.get(key)
            if ticket is not None:
                self._waiting[key] = self._waiting.get(key, 0) + 1
                return False, ticket
            ticket = RefreshTicket(key)
            self._in_flight[key] = ticket
            return True, ticket

    def wait(self, ticket: RefreshTicket, timeout: float | None = None) -> dict[str, Any]:
        try:
            return ticket.wait(timeout)
        finally:
            with self._lock:
                remaining = self._waiting.get(ticket.key, 0) - 1
                if remaining > 0:
                    self._waiting[ticket.key] = remaining
                else:
                    self._waiting.pop(ticket.key, None)

    def resolve(self, ticket: RefreshTicket, payload: dict[str, Any]) -> None:
        with self._lock:
            self._release(ticket)
            ticket._resolve(payload)
        logger.info("refresh_coordinator: refresh_resolved")

    def fail(self, ticket: RefreshTicket, error: BaseException) -> None:
        with self._lock:
            self._release(ticket)
            ticket._fail(error)
        logger.warning("refresh_coordinator: refresh_failed error=%s", error)

    def _release(self, ticket: RefreshTicket) -> None:
        if self._in_flight.get(ticket.key) is ticket:
            del self._in_flight[ticket.key]
