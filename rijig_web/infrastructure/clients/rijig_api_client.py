from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Callable

import httpx

from rijig_web.domain.exceptions import ApiError, ApiUnavailableError, TokenRefreshError

from .refresh_coordinator import RefreshCoordinator


logger = logging.getLogger(__name__)


REFRESH_PATH = "/auth/refresh-token"
AUTHORIZATION = "Authorization"


@dataclass(frozen=True)
class RijigApiClientSettings:
    base_url: str
    api_key: str
    timeout_seconds: float


@dataclass(frozen=True)
class ApiResponse:
    status: int
    message: str
    data: Any = None


@dataclass(frozen=True)
class TokenRefreshHandlers:
    get_refresh_token: Callable[[], str | None]
    on_success: Callable[[dict], None]
    on_error: Callable[[], None]


@dataclass
class _PendingCall:
    method: str
    path: str
    params: dict | None = None
    json: Any = None
    files: dict | None = None
    data: dict | None = None
    headers: dict[str, str] = field(default_factory=dict)
    refreshable: bool = True
    retried: bool = False


class _SharedState:
    def __init__(self, http: httpx.Client, coordinator: RefreshCoordinator):
        self.http = http
        self.coordinator = coordinator
        self.handlers: TokenRefreshHandlers | None = None


class RijigApiClient:
    """HTTP client for the Rijig REST API.

    Every request carries the API key, the bearer token once one is set and the
    ngrok bypass header when the base URL points at ngrok. A 401 is recovered
    once by refreshing the access token, with concurrent failures sharing a
    single refresh call through the `RefreshCoordinator`.
    """

    def __init__(
        self,
        settings: RijigApiClientSettings,
        *,
        transport: httpx.BaseTransport | None = None,
        coordinator: RefreshCoordinator | None = None,
    ):
        self._settings = settings
        http = httpx.Client(
            base_url=settings.base_url.rstrip("/"),
            timeout=settings.timeout_seconds,
            transport=transport,
        )
        self._shared = _SharedState(http=http, coordinator=coordinator or RefreshCoordinator())
        self._default_headers: dict[str, str] = {}

    @property
    def coordinator(self) -> RefreshCoordinator:
        return self._shared.coordinator

    @property
    def auth_token(self) -> str | None:
        value = self._default_headers.get(AUTHORIZATION)
        if not value:
            return None
        return value.replace("Bearer ", "", 1)

    @property
    def has_refresh_handlers(self) -> bool:
        return self._shared.handlers is not None

    def set_auth_token(self, token: str) -> None:
        self._default_headers[AUTHORIZATION] = f"Bearer {token}"

    def remove_auth_token(self) -> None:
        self._default_headers.pop(AUTHORIZATION, None)

    def set_token_refresh_handlers(
        self,
        *,
        get_refresh_token: Callable[[], str | None],
        on_success: Callable[[dict], None],
        on_error: Callable[[], None],
    ) -> None:
        self._shared.handlers = TokenRefreshHandlers(
            get_refresh_token=get_refresh_token,
            on_success=on_success,
            on_error=on_error,
        )

    def fork(self) -> RijigApiClient:
        """Per-request view: shares the pool, coordinator and handlers, owns its headers."""
        forked = object.__new__(RijigApiClient)
        forked._settings = self._settings
        forked._shared = self._shared
        forked._default_headers = dict(self._default_headers)
        return forked

    def close(self) -> None:
        self._shared.http.close()

    def get(self, path: str, *, params: dict | None = None, refreshable: bool = True) -> ApiResponse:
        return self.request("GET", path, params=params, refreshable=refreshable)

    def post(
        self,
        path: str,
        *,
        json: Any = None,
        data: dict | None = None,
        files: dict | None = None,
        refreshable: bool = True,
    ) -> ApiResponse:
        return self.request("POST", path, json=json, data=data, files=files, refreshable=refreshable)

    def put(
        self,
        path: str,
        *,
        json: Any = None,
        data: dict | None = None,
        files: dict | None = None,
        refreshable: bool = True,
    ) -> ApiResponse:
        return self.request("PUT", path, json=json, data=data, files=files, refreshable=refreshable)

    def delete(self, path: str) -> ApiResponse:
        return self.request("DELETE", path)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        json: Any = None,
        data: dict | None = None,
        files: dict | None = None,
        refreshable: bool = True,
    ) -> ApiResponse:
        """Send a request; `files` values must be bytes tuples so a replay can resend them.

        `refreshable=False` marks calls made without a session (OTP, login), whose
        401 means bad credentials rather than an expired access token.
        """
        call = _PendingCall(
            method=method,
            path=path,
            params=params,
            json=json,
            data=data,
            files=files,
            refreshable=refreshable,
        )
        return self._send(call)

    def _base_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self._settings.api_key:
            headers["X-API-Key"] = self._settings.api_key
        if "ngrok" in self._settings.base_url:
            headers["ngrok-skip-browser-warning"] = "true"
        return headers

    def _headers_for(self, call: _PendingCall) -> dict[str, str]:
        headers = self._base_headers()
        # Form and multipart bodies get their Content-Type (and boundary) from httpx.
        if not call.files and call.data is None:
            headers["Content-Type"] = "application/json"
        headers.update(self._default_headers)
        headers.update(call.headers)
        return headers

    def _send(self, call: _PendingCall) -> ApiResponse:
        http = self._shared.http
        request = http.build_request(
            call.method,
            call.path,
            params=call.params,
            json=call.json,
            data=call.data,
            files=call.files,
            headers=self._headers_for(call),
        )
        try:
            response = http.send(request)
        except httpx.HTTPError as exc:
            logger.warning(
                "rijig_api_client: request_failed method=%s path=%s error=%s",
                call.method,
                call.path,
                exc,
            )
            raise ApiUnavailableError(f"Rijig API unreachable: {exc}") from exc

        logger.debug(
            "rijig_api_client: response method=%s path=%s status=%s retried=%s",
            call.method,
            call.path,
            response.status_code,
            call.retried,
        )
        if response.is_success:
            return _parse_envelope(response)

        if (
            response.status_code == 401
            and call.refreshable
            and not call.retried
            and self._shared.handlers is not None
        ):
            call.retried = True
            return self._recover_unauthorized(call, self._shared.handlers)

        raise _api_error(response)

    def _recover_unauthorized(self, call: _PendingCall, handlers: TokenRefreshHandlers) -> ApiResponse:
        refresh_token = handlers.get_refresh_token()
        if not refresh_token:
            logger.info("rijig_api_client: refresh_skipped reason=no_refresh_token path=%s", call.path)
            handlers.on_error()
            raise TokenRefreshError("No refresh token.")

        coordinator = self._shared.coordinator
        is_refresher, ticket = coordinator.acquire_or_wait(refresh_token)

        if not is_refresher:
            logger.info(
                "rijig_api_client: refresh_queued path=%s waiting=%s",
                call.path,
                coordinator.waiting(refresh_token),
            )
            try:
                payload = coordinator.wait(ticket, timeout=self._settings.timeout_seconds)
            except TokenRefreshError:
                handlers.on_error()
                raise
            self._use_access_token(call, payload["access_token"])
            handlers.on_success(payload)
            return self._send(call)

        try:
            payload = self._request_new_tokens(refresh_token)
        except Exception as exc:
            coordinator.fail(ticket, exc)
            handlers.on_error()
            raise TokenRefreshError("Token refresh failed.") from exc

        self._use_access_token(call, payload["access_token"])
        coordinator.resolve(ticket, payload)
        handlers.on_success(payload)
        return self._send(call)

    def _use_access_token(self, call: _PendingCall, access_token: str) -> None:
        self.set_auth_token(access_token)
        call.headers[AUTHORIZATION] = f"Bearer {access_token}"

    def _request_new_tokens(self, refresh_token: str) -> dict:
        logger.info("rijig_api_client: refresh_started")
        try:
            response = self._shared.http.post(
                REFRESH_PATH,
                json={"refresh_token": refresh_token},
                headers=self._base_headers(),
            )
        except httpx.HTTPError as exc:
            raise ApiUnavailableError(f"Rijig API unreachable: {exc}") from exc

        if not response.is_success:
            raise _api_error(response)

        data = _parse_envelope(response).data
        if not isinstance(data, dict) or not data.get("access_token"):
            raise TokenRefreshError("Refresh response is missing access_token.")
        return data


def _json_or_empty(response: httpx.Response) -> dict:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def _parse_envelope(response: httpx.Response) -> ApiResponse:
    payload = _json_or_empty(response)
    meta = payload.get("meta") or {}
    return ApiResponse(
        status=int(meta.get("status", response.status_code)),
        message=str(meta.get("message", "")),
        data=payload.get("data"),
    )


def _api_error(response: httpx.Response) -> ApiError:
    payload = _json_or_empty(response)
    meta = payload.get("meta") or {}
    message = meta.get("message") or response.reason_phrase or f"HTTP {response.status_code}"
    return ApiError(str(message), status_code=response.status_code, payload=payload)
