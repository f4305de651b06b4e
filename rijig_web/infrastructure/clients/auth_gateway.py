from __future__ import annotations

from dataclasses import asdict

from rijig_web.application.dto.auth import (
    AdminRegisterInput,
    ApprovalCheckResult,
    AuthTokenData,
    CompanyProfileInput,
    OtpResponse,
    ResetPasswordInput,
)
from rijig_web.application.ports.auth_port import AdminAuthPort, CommonAuthPort, PengelolaAuthPort

from .rijig_api_client import RijigApiClient
from .rijig_mappers import (
    ensure_ok,
    require_data,
    to_approval_check_result,
    to_auth_token_data,
    to_otp_response,
)


PENGELOLA_ROLE_NAME = "pengelola"


class CommonAuthGateway(CommonAuthPort):
    def __init__(self, client: RijigApiClient):
        self._client = client

    def logout(self) -> None:
        ensure_ok(self._client.post("/auth/logout"))


class AdminAuthGateway(AdminAuthPort):
    """Admin sign-in and account endpoints; all of them run before a session exists."""

    def __init__(self, client: RijigApiClient):
        self._client = client

    def login(self, *, device_id: str, email: str, password: str) -> OtpResponse:
        response = self._client.post(
            "/auth/login/admin",
            json={"device_id": device_id, "email": email, "password": password},
            refreshable=False,
        )
        return to_otp_response(require_data(response))

    def verify_otp(self, *, device_id: str, email: str, otp: str) -> AuthTokenData:
        response = self._client.post(
            "/auth/verify-otp-admin",
            json={"device_id": device_id, "email": email, "otp": otp},
            refreshable=False,
        )
        return to_auth_token_data(require_data(response))

    def register(self, data: AdminRegisterInput) -> OtpResponse:
        response = self._client.post("/auth/register/admin", json=asdict(data), refreshable=False)
        return to_otp_response(require_data(response))

    def forgot_password(self, *, email: str) -> OtpResponse:
        response = self._client.post("/auth/forgot-password", json={"email": email}, refreshable=False)
        return to_otp_response(require_data(response))

    def reset_password(self, data: ResetPasswordInput) -> None:
        ensure_ok(self._client.post("/auth/reset-password", json=asdict(data), refreshable=False))

    def verify_email(self, *, email: str, token: str) -> None:
        ensure_ok(
            self._client.post(
                "/auth/verify-email",
                json={"email": email, "token": token},
                refreshable=False,
            )
        )


class PengelolaAuthGateway(PengelolaAuthPort):
    def __init__(self, client: RijigApiClient):
        self._client = client

    def request_otp_register(self, *, phone: str) -> str:
        response = self._client.post(
            "/auth/request-otp/register",
            json={"phone": phone, "role_name": PENGELOLA_ROLE_NAME},
            refreshable=False,
        )
        return ensure_ok(response).message

    def request_otp_login(self, *, phone: str) -> str:
        response = self._client.post(
            "/auth/request-otp",
            json={"phone": phone, "role_name": PENGELOLA_ROLE_NAME},
            refreshable=False,
        )
        return ensure_ok(response).message

    def verify_otp_register(self, *, phone: str, otp: str, device_id: str) -> AuthTokenData:
        response = self._client.post(
            "/auth/verif-otp/register",
            json=_otp_verify_payload(phone=phone, otp=otp, device_id=device_id),
            refreshable=False,
        )
        return to_auth_token_data(require_data(response))

    def verify_otp_login(self, *, phone: str, otp: str, device_id: str) -> AuthTokenData:
        response = self._client.post(
            "/auth/verif-otp",
            json=_otp_verify_payload(phone=phone, otp=otp, device_id=device_id),
            refreshable=False,
        )
        return to_auth_token_data(require_data(response))

    def create_company_profile(self, data: CompanyProfileInput) -> AuthTokenData:
        fields = {key: str(value) for key, value in asdict(data).items() if key != "company_logo"}
        files = None
        if data.company_logo is not None:
            logo = data.company_logo
            files = {"company_logo": (logo.filename, logo.content, logo.content_type)}
        response = self._client.post("/companyprofile/create", data=fields, files=files)
        return to_auth_token_data(require_data(response))

    def check_approval(self) -> ApprovalCheckResult:
        response = self._client.get("/auth/cekapproval")
        return to_approval_check_result(require_data(response))

    def create_pin(self, *, pin: str) -> AuthTokenData:
        response = self._client.post("/pin/create", json={"userpin": pin})
        return to_auth_token_data(require_data(response))

    def verify_pin(self, *, pin: str) -> AuthTokenData:
        response = self._client.post("/pin/verif", json={"userpin": pin})
        return to_auth_token_data(require_data(response))


def _otp_verify_payload(*, phone: str, otp: str, device_id: str) -> dict:
    return {
        "phone": phone,
        "otp": otp,
        "device_id": device_id,
        "role_name": PENGELOLA_ROLE_NAME,
    }
