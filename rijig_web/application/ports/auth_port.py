from __future__ import annotations

from typing import Protocol

from rijig_web.application.dto.auth import (
    AdminRegisterInput,
    ApprovalCheckResult,
    AuthTokenData,
    CompanyProfileInput,
    OtpResponse,
    ResetPasswordInput,
)


class CommonAuthPort(Protocol):
    def logout(self) -> None:
        ...


class AdminAuthPort(Protocol):
    def login(self, *, device_id: str, email: str, password: str) -> OtpResponse:
        ...

    def verify_otp(self, *, device_id: str, email: str, otp: str) -> AuthTokenData:
        ...

    def register(self, data: AdminRegisterInput) -> OtpResponse:
        ...

    def forgot_password(self, *, email: str) -> OtpResponse:
        ...

    def reset_password(self, data: ResetPasswordInput) -> None:
        ...

    def verify_email(self, *, email: str, token: str) -> None:
        ...


class PengelolaAuthPort(Protocol):
    def request_otp_register(self, *, phone: str) -> str:
        ...

    def request_otp_login(self, *, phone: str) -> str:
        ...

    def verify_otp_register(self, *, phone: str, otp: str, device_id: str) -> AuthTokenData:
        ...

    def verify_otp_login(self, *, phone: str, otp: str, device_id: str) -> AuthTokenData:
        ...

    def create_company_profile(self, data: CompanyProfileInput) -> AuthTokenData:
        ...

    def check_approval(self) -> ApprovalCheckResult:
        ...

    def create_pin(self, *, pin: str) -> AuthTokenData:
        ...

    def verify_pin(self, *, pin: str) -> AuthTokenData:
        ...
