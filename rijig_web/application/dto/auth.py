from __future__ import annotations

from dataclasses import dataclass

from rijig_web.domain.entities.session import RegistrationStatus, TokenType


@dataclass(frozen=True)
class UploadedFile:
    filename: str
    content: bytes
    content_type: str


@dataclass(frozen=True)
class AuthTokenData:
    message: str
    access_token: str
    refresh_token: str
    session_id: str
    token_type: TokenType | None = None
    expires_in: int | None = None
    registration_status: RegistrationStatus | None = None
    next_step: str | None = None


@dataclass(frozen=True)
class OtpResponse:
    message: str
    expires_in_seconds: int
    remaining_time: str
    email: str | None = None
    can_resend: bool | None = None
    max_attempts: int | None = None


@dataclass(frozen=True)
class ApprovalCheckResult:
    message: str
    registration_status: RegistrationStatus
    next_step: str
    access_token: str | None = None
    refresh_token: str | None = None
    token_type: TokenType | None = None
    expires_in: int | None = None
    session_id: str | None = None


@dataclass(frozen=True)
class AdminLoginInput:
    email: str
    password: str
    device_id: str | None = None


@dataclass(frozen=True)
class AdminLoginOutput:
    email: str
    device_id: str
    otp: OtpResponse


@dataclass(frozen=True)
class AdminOtpVerifyInput:
    email: str
    device_id: str
    otp: str


@dataclass(frozen=True)
class AdminRegisterInput:
    name: str
    gender: str
    dateofbirth: str
    placeofbirth: str
    phone: str
    email: str
    password: str
    password_confirm: str


@dataclass(frozen=True)
class ResetPasswordInput:
    token: str
    email: str
    new_password: str


@dataclass(frozen=True)
class PengelolaOtpVerifyInput:
    phone: str
    otp: str
    device_id: str


@dataclass(frozen=True)
class CompanyProfileInput:
    companyname: str
    companyaddress: str
    companyphone: str
    companyemail: str
    companywebsite: str
    taxid: str
    foundeddate: str
    companytype: str
    companydescription: str
    company_logo: UploadedFile | None = None


@dataclass(frozen=True)
class CreatePinInput:
    pin: str
    confirm_pin: str
