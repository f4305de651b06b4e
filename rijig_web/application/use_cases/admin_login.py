from __future__ import annotations

from rijig_web.application.dto.auth import AdminLoginInput, AdminLoginOutput, AdminOtpVerifyInput
from rijig_web.application.ports.auth_port import AdminAuthPort
from rijig_web.domain.entities.session import ROLE_ADMINISTRATOR, SessionData
from rijig_web.domain.services.validation import generate_device_id, validate_email, validate_otp

from .auth_common import merge_token_data, raise_if_errors


ADMIN_DEVICE_PREFIX = "admin_"


class AdminLoginUseCase:
    def __init__(self, *, admin_auth_port: AdminAuthPort):
        self._admin_auth_port = admin_auth_port

    def execute(self, command: AdminLoginInput) -> AdminLoginOutput:
        email = command.email.strip().lower()
        errors: dict[str, str] = {}
        if not email:
            errors["email"] = "Email wajib diisi"
        elif not validate_email(email):
            errors["email"] = "Format email tidak valid"
        if not command.password:
            errors["password"] = "Password wajib diisi"
        raise_if_errors(errors)

        device_id = command.device_id or generate_device_id(ADMIN_DEVICE_PREFIX)
        otp = self._admin_auth_port.login(device_id=device_id, email=email, password=command.password)
        return AdminLoginOutput(email=email, device_id=device_id, otp=otp)


class VerifyAdminOtpUseCase:
    def __init__(self, *, admin_auth_port: AdminAuthPort):
        self._admin_auth_port = admin_auth_port

    def execute(self, command: AdminOtpVerifyInput) -> SessionData:
        errors: dict[str, str] = {}
        if not command.otp:
            errors["otp"] = "Kode OTP wajib diisi"
        elif not validate_otp(command.otp):
            errors["otp"] = "Kode OTP harus 4 digit angka"
        if not command.email or not command.device_id:
            errors["general"] = "Data session tidak valid. Silakan login ulang."
        raise_if_errors(errors)

        token_data = self._admin_auth_port.verify_otp(
            device_id=command.device_id,
            email=command.email,
            otp=command.otp,
        )
        session = merge_token_data(
            None,
            token_data,
            role=ROLE_ADMINISTRATOR,
            device_id=command.device_id,
            email=command.email,
        )
        return session.updated(
            registration_status=session.registration_status or "complete",
            next_step=session.next_step or "completed",
        )
