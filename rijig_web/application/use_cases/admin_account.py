from __future__ import annotations

from rijig_web.application.dto.auth import AdminRegisterInput, OtpResponse, ResetPasswordInput
from rijig_web.application.ports.auth_port import AdminAuthPort
from rijig_web.domain.exceptions import FormValidationError
from rijig_web.domain.services.validation import (
    extract_reset_token,
    normalize_date_ddmmyyyy,
    validate_email,
    validate_password,
    validate_phone_number,
)

from .auth_common import raise_if_errors


GENDERS = ("laki-laki", "perempuan")
PASSWORD_RULE_MESSAGE = "Password minimal 8 karakter dengan huruf besar, angka, dan simbol"


def _email_error(email: str) -> str | None:
    if not email:
        return "Email wajib diisi"
    if not validate_email(email):
        return "Format email tidak valid"
    return None


class RegisterAdminUseCase:
    def __init__(self, *, admin_auth_port: AdminAuthPort):
        self._admin_auth_port = admin_auth_port

    def execute(self, command: AdminRegisterInput) -> OtpResponse:
        errors: dict[str, str] = {}
        if not command.name.strip():
            errors["name"] = "Nama wajib diisi"
        if command.gender not in GENDERS:
            errors["gender"] = "Jenis kelamin wajib dipilih"
        dateofbirth = normalize_date_ddmmyyyy(command.dateofbirth)
        if dateofbirth is None:
            errors["dateofbirth"] = "Tanggal lahir tidak valid"
        if not command.placeofbirth.strip():
            errors["placeofbirth"] = "Tempat lahir wajib diisi"
        if not validate_phone_number(command.phone):
            errors["phone"] = "Format nomor telepon tidak valid"
        email = command.email.strip().lower()
        email_error = _email_error(email)
        if email_error:
            errors["email"] = email_error
        if not validate_password(command.password):
            errors["password"] = PASSWORD_RULE_MESSAGE
        elif command.password != command.password_confirm:
            errors["password_confirm"] = "Konfirmasi password tidak cocok"
        raise_if_errors(errors)

        return self._admin_auth_port.register(
            AdminRegisterInput(
                name=command.name.strip(),
                gender=command.gender,
                dateofbirth=dateofbirth,
                placeofbirth=command.placeofbirth.strip(),
                phone=command.phone,
                email=email,
                password=command.password,
                password_confirm=command.password_confirm,
            )
        )


class ForgotPasswordUseCase:
    def __init__(self, *, admin_auth_port: AdminAuthPort):
        self._admin_auth_port = admin_auth_port

    def execute(self, *, email: str) -> OtpResponse:
        email = email.strip().lower()
        email_error = _email_error(email)
        if email_error:
            raise_if_errors({"email": email_error})
        return self._admin_auth_port.forgot_password(email=email)


class ResetPasswordUseCase:
    def __init__(self, *, admin_auth_port: AdminAuthPort):
        self._admin_auth_port = admin_auth_port

    def execute(
        self,
        *,
        new_password: str,
        confirm_password: str,
        token: str = "",
        email: str = "",
        reset_link: str = "",
    ) -> str:
        """Reset the password; a pasted `reset_link` supplies the token and email. Returns the email."""
        if reset_link:
            extracted = extract_reset_token(reset_link)
            if extracted is None:
                raise FormValidationError({"reset_link": "Link reset password tidak valid"})
            token, email = extracted

        errors: dict[str, str] = {}
        if not token:
            errors["token"] = "Token reset password wajib diisi"
        email = email.strip().lower()
        email_error = _email_error(email)
        if email_error:
            errors["email"] = email_error
        if not validate_password(new_password):
            errors["new_password"] = PASSWORD_RULE_MESSAGE
        elif new_password != confirm_password:
            errors["confirm_password"] = "Konfirmasi password tidak cocok"
        raise_if_errors(errors)

        self._admin_auth_port.reset_password(ResetPasswordInput(token=token, email=email, new_password=new_password))
        return email


class VerifyEmailUseCase:
    def __init__(self, *, admin_auth_port: AdminAuthPort):
        self._admin_auth_port = admin_auth_port

    def execute(self, *, email: str, token: str) -> None:
        email = email.strip().lower()
        if not email or not token:
            raise_if_errors({"general": "Link verifikasi email tidak lengkap"})
        self._admin_auth_port.verify_email(email=email, token=token)
