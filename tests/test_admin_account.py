from __future__ import annotations

import pytest

from rijig_web.application.dto.auth import AdminRegisterInput, OtpResponse, ResetPasswordInput
from rijig_web.application.use_cases.admin_account import (
    ForgotPasswordUseCase,
    RegisterAdminUseCase,
    ResetPasswordUseCase,
    VerifyEmailUseCase,
)
from rijig_web.domain.exceptions import FormValidationError


class FakeAdminAccountPort:
    def __init__(self):
        self.calls: list[tuple[str, object]] = []

    def register(self, data: AdminRegisterInput) -> OtpResponse:
        self.calls.append(("register", data))
        return OtpResponse(message="Cek email", expires_in_seconds=300, remaining_time="", email=data.email)

    def forgot_password(self, *, email: str) -> OtpResponse:
        self.calls.append(("forgot_password", email))
        return OtpResponse(message="Link terkirim", expires_in_seconds=600, remaining_time="", email=email)

    def reset_password(self, data: ResetPasswordInput) -> None:
        self.calls.append(("reset_password", data))

    def verify_email(self, *, email: str, token: str) -> None:
        self.calls.append(("verify_email", (email, token)))


def _registration(**overrides) -> AdminRegisterInput:
    values = {
        "name": "Admin Rijig",
        "gender": "perempuan",
        "dateofbirth": "1990-07-04",
        "placeofbirth": "Bandung",
        "phone": "6281234567890",
        "email": " Admin@Rijig.ID ",
        "password": "Rahasia1!",
        "password_confirm": "Rahasia1!",
    }
    values.update(overrides)
    return AdminRegisterInput(**values)


def test_register_normalises_birth_date_and_email():
    port = FakeAdminAccountPort()

    RegisterAdminUseCase(admin_auth_port=port).execute(_registration())

    sent = port.calls[0][1]
    assert sent.dateofbirth == "04-07-1990"
    assert sent.email == "admin@rijig.id"


def test_register_reports_every_invalid_field():
    port = FakeAdminAccountPort()

    with pytest.raises(FormValidationError) as exc_info:
        RegisterAdminUseCase(admin_auth_port=port).execute(
            _registration(
                name=" ",
                gender="",
                dateofbirth="30-02-1990",
                phone="0812",
                email="bukan-email",
                password="lemah",
            )
        )

    assert set(exc_info.value.errors) == {"name", "gender", "dateofbirth", "phone", "email", "password"}
    assert port.calls == []


def test_register_requires_matching_confirmation():
    with pytest.raises(FormValidationError) as exc_info:
        RegisterAdminUseCase(admin_auth_port=FakeAdminAccountPort()).execute(
            _registration(password_confirm="Rahasia2!")
        )

    assert exc_info.value.errors == {"password_confirm": "Konfirmasi password tidak cocok"}


def test_forgot_password_validates_email():
    port = FakeAdminAccountPort()

    with pytest.raises(FormValidationError):
        ForgotPasswordUseCase(admin_auth_port=port).execute(email="")

    assert ForgotPasswordUseCase(admin_auth_port=port).execute(email="ADMIN@rijig.id").email == "admin@rijig.id"


def test_reset_password_reads_token_and_email_from_link():
    port = FakeAdminAccountPort()

    email = ResetPasswordUseCase(admin_auth_port=port).execute(
        reset_link="https://rijig.id/reset-password?token=tok-1&email=admin%40rijig.id",
        new_password="Baru1234!",
        confirm_password="Baru1234!",
    )

    assert email == "admin@rijig.id"
    assert port.calls == [
        ("reset_password", ResetPasswordInput(token="tok-1", email="admin@rijig.id", new_password="Baru1234!"))
    ]


def test_reset_password_rejects_broken_link():
    with pytest.raises(FormValidationError) as exc_info:
        ResetPasswordUseCase(admin_auth_port=FakeAdminAccountPort()).execute(
            reset_link="reset-password?token=tok-1",
            new_password="Baru1234!",
            confirm_password="Baru1234!",
        )

    assert set(exc_info.value.errors) == {"reset_link"}


def test_verify_email_needs_token_and_email():
    port = FakeAdminAccountPort()

    with pytest.raises(FormValidationError):
        VerifyEmailUseCase(admin_auth_port=port).execute(email="admin@rijig.id", token="")

    VerifyEmailUseCase(admin_auth_port=port).execute(email="Admin@rijig.id", token="tok-1")
    assert port.calls == [("verify_email", ("admin@rijig.id", "tok-1"))]
