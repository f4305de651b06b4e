from __future__ import annotations

from typing import Literal

from rijig_web.application.dto.auth import PengelolaOtpVerifyInput
from rijig_web.application.ports.auth_port import PengelolaAuthPort
from rijig_web.domain.entities.session import ROLE_PENGELOLA, SessionData
from rijig_web.domain.services.validation import validate_otp, validate_phone_number

from .auth_common import merge_token_data, raise_if_errors


OtpPurpose = Literal["login", "register"]


def _phone_errors(phone: str) -> dict[str, str]:
    if not phone:
        return {"phone": "Nomor WhatsApp wajib diisi"}
    if not validate_phone_number(phone):
        return {"phone": "Nomor WhatsApp harus diawali 62 dan berisi 9-14 digit setelahnya"}
    return {}


class RequestPengelolaOtpUseCase:
    def __init__(self, *, pengelola_auth_port: PengelolaAuthPort):
        self._pengelola_auth_port = pengelola_auth_port

    def execute(self, *, phone: str, purpose: OtpPurpose) -> str:
        phone = phone.strip()
        raise_if_errors(_phone_errors(phone))
        if purpose == "register":
            return self._pengelola_auth_port.request_otp_register(phone=phone)
        return self._pengelola_auth_port.request_otp_login(phone=phone)


class VerifyPengelolaOtpUseCase:
    def __init__(self, *, pengelola_auth_port: PengelolaAuthPort):
        self._pengelola_auth_port = pengelola_auth_port

    def execute(self, command: PengelolaOtpVerifyInput, *, purpose: OtpPurpose) -> SessionData:
        errors = _phone_errors(command.phone)
        if not command.otp or len(command.otp) != 4:
            errors["otp"] = "Kode OTP harus 4 digit"
        elif not validate_otp(command.otp):
            errors["otp"] = "Kode OTP hanya boleh berisi angka"
        raise_if_errors(errors)

        verify = (
            self._pengelola_auth_port.verify_otp_register
            if purpose == "register"
            else self._pengelola_auth_port.verify_otp_login
        )
        token_data = verify(phone=command.phone, otp=command.otp, device_id=command.device_id)
        return merge_token_data(
            None,
            token_data,
            role=ROLE_PENGELOLA,
            phone=command.phone,
            device_id=command.device_id,
        )
