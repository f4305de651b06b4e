from __future__ import annotations

from dataclasses import dataclass, replace

from rijig_web.application.dto.auth import CompanyProfileInput, CreatePinInput
from rijig_web.application.ports.auth_port import PengelolaAuthPort
from rijig_web.domain.entities.session import ROLE_PENGELOLA, SessionData
from rijig_web.domain.services.validation import (
    normalize_date_ddmmyyyy,
    validate_email,
    validate_phone_number,
    validate_pin,
)

from .auth_common import merge_token_data, raise_if_errors


ALLOWED_LOGO_TYPES = ("image/jpeg", "image/png", "image/webp")
MAX_LOGO_BYTES = 2 * 1024 * 1024

_REQUIRED_PROFILE_FIELDS = {
    "companyname": "Nama perusahaan wajib diisi",
    "companyaddress": "Alamat perusahaan wajib diisi",
    "companyphone": "Nomor telepon perusahaan wajib diisi",
    "companyemail": "Email perusahaan wajib diisi",
    "companytype": "Jenis perusahaan wajib dipilih",
}


@dataclass(frozen=True)
class ApprovalCheckOutput:
    approved: bool
    message: str
    session: SessionData


class CompleteCompanyProfileUseCase:
    def __init__(self, *, pengelola_auth_port: PengelolaAuthPort):
        self._pengelola_auth_port = pengelola_auth_port

    def execute(self, session: SessionData, command: CompanyProfileInput) -> SessionData:
        errors: dict[str, str] = {}
        for field_name, message in _REQUIRED_PROFILE_FIELDS.items():
            if not str(getattr(command, field_name)).strip():
                errors[field_name] = message
        if command.companyemail and not validate_email(command.companyemail):
            errors["companyemail"] = "Format email tidak valid"
        if command.companyphone and not validate_phone_number(command.companyphone):
            errors["companyphone"] = "Format nomor telepon tidak valid"
        foundeddate = command.foundeddate
        if foundeddate:
            foundeddate = normalize_date_ddmmyyyy(foundeddate) or ""
            if not foundeddate:
                errors["foundeddate"] = "Tanggal berdiri harus berformat DD-MM-YYYY"
        logo = command.company_logo
        if logo is not None:
            if logo.content_type not in ALLOWED_LOGO_TYPES:
                errors["company_logo"] = "Logo harus berupa gambar JPG, PNG, atau WEBP"
            elif len(logo.content) > MAX_LOGO_BYTES:
                errors["company_logo"] = "Ukuran logo maksimal 2MB"
        raise_if_errors(errors)

        token_data = self._pengelola_auth_port.create_company_profile(replace(command, foundeddate=foundeddate))
        updated = merge_token_data(session, token_data, role=ROLE_PENGELOLA)
        return updated.updated(registration_status=token_data.registration_status or "awaiting_approval")


class CheckApprovalUseCase:
    def __init__(self, *, pengelola_auth_port: PengelolaAuthPort):
        self._pengelola_auth_port = pengelola_auth_port

    def execute(self, session: SessionData) -> ApprovalCheckOutput:
        result = self._pengelola_auth_port.check_approval()
        if result.registration_status != "approved":
            return ApprovalCheckOutput(
                approved=False,
                message=result.message or "Masih menunggu persetujuan administrator",
                session=session,
            )
        return ApprovalCheckOutput(
            approved=True,
            message=result.message,
            session=merge_token_data(session, result, role=ROLE_PENGELOLA),
        )


class CreatePinUseCase:
    def __init__(self, *, pengelola_auth_port: PengelolaAuthPort):
        self._pengelola_auth_port = pengelola_auth_port

    def execute(self, session: SessionData, command: CreatePinInput) -> SessionData:
        errors: dict[str, str] = {}
        if not validate_pin(command.pin):
            errors["pin"] = "PIN harus 6 digit angka"
        elif command.pin != command.confirm_pin:
            errors["confirm_pin"] = "Konfirmasi PIN tidak cocok"
        raise_if_errors(errors)

        token_data = self._pengelola_auth_port.create_pin(pin=command.pin)
        updated = merge_token_data(session, token_data, role=ROLE_PENGELOLA)
        return updated.updated(
            registration_status=token_data.registration_status or "complete",
            token_type=token_data.token_type or "full",
        )


class VerifyPinUseCase:
    def __init__(self, *, pengelola_auth_port: PengelolaAuthPort):
        self._pengelola_auth_port = pengelola_auth_port

    def execute(self, session: SessionData, *, pin: str) -> SessionData:
        if not pin or len(pin) != 6:
            raise_if_errors({"pin": "PIN harus 6 digit"})
        if not validate_pin(pin):
            raise_if_errors({"pin": "PIN hanya boleh berisi angka"})

        token_data = self._pengelola_auth_port.verify_pin(pin=pin)
        updated = merge_token_data(session, token_data, role=ROLE_PENGELOLA)
        return updated.updated(token_type=token_data.token_type or "full")
