from __future__ import annotations

import pytest

from rijig_web.application.dto.auth import (
    AdminLoginInput,
    AdminOtpVerifyInput,
    ApprovalCheckResult,
    AuthTokenData,
    CompanyProfileInput,
    CreatePinInput,
    OtpResponse,
    PengelolaOtpVerifyInput,
    UploadedFile,
)
from rijig_web.application.use_cases.admin_login import AdminLoginUseCase, VerifyAdminOtpUseCase
from rijig_web.application.use_cases.pengelola_onboarding import (
    CheckApprovalUseCase,
    CompleteCompanyProfileUseCase,
    CreatePinUseCase,
    VerifyPinUseCase,
)
from rijig_web.application.use_cases.pengelola_otp import (
    RequestPengelolaOtpUseCase,
    VerifyPengelolaOtpUseCase,
)
from rijig_web.domain.entities.session import SessionData
from rijig_web.domain.exceptions import FormValidationError


def _tokens(**overrides) -> AuthTokenData:
    values = {
        "message": "OK",
        "access_token": "access-1",
        "refresh_token": "refresh-1",
        "session_id": "session-1",
    }
    values.update(overrides)
    return AuthTokenData(**values)


class FakeAdminAuthPort:
    def __init__(self):
        self.logins: list[dict] = []
        self.verifications: list[dict] = []

    def login(self, *, device_id: str, email: str, password: str) -> OtpResponse:
        self.logins.append({"device_id": device_id, "email": email, "password": password})
        return OtpResponse(message="OTP terkirim", expires_in_seconds=300, remaining_time="5:00")

    def verify_otp(self, *, device_id: str, email: str, otp: str) -> AuthTokenData:
        self.verifications.append({"device_id": device_id, "email": email, "otp": otp})
        return _tokens(token_type="full")


class FakePengelolaAuthPort:
    def __init__(self):
        self.calls: list[tuple[str, object]] = []
        self.approval = ApprovalCheckResult(
            message="Masih menunggu",
            registration_status="awaiting_approval",
            next_step="wait",
        )

    def request_otp_register(self, *, phone: str) -> str:
        self.calls.append(("request_otp_register", phone))
        return "OTP dikirim"

    def request_otp_login(self, *, phone: str) -> str:
        self.calls.append(("request_otp_login", phone))
        return "OTP dikirim"

    def verify_otp_register(self, *, phone: str, otp: str, device_id: str) -> AuthTokenData:
        self.calls.append(("verify_otp_register", phone))
        return _tokens(token_type="partial", registration_status="uncomplete", next_step="company_profile")

    def verify_otp_login(self, *, phone: str, otp: str, device_id: str) -> AuthTokenData:
        self.calls.append(("verify_otp_login", phone))
        return _tokens(token_type="partial", registration_status="complete")

    def create_company_profile(self, data: CompanyProfileInput) -> AuthTokenData:
        self.calls.append(("create_company_profile", data))
        return _tokens(access_token="access-2", refresh_token="", session_id="", registration_status="awaiting_approval")

    def check_approval(self) -> ApprovalCheckResult:
        self.calls.append(("check_approval", None))
        return self.approval

    def create_pin(self, *, pin: str) -> AuthTokenData:
        self.calls.append(("create_pin", pin))
        return _tokens(access_token="access-4", refresh_token="refresh-4", session_id="")

    def verify_pin(self, *, pin: str) -> AuthTokenData:
        self.calls.append(("verify_pin", pin))
        return _tokens(access_token="access-5", refresh_token="", session_id="")


def _profile(**overrides) -> CompanyProfileInput:
    values = {
        "companyname": "PT Rijig Bersih",
        "companyaddress": "Jl. Merdeka 1",
        "companyphone": "6281234567890",
        "companyemail": "halo@rijig.id",
        "companywebsite": "https://rijig.id",
        "taxid": "01.234.567.8-901.000",
        "foundeddate": "01-01-2020",
        "companytype": "PT",
        "companydescription": "Pengelola sampah",
    }
    values.update(overrides)
    return CompanyProfileInput(**values)


def _pengelola_session(status: str) -> SessionData:
    return SessionData(
        access_token="access-1",
        refresh_token="refresh-1",
        session_id="session-1",
        role="pengelola",
        phone="6281234567890",
        token_type="partial",
        registration_status=status,
    )


def test_admin_login_normalises_email_and_generates_device_id():
    port = FakeAdminAuthPort()

    output = AdminLoginUseCase(admin_auth_port=port).execute(
        AdminLoginInput(email="  Admin@Rijig.ID ", password="Rahasia1!")
    )

    assert output.email == "admin@rijig.id"
    assert output.device_id
    assert output.otp.remaining_time == "5:00"
    assert port.logins[0]["email"] == "admin@rijig.id"
    assert port.logins[0]["device_id"] == output.device_id


def test_admin_login_reports_field_errors_without_calling_the_api():
    port = FakeAdminAuthPort()

    with pytest.raises(FormValidationError) as exc_info:
        AdminLoginUseCase(admin_auth_port=port).execute(AdminLoginInput(email="bukan-email", password=""))

    assert set(exc_info.value.errors) == {"email", "password"}
    assert port.logins == []


def test_admin_otp_verification_builds_an_administrator_session():
    session = VerifyAdminOtpUseCase(admin_auth_port=FakeAdminAuthPort()).execute(
        AdminOtpVerifyInput(email="admin@rijig.id", device_id="device-1", otp="1234")
    )

    assert session.role == "administrator"
    assert session.access_token == "access-1"
    assert session.email == "admin@rijig.id"
    assert session.device_id == "device-1"
    assert session.registration_status == "complete"
    assert session.is_fully_authenticated


def test_admin_otp_must_be_four_digits():
    with pytest.raises(FormValidationError) as exc_info:
        VerifyAdminOtpUseCase(admin_auth_port=FakeAdminAuthPort()).execute(
            AdminOtpVerifyInput(email="admin@rijig.id", device_id="device-1", otp="12a4")
        )

    assert exc_info.value.errors == {"otp": "Kode OTP harus 4 digit angka"}


def test_request_otp_picks_endpoint_by_purpose():
    port = FakePengelolaAuthPort()
    use_case = RequestPengelolaOtpUseCase(pengelola_auth_port=port)

    use_case.execute(phone=" 6281234567890 ", purpose="register")
    use_case.execute(phone="6281234567890", purpose="login")

    assert port.calls == [
        ("request_otp_register", "6281234567890"),
        ("request_otp_login", "6281234567890"),
    ]


def test_request_otp_rejects_bad_phone():
    port = FakePengelolaAuthPort()

    with pytest.raises(FormValidationError) as exc_info:
        RequestPengelolaOtpUseCase(pengelola_auth_port=port).execute(phone="0812345678", purpose="login")

    assert "phone" in exc_info.value.errors
    assert port.calls == []


def test_verify_register_otp_starts_onboarding_session():
    session = VerifyPengelolaOtpUseCase(pengelola_auth_port=FakePengelolaAuthPort()).execute(
        PengelolaOtpVerifyInput(phone="6281234567890", otp="1234", device_id="device-1"),
        purpose="register",
    )

    assert session.role == "pengelola"
    assert session.registration_status == "uncomplete"
    assert session.token_type == "partial"
    assert session.phone == "6281234567890"
    assert session.device_id == "device-1"
    assert not session.is_fully_authenticated


def test_company_profile_moves_session_to_awaiting_approval():
    port = FakePengelolaAuthPort()
    logo = UploadedFile(filename="logo.png", content=b"png", content_type="image/png")

    session = CompleteCompanyProfileUseCase(pengelola_auth_port=port).execute(
        _pengelola_session("uncomplete"),
        _profile(company_logo=logo),
    )

    assert session.registration_status == "awaiting_approval"
    assert session.access_token == "access-2"
    assert session.refresh_token == "refresh-1"
    assert session.session_id == "session-1"
    assert port.calls[0][1].company_logo is logo


def test_company_profile_validates_fields_and_logo():
    port = FakePengelolaAuthPort()
    big_logo = UploadedFile(filename="logo.png", content=b"x" * (2 * 1024 * 1024 + 1), content_type="image/png")

    with pytest.raises(FormValidationError) as exc_info:
        CompleteCompanyProfileUseCase(pengelola_auth_port=port).execute(
            _pengelola_session("uncomplete"),
            _profile(companyname="", companyemail="bukan-email", company_logo=big_logo),
        )

    assert set(exc_info.value.errors) == {"companyname", "companyemail", "company_logo"}
    assert port.calls == []


def test_company_profile_rejects_non_image_logo():
    pdf = UploadedFile(filename="logo.pdf", content=b"%PDF", content_type="application/pdf")

    with pytest.raises(FormValidationError) as exc_info:
        CompleteCompanyProfileUseCase(pengelola_auth_port=FakePengelolaAuthPort()).execute(
            _pengelola_session("uncomplete"),
            _profile(company_logo=pdf),
        )

    assert "company_logo" in exc_info.value.errors


def test_company_profile_sends_founded_date_as_dd_mm_yyyy():
    port = FakePengelolaAuthPort()

    CompleteCompanyProfileUseCase(pengelola_auth_port=port).execute(
        _pengelola_session("uncomplete"),
        _profile(foundeddate="2020-03-15"),
    )

    assert port.calls[0][1].foundeddate == "15-03-2020"


def test_company_profile_rejects_impossible_founded_date():
    with pytest.raises(FormValidationError) as exc_info:
        CompleteCompanyProfileUseCase(pengelola_auth_port=FakePengelolaAuthPort()).execute(
            _pengelola_session("uncomplete"),
            _profile(foundeddate="31-02-2020"),
        )

    assert set(exc_info.value.errors) == {"foundeddate"}


def test_check_approval_keeps_session_while_waiting():
    session = _pengelola_session("awaiting_approval")

    output = CheckApprovalUseCase(pengelola_auth_port=FakePengelolaAuthPort()).execute(session)

    assert output.approved is False
    assert output.session is session
    assert output.message == "Masih menunggu"


def test_check_approval_updates_tokens_once_approved():
    port = FakePengelolaAuthPort()
    port.approval = ApprovalCheckResult(
        message="Disetujui",
        registration_status="approved",
        next_step="create_pin",
        access_token="access-3",
        refresh_token="refresh-3",
        token_type="partial",
    )

    output = CheckApprovalUseCase(pengelola_auth_port=port).execute(_pengelola_session("awaiting_approval"))

    assert output.approved is True
    assert output.session.registration_status == "approved"
    assert output.session.access_token == "access-3"
    assert output.session.refresh_token == "refresh-3"
    assert output.session.next_step == "create_pin"


def test_create_pin_completes_registration():
    port = FakePengelolaAuthPort()

    session = CreatePinUseCase(pengelola_auth_port=port).execute(
        _pengelola_session("approved"),
        CreatePinInput(pin="123456", confirm_pin="123456"),
    )

    assert session.registration_status == "complete"
    assert session.token_type == "full"
    assert session.access_token == "access-4"
    assert port.calls == [("create_pin", "123456")]


def test_create_pin_requires_matching_confirmation():
    with pytest.raises(FormValidationError) as exc_info:
        CreatePinUseCase(pengelola_auth_port=FakePengelolaAuthPort()).execute(
            _pengelola_session("approved"),
            CreatePinInput(pin="123456", confirm_pin="654321"),
        )

    assert exc_info.value.errors == {"confirm_pin": "Konfirmasi PIN tidak cocok"}


def test_verify_pin_upgrades_partial_token():
    session = VerifyPinUseCase(pengelola_auth_port=FakePengelolaAuthPort()).execute(
        _pengelola_session("complete"),
        pin="123456",
    )

    assert session.is_fully_authenticated
    assert session.access_token == "access-5"
    assert session.refresh_token == "refresh-1"


@pytest.mark.parametrize("pin", ["", "12345", "12345a"])
def test_verify_pin_rejects_malformed_pin(pin: str):
    port = FakePengelolaAuthPort()

    with pytest.raises(FormValidationError):
        VerifyPinUseCase(pengelola_auth_port=port).execute(_pengelola_session("complete"), pin=pin)

    assert port.calls == []
