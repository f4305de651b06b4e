from __future__ import annotations

from datetime import datetime, timezone
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from rijig_web.api.deps import (
    get_api_client,
    get_check_approval_use_case,
    get_complete_company_profile_use_case,
    get_create_pin_use_case,
    get_optional_session,
    get_request_pengelola_otp_use_case,
    get_verify_pengelola_otp_use_case,
    get_verify_pin_use_case,
    require_role,
)
from rijig_web.api.errors import api_error_response, errors_response, form_errors_response
from rijig_web.api.schemas.auth import (
    ApprovalStatusResponse,
    MessageResponse,
    OtpPageResponse,
    OtpResentResponse,
)
from rijig_web.api.session_gate import create_session, redirect
from rijig_web.api.uploads import to_uploaded_file
from rijig_web.application.dto.auth import (
    CompanyProfileInput,
    CreatePinInput,
    PengelolaOtpVerifyInput,
)
from rijig_web.application.use_cases.pengelola_onboarding import (
    CheckApprovalUseCase,
    CompleteCompanyProfileUseCase,
    CreatePinUseCase,
    VerifyPinUseCase,
)
from rijig_web.application.use_cases.pengelola_otp import (
    OtpPurpose,
    RequestPengelolaOtpUseCase,
    VerifyPengelolaOtpUseCase,
)
from rijig_web.domain.entities.session import ROLE_PENGELOLA, SessionData
from rijig_web.domain.exceptions import ApiError, FormValidationError
from rijig_web.domain.services.onboarding import (
    PENGELOLA_COMPANY_PROFILE_PATH,
    PENGELOLA_CREATE_PIN_PATH,
    PENGELOLA_DASHBOARD_PATH,
    PENGELOLA_SIGN_IN_PATH,
    PENGELOLA_VERIFY_PIN_PATH,
    PENGELOLA_WAITING_APPROVAL_PATH,
    landing_path_for,
)
from rijig_web.domain.services.validation import generate_device_id
from rijig_web.infrastructure.clients.rijig_api_client import RijigApiClient


router = APIRouter(prefix=PENGELOLA_SIGN_IN_PATH)

PENGELOLA_DEVICE_PREFIX = "pengelola_"
OTP_EXPIRY_MINUTES = 5

_REQUEST_OTP_PATHS: dict[OtpPurpose, str] = {
    "login": f"{PENGELOLA_SIGN_IN_PATH}/requestotpforlogin",
    "register": f"{PENGELOLA_SIGN_IN_PATH}/requestotpforregister",
}
_VERIFY_OTP_PATHS: dict[OtpPurpose, str] = {
    "login": f"{PENGELOLA_SIGN_IN_PATH}/verifyotptologin",
    "register": f"{PENGELOLA_SIGN_IN_PATH}/verifyotptoregister",
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _after_otp_path(session: SessionData, purpose: OtpPurpose) -> str:
    status = session.registration_status
    if purpose == "login" and status in (None, "complete"):
        return PENGELOLA_VERIFY_PIN_PATH
    return landing_path_for(ROLE_PENGELOLA, status) or PENGELOLA_COMPANY_PROFILE_PATH


@router.get("")
def pengelola_sign_in(session: SessionData | None = Depends(get_optional_session)):
    if session is not None and session.role == ROLE_PENGELOLA:
        target = landing_path_for(ROLE_PENGELOLA, session.registration_status)
        if target is not None:
            return redirect(target)
    return {"login": _REQUEST_OTP_PATHS["login"], "register": _REQUEST_OTP_PATHS["register"]}


def _request_otp(use_case: RequestPengelolaOtpUseCase, *, phone: str, purpose: OtpPurpose):
    try:
        use_case.execute(phone=phone, purpose=purpose)
    except FormValidationError as exc:
        return form_errors_response(exc)
    except ApiError as exc:
        if exc.status_code == 404:
            return errors_response(
                {"phone": "Nomor tidak terdaftar. Silakan daftar terlebih dahulu."},
                status_code=404,
            )
        return api_error_response(exc, field="phone")
    return redirect(f"{_VERIFY_OTP_PATHS[purpose]}?{urlencode({'phone': phone.strip()})}")


@router.post("/requestotpforlogin")
def request_otp_for_login(
    phone: str = Form(""),
    use_case: RequestPengelolaOtpUseCase = Depends(get_request_pengelola_otp_use_case),
):
    return _request_otp(use_case, phone=phone, purpose="login")


@router.post("/requestotpforregister")
def request_otp_for_register(
    phone: str = Form(""),
    use_case: RequestPengelolaOtpUseCase = Depends(get_request_pengelola_otp_use_case),
):
    return _request_otp(use_case, phone=phone, purpose="register")


def _otp_page(phone: str | None, purpose: OtpPurpose):
    if not phone:
        return redirect(_REQUEST_OTP_PATHS[purpose])
    return OtpPageResponse(phone=phone, otp_sent_at=_now(), expiry_minutes=OTP_EXPIRY_MINUTES)


@router.get("/verifyotptologin", response_model=None)
def verify_otp_to_login_page(phone: str | None = None):
    return _otp_page(phone, "login")


@router.get("/verifyotptoregister", response_model=None)
def verify_otp_to_register_page(phone: str | None = None):
    return _otp_page(phone, "register")


def _verify_otp(
    request: Request,
    *,
    purpose: OtpPurpose,
    phone: str,
    otp: str,
    action: str,
    request_use_case: RequestPengelolaOtpUseCase,
    verify_use_case: VerifyPengelolaOtpUseCase,
    client: RijigApiClient,
):
    if action == "resend":
        try:
            message = request_use_case.execute(phone=phone, purpose=purpose)
        except FormValidationError as exc:
            return form_errors_response(exc)
        except ApiError as exc:
            return api_error_response(exc)
        return OtpResentResponse(
            message=message or "Kode OTP baru telah dikirim ke WhatsApp Anda",
            otp_sent_at=_now(),
        )

    if action != "verify":
        return errors_response({"general": "Aksi tidak valid"})

    try:
        session = verify_use_case.execute(
            PengelolaOtpVerifyInput(
                phone=phone.strip(),
                otp=otp,
                device_id=generate_device_id(PENGELOLA_DEVICE_PREFIX),
            ),
            purpose=purpose,
        )
    except FormValidationError as exc:
        return form_errors_response(exc)
    except ApiError as exc:
        return api_error_response(exc, field="otp")
    return create_session(request, session, _after_otp_path(session, purpose), client)


@router.post("/verifyotptologin", response_model=None)
def verify_otp_to_login(
    request: Request,
    phone: str = Form(""),
    otp: str = Form(""),
    action: str = Form("verify", alias="_action"),
    request_use_case: RequestPengelolaOtpUseCase = Depends(get_request_pengelola_otp_use_case),
    verify_use_case: VerifyPengelolaOtpUseCase = Depends(get_verify_pengelola_otp_use_case),
    client: RijigApiClient = Depends(get_api_client),
):
    return _verify_otp(
        request,
        purpose="login",
        phone=phone,
        otp=otp,
        action=action,
        request_use_case=request_use_case,
        verify_use_case=verify_use_case,
        client=client,
    )


@router.post("/verifyotptoregister", response_model=None)
def verify_otp_to_register(
    request: Request,
    phone: str = Form(""),
    otp: str = Form(""),
    action: str = Form("verify", alias="_action"),
    request_use_case: RequestPengelolaOtpUseCase = Depends(get_request_pengelola_otp_use_case),
    verify_use_case: VerifyPengelolaOtpUseCase = Depends(get_verify_pengelola_otp_use_case),
    client: RijigApiClient = Depends(get_api_client),
):
    return _verify_otp(
        request,
        purpose="register",
        phone=phone,
        otp=otp,
        action=action,
        request_use_case=request_use_case,
        verify_use_case=verify_use_case,
        client=client,
    )


@router.post("/completingcompanyprofile", response_model=None)
def completing_company_profile(
    request: Request,
    companyname: str = Form(""),
    companyaddress: str = Form(""),
    companyphone: str = Form(""),
    companyemail: str = Form(""),
    companywebsite: str = Form(""),
    taxid: str = Form(""),
    foundeddate: str = Form(""),
    companytype: str = Form(""),
    companydescription: str = Form(""),
    company_logo: UploadFile | None = File(None),
    session: SessionData = Depends(require_role("pengelola", "uncomplete")),
    use_case: CompleteCompanyProfileUseCase = Depends(get_complete_company_profile_use_case),
    client: RijigApiClient = Depends(get_api_client),
):
    try:
        updated = use_case.execute(
            session,
            CompanyProfileInput(
                companyname=companyname.strip(),
                companyaddress=companyaddress.strip(),
                companyphone=companyphone.strip(),
                companyemail=companyemail.strip(),
                companywebsite=companywebsite.strip(),
                taxid=taxid.strip(),
                foundeddate=foundeddate.strip(),
                companytype=companytype.strip(),
                companydescription=companydescription.strip(),
                company_logo=to_uploaded_file(company_logo),
            ),
        )
    except FormValidationError as exc:
        return form_errors_response(exc)
    except ApiError as exc:
        return api_error_response(exc)
    target = landing_path_for(ROLE_PENGELOLA, updated.registration_status) or PENGELOLA_WAITING_APPROVAL_PATH
    return create_session(request, updated, target, client)


@router.get("/waitingapprovalfromadministrator", response_model=None)
def waiting_approval_page(session: SessionData | None = Depends(get_optional_session)):
    if session is None or session.role != ROLE_PENGELOLA:
        return redirect(PENGELOLA_SIGN_IN_PATH)
    if session.registration_status != "awaiting_approval":
        target = landing_path_for(ROLE_PENGELOLA, session.registration_status)
        if target is not None:
            return redirect(target)
    return ApprovalStatusResponse(
        approved=False,
        message="Menunggu persetujuan administrator",
        registration_status=session.registration_status,
        checked_at=_now(),
    )


@router.post("/waitingapprovalfromadministrator", response_model=None)
def check_approval(
    request: Request,
    session: SessionData | None = Depends(get_optional_session),
    use_case: CheckApprovalUseCase = Depends(get_check_approval_use_case),
    client: RijigApiClient = Depends(get_api_client),
):
    if session is None or session.role != ROLE_PENGELOLA:
        return redirect(PENGELOLA_SIGN_IN_PATH)
    try:
        result = use_case.execute(session)
    except ApiError as exc:
        return api_error_response(exc)
    if result.approved:
        return create_session(request, result.session, PENGELOLA_CREATE_PIN_PATH, client)
    return ApprovalStatusResponse(
        approved=False,
        message=result.message,
        registration_status=session.registration_status,
        checked_at=_now(),
    )


@router.post("/createanewpin", response_model=None)
def create_a_new_pin(
    request: Request,
    pin: str = Form(""),
    confirm_pin: str = Form(""),
    session: SessionData = Depends(require_role("pengelola", "approved")),
    use_case: CreatePinUseCase = Depends(get_create_pin_use_case),
    client: RijigApiClient = Depends(get_api_client),
):
    try:
        updated = use_case.execute(session, CreatePinInput(pin=pin, confirm_pin=confirm_pin))
    except FormValidationError as exc:
        return form_errors_response(exc)
    except ApiError as exc:
        return api_error_response(exc, field="pin")
    return create_session(request, updated, PENGELOLA_DASHBOARD_PATH, client)


@router.get("/verifyexistingpin", response_model=None)
def verify_existing_pin_page(session: SessionData | None = Depends(get_optional_session)):
    if session is None or session.role != ROLE_PENGELOLA:
        return redirect(_REQUEST_OTP_PATHS["login"])
    return MessageResponse(message=f"Masukkan PIN untuk {session.phone or 'akun Anda'}")


@router.post("/verifyexistingpin", response_model=None)
def verify_existing_pin(
    request: Request,
    pin: str = Form(""),
    session: SessionData = Depends(require_role("pengelola")),
    use_case: VerifyPinUseCase = Depends(get_verify_pin_use_case),
    client: RijigApiClient = Depends(get_api_client),
):
    try:
        updated = use_case.execute(session, pin=pin)
    except FormValidationError as exc:
        return form_errors_response(exc)
    except ApiError as exc:
        return api_error_response(exc, field="pin")
    return create_session(request, updated, PENGELOLA_DASHBOARD_PATH, client)
