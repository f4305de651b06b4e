from __future__ import annotations

from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Request

from rijig_web.api.deps import (
    get_admin_login_use_case,
    get_api_client,
    get_forgot_password_use_case,
    get_optional_session,
    get_register_admin_use_case,
    get_reset_password_use_case,
    get_verify_admin_otp_use_case,
    get_verify_email_use_case,
)
from rijig_web.api.errors import api_error_response, errors_response, form_errors_response
from rijig_web.api.schemas.auth import AdminOtpPageResponse, EmailSentResponse
from rijig_web.api.session_gate import create_session, redirect
from rijig_web.application.dto.auth import (
    AdminLoginInput,
    AdminOtpVerifyInput,
    AdminRegisterInput,
    OtpResponse,
)
from rijig_web.application.use_cases.admin_account import (
    ForgotPasswordUseCase,
    RegisterAdminUseCase,
    ResetPasswordUseCase,
    VerifyEmailUseCase,
)
from rijig_web.application.use_cases.admin_login import AdminLoginUseCase, VerifyAdminOtpUseCase
from rijig_web.domain.entities.session import ROLE_ADMINISTRATOR, SessionData
from rijig_web.domain.exceptions import ApiError, FormValidationError
from rijig_web.domain.services.onboarding import (
    ADMIN_DASHBOARD_PATH,
    ADMIN_FORGOT_PASSWORD_PATH,
    ADMIN_OTP_PATH,
    ADMIN_REGISTER_PATH,
    ADMIN_RESET_PASSWORD_PATH,
    ADMIN_SIGN_IN_PATH,
    ADMIN_VERIFY_EMAIL_PATH,
)
from rijig_web.domain.services.validation import remaining_time as format_remaining_time
from rijig_web.infrastructure.clients.rijig_api_client import RijigApiClient


router = APIRouter()

DEFAULT_REMAINING_TIME = "5:00"


def _is_admin(session: SessionData | None) -> bool:
    return session is not None and session.role == ROLE_ADMINISTRATOR


def _remaining_time(otp: OtpResponse) -> str:
    if otp.remaining_time:
        return otp.remaining_time
    if otp.expires_in_seconds > 0:
        return format_remaining_time(otp.expires_in_seconds)
    return DEFAULT_REMAINING_TIME


def _email_sent(otp: OtpResponse, *, email: str, fallback_message: str) -> EmailSentResponse:
    return EmailSentResponse(
        message=otp.message or fallback_message,
        email=otp.email or email,
        remaining_time=_remaining_time(otp),
    )


def _sign_in_with_email(email: str):
    return redirect(f"{ADMIN_SIGN_IN_PATH}?{urlencode({'email': email})}")


@router.get(ADMIN_SIGN_IN_PATH, response_model=None)
def admin_sign_in_page(
    email: str | None = None,
    session: SessionData | None = Depends(get_optional_session),
):
    if _is_admin(session):
        return redirect(ADMIN_DASHBOARD_PATH)
    return {"email": email or ""}


@router.post(ADMIN_SIGN_IN_PATH, response_model=None)
def admin_sign_in(
    email: str = Form(""),
    password: str = Form(""),
    use_case: AdminLoginUseCase = Depends(get_admin_login_use_case),
):
    try:
        output = use_case.execute(AdminLoginInput(email=email, password=password))
    except FormValidationError as exc:
        return form_errors_response(exc)
    except ApiError as exc:
        if exc.status_code == 401:
            return errors_response({"general": "Email atau password salah"}, status_code=401)
        return api_error_response(exc)

    query = urlencode(
        {
            "email": output.email,
            "device_id": output.device_id,
            "remaining_time": _remaining_time(output.otp),
        }
    )
    return redirect(f"{ADMIN_OTP_PATH}?{query}")


@router.get(ADMIN_OTP_PATH, response_model=None)
def admin_otp_page(
    email: str | None = None,
    device_id: str | None = None,
    remaining_time: str | None = None,
    session: SessionData | None = Depends(get_optional_session),
):
    if _is_admin(session):
        return redirect(ADMIN_DASHBOARD_PATH)
    if not email or not device_id:
        return redirect(ADMIN_SIGN_IN_PATH)
    return AdminOtpPageResponse(
        email=email,
        device_id=device_id,
        remaining_time=remaining_time or DEFAULT_REMAINING_TIME,
    )


@router.post(ADMIN_OTP_PATH, response_model=None)
def admin_verify_otp(
    request: Request,
    otp: str = Form(""),
    email: str = Form(""),
    device_id: str = Form(""),
    action: str = Form("verify", alias="_action"),
    use_case: VerifyAdminOtpUseCase = Depends(get_verify_admin_otp_use_case),
    client: RijigApiClient = Depends(get_api_client),
):
    if action == "resend":
        # A new OTP needs the password again, which is never kept between requests.
        return _sign_in_with_email(email)
    if action != "verify":
        return errors_response({"general": "Aksi tidak valid"})

    try:
        session = use_case.execute(AdminOtpVerifyInput(email=email, device_id=device_id, otp=otp))
    except FormValidationError as exc:
        return form_errors_response(exc)
    except ApiError as exc:
        return api_error_response(exc, field="otp")
    return create_session(request, session, ADMIN_DASHBOARD_PATH, client)


@router.post(ADMIN_REGISTER_PATH, response_model=None)
def admin_register(
    name: str = Form(""),
    gender: str = Form(""),
    dateofbirth: str = Form(""),
    placeofbirth: str = Form(""),
    phone: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    password_confirm: str = Form(""),
    use_case: RegisterAdminUseCase = Depends(get_register_admin_use_case),
):
    try:
        otp = use_case.execute(
            AdminRegisterInput(
                name=name,
                gender=gender,
                dateofbirth=dateofbirth,
                placeofbirth=placeofbirth,
                phone=phone.strip(),
                email=email,
                password=password,
                password_confirm=password_confirm,
            )
        )
    except FormValidationError as exc:
        return form_errors_response(exc)
    except ApiError as exc:
        return api_error_response(exc, field="email")
    return _email_sent(
        otp,
        email=email.strip().lower(),
        fallback_message="Registrasi berhasil. Silakan verifikasi email Anda.",
    )


@router.post(ADMIN_FORGOT_PASSWORD_PATH, response_model=None)
def admin_forgot_password(
    email: str = Form(""),
    use_case: ForgotPasswordUseCase = Depends(get_forgot_password_use_case),
):
    try:
        otp = use_case.execute(email=email)
    except FormValidationError as exc:
        return form_errors_response(exc)
    except ApiError as exc:
        return api_error_response(exc, field="email")
    return _email_sent(
        otp,
        email=email.strip().lower(),
        fallback_message="Link reset password telah dikirim ke email Anda.",
    )


@router.post(ADMIN_RESET_PASSWORD_PATH, response_model=None)
def admin_reset_password(
    token: str = Form(""),
    email: str = Form(""),
    reset_link: str = Form(""),
    new_password: str = Form(""),
    confirm_password: str = Form(""),
    use_case: ResetPasswordUseCase = Depends(get_reset_password_use_case),
):
    try:
        reset_email = use_case.execute(
            token=token,
            email=email,
            reset_link=reset_link.strip(),
            new_password=new_password,
            confirm_password=confirm_password,
        )
    except FormValidationError as exc:
        return form_errors_response(exc)
    except ApiError as exc:
        return api_error_response(exc)
    return _sign_in_with_email(reset_email)


@router.get(ADMIN_VERIFY_EMAIL_PATH, response_model=None)
def admin_verify_email(
    email: str = "",
    token: str = "",
    use_case: VerifyEmailUseCase = Depends(get_verify_email_use_case),
):
    try:
        use_case.execute(email=email, token=token)
    except FormValidationError as exc:
        return form_errors_response(exc)
    except ApiError as exc:
        return api_error_response(exc)
    return _sign_in_with_email(email.strip().lower())
