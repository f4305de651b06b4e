from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Request

from rijig_web.application.use_cases.admin_account import (
    ForgotPasswordUseCase,
    RegisterAdminUseCase,
    ResetPasswordUseCase,
    VerifyEmailUseCase,
)
from rijig_web.application.use_cases.admin_login import AdminLoginUseCase, VerifyAdminOtpUseCase
from rijig_web.application.use_cases.approval_board import (
    GetApprovalDetailsUseCase,
    LoadApprovalBoardUseCase,
    PerformApprovalActionUseCase,
)
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
from rijig_web.application.use_cases.trash_categories import ManageTrashCategoriesUseCase
from rijig_web.domain.entities.session import RegistrationStatus, SessionData, UserRole
from rijig_web.domain.exceptions import AccessRedirect
from rijig_web.domain.services.onboarding import PENGELOLA_VERIFY_PIN_PATH
from rijig_web.infrastructure.clients.approval_gateway import ApprovalGateway
from rijig_web.infrastructure.clients.auth_gateway import (
    AdminAuthGateway,
    CommonAuthGateway,
    PengelolaAuthGateway,
)
from rijig_web.infrastructure.clients.rijig_api_client import (
    RijigApiClient,
    RijigApiClientSettings,
)
from rijig_web.infrastructure.clients.trash_category_gateway import TrashCategoryGateway
from rijig_web.shared.config import get_settings

from .session_gate import read_session, require_session
from .token_refresh import setup_token_refresh


@lru_cache(maxsize=1)
def get_root_api_client() -> RijigApiClient:
    settings = get_settings()
    client = RijigApiClient(
        RijigApiClientSettings(
            base_url=settings.rijig_api_base_url,
            api_key=settings.rijig_api_key,
            timeout_seconds=settings.rijig_api_timeout_seconds,
        )
    )
    setup_token_refresh(client)
    return client


def get_api_client() -> RijigApiClient:
    """One forked client per request, so bearer tokens never cross requests."""
    return get_root_api_client().fork()


def get_common_auth_gateway(client: RijigApiClient = Depends(get_api_client)) -> CommonAuthGateway:
    return CommonAuthGateway(client)


def get_admin_auth_gateway(client: RijigApiClient = Depends(get_api_client)) -> AdminAuthGateway:
    return AdminAuthGateway(client)


def get_pengelola_auth_gateway(
    client: RijigApiClient = Depends(get_api_client),
) -> PengelolaAuthGateway:
    return PengelolaAuthGateway(client)


def get_approval_gateway(client: RijigApiClient = Depends(get_api_client)) -> ApprovalGateway:
    return ApprovalGateway(client)


def get_trash_category_gateway(
    client: RijigApiClient = Depends(get_api_client),
) -> TrashCategoryGateway:
    return TrashCategoryGateway(client)


def get_admin_login_use_case(
    gateway: AdminAuthGateway = Depends(get_admin_auth_gateway),
) -> AdminLoginUseCase:
    return AdminLoginUseCase(admin_auth_port=gateway)


def get_verify_admin_otp_use_case(
    gateway: AdminAuthGateway = Depends(get_admin_auth_gateway),
) -> VerifyAdminOtpUseCase:
    return VerifyAdminOtpUseCase(admin_auth_port=gateway)


def get_register_admin_use_case(
    gateway: AdminAuthGateway = Depends(get_admin_auth_gateway),
) -> RegisterAdminUseCase:
    return RegisterAdminUseCase(admin_auth_port=gateway)


def get_forgot_password_use_case(
    gateway: AdminAuthGateway = Depends(get_admin_auth_gateway),
) -> ForgotPasswordUseCase:
    return ForgotPasswordUseCase(admin_auth_port=gateway)


def get_reset_password_use_case(
    gateway: AdminAuthGateway = Depends(get_admin_auth_gateway),
) -> ResetPasswordUseCase:
    return ResetPasswordUseCase(admin_auth_port=gateway)


def get_verify_email_use_case(
    gateway: AdminAuthGateway = Depends(get_admin_auth_gateway),
) -> VerifyEmailUseCase:
    return VerifyEmailUseCase(admin_auth_port=gateway)


def get_request_pengelola_otp_use_case(
    gateway: PengelolaAuthGateway = Depends(get_pengelola_auth_gateway),
) -> RequestPengelolaOtpUseCase:
    return RequestPengelolaOtpUseCase(pengelola_auth_port=gateway)


def get_verify_pengelola_otp_use_case(
    gateway: PengelolaAuthGateway = Depends(get_pengelola_auth_gateway),
) -> VerifyPengelolaOtpUseCase:
    return VerifyPengelolaOtpUseCase(pengelola_auth_port=gateway)


def get_complete_company_profile_use_case(
    gateway: PengelolaAuthGateway = Depends(get_pengelola_auth_gateway),
) -> CompleteCompanyProfileUseCase:
    return CompleteCompanyProfileUseCase(pengelola_auth_port=gateway)


def get_check_approval_use_case(
    gateway: PengelolaAuthGateway = Depends(get_pengelola_auth_gateway),
) -> CheckApprovalUseCase:
    return CheckApprovalUseCase(pengelola_auth_port=gateway)


def get_create_pin_use_case(
    gateway: PengelolaAuthGateway = Depends(get_pengelola_auth_gateway),
) -> CreatePinUseCase:
    return CreatePinUseCase(pengelola_auth_port=gateway)


def get_verify_pin_use_case(
    gateway: PengelolaAuthGateway = Depends(get_pengelola_auth_gateway),
) -> VerifyPinUseCase:
    return VerifyPinUseCase(pengelola_auth_port=gateway)


def get_load_approval_board_use_case(
    gateway: ApprovalGateway = Depends(get_approval_gateway),
) -> LoadApprovalBoardUseCase:
    return LoadApprovalBoardUseCase(approval_port=gateway)


def get_perform_approval_action_use_case(
    gateway: ApprovalGateway = Depends(get_approval_gateway),
) -> PerformApprovalActionUseCase:
    return PerformApprovalActionUseCase(approval_port=gateway)


def get_approval_details_use_case(
    gateway: ApprovalGateway = Depends(get_approval_gateway),
) -> GetApprovalDetailsUseCase:
    return GetApprovalDetailsUseCase(approval_port=gateway)


def get_manage_trash_categories_use_case(
    gateway: TrashCategoryGateway = Depends(get_trash_category_gateway),
) -> ManageTrashCategoriesUseCase:
    return ManageTrashCategoriesUseCase(trash_category_port=gateway)


def get_optional_session(
    request: Request,
    client: RijigApiClient = Depends(get_api_client),
) -> SessionData | None:
    return read_session(request, client)


def require_role(role: UserRole | None = None, status: RegistrationStatus | None = None):
    def _dependency(
        request: Request,
        client: RijigApiClient = Depends(get_api_client),
    ) -> SessionData:
        return require_session(request, client, role=role, status=status)

    return _dependency


def require_full_pengelola(
    session: SessionData = Depends(require_role("pengelola", "complete")),
) -> SessionData:
    # A partial token only proves the OTP step; the PIN still has to be checked.
    if not session.is_fully_authenticated:
        raise AccessRedirect(PENGELOLA_VERIFY_PIN_PATH)
    return session
