from __future__ import annotations

from rijig_web.domain.entities.session import (
    ROLE_ADMINISTRATOR,
    ROLE_PENGELOLA,
    RegistrationStatus,
    SessionData,
    UserRole,
)


ROOT_PATH = "/"

PENGELOLA_SIGN_IN_PATH = "/authpengelola"
PENGELOLA_COMPANY_PROFILE_PATH = "/authpengelola/completingcompanyprofile"
PENGELOLA_WAITING_APPROVAL_PATH = "/authpengelola/waitingapprovalfromadministrator"
PENGELOLA_CREATE_PIN_PATH = "/authpengelola/createanewpin"
PENGELOLA_VERIFY_PIN_PATH = "/authpengelola/verifyexistingpin"
PENGELOLA_DASHBOARD_PATH = "/pengelola/dashboard"

ADMIN_SIGN_IN_PATH = "/sys-rijig-administrator/sign-infirst"
ADMIN_OTP_PATH = "/sys-rijig-administrator/emailotpverifyrequired"
ADMIN_REGISTER_PATH = "/sys-rijig-administrator/register"
ADMIN_FORGOT_PASSWORD_PATH = "/sys-rijig-administrator/forgot-password"
ADMIN_RESET_PASSWORD_PATH = "/sys-rijig-administrator/reset-password"
ADMIN_VERIFY_EMAIL_PATH = "/sys-rijig-administrator/verify-email"
ADMIN_DASHBOARD_PATH = "/sys-rijig-adminpanel/dashboard"

# (role, current registration status) -> where that user has to go next.
ONBOARDING_ROUTES: dict[tuple[UserRole, RegistrationStatus], str] = {
    (ROLE_PENGELOLA, "uncomplete"): PENGELOLA_COMPANY_PROFILE_PATH,
    (ROLE_PENGELOLA, "awaiting_approval"): PENGELOLA_WAITING_APPROVAL_PATH,
    (ROLE_PENGELOLA, "approved"): PENGELOLA_CREATE_PIN_PATH,
}

# Where a finished step lands when the status already moved on.
STATUS_LANDING_ROUTES: dict[tuple[UserRole, RegistrationStatus], str] = {
    **ONBOARDING_ROUTES,
    (ROLE_PENGELOLA, "complete"): PENGELOLA_DASHBOARD_PATH,
    (ROLE_ADMINISTRATOR, "complete"): ADMIN_DASHBOARD_PATH,
}

# Path prefix -> sign-in page used when the session can no longer be refreshed.
SIGN_IN_BY_PREFIX: tuple[tuple[str, str], ...] = (
    ("/sys-rijig-adminpanel", ADMIN_SIGN_IN_PATH),
    ("/pengelola", PENGELOLA_SIGN_IN_PATH),
)


def resolve_access_redirect(
    session: SessionData | None,
    *,
    role: UserRole | None = None,
    status: RegistrationStatus | None = None,
) -> str | None:
    """Return the redirect target for a guarded route, or None to let it through.

    A status without a table entry passes even when it differs from `status`.
    """
    if session is None:
        return ROOT_PATH
    if role is not None and session.role != role:
        return ROOT_PATH
    if status is not None and session.registration_status != status:
        return ONBOARDING_ROUTES.get((session.role, session.registration_status))
    return None


def landing_path_for(role: UserRole, status: RegistrationStatus | None) -> str | None:
    if status is None:
        return None
    return STATUS_LANDING_ROUTES.get((role, status))


def sign_in_path_for(path: str) -> str:
    for prefix, target in SIGN_IN_BY_PREFIX:
        if path.startswith(prefix):
            return target
    return ROOT_PATH
