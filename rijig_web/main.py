from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.sessions import SessionMiddleware

from rijig_web.api.deps import get_root_api_client
from rijig_web.api.errors import SERVER_ERROR_MESSAGE, api_error_response, form_errors_response
from rijig_web.api.request_context import SessionContextMiddleware
from rijig_web.api.routers.admin_panel import router as admin_panel_router
from rijig_web.api.routers.auth_admin import router as auth_admin_router
from rijig_web.api.routers.auth_pengelola import router as auth_pengelola_router
from rijig_web.api.routers.landing import router as landing_router
from rijig_web.api.routers.logout import router as logout_router
from rijig_web.api.routers.pengelola_dashboard import router as pengelola_dashboard_router
from rijig_web.domain.exceptions import (
    AccessRedirect,
    ApiError,
    ApiUnavailableError,
    FormValidationError,
    TokenRefreshError,
)
from rijig_web.domain.services.onboarding import sign_in_path_for
from rijig_web.shared.config import Settings, get_settings


logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    if get_root_api_client.cache_info().currsize:
        get_root_api_client().close()
        get_root_api_client.cache_clear()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(title="Rijig Web", lifespan=lifespan)
    # Added first so it runs inside SessionMiddleware and sees the loaded session.
    app.add_middleware(SessionContextMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie_name,
        max_age=settings.session_max_age_seconds,
        same_site="lax",
        https_only=settings.is_production,
    )

    @app.exception_handler(AccessRedirect)
    async def access_redirect_handler(_request: Request, exc: AccessRedirect):
        return RedirectResponse(url=exc.location, status_code=302)

    @app.exception_handler(TokenRefreshError)
    async def token_refresh_handler(request: Request, exc: TokenRefreshError):
        target = sign_in_path_for(request.url.path)
        logger.info("main: token_refresh_failed path=%s redirect=%s error=%s", request.url.path, target, exc)
        request.session.clear()
        return RedirectResponse(url=target, status_code=302)

    @app.exception_handler(FormValidationError)
    async def form_validation_handler(_request: Request, exc: FormValidationError):
        return form_errors_response(exc)

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        logger.warning(
            "main: api_error path=%s status=%s message=%s",
            request.url.path,
            exc.status_code,
            exc.message,
        )
        return api_error_response(exc)

    @app.exception_handler(ApiUnavailableError)
    async def api_unavailable_handler(request: Request, exc: ApiUnavailableError):
        logger.error("main: api_unavailable path=%s error=%s", request.url.path, exc)
        return JSONResponse({"success": False, "errors": {"general": SERVER_ERROR_MESSAGE}}, status_code=503)

    app.include_router(landing_router)
    app.include_router(auth_pengelola_router)
    app.include_router(pengelola_dashboard_router)
    app.include_router(auth_admin_router)
    app.include_router(admin_panel_router)
    app.include_router(logout_router)
    return app


app = create_app()
