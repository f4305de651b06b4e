from __future__ import annotations

from fastapi.responses import JSONResponse

from rijig_web.domain.exceptions import ApiError, FormValidationError


SERVER_ERROR_MESSAGE = "Terjadi kesalahan server. Silakan coba lagi."
TOO_MANY_REQUESTS_MESSAGE = "Terlalu banyak permintaan. Silakan tunggu beberapa menit."


def errors_response(errors: dict[str, str], *, status_code: int = 400) -> JSONResponse:
    return JSONResponse({"success": False, "errors": errors}, status_code=status_code)


def form_errors_response(exc: FormValidationError) -> JSONResponse:
    return errors_response(exc.errors, status_code=400)


def api_error_response(exc: ApiError, *, field: str = "general") -> JSONResponse:
    """Upstream failure as a form error on `field`, keeping the upstream status."""
    status_code = exc.status_code if exc.status_code >= 400 else 400
    if status_code == 429:
        return errors_response({"general": TOO_MANY_REQUESTS_MESSAGE}, status_code=429)
    if status_code >= 500:
        return errors_response({"general": exc.message or SERVER_ERROR_MESSAGE}, status_code=status_code)
    return errors_response({field: exc.message}, status_code=status_code)
