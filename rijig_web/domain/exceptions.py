from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class ApiError(DomainError):
    """Remote API answered with an error status that is not recovered locally."""

    def __init__(self, message: str, *, status_code: int, payload: dict | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}


class ApiUnavailableError(DomainError):
    """Remote API could not be reached."""


class TokenRefreshError(DomainError):
    """Access token could not be refreshed; the user must sign in again."""


class AccessRedirect(DomainError):
    """Session does not grant access here; the caller must go to `location`."""

    def __init__(self, location: str):
        super().__init__(f"Redirect to {location}.")
        self.location = location


class FormValidationError(DomainError):
    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(f"{field}: {message}" for field, message in errors.items()))
        self.errors = errors
