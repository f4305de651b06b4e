from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Literal, Mapping


UserRole = Literal["administrator", "pengelola"]
TokenType = Literal["partial", "full"]
RegistrationStatus = Literal["uncomplete", "awaiting_approval", "approved", "complete"]

ROLE_ADMINISTRATOR: UserRole = "administrator"
ROLE_PENGELOLA: UserRole = "pengelola"

# Attribute name -> key used inside the cookie session.
COOKIE_KEYS: dict[str, str] = {
    "access_token": "accessToken",
    "refresh_token": "refreshToken",
    "session_id": "sessionId",
    "role": "role",
    "device_id": "deviceId",
    "email": "email",
    "phone": "phone",
    "token_type": "tokenType",
    "registration_status": "registrationStatus",
    "next_step": "nextStep",
}


@dataclass(frozen=True)
class SessionData:
    access_token: str
    refresh_token: str = ""
    session_id: str = ""
    role: UserRole = ROLE_PENGELOLA
    device_id: str | None = None
    email: str | None = None
    phone: str | None = None
    token_type: TokenType | None = None
    registration_status: RegistrationStatus | None = None
    next_step: str | None = None

    @property
    def is_fully_authenticated(self) -> bool:
        return bool(self.access_token) and self.token_type == "full"

    def to_cookie(self) -> dict[str, Any]:
        values = {}
        for field in fields(self):
            value = getattr(self, field.name)
            if value is not None:
                values[COOKIE_KEYS[field.name]] = value
        return values

    @classmethod
    def from_cookie(cls, raw: Mapping[str, Any]) -> SessionData | None:
        access_token = raw.get(COOKIE_KEYS["access_token"])
        if not access_token:
            return None
        return cls(
            access_token=access_token,
            refresh_token=raw.get(COOKIE_KEYS["refresh_token"]) or "",
            session_id=raw.get(COOKIE_KEYS["session_id"]) or "",
            role=raw.get(COOKIE_KEYS["role"]) or ROLE_PENGELOLA,
            device_id=raw.get(COOKIE_KEYS["device_id"]),
            email=raw.get(COOKIE_KEYS["email"]),
            phone=raw.get(COOKIE_KEYS["phone"]),
            token_type=raw.get(COOKIE_KEYS["token_type"]),
            registration_status=raw.get(COOKIE_KEYS["registration_status"]),
            next_step=raw.get(COOKIE_KEYS["next_step"]),
        )

    def updated(self, **changes: Any) -> SessionData:
        return replace(self, **{key: value for key, value in changes.items() if value is not None})
