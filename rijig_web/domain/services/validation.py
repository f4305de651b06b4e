from __future__ import annotations

import base64
import re
import secrets
import string
import time
from datetime import date
from urllib.parse import parse_qs, urlparse


_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PASSWORD_RE = re.compile(
    r"^(?=.*[A-Z])(?=.*\d)(?=.*[!@#$%^&*()\-_=+\[\]{}|;:'\",.<>?/`~]).{8,}$"
)
# Country code 62 followed by 9 to 14 subscriber digits.
_PHONE_RE = re.compile(r"^62\d{9,14}$")
_PIN_RE = re.compile(r"^\d{6}$")
_OTP_RE = re.compile(r"^\d{4}$")

_DEVICE_ID_ALPHABET = string.ascii_lowercase + string.digits


def validate_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


def validate_password(password: str) -> bool:
    return bool(_PASSWORD_RE.match(password))


def validate_phone_number(phone: str) -> bool:
    return bool(_PHONE_RE.match(phone))


def validate_pin(pin: str) -> bool:
    return bool(_PIN_RE.match(pin))


def validate_otp(otp: str) -> bool:
    return bool(_OTP_RE.match(otp))


def format_date_ddmmyyyy(value: date) -> str:
    return f"{value.day:02d}-{value.month:02d}-{value.year}"


def parse_date_ddmmyyyy(value: str) -> date | None:
    parts = value.split("-")
    if len(parts) != 3:
        return None
    try:
        day, month, year = (int(part) for part in parts)
        return date(year, month, day)
    except ValueError:
        return None


def normalize_date_ddmmyyyy(value: str) -> str | None:
    """Accept `dd-mm-yyyy` or the ISO `yyyy-mm-dd` sent by date inputs; return `dd-mm-yyyy`."""
    value = value.strip()
    parsed = parse_date_ddmmyyyy(value)
    if parsed is None:
        try:
            parsed = date.fromisoformat(value)
        except ValueError:
            return None
    return format_date_ddmmyyyy(parsed)


def remaining_time(seconds: int) -> str:
    minutes, rest = divmod(max(seconds, 0), 60)
    return f"{minutes}:{rest:02d}"


def extract_reset_token(url: str) -> tuple[str, str] | None:
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return None
    query = parse_qs(parsed.query)
    token = (query.get("token") or [""])[0]
    email = (query.get("email") or [""])[0]
    if not token or not email:
        return None
    return token, email


def generate_device_id(prefix: str = "") -> str:
    timestamp = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_DEVICE_ID_ALPHABET) for _ in range(13))
    raw = f"{prefix}{timestamp}{suffix}"
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")
