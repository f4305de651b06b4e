from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


@dataclass(frozen=True)
class Settings:
    rijig_api_base_url: str
    rijig_api_key: str
    rijig_api_timeout_seconds: float
    session_secret: str
    session_cookie_name: str
    session_max_age_seconds: int
    app_env: str
    log_level: str

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


def get_settings() -> Settings:
    return Settings(
        rijig_api_base_url=_env("RIJIG_API_BASE_URL", "http://localhost:8080/apirijig/v2"),
        rijig_api_key=_env("RIJIG_API_KEY", ""),
        rijig_api_timeout_seconds=float(_env("RIJIG_API_TIMEOUT_SECONDS", "30")),
        session_secret=_env("SESSION_SECRET", "s3cr3t"),
        session_cookie_name=_env("SESSION_COOKIE_NAME", "__rijig_session"),
        session_max_age_seconds=int(_env("SESSION_MAX_AGE_SECONDS", str(60 * 60 * 24 * 7))),
        app_env=_env("APP_ENV", "development"),
        log_level=_env("LOG_LEVEL", "INFO"),
    )
