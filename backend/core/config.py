"""Application settings loaded from the environment."""

from __future__ import annotations

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_JWT_SECRET = "dev-only-session-signing-secret-change-me"
DEV_CSRF_SECRET = "dev-only-csrf-signing-secret-change-me"
INSECURE_ENVIRONMENTS = frozenset({"local", "test"})


class Settings(BaseSettings):
    """Runtime configuration for the progressify backend."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "progressify"
    app_env: str = "local"
    log_level: str = "INFO"
    allow_insecure_http_cookies: bool = False

    jwt_secret: str = Field(default=DEV_JWT_SECRET, repr=False)
    csrf_secret: str = Field(default=DEV_CSRF_SECRET, repr=False)
    jwt_algorithm: str = "HS256"
    session_token_expire_minutes: int = 3 * 24 * 60
    csrf_token_expire_minutes: int = 3 * 24 * 60

    login_rate_limit_requests: int = 5
    login_rate_limit_window_seconds: int = 5 * 60
    register_rate_limit_requests: int = 3
    register_rate_limit_window_seconds: int = 30 * 60
    reset_rate_limit_requests: int = 5
    reset_rate_limit_window_seconds: int = 15 * 60
    rate_limit_trusted_proxies: list[str] = Field(default_factory=list)
    rate_limit_ip_headers: list[str] = Field(
        default_factory=lambda: ["x-forwarded-for", "x-real-ip"]
    )
    redis_url: str = ""

    database_url: str = ""
    seed_demo_data: bool = True

    @field_validator("app_env")
    @classmethod
    def _normalize_env(cls, value: str) -> str:
        return value.strip().lower()

    @model_validator(mode="after")
    def _require_real_secrets(self) -> "Settings":
        if self.app_env in INSECURE_ENVIRONMENTS:
            return self
        for name, default in (
            ("jwt_secret", DEV_JWT_SECRET),
            ("csrf_secret", DEV_CSRF_SECRET),
        ):
            value = getattr(self, name).strip()
            if not value or value == default:
                raise ValueError(f"Server misconfigured: {name.upper()} must be set")
        return self

    @property
    def is_insecure_env(self) -> bool:
        return self.app_env in INSECURE_ENVIRONMENTS


settings = Settings()
