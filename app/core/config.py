"""
Centralised application settings loaded from environment / .env file.

Uses pydantic-settings so every value can be overridden via env vars
or the .env file at the project root.
"""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Project ──────────────────────────────────────────────────────
    PROJECT_NAME: str = "CAFM HR Console"
    VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api/v1"

    # ── Upstream CAFM REST API ──────────────────────────────────────
    CAFM_API_URL: str = "https://cafm.zenapi.co.in/api"
    UPSTREAM_TIMEOUT_SECONDS: float = 15.0
    UPSTREAM_CONCURRENCY: int = 8
    EXPORT_RATE_LIMIT: str = "10/minute"

    # ── Database (holiday calendar) ─────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./cafm_console.db"
    SEED_DEFAULT_HOLIDAYS: bool = True

    # ── SSO tokens (issued externally, verified here) ───────────────
    SECRET_KEY: str = "CHANGE-ME-TO-THE-SSO-SIGNING-SECRET"
    ALGORITHM: str = "HS256"

    # ── CORS ─────────────────────────────────────────────────────────
    CORS_ORIGINS: list[str] = [
        "http://localhost",
        "http://localhost:3000",
        "http://127.0.0.1",
        "http://127.0.0.1:3000",
    ]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors(cls, v: object) -> list[str]:
        if isinstance(v, str) and not v.lstrip().startswith("["):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v  # type: ignore[return-value]

    @field_validator("CAFM_API_URL")
    @classmethod
    def _strip_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # ── Logging ──────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }


settings = Settings()

if settings.SECRET_KEY == "CHANGE-ME-TO-THE-SSO-SIGNING-SECRET":
    import logging

    logging.getLogger("app.core.config").warning(
        "⚠️  WARNING: SECRET_KEY is the placeholder value. "
        "Set it to the SSO signing secret in your .env file."
    )
