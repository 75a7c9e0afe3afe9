from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BOOSTEAM_",
        env_file=".env",
        extra="ignore",
    )

    # Runtime
    ENVIRONMENT: str = Field(default="dev", description="dev|test|production")
    HOST: str = Field(default="0.0.0.0", description="Bind host")
    PORT: int = Field(default=3000, description="Bind port")
    LOG_LEVEL: str = Field(default="INFO", description="Root log level for the CLI")
    CORS_ORIGINS: str = Field(
        default="http://localhost:3001",
        description="Comma-separated list of allowed CORS origins",
    )

    # Database
    DATABASE_URL: str = Field(default="sqlite:///boosteam_dev.db")
    TEST_DATABASE_URL: str = Field(default="sqlite:///:memory:")

    # Auth
    JWT_SECRET_KEY: str = Field(
        default="boosteam-dev-secret-change-me",
        description="HS256 secret for dev; override in production",
    )
    JWT_ACCESS_TOKEN_TTL_SECONDS: int = Field(
        default=86400, description="Access token TTL seconds"
    )
    AUTH_LEEWAY_SECONDS: int = Field(default=0, description="JWT exp leeway seconds")
    AUTH_ERROR_DETAIL: str = Field(
        default="detailed",
        description="detailed: distinct credential failures, uniform: a single 401",
    )
    PASSWORD_MIN_LENGTH: int = Field(default=8, description="Minimum password length")
    PASSWORD_HASH_ITERATIONS: int = Field(
        default=260_000, description="PBKDF2 iterations for new password hashes"
    )

    # RBAC bootstrap
    BOOTSTRAP_MODE: str = Field(
        default="first-run",
        description="first-run: seed only an empty catalog, upsert: ensure each entry",
    )
    SEED_ON_STARTUP: bool = Field(
        default=True, description="Seed permissions/roles when the API starts"
    )

    # Dev admin account (seeder)
    ADMIN_USERNAME: str = Field(default="admin")
    ADMIN_PASSWORD: str = Field(default="", description="Empty disables the admin seeder")
    ADMIN_EMAIL: str = Field(default="admin@boosteam.local")

    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in (self.CORS_ORIGINS or "").split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
