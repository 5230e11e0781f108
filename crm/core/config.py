"""Application configuration loaded from environment variables."""

import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from sqlalchemy.engine import URL

# Keys that must be set for the service to report itself ready.
REQUIRED_FOR_READINESS = ("JWT_SECRET", "DB_USER", "DB_PASSWORD", "DB_NAME")


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    API_V1_PREFIX: str = "/api/v1"

    # HTTP listener (python -m crm)
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Postgres connection. Credentials are optional here so a missing value
    # shows up as "not ready" on /health/ready instead of a settings error.
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str | None = None
    DB_PASSWORD: SecretStr | None = None
    DB_NAME: str | None = None
    DB_POOL_SIZE: int = 10
    DB_POOL_TIMEOUT_SEC: float = 30.0

    # JWT authentication
    JWT_SECRET: SecretStr | None = None
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 1440

    # Browser origins allowed by CORS; JSON list or comma-separated string.
    CORS_ORIGINS: Annotated[list[str], NoDecode] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Directory of NNN-name.sql migration scripts; defaults to crm/migrations.
    MIGRATIONS_DIR: Path | None = None

    @field_validator("API_V1_PREFIX")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            raise ValueError("API_V1_PREFIX must start with '/' (e.g. /api/v1)")
        return v

    @field_validator("PORT", "DB_PORT")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if v < 1 or v > 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("DB_USER", "DB_NAME")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v: int) -> int:
        if v < 1 or v > 100:
            raise ValueError("DB_POOL_SIZE must be between 1 and 100")
        return v

    @field_validator("DB_POOL_TIMEOUT_SEC")
    @classmethod
    def validate_pool_timeout(cls, v: float) -> float:
        if v <= 0 or v > 300:
            raise ValueError("DB_POOL_TIMEOUT_SEC must be greater than 0 and at most 300")
        return v

    @field_validator("DB_PASSWORD", "JWT_SECRET")
    @classmethod
    def empty_secret_to_none(cls, v: SecretStr | None) -> SecretStr | None:
        if v is None or not v.get_secret_value().strip():
            return None
        return v

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_ALGORITHM must be set and non-empty")
        return v.strip()

    @field_validator("JWT_EXPIRE_MINUTES")
    @classmethod
    def validate_jwt_expire_minutes(cls, v: int) -> int:
        if v < 1 or v > 10080:
            raise ValueError(
                "JWT_EXPIRE_MINUTES must be between 1 and 10080 (1 min to 7 days)"
            )
        return v

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def split_cors_origins(cls, v: object) -> object:
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("["):
                return json.loads(s)
            return [origin.strip() for origin in s.split(",") if origin.strip()]
        return v

    @property
    def database_url(self) -> URL:
        """SQLAlchemy URL assembled from the DB_* settings."""
        return URL.create(
            "postgresql+psycopg2",
            username=self.DB_USER,
            password=self.DB_PASSWORD.get_secret_value() if self.DB_PASSWORD else None,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
        )

    @property
    def migrations_dir(self) -> Path:
        if self.MIGRATIONS_DIR is not None:
            return self.MIGRATIONS_DIR
        return Path(__file__).resolve().parent.parent / "migrations"

    def missing_required(self) -> list[str]:
        """Names of settings that must be set before the service is ready."""
        return [name for name in REQUIRED_FOR_READINESS if getattr(self, name) is None]


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
