"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - Settings is frozen: components receive it once at construction and cannot mutate it
    - Enabling auth without an access key is rejected at load time
    - get_settings() is cached (lru_cache) — used only by the process entry point

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - List settings accept comma-separated env values (NoDecode + splitter), matching
      how CORS origins are usually written in deployment manifests
    - Explicit Settings passed to create_app(): middleware and tests never read ambient state
"""

from functools import lru_cache
from typing import Annotated

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _split_csv(value: object) -> object:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, frozen=True,
    )

    # Database
    database_url: str = (
        "postgresql+asyncpg://drawboard:drawboard@db:5432/drawboard"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 10
    database_max_overflow: int = 10

    # Server
    server_host: str = "0.0.0.0"
    server_port: int = 8080
    shutdown_grace_seconds: int = 10

    # CORS
    cors_allowed_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:5173",
    ]
    cors_allowed_methods: Annotated[list[str], NoDecode] = [
        "GET", "POST", "PUT", "DELETE", "OPTIONS",
    ]
    cors_allowed_headers: Annotated[list[str], NoDecode] = [
        "Content-Type", "Authorization", "X-Request-ID",
    ]
    cors_max_age: int = 3600

    # Auth
    auth_enabled: bool = False
    auth_access_key: str = ""
    public_paths: Annotated[list[str], NoDecode] = ["/health", "/health/ready"]

    @field_validator(
        "cors_allowed_origins", "cors_allowed_methods",
        "cors_allowed_headers", "public_paths",
        mode="before",
    )
    @classmethod
    def split_comma_separated(cls, v: object) -> object:
        return _split_csv(v)

    @model_validator(mode="after")
    def require_key_when_auth_enabled(self):
        if self.auth_enabled and not self.auth_access_key:
            raise ValueError("auth_access_key is required when auth_enabled is true")
        return self

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
