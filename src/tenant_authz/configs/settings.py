from __future__ import annotations

from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """
    Central configuration.

    - Values loaded from `.env`
    - Comma-separated lists for multi-value settings like CORS_ORIGINS
    - The reserved role names are configuration, not business logic
    """

    # ----------------------------
    # Service
    # ----------------------------
    SERVICE_NAME: str = "tenant-authz-service"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # ----------------------------
    # Policy source
    # ----------------------------
    POLICY_SOURCE: str = "builtin"  # builtin | file | mongo
    POLICY_FILE: str | None = None

    # ----------------------------
    # Mongo (POLICY_SOURCE=mongo)
    # ----------------------------
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "authz"
    mongo_roles_collection: str = "authz_roles"
    mongo_permissions_collection: str = "authz_permissions"

    # ----------------------------
    # Reserved roles
    # ----------------------------
    SUPERUSER_ROLE: str = "ConsoleManager"
    TENANT_ADMIN_ROLE: str = "Admin"
    PRIVILEGED_LEVEL: int = 4

    # ----------------------------
    # Validation / diagnostics
    # ----------------------------
    # empty means any well-formed module name is accepted
    KNOWN_MODULES: Any = Field(default_factory=list)
    # modules whose decisions are traced step by step at DEBUG
    TRACE_MODULES: Any = Field(default_factory=list)

    # ----------------------------
    # CORS
    # ----------------------------
    # store as raw string list from env; we will normalize in code
    CORS_ORIGINS: Any = Field(default_factory=list)

    # Pydantic settings config (v2 style)
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


def split_csv(raw: Any) -> list[str]:
    """Normalize a comma-separated env value (or an already parsed list)."""
    if isinstance(raw, str):
        return [v.strip() for v in raw.split(",") if v.strip()]
    if isinstance(raw, (list, tuple, set, frozenset)):
        return [str(v).strip() for v in raw if str(v).strip()]
    return []


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
