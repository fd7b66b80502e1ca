from __future__ import annotations

import functools
from typing import Any, Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TIMEOUT_MS = 5000


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App / env
    app_env: str = Field("dev", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Evidence
    artifacts_root: str = Field("artifacts", alias="MOVA_ARTIFACTS_ROOT")
    evidence_namespace: str = Field("mova_agent", alias="MOVA_EVIDENCE_NAMESPACE")

    # Drivers
    default_timeout_ms: int = Field(DEFAULT_TIMEOUT_MS, alias="MOVA_DEFAULT_TIMEOUT_MS")
    allowlist_deny_by_default: bool = Field(False, alias="MOVA_ALLOWLIST_DENY_BY_DEFAULT")

    @field_validator("default_timeout_ms")
    @classmethod
    def clamp_positive(cls, v: int) -> int:
        return v if v > 0 else DEFAULT_TIMEOUT_MS

    @field_validator("app_env")
    @classmethod
    def normalize_env(cls, v: str) -> str:
        return (v or "dev").lower()

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return (v or "INFO").upper()

    @field_validator("evidence_namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        val = (v or "").strip()
        if not val or "/" in val or "\\" in val or val in (".", ".."):
            raise ValueError("evidence namespace must be a single path segment")
        return val


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def settings_public_summary(settings: Optional[Settings] = None) -> Dict[str, Any]:
    s = settings or get_settings()
    return {
        "env": s.app_env,
        "log_level": s.log_level,
        "artifacts_root": s.artifacts_root,
        "evidence_namespace": s.evidence_namespace,
        "default_timeout_ms": s.default_timeout_ms,
        "allowlist_deny_by_default": s.allowlist_deny_by_default,
    }


__all__ = ["DEFAULT_TIMEOUT_MS", "Settings", "get_settings", "settings_public_summary"]
