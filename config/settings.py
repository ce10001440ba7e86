"""Application settings and configuration management."""
from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    POLICY_PATH: Optional[str] = None
    LLM_CONFIG_PATH: Optional[str] = None

    AUDIT_LOG_LIMIT: int = Field(default=200, ge=1)
    ANSWER_PREVIEW_CHARS: int = Field(default=80, ge=0)

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
