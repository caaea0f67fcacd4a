"""Runtime configuration for the shared calendar page."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal, Optional

import google.auth
from google.auth.exceptions import DefaultCredentialsError
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration sourced from ``CALENDAR_*`` environment variables."""

    backend: Literal["firestore", "memory"] = "firestore"
    gcp_project: Optional[str] = None
    credentials_secret: Optional[str] = None
    reservations_collection: str = "reservations"
    users_collection: str = "users"
    refresh_seconds: float = Field(2.0, gt=0)
    single_tap: bool = False
    cascade_user_delete: bool = True
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="CALENDAR_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, value: str) -> str:
        return value.upper()

    def project_id(self) -> str:
        """Explicit setting first, then ADC, then the ``GCP_PROJECT`` env var."""
        if self.gcp_project:
            return self.gcp_project
        try:
            _, project_id = google.auth.default()
        except DefaultCredentialsError:
            project_id = None
        project_id = project_id or os.getenv("GCP_PROJECT")
        if not project_id:
            raise RuntimeError("GCP project ID not found")
        return project_id


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
