"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_anon_key: str
    supabase_service_key: str
    admin_token: str
    registrations_table: str = "registrations"
    audit_table: str = "audit_events"
    photo_bucket: str = "registration-photos"
    presentation_mode: Literal["optimistic", "confirm"] = "confirm"
    failure_policy: Literal["annotate", "rollback"] = "annotate"
    identity_policy: Literal["per_session", "per_submission"] = "per_session"
    image_max_width: int = 400
    image_quality: int = 70
    max_photo_bytes: int = 5 * 1024 * 1024
    brand_title: str = "AIYF"
    header_image_path: str | None = None
    public_base_url: str = "http://localhost:8000"
    flow_ttl_seconds: int = 3600
    request_timeout_seconds: int = 10
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def form_url(base_url: str) -> str:
    """Return the public URL of the registration form."""
    return f"{base_url.rstrip('/')}/form"
