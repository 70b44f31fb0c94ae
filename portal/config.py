"""
Portal configuration.

Settings are read from environment variables prefixed with ``PORTAL_`` and
from a local ``.env`` file, e.g.::

    PORTAL_BACKEND_URL=http://timetable-backend:8080
    PORTAL_POLL_INTERVAL_SECONDS=2
    PORTAL_SEMESTER=SPRING
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PortalSettings(BaseSettings):
    """Central configuration for the API client, orchestrator and proxy server."""

    model_config = SettingsConfigDict(
        env_prefix="PORTAL_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Backend
    backend_url: str = Field(
        default="http://localhost:8080",
        min_length=1,
        description="Base URL of the timetable backend service.",
    )
    api_base_path: str = Field(
        default="/api",
        description="Fixed path prefix prepended to every backend endpoint.",
    )
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout per request (seconds).",
    )

    # Generation polling
    poll_interval_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Delay between two generation status checks (seconds).",
    )
    poll_timeout_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Give up polling after this long (seconds).",
    )
    semester: str = Field(
        default="FALL",
        min_length=1,
        description="Semester identifier sent with a generation request.",
    )
    academic_year: str = Field(
        default="2024-2025",
        min_length=1,
        description="Academic year identifier sent with a generation request.",
    )

    # Runtime
    log_level: str = Field(default="INFO", description="Root log level.")
    host: str = Field(default="127.0.0.1", description="Proxy server bind address.")
    port: int = Field(default=8000, ge=1, le=65535, description="Proxy server port.")

    @field_validator("backend_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("api_base_path")
    @classmethod
    def normalize_base_path(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = "/" + v
        return v

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()


@lru_cache(maxsize=1)
def get_settings() -> PortalSettings:
    """Load settings once per process."""
    return PortalSettings()
