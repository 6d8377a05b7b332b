"""Central configuration object (env‑driven).

Uses Pydantic *BaseSettings* so everything can be overridden via environment
variables or a local *.env* file.
"""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Load settings from env vars or .env."""

    ADMIN_JWT_SECRET: str = Field(
        default="dev‑secret‑change‑me",
        description="HS256 secret shared with the admin login service",
    )

    USER_API_URL: str = Field(
        default="http://localhost:4001",
        description="Base URL of the user/file service",
    )
    USER_API_TOKEN: str = Field(
        default="",
        description="Bearer token presented to the user/file service",
    )
    USER_API_TIMEOUT: float = Field(
        default=30.0,
        gt=0,
        description="Seconds to wait for a single downstream call",
    )

    CLIENT_URL: str = Field(
        default="http://localhost:5174",
        description="Origin of the admin frontend (CORS)",
    )

    MAX_UPLOAD_BYTES: int = Field(
        default=25 * 1024 * 1024,
        gt=0,
        description="Per‑file upload limit",
    )
    UPLOAD_CONCURRENCY: int = Field(
        default=4,
        ge=1,
        description="Max target users uploaded to in parallel",
    )

    AUDIT_LOG_FILE: str = Field(
        default="audit.log",
        description="Path of the JSONL audit trail",
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf‑8"


# singleton instance ---------------------------------------------------------

settings = Settings()
