"""Application settings.

Settings are read once from the environment (``TFRUNTASK_*`` variables or a
``.env`` file) and are immutable afterwards. Command line flags are passed as
init arguments, which take priority over the environment.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process wide configuration of the run task server."""

    model_config = SettingsConfigDict(
        env_prefix="TFRUNTASK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Interface to listen on")
    port: int = Field(default=10000, ge=1, le=65535, description="Port to listen on")
    path: str = Field(default="/runtask", description="Route receiving run task requests")
    hmac_key: str = Field(
        default="",
        description="HMAC key configured on the run task; empty disables signature checks",
    )

    # HCP Terraform API
    api_token: str = Field(
        default="",
        validation_alias=AliasChoices("TFRUNTASK_API_TOKEN", "TERRAFORM_API_TOKEN"),
        description="Token allowed to read runs; API downloads are skipped without it",
    )
    http_timeout_seconds: float = Field(default=30.0, gt=0, description="HTTP timeout")

    # Storage and reporting
    output_dir: Path = Field(default=Path("."), description="Root of the per-run directories")
    reference_url_template: str = Field(
        default="https://example.com/task/{run_id}",
        description="Link attached to task results; {run_id} is substituted",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level name")
    json_logs: bool = Field(default=False, description="Render logs as JSON lines")

    @field_validator("path")
    @classmethod
    def _ensure_leading_slash(cls, value: str) -> str:
        return value if value.startswith("/") else f"/{value}"

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()


@lru_cache
def get_settings() -> Settings:
    """Return the settings loaded from the environment (cached)."""
    return Settings()
