from __future__ import annotations

from typing import Literal

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from clipflow.core.models.filter import FilterMode


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CLIPFLOW_",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_prefix: str = "/api/v1"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:8000",
    ]

    cors_origin_regex: str | None = None
    trusted_hosts: list[str] = ["*"]
    root_path: str = ""

    # Workspace storage
    storage_backend: Literal["memory", "file", "supabase"] = "file"
    storage_dir: str = ".clipflow"  # file backend only

    # Supabase (storage_backend == "supabase")
    supabase_url: str | None = None
    supabase_service_role_key: str | None = None
    supabase_blob_table: str = "workspace_blobs"

    # Taxonomy and notes
    default_filter_mode: FilterMode = FilterMode.OR
    tag_name_max_length: int = 100
    note_content_max_length: int = 10000

    @field_validator("storage_backend", "default_filter_mode", mode="before")
    @classmethod
    def normalize_choice(cls, v: object, info: ValidationInfo) -> object:
        """Accept ``File`` / ``and`` etc. from the environment."""
        if not isinstance(v, str):
            return v
        return v.upper() if info.field_name == "default_filter_mode" else v.lower()


settings = Settings()
