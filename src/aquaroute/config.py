"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="AQR_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "AquaRoute Water Supply Routing API"
    api_prefix: str = "/api"
    optimizer_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the remote route optimizer (e.g., http://localhost:5000).",
    )
    probe_timeout_seconds: float = Field(default=10.0, gt=0.0, le=10.0)
    probe_secondary_timeout_seconds: float = Field(default=5.0, gt=0.0, le=5.0)
    genetic_timeout_seconds: float = Field(default=30.0, gt=0.0)
    standard_timeout_seconds: float = Field(default=30.0, gt=0.0)
    nearest_timeout_seconds: float = Field(default=15.0, gt=0.0)
    dataset_timeout_seconds: float = Field(default=20.0, gt=0.0)
    nearest_max_distance_km: float = Field(
        default=5.0,
        gt=0.0,
        description="Search radius sent to the nearest-points lookup.",
    )
    supply_points_limit: int = Field(default=10000, ge=1)
    supply_points_file: Optional[Path] = Field(
        default=None,
        description="Local JSON dataset of water supply points used when the optimizer is not configured.",
    )
    default_max_routes: int = Field(default=10, ge=1)
    default_max_hops: int = Field(default=8, ge=1)
    default_destination_keyword: str = "water"
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("optimizer_base_url", mode="before")
    @classmethod
    def _strip_base_url(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip().rstrip("/")
        return text or None

    @field_validator("supply_points_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Optional[Path]:
        if value is None or value == "":
            return None
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
