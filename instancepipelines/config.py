"""
Runtime configuration.

Values come from ``INSTANCEPIPELINES_*`` environment variables or a local
``.env`` file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .files.agent import DEFAULT_AGENT_FOLDER


class Settings(BaseSettings):
    """Runtime configuration for pipeline runs."""

    model_config = SettingsConfigDict(
        env_prefix="INSTANCEPIPELINES_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    webserver_backend: Literal["memory", "http"] = "memory"
    webserver_url: Optional[str] = None
    webserver_api_key: Optional[str] = None
    request_timeout: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=2.0, ge=0)

    instances_root: Path = Path("instances")
    agent_folder: str = DEFAULT_AGENT_FOLDER

    log_dir: Path = Path(".")
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Return cached settings for the process."""
    return Settings()
