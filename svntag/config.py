"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file without overriding variables injected by the build system
load_dotenv(override=False)


class Settings(BaseSettings):
    """Application settings loaded from SVNTAG_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SVNTAG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = True

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Subversion client
    svn_binary: str = "svn"
    svn_timeout_seconds: float = Field(default=300.0, gt=0)
    svn_extra_args: list[str] = Field(default_factory=list)

    # Configuration store
    config_db_path: str = "data/svntag.db"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["console", "json"] = "console"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
