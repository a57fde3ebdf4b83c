"""
Application Settings
===================

Main application settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Optional, List, Union
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import json
from pathlib import Path


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="PageSnap Render Worker", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=True, description="Debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8787, description="Server port")

    # Storage Configuration
    storage_path: Path = Field(default=Path("./storage"), description="Storage directory path")

    # Browser Configuration
    browser_endpoint: Optional[str] = Field(
        default=None,
        description="CDP endpoint of a hosted browser; a local Chromium is launched when unset",
    )
    browser_connect_timeout_ms: int = Field(
        default=60000, gt=0, description="Timeout for connecting to the hosted browser"
    )
    playwright_headless: bool = Field(default=True, description="Run local browser headless")
    navigation_timeout_ms: Optional[int] = Field(
        default=None, gt=0, description="Navigation timeout override in milliseconds"
    )

    # Rendering Configuration
    html_settle_delay: float = Field(
        default=2.0, ge=0, description="Seconds to wait after HTML content settles"
    )
    default_html_width: int = Field(default=800, gt=0, description="HTML mode fallback width")
    default_html_height: int = Field(default=600, gt=0, description="HTML mode fallback height")
    default_url_width: int = Field(default=1280, gt=0, description="URL mode default width")
    url_viewport_height: int = Field(
        default=720, gt=0, description="Nominal URL mode viewport height before full-page capture"
    )
    strict_mode_selection: bool = Field(
        default=False, description="Reject payloads that set more than one of html/url/pdfURL"
    )

    # Security Configuration
    allowed_hosts: List[str] = Field(default=["*"], description="Allowed hosts for CORS")

    # Monitoring Configuration
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("allowed_hosts", mode="before")
    @classmethod
    def parse_allowed_hosts(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse allowed hosts from string or list."""
        if isinstance(v, str):
            # Handle JSON-like string: ["*"] or ["host1", "host2"]
            v = v.strip()
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            # Handle comma-separated string: "*" or "host1,host2"
            return [host.strip() for host in v.split(",") if host.strip()]
        return v

    @field_validator("browser_endpoint")
    @classmethod
    def blank_endpoint_is_unset(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty endpoint as not configured."""
        if v is not None and not v.strip():
            return None
        return v

    @property
    def browser_mode(self) -> str:
        """Whether browsers are reached remotely or launched locally."""
        return "remote" if self.browser_endpoint else "local"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="PAGESNAP_"
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
