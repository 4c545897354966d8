"""
Application Settings
===================

Main application settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

import json
import tempfile
from pathlib import Path
from typing import List, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


CONFIG_FILE = ".carbon-now.json"


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="carbon-now", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3003, description="Server port")
    allowed_hosts: List[str] = Field(default=["*"], description="Allowed hosts for CORS")

    # Carbon Configuration
    carbon_url: str = Field(
        default="https://carbon.now.sh/", description="Carbon instance used for rendering"
    )
    config_path: Path = Field(
        default_factory=lambda: Path.home() / CONFIG_FILE,
        description="Per-user preset store",
    )

    # Workspace Configuration
    workspace_root: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "carbon-now",
        description="Directory holding per-run workspaces",
    )

    # Rendering Configuration
    renderer_command: Optional[str] = Field(
        default=None, description="Renderer command line, replaces the bundled Playwright renderer"
    )
    render_timeout: float = Field(default=60.0, description="Renderer timeout in seconds")
    playwright_timeout: int = Field(default=30000, description="Playwright timeout in milliseconds")
    playwright_headless: bool = Field(default=True, description="Run browser in headless mode")

    # HTTP service presets, always read-only
    server_preset: str = Field(default="latest-preset", description="Preset used by the server")
    server_config_path: Optional[Path] = Field(
        default=None, description="Preset file used by the server instead of config_path"
    )

    # Logging Configuration
    log_level: str = Field(default="WARNING", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional rotating log file")

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

    @field_validator("render_timeout")
    @classmethod
    def validate_render_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Render timeout must be positive")
        return v

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

    @field_validator("config_path", "server_config_path", "log_file")
    @classmethod
    def expand_user(cls, v: Optional[Path]) -> Optional[Path]:
        return v.expanduser() if v is not None else v

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="CARBON_NOW_"
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
