"""
Configuration management for the POAM alerting engine.

Uses Pydantic Settings for environment variable validation and type safety.
"""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class StorageConfig(BaseSettings):
    """Persistent key-value store configuration."""

    db_path: str = Field(
        default="~/.local/share/poam-alerts/notifications.db",
        description="Path to SQLite key-value database"
    )
    notifications_key: str = Field(
        default="poam-notifications",
        description="Key holding the serialized notification collection"
    )
    preferences_key: str = Field(
        default="poam-notification-preferences",
        description="Key holding the serialized preferences object"
    )

    class Config:
        env_prefix = "POAM_STORAGE_"


class SourceConfig(BaseSettings):
    """Task snapshot source configuration."""

    kind: str = Field(
        default="file",
        description="Snapshot source type (http or file)"
    )
    url: str = Field(
        default="http://localhost:1420/api",
        description="Base URL of the task data API (http source)"
    )
    path: str = Field(
        default="poams.yml",
        description="Snapshot file path (file source)"
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Optional bearer token for the task data API"
    )
    timeout: float = Field(
        default=10.0,
        gt=0,
        description="Fetch timeout in seconds"
    )

    @field_validator("kind")
    @classmethod
    def validate_kind(cls, v: str) -> str:
        """Validate source kind."""
        v = v.lower()
        if v not in ("http", "file"):
            raise ValueError("Source kind must be 'http' or 'file'")
        return v

    class Config:
        env_prefix = "POAM_SOURCE_"


class DesktopConfig(BaseSettings):
    """Out-of-band (desktop) notification surface configuration."""

    use_notify_send: bool = Field(
        default=True,
        description="Show alerts through notify-send when available"
    )
    webhook_url: str = Field(
        default="",
        description="Webhook endpoint receiving alerts as JSON"
    )
    webhook_token: str = Field(
        default="",
        description="Optional bearer token for the webhook"
    )
    app_name: str = Field(
        default="POAM Tracker",
        description="Application name shown on desktop alerts"
    )

    class Config:
        env_prefix = "POAM_DESKTOP_"


class ScanConfig(BaseSettings):
    """Deadline rule configuration."""

    task_window_days: int = Field(
        default=7,
        ge=1,
        description="Lookahead window for task deadline alerts (days)"
    )
    milestone_window_days: int = Field(
        default=3,
        ge=1,
        description="Lookahead window for milestone deadline alerts (days)"
    )

    class Config:
        env_prefix = "POAM_SCAN_"


class AppConfig(BaseSettings):
    """Main application configuration."""

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    default_system: Optional[str] = Field(
        default=None,
        description="System selected on startup (optional)"
    )

    # Nested configurations
    storage: StorageConfig = Field(default_factory=StorageConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)
    desktop: DesktopConfig = Field(default_factory=DesktopConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v

    class Config:
        env_prefix = "POAM_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global config instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the global configuration instance.

    Lazily loads configuration on first access.

    Returns:
        AppConfig: The global configuration instance
    """
    global _config
    if _config is None:
        _config = AppConfig(
            storage=StorageConfig(),
            source=SourceConfig(),
            desktop=DesktopConfig(),
            scan=ScanConfig()
        )
    return _config


def reload_config() -> AppConfig:
    """
    Reload configuration from environment variables.

    Useful for testing or when environment changes.

    Returns:
        AppConfig: The reloaded configuration instance
    """
    global _config
    _config = None
    return get_config()
