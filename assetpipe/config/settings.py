"""
AssetPipe Configuration System
==============================

Configuration management with environment variables and Pydantic models.
Environment variables override Field defaults with clear precedence.
"""

from pathlib import Path
from typing import Optional
from enum import Enum

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from ..utils.exceptions import ConfigurationError, ErrorCode


class LogLevel(str, Enum):
    """Available log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class RetryStrategyName(str, Enum):
    """Backoff strategies available to the fetch and upload retry loops."""
    FIXED_DELAY = "fixed_delay"
    EXPONENTIAL_BACKOFF = "exponential"
    LINEAR_BACKOFF = "linear"
    JITTERED_EXPONENTIAL = "jittered"


class ServerSettings(BaseModel):
    """HTTP server configuration."""
    host: str = Field(default="0.0.0.0", description="Interface to bind")
    port: int = Field(default=7100, ge=1, le=65535, description="Port to listen on")
    public_url: Optional[str] = Field(
        default=None,
        description="Base URL used in returned uris instead of the request's scheme and host",
    )
    client_max_size_mb: int = Field(default=10, ge=1, le=200, description="Maximum request body size in MB")

    @field_validator('public_url')
    @classmethod
    def strip_trailing_slash(cls, v):
        """Normalize the public url so route segments can be appended."""
        if v:
            return v.rstrip('/')
        return v


class PipelineSettings(BaseModel):
    """Fetch/upload pipeline configuration."""
    fetch_retries: int = Field(default=3, ge=0, le=10, description="Retries per feed read")
    upload_retries: int = Field(default=3, ge=0, le=10, description="Retries per artifact write")
    max_concurrent_fetches: int = Field(default=10, ge=1, le=100, description="Concurrent sink reads per bundle")
    retry_strategy: RetryStrategyName = Field(
        default=RetryStrategyName.EXPONENTIAL_BACKOFF, description="Backoff strategy between retries"
    )
    retry_base_delay: float = Field(default=1.0, ge=0.0, le=30.0, description="Initial delay in seconds")
    retry_max_delay: float = Field(default=10.0, ge=0.0, le=300.0, description="Maximum delay in seconds")


class BundlerSettings(BaseModel):
    """Default options forwarded to the bundlers."""
    env: str = Field(default="development", min_length=1, description="Value substituted for process.env.NODE_ENV")
    minify: bool = Field(default=False, description="Request minified output from the bundler")


class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: LogLevel = Field(default=LogLevel.INFO, description="Global log level")
    file_path: Optional[str] = Field(default="logs/assetpipe.log", description="Log file path")
    max_file_size_mb: int = Field(default=10, ge=1, le=100, description="Max log file size in MB")
    backup_count: int = Field(default=5, ge=1, le=20, description="Number of log backup files")
    structured_logging: bool = Field(default=False, description="Use structured JSON logging")
    console_logging: bool = Field(default=True, description="Enable console logging")


class AssetPipeSettings(BaseSettings):
    """Main application settings."""

    server: ServerSettings = Field(default_factory=ServerSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    bundler: BundlerSettings = Field(default_factory=BundlerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    app_name: str = Field(default="AssetPipe", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_nested_delimiter": "__",
        "env_prefix": "ASSETPIPE_",
        "extra": "ignore",
    }

    def validate_configuration(self) -> None:
        """Validate cross-field configuration that pydantic can't express."""
        errors = []

        if self.pipeline.retry_max_delay < self.pipeline.retry_base_delay:
            errors.append("pipeline.retry_max_delay must be >= pipeline.retry_base_delay")

        if self.logging.file_path:
            try:
                log_path = Path(self.logging.file_path)
                log_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                errors.append(f"Invalid log file path: {e}")

        if errors:
            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}",
                error_code=ErrorCode.CONFIG_INVALID
            )

    def get_effective_log_level(self) -> str:
        """Get effective log level considering debug mode."""
        if self.debug:
            return "DEBUG"
        return self.logging.level.value


def load_settings() -> AssetPipeSettings:
    """Load settings from environment variables and defaults.

    Returns:
        Loaded and validated settings

    Raises:
        ConfigurationError: If configuration is invalid
    """
    from dotenv import load_dotenv
    load_dotenv()

    try:
        settings = AssetPipeSettings()
        settings.validate_configuration()
        return settings

    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"Failed to initialize settings: {e}",
            error_code=ErrorCode.CONFIG_INVALID
        ) from e


_settings: Optional[AssetPipeSettings] = None


def get_settings(reload: bool = False) -> AssetPipeSettings:
    """Get global settings instance (singleton pattern).

    Args:
        reload: Force reload of settings

    Returns:
        Global settings instance
    """
    global _settings

    if _settings is None or reload:
        _settings = load_settings()

    return _settings
