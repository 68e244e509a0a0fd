# python
# app/core/config.py
"""Configuration settings for the Social Media API.

Uses Pydantic BaseSettings for environment variable management.
"""
import secrets
from enum import Enum
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentEnum(str, Enum):
    development = "development"
    testing = "testing"
    staging = "staging"
    production = "production"


class LogLevelEnum(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormatEnum(str, Enum):
    simple = "simple"
    json = "json"


class CleanupSchedulerEnum(str, Enum):
    inprocess = "inprocess"
    celery = "celery"
    disabled = "disabled"


class Settings(BaseSettings):
    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===== Application Settings =====
    app_name: str = Field(default="Social Media API", description="Application name")
    environment: EnvironmentEnum = Field(
        default=EnvironmentEnum.development, description="Environment type"
    )
    debug: bool = Field(default=False, description="Debug mode")
    version: str = Field(default="1.0.0", description="Application version")
    api_prefix: str = Field(default="/api/v1.0", description="Prefix of all API routes")

    # ===== Security Settings =====
    secret_key: str = Field(
        default_factory=lambda: secrets.token_urlsafe(32),
        description="Secret key for JWT encoding",
    )
    algorithm: str = Field(default="HS256", description="JWT algorithm")
    access_token_expire_minutes: int = Field(default=60, description="JWT token expiration time")

    # ===== Database Settings =====
    database_url: str | None = Field(default=None, description="Database connection URL")
    db_pool_size: int = Field(default=20, description="Database connection pool size")
    db_max_overflow: int = Field(default=0, description="Database max overflow connections")

    # Test database URL
    test_database_url: str | None = Field(default=None, description="Test database URL")

    # ===== File Storage Settings =====
    upload_dir: str = Field(default="uploads", description="Root directory for uploads")
    profile_dir: str = Field(default="profile", description="Avatar subdirectory")
    post_dir: str = Field(default="posts", description="Post files subdirectory")
    max_image_size: int = Field(
        default=2 * 1024 * 1024, description="Maximum upload size in bytes (2MB)"
    )
    static_max_age: int = Field(
        default=365 * 24 * 60 * 60, description="Cache lifetime of served uploads in seconds"
    )

    # ===== Unused File Cleanup =====
    file_cleanup_scheduler: CleanupSchedulerEnum = Field(
        default=CleanupSchedulerEnum.inprocess, description="Who triggers the cleanup sweep"
    )
    file_cleanup_interval_hours: float = Field(default=24, description="Hours between sweeps")
    unused_file_max_age_hours: float = Field(
        default=24, description="Age after which an unattached file is removed"
    )
    file_cleanup_batch_size: int = Field(default=500, description="Rows fetched per batch")
    file_cleanup_run_on_startup: bool = Field(
        default=False, description="Run a sweep right after startup"
    )

    # ===== Internationalization =====
    default_language: str = Field(default="en", description="Fallback message language")
    supported_languages: str = Field(default="en,pl", description="Comma-separated languages")

    @property
    def supported_languages_list(self) -> list[str]:
        return [lang.strip() for lang in self.supported_languages.split(",") if lang.strip()]

    # ===== CORS Settings =====
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000",
        description="Allowed CORS origins (comma-separated)",
    )

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    # ===== Background Tasks (Celery) =====
    celery_broker_url: str = Field(
        default="redis://localhost:6379/1", description="Celery broker URL"
    )
    celery_result_backend: str = Field(
        default="redis://localhost:6379/2", description="Celery result backend"
    )

    # ===== Email Configuration =====
    smtp_host: str | None = Field(default=None, description="SMTP host")
    smtp_port: int = Field(default=587, description="SMTP port")
    smtp_user: str | None = Field(default=None, description="SMTP username")
    smtp_password: str | None = Field(default=None, description="SMTP password")
    smtp_starttls: bool = Field(default=True, description="Upgrade SMTP connection with STARTTLS")
    email_from: str | None = Field(default=None, description="Email from address")
    email_dry_run: bool = Field(default=False, description="Log emails instead of sending")
    frontend_url: str = Field(
        default="http://localhost:3000", description="Base URL used in email links"
    )
    smtp_max_retry_attempts: int = Field(default=3, description="Delivery attempts per email")
    smtp_retry_backoff_factor: float = Field(default=1.0, description="Exponential backoff multiplier")
    smtp_retry_min_wait: float = Field(default=1.0, description="Minimum wait between attempts (s)")
    smtp_retry_max_wait: float = Field(default=10.0, description="Maximum wait between attempts (s)")

    # ===== Monitoring & Logging =====
    log_level: LogLevelEnum = Field(default=LogLevelEnum.INFO, description="Logging level")
    log_format: LogFormatEnum = Field(default=LogFormatEnum.simple, description="Log format")

    # ===== Server Settings =====
    host: str = Field(default="127.0.0.1", description="Host to bind the server")
    port: int = Field(default=8000, description="Port to bind the server")

    # ===== Computed Properties =====
    @property
    def is_development(self) -> bool:
        return self.environment == EnvironmentEnum.development

    @property
    def is_production(self) -> bool:
        return self.environment == EnvironmentEnum.production

    @property
    def is_testing(self) -> bool:
        return self.environment == EnvironmentEnum.testing

    @property
    def profile_path(self) -> Path:
        return Path(self.upload_dir) / self.profile_dir

    @property
    def post_path(self) -> Path:
        return Path(self.upload_dir) / self.post_dir

    @property
    def has_email(self) -> bool:
        return bool(self.smtp_host)

    # ===== Validation Methods =====
    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if v and isinstance(v, str):
            lv = v.lower()
            if lv in ["dev", "develop"]:
                return "development"
            if lv in ["prod"]:
                return "production"
            if lv in ["test"]:
                return "testing"
        return v

    @field_validator("max_image_size")
    @classmethod
    def validate_image_size(cls, v):
        if v > 20 * 1024 * 1024:
            raise ValueError("Maximum image size cannot exceed 20MB")
        return v

    @field_validator("file_cleanup_interval_hours", "unused_file_max_age_hours")
    @classmethod
    def validate_positive_hours(cls, v):
        if v <= 0:
            raise ValueError("Cleanup hours must be positive")
        return v

    @field_validator("file_cleanup_batch_size")
    @classmethod
    def validate_batch_size(cls, v):
        if v < 1:
            raise ValueError("Cleanup batch size must be at least 1")
        return v

    @model_validator(mode="after")
    def check_default_language(self):
        if self.default_language not in self.supported_languages_list:
            raise ValueError("DEFAULT_LANGUAGE must be one of SUPPORTED_LANGUAGES")
        return self


settings = Settings()


class ConfigValidator:
    @staticmethod
    def validate_required_settings():
        errors = []
        if not settings.database_url:
            errors.append("DATABASE_URL is required")
        if settings.is_production and not settings.has_email and not settings.email_dry_run:
            errors.append("SMTP_HOST is required in production")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

    @staticmethod
    def get_feature_status() -> dict:
        return {
            "email_enabled": settings.has_email and not settings.email_dry_run,
            "file_cleanup_scheduler": settings.file_cleanup_scheduler.value,
            "environment": settings.environment,
        }


def get_config_summary() -> dict:
    return {
        "app_name": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
        "debug": settings.debug,
        "features": ConfigValidator.get_feature_status(),
        "database_configured": bool(settings.database_url),
    }


__all__ = [
    "settings",
    "Settings",
    "ConfigValidator",
    "get_config_summary",
    "EnvironmentEnum",
    "LogLevelEnum",
    "LogFormatEnum",
    "CleanupSchedulerEnum",
]
