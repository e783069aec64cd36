"""Configuration management using Pydantic Settings."""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase Configuration
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: SecretStr = SecretStr("")

    # Document store tables
    MESSAGES_TABLE: str = "support_messages"
    HISTORY_TABLE: str = "customer_history"

    # Outbound webhooks (delivery + draft regeneration)
    DELIVERY_WEBHOOK_URL: str = "http://localhost:5678/webhook/send-email"
    DRAFT_WEBHOOK_URL: str = "http://localhost:5678/webhook/regenerate"
    WEBHOOK_TIMEOUT_SECONDS: float = 30.0

    # Where the operator session reaches this backend
    API_BASE_URL: str = "http://localhost:5000"

    # Timing (seconds)
    POLL_INTERVAL_SECONDS: float = 5.0
    ARCHIVE_INTERVAL_SECONDS: int = 60
    AUTO_SEND_DELAY_SECONDS: float = 0.8
    NOTIFICATION_TTL_SECONDS: float = 3.0

    # Background scheduler toggle (set false in tests/CI)
    ENABLE_SCHEDULER: bool = True

    # Application Settings
    APP_ENV: Literal["development", "staging", "production"] = "development"

    # Logging
    LOG_FORMAT: Literal["text", "json"] = "text"
    LOG_LEVEL: str = "INFO"

    # CORS Configuration
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    @field_validator("SUPABASE_URL", "API_BASE_URL")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate that service URLs are http(s) and drop any trailing slash."""
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v.rstrip("/") if v else v

    @field_validator("AUTO_SEND_DELAY_SECONDS", "NOTIFICATION_TTL_SECONDS", "POLL_INTERVAL_SECONDS")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        """Timing values cannot be negative."""
        if v < 0:
            raise ValueError("Timing values must be >= 0")
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.APP_ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.APP_ENV == "production"

    @property
    def is_configured(self) -> bool:
        """Check if the document store is configured."""
        return bool(self.SUPABASE_URL and self.SUPABASE_SERVICE_ROLE_KEY.get_secret_value())

    def validate_startup(self) -> None:
        """Validate that all required secrets are configured.

        Raises:
            ValueError: If any required secret is missing or empty.
        """
        required_secrets = {
            "SUPABASE_URL": self.SUPABASE_URL,
            "SUPABASE_SERVICE_ROLE_KEY": self.SUPABASE_SERVICE_ROLE_KEY.get_secret_value(),
        }
        missing = [name for name, value in required_secrets.items() if not value]
        if missing:
            raise ValueError(f"Required secrets are missing or empty: {', '.join(missing)}")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
