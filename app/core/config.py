"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (bot token, Cloudinary credentials, webhook URLs)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, validator
from pydantic_settings import BaseSettings
from typing import Optional, Literal, List

from app.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Required values are checked by validate_settings() on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # Telegram
    BOT_TOKEN: Optional[str] = Field(
        default=None,
        description="Telegram bot token"
    )
    TELEGRAM_API_BASE: str = Field(
        default="https://api.telegram.org",
        description="Telegram Bot API base URL"
    )
    ADMIN_CHAT_ID: Optional[str] = Field(
        default=None,
        description="Chat ID that receives payment notifications and may run admin commands"
    )

    # Inbound delivery
    DELIVERY_MODE: Literal["webhook", "polling"] = Field(
        default="webhook",
        description="How updates reach the bot: Telegram push webhook or long polling"
    )
    WEBHOOK_URL: Optional[str] = Field(
        default=None,
        description="Public base URL of this service (webhook mode)"
    )
    WEBHOOK_SECRET: Optional[str] = Field(
        default=None,
        description="Secret path segment of the inbound webhook route"
    )
    POLLING_TIMEOUT_SECONDS: int = Field(
        default=25,
        description="Long-poll timeout passed to getUpdates"
    )

    # Spreadsheet webhook
    SHEET_WEBHOOK_URL: Optional[str] = Field(
        default=None,
        description="Spreadsheet webhook that records submissions"
    )

    # Cloudinary
    CLOUD_NAME: Optional[str] = Field(default=None, description="Cloudinary cloud name")
    CLOUD_API_KEY: Optional[str] = Field(default=None, description="Cloudinary API key")
    CLOUD_API_SECRET: Optional[str] = Field(default=None, description="Cloudinary API secret")
    CLOUDINARY_FOLDER: str = Field(
        default="SubSplitHub",
        description="Folder that payment screenshots are uploaded to"
    )

    # Payments
    UPI_ID: str = Field(
        default="manicdon7@okhdfcbank",
        description="UPI payee identifier shown to users"
    )
    SUPPORT_EMAIL: str = Field(
        default="subsplithub@gmail.com",
        description="Support contact shown in /help and /contact"
    )

    # Flow toggles
    CANCEL_ENABLED: bool = Field(
        default=True,
        description="Whether /cancel is available to users"
    )

    # Session Management
    SESSION_TIMEOUT_MINUTES: int = Field(
        default=60,
        description="Inactivity window after which a session is swept"
    )
    SESSION_SWEEP_INTERVAL_MINUTES: int = Field(
        default=60,
        description="How often the expiry sweep runs"
    )

    # Outbound HTTP
    HTTP_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="Timeout for every outbound HTTP call"
    )
    MAX_RETRY_ATTEMPTS: int = Field(
        default=3,
        description="Attempts for retried calls (file download, sheet webhook)"
    )
    RETRY_BACKOFF_SECONDS: float = Field(
        default=1.0,
        description="Initial backoff between retries, doubled after each attempt"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    @validator("WEBHOOK_URL")
    def strip_trailing_slash(cls, v):
        """Webhook base URL is joined with a path, keep it slash-free."""
        return v.rstrip("/") if v else v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def uses_webhook(self) -> bool:
        return self.DELIVERY_MODE == "webhook"

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"
        extra = "ignore"


REQUIRED_SETTINGS: List[str] = [
    "BOT_TOKEN",
    "SHEET_WEBHOOK_URL",
    "ADMIN_CHAT_ID",
    "CLOUD_NAME",
    "CLOUD_API_KEY",
    "CLOUD_API_SECRET",
]

WEBHOOK_MODE_SETTINGS: List[str] = [
    "WEBHOOK_URL",
    "WEBHOOK_SECRET",
]


# Global settings instance
settings = Settings()


def validate_settings(config: Optional[Settings] = None) -> bool:
    """
    Validates critical settings on application startup.

    Args:
        config: Settings to check (defaults to the global instance)

    Returns:
        True if every required value is present

    Raises:
        ConfigurationError: If any required setting is missing
    """
    config = config or settings

    required = list(REQUIRED_SETTINGS)
    if config.uses_webhook:
        required.extend(WEBHOOK_MODE_SETTINGS)

    missing = [name for name in required if not getattr(config, name)]

    if missing:
        raise ConfigurationError(
            f"Configuration validation failed: {', '.join(missing)} not set",
            details={"missing": missing}
        )

    return True
