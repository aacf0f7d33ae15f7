from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import Optional, List
import logging


class Settings(BaseSettings):
    # -------------------------
    # Application Info
    # -------------------------
    APP_NAME: str = "USDT Payout Gateway API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True

    # -------------------------
    # Security / JWT
    # -------------------------
    SECRET_KEY: str = "your-secret-key-here-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # -------------------------
    # Database
    # -------------------------
    DATABASE_URL: Optional[str] = "payout_gateway.db"
    DATABASE_TYPE: Optional[str] = "sqlite"  # "sqlite" or "d1" for Cloudflare D1
    D1_ACCOUNT_ID: Optional[str] = None
    D1_DATABASE_ID: Optional[str] = None
    D1_API_TOKEN: Optional[str] = None

    # -------------------------
    # Telegram notifications
    # -------------------------
    TELEGRAM_BOT_TOKEN: Optional[str] = None
    TELEGRAM_CHAT_ID: Optional[str] = None
    TELEGRAM_API_BASE_URL: str = "https://api.telegram.org"
    TELEGRAM_TIMEOUT_SECONDS: float = 10.0

    # -------------------------
    # Moderation
    # -------------------------
    # Fallback only: consulted when a resolved account carries no role
    ADMIN_EMAILS: List[str] = []

    # -------------------------
    # CORS
    # -------------------------
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
    ]

    @field_validator('SECRET_KEY')
    @classmethod
    def validate_secret_key(cls, v):
        if len(v) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters long")
        return v

    @field_validator('DATABASE_TYPE')
    @classmethod
    def validate_database_type(cls, v):
        if v not in (None, "sqlite", "d1"):
            raise ValueError("DATABASE_TYPE must be 'sqlite' or 'd1'")
        return v

    @field_validator('ADMIN_EMAILS')
    @classmethod
    def normalize_admin_emails(cls, v):
        return [email.strip().lower() for email in v if email and email.strip()]

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.TELEGRAM_BOT_TOKEN and self.TELEGRAM_CHAT_ID)

    def validate_production_config(self):
        """Validate configuration for production deployment"""
        logger = logging.getLogger(__name__)

        if not self.DEBUG:
            warnings = []

            if not self.telegram_enabled:
                warnings.append("TELEGRAM_BOT_TOKEN/TELEGRAM_CHAT_ID not set - order notifications disabled")

            if self.ADMIN_EMAILS:
                warnings.append("ADMIN_EMAILS is set - role-less accounts may be granted moderation rights")

            if self.SECRET_KEY == "your-secret-key-here-change-in-production":
                raise ValueError("SECRET_KEY must be changed in production")

            for warning in warnings:
                logger.warning(f"Production config warning: {warning}")

    class Config:
        env_file = ".env"
        extra = "ignore"  # ignore extra env vars not defined here


# Create a settings instance
settings = Settings()

# Validate production configuration
settings.validate_production_config()
