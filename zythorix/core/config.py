# zythorix/core/config.py

"""
Configuration settings for the Zythorix360 API.
Required secrets have no defaults: a missing or placeholder value stops the
process at startup instead of running with a known-weak key.
"""

from typing import List

from dotenv import load_dotenv
from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()

WEAK_SECRETS = {
    "influencer-secret-key-change-in-production",
    "change-this-in-production",
    "secret",
    "changeme",
}


class Settings(BaseSettings):
    """Application settings class using Pydantic for validation"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application info
    APP_NAME: str = "Zythorix360"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    PRODUCTION: bool = False

    # Server settings
    PORT: int = 5050
    CORS_ORIGINS: str = "*"

    # Logging
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True

    # Database settings
    DATABASE_URL: str
    DATABASE_SSLMODE: str = "require"

    # Identity provider tokens (users)
    SUPABASE_JWT_SECRET: SecretStr
    SUPABASE_JWT_AUDIENCE: str = "authenticated"
    JWT_ALGORITHM: str = "HS256"

    # Influencer sessions
    INFLUENCER_JWT_SECRET: SecretStr
    INFLUENCER_TOKEN_EXPIRE_DAYS: int = 7

    # Razorpay
    RAZORPAY_KEY_ID: str
    RAZORPAY_KEY_SECRET: SecretStr
    RAZORPAY_API_URL: str = "https://api.razorpay.com/v1"
    RAZORPAY_TIMEOUT: float = 30.0
    PAYMENT_CURRENCY: str = "INR"

    # Admin allow-list, comma separated
    ADMIN_EMAILS: str

    # Referral program
    DEFAULT_COMMISSION_RATE: float = 10.0
    COUPON_DISCOUNT_PERCENT: int = 10
    COUPON_CODE_ATTEMPTS: int = 10

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v):
        if not v.strip():
            raise ValueError("DATABASE_URL must be set")
        return v.strip()

    @field_validator("INFLUENCER_JWT_SECRET", "SUPABASE_JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v, info):
        secret = v.get_secret_value()
        if secret.strip().lower() in WEAK_SECRETS:
            raise ValueError(f"{info.field_name} is set to a placeholder value")
        if len(secret) < 16:
            raise ValueError(f"{info.field_name} must be at least 16 characters long")
        return v

    @field_validator("RAZORPAY_KEY_ID")
    @classmethod
    def validate_razorpay_key_id(cls, v):
        if not v.strip():
            raise ValueError("RAZORPAY_KEY_ID must be set")
        return v.strip()

    @field_validator("RAZORPAY_KEY_SECRET")
    @classmethod
    def validate_razorpay_key_secret(cls, v):
        if not v.get_secret_value().strip():
            raise ValueError("RAZORPAY_KEY_SECRET must be set")
        return v

    @field_validator("ADMIN_EMAILS")
    @classmethod
    def validate_admin_emails(cls, v):
        emails = [e.strip() for e in v.split(",") if e.strip()]
        if not emails:
            raise ValueError("ADMIN_EMAILS must list at least one address")
        return ",".join(emails)

    @property
    def admin_emails(self) -> List[str]:
        return [e.lower() for e in self.ADMIN_EMAILS.split(",")]

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


# Create a global settings instance
try:
    settings = Settings()
except Exception as e:
    print(f"❌ Configuration error: {str(e)}")
    print("Please check your .env file and fix the configuration issues.")
    raise
