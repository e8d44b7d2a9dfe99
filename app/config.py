"""Configuration settings for PsychedBox."""

import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./psychedbox.db")

    # Sessions
    SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "pb_session")
    SESSION_MAX_AGE_DAYS: int = int(os.getenv("SESSION_MAX_AGE_DAYS", "30"))
    SESSION_SWEEP_INTERVAL_SECONDS: int = int(os.getenv("SESSION_SWEEP_INTERVAL_SECONDS", "3600"))

    # Passwords and recovery tokens
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
    MIN_PASSWORD_LENGTH: int = int(os.getenv("MIN_PASSWORD_LENGTH", "8"))
    PASSWORD_RESET_EXPIRE_MINUTES: int = int(os.getenv("PASSWORD_RESET_EXPIRE_MINUTES", "60"))
    EMAIL_VERIFICATION_EXPIRE_HOURS: int = int(os.getenv("EMAIL_VERIFICATION_EXPIRE_HOURS", "24"))

    # Rate limits
    AUTH_RATE_LIMIT: str = os.getenv("AUTH_RATE_LIMIT", "15 per 15 minutes")
    API_RATE_LIMIT: str = os.getenv("API_RATE_LIMIT", "120 per minute")

    # Email
    SMTP_HOST: str | None = os.getenv("SMTP_HOST")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "465"))
    SMTP_USER: str | None = os.getenv("SMTP_USER")
    SMTP_PASSWORD: str | None = os.getenv("SMTP_PASSWORD")
    SMTP_FROM: str = os.getenv("SMTP_FROM", "PsychedBox <contact@psychedbox.com>")
    SITE_URL: str = os.getenv("SITE_URL", "http://localhost:3000").rstrip("/")

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def session_max_age_seconds(self) -> int:
        return self.SESSION_MAX_AGE_DAYS * 24 * 60 * 60

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if not self.SMTP_HOST or not self.SMTP_USER or not self.SMTP_PASSWORD:
            errors.append("SMTP_HOST, SMTP_USER and SMTP_PASSWORD are not all set - emails will only be logged")
        if self.BCRYPT_ROUNDS < 10 and self.is_production:
            errors.append(f"BCRYPT_ROUNDS={self.BCRYPT_ROUNDS} is too low for production")
        if self.is_production and not self.SITE_URL.startswith("https://"):
            errors.append("SITE_URL should use https in production")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
