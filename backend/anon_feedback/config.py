"""
Configuration management for the application.

Loads environment variables and provides centralized config access.
"""

import os
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration"""

    # Flask settings
    FLASK_ENV: str = os.getenv("FLASK_ENV", "development")
    DEBUG: bool = FLASK_ENV == "development"
    FRONTEND_URL: Optional[str] = os.getenv("FRONTEND_URL")
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: str = os.getenv("PORT", "3000")

    # Storage settings
    # Bare "sqlite://" is an in-memory database that lives as long as the process.
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite://")
    SEED_SAMPLE_DATA: bool = _env_flag("SEED_SAMPLE_DATA")

    # Logging settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "text")

    # Request normalization defaults
    DEFAULT_PRIORITY: str = "medium"
    DEFAULT_PAGE: int = 1
    DEFAULT_PAGE_LIMIT: int = 20
    RECENT_LIMIT: int = 5
    ENFORCE_PRIORITY: bool = _env_flag("ENFORCE_PRIORITY")

    @classmethod
    def validate(cls):
        """Validate required configuration"""
        errors = []

        if not cls.PORT.isdigit():
            errors.append(f"PORT must be an integer, got {cls.PORT!r}")

        if cls.LOG_FORMAT not in ("text", "json"):
            errors.append(f"LOG_FORMAT must be 'text' or 'json', got {cls.LOG_FORMAT!r}")

        if cls.FLASK_ENV == "production" and not os.getenv("DATABASE_URL"):
            # In production we must have DATABASE_URL. Do not fall back to memory.
            errors.append("DATABASE_URL is not set")

        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

    @classmethod
    def feedback_settings(cls):
        """Build the defaults object consumed by FeedbackService."""
        from .services.feedback_service import FeedbackSettings

        return FeedbackSettings(
            default_priority=cls.DEFAULT_PRIORITY,
            default_page=cls.DEFAULT_PAGE,
            default_limit=cls.DEFAULT_PAGE_LIMIT,
            recent_limit=cls.RECENT_LIMIT,
            enforce_priority=cls.ENFORCE_PRIORITY,
        )
