"""Configuration settings for the conversation player"""
import os
from typing import Optional
from pydantic_settings import BaseSettings


def detect_environment() -> str:
    """
    Detect current environment from an explicit env var.
    Returns: 'dev', 'staging', or 'prod'
    """
    explicit_env = os.getenv("ENVIRONMENT", "").lower()
    if explicit_env in ("dev", "staging", "prod", "production", "development"):
        if explicit_env == "production":
            return "prod"
        if explicit_env == "development":
            return "dev"
        return explicit_env

    # Local development
    return "dev"


class Settings(BaseSettings):
    """Player settings using Pydantic for validation and environment variable loading"""

    # Pacing (seconds). These are presentation tuning, not business logic.
    PAGE_SETTLE_DELAY: float = 0.5       # masks a flash of unstyled content
    FIRST_CARD_DELAY: float = 1.0        # entrance transition of the first card
    FEEDBACK_SETTLE_DELAY: float = 1.0   # between evaluator resolution and the transition
    NEW_CARD_READ_DELAY: float = 1.0     # time to read feedback before the next prompt
    HEIGHT_MEASURE_DELAY: float = 0.1
    SCROLL_DURATION: float = 1.0

    # Height reporting (pixels)
    HEIGHT_THRESHOLD: float = 50.5
    HEIGHT_MARGIN: int = 50              # exact content height can still produce a scrollbar

    # Disabled by default: an evaluator that never answers stalls the session
    EVALUATION_TIMEOUT: Optional[float] = None

    # User-facing messages
    LOADING_MESSAGE: str = "Loading"
    LEAVE_WARNING_MESSAGE: str = (
        "If you navigate away from this page, your progress on the "
        "exploration will be lost."
    )
    PREVIEW_FEEDBACK_WARNING: str = "This functionality is not available in preview mode."

    # Application settings
    ENVIRONMENT: str = detect_environment()
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "*"

    # Environment helpers
    @property
    def cors_origins(self) -> list:
        """Comma separated CORS_ORIGINS as a list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    class Config:
        # Load from .env file
        env_file = ".env"
        env_prefix = "PLAYER_"
        case_sensitive = False


# Global settings instance
settings = Settings()
