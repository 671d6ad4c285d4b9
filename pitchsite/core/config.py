"""
Core configuration for pitchsite.
Uses Pydantic Settings for environment variable management.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # === App Configuration ===
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False
    APP_URL: str = "http://localhost:8000"  # Base for canonical microsite URLs

    # === OpenAI ===
    # Optional: a key saved through /api/settings takes precedence
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    LLM_TIMEOUT: int = 30
    CIRCUIT_BREAKER_THRESHOLD: int = 3
    CIRCUIT_BREAKER_COOLDOWN: int = 600  # 10 minutes

    # === Website Fetching ===
    FETCH_TIMEOUT: float = 10.0
    FETCH_MAX_REDIRECTS: int = 5
    FETCH_USE_BROWSER: bool = False  # Headless Chromium for JS-rendered sites
    BROWSER_TIMEOUT_MS: int = 30000

    # === Storage ===
    STORAGE_BACKEND: str = "memory"  # "memory" or "file"
    DATA_DIR: str = ".data"

    # === Rate Limiting ===
    RATE_LIMIT_PER_HOUR: int = 30

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
