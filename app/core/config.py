"""
Application configuration using pydantic-settings.
All environment variables are loaded from .env file with sensible defaults.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application
    APP_NAME: str = "Retail Sales Dashboard API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # "production" hides internal error detail
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # Database (SQLite for local use, any SQLAlchemy URL works)
    DATABASE_URL: str = "sqlite:///./retail_sales.db"
    DATABASE_ECHO: bool = False

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Demo data
    SEED_ON_STARTUP: bool = True
    SEED_RECORD_COUNT: int = 500
    SEED_RANDOM_SEED: int = 42

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance to avoid re-reading .env on every call."""
    return Settings()
