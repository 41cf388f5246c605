"""
Application Configuration

Centralized configuration management using Pydantic settings.
Loads from environment variables with fallback to .env file.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Note: get_settings() is cached, so tests that need different values
    should build a Settings instance directly and pass it to create_app().
    """

    # Document database
    # The database name is taken from the URI path unless DATABASE_NAME is set
    MONGODB_URI: str = "mongodb://localhost:27017/crud-boilerplate"
    DATABASE_NAME: Optional[str] = None

    # Application settings
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # List endpoint fallback page size
    DEFAULT_PAGE_SIZE: int = 10

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures we only instantiate settings once.
    """
    return Settings()
