"""
Configuration settings for the contractor marketplace engine
Supports PostgreSQL in production and SQLite for local development
"""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Contractor Marketplace"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./marketplace.db"
    DB_ISOLATION_LEVEL: Optional[str] = "READ COMMITTED"  # Ignored for SQLite
    DB_POOL_RECYCLE: int = 300

    # Pagination for list operations
    DEFAULT_PAGE_LIMIT: int = 10
    MAX_PAGE_LIMIT: int = 100

    # Caller identity is set by the authenticating gateway in front of the API
    USER_ID_HEADER: str = "X-User-ID"

    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    class Config:
        env_file = ".env"
        extra = "allow"


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance, overridable as a FastAPI dependency"""
    return settings
