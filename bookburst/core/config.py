import os
from typing import Any, Dict, List
from functools import lru_cache
from pydantic_settings import BaseSettings
from pydantic import field_validator, model_validator


class Settings(BaseSettings):
    """Application settings."""

    # App config
    PROJECT_NAME: str = "BookBurst API"
    PROJECT_VERSION: str = "1.0.0"
    PROJECT_DESCRIPTION: str = "Reading tracker and book community API"
    APP_ENV: str = "development"
    DEBUG: bool = True
    API_PREFIX: str = "/api"
    DOCS_URL: str = "/docs"
    REDOC_URL: str = "/redoc"

    # Server Config
    SERVER_HOST: str = "127.0.0.1"
    SERVER_PORT: int = 5000

    # Security
    SECRET_KEY: str = os.environ.get("SECRET_KEY", "secret-key-for-dev-only")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    PASSWORD_MIN_LENGTH: int = 6
    USERNAME_MIN_LENGTH: int = 3
    USERNAME_MAX_LENGTH: int = 30

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: List[str] = ["*"]
    CORS_ALLOW_HEADERS: List[str] = ["*"]

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./bookburst.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False
    DB_AUTO_CREATE_TABLES: bool = True

    # Pagination / querying
    DEFAULT_PAGE_SIZE: int = 10
    BOOKSHELF_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 100
    SEARCH_RESULT_LIMIT: int = 20
    SEARCH_MIN_QUERY_LENGTH: int = 2
    TOP_RATED_MIN_REVIEWS: int = 2

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"
    LOG_REQUESTS: bool = True

    # Middleware shared config
    MIDDLEWARE_EXCLUDED_PATHS: List[str] = [
        "/docs",
        "/redoc",
        "/openapi.json",
        "/health",
    ]
    MIDDLEWARE_SENSITIVE_HEADERS: List[str] = ["Authorization", "Cookie", "Set-Cookie"]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate app environment."""
        allowed_envs = {"development", "testing", "staging", "production"}
        if v not in allowed_envs:
            raise ValueError(f"APP_ENV must be one of: {', '.join(sorted(allowed_envs))}")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in {"text", "json"}:
            raise ValueError("LOG_FORMAT must be 'text' or 'json'")
        return v

    @model_validator(mode="after")
    def set_debug_based_on_env(self) -> "Settings":
        """Set DEBUG based on APP_ENV."""
        if self.APP_ENV == "production":
            self.DEBUG = False
        return self

    @property
    def fastapi_kwargs(self) -> Dict[str, Any]:
        """
        Get FastAPI configuration.

        Returns:
            Dictionary with FastAPI configuration
        """
        return {
            "debug": self.DEBUG,
            "docs_url": self.DOCS_URL if self.DEBUG else None,
            "openapi_url": f"{self.API_PREFIX}/openapi.json" if self.DEBUG else None,
            "redoc_url": self.REDOC_URL if self.DEBUG else None,
            "title": self.PROJECT_NAME,
            "version": self.PROJECT_VERSION,
            "description": self.PROJECT_DESCRIPTION,
        }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance
    """
    return Settings()
