"""
Application configuration.

Settings are loaded from environment variables (prefixed ``BOOKSTORE_``)
and an optional ``.env`` file. List-valued settings are comma-separated
strings, exposed as lists through helper methods.
"""

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Bookstore service settings."""

    # API
    api_title: str = "Bookstore Management API"
    api_version: str = "1.0.0"
    api_description: str = (
        "This API provides endpoints for managing books in an online bookstore. "
        "It supports CRUD operations, search functionality, and inventory management."
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False

    # Database
    db_path: Path = Path("data/bookstore.db")

    # Paging
    default_page_size: int = 10
    max_page_size: int = 100

    # CORS (comma-separated)
    cors_allowed_origins: str = "http://localhost:3000,http://localhost:3001"
    cors_allowed_methods: str = "GET,POST,PUT,DELETE,OPTIONS"
    cors_allowed_headers: str = (
        "Origin,Content-Type,Accept,Authorization,X-Requested-With,Cache-Control"
    )
    cors_exposed_headers: str = "X-Total-Count,X-Page-Count"
    cors_allow_credentials: bool = True
    cors_max_age: int = 3600

    # Security headers
    content_security_policy: str = (
        "default-src 'self'; script-src 'self' 'unsafe-inline'; "
        "style-src 'self' 'unsafe-inline'; img-src 'self' data: https:; "
        "font-src 'self'; connect-src 'self'"
    )
    referrer_policy: str = "strict-origin-when-cross-origin"
    permissions_policy: str = "geolocation=(), microphone=(), camera=()"

    # Operational endpoint users (change in production)
    admin_username: str = "admin"
    admin_password: str = "admin123"
    monitor_username: str = "monitor"
    monitor_password: str = "monitor123"
    password_hash_rounds: int = 12

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="BOOKSTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def get_cors_origins(self) -> List[str]:
        """Get CORS origins as a list."""
        return _split(self.cors_allowed_origins)

    def get_cors_methods(self) -> List[str]:
        return _split(self.cors_allowed_methods)

    def get_cors_headers(self) -> List[str]:
        return _split(self.cors_allowed_headers)

    def get_cors_exposed_headers(self) -> List[str]:
        return _split(self.cors_exposed_headers)


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once."""
    return Settings()
