"""
Application configuration.

Loads settings from environment variables and an optional .env file.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: API version string.
        host: Interface uvicorn binds to.
        port: Listening port (env ``PORT``).
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        cors_origins: Origins allowed by the CORS middleware.
        auth_enabled: Attach the x-api-key check to every route.
        api_key: Shared secret expected in the x-api-key header.
        default_page_size: ``limit`` used when the query omits or mangles it.
        max_page_size: Upper bound on ``limit``.
        async_error_delay_seconds: Delay before /error-async fails.
        seed_defaults: Start the store with the three sample products.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    project_name: str = "product-api"
    version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    auth_enabled: bool = False
    api_key: str = "12345SECRETKEY"

    default_page_size: int = 10
    max_page_size: int = 100
    async_error_delay_seconds: float = 0.1
    seed_defaults: bool = True


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
