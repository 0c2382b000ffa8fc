"""
Configuration settings for the school administration backend.
Loads environment variables and provides application settings.
"""
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # iDempiere REST API
    idempiere_api_url: str = "https://your-idempiere-server.com/api/v1"
    idempiere_timeout_seconds: float = 30.0  # Per-request timeout

    # Paging
    default_page_size: int = 100  # Model service page size when none is requested
    table_page_size: int = 10  # Data table page size
    table_default_order_by: str = "Name asc"

    # Logging
    log_level: str = "INFO"

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert CORS origins string to list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()
