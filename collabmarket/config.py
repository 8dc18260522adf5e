"""Application configuration using pydantic-settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./collabmarket.db"

    # Application
    app_name: str = "Collab Market API"
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    frontend_cors_origin: str = "http://localhost:3000"

    # Identity: header set by the upstream auth proxy
    viewer_header: str = "X-User-Id"

    # Job postings
    slug_suffix_length: int = Field(6, ge=6, le=16)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def is_sqlite(self) -> bool:
        """True when the configured database is SQLite (local dev and tests)."""
        return self.database_url.startswith("sqlite")


# Global settings instance
settings = Settings()
